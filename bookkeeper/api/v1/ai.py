from fastapi import APIRouter, Depends, HTTPException, status
from bookkeeper.core.dependencies import get_current_active_user
from bookkeeper.models.user import User
from bookkeeper.schemas.ai import ChatRequest, ChatResponse
from bookkeeper.services.ai_service import ChatAgent
from bookkeeper.logger_config import logger

router = APIRouter()

_agent = None


def get_chat_agent() -> ChatAgent:
    global _agent
    if _agent is None:
        _agent = ChatAgent()
    return _agent


@router.post("/chat", response_model=ChatResponse)
def chat(
    chat_data: ChatRequest,
    current_user: User = Depends(get_current_active_user),
    agent: ChatAgent = Depends(get_chat_agent),
):
    """
    Answer a question about the supplied expenses, sales and categories.
    """
    if not chat_data.message.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Message is required")
    try:
        reply = agent.reply(chat_data.message, chat_data.app_data, chat_data.context)
        return ChatResponse(response=reply)
    except Exception as e:
        logger.exception(f"AI chat failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to process AI request"
        )
