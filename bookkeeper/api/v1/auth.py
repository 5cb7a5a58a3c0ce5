from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session
from datetime import timedelta
from bookkeeper.core.dependencies import get_db, get_current_active_user
from bookkeeper.core.security import create_access_token
from bookkeeper.core.config import settings
from bookkeeper.models.user import User
from bookkeeper.services.user_service import authenticate_user, register_first_user
from bookkeeper.schemas.auth import (
    LoginRequest,
    LoginResponse,
    Logout,
    RegisterRequest,
    RegisterResponse,
    Token,
    VerifyResponse,
)
from bookkeeper.logger_config import logger

router = APIRouter()


def _issue_token(user: User) -> str:
    access_token_expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return create_access_token(
        data={"sub": user.user_id, "mobile": user.mobile},
        expires_delta=access_token_expires
    )


def _user_payload(user: User) -> dict:
    return {
        "id": user.id,
        "user_id": user.user_id,
        "mobile": user.mobile,
        "name": user.name,
    }


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(
    register_data: RegisterRequest,
    db: Session = Depends(get_db)
):
    """
    Register the first user (only works if no users exist in the database).
    """
    try:
        user = register_first_user(
            db=db,
            mobile=register_data.mobile,
            password=register_data.password,
            name=register_data.name,
        )
        logger.info(f"First user {user.user_id} registered successfully")

        return RegisterResponse(
            id=user.id,
            user_id=user.user_id,
            mobile=user.mobile,
            name=user.name
        )
    except ValueError as e:
        if str(e) == "Registration is closed":
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Registration is only allowed when no users exist."
            )
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Error during registration: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred during registration"
        )


@router.post("/login", response_model=LoginResponse)
def login(
    login_data: LoginRequest,
    db: Session = Depends(get_db)
):
    """
    Login endpoint - Authenticate user by mobile and password and return JWT token.
    """
    try:
        logger.info(f"Login attempt for mobile: {login_data.mobile}")

        user = authenticate_user(db, login_data.mobile, login_data.password)
        if not user:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid credentials"
            )

        logger.info(f"User {user.user_id} logged in successfully")

        return LoginResponse(
            access_token=_issue_token(user),
            token_type="bearer",
            user=_user_payload(user)
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error during login: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred during login"
        )


@router.get("/logout", response_model=Logout)
def logout():
    """
    Tokens are stateless; the client drops its copy.
    """
    logger.info("User Logged out")
    return Logout(
        message="Logged out Successfully"
    )


@router.post("/verify", response_model=VerifyResponse)
def verify(current_user: User = Depends(get_current_active_user)):
    """Check that the bearer token is still valid."""
    return VerifyResponse(valid=True, user=_user_payload(current_user))


@router.post("/token", response_model=Token)
def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db)
):
    """
    OAuth2 compatible token endpoint (for Swagger UI authentication).
    The username field carries the mobile number.
    """
    user = authenticate_user(db, form_data.username, form_data.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return {"access_token": _issue_token(user), "token_type": "bearer"}
