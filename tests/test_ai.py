"""
Tests for the AI chat: data analysis, rule-based replies and the model path
(with the Gemini model mocked).
"""

from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock

from bookkeeper.schemas.ai import AppData
from bookkeeper.services.ai_service import ChatAgent, analyze_app_data, rule_based_reply


def sample_data() -> AppData:
    return AppData.model_validate({
        "expenses": [
            {"amount": "600", "category": "Rent", "date": "2024-01-03"},
            {"amount": "200", "category": "Food", "date": "2024-01-15"},
            {"amount": "200", "category": "Food", "date": "2024-02-10"},
        ],
        "sales": [
            {"amount": "1500", "date": "2024-01-20"},
            {"amount": "500", "date": "2024-02-20"},
        ],
        "categories": [{"name": "Rent"}, {"name": "Food"}],
    })


class TestAnalyzeAppData:

    def test_totals_and_rollups(self):
        insights = analyze_app_data(sample_data())

        assert insights["total_expenses"] == Decimal("1000")
        assert insights["total_sales"] == Decimal("2000")
        assert insights["expense_categories"] == {"Rent": Decimal("600"), "Food": Decimal("400")}
        assert insights["top_expense_categories"][0]["category"] == "Rent"
        assert insights["monthly_expenses"] == {"2024-01": Decimal("800"), "2024-02": Decimal("200")}
        assert insights["average_sale"] == Decimal("1000")
        assert insights["categories"] == ["Rent", "Food"]

    def test_empty_data(self):
        insights = analyze_app_data(None)
        assert insights["total_expenses"] == Decimal("0")
        assert insights["average_expense"] == Decimal("0")
        assert insights["top_expense_categories"] == []


class TestRuleBasedReply:

    def test_expense_summary(self):
        reply = rule_based_reply("Show me my expense summary", analyze_app_data(sample_data()))
        assert "Total Expenses: ₹1,000.00" in reply
        assert "Top Spending Category: Rent" in reply

    def test_trends(self):
        reply = rule_based_reply("How is the trend?", analyze_app_data(sample_data()))
        assert "Expenses decreased by 75.0%" in reply

    def test_overview_margin(self):
        reply = rule_based_reply("Give me an analysis", analyze_app_data(sample_data()))
        assert "Net Income: ₹1,000.00" in reply
        assert "Profit Margin: 50.0%" in reply

    def test_fallback(self):
        reply = rule_based_reply("hello there", analyze_app_data(None))
        assert 'asking about "hello there"' in reply


class TestChatAgent:

    def test_without_key_uses_rules(self):
        agent = ChatAgent()
        assert agent.uses_model is False
        assert "Total Sales" in agent.reply("sales summary", sample_data())

    def test_model_reply_is_returned(self):
        agent = ChatAgent()
        agent._model = MagicMock()
        agent._model.generate_content.return_value = MagicMock(text="  Rent is your biggest cost.  ")

        assert agent.reply("What costs most?", sample_data(), context="dashboard") == "Rent is your biggest cost."
        prompt = agent._model.generate_content.call_args[0][0]
        assert "Top expense categories: Rent (₹600.00)" in prompt
        assert "Screen context: dashboard" in prompt

    def test_empty_model_reply_falls_back(self):
        agent = ChatAgent()
        agent._model = MagicMock()
        agent._model.generate_content.return_value = MagicMock(text="")

        assert "Here's your expense summary" in agent.reply("expense summary", sample_data())


class TestChatRoute:

    def test_chat(self, client, auth_headers):
        resp = client.post(
            "/api/v1/ai/chat",
            json={"message": "What are my top spending categories?", "app_data": {
                "expenses": [{"amount": "50", "category": "Food", "date": str(date(2024, 1, 1))}],
            }},
            headers=auth_headers,
        )
        assert resp.status_code == 200
        assert "Food" in resp.json()["response"]

    def test_blank_message(self, client, auth_headers):
        resp = client.post("/api/v1/ai/chat", json={"message": "   "}, headers=auth_headers)
        assert resp.status_code == 400

    def test_model_failure_is_server_error(self, client, auth_headers):
        from bookkeeper.api.v1.ai import get_chat_agent
        from bookkeeper.main import app

        failing = ChatAgent()
        failing._model = MagicMock()
        failing._model.generate_content.side_effect = RuntimeError("quota exceeded")
        app.dependency_overrides[get_chat_agent] = lambda: failing

        resp = client.post("/api/v1/ai/chat", json={"message": "hi"}, headers=auth_headers)

        assert resp.status_code == 500
        assert resp.json()["detail"] == "Failed to process AI request"
