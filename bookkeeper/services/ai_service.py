"""
AI chat over client-supplied financial data.

analyze_app_data is pure computation over the arrays the client sends
(expenses, sales, categories). When a Gemini API key is configured the
insights are handed to the model as context; otherwise a rule-based reply is
built from the same insights.
"""

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Optional

import google.generativeai as genai

from bookkeeper.core.config import settings
from bookkeeper.logger_config import logger
from bookkeeper.schemas.ai import AppData

CURRENCY = "₹"
ZERO = Decimal("0")


def _money(value) -> str:
    return f"{CURRENCY}{Decimal(value):,.2f}"


def _month_label(month: str) -> str:
    return date.fromisoformat(f"{month}-01").strftime("%B %Y")


def _percent(part, whole) -> Decimal:
    if not whole:
        return ZERO
    return (Decimal(part) / Decimal(whole) * 100).quantize(Decimal("0.1"))


def analyze_app_data(app_data: Optional[AppData]) -> dict:
    """Totals, averages, category and month rollups of the supplied data."""
    if app_data is None:
        app_data = AppData()

    expenses = app_data.expenses
    sales = app_data.sales

    total_expenses = sum((e.amount for e in expenses), ZERO)
    total_sales = sum((s.amount for s in sales), ZERO)

    expense_categories = defaultdict(lambda: ZERO)
    for e in expenses:
        if e.category:
            expense_categories[e.category] += e.amount

    top_expense_categories = [
        {"category": name, "amount": amount}
        for name, amount in sorted(expense_categories.items(), key=lambda kv: kv[1], reverse=True)[:5]
    ]

    monthly_expenses = defaultdict(lambda: ZERO)
    for e in expenses:
        if e.date:
            monthly_expenses[e.date.strftime("%Y-%m")] += e.amount

    monthly_sales = defaultdict(lambda: ZERO)
    for s in sales:
        if s.date:
            monthly_sales[s.date.strftime("%Y-%m")] += s.amount

    return {
        "total_expenses": total_expenses,
        "total_sales": total_sales,
        "expense_categories": dict(expense_categories),
        "top_expense_categories": top_expense_categories,
        "monthly_expenses": dict(monthly_expenses),
        "monthly_sales": dict(monthly_sales),
        "average_expense": total_expenses / len(expenses) if expenses else ZERO,
        "average_sale": total_sales / len(sales) if sales else ZERO,
        "expense_count": len(expenses),
        "sale_count": len(sales),
        "categories": [c.name for c in app_data.categories],
    }


# ==================== RULE-BASED REPLIES ====================

def _recent_months(monthly: dict, title: str, empty: str) -> str:
    months = sorted(monthly)[-3:]
    if not months:
        return empty
    lines = [title]
    lines += [f"- {_month_label(m)}: {_money(monthly[m])}" for m in months]
    return "\n".join(lines)


def expense_insights(insights: dict, message: str) -> str:
    total = insights["total_expenses"]
    top = insights["top_expense_categories"]

    if "summary" in message or "overview" in message:
        head = top[0] if top else {"category": "N/A", "amount": ZERO}
        return (
            "Here's your expense summary:\n"
            f"- Total Expenses: {_money(total)}\n"
            f"- Number of Expenses: {insights['expense_count']}\n"
            f"- Average Expense: {_money(insights['average_expense'])}\n"
            f"- Top Spending Category: {head['category']} ({_money(head['amount'])})"
        )

    if "category" in message or "categories" in message:
        if not top:
            return "You haven't recorded any expenses yet. Start tracking your expenses to see category breakdowns!"
        lines = ["Here are your top spending categories:"]
        for index, cat in enumerate(top, start=1):
            lines.append(f"{index}. {cat['category']}: {_money(cat['amount'])} ({_percent(cat['amount'], total)}%)")
        return "\n".join(lines)

    if "month" in message or "trend" in message:
        return _recent_months(
            insights["monthly_expenses"],
            "Here are your recent monthly expenses:",
            "You haven't recorded any expenses yet. Start tracking to see monthly trends!",
        )

    return (
        f"Your total expenses are {_money(total)} across {insights['expense_count']} transactions. "
        f"The average expense is {_money(insights['average_expense'])}."
    )


def sales_insights(insights: dict, message: str) -> str:
    total = insights["total_sales"]

    if "summary" in message or "overview" in message:
        return (
            "Here's your sales summary:\n"
            f"- Total Sales: {_money(total)}\n"
            f"- Number of Sales: {insights['sale_count']}\n"
            f"- Average Sale: {_money(insights['average_sale'])}"
        )

    if "trend" in message or "month" in message:
        return _recent_months(
            insights["monthly_sales"],
            "Here are your recent monthly sales:",
            "You haven't recorded any sales yet. Start tracking to see sales trends!",
        )

    return (
        f"Your total sales are {_money(total)} across {insights['sale_count']} transactions. "
        f"The average sale is {_money(insights['average_sale'])}."
    )


def category_insights(insights: dict, message: str) -> str:
    categories = insights["categories"]
    if not categories:
        return "You haven't set up any categories yet. Create categories to better organize your expenses!"

    lines = [f"You have {len(categories)} expense categories:"]
    for name in categories:
        lines.append(f"- {name}: {_money(insights['expense_categories'].get(name, ZERO))}")
    return "\n".join(lines)


def _month_change(monthly: dict, label: str) -> Optional[str]:
    months = sorted(monthly)
    if len(months) < 2:
        return None
    previous, latest = months[-2], months[-1]
    change = monthly[latest] - monthly[previous]
    direction = "increased" if change > 0 else "decreased"
    return f"- {label} {direction} by {abs(_percent(change, monthly[previous]))}% from {previous} to {latest}"


def trend_insights(insights: dict, message: str) -> str:
    expense_line = _month_change(insights["monthly_expenses"], "Expenses")
    sales_line = _month_change(insights["monthly_sales"], "Sales")

    if expense_line is None and sales_line is None:
        return (
            "You need more data to analyze trends. Continue tracking your expenses and sales "
            "for at least 2 months to see meaningful trends."
        )

    parts = ["Here are your recent trends:"]
    if expense_line:
        parts += ["", "Expense Trends:", expense_line]
    if sales_line:
        parts += ["", "Sales Trends:", sales_line]
    return "\n".join(parts)


def optimization_suggestions(insights: dict, message: str) -> str:
    top = insights["top_expense_categories"]
    if not top:
        return "Start tracking your expenses to get personalized optimization suggestions!"

    head = top[0]
    share = _percent(head["amount"], insights["total_expenses"])
    lines = ["Here are some optimization suggestions:", ""]
    if share > 50:
        lines += [
            f"Your top category ({head['category']}) represents {share}% of total expenses. Consider:",
            "- Reviewing if all expenses in this category are necessary",
            "- Looking for ways to reduce costs in this area",
            "- Setting a budget limit for this category",
            "",
        ]
    lines += [
        "General tips:",
        "- Track all expenses, even small ones",
        "- Set monthly budgets for each category",
        "- Review expenses weekly to identify patterns",
        "- Look for recurring expenses you can reduce or eliminate",
    ]
    return "\n".join(lines)


def general_insights(insights: dict, message: str) -> str:
    total_sales = insights["total_sales"]
    total_expenses = insights["total_expenses"]
    net_income = total_sales - total_expenses
    margin = _percent(net_income, total_sales)

    lines = [
        "Here's your financial overview:",
        "",
        f"Total Revenue: {_money(total_sales)}",
        f"Total Expenses: {_money(total_expenses)}",
        f"Net Income: {_money(net_income)}",
        f"Profit Margin: {margin}%",
    ]
    top = insights["top_expense_categories"][:3]
    if top:
        lines += ["", "Top spending areas:"]
        lines += [f"{i}. {cat['category']}: {_money(cat['amount'])}" for i, cat in enumerate(top, start=1)]

    lines.append("")
    if net_income < 0:
        lines.append("Your expenses exceed your revenue. Consider reducing expenses or increasing sales.")
    elif margin < 10:
        lines.append("Your profit margin is low. Look for ways to increase revenue or reduce costs.")
    else:
        lines.append("Great job! You're maintaining a healthy profit margin.")
    return "\n".join(lines)


def general_response(insights: dict, message: str) -> str:
    return (
        f'I understand you\'re asking about "{message}". I can help you with:\n'
        "- Expense analysis and summaries\n"
        "- Sales trends and insights\n"
        "- Category breakdowns\n"
        "- Financial optimization suggestions\n"
        "- Monthly comparisons and trends\n\n"
        'Try asking something like "Show me my expense summary" or "What are my top spending categories?"'
    )


def rule_based_reply(message: str, insights: dict) -> str:
    """Pick a reply generator by keywords in the message."""
    lower = message.lower()
    if "expense" in lower or "spending" in lower:
        return expense_insights(insights, lower)
    if "sale" in lower or "revenue" in lower or "income" in lower:
        return sales_insights(insights, lower)
    if "category" in lower or "categories" in lower:
        return category_insights(insights, lower)
    if "trend" in lower or "compare" in lower or "month" in lower:
        return trend_insights(insights, lower)
    if "insight" in lower or "analysis" in lower or "summary" in lower:
        return general_insights(insights, lower)
    if "reduce" in lower or "save" in lower or "optimize" in lower:
        return optimization_suggestions(insights, lower)
    return general_response(insights, message)


# ==================== GEMINI ====================

class ChatAgent:
    """
    Answers free-text questions about the user's books.

    Uses Gemini when GEMINI_API_KEY is set, the rule-based replies otherwise.
    Model errors propagate to the caller.
    """

    def __init__(self):
        self._model = None
        if settings.GEMINI_API_KEY:
            self._configure_genai()

    def _configure_genai(self):
        genai.configure(api_key=settings.GEMINI_API_KEY)
        self._model = genai.GenerativeModel(
            model_name=settings.GEMINI_MODEL_NAME,
            generation_config={
                "temperature": settings.GEMINI_TEMPERATURE,
                "max_output_tokens": settings.GEMINI_MAX_OUTPUT_TOKENS,
            },
        )

    @property
    def uses_model(self) -> bool:
        return self._model is not None

    def _build_prompt(self, message: str, insights: dict, context: Optional[str]) -> str:
        top = ", ".join(
            f"{c['category']} ({_money(c['amount'])})" for c in insights["top_expense_categories"]
        ) or "none"
        months = ", ".join(
            f"{m}: {_money(v)}" for m, v in sorted(insights["monthly_expenses"].items())[-3:]
        ) or "none"
        return f"""You are a bookkeeping assistant for a small business owner.

Answer the question using only the figures below. Amounts are in Indian rupees.

Total expenses: {_money(insights['total_expenses'])} over {insights['expense_count']} entries
Total sales: {_money(insights['total_sales'])} over {insights['sale_count']} entries
Average expense: {_money(insights['average_expense'])}
Average sale: {_money(insights['average_sale'])}
Top expense categories: {top}
Recent monthly expenses: {months}
Categories: {', '.join(insights['categories']) or 'none'}
Screen context: {context or 'none'}

Question: {message}

Keep the answer short and concrete."""

    def reply(self, message: str, app_data: Optional[AppData] = None, context: Optional[str] = None) -> str:
        insights = analyze_app_data(app_data)
        if not self.uses_model:
            return rule_based_reply(message, insights)

        prompt = self._build_prompt(message, insights, context)
        response = self._model.generate_content(prompt)
        text = (response.text or "").strip()
        logger.debug(f"Gemini replied with {len(text)} characters")
        return text or rule_based_reply(message, insights)
