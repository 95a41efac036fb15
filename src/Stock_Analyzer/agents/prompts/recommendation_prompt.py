"""Recommendation prompt builder.

Constructs the chat message list for the stock-analyst role.  The system
message fixes the persona; the user message lists the snapshot as flat
labelled lines and spells out the JSON shape expected back.
"""

from pydantic import BaseModel, ConfigDict

from Stock_Analyzer.models.market_data import MarketSnapshot, round_cents

PROMPT_VERSION: str = "v1.0"


class PromptMessage(BaseModel):
    """Single message in a chat messages list.

    Frozen because messages are immutable once built.
    """

    model_config = ConfigDict(frozen=True)

    role: str
    content: str


RECOMMENDATION_SYSTEM_PROMPT: str = (
    f"# VERSION: {PROMPT_VERSION}\n\n"
    "You are a professional stock analyst providing investment recommendations "
    "based on market data. Always respond with valid JSON format."
)

_RESPONSE_INSTRUCTIONS: str = """\
Please provide:
1. A recommendation (BUY, SELL, or HOLD)
2. Confidence level (60-100%)
3. Brief reasoning (2-3 sentences)
4. Risk level (LOW, MEDIUM, HIGH)
5. Price target (optional)

Format your response as JSON with the following structure:
{
  "recommendation": "BUY|SELL|HOLD",
  "confidence": number,
  "reasoning": "string",
  "riskLevel": "LOW|MEDIUM|HIGH",
  "priceTarget": number (optional)
}"""


def _signed(value: str) -> str:
    return value if value.startswith("-") else f"+{value}"


def build_recommendation_prompt(snapshot: MarketSnapshot) -> str:
    """Render *snapshot* into the user prompt text.

    Optional session fields are listed only when the vendor supplied them.
    """
    change = _signed(str(round_cents(snapshot.change)))
    change_percent = _signed(str(round_cents(snapshot.change_percent)))

    lines = [
        "Analyze the following stock data and provide a recommendation:",
        "",
        f"Stock: {snapshot.ticker}",
        f"Current Price: ${round_cents(snapshot.price)}",
        f"Change: {change} ({change_percent}%)",
        f"Volume: {snapshot.volume:,}",
    ]
    optional_fields = (
        ("Open", snapshot.open),
        ("High", snapshot.high),
        ("Low", snapshot.low),
        ("Previous Close", snapshot.previous_close),
    )
    lines.extend(
        f"{label}: ${round_cents(value)}" for label, value in optional_fields if value is not None
    )
    lines.extend(["", _RESPONSE_INSTRUCTIONS])
    return "\n".join(lines)


def build_recommendation_messages(snapshot: MarketSnapshot) -> list[PromptMessage]:
    """Build the two-element message list: system prompt + user prompt."""
    return [
        PromptMessage(role="system", content=RECOMMENDATION_SYSTEM_PROMPT),
        PromptMessage(role="user", content=build_recommendation_prompt(snapshot)),
    ]
