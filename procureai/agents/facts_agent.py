# procureai/agents/facts_agent.py

import logging
import math
import re
from typing import Optional

from openai import OpenAI, OpenAIError
from pydantic import ValidationError

from procureai.errors import ExtractionError
from procureai.llm import complete_json
from procureai.schemas import ProposalFacts
from procureai.utils import load_json_reply

logger = logging.getLogger(__name__)

ABSENT_MARKERS = {"", "unknown", "n/a", "na", "null", "none", "not specified", "not provided", "-"}
_VALUE = re.compile(
    r"^(?P<currency>[$€£₹]|usd|eur|gbp|inr)?\s*"
    r"(?P<number>-?(?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d+)?)\s*"
    r"(?P<unit>[a-z$€£₹]+)?$"
)

# the only suffix each field may carry; anything else (months, weeks, k, million) is rejected
FIELD_UNITS = {
    "totalPrice":    {"usd", "eur", "gbp", "inr", "$", "€", "£", "₹"},
    "deliveryDays":  {"day", "days"},
    "warrantyYears": {"year", "years", "yr", "yrs"},
}

SYSTEM_PROMPT = """You extract hard facts from a vendor proposal.

Return JSON only, exactly this object:
{
  "totalPrice": number | null,
  "deliveryDays": number | null,
  "warrantyYears": number | null
}

Rules:
1. totalPrice is the total amount quoted for the whole offer, as a plain number
   without currency symbols or separators.
2. deliveryDays is the delivery time converted to days (1 week = 7 days).
3. warrantyYears is the warranty period converted to years (12 months = 1 year).
4. If the proposal does not state a value, use null. Never guess."""


def coerce_fact(value, field: str) -> Optional[float]:
    """Turn one reported fact into a float, or None when the model reports it as absent."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"{field}: expected a number, got a boolean.")
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip().lower()
        if text in ABSENT_MARKERS:
            return None
        match = _VALUE.match(text)
        if not match:
            raise ValueError(f"{field}: could not read a number from {value!r}.")
        if match.group("currency") and field != "totalPrice":
            raise ValueError(f"{field}: unexpected currency in {value!r}.")
        unit = match.group("unit")
        if unit and unit not in FIELD_UNITS.get(field, set()):
            raise ValueError(f"{field}: unsupported unit {unit!r} in {value!r}.")
        number = float(match.group("number").replace(",", ""))
    else:
        raise ValueError(f"{field}: expected a number, got {type(value).__name__}.")

    if math.isnan(number) or math.isinf(number):
        raise ValueError(f"{field}: {value!r} is not a finite number.")
    return number


class FactsAgent:
    def __init__(self, client: OpenAI, model: str):
        self.client = client
        self.model  = model

    def extract_facts(self, proposal_text: str, proposal_id: Optional[str] = None) -> ProposalFacts:
        logger.debug("Extracting facts for proposal %s", proposal_id)
        try:
            content = complete_json(
                self.client,
                self.model,
                SYSTEM_PROMPT,
                f"Vendor proposal:\n\n{proposal_text}",
            )
        except (OpenAIError, ValueError) as e:
            raise ExtractionError(f"Fact extraction call failed: {e}", proposal_id) from e

        try:
            data  = load_json_reply(content)
            facts = ProposalFacts(
                total_price    = coerce_fact(data.get("totalPrice"), "totalPrice"),
                delivery_days  = coerce_fact(data.get("deliveryDays"), "deliveryDays"),
                warranty_years = coerce_fact(data.get("warrantyYears"), "warrantyYears"),
            )
        except (ValueError, ValidationError) as e:
            raise ExtractionError(f"Unusable fact extraction reply: {e}", proposal_id) from e

        logger.debug("Facts for proposal %s: %s", proposal_id, facts.model_dump())
        return facts
