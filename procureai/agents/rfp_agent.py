# procureai/agents/rfp_agent.py

import logging

from openai import OpenAI, OpenAIError
from pydantic import ValidationError

from procureai.errors import RfpParseError
from procureai.llm import complete_json
from procureai.schemas import RfpRequirements
from procureai.utils import load_json_reply

logger = logging.getLogger(__name__)


class RfpAgent:
    def __init__(self, client: OpenAI, model: str):
        self.client = client
        self.model = model

    def parse_rfp(self, prompt: str) -> RfpRequirements:
        if not prompt or not prompt.strip():
            raise ValueError("Prompt is required.")

        system = """You convert natural-language procurement requests into a structured RFP.

Rules:
1. Use exact quantities and numbers from the request.
2. Put technical details of each item in "specifications".
3. budget is a plain number without currency symbols, or null.
4. Do not invent details not in the request; use null when something is not stated.

Return JSON only:
{
  "title": "string",
  "items": [{"name": "string", "quantity": 0, "specifications": "string"}],
  "budget": 0,
  "deliveryTimeline": "string or null",
  "paymentTerms": "string or null",
  "warranty": "string or null",
  "otherRequirements": "string or null"
}"""

        try:
            content = complete_json(self.client, self.model, system, prompt)
        except (OpenAIError, ValueError) as e:
            raise RfpParseError(f"RFP parsing call failed: {e}") from e

        try:
            rfp = RfpRequirements.model_validate(load_json_reply(content))
        except (ValueError, ValidationError) as e:
            raise RfpParseError(f"Could not parse RFP from model reply: {e}") from e

        logger.info("Parsed RFP %r with %d item(s)", rfp.title, len(rfp.items))
        return rfp
