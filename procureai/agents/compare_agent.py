# procureai/agents/compare_agent.py

import json
import logging
from typing import Sequence

from openai import OpenAI, OpenAIError
from pydantic import ValidationError

from procureai.errors import ComparisonError
from procureai.llm import complete_json
from procureai.schemas import CompareVerdict, Proposal, RfpRequirements
from procureai.utils import load_json_reply

logger = logging.getLogger(__name__)


class CompareAgent:
    """Asks the model for a single pick among several proposals. No local post-processing."""

    def __init__(self, client: OpenAI, model: str):
        self.client = client
        self.model = model

    def compare(self, proposals: Sequence[Proposal], rfp: RfpRequirements) -> CompareVerdict:
        if len(proposals) < 2:
            raise ValueError("At least 2 proposals are required for a comparison.")

        system = """You are an expert procurement analyst comparing vendor proposals.

Provide a final verdict on which vendor should be selected and why.

Return JSON only:
{
  "verdict": "the recommended vendor or final decision",
  "justification": "brief explanation of the decision"
}"""

        user = json.dumps({
            "rfp_requirements": rfp.model_dump(by_alias=True),
            "proposals": [
                {"id": p.id, "vendor_name": p.vendor_name, "proposal_text": p.raw_text}
                for p in proposals
            ],
        })

        try:
            content = complete_json(self.client, self.model, system, user)
        except (OpenAIError, ValueError) as e:
            raise ComparisonError(f"Comparison call failed: {e}") from e

        try:
            verdict = CompareVerdict.model_validate(load_json_reply(content))
        except (ValueError, ValidationError) as e:
            raise ComparisonError(f"Could not parse comparison verdict: {e}") from e

        logger.info("Compared %d proposals: %s", len(proposals), verdict.verdict)
        return verdict
