import json
import logging
from typing import Optional

from openai import OpenAI, OpenAIError
from pydantic import ValidationError

from procureai.errors import ScoringError
from procureai.llm import complete_json
from procureai.schemas import EvaluationBreakdown, RfpRequirements, SingleEvaluation
from procureai.utils import load_json_reply

logger = logging.getLogger(__name__)

SCORE_TOLERANCE = 0.5


class ScoreAgent:
    """Scores one proposal against the RFP on its own, without sight of the rest of the cohort."""

    def __init__(self, client: OpenAI, model: str):
        self.client = client
        self.model  = model

    def score_proposal(
        self,
        proposal_text: str,
        rfp: RfpRequirements,
        proposal_id: Optional[str] = None,
    ) -> SingleEvaluation:
        system = """You are a strict procurement evaluator scoring ONE vendor proposal
against an RFP. Judge this proposal on its own merits only.

Start each criterion at its maximum and subtract for every problem found:

1. requirementMatch (0-40): subtract 5-15 for each required item, quantity
   or specification that is missing or does not match the RFP.
2. clarity (0-20): subtract 3-8 for vague pricing, timelines or commitments.
3. feasibility (0-20): subtract 3-10 for an unclear delivery plan, weak
   warranty or operational risk.
4. valueForMoney (0-20): subtract 5-15 for being over budget or poorly
   justified. If pricing is entirely missing, valueForMoney is exactly 0.

score MUST equal requirementMatch + clarity + feasibility + valueForMoney.

Recommendation:
- "Accept": clearly meets the requirements.
- "Consider": meets most requirements with notable trade-offs or risks.
- "Reject": fails key requirements.

Do not invent information the proposal does not contain.

Return JSON only:
{
  "breakdown": {
    "requirementMatch": 0,
    "clarity": 0,
    "feasibility": 0,
    "valueForMoney": 0
  },
  "score": 0,
  "summary": "Two or three sentences on strengths and gaps.",
  "recommendation": "Accept" | "Consider" | "Reject"
}"""

        logger.debug("Scoring proposal %s", proposal_id)
        try:
            content = complete_json(
                self.client,
                self.model,
                system,
                json.dumps({
                    "rfp_requirements": rfp.model_dump(by_alias=True),
                    "proposal_text":    proposal_text,
                }),
            )
        except (OpenAIError, ValueError) as e:
            raise ScoringError(f"Scoring call failed: {e}", proposal_id) from e

        try:
            data      = load_json_reply(content)
            breakdown = EvaluationBreakdown.model_validate(data.get("breakdown"))
            reported  = data.get("score")
            total     = breakdown.total
            if not isinstance(reported, (int, float)) or isinstance(reported, bool) \
                    or abs(reported - total) > SCORE_TOLERANCE:
                logger.warning(
                    "Proposal %s: reported score %r does not match breakdown sum %s; using the sum.",
                    proposal_id, reported, total,
                )
            recommendation = data.get("recommendation")
            if isinstance(recommendation, str):
                recommendation = recommendation.strip().capitalize()
            return SingleEvaluation(
                breakdown      = breakdown,
                score          = total,
                summary        = str(data.get("summary") or "").strip(),
                recommendation = recommendation,
            )
        except (ValueError, ValidationError) as e:
            raise ScoringError(f"Unusable scoring reply: {e}", proposal_id) from e
