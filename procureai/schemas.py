# procureai/schemas.py

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Literal


Recommendation = Literal["Accept", "Consider", "Reject"]


class RfpItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    quantity: Optional[float] = None
    specifications: Optional[str] = None


class RfpRequirements(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str
    items: List[RfpItem] = Field(default_factory=list)
    budget: Optional[float] = None
    delivery_timeline: Optional[str] = Field(default=None, alias="deliveryTimeline")
    payment_terms: Optional[str] = Field(default=None, alias="paymentTerms")
    warranty: Optional[str] = None
    other_requirements: Optional[str] = Field(default=None, alias="otherRequirements")


class Proposal(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    vendor_name: str = ""
    raw_text: str


class ProposalFacts(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_price: Optional[float] = Field(default=None, ge=0.0)
    delivery_days: Optional[float] = Field(default=None, ge=0.0)
    warranty_years: Optional[float] = Field(default=None, ge=0.0)


class EnrichedProposal(BaseModel):
    """A proposal paired with the facts extracted from it (stage 1 output)."""
    model_config = ConfigDict(frozen=True)

    proposal: Proposal
    facts: ProposalFacts


class CohortBenchmark(BaseModel):
    model_config = ConfigDict(frozen=True)

    lowest_price: Optional[float] = None
    fastest_delivery: Optional[float] = None
    longest_warranty: Optional[float] = None


class EvaluationBreakdown(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    requirement_match: float = Field(ge=0.0, le=40.0, alias="requirementMatch")
    clarity: float = Field(ge=0.0, le=20.0)
    feasibility: float = Field(ge=0.0, le=20.0)
    value_for_money: float = Field(ge=0.0, le=20.0, alias="valueForMoney")

    @property
    def total(self) -> float:
        return self.requirement_match + self.clarity + self.feasibility + self.value_for_money


class SingleEvaluation(BaseModel):
    """Independent qualitative evaluation of one proposal (stage 3 output)."""
    model_config = ConfigDict(frozen=True)

    breakdown: EvaluationBreakdown
    score: float = Field(ge=0.0, le=100.0)    # always equal to breakdown.total
    summary: str
    recommendation: Recommendation


class CompetitiveAdjustment(BaseModel):
    model_config = ConfigDict(frozen=True)

    final_score: int = Field(ge=0, le=100)
    reasons: List[str] = Field(default_factory=list)


class EvaluationResult(BaseModel):
    proposal_id: str
    vendor_name: str = ""
    breakdown: EvaluationBreakdown
    score: int = Field(ge=0, le=100)
    summary: str
    recommendation: Recommendation


class CompareVerdict(BaseModel):
    verdict: str
    justification: str
