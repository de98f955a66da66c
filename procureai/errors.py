# procureai/errors.py

from typing import Optional


class EvaluationError(Exception):
    """Base class for failures raised while evaluating a cohort."""


class ExtractionError(EvaluationError):
    def __init__(self, message: str, proposal_id: Optional[str] = None):
        super().__init__(message)
        self.proposal_id = proposal_id


class ScoringError(EvaluationError):
    def __init__(self, message: str, proposal_id: Optional[str] = None):
        super().__init__(message)
        self.proposal_id = proposal_id


class EvaluationCancelled(EvaluationError):
    pass


class RfpParseError(EvaluationError):
    pass


class ComparisonError(EvaluationError):
    pass
