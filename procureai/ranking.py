from typing import List, Optional, Sequence

from procureai.schemas import EvaluationResult


def rank_results(results: Sequence[Optional[EvaluationResult]]) -> List[Optional[EvaluationResult]]:
    """Highest score first; ties and unscored entries (None) keep their listing order, unscored last."""
    indexed = list(enumerate(results))
    indexed.sort(key=lambda pair: (pair[1] is None, -(pair[1].score if pair[1] else 0), pair[0]))
    return [r for _, r in indexed]
