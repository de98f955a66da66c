# procureai/pipeline.py

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from enum import Enum
from typing import Callable, List, Optional, Sequence, TypeVar

from procureai.agents.facts_agent import FactsAgent
from procureai.agents.score_agent import ScoreAgent
from procureai.config import Settings
from procureai.errors import EvaluationCancelled
from procureai.llm import build_client
from procureai.schemas import (
    CohortBenchmark,
    EnrichedProposal,
    EvaluationResult,
    Proposal,
    RfpRequirements,
    SingleEvaluation,
)
from procureai.scoring import apply_competitive_adjustment, compose_summary, compute_benchmark

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class Stage(str, Enum):
    EXTRACT   = "extract"
    BENCHMARK = "benchmark"
    SCORE     = "score"
    ADJUST    = "adjust"


class RunStatus(str, Enum):
    COMPLETED = "completed"
    FAILED    = "failed"


class _RunSignal:
    """Cancellation for one run: the caller's event (read-only) plus an abort flag private to the run."""

    def __init__(self, external: Optional[threading.Event]):
        self.external = external
        self.aborted  = threading.Event()

    def abort(self) -> None:
        self.aborted.set()

    def check(self, stage: Stage) -> None:
        if self.aborted.is_set() or (self.external is not None and self.external.is_set()):
            raise EvaluationCancelled(f"Evaluation cancelled during {stage.value} stage.")


class EvaluationOrchestrator:
    """Evaluates every proposal of one RFP as a cohort; any failure discards the whole run."""

    def __init__(self, facts_agent: FactsAgent, score_agent: ScoreAgent, max_workers: int = 4):
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1.")
        self.facts_agent = facts_agent
        self.score_agent = score_agent
        self.max_workers = max_workers

    @classmethod
    def from_settings(cls, settings: Settings) -> "EvaluationOrchestrator":
        client = build_client(settings)
        return cls(
            facts_agent = FactsAgent(client, settings.openai_model),
            score_agent = ScoreAgent(client, settings.openai_model),
            max_workers = settings.max_workers,
        )

    def evaluate(
        self,
        rfp: RfpRequirements,
        proposals: Sequence[Proposal],
        cancel_event: Optional[threading.Event] = None,
    ) -> List[EvaluationResult]:
        """cancel_event is only read; a failed run aborts its own work without setting it."""
        if not proposals:
            raise ValueError("No proposals found for this RFP.")

        signal = _RunSignal(cancel_event)
        stage = Stage.EXTRACT
        logger.info("Evaluating %d proposal(s) for RFP %r", len(proposals), rfp.title)
        try:
            enriched = self._extract(proposals, signal)

            stage = Stage.BENCHMARK
            signal.check(stage)
            benchmark = compute_benchmark([e.facts for e in enriched])
            logger.info("Cohort benchmark: %s", benchmark.model_dump())

            stage = Stage.SCORE
            evaluations = self._score(rfp, proposals, signal)

            stage = Stage.ADJUST
            signal.check(stage)
            results = [
                self._finalize(item, evaluation, benchmark)
                for item, evaluation in zip(enriched, evaluations)
            ]
        except Exception:
            signal.abort()
            logger.error("Evaluation of RFP %r %s at stage %s", rfp.title, RunStatus.FAILED.value, stage.value)
            raise

        logger.info("Evaluation of RFP %r %s", rfp.title, RunStatus.COMPLETED.value)
        return results

    def _extract(self, proposals: Sequence[Proposal], signal: _RunSignal) -> List[EnrichedProposal]:
        def run(proposal: Proposal) -> EnrichedProposal:
            signal.check(Stage.EXTRACT)
            facts = self.facts_agent.extract_facts(proposal.raw_text, proposal.id)
            return EnrichedProposal(proposal=proposal, facts=facts)

        return self._fan_out(run, proposals, signal)

    def _score(
        self,
        rfp: RfpRequirements,
        proposals: Sequence[Proposal],
        signal: _RunSignal,
    ) -> List[SingleEvaluation]:
        def run(proposal: Proposal) -> SingleEvaluation:
            signal.check(Stage.SCORE)
            return self.score_agent.score_proposal(proposal.raw_text, rfp, proposal.id)

        return self._fan_out(run, proposals, signal)

    def _fan_out(self, fn: Callable[[T], R], items: Sequence[T], signal: _RunSignal) -> List[R]:
        """Run fn over items on a bounded pool; results keep the input order."""
        results: List[Optional[R]] = [None] * len(items)
        workers = min(self.max_workers, len(items))
        with ThreadPoolExecutor(max_workers=workers) as ex:
            futures = {ex.submit(fn, item): i for i, item in enumerate(items)}
            try:
                for f in as_completed(futures):
                    results[futures[f]] = f.result()
            except BaseException:
                signal.abort()
                for f in futures:
                    f.cancel()
                raise
        return results

    @staticmethod
    def _finalize(
        item: EnrichedProposal,
        evaluation: SingleEvaluation,
        benchmark: CohortBenchmark,
    ) -> EvaluationResult:
        adjustment = apply_competitive_adjustment(evaluation.score, item.facts, benchmark)
        if adjustment.reasons:
            logger.debug("Proposal %s deductions: %s", item.proposal.id, "; ".join(adjustment.reasons))
        return EvaluationResult(
            proposal_id    = item.proposal.id,
            vendor_name    = item.proposal.vendor_name,
            breakdown      = evaluation.breakdown,
            score          = adjustment.final_score,
            summary        = compose_summary(evaluation.summary, adjustment.reasons),
            recommendation = evaluation.recommendation,
        )
