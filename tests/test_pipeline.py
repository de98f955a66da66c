"""
Cohort evaluation: stage ordering, result ordering, all-or-nothing failure and cancellation.
"""

import threading
import time

import openai
import pytest

from conftest import cohort_client, facts_reply, score_reply
from procureai.agents.facts_agent import FactsAgent
from procureai.agents.score_agent import ScoreAgent
from procureai.config import Settings
from procureai.errors import EvaluationCancelled, ExtractionError, ScoringError
from procureai.pipeline import EvaluationOrchestrator
from procureai.schemas import Proposal


def build(client, max_workers=4):
    return EvaluationOrchestrator(FactsAgent(client, "m"), ScoreAgent(client, "m"), max_workers=max_workers)


@pytest.fixture
def replies(sample_cohort):
    v1, v2, v3 = (p.raw_text for p in sample_cohort)
    facts = {
        v1: facts_reply(100, 5, 2),
        v2: facts_reply(120, 8, 1),
        v3: facts_reply(90, 10, 3),
    }
    scores = {
        v1: score_reply(36, 18, 18, 18, summary="V1 meets every item.", recommendation="Accept"),
        v2: score_reply(36, 18, 18, 18, summary="V2 meets every item.", recommendation="Consider"),
        v3: score_reply(40, 20, 20, 20, summary="V3 is flawless.", recommendation="Accept"),
    }
    return facts, scores


class TestEvaluationOrchestrator:

    def test_end_to_end_cohort(self, sample_rfp, sample_cohort, replies):
        client = cohort_client(*replies)
        results = build(client).evaluate(sample_rfp, sample_cohort)

        assert [r.proposal_id for r in results] == ["p1", "p2", "p3"]
        v1, v2, v3 = results

        # V2: -8 price, -1 delivery, -7 warranty
        assert v2.score == 74
        assert v2.summary == (
            "V2 meets every item. Competitive considerations: "
            "Higher pricing than lowest bidder (−8); "
            "Slower delivery timeline (−1); "
            "Shorter warranty period (−7)."
        )
        assert v2.recommendation == "Consider"
        assert v2.vendor_name == "V2"

        # V1: ratio 0.11 -> -6, on-time, gap 1 -> -4
        assert v1.score == 80
        assert "Higher pricing than lowest bidder (−6)" in v1.summary
        assert "Shorter warranty period (−4)" in v1.summary

        # V3: cheapest and longest warranty, delay 5 -> -1, then under the cap
        assert v3.score == 99
        assert v3.summary.endswith("Competitive considerations: Slower delivery timeline (−1).")

    def test_single_perfect_proposal_capped(self, sample_rfp):
        proposal = Proposal(id="solo", raw_text="Only bid.")
        client = cohort_client(
            {"Only bid.": facts_reply(500, 7, 2)},
            {"Only bid.": score_reply(40, 20, 20, 20, summary="Perfect.")},
        )
        [result] = build(client).evaluate(sample_rfp, [proposal])
        assert result.score == 97
        assert result.summary == "Perfect. No competitive disadvantages were identified."

    def test_every_result_in_range(self, sample_rfp, sample_cohort, replies):
        results = build(cohort_client(*replies), max_workers=1).evaluate(sample_rfp, sample_cohort)
        assert all(isinstance(r.score, int) and 0 <= r.score <= 100 for r in results)

    def test_input_proposals_not_mutated(self, sample_rfp, sample_cohort, replies):
        before = [p.model_dump() for p in sample_cohort]
        build(cohort_client(*replies)).evaluate(sample_rfp, sample_cohort)
        assert [p.model_dump() for p in sample_cohort] == before

    def test_extraction_failure_fails_whole_run(self, sample_rfp, sample_cohort, replies):
        facts, scores = replies
        facts[sample_cohort[1].raw_text] = "totally not json"
        client = cohort_client(facts, scores)

        with pytest.raises(ExtractionError) as exc:
            build(client).evaluate(sample_rfp, sample_cohort)
        assert exc.value.proposal_id == "p2"
        # scoring never starts once extraction fails
        assert all(c["messages"][0]["content"].startswith("You extract hard facts") for c in client.calls)

    def test_scoring_failure_fails_whole_run(self, sample_rfp, sample_cohort, replies):
        facts, scores = replies
        scores[sample_cohort[2].raw_text] = openai.OpenAIError("provider down")
        with pytest.raises(ScoringError):
            build(cohort_client(facts, scores)).evaluate(sample_rfp, sample_cohort)

    def test_failed_run_leaves_caller_event_reusable(self, sample_rfp, sample_cohort, replies):
        facts, scores = replies
        event = threading.Event()
        broken = dict(facts)
        broken[sample_cohort[0].raw_text] = "nope"
        with pytest.raises(ExtractionError):
            build(cohort_client(broken, scores)).evaluate(sample_rfp, sample_cohort, cancel_event=event)
        assert not event.is_set()

        results = build(cohort_client(facts, scores)).evaluate(sample_rfp, sample_cohort, cancel_event=event)
        assert [r.score for r in results] == [80, 74, 99]

    def test_cancelled_before_start(self, sample_rfp, sample_cohort, replies):
        client = cohort_client(*replies)
        event = threading.Event()
        event.set()
        with pytest.raises(EvaluationCancelled):
            build(client).evaluate(sample_rfp, sample_cohort, cancel_event=event)
        assert client.calls == []

    def test_cancelled_mid_run(self, sample_rfp, sample_cohort, replies):
        facts, scores = replies
        event = threading.Event()
        client = cohort_client(facts, scores)
        original = client.completions.responder

        def respond(kwargs):
            reply = original(kwargs)
            if not kwargs["messages"][0]["content"].startswith("You extract hard facts"):
                event.set()
            return reply

        client.completions.responder = respond
        with pytest.raises(EvaluationCancelled):
            build(client, max_workers=1).evaluate(sample_rfp, sample_cohort, cancel_event=event)

    def test_empty_cohort(self, sample_rfp):
        with pytest.raises(ValueError, match="No proposals"):
            build(cohort_client({}, {})).evaluate(sample_rfp, [])

    def test_concurrency_is_bounded(self, sample_rfp):
        proposals = [Proposal(id=f"p{i}", raw_text=f"bid number {i}") for i in range(6)]
        facts = {p.raw_text: facts_reply(100 + i, 5, 1) for i, p in enumerate(proposals)}
        scores = {p.raw_text: score_reply(30, 15, 15, 15) for p in proposals}
        inner = cohort_client(facts, scores).completions.responder

        lock = threading.Lock()
        state = {"active": 0, "peak": 0}

        def respond(kwargs):
            with lock:
                state["active"] += 1
                state["peak"] = max(state["peak"], state["active"])
            time.sleep(0.02)
            with lock:
                state["active"] -= 1
            return inner(kwargs)

        client = cohort_client({}, {})
        client.completions.responder = respond
        results = build(client, max_workers=2).evaluate(sample_rfp, proposals)

        assert [r.proposal_id for r in results] == [p.id for p in proposals]
        assert state["peak"] <= 2

    def test_invalid_worker_count(self):
        client = cohort_client({}, {})
        with pytest.raises(ValueError):
            build(client, max_workers=0)

    def test_from_settings(self):
        orchestrator = EvaluationOrchestrator.from_settings(
            Settings(openai_api_key="sk-test", openai_model="gpt-x", max_workers=3, request_timeout=5)
        )
        assert orchestrator.max_workers == 3
        assert orchestrator.facts_agent.model == "gpt-x"
        assert orchestrator.facts_agent.client is orchestrator.score_agent.client
