"""
Shared fixtures: a fake OpenAI client that replays canned replies, plus a sample RFP and cohort.
"""

import json
import threading
from types import SimpleNamespace

import pytest

from procureai.schemas import Proposal, RfpRequirements


class FakeCompletions:
    def __init__(self, responder):
        self.responder = responder
        self.calls = []
        self._lock = threading.Lock()

    def create(self, **kwargs):
        with self._lock:
            self.calls.append(kwargs)
        reply = self.responder(kwargs)
        if isinstance(reply, BaseException):
            raise reply
        if isinstance(reply, SimpleNamespace):
            return reply
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=reply))])


class FakeClient:
    """Stands in for openai.OpenAI; responder(kwargs) returns reply text, a raw response object, or an exception to raise."""

    def __init__(self, responder):
        self.completions = FakeCompletions(responder)
        self.chat = SimpleNamespace(completions=self.completions)

    @property
    def calls(self):
        return self.completions.calls


def fixed_reply(reply):
    return FakeClient(lambda kwargs: reply)


def facts_reply(price, delivery, warranty) -> str:
    return json.dumps({"totalPrice": price, "deliveryDays": delivery, "warrantyYears": warranty})


def score_reply(match, clarity, feasibility, value, summary="Solid offer.", recommendation="Consider", score=None) -> str:
    return json.dumps({
        "breakdown": {
            "requirementMatch": match,
            "clarity": clarity,
            "feasibility": feasibility,
            "valueForMoney": value,
        },
        "score": match + clarity + feasibility + value if score is None else score,
        "summary": summary,
        "recommendation": recommendation,
    })


def cohort_client(facts_by_text, scores_by_text):
    """Route fact-extraction and scoring calls to per-proposal replies keyed by raw text."""
    def respond(kwargs):
        system = kwargs["messages"][0]["content"]
        user = kwargs["messages"][1]["content"]
        if system.startswith("You extract hard facts"):
            for text, reply in facts_by_text.items():
                if user.endswith(text):
                    return reply
            raise AssertionError(f"unexpected extraction request: {user[:60]}")
        payload = json.loads(user)
        return scores_by_text[payload["proposal_text"]]
    return FakeClient(respond)


@pytest.fixture
def sample_rfp():
    return RfpRequirements.model_validate({
        "title": "Office laptops",
        "items": [
            {"name": "Laptop", "quantity": 20, "specifications": "16GB RAM, 512GB SSD"},
            {"name": "Monitor", "quantity": 15, "specifications": "27-inch 4K"},
        ],
        "budget": 50000,
        "deliveryTimeline": "30 days",
        "paymentTerms": "Net 30",
        "warranty": "At least 1 year",
        "otherRequirements": None,
    })


@pytest.fixture
def sample_cohort():
    return [
        Proposal(id="p1", vendor_name="V1", raw_text="V1 offers laptops for 100 in 5 days, 2 year warranty."),
        Proposal(id="p2", vendor_name="V2", raw_text="V2 offers laptops for 120 in 8 days, 1 year warranty."),
        Proposal(id="p3", vendor_name="V3", raw_text="V3 offers laptops for 90 in 10 days, 3 year warranty."),
    ]
