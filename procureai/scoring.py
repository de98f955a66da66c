"""
Deterministic cohort scoring.

Benchmarks are the best value seen for each metric across a cohort. A proposal
loses points only where it is strictly worse than the benchmark, in fixed tiers,
and the adjusted score is kept to an integer in [0, 100] with 100 capped to 97.
"""

import math
from typing import List, Optional, Sequence, Tuple

from procureai.schemas import CohortBenchmark, CompetitiveAdjustment, ProposalFacts

# (exclusive lower bound on the relative overprice, penalty), checked in order
PRICE_TIERS: List[Tuple[float, int]] = [(0.15, 8), (0.10, 6), (0.05, 4)]
PRICE_MIN_PENALTY = 2

# (exclusive lower bound on the delay in days, penalty)
DELIVERY_TIERS: List[Tuple[float, int]] = [(10, 5), (5, 3)]
DELIVERY_MIN_PENALTY = 1

# (inclusive lower bound on the warranty gap in years, penalty)
WARRANTY_TIERS: List[Tuple[float, int]] = [(2, 7)]
WARRANTY_MIN_PENALTY = 4

PERFECT_SCORE = 100
PERFECT_SCORE_CAP = 97

NO_DISADVANTAGES = "No competitive disadvantages were identified."


def _present(values: Sequence[Optional[float]]) -> List[float]:
    return [v for v in values if v is not None]


def compute_benchmark(facts: Sequence[ProposalFacts]) -> CohortBenchmark:
    prices     = _present([f.total_price for f in facts])
    deliveries = _present([f.delivery_days for f in facts])
    warranties = _present([f.warranty_years for f in facts])
    return CohortBenchmark(
        lowest_price     = min(prices) if prices else None,
        fastest_delivery = min(deliveries) if deliveries else None,
        longest_warranty = max(warranties) if warranties else None,
    )


def _tiered(amount: float, tiers: List[Tuple[float, int]], floor_penalty: int, inclusive: bool = False) -> int:
    for bound, penalty in tiers:
        if amount > bound or (inclusive and amount == bound):
            return penalty
    return floor_penalty


def price_penalty(total_price: Optional[float], lowest_price: Optional[float]) -> int:
    if total_price is None or lowest_price is None or total_price <= lowest_price:
        return 0
    if lowest_price <= 0:
        # anything above a free offer is the worst tier
        return PRICE_TIERS[0][1]
    ratio = (total_price - lowest_price) / lowest_price
    return _tiered(ratio, PRICE_TIERS, PRICE_MIN_PENALTY)


def delivery_penalty(delivery_days: Optional[float], fastest_delivery: Optional[float]) -> int:
    if delivery_days is None or fastest_delivery is None or delivery_days <= fastest_delivery:
        return 0
    return _tiered(delivery_days - fastest_delivery, DELIVERY_TIERS, DELIVERY_MIN_PENALTY)


def warranty_penalty(warranty_years: Optional[float], longest_warranty: Optional[float]) -> int:
    if warranty_years is None or longest_warranty is None or warranty_years >= longest_warranty:
        return 0
    return _tiered(longest_warranty - warranty_years, WARRANTY_TIERS, WARRANTY_MIN_PENALTY, inclusive=True)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def apply_competitive_adjustment(
    base_score: float,
    facts: ProposalFacts,
    benchmark: CohortBenchmark,
) -> CompetitiveAdjustment:
    reasons: List[str] = []
    total = 0

    penalty = price_penalty(facts.total_price, benchmark.lowest_price)
    if penalty:
        reasons.append(f"Higher pricing than lowest bidder (−{penalty})")
        total += penalty

    penalty = delivery_penalty(facts.delivery_days, benchmark.fastest_delivery)
    if penalty:
        reasons.append(f"Slower delivery timeline (−{penalty})")
        total += penalty

    penalty = warranty_penalty(facts.warranty_years, benchmark.longest_warranty)
    if penalty:
        reasons.append(f"Shorter warranty period (−{penalty})")
        total += penalty

    score = _round_half_up(base_score - total)
    if score >= PERFECT_SCORE:
        score = PERFECT_SCORE_CAP
    score = max(0, score)

    return CompetitiveAdjustment(final_score=score, reasons=reasons)


def compose_summary(summary: str, reasons: Sequence[str]) -> str:
    base = (summary or "").strip()
    if not reasons:
        addition = NO_DISADVANTAGES
    else:
        addition = f"Competitive considerations: {'; '.join(reasons)}."
    return f"{base} {addition}" if base else addition
