"""
Ordering and explanations for promotion candidates.

Sort priority (each rule only breaks ties left by the previous ones):

1. readiness score
2. training types count
3. camp duty days
4. seminar count
5. years in service
6. total training hours
7. "{last_name} {first_name}", alphabetical

Rules 1-6 are higher-first. "asc" reverses the finished list, so it reads
weakest candidate first rather than flipping individual rules.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

from .eligibility import PromotionEligibility

DIRECTIONS = ("asc", "desc")


def _sort_name(candidate: PromotionEligibility) -> str:
    return f"{candidate.last_name} {candidate.first_name}"


def _sort_key(candidate: PromotionEligibility) -> Tuple:
    name = _sort_name(candidate)
    return (
        -candidate.readiness_score,
        -candidate.training_types_count,
        -candidate.camp_duty_days,
        -candidate.seminar_count,
        -candidate.years_in_service,
        -candidate.total_training_hours,
        name.casefold(),
        name,
        # identical names still need a fixed order
        str(candidate.id),
    )


def rank_candidates(
    candidates: Sequence[PromotionEligibility],
    direction: str = "desc",
) -> List[PromotionEligibility]:
    if direction not in DIRECTIONS:
        raise ValueError(f"direction must be one of {DIRECTIONS}, got {direction!r}")

    ordered = sorted(candidates, key=_sort_key)
    if direction == "asc":
        ordered.reverse()
    return ordered


def _number(value: float) -> str:
    value = round(float(value) * 10) / 10
    if value == int(value):
        return str(int(value))
    return str(value)


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'s' if count > 1 else ''}"


def justify(candidate: PromotionEligibility, rank: int) -> str:
    """Explain in one line why `candidate` sits at position `rank` (1-based)."""
    reasons: List[str] = []

    score = candidate.readiness_score
    if score == 100:
        reasons.append("Meets all promotion requirements (100% ready)")
    elif score >= 75:
        reasons.append(f"High readiness score ({score}%)")
    elif score >= 50:
        reasons.append(f"Partial readiness ({score}%)")

    types = candidate.training_types_count
    if types > 5:
        reasons.append(f"Exceptional training breadth ({types} different training types)")
    elif types > 3:
        reasons.append(f"Strong training variety ({types} training types)")
    elif types > 0:
        reasons.append(f"Completed {_plural(types, 'training type')}")

    camp_days = candidate.camp_duty_days
    if camp_days >= 60:
        reasons.append(f"Outstanding camp duty commitment ({_number(camp_days)} days)")
    elif camp_days >= 30:
        reasons.append(f"Exceeded camp duty requirement ({_number(camp_days)} days)")
    elif camp_days > 0:
        reasons.append(f"{_number(camp_days)} camp duty days completed")

    seminars = candidate.seminar_count
    if seminars >= 5:
        reasons.append(f"Very active in professional development ({seminars} seminars)")
    elif seminars >= 3:
        reasons.append(f"Strong seminar participation ({seminars} seminars)")
    elif seminars > 0:
        reasons.append(f"Attended {_plural(seminars, 'seminar')}")

    hours = candidate.total_training_hours
    if hours > 300:
        reasons.append(f"Extensive training investment ({_number(hours)} hours)")
    elif hours > 150:
        reasons.append(f"Substantial training hours ({_number(hours)} hours)")

    years = candidate.years_in_service
    if years >= 10:
        reasons.append(f"Veteran service member ({years} years)")
    elif years >= 5:
        reasons.append(f"Experienced reservist ({years} years of service)")

    if not reasons:
        return f"Meets basic promotion criteria (Rank {rank})"
    return "; ".join(reasons)


def metric_summary(candidate: PromotionEligibility) -> str:
    parts = [f"Score {candidate.readiness_score}"]
    if candidate.training_types_count > 0:
        parts.append(_plural(candidate.training_types_count, "training type"))
    if candidate.camp_duty_days > 0:
        parts.append(f"{_number(candidate.camp_duty_days)} camp days")
    if candidate.seminar_count > 0:
        parts.append(_plural(candidate.seminar_count, "seminar"))
    return " • ".join(parts)
