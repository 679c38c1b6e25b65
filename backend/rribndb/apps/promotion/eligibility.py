"""
Promotion eligibility for a single reservist.

Five requirement flags are checked (training types, camp duty days,
seminars, service time, education). Each flag is worth 20 points of the
readiness score, and the flag count maps to a status:

    5 flags  -> eligible
    2-4      -> partially_eligible
    0-1      -> not_eligible

All functions are pure and only read their arguments.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Dict, Iterable, Optional

REQUIREMENT_FLAG_COUNT = 5
PARTIAL_ELIGIBILITY_MIN_FLAGS = 2

# Highest wins. Unknown labels rank below High School.
EDUCATION_LEVELS: Dict[str, int] = {
    "high school": 1,
    "vocational": 2,
    "college": 3,
    "bachelor's": 3,
    "master's": 4,
    "graduate - masters": 4,
    "doctoral": 5,
    "graduate - doctorate": 5,
}


class EligibilityStatus(str, enum.Enum):
    ELIGIBLE = "eligible"
    PARTIALLY_ELIGIBLE = "partially_eligible"
    NOT_ELIGIBLE = "not_eligible"


@dataclass(frozen=True)
class Requirement:
    from_rank: str
    required_training_types: int = 0
    years_in_current_rank: int = 0
    seminars_required: int = 0
    camp_duty_days: float = 30
    to_rank: Optional[str] = None
    min_education: Optional[str] = None
    is_active: bool = True


DEFAULT_REQUIREMENT = Requirement(from_rank="*")


@dataclass(frozen=True)
class CandidateMetrics:
    id: str
    first_name: str
    last_name: str
    rank: str
    company: Optional[str] = None
    commission_type: str = "NCO"
    reservist_status: Optional[str] = None
    years_in_service: int = 0
    total_training_hours: float = 0.0
    leadership_hours: float = 0.0
    combat_hours: float = 0.0
    technical_hours: float = 0.0
    seminar_hours: float = 0.0
    training_count: int = 0
    training_types_count: int = 0
    camp_duty_days: float = 0.0
    seminar_count: int = 0
    highest_education: Optional[str] = None


@dataclass(frozen=True)
class PromotionEligibility:
    id: str
    first_name: str
    last_name: str
    rank: str
    company: Optional[str]
    commission_type: str
    reservist_status: Optional[str]

    years_in_service: int
    total_training_hours: float
    leadership_hours: float
    combat_hours: float
    technical_hours: float
    seminar_hours: float
    training_count: int
    training_types_count: int
    camp_duty_days: float
    seminar_count: int
    highest_education: Optional[str]

    eligibility_status: EligibilityStatus
    meets_training_requirement: bool
    meets_camp_duty_requirement: bool
    meets_seminar_requirement: bool
    meets_education_requirement: bool
    meets_service_time_requirement: bool

    training_types_needed: int
    camp_duty_days_needed: float
    seminars_needed: int
    years_needed: int

    readiness_score: int

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


def _one_decimal(value: float) -> float:
    return round(float(value or 0) * 10) / 10


def education_level(label: Optional[str]) -> int:
    if not label:
        return 0
    return EDUCATION_LEVELS.get(label.strip().lower(), 0)


def highest_education(labels: Iterable[Optional[str]]) -> Optional[str]:
    best: Optional[str] = None
    for label in labels:
        if not label:
            continue
        if best is None or education_level(label) > education_level(best):
            best = label
    return best


def meets_education(candidate_education: Optional[str], min_education: Optional[str]) -> bool:
    if not min_education:
        return True
    return education_level(candidate_education) >= education_level(min_education)


def classify(flags_met: int) -> EligibilityStatus:
    if flags_met >= REQUIREMENT_FLAG_COUNT:
        return EligibilityStatus.ELIGIBLE
    if flags_met >= PARTIAL_ELIGIBILITY_MIN_FLAGS:
        return EligibilityStatus.PARTIALLY_ELIGIBLE
    return EligibilityStatus.NOT_ELIGIBLE


def readiness_score(flags_met: int) -> int:
    return int(round(flags_met / REQUIREMENT_FLAG_COUNT * 100))


def requirement_for(rank: str, requirements: Dict[str, Requirement]) -> Requirement:
    requirement = requirements.get(rank)
    if requirement is None or not requirement.is_active:
        return DEFAULT_REQUIREMENT
    return requirement


def evaluate_eligibility(metrics: CandidateMetrics, requirement: Requirement) -> PromotionEligibility:
    meets_training = metrics.training_types_count >= requirement.required_training_types
    meets_camp_duty = metrics.camp_duty_days >= requirement.camp_duty_days
    meets_seminar = metrics.seminar_count >= requirement.seminars_required
    meets_service_time = metrics.years_in_service >= requirement.years_in_current_rank
    meets_education_req = meets_education(metrics.highest_education, requirement.min_education)

    flags_met = sum(
        (meets_training, meets_camp_duty, meets_seminar, meets_service_time, meets_education_req)
    )

    return PromotionEligibility(
        id=metrics.id,
        first_name=metrics.first_name,
        last_name=metrics.last_name,
        rank=metrics.rank,
        company=metrics.company,
        commission_type=metrics.commission_type,
        reservist_status=metrics.reservist_status,
        years_in_service=metrics.years_in_service,
        total_training_hours=_one_decimal(metrics.total_training_hours),
        leadership_hours=_one_decimal(metrics.leadership_hours),
        combat_hours=_one_decimal(metrics.combat_hours),
        technical_hours=_one_decimal(metrics.technical_hours),
        seminar_hours=_one_decimal(metrics.seminar_hours),
        training_count=metrics.training_count,
        training_types_count=metrics.training_types_count,
        camp_duty_days=_one_decimal(metrics.camp_duty_days),
        seminar_count=metrics.seminar_count,
        highest_education=metrics.highest_education,
        eligibility_status=classify(flags_met),
        meets_training_requirement=meets_training,
        meets_camp_duty_requirement=meets_camp_duty,
        meets_seminar_requirement=meets_seminar,
        meets_education_requirement=meets_education_req,
        meets_service_time_requirement=meets_service_time,
        training_types_needed=max(0, requirement.required_training_types - metrics.training_types_count),
        camp_duty_days_needed=_one_decimal(max(0.0, requirement.camp_duty_days - metrics.camp_duty_days)),
        seminars_needed=max(0, requirement.seminars_required - metrics.seminar_count),
        years_needed=max(0, requirement.years_in_current_rank - metrics.years_in_service),
        readiness_score=readiness_score(flags_met),
    )
