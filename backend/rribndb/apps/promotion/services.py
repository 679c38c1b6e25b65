from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence

from sqlalchemy.orm import Session

from rribndb.apps.accounts import models as account_models

from . import models
from .eligibility import (
    CandidateMetrics,
    EligibilityStatus,
    PromotionEligibility,
    Requirement,
    evaluate_eligibility,
    highest_education,
    requirement_for,
)
from .ranking import justify, metric_summary, rank_candidates

logger = logging.getLogger(__name__)

HOURS_PER_DUTY_DAY = 24

_CATEGORY_FIELDS = {
    "leadership": "leadership_hours",
    "combat": "combat_hours",
    "technical": "technical_hours",
    "seminar": "seminar_hours",
}


@dataclass(frozen=True)
class AnalyticsSummary:
    total_reservists: int
    eligible: int
    partially_eligible: int
    not_eligible: int
    average_training_hours: float
    total_training_hours: float
    reservists_needing_more_training: int
    average_camp_duty_days: float
    reservists_needing_more_camp_duty: int


@dataclass(frozen=True)
class CompanyAnalytics:
    company: str
    total_reservists: int
    eligible_count: int
    average_training_hours: float
    average_camp_duty_days: float
    average_readiness_score: int


@dataclass(frozen=True)
class TopCandidate:
    position: int
    candidate: PromotionEligibility
    justification: str
    summary: str


def _one_decimal(value: float) -> float:
    return round(float(value or 0) * 10) / 10


def _average(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    return sum(values) / len(values)


# ---------------------------------------------------------------------------
# LOADING
# ---------------------------------------------------------------------------


def _to_requirement(row: models.PromotionRequirement) -> Requirement:
    return Requirement(
        from_rank=row.from_rank,
        to_rank=row.to_rank,
        required_training_types=row.required_training_types or 0,
        years_in_current_rank=row.years_in_current_rank or 0,
        seminars_required=row.seminars_required or 0,
        camp_duty_days=row.camp_duty_days if row.camp_duty_days is not None else 30,
        min_education=row.min_education,
        is_active=bool(row.is_active),
    )


def load_active_requirements(db: Session) -> Dict[str, Requirement]:
    rows = (
        db.query(models.PromotionRequirement)
        .filter(models.PromotionRequirement.is_active.is_(True))
        .order_by(models.PromotionRequirement.from_rank.asc(), models.PromotionRequirement.created_at.asc())
        .all()
    )
    # Newest active row per rank wins.
    return {row.from_rank: _to_requirement(row) for row in rows}


def _years_in_service(date_of_commission: Optional[date], today: date) -> int:
    if date_of_commission is None:
        return 0
    return max(0, today.year - date_of_commission.year)


def collect_candidate_metrics(db: Session, *, today: Optional[date] = None) -> List[CandidateMetrics]:
    """
    Aggregate service records for every active NCO reservist.
    """
    today = today or date.today()

    reservists = (
        db.query(account_models.Account, account_models.ReservistDetails)
        .join(
            account_models.ReservistDetails,
            account_models.ReservistDetails.account_id == account_models.Account.id,
        )
        .filter(
            account_models.Account.role == account_models.AccountRole.RESERVIST,
            account_models.Account.status == account_models.AccountStatus.ACTIVE,
            account_models.ReservistDetails.commission_type == account_models.CommissionType.NCO,
        )
        .all()
    )
    if not reservists:
        return []
    ids = [account.id for account, _ in reservists]

    trainings: Dict[str, List[models.TrainingHours]] = defaultdict(list)
    for row in db.query(models.TrainingHours).filter(models.TrainingHours.reservist_id.in_(ids)):
        trainings[row.reservist_id].append(row)

    camp_hours: Dict[str, float] = defaultdict(float)
    for row in db.query(models.CampDutyRecord).filter(models.CampDutyRecord.reservist_id.in_(ids)):
        camp_hours[row.reservist_id] += float(row.hours or 0)

    seminars: Dict[str, int] = defaultdict(int)
    for row in db.query(models.SeminarActivity).filter(models.SeminarActivity.reservist_id.in_(ids)):
        seminars[row.reservist_id] += 1

    education: Dict[str, List[str]] = defaultdict(list)
    for row in db.query(models.EducationalRecord).filter(models.EducationalRecord.reservist_id.in_(ids)):
        education[row.reservist_id].append(row.degree_type)

    metrics: List[CandidateMetrics] = []
    for account, details in reservists:
        rows = trainings[account.id]
        category_hours = {field: 0.0 for field in _CATEGORY_FIELDS.values()}
        for row in rows:
            field = _CATEGORY_FIELDS.get((row.training_category or "").strip().lower())
            if field:
                category_hours[field] += float(row.hours_completed or 0)

        metrics.append(
            CandidateMetrics(
                id=account.id,
                first_name=account.first_name,
                last_name=account.last_name,
                rank=details.rank,
                company=details.company,
                commission_type=details.commission_type.value,
                reservist_status=details.reservist_status.value if details.reservist_status else None,
                years_in_service=_years_in_service(details.date_of_commission, today),
                total_training_hours=sum(float(row.hours_completed or 0) for row in rows),
                training_count=len(rows),
                training_types_count=len({row.training_name for row in rows}),
                camp_duty_days=camp_hours[account.id] / HOURS_PER_DUTY_DAY,
                seminar_count=seminars[account.id],
                highest_education=highest_education(education[account.id]),
                **category_hours,
            )
        )
    return metrics


# ---------------------------------------------------------------------------
# ANALYTICS
# ---------------------------------------------------------------------------


def evaluate_candidates(
    metrics: Iterable[CandidateMetrics],
    requirements: Dict[str, Requirement],
) -> List[PromotionEligibility]:
    return [evaluate_eligibility(m, requirement_for(m.rank, requirements)) for m in metrics]


def build_summary(candidates: Sequence[PromotionEligibility]) -> AnalyticsSummary:
    hours = [c.total_training_hours for c in candidates]
    camp_days = [c.camp_duty_days for c in candidates]
    return AnalyticsSummary(
        total_reservists=len(candidates),
        eligible=sum(1 for c in candidates if c.eligibility_status == EligibilityStatus.ELIGIBLE),
        partially_eligible=sum(
            1 for c in candidates if c.eligibility_status == EligibilityStatus.PARTIALLY_ELIGIBLE
        ),
        not_eligible=sum(1 for c in candidates if c.eligibility_status == EligibilityStatus.NOT_ELIGIBLE),
        average_training_hours=_one_decimal(_average(hours)),
        total_training_hours=_one_decimal(sum(hours)),
        reservists_needing_more_training=sum(1 for c in candidates if not c.meets_training_requirement),
        average_camp_duty_days=_one_decimal(_average(camp_days)),
        reservists_needing_more_camp_duty=sum(1 for c in candidates if not c.meets_camp_duty_requirement),
    )


def build_company_breakdown(candidates: Sequence[PromotionEligibility]) -> List[CompanyAnalytics]:
    by_company: Dict[str, List[PromotionEligibility]] = defaultdict(list)
    for candidate in candidates:
        by_company[candidate.company or "UNASSIGNED"].append(candidate)

    breakdown = [
        CompanyAnalytics(
            company=company,
            total_reservists=len(members),
            eligible_count=sum(1 for c in members if c.eligibility_status == EligibilityStatus.ELIGIBLE),
            average_training_hours=_one_decimal(_average([c.total_training_hours for c in members])),
            average_camp_duty_days=_one_decimal(_average([c.camp_duty_days for c in members])),
            average_readiness_score=int(round(_average([c.readiness_score for c in members]))),
        )
        for company, members in by_company.items()
    ]
    breakdown.sort(key=lambda item: (-item.average_readiness_score, item.company))
    return breakdown


def top_candidates(
    candidates: Sequence[PromotionEligibility],
    *,
    limit: int = 10,
) -> List[TopCandidate]:
    ranked = rank_candidates(candidates, "desc")[: max(0, limit)]
    return [
        TopCandidate(
            position=position,
            candidate=candidate,
            justification=justify(candidate, position),
            summary=metric_summary(candidate),
        )
        for position, candidate in enumerate(ranked, start=1)
    ]


def promotion_analytics(
    db: Session,
    *,
    direction: str = "desc",
    today: Optional[date] = None,
):
    """Ranked eligibility list plus the summary and company breakdown."""
    requirements = load_active_requirements(db)
    candidates = evaluate_candidates(collect_candidate_metrics(db, today=today), requirements)
    summary = build_summary(candidates)

    logger.info(
        "Promotion analytics computed",
        extra={
            "total_reservists": summary.total_reservists,
            "eligible": summary.eligible,
            "requirements": len(requirements),
        },
    )
    return rank_candidates(candidates, direction), summary, build_company_breakdown(candidates)
