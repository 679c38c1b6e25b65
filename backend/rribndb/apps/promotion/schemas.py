from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from .eligibility import EligibilityStatus


class PromotionEligibilityRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    first_name: str
    last_name: str
    rank: str
    company: Optional[str] = None
    commission_type: str
    reservist_status: Optional[str] = None
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
    highest_education: Optional[str] = None

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


class AnalyticsSummaryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_reservists: int
    eligible: int
    partially_eligible: int
    not_eligible: int
    average_training_hours: float
    total_training_hours: float
    reservists_needing_more_training: int
    average_camp_duty_days: float
    reservists_needing_more_camp_duty: int


class CompanyAnalyticsRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    company: str
    total_reservists: int
    eligible_count: int
    average_training_hours: float
    average_camp_duty_days: float
    average_readiness_score: int


class AnalyticsResponse(BaseModel):
    success: bool = True
    data: List[PromotionEligibilityRead]
    summary: AnalyticsSummaryRead
    company_breakdown: List[CompanyAnalyticsRead]


class TopCandidateRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    position: int
    candidate: PromotionEligibilityRead
    justification: str
    summary: str
