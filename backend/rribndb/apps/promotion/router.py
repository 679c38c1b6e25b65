from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_read_db
from ...security import require_admin
from ..accounts import models as account_models
from . import schemas, services

router = APIRouter(prefix="/admin/analytics", tags=["analytics"])


@router.get("", response_model=schemas.AnalyticsResponse)
def get_promotion_analytics(
    direction: str = Query("desc", pattern="^(asc|desc)$"),
    db: Session = Depends(get_read_db),
    current_user: account_models.Account = Depends(require_admin),
):
    ranked, summary, breakdown = services.promotion_analytics(db, direction=direction)
    return schemas.AnalyticsResponse(
        data=[schemas.PromotionEligibilityRead.model_validate(c) for c in ranked],
        summary=schemas.AnalyticsSummaryRead.model_validate(summary),
        company_breakdown=[schemas.CompanyAnalyticsRead.model_validate(c) for c in breakdown],
    )


@router.get("/top-candidates", response_model=List[schemas.TopCandidateRead])
def get_top_candidates(
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_read_db),
    current_user: account_models.Account = Depends(require_admin),
):
    ranked, _, _ = services.promotion_analytics(db)
    return [
        schemas.TopCandidateRead.model_validate(item)
        for item in services.top_candidates(ranked, limit=limit)
    ]
