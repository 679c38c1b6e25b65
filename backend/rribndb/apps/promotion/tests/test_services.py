from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

from rribndb.apps.accounts import models as account_models
from rribndb.apps.promotion import models as promotion_models
from rribndb.apps.promotion import router as promotion_router
from rribndb.apps.promotion import services as promotion_services
from rribndb.apps.promotion.eligibility import EligibilityStatus

TODAY = date(2025, 10, 8)


def _create_reservist(
    db_session,
    *,
    email: str,
    first_name: str,
    last_name: str,
    rank: str,
    company=None,
    commission_type=account_models.CommissionType.NCO,
    status=account_models.AccountStatus.ACTIVE,
    date_of_commission=None,
) -> account_models.Account:
    account = account_models.Account(
        email=email,
        first_name=first_name,
        last_name=last_name,
        role=account_models.AccountRole.RESERVIST,
        status=status,
    )
    db_session.add(account)
    db_session.flush()
    db_session.add(
        account_models.ReservistDetails(
            account_id=account.id,
            rank=rank,
            company=company,
            commission_type=commission_type,
            reservist_status=account_models.ReservistStatus.READY,
            date_of_commission=date_of_commission,
        )
    )
    db_session.commit()
    return account


def _seed(db_session):
    db_session.add(
        promotion_models.PromotionRequirement(
            from_rank="Corporal",
            to_rank="Sergeant",
            required_training_types=4,
            years_in_current_rank=5,
            seminars_required=3,
            camp_duty_days=30,
        )
    )

    santos = _create_reservist(
        db_session,
        email="santos@example.com",
        first_name="Juan",
        last_name="Santos",
        rank="Corporal",
        company="Alpha",
        date_of_commission=date(2017, 3, 1),
    )
    trainings = [
        ("Basic Leadership", "Leadership", 50),
        ("Basic Leadership", "Leadership", 30),
        ("Marksmanship", "Combat", 35),
        ("Urban Operations", "Combat", 25),
        ("Radio Operations", "Technical", 25),
        ("First Aid", "Technical", 15),
        ("Disaster Response Forum", "Seminar", 20),
    ]
    for name, category, hours in trainings:
        db_session.add(
            promotion_models.TrainingHours(
                reservist_id=santos.id,
                training_name=name,
                training_category=category,
                hours_completed=hours,
            )
        )
    db_session.add(promotion_models.CampDutyRecord(reservist_id=santos.id, hours=720))
    db_session.add(promotion_models.CampDutyRecord(reservist_id=santos.id, hours=360))
    for index in range(4):
        db_session.add(promotion_models.SeminarActivity(reservist_id=santos.id, title=f"Seminar {index}"))
    db_session.add(promotion_models.EducationalRecord(reservist_id=santos.id, degree_type="High School"))
    db_session.add(promotion_models.EducationalRecord(reservist_id=santos.id, degree_type="Bachelor's"))

    reyes = _create_reservist(
        db_session,
        email="reyes@example.com",
        first_name="Ana",
        last_name="Reyes",
        rank="Private",
    )

    # Neither of these is part of the NCO analytics.
    _create_reservist(
        db_session,
        email="officer@example.com",
        first_name="Carlo",
        last_name="Mendoza",
        rank="Lieutenant",
        commission_type=account_models.CommissionType.CO,
    )
    _create_reservist(
        db_session,
        email="inactive@example.com",
        first_name="Rico",
        last_name="Tan",
        rank="Corporal",
        status=account_models.AccountStatus.INACTIVE,
    )
    db_session.commit()
    return santos, reyes


def test_collect_candidate_metrics_aggregates_service_records(db_session):
    santos, reyes = _seed(db_session)

    metrics = {m.id: m for m in promotion_services.collect_candidate_metrics(db_session, today=TODAY)}

    assert set(metrics) == {santos.id, reyes.id}
    juan = metrics[santos.id]
    assert juan.training_count == 7
    assert juan.training_types_count == 6
    assert juan.total_training_hours == 200
    assert juan.leadership_hours == 80
    assert juan.combat_hours == 60
    assert juan.technical_hours == 40
    assert juan.seminar_hours == 20
    assert juan.camp_duty_days == 45
    assert juan.seminar_count == 4
    assert juan.years_in_service == 8
    assert juan.highest_education == "Bachelor's"
    assert juan.company == "Alpha"

    ana = metrics[reyes.id]
    assert ana.training_count == 0
    assert ana.camp_duty_days == 0
    assert ana.years_in_service == 0
    assert ana.highest_education is None


def test_load_active_requirements_prefers_newest_active_row(db_session):
    now = datetime.now(timezone.utc)
    db_session.add_all(
        [
            promotion_models.PromotionRequirement(
                from_rank="Corporal", required_training_types=2, created_at=now - timedelta(days=30)
            ),
            promotion_models.PromotionRequirement(
                from_rank="Corporal", required_training_types=4, created_at=now - timedelta(days=1)
            ),
            promotion_models.PromotionRequirement(
                from_rank="Corporal", required_training_types=9, is_active=False, created_at=now
            ),
        ]
    )
    db_session.commit()

    requirements = promotion_services.load_active_requirements(db_session)

    assert list(requirements) == ["Corporal"]
    assert requirements["Corporal"].required_training_types == 4


def test_promotion_analytics_ranks_and_summarises(db_session):
    santos, reyes = _seed(db_session)

    ranked, summary, breakdown = promotion_services.promotion_analytics(db_session, today=TODAY)

    assert [c.id for c in ranked] == [santos.id, reyes.id]
    assert ranked[0].eligibility_status == EligibilityStatus.ELIGIBLE
    assert ranked[0].readiness_score == 100
    # Private has no requirement row, so only the default camp duty gate applies.
    assert ranked[1].eligibility_status == EligibilityStatus.PARTIALLY_ELIGIBLE
    assert ranked[1].readiness_score == 80
    assert ranked[1].camp_duty_days_needed == 30

    assert summary.total_reservists == 2
    assert summary.eligible == 1
    assert summary.partially_eligible == 1
    assert summary.not_eligible == 0
    assert summary.total_training_hours == 200.0
    assert summary.average_training_hours == 100.0
    assert summary.average_camp_duty_days == 22.5
    assert summary.reservists_needing_more_training == 0
    assert summary.reservists_needing_more_camp_duty == 1

    assert [(c.company, c.average_readiness_score) for c in breakdown] == [
        ("Alpha", 100),
        ("UNASSIGNED", 80),
    ]
    assert breakdown[0].eligible_count == 1

    ascending, _, _ = promotion_services.promotion_analytics(db_session, direction="asc", today=TODAY)
    assert [c.id for c in ascending] == [reyes.id, santos.id]


def test_promotion_analytics_with_no_reservists(db_session):
    ranked, summary, breakdown = promotion_services.promotion_analytics(db_session, today=TODAY)

    assert ranked == []
    assert summary.total_reservists == 0
    assert summary.average_training_hours == 0
    assert breakdown == []


def test_top_candidates_are_numbered_and_justified(db_session):
    santos, _ = _seed(db_session)
    candidates = promotion_services.evaluate_candidates(
        promotion_services.collect_candidate_metrics(db_session, today=TODAY),
        promotion_services.load_active_requirements(db_session),
    )

    top = promotion_services.top_candidates(candidates, limit=1)

    assert len(top) == 1
    assert top[0].position == 1
    assert top[0].candidate.id == santos.id
    assert top[0].justification.startswith("Meets all promotion requirements (100% ready)")
    assert top[0].summary == "Score 100 • 6 training types • 45 camp days • 4 seminars"


def test_analytics_endpoint_wraps_results(db_session):
    _seed(db_session)

    response = promotion_router.get_promotion_analytics(direction="desc", db=db_session, current_user=None)

    assert response.success is True
    assert [c.last_name for c in response.data] == ["Santos", "Reyes"]
    assert response.summary.total_reservists == 2
    assert response.company_breakdown[0].company == "Alpha"


def test_top_candidates_endpoint_respects_limit(db_session):
    _seed(db_session)

    items = promotion_router.get_top_candidates(limit=1, db=db_session, current_user=None)

    assert len(items) == 1
    assert items[0].position == 1
    assert items[0].candidate.last_name == "Santos"
