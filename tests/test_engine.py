import pytest

from schoolkpi.errors import DataUnavailable, IncompleteTeacher
from schoolkpi.extensions import db
from schoolkpi.models import KPI, SchoolKpiWeight, SubmissionStatus, Role
from schoolkpi.services import catalog, engine
from schoolkpi.services.school_kpis import add_school_evidence, customize_kpi, save_school_weights, create_school_kpi

from conftest import make_submission, make_user

ACC = SubmissionStatus.ACCEPTED


def test_weight_validation_for_school(ctx, make_school):
    s = make_school(weights=(40, 60))
    out = engine.get_weight_validation(s.job_type.id, s.school.id)
    assert out.is_valid is True
    assert out.total_weight == 100.0
    assert out.job_type_name == "Math Teacher"


def test_adding_kpi_flips_validation(ctx, make_school):
    s = make_school(weights=(40, 60))
    assert engine.get_weight_validation(s.job_type.id, s.school.id).is_valid
    db.session.add(KPI(job_type_id=s.job_type.id, name="Extra", weight=10, is_official=True))
    db.session.commit()
    out = engine.get_weight_validation(s.job_type.id, s.school.id)
    assert out.total_weight == 110.0
    assert out.is_valid is False


def test_inactive_kpis_do_not_count(ctx, make_school):
    s = make_school(weights=(40, 60))
    s.kpis[1].active = False
    db.session.commit()
    out = engine.get_weight_validation(s.job_type.id, s.school.id)
    assert out.total_weight == 40.0
    assert not out.is_valid


def test_unknown_job_type_is_data_unavailable(ctx):
    with pytest.raises(DataUnavailable):
        engine.get_weight_validation(999, 1)


def test_kpi_score_and_progress(ctx, make_school):
    s = make_school(weights=(40, 60), min_evidence=(3, None))
    t, k1, k2 = s.teacher, s.kpis[0], s.kpis[1]
    make_submission(t, k1, ACC, rating=3)
    make_submission(t, k1, ACC, rating=5)
    make_submission(t, k1, SubmissionStatus.REJECTED, reject_reason="blurry")
    make_submission(t, k1)

    score = engine.get_kpi_score(t.id, k1.id)
    assert score.score == 4.0
    assert (score.approved_evidence_count, score.pending_evidence_count, score.rejected_evidence_count) == (2, 1, 1)

    progress = engine.get_kpi_progress(t.id, k1.id)
    assert progress.remaining_count == 1
    assert progress.is_achieved is False

    # no minimum on the second KPI: achieved with zero evidence
    progress = engine.get_kpi_progress(t.id, k2.id)
    assert progress.is_achieved is True
    assert progress.remaining_count == 0


def test_teacher_overall_score(ctx, make_school):
    s = make_school(weights=(40, 60))
    t = s.teacher
    make_submission(t, s.kpis[0], ACC, rating=5)
    make_submission(t, s.kpis[1], ACC, rating=2)
    make_submission(t, s.kpis[1], ACC, rating=3)

    out = engine.get_teacher_overall_score(t.id)
    assert out.overall_score == pytest.approx(3.5)
    assert out.overall_percentage == pytest.approx(70.0)
    assert out.weights_info.is_valid is True
    assert [k.kpi_id for k in out.kpis] == [s.kpis[0].id, s.kpis[1].id]


def test_getters_are_idempotent(ctx, make_school):
    s = make_school(weights=(40, 60))
    make_submission(s.teacher, s.kpis[0], ACC, rating=4)
    first = engine.get_teacher_overall_score(s.teacher.id)
    second = engine.get_teacher_overall_score(s.teacher.id)
    assert first == second
    assert engine.get_kpi_score(s.teacher.id, s.kpis[0].id) == engine.get_kpi_score(s.teacher.id, s.kpis[0].id)


def test_invalid_weights_still_score(ctx, make_school):
    s = make_school(weights=(40, 40))
    make_submission(s.teacher, s.kpis[0], ACC, rating=5)
    out = engine.get_teacher_overall_score(s.teacher.id)
    assert out.overall_score == pytest.approx(2.0)
    assert out.is_accurate is False
    assert out.weights_info.total_weight == 80.0


def test_teacher_without_job_type_is_incomplete(ctx, make_school):
    s = make_school(teachers=())
    t = make_user("Loose Teacher", Role.TEACHER, school=s.school)
    db.session.commit()
    with pytest.raises(IncompleteTeacher):
        engine.get_teacher_overall_score(t.id)


def test_missing_teacher_is_data_unavailable(ctx):
    with pytest.raises(DataUnavailable):
        engine.get_teacher_overall_score(12345)


def test_school_copy_shadows_official_kpi(ctx, make_school):
    s = make_school(weights=(40, 60))
    other = make_school(school_name="School Two")
    official = s.kpis[0]

    copy = customize_kpi(s.school.id, official.id, name="KPI 1 (local)", weight=30)
    assert copy.id != official.id
    assert copy.source_kpi_id == official.id
    assert [e.name for e in copy.evidence_items] == ["Evidence 1"]
    # official row untouched
    assert float(db.session.get(KPI, official.id).weight) == 40.0

    names = [k.name for k in catalog.visible_kpis(s.job_type.id, s.school.id)]
    assert "KPI 1" not in names and "KPI 1 (local)" in names
    assert engine.get_weight_validation(s.job_type.id, s.school.id).total_weight == 90.0

    # the other school still sees the official KPI
    other_names = [k.name for k in catalog.visible_kpis(other.job_type.id, other.school.id)]
    assert other_names == ["KPI 1", "KPI 2"]
    assert engine.get_weight_validation(other.job_type.id, other.school.id).is_valid

    # customizing again reuses the same copy
    again = customize_kpi(s.school.id, official.id, weight=40)
    assert again.id == copy.id
    assert engine.get_weight_validation(s.job_type.id, s.school.id).is_valid


def test_school_weight_overrides(ctx, make_school):
    s = make_school(weights=(40, 60))
    extra = create_school_kpi(s.school.id, s.job_type.id, "Community work", 20)
    assert engine.get_weight_validation(s.job_type.id, s.school.id).total_weight == 120.0

    save_school_weights(s.school.id, s.job_type.id, [
        {"kpi_id": s.kpis[0].id, "weight": 30, "is_active": True},
        {"kpi_id": s.kpis[1].id, "weight": 50, "is_active": True},
        {"kpi_id": extra.id, "weight": 20, "is_active": True},
    ])
    out = engine.get_weight_validation(s.job_type.id, s.school.id)
    assert out.is_valid and out.total_weight == 100.0
    assert SchoolKpiWeight.query.filter_by(school_id=s.school.id).count() == 3

    # switch one off: allowed, but flagged
    save_school_weights(s.school.id, s.job_type.id, [
        {"kpi_id": s.kpis[0].id, "weight": 30, "is_active": True},
        {"kpi_id": s.kpis[1].id, "weight": 50, "is_active": False},
        {"kpi_id": extra.id, "weight": 20, "is_active": True},
    ])
    out = engine.get_weight_validation(s.job_type.id, s.school.id)
    assert out.total_weight == 50.0 and not out.is_valid
    active_ids = [k.kpi_id for k in catalog.active_kpis(s.job_type.id, s.school.id)]
    assert s.kpis[1].id not in active_ids


def test_school_scores_lists_teachers_by_name(ctx, make_school):
    s = make_school(weights=(40, 60), teachers=("Zaid", "Amal", "Badr"))
    by_name = {t.name: t for t in s.teachers}
    make_submission(by_name["Zaid"], s.kpis[0], ACC, rating=5)
    make_submission(by_name["Badr"], s.kpis[0], ACC, rating=5)

    rows, weights = engine.get_school_scores(s.school.id)
    assert [r["name"] for r in rows] == ["Amal", "Badr", "Zaid"]
    assert rows[1]["overall_score"] == 2.0
    assert weights == [{"job_type_id": s.job_type.id, "job_type_name": "Math Teacher",
                        "total_weight": 100.0, "is_valid": True}]


def test_kpi_score_refuses_another_schools_private_kpi(ctx, make_school):
    s = make_school(weights=(40, 60))
    other = make_school(school_name="School Two", teachers=("Teacher B",))
    private = create_school_kpi(other.school.id, other.job_type.id, "Private", 10)
    with pytest.raises(DataUnavailable):
        engine.get_kpi_score(s.teacher.id, private.id)
    with pytest.raises(DataUnavailable):
        engine.get_kpi_progress(s.teacher.id, private.id)


def test_kpi_score_refuses_kpi_of_another_job_type(ctx, make_school):
    s = make_school()
    science = make_school(school_name="School Two", job_type_name="Science Teacher", teachers=())
    with pytest.raises(DataUnavailable):
        engine.get_kpi_score(s.teacher.id, science.kpis[0].id)


def test_replaced_official_kpi_still_scores_with_history(ctx, make_school):
    s = make_school(weights=(40, 60))
    official = s.kpis[0]
    make_submission(s.teacher, official, ACC, rating=4)
    customize_kpi(s.school.id, official.id, name="KPI 1 (local)")

    score = engine.get_kpi_score(s.teacher.id, official.id)
    assert score.score == 4.0
    assert score.name == "KPI 1"


def test_inactive_kpi_reports_school_weight(ctx, make_school):
    s = make_school(weights=(40, 60))
    save_school_weights(s.school.id, s.job_type.id, [
        {"kpi_id": s.kpis[0].id, "weight": 35, "is_active": False},
        {"kpi_id": s.kpis[1].id, "weight": 60, "is_active": True},
    ])
    assert engine.get_kpi_score(s.teacher.id, s.kpis[0].id).weight == 35.0


def test_school_copy_keeps_the_schools_own_evidence(ctx, make_school):
    s = make_school(weights=(40, 60))
    other = make_school(school_name="School Two", teachers=("Teacher B",))
    official = s.kpis[0]
    add_school_evidence(s.school.id, official.id, "Local proof")
    add_school_evidence(other.school.id, official.id, "Their proof")

    copy = customize_kpi(s.school.id, official.id, weight=40)
    assert sorted(e.name for e in copy.evidence_items) == ["Evidence 1", "Local proof"]
