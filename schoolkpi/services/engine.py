"""Scoring engine entry points used by the dashboards.

Every call re-reads the rows it needs and recomputes; nothing is cached and
nothing is written.
"""
from flask import current_app

from ..errors import DataUnavailable, IncompleteTeacher
from ..models.user import User, Role
from . import catalog
from .scoring import kpi_score, overall_score, kpi_progress
from .weights import KpiWeight, validate_weights


def _teacher_scope(teacher):
    if not teacher.job_type_id or not teacher.school_id:
        raise IncompleteTeacher(
            f"teacher {teacher.id} has no job type or school",
            teacher_id=teacher.id,
        )
    return teacher.job_type_id, teacher.school_id


def get_weight_validation(job_type_id, school_id, kpis=None):
    jt = catalog.get_job_type(job_type_id)
    if kpis is None:
        kpis = catalog.active_kpis(job_type_id, school_id)
    result = validate_weights(
        kpis,
        job_type_id=jt.id,
        job_type_name=jt.name,
    )
    if not result.is_valid:
        current_app.logger.warning(
            'KPI weights for job type %s at school %s add up to %s, not 100',
            job_type_id, school_id, result.total_weight,
        )
    return result


def _score_kpis(teacher, kpis):
    return [kpi_score(k, catalog.submissions_for(teacher.id, k.kpi_id)) for k in kpis]


def _kpi_for_teacher(teacher, kpi_id):
    """The KPI as it applies to the teacher's school (effective weight included).

    A KPI the school no longer shows (replaced by a school copy) is still
    reported when the teacher has submissions against it. Anything else outside
    the teacher's job type and school is DataUnavailable.
    """
    job_type_id, school_id = _teacher_scope(teacher)
    for row in catalog.kpi_weight_rows(job_type_id, school_id):
        if row["kpi_id"] == kpi_id:
            return KpiWeight(
                kpi_id=row["kpi_id"],
                name=row["name"],
                weight=row["weight"],
                min_accepted_evidence=row["min_accepted_evidence"],
            )
    kpi = catalog.get_kpi(kpi_id)
    if kpi.job_type_id != job_type_id or not catalog.submissions_for(teacher.id, kpi_id):
        raise DataUnavailable(f"KPI {kpi_id} not found", kpi_id=kpi_id)
    return KpiWeight(
        kpi_id=kpi.id,
        name=kpi.name,
        weight=float(kpi.weight),
        min_accepted_evidence=kpi.min_accepted_evidence,
    )


def get_kpi_score(teacher_id, kpi_id):
    teacher = catalog.get_teacher(teacher_id)
    kpi = _kpi_for_teacher(teacher, kpi_id)
    return kpi_score(kpi, catalog.submissions_for(teacher.id, kpi_id))


def get_teacher_overall_score(teacher_id, teacher=None):
    if teacher is None:
        teacher = catalog.get_teacher(teacher_id)
    job_type_id, school_id = _teacher_scope(teacher)
    kpis = catalog.active_kpis(job_type_id, school_id)
    validation = get_weight_validation(job_type_id, school_id, kpis=kpis)
    return overall_score(_score_kpis(teacher, kpis), validation)


def get_kpi_progress(teacher_id, kpi_id):
    score = get_kpi_score(teacher_id, kpi_id)
    return kpi_progress(score.min_accepted_evidence, score.approved_evidence_count)


def get_teacher_progress(teacher_id):
    """Score, counts and evidence gate of every active KPI of the teacher."""
    teacher = catalog.get_teacher(teacher_id)
    job_type_id, school_id = _teacher_scope(teacher)
    out = []
    for score in _score_kpis(teacher, catalog.active_kpis(job_type_id, school_id)):
        row = score.to_dict()
        row["score"] = round(score.score, 2)
        row.update(kpi_progress(score.min_accepted_evidence, score.approved_evidence_count).to_dict())
        out.append(row)
    return out


def get_school_scores(school_id):
    """Overall score of every active teacher of a school plus per-job-type weight checks.

    Teachers come back ordered by name (then id); ranking views sort this list
    stably so equal scores keep that order.
    """
    teachers = (
        User.query
        .filter_by(school_id=school_id, role=Role.TEACHER, status=True)
        .order_by(User.name, User.id)
        .all()
    )

    rows = []
    validations = {}
    for t in teachers:
        row = {
            "id": t.id,
            "name": t.name,
            "job_type": t.job_type.name if t.job_type else None,
            "job_type_id": t.job_type_id,
        }
        if not t.job_type_id:
            row.update(overall_score=0.0, overall_percentage=0.0, error="incomplete teacher data")
            rows.append(row)
            continue

        result = get_teacher_overall_score(t.id, teacher=t)
        validations.setdefault(t.job_type_id, result.weights_info)
        data = result.to_dict()
        row.update(
            overall_score=data["overall_score"],
            overall_percentage=data["overall_percentage"],
            is_accurate=data["is_accurate"],
            kpis=data["kpis"],
        )
        rows.append(row)

    return rows, [v.to_dict() for v in validations.values()]
