"""Read side of the KPI catalog, scoped by school and job type."""
from sqlalchemy import and_, or_, select
from sqlalchemy.orm import aliased

from ..extensions import db
from ..errors import DataUnavailable
from ..models.job_type import JobType
from ..models.kpi import KPI, SchoolKpiWeight
from ..models.evidence import EvidenceItem
from ..models.submission import EvidenceSubmission
from ..models.user import User, Role
from .weights import KpiWeight


def get_job_type(job_type_id):
    jt = db.session.get(JobType, job_type_id)
    if jt is None:
        raise DataUnavailable(f"job type {job_type_id} not found", job_type_id=job_type_id)
    return jt


def get_kpi(kpi_id):
    kpi = db.session.get(KPI, kpi_id)
    if kpi is None:
        raise DataUnavailable(f"KPI {kpi_id} not found", kpi_id=kpi_id)
    return kpi


def get_teacher(teacher_id, school_id=None):
    q = User.query.filter_by(id=teacher_id, role=Role.TEACHER)
    if school_id is not None:
        q = q.filter_by(school_id=school_id)
    teacher = q.first()
    if teacher is None:
        raise DataUnavailable(f"teacher {teacher_id} not found", teacher_id=teacher_id)
    return teacher


def visible_kpis(job_type_id, school_id):
    """Official KPIs not replaced by a school copy, plus the school's own KPIs."""
    copy = aliased(KPI)
    shadowed = (
        select(copy.source_kpi_id)
        .where(copy.school_id == school_id, copy.source_kpi_id.isnot(None))
    )
    return (
        KPI.query
        .filter(KPI.job_type_id == job_type_id)
        .filter(or_(
            and_(KPI.is_official.is_(True), KPI.school_id.is_(None), KPI.id.notin_(shadowed)),
            and_(KPI.is_official.is_(False), KPI.school_id == school_id),
        ))
        .order_by(KPI.name, KPI.id)
        .all()
    )


def school_weights(job_type_id, school_id):
    rows = SchoolKpiWeight.query.filter_by(school_id=school_id, job_type_id=job_type_id).all()
    return {r.kpi_id: r for r in rows}


def kpi_weight_rows(job_type_id, school_id):
    """Every visible KPI with its effective weight and activation for the school."""
    overrides = school_weights(job_type_id, school_id)
    out = []
    for kpi in visible_kpis(job_type_id, school_id):
        ov = overrides.get(kpi.id)
        out.append({
            "kpi_id": kpi.id,
            "name": kpi.name,
            "weight": float(ov.weight if ov is not None else kpi.weight),
            "is_active": bool(kpi.active and (ov.is_active if ov is not None else True)),
            "is_official": bool(kpi.is_official),
            "min_accepted_evidence": kpi.min_accepted_evidence,
        })
    return out


def active_kpis(job_type_id, school_id):
    """KpiWeight values of the KPIs that count towards a teacher's score."""
    return [
        KpiWeight(
            kpi_id=row["kpi_id"],
            name=row["name"],
            weight=row["weight"],
            min_accepted_evidence=row["min_accepted_evidence"],
        )
        for row in kpi_weight_rows(job_type_id, school_id)
        if row["is_active"]
    ]


def is_kpi_visible(kpi, job_type_id, school_id):
    return any(k.id == kpi.id for k in visible_kpis(job_type_id, school_id))


def visible_evidence(kpi_id, school_id):
    return (
        EvidenceItem.query
        .filter(EvidenceItem.kpi_id == kpi_id)
        .filter(or_(
            and_(EvidenceItem.is_official.is_(True), EvidenceItem.school_id.is_(None)),
            and_(EvidenceItem.is_official.is_(False), EvidenceItem.school_id == school_id),
        ))
        .order_by(EvidenceItem.name)
        .all()
    )


def submissions_for(teacher_id, kpi_id=None):
    q = EvidenceSubmission.query.filter_by(teacher_id=teacher_id)
    if kpi_id is not None:
        q = q.filter_by(kpi_id=kpi_id)
    return q.order_by(EvidenceSubmission.created_at.desc(), EvidenceSubmission.id.desc()).all()
