"""Write side of the catalog for school managers: own KPIs, evidence items and weight overrides."""
from flask import current_app

from ..extensions import db, rq
from ..errors import DataUnavailable, SubmissionError, WeightError
from ..jobs.notify import notify_managers_on_kpi_added
from ..models.evidence import EvidenceItem
from ..models.kpi import KPI, SchoolKpiWeight
from ..models.submission import EvidenceSubmission
from . import catalog
from .weights import check_weight_update, to_decimal


def _upsert_weight(school_id, job_type_id, kpi_id, weight, is_active):
    row = SchoolKpiWeight.query.filter_by(school_id=school_id, job_type_id=job_type_id, kpi_id=kpi_id).first()
    if row is None:
        row = SchoolKpiWeight(school_id=school_id, job_type_id=job_type_id, kpi_id=kpi_id)
        db.session.add(row)
    row.weight = to_decimal(weight)
    row.is_active = is_active
    return row


def create_school_kpi(school_id, job_type_id, name, weight, min_accepted_evidence=None):
    catalog.get_job_type(job_type_id)
    kpi = KPI(
        job_type_id=job_type_id,
        name=name,
        weight=to_decimal(weight),
        min_accepted_evidence=min_accepted_evidence,
        is_official=False,
        school_id=school_id,
    )
    db.session.add(kpi)
    db.session.commit()
    current_app.logger.info('school %s created KPI %s for job type %s', school_id, kpi.id, job_type_id)
    rq.enqueue(notify_managers_on_kpi_added, school_id, kpi.name)
    return kpi


def customize_kpi(school_id, kpi_id, name=None, weight=None, min_accepted_evidence=None):
    """Edit a KPI for one school.

    A school's own KPI is updated in place. An official KPI is never changed:
    the school gets (or reuses) a private copy that replaces it, with the
    official evidence items copied over, and the official KPI is switched off
    in the school's weights.
    """
    kpi = catalog.get_kpi(kpi_id)
    if weight is not None and not (0 <= to_decimal(weight) <= 100):
        raise WeightError("weight must be between 0 and 100")

    if not kpi.is_official:
        if kpi.school_id != school_id:
            raise DataUnavailable(f"KPI {kpi_id} not found", kpi_id=kpi_id)
        if name:
            kpi.name = name
        if weight is not None:
            kpi.weight = to_decimal(weight)
            ov = SchoolKpiWeight.query.filter_by(school_id=school_id, job_type_id=kpi.job_type_id, kpi_id=kpi.id).first()
            if ov is not None:
                ov.weight = kpi.weight
        if min_accepted_evidence is not None:
            kpi.min_accepted_evidence = min_accepted_evidence
        db.session.commit()
        return kpi

    copy = KPI.query.filter_by(school_id=school_id, source_kpi_id=kpi.id).first()
    if copy is None:
        copy = KPI(
            job_type_id=kpi.job_type_id,
            name=kpi.name,
            weight=kpi.weight,
            min_accepted_evidence=kpi.min_accepted_evidence,
            is_official=False,
            school_id=school_id,
            source_kpi_id=kpi.id,
        )
        db.session.add(copy)
        db.session.flush()
        for ev in kpi.evidence_items:
            if ev.is_official or ev.school_id == school_id:
                db.session.add(EvidenceItem(kpi_id=copy.id, name=ev.name, is_official=False, school_id=school_id))
        current_app.logger.info('school %s replaced official KPI %s with copy %s', school_id, kpi.id, copy.id)

    if name:
        copy.name = name
    if weight is not None:
        copy.weight = to_decimal(weight)
    if min_accepted_evidence is not None:
        copy.min_accepted_evidence = min_accepted_evidence

    _upsert_weight(school_id, kpi.job_type_id, kpi.id, kpi.weight, False)
    _upsert_weight(school_id, kpi.job_type_id, copy.id, copy.weight, True)
    db.session.commit()
    return copy


def save_school_weights(school_id, job_type_id, entries):
    """Replace the school's weights for a job type.

    Active total may be under 100 (switched-off KPIs) but not over it; the
    exact-100 check is the advisory validator's job.
    """
    catalog.get_job_type(job_type_id)
    total = check_weight_update(entries)

    visible = {k.id for k in catalog.visible_kpis(job_type_id, school_id)}
    unknown = [e["kpi_id"] for e in entries if e["kpi_id"] not in visible]
    if unknown:
        raise WeightError("weights reference KPIs not visible to this school", kpi_ids=unknown)

    SchoolKpiWeight.query.filter_by(school_id=school_id, job_type_id=job_type_id).delete()
    rows = [
        _upsert_weight(school_id, job_type_id, e["kpi_id"], e.get("weight"), e.get("is_active", True) is not False)
        for e in entries
    ]
    db.session.commit()
    current_app.logger.info('school %s saved %d weights for job type %s (active total %s)',
                            school_id, len(rows), job_type_id, total)
    return rows


def _school_evidence(school_id, kpi_id, evidence_id):
    ev = EvidenceItem.query.filter_by(
        id=evidence_id, kpi_id=kpi_id, school_id=school_id, is_official=False,
    ).first()
    if ev is None:
        raise DataUnavailable(f"evidence {evidence_id} not found for KPI {kpi_id}", evidence_id=evidence_id)
    return ev


def add_school_evidence(school_id, kpi_id, name):
    """Add a school-only evidence item to an official KPI or one of the school's own KPIs."""
    kpi = catalog.get_kpi(kpi_id)
    if not catalog.is_kpi_visible(kpi, kpi.job_type_id, school_id):
        raise DataUnavailable(f"KPI {kpi_id} not found", kpi_id=kpi_id)
    ev = EvidenceItem(kpi_id=kpi.id, name=name, is_official=False, school_id=school_id)
    db.session.add(ev)
    db.session.commit()
    current_app.logger.info('school %s added evidence item %s to KPI %s', school_id, ev.id, kpi.id)
    return ev


def rename_school_evidence(school_id, kpi_id, evidence_id, name):
    ev = _school_evidence(school_id, kpi_id, evidence_id)
    ev.name = name
    db.session.commit()
    return ev


def delete_school_evidence(school_id, kpi_id, evidence_id):
    ev = _school_evidence(school_id, kpi_id, evidence_id)
    if EvidenceSubmission.query.filter_by(evidence_id=ev.id).count():
        raise SubmissionError("evidence item has submissions", status_code=409, evidence_id=ev.id)
    db.session.delete(ev)
    db.session.commit()
