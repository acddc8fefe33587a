"""Evidence submission lifecycle: teacher upload and manager review."""

from flask import current_app

from ..extensions import db, rq
from ..errors import DataUnavailable, ReviewError, SubmissionError
from ..jobs.notify import notify_managers_on_submission, notify_teacher_on_review
from ..models.evidence import EvidenceItem
from ..models.submission import EvidenceSubmission, SubmissionStatus
from ..models.user import User
from . import catalog

MIN_RATING = 1
MAX_RATING = 5


def submit_evidence(teacher, kpi_id, evidence_id, file_url, description=None):
    if not teacher.job_type_id or not teacher.school_id:
        raise SubmissionError("teacher has no job type or school assigned")
    if not file_url:
        raise SubmissionError("file_url is required")

    kpi = catalog.get_kpi(kpi_id)
    if kpi.job_type_id != teacher.job_type_id or not catalog.is_kpi_visible(kpi, teacher.job_type_id, teacher.school_id):
        raise DataUnavailable(f"KPI {kpi_id} not found", kpi_id=kpi_id)

    visible = {e.id for e in catalog.visible_evidence(kpi_id, teacher.school_id)}
    if evidence_id not in visible:
        raise DataUnavailable(f"evidence {evidence_id} not found for KPI {kpi_id}", evidence_id=evidence_id)
    evidence = db.session.get(EvidenceItem, evidence_id)

    sub = EvidenceSubmission(
        teacher_id=teacher.id,
        kpi_id=kpi.id,
        evidence_id=evidence.id,
        file_url=file_url,
        description=description or None,
        status=SubmissionStatus.PENDING,
    )
    db.session.add(sub)
    db.session.commit()
    current_app.logger.info('teacher %s submitted evidence %s for KPI %s', teacher.id, sub.id, kpi.id)

    rq.enqueue(notify_managers_on_submission, sub.id, teacher.school_id, teacher.name, kpi.name, evidence.name)
    return sub


def review_submission(reviewer, submission_id, action, rating=None, reject_reason=None):
    """Accept (with a 1..5 rating) or reject (with a reason) a PENDING submission.

    The transition happens once: the UPDATE is conditioned on the row still
    being PENDING, so a concurrent second review finds nothing to update and
    gets a ReviewError.
    """
    if action not in ("accept", "reject"):
        raise ReviewError("action must be 'accept' or 'reject'")
    if action == "accept":
        if rating is None or not (MIN_RATING <= rating <= MAX_RATING):
            raise ReviewError("rating must be between 1 and 5", status_code=400)
    elif not (reject_reason or "").strip():
        raise ReviewError("reject_reason is required", status_code=400)

    sub = (
        EvidenceSubmission.query
        .join(User, User.id == EvidenceSubmission.teacher_id)
        .filter(EvidenceSubmission.id == submission_id, User.school_id == reviewer.school_id)
        .first()
    )
    if sub is None:
        raise DataUnavailable(f"submission {submission_id} not found", submission_id=submission_id)

    values = {"reviewed_at": db.func.now(), "reviewed_by": reviewer.id}
    if action == "accept":
        values.update(status=SubmissionStatus.ACCEPTED, rating=rating)
    else:
        values.update(status=SubmissionStatus.REJECTED, reject_reason=reject_reason.strip())

    updated = (
        EvidenceSubmission.query
        .filter_by(id=sub.id, status=SubmissionStatus.PENDING)
        .update(values, synchronize_session=False)
    )
    if not updated:
        db.session.rollback()
        raise ReviewError(f"submission {submission_id} was already reviewed", submission_id=submission_id)
    db.session.commit()
    db.session.refresh(sub)
    current_app.logger.info('submission %s %sed by %s', sub.id, action, reviewer.id)

    rq.enqueue(notify_teacher_on_review, sub.teacher_id, action, sub.kpi.name, sub.evidence.name,
               rating, sub.reject_reason)
    return sub
