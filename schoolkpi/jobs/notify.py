import logging

from flask import has_app_context

from ..extensions import db
from ..models.notification import Notification, NotificationType
from ..models.user import User, Role

logger = logging.getLogger(__name__)


def _in_app_context(func, *args):
    """Workers have no app context; inline execution already has one."""
    if has_app_context():
        return func(*args)
    from schoolkpi import create_app
    app = create_app()
    with app.app_context():
        return func(*args)


def _notify_school_managers(school_id, type_, title, message, link):
    managers = User.query.filter_by(school_id=school_id, role=Role.SCHOOL_MANAGER, status=True).all()
    created = []
    for m in managers:
        n = Notification(user_id=m.id, type=type_, title=title, message=message, link=link)
        db.session.add(n)
        created.append(n)
    db.session.commit()
    logger.info('sent %s to %d manager(s) of school %s', type_, len(created), school_id)
    return [n.id for n in created]


def _notify_managers_on_submission(submission_id, school_id, teacher_name, kpi_name, evidence_name):
    return _notify_school_managers(
        school_id,
        NotificationType.EVIDENCE_SUBMITTED,
        "New evidence submitted",
        f"{teacher_name} submitted {evidence_name} for {kpi_name}",
        f"/school/evidence/pending#submission-{submission_id}",
    )


def _notify_managers_on_teacher_added(school_id, teacher_name):
    return _notify_school_managers(
        school_id,
        NotificationType.TEACHER_ADDED,
        "New teacher",
        f'Teacher "{teacher_name}" was added to the school',
        "/school/teachers",
    )


def _notify_managers_on_kpi_added(school_id, kpi_name):
    return _notify_school_managers(
        school_id,
        NotificationType.KPI_ADDED,
        "New KPI",
        f'KPI "{kpi_name}" was added',
        "/school/kpis",
    )


def _notify_teacher_on_review(teacher_id, action, kpi_name, evidence_name, rating=None, reject_reason=None):
    if action == "accept":
        n = Notification(
            user_id=teacher_id,
            type=NotificationType.EVIDENCE_ACCEPTED,
            title="Evidence accepted",
            message=f"{evidence_name} for {kpi_name} was accepted with rating {rating}/5",
            link="/teacher/submissions",
        )
    else:
        n = Notification(
            user_id=teacher_id,
            type=NotificationType.EVIDENCE_REJECTED,
            title="Evidence rejected",
            message=f"{evidence_name} for {kpi_name} was rejected: {reject_reason}",
            link="/teacher/submissions",
        )
    db.session.add(n)
    db.session.commit()
    return n.id


def notify_managers_on_submission(submission_id, school_id, teacher_name, kpi_name, evidence_name):
    return _in_app_context(_notify_managers_on_submission,
                           submission_id, school_id, teacher_name, kpi_name, evidence_name)


def notify_managers_on_teacher_added(school_id, teacher_name):
    return _in_app_context(_notify_managers_on_teacher_added, school_id, teacher_name)


def notify_managers_on_kpi_added(school_id, kpi_name):
    return _in_app_context(_notify_managers_on_kpi_added, school_id, kpi_name)


def notify_teacher_on_review(teacher_id, action, kpi_name, evidence_name, rating=None, reject_reason=None):
    return _in_app_context(_notify_teacher_on_review,
                           teacher_id, action, kpi_name, evidence_name, rating, reject_reason)
