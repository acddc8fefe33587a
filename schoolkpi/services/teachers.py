"""School managers' teacher accounts: create, edit and disable within their own school."""
from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..extensions import db, rq
from ..errors import TeacherError
from ..jobs.notify import notify_managers_on_teacher_added
from ..models.job_type import JobType
from ..models.user import User, Role
from . import catalog


def _active_job_type(job_type_id):
    jt = db.session.get(JobType, job_type_id)
    if jt is None or not jt.active:
        raise TeacherError(f"job type {job_type_id} does not exist or is inactive", job_type_id=job_type_id)
    return jt


def create_teacher(school_id, name, email, password, job_type_id):
    jt = _active_job_type(job_type_id)
    email = email.strip().lower()
    if User.query.filter_by(email=email).first():
        raise TeacherError("email already in use", status_code=409)

    teacher = User(name=name, email=email, role=Role.TEACHER, school_id=school_id, job_type_id=jt.id)
    teacher.set_password(password)
    db.session.add(teacher)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise TeacherError("email already in use", status_code=409)
    current_app.logger.info('school %s added teacher %s', school_id, teacher.id)

    rq.enqueue(notify_managers_on_teacher_added, school_id, teacher.name)
    return teacher


def update_teacher(school_id, teacher_id, name=None, job_type_id=None, status=None):
    teacher = catalog.get_teacher(teacher_id, school_id=school_id)
    if name:
        teacher.name = name
    if job_type_id:
        teacher.job_type_id = _active_job_type(job_type_id).id
    if status is not None:
        teacher.status = status
    db.session.commit()
    return teacher


def disable_teacher(school_id, teacher_id):
    """Switch the account off; submissions and scores stay for the record."""
    teacher = update_teacher(school_id, teacher_id, status=False)
    current_app.logger.info('school %s disabled teacher %s', school_id, teacher.id)
    return teacher
