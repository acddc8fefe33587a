import os
import sys
from types import SimpleNamespace

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from config import TestConfig
from schoolkpi import create_app
from schoolkpi.extensions import db
from schoolkpi.models import (
    School, JobType, KPI, EvidenceItem, EvidenceSubmission, SubmissionStatus, User, Role,
)

PASSWORD = "password123"


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def ctx(app):
    """Pushed app context for service-level tests (not for test-client tests)."""
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


def _email(name, school):
    local = name.lower().replace(" ", ".")
    if school is not None:
        local = f"{local}.s{school.id}"
    return f"{local}@example.com"


def make_user(name, role, school=None, job_type=None, email=None):
    u = User(
        name=name,
        email=email or _email(name, school),
        role=role,
        school_id=school.id if school else None,
        job_type_id=job_type.id if job_type else None,
    )
    u.set_password(PASSWORD)
    db.session.add(u)
    return u


def make_submission(teacher, kpi, status=SubmissionStatus.PENDING, rating=None, reject_reason=None):
    sub = EvidenceSubmission(
        teacher_id=teacher.id,
        kpi_id=kpi.id,
        evidence_id=kpi.evidence_items[0].id,
        file_url="https://files.example.com/proof.pdf",
        status=status,
        rating=rating,
        reject_reason=reject_reason,
    )
    db.session.add(sub)
    db.session.commit()
    return sub


@pytest.fixture
def make_school():
    """Build a school, a job type with official KPIs (one evidence item each) and users.

    Needs an active app context. Returns ids and rows in a namespace.
    """
    def _make(weights=(40, 60), min_evidence=None, teachers=("Teacher A",), school_name="School One",
              job_type_name="Math Teacher"):
        school = School(name=school_name)
        jt = JobType.query.filter_by(name=job_type_name).first() or JobType(name=job_type_name)
        db.session.add_all([school, jt])
        db.session.flush()

        kpis = []
        if not jt.kpis:
            for i, w in enumerate(weights):
                kpi = KPI(job_type_id=jt.id, name=f"KPI {i + 1}", weight=w, is_official=True,
                          min_accepted_evidence=(min_evidence[i] if min_evidence else None))
                db.session.add(kpi)
                db.session.flush()
                db.session.add(EvidenceItem(kpi_id=kpi.id, name=f"Evidence {i + 1}", is_official=True))
                kpis.append(kpi)
        else:
            kpis = sorted(jt.kpis, key=lambda k: k.id)

        manager = make_user(f"Manager {school_name}", Role.SCHOOL_MANAGER, school=school)
        teacher_rows = [make_user(t, Role.TEACHER, school=school, job_type=jt) for t in teachers]
        db.session.commit()
        return SimpleNamespace(
            school=school, job_type=jt, kpis=kpis, manager=manager, teachers=teacher_rows,
            teacher=teacher_rows[0] if teacher_rows else None,
        )
    return _make


def login(client, email, password=PASSWORD):
    return client.post("/auth/login", json={"email": email, "password": password})
