"""Seed a demo school with one job type, three KPIs and three users.

  python scripts/seed_demo.py

Creates tables if they are missing (use alembic for real databases).
Passwords are all "password123".
"""
import logging
import os
import sys

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from schoolkpi import create_app
from schoolkpi.extensions import db
from schoolkpi.models import School, JobType, KPI, EvidenceItem, User, Role

logger = logging.getLogger("schoolkpi.scripts")

DEMO_KPIS = [
    # name, weight, min accepted evidence, evidence items
    ("Lesson planning", 40, 2, ["Weekly plan", "Unit plan"]),
    ("Classroom management", 35, 1, ["Observation report"]),
    ("Professional development", 25, None, ["Course certificate", "Workshop attendance"]),
]


def seed():
    school = School.query.filter_by(name="Demo School").first()
    if school:
        logger.info('demo data already present (school id %s)', school.id)
        return school
    school = School(name="Demo School")
    jt = JobType(name="Math Teacher")
    db.session.add_all([school, jt])
    db.session.flush()

    for name, weight, min_ev, evidence in DEMO_KPIS:
        kpi = KPI(job_type_id=jt.id, name=name, weight=weight, min_accepted_evidence=min_ev, is_official=True)
        db.session.add(kpi)
        db.session.flush()
        for ev in evidence:
            db.session.add(EvidenceItem(kpi_id=kpi.id, name=ev, is_official=True))

    users = [
        User(name="Admin", email="admin@example.com", role=Role.ADMIN),
        User(name="Manager", email="manager@example.com", role=Role.SCHOOL_MANAGER, school_id=school.id),
        User(name="Teacher", email="teacher@example.com", role=Role.TEACHER, school_id=school.id, job_type_id=jt.id),
    ]
    for u in users:
        u.set_password("password123")
    db.session.add_all(users)
    db.session.commit()
    logger.info('seeded school %s, job type %s', school.id, jt.id)
    return school


def main():
    app = create_app()
    with app.app_context():
        db.create_all()
        seed()


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    main()
