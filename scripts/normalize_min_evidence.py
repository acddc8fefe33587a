"""Clear non-positive min_accepted_evidence values.

A minimum of 0 or less means "no evidence gate", which the KPI model stores
as NULL. Run once after importing catalogs that used 0 for "none":

  python scripts/normalize_min_evidence.py [--dry-run]
"""
import argparse
import logging
import os
import sys

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from schoolkpi import create_app
from schoolkpi.extensions import db
from schoolkpi.models.kpi import KPI

logger = logging.getLogger("schoolkpi.scripts")


def normalize(dry_run=False):
    q = KPI.query.filter(KPI.min_accepted_evidence.isnot(None), KPI.min_accepted_evidence <= 0)
    rows = q.all()
    for k in rows:
        logger.info('KPI %s (%s): min_accepted_evidence %s -> NULL', k.id, k.name, k.min_accepted_evidence)
        k.min_accepted_evidence = None
    if dry_run:
        db.session.rollback()
    else:
        db.session.commit()
    return len(rows)


def main():
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument('--dry-run', action='store_true')
    args = parser.parse_args()
    app = create_app()
    with app.app_context():
        n = normalize(dry_run=args.dry_run)
    logger.info('%s %d KPI(s)', 'would update' if args.dry_run else 'updated', n)


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    main()
