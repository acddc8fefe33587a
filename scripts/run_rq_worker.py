"""Run an RQ worker inside the Flask app context.

Usage:
  source .venv/bin/activate
  python scripts/run_rq_worker.py

Notification jobs use the Flask-SQLAlchemy session, so the worker process
initializes the app and keeps an app context open while it works.
"""

import logging
import os
import sys

# project root on sys.path when run from scripts/ or another cwd
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from schoolkpi import create_app
import redis
from rq import Worker, Queue

logger = logging.getLogger("schoolkpi.worker")


def main():
    app = create_app()
    redis_url = app.config.get('REDIS_URL') or os.environ.get('REDIS_URL', 'redis://localhost:6379/0')
    conn = redis.from_url(redis_url)
    with app.app_context():
        q = Queue('default', connection=conn)
        worker = Worker([q], connection=conn)
        logger.info('RQ worker starting (pid %s)', os.getpid())
        try:
            worker.work(burst=False, with_scheduler=True, logging_level=app.config.get('LOG_LEVEL', 'INFO'))
        finally:
            logger.info('RQ worker exiting (pid %s)', os.getpid())


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    main()
