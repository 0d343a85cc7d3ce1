"""Runs the scheduled club jobs in their own process.

Use this instead of ENABLE_SCHEDULER when the web app runs several workers,
so each job fires once.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from src.leo_portal.leo_portal.jobs.scheduler import build_scheduler
from src.leo_portal.leo_portal.main import create_app

logger = logging.getLogger("leo_portal.worker")


def main() -> None:
    app = create_app(overrides={"ENABLE_SCHEDULER": False})
    container = app.extensions["leo_portal"]["container"]

    scheduler = build_scheduler(app, container, blocking=True)
    for job in scheduler.get_jobs():
        logger.info("Scheduled %s: %s", job.id, job.trigger)

    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        scheduler.shutdown()


if __name__ == "__main__":
    main()
