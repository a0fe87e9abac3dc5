"""
CLI entrypoint for the expired-session purge. Run from cron, e.g.:

  python -m app.retention

Or hourly: 0 * * * * cd /path/to/wanderlist && .venv/bin/python -m app.retention
"""

import logging
import sys

from app.core.config import get_settings
from app.core.database import SessionLocal
from app.services.sessions import purge_expired_sessions

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main() -> int:
    """Delete sessions whose expiry has passed."""
    settings = get_settings()
    db = SessionLocal()
    try:
        sessions_deleted = purge_expired_sessions(db, settings)
        logger.info("Session purge completed: sessions_deleted=%s", sessions_deleted)
        return 0
    except Exception as e:
        logger.exception("Session purge failed: %s", e)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
