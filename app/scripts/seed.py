"""
Load sample destinations for local development. Run from project root:
  python -m app.scripts.seed OWNER_USERNAME [--count 20] [--reset]

Every record is owned by OWNER_USERNAME, which must already exist.
--reset deletes all existing destinations first.
"""
import argparse
import logging
import sys
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from app.core.database import SessionLocal
from app.models import Destination
from app.services.identity import get_user_by_username

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

CATEGORIES = ("Europe", "Asia", "America")


def sample_destinations(owner_id: int, count: int) -> list[Destination]:
    """Build count sample records; categories cycle and ratings stay within 1-5."""
    now = datetime.now(timezone.utc)
    return [
        Destination(
            owner_id=owner_id,
            name=f"Destination {i}",
            category=CATEGORIES[i % len(CATEGORIES)],
            description=f"Description for destination {i}",
            image_url=f"https://example.com/img{i}.jpg",
            location=f"Location {i}",
            price=float(i * 100),
            rating=float((i % 5) + 1),
            activities=[f"Activity1-{i}", f"Activity2-{i}"],
            created_at=now,
        )
        for i in range(1, count + 1)
    ]


def seed(db: Session, owner_username: str, count: int, reset: bool = False) -> int:
    """Insert sample destinations owned by owner_username; returns the number inserted."""
    owner = get_user_by_username(db, owner_username)
    if owner is None:
        raise LookupError(f"User '{owner_username}' does not exist")
    if reset:
        deleted = db.query(Destination).delete(synchronize_session=False)
        logger.info("Deleted %s existing destinations", deleted)
    records = sample_destinations(owner.id, count)
    db.add_all(records)
    db.commit()
    return len(records)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Seed sample destinations.")
    parser.add_argument("owner", help="Username that will own the records")
    parser.add_argument("--count", type=int, default=20, help="Number of records (default 20)")
    parser.add_argument("--reset", action="store_true", help="Delete existing destinations first")
    args = parser.parse_args(argv)

    if args.count < 1:
        print("--count must be at least 1.", file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        inserted = seed(db, args.owner.strip(), args.count, reset=args.reset)
    except LookupError as e:
        print(str(e), file=sys.stderr)
        return 1
    finally:
        db.close()
    logger.info("Seeded %s destinations for %s", inserted, args.owner)
    return 0


if __name__ == "__main__":
    sys.exit(main())
