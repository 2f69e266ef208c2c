import logging
from collections.abc import Generator

from fastapi import Header
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import ConflictError
from app.db.session import SessionLocal

logger = logging.getLogger(__name__)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_actor(x_actor: str | None = Header(default=None, max_length=200)) -> str | None:
    return x_actor.strip() if x_actor and x_actor.strip() else None


def commit_or_conflict(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("Commit rejected by a database constraint: %s", exc.orig)
        raise ConflictError(
            "The change conflicts with an existing record",
            details={"constraint": str(exc.orig)},
        ) from exc
