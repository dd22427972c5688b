"""
Process startup and teardown
"""
import logging

from sqlalchemy.orm import Session

from app.config import get_settings
from app.infrastructure.db.models import User
from app.infrastructure.db.session import check_db_connection, dispose_engine, get_db, init_db

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    settings = get_settings()
    level = logging.DEBUG if settings.DEBUG else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def seed_default_user(db: Session) -> User:
    """Insert the fixed identity unless it already exists."""
    settings = get_settings()
    user = db.query(User).filter(User.id == settings.DEFAULT_USER_ID).first()
    if user is not None:
        return user

    user = User(
        id=settings.DEFAULT_USER_ID,
        name=settings.DEFAULT_USER_NAME,
        email=settings.DEFAULT_USER_EMAIL,
    )
    db.add(user)
    db.commit()
    logger.info("Seeded default user %s", user.id)
    return user


def bootstrap() -> None:
    """Configure logging, create tables, seed the default user."""
    configure_logging()
    check_db_connection()
    init_db()
    for db in get_db():
        seed_default_user(db)


def shutdown() -> None:
    dispose_engine()
