# backend/tourhub/init_db.py
"""Create every table on the configured database (development and first deploys)."""

import logging

from tourhub.database import Base, engine
import tourhub.models  # noqa: F401  registers every model on Base.metadata

logger = logging.getLogger(__name__)


def init_db() -> None:
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db()
