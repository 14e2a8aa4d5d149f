# cocktailbot/db/init_db.py

import logging

from cocktailbot.db.session import Base, SessionLocal, engine
from cocktailbot.db import models  # noqa: F401  # import registers the tables on Base.metadata
from cocktailbot.services import seed_service

logger = logging.getLogger(__name__)


def init() -> None:
    logger.info("creating tables...")
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        seed_service.seed_defaults(db)
    finally:
        db.close()
    logger.info("done.")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init()
