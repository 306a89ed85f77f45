"""Initialize database tables."""
from sqlmodel import SQLModel
import logging

from recurrence_engine.models.recurrence_rule import RecurrenceRuleRecord  # noqa: F401
from recurrence_engine.models.event import Event  # noqa: F401
from recurrence_engine.models.event_exception import EventException  # noqa: F401
from recurrence_engine.db.config import engine

logger = logging.getLogger(__name__)


def init_db(target_engine=None):
    """Create all tables in the database."""
    logger.info("[DB INIT] Creating all tables...")
    SQLModel.metadata.create_all(target_engine or engine)
    logger.info("[DB INIT] Tables created successfully.")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db()
