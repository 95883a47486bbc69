import logging

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from laudovet.config import settings
from laudovet.config_store import get_config_store
from laudovet.models import Base

logger = logging.getLogger(__name__)

engine = create_engine(
    settings.sqlite_url,
    connect_args={"check_same_thread": False},
    echo=False,
    pool_pre_ping=True,
)

SessionLocal = sessionmaker(bind=engine, expire_on_commit=False)


@event.listens_for(engine, "connect")
def _set_sqlite_pragma(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.execute("PRAGMA busy_timeout=30000")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def init_db():
    settings.sqlite_db_path.parent.mkdir(parents=True, exist_ok=True)
    Base.metadata.create_all(engine)

    # Seed clinic settings and canned templates on first run
    get_config_store().seed_defaults()

    from laudovet.storage import get_record_store
    get_record_store().seed_default_templates()

    logger.info("Database initialized at %s", settings.sqlite_db_path)

