from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import sessionmaker, Session

from teamboard.config.settings import settings

Base = declarative_base()


def build_engine(database_url: str, **kwargs) -> Engine:
    """Create an engine for the given URL with driver-specific connect args"""
    connect_args = kwargs.pop("connect_args", {})
    url = database_url.lower()

    if url.startswith("sqlite"):
        connect_args.setdefault("check_same_thread", False)
    elif url.startswith("postgres") and settings.DATABASE_SSLMODE:
        # Hosted PostgreSQL (Render, Railway, ...) requires sslmode
        connect_args.setdefault("sslmode", settings.DATABASE_SSLMODE)

    engine = create_engine(database_url, connect_args=connect_args, pool_pre_ping=True, **kwargs)

    if url.startswith("sqlite"):
        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


engine = build_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# Wherever a DB session is needed, depend on this; the session goes back to the pool on every exit path
def get_db():
    db: Session = SessionLocal()
    try:
        yield db
    finally:
        db.close()
