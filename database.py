from __future__ import annotations
import logging
from pathlib import Path
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger("database")

def make_engine(db_path: Path | str, echo: bool = False):
    if str(db_path) == ":memory:":
        # One shared connection, otherwise every session sees an empty DB
        engine = create_engine(
            "sqlite://",
            future=True, echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        # SQLite DB file; check_same_thread=False so Qt/worker threads won't choke.
        engine = create_engine(
            f"sqlite:///{db_path}",
            future=True, echo=echo,
            connect_args={"check_same_thread": False}
        )

    # SQLite ignores FOREIGN KEY clauses unless asked per connection
    @event.listens_for(engine, "connect")
    def _fk_on(dbapi_conn, _record):
        cur = dbapi_conn.cursor()
        cur.execute("PRAGMA foreign_keys=ON")
        cur.close()

    return engine

def make_session_factory(engine):
    # expire_on_commit=False keeps objects usable after commit
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False, future=True)

def init_db(engine, Base):
    Base.metadata.create_all(engine)
    logger.info("Database initialized (%s)", engine.url)
