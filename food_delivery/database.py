import logging
from collections.abc import Generator

from fastapi import Request
from sqlalchemy import func
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine, select

from .config import Settings
from .models import MenuItem, Restaurant
from .seed_data import SAMPLE_MENU_ITEMS, SAMPLE_RESTAURANTS

logger = logging.getLogger(__name__)


def build_engine(settings: Settings) -> Engine:
    engine_url = settings.sqlalchemy_url
    engine_kwargs = {"pool_pre_ping": True}
    if engine_url.startswith("sqlite"):
        engine_kwargs["connect_args"] = {"check_same_thread": False}
    else:
        # Requests beyond the pool size wait for a free connection.
        engine_kwargs["pool_size"] = settings.db_pool_size
        engine_kwargs["max_overflow"] = 0
        engine_kwargs["pool_timeout"] = settings.db_pool_timeout
    return create_engine(engine_url, echo=False, **engine_kwargs)


def init_db(engine: Engine) -> None:
    SQLModel.metadata.create_all(engine)


def seed_sample_data(session: Session) -> bool:
    """Insert the sample catalog unless restaurants already exist."""
    existing_count = session.exec(select(func.count()).select_from(Restaurant)).one()
    if existing_count:
        logger.info("Catalog already has %s restaurants, skipping seed", existing_count)
        return False
    session.add_all(Restaurant(**row) for row in SAMPLE_RESTAURANTS)
    session.flush()
    session.add_all(MenuItem(**row) for row in SAMPLE_MENU_ITEMS)
    session.commit()
    logger.info(
        "Seeded %s restaurants and %s menu items",
        len(SAMPLE_RESTAURANTS),
        len(SAMPLE_MENU_ITEMS),
    )
    return True


def get_session(request: Request) -> Generator[Session, None, None]:
    with Session(request.app.state.engine) as session:
        yield session
