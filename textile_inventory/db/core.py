from sqlmodel import Session, SQLModel, create_engine

from textile_inventory.core.config import settings


connect_args = {}
if settings.database_url.startswith("sqlite"):
    # FastAPI serves sync routes from a thread pool
    connect_args = {"check_same_thread": False}

engine = create_engine(settings.database_url, connect_args=connect_args)


def create_db_and_tables():
    # Importing the schema registers the tables on SQLModel.metadata
    from textile_inventory.db import schema  # noqa: F401

    SQLModel.metadata.create_all(engine)


def get_session():
    with Session(engine) as session:
        yield session
