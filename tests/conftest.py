import os

os.environ.setdefault("LIBRARY_DB", "sqlite://")

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from library_app.core.database import Base
from library_app.core.store import MemoryEntityStore
from library_app.schemas.schemas import BookCreate, MemberCreate
from library_app.services.catalog import Catalog
from library_app.services.circulation import CirculationEngine


class FixedClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock():
    return FixedClock(datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def store():
    return MemoryEntityStore()


@pytest.fixture
def catalog(store, clock):
    return Catalog(store, clock=clock)


@pytest.fixture
def engine(store, clock):
    return CirculationEngine(store, clock=clock)


@pytest.fixture
def book(catalog):
    return catalog.add_book(BookCreate(title="Tafsir Injil Matius", author="Matthew Henry",
                                       isbn="978-9876543210", stock=1))


@pytest.fixture
def member(catalog):
    return catalog.register_member(MemberCreate(id="MHS2023001", name="Yohanes Papare",
                                                email="yohanes@stt.ac.id"))


@pytest.fixture
def db_session():
    sql_engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(sql_engine)
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=sql_engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(sql_engine)
