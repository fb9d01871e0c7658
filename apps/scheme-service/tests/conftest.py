import pytest
from sqlalchemy.orm import Session

from scheme_service.db.database import SessionLocal, engine
from scheme_service.db import models


@pytest.fixture(scope="session", autouse=True)
def create_schema_once():
    """Create all tables once per test session (SQLite in-memory resets per process)."""
    models.Base.metadata.create_all(bind=engine)
    yield
    models.Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def clean_data():
    """Clear all tables between tests and restart id sequences."""
    models.Base.metadata.create_all(bind=engine)
    connection = engine.connect()
    trans = connection.begin()
    for table in reversed(models.Base.metadata.sorted_tables):
        connection.execute(table.delete())
    trans.commit()
    connection.close()
    yield


@pytest.fixture
def db_session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def scheme_factory(db_session: Session):
    def _create(scheme_name: str):
        scheme = models.Scheme(scheme_name=scheme_name)
        db_session.add(scheme)
        db_session.commit()
        db_session.refresh(scheme)
        return scheme
    return _create


@pytest.fixture
def step_factory(db_session: Session):
    def _create(scheme, step_number: int, instructions: str):
        step = models.Step(scheme_id=scheme.id, step_number=step_number, instructions=instructions)
        db_session.add(step)
        db_session.commit()
        db_session.refresh(step)
        return step
    return _create
