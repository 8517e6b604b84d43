import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from app.core.config import Settings
from app.database.connection import Base, create_db_engine, create_session_factory, get_db
from app.main import create_app
from app.models.product import Product  # noqa: F401


@pytest.fixture(scope="session")
def engine():
    # one shared in-memory database for the whole run
    settings = Settings(_env_file=None, DATABASE_URL="sqlite:///:memory:")
    engine = create_db_engine(settings, poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def db(engine):
    """Session joined to an outer transaction that is rolled back after the test."""
    connection = engine.connect()
    trans = connection.begin()
    session = create_session_factory(connection)()
    try:
        yield session
    finally:
        session.close()
        trans.rollback()
        connection.close()


@pytest.fixture()
def client(db):
    app = create_app(Settings(_env_file=None))
    app.dependency_overrides[get_db] = lambda: db
    return TestClient(app, raise_server_exceptions=False)
