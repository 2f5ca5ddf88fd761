import pytest

from hotel_portal.db.database import Database, DatabaseConfig
from hotel_portal.status import Status


@pytest.fixture
def db(tmp_path):
    database = Database(DatabaseConfig(url=f"sqlite:///{tmp_path / 'portal.db'}"))
    assert database.setup_tables() is Status.OK
    yield database
    database.dispose()
