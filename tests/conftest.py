from datetime import datetime
from typing import Optional

import pytest
import pytz
from fastapi.testclient import TestClient

from nfc_attendance.config import Settings
from nfc_attendance.database import Database
from nfc_attendance.main import create_app
from nfc_attendance.models.subject import Subject
from nfc_attendance.services.device_service import DeviceService

TZ = pytz.timezone("Asia/Taipei")
ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "correct-horse"


def make_settings(**overrides) -> Settings:
    settings = Settings()
    settings.DEBUG = True
    settings.SCAN_MODE = "canteen"
    settings.TIMEZONE = "Asia/Taipei"
    settings.SECRET_KEY = "test-secret-key"
    settings.ALGORITHM = "HS256"
    settings.ADMIN_USERNAME = ADMIN_USERNAME
    settings.ADMIN_PASSWORD = ADMIN_PASSWORD
    settings.DEFAULT_ORDER_CUTOFF = "10:00"
    settings.DEFAULT_PAGE_SIZE = 50
    settings.MAX_PAGE_SIZE = 100
    settings.API_PREFIX = ""
    for key, value in overrides.items():
        setattr(settings, key, value)
    return settings


def local(year, month, day, hour, minute, second=0) -> datetime:
    return TZ.localize(datetime(year, month, day, hour, minute, second))


def as_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands back naive UTC; PostgreSQL hands back aware values."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return pytz.UTC.localize(dt)
    return dt.astimezone(pytz.UTC)


def add_subject(db, external_id: str, name: str = "Alice", group_label: str = "Kitchen", kind: str = "employee") -> Subject:
    subject = Subject(external_id=external_id, name=name, group_label=group_label, kind=kind, email="")
    db.add(subject)
    db.commit()
    db.refresh(subject)
    return subject


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def attendance_settings():
    return make_settings(SCAN_MODE="attendance")


@pytest.fixture
def database():
    database = Database("sqlite://")
    database.create_all()
    yield database
    database.drop_all()
    database.dispose()


@pytest.fixture
def db(database):
    session = database.session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def frozen_now(monkeypatch):
    """Pin the clock used by scan ingestion; returns a setter."""
    import nfc_attendance.services.scan_service as scan_module

    def freeze(moment: datetime):
        monkeypatch.setattr(scan_module, "utc_now", lambda: moment.astimezone(pytz.UTC))

    freeze(local(2026, 3, 2, 9, 30))
    return freeze


def _client(settings, database):
    app = create_app(settings=settings, database=database)
    return TestClient(app)


def _login(client: TestClient) -> TestClient:
    response = client.post("/login", json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD})
    assert response.status_code == 200
    return client


@pytest.fixture
def client(settings, database):
    with _client(settings, database) as test_client:
        yield test_client


@pytest.fixture
def admin_client(settings, database):
    with _client(settings, database) as test_client:
        yield _login(test_client)


@pytest.fixture
def attendance_client(attendance_settings, database):
    with _client(attendance_settings, database) as test_client:
        yield test_client


@pytest.fixture
def attendance_admin_client(attendance_settings, database):
    with _client(attendance_settings, database) as test_client:
        yield _login(test_client)


@pytest.fixture
def device_token(db):
    _, token = DeviceService(db).register_device("Canteen door", "ground floor")
    return token


@pytest.fixture
def auth_headers(device_token):
    return {"Authorization": f"Bearer {device_token}"}
