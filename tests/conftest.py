import os
import tempfile
from datetime import date, timedelta

_tmp_dir = tempfile.mkdtemp(prefix="barberbook-tests-")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LOG_FILE"] = os.path.join(_tmp_dir, "test.log")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.pop("RESEND_API_KEY", None)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from barberbook.database import Base, get_db
from barberbook.main import app
from barberbook.utils.storage import BlobStorage, get_storage

PASSWORD = "password123"
BUCKET = "barberbook-test"
CDN_URL = "https://cdn.barberbook.test"

SHOP = {
    "shop_name": "Fade Factory",
    "address": "12 King St, Newtown",
    "latitude": -33.8970,
    "longitude": 151.1790,
    "contact": "+61 400 000 000",
    "open_time": "09:00",
    "close_time": "18:00",
}


@pytest.fixture()
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


class InMemoryS3:
    """Stands in for the boto3 S3 client; keeps objects keyed by (bucket, key)"""

    def __init__(self):
        self.objects = {}

    def put_object(self, Bucket, Key, Body, **kwargs):
        self.objects[(Bucket, Key)] = {"Body": Body, **kwargs}
        return {"ETag": "test"}

    def delete_object(self, Bucket, Key):
        self.objects.pop((Bucket, Key), None)
        return {}


def blob_key(url):
    assert url.startswith(f"{CDN_URL}/"), url
    return (BUCKET, url[len(CDN_URL) + 1:])


@pytest.fixture()
def s3():
    return InMemoryS3()


@pytest.fixture()
def client(db_session, s3):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: BlobStorage(client=s3, bucket=BUCKET, public_base_url=CDN_URL)
    yield TestClient(app)
    app.dependency_overrides.clear()


def register_and_login(client, email, role="customer", name="Test User"):
    response = client.post(
        "/api/auth/register",
        json={"email": email, "name": name, "password": PASSWORD, "role": role, "phone": "0400000000"},
    )
    assert response.status_code == 201, response.text
    login = client.post("/api/auth/login", json={"email": email, "password": PASSWORD})
    assert login.status_code == 200, login.text
    return login.json()


def auth_headers(tokens):
    return {"Authorization": f"Bearer {tokens['access_token']}"}


def create_barber(client, email, **profile):
    """Register a barber, save a shop profile and return (headers, barber_id)"""
    tokens = register_and_login(client, email, role="barber", name="Barber")
    headers = auth_headers(tokens)
    response = client.put("/api/barbers/me", json={**SHOP, **profile}, headers=headers)
    assert response.status_code == 200, response.text
    return headers, response.json()["id"]


def create_service(client, headers, name="Skin Fade", price=30, duration_minutes=45, description=""):
    response = client.post(
        "/api/services",
        json={"name": name, "description": description, "price": price, "duration_minutes": duration_minutes},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture()
def customer_headers(client):
    return auth_headers(register_and_login(client, "customer@barberbook.io", name="Casey Customer"))


@pytest.fixture()
def barber(client):
    return create_barber(client, "barber@barberbook.io")


@pytest.fixture()
def tomorrow():
    return date.today() + timedelta(days=1)
