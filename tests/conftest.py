import base64
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app import models  # noqa: F401
from app.core.config import settings
from app.db.base import Base
from app.db.session import get_db
from app.main import app
from app.models.user import User
from app.schemas.place import PlaceCreate
from app.services.photos import get_photo_storage
from app.services.places import create_place
from utils.photo_storage import LocalPhotoStorage


def photo_data_url(size: int = 32, mime: str = "image/png") -> str:
    encoded = base64.b64encode(b"\x89PNG" + b"\x00" * max(size - 4, 0)).decode("ascii")
    return f"data:{mime};base64,{encoded}"


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def db(engine):
    session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)()
    yield session
    session.close()


@pytest.fixture()
def storage(tmp_path):
    return LocalPhotoStorage(tmp_path / "uploads")


@pytest.fixture()
def client(db, storage):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_photo_storage] = lambda: storage
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def make_user(db):
    counter = {"n": 0}

    def _make_user(name: str = "Ana", surname: str = "Souza") -> User:
        counter["n"] += 1
        user = User(
            email=f"user{counter['n']}@example.com",
            name=name,
            surname=surname,
            password_hash="hashed",
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture()
def auth_headers():
    def _auth_headers(user: User) -> dict[str, str]:
        token = jwt.encode({"sub": str(user.id)}, settings.jwt_secret, algorithm=settings.jwt_algorithm)
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers


@pytest.fixture()
def place_payload():
    def _place_payload(**overrides) -> dict:
        payload = {
            "name": "Biblioteca Central",
            "category": "biblioteca",
            "description": "Acervo com rampa e elevador",
            "postalCode": "01001-000",
            "street": "Praca da Se",
            "number": "100",
            "neighborhood": "Se",
            "city": "Sao Paulo",
            "region": "sp",
            "features": ["ramp_access"],
            "photos": [photo_data_url()],
        }
        payload.update(overrides)
        return payload

    return _place_payload


@pytest.fixture()
def make_place(db, storage, place_payload):
    """Create a place through the service layer and return its list view."""

    def _make_place(owner_id=None, **overrides):
        return create_place(db, PlaceCreate.model_validate(place_payload(**overrides)), storage, owner_id=owner_id)

    return _make_place
