import pytest
from jose import jwt

from app.core.config import settings
from app.core.security import decode_user_id

PLACES = "/api/v1/places"


def _token(claims: dict, secret: str | None = None) -> str:
    return jwt.encode(claims, secret or settings.jwt_secret, algorithm=settings.jwt_algorithm)


@pytest.mark.parametrize("subject, expected", [(42, 42), ("42", 42)])
def test_decode_user_id_accepts_numeric_and_string_subjects(subject, expected):
    assert decode_user_id(_token({"sub": subject, "email": "ana@example.com"})) == expected


@pytest.mark.parametrize("claims", [{"sub": True}, {"sub": "abc"}, {"email": "ana@example.com"}, {"sub": None}])
def test_decode_user_id_rejects_unusable_subjects(claims):
    assert decode_user_id(_token(claims)) is None


def test_decode_user_id_rejects_foreign_signature():
    assert decode_user_id(_token({"sub": 1}, secret="other-secret")) is None
    assert decode_user_id("not-a-jwt") is None


def test_numeric_subject_token_authenticates_writes_and_reads(client, make_user, place_payload):
    user = make_user()
    headers = {"Authorization": f"Bearer {_token({'sub': user.id, 'email': user.email})}"}

    created = client.post(PLACES, json=place_payload(), headers=headers)
    assert created.status_code == 201
    place_id = created.json()["id"]

    assert client.post(f"{PLACES}/{place_id}/favorites", headers=headers).status_code == 201
    assert client.get(f"{PLACES}/{place_id}", headers=headers).json()["isFavorite"] is True


def test_unauthenticated_write_uses_error_body(client, place_payload):
    response = client.post(PLACES, json=place_payload())

    assert response.status_code == 401
    assert response.json() == {"error": "Autenticacao necessaria."}


def test_unknown_route_uses_error_body(client):
    response = client.get("/api/v1/nowhere")

    assert response.status_code == 404
    assert "error" in response.json()
