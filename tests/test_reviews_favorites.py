import pytest

from app.core.errors import NotFoundError, ValidationError
from app.models.favorite import Favorite
from app.services.favorites import add_favorite, remove_favorite
from app.services.reviews import add_review, parse_rating


@pytest.fixture()
def place(make_place):
    return make_place()


@pytest.fixture()
def user(make_user):
    return make_user()


@pytest.mark.parametrize("raw, expected", [(1, 1), (5, 5), ("4.7", 4), (3.2, 3)])
def test_parse_rating_truncates(raw, expected):
    assert parse_rating(raw) == expected


@pytest.mark.parametrize("raw", [None, "", "abc", 0, 0.99, 5.01, 6, "nan"])
def test_parse_rating_rejects_out_of_range(raw):
    with pytest.raises(ValidationError) as exc_info:
        parse_rating(raw)
    assert exc_info.value.code == "invalid_rating"


def test_add_review_requires_existing_place(db, user):
    with pytest.raises(NotFoundError):
        add_review(db, 999, user.id, 5)


def test_add_review_blank_comment_is_none(db, place, user):
    review = add_review(db, place.id, user.id, 4, "   ")
    assert review.comment is None
    assert review.user.name == "Ana"


def test_favorite_is_idempotent(db, place, user):
    add_favorite(db, place.id, user.id)
    add_favorite(db, place.id, user.id)

    assert db.query(Favorite).count() == 1


def test_remove_missing_favorite_is_not_an_error(db, place, user):
    remove_favorite(db, place.id, user.id)
    assert db.query(Favorite).count() == 0


def test_favorite_missing_place(db, user):
    with pytest.raises(NotFoundError):
        add_favorite(db, 999, user.id)


def test_review_endpoints(client, place, make_user, auth_headers):
    ana = make_user()
    bia = make_user(name="Bia", surname="Lima")
    url = f"/api/v1/places/{place.id}/reviews"

    assert client.post(url, json={"rating": 4, "comment": "Rampa boa"}).status_code == 401
    assert client.post(url, json={"rating": 4, "comment": "Rampa boa"}, headers=auth_headers(ana)).status_code == 201
    second = client.post(url, json={"rating": "5"}, headers=auth_headers(bia))
    assert second.status_code == 201
    assert second.json()["rating"] == 5

    reviews = client.get(url).json()
    assert [r["user"]["name"] for r in reviews] == ["Bia", "Ana"]
    assert "passwordHash" not in reviews[0]["user"]

    detail = client.get(f"/api/v1/places/{place.id}").json()
    assert detail["stats"]["reviewCount"] == 2
    assert detail["stats"]["averageRating"] == 4.5
    assert [r["rating"] for r in detail["reviews"]] == [5, 4]


def test_review_endpoint_validation(client, place, user, auth_headers):
    url = f"/api/v1/places/{place.id}/reviews"

    response = client.post(url, json={"rating": 7}, headers=auth_headers(user))

    assert response.status_code == 400
    assert response.json()["code"] == "invalid_rating"
    assert client.get("/api/v1/places/999/reviews").status_code == 404


def test_favorite_endpoints(client, place, user, auth_headers):
    url = f"/api/v1/places/{place.id}/favorites"
    headers = auth_headers(user)

    assert client.post(url).status_code == 401
    first = client.post(url, headers=headers)
    assert first.status_code == 201
    assert first.json() == {"ok": True}
    assert client.post(url, headers=headers).status_code == 201

    signed_in = client.get(f"/api/v1/places/{place.id}", headers=headers).json()
    assert signed_in["isFavorite"] is True
    assert signed_in["stats"]["favoriteCount"] == 1
    assert client.get(f"/api/v1/places/{place.id}").json()["isFavorite"] is False

    assert client.delete(url, headers=headers).status_code == 204
    assert client.delete(url, headers=headers).status_code == 204
    assert client.get(f"/api/v1/places/{place.id}", headers=headers).json()["isFavorite"] is False
    assert client.post("/api/v1/places/999/favorites", headers=headers).status_code == 404
