from datetime import datetime, timedelta

import pytest
from sqlalchemy import select

from app.models.place import Place
from app.models.review import Review
from app.models.user import User
from app.services.places import with_list_relations
from app.services.projector import (
    FlagFeatures,
    PlaceAggregate,
    average_rating,
    is_favorite,
    project_features,
    to_detail_view,
    to_list_view,
)

CREATED = datetime(2024, 5, 1, 12, 0, 0)


def _place(**overrides) -> Place:
    fields = dict(
        id=7,
        name="Museu",
        category="museu",
        description="Acervo acessivel",
        address="Rua A, 1 | Centro | Recife - PE | CEP 50010-000",
        postal_code="50010000",
        street="Rua A",
        number="1",
        neighborhood="Centro",
        city="Recife",
        region="PE",
        accessibility_flags={"elevator": True},
        created_at=CREATED,
    )
    fields.update(overrides)
    return Place(**fields)


def _aggregate(**extra) -> PlaceAggregate:
    extra.setdefault("features", FlagFeatures({"elevator": True}))
    return PlaceAggregate(place=_place(), **extra)


@pytest.mark.parametrize(
    "ratings, expected",
    [
        ([], None),
        ([4, 5], 4.5),
        ([1, 1, 2], 1.33),
        ([2, 2, 2, 2, 2, 2, 2, 3], 2.13),
        ([5], 5.0),
    ],
)
def test_average_rating(ratings, expected):
    assert average_rating(ratings) == expected


def test_flag_features_follow_canonical_order_then_unknown_keys():
    features = project_features(
        FlagFeatures({"zzz_custom": True, "elevator": True, "ramp_access": True, "braille_signage": False})
    )
    assert [(f.key, f.label) for f in features] == [
        ("ramp_access", "Rampa de acesso"),
        ("elevator", "Elevador"),
        ("zzz_custom", "zzz_custom"),
    ]


def test_is_favorite_is_false_without_viewer():
    aggregate = _aggregate(favorite_user_ids=(3,))
    assert is_favorite(aggregate, None) is False
    assert is_favorite(aggregate, 3) is True
    assert is_favorite(aggregate, 4) is False


def test_list_view_without_reviews():
    view = to_list_view(_aggregate(), None)
    payload = view.model_dump(by_alias=True)

    assert payload["stats"] == {"reviewCount": 0, "favoriteCount": 0, "averageRating": None}
    assert payload["isFavorite"] is False
    assert payload["formattedPostalCode"] == "50010-000"
    assert payload["accessibilityFlags"] == {"elevator": True}
    assert payload["features"] == [{"key": "elevator", "label": "Elevador"}]


def test_list_view_prefers_precomputed_counts():
    view = to_list_view(_aggregate(ratings=[4, 5], review_count=2, favorite_count=9), None)
    assert view.stats.review_count == 2
    assert view.stats.favorite_count == 9
    assert view.stats.average_rating == 4.5


def test_detail_view_orders_reviews_newest_first_and_redacts_author():
    author = User(id=1, email="ana@example.com", name="Ana", surname="Souza", password_hash="secret")
    older = Review(id=1, rating=2, comment="ok", created_at=CREATED, user=author)
    newer = Review(id=2, rating=5, comment="otimo", created_at=CREATED + timedelta(days=1), user=None)
    same_time = Review(id=3, rating=4, comment=None, created_at=CREATED, user=None)

    view = to_detail_view(_aggregate(reviews=[older, newer, same_time]), None)

    assert [r.id for r in view.reviews] == [2, 3, 1]
    assert view.stats.review_count == 3
    assert view.stats.average_rating == 3.67
    dumped = view.model_dump(by_alias=True)
    assert dumped["reviews"][2]["user"] == {"id": 1, "name": "Ana", "surname": "Souza", "email": "ana@example.com"}
    assert "passwordHash" not in dumped["reviews"][2]["user"]
    assert dumped["reviews"][0]["user"] is None


def test_from_place_falls_back_to_flags_when_join_not_loaded(db, make_place):
    created = make_place(features=["elevator", "quiet_room"])
    db.expunge_all()

    bare = db.get(Place, created.id)
    aggregate = PlaceAggregate.from_place(bare)
    assert isinstance(aggregate.features, FlagFeatures)
    assert [f.key for f in project_features(aggregate.features)] == ["elevator"]

    db.expunge_all()
    loaded = db.execute(with_list_relations(select(Place).where(Place.id == created.id))).scalar_one()
    assert [f.key for f in project_features(PlaceAggregate.from_place(loaded).features)] == ["elevator", "quiet_room"]
