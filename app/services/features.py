"""Accessibility feature registry."""

from __future__ import annotations

import logging
import re
from typing import Any, Iterable

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from app.core.errors import ValidationError
from app.models.feature import FeatureTag

logger = logging.getLogger(__name__)

# Ordered: flag maps and flag-derived feature lists follow this order.
CANONICAL_FEATURE_LABELS: dict[str, str] = {
    "ramp_access": "Rampa de acesso",
    "elevator": "Elevador",
    "accessible_bathroom": "Banheiro adaptado",
    "reserved_parking": "Vagas especiais",
    "tactile_floor": "Piso tatil",
    "braille_signage": "Sinalizacao em braile",
    "audio_description": "Audio descricao",
    "libras_staff": "Funcionarios treinados em Libras",
    "subtitles": "Legendas / Closed Caption",
    "visual_signage": "Sinalizacao visual",
    "priority_service": "Atendimento prioritario",
    "wheelchair_available": "Cadeira de rodas disponivel",
    "accessible_parking": "Estacionamento acessivel",
}
CANONICAL_FEATURE_KEYS = tuple(CANONICAL_FEATURE_LABELS)

FEATURE_KEY_PATTERN = re.compile(r"^[a-z0-9][a-z0-9_-]{0,63}$")

_INSERT_BY_DIALECT = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def parse_feature_keys(raw: Any) -> list[str]:
    """Split comma-joined / repeated values into unique lowercase keys.

    Anything other than a string or a list of strings yields no keys.
    """
    if not raw:
        return []
    if isinstance(raw, str):
        values = [raw]
    elif isinstance(raw, (list, tuple)):
        values = list(raw)
    else:
        return []
    keys: list[str] = []
    for value in values:
        if not isinstance(value, str):
            continue
        for part in value.split(","):
            key = part.strip().lower()
            if key:
                keys.append(key)
    return list(dict.fromkeys(keys))


def validate_feature_key(key: str) -> str:
    if not FEATURE_KEY_PATTERN.match(key):
        raise ValidationError("invalid_feature_key", f"Caracteristica invalida: {key!r}.")
    return key


def label_for(key: str) -> str:
    """Canonical label, or the key itself for unanticipated keys."""
    return CANONICAL_FEATURE_LABELS.get(key, key)


def build_accessibility_flags(selected_keys: Iterable[str]) -> dict[str, bool]:
    selected = set(selected_keys)
    return {key: key in selected for key in CANONICAL_FEATURE_KEYS}


def upsert_insert(db: Session):
    """Return the dialect ``insert`` construct that supports ON CONFLICT."""
    dialect = db.get_bind().dialect.name
    try:
        return _INSERT_BY_DIALECT[dialect]
    except KeyError as exc:
        raise RuntimeError(f"Dialect {dialect!r} does not support atomic upserts.") from exc


def resolve_or_create(db: Session, key: str) -> FeatureTag:
    """Insert the tag if absent, then fetch it.

    The insert is a single ``ON CONFLICT (key) DO NOTHING`` statement so two
    concurrent submissions introducing the same key cannot collide, and an
    existing label is never overwritten.
    """
    key = validate_feature_key(key.strip().lower())
    insert = upsert_insert(db)
    stmt = (
        insert(FeatureTag)
        .values(key=key, label=label_for(key))
        .on_conflict_do_nothing(index_elements=["key"])
    )
    result = db.execute(stmt)
    if result.rowcount:
        logger.info("Registered new feature tag %r", key)
    return db.execute(select(FeatureTag).where(FeatureTag.key == key)).scalar_one()


def list_features(db: Session) -> list[FeatureTag]:
    """All registered tags ordered by key."""
    return list(db.execute(select(FeatureTag).order_by(FeatureTag.key)).scalars().all())
