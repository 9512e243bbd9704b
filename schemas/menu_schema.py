"""Schemas for menu sections and their dishes.

Menu sections keep their dishes in order. `MenuSectionResponse.from_storage`
is the one place that accepts the legacy document shape: camelCase keys
(`ownerId`, `isActive`, `isAvailable`, `createdAt`, `updatedAt`), prices and
flags stored as strings, and dishes keyed by id instead of listed.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator

from core.exceptions import MalformedRecordError
from core.logger import get_logger
from schemas.feedback_schema import as_utc

logger = get_logger("schemas.menu_schema")

DEFAULT_MENU_TITLE = "Untitled Menu"

# legacy camelCase spellings accepted on read, never written
_LEGACY_KEYS = {
    "owner_id": "ownerId",
    "is_active": "isActive",
    "is_available": "isAvailable",
    "created_at": "createdAt",
    "updated_at": "updatedAt",
}


def _pick(data: Mapping[str, Any], key: str) -> Any:
    value = data.get(key)
    if value is None and key in _LEGACY_KEYS:
        value = data.get(_LEGACY_KEYS[key])
    return value


def _as_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() == "true"


def _as_price(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).strip())
    except ValueError:
        return 0.0


def _as_timestamp(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return as_utc(value)
    if not value:
        return None
    try:
        return as_utc(datetime.fromisoformat(str(value).replace("Z", "+00:00")))
    except ValueError:
        return None


class MenuDish(BaseModel):
    """One dish of a menu section."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex, min_length=1)
    name: str = Field(..., min_length=1, examples=["Tomato soup"])
    description: str = Field("", examples=["With basil and croutons"])
    price: float = Field(0.0, ge=0, examples=[6.5])
    is_available: bool = True
    created_at: Optional[datetime] = None

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("dish name must not be blank")
        return value

    @classmethod
    def from_storage(cls, data: Mapping[str, Any]) -> "MenuDish":
        """Build a dish from stored data, accepting legacy spellings.

        Raises:
            pydantic.ValidationError: If the dish has no id or name.
        """
        return cls(
            id=str(data.get("id") or ""),
            name=str(data.get("name") or ""),
            description=str(data.get("description") or ""),
            price=_as_price(data.get("price")),
            is_available=_as_bool(_pick(data, "is_available"), True),
            created_at=_as_timestamp(_pick(data, "created_at")),
        )


def dishes_from_storage(raw: Any) -> List[MenuDish]:
    """Decode stored dishes, either listed or keyed by dish id.

    A keyed dish without its own id takes the key. Dishes that do not
    validate are logged and skipped.
    """
    if isinstance(raw, Mapping):
        items = []
        for key, value in raw.items():
            if isinstance(value, Mapping):
                item = dict(value)
                if not item.get("id"):
                    item["id"] = str(key)
                items.append(item)
    elif isinstance(raw, list):
        items = [item for item in raw if isinstance(item, Mapping)]
    else:
        items = []

    dishes = []
    for item in items:
        try:
            dishes.append(MenuDish.from_storage(item))
        except PydanticValidationError as exc:
            logger.warning("Skipping invalid dish %s: %s", item.get("id"), exc.errors()[0]["msg"])
    return dishes


class MenuSectionRequest(BaseModel):
    """Payload for creating or replacing a menu section, dishes included."""

    title: str = Field(DEFAULT_MENU_TITLE, examples=["Starters"])
    description: str = ""
    is_active: bool = False
    owner_id: Optional[str] = Field(None, examples=["cafe-42"])
    dishes: List[MenuDish] = Field(default_factory=list)

    @field_validator("title")
    @classmethod
    def _default_title(cls, value: str) -> str:
        return value.strip() or DEFAULT_MENU_TITLE


class MenuSectionResponse(BaseModel):
    """Stored menu section returned by the API."""

    id: str = Field(..., min_length=1)
    title: str
    description: str = ""
    dishes: List[MenuDish]
    is_active: bool
    owner_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_storage(cls, data: Mapping[str, Any]) -> "MenuSectionResponse":
        """Build a section from stored data.

        Missing timestamps default to now, `updated_at` to `created_at`.

        Raises:
            MalformedRecordError: If the section has no id.
        """
        raw_id = data.get("id")
        section_id = str(raw_id) if raw_id not in (None, "") else ""
        owner_id = _pick(data, "owner_id")
        created_at = _as_timestamp(_pick(data, "created_at")) or datetime.now(timezone.utc)
        try:
            return cls(
                id=section_id,
                title=str(data.get("title") or DEFAULT_MENU_TITLE),
                description=str(data.get("description") or ""),
                dishes=dishes_from_storage(data.get("dishes")),
                is_active=_as_bool(_pick(data, "is_active"), False),
                owner_id=str(owner_id) if owner_id is not None else None,
                created_at=created_at,
                updated_at=_as_timestamp(_pick(data, "updated_at")) or created_at,
            )
        except PydanticValidationError as exc:
            error = exc.errors()[0]
            field = ".".join(str(loc) for loc in error["loc"])
            raise MalformedRecordError(
                f"Malformed menu section: {field}: {error['msg']}",
                record_id=section_id or None,
                field=field,
            )

    def public_view(self) -> "MenuSectionResponse":
        """The section as guests see it: available dishes only."""
        return self.model_copy(update={"dishes": [d for d in self.dishes if d.is_available]})
