"""Menu section persistence.

Dishes are stored as JSON text on the section row, in display order.
Sections that cannot be decoded are logged and skipped when listing.
"""

import json
from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from core.exceptions import MalformedRecordError
from core.logger import get_logger
from core.repository import BaseRepository
from database import models
from schemas.feedback_schema import as_utc
from schemas.menu_schema import MenuDish, MenuSectionRequest, MenuSectionResponse

logger = get_logger("database.menu_store")


def menu_from_row(row: models.MenuSection) -> MenuSectionResponse:
    """Decode an ORM row into a `MenuSectionResponse`.

    Raises:
        MalformedRecordError: If the row does not hold a valid section.
    """
    try:
        dishes = json.loads(row.dishes or "[]")
    except ValueError:
        logger.warning("Menu %s has unreadable dishes, treating as empty", row.id)
        dishes = []
    return MenuSectionResponse.from_storage({
        "id": row.id,
        "title": row.title,
        "description": row.description,
        "dishes": dishes,
        "is_active": row.is_active,
        "owner_id": row.owner_id,
        "created_at": row.created_at,
        "updated_at": row.updated_at,
    })


def _decodable(rows: Iterable[models.MenuSection]) -> List[MenuSectionResponse]:
    menus = []
    for row in rows:
        try:
            menus.append(menu_from_row(row))
        except MalformedRecordError as exc:
            logger.warning("Skipping malformed menu %s: %s", row.id, exc.message)
    return menus


def _dump_dishes(dishes: List[MenuDish]) -> str:
    return json.dumps([d.model_dump(mode="json") for d in dishes])


def _storage_time(value: datetime) -> datetime:
    return as_utc(value).replace(tzinfo=None)


class MenuStore(BaseRepository[models.MenuSection]):
    """Menu sections. An owner may have several active sections at once."""

    resource = "Menu"

    def __init__(self, session: Session):
        super().__init__(models.MenuSection, session)

    def list_menus(self, owner_id: Optional[str] = None, active_only: bool = False) -> List[MenuSectionResponse]:
        """Return sections newest first, optionally one owner's or only active ones."""
        query = self.session.query(models.MenuSection)
        if owner_id is not None:
            query = query.filter(models.MenuSection.owner_id == owner_id)
        if active_only:
            query = query.filter(models.MenuSection.is_active.is_(True))
        return _decodable(query.order_by(models.MenuSection.created_at.desc()).all())

    def public_menus(self, owner_id: Optional[str] = None) -> List[MenuSectionResponse]:
        """Active sections with their available dishes, as guests see them."""
        return [menu.public_view() for menu in self.list_menus(owner_id=owner_id, active_only=True)]

    def get(self, menu_id: str) -> MenuSectionResponse:
        return menu_from_row(self.get_or_404(menu_id))

    def save(self, payload: MenuSectionRequest, menu_id: Optional[str] = None) -> MenuSectionResponse:
        """Create a section, or replace the one with `menu_id` including its dishes."""
        row = self.get_by_id(menu_id) if menu_id else None
        if row is None:
            row = models.MenuSection(id=menu_id or models.new_id())
            self.session.add(row)

        row.title = payload.title
        row.description = payload.description
        row.dishes = _dump_dishes(payload.dishes)
        row.is_active = payload.is_active
        row.owner_id = payload.owner_id
        row.updated_at = models.utcnow()

        row = self.update(row)
        logger.info("Menu %s saved (%s dishes)", row.id, len(payload.dishes))
        return menu_from_row(row)

    def delete(self, menu_id: str) -> None:
        self.delete_by_id(menu_id)
        logger.info("Menu %s deleted", menu_id)

    def toggle_active(self, menu_id: str) -> MenuSectionResponse:
        """Flip the active flag of one section; other sections are unaffected.

        Raises:
            NotFoundError: If no section has this id.
        """
        row = self.get_or_404(menu_id)
        row.is_active = not row.is_active
        row.updated_at = models.utcnow()
        row = self.update(row)
        logger.info("Menu %s is_active=%s", row.id, row.is_active)
        return menu_from_row(row)

    def import_section(self, section: MenuSectionResponse) -> bool:
        """Insert an already-decoded section unless its id is taken.

        Returns:
            True if the section was added.
        """
        if self.get_by_id(section.id) is not None:
            return False
        self.create(models.MenuSection(
            id=section.id,
            title=section.title,
            description=section.description,
            dishes=_dump_dishes(section.dishes),
            is_active=section.is_active,
            owner_id=section.owner_id,
            created_at=_storage_time(section.created_at),
            updated_at=_storage_time(section.updated_at),
        ))
        return True
