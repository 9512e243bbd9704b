"""Menu API router.

Owners manage menu sections and their dishes; `/public` serves the active
sections of one owner with unavailable dishes left out.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends

from core.logger import get_logger
from database.deps import get_menu_reader, get_menu_store
from database.menu_store import MenuStore
from schemas.menu_schema import MenuSectionRequest, MenuSectionResponse

logger = get_logger("api.menus")
router = APIRouter(prefix="/api/menus", tags=["menus"])


@router.get("", response_model=List[MenuSectionResponse])
def list_menus(owner_id: Optional[str] = None, store: MenuStore = Depends(get_menu_reader)):
    """Return menu sections, newest first, optionally only those of one owner."""
    return store.list_menus(owner_id=owner_id)


@router.post("", response_model=MenuSectionResponse, status_code=201)
def create_menu(payload: MenuSectionRequest, store: MenuStore = Depends(get_menu_store)):
    return store.save(payload)


@router.get("/public", response_model=List[MenuSectionResponse])
def public_menus(owner_id: Optional[str] = None, store: MenuStore = Depends(get_menu_reader)):
    """Active sections with available dishes only, for guests."""
    menus = store.public_menus(owner_id=owner_id)
    logger.info("Serving %s public menu sections for owner=%s", len(menus), owner_id)
    return menus


@router.get("/{menu_id}", response_model=MenuSectionResponse)
def get_menu(menu_id: str, store: MenuStore = Depends(get_menu_reader)):
    return store.get(menu_id)


@router.put("/{menu_id}", response_model=MenuSectionResponse)
def save_menu(menu_id: str, payload: MenuSectionRequest, store: MenuStore = Depends(get_menu_store)):
    """Create or replace the section with this id; the dish list is replaced in order."""
    return store.save(payload, menu_id=menu_id)


@router.post("/{menu_id}/toggle-active", response_model=MenuSectionResponse)
def toggle_menu_active(menu_id: str, store: MenuStore = Depends(get_menu_store)):
    """Show or hide one section on the public menu.

    Raises:
        NotFoundError: If no section has this id.
    """
    return store.toggle_active(menu_id)


@router.delete("/{menu_id}", status_code=204)
def delete_menu(menu_id: str, store: MenuStore = Depends(get_menu_store)):
    store.delete(menu_id)
