"""Import menu sections from a JSON export of the older app.

The export is either an object keyed by menu id or a list of menu documents
carrying their own `id`. Documents use camelCase keys and may key their
dishes by dish id; `MenuSectionResponse.from_storage` decodes both shapes.
Sections already present (by id) are left untouched, so the import can be
rerun safely.
"""
from __future__ import annotations

import json
from typing import List

from core.exceptions import MalformedRecordError
from core.logger import get_logger
from database.database import WriteSessionLocal
from database.menu_store import MenuStore
from schemas.menu_schema import MenuSectionResponse

logger = get_logger("data.import_menus")


def load_menu_export(json_path: str) -> List[MenuSectionResponse]:
    """Parse a menu export into decoded sections; malformed ones are skipped."""
    logger.info("Reading menu export: %s", json_path)
    with open(json_path, encoding="utf-8") as fh:
        raw = json.load(fh)

    if isinstance(raw, dict):
        documents = []
        for menu_id, document in raw.items():
            if isinstance(document, dict):
                documents.append({**document, "id": document.get("id") or menu_id})
    elif isinstance(raw, list):
        documents = [d for d in raw if isinstance(d, dict)]
    else:
        documents = []

    sections = []
    for document in documents:
        try:
            sections.append(MenuSectionResponse.from_storage(document))
        except MalformedRecordError as exc:
            logger.warning("Skipping menu document: %s", exc.message)
    logger.info("Decoded %s menu sections", len(sections))
    return sections


def import_menus_from_json(json_path: str, session=None) -> int:
    """Idempotently import menu sections from a JSON export.

    Args:
        json_path: Path to the export file.
        session: Optional SQLAlchemy session. If None, creates a new one.

    Returns:
        Number of sections added.
    """
    close_session = False
    if session is None:
        session = WriteSessionLocal()
        close_session = True
    try:
        store = MenuStore(session)
        added = sum(1 for section in load_menu_export(json_path) if store.import_section(section))
        logger.info("Imported %s new menu sections into DB", added)
        return added
    finally:
        if close_session:
            session.close()


if __name__ == "__main__":
    import argparse

    p = argparse.ArgumentParser("Import menu sections from a JSON export into the DB")
    p.add_argument("json_path", nargs="?", default="data/fixtures/menu_export.json")
    args = p.parse_args()
    import_menus_from_json(args.json_path)
    print("Done")
