"""Tests for menu sections: endpoints, legacy decoding and JSON import."""
import json
import uuid
from datetime import datetime, timezone
from pathlib import Path

import pytest

from core.exceptions import MalformedRecordError
from data.import_menus import import_menus_from_json, load_menu_export
from database import models
from schemas.menu_schema import MenuSectionResponse

FIXTURE = str(Path(__file__).resolve().parents[1] / "data" / "fixtures" / "menu_export.json")


@pytest.fixture
def owner():
    return f"menu-owner-{uuid.uuid4().hex[:8]}"


def _menu(owner, title="Starters", active=False):
    return {
        "title": title,
        "description": "Small plates",
        "is_active": active,
        "owner_id": owner,
        "dishes": [
            {"name": "Tomato soup", "price": 6.5},
            {"name": "Garlic bread", "price": 4, "is_available": False},
        ],
    }


def test_create_and_get_menu(client, owner):
    res = client.post("/api/menus", json=_menu(owner))
    assert res.status_code == 201
    menu = res.json()
    assert [d["name"] for d in menu["dishes"]] == ["Tomato soup", "Garlic bread"]
    assert all(d["id"] for d in menu["dishes"])
    assert menu["is_active"] is False

    fetched = client.get(f"/api/menus/{menu['id']}").json()
    assert fetched["dishes"] == menu["dishes"]


def test_blank_title_defaults(client, owner):
    menu = client.post("/api/menus", json={"title": " ", "owner_id": owner}).json()
    assert menu["title"] == "Untitled Menu"
    assert menu["dishes"] == []


@pytest.mark.parametrize("dish", [
    {"name": "", "price": 1},
    {"name": "Soup", "price": -1},
])
def test_invalid_dishes_are_rejected(client, owner, dish):
    res = client.post("/api/menus", json={"title": "X", "owner_id": owner, "dishes": [dish]})
    assert res.status_code == 422


def test_put_replaces_dishes_in_order(client, owner):
    menu = client.post("/api/menus", json=_menu(owner)).json()
    payload = _menu(owner, title="Mains")
    payload["dishes"] = [{"id": "b", "name": "Burger"}, {"id": "a", "name": "Pasta"}]

    updated = client.put(f"/api/menus/{menu['id']}", json=payload).json()
    assert updated["title"] == "Mains"
    assert [d["id"] for d in updated["dishes"]] == ["b", "a"]
    assert updated["created_at"] == menu["created_at"]
    assert len(client.get("/api/menus", params={"owner_id": owner}).json()) == 1


def test_toggle_only_affects_one_section(client, owner):
    first = client.post("/api/menus", json=_menu(owner, "First", active=True)).json()
    second = client.post("/api/menus", json=_menu(owner, "Second")).json()

    toggled = client.post(f"/api/menus/{second['id']}/toggle-active").json()
    assert toggled["is_active"] is True
    assert client.get(f"/api/menus/{first['id']}").json()["is_active"] is True

    client.post(f"/api/menus/{first['id']}/toggle-active")
    assert client.get(f"/api/menus/{first['id']}").json()["is_active"] is False


def test_public_menus_show_active_sections_and_available_dishes(client, owner):
    shown = client.post("/api/menus", json=_menu(owner, "Shown", active=True)).json()
    client.post("/api/menus", json=_menu(owner, "Hidden"))
    client.post("/api/menus", json=_menu(f"{owner}-other", "Elsewhere", active=True))

    public = client.get("/api/menus/public", params={"owner_id": owner}).json()
    assert [m["id"] for m in public] == [shown["id"]]
    assert [d["name"] for d in public[0]["dishes"]] == ["Tomato soup"]


def test_delete_menu(client, owner):
    menu = client.post("/api/menus", json=_menu(owner)).json()
    assert client.delete(f"/api/menus/{menu['id']}").status_code == 204
    assert client.get(f"/api/menus/{menu['id']}").status_code == 404
    res = client.post(f"/api/menus/{menu['id']}/toggle-active")
    assert res.status_code == 404
    assert "Menu" in res.json()["error"]["message"]


def test_legacy_document_is_decoded():
    section = MenuSectionResponse.from_storage({
        "id": "m1",
        "title": "Drinks",
        "ownerId": "cafe-42",
        "isActive": "true",
        "createdAt": "2024-06-01T09:00:00.000Z",
        "dishes": {
            "d1": {"name": "Lemonade", "price": "3.20", "isAvailable": "false"},
            "d2": {"id": "own-id", "name": "Tea", "price": "n/a"},
            "d3": {"price": 2},
        },
    })
    assert section.owner_id == "cafe-42"
    assert section.is_active is True
    assert section.created_at == datetime(2024, 6, 1, 9, tzinfo=timezone.utc)
    assert section.updated_at == section.created_at
    assert [(d.id, d.name, d.price, d.is_available) for d in section.dishes] == [
        ("d1", "Lemonade", 3.2, False),
        ("own-id", "Tea", 0.0, True),
    ]


def test_snake_case_owner_wins_over_legacy():
    section = MenuSectionResponse.from_storage({"id": "m1", "owner_id": "new", "ownerId": "old"})
    assert section.owner_id == "new"
    assert section.title == "Untitled Menu"


def test_section_without_id_is_malformed():
    with pytest.raises(MalformedRecordError) as exc_info:
        MenuSectionResponse.from_storage({"title": "Orphan"})
    assert exc_info.value.details["field"] == "id"


def test_unreadable_dishes_decode_as_empty(client, db, owner):
    bad_id = models.new_id()
    db.add(models.MenuSection(id=bad_id, title="Bad", owner_id=owner, dishes="{not json"))
    db.commit()

    listed = client.get("/api/menus", params={"owner_id": owner})
    assert listed.status_code == 200
    assert listed.json()[0]["dishes"] == []
    assert client.get(f"/api/menus/{bad_id}").json()["title"] == "Bad"


def test_load_menu_export():
    sections = {s.id: s for s in load_menu_export(FIXTURE)}
    assert set(sections) == {"menu-starters", "menu-desserts"}

    starters = sections["menu-starters"]
    assert starters.owner_id == "cafe-42"
    assert [d.id for d in starters.dishes] == ["d-soup", "d-bread"]
    assert starters.public_view().dishes[0].name == "Tomato soup"

    desserts = sections["menu-desserts"]
    assert desserts.title == "Untitled Menu"
    assert desserts.is_active is False


def test_import_menus_is_idempotent(db, tmp_path):
    menu_id = f"imported-{uuid.uuid4().hex[:8]}"
    export = tmp_path / "menus.json"
    export.write_text(json.dumps({menu_id: {"title": "Brunch", "ownerId": "cafe-9", "isActive": True,
                                            "dishes": [{"id": "d1", "name": "Pancakes", "price": 7}]}}))

    assert import_menus_from_json(str(export), session=db) == 1
    assert import_menus_from_json(str(export), session=db) == 0

    row = db.get(models.MenuSection, menu_id)
    assert row.owner_id == "cafe-9"
    assert row.is_active is True
