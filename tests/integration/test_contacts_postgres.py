"""
End-to-end contacts tests against a real PostgreSQL database
"""

import uuid
from datetime import datetime

import pytest

from config.settings import MIGRATIONS_DIR
from database.migrations import run_migrations

pytestmark = [pytest.mark.integration, pytest.mark.asyncio]


def parse_timestamp(value: str) -> datetime:
    return datetime.fromisoformat(value.replace('Z', '+00:00'))


async def create(api, first_name="Ada", last_name="Lovelace", phone="555-0100"):
    response = await api.post("/contacts", json={
        "first_name": first_name,
        "last_name": last_name,
        "phone": phone
    })
    assert response.status_code == 201, response.text
    return response.json()


async def test_migrations_are_idempotent(db_pool):
    assert await run_migrations(db_pool, MIGRATIONS_DIR) == []

    async with db_pool.acquire() as conn:
        index = await conn.fetchval(
            "SELECT indexname FROM pg_indexes WHERE tablename = 'contacts' AND indexname = 'idx_contacts_phone'"
        )
    assert index == "idx_contacts_phone"


async def test_create_then_list_round_trip(api):
    created = [await create(api, first_name=f"Person{i}", phone=f"555-10{i:02d}") for i in range(5)]

    response = await api.get("/contacts")

    assert response.status_code == 200
    listed = response.json()
    assert len(listed) == 5
    assert {c["id"] for c in listed} == {c["id"] for c in created}
    for contact in created:
        assert contact["created_at"] == contact["updated_at"]
        assert contact in listed


async def test_phone_update_scenario(api):
    created = await create(api)

    found = (await api.get("/contacts/search", params={"phone": "555-0100"})).json()
    assert [c["id"] for c in found] == [created["id"]]

    response = await api.put(f"/contacts/{created['id']}", json={"phone": "555-0200"})
    assert response.status_code == 200
    updated = response.json()
    assert updated["phone"] == "555-0200"
    assert updated["first_name"] == "Ada"
    assert updated["last_name"] == "Lovelace"
    assert parse_timestamp(updated["created_at"]) == parse_timestamp(created["created_at"])
    assert parse_timestamp(updated["updated_at"]) > parse_timestamp(created["updated_at"])

    assert (await api.get("/contacts/search", params={"phone": "555-0100"})).json() == []


async def test_rapid_updates_keep_moving_updated_at(api):
    created = await create(api)
    previous = parse_timestamp(created["updated_at"])

    for i in range(5):
        updated = (await api.put(f"/contacts/{created['id']}", json={"last_name": f"Byron{i}"})).json()
        current = parse_timestamp(updated["updated_at"])
        assert current > previous
        previous = current


async def test_update_unknown_id_is_404(api):
    response = await api.put(f"/contacts/{uuid.uuid4()}", json={"phone": "555-0200"})

    assert response.status_code == 404
    assert (await api.get("/contacts")).json() == []


async def test_search_unknown_phone_is_empty(api):
    await create(api)

    response = await api.get("/contacts/search", params={"phone": "000-0000"})

    assert response.status_code == 200
    assert response.json() == []
