"""Tests for binder API endpoints."""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from cardbinder.api.binders import get_card_lookup
from cardbinder.db.database import get_session
from cardbinder.main import app
from cardbinder.models.db import Base
from tests.fakes import FakeLookup, scryfall_card


@pytest.fixture
async def async_engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def client(async_engine, fake_lookup: FakeLookup):
    """Provide an async test client with overridden database session and card lookup."""
    async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_session():
        async with async_session() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_card_lookup] = lambda: fake_lookup

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


async def create(client: AsyncClient, owner_id: str = "user-123", name: str = "Main") -> str:
    response = await client.post("/binders", json={"owner_id": owner_id, "name": name})
    assert response.status_code == 201
    return response.json()["id"]


def card_payload(name: str, **extra) -> dict:
    return {"name": name, **extra}


class TestCreateAndGet:
    async def test_create_binder(self, client: AsyncClient) -> None:
        """New binders start with one empty 3x3 page."""
        response = await client.post(
            "/binders",
            json={"owner_id": "user-123", "name": "  Trade Binder ", "is_public": False},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Trade Binder"
        assert data["is_public"] is False
        assert len(data["pages"]) == 1
        assert len(data["pages"][0]["slots"]) == 9
        assert data["card_count"] == 0

    async def test_get_binder(self, client: AsyncClient) -> None:
        binder_id = await create(client)

        response = await client.get(f"/binders/{binder_id}")

        assert response.status_code == 200
        slot = response.json()["pages"][0]["slots"][4]
        assert (slot["row"], slot["column"], slot["is_empty"]) == (1, 1, True)

    async def test_get_missing_binder(self, client: AsyncClient) -> None:
        response = await client.get("/binders/does-not-exist")

        assert response.status_code == 404
        assert response.json()["kind"] == "not_found"

    async def test_list_user_binders(self, client: AsyncClient) -> None:
        await create(client, name="Main")
        await create(client, name="Bulk")
        await create(client, owner_id="someone-else", name="Other")

        response = await client.get("/binders/user/user-123")

        assert response.status_code == 200
        assert {entry["name"] for entry in response.json()} == {"Main", "Bulk"}


class TestUpdateAndDelete:
    async def test_toggle_visibility(self, client: AsyncClient) -> None:
        binder_id = await create(client)

        response = await client.patch(f"/binders/{binder_id}", json={"is_public": False})

        assert response.status_code == 200
        assert response.json()["is_public"] is False
        assert response.json()["name"] == "Main"

    async def test_delete_binder(self, client: AsyncClient) -> None:
        binder_id = await create(client)

        response = await client.delete(f"/binders/{binder_id}")
        assert response.status_code == 200
        assert response.json()["deleted"] is True

        assert (await client.get(f"/binders/{binder_id}")).status_code == 404
        assert (await client.delete(f"/binders/{binder_id}")).status_code == 404


class TestCards:
    async def test_place_in_first_empty_slot(self, client: AsyncClient) -> None:
        binder_id = await create(client)

        first = await client.post(
            f"/binders/{binder_id}/cards", json={"card": card_payload("Lightning Bolt")}
        )
        second = await client.post(
            f"/binders/{binder_id}/cards", json={"card": card_payload("Counterspell")}
        )

        assert first.json() == {"page_number": 1, "position": 0, "page_count": 1}
        assert second.json()["position"] == 1

    async def test_tenth_card_adds_page(self, client: AsyncClient) -> None:
        binder_id = await create(client)
        for i in range(9):
            await client.post(f"/binders/{binder_id}/cards", json={"card": card_payload(f"C{i}")})

        response = await client.post(
            f"/binders/{binder_id}/cards", json={"card": card_payload("Tenth")}
        )

        assert response.json() == {"page_number": 2, "position": 0, "page_count": 2}

    async def test_place_at_slot(self, client: AsyncClient) -> None:
        binder_id = await create(client)

        response = await client.post(
            f"/binders/{binder_id}/cards",
            json={"card": card_payload("Sol Ring"), "page_number": 1, "position": 5},
        )

        assert response.status_code == 200
        binder = (await client.get(f"/binders/{binder_id}")).json()
        assert binder["pages"][0]["slots"][5]["card"]["name"] == "Sol Ring"

    async def test_place_into_occupied_slot_rejected(self, client: AsyncClient) -> None:
        binder_id = await create(client)
        body = {"card": card_payload("Sol Ring"), "page_number": 1, "position": 0}
        await client.post(f"/binders/{binder_id}/cards", json=body)

        response = await client.post(f"/binders/{binder_id}/cards", json=body)

        assert response.status_code == 400
        assert response.json()["kind"] == "layout_violation"
        assert response.json()["message"] == "Slot is already occupied"

    async def test_same_card_id_rejected(self, client: AsyncClient) -> None:
        binder_id = await create(client)
        body = {"card": card_payload("Sol Ring", id="sol-ring-1")}
        await client.post(f"/binders/{binder_id}/cards", json=body)

        response = await client.post(f"/binders/{binder_id}/cards", json=body)

        assert response.status_code == 400
        assert response.json()["message"] == "Card is already in this binder"

    async def test_place_on_missing_page_rejected(self, client: AsyncClient) -> None:
        binder_id = await create(client)

        response = await client.post(
            f"/binders/{binder_id}/cards",
            json={"card": card_payload("Sol Ring"), "page_number": 3, "position": 0},
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid page number"

    async def test_page_without_position_rejected(self, client: AsyncClient) -> None:
        binder_id = await create(client)

        response = await client.post(
            f"/binders/{binder_id}/cards",
            json={"card": card_payload("Sol Ring"), "page_number": 1},
        )

        assert response.status_code == 400

    async def test_remove_and_compact(self, client: AsyncClient) -> None:
        binder_id = await create(client)
        for name in ("A", "B", "C"):
            await client.post(f"/binders/{binder_id}/cards", json={"card": card_payload(name)})

        response = await client.delete(f"/binders/{binder_id}/pages/1/slots/0?compact=true")

        assert response.status_code == 200
        assert response.json()["removed"]["name"] == "A"
        slots = (await client.get(f"/binders/{binder_id}")).json()["pages"][0]["slots"]
        assert [slot["card"]["name"] for slot in slots[:2]] == ["B", "C"]
        assert slots[2]["is_empty"] is True

    async def test_remove_leaves_gap_by_default(self, client: AsyncClient) -> None:
        binder_id = await create(client)
        for name in ("A", "B"):
            await client.post(f"/binders/{binder_id}/cards", json={"card": card_payload(name)})

        await client.delete(f"/binders/{binder_id}/pages/1/slots/0")

        slots = (await client.get(f"/binders/{binder_id}")).json()["pages"][0]["slots"]
        assert slots[0]["is_empty"] is True
        assert slots[1]["card"]["name"] == "B"


class TestPagesAndRearrange:
    async def test_add_page_then_rearrange(self, client: AsyncClient) -> None:
        binder_id = await create(client)
        await client.post(f"/binders/{binder_id}/pages")
        await client.post(
            f"/binders/{binder_id}/cards",
            json={"card": card_payload("Opt"), "page_number": 2, "position": 4},
        )

        response = await client.post(f"/binders/{binder_id}/rearrange")

        assert response.json() == {"card_count": 1, "page_count": 1}
        slots = (await client.get(f"/binders/{binder_id}")).json()["pages"][0]["slots"]
        assert slots[0]["card"]["name"] == "Opt"


class TestImport:
    async def test_import_places_cards_in_row_order(
        self, client: AsyncClient, fake_lookup: FakeLookup
    ) -> None:
        fake_lookup.add(scryfall_card("Lightning Bolt"), scryfall_card("Counterspell"))
        binder_id = await create(client)

        response = await client.post(
            f"/binders/{binder_id}/import",
            json={"text": "Quantity,Name\n4,Lightning Bolt\n2,Counterspell\n"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["created"] == 2
        assert data["failed"] == []
        slots = (await client.get(f"/binders/{binder_id}")).json()["pages"][0]["slots"]
        assert slots[0]["card"]["name"] == "Lightning Bolt"
        assert slots[0]["card"]["quantity"] == 4
        assert slots[1]["card"]["name"] == "Counterspell"

    async def test_import_reports_failed_rows(
        self, client: AsyncClient, fake_lookup: FakeLookup
    ) -> None:
        fake_lookup.add(scryfall_card("Opt"))
        binder_id = await create(client)

        response = await client.post(
            f"/binders/{binder_id}/import",
            json={"text": "Quantity,Name\n1,Opt\n1,\n"},
        )

        data = response.json()
        assert data["created"] == 1
        assert data["failed"] == [{"row": 3, "content": "1,", "error": "Card name is required"}]

    async def test_import_missing_column_creates_nothing(self, client: AsyncClient) -> None:
        binder_id = await create(client)

        response = await client.post(
            f"/binders/{binder_id}/import", json={"text": "Name,Set\nOpt,XLN\n"}
        )

        data = response.json()
        assert data["created"] == 0
        assert data["failed"][0]["row"] is None
        assert data["failed"][0]["error"] == "Quantity column not found in header"

    async def test_import_empty_text_rejected(self, client: AsyncClient) -> None:
        binder_id = await create(client)

        response = await client.post(f"/binders/{binder_id}/import", json={"text": "  "})

        assert response.status_code == 400

    async def test_import_into_missing_binder(self, client: AsyncClient) -> None:
        response = await client.post("/binders/nope/import", json={"text": "1,Opt"})

        assert response.status_code == 404


class TestPrices:
    async def test_refresh_prices(self, client: AsyncClient, fake_lookup: FakeLookup) -> None:
        fake_lookup.add(scryfall_card("Opt", usd="0.50"))
        binder_id = await create(client)
        await client.post(
            f"/binders/{binder_id}/cards", json={"card": card_payload("Opt", quantity=2)}
        )

        response = await client.post(f"/binders/{binder_id}/prices/refresh")

        assert response.json() == {"updated": 1, "total_value": 1.0}
