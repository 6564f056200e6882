"""Integration tests for budgets, monthly reports and category edits (requires running PG)."""

import pytest
from httpx import AsyncClient

pytestmark = [pytest.mark.integration, pytest.mark.asyncio(loop_scope="session")]


def bearer(auth: dict) -> dict[str, str]:
    return {"Authorization": f"Bearer {auth['accessToken']}"}


async def _categories(client: AsyncClient, auth: dict, kind: str) -> list[dict]:
    resp = await client.get(f"/api/v1/categories?type={kind}", headers=bearer(auth))
    return resp.json()["data"]


async def _add_budget(client: AsyncClient, auth: dict, category_id: int, month: str, amount: str):
    return await client.post(
        "/api/v1/budgets",
        json={"categoryId": category_id, "month": month, "amount": amount},
        headers=bearer(auth),
    )


class TestBudgets:
    async def test_create_list_and_duplicate(self, client: AsyncClient, signup) -> None:
        auth = await signup()
        food = (await _categories(client, auth, "expense"))[0]

        resp = await _add_budget(client, auth, food["id"], "2024-03", "300.00")
        assert resp.status_code == 201, resp.text
        assert resp.json()["data"]["categoryName"] == food["name"]

        resp = await _add_budget(client, auth, food["id"], "2024-03", "500.00")
        assert resp.status_code == 409
        assert resp.json()["code"] == 2003

        resp = await client.get("/api/v1/budgets?month=2024-03", headers=bearer(auth))
        [budget] = resp.json()["data"]
        assert budget["amount"] == 300.0

    async def test_copy_latest_and_delete(self, client: AsyncClient, signup) -> None:
        auth = await signup()
        first, second = (await _categories(client, auth, "expense"))[:2]
        await _add_budget(client, auth, first["id"], "2024-01", "100")
        await _add_budget(client, auth, second["id"], "2024-01", "200")
        await _add_budget(client, auth, second["id"], "2024-02", "999")

        resp = await client.post(
            "/api/v1/budgets/copy",
            json={"fromMonth": "2024-01", "toMonth": "2024-02"},
            headers=bearer(auth),
        )
        # the existing 2024-02 budget for `second` is kept
        assert resp.json()["data"] == {"copied": 1}

        resp = await client.get("/api/v1/budgets/latest", headers=bearer(auth))
        assert resp.json()["data"] == {"month": "2024-02"}

        resp = await client.delete(
            f"/api/v1/budgets/{second['id']}?month=2024-02", headers=bearer(auth)
        )
        assert resp.status_code == 204
        resp = await client.get("/api/v1/budgets?month=2024-02", headers=bearer(auth))
        assert [b["categoryId"] for b in resp.json()["data"]] == [first["id"]]

        resp = await client.delete(
            f"/api/v1/budgets/{second['id']}?month=2024-02", headers=bearer(auth)
        )
        assert resp.status_code == 404

    async def test_budgets_are_per_user(self, client: AsyncClient, signup) -> None:
        alice = await signup()
        bob = await signup()
        food = (await _categories(client, alice, "expense"))[0]

        resp = await _add_budget(client, bob, food["id"], "2024-03", "10")
        assert resp.status_code == 400

        resp = await client.get("/api/v1/budgets/latest", headers=bearer(bob))
        assert resp.json()["data"] == {"month": None}


class TestExpenseReports:
    async def test_month_details_and_search(self, client: AsyncClient, signup) -> None:
        auth = await signup()
        food = (await _categories(client, auth, "expense"))[0]
        salary = (await _categories(client, auth, "income"))[0]
        for path, category, day, amount, notes in (
            ("expenses", food, "2024-03-02", "12.50", "Morning Coffee"),
            ("expenses", food, "2024-03-09", "40.00", "groceries 100%"),
            ("income", salary, "2024-03-09", "1000.00", "pay"),
        ):
            resp = await client.post(
                f"/api/v1/{path}",
                json={
                    "categoryIds": [category["id"]],
                    "date": day,
                    "amount": amount,
                    "notes": notes,
                },
                headers=bearer(auth),
            )
            assert resp.status_code == 201, resp.text

        resp = await client.get("/api/v1/expenses/month/2024-03", headers=bearer(auth))
        data = resp.json()["data"]
        assert data["categories"] == [
            {"categoryId": food["id"], "category": food["name"], "total": 52.5}
        ]
        assert [d["date"] for d in data["daily"]] == ["2024-03-02", "2024-03-09"]
        assert data["daily"][1]["netTotal"] == 960.0

        resp = await client.get("/api/v1/expenses/months?before=2024-04", headers=bearer(auth))
        march = resp.json()["data"][0]
        assert march["month"] == "2024-03"
        assert march["total"] == 52.5
        assert march["netTotal"] == 947.5

        resp = await client.get("/api/v1/expenses/search?q=coffee", headers=bearer(auth))
        assert [e["notes"] for e in resp.json()["data"]] == ["Morning Coffee"]

        # % is matched literally, not as a wildcard
        resp = await client.get("/api/v1/expenses/search?q=0%25", headers=bearer(auth))
        assert [e["notes"] for e in resp.json()["data"]] == ["groceries 100%"]

        resp = await client.get(
            "/api/v1/expenses/search?dateFrom=2024-03-05&dateTo=2024-03-31", headers=bearer(auth)
        )
        assert len(resp.json()["data"]) == 1


class TestCategoryEdits:
    async def test_rename_and_reorder(self, client: AsyncClient, signup) -> None:
        auth = await signup()
        first, second = (await _categories(client, auth, "expense"))[:2]

        resp = await client.put(
            f"/api/v1/categories/{first['id']}", json={"name": "Eating Out"}, headers=bearer(auth)
        )
        assert resp.status_code == 200, resp.text
        assert resp.json()["data"]["slug"] == "eating-out"

        resp = await client.put(
            "/api/v1/categories/sequence",
            json={
                "categories": [
                    {"id": first["id"], "sequence": 9},
                    {"id": second["id"], "sequence": 0},
                ]
            },
            headers=bearer(auth),
        )
        assert resp.json()["data"] == {"updated": 2}

        ordered = await _categories(client, auth, "expense")
        assert ordered[0]["id"] == second["id"]
        assert ordered[-1]["id"] == first["id"]

    async def test_update_unknown_category(self, client: AsyncClient, signup) -> None:
        auth = await signup()
        resp = await client.put(
            "/api/v1/categories/999999999", json={"name": "x"}, headers=bearer(auth)
        )
        assert resp.status_code == 404
