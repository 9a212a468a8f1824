"""Integration tests for pm_account endpoints."""

from httpx import AsyncClient

from src.pm_gateway.auth.jwt_handler import create_access_token
from src.pm_math.fixed_point import PRECISION


def _auth(actor: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(actor)}"}


class TestAccount:
    async def test_balance_starts_at_zero(self, client: AsyncClient) -> None:
        resp = await client.get("/api/v1/account/balance", headers=_auth("alice"))
        assert resp.status_code == 200
        assert resp.json()["data"] == {
            "account": "alice",
            "balance": 0,
            "balance_display": "0.0000",
        }

    async def test_deposit_then_ledger(self, client: AsyncClient) -> None:
        headers = _auth("alice")
        resp = await client.post(
            "/api/v1/account/deposit", json={"amount": 5 * PRECISION}, headers=headers
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["balance"] == 5 * PRECISION

        ledger = await client.get("/api/v1/account/ledger", headers=headers)
        items = ledger.json()["data"]["items"]
        assert len(items) == 1
        assert items[0]["entry_type"] == "DEPOSIT"
        assert items[0]["balance_after"] == 5 * PRECISION

    async def test_deposit_must_be_positive(self, client: AsyncClient) -> None:
        resp = await client.post(
            "/api/v1/account/deposit", json={"amount": 0}, headers=_auth("alice")
        )
        assert resp.status_code == 422

    async def test_requires_auth(self, client: AsyncClient) -> None:
        resp = await client.get("/api/v1/account/balance")
        assert resp.status_code == 401
