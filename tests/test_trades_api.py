"""Tests for the trades API: CRUD, advisory continuity, unlock gate and change feed."""

import asyncio
import logging
from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from journal.api.trades import trade_change_stream
from journal.services.auth import create_unlock_token
from journal.services.change_feed import trade_changes


def _create(client, headers, day, start, end):
    response = client.post(
        "/api/trades",
        json={"date": day, "start_amount": start, "end_amount": end},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


# ---------------------------------------------------------------------------
# 1. Unlock gate
# ---------------------------------------------------------------------------

class TestUnlockRequired:
    def test_create_without_token(self, client):
        response = client.post(
            "/api/trades", json={"date": "2024-01-01", "start_amount": 1, "end_amount": 2}
        )
        assert response.status_code == 401
        assert response.json()["detail"] == "Passphrase required"

    def test_create_with_garbage_token(self, client):
        response = client.post(
            "/api/trades",
            json={"date": "2024-01-01", "start_amount": 1, "end_amount": 2},
            headers={"Authorization": "Bearer not-a-token"},
        )
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid or expired token"

    def test_expired_token_rejected(self, client):
        token, _ = create_unlock_token(now=datetime(2000, 1, 1, tzinfo=timezone.utc))
        response = client.delete("/api/trades/1", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_reads_are_open(self, client):
        assert client.get("/api/trades").status_code == 200


# ---------------------------------------------------------------------------
# 2. Create / read
# ---------------------------------------------------------------------------

class TestCreateTrade:
    def test_derives_profit_fields(self, client, unlock_headers):
        body = _create(client, unlock_headers, "2024-01-01", 1000, 1010)

        assert body["trade"]["profit"] == pytest.approx(10)
        assert body["trade"]["profit_rate"] == pytest.approx(1.0)
        assert body["continuity"]["is_valid"] is True

    def test_zero_start_stores_null_rate(self, client, unlock_headers):
        body = _create(client, unlock_headers, "2024-01-01", 0, 50)
        assert body["trade"]["profit"] == 50
        assert body["trade"]["profit_rate"] is None

    def test_discontinuous_entry_is_stored(self, client, unlock_headers, caplog):
        _create(client, unlock_headers, "2024-01-01", 1000, 1010)
        with caplog.at_level(logging.INFO):
            body = _create(client, unlock_headers, "2024-01-02", 900, 950)

        assert body["continuity"]["is_valid"] is False
        assert body["continuity"]["reason"] == "continuity_violation"
        assert "Storing discontinuous trade" in caplog.text
        assert len(client.get("/api/trades").json()) == 2

    @pytest.mark.parametrize("payload", [
        {"date": "2024-01-01", "start_amount": -1, "end_amount": 5},
        {"date": "not-a-date", "start_amount": 1, "end_amount": 5},
        {"date": "2024-01-01", "start_amount": "abc", "end_amount": 5},
        {"date": "2024-01-01", "end_amount": 5},
    ])
    def test_malformed_input_rejected(self, client, unlock_headers, payload):
        response = client.post("/api/trades", json=payload, headers=unlock_headers)
        assert response.status_code == 422

    def test_get_missing_trade(self, client):
        response = client.get("/api/trades/999")
        assert response.status_code == 404
        assert response.json()["detail"] == "Trade not found"


class TestListTrades:
    def test_newest_first_with_filters(self, client, unlock_headers):
        for day, start, end in [
            ("2024-01-01", 1000, 1010),
            ("2024-01-03", 1020, 1030),
            ("2024-01-02", 1010, 1020),
        ]:
            _create(client, unlock_headers, day, start, end)

        dates = [t["date"] for t in client.get("/api/trades").json()]
        assert dates == ["2024-01-03", "2024-01-02", "2024-01-01"]

        ranged = client.get("/api/trades", params={"start": "2024-01-02", "end": "2024-01-02"})
        assert [t["date"] for t in ranged.json()] == ["2024-01-02"]

        page = client.get("/api/trades", params={"limit": 1, "offset": 1})
        assert [t["date"] for t in page.json()] == ["2024-01-02"]


# ---------------------------------------------------------------------------
# 3. Update / delete
# ---------------------------------------------------------------------------

class TestUpdateTrade:
    def test_partial_update_recomputes_profit(self, client, unlock_headers):
        trade = _create(client, unlock_headers, "2024-01-01", 1000, 1010)["trade"]

        response = client.put(
            f"/api/trades/{trade['id']}", json={"end_amount": 980}, headers=unlock_headers
        )
        assert response.status_code == 200
        updated = response.json()["trade"]
        assert updated["start_amount"] == 1000
        assert updated["profit"] == pytest.approx(-20)
        assert updated["profit_rate"] == pytest.approx(-2.0)

    def test_update_flags_break_with_next_day(self, client, unlock_headers):
        first = _create(client, unlock_headers, "2024-01-01", 1000, 1010)["trade"]
        _create(client, unlock_headers, "2024-01-02", 1010, 1020)

        response = client.put(
            f"/api/trades/{first['id']}", json={"end_amount": 1005}, headers=unlock_headers
        )
        assert response.status_code == 200
        assert response.json()["continuity"]["is_valid"] is False

    def test_update_missing_trade(self, client, unlock_headers):
        response = client.put("/api/trades/42", json={"end_amount": 1}, headers=unlock_headers)
        assert response.status_code == 404


class TestDeleteTrade:
    def test_delete_then_404(self, client, unlock_headers):
        trade = _create(client, unlock_headers, "2024-01-01", 1000, 1010)["trade"]

        assert client.delete(f"/api/trades/{trade['id']}", headers=unlock_headers).status_code == 204
        assert client.get(f"/api/trades/{trade['id']}").status_code == 404
        assert client.delete(f"/api/trades/{trade['id']}", headers=unlock_headers).status_code == 404


# ---------------------------------------------------------------------------
# 4. Continuity helpers
# ---------------------------------------------------------------------------

class TestContinuityEndpoints:
    def test_suggested_start_uses_previous_day(self, client, unlock_headers):
        _create(client, unlock_headers, "2024-01-01", 1000, 1010)
        _create(client, unlock_headers, "2024-01-03", 1010, 1030)

        body = client.get("/api/trades/suggested-start", params={"date": "2024-01-03"}).json()
        assert body["start_amount"] == 1010

        empty = client.get("/api/trades/suggested-start", params={"date": "2023-12-31"}).json()
        assert empty["start_amount"] is None

    def test_dry_run_check(self, client, unlock_headers):
        _create(client, unlock_headers, "2024-01-01", 1000, 1010)

        ok = client.post(
            "/api/trades/continuity",
            json={"date": "2024-01-02", "start_amount": 1010, "end_amount": 1020},
        )
        assert ok.json()["is_valid"] is True

        bad = client.post(
            "/api/trades/continuity",
            json={"date": "2024-01-02", "start_amount": 1000, "end_amount": 1020},
        )
        assert bad.json()["is_valid"] is False
        assert "1,010 USDT" in bad.json()["message"]

    def test_dry_run_for_unknown_trade(self, client):
        response = client.post(
            "/api/trades/continuity",
            json={"date": "2024-01-02", "start_amount": 1, "end_amount": 2, "trade_id": 77},
        )
        assert response.status_code == 404


# ---------------------------------------------------------------------------
# 5. Change feed
# ---------------------------------------------------------------------------

def test_websocket_receives_insert_event(client, unlock_headers):
    with client.websocket_connect("/api/trades/changes") as ws:
        trade = _create(client, unlock_headers, "2024-01-01", 1000, 1010)["trade"]
        message = ws.receive_json()

    assert message == {"table": "trades", "event": "insert", "id": trade["id"]}


def test_websocket_disconnect_releases_subscription(client):
    before = trade_changes.subscriber_count
    with client.websocket_connect("/api/trades/changes"):
        assert trade_changes.subscriber_count == before + 1
    assert trade_changes.subscriber_count == before


@pytest.mark.asyncio
async def test_change_stream_returns_on_disconnect_without_events():
    websocket = AsyncMock()
    websocket.receive.return_value = {"type": "websocket.disconnect", "code": 1000}
    before = trade_changes.subscriber_count

    # Nothing is published, so only the disconnect can end the handler
    await asyncio.wait_for(trade_change_stream(websocket), timeout=1)

    websocket.accept.assert_awaited_once()
    websocket.send_json.assert_not_awaited()
    assert trade_changes.subscriber_count == before
