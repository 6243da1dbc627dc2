"""
API tests for the indicator and alert endpoints.
"""

import pytest
from fastapi.testclient import TestClient

from indicharts.main import app

from conftest import make_rows


@pytest.fixture
def client():
    return TestClient(app)


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_list_kinds(client):
    response = client.get("/api/v1/indicators/kinds")

    assert response.status_code == 200
    kinds = {k["kind"]: k for k in response.json()}
    assert set(kinds) == {"rsi", "stoch", "williams"}
    assert kinds["williams"]["default_levels"] == [-80.0, -20.0]
    assert kinds["rsi"]["supports_incremental"] is True
    assert kinds["stoch"]["supports_incremental"] is False


def test_history(client, wavy_rows):
    response = client.post(
        "/api/v1/indicators/history",
        json={"candles": wavy_rows, "kind": "RSI", "period": 14},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["series"]["status"] == "ok"
    assert body["series"]["first_index"] == 14
    assert len(body["zones"]) == len(body["series"]["points"])
    assert body["levels"] == [30.0, 70.0]


def test_history_insufficient_data(client):
    response = client.post(
        "/api/v1/indicators/history",
        json={"candles": make_rows(range(100, 105)), "kind": "wpr"},
    )

    assert response.status_code == 200
    assert response.json()["series"]["status"] == "insufficient_data"
    assert response.json()["series"]["points"] == []


def test_history_unknown_kind_is_rejected(client, wavy_rows):
    response = client.post(
        "/api/v1/indicators/history", json={"candles": wavy_rows, "kind": "macd"}
    )

    assert response.status_code == 422


def test_history_invalid_params_is_bad_request(client, wavy_rows):
    response = client.post(
        "/api/v1/indicators/history",
        json={"candles": wavy_rows, "kind": "stoch", "params": {"dPeriod": 0}},
    )

    assert response.status_code == 400
    assert response.json()["detail"]["service"] == "IndicatorService"


def test_incremental_rsi(client):
    response = client.post(
        "/api/v1/indicators/incremental",
        json={
            "current_close": 101.0,
            "previous_close": 100.0,
            "state": {"average_gain": 1.0, "average_loss": 1.0},
            "kind": "rsi",
            "timestamp": 123,
        },
    )

    assert response.status_code == 200
    point = response.json()["point"]
    assert point["timestamp"] == 123
    assert point["state"]["average_gain"] == pytest.approx(1.0)


def test_incremental_stochastic_is_unprocessable(client):
    response = client.post(
        "/api/v1/indicators/incremental",
        json={"current_close": 101.0, "previous_close": 100.0, "kind": "stoch"},
    )

    assert response.status_code == 422


def test_alert_check(client, rising_rows):
    response = client.post(
        "/api/v1/alerts/check",
        json={
            "items": [
                {
                    "rule": {"id": 4, "symbol": "ETHUSDT", "levels": [70]},
                    "candles": rising_rows,
                    "state": {"rule_id": 4, "last_indicator_value": 65.0},
                }
            ],
            "now_ms": 1_700_100_000_000,
        },
    )

    assert response.status_code == 200
    evaluation = response.json()["evaluations"][0]
    assert [t["type"] for t in evaluation["triggers"]] == ["cross_up"]
    assert evaluation["state"]["last_fire_ts"] == 1_700_100_000_000


@pytest.mark.parametrize(
    "rule, valid",
    [
        ({"indicator": "rsi", "levels": [30, 70]}, True),
        ({"indicator": "williams", "levels": [20, 80]}, False),
        ({"indicator": "stoch", "levels": [20], "mode": "enter"}, False),
    ],
)
def test_validate_levels(client, rule, valid):
    response = client.post("/api/v1/alerts/validate", json=rule)

    assert response.status_code == 200
    assert response.json()["valid"] is valid
