"""HTTP tests for the v1 API."""

from decimal import Decimal
from uuid import uuid4

import pytest

API = "/api/v1"
ADMIN_HEADERS = {"X-Actor-Id": "ops-7", "X-Actor-Type": "admin"}


@pytest.fixture
def vendor_id(client):
    """Vendor registered over HTTP, trial started at the real current time."""
    response = client.post(
        f"{API}/vendors",
        json={"business_name": "Lalitpur Charge", "email": "hello@lalitpurcharge.np"},
        headers=ADMIN_HEADERS,
    )
    assert response.status_code == 201
    vendor_id = response.json()["data"]["id"]

    bank = client.put(
        f"{API}/vendors/{vendor_id}/bank-details",
        json={
            "bank_account_number": "55500011",
            "bank_account_holder_name": "Lalitpur Charge",
            "bank_name": "NIC Asia Bank",
        },
        headers=ADMIN_HEADERS,
    )
    assert bank.status_code == 200
    return vendor_id


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert "X-Request-ID" in response.headers


def test_register_vendor_returns_envelope(client, vendor_id):
    response = client.get(f"{API}/vendors/{vendor_id}")
    body = response.json()
    assert response.status_code == 200
    assert body["success"] is True
    assert body["data"]["business_name"] == "Lalitpur Charge"
    assert body["data"]["has_bank_details"] is True

    status = client.get(f"{API}/vendors/{vendor_id}/subscription/status").json()["data"]
    assert status["subscription_status"] == "active"
    assert status["is_expired"] is False


def test_unknown_vendor_is_404_envelope(client):
    response = client.get(f"{API}/vendors/{uuid4()}")
    body = response.json()
    assert response.status_code == 404
    assert body["success"] is False
    assert body["error"]["code"] == "NOT_FOUND"


def test_invalid_payload_is_422(client):
    response = client.post(f"{API}/vendors", json={"business_name": ""})
    assert response.status_code == 422
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_business_rule_status_codes(client, vendor_id):
    no_duration = client.post(
        f"{API}/vendors/{vendor_id}/subscription/extend",
        json={"days": 0, "months": 0, "years": 0},
        headers=ADMIN_HEADERS,
    )
    assert no_duration.status_code == 422
    assert no_duration.json()["error"]["code"] == "NO_DURATION_SPECIFIED"

    client.post(f"{API}/vendors/{vendor_id}/subscription/upgrade", json={}, headers=ADMIN_HEADERS)
    again = client.post(f"{API}/vendors/{vendor_id}/subscription/upgrade", json={}, headers=ADMIN_HEADERS)
    assert again.status_code == 409
    assert again.json()["error"]["code"] == "ALREADY_YEARLY"


def test_station_premium_activation(client, vendor_id):
    station = client.post(
        f"{API}/vendors/{vendor_id}/stations",
        json={"name": "Jawalakhel Bay"},
        headers=ADMIN_HEADERS,
    )
    assert station.status_code == 201
    station_id = station.json()["data"]["id"]

    activated = client.post(
        f"{API}/stations/{station_id}/premium/activate",
        json={"plan_type": "monthly"},
        headers=ADMIN_HEADERS,
    )
    assert activated.status_code == 200
    assert activated.json()["data"]["is_active"] is True

    premium = client.get(f"{API}/stations/{station_id}/premium").json()["data"]
    assert premium["type"] == "monthly"

    listed = client.get(f"{API}/premium/stations").json()["data"]
    assert [s["id"] for s in listed] == [station_id]

    duplicate = client.post(
        f"{API}/stations/{station_id}/premium/activate",
        json={"plan_type": "monthly"},
        headers=ADMIN_HEADERS,
    )
    assert duplicate.status_code == 409
    assert duplicate.json()["error"]["code"] == "ALREADY_ACTIVE"


def test_subscription_renewal(client, vendor_id):
    renewed = client.post(
        f"{API}/vendors/{vendor_id}/subscription/renew",
        json={"auto_renew": True, "payment_method": "esewa"},
        headers=ADMIN_HEADERS,
    )
    assert renewed.status_code == 200
    data = renewed.json()["data"]
    assert data["status"] == "active"
    assert data["license_active"] is True
    assert data["auto_renew"] is True
    assert data["days_until_expiration"] == 365

    payments = client.get(f"{API}/vendors/{vendor_id}/subscription/payments").json()["data"]
    assert [p["payment_type"] for p in payments] == ["renewal"]


def test_bulk_premium_action(client, vendor_id):
    station_ids = []
    for name in ["Patan Bay 1", "Patan Bay 2"]:
        created = client.post(f"{API}/vendors/{vendor_id}/stations", json={"name": name}, headers=ADMIN_HEADERS)
        station_ids.append(created.json()["data"]["id"])
    unknown = str(uuid4())

    response = client.post(
        f"{API}/premium/bulk-action",
        json={"station_ids": station_ids + [unknown], "action": "activate", "plan_type": "yearly"},
        headers=ADMIN_HEADERS,
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["total_processed"] == 3
    assert sorted(item["station_id"] for item in data["successful"]) == sorted(station_ids)
    assert [(item["station_id"], item["error_code"]) for item in data["failed"]] == [(unknown, "NOT_FOUND")]

    empty = client.post(f"{API}/premium/bulk-action", json={"station_ids": [], "action": "extend"})
    assert empty.status_code == 422


def test_settlement_flow(client, vendor_id):
    for index, amount in enumerate(["3000.00", "2000.00"]):
        recorded = client.post(
            f"{API}/settlements/transactions",
            json={
                "vendor_id": vendor_id,
                "source_type": "booking",
                "source_id": f"BK-{index}",
                "final_amount": amount,
                "completed_at": "2024-01-10T09:00:00+00:00",
            },
        )
        assert recorded.status_code == 201

    mismatch = client.post(
        f"{API}/settlements",
        json={"vendor_id": vendor_id, "date": "2024-01-10", "amount": "4000"},
        headers=ADMIN_HEADERS,
    )
    assert mismatch.status_code == 400
    assert mismatch.json()["error"]["code"] == "AMOUNT_MISMATCH"

    initiated = client.post(
        f"{API}/settlements",
        json={"vendor_id": vendor_id, "date": "2024-01-10", "amount": "5000"},
        headers=ADMIN_HEADERS,
    )
    assert initiated.status_code == 201
    settlement = initiated.json()["data"]
    assert settlement["status"] == "processing"

    in_progress = client.post(
        f"{API}/settlements",
        json={"vendor_id": vendor_id, "date": "2024-01-10", "amount": "5000"},
        headers=ADMIN_HEADERS,
    )
    assert in_progress.status_code == 409
    assert in_progress.json()["error"]["code"] == "SETTLEMENT_ALREADY_IN_PROGRESS"

    short = client.post(
        f"{API}/settlements/{settlement['id']}/complete",
        json={"payment_reference": "ab"},
        headers=ADMIN_HEADERS,
    )
    assert short.status_code == 422
    assert short.json()["error"]["code"] == "INVALID_REFERENCE"

    completed = client.post(
        f"{API}/settlements/{settlement['id']}/complete",
        json={"payment_reference": "NEFT-2024-0110"},
        headers=ADMIN_HEADERS,
    )
    assert completed.status_code == 200
    assert completed.json()["data"]["processed_by"] == "ops-7"

    claimed = client.get(f"{API}/settlements/{settlement['id']}/transactions").json()["data"]
    assert sorted(t["source_id"] for t in claimed) == ["BK-0", "BK-1"]
    assert {t["settlement_status"] for t in claimed} == {"settled"}

    daily = client.get(f"{API}/vendors/{vendor_id}/settlements/2024-01-10").json()["data"]
    assert Decimal(daily["payment_settled"]) == Decimal("5000")
    assert Decimal(daily["pending_settlement"]) == Decimal("0")
    assert Decimal(daily["in_settlement_process"]) == Decimal("0")


def test_zero_amount_on_empty_day_is_nothing_to_settle(client, vendor_id):
    response = client.post(
        f"{API}/settlements",
        json={"vendor_id": vendor_id, "date": "2024-01-11", "amount": "0"},
        headers=ADMIN_HEADERS,
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "NOTHING_TO_SETTLE"

    urgent = client.post(
        f"{API}/vendors/{vendor_id}/settlements/urgent",
        json={"date": "2024-01-11", "amount": "0", "reason": "rent due"},
    )
    assert urgent.status_code == 400
    assert urgent.json()["error"]["code"] == "NOTHING_TO_SETTLE"


def test_refund_queue_flow(client, notifier):
    for booking in ["BK-100", "BK-101"]:
        created = client.post(
            f"{API}/refunds",
            json={
                "booking_id": booking,
                "user_id": "user-9",
                "original_amount": "1000",
                "platform_fee": "100",
                "hours_before_charge": "12",
            },
        )
        assert created.status_code == 201
        assert Decimal(created.json()["data"]["final_refund_amount"]) == Decimal("850")

    queue = client.get(f"{API}/refunds").json()["data"]
    assert queue["total"] == 2
    first = queue["items"][0]

    missing = client.post(f"{API}/refunds/{first['id']}/process", json={}, headers=ADMIN_HEADERS)
    assert missing.status_code == 422
    assert missing.json()["error"]["code"] == "MISSING_TRANSACTION_ID"

    processed = client.post(
        f"{API}/refunds/{first['id']}/process",
        json={"transaction_id": "ESEWA-5521"},
        headers=ADMIN_HEADERS,
    )
    assert processed.status_code == 200
    data = processed.json()["data"]
    assert data["refund_status"] == "completed"
    assert data["processed_by"] == "ops-7"

    again = client.post(
        f"{API}/refunds/{first['id']}/process",
        json={"transaction_id": "ESEWA-5522"},
        headers=ADMIN_HEADERS,
    )
    assert again.status_code == 409
    assert again.json()["error"]["code"] == "INVALID_STATE"

    assert client.get(f"{API}/refunds").json()["data"]["total"] == 1
    assert "refund_processed" in [event.value for event in notifier.events()]


def test_refund_calculator(client):
    response = client.get(
        f"{API}/refunds/calculate",
        params={"original_amount": "1000", "platform_fee": "100", "hours_before_charge": "3"},
    )
    data = response.json()["data"]
    assert data["eligible"] is False
    assert Decimal(data["final_refund_amount"]) == Decimal("0")
