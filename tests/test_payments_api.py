import re
from decimal import Decimal
from uuid import uuid4

import pytest
from httpx import AsyncClient


def legacy_payload(setup: dict, **overrides) -> dict:
    jan, feb = setup["jan"]["id"], setup["feb"]["id"]
    payload = {
        "student_id": setup["student"]["id"],
        "course_ids": [setup["course"]["id"]],
        "month_ids": [jan, feb],
        "total_amount": "3000",
        "discount_amount": "10",
        "discount_type": "percentage",
        "discounted_amount": "2700",
        "paid_amount": "100",
        "due_amount": "2600",
        "received_by": "Front desk",
    }
    payload.update(overrides)
    return payload


@pytest.mark.asyncio
async def test_create_payment_generates_invoice_number(client: AsyncClient, course_setup: dict) -> None:
    first = await client.post("/api/v1/payments", json=legacy_payload(course_setup))
    assert first.status_code == 201
    data = first.json()
    assert re.match(r"^INV\d{6}0001$", data["invoice_number"])
    assert data["student_name"] == "Rahim Uddin"
    assert data["student_code"] == course_setup["student"]["student_code"]
    assert data["month_payments"] == []

    second = await client.post("/api/v1/payments", json=legacy_payload(course_setup, discount_amount="0"))
    assert second.status_code == 201
    assert second.json()["invoice_number"].endswith("0002")


@pytest.mark.asyncio
async def test_month_allocations_merge_legacy_and_itemized(client: AsyncClient, course_setup: dict) -> None:
    jan, feb = course_setup["jan"]["id"], course_setup["feb"]["id"]
    student_id = course_setup["student"]["id"]

    legacy = await client.post("/api/v1/payments", json=legacy_payload(course_setup))
    assert legacy.status_code == 201

    itemized = await client.post(
        "/api/v1/payments",
        json=legacy_payload(
            course_setup,
            month_ids=[jan],
            month_payments=[
                {"month_id": jan, "month_fee": "1000", "paid_amount": "500", "discount_amount": "25"},
            ],
            total_amount="1000",
            discount_amount="0",
            discount_type="fixed",
            discounted_amount="1000",
            paid_amount="500",
            due_amount="500",
        ),
    )
    assert itemized.status_code == 201

    response = await client.get(f"/api/v1/payments/student/{student_id}/months")
    assert response.status_code == 200
    data = response.json()
    assert set(data) == {jan, feb}

    assert Decimal(data[jan]["total_paid"]) == Decimal("550")
    assert Decimal(data[jan]["total_discount"]) == Decimal("125")
    assert Decimal(data[jan]["month_fee"]) == Decimal("1000")
    assert [p["payment_id"] for p in data[jan]["payments"]] == [legacy.json()["id"], itemized.json()["id"]]

    assert Decimal(data[feb]["total_paid"]) == Decimal("50")
    assert Decimal(data[feb]["total_discount"]) == Decimal("200")
    assert Decimal(data[feb]["month_fee"]) == Decimal("2000")


@pytest.mark.asyncio
async def test_month_allocations_restricted_fixed_discount(client: AsyncClient, course_setup: dict) -> None:
    jan, feb = course_setup["jan"]["id"], course_setup["feb"]["id"]
    response = await client.post(
        "/api/v1/payments",
        json=legacy_payload(
            course_setup,
            discount_amount="300",
            discount_type="fixed",
            discount_applicable_month_ids=[feb],
            paid_amount="2700",
            due_amount="0",
        ),
    )
    assert response.status_code == 201

    data = (await client.get(f"/api/v1/payments/student/{course_setup['student']['id']}/months")).json()
    assert Decimal(data[jan]["total_discount"]) == Decimal("0")
    assert Decimal(data[feb]["total_discount"]) == Decimal("300")
    assert Decimal(data[jan]["total_paid"]) == Decimal("1350")


@pytest.mark.asyncio
async def test_month_allocations_unknown_student_is_empty(client: AsyncClient) -> None:
    response = await client.get(f"/api/v1/payments/student/{uuid4()}/months")
    assert response.status_code == 200
    assert response.json() == {}


@pytest.mark.asyncio
async def test_discounted_payments(client: AsyncClient, course_setup: dict) -> None:
    discounted = await client.post("/api/v1/payments", json=legacy_payload(course_setup))
    await client.post("/api/v1/payments", json=legacy_payload(course_setup, discount_amount="0"))

    response = await client.get("/api/v1/payments/discounted")
    assert response.status_code == 200
    assert [p["id"] for p in response.json()] == [discounted.json()["id"]]

    scoped = await client.get(
        "/api/v1/payments/discounted", params={"student_id": str(uuid4())}
    )
    assert scoped.json() == []


@pytest.mark.asyncio
async def test_payment_history_by_student(client: AsyncClient, course_setup: dict) -> None:
    created = await client.post("/api/v1/payments", json=legacy_payload(course_setup))
    student_id = course_setup["student"]["id"]

    history = await client.get(f"/api/v1/payments/student/{student_id}")
    assert [p["id"] for p in history.json()] == [created.json()["id"]]

    single = await client.get(f"/api/v1/payments/{created.json()['id']}")
    assert single.status_code == 200
    assert single.json()["discount_type"] == "percentage"

    missing = await client.get(f"/api/v1/payments/{uuid4()}")
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_create_payment_rejects_unknown_month(client: AsyncClient, course_setup: dict) -> None:
    response = await client.post(
        "/api/v1/payments",
        json=legacy_payload(course_setup, month_ids=[course_setup["jan"]["id"], str(uuid4())]),
    )
    assert response.status_code == 400
    assert "Unknown month" in response.json()["detail"]


@pytest.mark.asyncio
async def test_create_payment_rejects_unknown_student(client: AsyncClient, course_setup: dict) -> None:
    response = await client.post("/api/v1/payments", json=legacy_payload(course_setup, student_id=str(uuid4())))
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid student"


@pytest.mark.asyncio
async def test_create_payment_validates_shape(client: AsyncClient, course_setup: dict) -> None:
    no_months = await client.post("/api/v1/payments", json=legacy_payload(course_setup, month_ids=[]))
    assert no_months.status_code == 422

    outside = await client.post(
        "/api/v1/payments",
        json=legacy_payload(
            course_setup,
            month_ids=[course_setup["jan"]["id"]],
            discount_applicable_month_ids=[course_setup["feb"]["id"]],
        ),
    )
    assert outside.status_code == 422

    over_hundred = await client.post("/api/v1/payments", json=legacy_payload(course_setup, discount_amount="150"))
    assert over_hundred.status_code == 422


@pytest.mark.asyncio
async def test_payment_is_recorded_in_activity_feed(client: AsyncClient, course_setup: dict) -> None:
    await client.post("/api/v1/payments", json=legacy_payload(course_setup))
    feed = (await client.get("/api/v1/activities")).json()
    payment_entries = [a for a in feed if a["type"] == "payment_received"]
    assert len(payment_entries) == 1
    assert "Rahim Uddin" in payment_entries[0]["description"]
    assert payment_entries[0]["user"] == "admin"
