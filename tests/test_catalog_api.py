import re
from uuid import uuid4

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_batch_names_are_unique_case_insensitively(client: AsyncClient) -> None:
    created = await client.post("/api/v1/batches", json={"name": "HSC 2026"})
    assert created.status_code == 201

    duplicate = await client.post("/api/v1/batches", json={"name": "hsc 2026"})
    assert duplicate.status_code == 400
    assert duplicate.json()["detail"] == "Batch with this name already exists"

    other = await client.post("/api/v1/batches", json={"name": "SSC 2026"})
    renamed = await client.put(f"/api/v1/batches/{other.json()['id']}", json={"name": "HSC 2026"})
    assert renamed.status_code == 400


@pytest.mark.asyncio
async def test_batch_update_and_delete(client: AsyncClient) -> None:
    batch = (await client.post("/api/v1/batches", json={"name": "Morning"})).json()

    updated = await client.put(f"/api/v1/batches/{batch['id']}", json={"name": "Evening"})
    assert updated.status_code == 200
    assert updated.json()["name"] == "Evening"

    deleted = await client.delete(f"/api/v1/batches/{batch['id']}")
    assert deleted.status_code == 204

    missing = await client.get(f"/api/v1/batches/{batch['id']}")
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_delete_guards(client: AsyncClient, course_setup: dict) -> None:
    batch_delete = await client.delete(f"/api/v1/batches/{course_setup['batch']['id']}")
    assert batch_delete.status_code == 400
    assert batch_delete.json()["detail"] == "Cannot delete batch with existing courses"

    course_delete = await client.delete(f"/api/v1/courses/{course_setup['course']['id']}")
    assert course_delete.status_code == 400
    assert course_delete.json()["detail"] == "Cannot delete course with existing months"

    institution_delete = await client.delete(f"/api/v1/institutions/{course_setup['institution']['id']}")
    assert institution_delete.status_code == 400


@pytest.mark.asyncio
async def test_month_delete_refused_while_referenced(client: AsyncClient, course_setup: dict) -> None:
    jan, feb = course_setup["jan"]["id"], course_setup["feb"]["id"]

    starting_month = await client.delete(f"/api/v1/months/{jan}")
    assert starting_month.status_code == 400
    assert starting_month.json()["detail"] == "Cannot delete month used as a starting month by students"

    payment = await client.post(
        "/api/v1/payments",
        json={
            "student_id": course_setup["student"]["id"],
            "course_ids": [course_setup["course"]["id"]],
            "month_ids": [feb],
            "month_payments": [{"month_id": feb, "month_fee": "2000", "paid_amount": "2000"}],
            "total_amount": "2000",
            "discounted_amount": "2000",
            "paid_amount": "2000",
            "due_amount": "0",
            "received_by": "Front desk",
        },
    )
    assert payment.status_code == 201
    paid_month = await client.delete(f"/api/v1/months/{feb}")
    assert paid_month.status_code == 400
    assert paid_month.json()["detail"] == "Cannot delete month with recorded payments"

    march = (
        await client.post(
            "/api/v1/months",
            json={"name": "March", "month_number": 3, "course_id": course_setup["course"]["id"], "payment": "1000"},
        )
    ).json()
    unused = await client.delete(f"/api/v1/months/{march['id']}")
    assert unused.status_code == 204


@pytest.mark.asyncio
async def test_course_requires_existing_batch_and_unique_name(client: AsyncClient, course_setup: dict) -> None:
    batch_id = course_setup["batch"]["id"]
    duplicate = await client.post("/api/v1/courses", json={"name": "PHYSICS", "batch_id": batch_id})
    assert duplicate.status_code == 400

    by_batch = await client.get(f"/api/v1/courses/batch/{batch_id}")
    assert [c["name"] for c in by_batch.json()] == ["Physics"]
    assert by_batch.json()[0]["batch_name"] == "HSC 2026"


@pytest.mark.asyncio
async def test_month_validation(client: AsyncClient, course_setup: dict) -> None:
    course_id = course_setup["course"]["id"]

    out_of_range = await client.post(
        "/api/v1/months",
        json={"name": "Bonus", "month_number": 1000, "course_id": course_id, "payment": "10"},
    )
    assert out_of_range.status_code == 422

    negative = await client.post(
        "/api/v1/months",
        json={"name": "Bonus", "month_number": 5, "course_id": course_id, "payment": "-1"},
    )
    assert negative.status_code == 422

    same_number = await client.post(
        "/api/v1/months",
        json={"name": "March", "month_number": 2, "course_id": course_id, "payment": "1500"},
    )
    assert same_number.status_code == 400


@pytest.mark.asyncio
async def test_months_by_course_ordered_by_number(client: AsyncClient, course_setup: dict) -> None:
    course_id = course_setup["course"]["id"]
    await client.post(
        "/api/v1/months",
        json={"name": "December", "month_number": 12, "course_id": course_id, "payment": "900"},
    )
    response = await client.get(f"/api/v1/months/course/{course_id}")
    assert [m["month_number"] for m in response.json()] == [1, 2, 12]
    assert response.json()[0]["course_name"] == "Physics"


@pytest.mark.asyncio
async def test_month_update_ignores_negative_fee(client: AsyncClient, course_setup: dict) -> None:
    jan_id = course_setup["jan"]["id"]
    response = await client.put(f"/api/v1/months/{jan_id}", json={"name": "Jan", "payment": "-5"})
    assert response.status_code == 200
    assert response.json()["name"] == "Jan"
    assert float(response.json()["payment"]) == 1000.0

    response = await client.put(f"/api/v1/months/{jan_id}", json={"payment": "1100"})
    assert float(response.json()["payment"]) == 1100.0


@pytest.mark.asyncio
async def test_student_code_and_lookup(client: AsyncClient, course_setup: dict) -> None:
    student = course_setup["student"]
    assert re.match(r"^BTF\d{2}0001$", student["student_code"])
    assert len(student["enrolled_courses"]) == 1

    by_code = await client.get(f"/api/v1/students/code/{student['student_code']}")
    assert by_code.status_code == 200
    assert by_code.json()["id"] == student["id"]


@pytest.mark.asyncio
async def test_student_requires_enrollment(client: AsyncClient, course_setup: dict) -> None:
    response = await client.post(
        "/api/v1/students",
        json={
            "name": "No Courses",
            "institution_id": course_setup["institution"]["id"],
            "gender": "Female",
            "phone": "01711111111",
            "guardian_name": "Guardian",
            "guardian_phone": "01811111111",
            "batch_id": course_setup["batch"]["id"],
            "enrolled_courses": [],
        },
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_student_enrollment_must_reference_known_course_and_month(
    client: AsyncClient, course_setup: dict
) -> None:
    body = {
        "name": "Nadia Islam",
        "institution_id": course_setup["institution"]["id"],
        "gender": "Female",
        "phone": "01722222222",
        "guardian_name": "Guardian",
        "guardian_phone": "01822222222",
        "batch_id": course_setup["batch"]["id"],
    }

    unknown_course = await client.post(
        "/api/v1/students",
        json={
            **body,
            "enrolled_courses": [{"course_id": str(uuid4()), "starting_month_id": course_setup["jan"]["id"]}],
        },
    )
    assert unknown_course.status_code == 400
    assert unknown_course.json()["detail"] == "Invalid course in enrollment"

    unknown_month = await client.post(
        "/api/v1/students",
        json={
            **body,
            "enrolled_courses": [
                {
                    "course_id": course_setup["course"]["id"],
                    "starting_month_id": course_setup["jan"]["id"],
                    "ending_month_id": str(uuid4()),
                }
            ],
        },
    )
    assert unknown_month.status_code == 400
    assert unknown_month.json()["detail"] == "Invalid month in enrollment"

    update = await client.put(
        f"/api/v1/students/{course_setup['student']['id']}",
        json={
            **body,
            "enrolled_courses": [{"course_id": course_setup["course"]["id"], "starting_month_id": str(uuid4())}],
        },
    )
    assert update.status_code == 400


@pytest.mark.asyncio
async def test_student_update_replaces_enrollments(client: AsyncClient, course_setup: dict) -> None:
    student = course_setup["student"]
    body = {
        "name": "Rahim U.",
        "institution_id": course_setup["institution"]["id"],
        "gender": "Male",
        "phone": "01700000000",
        "guardian_name": "Karim Uddin",
        "guardian_phone": "01800000000",
        "batch_id": course_setup["batch"]["id"],
        "enrolled_courses": [
            {
                "course_id": course_setup["course"]["id"],
                "starting_month_id": course_setup["feb"]["id"],
                "ending_month_id": course_setup["feb"]["id"],
            }
        ],
    }
    response = await client.put(f"/api/v1/students/{student['id']}", json=body)
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Rahim U."
    assert data["student_code"] == student["student_code"]
    assert [e["starting_month_id"] for e in data["enrolled_courses"]] == [course_setup["feb"]["id"]]


@pytest.mark.asyncio
async def test_activity_feed_records_changes(client: AsyncClient, course_setup: dict) -> None:
    feed = (await client.get("/api/v1/activities")).json()
    types = {a["type"] for a in feed}
    assert {"batch_created", "course_created", "month_created", "institution_created", "student_added"} <= types
    assert all(a["user"] == "admin" for a in feed)


@pytest.mark.asyncio
async def test_reference_options_add_list_delete(client: AsyncClient) -> None:
    created = await client.post("/api/v1/references/reference", json={"value": "Facebook"})
    assert created.status_code == 201
    assert created.json()["type"] == "reference"
    assert created.json()["value"] == "Facebook"

    duplicate = await client.post("/api/v1/references/reference", json={"value": "  facebook "})
    assert duplicate.status_code == 400
    assert duplicate.json()["detail"] == "Reference option already exists"

    # Same value under the other type is a separate option.
    received_by = await client.post("/api/v1/references/receivedBy", json={"value": "Facebook"})
    assert received_by.status_code == 201

    references = (await client.get("/api/v1/references/reference")).json()
    assert [o["value"] for o in references] == ["Facebook"]

    wrong_type = await client.delete(f"/api/v1/references/receivedBy/{created.json()['id']}")
    assert wrong_type.status_code == 404

    deleted = await client.delete(f"/api/v1/references/reference/{created.json()['id']}")
    assert deleted.status_code == 204
    assert (await client.get("/api/v1/references/reference")).json() == []
    assert len((await client.get("/api/v1/references/receivedBy")).json()) == 1

    unknown_type = await client.get("/api/v1/references/notes")
    assert unknown_type.status_code == 422

    types = [a["type"] for a in (await client.get("/api/v1/activities")).json()]
    assert types.count("reference_added") == 2
    assert types.count("reference_deleted") == 1
