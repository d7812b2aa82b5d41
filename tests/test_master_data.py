"""Master-data consistency guard: existence, referential conflicts, get-or-create."""

import pytest
from sqlalchemy import delete, func, select

from caredata.core.errors import ConflictError, ReferentialConflictError
from caredata.models import ClientService, MasterData
from caredata.services import master_data_service
from factories import add_client, add_master_data, add_service, auth_headers, context_for

COMBO = ("Personal Care", "Showering", "CarePlus")


def _update_body(**overrides):
    body = {
        "serviceCategory": "Personal Care",
        "serviceType": "Bathing",
        "serviceProvider": "CarePlus",
        "active": True,
    }
    body.update(overrides)
    return body


# ── exists ───────────────────────────────────────────────────────────


async def test_exists_matches_exact_tuple_only(db, seed):
    await master_data_service.create_master_data(
        db,
        context_for(seed.admin_a),
        service_category=COMBO[0],
        service_type=COMBO[1],
        service_provider=COMBO[2],
        segment_id=seed.a1.segment_id,
    )

    assert await master_data_service.exists(db, *COMBO, seed.a1.segment_id)
    assert not await master_data_service.exists(db, *COMBO, seed.a2.segment_id)
    assert not await master_data_service.exists(db, *COMBO, None)
    assert not await master_data_service.exists(db, COMBO[0], COMBO[1], "Other", seed.a1.segment_id)


async def test_exists_global_does_not_match_scoped(db, seed):
    await add_master_data(db, segment_id=None)

    assert await master_data_service.exists(db, *COMBO, None)
    assert not await master_data_service.exists(db, *COMBO, seed.a1.segment_id)


async def test_exists_active_only(db, seed):
    await add_master_data(db, segment_id=seed.a1.segment_id, active=False)

    assert await master_data_service.exists(db, *COMBO, seed.a1.segment_id)
    assert not await master_data_service.exists(
        db, *COMBO, seed.a1.segment_id, active_only=True
    )


async def test_create_duplicate_is_conflict(db, seed):
    await add_master_data(db, segment_id=seed.a1.segment_id)

    with pytest.raises(ConflictError):
        await master_data_service.create_master_data(
            db,
            context_for(seed.admin_a),
            service_category=COMBO[0],
            service_type=COMBO[1],
            service_provider=COMBO[2],
            segment_id=seed.a1.segment_id,
        )


# ── Referential guard ────────────────────────────────────────────────


async def test_find_referencing_services(db, seed):
    master = await add_master_data(db, segment_id=seed.a1.segment_id)
    client_row = await add_client(db, segment_id=seed.a1.segment_id, last_name="Nguyen")
    await add_service(db, client_row, master)
    other = await add_master_data(db, segment_id=seed.a2.segment_id)
    await add_service(db, await add_client(db, segment_id=seed.a2.segment_id), other)

    refs = await master_data_service.find_referencing_services(db, *COMBO, seed.a1.segment_id)

    assert refs == [
        {"clientName": "Jane Nguyen", "status": "Planned", "serviceStartDate": "2024-03-04"}
    ]


async def test_update_blocked_while_referenced(db, seed):
    master = await add_master_data(db, segment_id=seed.a1.segment_id)
    await add_service(db, await add_client(db, segment_id=seed.a1.segment_id), master)
    ctx = context_for(seed.admin_a)

    with pytest.raises(ReferentialConflictError) as exc:
        await master_data_service.update_master_data(
            master.id,
            db,
            ctx,
            service_category="Personal Care",
            service_type="Bathing",
            service_provider="CarePlus",
            active=True,
            segment_id=seed.a1.segment_id,
        )
    assert len(exc.value.referencing_services) == 1
    assert "Jane Smith" in exc.value.details

    await db.refresh(master)
    assert master.service_type == "Showering"


async def test_update_http_conflict_then_success(client, db, seed):
    master = await add_master_data(db, segment_id=seed.a1.segment_id)
    await add_service(db, await add_client(db, segment_id=seed.a1.segment_id), master)
    await db.commit()
    url = f"/api/master-data/{master.id}"
    params = {"segmentId": seed.a1.segment_id}

    resp = await client.put(
        url, params=params, json=_update_body(), headers=auth_headers(seed.admin_a)
    )

    assert resp.status_code == 409
    body = resp.json()
    assert body["code"] == "FOREIGN_KEY_CONSTRAINT"
    assert body["conflictType"] == "FOREIGN_KEY_CONSTRAINT"
    assert body["message"]
    assert "Personal Care / Showering / CarePlus" in body["details"]
    assert body["referencingServices"] == [
        {"clientName": "Jane Smith", "status": "Planned", "serviceStartDate": "2024-03-04"}
    ]
    unchanged = await db.scalar(select(MasterData.service_type).where(MasterData.id == master.id))
    assert unchanged == "Showering"

    await db.execute(delete(ClientService))
    await db.commit()

    resp = await client.put(
        url, params=params, json=_update_body(), headers=auth_headers(seed.admin_a)
    )

    assert resp.status_code == 200
    assert resp.json()["serviceType"] == "Bathing"


async def test_update_into_existing_combination_is_conflict(client, db, seed):
    await add_master_data(db, segment_id=seed.a1.segment_id, service_type="Bathing")
    master = await add_master_data(db, segment_id=seed.a1.segment_id)
    await db.commit()

    resp = await client.put(
        f"/api/master-data/{master.id}",
        params={"segmentId": seed.a1.segment_id},
        json=_update_body(),
        headers=auth_headers(seed.admin_a),
    )

    assert resp.status_code == 409
    assert resp.json()["code"] == "CONFLICT"


async def test_plain_user_creates_and_updates_in_own_segment(client, db, seed):
    headers = auth_headers(seed.user_a)
    params = {"segmentId": seed.a1.segment_id}

    created = await client.post(
        "/api/master-data", params=params, json=_update_body(), headers=headers
    )
    assert created.status_code == 201
    assert created.json()["segmentId"] == seed.a1.segment_id

    updated = await client.put(
        f"/api/master-data/{created.json()['id']}",
        params=params,
        json=_update_body(serviceProvider="HomeAid"),
        headers=headers,
    )
    assert updated.status_code == 200
    assert updated.json()["serviceProvider"] == "HomeAid"


async def test_update_without_segment_keeps_row_segment(client, db, seed):
    master = await add_master_data(db, segment_id=seed.a1.segment_id)
    await db.commit()

    resp = await client.put(
        f"/api/master-data/{master.id}",
        json=_update_body(),
        headers=auth_headers(seed.admin_a),
    )
    other_company = await client.get("/api/master-data", headers=auth_headers(seed.user_b))

    assert resp.status_code == 200
    assert resp.json()["segmentId"] == seed.a1.segment_id
    assert master.id not in [row["id"] for row in other_company.json()]


async def test_company_user_cannot_write_unscoped_rows(client, db, seed):
    global_row = await add_master_data(db, segment_id=None)
    await db.commit()

    create = await client.post(
        "/api/master-data", json=_update_body(), headers=auth_headers(seed.admin_a)
    )
    update = await client.put(
        f"/api/master-data/{global_row.id}",
        json=_update_body(),
        headers=auth_headers(seed.admin_a),
    )

    assert create.status_code == 403
    assert update.status_code == 403
    assert await db.scalar(select(func.count()).select_from(MasterData)) == 1


async def test_global_admin_updates_unscoped_row(client, db, seed):
    global_row = await add_master_data(db, segment_id=None)
    await db.commit()

    resp = await client.put(
        f"/api/master-data/{global_row.id}",
        json=_update_body(),
        headers=auth_headers(seed.global_admin),
    )

    assert resp.status_code == 200
    assert resp.json()["segmentId"] is None
    assert resp.json()["serviceType"] == "Bathing"


# ── Client-service creation gate ─────────────────────────────────────


def _service_body(client_id: int, **overrides):
    body = {
        "clientId": client_id,
        "serviceCategory": COMBO[0],
        "serviceType": COMBO[1],
        "serviceProvider": COMBO[2],
        "serviceStartDate": "2024-05-01",
        "serviceDays": ["Friday", "Monday", "Monday"],
        "serviceHours": 3,
    }
    body.update(overrides)
    return body


async def test_service_against_missing_combination_rejected(client, db, seed):
    # Same triple exists, but only in another segment
    await add_master_data(db, segment_id=seed.a2.segment_id)
    client_row = await add_client(db, segment_id=seed.a1.segment_id)
    await db.commit()

    resp = await client.post(
        "/api/client-services",
        json=_service_body(client_row.id),
        headers=auth_headers(seed.user_a),
    )

    assert resp.status_code == 400
    assert resp.json()["code"] == "VALIDATION_ERROR"
    assert await db.scalar(select(func.count()).select_from(ClientService)) == 0


async def test_service_against_inactive_combination_rejected(client, db, seed):
    await add_master_data(db, segment_id=seed.a1.segment_id, active=False)
    client_row = await add_client(db, segment_id=seed.a1.segment_id)
    await db.commit()

    resp = await client.post(
        "/api/client-services",
        json=_service_body(client_row.id),
        headers=auth_headers(seed.user_a),
    )

    assert resp.status_code == 400
    assert await db.scalar(select(func.count()).select_from(ClientService)) == 0


async def test_service_inherits_client_segment(client, db, seed):
    await add_master_data(db, segment_id=seed.a1.segment_id)
    client_row = await add_client(db, segment_id=seed.a1.segment_id)
    await db.commit()

    resp = await client.post(
        "/api/client-services",
        json=_service_body(client_row.id),
        headers=auth_headers(seed.user_a),
    )

    assert resp.status_code == 201
    body = resp.json()
    assert body["segmentId"] == seed.a1.segment_id
    assert body["status"] == "Planned"
    assert body["serviceDays"] == ["Monday", "Friday"]


async def test_service_status_patch(client, db, seed):
    master = await add_master_data(db, segment_id=seed.a1.segment_id)
    service = await add_service(db, await add_client(db, segment_id=seed.a1.segment_id), master)
    await db.commit()

    resp = await client.patch(
        f"/api/client-services/{service.id}",
        json={"status": "In Progress"},
        headers=auth_headers(seed.user_a),
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "In Progress"

    resp = await client.patch(
        f"/api/client-services/{service.id}",
        json={"status": "Done"},
        headers=auth_headers(seed.user_a),
    )
    assert resp.status_code == 400


# ── Get-or-create & verify ───────────────────────────────────────────


async def test_ensure_master_data_reports_created(db, seed):
    ctx = context_for(seed.user_a)

    first, created = await master_data_service.ensure_master_data(
        db, ctx, service_category="Nursing", service_type="Wound care", segment_id=seed.a1.segment_id
    )
    second, created_again = await master_data_service.ensure_master_data(
        db, ctx, service_category="Nursing", service_type="Wound care", segment_id=seed.a1.segment_id
    )

    assert created is True
    assert created_again is False
    assert first.id == second.id
    assert first.service_provider == ""


async def test_client_assignment_endpoint(client, db, seed):
    client_row = await add_client(db, segment_id=seed.a1.segment_id)
    await db.commit()
    payload = {"clientId": client_row.id, "careCategory": "Nursing", "careType": "Wound care"}

    first = await client.post("/api/client-assignment", json=payload, headers=auth_headers(seed.user_a))
    second = await client.post("/api/client-assignment", json=payload, headers=auth_headers(seed.user_a))

    assert first.status_code == 201
    assert first.json()["created"] is True
    assert first.json()["segmentId"] == seed.a1.segment_id
    assert second.json()["created"] is False
    assert second.json()["id"] == first.json()["id"]


async def test_verify_combination(client, db, seed):
    await add_master_data(db, segment_id=seed.a1.segment_id)
    await db.commit()
    params = {
        "category": COMBO[0],
        "type": COMBO[1],
        "provider": COMBO[2],
        "segmentId": seed.a1.segment_id,
    }

    found = await client.get("/api/master-data/verify", params=params, headers=auth_headers(seed.user_a))
    assert found.status_code == 200
    assert found.json() == {"success": True}

    params["segmentId"] = seed.a2.segment_id
    missing = await client.get("/api/master-data/verify", params=params, headers=auth_headers(seed.user_a))
    assert missing.status_code == 404
    assert missing.json()["code"] == "NOT_FOUND"
    assert "Master Data" in missing.json()["details"]
