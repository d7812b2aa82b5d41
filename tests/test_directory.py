"""Companies, segments, the segment picker and user administration."""

import pytest

from caredata.core.errors import ValidationError
from caredata.models import UserRole
from caredata.services import directory_service, user_service
from factories import auth_headers, context_for


# ── Lookups ──────────────────────────────────────────────────────────


async def test_segments_of(db, seed):
    segments = await directory_service.segments_of(seed.company_a.company_id, db)
    assert [s.segment_name for s in segments] == ["North", "South"]


async def test_segment_by_id(db, seed):
    assert (await directory_service.segment_by_id(seed.b1.segment_id, db)).company_id == (
        seed.company_b.company_id
    )
    assert await directory_service.segment_by_id(999_999, db) is None


async def test_user_segments_endpoint(client, seed):
    resp = await client.get("/api/user/segments", headers=auth_headers(seed.user_a))

    assert resp.status_code == 200
    assert [(s["id"], s["segmentName"]) for s in resp.json()] == [
        (seed.a1.segment_id, "North"),
        (seed.a2.segment_id, "South"),
    ]


@pytest.mark.parametrize("who", ["global_admin", "orphan"])
async def test_user_segments_empty_without_company(client, seed, who):
    resp = await client.get("/api/user/segments", headers=auth_headers(getattr(seed, who)))

    assert resp.status_code == 200
    assert resp.json() == []


# ── Companies ────────────────────────────────────────────────────────


async def test_global_admin_creates_company(client, seed):
    resp = await client.post(
        "/api/companies",
        json={"companyName": "Coastal Care", "contactPersonEmail": "ops@coastal.example"},
        headers=auth_headers(seed.global_admin),
    )

    assert resp.status_code == 201
    assert resp.json()["companyName"] == "Coastal Care"
    assert resp.json()["segments"] == []


async def test_company_admin_cannot_create_company(client, seed):
    resp = await client.post(
        "/api/companies",
        json={"companyName": "Shadow Care"},
        headers=auth_headers(seed.admin_a),
    )
    assert resp.status_code == 403


async def test_duplicate_company_name(client, seed):
    resp = await client.post(
        "/api/companies",
        json={"companyName": "Acme Care"},
        headers=auth_headers(seed.global_admin),
    )
    assert resp.status_code == 409


async def test_company_admin_sees_only_own_company(client, seed):
    resp = await client.get("/api/companies", headers=auth_headers(seed.admin_a))
    assert [c["companyId"] for c in resp.json()] == [seed.company_a.company_id]

    resp = await client.get(
        f"/api/companies/{seed.company_b.company_id}", headers=auth_headers(seed.admin_a)
    )
    assert resp.status_code == 403


async def test_non_admin_cannot_manage_companies(client, seed):
    resp = await client.get("/api/companies", headers=auth_headers(seed.user_a))
    assert resp.status_code == 403


# ── Segments ─────────────────────────────────────────────────────────


async def test_create_segment_and_duplicate(client, seed):
    url = f"/api/companies/{seed.company_a.company_id}/segments"

    created = await client.post(url, json={"segmentName": "West"}, headers=auth_headers(seed.admin_a))
    duplicate = await client.post(url, json={"segmentName": "West"}, headers=auth_headers(seed.admin_a))

    assert created.status_code == 201
    assert created.json()["companyId"] == seed.company_a.company_id
    assert duplicate.status_code == 409


async def test_same_segment_name_in_other_company_allowed(client, seed):
    resp = await client.post(
        f"/api/companies/{seed.company_b.company_id}/segments",
        json={"segmentName": "North"},
        headers=auth_headers(seed.global_admin),
    )
    assert resp.status_code == 201


async def test_rename_segment_guarded_by_path_id(client, seed):
    url = f"/api/segments/{seed.b1.segment_id}"

    denied = await client.put(url, json={"segmentName": "Far East"}, headers=auth_headers(seed.admin_a))
    assert denied.status_code == 403

    renamed = await client.put(url, json={"segmentName": "Far East"}, headers=auth_headers(seed.global_admin))
    assert renamed.status_code == 200
    assert renamed.json()["segmentName"] == "Far East"
    assert renamed.json()["companyId"] == seed.company_b.company_id


@pytest.mark.parametrize("carrier", ["query", "body"])
async def test_rename_foreign_segment_with_own_segment_id_denied(client, db, seed, carrier):
    # An allowed segmentId elsewhere in the request must not authorize the path segment
    params, body = {}, {"segmentName": "Hijacked"}
    if carrier == "query":
        params["segmentId"] = seed.a1.segment_id
    else:
        body["segmentId"] = seed.a1.segment_id

    resp = await client.put(
        f"/api/segments/{seed.b1.segment_id}",
        params=params,
        json=body,
        headers=auth_headers(seed.admin_a),
    )

    assert resp.status_code == 403
    segment = await directory_service.segment_by_id(seed.b1.segment_id, db)
    assert segment.segment_name == "East"


async def test_rename_own_segment(client, seed):
    resp = await client.put(
        f"/api/segments/{seed.a2.segment_id}",
        json={"segmentName": "South West"},
        headers=auth_headers(seed.admin_a),
    )

    assert resp.status_code == 200
    assert resp.json()["segmentName"] == "South West"


# ── Users ────────────────────────────────────────────────────────────


async def test_non_admin_user_requires_company(db, seed):
    with pytest.raises(ValidationError):
        await user_service.create_user(
            db,
            context_for(seed.global_admin),
            name="Nobody",
            username="nobody",
            password="long-enough-pw",
            role=UserRole.USER,
            company_id=None,
        )


async def test_update_cannot_strip_company_from_user(client, seed):
    resp = await client.patch(
        f"/api/users/{seed.user_a.id}",
        json={"companyId": None},
        headers=auth_headers(seed.global_admin),
    )
    assert resp.status_code == 400


async def test_company_admin_creates_user_in_own_company(client, seed):
    ok = await client.post(
        "/api/users",
        json={
            "name": "New Carer",
            "username": "carer",
            "password": "long-enough-pw",
            "companyId": seed.company_a.company_id,
        },
        headers=auth_headers(seed.admin_a),
    )
    foreign = await client.post(
        "/api/users",
        json={
            "name": "Spy",
            "username": "spy",
            "password": "long-enough-pw",
            "companyId": seed.company_b.company_id,
        },
        headers=auth_headers(seed.admin_a),
    )

    assert ok.status_code == 201
    assert ok.json()["role"] == "user"
    assert foreign.status_code == 403


async def test_duplicate_username(client, seed):
    resp = await client.post(
        "/api/users",
        json={
            "name": "Alan Again",
            "username": "alan",
            "password": "long-enough-pw",
            "companyId": seed.company_a.company_id,
        },
        headers=auth_headers(seed.global_admin),
    )
    assert resp.status_code == 409


async def test_company_admin_lists_own_users(client, seed):
    resp = await client.get("/api/users", headers=auth_headers(seed.admin_a))

    assert resp.status_code == 200
    assert {u["username"] for u in resp.json()} == {"ada", "alan"}
