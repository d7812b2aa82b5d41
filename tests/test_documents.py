"""Document upload / download and service case notes."""

import pytest
from sqlalchemy.exc import OperationalError

from caredata.core.security import create_access_token
from caredata.services import document_service
from factories import add_client, add_master_data, add_service, auth_headers, context_for

PDF = b"%PDF-1.4 minimal"


async def _upload(client, user, client_id, *, segment_id=None, filename="care-plan.pdf"):
    data = {"clientId": str(client_id), "documentName": "Care plan", "documentType": "Plan"}
    if segment_id is not None:
        data["segmentId"] = str(segment_id)
    return await client.post(
        "/api/documents",
        data=data,
        files={"file": (filename, PDF, "application/pdf")},
        headers=auth_headers(user),
    )


async def test_upload_and_download(client, db, seed, document_store):
    client_row = await add_client(db, segment_id=seed.a1.segment_id)
    await db.commit()

    resp = await _upload(client, seed.user_a, client_row.id)

    assert resp.status_code == 201
    doc = resp.json()
    assert doc["segmentId"] == seed.a1.segment_id
    assert doc["filename"] == "care-plan.pdf"
    assert document_store.local_path(doc["filePath"]).read_bytes() == PDF

    # Plain link: token in the query string instead of a header
    download = await client.get(
        f"/api/documents/{doc['id']}/download",
        params={"token": create_access_token(seed.user_a)},
    )
    assert download.status_code == 200
    assert download.content == PDF
    assert download.headers["content-type"] == "application/pdf"


async def test_form_segment_is_guarded(client, db, seed):
    client_row = await add_client(db, segment_id=seed.a1.segment_id)
    await db.commit()

    resp = await _upload(client, seed.user_a, client_row.id, segment_id=seed.b1.segment_id)

    assert resp.status_code == 403


async def test_rejects_disallowed_extension(client, db, seed):
    client_row = await add_client(db, segment_id=seed.a1.segment_id)
    await db.commit()

    resp = await _upload(client, seed.user_a, client_row.id, filename="payload.exe")

    assert resp.status_code == 400
    assert resp.json()["message"] == "Invalid file type"


async def test_failed_write_removes_stored_file(db, seed, document_store, monkeypatch):
    client_row = await add_client(db, segment_id=seed.a1.segment_id)
    await db.commit()

    async def failing_commit():
        raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(db, "commit", failing_commit)

    with pytest.raises(OperationalError):
        await document_service.upload_document(
            db,
            context_for(seed.user_a),
            document_store,
            client_id=client_row.id,
            document_name="Care plan",
            document_type="Plan",
            filename="care-plan.pdf",
            data=PDF,
        )

    stored = [p for p in document_store.root.rglob("*") if p.is_file()]
    assert stored == []


async def test_other_company_cannot_read_document(client, db, seed):
    client_row = await add_client(db, segment_id=seed.a1.segment_id)
    await db.commit()
    doc = (await _upload(client, seed.user_a, client_row.id)).json()

    resp = await client.get(f"/api/documents/{doc['id']}", headers=auth_headers(seed.user_b))
    listing = await client.get(
        f"/api/documents/client/{client_row.id}", headers=auth_headers(seed.user_a)
    )

    assert resp.status_code == 403
    assert [d["id"] for d in listing.json()] == [doc["id"]]


# ── Case notes ───────────────────────────────────────────────────────


async def test_case_note_lifecycle(client, db, seed):
    master = await add_master_data(db, segment_id=seed.a1.segment_id)
    service = await add_service(db, await add_client(db, segment_id=seed.a1.segment_id), master)
    await db.commit()
    headers = auth_headers(seed.user_a)

    missing = await client.get(f"/api/service-case-notes/{service.id}", headers=headers)
    assert missing.status_code == 404

    created = await client.post(
        "/api/service-case-notes",
        json={"serviceId": service.id, "noteText": "First visit went well."},
        headers=headers,
    )
    assert created.status_code == 201
    assert created.json()["segmentId"] == seed.a1.segment_id

    again = await client.post(
        "/api/service-case-notes",
        json={"serviceId": service.id, "noteText": "Duplicate"},
        headers=headers,
    )
    assert again.status_code == 409

    updated = await client.put(
        f"/api/service-case-notes/{service.id}",
        json={"noteText": "Second visit rescheduled."},
        headers=headers,
    )
    assert updated.status_code == 200
    assert updated.json()["noteText"] == "Second visit rescheduled."
    assert updated.json()["updatedBy"] == seed.user_a.id


async def test_case_note_of_foreign_service_denied(client, db, seed):
    master = await add_master_data(db, segment_id=seed.b1.segment_id)
    service = await add_service(db, await add_client(db, segment_id=seed.b1.segment_id), master)
    await db.commit()

    resp = await client.get(
        f"/api/service-case-notes/{service.id}", headers=auth_headers(seed.user_a)
    )

    assert resp.status_code == 403
