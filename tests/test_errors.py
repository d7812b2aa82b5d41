"""Error envelope mapping."""

from caredata.core.errors import ConflictError, ReferentialConflictError
from factories import auth_headers


async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


async def test_request_validation_is_400_with_details(client, seed):
    resp = await client.post(
        "/api/client-services",
        json={"clientId": "not-a-number", "serviceHours": 30},
        headers=auth_headers(seed.user_a),
    )

    assert resp.status_code == 400
    body = resp.json()
    assert body["message"] == "Validation Error"
    assert body["code"] == "VALIDATION_ERROR"
    failing = {tuple(err["loc"]) for err in body["details"]}
    assert ("body", "clientId") in failing
    assert ("body", "serviceHours") in failing


async def test_unexpected_error_is_generic_500(app, client):
    @app.get("/boom")
    async def boom():
        raise RuntimeError("database password is hunter2")

    resp = await client.get("/boom")

    assert resp.status_code == 500
    assert resp.json() == {"message": "Internal Server Error", "code": "INTERNAL_SERVER_ERROR"}


def test_conflict_bodies():
    assert ConflictError("Taken").to_body() == {"message": "Taken", "code": "CONFLICT"}

    body = ReferentialConflictError(
        "In use",
        details="Referenced by 1 client service(s)",
        referencing_services=[{"clientName": "Jane Smith"}],
    ).to_body()
    assert body == {
        "message": "In use",
        "code": "FOREIGN_KEY_CONSTRAINT",
        "details": "Referenced by 1 client service(s)",
        "conflictType": "FOREIGN_KEY_CONSTRAINT",
        "referencingServices": [{"clientName": "Jane Smith"}],
    }
