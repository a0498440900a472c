from app.models.admin_action import AdminAction
from app.models.property import Property
from app.models.user import UserType
from conftest import auth_headers, lekki_listing


def test_create_listing(client, owner):
    response = client.post("/api/properties", json=lekki_listing(), headers=auth_headers(owner))

    assert response.status_code == 201
    body = response.json()
    assert body["property"]["status"] == "draft"
    assert body["property"]["verification_status"] == "pending"
    assert body["property"]["owner_id"] == str(owner.id)
    assert "duplicate_flags" not in body["property"]
    assert body["message"].startswith("Property created successfully")


def test_create_listing_short_title(client, owner, db):
    response = client.post(
        "/api/properties", json=lekki_listing(title="short"), headers=auth_headers(owner)
    )

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Invalid property data"
    assert "title" in [d["field"] for d in body["details"]]
    assert db.query(Property).count() == 0


def test_create_listing_requires_token(client):
    response = client.post("/api/properties", json=lekki_listing())

    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_buyers_cannot_list(client, buyer):
    response = client.post("/api/properties", json=lekki_listing(), headers=auth_headers(buyer))
    assert response.status_code == 403


def test_duplicate_flag_hidden_from_submitter(client, owner, make_live_listing):
    make_live_listing(owner)

    response = client.post("/api/properties", json=lekki_listing(), headers=auth_headers(owner))

    assert response.status_code == 201
    assert "duplicate_flags" not in response.json()["property"]


def test_search_rejects_inverted_price_range(client):
    response = client.get("/api/properties", params={"min_price": 5000000, "max_price": 1000000})

    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "max_price"


def test_search_rejects_bad_number(client):
    response = client.get("/api/properties", params={"min_price": "cheap"})

    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "min_price"


def test_search_rejects_nested_filters(client):
    response = client.get("/api/properties", params={"has_bq": "true"})

    assert response.status_code == 400
    assert response.json()["error"] == "Unsupported search filters"


def test_search_paginates(client, owner, make_live_listing):
    ids = {str(make_live_listing(owner, price=1000000 + i)) for i in range(5)}

    first = client.get("/api/properties", params={"limit": 2}).json()
    assert first["pagination"] == {"page": 1, "limit": 2, "total": 5, "pages": 3}

    seen = []
    for page in range(1, 4):
        body = client.get("/api/properties", params={"limit": 2, "page": page}).json()
        assert len(body["properties"]) <= 2
        seen.extend(p["id"] for p in body["properties"])

    assert sorted(seen) == sorted(ids)


def test_search_empty_result(client):
    body = client.get("/api/properties", params={"state": "Kano"}).json()
    assert body == {"properties": [], "pagination": {"page": 1, "limit": 20, "total": 0, "pages": 0}}


def test_draft_hidden_from_public(client, owner, make_profile):
    created = client.post("/api/properties", json=lekki_listing(), headers=auth_headers(owner)).json()
    property_id = created["property"]["id"]

    assert client.get(f"/api/properties/{property_id}").status_code == 404
    stranger = make_profile(UserType.USER)
    assert client.get(f"/api/properties/{property_id}", headers=auth_headers(stranger)).status_code == 404
    assert client.get(f"/api/properties/{property_id}", headers=auth_headers(owner)).status_code == 200


def test_owner_workflow(client, owner, admin):
    headers = auth_headers(owner)
    property_id = client.post("/api/properties", json=lekki_listing(), headers=headers).json()["property"]["id"]

    edited = client.patch(f"/api/properties/{property_id}", json={"price": 2750000}, headers=headers)
    assert edited.status_code == 200
    assert edited.json()["price"] == 2750000

    submitted = client.post(f"/api/properties/{property_id}/submit", headers=headers)
    assert submitted.json()["status"] == "pending_verification"

    locked = client.patch(f"/api/properties/{property_id}", json={"price": 1}, headers=headers)
    assert locked.status_code == 409

    approved = client.post(
        f"/api/admin/properties/{property_id}/verify",
        json={"action": "approve", "notes": "C of O verified"},
        headers=auth_headers(admin),
    )
    assert approved.status_code == 200
    assert approved.json()["status"] == "live"
    assert approved.json()["verification_status"] == "verified"

    public = client.get("/api/properties", params={"query": "lekki"}).json()
    assert [p["id"] for p in public["properties"]] == [property_id]

    delisted = client.post(f"/api/properties/{property_id}/delist", headers=headers)
    assert delisted.json()["status"] == "delisted"
    assert client.post(f"/api/properties/{property_id}/delist", headers=headers).status_code == 409

    mine = client.get("/api/properties/mine", headers=headers).json()
    assert [p["id"] for p in mine] == [property_id]


def test_other_owner_cannot_edit(client, owner, make_profile):
    property_id = client.post(
        "/api/properties", json=lekki_listing(), headers=auth_headers(owner)
    ).json()["property"]["id"]
    agent = make_profile(UserType.AGENT)

    response = client.post(f"/api/properties/{property_id}/submit", headers=auth_headers(agent))
    assert response.status_code == 403


def test_admin_rejects_listing(client, owner, admin):
    property_id = client.post(
        "/api/properties", json=lekki_listing(), headers=auth_headers(owner)
    ).json()["property"]["id"]
    client.post(f"/api/properties/{property_id}/submit", headers=auth_headers(owner))

    response = client.post(
        f"/api/admin/properties/{property_id}/verify",
        json={"action": "reject"},
        headers=auth_headers(admin),
    )

    body = response.json()
    assert (body["status"], body["verification_status"]) == ("rejected", "rejected")
    assert body["verification_notes"] == "Listing did not meet verification requirements."


def test_admin_cannot_publish_unverified(client, owner, admin):
    property_id = client.post(
        "/api/properties", json=lekki_listing(), headers=auth_headers(owner)
    ).json()["property"]["id"]
    client.post(f"/api/properties/{property_id}/submit", headers=auth_headers(owner))

    response = client.post(
        f"/api/admin/properties/{property_id}/status",
        json={"status": "live"},
        headers=auth_headers(admin),
    )
    assert response.status_code == 409


def test_admin_sees_duplicate_flags(client, owner, admin, make_live_listing):
    live_id = make_live_listing(owner)
    client.post("/api/properties", json=lekki_listing(), headers=auth_headers(owner))

    flagged = client.get("/api/admin/properties/duplicates", headers=auth_headers(admin)).json()

    assert len(flagged) == 1
    assert flagged[0]["duplicate_flags"] == [{"property_id": str(live_id), "match": "address"}]


def submit_duplicate(client, owner, make_live_listing):
    live_id = make_live_listing(owner)
    duplicate_id = client.post(
        "/api/properties", json=lekki_listing(), headers=auth_headers(owner)
    ).json()["property"]["id"]
    return live_id, duplicate_id


def test_keep_both_clears_flag(client, owner, admin, db, make_live_listing):
    _, duplicate_id = submit_duplicate(client, owner, make_live_listing)

    response = client.post(
        f"/api/admin/properties/{duplicate_id}/duplicates/resolve",
        json={"action": "keep_both", "notes": "Different flats in the same block"},
        headers=auth_headers(admin),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["duplicate_flags"] == []
    assert (body["status"], body["verification_status"]) == ("draft", "pending")
    assert client.get("/api/admin/properties/duplicates", headers=auth_headers(admin)).json() == []
    action = db.query(AdminAction).one()
    assert (action.action_type, str(action.target_id)) == ("resolve_duplicate_keep_both", duplicate_id)


def test_keep_master_rejects_duplicate(client, owner, admin, db, make_live_listing):
    live_id, duplicate_id = submit_duplicate(client, owner, make_live_listing)

    response = client.post(
        f"/api/admin/properties/{duplicate_id}/duplicates/resolve",
        json={"action": "keep_master", "master_property_id": str(live_id)},
        headers=auth_headers(admin),
    )

    body = response.json()
    assert (body["status"], body["verification_status"]) == ("rejected", "rejected")
    assert body["verification_notes"] == f"Duplicate of property {live_id}"
    assert body["duplicate_flags"] == []
    assert db.query(AdminAction).one().action_type == "resolve_duplicate_keep_master"


def test_keep_master_needs_master_id(client, owner, admin, make_live_listing):
    _, duplicate_id = submit_duplicate(client, owner, make_live_listing)

    response = client.post(
        f"/api/admin/properties/{duplicate_id}/duplicates/resolve",
        json={"action": "keep_master"},
        headers=auth_headers(admin),
    )

    assert response.status_code == 400
    assert [d["field"] for d in response.json()["details"]] == ["master_property_id"]
    flagged = client.get("/api/admin/properties/duplicates", headers=auth_headers(admin)).json()
    assert [p["id"] for p in flagged] == [duplicate_id]


def test_reject_duplicate(client, owner, admin, make_live_listing):
    _, duplicate_id = submit_duplicate(client, owner, make_live_listing)
    client.post(f"/api/properties/{duplicate_id}/submit", headers=auth_headers(owner))

    response = client.post(
        f"/api/admin/properties/{duplicate_id}/duplicates/resolve",
        json={"action": "reject_duplicate", "notes": "Same unit listed twice"},
        headers=auth_headers(admin),
    )

    body = response.json()
    assert (body["status"], body["verification_status"]) == ("rejected", "rejected")
    assert body["verification_notes"] == "Same unit listed twice"


def test_reject_duplicate_needs_reason(client, owner, admin, make_live_listing):
    _, duplicate_id = submit_duplicate(client, owner, make_live_listing)

    response = client.post(
        f"/api/admin/properties/{duplicate_id}/duplicates/resolve",
        json={"action": "reject_duplicate"},
        headers=auth_headers(admin),
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Rejection reason required for reject_duplicate action"


def test_resolve_unflagged_listing(client, owner, admin, make_live_listing):
    live_id = make_live_listing(owner)

    response = client.post(
        f"/api/admin/properties/{live_id}/duplicates/resolve",
        json={"action": "keep_both"},
        headers=auth_headers(admin),
    )

    assert response.status_code == 404


def test_admin_routes_need_admin(client, owner):
    response = client.get("/api/admin/properties/duplicates", headers=auth_headers(owner))
    assert response.status_code == 403


def test_analytics_overview(client, admin, owner, make_live_listing):
    make_live_listing(owner)

    response = client.get(
        "/api/admin/analytics/overview",
        params={"period": "7d", "include_trends": "false"},
        headers=auth_headers(admin),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["trends"] is None
    assert body["metrics"]["properties"]["live_properties"] == 1
    assert body["period"]["period_type"] == "7d"


def test_analytics_bad_period(client, admin):
    response = client.get(
        "/api/admin/analytics/overview", params={"period": "decade"}, headers=auth_headers(admin)
    )
    assert response.status_code == 400


def test_root_and_health(client):
    assert client.get("/").json()["status"] == "active"
    assert client.get("/health").json()["status"] == "healthy"
