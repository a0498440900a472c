import uuid

from app.models.property import PropertyStatus
from app.models.user import UserType
from conftest import auth_headers

MESSAGE = "Is this flat still available for inspection on Saturday?"


def send(client, sender, property_id, **extra):
    payload = {"property_id": str(property_id), "message": MESSAGE}
    payload.update(extra)
    return client.post("/api/inquiries", json=payload, headers=auth_headers(sender))


def test_buyer_sends_inquiry(client, owner, buyer, make_live_listing):
    property_id = make_live_listing(owner)

    response = send(client, buyer, property_id, contact_phone="0803 123 4567", contact_email="ada@realest.com.ng")

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "pending"
    assert body["receiver_id"] == str(owner.id)
    assert body["property_title"] == "Modern 3BR Apartment in Lekki Phase 1"
    assert body["property_status"] == "live"
    assert body["contact_phone"] == "+2348031234567"


def test_only_users_send_inquiries(client, owner, make_profile, make_live_listing):
    property_id = make_live_listing(owner)
    agent = make_profile(UserType.AGENT)

    assert send(client, agent, property_id).status_code == 403


def test_inquiry_on_hidden_listing(client, owner, buyer, repository, make_live_listing):
    property_id = make_live_listing(owner)
    repository.update_status(property_id, PropertyStatus.DELISTED)

    assert send(client, buyer, property_id).status_code == 404
    assert send(client, buyer, uuid.uuid4()).status_code == 404


def test_short_message_rejected(client, owner, buyer, make_live_listing):
    property_id = make_live_listing(owner)

    response = client.post(
        "/api/inquiries",
        json={"property_id": str(property_id), "message": "hi"},
        headers=auth_headers(buyer),
    )

    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "message"


def test_respond_then_close(client, owner, buyer, make_live_listing):
    property_id = make_live_listing(owner)
    inquiry_id = send(client, buyer, property_id).json()["id"]

    responded = client.post(
        f"/api/inquiries/{inquiry_id}/respond",
        json={"response_message": "Yes, inspection is open from 10am."},
        headers=auth_headers(owner),
    )
    assert responded.status_code == 200
    assert responded.json()["status"] == "responded"
    assert responded.json()["responded_at"] is not None

    closed = client.post(f"/api/inquiries/{inquiry_id}/close", headers=auth_headers(owner))
    assert closed.json()["status"] == "closed"

    again = client.post(
        f"/api/inquiries/{inquiry_id}/respond",
        json={"response_message": "Following up on your question."},
        headers=auth_headers(owner),
    )
    assert again.status_code == 409


def test_only_receiver_acts(client, owner, buyer, make_live_listing):
    property_id = make_live_listing(owner)
    inquiry_id = send(client, buyer, property_id).json()["id"]

    response = client.post(f"/api/inquiries/{inquiry_id}/close", headers=auth_headers(buyer))
    assert response.status_code == 403


def test_listing_by_role(client, owner, buyer, make_live_listing):
    property_id = make_live_listing(owner)
    inquiry_id = send(client, buyer, property_id).json()["id"]

    sent = client.get("/api/inquiries", headers=auth_headers(buyer)).json()["inquiries"]
    received = client.get("/api/inquiries", headers=auth_headers(owner)).json()["inquiries"]

    assert [i["id"] for i in sent] == [inquiry_id]
    assert [i["id"] for i in received] == [inquiry_id]


def test_inquiries_need_login(client):
    assert client.get("/api/inquiries").status_code == 401


def test_second_pending_inquiry_refused(client, owner, buyer, make_live_listing):
    property_id = make_live_listing(owner)

    assert send(client, buyer, property_id).status_code == 201
    again = send(client, buyer, property_id)

    assert again.status_code == 400
    assert again.json()["error"] == "You already have a pending inquiry for this property"
    assert len(client.get("/api/inquiries", headers=auth_headers(buyer)).json()["inquiries"]) == 1


def test_new_inquiry_allowed_once_previous_closed(client, owner, buyer, make_live_listing):
    property_id = make_live_listing(owner)
    inquiry_id = send(client, buyer, property_id).json()["id"]
    client.post(f"/api/inquiries/{inquiry_id}/close", headers=auth_headers(owner))

    assert send(client, buyer, property_id).status_code == 201
