import pytest

from app.models.db import ProductClick, Transaction
from app.models.db.enums import ReferenceModel, TransactionStatus, TransactionType, UserRole
from app.services.commission_engine import ClickInput, sanitize_amount, track_click
from app.exceptions import ValidationFailed

TRACK_URL = "/api/v1/analytics/track-click"


def click_payload(**overrides):
    payload = {
        "asin": "B0C1234567",
        "productName": "Samsung 55 inch Smart LED TV",
        "category": "Uncategorized",
        "price": 40000,
        "imageUrl": "https://m.media-amazon.com/images/I/tv.jpg",
        "productUrl": "https://www.amazon.in/dp/B0C1234567?tag=storefront-21",
    }
    payload.update(overrides)
    return payload


@pytest.fixture()
def electronics(category_factory):
    return category_factory("Electronics", search_index="Electronics", percentage=4, search_queries=["gadgets"])


def test_guest_click_without_referral_has_no_commission(client, db_session, electronics):
    r = client.post(TRACK_URL, json=click_payload())
    assert r.status_code == 201, r.text
    data = r.json()["data"]
    assert data["agent_id"] is None
    assert data["user_id"] is None
    assert data["category"] == "Electronics"
    assert data["matched_by"] == "product_term"
    assert data["commission_rate"] == pytest.approx(0.04)
    assert data["transaction_id"] is None
    assert db_session.query(Transaction).count() == 0


def test_referral_code_opens_pending_commission(client, db_session, electronics, agent_user):
    r = client.post(TRACK_URL, json=click_payload(price="₹1,299.00", referralCode="agent42"))
    assert r.status_code == 201, r.text
    data = r.json()["data"]
    assert data["agent_id"] == agent_user.id
    assert data["price"] == pytest.approx(1299.0)

    tx = db_session.get(Transaction, data["transaction_id"])
    assert tx.user_id == agent_user.id
    assert tx.status == TransactionStatus.PENDING
    assert tx.type == TransactionType.EARNINGS
    assert tx.amount == pytest.approx(51.96)
    assert tx.reference_model == ReferenceModel.PRODUCT_CLICK
    assert tx.reference_id == data["id"]
    assert tx.description == "Pending Commission (4.00%): Samsung 55 inch Smart LED TV"
    # pending commission never touches the balance
    db_session.refresh(agent_user)
    assert agent_user.balance == 0


def test_agent_clicking_is_credited_to_themselves(client, db_session, agent_user, auth_headers):
    r = client.post(TRACK_URL, json=click_payload(), headers=auth_headers(agent_user))
    assert r.status_code == 201
    data = r.json()["data"]
    assert data["user_id"] == agent_user.id
    assert data["agent_id"] == agent_user.id
    # no category rules: default rate applies
    assert data["category"] == "Uncategorized"
    tx = db_session.get(Transaction, data["transaction_id"])
    assert tx.amount == pytest.approx(800.0)


def test_referred_shopper_credits_stored_referrer(client, user_factory, agent_user, auth_headers):
    shopper = user_factory(referred_by=agent_user)
    r = client.post(TRACK_URL, json=click_payload(), headers=auth_headers(shopper))
    assert r.status_code == 201
    data = r.json()["data"]
    assert data["user_id"] == shopper.id
    assert data["agent_id"] == agent_user.id
    assert data["transaction_id"] is not None


def test_zero_price_records_click_without_transaction(client, db_session, agent_user):
    r = client.post(TRACK_URL, json=click_payload(price=0, referralCode="AGENT42"))
    assert r.status_code == 201
    data = r.json()["data"]
    assert data["agent_id"] == agent_user.id
    assert data["transaction_id"] is None
    assert db_session.query(ProductClick).count() == 1
    assert db_session.query(Transaction).count() == 0


def test_invalid_bearer_key_is_treated_as_guest(client):
    r = client.post(TRACK_URL, json=click_payload(), headers={"Authorization": "Bearer not-a-real-key"})
    assert r.status_code == 201
    assert r.json()["data"]["user_id"] is None


def test_unmatched_category_keeps_raw_input(client, electronics):
    r = client.post(TRACK_URL, json=click_payload(category="Garden Gnomes", productName="Ceramic gnome statue"))
    assert r.status_code == 201
    data = r.json()["data"]
    assert data["category"] == "Uncategorized"
    assert data["input_category"] == "Garden Gnomes"
    assert data["commission_rate"] == pytest.approx(0.02)


@pytest.mark.parametrize(
    "overrides,message",
    [
        ({"productName": ""}, "ASIN and Product Name are required"),
        ({"asin": None}, "ASIN and Product Name are required"),
        ({"asin": "B0C12"}, "Invalid ASIN format. ASIN must be 10 alphanumeric characters"),
        ({"asin": "B0C12345-7"}, "Invalid ASIN format. ASIN must be 10 alphanumeric characters"),
    ],
)
def test_track_click_validation(client, db_session, overrides, message):
    r = client.post(TRACK_URL, json=click_payload(**overrides))
    assert r.status_code == 400
    assert r.json()["message"] == message
    assert db_session.query(ProductClick).count() == 0


@pytest.mark.parametrize(
    "raw,expected",
    [
        (None, 0.0),
        (True, 0.0),
        (12, 12.0),
        ("₹42,990", 42990.0),
        ("$19.99", 19.99),
        ("n/a", 0.0),
        ("1.2.3", 0.0),
        ("1e5", 100000.0),
        ("1.5e3", 1500.0),
        (float("nan"), 0.0),
        (float("inf"), 0.0),
        ("NaN", 0.0),
        ("Infinity", 0.0),
        (-250, 0.0),
    ],
)
def test_sanitize_amount(raw, expected):
    assert sanitize_amount(raw) == pytest.approx(expected)


@pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity"])
def test_non_finite_price_records_free_click(client, db_session, agent_user, literal):
    body = '{"asin": "B0C1234567", "productName": "Bluetooth Speaker", "price": %s, "referralCode": "AGENT42"}' % literal
    r = client.post(TRACK_URL, content=body, headers={"Content-Type": "application/json"})
    assert r.status_code == 201, r.text
    data = r.json()["data"]
    assert data["agent_id"] == agent_user.id
    assert data["price"] == 0
    assert data["transaction_id"] is None
    assert db_session.query(Transaction).count() == 0
    db_session.refresh(agent_user)
    assert agent_user.balance == 0


def test_track_click_service_reports_resolution(db_session, user_factory, electronics):
    agent = user_factory(UserRole.AGENT, referral_code="SVC001")
    tracked = track_click(
        db_session,
        ClickInput(asin="b0c1234567", product_name="Gadgets bundle", category=None, price="500", referral_code="svc001"),
        None,
    )
    assert tracked.attribution.agent_id == agent.id
    assert tracked.resolution.category == "Electronics"
    assert tracked.transaction.amount == pytest.approx(20.0)
    with pytest.raises(ValidationFailed):
        track_click(db_session, ClickInput(asin="short", product_name="x"), None)


def test_my_clicks_lists_only_own_attributed_clicks(client, user_factory, agent_user, auth_headers):
    other_agent = user_factory(UserRole.AGENT, referral_code="OTHER7")
    client.post(TRACK_URL, json=click_payload(referralCode="AGENT42"))
    client.post(TRACK_URL, json=click_payload(referralCode="AGENT42", price=0, asin="B0C7654321"))
    client.post(TRACK_URL, json=click_payload(referralCode="OTHER7"))

    r = client.get("/api/v1/analytics/my-clicks", headers=auth_headers(agent_user))
    assert r.status_code == 200
    body = r.json()["data"]
    assert body["pagination"]["total"] == 2
    assert {c["agent_id"] for c in body["clicks"]} == {agent_user.id}
    statuses = sorted(c["commission_status"] for c in body["clicks"])
    assert statuses == ["none", "pending"]

    pending_only = client.get("/api/v1/analytics/my-clicks?status=pending", headers=auth_headers(agent_user)).json()
    assert pending_only["data"]["pagination"]["total"] == 1
    assert pending_only["data"]["clicks"][0]["commission_amount"] == pytest.approx(800.0)

    r_other = client.get("/api/v1/analytics/my-clicks", headers=auth_headers(other_agent))
    assert r_other.json()["data"]["pagination"]["total"] == 1


def test_my_clicks_requires_agent_role(client, user_factory, auth_headers):
    shopper = user_factory()
    assert client.get("/api/v1/analytics/my-clicks", headers=auth_headers(shopper)).status_code == 403
    assert client.get("/api/v1/analytics/my-clicks").status_code in (401, 403)


def test_my_clicks_rejects_unknown_status(client, agent_user, auth_headers):
    r = client.get("/api/v1/analytics/my-clicks?status=bogus", headers=auth_headers(agent_user))
    assert r.status_code == 400
