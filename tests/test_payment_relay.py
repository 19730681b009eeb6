"""
Payment relay tests: gateway client, confirm transaction and HTTP routes.
"""

import threading

import pytest
import requests
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event, select

from gigconnect.core.errors import ConfigurationError, NotFoundError, ServiceError
from gigconnect.db import postgres
from gigconnect.db.postgres import create_tables
from gigconnect.main import app
from gigconnect.services.payment_relay_service import PaymentRelayService, get_payment_relay_service
from gigconnect.services.paystack_client import PaystackClient, PaystackError, get_paystack_client


class FakePaystackClient:
    def __init__(self, status="success", amount=100.0, configured=True, error=None):
        self.status = status
        self.amount = amount
        self.configured = configured
        self.error = error
        self.initialized = []

    def is_configured(self):
        return self.configured

    def initialize_transaction(self, amount, email, metadata=None):
        if self.error:
            raise PaystackError(self.error)
        self.initialized.append((amount, email, metadata))
        return {"authorization_url": "https://checkout.paystack.com/abc", "reference": "ref-1"}

    def verify_transaction(self, reference):
        if self.error:
            raise PaystackError(self.error)
        return {"status": self.status, "reference": reference, "amount": self.amount,
                "paid_at": "2026-03-01T10:00:00.000Z"}


class FakeResponse:
    def __init__(self, status_code, body):
        self.status_code = status_code
        self._body = body
        self.text = str(body)

    def json(self):
        return self._body

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error", response=self)


class FakeSession:
    def __init__(self, response):
        self.response = response
        self.calls = []

    def request(self, method, url, json=None, headers=None, timeout=None):
        self.calls.append({"method": method, "url": url, "json": json, "headers": headers})
        return self.response


def insert_job(engine, **values):
    job = {
        "id": "job-1",
        "employer_id": "employer-1",
        "title": "Landing page",
        "status": "In Progress",
        "hired_user_id": "seeker-1",
        "payment_status": "Unpaid",
    }
    job.update(values)
    with engine.begin() as conn:
        conn.execute(postgres.jobs.insert().values(**job))
    return job


def rows(engine, table):
    with engine.connect() as conn:
        return [dict(r._mapping) for r in conn.execute(select(table)).fetchall()]


# ============================================================
# GATEWAY CLIENT
# ============================================================

def test_initialize_sends_minor_units():
    session = FakeSession(FakeResponse(200, {"status": True, "data": {
        "authorization_url": "https://checkout.paystack.com/abc", "reference": "ref-1"}}))
    client = PaystackClient(secret_key="sk_test", base_url="https://api.paystack.co", session=session)

    result = client.initialize_transaction(25.5, "payer@example.com", {"jobId": "job-1"})

    assert result == {"authorization_url": "https://checkout.paystack.com/abc", "reference": "ref-1"}
    call = session.calls[0]
    assert call["url"] == "https://api.paystack.co/transaction/initialize"
    assert call["json"]["amount"] == 2550
    assert call["headers"]["Authorization"] == "Bearer sk_test"


def test_verify_converts_to_major_units():
    session = FakeSession(FakeResponse(200, {"data": {
        "status": "success", "reference": "ref-1", "amount": 12345, "paid_at": "2026-03-01T10:00:00Z"}}))
    client = PaystackClient(secret_key="sk_test", session=session)

    result = client.verify_transaction("ref-1")

    assert result["amount"] == 123.45
    assert result["paid_at"] == "2026-03-01T10:00:00Z"
    assert session.calls[0]["url"].endswith("/transaction/verify/ref-1")


def test_gateway_error_message_is_kept():
    session = FakeSession(FakeResponse(400, {"status": False, "message": "Invalid key"}))
    client = PaystackClient(secret_key="sk_bad", session=session)

    with pytest.raises(PaystackError) as exc:
        client.verify_transaction("ref-1")
    assert exc.value.message == "Invalid key"
    assert exc.value.status_code == 400


def test_unconfigured_client_fails_fast():
    session = FakeSession(FakeResponse(200, {}))
    client = PaystackClient(secret_key="", session=session)
    with pytest.raises(PaystackError, match="not configured"):
        client.verify_transaction("ref-1")
    assert session.calls == []


# ============================================================
# CONFIRM
# ============================================================

def test_confirm_marks_job_paid(engine):
    insert_job(engine)
    relay = PaymentRelayService(FakePaystackClient(amount=100.0), engine, commission_rate=0.10)

    result = relay.confirm_payment("ref-1", "job-1")

    assert result == {"status": "success", "job_id": "job-1", "amount": 100.0, "fee": 10.0, "net": 90.0,
                      "paid_at": "2026-03-01T10:00:00.000Z"}
    job = rows(engine, postgres.jobs)[0]
    assert job["status"] == "Completed"
    assert job["payment_status"] == "Paid"
    assert job["platform_fee"] == 10.0

    wallet_rows = {r["type"]: r for r in rows(engine, postgres.wallet_transactions)}
    assert wallet_rows["earning"]["user_id"] == "seeker-1"
    assert wallet_rows["earning"]["amount"] == 90.0
    assert wallet_rows["payment"]["user_id"] == "employer-1"
    assert wallet_rows["payment"]["amount"] == 100.0
    assert rows(engine, postgres.platform_transactions)[0]["amount"] == 10.0

    notes = {r["user_id"]: r for r in rows(engine, postgres.notifications)}
    assert notes["seeker-1"]["link"] == {"view": "wallet", "params": {}}
    assert notes["employer-1"]["message"] == 'Payment processed for "Landing page". Success fee applied.'


def test_confirm_twice_writes_once(engine):
    insert_job(engine)
    relay = PaymentRelayService(FakePaystackClient(), engine, commission_rate=0.10)

    relay.confirm_payment("ref-1", "job-1")
    again = relay.confirm_payment("ref-1", "job-1")

    assert again == {"status": "already_paid", "job_id": "job-1", "amount": 100.0}
    assert len(rows(engine, postgres.wallet_transactions)) == 2
    assert len(rows(engine, postgres.platform_transactions)) == 1
    assert len(rows(engine, postgres.notifications)) == 2


def test_concurrent_confirms_pay_once(tmp_path):
    # File database: each thread gets its own connection and SQLite locking applies
    engine = create_engine(f"sqlite:///{tmp_path / 'relay.db'}", connect_args={"check_same_thread": False})
    create_tables(engine)
    insert_job(engine)
    relay = PaymentRelayService(FakePaystackClient(), engine, commission_rate=0.10)

    both_read = threading.Barrier(2, timeout=5)

    def hold_after_job_read(conn, cursor, statement, parameters, context, executemany):
        if statement.lstrip().upper().startswith("SELECT") and "FROM jobs" in statement:
            both_read.wait()

    event.listen(engine, "after_cursor_execute", hold_after_job_read)
    statuses = []

    def confirm():
        statuses.append(relay.confirm_payment("ref-1", "job-1")["status"])

    threads = [threading.Thread(target=confirm) for _ in range(2)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=15)
    event.remove(engine, "after_cursor_execute", hold_after_job_read)

    assert sorted(statuses) == ["already_paid", "success"]
    assert len(rows(engine, postgres.platform_transactions)) == 1
    assert len(rows(engine, postgres.wallet_transactions)) == 2
    engine.dispose()


def test_confirm_failed_payment(engine):
    insert_job(engine)
    relay = PaymentRelayService(FakePaystackClient(status="failed"), engine)
    with pytest.raises(ServiceError, match="Payment not successful."):
        relay.confirm_payment("ref-1", "job-1")
    assert rows(engine, postgres.jobs)[0]["payment_status"] == "Unpaid"


def test_confirm_unknown_job(engine):
    relay = PaymentRelayService(FakePaystackClient(), engine)
    with pytest.raises(NotFoundError):
        relay.confirm_payment("ref-1", "job-missing")


def test_confirm_without_hired_user(engine):
    insert_job(engine, hired_user_id=None)
    relay = PaymentRelayService(FakePaystackClient(), engine)
    with pytest.raises(ServiceError, match="Job has no hired user."):
        relay.confirm_payment("ref-1", "job-1")
    assert rows(engine, postgres.wallet_transactions) == []


def test_confirm_requires_fields(engine):
    relay = PaymentRelayService(FakePaystackClient(), engine)
    with pytest.raises(ServiceError, match="Reference and jobId are required."):
        relay.confirm_payment("", "job-1")


def test_confirm_requires_configuration(engine):
    with pytest.raises(ConfigurationError):
        PaymentRelayService(FakePaystackClient(configured=False), engine).confirm_payment("ref-1", "job-1")


# ============================================================
# ROUTES
# ============================================================

@pytest.fixture
def fake_client():
    return FakePaystackClient()


@pytest.fixture
def http(engine, fake_client):
    relay = PaymentRelayService(fake_client, engine, commission_rate=0.10)
    app.dependency_overrides[get_paystack_client] = lambda: fake_client
    app.dependency_overrides[get_payment_relay_service] = lambda: relay
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_root(http):
    assert http.get("/").json() == {"status": "GigConnect Paystack server running"}


def test_initialize_route(http, fake_client):
    response = http.post("/paystack/initialize", json={"amount": 25, "email": "payer@example.com"})
    assert response.status_code == 200
    assert response.json() == {"authorization_url": "https://checkout.paystack.com/abc", "reference": "ref-1"}
    assert fake_client.initialized == [(25, "payer@example.com", None)]


def test_initialize_route_requires_amount_and_email(http):
    response = http.post("/paystack/initialize", json={"email": "payer@example.com"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Amount and email are required."


def test_initialize_route_gateway_error(http, fake_client):
    fake_client.error = "Invalid key"
    response = http.post("/paystack/initialize", json={"amount": 25, "email": "payer@example.com"})
    assert response.status_code == 500
    assert response.json()["detail"] == "Invalid key"


def test_verify_route(http):
    response = http.get("/paystack/verify/ref-1")
    assert response.status_code == 200
    assert response.json() == {"status": "success", "reference": "ref-1", "amount": 100.0,
                               "paidAt": "2026-03-01T10:00:00.000Z"}


def test_confirm_route(http, engine):
    insert_job(engine)
    response = http.post("/paystack/confirm", json={"reference": "ref-1", "jobId": "job-1"})
    assert response.status_code == 200
    assert response.json() == {"status": "success", "jobId": "job-1", "amount": 100.0, "fee": 10.0,
                               "net": 90.0, "paidAt": "2026-03-01T10:00:00.000Z"}

    again = http.post("/paystack/confirm", json={"reference": "ref-1", "jobId": "job-1"})
    assert again.json() == {"status": "already_paid", "jobId": "job-1", "amount": 100.0}


def test_confirm_route_errors(http, engine, fake_client):
    assert http.post("/paystack/confirm", json={"reference": "ref-1"}).status_code == 400
    assert http.post("/paystack/confirm", json={"reference": "ref-1", "jobId": "job-x"}).status_code == 404

    fake_client.error = "Gateway down"
    response = http.post("/paystack/confirm", json={"reference": "ref-1", "jobId": "job-x"})
    assert response.status_code == 500
    assert response.json()["detail"] == "Gateway down"
