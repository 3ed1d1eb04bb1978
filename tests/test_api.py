from datetime import date
from decimal import Decimal

from payfam.models.member import Member
from payfam.models.payment import MonthlyDue, PaymentTransaction
from payfam.services.auth import create_user
from payfam.services import reports
from payfam.services.ledger import record_payment
from sqlalchemy.exc import OperationalError


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["services"]["api"] == "ok"


def test_register_login_and_me(client, member):
    response = client.post("/api/auth/register", json={
        "email": "Ahmed@Example.com",
        "password": "secret123",
        "full_name": "Ahmed Khan",
    })
    assert response.status_code == 201
    assert response.json()["role"] == "member"

    response = client.post("/api/auth/login", json={"email": "ahmed@example.com", "password": "wrong"})
    assert response.status_code == 401

    response = client.post("/api/auth/login", json={"email": "ahmed@example.com", "password": "secret123"})
    assert response.status_code == 200
    token = response.json()["access_token"]

    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200
    assert response.json()["email"] == "ahmed@example.com"


def test_register_links_member_by_email(client, db, make_member):
    member = make_member(email="sara@example.com")

    response = client.post("/api/auth/register", json={"email": "sara@example.com", "password": "secret123"})

    assert response.status_code == 201
    assert response.json()["member_id"] == str(member.id)


def test_duplicate_registration_rejected(client, admin_user):
    response = client.post("/api/auth/register", json={"email": "admin@example.com", "password": "secret123"})
    assert response.status_code == 400


def test_requires_authentication(client):
    assert client.get("/api/members").status_code == 401


def test_staff_can_manage_members(client, manager_headers):
    response = client.post("/api/members", headers=manager_headers, json={
        "name": "Bilal Hussain",
        "phone_number": "+923011234567",
        "monthly_fee": "3000",
    })
    assert response.status_code == 201
    member_id = response.json()["id"]

    response = client.put(f"/api/members/{member_id}", headers=manager_headers, json={"father_name": "Tariq"})
    assert response.status_code == 200
    assert response.json()["father_name"] == "Tariq"

    response = client.post(f"/api/members/{member_id}/toggle-active", headers=manager_headers)
    assert response.json()["active"] is False

    response = client.get("/api/members", headers=manager_headers)
    assert response.status_code == 200
    assert response.json()[0]["total_paid"] in ("0", "0.00", 0, 0.0)


def test_invalid_phone_returns_400(client, manager_headers):
    response = client.post("/api/members", headers=manager_headers, json={
        "name": "Bilal Hussain",
        "phone_number": "0301-1234567",
        "monthly_fee": "3000",
    })
    assert response.status_code == 400


def test_only_admin_deletes_members(client, db, member, manager_headers, admin_headers):
    record_payment(db, member.id, Decimal("100"), date(2025, 1, 2), today=date(2025, 1, 2))
    member_id = member.id

    assert client.delete(f"/api/members/{member_id}", headers=manager_headers).status_code == 403

    response = client.delete(f"/api/members/{member_id}", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["transactions"] == 1
    assert db.query(Member).count() == 0
    assert db.query(MonthlyDue).count() == 0

    assert client.get(f"/api/members/{member_id}", headers=admin_headers).status_code == 404


def test_record_payment_endpoint(client, db, member, manager_headers):
    response = client.post("/api/payments", headers=manager_headers, json={
        "member_id": str(member.id),
        "amount": "2000",
        "payment_date": date.today().isoformat(),
        "method": "cash",
    })

    assert response.status_code == 201
    body = response.json()
    assert Decimal(body["due"]["amount_paid"]) == Decimal("2000")
    assert body["transaction"]["receipt_number"].startswith("RCP-")
    assert body["receipt"]["link"].startswith("https://wa.me/923001234567")
    assert db.query(PaymentTransaction).count() == 1

    due_id = body["due"]["id"]
    response = client.get(f"/api/payments/dues/{due_id}/transactions", headers=manager_headers)
    assert len(response.json()) == 1


def test_record_payment_rejects_bad_input(client, member, manager_headers):
    payload = {"member_id": str(member.id), "amount": "0", "payment_date": "2025-01-02"}
    assert client.post("/api/payments", headers=manager_headers, json=payload).status_code == 422

    payload = {"member_id": "00000000-0000-0000-0000-000000000000", "amount": "10", "payment_date": "2025-01-02"}
    assert client.post("/api/payments", headers=manager_headers, json=payload).status_code == 404


def test_reversal_requires_admin(client, db, member, manager_headers, admin_headers):
    tx = record_payment(db, member.id, Decimal("5000"), date(2025, 1, 2), today=date(2025, 1, 2))
    tx_id = tx.id

    assert client.delete(f"/api/payments/transactions/{tx_id}", headers=manager_headers).status_code == 403

    response = client.delete(f"/api/payments/transactions/{tx_id}", headers=admin_headers)
    assert response.status_code == 200
    assert Decimal(response.json()["amount_paid"]) == Decimal("0")


def test_member_sees_only_own_rows(client, db, make_member, auth_headers):
    own = make_member(name="Ahmed Khan", phone_number="+923001234567", email="ahmed@example.com")
    other = make_member(name="Bilal Hussain", phone_number="+923011234567")
    user = create_user(db, email="ahmed@example.com", password="secret123")
    headers = auth_headers(user)
    record_payment(db, other.id, Decimal("100"), date(2025, 1, 2), today=date(2025, 1, 2))

    assert client.get(f"/api/members/{own.id}", headers=headers).status_code == 200
    assert client.get(f"/api/members/{other.id}", headers=headers).status_code == 403
    assert client.get(f"/api/members/{other.id}/dues", headers=headers).status_code == 403
    assert client.get("/api/members", headers=headers).status_code == 403
    assert client.post("/api/payments", headers=headers, json={
        "member_id": str(own.id), "amount": "10", "payment_date": "2025-01-02"
    }).status_code == 403

    response = client.get("/api/me/dashboard?year=2025", headers=headers)
    assert response.status_code == 200
    assert response.json()["member"]["id"] == str(own.id)
    assert response.json()["dues"] == []


def test_year_grid_endpoint(client, db, member, manager_headers):
    record_payment(db, member.id, Decimal("5000"), date(2025, 3, 2), today=date(2025, 3, 2))

    response = client.get(f"/api/members/{member.id}/year-grid?year=2025", headers=manager_headers)

    assert response.status_code == 200
    grid = response.json()
    assert len(grid) == 12
    assert grid[2]["status"] == "paid"
    assert grid[0]["status"] == "not_due"


def test_reminder_endpoint(client, db, member, manager_headers):
    tx = record_payment(db, member.id, Decimal("100"), date(2025, 1, 2), today=date(2025, 1, 2))
    due_id = tx.monthly_due_id

    response = client.get(f"/api/members/{member.id}/dues/{due_id}/reminder", headers=manager_headers)

    assert response.status_code == 200
    assert response.json()["link"].startswith("https://wa.me/923001234567?text=")


def test_monthly_report_and_export(client, db, member, manager_headers):
    record_payment(db, member.id, Decimal("5000"), date(2025, 1, 2), today=date(2025, 1, 2))

    response = client.get("/api/reports/monthly?month=1&year=2025", headers=manager_headers)
    assert response.status_code == 200
    assert response.json()["rows"][0]["status"] == "paid"

    response = client.get("/api/reports/monthly/export?month=1&year=2025&format=xlsx", headers=manager_headers)
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/vnd.openxmlformats")
    assert "PayFam_Report_January_2025.xlsx" in response.headers["content-disposition"]

    response = client.get("/api/reports/monthly/export?month=1&year=2025&format=pdf", headers=manager_headers)
    assert response.status_code == 200
    assert response.content.startswith(b"%PDF")

    response = client.get("/api/reports/monthly/export?format=csv", headers=manager_headers)
    assert response.status_code == 422


def test_dashboard_and_refresh(client, db, member, admin_headers):
    response = client.get("/api/reports/dashboard", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["total_members"] == 1

    response = client.post("/api/payments/dues/refresh", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["updated"] == 0


def test_late_payment_endpoint_targets_given_due(client, db, member, manager_headers):
    tx = record_payment(db, member.id, Decimal("2000"), date(2025, 1, 3), today=date(2025, 1, 3))
    january_id = str(tx.monthly_due_id)

    response = client.post("/api/payments", headers=manager_headers, json={
        "member_id": str(member.id),
        "amount": "3000",
        "payment_date": "2025-02-10",
        "monthly_due_id": january_id,
    })

    assert response.status_code == 201
    body = response.json()
    assert body["due"]["id"] == january_id
    assert body["due"]["status"] == "paid"
    assert body["due"]["paid_on"] == "2025-02-10"
    assert db.query(MonthlyDue).count() == 1


def test_storage_failure_on_read_is_retryable(client, admin_headers, monkeypatch):
    def unavailable(*args, **kwargs):
        raise OperationalError("SELECT monthly_due", {}, Exception("connection refused"))

    monkeypatch.setattr(reports, "_period_dues", unavailable)

    response = client.get("/api/reports/dashboard", headers=admin_headers)

    assert response.status_code == 503
    assert response.json()["detail"] == "Storage unavailable, please retry"
