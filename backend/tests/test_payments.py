"""
Payment mirroring tests.

Verifies:
- Every payment produces exactly one ledger row with the expected
  type, amount, category and description
- Deleting the payment removes that row
- Deletion succeeds when the row was already removed by hand
- Legacy rows without a source link are still found by the heuristic
"""

from decimal import Decimal

import pytest

from puantaj.extensions import db
from puantaj.models import CustomerPayment, Transaction
from puantaj.services import payment_service


PAYMENT_DATE = "2026-10-05T10:00:00Z"


def _transactions(client, headers, **params):
    resp = client.get("/api/transactions", query_string=params, headers=headers)
    assert resp.status_code == 200
    return resp.json


@pytest.fixture
def contractor(client, headers):
    resp = client.post("/api/contractors", json={"name": "Kaya Elektrik"}, headers=headers)
    assert resp.status_code == 201
    return resp.json


@pytest.fixture
def personnel(client, headers):
    resp = client.post(
        "/api/personnel",
        json={"name": "Mehmet Öz", "position": "Usta", "start_date": "2025-01-01"},
        headers=headers,
    )
    assert resp.status_code == 201
    return resp.json


# =============================================================================
# CUSTOMER PAYMENTS
# =============================================================================


class TestCustomerPayments:
    def test_payment_writes_income_mirror(self, client, headers, customer):
        resp = client.post(
            "/api/customer-payments",
            json={
                "customer_id": customer.id,
                "amount": "500",
                "description": "Avans",
                "payment_date": PAYMENT_DATE,
                "payment_method": "cash",
            },
            headers=headers,
        )
        assert resp.status_code == 201
        payment = resp.json
        assert payment["amount"] == "500.00"

        ledger = _transactions(client, headers)
        assert len(ledger) == 1
        tx = ledger[0]
        assert tx["type"] == "income"
        assert tx["amount"] == "500.00"
        assert tx["category"] == "Müşteri Ödemesi"
        assert tx["description"] == "Demir İnşaat - Müşteri Ödemesi: Avans"
        assert tx["date"] == "2026-10-05T10:00:00Z"
        assert tx["source_payment_type"] == "customer"
        assert tx["source_payment_id"] == payment["id"]

        resp = client.delete(f"/api/customer-payments/{payment['id']}", headers=headers)
        assert resp.status_code == 204
        assert _transactions(client, headers) == []

    def test_delete_succeeds_when_mirror_already_gone(self, client, headers, customer):
        payment = client.post(
            "/api/customer-payments",
            json={"customer_id": customer.id, "amount": "75.5", "description": "Kısmi", "payment_date": PAYMENT_DATE},
            headers=headers,
        ).json

        tx = _transactions(client, headers)[0]
        assert client.delete(f"/api/transactions/{tx['id']}", headers=headers).status_code == 204

        resp = client.delete(f"/api/customer-payments/{payment['id']}", headers=headers)
        assert resp.status_code == 204
        assert db.session.get(CustomerPayment, payment["id"]) is None

    def test_legacy_mirror_found_by_heuristic(self, client, headers, customer):
        payment = client.post(
            "/api/customer-payments",
            json={"customer_id": customer.id, "amount": "120", "description": "Eski kayıt", "payment_date": PAYMENT_DATE},
            headers=headers,
        ).json

        # Strip the link so the row looks like one written before it existed
        tx = db.session.query(Transaction).one()
        tx.source_payment_type = None
        tx.source_payment_id = None
        db.session.commit()

        resp = client.delete(f"/api/customer-payments/{payment['id']}", headers=headers)
        assert resp.status_code == 204
        assert db.session.query(Transaction).count() == 0

    def test_heuristic_ignores_other_days_and_amounts(self, db_session, user, customer):
        from puantaj.services.ledger_service import append_transaction
        from puantaj.time_utils import parse_iso_datetime

        payment = CustomerPayment(
            customer_id=customer.id,
            amount=Decimal("100.00"),
            description="x",
            payment_date=parse_iso_datetime("2026-10-05T09:00:00Z"),
        )
        db_session.add(payment)
        append_transaction(
            user_id=user.id, type="income", amount=Decimal("100.00"),
            description="Demir İnşaat - Müşteri Ödemesi: x", category="Müşteri Ödemesi",
            date=parse_iso_datetime("2026-10-06T09:00:00Z"),
        )
        append_transaction(
            user_id=user.id, type="income", amount=Decimal("100.02"),
            description="Demir İnşaat - Müşteri Ödemesi: x", category="Müşteri Ödemesi",
            date=parse_iso_datetime("2026-10-05T18:00:00Z"),
        )
        db_session.commit()

        found = payment_service.find_mirror(payment_service.CUSTOMER_MIRROR, user.id, payment, "Demir İnşaat")
        assert found is None

    @pytest.mark.parametrize("amount", ["0", "-10"])
    def test_non_positive_amount_rejected(self, client, headers, customer, amount):
        resp = client.post(
            "/api/customer-payments",
            json={"customer_id": customer.id, "amount": amount, "description": "x", "payment_date": PAYMENT_DATE},
            headers=headers,
        )
        assert resp.status_code == 400
        assert _transactions(client, headers) == []

    def test_mirror_failure_leaves_no_payment(self, client, headers, customer, monkeypatch):
        def boom(*args, **kwargs):
            raise RuntimeError("ledger unavailable")

        monkeypatch.setattr(payment_service, "_write_mirror", boom)

        resp = client.post(
            "/api/customer-payments",
            json={"customer_id": customer.id, "amount": "10", "description": "x", "payment_date": PAYMENT_DATE},
            headers=headers,
        )
        assert resp.status_code == 500
        assert db.session.query(CustomerPayment).count() == 0
        assert db.session.query(Transaction).count() == 0

    def test_mirrored_entry_cannot_be_edited(self, client, headers, customer):
        client.post(
            "/api/customer-payments",
            json={"customer_id": customer.id, "amount": "10", "description": "x", "payment_date": PAYMENT_DATE},
            headers=headers,
        )
        tx = _transactions(client, headers)[0]
        resp = client.put(f"/api/transactions/{tx['id']}", json={"amount": "99"}, headers=headers)
        assert resp.status_code == 400

    def test_foreign_customer_is_404(self, client, other_headers, customer):
        resp = client.post(
            "/api/customer-payments",
            json={"customer_id": customer.id, "amount": "10", "description": "x", "payment_date": PAYMENT_DATE},
            headers=other_headers,
        )
        assert resp.status_code == 404


# =============================================================================
# CONTRACTOR / PERSONNEL PAYMENTS
# =============================================================================


class TestExpensePayments:
    def test_contractor_payment_writes_expense_mirror(self, client, headers, contractor):
        payment = client.post(
            "/api/contractor-payments",
            json={
                "contractor_id": contractor["id"],
                "amount": "1500",
                "description": "Kablo işi",
                "payment_date": PAYMENT_DATE,
            },
            headers=headers,
        ).json

        ledger = _transactions(client, headers, type="expense")
        assert len(ledger) == 1
        assert ledger[0]["description"] == "Kaya Elektrik - Yüklenici Ödemesi: Kablo işi"
        assert ledger[0]["category"] == "Yüklenici Ödemesi"
        assert ledger[0]["amount"] == "1500.00"

        assert client.delete(f"/api/contractor-payments/{payment['id']}", headers=headers).status_code == 204
        assert _transactions(client, headers) == []

    def test_personnel_payment_writes_salary_mirror(self, client, headers, personnel):
        resp = client.post(
            "/api/personnel-payments",
            json={
                "personnel_id": personnel["id"],
                "amount": "25000",
                "description": "Ekim maaşı",
                "payment_date": PAYMENT_DATE,
            },
            headers=headers,
        )
        assert resp.status_code == 201
        assert resp.json["payment_type"] == "salary"

        ledger = _transactions(client, headers, type="expense")
        assert len(ledger) == 1
        assert ledger[0]["description"] == "Mehmet Öz - Maaş Ödemesi: Ekim maaşı"
        assert ledger[0]["category"] == "Maaş Ödemesi"
        assert ledger[0]["source_payment_type"] == "personnel"

    def test_payments_block_payee_deletion(self, client, headers, contractor):
        client.post(
            "/api/contractor-payments",
            json={"contractor_id": contractor["id"], "amount": "1", "description": "x", "payment_date": PAYMENT_DATE},
            headers=headers,
        )
        resp = client.delete(f"/api/contractors/{contractor['id']}", headers=headers)
        assert resp.status_code == 409


# =============================================================================
# LEDGER
# =============================================================================


class TestLedger:
    def test_manual_entries_and_inclusive_date_filter(self, client, headers, db_session):
        for day, kind in [("2026-09-30", "expense"), ("2026-10-01", "income"), ("2026-10-31", "expense")]:
            resp = client.post(
                "/api/transactions",
                json={"type": kind, "amount": "10", "description": day, "date": day},
                headers=headers,
            )
            assert resp.status_code == 201

        october = _transactions(client, headers, start="2026-10-01", end="2026-10-31")
        assert sorted(t["description"] for t in october) == ["2026-10-01", "2026-10-31"]

        expenses = _transactions(client, headers, type="expense")
        assert len(expenses) == 2

    def test_unknown_type_rejected(self, client, headers, db_session):
        resp = client.post(
            "/api/transactions",
            json={"type": "transfer", "amount": "10", "description": "x", "date": "2026-10-01"},
            headers=headers,
        )
        assert resp.status_code == 400

    def test_bad_filter_date_rejected(self, client, headers, db_session):
        resp = client.get("/api/transactions?start=yesterday", headers=headers)
        assert resp.status_code == 400
