"""
Customer and customer task tests.

Verifies:
- Customer CRUD and ownership isolation
- Deletion is refused while tasks, quotes or payments exist
- Task amount defaulting and server-side VAT fields
"""

import pytest


def _create_task(client, headers, customer_id, **fields):
    body = {"customer_id": customer_id, "title": "Boya badana"}
    body.update(fields)
    return client.post("/api/customer-tasks", json=body, headers=headers)


# =============================================================================
# CUSTOMERS
# =============================================================================


class TestCustomerCrud:
    def test_create_list_update_delete(self, client, headers):
        resp = client.post(
            "/api/customers",
            json={"name": "  Yıldız Yapı ", "phone": "05321234567"},
            headers=headers,
        )
        assert resp.status_code == 201
        created = resp.json
        assert created["name"] == "Yıldız Yapı"
        assert created["status"] == "active"

        listed = client.get("/api/customers", headers=headers).json
        assert [c["id"] for c in listed] == [created["id"]]

        resp = client.put(f"/api/customers/{created['id']}", json={"status": "inactive"}, headers=headers)
        assert resp.status_code == 200
        assert resp.json["status"] == "inactive"

        assert client.get("/api/customers?status=active", headers=headers).json == []

        resp = client.delete(f"/api/customers/{created['id']}", headers=headers)
        assert resp.status_code == 204
        assert client.get(f"/api/customers/{created['id']}", headers=headers).status_code == 404

    def test_name_is_required(self, client, headers):
        resp = client.post("/api/customers", json={"company": "x"}, headers=headers)
        assert resp.status_code == 400

    def test_unknown_field_rejected(self, client, headers):
        resp = client.post("/api/customers", json={"name": "x", "user_id": "someone-else"}, headers=headers)
        assert resp.status_code == 400

    def test_other_user_cannot_see_customer(self, client, other_headers, customer):
        assert client.get(f"/api/customers/{customer.id}", headers=other_headers).status_code == 404
        assert client.get("/api/customers", headers=other_headers).json == []
        assert client.delete(f"/api/customers/{customer.id}", headers=other_headers).status_code == 404

    def test_delete_refused_with_tasks(self, client, headers, customer):
        _create_task(client, headers, customer.id, amount="100")
        resp = client.delete(f"/api/customers/{customer.id}", headers=headers)
        assert resp.status_code == 409
        assert "tasks" in resp.json["error"]

    def test_delete_refused_with_quotes(self, client, headers, customer):
        client.post("/api/customer-quotes", json={"customer_id": customer.id, "title": "Teklif"}, headers=headers)
        resp = client.delete(f"/api/customers/{customer.id}", headers=headers)
        assert resp.status_code == 409

    def test_nested_listings(self, client, headers, customer):
        _create_task(client, headers, customer.id, amount="100")
        client.post("/api/customer-quotes", json={"customer_id": customer.id, "title": "Teklif"}, headers=headers)

        assert len(client.get(f"/api/customers/{customer.id}/tasks", headers=headers).json) == 1
        assert len(client.get(f"/api/customers/{customer.id}/quotes", headers=headers).json) == 1
        assert client.get(f"/api/customers/{customer.id}/payments", headers=headers).json == []


# =============================================================================
# TASKS
# =============================================================================


class TestCustomerTasks:
    def test_vat_inclusive_task(self, client, headers, customer):
        resp = _create_task(client, headers, customer.id, amount="1000", has_vat=True, vat_rate="20")
        assert resp.status_code == 201
        task = resp.json
        assert task["amount"] == "1000.00"
        assert task["vat_amount"] == "200.00"
        assert task["total_with_vat"] == "1200.00"

    def test_amount_defaults_to_quantity_times_price(self, client, headers, customer):
        task = _create_task(client, headers, customer.id, quantity="2.5", unit_price="40", unit="m2").json
        assert task["amount"] == "100.00"
        assert task["quantity"] == "2.500"
        assert task["unit"] == "m2"
        assert task["status"] == "pending"
        assert task["has_vat"] is False
        assert task["total_with_vat"] == "100.00"

    def test_defaults_without_quantity(self, client, headers, customer):
        task = _create_task(client, headers, customer.id, amount="300").json
        assert task["quantity"] == "1.000"
        assert task["unit"] == "adet"
        assert task["unit_price"] == "300.00"
        assert task["vat_rate"] == "20.00"

    def test_price_or_amount_required(self, client, headers, customer):
        resp = _create_task(client, headers, customer.id)
        assert resp.status_code == 400

    @pytest.mark.parametrize(
        "fields",
        [
            {"quantity": "0", "unit_price": "10"},
            {"amount": "-5"},
            {"amount": "10", "vat_rate": "150"},
            {"amount": "10", "status": "archived"},
        ],
    )
    def test_invalid_task_rejected(self, client, headers, customer, fields):
        resp = _create_task(client, headers, customer.id, **fields)
        assert resp.status_code == 400

    def test_toggling_vat_recomputes_totals(self, client, headers, customer):
        task = _create_task(client, headers, customer.id, amount="500").json

        resp = client.put(f"/api/customer-tasks/{task['id']}", json={"has_vat": True}, headers=headers)
        assert resp.status_code == 200
        assert resp.json["vat_amount"] == "100.00"
        assert resp.json["total_with_vat"] == "600.00"

        resp = client.put(f"/api/customer-tasks/{task['id']}", json={"amount": "250"}, headers=headers)
        assert resp.json["total_with_vat"] == "300.00"

    def test_quantity_change_keeps_amount(self, client, headers, customer):
        task = _create_task(client, headers, customer.id, quantity="2", unit_price="50").json
        resp = client.put(f"/api/customer-tasks/{task['id']}", json={"quantity": "4"}, headers=headers)
        assert resp.json["amount"] == "100.00"

    def test_status_filter(self, client, headers, customer):
        first = _create_task(client, headers, customer.id, amount="1").json
        _create_task(client, headers, customer.id, amount="2")
        client.put(f"/api/customer-tasks/{first['id']}", json={"status": "completed"}, headers=headers)

        completed = client.get("/api/customer-tasks?status=completed", headers=headers).json
        assert [t["id"] for t in completed] == [first["id"]]

    def test_task_for_foreign_customer_is_404(self, client, other_headers, customer):
        resp = _create_task(client, other_headers, customer.id, amount="10")
        assert resp.status_code == 404

    def test_delete_task(self, client, headers, customer):
        task = _create_task(client, headers, customer.id, amount="10").json
        assert client.delete(f"/api/customer-tasks/{task['id']}", headers=headers).status_code == 204
        assert client.get(f"/api/customer-tasks/{task['id']}", headers=headers).status_code == 404
