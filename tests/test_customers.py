"""
Tests for customers, sale recording and payments.
"""

from datetime import datetime
from decimal import Decimal

import pytest

from bookkeeper.common.exceptions import NotFoundError
from bookkeeper.services import customer_service, sale_service


@pytest.fixture
def customer(db):
    return customer_service.create_customer(db, name="Asha Traders", contact="9876543210", credit=Decimal("100"))


class TestSaleRecording:
    """record_sale folds the sale into the customer record."""

    def test_client_supplied_credit_and_sale_date(self, db, customer):
        sale_date = datetime(2024, 3, 1, 10, 0, 0)

        sale, updated = sale_service.record_sale(
            db,
            customer_id=customer.id,
            products=[{"product_id": "PRD-A", "product_name": "Rice", "quantity": 2, "price": 150}],
            total_price=Decimal("300"),
            amount_received=Decimal("50"),
            sale_date=sale_date,
            updated_credit=Decimal("350"),
        )

        assert Decimal(updated.credit) == Decimal("350")
        assert updated.last_purchase.replace(tzinfo=None) == sale_date
        assert len(updated.sales) == 1
        assert updated.sales[0]["sale_id"] == sale.id

    def test_credit_derived_when_not_supplied(self, db, customer):
        _, updated = sale_service.record_sale(
            db,
            customer_id=customer.id,
            total_price=Decimal("300"),
            amount_received=Decimal("50"),
        )
        assert Decimal(updated.credit) == Decimal("350")

    def test_stale_last_purchase_is_corrected(self, db, customer):
        """A client value older than the sale is replaced by the latest sale date."""
        sale_date = datetime(2024, 5, 10, 9, 30, 0)

        _, updated = sale_service.record_sale(
            db,
            customer_id=customer.id,
            total_price=Decimal("10"),
            sale_date=sale_date,
            last_purchase=datetime(2023, 1, 1),
        )

        assert updated.last_purchase.replace(tzinfo=None) == sale_date

    def test_backdated_sale_keeps_latest_purchase(self, db, customer):
        latest = datetime(2024, 6, 1, 12, 0, 0)
        sale_service.record_sale(db, customer_id=customer.id, total_price=Decimal("10"), sale_date=latest)
        _, updated = sale_service.record_sale(
            db, customer_id=customer.id, total_price=Decimal("10"), sale_date=datetime(2024, 1, 1)
        )

        assert updated.last_purchase.replace(tzinfo=None) == latest
        assert len(updated.sales) == 2

    def test_unknown_customer(self, db):
        with pytest.raises(NotFoundError):
            sale_service.record_sale(db, customer_id="CUS-NOPE", total_price=Decimal("10"))

    def test_walk_in_sale(self, db):
        sale, customer = sale_service.record_sale(db, customer_id=None, total_price=Decimal("40"))
        assert customer is None
        assert sale.customer_id is None

    def test_update_sale_moves_credit_by_outstanding_delta(self, db, customer):
        sale, _ = sale_service.record_sale(
            db, customer_id=customer.id, total_price=Decimal("300"), amount_received=Decimal("100")
        )
        db.refresh(customer)
        assert Decimal(customer.credit) == Decimal("300")

        sale_service.update_sale(db, sale.id, amount_received=Decimal("250"))
        db.refresh(customer)

        assert Decimal(customer.credit) == Decimal("150")
        assert customer.sales[0]["amount_received"] in ("250", "250.00")

    def test_delete_sale_keeps_embedded_copy(self, db, customer):
        sale, _ = sale_service.record_sale(db, customer_id=customer.id, total_price=Decimal("20"))

        assert sale_service.delete_sale(db, sale.id) is True
        db.refresh(customer)
        assert sale_service.get_sale_by_id(db, sale.id) is None
        assert len(customer.sales) == 1


class TestReconciliation:

    def test_reconcile_all_customers(self, db, customer):
        sale_date = datetime(2024, 4, 1, 8, 0, 0)
        sale_service.record_sale(db, customer_id=customer.id, total_price=Decimal("10"), sale_date=sale_date)

        customer.last_purchase = datetime(2020, 1, 1)
        db.commit()

        assert customer_service.reconcile_all_customers(db) == 1
        db.refresh(customer)
        assert customer.last_purchase.replace(tzinfo=None) == sale_date
        assert customer_service.reconcile_all_customers(db) == 0

    def test_customer_without_sales_is_untouched(self, db, customer):
        assert customer.last_purchase is None
        assert customer_service.reconcile_last_purchase(customer) is False
        assert customer.last_purchase is None


class TestPayments:

    def test_payment_reduces_credit(self, db, customer):
        updated = customer_service.record_payment(
            db, customer.id, amount_received=Decimal("30"), other_amount=Decimal("20")
        )
        assert Decimal(updated.credit) == Decimal("50")
        assert len(updated.payments) == 1
        assert Decimal(updated.payments[0]["total_amount"]) == Decimal("50")

    def test_overpayment_floors_credit_at_zero(self, db, customer):
        updated = customer_service.record_payment(db, customer.id, amount_received=Decimal("250"))
        assert Decimal(updated.credit) == Decimal("0")

    @pytest.mark.parametrize("received,other", [("0", "0"), ("-10", "5")])
    def test_non_positive_total_rejected(self, db, customer, received, other):
        with pytest.raises(ValueError):
            customer_service.record_payment(
                db, customer.id, amount_received=Decimal(received), other_amount=Decimal(other)
            )
        db.refresh(customer)
        assert Decimal(customer.credit) == Decimal("100")

    def test_unknown_customer_returns_none(self, db):
        assert customer_service.record_payment(db, "CUS-NOPE", amount_received=Decimal("5")) is None


class TestCustomerRoutes:

    def _create(self, client, auth_headers, credit="100"):
        resp = client.post(
            "/api/v1/customers",
            json={"name": "Asha Traders", "contact": "9876543210", "credit": credit},
            headers=auth_headers,
        )
        assert resp.status_code == 201
        return resp.json()

    def test_sale_scenario(self, client, auth_headers):
        customer = self._create(client, auth_headers)

        resp = client.post(
            "/api/v1/sales",
            json={
                "customer_id": customer["id"],
                "sale_type": "retail",
                "products": [{"product_id": "PRD-A", "product_name": "Rice", "quantity": "2", "price": "150"}],
                "total_price": "300",
                "amount_received": "50",
                "payment_method": "cash",
                "date": "2024-03-01T10:00:00",
                "updated_credit": "350",
            },
            headers=auth_headers,
        )

        assert resp.status_code == 201
        body = resp.json()
        assert body["message"] == "Sale recorded successfully"
        assert Decimal(body["customer"]["credit"]) == Decimal("350")
        assert body["customer"]["last_purchase"].startswith("2024-03-01T10:00:00")
        assert body["customer"]["sales_count"] == 1

        detail = client.get(f"/api/v1/customers/{customer['id']}", headers=auth_headers).json()
        assert len(detail["sales"]) == 1

        sales = client.get(f"/api/v1/customers/{customer['id']}/sales", headers=auth_headers).json()
        assert sales["total"] == 1
        assert sales["sales"][0]["customer_name"] == "Asha Traders"

    def test_sale_for_unknown_customer(self, client, auth_headers):
        resp = client.post(
            "/api/v1/sales", json={"customer_id": "CUS-NOPE", "total_price": "10"}, headers=auth_headers
        )
        assert resp.status_code == 404

    def test_payment_routes(self, client, auth_headers):
        customer = self._create(client, auth_headers)

        resp = client.post(
            f"/api/v1/customers/{customer['id']}/payments",
            json={"amount_received": "60", "other_amount": "0", "description": "part"},
            headers=auth_headers,
        )
        assert resp.status_code == 200
        assert Decimal(resp.json()["credit"]) == Decimal("40")

        resp = client.post(
            f"/api/v1/customers/{customer['id']}/payments",
            json={"amount_received": "90"},
            headers=auth_headers,
        )
        assert Decimal(resp.json()["credit"]) == Decimal("0")

        resp = client.post(
            f"/api/v1/customers/{customer['id']}/payments",
            json={"amount_received": "0", "other_amount": "0"},
            headers=auth_headers,
        )
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Payment amount must be greater than zero"

        payments = client.get(f"/api/v1/customers/{customer['id']}/payments", headers=auth_headers).json()
        assert payments["total"] == 2
        assert payments["total_pages"] == 1

    def test_delete_requires_fresh_credentials(self, client, auth_headers, reauth):
        customer = self._create(client, auth_headers)
        url = f"/api/v1/customers/{customer['id']}"

        resp = client.request("DELETE", url, headers=auth_headers)
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Mobile and password are required for deletion"

        resp = client.request(
            "DELETE", url, json={"mobile": reauth["mobile"], "password": "wrong-password"}, headers=auth_headers
        )
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Invalid credentials. Deletion denied."
        assert client.get(url, headers=auth_headers).status_code == 200

        resp = client.request("DELETE", url, json=reauth, headers=auth_headers)
        assert resp.status_code == 200
        assert client.get(url, headers=auth_headers).status_code == 404

    def test_list_sort_and_search(self, client, auth_headers):
        self._create(client, auth_headers, credit="10")
        client.post(
            "/api/v1/customers",
            json={"name": "Bala Stores", "contact": "9000000000", "credit": "500"},
            headers=auth_headers,
        )

        by_credit = client.get("/api/v1/customers?sort=credit", headers=auth_headers).json()
        assert [c["name"] for c in by_credit["customers"]] == ["Bala Stores", "Asha Traders"]

        found = client.get("/api/v1/customers?search=bala", headers=auth_headers).json()
        assert found["total"] == 1

        assert client.get("/api/v1/customers?sort=bogus", headers=auth_headers).status_code == 400

    def test_reconcile_endpoint(self, client, auth_headers):
        resp = client.post("/api/v1/customers/reconcile-last-purchase", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json()["corrected"] == 0


class TestSaleRoutes:

    def test_filters_and_summary(self, client, auth_headers):
        for day, method, sale_type, total in (
            ("2024-01-10T09:00:00", "cash", "retail", "100"),
            ("2024-02-10T09:00:00", "upi", "wholesale", "250"),
            ("2024-02-20T09:00:00", "cash", "retail", "50"),
        ):
            client.post(
                "/api/v1/sales",
                json={"total_price": total, "payment_method": method, "sale_type": sale_type, "date": day},
                headers=auth_headers,
            )

        feb = client.get(
            "/api/v1/sales?from_date=2024-02-01&to_date=2024-02-29", headers=auth_headers
        ).json()
        assert feb["total"] == 2

        cash = client.get("/api/v1/sales?payment_method=cash", headers=auth_headers).json()
        assert cash["total"] == 2

        summary = client.get("/api/v1/sales/summary", headers=auth_headers).json()
        assert Decimal(summary["total_sales"]) == Decimal("400")
        assert summary["count"] == 3
        by_method = {g["key"]: Decimal(g["total"]) for g in summary["sales_by_payment_method"]}
        assert by_method == {"cash": Decimal("150"), "upi": Decimal("250")}
