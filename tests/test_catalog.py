"""
Tests for products and price history, vendors and purchases.
"""

from decimal import Decimal

import pytest

from bookkeeper.common.exceptions import NotFoundError
from bookkeeper.models.vendor import PurchaseUnit
from bookkeeper.services import product_service, purchase_service, vendor_service


class TestProducts:

    def test_price_update_appends_history(self, db, user):
        product = product_service.create_product(
            db, "Basmati 25kg", price_per_pack=Decimal("1500"), kgs_per_pack=Decimal("25"), price_per_kg=Decimal("60")
        )

        updated, history = product_service.update_price(
            db, product.id, Decimal("1600"), Decimal("64"), reason="Supplier hike", updated_by_id=user.id
        )

        assert Decimal(updated.price_per_pack) == Decimal("1600")
        assert Decimal(history.old_price_per_pack) == Decimal("1500")
        assert Decimal(history.new_price_per_kg) == Decimal("64")
        assert history.reason == "Supplier hike"
        assert len(product_service.get_price_history(db, product.id)) == 1

    def test_unchanged_price_rejected(self, db):
        product = product_service.create_product(
            db, "Sugar", price_per_pack=Decimal("40"), price_per_kg=Decimal("40")
        )
        with pytest.raises(ValueError, match="No price change detected"):
            product_service.update_price(db, product.id, Decimal("40"), Decimal("40"))

    def test_unknown_product(self, db):
        assert product_service.update_price(db, "PRD-NOPE", Decimal("1"), Decimal("1")) is None

    def test_price_history_survives_product_delete(self, db):
        product = product_service.create_product(
            db, "Jaggery", price_per_pack=Decimal("80"), price_per_kg=Decimal("80")
        )
        product_service.update_price(db, product.id, Decimal("90"), Decimal("90"))

        assert product_service.delete_product(db, product.id) is True
        assert product_service.get_product_by_id(db, product.id) is None

        history = product_service.get_price_history(db, product.id)
        assert len(history) == 1
        assert Decimal(history[0].old_price_per_pack) == Decimal("80")

    def test_product_routes(self, client, auth_headers, reauth):
        resp = client.post(
            "/api/v1/products",
            json={"product_name": "Wheat", "price_per_pack": "900", "kgs_per_pack": "30", "price_per_kg": "30"},
            headers=auth_headers,
        )
        assert resp.status_code == 201
        product_id = resp.json()["id"]

        listed = client.get("/api/v1/products", headers=auth_headers).json()
        assert listed["total"] == 1

        resp = client.post(
            "/api/v1/price-history/update-price",
            json={"product_id": product_id, "new_price_per_pack": "960", "new_price_per_kg": "32"},
            headers=auth_headers,
        )
        assert resp.status_code == 200
        assert resp.json()["price_history"]["reason"] == "Price update"

        history = client.get(f"/api/v1/price-history/{product_id}", headers=auth_headers).json()
        assert len(history) == 1
        assert Decimal(history[0]["old_price_per_pack"]) == Decimal("900")

        resp = client.request("DELETE", f"/api/v1/products/{product_id}", headers=auth_headers)
        assert resp.status_code == 400

        resp = client.request("DELETE", f"/api/v1/products/{product_id}", json=reauth, headers=auth_headers)
        assert resp.status_code == 200
        assert client.get(f"/api/v1/products/{product_id}", headers=auth_headers).status_code == 404


class TestVendorsAndPurchases:

    def test_purchase_sets_vendor_credit(self, db, user):
        vendor = vendor_service.create_vendor(db, user.id, "Mill Co", "9111111111", credit=Decimal("200"))

        purchase = purchase_service.create_purchase(
            db,
            owner_id=user.id,
            item="Paddy",
            vendor_id=vendor.id,
            quantity=Decimal("10"),
            unit=PurchaseUnit.packs,
            price_per_unit=Decimal("50"),
            amount_paid=Decimal("300"),
        )

        assert Decimal(purchase.total_price) == Decimal("500")
        assert Decimal(purchase.updated_credit) == Decimal("400")
        db.refresh(vendor)
        assert Decimal(vendor.credit) == Decimal("400")
        assert purchase.vendor_name == "Mill Co"

    def test_client_supplied_credit_wins(self, db, user):
        vendor = vendor_service.create_vendor(db, user.id, "Mill Co", "9111111111")
        purchase_service.create_purchase(
            db,
            owner_id=user.id,
            item="Paddy",
            vendor_id=vendor.id,
            quantity=Decimal("1"),
            unit=PurchaseUnit.kgs,
            price_per_unit=Decimal("100"),
            updated_credit=Decimal("75"),
        )
        db.refresh(vendor)
        assert Decimal(vendor.credit) == Decimal("75")

    def test_purchase_from_unknown_vendor(self, db, user):
        with pytest.raises(NotFoundError):
            purchase_service.create_purchase(
                db,
                owner_id=user.id,
                item="Paddy",
                vendor_id="VEN-NOPE",
                quantity=Decimal("1"),
                unit=PurchaseUnit.kgs,
                price_per_unit=Decimal("1"),
            )

    def test_vendor_and_purchase_routes(self, client, auth_headers, reauth):
        vendor = client.post(
            "/api/v1/vendors",
            json={"name": "Mill Co", "contact": "9111111111", "items": ["Paddy"]},
            headers=auth_headers,
        ).json()

        resp = client.post(
            "/api/v1/purchases",
            json={
                "item": "Paddy",
                "vendor_id": vendor["id"],
                "quantity": "4",
                "unit": "packs",
                "price_per_unit": "250",
                "amount_paid": "1000",
            },
            headers=auth_headers,
        )
        assert resp.status_code == 201
        purchase = resp.json()
        assert Decimal(purchase["updated_credit"]) == Decimal("0")

        listed = client.get(f"/api/v1/purchases?vendor_id={vendor['id']}", headers=auth_headers).json()
        assert listed["total"] == 1
        assert Decimal(listed["total_amount"]) == Decimal("1000")

        resp = client.put(
            f"/api/v1/purchases/{purchase['id']}", json={"updated_credit": "120"}, headers=auth_headers
        )
        assert resp.status_code == 200
        assert Decimal(client.get(f"/api/v1/vendors/{vendor['id']}", headers=auth_headers).json()["credit"]) == Decimal("120")

        resp = client.request("DELETE", f"/api/v1/purchases/{purchase['id']}", json=reauth, headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json()["message"] == "Purchase removed"

        resp = client.request(
            "DELETE", f"/api/v1/vendors/{vendor['id']}", json={"mobile": reauth["mobile"]}, headers=auth_headers
        )
        assert resp.status_code == 400
        resp = client.request("DELETE", f"/api/v1/vendors/{vendor['id']}", json=reauth, headers=auth_headers)
        assert resp.status_code == 200
