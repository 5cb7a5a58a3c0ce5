"""
Tests for the savings / income / payable / money-lent ledgers.

Every entry mutation must leave the owning type's total equal to the sum of
its entries.
"""

from datetime import date
from decimal import Decimal

import pytest

from bookkeeper.common.exceptions import InsufficientBalanceError, NotFoundError
from bookkeeper.models.ledger import LedgerEntry, LedgerKind, LedgerType
from bookkeeper.services import ledger_service


def entry_sum(db, type_id):
    return sum(
        (Decimal(e.amount) for e in db.query(LedgerEntry).filter(LedgerEntry.type_id == type_id)),
        Decimal("0"),
    )


class TestAggregation:
    """Service-level checks of the recomputed totals."""

    def test_emergency_fund_can_go_negative(self, db, user):
        """500 then -200 gives 300; removing the 500 leaves -200."""
        emergency = ledger_service.create_type(db, LedgerKind.savings, user.id, "Emergency")
        assert Decimal(emergency.total_amount) == Decimal("0")

        first = ledger_service.create_entry(
            db, LedgerKind.savings, user.id, emergency.id, Decimal("500"), date(2024, 1, 1)
        )
        db.refresh(emergency)
        assert Decimal(emergency.total_amount) == Decimal("500")

        ledger_service.create_entry(
            db, LedgerKind.savings, user.id, emergency.id, Decimal("-200"), date(2024, 2, 1)
        )
        db.refresh(emergency)
        assert Decimal(emergency.total_amount) == Decimal("300")

        assert ledger_service.delete_entry(db, LedgerKind.savings, user.id, first.id) is True
        db.refresh(emergency)
        assert Decimal(emergency.total_amount) == Decimal("-200")
        assert Decimal(emergency.total_amount) == entry_sum(db, emergency.id)

    def test_moving_entry_recomputes_both_types(self, db, user):
        cash = ledger_service.create_type(db, LedgerKind.payable, user.id, "Cash")
        bank = ledger_service.create_type(db, LedgerKind.payable, user.id, "Bank")
        moved = ledger_service.create_entry(db, LedgerKind.payable, user.id, cash.id, Decimal("100"))
        ledger_service.create_entry(db, LedgerKind.payable, user.id, bank.id, Decimal("50"))

        _, before = ledger_service.get_all_types(db, LedgerKind.payable, user.id)

        ledger_service.update_entry(
            db, LedgerKind.payable, user.id, moved.id, type_id=bank.id, amount=Decimal("100")
        )
        db.refresh(cash)
        db.refresh(bank)
        assert Decimal(cash.total_amount) == Decimal("0")
        assert Decimal(bank.total_amount) == Decimal("150")

        _, after = ledger_service.get_all_types(db, LedgerKind.payable, user.id)
        assert before == after == Decimal("150")

    def test_update_amount_recomputes_total(self, db, user):
        lent = ledger_service.create_type(db, LedgerKind.money_lent, user.id, "Ravi")
        entry = ledger_service.create_entry(db, LedgerKind.money_lent, user.id, lent.id, Decimal("1000"))

        ledger_service.update_entry(
            db, LedgerKind.money_lent, user.id, entry.id, type_id=lent.id, amount=Decimal("750")
        )
        db.refresh(lent)
        assert Decimal(lent.total_amount) == Decimal("750")

    def test_deleting_type_removes_its_entries(self, db, user):
        salary = ledger_service.create_type(db, LedgerKind.income, user.id, "Salary")
        ledger_service.create_entry(db, LedgerKind.income, user.id, salary.id, Decimal("10"))
        ledger_service.create_entry(db, LedgerKind.income, user.id, salary.id, Decimal("20"))

        assert ledger_service.delete_type(db, LedgerKind.income, user.id, salary.id) is True
        assert db.query(LedgerEntry).filter(LedgerEntry.type_id == salary.id).count() == 0
        assert db.query(LedgerType).filter(LedgerType.id == salary.id).first() is None

    def test_recompute_of_missing_type_returns_sum(self, db, user):
        assert ledger_service.recompute_total(db, "LTY-MISSING") == Decimal("0")

    def test_non_savings_amount_must_be_positive(self, db, user):
        payable = ledger_service.create_type(db, LedgerKind.payable, user.id, "Rent")
        with pytest.raises(ValueError):
            ledger_service.create_entry(db, LedgerKind.payable, user.id, payable.id, Decimal("0"))
        with pytest.raises(ValueError):
            ledger_service.create_entry(db, LedgerKind.payable, user.id, payable.id, Decimal("-5"))

    def test_entry_on_unknown_type_is_not_found(self, db, user):
        with pytest.raises(NotFoundError):
            ledger_service.create_entry(db, LedgerKind.savings, user.id, "LTY-NOPE", Decimal("5"))

    def test_duplicate_type_name_rejected(self, db, user):
        ledger_service.create_type(db, LedgerKind.savings, user.id, "Emergency")
        with pytest.raises(ValueError):
            ledger_service.create_type(db, LedgerKind.savings, user.id, "Emergency")
        # Same name under another kind is fine
        ledger_service.create_type(db, LedgerKind.income, user.id, "Emergency")

    def test_listing_types_repairs_stale_total(self, db, user):
        emergency = ledger_service.create_type(db, LedgerKind.savings, user.id, "Emergency")
        ledger_service.create_entry(db, LedgerKind.savings, user.id, emergency.id, Decimal("500"))

        db.query(LedgerType).filter(LedgerType.id == emergency.id).update({LedgerType.total_amount: 0})
        db.commit()
        db.refresh(emergency)
        assert Decimal(emergency.total_amount) == Decimal("0")

        types, grand_total = ledger_service.get_all_types(db, LedgerKind.savings, user.id)

        assert Decimal(types[0].total_amount) == Decimal("500")
        assert grand_total == Decimal("500")
        db.refresh(emergency)
        assert Decimal(emergency.total_amount) == Decimal("500")

    def test_entry_list_total_covers_every_page(self, db, user):
        cash = ledger_service.create_type(db, LedgerKind.payable, user.id, "Cash")
        for day, amount in ((1, "100"), (2, "40"), (3, "10")):
            ledger_service.create_entry(
                db, LedgerKind.payable, user.id, cash.id, Decimal(amount), date(2024, 1, day)
            )

        rows, count, total_amount = ledger_service.get_all_entries(
            db, LedgerKind.payable, user.id, skip=0, limit=1
        )

        assert count == 3
        assert total_amount == Decimal("150")
        assert [r.date for r in rows] == [date(2024, 1, 3)]
        assert rows[0].type.name == "Cash"
        assert ledger_service.sum_entries(db, cash.id) == Decimal("150")


class TestIncomeFromSavings:
    """Income funded from a savings type."""

    def _setup(self, db, user, balance="500"):
        savings = ledger_service.create_type(db, LedgerKind.savings, user.id, "Emergency")
        ledger_service.create_entry(db, LedgerKind.savings, user.id, savings.id, Decimal(balance))
        income = ledger_service.create_type(db, LedgerKind.income, user.id, "Household")
        return savings, income

    def test_moves_amount_between_types(self, db, user):
        savings, income = self._setup(db, user)

        entry = ledger_service.record_income_from_savings(
            db, user.id, income.id, savings.id, Decimal("200"), date(2024, 3, 1)
        )

        assert entry.is_from_savings is True
        assert entry.savings_type_id == savings.id
        db.refresh(savings)
        db.refresh(income)
        assert Decimal(savings.total_amount) == Decimal("300")
        assert Decimal(income.total_amount) == Decimal("200")
        deductions = [e for e in savings.entries if Decimal(e.amount) < 0]
        assert len(deductions) == 1
        assert Decimal(deductions[0].amount) == Decimal("-200")

    def test_overdraw_is_rejected(self, db, user):
        savings, income = self._setup(db, user, balance="100")

        with pytest.raises(InsufficientBalanceError) as exc:
            ledger_service.record_income_from_savings(db, user.id, income.id, savings.id, Decimal("150"))

        assert exc.value.available == Decimal("100")
        assert exc.value.requested == Decimal("150")
        db.refresh(savings)
        db.refresh(income)
        assert Decimal(savings.total_amount) == Decimal("100")
        assert Decimal(income.total_amount) == Decimal("0")

    def test_exact_balance_is_allowed(self, db, user):
        savings, income = self._setup(db, user, balance="100")
        ledger_service.record_income_from_savings(db, user.id, income.id, savings.id, Decimal("100"))
        db.refresh(savings)
        assert Decimal(savings.total_amount) == Decimal("0")


class TestLedgerRoutes:
    """HTTP surface of the ledger routers."""

    def test_requires_token(self, client):
        resp = client.get("/api/v1/savings-types")
        assert resp.status_code == 401

    def test_emergency_scenario_over_http(self, client, auth_headers):
        resp = client.post("/api/v1/savings-types", json={"name": "Emergency"}, headers=auth_headers)
        assert resp.status_code == 201
        type_id = resp.json()["id"]
        assert Decimal(resp.json()["total_amount"]) == Decimal("0")

        first = client.post(
            "/api/v1/savings-entries",
            json={"type_id": type_id, "amount": "500", "date": "2024-01-01"},
            headers=auth_headers,
        )
        assert first.status_code == 201
        assert first.json()["type_name"] == "Emergency"

        client.post(
            "/api/v1/savings-entries",
            json={"type_id": type_id, "amount": "-200", "date": "2024-02-01"},
            headers=auth_headers,
        )
        types = client.get("/api/v1/savings-types", headers=auth_headers).json()
        assert Decimal(types["types"][0]["total_amount"]) == Decimal("300")
        assert len(types["types"][0]["entries"]) == 2

        resp = client.delete(f"/api/v1/savings-entries/{first.json()['id']}", headers=auth_headers)
        assert resp.status_code == 200
        types = client.get("/api/v1/savings-types", headers=auth_headers).json()
        assert Decimal(types["types"][0]["total_amount"]) == Decimal("-200")
        assert Decimal(types["total_amount"]) == Decimal("-200")

    def test_entries_listed_newest_first(self, client, auth_headers):
        type_id = client.post(
            "/api/v1/money-lent-types", json={"name": "Ravi"}, headers=auth_headers
        ).json()["id"]
        for day in ("2024-01-05", "2024-03-05", "2024-02-05"):
            client.post(
                "/api/v1/money-lent-entries",
                json={"type_id": type_id, "amount": "10", "date": day},
                headers=auth_headers,
            )

        body = client.get("/api/v1/money-lent-entries", headers=auth_headers).json()
        assert body["total"] == 3
        assert [e["date"] for e in body["entries"]] == ["2024-03-05", "2024-02-05", "2024-01-05"]
        assert Decimal(body["total_amount"]) == Decimal("30")

    def test_income_from_savings_insufficient_balance(self, client, auth_headers):
        savings_id = client.post(
            "/api/v1/savings-types", json={"name": "Emergency"}, headers=auth_headers
        ).json()["id"]
        client.post(
            "/api/v1/savings-entries", json={"type_id": savings_id, "amount": "100"}, headers=auth_headers
        )
        income_id = client.post(
            "/api/v1/income-types", json={"name": "Household"}, headers=auth_headers
        ).json()["id"]

        resp = client.post(
            "/api/v1/income-entries",
            json={
                "type_id": income_id,
                "amount": "250",
                "is_from_savings": True,
                "savings_type_id": savings_id,
            },
            headers=auth_headers,
        )

        assert resp.status_code == 400
        detail = resp.json()["detail"]
        assert detail["code"] == "insufficient_balance"
        assert Decimal(detail["available"]) == Decimal("100")
        assert Decimal(detail["requested"]) == Decimal("250")

    def test_income_from_savings_success(self, client, auth_headers):
        savings_id = client.post(
            "/api/v1/savings-types", json={"name": "Emergency"}, headers=auth_headers
        ).json()["id"]
        client.post(
            "/api/v1/savings-entries", json={"type_id": savings_id, "amount": "400"}, headers=auth_headers
        )
        income_id = client.post(
            "/api/v1/income-types", json={"name": "Household"}, headers=auth_headers
        ).json()["id"]

        resp = client.post(
            "/api/v1/income-entries",
            json={
                "type_id": income_id,
                "amount": "150",
                "is_from_savings": True,
                "savings_type_id": savings_id,
            },
            headers=auth_headers,
        )

        assert resp.status_code == 201
        assert resp.json()["is_from_savings"] is True
        assert resp.json()["savings_type_name"] == "Emergency"
        savings = client.get("/api/v1/savings-types", headers=auth_headers).json()
        income = client.get("/api/v1/income-types", headers=auth_headers).json()
        assert Decimal(savings["total_amount"]) == Decimal("250")
        assert Decimal(income["total_amount"]) == Decimal("150")

    def test_invalid_amount_is_bad_request(self, client, auth_headers):
        type_id = client.post(
            "/api/v1/payable-types", json={"name": "Rent"}, headers=auth_headers
        ).json()["id"]
        resp = client.post(
            "/api/v1/payable-entries", json={"type_id": type_id, "amount": "0"}, headers=auth_headers
        )
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Valid type_id and amount are required"

    def test_unknown_type_is_not_found(self, client, auth_headers):
        resp = client.post(
            "/api/v1/payable-entries", json={"type_id": "LTY-NOPE", "amount": "10"}, headers=auth_headers
        )
        assert resp.status_code == 404

    def test_rename_and_delete_type(self, client, auth_headers):
        type_id = client.post(
            "/api/v1/payable-types", json={"name": "Rent"}, headers=auth_headers
        ).json()["id"]
        client.post(
            "/api/v1/payable-entries", json={"type_id": type_id, "amount": "10"}, headers=auth_headers
        )

        resp = client.put(f"/api/v1/payable-types/{type_id}", json={"name": "Shop rent"}, headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json()["name"] == "Shop rent"

        resp = client.delete(f"/api/v1/payable-types/{type_id}", headers=auth_headers)
        assert resp.status_code == 200
        entries = client.get("/api/v1/payable-entries", headers=auth_headers).json()
        assert entries["total"] == 0

    def test_types_are_scoped_to_owner(self, client, auth_headers, db):
        from bookkeeper.core.security import create_access_token
        from bookkeeper.services import user_service

        other = user_service.create_user(db, mobile="9000000002", password="secret456", name="Other")
        other_headers = {"Authorization": f"Bearer {create_access_token({'sub': other.user_id})}"}

        type_id = client.post(
            "/api/v1/savings-types", json={"name": "Emergency"}, headers=auth_headers
        ).json()["id"]

        assert client.get("/api/v1/savings-types", headers=other_headers).json()["total"] == 0
        resp = client.post(
            "/api/v1/savings-entries", json={"type_id": type_id, "amount": "5"}, headers=other_headers
        )
        assert resp.status_code == 404
