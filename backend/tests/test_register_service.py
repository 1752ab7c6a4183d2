# Overview: Pytest coverage for register lifecycle behavior.

"""
Register Lifecycle Tests

Covers:
- create -> open -> record sales -> close -> reopen
- State guards (double open, double close, sale on closed register)
- Delete guard (open registers cannot be deleted)
- Seller isolation (another seller's register is "not found")
"""

import pytest

from myhouz.errors import InvalidStateError, NotFoundError, ValidationError
from myhouz.models import Register
from myhouz.services import register_service


class TestRegisterLifecycle:

    def test_new_register_starts_closed(self, db_session, seller):
        register = register_service.create_register(seller.id, "Front Counter")

        assert register.status == "closed"
        assert register.opening_balance_cents == 0
        assert register.sales_count == 0
        assert register.opened_at is None

    def test_negative_preset_balance_is_floored(self, db_session, seller):
        register = register_service.create_register(seller.id, "Back Office", opening_balance_cents=-500)
        assert register.opening_balance_cents == 0

    def test_name_required(self, db_session, seller):
        with pytest.raises(ValidationError):
            register_service.create_register(seller.id, "   ")

    def test_open_sets_balance_and_timestamp(self, db_session, seller):
        register = register_service.create_register(seller.id, "Front Counter")

        register = register_service.open_register(seller.id, register.id, opening_balance_cents=10000)

        assert register.status == "open"
        assert register.opening_balance_cents == 10000
        assert register.opened_at is not None
        assert register.closed_at is None

    def test_open_twice_fails(self, db_session, seller):
        register = register_service.create_register(seller.id, "Front Counter")
        register_service.open_register(seller.id, register.id)

        with pytest.raises(InvalidStateError, match="already open"):
            register_service.open_register(seller.id, register.id)

    def test_close_closed_register_fails(self, db_session, seller):
        register = register_service.create_register(seller.id, "Front Counter")

        with pytest.raises(InvalidStateError, match="already closed"):
            register_service.close_register(seller.id, register.id)

    def test_close_records_balance_and_variance(self, db_session, seller):
        register = register_service.create_register(seller.id, "Front Counter")
        register_service.open_register(seller.id, register.id, opening_balance_cents=10000)
        register_service.record_sale(seller.id, register.id, 2500)
        register_service.record_sale(seller.id, register.id, 1500)

        register = register_service.close_register(seller.id, register.id, closing_balance_cents=13900, notes="Short 1.00")

        assert register.status == "closed"
        assert register.closing_balance_cents == 13900
        assert register.closed_at is not None
        assert register.notes == "Short 1.00"

        data = register.to_dict()
        assert data["expected_balance_cents"] == 14000
        assert data["variance_cents"] == -100

    def test_close_without_notes_keeps_existing_notes(self, db_session, seller):
        register = register_service.create_register(seller.id, "Front Counter", notes="Near the door")
        register_service.open_register(seller.id, register.id)

        register = register_service.close_register(seller.id, register.id)

        assert register.notes == "Near the door"
        assert register.closing_balance_cents == 0

    def test_reopen_resets_shift_counters(self, db_session, seller):
        register = register_service.create_register(seller.id, "Front Counter")
        register_service.open_register(seller.id, register.id, opening_balance_cents=5000)
        register_service.record_sale(seller.id, register.id, 1999)
        register_service.close_register(seller.id, register.id, closing_balance_cents=6999)

        register = register_service.open_register(seller.id, register.id)

        assert register.status == "open"
        assert register.sales_count == 0
        assert register.total_sales_cents == 0
        assert register.closing_balance_cents is None
        assert register.closed_at is None
        assert register.opening_balance_cents == 0


class TestRecordSale:

    def test_sale_accumulates(self, db_session, seller):
        register = register_service.create_register(seller.id, "Front Counter")
        register_service.open_register(seller.id, register.id)

        register_service.record_sale(seller.id, register.id, 1000)
        register = register_service.record_sale(seller.id, register.id, "250")

        assert register.sales_count == 2
        assert register.total_sales_cents == 1250

    def test_sale_on_closed_register_fails(self, db_session, seller):
        register = register_service.create_register(seller.id, "Front Counter")

        with pytest.raises(InvalidStateError):
            register_service.record_sale(seller.id, register.id, 1000)

    @pytest.mark.parametrize("amount", [None, -1, 12.5, "abc", True])
    def test_invalid_amount(self, db_session, seller, amount):
        register = register_service.create_register(seller.id, "Front Counter")
        register_service.open_register(seller.id, register.id)

        with pytest.raises(ValidationError):
            register_service.record_sale(seller.id, register.id, amount)


class TestDeleteRegister:

    def test_delete_open_register_fails(self, db_session, seller):
        register = register_service.create_register(seller.id, "Front Counter")
        register_service.open_register(seller.id, register.id)

        with pytest.raises(InvalidStateError, match="Close it first"):
            register_service.delete_register(seller.id, register.id)

        assert db_session.get(Register, register.id) is not None

    def test_delete_after_close(self, db_session, seller):
        register = register_service.create_register(seller.id, "Front Counter")
        register_service.open_register(seller.id, register.id)
        register_service.close_register(seller.id, register.id)
        register_id = register.id

        register_service.delete_register(seller.id, register_id)

        assert db_session.get(Register, register_id) is None
        with pytest.raises(NotFoundError):
            register_service.get_register(seller.id, register_id)


class TestRegisterIsolation:

    def test_other_seller_cannot_see_register(self, db_session, seller, other_seller):
        register = register_service.create_register(seller.id, "Front Counter")

        with pytest.raises(NotFoundError):
            register_service.get_register(other_seller.id, register.id)
        with pytest.raises(NotFoundError):
            register_service.open_register(other_seller.id, register.id)
        with pytest.raises(NotFoundError):
            register_service.delete_register(other_seller.id, register.id)

        assert register_service.list_registers(other_seller.id) == []

    def test_list_filters_by_status(self, db_session, seller):
        first = register_service.create_register(seller.id, "One")
        second = register_service.create_register(seller.id, "Two")
        register_service.open_register(seller.id, second.id)

        open_ids = [r.id for r in register_service.list_registers(seller.id, status="open")]
        closed_ids = [r.id for r in register_service.list_registers(seller.id, status="closed")]
        all_ids = [r.id for r in register_service.list_registers(seller.id)]

        assert open_ids == [second.id]
        assert closed_ids == [first.id]
        assert all_ids == [second.id, first.id]

    def test_list_rejects_unknown_status(self, db_session, seller):
        with pytest.raises(ValidationError):
            register_service.list_registers(seller.id, status="paused")
