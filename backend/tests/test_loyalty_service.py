# Overview: Pytest coverage for the loyalty points ledger and tier engine.

import pytest
from sqlalchemy import text
from sqlalchemy.orm.exc import StaleDataError

from myhouz.extensions import db
from myhouz.errors import ConflictError, InsufficientPointsError, NotFoundError, ValidationError
from myhouz.services import concurrency, loyalty_service
from myhouz.services.loyalty_service import LoyaltyFilter, tier_for_points
from myhouz.services.pagination import PageRequest


@pytest.fixture
def program(db_session, seller):
    return loyalty_service.enroll_customer(seller.id, "Jane Doe", phone="0600000001")


def _assert_balanced(program):
    assert program.points == program.total_points_earned - program.total_points_spent
    assert program.points >= 0


class TestTierThresholds:

    @pytest.mark.parametrize("earned,tier", [
        (0, "bronze"),
        (499, "bronze"),
        (500, "silver"),
        (1999, "silver"),
        (2000, "gold"),
        (4999, "gold"),
        (5000, "platinum"),
        (120000, "platinum"),
    ])
    def test_tier_for_points(self, earned, tier):
        assert tier_for_points(earned) == tier


class TestEnrollment:

    def test_enroll_starts_bronze_with_zero_points(self, db_session, program):
        assert program.tier == "bronze"
        assert program.points == 0
        assert program.history == []

    def test_email_is_lowercased(self, db_session, seller):
        program = loyalty_service.enroll_customer(seller.id, "Bob", email="Bob@Example.COM")
        assert program.customer_email == "bob@example.com"

    def test_name_required(self, db_session, seller):
        with pytest.raises(ValidationError):
            loyalty_service.enroll_customer(seller.id, "", phone="0600000002")

    def test_phone_or_email_required(self, db_session, seller):
        with pytest.raises(ValidationError) as exc:
            loyalty_service.enroll_customer(seller.id, "Nobody")
        assert "phone" in exc.value.errors

    def test_same_phone_same_seller_conflicts(self, db_session, seller, program):
        with pytest.raises(ConflictError):
            loyalty_service.enroll_customer(seller.id, "Jane Again", phone="0600000001")

    def test_same_phone_other_seller_succeeds(self, db_session, seller, other_seller, program):
        other = loyalty_service.enroll_customer(other_seller.id, "Jane Doe", phone="0600000001")
        assert other.id != program.id
        assert other.seller_id == other_seller.id

    def test_email_is_identity_without_phone(self, db_session, seller):
        loyalty_service.enroll_customer(seller.id, "Ann", email="ann@example.com")

        with pytest.raises(ConflictError):
            loyalty_service.enroll_customer(seller.id, "Ann B", email="ANN@example.com")

    def test_numeric_phone_is_stored_as_text(self, db_session, seller):
        program = loyalty_service.enroll_customer(seller.id, "Numbers", phone=600000)

        assert program.customer_phone == "600000"
        with pytest.raises(ConflictError):
            loyalty_service.enroll_customer(seller.id, "Numbers Again", phone="600000")


class TestEarnPoints:

    def test_earn_600_reaches_silver(self, db_session, seller, program):
        program = loyalty_service.earn_points(seller.id, program.id, 600)

        assert program.points == 600
        assert program.total_points_earned == 600
        assert program.tier == "silver"
        _assert_balanced(program)

    def test_earn_appends_history(self, db_session, seller, program):
        program = loyalty_service.earn_points(seller.id, program.id, 120, sale_ref="S-42")

        assert len(program.history) == 1
        entry = program.history[0]
        assert entry.entry_type == "earn"
        assert entry.points == 120
        assert entry.description == "+120 points"
        assert entry.sale_ref == "S-42"

    def test_custom_description(self, db_session, seller, program):
        program = loyalty_service.earn_points(seller.id, program.id, 50, description="Welcome bonus")
        assert program.history[0].description == "Welcome bonus"

    @pytest.mark.parametrize("points", [None, 0, -10, 1.5, "ten", False])
    def test_invalid_points(self, db_session, seller, program, points):
        with pytest.raises(ValidationError):
            loyalty_service.earn_points(seller.id, program.id, points)

    def test_other_seller_not_found(self, db_session, other_seller, program):
        with pytest.raises(NotFoundError):
            loyalty_service.earn_points(other_seller.id, program.id, 100)


class TestSpendPoints:

    def test_platinum_is_kept_after_spending(self, db_session, seller, program):
        loyalty_service.earn_points(seller.id, program.id, 5000)

        program = loyalty_service.spend_points(seller.id, program.id, 4999)

        assert program.points == 1
        assert program.total_points_spent == 4999
        assert program.tier == "platinum"
        _assert_balanced(program)

    def test_spend_history_entry(self, db_session, seller, program):
        loyalty_service.earn_points(seller.id, program.id, 300)
        program = loyalty_service.spend_points(seller.id, program.id, 100)

        spend = program.history[-1]
        assert spend.entry_type == "spend"
        assert spend.points == 100
        assert spend.description == "-100 points used"

    def test_insufficient_points_changes_nothing(self, db_session, seller, program):
        loyalty_service.earn_points(seller.id, program.id, 100)

        with pytest.raises(InsufficientPointsError) as exc:
            loyalty_service.spend_points(seller.id, program.id, 101)

        assert exc.value.balance == 100
        assert "100" in exc.value.message

        program = loyalty_service.get_program(seller.id, program.id)
        assert program.points == 100
        assert program.total_points_spent == 0
        assert len(program.history) == 1

    def test_tier_never_goes_down(self, db_session, seller, program):
        loyalty_service.earn_points(seller.id, program.id, 2500)
        loyalty_service.spend_points(seller.id, program.id, 2500)
        program = loyalty_service.earn_points(seller.id, program.id, 10)

        assert program.points == 10
        assert program.tier == "gold"
        _assert_balanced(program)


class TestStaleWrites:
    """Another request committing between our read and our write."""

    @pytest.fixture
    def concurrent_writer(self, monkeypatch):
        """
        After the next `stale_loads` reads, bump the row version the way a
        competing commit would. Returns (load, list of loads performed).
        """
        original_load = loyalty_service._load
        loads = []

        def load(seller_id, program_id, *, for_update=False):
            program = original_load(seller_id, program_id, for_update=for_update)
            loads.append(program_id)
            if len(loads) <= load.stale_loads:
                db.session.execute(
                    text("UPDATE loyalty_programs SET version_id = version_id + 1 WHERE id = :id"),
                    {"id": program_id},
                )
            return program

        load.stale_loads = 0
        monkeypatch.setattr(loyalty_service, "_load", load)
        monkeypatch.setattr(concurrency.time, "sleep", lambda seconds: None)
        return load, loads

    def test_earn_retried_and_applied_once(self, db_session, seller, program, concurrent_writer):
        load, loads = concurrent_writer
        load.stale_loads = 1

        program = loyalty_service.earn_points(seller.id, program.id, 600)

        assert len(loads) == 2
        assert program.points == 600
        assert program.total_points_earned == 600
        assert program.tier == "silver"
        assert len(program.history) == 1
        _assert_balanced(program)

    def test_spend_gives_up_after_three_attempts(self, db_session, seller, program, concurrent_writer):
        loyalty_service.earn_points(seller.id, program.id, 300)
        load, loads = concurrent_writer
        loads.clear()
        load.stale_loads = 3

        with pytest.raises(StaleDataError):
            loyalty_service.spend_points(seller.id, program.id, 100)

        assert len(loads) == 3
        db_session.expire_all()
        program = loyalty_service.get_program(seller.id, program.id)
        assert program.points == 300
        assert program.total_points_spent == 0
        assert [entry.entry_type for entry in program.history] == ["earn"]


class TestListPrograms:

    def test_ordered_by_points_desc(self, db_session, seller):
        low = loyalty_service.enroll_customer(seller.id, "Low", phone="1")
        high = loyalty_service.enroll_customer(seller.id, "High", phone="2")
        loyalty_service.earn_points(seller.id, low.id, 10)
        loyalty_service.earn_points(seller.id, high.id, 900)

        page = loyalty_service.list_programs(LoyaltyFilter(seller_id=seller.id), PageRequest(1, 20))

        assert [p.id for p in page.items] == [high.id, low.id]
        assert page.total == 2
        assert page.pages == 1

    def test_search_and_tier_filters(self, db_session, seller):
        jane = loyalty_service.enroll_customer(seller.id, "Jane Doe", email="jane@example.com")
        loyalty_service.enroll_customer(seller.id, "Max Power", phone="0611111111")
        loyalty_service.earn_points(seller.id, jane.id, 700)

        by_name = loyalty_service.list_programs(LoyaltyFilter(seller_id=seller.id, search="jane"), PageRequest())
        by_phone = loyalty_service.list_programs(LoyaltyFilter(seller_id=seller.id, search="0611"), PageRequest())
        silver = loyalty_service.list_programs(LoyaltyFilter(seller_id=seller.id, tier="silver"), PageRequest())

        assert [p.customer_name for p in by_name.items] == ["Jane Doe"]
        assert [p.customer_name for p in by_phone.items] == ["Max Power"]
        assert [p.id for p in silver.items] == [jane.id]

    def test_unknown_tier_rejected(self, db_session, seller):
        with pytest.raises(ValidationError):
            loyalty_service.list_programs(LoyaltyFilter(seller_id=seller.id, tier="diamond"), PageRequest())

    def test_scoped_to_seller(self, db_session, seller, other_seller, program):
        page = loyalty_service.list_programs(LoyaltyFilter(seller_id=other_seller.id), PageRequest())
        assert page.items == []
        assert page.total == 0
