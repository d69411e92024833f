"""
Tests for ContractRepository.

Covers:
- CRUD round-trip and no-op mutations
- Listings and groupings
- Ongoing and overdue queries
- Overdue aggregates
- Delete blocked by billing rows
"""

from dataclasses import replace
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from rental_kernel.db.types import round_money
from rental_kernel.domain.values import MAX_MONEY, Billing
from rental_kernel.exceptions import ContractReferencedError, InvalidContractError
from rental_kernel.repositories import round_average

T0 = datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc)


class TestCrud:
    def test_create_then_find_round_trips_all_fields(self, contract_repo, contract_factory):
        contract = contract_factory(
            vehicle_uid="V-42",
            customer_uid="C-7",
            returning=T0 + timedelta(minutes=30),
            price="249.90",
        )

        contract_id = contract_repo.create(contract)
        found = contract_repo.find_by_id(contract_id)

        assert found == contract.with_id(contract_id)

    def test_largest_price_round_trips(self, contract_repo, contract_factory):
        contract = contract_factory(price=MAX_MONEY)

        contract_id = contract_repo.create(contract)

        assert contract_repo.find_by_id(contract_id) == contract.with_id(contract_id)

    def test_price_beyond_column_rejected(self, contract_repo, contract_factory):
        with pytest.raises(InvalidContractError):
            contract_repo.create(contract_factory(price=MAX_MONEY + Decimal("0.01")))

        assert contract_repo.group_by_vehicle() == {}

    def test_round_trip_truncates_to_seconds(self, contract_repo, contract_factory):
        contract = contract_factory(loc_end=T0 + timedelta(microseconds=750_000))

        found = contract_repo.find_by_id(contract_repo.create(contract))

        assert found.loc_end_datetime == T0
        assert found.loc_end_datetime.tzinfo is not None

    def test_non_utc_input_is_stored_as_utc(self, contract_repo, contract_factory):
        plus_two = timezone(timedelta(hours=2))
        contract = contract_factory(loc_end=datetime(2024, 1, 1, 12, 0, tzinfo=plus_two))

        found = contract_repo.find_by_id(contract_repo.create(contract))

        assert found.loc_end_datetime == T0
        assert found.loc_end_datetime.utcoffset() == timedelta(0)

    def test_ids_are_assigned_by_store(self, contract_repo, contract_factory):
        first = contract_repo.create(contract_factory())
        second = contract_repo.create(contract_factory())

        assert second != first

    def test_create_with_id_rejected(self, contract_repo, contract_factory):
        with pytest.raises(InvalidContractError):
            contract_repo.create(contract_factory().with_id(99))

    def test_find_unknown_returns_none(self, contract_repo):
        assert contract_repo.find_by_id(12345) is None

    def test_update_overwrites_fields(self, contract_repo, contract_factory):
        contract_id = contract_repo.create(contract_factory(price="100.00"))
        stored = contract_repo.find_by_id(contract_id)

        changed = replace(stored, price=Decimal("150.00"), vehicle_uid="V-9")
        assert contract_repo.update(changed) is True

        assert contract_repo.find_by_id(contract_id) == changed

    def test_update_unknown_is_noop(self, contract_repo, contract_factory):
        assert contract_repo.update(contract_factory().with_id(999)) is False

    def test_update_without_id_rejected(self, contract_repo, contract_factory):
        with pytest.raises(InvalidContractError):
            contract_repo.update(contract_factory())

    def test_delete_twice(self, contract_repo, contract_factory):
        contract_id = contract_repo.create(contract_factory())

        assert contract_repo.delete(contract_id) is True
        assert contract_repo.delete(contract_id) is False
        assert contract_repo.find_by_id(contract_id) is None

    def test_delete_with_billing_rows_raises(
        self, contract_repo, billing_repo, contract_factory
    ):
        contract_id = contract_repo.create(contract_factory())
        billing_repo.create(Billing(contract_id=contract_id, amount=Decimal("10.00")))

        with pytest.raises(ContractReferencedError) as exc_info:
            contract_repo.delete(contract_id)

        assert exc_info.value.contract_id == contract_id
        assert contract_repo.find_by_id(contract_id) is not None

    def test_mark_returned(self, contract_repo, contract_factory):
        contract_id = contract_repo.create(contract_factory())
        returned_at = T0 + timedelta(minutes=20)

        assert contract_repo.mark_returned(contract_id, returned_at) is True
        assert contract_repo.find_by_id(contract_id).returning_datetime == returned_at

    def test_mark_returned_unknown(self, contract_repo):
        assert contract_repo.mark_returned(404, T0) is False

    def test_create_logs_event(self, contract_repo, contract_factory, captured_logs):
        contract_id = contract_repo.create(contract_factory(customer_uid="C-LOG"))

        created = [r for r in captured_logs() if r["message"] == "contract_created"]
        assert created[0]["contract_id"] == contract_id
        assert created[0]["customer_uid"] == "C-LOG"


class TestListings:
    def test_list_by_customer_and_vehicle(self, contract_repo, contract_factory):
        a = contract_repo.create(contract_factory(customer_uid="C-1", vehicle_uid="V-1"))
        b = contract_repo.create(contract_factory(customer_uid="C-2", vehicle_uid="V-1"))
        c = contract_repo.create(contract_factory(customer_uid="C-1", vehicle_uid="V-2"))

        assert [x.id for x in contract_repo.list_by_customer("C-1")] == [a, c]
        assert [x.id for x in contract_repo.list_by_vehicle("V-1")] == [a, b]
        assert contract_repo.list_by_customer("nobody") == []

    def test_group_by_vehicle_and_customer(self, contract_repo, contract_factory):
        a = contract_repo.create(contract_factory(customer_uid="C-1", vehicle_uid="V-2"))
        b = contract_repo.create(contract_factory(customer_uid="C-2", vehicle_uid="V-1"))
        c = contract_repo.create(contract_factory(customer_uid="C-1", vehicle_uid="V-2"))

        by_vehicle = contract_repo.group_by_vehicle()
        by_customer = contract_repo.group_by_customer()

        assert {k: [x.id for x in v] for k, v in by_vehicle.items()} == {
            "V-1": [b],
            "V-2": [a, c],
        }
        assert {k: [x.id for x in v] for k, v in by_customer.items()} == {
            "C-1": [a, c],
            "C-2": [b],
        }

    def test_group_by_empty_store(self, contract_repo):
        assert contract_repo.group_by_vehicle() == {}
        assert contract_repo.group_by_customer() == {}

    def test_list_ongoing_for_customer(self, contract_repo, contract_factory, clock):
        now = clock.now()
        ongoing = contract_repo.create(
            contract_factory(
                customer_uid="C-1",
                loc_begin=now - timedelta(hours=2),
                loc_end=now + timedelta(hours=2),
            )
        )
        # Already returned, window still open
        contract_repo.create(
            contract_factory(
                customer_uid="C-1",
                loc_begin=now - timedelta(hours=2),
                loc_end=now + timedelta(hours=2),
                returning=now - timedelta(minutes=5),
            )
        )
        # Window in the future
        contract_repo.create(
            contract_factory(
                customer_uid="C-1",
                loc_begin=now + timedelta(days=1),
                loc_end=now + timedelta(days=2),
            )
        )
        # Other customer
        contract_repo.create(
            contract_factory(
                customer_uid="C-2",
                loc_begin=now - timedelta(hours=2),
                loc_end=now + timedelta(hours=2),
            )
        )

        assert [c.id for c in contract_repo.list_ongoing_for_customer("C-1")] == [ongoing]

    def test_list_ongoing_uses_explicit_now(self, contract_repo, contract_factory):
        contract_id = contract_repo.create(
            contract_factory(loc_begin=T0 - timedelta(hours=1), loc_end=T0)
        )

        assert [c.id for c in contract_repo.list_ongoing_for_customer("C-1", now=T0)] == [
            contract_id
        ]
        assert contract_repo.list_ongoing_for_customer(
            "C-1", now=T0 + timedelta(seconds=1)
        ) == []


class TestOverdue:
    def test_not_returned_grace_boundary(self, contract_repo, contract_factory):
        contract_id = contract_repo.create(contract_factory(loc_end=T0))

        at_1130 = datetime(2024, 1, 1, 11, 30, tzinfo=timezone.utc)
        at_1059 = datetime(2024, 1, 1, 10, 59, tzinfo=timezone.utc)

        assert [c.id for c in contract_repo.list_overdue(now=at_1130)] == [contract_id]
        assert contract_repo.list_overdue(now=at_1059) == []

    def test_exactly_at_deadline_not_overdue(self, contract_repo, contract_factory):
        contract_repo.create(contract_factory(loc_end=T0))

        assert contract_repo.list_overdue(now=T0 + timedelta(hours=1)) == []

    def test_returned_branch_ignores_now(self, contract_repo, contract_factory):
        late = contract_repo.create(
            contract_factory(loc_end=T0, returning=T0 + timedelta(hours=1, seconds=1))
        )
        contract_repo.create(
            contract_factory(loc_end=T0, returning=T0 + timedelta(hours=1))
        )

        far_future = T0 + timedelta(days=30)
        assert [c.id for c in contract_repo.list_overdue(now=far_future)] == [late]
        assert [c.id for c in contract_repo.list_overdue(now=T0)] == [late]

    def test_list_overdue_defaults_to_clock(self, contract_repo, contract_factory, clock):
        # clock is at 12:00, loc_end 10:00 -> two hours late
        contract_id = contract_repo.create(contract_factory(loc_end=T0))

        assert [c.id for c in contract_repo.list_overdue()] == [contract_id]

        clock.set_time(T0 + timedelta(minutes=30))
        assert contract_repo.list_overdue() == []

    def test_count_overdue_between_restricts_both_branches(
        self, contract_repo, contract_factory
    ):
        now = datetime(2024, 3, 1, tzinfo=timezone.utc)
        jan = datetime(2024, 1, 15, tzinfo=timezone.utc)
        feb = datetime(2024, 2, 15, tzinfo=timezone.utc)

        contract_repo.create(contract_factory(loc_end=jan))  # out, overdue
        contract_repo.create(
            contract_factory(loc_end=jan, returning=jan + timedelta(hours=5))
        )  # back late
        contract_repo.create(contract_factory(loc_end=feb))  # out, overdue
        contract_repo.create(
            contract_factory(loc_end=feb, returning=feb + timedelta(hours=5))
        )  # back late, outside range
        contract_repo.create(
            contract_factory(loc_end=jan, returning=jan + timedelta(minutes=5))
        )  # on time

        january = (
            datetime(2024, 1, 1, tzinfo=timezone.utc),
            datetime(2024, 1, 31, tzinfo=timezone.utc),
        )
        assert contract_repo.count_overdue_between(*january, now=now) == 2

    def test_count_overdue_between_inclusive_bounds(self, contract_repo, contract_factory):
        contract_repo.create(contract_factory(loc_end=T0))
        now = T0 + timedelta(days=1)

        assert contract_repo.count_overdue_between(T0, T0, now=now) == 1

    def test_count_overdue_between_rejects_reversed_range(self, contract_repo):
        with pytest.raises(ValueError):
            contract_repo.count_overdue_between(T0, T0 - timedelta(days=1))


class TestAggregates:
    def test_average_overdue_count_none_when_nothing_overdue(
        self, contract_repo, contract_factory
    ):
        contract_repo.create(contract_factory(loc_end=T0, returning=T0))

        assert contract_repo.average_overdue_count_per_customer(now=T0) is None

    def test_average_overdue_count_per_customer(self, contract_repo, contract_factory):
        now = T0 + timedelta(days=1)
        # C-1: 3 overdue, C-2: 1 overdue, C-3: none
        for _ in range(3):
            contract_repo.create(contract_factory(customer_uid="C-1", loc_end=T0))
        contract_repo.create(contract_factory(customer_uid="C-2", loc_end=T0))
        contract_repo.create(
            contract_factory(customer_uid="C-3", loc_end=T0, returning=T0)
        )

        assert contract_repo.average_overdue_count_per_customer(now=now) == Decimal("2.00")

    def test_average_overdue_count_is_rounded(self, contract_repo, contract_factory):
        now = T0 + timedelta(days=1)
        contract_repo.create(contract_factory(customer_uid="C-1", loc_end=T0))
        contract_repo.create(contract_factory(customer_uid="C-2", loc_end=T0))
        contract_repo.create(contract_factory(customer_uid="C-2", loc_end=T0))
        contract_repo.create(contract_factory(customer_uid="C-3", loc_end=T0))

        # 4 overdue over 3 customers
        assert contract_repo.average_overdue_count_per_customer(now=now) == Decimal("1.33")

    @pytest.mark.parametrize(
        "raw, expected",
        [(Decimal("0.125"), Decimal("0.13")), (2.345, Decimal("2.35")), (7.5, Decimal("7.50"))],
    )
    def test_averages_round_half_up_like_money(self, raw, expected):
        assert round_average(raw) == expected == round_money(Decimal(str(raw)))

    def test_average_overdue_minutes_per_vehicle(self, contract_repo, contract_factory):
        contract_repo.create(
            contract_factory(vehicle_uid="V-1", loc_end=T0, returning=T0 + timedelta(minutes=90))
        )
        contract_repo.create(
            contract_factory(vehicle_uid="V-1", loc_end=T0, returning=T0 + timedelta(minutes=150))
        )
        contract_repo.create(
            contract_factory(vehicle_uid="V-2", loc_end=T0, returning=T0 + timedelta(minutes=61))
        )
        # On time: excluded
        contract_repo.create(
            contract_factory(vehicle_uid="V-2", loc_end=T0, returning=T0 + timedelta(minutes=30))
        )
        # Still out: excluded
        contract_repo.create(contract_factory(vehicle_uid="V-3", loc_end=T0))

        assert contract_repo.average_overdue_minutes_per_vehicle() == {
            "V-1": Decimal("120.00"),
            "V-2": Decimal("61.00"),
        }

    def test_average_overdue_minutes_floors_each_contract(
        self, contract_repo, contract_factory
    ):
        contract_repo.create(
            contract_factory(
                vehicle_uid="V-1",
                loc_end=T0,
                returning=T0 + timedelta(minutes=61, seconds=59),
            )
        )

        assert contract_repo.average_overdue_minutes_per_vehicle() == {"V-1": Decimal("61.00")}

    def test_average_overdue_minutes_empty(self, contract_repo):
        assert contract_repo.average_overdue_minutes_per_vehicle() == {}
