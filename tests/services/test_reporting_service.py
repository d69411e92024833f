"""
Tests for RentalReportingService.

Covers:
- Overdue report composition at the clock time
- Overdue count over a date range
- Unpaid report and total outstanding
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

from rental_kernel.domain.values import Billing

T0 = datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc)


class TestOverdueReport:
    def test_report_at_clock_time(self, reporting, contract_repo, contract_factory, clock):
        # clock: 2024-01-01 12:00
        out_late = contract_repo.create(
            contract_factory(customer_uid="C-1", vehicle_uid="V-1", loc_end=T0)
        )
        back_late = contract_repo.create(
            contract_factory(
                customer_uid="C-1",
                vehicle_uid="V-2",
                loc_end=T0 - timedelta(days=1),
                returning=T0 - timedelta(days=1) + timedelta(minutes=100),
            )
        )
        contract_repo.create(
            contract_factory(customer_uid="C-2", vehicle_uid="V-3", loc_end=T0 + timedelta(hours=1))
        )

        report = reporting.overdue_report()

        assert report.as_of == clock.now()
        assert report.contract_ids == [out_late, back_late]
        assert report.count == 2
        assert report.average_overdue_count_per_customer == Decimal("2.00")
        assert report.average_overdue_minutes_per_vehicle == {"V-2": Decimal("100.00")}

    def test_empty_report(self, reporting):
        report = reporting.overdue_report()

        assert report.count == 0
        assert report.average_overdue_count_per_customer is None
        assert report.average_overdue_minutes_per_vehicle == {}

    def test_report_logged(self, reporting, captured_logs):
        reporting.overdue_report()

        assert any(r["message"] == "overdue_report_built" for r in captured_logs())


class TestOverdueCountBetween:
    def test_count_uses_clock(self, reporting, contract_repo, contract_factory, clock):
        contract_repo.create(contract_factory(loc_end=T0))

        start = T0 - timedelta(hours=1)
        end = T0 + timedelta(hours=1)
        assert reporting.overdue_count_between(start, end) == 1

        clock.set_time(T0 + timedelta(minutes=30))
        assert reporting.overdue_count_between(start, end) == 0


class TestUnpaidReport:
    def test_unpaid_report(self, reporting, contract_repo, billing_repo, contract_factory):
        paid = contract_repo.create(contract_factory(price="500.00"))
        short = contract_repo.create(contract_factory(price="500.00"))
        nothing = contract_repo.create(contract_factory(price="100.00"))
        for contract_id, amount in ((paid, "500.00"), (short, "120.00")):
            billing_repo.create(Billing(contract_id=contract_id, amount=Decimal(amount)))

        report = reporting.unpaid_report()

        assert report.contract_ids == [short, nothing]
        assert report.count == 2
        assert report.total_outstanding == Decimal("480.00")

    def test_all_paid(self, reporting, contract_repo, billing_repo, contract_factory):
        contract_id = contract_repo.create(contract_factory(price="10.00"))
        billing_repo.create(Billing(contract_id=contract_id, amount=Decimal("10.00")))

        report = reporting.unpaid_report()

        assert report.statuses == ()
        assert report.total_outstanding == Decimal("0")
