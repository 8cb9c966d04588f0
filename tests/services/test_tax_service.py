import pytest
from app.core.errors import ValidationError
from app.models.business import BusinessProfile
from app.models.customer import Customer
from app.models.invoice import LineItem
from app.services.tax_service import (
    TaxService,
    build_hsn_summary,
    compute_tax_split,
    fy_to_calendar,
    get_supply_type,
    period_bounds,
    period_label,
    state_name,
)
from factories import ACCOUNT_ID, make_invoice

PROFILE = BusinessProfile(business_name="Acme Traders", gst_number="29AAAAA0000A1Z5")


def customers(*entries):
    return {c.id: c for c in entries}


class TestPeriods:
    """Test financial year period mapping"""

    def test_april_is_first_month(self):
        assert fy_to_calendar(1, 2024) == (4, 2024)

    def test_december_stays_in_start_year(self):
        assert fy_to_calendar(9, 2024) == (12, 2024)

    def test_january_to_march_roll_into_next_year(self):
        assert fy_to_calendar(10, 2024) == (1, 2025)
        assert fy_to_calendar(12, 2024) == (3, 2025)

    def test_bounds_cover_whole_month(self):
        assert period_bounds(1, 2024) == ("2024-04-01T00:00:00Z", "2024-04-30T23:59:59Z")

    def test_march_bounds_use_next_calendar_year(self):
        assert period_bounds(12, 2024) == ("2025-03-01T00:00:00Z", "2025-03-31T23:59:59Z")

    def test_february_leap_year(self):
        assert period_bounds(11, 2023) == ("2024-02-01T00:00:00Z", "2024-02-29T23:59:59Z")

    def test_label(self):
        assert period_label(1, 2024) == "April 2024–2025"

    @pytest.mark.parametrize("month", [0, 13, -1])
    def test_invalid_month_rejected(self, month):
        with pytest.raises(ValidationError):
            period_bounds(month, 2024)


class TestStateCodes:
    """Test GSTIN state helpers"""

    def test_state_name(self):
        assert state_name("29AAAAA0000A1Z5") == "Karnataka"
        assert state_name("99XXXXX") == "Unknown State"
        assert state_name(None) == "Unknown State"

    def test_supply_type(self):
        assert get_supply_type("29AAAAA0000A1Z5", "29BBBBB0000B1Z5") == "intra"
        assert get_supply_type("29AAAAA0000A1Z5", "27BBBBB0000B1Z5") == "inter"
        assert get_supply_type("29AAAAA0000A1Z5", None) == "intra"
        assert get_supply_type(None, "27BBBBB0000B1Z5") == "intra"


class TestTaxSplit:
    """Test CGST/SGST split"""

    def test_uses_stored_split(self):
        invoice = make_invoice("c1", [{"name": "A", "quantity": 1, "price": 100, "gst_percent": 18}],
                               cgst_amount=9.0, sgst_amount=9.0)
        assert compute_tax_split(invoice) == (9.0, 9.0)

    def test_legacy_invoice_halves_gst(self):
        invoice = make_invoice("c1", [{"name": "A", "quantity": 1, "price": 100, "gst_percent": 18}],
                               cgst_amount=None, sgst_amount=None)
        assert compute_tax_split(invoice) == (9.0, 9.0)

    def test_legacy_half_paisa_rounds_up(self):
        invoice = make_invoice("c1", [{"name": "A", "quantity": 1, "price": 100, "gst_percent": 18}],
                               gst_amount=100.25, cgst_amount=None, sgst_amount=None)
        assert compute_tax_split(invoice) == (50.13, 50.13)

    def test_hsn_summary(self):
        items = [
            LineItem(name="A", quantity=1, price=1, hsn_code="8471"),
            LineItem(name="B", quantity=1, price=1, hsn_code="8471"),
            LineItem(name="C", quantity=1, price=1, hsn_code="9983"),
            LineItem(name="D", quantity=1, price=1),
        ]
        assert build_hsn_summary(items) == "8471, 9983"
        assert build_hsn_summary([LineItem(name="D", quantity=1, price=1)]) == "N/A"


class TestAggregate:
    """Test GSTR-3B bucket aggregation"""

    def setup_method(self):
        self.service = TaxService()
        self.customer = Customer(id="c1", account_id=ACCOUNT_ID, party_name="Zed Stores",
                                 gst_number="29ZZZZZ9999Z1Z9")

    def test_two_invoice_scenario(self):
        invoices = [
            make_invoice("c1", [{"name": "A", "quantity": 1, "price": 1000, "gst_percent": 12}]),
            make_invoice("c1", [{"name": "B", "quantity": 1, "price": 500, "gst_percent": 12}],
                         number="INV-0002"),
        ]

        summary = self.service.aggregate(invoices, customers(self.customer), PROFILE)

        assert summary.intra.taxable_value == 1500
        assert summary.intra.cgst == 90
        assert summary.intra.sgst == 90
        assert summary.intra.count == 2
        assert summary.totals.total_tax == 180
        assert summary.inter.igst == 0
        assert summary.exempt.count == 0

    def test_exempt_and_taxed_invoice_scenario(self):
        invoices = [
            make_invoice("c1", [{"name": "Rice", "quantity": 1, "price": 500, "gst_percent": 0}]),
            make_invoice("c1", [{"name": "Widget", "quantity": 1, "price": 1000, "gst_percent": 18}],
                         number="INV-0002"),
        ]
        assert invoices[1].cgst_amount == 90
        assert invoices[1].sgst_amount == 90

        summary = self.service.aggregate(invoices, customers(self.customer), PROFILE)

        assert summary.exempt.taxable_value == 500
        assert summary.exempt.count == 1
        assert summary.intra.taxable_value == 1000
        assert summary.totals.taxable_value == 1500
        assert summary.totals.cgst == 90
        assert summary.totals.sgst == 90
        assert summary.totals.igst == 0
        assert summary.totals.total_tax == 180

    def test_exempt_invoices_only_touch_exempt_bucket(self):
        invoices = [make_invoice("c1", [{"name": "Rice", "quantity": 10, "price": 50, "gst_percent": 0}])]

        summary = self.service.aggregate(invoices, customers(self.customer), PROFILE)

        assert summary.exempt.taxable_value == 500
        assert summary.exempt.count == 1
        assert summary.intra.count == 0
        assert summary.intra.taxable_value == 0
        assert summary.totals.total_tax == 0

    def test_totals_identities(self):
        invoices = [
            make_invoice("c1", [{"name": "A", "quantity": 3, "price": 333.33, "gst_percent": 18}]),
            make_invoice("c1", [{"name": "B", "quantity": 1, "price": 99.99, "gst_percent": 5}], number="INV-0002"),
            make_invoice("c1", [{"name": "C", "quantity": 2, "price": 10, "gst_percent": 0}], number="INV-0003"),
        ]

        summary = self.service.aggregate(invoices, customers(self.customer), PROFILE)
        totals = summary.totals

        assert totals.taxable_value == pytest.approx(
            summary.intra.taxable_value + summary.inter.taxable_value + summary.exempt.taxable_value, abs=0.01)
        assert totals.total_tax == pytest.approx(totals.cgst + totals.sgst + totals.igst, abs=0.01)
        assert len(summary.rows) == 3

    def test_rows_carry_customer_details(self):
        invoices = [make_invoice("c1", [{"name": "A", "quantity": 1, "price": 100, "gst_percent": 18,
                                         "hsn_code": "8471"}])]

        row = self.service.aggregate(invoices, customers(self.customer), PROFILE).rows[0]

        assert row.customer_name == "Zed Stores"
        assert row.customer_gstin == "29ZZZZZ9999Z1Z9"
        assert row.date == "2024-04-10"
        assert row.supply_type == "intra"
        assert row.gross_total == 118
        assert row.hsn_summary == "8471"

    def test_unknown_customer(self):
        invoices = [make_invoice("gone", [{"name": "A", "quantity": 1, "price": 100, "gst_percent": 18}])]

        row = self.service.aggregate(invoices, {}, PROFILE).rows[0]

        assert row.customer_name == "Unknown"
        assert row.customer_gstin == "N/A"

    def test_empty_period(self):
        summary = self.service.aggregate([], {}, PROFILE)
        assert summary.totals.total_tax == 0
        assert summary.rows == []


def test_customer_rollup_groups_by_gstin():
    service = TaxService()
    other = Customer(id="c2", account_id=ACCOUNT_ID, party_name="Walk-in")
    first = Customer(id="c1", account_id=ACCOUNT_ID, party_name="Zed Stores", gst_number="29ZZZZZ9999Z1Z9")
    invoices = [
        make_invoice("c1", [{"name": "A", "quantity": 1, "price": 100, "gst_percent": 18}]),
        make_invoice("c2", [{"name": "B", "quantity": 1, "price": 50, "gst_percent": 0}], number="INV-0002"),
        make_invoice("c1", [{"name": "C", "quantity": 1, "price": 200, "gst_percent": 18}], number="INV-0003"),
    ]

    summary = service.aggregate(invoices, customers(first, other), PROFILE)
    rollup = service.customer_rollup(summary.rows)

    assert [entry.gstin for entry in rollup] == ["29ZZZZZ9999Z1Z9", "N/A"]
    assert rollup[0].invoice_count == 2
    assert rollup[0].taxable_value == 300
    assert rollup[0].total_gst == 54
    assert rollup[1].invoice_count == 1
