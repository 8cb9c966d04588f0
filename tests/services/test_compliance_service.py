from app.models.business import BusinessProfile
from app.models.customer import Customer
from app.services.compliance_service import ComplianceService
from factories import ACCOUNT_ID, make_invoice

PROFILE = BusinessProfile(business_name="Acme Traders", gst_number="29AAAAA0000A1Z5")
GST_CUSTOMER = Customer(id="c1", account_id=ACCOUNT_ID, party_name="Zed Stores", gst_number="29ZZZZZ9999Z1Z9")
B2C_CUSTOMER = Customer(id="c2", account_id=ACCOUNT_ID, party_name="Walk-in")


def by_id(*entries):
    return {c.id: c for c in entries}


class TestComplianceCheck:
    """Test compliance rules"""

    def setup_method(self):
        self.service = ComplianceService()

    def test_clean_data_is_ok_only(self):
        invoices = [make_invoice("c1", [{"name": "A", "quantity": 1, "price": 100, "hsn_code": "8471"}])]

        warnings = self.service.check(invoices, by_id(GST_CUSTOMER), PROFILE)

        assert len(warnings) == 1
        assert warnings[0].type == "ok"
        assert "All 1 invoice(s)" in warnings[0].msg

    def test_missing_business_gstin_is_error(self):
        invoices = [make_invoice("c1", [{"name": "A", "quantity": 1, "price": 100, "hsn_code": "8471"}])]

        warnings = self.service.check(invoices, by_id(GST_CUSTOMER), BusinessProfile(business_name="Acme"))

        assert [w.type for w in warnings] == ["error"]

    def test_counts_missing_customer_gstin_and_hsn(self):
        invoices = [
            make_invoice("c2", [{"name": "A", "quantity": 1, "price": 100}]),
            make_invoice("c2", [{"name": "B", "quantity": 1, "price": 100, "hsn_code": "8471"}], number="INV-0002"),
            make_invoice("missing", [{"name": "C", "quantity": 1, "price": 100}], number="INV-0003"),
        ]

        warnings = self.service.check(invoices, by_id(B2C_CUSTOMER), PROFILE)

        assert [w.type for w in warnings] == ["warn", "warn"]
        assert warnings[0].msg.startswith("3 invoice(s) linked to customers without a GSTIN")
        assert warnings[1].msg.startswith("2 invoice(s) have items without HSN/SAC codes")

    def test_blank_hsn_counts_as_missing(self):
        invoices = [make_invoice("c1", [{"name": "A", "quantity": 1, "price": 100, "hsn_code": "  "}])]

        warnings = self.service.check(invoices, by_id(GST_CUSTOMER), PROFILE)

        assert [w.type for w in warnings] == ["warn"]

    def test_empty_period(self):
        warnings = self.service.check([], {}, PROFILE)

        assert [w.type for w in warnings] == ["warn"]
        assert "No invoices found" in warnings[0].msg

    def test_all_rules_fire_together(self):
        invoices = [make_invoice("c2", [{"name": "A", "quantity": 1, "price": 100}])]

        warnings = self.service.check(invoices, by_id(B2C_CUSTOMER), BusinessProfile())

        assert [w.type for w in warnings] == ["error", "warn", "warn"]


class TestBadge:
    """Test badge derivation"""

    def setup_method(self):
        self.service = ComplianceService()

    def test_ready(self):
        invoices = [make_invoice("c1", [{"name": "A", "quantity": 1, "price": 100, "hsn_code": "8471"}])]
        warnings = self.service.check(invoices, by_id(GST_CUSTOMER), PROFILE)

        badge = self.service.badge(warnings, PROFILE)

        assert badge.status == "ready"

    def test_review(self):
        warnings = self.service.check([], {}, PROFILE)

        assert self.service.badge(warnings, PROFILE).status == "review"

    def test_missing_without_business_gstin(self):
        warnings = self.service.check([], {}, BusinessProfile())

        badge = self.service.badge(warnings, BusinessProfile())

        assert badge.status == "missing"
        assert badge.label == "Business GSTIN not configured"
