from unittest.mock import AsyncMock, patch

from app.core.errors import ConflictError, StoreError


def create_customer(client, **fields):
    body = {"party_name": "Zed Stores", "gst_number": "29ZZZZZ9999Z1Z9", **fields}
    return client.post("/api/v1/customers/", json=body).json()


def create_invoice(client, customer_id, price=1000, gst_percent=18, invoice_date="2024-04-10"):
    response = client.post("/api/v1/invoices/", json={
        "customer_id": customer_id,
        "invoice_date": invoice_date,
        "items": [{"name": "Widget", "quantity": 1, "price": price, "gst_percent": gst_percent, "hsn_code": "8471"}]
    })
    assert response.status_code == 201
    return response.json()


class TestInvoiceEndpoints:
    """Test invoice and receipt flows over HTTP"""

    def test_invoice_payment_flow(self, client):
        customer = create_customer(client)
        assert client.get("/api/v1/invoices/next-number").json() == {"invoice_number": "INV-0001"}

        invoice = create_invoice(client, customer["id"])
        assert invoice["invoice_number"] == "INV-0001"
        assert invoice["total"] == 1180
        assert invoice["status"] == "Pending"

        response = client.post("/api/v1/receipts/", json={"invoice_id": invoice["id"], "amount_received": 400})
        assert response.status_code == 201
        assert response.json()["receipt_number"] == "REC-0001"

        outstanding = client.get(f"/api/v1/invoices/{invoice['id']}/outstanding").json()
        assert outstanding["balance"] == 780
        assert outstanding["status"] == "Partially Paid"

        response = client.post("/api/v1/receipts/", json={"invoice_id": invoice["id"], "amount_received": 780})
        assert response.status_code == 201
        assert client.get(f"/api/v1/invoices/{invoice['id']}").json()["status"] == "Paid"

    def test_overpayment_is_400(self, client):
        invoice = create_invoice(client, create_customer(client)["id"])

        response = client.post("/api/v1/receipts/", json={"invoice_id": invoice["id"], "amount_received": 5000})

        assert response.status_code == 400
        assert response.json()["detail"] == "Amount cannot exceed pending balance of 1180.00"

    def test_invoice_status_not_client_editable(self, client):
        invoice = create_invoice(client, create_customer(client)["id"])

        response = client.patch(f"/api/v1/invoices/{invoice['id']}", json={"status": "Paid"})

        assert response.status_code == 200
        assert response.json()["status"] == "Pending"

    def test_delete_invoice_with_receipts_is_400(self, client):
        invoice = create_invoice(client, create_customer(client)["id"])
        client.post("/api/v1/receipts/", json={"invoice_id": invoice["id"], "amount_received": 100})

        response = client.delete(f"/api/v1/invoices/{invoice['id']}")

        assert response.status_code == 400

    def test_missing_receipt_is_404(self, client):
        response = client.get("/api/v1/receipts/missing")

        assert response.status_code == 404
        assert response.json() == {"detail": "Receipt not found"}


class TestErrorMapping:
    """Test billing errors map onto HTTP status codes"""

    def test_conflict_is_409(self, client):
        customer = create_customer(client)
        with patch("app.services.sequence_service.SequenceService.allocate", new_callable=AsyncMock) as mock_allocate:
            mock_allocate.side_effect = ConflictError("Transaction aborted after 5 attempts")

            response = client.post("/api/v1/invoices/", json={
                "customer_id": customer["id"],
                "items": [{"name": "Widget", "quantity": 1, "price": 100}]
            })

        assert response.status_code == 409
        assert response.json()["detail"] == "Transaction aborted after 5 attempts"

    def test_store_error_is_503(self, client):
        with patch("app.services.customer_service.CustomerService.list_all", new_callable=AsyncMock) as mock_list:
            mock_list.side_effect = StoreError("connection refused")

            response = client.get("/api/v1/customers/")

        assert response.status_code == 503


class TestReportEndpoints:
    """Test GST report endpoints"""

    def test_gstr3b_json(self, client):
        client.put("/api/v1/settings/business/", json={"business_name": "Acme Traders", "gst_number": "29AAAAA0000A1Z5"})
        customer = create_customer(client)
        create_invoice(client, customer["id"], price=1000, gst_percent=12)
        create_invoice(client, customer["id"], price=500, gst_percent=12)

        response = client.get("/api/v1/reports/gstr3b", params={"month": 1, "fy": 2024})

        assert response.status_code == 200
        report = response.json()
        assert report["summary"]["intra"]["taxable_value"] == 1500
        assert report["summary"]["totals"]["total_tax"] == 180
        assert report["badge"]["status"] == "ready"
        assert report["period_label"] == "April 2024–2025"

    def test_invalid_month_is_400(self, client):
        response = client.get("/api/v1/reports/gstr3b", params={"month": 13, "fy": 2024})

        assert response.status_code == 400

    def test_gstr3b_export(self, client):
        client.put("/api/v1/settings/business/", json={"business_name": "Acme Traders"})

        response = client.get("/api/v1/reports/gstr3b/export", params={"month": 1, "fy": 2024})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith(
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )
        assert 'filename="Acme_Traders_GSTR3B_April_2024.xlsx"' in response.headers["content-disposition"]
        assert response.content[:2] == b"PK"

    def test_gstr2a_export(self, client):
        response = client.get("/api/v1/reports/gstr2a/export", params={"month": 1, "fy": 2024})

        assert response.status_code == 200
        assert "Business_GSTR2A_ITC_April_2024.xlsx" in response.headers["content-disposition"]


def test_business_profile_round_trip(client):
    assert client.get("/api/v1/settings/business/").json()["business_name"] == ""

    response = client.put("/api/v1/settings/business/", json={
        "business_name": "Acme Traders", "gst_number": "29aaaaa0000a1z5", "upi_id": "acme@upi"
    })

    assert response.status_code == 200
    profile = client.get("/api/v1/settings/business/").json()
    assert profile["gst_number"] == "29AAAAA0000A1Z5"
    assert profile["state_name"] == "Karnataka"


def test_dashboard(client):
    invoice = create_invoice(client, create_customer(client)["id"], invoice_date=None)
    client.post("/api/v1/receipts/", json={"invoice_id": invoice["id"], "amount_received": 1180})

    summary = client.get("/api/v1/dashboard/").json()

    assert summary["total_sales"] == 1180
    assert summary["total_income"] == 1180
    assert summary["net_profit"] == 1000
    assert summary["recent_invoices"][0]["customer_name"] == "Zed Stores"


def test_blank_business_name_is_400(client):
    response = client.put("/api/v1/settings/business/", json={"business_name": "   "})

    assert response.status_code == 400
    assert response.json() == {"detail": "Business name is required"}
