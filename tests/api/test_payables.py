"""
Tests for the vendor and bill endpoints.
"""

from decimal import Decimal


def create_bill(client, chart, amount="500.00"):
    response = client.post("/bills", json={
        "vendor_id": chart.vendor.id,
        "fund_id": chart.general.id,
        "expense_account_id": chart.utilities.id,
        "liability_account_id": chart.payable.id,
        "bill_number": "INV-1001",
        "description": "March electric",
        "invoice_date": "2024-03-01",
        "due_date": "2024-03-31",
        "amount": amount,
    })
    assert response.status_code == 201
    return response.json()


def pay(client, chart, bill_id, amount):
    return client.post(f"/bills/{bill_id}/payments", json={
        "amount": amount,
        "bank_account_id": chart.checking.id,
        "payment_date": "2024-03-15",
    })


class TestVendorEndpoints:

    def test_create_vendor(self, client):
        response = client.post("/vendors", json={"name": "Acme Plumbing"})

        assert response.status_code == 201
        assert response.json()["is_active"] is True

    def test_list_vendors(self, client, chart):
        names = [v["name"] for v in client.get("/vendors").json()]
        assert names == ["City Power & Light"]


class TestBillEndpoints:

    def test_create_bill(self, client, chart):
        bill = create_bill(client, chart)

        assert bill["status"] == "unpaid"
        assert Decimal(bill["remaining_balance"]) == Decimal("500.00")

    def test_missing_vendor_returns_400(self, client, chart):
        response = client.post("/bills", json={
            "fund_id": chart.general.id,
            "expense_account_id": chart.utilities.id,
            "liability_account_id": chart.payable.id,
            "invoice_date": "2024-03-01",
            "due_date": "2024-03-31",
            "amount": "10.00",
        })
        assert response.status_code == 400

    def test_partial_then_full_payment(self, client, chart):
        bill = create_bill(client, chart)

        first = pay(client, chart, bill["id"], "300.00")
        second = pay(client, chart, bill["id"], "200.00")
        third = pay(client, chart, bill["id"], "0.01")

        assert first.status_code == 201
        assert first.json()["new_status"] == "partial"
        assert Decimal(first.json()["remaining_balance"]) == Decimal("200.00")
        assert second.json()["new_status"] == "paid"
        assert third.status_code == 400
        assert third.json()["detail"] == "This bill has already been paid in full"

    def test_bill_detail_lists_payments(self, client, chart):
        bill = create_bill(client, chart)
        pay(client, chart, bill["id"], "125.00")

        detail = client.get(f"/bills/{bill['id']}").json()

        assert len(detail["payments"]) == 1
        assert Decimal(detail["amount_paid"]) == Decimal("125.00")

    def test_filter_and_outstanding_total(self, client, chart):
        paid = create_bill(client, chart, amount="100.00")
        create_bill(client, chart, amount="40.00")
        pay(client, chart, paid["id"], "100.00")

        unpaid = client.get("/bills", params={"status": "unpaid"}).json()
        owed = client.get("/bills/outstanding-total").json()

        assert [Decimal(b["amount"]) for b in unpaid] == [Decimal("40.00")]
        assert Decimal(str(owed["total_amount_owed"])) == Decimal("40.00")

    def test_cancel_paid_bill_returns_400(self, client, chart):
        bill = create_bill(client, chart, amount="100.00")
        pay(client, chart, bill["id"], "50.00")

        response = client.post(f"/bills/{bill['id']}/cancel", json={"reason": "Duplicate"})

        assert response.status_code == 400

    def test_missing_bill_returns_404(self, client):
        assert client.get("/bills/999").status_code == 404
