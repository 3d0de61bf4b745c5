"""
Tests for the fixed asset endpoints.
"""

from decimal import Decimal


def create_asset(client, chart, **overrides):
    payload = {
        "asset_name": "Church Van",
        "asset_tag": "VAN-01",
        "purchase_date": "2024-01-05",
        "purchase_price": "12000.00",
        "estimated_life_years": 10,
        "fund_id": chart.general.id,
        "asset_account_id": chart.equipment.id,
        "accumulated_depreciation_account_id": chart.accumulated.id,
        "depreciation_expense_account_id": chart.depreciation.id,
        "depreciation_start_date": "2024-01-01",
    }
    payload.update(overrides)
    return client.post("/assets", json=payload)


class TestAssetEndpoints:

    def test_create_asset_returns_201(self, client, chart):
        response = create_asset(client, chart)

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "active"
        assert Decimal(data["book_value"]) == Decimal("12000.00")

    def test_invalid_salvage_returns_400(self, client, chart):
        response = create_asset(client, chart, salvage_value="12000.00")
        assert response.status_code == 400

    def test_preview_does_not_post(self, client, chart):
        asset = create_asset(client, chart).json()

        preview = client.get(
            f"/assets/{asset['id']}/depreciation/preview", params={"months": 3}
        ).json()

        assert Decimal(preview["depreciation"]) == Decimal("300.00")
        assert client.get("/transactions").json()["total_count"] == 0

    def test_record_depreciation(self, client, chart):
        asset = create_asset(client, chart).json()

        response = client.post(f"/assets/{asset['id']}/depreciation", json={
            "depreciation_date": "2024-01-31", "months": 1,
        })
        detail = client.get(f"/assets/{asset['id']}").json()

        assert response.status_code == 201
        assert Decimal(response.json()["depreciation_amount"]) == Decimal("100.00")
        assert len(detail["schedule"]) == 1
        assert Decimal(detail["book_value"]) == Decimal("11900.00")

    def test_batch_run_reports_counts(self, client, chart):
        create_asset(client, chart)
        create_asset(client, chart, asset_name="Sound Board", asset_tag="SND-01",
                     depreciation_start_date="2030-01-01")

        data = client.post(
            "/assets/depreciation/run", params={"process_date": "2024-02-29"}
        ).json()

        assert data["processed"] == 1
        assert data["skipped"] == 1
        assert data["message"] == "Processed 1. Skipped 1. 0 failed."

    def test_sale_needs_cash_account(self, client, chart):
        asset = create_asset(client, chart).json()

        response = client.post(f"/assets/{asset['id']}/disposal", json={
            "disposal_date": "2024-06-30", "disposal_price": "9000.00",
        })

        assert response.status_code == 400
        assert response.json()["detail"] == "Cash account is required when the asset is sold"

    def test_dispose_and_summary(self, client, chart):
        asset = create_asset(client, chart).json()

        response = client.post(f"/assets/{asset['id']}/disposal", json={
            "disposal_date": "2024-06-30",
            "disposal_price": "12500.00",
            "cash_account_id": chart.checking.id,
        })
        summary = client.get("/assets/summary").json()

        assert response.status_code == 200
        assert Decimal(response.json()["gain_loss"]) == Decimal("500.00")
        assert summary["disposed_assets"] == 1
        assert client.get("/assets").json() == []

    def test_maintenance_log(self, client, chart):
        asset = create_asset(client, chart).json()

        response = client.post(f"/assets/{asset['id']}/maintenance", json={
            "maintenance_date": "2024-04-02",
            "maintenance_type": "Repair",
            "description": "Replaced brakes",
            "cost": "420.00",
        })

        assert response.status_code == 201
        assert response.json()["asset_id"] == asset["id"]

    def test_missing_asset_returns_404(self, client):
        assert client.get("/assets/999").status_code == 404
