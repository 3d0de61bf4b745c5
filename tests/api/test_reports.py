"""
Tests for the report and budget endpoints.
"""

from decimal import Decimal


def give(client, chart, amount, on="2024-03-03"):
    response = client.post("/giving", json={
        "entry_date": on,
        "fund_id": chart.general.id,
        "income_account_id": chart.tithes.id,
        "checking_account_id": chart.checking.id,
        "amount": amount,
        "donor_id": chart.donor.id,
    })
    assert response.status_code == 201


class TestReportEndpoints:

    def test_balance_sheet(self, client, chart):
        give(client, chart, "100.00")

        data = client.get("/reports/balance-sheet").json()

        assert data["is_balanced"] is True
        assert Decimal(data["total_assets"]) == Decimal("100.00")

    def test_income_statement(self, client, chart):
        give(client, chart, "100.00")

        data = client.get("/reports/income-statement", params={"year": 2024, "month": 3}).json()

        assert data["label"] == "March 2024"
        assert Decimal(data["total_income"]) == Decimal("100.00")

    def test_income_statement_month_out_of_range_returns_422(self, client):
        response = client.get("/reports/income-statement", params={"year": 2024, "month": 0})
        assert response.status_code == 422

    def test_reversed_range_returns_400(self, client):
        response = client.get("/reports/income-statement/range", params={
            "start": "2024-03-31", "end": "2024-03-01",
        })
        assert response.status_code == 400

    def test_quarterly(self, client, chart):
        give(client, chart, "100.00", on="2024-05-05")

        data = client.get("/reports/income-statement/quarterly", params={"year": 2024}).json()

        assert [q["label"] for q in data["quarters"]] == ["Q2 (Apr-Jun)"]

    def test_fund_summary(self, client, chart):
        give(client, chart, "100.00")

        data = client.get("/reports/fund-summary", params={
            "start": "2024-03-01", "end": "2024-03-31",
        }).json()

        assert Decimal(data["total_ending_balance"]) == Decimal("100.00")

    def test_dashboard_series(self, client):
        assert len(client.get("/reports/income-expense/monthly", params={"months": 4}).json()) == 4
        assert client.get("/reports/income-expense/ytd").status_code == 200
        assert client.get("/reports/fund-activity/ytd").json() == []

    def test_donor_statement(self, client, chart):
        give(client, chart, "100.00")

        data = client.get(
            f"/reports/donors/{chart.donor.id}/statement", params={"year": 2024}
        ).json()

        assert Decimal(data["total_cash"]) == Decimal("100.00")
        assert len(data["gifts"]) == 1

    def test_unknown_donor_returns_404(self, client):
        response = client.get("/reports/donors/999/statement", params={"year": 2024})
        assert response.status_code == 404


class TestBudgetEndpoints:

    def test_save_list_and_variance(self, client, chart):
        give(client, chart, "300.00")

        saved = client.put("/budgets", json=[
            {"account_id": chart.tithes.id, "fiscal_year": 2024, "budgeted_amount": "1200.00"},
        ])
        listed = client.get("/budgets", params={"fiscal_year": 2024}).json()
        variance = client.get("/budgets/variance", params={"fiscal_year": 2024}).json()
        historical = client.get("/budgets/historical", params={"fiscal_year": 2024}).json()

        assert saved.status_code == 200
        assert len(listed) == 1
        assert Decimal(variance["income_variance"][0]["variance_percentage"]) == Decimal("25.00")
        assert historical[0]["account_id"] == chart.tithes.id

    def test_budget_on_asset_account_returns_400(self, client, chart):
        response = client.put("/budgets", json=[
            {"account_id": chart.checking.id, "fiscal_year": 2024, "budgeted_amount": "10.00"},
        ])
        assert response.status_code == 400
