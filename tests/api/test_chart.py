"""
Tests for the chart of accounts, fund, and donor endpoints.

These test the HTTP layer: status codes, response format, and
error mapping. The rules themselves are tested in
test_chart_service.py.
"""


class TestAccountEndpoints:

    def test_create_account_returns_201(self, client):
        response = client.post("/accounts", json={
            "account_number": 1000,
            "name": "Checking",
            "account_type": "Asset",
        })

        assert response.status_code == 201
        data = response.json()
        assert data["account_number"] == 1000
        assert data["account_type"] == "Asset"
        assert data["is_active"] is True

    def test_duplicate_number_returns_400(self, client, chart):
        response = client.post("/accounts", json={
            "account_number": 1000,
            "name": "Checking Again",
            "account_type": "Asset",
        })

        assert response.status_code == 400
        assert response.json()["detail"] == "Account number 1000 already exists"

    def test_unknown_account_type_returns_422(self, client):
        response = client.post("/accounts", json={
            "account_number": 9000,
            "name": "Mystery",
            "account_type": "Revenue",
        })
        assert response.status_code == 422

    def test_missing_account_returns_404(self, client):
        response = client.get("/accounts/999")

        assert response.status_code == 404
        assert response.json()["detail"] == "Account not found"

    def test_deactivate_and_list(self, client, chart):
        response = client.post(f"/accounts/{chart.fees.id}/deactivate")
        assert response.json()["is_active"] is False

        numbers = [a["account_number"] for a in client.get("/accounts").json()]
        assert 5200 not in numbers

    def test_delete_unused_account_returns_204(self, client, chart):
        response = client.delete(f"/accounts/{chart.fees.id}")
        assert response.status_code == 204

    def test_set_default_liability(self, client, chart):
        response = client.put(
            f"/accounts/{chart.utilities.id}/default-liability",
            json={"liability_account_id": chart.payable.id},
        )

        assert response.status_code == 200
        assert response.json()["default_liability_account_id"] == chart.payable.id


class TestFundEndpoints:

    def test_create_fund(self, client, chart):
        response = client.post("/funds", json={
            "name": "Youth Fund",
            "net_asset_account_id": chart.unrestricted.id,
        })

        assert response.status_code == 201
        assert response.json()["net_asset_account_id"] == chart.unrestricted.id

    def test_map_to_non_equity_returns_400(self, client, chart):
        response = client.put(
            f"/funds/{chart.missions.id}/net-asset-account",
            json={"net_asset_account_id": chart.checking.id},
        )
        assert response.status_code == 400

    def test_list_funds(self, client, chart):
        names = [f["name"] for f in client.get("/funds").json()]
        assert names == ["General Fund", "Missions Fund", "Building Fund"]


class TestDonorEndpoints:

    def test_create_and_update_donor(self, client):
        created = client.post("/donors", json={"name": "Grace Hopper"}).json()

        response = client.patch(f"/donors/{created['id']}", json={"envelope_number": 42})

        assert response.status_code == 200
        assert response.json()["envelope_number"] == 42

    def test_duplicate_envelope_returns_400(self, client, chart):
        response = client.post("/donors", json={"name": "Grace Hopper", "envelope_number": 17})
        assert response.status_code == 400
