"""
Tests for the bank reconciliation endpoints.
"""

from decimal import Decimal


def deposit(client, chart, amount, on="2024-05-05"):
    """Helper: post a deposit to checking and return the checking line id."""
    response = client.post("/transactions", json={
        "entry_date": on,
        "description": "Deposit",
        "lines": [
            {"account_id": chart.checking.id, "fund_id": chart.general.id, "debit": amount},
            {"account_id": chart.tithes.id, "fund_id": chart.general.id, "credit": amount},
        ],
    })
    assert response.status_code == 201
    return response.json()["lines"][0]["id"]


def start(client, chart, balance="1000.00"):
    return client.post("/reconciliations", json={
        "account_id": chart.checking.id,
        "statement_date": "2024-05-31",
        "statement_balance": balance,
    })


class TestReconciliationEndpoints:

    def test_start_returns_201_and_blocks_a_second(self, client, chart):
        first = start(client, chart)
        second = start(client, chart)

        assert first.status_code == 201
        assert first.json()["status"] == "in_progress"
        assert second.status_code == 400

    def test_current_reconciliation(self, client, chart):
        recon = start(client, chart).json()

        current = client.get(f"/reconciliation/accounts/{chart.checking.id}/current")

        assert current.json()["id"] == recon["id"]

    def test_uncleared_and_selection_balance(self, client, chart):
        first = deposit(client, chart, "600.00")
        second = deposit(client, chart, "399.50")

        uncleared = client.get(f"/reconciliation/accounts/{chart.checking.id}/uncleared")
        selection = client.post(
            f"/reconciliation/accounts/{chart.checking.id}/selection-balance",
            json={"ledger_line_ids": [first, second]},
        )

        assert {line["ledger_line_id"] for line in uncleared.json()} == {first, second}
        assert Decimal(selection.json()["balance"]) == Decimal("999.50")

    def test_finalize_mismatch_then_match(self, client, chart):
        lines = [deposit(client, chart, "600.00"), deposit(client, chart, "399.50")]
        recon = start(client, chart).json()
        url = f"/reconciliations/{recon['id']}/finalize"

        rejected = client.post(url, json={"ledger_line_ids": lines})
        lines.append(deposit(client, chart, "0.50"))
        accepted = client.post(url, json={"ledger_line_ids": lines})

        assert rejected.status_code == 400
        assert rejected.json()["detail"].startswith("Balances do not match.")
        assert accepted.status_code == 200
        assert accepted.json()["status"] == "completed"
        history = client.get(f"/reconciliation/accounts/{chart.checking.id}/history").json()
        assert [h["id"] for h in history] == [recon["id"]]

    def test_mark_cleared_by_hand(self, client, chart):
        line_id = deposit(client, chart, "25.00")

        response = client.patch(f"/ledger-lines/{line_id}/cleared", json={"is_cleared": True})
        balance = client.get(f"/reconciliation/accounts/{chart.checking.id}/cleared-balance")

        assert response.json()["is_cleared"] is True
        assert Decimal(balance.json()["balance"]) == Decimal("25.00")

    def test_delete_in_progress_returns_204(self, client, chart):
        recon = start(client, chart).json()

        response = client.delete(f"/reconciliations/{recon['id']}")

        assert response.status_code == 204
        assert client.get(f"/reconciliation/accounts/{chart.checking.id}/current").json() is None
