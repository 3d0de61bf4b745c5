"""
Tests for the fund-ledger command line.

The batch commands open their own session; these tests point
them at the test session instead.
"""

import json
from datetime import date
from decimal import Decimal

import pytest

from fund_ledger import cli
from fund_ledger.models.enums import Frequency
from fund_ledger.schemas.recurring import TemplateCreate, TemplateLineInput
from fund_ledger.services.recurring_service import RecurringService


@pytest.fixture
def cli_session(db_session, monkeypatch):
    monkeypatch.setattr(cli, "SessionLocal", lambda: db_session)
    monkeypatch.setattr(cli, "configure_logging", lambda: None)
    return db_session


def run(argv):
    with pytest.raises(SystemExit) as exc:
        cli.main(argv)
    return exc.value.code


class TestCli:

    def test_no_command_prints_help(self, capsys):
        assert run([]) == 1
        assert "usage: fund-ledger" in capsys.readouterr().out

    def test_bad_date_is_a_usage_error(self):
        assert run(["run-recurring", "--date", "03/01/2024"]) == 2

    def test_run_recurring(self, cli_session, chart, capsys):
        RecurringService(cli_session).create_template(TemplateCreate(
            template_name="Rent",
            description="Monthly office rent",
            frequency=Frequency.MONTHLY,
            start_date=date(2024, 1, 31),
            fund_id=chart.general.id,
            amount=Decimal("1500.00"),
            lines=[
                TemplateLineInput(account_id=chart.utilities.id, debit=Decimal("1500.00")),
                TemplateLineInput(account_id=chart.checking.id, credit=Decimal("1500.00")),
            ],
        ))

        code = run(["run-recurring", "--date", "2024-03-01"])

        output = json.loads(capsys.readouterr().out)
        assert code == 0
        assert output["processed"] == 1
        assert output["message"] == "Processed 1. Skipped 0. 0 failed."

    def test_run_depreciation_with_nothing_to_do(self, cli_session, chart, capsys):
        assert run(["run-depreciation", "--date", "2024-03-31"]) == 0
        assert json.loads(capsys.readouterr().out)["processed"] == 0
