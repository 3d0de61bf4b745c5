"""initial schema

Revision ID: 4f1c2a9e7b10
Revises:
Create Date: 2024-06-01 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '4f1c2a9e7b10'
down_revision = None
branch_labels = None
depends_on = None


def money(name, nullable=False, server_default='0'):
    """A Numeric(19, 2) amount column."""
    return sa.Column(name, sa.Numeric(19, 2), nullable=nullable, server_default=server_default)


def upgrade():
    op.create_table(
        'chart_of_accounts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('account_number', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('account_type', sa.Enum('Asset', 'Liability', 'Equity', 'Income', 'Expense',
                                          name='account_type_enum'), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('default_liability_account_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['default_liability_account_id'], ['chart_of_accounts.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('account_number')
    )

    op.create_table(
        'donors',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('envelope_number', sa.Integer(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('envelope_number')
    )

    op.create_table(
        'vendors',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('contact_name', sa.String(length=200), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table(
        'audit_log',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('event_type', sa.String(length=100), nullable=False),
        sa.Column('details', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_audit_log_event_type', 'audit_log', ['event_type'])

    op.create_table(
        'funds',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_restricted', sa.Boolean(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('net_asset_account_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['net_asset_account_id'], ['chart_of_accounts.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name')
    )

    op.create_table(
        'budgets',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('account_id', sa.Integer(), nullable=False),
        sa.Column('fiscal_year', sa.Integer(), nullable=False),
        money('budgeted_amount'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['account_id'], ['chart_of_accounts.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('account_id', 'fiscal_year', name='uq_budgets_account_year')
    )
    op.create_index('ix_budgets_account_id', 'budgets', ['account_id'])

    op.create_table(
        'journal_entries',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('entry_date', sa.Date(), nullable=False),
        sa.Column('description', sa.String(length=500), nullable=False),
        sa.Column('reference_number', sa.String(length=100), nullable=True),
        sa.Column('donor_id', sa.Integer(), nullable=True),
        sa.Column('is_in_kind', sa.Boolean(), nullable=False),
        sa.Column('is_voided', sa.Boolean(), nullable=False),
        sa.Column('voided_at', sa.DateTime(), nullable=True),
        sa.Column('voided_reason', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['donor_id'], ['donors.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_journal_entries_entry_date', 'journal_entries', ['entry_date'])
    op.create_index('ix_journal_entries_donor_id', 'journal_entries', ['donor_id'])

    op.create_table(
        'reconciliations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('account_id', sa.Integer(), nullable=False),
        sa.Column('statement_date', sa.Date(), nullable=False),
        money('statement_balance', server_default=None),
        money('reconciled_balance', nullable=True, server_default=None),
        sa.Column('status', sa.Enum('in_progress', 'completed',
                                    name='reconciliation_status_enum'), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['account_id'], ['chart_of_accounts.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_reconciliations_account_id', 'reconciliations', ['account_id'])
    # At most one in-progress reconciliation per account
    op.create_index(
        'uq_reconciliations_one_in_progress', 'reconciliations', ['account_id'],
        unique=True,
        postgresql_where=sa.text("status = 'in_progress'"),
        sqlite_where=sa.text("status = 'in_progress'"),
    )

    op.create_table(
        'ledger_lines',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('journal_entry_id', sa.Integer(), nullable=False),
        sa.Column('account_id', sa.Integer(), nullable=False),
        sa.Column('fund_id', sa.Integer(), nullable=False),
        money('debit'),
        money('credit'),
        sa.Column('memo', sa.String(length=500), nullable=True),
        sa.Column('is_cleared', sa.Boolean(), nullable=False),
        sa.Column('cleared_at', sa.DateTime(), nullable=True),
        sa.Column('reconciliation_id', sa.Integer(), nullable=True),
        sa.CheckConstraint('debit >= 0', name='ck_ledger_lines_debit_nonneg'),
        sa.CheckConstraint('credit >= 0', name='ck_ledger_lines_credit_nonneg'),
        sa.ForeignKeyConstraint(['journal_entry_id'], ['journal_entries.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['account_id'], ['chart_of_accounts.id']),
        sa.ForeignKeyConstraint(['fund_id'], ['funds.id']),
        sa.ForeignKeyConstraint(['reconciliation_id'], ['reconciliations.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_ledger_lines_journal_entry_id', 'ledger_lines', ['journal_entry_id'])
    op.create_index('ix_ledger_lines_account_id', 'ledger_lines', ['account_id'])
    op.create_index('ix_ledger_lines_fund_id', 'ledger_lines', ['fund_id'])
    op.create_index('ix_ledger_lines_reconciliation_id', 'ledger_lines', ['reconciliation_id'])

    op.create_table(
        'bills',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('vendor_id', sa.Integer(), nullable=False),
        sa.Column('fund_id', sa.Integer(), nullable=False),
        sa.Column('expense_account_id', sa.Integer(), nullable=False),
        sa.Column('liability_account_id', sa.Integer(), nullable=False),
        sa.Column('journal_entry_id', sa.Integer(), nullable=False),
        sa.Column('bill_number', sa.String(length=100), nullable=True),
        sa.Column('description', sa.String(length=500), nullable=False),
        money('amount', server_default=None),
        money('amount_paid'),
        sa.Column('status', sa.Enum('unpaid', 'partial', 'paid', 'cancelled',
                                    name='bill_status_enum'), nullable=False),
        sa.Column('invoice_date', sa.Date(), nullable=False),
        sa.Column('due_date', sa.Date(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['vendor_id'], ['vendors.id']),
        sa.ForeignKeyConstraint(['fund_id'], ['funds.id']),
        sa.ForeignKeyConstraint(['expense_account_id'], ['chart_of_accounts.id']),
        sa.ForeignKeyConstraint(['liability_account_id'], ['chart_of_accounts.id']),
        sa.ForeignKeyConstraint(['journal_entry_id'], ['journal_entries.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_bills_vendor_id', 'bills', ['vendor_id'])

    op.create_table(
        'bill_payments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('bill_id', sa.Integer(), nullable=False),
        sa.Column('journal_entry_id', sa.Integer(), nullable=False),
        money('amount', server_default=None),
        sa.Column('payment_date', sa.Date(), nullable=False),
        sa.Column('payment_method', sa.String(length=50), nullable=True),
        sa.Column('reference_number', sa.String(length=100), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['bill_id'], ['bills.id']),
        sa.ForeignKeyConstraint(['journal_entry_id'], ['journal_entries.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_bill_payments_bill_id', 'bill_payments', ['bill_id'])

    op.create_table(
        'fixed_assets',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('asset_name', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('asset_tag', sa.String(length=100), nullable=True),
        sa.Column('serial_number', sa.String(length=100), nullable=True),
        sa.Column('category', sa.String(length=100), nullable=True),
        sa.Column('location', sa.String(length=200), nullable=True),
        sa.Column('assigned_to', sa.String(length=200), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('purchase_date', sa.Date(), nullable=False),
        money('purchase_price', server_default=None),
        money('salvage_value'),
        sa.Column('estimated_life_years', sa.Integer(), nullable=False),
        sa.Column('depreciation_method', sa.Enum('straight_line',
                                                 name='depreciation_method_enum'), nullable=False),
        money('accumulated_depreciation_amount'),
        sa.Column('status', sa.Enum('active', 'fully_depreciated', 'disposed',
                                    name='asset_status_enum'), nullable=False),
        sa.Column('asset_account_id', sa.Integer(), nullable=False),
        sa.Column('accumulated_depreciation_account_id', sa.Integer(), nullable=False),
        sa.Column('depreciation_expense_account_id', sa.Integer(), nullable=False),
        sa.Column('fund_id', sa.Integer(), nullable=False),
        sa.Column('depreciation_start_date', sa.Date(), nullable=False),
        sa.Column('last_depreciation_date', sa.Date(), nullable=True),
        sa.Column('disposal_date', sa.Date(), nullable=True),
        money('disposal_price', nullable=True, server_default=None),
        sa.Column('disposal_journal_entry_id', sa.Integer(), nullable=True),
        sa.Column('disposal_notes', sa.Text(), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['asset_account_id'], ['chart_of_accounts.id']),
        sa.ForeignKeyConstraint(['accumulated_depreciation_account_id'], ['chart_of_accounts.id']),
        sa.ForeignKeyConstraint(['depreciation_expense_account_id'], ['chart_of_accounts.id']),
        sa.ForeignKeyConstraint(['fund_id'], ['funds.id']),
        sa.ForeignKeyConstraint(['disposal_journal_entry_id'], ['journal_entries.id']),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table(
        'depreciation_schedule',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('asset_id', sa.Integer(), nullable=False),
        sa.Column('period_start_date', sa.Date(), nullable=False),
        sa.Column('period_end_date', sa.Date(), nullable=False),
        sa.Column('fiscal_year', sa.Integer(), nullable=False),
        sa.Column('period_number', sa.Integer(), nullable=False),
        money('beginning_book_value', server_default=None),
        money('depreciation_amount', server_default=None),
        money('accumulated_depreciation', server_default=None),
        money('ending_book_value', server_default=None),
        sa.Column('journal_entry_id', sa.Integer(), nullable=False),
        sa.Column('recorded_date', sa.Date(), nullable=False),
        sa.ForeignKeyConstraint(['asset_id'], ['fixed_assets.id']),
        sa.ForeignKeyConstraint(['journal_entry_id'], ['journal_entries.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_depreciation_schedule_asset_id', 'depreciation_schedule', ['asset_id'])

    op.create_table(
        'asset_maintenance_log',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('asset_id', sa.Integer(), nullable=False),
        sa.Column('maintenance_date', sa.Date(), nullable=False),
        sa.Column('maintenance_type', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        money('cost'),
        sa.Column('performed_by', sa.String(length=200), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['asset_id'], ['fixed_assets.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_asset_maintenance_log_asset_id', 'asset_maintenance_log', ['asset_id'])

    op.create_table(
        'recurring_templates',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('template_name', sa.String(length=200), nullable=False),
        sa.Column('description', sa.String(length=500), nullable=False),
        sa.Column('frequency', sa.Enum('weekly', 'biweekly', 'monthly', 'quarterly',
                                       'semiannually', 'yearly',
                                       name='recurring_frequency_enum'), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('last_run_date', sa.Date(), nullable=True),
        sa.Column('next_run_date', sa.Date(), nullable=False),
        sa.Column('fund_id', sa.Integer(), nullable=False),
        money('amount', server_default=None),
        sa.Column('reference_number_prefix', sa.String(length=50), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['fund_id'], ['funds.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_recurring_templates_next_run_date', 'recurring_templates',
                    ['next_run_date'])

    op.create_table(
        'recurring_template_lines',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('template_id', sa.Integer(), nullable=False),
        sa.Column('account_id', sa.Integer(), nullable=False),
        money('debit'),
        money('credit'),
        sa.Column('memo', sa.String(length=500), nullable=True),
        sa.Column('line_order', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['template_id'], ['recurring_templates.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['account_id'], ['chart_of_accounts.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_recurring_template_lines_template_id', 'recurring_template_lines',
                    ['template_id'])

    op.create_table(
        'recurring_history',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('template_id', sa.Integer(), nullable=False),
        sa.Column('journal_entry_id', sa.Integer(), nullable=True),
        sa.Column('executed_date', sa.Date(), nullable=False),
        money('amount', server_default=None),
        sa.Column('status', sa.Enum('success', 'failed',
                                    name='recurring_run_status_enum'), nullable=False),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['template_id'], ['recurring_templates.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['journal_entry_id'], ['journal_entries.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_recurring_history_template_id', 'recurring_history', ['template_id'])


def downgrade():
    op.drop_table('recurring_history')
    op.drop_table('recurring_template_lines')
    op.drop_table('recurring_templates')
    op.drop_table('asset_maintenance_log')
    op.drop_table('depreciation_schedule')
    op.drop_table('fixed_assets')
    op.drop_table('bill_payments')
    op.drop_table('bills')
    op.drop_table('ledger_lines')
    op.drop_table('reconciliations')
    op.drop_table('journal_entries')
    op.drop_table('budgets')
    op.drop_table('funds')
    op.drop_table('audit_log')
    op.drop_table('vendors')
    op.drop_table('donors')
    op.drop_table('chart_of_accounts')
    for enum_name in (
        'recurring_run_status_enum', 'recurring_frequency_enum', 'asset_status_enum',
        'depreciation_method_enum', 'bill_status_enum', 'reconciliation_status_enum',
        'account_type_enum',
    ):
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)
