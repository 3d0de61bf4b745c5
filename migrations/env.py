"""
Alembic environment for the fund ledger schema.

Runs for every `alembic` command and for `fund-ledger upgrade-db`.
The database URL always comes from application settings, never
from alembic.ini, and logging goes through the application's own
configuration.
"""

from alembic import context
from sqlalchemy import engine_from_config, pool

from fund_ledger.config import get_settings
from fund_ledger.logging_config import configure_logging
from fund_ledger.models import Base

config = context.config

# Callers that already configured logging (the CLI) set this
if not config.attributes.get("logging_configured"):
    configure_logging()

# Importing fund_ledger.models registers every table on
# Base.metadata, which autogenerate compares against the
# live schema.
target_metadata = Base.metadata

settings = get_settings()
config.set_main_option("sqlalchemy.url", settings.DATABASE_URL)

# SQLite cannot ALTER most constraints in place
render_as_batch = settings.DATABASE_URL.startswith("sqlite")


def run_migrations_offline() -> None:
    """Emit the migration SQL to stdout for review instead of executing it."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
        render_as_batch=render_as_batch,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Apply migrations over a live connection, one transaction per run."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            render_as_batch=render_as_batch,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
