# Alembic environment for the SkyTower schema.
# The database URL is read through the application's Settings (DATABASE_URL).
import logging
from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool
from alembic import context

from skytower import models  # noqa: F401  (registers every table on Base.metadata)
from skytower.config import Settings
from skytower.db import Base

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

logger = logging.getLogger("skytower.migrations")

target_metadata = Base.metadata
database_url = Settings.from_env().database_url

configure_options = {
    "target_metadata": target_metadata,
    "compare_type": True,
    # SQLite cannot ALTER constraints in place
    "render_as_batch": database_url.startswith("sqlite"),
}


def run_migrations_offline() -> None:
    """Emit SQL for the configured database without connecting."""
    logger.info("migrations.offline", extra={"dialect": database_url.split(":", 1)[0]})
    context.configure(
        url=database_url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **configure_options,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    section = config.get_section(config.config_ini_section) or {}
    section["sqlalchemy.url"] = database_url
    connectable = engine_from_config(section, prefix="sqlalchemy.", poolclass=pool.NullPool)

    with connectable.connect() as connection:
        context.configure(connection=connection, **configure_options)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
