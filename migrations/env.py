"""Alembic environment for AIconic. Reads DATABASE_URL from the environment."""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from aiconic.db.database import Base, get_database_url
from aiconic.db import orm_models  # noqa: F401 - Import to register models

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

url = get_database_url() or config.get_main_option("sqlalchemy.url")
if url and url.startswith("postgres://"):
    url = url.replace("postgres://", "postgresql://", 1)
if url:
    config.set_main_option("sqlalchemy.url", url)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
