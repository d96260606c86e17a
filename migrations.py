"""
Database migrations.

Migrations are applied in list order, once each, and recorded in the
``schema_migrations`` table. Every step is written so that re-running it
against an already migrated database does nothing.
"""

import logging
from typing import Callable, List, Tuple
from sqlalchemy import Column, DateTime, MetaData, String, Table, inspect, select
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from database import Base, engine as default_engine, init_models
from utils.time import utcnow

logger = logging.getLogger(__name__)

migration_metadata = MetaData()

schema_migrations = Table(
    'schema_migrations',
    migration_metadata,
    Column('version', String(255), primary_key=True),
    Column('applied_at', DateTime, nullable=False, default=utcnow),
)


def _create_table(name: str) -> Callable[[Connection], None]:
    def migrate(conn: Connection) -> None:
        Base.metadata.tables[name].create(conn, checkfirst=True)
    return migrate


MIGRATIONS: List[Tuple[str, Callable[[Connection], None]]] = [
    ('001_create_users_table', _create_table('users')),
    ('002_create_chat_messages_table', _create_table('chat_messages')),
    ('003_create_subscription_bundles_table', _create_table('subscription_bundles')),
    ('004_create_monthly_usage_table', _create_table('monthly_usage')),
]


def applied_versions(conn: Connection) -> set:
    return set(conn.execute(select(schema_migrations.c.version)).scalars())


def run_migrations(engine: Engine = default_engine) -> List[str]:
    """Apply pending migrations and return the versions that were applied."""
    init_models()
    applied = []
    try:
        with engine.begin() as conn:
            schema_migrations.create(conn, checkfirst=True)
            done = applied_versions(conn)

        for version, migrate in MIGRATIONS:
            if version in done:
                logger.debug(f"Migration {version} already applied, skipping")
                continue

            logger.info(f"Running migration {version}...")
            with engine.begin() as conn:
                migrate(conn)
                conn.execute(schema_migrations.insert().values(version=version, applied_at=utcnow()))
            applied.append(version)
            logger.info(f"Migration {version} completed successfully")

    except SQLAlchemyError as e:
        logger.error(f"Migration error: {str(e)}")
        raise

    logger.info(f"All migrations completed ({len(applied)} applied)")
    return applied


def check_db_schema(engine: Engine = default_engine) -> List[str]:
    """Names of the tables currently present in the database."""
    return inspect(engine).get_table_names()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
    run_migrations()
