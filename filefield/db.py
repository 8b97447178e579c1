"""Database access for the documents table.

The engine and the CLI connection are created lazily so that importing the
package never touches ``FILEFIELD_DB_URL``.
"""

import logging
from pathlib import Path

from alembic.config import Config
from sqlalchemy import Connection, create_engine
from sqlalchemy.engine import Engine

from alembic import command
from filefield.settings import settings

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent

_engine: Engine | None = None
_connection: Connection | None = None


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        _engine = create_engine(settings.db_url, pool_pre_ping=True)
        logger.info("Opened engine for %s", _engine.url.render_as_string(hide_password=True))
    return _engine


def get_connection() -> Connection:
    """Shared connection used by the interactive menu.

    Documents and their attachment columns are read and written through this
    one connection for the lifetime of the process.
    """
    global _connection
    if _connection is None:
        _connection = get_engine().connect()
        logger.debug("CLI connection opened")
    return _connection


def _get_alembic_config() -> Config:
    ini_path = PROJECT_ROOT / "alembic.ini"
    if not ini_path.exists():
        ini_path = Path.cwd() / "alembic.ini"
    cfg = Config(str(ini_path))
    # Installed packages are not run from the repo root, so pin both paths.
    cfg.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
    cfg.set_main_option("sqlalchemy.url", settings.db_url)
    return cfg


def initialize_db() -> None:
    """Bring the documents schema up to the latest revision."""
    cfg = _get_alembic_config()
    logger.info("Upgrading schema at %s", cfg.get_main_option("script_location"))
    command.upgrade(cfg, "head")
    logger.info("Schema is at head")
