import logging
import sys

from filefield.settings import settings

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

# Storage SDK loggers that report every request at INFO.
QUIET_LOGGERS = ("botocore", "boto3", "s3transfer")


def _formatter() -> logging.Formatter:
    if not settings.log_json:
        return logging.Formatter(TEXT_FORMAT)

    from pythonjsonlogger.json import JsonFormatter

    return JsonFormatter(JSON_FORMAT, rename_fields={"asctime": "timestamp", "levelname": "level"})


def configure_logging() -> None:
    """Route every filefield logger to stderr.

    ``FILEFIELD_LOG_LEVEL`` sets the root level (unknown names fall back to
    INFO) and ``FILEFIELD_LOG_JSON`` switches to structured output.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_formatter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


# Alembic's fileConfig replaces root handlers during migrations.
reconfigure = configure_logging
