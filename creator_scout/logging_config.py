"""
Logging setup for the API process.

configure_logging() is called once from create_app(). LOG_FORMAT selects
human-readable text (default) or one JSON object per line; LOG_LEVEL picks
the root level and falls back to INFO on unknown names.
"""
import json
import logging
import os
import sys
from datetime import datetime, timezone


class JSONFormatter(logging.Formatter):
    """One JSON object per record, for log shippers."""

    def format(self, record):
        entry = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        if record.exc_info and record.exc_info[0] is not None:
            entry['exception'] = self.formatException(record.exc_info)
        return json.dumps(entry)


TEXT_FORMAT = '[%(asctime)s] %(levelname)s %(name)s — %(message)s'
TEXT_DATEFMT = '%Y-%m-%d %H:%M:%S'

# Chatty at INFO: HTTP client pool, SQL echo, dev-server access log
_NOISY_LOGGERS = [
    'urllib3',
    'sqlalchemy.engine',
    'werkzeug',
]


def _resolve_level(name):
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(app=None):
    """
    Install a single stderr handler on the root logger.

    Environment variables:
        LOG_LEVEL  — Python log level name (default: INFO)
        LOG_FORMAT — "text" (default) or "json"
    """
    level = _resolve_level(os.getenv('LOG_LEVEL', 'INFO'))
    use_json = os.getenv('LOG_FORMAT', 'text').lower() == 'json'

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(
        JSONFormatter() if use_json else logging.Formatter(TEXT_FORMAT, datefmt=TEXT_DATEFMT)
    )
    root.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    if app is not None:
        app.logger.setLevel(level)
