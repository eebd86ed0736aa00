import json
import logging
from datetime import datetime, timezone
from typing import Any

PREVIEW_LIMIT = 160
_EXTRA_FIELDS = ("db_path", "n")


def _preview(text: str, limit: int = PREVIEW_LIMIT) -> str:
    text = text.replace("\n", " ")
    if len(text) <= limit:
        return text
    return f"{text[:limit].rstrip()}…"


class PreviewFilter(logging.Filter):
    """Trim long string arguments (document texts) before formatting."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.args, tuple):
            record.args = tuple(_preview(a) if isinstance(a, str) else a for a in record.args)
        return True


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        log: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "lvl": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for key in _EXTRA_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                log[key] = value
        if record.exc_info:
            log["exc"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False)


def get_logger(name: str) -> logging.Logger:
    from lexivec_core.config import settings

    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    handler = logging.StreamHandler()
    handler.addFilter(PreviewFilter())
    handler.setFormatter(JSONFormatter())
    logger.addHandler(handler)
    logger.setLevel(settings.log_level)
    logger.propagate = False
    return logger


__all__ = ["get_logger", "PreviewFilter", "JSONFormatter", "PREVIEW_LIMIT"]
