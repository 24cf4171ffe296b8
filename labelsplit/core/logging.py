import logging
import logging.config
import re

# Label sheets carry recipient contact details; keep them out of log output.
RECIPIENT_PATTERNS = [
    re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}"),
    re.compile(r"(?<!\w)(?:\+91[-\s]?|0)?[6-9]\d{9}(?!\w)"),
    re.compile(r"(?<!\w)\d{3}\s?\d{3}(?!\w)"),
]


class RecipientSafeFilter(logging.Filter):
    def _sanitize(self, value: object) -> object:
        if not isinstance(value, str):
            return value

        redacted = value
        for pattern in RECIPIENT_PATTERNS:
            redacted = pattern.sub("[REDACTED]", redacted)
        return redacted

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = self._sanitize(record.msg)

        if isinstance(record.args, tuple):
            record.args = tuple(self._sanitize(item) for item in record.args)
        elif isinstance(record.args, dict):
            record.args = {key: self._sanitize(value) for key, value in record.args.items()}

        return True


def setup_logging() -> None:
    """Route service logs through one recipient-safe console handler.

    LOG_LEVEL applies to the ``labelsplit`` loggers; everything else logs
    at WARNING and above.
    """
    from labelsplit.core.settings import get_settings

    settings = get_settings()
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "filters": {
                "recipient_safe": {"()": RecipientSafeFilter},
            },
            "formatters": {
                "default": {
                    "format": "%(asctime)s %(levelname)s %(name)s %(message)s",
                }
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "filters": ["recipient_safe"],
                }
            },
            "root": {"handlers": ["console"], "level": "WARNING"},
            "loggers": {
                "labelsplit": {"level": settings.log_level.upper()},
            },
        }
    )
