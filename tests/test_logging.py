import logging

import pytest

from labelsplit.core.logging import RecipientSafeFilter, setup_logging


def test_recipient_filter_redacts_phone_and_email(caplog):
    logger = logging.getLogger("test.recipient")
    logger.setLevel(logging.INFO)
    logger.filters = []
    logger.addFilter(RecipientSafeFilter())

    with caplog.at_level(logging.INFO, logger="test.recipient"):
        logger.info("Deliver to soni@example.in mobile 9876543210")

    assert "soni@example.in" not in caplog.text
    assert "9876543210" not in caplog.text
    assert "[REDACTED]" in caplog.text


def test_recipient_filter_redacts_pin_code_in_args(caplog):
    logger = logging.getLogger("test.recipient.args")
    logger.setLevel(logging.INFO)
    logger.filters = []
    logger.addFilter(RecipientSafeFilter())

    with caplog.at_level(logging.INFO, logger="test.recipient.args"):
        logger.info("address %s", "kanpur 208 001")

    assert "208 001" not in caplog.text
    assert "kanpur [REDACTED]" in caplog.text


def test_recipient_filter_keeps_page_numbers(caplog):
    logger = logging.getLogger("test.recipient.pages")
    logger.setLevel(logging.INFO)
    logger.filters = []
    logger.addFilter(RecipientSafeFilter())

    with caplog.at_level(logging.INFO, logger="test.recipient.pages"):
        logger.info("Skipping page %d: %s", 12, "no keyword match")

    assert "Skipping page 12: no keyword match" in caplog.text


@pytest.fixture
def restore_logging():
    from labelsplit.core.settings import get_settings

    root = logging.getLogger()
    app_logger = logging.getLogger("labelsplit")
    saved = (root.level, root.handlers[:], app_logger.level)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    root.setLevel(saved[0])
    root.handlers[:] = saved[1]
    app_logger.setLevel(saved[2])


def test_setup_logging_scopes_level_to_service_loggers(restore_logging, monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "debug")
    setup_logging()

    root = logging.getLogger()
    assert logging.getLogger("labelsplit").level == logging.DEBUG
    assert root.level == logging.WARNING
    handler, = root.handlers
    assert any(isinstance(f, RecipientSafeFilter) for f in handler.filters)
