import logging

from reportkit.core.logging import LOGGING_CONFIG
from reportkit.core.logging import setup_logging


def test_single_package_logger_configured():
    assert set(LOGGING_CONFIG["loggers"]) == {"root", "uvicorn.error", "uvicorn.access", "reportkit"}


def test_module_loggers_inherit_package_level():
    setup_logging()
    package = logging.getLogger("reportkit")
    engine_logger = logging.getLogger("reportkit.services.report_engine")

    assert package.level == logging.DEBUG
    assert package.propagate is False
    assert engine_logger.getEffectiveLevel() == logging.DEBUG
    assert not engine_logger.handlers
