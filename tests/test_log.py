import logging

from openapi_docgen.log import LOGGING_CONFIG, configure_logging


class TestConfigureLogging:
    def test_default_level_is_warning(self):
        configure_logging()
        logger = logging.getLogger("openapi_docgen")
        assert logger.level == logging.WARNING
        assert logger.propagate is False
        assert logger.handlers

    def test_verbose_enables_debug(self):
        configure_logging(verbose=True)
        assert logging.getLogger("openapi_docgen").level == logging.DEBUG
        # the shared config is left untouched
        assert LOGGING_CONFIG["loggers"]["openapi_docgen"]["level"] == "WARNING"
