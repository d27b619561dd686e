import logging
import os
import tempfile
import unittest
from logging.handlers import RotatingFileHandler
from unittest.mock import patch

import e2remote.logging_config as logging_config


def _close_handlers(logger: logging.Logger) -> None:
    for h in list(logger.handlers):
        try:
            h.close()
        except Exception:
            pass
    logger.handlers.clear()


class LoggingBehaviorTests(unittest.TestCase):
    def tearDown(self):
        """Restore a quiet logger after each test case."""
        with patch.object(logging_config.config, "LOG_ENABLED", False):
            logging_config.reload_logging()

    def test_setup_logging_when_disabled_uses_null_handler(self):
        """Validate scenario: disabled logging installs only a NullHandler."""
        with patch.object(logging_config.config, "LOG_ENABLED", False):
            logger = logging_config.setup_logging()
        self.assertEqual(logger.name, "e2remote")
        self.assertTrue(any(isinstance(h, logging.NullHandler) for h in logger.handlers))
        self.assertFalse(logger.propagate)

    def test_reload_logging_rebuilds_file_and_console_handlers(self):
        """Validate scenario: enabling logging writes to a rotating file and stdout."""
        with tempfile.TemporaryDirectory() as td, patch.object(
            logging_config.config, "LOG_FILE", os.path.join(td, "logs", "e2remote.log")
        ), patch.object(
            logging_config.config, "LOG_ENABLED", True
        ), patch.object(
            logging_config.config, "CONSOLE_LOG", True
        ), patch.object(
            logging_config.config, "DEBUG", True
        ):
            logger = logging_config.reload_logging()
            self.assertEqual(logger.level, logging.DEBUG)
            self.assertTrue(any(isinstance(h, RotatingFileHandler) for h in logger.handlers))
            self.assertTrue(any(type(h) is logging.StreamHandler for h in logger.handlers))
            self.assertFalse(any(isinstance(h, logging.NullHandler) for h in logger.handlers))
            logger.info("hello")
            self.assertTrue(os.path.exists(os.path.join(td, "logs", "e2remote.log")))
            _close_handlers(logger)
            _close_handlers(logging.getLogger("urllib3"))
            _close_handlers(logging.getLogger("urllib3.connectionpool"))

    def test_repeated_setup_replaces_handlers(self):
        """Validate scenario: calling setup twice leaves one file handler, not two."""
        with tempfile.TemporaryDirectory() as td, patch.object(
            logging_config.config, "LOG_FILE", os.path.join(td, "e2remote.log")
        ), patch.object(
            logging_config.config, "LOG_ENABLED", True
        ), patch.object(
            logging_config.config, "CONSOLE_LOG", False
        ):
            logging_config.setup_logging()
            logger = logging_config.setup_logging()
            self.assertEqual(len(logger.handlers), 1)
            self.assertIsInstance(logger.handlers[0], RotatingFileHandler)
            self.assertEqual(len(logging.getLogger("urllib3").handlers), 1)
            _close_handlers(logger)
            _close_handlers(logging.getLogger("urllib3"))
            _close_handlers(logging.getLogger("urllib3.connectionpool"))

    def test_transport_logger_is_quiet_without_debug(self):
        """Validate scenario: urllib3 stays at WARNING unless debug is on."""
        with tempfile.TemporaryDirectory() as td, patch.object(
            logging_config.config, "LOG_FILE", os.path.join(td, "e2remote.log")
        ), patch.object(
            logging_config.config, "LOG_ENABLED", True
        ), patch.object(
            logging_config.config, "CONSOLE_LOG", False
        ), patch.object(
            logging_config.config, "DEBUG", False
        ):
            logger = logging_config.reload_logging()
            self.assertEqual(logging.getLogger("urllib3").level, logging.WARNING)
            _close_handlers(logger)
            _close_handlers(logging.getLogger("urllib3"))
            _close_handlers(logging.getLogger("urllib3.connectionpool"))


if __name__ == "__main__":
    unittest.main()
