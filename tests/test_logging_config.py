import logging
import unittest
from logging.handlers import RotatingFileHandler
from pathlib import Path
from tempfile import TemporaryDirectory

from app.config.logging_config import LOG_FORMAT, configure_logging


class TestLoggingConfig(unittest.TestCase):
    def test_configure_logging(self):
        # Test that the function returns a logger
        logger = configure_logging(log_dir=None)
        self.assertIsInstance(logger, logging.Logger)

        # Test that the logger has the correct name
        self.assertEqual(logger.name, "twilio_relay")

        # Test that the logger does not leak into the root logger
        self.assertFalse(logger.propagate)

        # Test that the console handler comes first and uses the shared format
        self.assertEqual(len(logger.handlers), 1)
        handler = logger.handlers[0]
        self.assertIsInstance(handler, logging.StreamHandler)
        self.assertEqual(handler.formatter._fmt, "%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        self.assertEqual(handler.formatter._fmt, LOG_FORMAT)

    def test_explicit_level(self):
        logger = configure_logging("debug", log_dir=None)
        self.assertEqual(logger.level, logging.DEBUG)

        logger = configure_logging("not-a-level", log_dir=None)
        self.assertEqual(logger.level, logging.INFO)

    def test_file_handler(self):
        with TemporaryDirectory() as tmp:
            logger = configure_logging("INFO", log_dir=Path(tmp) / "logs")
            try:
                file_handlers = [h for h in logger.handlers if isinstance(h, RotatingFileHandler)]
                self.assertEqual(len(file_handlers), 1)
                self.assertEqual(Path(file_handlers[0].baseFilename).name, "twilio_relay.log")
                self.assertEqual(file_handlers[0].maxBytes, 10 * 1024 * 1024)
                self.assertEqual(file_handlers[0].backupCount, 5)
            finally:
                configure_logging(log_dir=None)

    def test_configure_logging_is_idempotent(self):
        first = configure_logging(log_dir=None)
        second = configure_logging(log_dir=None)
        self.assertIs(first, second)
        self.assertEqual(len(second.handlers), 1)

    def test_noisy_loggers_are_capped(self):
        configure_logging("DEBUG", log_dir=None)
        self.assertEqual(logging.getLogger("twilio.http_client").level, logging.WARNING)


if __name__ == "__main__":
    unittest.main()
