import logging
import os
import tempfile
import unittest

from transl8.logging_config import LOGGER_NAME, TqdmLoggingHandler, setup_logger


class TestSetupLogger(unittest.TestCase):

    def tearDown(self):
        logger = logging.getLogger(LOGGER_NAME)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        logger.propagate = True
        logger.setLevel(logging.NOTSET)

    def test_console_handler_and_level(self):
        logger = setup_logger("debug")

        self.assertEqual(logger.name, LOGGER_NAME)
        self.assertEqual(logger.level, logging.DEBUG)
        self.assertFalse(logger.propagate)
        self.assertEqual(len(logger.handlers), 1)
        self.assertIsInstance(logger.handlers[0], TqdmLoggingHandler)

    def test_unknown_level_defaults_to_info(self):
        self.assertEqual(setup_logger("chatty").level, logging.INFO)

    def test_repeated_setup_does_not_duplicate_handlers(self):
        setup_logger()
        logger = setup_logger()

        self.assertEqual(len(logger.handlers), 1)

    def test_file_handler(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            log_path = os.path.join(temp_dir, "logs", "run.log")
            logger = setup_logger("INFO", log_path, log_to_console=False)
            logging.getLogger(f"{LOGGER_NAME}.orchestrator").info("hello from a module")

            for handler in list(logger.handlers):
                handler.flush()
            with open(log_path, encoding="utf-8") as f:
                content = f.read()
            self.assertIn("transl8.orchestrator - INFO - hello from a module", content)
            self.assertEqual(len(logger.handlers), 1)
            for handler in list(logger.handlers):
                logger.removeHandler(handler)
                handler.close()


if __name__ == '__main__':
    unittest.main()
