import os
import tempfile
import unittest
from unittest import mock

import utils.logger as logger_module
from utils.logger import close_log_file, get_logger


class LogFileTestCase(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.log_path = os.path.join(self.temp_dir.name, "admin.log")
        # fresh console so LOG_FILE is read again
        self.state = mock.patch.multiple(
            logger_module, _log_console=None, _log_file=None
        )
        self.state.start()
        self.env = mock.patch.dict(os.environ, {"LOG_FILE": self.log_path})
        self.env.start()

    def tearDown(self):
        close_log_file()
        self.env.stop()
        self.state.stop()
        self.temp_dir.cleanup()

    def test_logs_go_to_file_and_file_is_closed(self):
        logger = get_logger("log-file-test")
        logger.info("written to the log file")

        handle = logger_module._log_file
        self.assertIsNotNone(handle)

        close_log_file()

        self.assertTrue(handle.closed)
        self.assertIsNone(logger_module._log_file)
        with open(self.log_path, encoding="utf-8") as f:
            self.assertIn("written to the log file", f.read())

    def test_close_without_log_file_does_nothing(self):
        close_log_file()
        self.assertIsNone(logger_module._log_file)


if __name__ == "__main__":
    unittest.main()
