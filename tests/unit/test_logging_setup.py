import logging
import re
import sys
import tempfile
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "telemetry"))
sys.path.insert(0, str(ROOT / "packages" / "core"))

from hostpulse_core.logging_setup import LineFormatter, configure_logging, reset_logging, run_log_path

LINE_RE = re.compile(r"^\[\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\] (INFO|WARNING|ERROR): .+$")


class LoggingSetupTests(unittest.TestCase):
    def tearDown(self):
        reset_logging()

    def test_formatter_single_line(self):
        record = logging.LogRecord("hostpulse", logging.WARNING, __file__, 1, "High memory usage:\n91%", None, None)
        line = LineFormatter().format(record)
        self.assertRegex(line, LINE_RE)
        self.assertNotIn("\n", line)

    def test_run_log_written(self):
        with tempfile.TemporaryDirectory() as tmp:
            logs = Path(tmp)
            logger = configure_logging(logs, stamp="20260314_092653", console=False)
            logging.getLogger("hostpulse.runner").warning("disk almost full")
            for handler in logger.handlers:
                handler.flush()
            path = run_log_path(logs, "20260314_092653")
            self.assertEqual(path.name, "hostpulse_20260314_092653.log")
            lines = path.read_text(encoding="utf-8").splitlines()
            reset_logging()
        self.assertTrue(all(LINE_RE.match(line) for line in lines))
        self.assertTrue(lines[-1].endswith("WARNING: disk almost full"))

    def test_configure_is_idempotent(self):
        first = configure_logging(None, console=True)
        count = len(first.handlers)
        second = configure_logging(None, console=True)
        self.assertIs(first, second)
        self.assertEqual(len(second.handlers), count)


if __name__ == "__main__":
    unittest.main()
