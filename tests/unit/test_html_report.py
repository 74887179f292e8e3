import sys
import tempfile
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "telemetry"))
sys.path.insert(0, str(ROOT / "packages" / "renderer"))
sys.path.insert(0, str(Path(__file__).resolve().parent))

from hostpulse_renderer.html_report import HtmlReport
from hostpulse_telemetry.alerts import evaluate
from hostpulse_telemetry.models import (
    MemoryCaveat,
    ProcessSample,
    SystemInfo,
    TemperatureProvenance,
    TemperatureReading,
)
from snapshot_factory import make_memory, make_snapshot


class HtmlReportTests(unittest.TestCase):
    def test_sections_present(self):
        html = HtmlReport(make_snapshot(), []).render()
        for title in ("Alerts", "CPU", "Memory", "Disks", "Network", "GPU", "Temperature", "Disk Health", "Top Processes"):
            self.assertIn(title, html)
        self.assertIn("No alerts.", html)
        self.assertIn("testhost", html)

    def test_untrusted_text_is_escaped(self):
        procs = (ProcessSample(pid=1, user="eve", memory_percent=1.0, command="<script>alert(1)</script>"),)
        snap = make_snapshot(processes=procs, system=SystemInfo(hostname="a&b"))
        html = HtmlReport(snap, []).render()
        self.assertNotIn("<script>alert(1)</script>", html)
        self.assertIn("&lt;script&gt;", html)
        self.assertIn("a&amp;b", html)

    def test_alerts_listed(self):
        snap = make_snapshot(memory=make_memory(95.0))
        html = HtmlReport(snap, evaluate(snap)).render()
        self.assertIn("High memory usage: 95.00%", html)

    def test_memory_caveat_shown(self):
        snap = make_snapshot(memory=make_memory(50.0, MemoryCaveat.VIRTUALIZED_HOST_WARNING))
        self.assertIn("virtual machine", HtmlReport(snap, []).render())

    def test_synthetic_temperature_flagged(self):
        snap = make_snapshot(cpu_temperature=TemperatureReading(45.0, TemperatureProvenance.SYNTHETIC_ESTIMATE))
        html = HtmlReport(snap, []).render()
        self.assertIn("(estimated)", html)
        self.assertIn("not measured", html)

    def test_gpu_die_source_shown(self):
        snap = make_snapshot(cpu_temperature=TemperatureReading(63.0, TemperatureProvenance.REAL_SENSOR, source="gpu"))
        self.assertIn("hardware sensor (gpu)", HtmlReport(snap, []).render())

    def test_write(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = HtmlReport(make_snapshot(), [], theme_name="Paper").write(Path(tmp) / "report.html")
            self.assertTrue(path.read_text(encoding="utf-8").startswith("<!DOCTYPE html>"))


if __name__ == "__main__":
    unittest.main()
