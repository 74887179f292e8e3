import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "telemetry"))

from hostpulse_telemetry.models import CounterSample
from hostpulse_telemetry.sampler import DeltaSampler, SamplerState, utilization_from


def _sample(user, system, idle, ts=0.0, iowait=0):
    return CounterSample(counters={"user": user, "nice": 0, "system": system, "idle": idle, "iowait": iowait}, captured_at=ts)


class UtilizationTests(unittest.TestCase):
    def test_half_busy(self):
        self.assertAlmostEqual(utilization_from(_sample(100, 0, 100), _sample(150, 0, 150)), 50.0)

    def test_zero_total_delta_is_zero(self):
        s = _sample(100, 50, 100)
        self.assertEqual(utilization_from(s, s), 0.0)

    def test_negative_total_delta_is_zero(self):
        self.assertEqual(utilization_from(_sample(200, 0, 200), _sample(100, 0, 100)), 0.0)

    def test_idle_exceeding_total_clamps_to_zero(self):
        # clock anomaly: idle grew more than the total did
        first = _sample(100, 100, 100)
        second = _sample(50, 100, 200)
        self.assertEqual(utilization_from(first, second), 0.0)

    def test_iowait_counts_as_idle(self):
        self.assertAlmostEqual(utilization_from(_sample(0, 0, 0), _sample(50, 0, 25, iowait=25)), 50.0)

    def test_range_for_positive_deltas(self):
        for busy in range(0, 101, 10):
            value = utilization_from(_sample(0, 0, 0), _sample(busy, 0, 100 - busy))
            self.assertGreaterEqual(value, 0.0)
            self.assertLessEqual(value, 100.0)


class DeltaSamplerTests(unittest.TestCase):
    def test_measure_sleeps_exactly_interval_between_captures(self):
        samples = iter([_sample(0, 0, 0, ts=0.0), _sample(30, 10, 60, ts=1.0)])
        calls = []
        sampler = DeltaSampler(source=lambda: next(samples), sleep=calls.append)
        value = sampler.measure(0.25)
        self.assertEqual(calls, [0.25])
        self.assertAlmostEqual(value, 40.0)
        self.assertEqual(sampler.state, SamplerState.SETTLED)
        self.assertIsNotNone(sampler.last_pair)

    def test_default_interval_is_one_second(self):
        samples = iter([_sample(0, 0, 0), _sample(0, 0, 10)])
        calls = []
        DeltaSampler(source=lambda: next(samples), sleep=calls.append).measure()
        self.assertEqual(calls, [1.0])


if __name__ == "__main__":
    unittest.main()
