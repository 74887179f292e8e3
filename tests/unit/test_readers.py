import sys
import tempfile
import unittest
from collections import namedtuple
from pathlib import Path
from unittest import mock

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "telemetry"))

from hostpulse_telemetry import readers
from hostpulse_telemetry.commands import CommandResult
from hostpulse_telemetry.errors import MissingSourceError
from hostpulse_telemetry.models import GIB, EnvironmentInfo, EnvironmentKind, MemoryCaveat

NATIVE = EnvironmentInfo(EnvironmentKind.NATIVE_LINUX)
WSL1 = EnvironmentInfo(EnvironmentKind.COMPAT_LAYER_V1)
WSL2 = EnvironmentInfo(EnvironmentKind.COMPAT_LAYER_V2)

Partition = namedtuple("Partition", "device mountpoint fstype opts")
Usage = namedtuple("Usage", "total used free percent")
NetIO = namedtuple("NetIO", "bytes_sent bytes_recv packets_sent packets_recv")


class MemoryTests(unittest.TestCase):
    def test_sixteen_gib_with_two_free(self):
        mem = readers.memory_from_counters(16 * GIB, 2 * GIB, None, NATIVE)
        self.assertEqual(mem.used, 14 * GIB)
        self.assertAlmostEqual(mem.used_percent, 87.5)
        self.assertEqual(mem.caveat, MemoryCaveat.NONE)

    def test_wsl2_always_virtualized_warning(self):
        mem = readers.memory_from_counters(16 * GIB, 2 * GIB, None, WSL2)
        self.assertAlmostEqual(mem.used_percent, 87.5)
        self.assertEqual(mem.caveat, MemoryCaveat.VIRTUALIZED_HOST_WARNING)

    def test_wsl1_low_memory_warning(self):
        mem = readers.memory_from_counters(4 * GIB, 1 * GIB, None, WSL1)
        self.assertEqual(mem.caveat, MemoryCaveat.LOW_HEADROOM_WARNING)

    def test_wsl1_enough_memory_no_warning(self):
        self.assertEqual(readers.memory_from_counters(32 * GIB, 8 * GIB, None, WSL1).caveat, MemoryCaveat.NONE)

    def test_native_low_memory_no_warning(self):
        self.assertEqual(readers.memory_from_counters(4 * GIB, 1 * GIB, None, NATIVE).caveat, MemoryCaveat.NONE)

    def test_available_refines_used(self):
        mem = readers.memory_from_counters(16 * GIB, 2 * GIB, 6 * GIB, NATIVE)
        self.assertEqual(mem.used, 10 * GIB)
        self.assertEqual(mem.free, 2 * GIB)
        self.assertEqual(mem.available, 6 * GIB)

    def test_zero_total(self):
        mem = readers.memory_from_counters(0, 0, None, NATIVE)
        self.assertEqual(mem.used_percent, 0.0)

    def test_custom_low_memory_threshold(self):
        mem = readers.memory_from_counters(12 * GIB, GIB, None, WSL1, low_memory_bytes=16 * GIB)
        self.assertEqual(mem.caveat, MemoryCaveat.LOW_HEADROOM_WARNING)


class PrimaryVolumeTests(unittest.TestCase):
    def test_wsl1_prefers_windows_bridge(self):
        mounts = ["/", "/mnt/c", "/data"]
        self.assertEqual(mounts[readers.select_primary(mounts, WSL1)], "/mnt/c")

    def test_native_prefers_root(self):
        mounts = ["/data", "/"]
        self.assertEqual(mounts[readers.select_primary(mounts, NATIVE)], "/")

    def test_native_ignores_bridge_path(self):
        mounts = ["/", "/mnt/c"]
        self.assertEqual(mounts[readers.select_primary(mounts, NATIVE)], "/")

    def test_falls_back_to_first(self):
        self.assertEqual(readers.select_primary(["/boot", "/srv"], NATIVE), 0)

    def test_no_volumes(self):
        self.assertIsNone(readers.select_primary([], NATIVE))


class ReadDisksTests(unittest.TestCase):
    def test_excludes_virtual_and_marks_one_primary(self):
        parts = [
            Partition("/dev/sdb1", "/", "ext4", "rw"),
            Partition("tmpfs", "/run", "tmpfs", "rw"),
            Partition("C:\\", "/mnt/c", "9p", "rw"),
            Partition("overlay", "/var/lib/docker/x", "overlay", "rw"),
        ]
        with mock.patch.object(readers.psutil, "disk_partitions", return_value=parts), mock.patch.object(
            readers.psutil, "disk_usage", return_value=Usage(100, 25, 75, 25.0)
        ):
            disks = readers.read_disks(WSL1)
        self.assertEqual([v.mountpoint for v in disks.volumes], ["/", "/mnt/c"])
        self.assertEqual(sum(1 for v in disks.volumes if v.is_primary), 1)
        self.assertEqual(disks.primary.mountpoint, "/mnt/c")

    def test_unreadable_mount_is_skipped(self):
        parts = [Partition("/dev/sda1", "/", "ext4", "rw"), Partition("/dev/sdc1", "/media/gone", "ext4", "rw")]

        def usage(path):
            if path == "/media/gone":
                raise PermissionError("denied")
            return Usage(100, 50, 50, 50.0)

        with mock.patch.object(readers.psutil, "disk_partitions", return_value=parts), mock.patch.object(
            readers.psutil, "disk_usage", side_effect=usage
        ):
            disks = readers.read_disks(NATIVE)
        self.assertEqual([v.mountpoint for v in disks.volumes], ["/"])

    def test_no_real_filesystems_raises(self):
        with mock.patch.object(readers.psutil, "disk_partitions", return_value=[Partition("tmpfs", "/tmp", "tmpfs", "rw")]):
            with self.assertRaises(MissingSourceError):
                readers.read_disks(NATIVE)

    def test_entries_without_device_are_skipped(self):
        parts = [Partition("/dev/sda1", "/", "ext4", "rw"), Partition("", "/run/user/1000", "ext4", "rw")]
        with mock.patch.object(readers.psutil, "disk_partitions", return_value=parts) as listing, mock.patch.object(
            readers.psutil, "disk_usage", return_value=Usage(100, 50, 50, 50.0)
        ):
            disks = readers.read_disks(NATIVE)
        self.assertEqual([v.mountpoint for v in disks.volumes], ["/"])
        listing.assert_called_once_with(all=True)


@unittest.skipUnless(sys.platform.startswith("linux"), "procfs mount table is Linux only")
class ProcfsMountTableTests(unittest.TestCase):
    """Drives psutil against a fake procfs so its own mount filtering is exercised."""

    FILESYSTEMS = "\text4\nnodev\tsysfs\nnodev\ttmpfs\nnodev\t9p\nnodev\tcgroup2\n"
    MOUNTS = (
        "/dev/sdc / ext4 rw,relatime 0 0\n"
        "sysfs /sys sysfs rw,nosuid 0 0\n"
        "none /run/user tmpfs rw 0 0\n"
        "cgroup2 /sys/fs/cgroup cgroup2 rw 0 0\n"
        "C:\\134 /mnt/c 9p rw,noatime,aname=drvfs 0 0\n"
    )

    def _read(self, env):
        with tempfile.TemporaryDirectory() as tmp:
            proc = Path(tmp)
            (proc / "self").mkdir()
            (proc / "filesystems").write_text(self.FILESYSTEMS, encoding="ascii")
            (proc / "self" / "mounts").write_text(self.MOUNTS, encoding="ascii")
            with mock.patch.object(readers.psutil, "PROCFS_PATH", str(proc)), mock.patch.object(
                readers.psutil, "disk_usage", return_value=Usage(100, 30, 70, 30.0)
            ):
                return readers.read_disks(env)

    def test_windows_drive_survives_on_wsl2(self):
        disks = self._read(WSL2)
        self.assertEqual([v.mountpoint for v in disks.volumes], ["/", "/mnt/c"])
        self.assertEqual(disks.primary.mountpoint, "/mnt/c")

    def test_native_host_keeps_root_primary(self):
        self.assertEqual(self._read(NATIVE).primary.mountpoint, "/")


class NetworkTests(unittest.TestCase):
    def test_loopback_excluded_and_sorted(self):
        counters = {
            "wlan0": NetIO(1, 2, 3, 4),
            "lo": NetIO(9, 9, 9, 9),
            "eth0": NetIO(10, 20, 30, 40),
            "lo0": NetIO(9, 9, 9, 9),
        }
        with mock.patch.object(readers.psutil, "net_io_counters", return_value=counters):
            ifaces = readers.read_network()
        self.assertEqual([i.name for i in ifaces], ["eth0", "wlan0"])
        self.assertEqual(ifaces[0].bytes_recv, 20)
        self.assertEqual(ifaces[0].packets_sent, 30)


class CpuTests(unittest.TestCase):
    def test_read_cpu_uses_sampler_and_loadavg(self):
        sampler = mock.Mock()
        sampler.measure.return_value = 37.5
        with mock.patch.object(readers.psutil, "cpu_count", return_value=4), mock.patch.object(
            readers.psutil, "getloadavg", return_value=(5.5, 3.0, 1.0)
        ), mock.patch.object(readers, "_cpu_model", return_value="Test CPU"):
            cpu = readers.read_cpu(NATIVE, sampler, interval=0.5)
        sampler.measure.assert_called_once_with(0.5)
        self.assertEqual(cpu.cores, 4)
        self.assertEqual(cpu.usage_percent, 37.5)
        # load above core count is a valid reading
        self.assertEqual(cpu.load_1m, 5.5)

    def test_missing_core_count_defaults_to_one(self):
        sampler = mock.Mock()
        sampler.measure.return_value = 0.0
        with mock.patch.object(readers.psutil, "cpu_count", return_value=None), mock.patch.object(
            readers.psutil, "getloadavg", side_effect=OSError("no loadavg")
        ), mock.patch.object(readers, "_cpu_model", return_value="x"):
            cpu = readers.read_cpu(NATIVE, sampler)
        self.assertEqual(cpu.cores, 1)
        self.assertIsNone(cpu.load_1m)

    def test_model_from_cpuinfo(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "cpuinfo"
            path.write_text("processor\t: 0\nmodel name\t: AMD Ryzen 7 5800X 8-Core Processor\n", encoding="utf-8")
            self.assertEqual(readers._cpu_model(NATIVE, path), "AMD Ryzen 7 5800X 8-Core Processor")

    def test_macos_model_lookup_uses_configured_timeout(self):
        macos = EnvironmentInfo(EnvironmentKind.MACOS)
        sampler = mock.Mock()
        sampler.measure.return_value = 5.0
        with mock.patch.object(readers, "run_command", return_value=CommandResult(0, "Apple M2", "")) as run, mock.patch.object(
            readers.psutil, "cpu_count", return_value=8
        ), mock.patch.object(readers.psutil, "getloadavg", return_value=(1.0, 1.0, 1.0)):
            cpu = readers.read_cpu(macos, sampler, interval=0.1, timeout=2.5)
        self.assertEqual(cpu.model, "Apple M2")
        self.assertEqual(run.call_args.kwargs["timeout"], 2.5)


if __name__ == "__main__":
    unittest.main()
