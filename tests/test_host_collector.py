from __future__ import annotations

from collections import namedtuple
from unittest.mock import patch

import pytest

from monitor_api.collectors.host_collector import HostCollector

svmem = namedtuple("svmem", ["total", "available", "percent"])
sdiskpart = namedtuple("sdiskpart", ["device", "mountpoint", "fstype", "opts"])
sdiskusage = namedtuple("sdiskusage", ["total", "used", "free", "percent"])

GIB = 1024 ** 3


def _configure(mock_psutil, partitions=None):
    mock_psutil.cpu_percent.return_value = 37.5
    mock_psutil.cpu_count.return_value = 8
    mock_psutil.virtual_memory.return_value = svmem(16_000_000_000, 8_000_000_000, 50.0)
    mock_psutil.disk_partitions.return_value = partitions if partitions is not None else [
        sdiskpart("/dev/sdb1", "/boot", "ext4", "rw"),
        sdiskpart("/dev/sda1", "/", "ext4", "rw"),
    ]
    mock_psutil.disk_usage.return_value = sdiskusage(100 * GIB, 40 * GIB, 60 * GIB, 40.0)
    mock_psutil.boot_time.return_value = 1_700_000_000.0 - 90061


@pytest.mark.asyncio
async def test_collects_full_snapshot(clock):
    with patch("monitor_api.collectors.host_collector.psutil") as mock_psutil:
        _configure(mock_psutil)
        collector = HostCollector(clock=clock)
        snap = await collector.collect()

    assert snap.cpu_load == 37.5
    assert snap.cpu_cores == 8
    assert snap.memory_percent == 50
    assert snap.disk_total_bytes == 100 * GIB
    assert snap.disk_used_bytes == 40 * GIB
    assert snap.disk_percent == 40
    assert snap.uptime_label == "1d 1h 1m"
    assert snap.computed_at_millis == int(clock.now * 1000)


def _root_unreadable(usage):
    """disk_usage side effect that fails for ``/`` only."""
    def disk_usage(path):
        if path == "/":
            raise FileNotFoundError(path)
        return usage
    return disk_usage


@pytest.mark.asyncio
async def test_prefers_root_mount(clock):
    with patch("monitor_api.collectors.host_collector.psutil") as mock_psutil:
        _configure(mock_psutil)
        await HostCollector(clock=clock).collect()
        mock_psutil.disk_usage.assert_called_once_with("/")


@pytest.mark.asyncio
async def test_reads_root_even_when_not_listed(clock):
    """Containers mount ``/`` as overlay, which disk_partitions(all=False) omits."""
    partitions = [sdiskpart("/dev/sda1", "/etc/hosts", "ext4", "rw")]
    with patch("monitor_api.collectors.host_collector.psutil") as mock_psutil:
        _configure(mock_psutil, partitions=partitions)
        snap = await HostCollector(clock=clock).collect()
        mock_psutil.disk_usage.assert_called_once_with("/")

    assert snap.disk_total_bytes == 100 * GIB


@pytest.mark.asyncio
async def test_falls_back_to_first_filesystem(clock):
    partitions = [
        sdiskpart("C:\\", "C:\\", "NTFS", "rw"),
        sdiskpart("D:\\", "D:\\", "NTFS", "rw"),
    ]
    with patch("monitor_api.collectors.host_collector.psutil") as mock_psutil:
        _configure(mock_psutil, partitions=partitions)
        mock_psutil.disk_usage.side_effect = _root_unreadable(
            sdiskusage(100 * GIB, 40 * GIB, 60 * GIB, 40.0)
        )
        snap = await HostCollector(clock=clock).collect()
        assert mock_psutil.disk_usage.call_args_list[-1].args == ("C:\\",)

    assert snap.disk_percent == 40


@pytest.mark.asyncio
async def test_no_filesystems_reports_zero_disk(clock):
    with patch("monitor_api.collectors.host_collector.psutil") as mock_psutil:
        _configure(mock_psutil, partitions=[])
        mock_psutil.disk_usage.side_effect = FileNotFoundError("/")
        snap = await HostCollector(clock=clock).collect()
        mock_psutil.disk_usage.assert_called_once_with("/")

    assert snap.disk_total_bytes == 0
    assert snap.disk_percent == 0


@pytest.mark.asyncio
async def test_primes_cpu_counter_on_init(clock):
    with patch("monitor_api.collectors.host_collector.psutil") as mock_psutil:
        _configure(mock_psutil)
        HostCollector(clock=clock)
        mock_psutil.cpu_percent.assert_called_once_with(interval=None)


@pytest.mark.asyncio
async def test_errors_propagate(clock):
    with patch("monitor_api.collectors.host_collector.psutil") as mock_psutil:
        _configure(mock_psutil)
        mock_psutil.virtual_memory.side_effect = OSError("proc unavailable")
        collector = HostCollector(clock=clock)
        with pytest.raises(OSError):
            await collector.collect()
