"""Tests for monitor_api.services.log_service: offset arithmetic and allow-list."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from monitor_api.collectors.log_reader import read_range
from monitor_api.errors import LogUnavailable, UnknownSource
from monitor_api.models import LogOrder
from monitor_api.services import LogService


@pytest.fixture
def log_file(tmp_path):
    path = tmp_path / "access.log"
    path.write_text("".join(f"line {i}\n" for i in range(1000)))
    return path


@pytest.fixture
def service(log_file, tmp_path):
    return LogService(
        {"nginx": log_file, "missing": tmp_path / "nope.log", "dir": tmp_path},
        default_limit=300,
        max_limit=300,
    )


class TestForward:
    @pytest.mark.asyncio
    async def test_page_from_offset(self, service):
        page = await service.get_page("nginx", offset=100, limit=50, order=LogOrder.ASC)
        assert page.lines[0] == "line 100"
        assert page.lines[-1] == "line 149"
        assert page.offset == 100
        assert page.limit == 50
        assert page.next_offset == 150
        assert page.has_more is True

    @pytest.mark.asyncio
    async def test_idempotent_replay(self, service):
        a = await service.get_page("nginx", offset=100, limit=50)
        b = await service.get_page("nginx", offset=100, limit=50)
        assert a.lines == b.lines
        assert a.next_offset == b.next_offset == 150

    @pytest.mark.asyncio
    async def test_composition(self, service):
        older = await service.get_page("nginx", offset=50, limit=50)
        newer = await service.get_page("nginx", offset=100, limit=50)
        whole = await service.get_page("nginx", offset=50, limit=100)
        assert older.lines + newer.lines == whole.lines

    @pytest.mark.asyncio
    async def test_last_page_has_no_more(self, service):
        page = await service.get_page("nginx", offset=950, limit=100)
        assert len(page.lines) == 50
        assert page.next_offset == 1000
        assert page.has_more is False

    @pytest.mark.asyncio
    async def test_offset_past_end(self, service):
        page = await service.get_page("nginx", offset=5000, limit=10)
        assert page.lines == []
        assert page.next_offset == 5000
        assert page.has_more is False

    @pytest.mark.asyncio
    async def test_exact_end_has_no_more(self, service):
        page = await service.get_page("nginx", offset=900, limit=100)
        assert page.next_offset == 1000
        assert page.has_more is False


class CountingFile:
    def __init__(self, count: int) -> None:
        self.count = count
        self.read = 0

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False

    def __iter__(self):
        for i in range(self.count):
            self.read += 1
            yield f"line {i}\n"


class TestReadRange:
    def test_stops_one_line_past_page(self, log_file):
        f = CountingFile(1000)
        with patch("monitor_api.collectors.log_reader.open", return_value=f, create=True):
            lines, has_more = read_range(log_file, 10, 20)
        assert lines == [f"line {i}" for i in range(10, 20)]
        assert has_more is True
        assert f.read == 21

    def test_page_reaching_end(self, log_file):
        lines, has_more = read_range(log_file, 990, 1000)
        assert len(lines) == 10
        assert has_more is False


class TestLimit:
    @pytest.mark.asyncio
    async def test_limit_clamped_to_max(self, service):
        page = await service.get_page("nginx", offset=0, limit=10_000)
        assert page.limit == 300
        assert len(page.lines) == 300

    @pytest.mark.asyncio
    async def test_non_positive_limit_clamped_to_one(self, service):
        page = await service.get_page("nginx", offset=0, limit=0)
        assert page.limit == 1
        assert page.lines == ["line 0"]

    def test_default_never_exceeds_max(self, log_file):
        svc = LogService({"nginx": log_file}, default_limit=500, max_limit=200)
        assert svc.clamp_limit(None) == 200


class TestTail:
    @pytest.mark.asyncio
    async def test_initial_page_is_most_recent(self, service):
        page = await service.get_page("nginx", limit=100)
        assert page.lines[0] == "line 900"
        assert page.lines[-1] == "line 999"
        assert page.offset == 900
        assert page.next_offset == 900
        assert page.has_more is True

    @pytest.mark.asyncio
    async def test_short_source_has_no_older_lines(self, tmp_path):
        path = tmp_path / "short.log"
        path.write_text("a\nb\nc\n")
        svc = LogService({"short": path})
        page = await svc.get_page("short")
        assert page.lines == ["a", "b", "c"]
        assert page.offset == 0
        assert page.has_more is False

    @pytest.mark.asyncio
    async def test_desc_page_ends_before_offset(self, service):
        page = await service.get_page("nginx", offset=900, limit=100, order=LogOrder.DESC)
        assert page.lines[0] == "line 800"
        assert page.lines[-1] == "line 899"
        assert page.offset == 800
        assert page.next_offset == 800
        assert page.has_more is True

    @pytest.mark.asyncio
    async def test_desc_reaches_start(self, service):
        page = await service.get_page("nginx", offset=30, limit=100, order=LogOrder.DESC)
        assert page.lines[0] == "line 0"
        assert len(page.lines) == 30
        assert page.has_more is False

    @pytest.mark.asyncio
    async def test_desc_offset_past_end_is_clipped(self, service):
        page = await service.get_page("nginx", offset=5000, limit=10, order=LogOrder.DESC)
        assert page.lines[-1] == "line 999"
        assert page.offset == 990

    @pytest.mark.asyncio
    async def test_tail_then_desc_walks_back_without_overlap(self, service):
        tail = await service.get_page("nginx", limit=300)
        older = await service.get_page("nginx", offset=tail.next_offset, limit=300, order=LogOrder.DESC)
        assert older.lines[-1] == "line 699"
        assert tail.lines[0] == "line 700"


class TestSources:
    @pytest.mark.asyncio
    async def test_unknown_source(self, service):
        with pytest.raises(UnknownSource) as exc_info:
            await service.get_page("doesnotexist")
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_path_like_source_rejected(self, service):
        with pytest.raises(UnknownSource):
            await service.get_page("../../etc/passwd")

    @pytest.mark.asyncio
    async def test_missing_file_reads_empty(self, service):
        page = await service.get_page("missing")
        assert page.lines == []
        assert page.has_more is False

    @pytest.mark.asyncio
    async def test_unreadable_source(self, service):
        with pytest.raises(LogUnavailable):
            await service.get_page("dir")

    @pytest.mark.asyncio
    async def test_line_content_untouched(self, tmp_path):
        path = tmp_path / "raw.log"
        path.write_text('  leading space\t\n{"json": true}\r\nno newline at end')
        svc = LogService({"raw": path})
        page = await svc.get_page("raw", offset=0)
        assert page.lines == ["  leading space\t", '{"json": true}', "no newline at end"]
