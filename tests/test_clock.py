"""Tests for clock tick rate and uptime."""

import math

import pytest

from procacct import clock
from procacct.clock import SystemClockInfo, clock_ticks_per_second, parse_uptime
from procacct.errors import ConfigurationError, MalformedRecord, NotFound


@pytest.fixture(autouse=True)
def _clear_tick_cache():
    clock_ticks_per_second.cache_clear()
    yield
    clock_ticks_per_second.cache_clear()


class TestClockTicksPerSecond:
    """Tests for the cached SC_CLK_TCK query."""

    def test_returns_sysconf_value(self, monkeypatch):
        """Test the host value is returned."""
        monkeypatch.setattr(clock.os, "sysconf", lambda name: 250)

        assert clock_ticks_per_second() == 250

    def test_value_is_cached(self, monkeypatch):
        """Test the host is queried only once."""
        calls = []

        def fake_sysconf(name):
            calls.append(name)
            return 100

        monkeypatch.setattr(clock.os, "sysconf", fake_sysconf)

        assert clock_ticks_per_second() == 100
        assert clock_ticks_per_second() == 100
        assert calls == ["SC_CLK_TCK"]

    def test_failure_is_configuration_error(self, monkeypatch):
        """Test a failing query raises ConfigurationError."""

        def broken_sysconf(name):
            raise ValueError("unrecognized configuration name")

        monkeypatch.setattr(clock.os, "sysconf", broken_sysconf)

        with pytest.raises(ConfigurationError):
            clock_ticks_per_second()

    def test_failure_is_not_cached(self, monkeypatch):
        """Test a failed query is retried on the next call."""
        results = iter([OSError(22, "Invalid argument"), 100])

        def flaky_sysconf(name):
            value = next(results)
            if isinstance(value, Exception):
                raise value
            return value

        monkeypatch.setattr(clock.os, "sysconf", flaky_sysconf)

        with pytest.raises(ConfigurationError):
            clock_ticks_per_second()
        assert clock_ticks_per_second() == 100

    def test_non_positive_value(self, monkeypatch):
        """Test a -1 result (unsupported) is a ConfigurationError."""
        monkeypatch.setattr(clock.os, "sysconf", lambda name: -1)

        with pytest.raises(ConfigurationError):
            clock_ticks_per_second()


class TestParseUptime:
    """Tests for parse_uptime."""

    def test_first_field(self):
        """Test only the first field is used."""
        assert parse_uptime("350735.47 234388.90\n") == 350735.47

    def test_empty(self):
        """Test an empty file is malformed."""
        with pytest.raises(MalformedRecord):
            parse_uptime("")

    def test_not_a_number(self):
        """Test a non-numeric field is malformed."""
        with pytest.raises(MalformedRecord):
            parse_uptime("soon 1.0")

    @pytest.mark.parametrize("text", ["nan 0", "inf 0", "-5.0 0"])
    def test_out_of_range(self, text):
        """Test non-finite or negative values are malformed."""
        with pytest.raises(MalformedRecord):
            parse_uptime(text)


class TestSystemClockInfo:
    """Tests for SystemClockInfo."""

    def test_uptime_from_tree(self, proc_tree):
        """Test uptime is read from <root>/uptime."""
        proc_tree.set_uptime(1234.5)

        info = SystemClockInfo(proc_tree.reader())

        assert math.isclose(info.system_uptime_seconds(), 1234.5)

    def test_missing_uptime(self, proc_tree):
        """Test a missing uptime file raises NotFound."""
        (proc_tree.root / "uptime").unlink()

        with pytest.raises(NotFound):
            SystemClockInfo(proc_tree.reader()).system_uptime_seconds()

    def test_garbled_uptime(self, proc_tree):
        """Test garbled uptime is malformed and names the file."""
        proc_tree.write("uptime", "\n")

        with pytest.raises(MalformedRecord) as excinfo:
            SystemClockInfo(proc_tree.reader()).system_uptime_seconds()

        assert excinfo.value.path == proc_tree.root / "uptime"

    def test_tick_override(self, monkeypatch):
        """Test an explicit tick rate bypasses the host query."""
        monkeypatch.setattr(clock.os, "sysconf", lambda name: 100)

        assert SystemClockInfo(ticks_per_second=1000).clock_ticks_per_second() == 1000
        assert SystemClockInfo().clock_ticks_per_second() == 100

    def test_invalid_override(self):
        """Test a non-positive override is rejected."""
        with pytest.raises(ConfigurationError):
            SystemClockInfo(ticks_per_second=0)
