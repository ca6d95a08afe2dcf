import logging

import pytest

from depcache.utils.logger import (
    StepNameFilter,
    apply_module_levels,
    parse_module_levels,
    resolve_logger_name,
)


class TestModuleLevels:
    """Tests for per-module log level configuration."""

    def test_parse(self):
        assert parse_module_levels("scan=debug, sync=INFO,bogus") == {"scan": "DEBUG", "sync": "INFO"}
        assert parse_module_levels("") is None
        assert parse_module_levels("novalue") is None

    @pytest.mark.parametrize("name, expected", [
        ("scan", "depcache.scanner"),
        ("npm", "depcache.tools.package_manager"),
        ("engine.sync", "depcache.engine.sync"),
        ("engine.*", "depcache.engine"),
        ("depcache.io.fs", "depcache.io.fs"),
        ("urllib3", "urllib3"),
    ])
    def test_resolve_logger_name(self, name, expected):
        assert resolve_logger_name(name) == expected

    def test_levels_from_environment(self, monkeypatch):
        monkeypatch.setenv("DEPCACHE_LOG_LEVELS", "sync=WARNING,restore=LOUD")
        target = logging.getLogger("depcache.engine.sync")
        untouched = logging.getLogger("depcache.engine.restore")
        previous = target.level, untouched.level
        try:
            apply_module_levels()
            assert target.level == logging.WARNING
            assert untouched.level == previous[1]
        finally:
            target.setLevel(previous[0])


class TestStepNameFilter:
    """Tests for the short step name shown on the console."""

    @pytest.mark.parametrize("logger_name, step", [
        ("depcache.engine.restore", "engine.restore"),
        ("root", "root"),
    ])
    def test_step_name(self, logger_name, step):
        record = logging.LogRecord(logger_name, logging.INFO, __file__, 1, "msg", None, None)
        assert StepNameFilter().filter(record) is True
        assert record.step == step
