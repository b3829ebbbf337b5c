"""
tests/test_support.py
=====================
Canonical keys, the manual scheduler, unit conversions, settings and logging.
"""

import dataclasses
import logging

import pytest

from dcdesign.cache import ResultCache, canonical_key
from dcdesign.logging_config import set_log_level, setup_logging
from dcdesign.scheduler import ManualScheduler
from dcdesign.settings import Settings, load_settings
from dcdesign.units import btu_to_kw, c_to_f, f_to_c, ft_to_m, gpm_to_lps, kw_to_btu, lps_to_gpm, m_to_ft


# ---------------------------------------------------------------------------
# Canonical keys and the result cache
# ---------------------------------------------------------------------------

class TestCanonicalKey:

    def test_key_order_does_not_matter(self):
        assert canonical_key({"b": 1, "a": 2}) == canonical_key({"a": 2, "b": 1})

    def test_tuples_and_lists_serialise_alike(self):
        assert canonical_key({"p": (1.0, 2.0)}) == canonical_key({"p": [1.0, 2.0]})

    def test_equal_dataclasses_share_key(self, power_params):
        assert canonical_key(power_params) == canonical_key(dataclasses.replace(power_params))
        assert canonical_key(power_params) != canonical_key(dataclasses.replace(power_params, distance=51.0))

    def test_integers_and_equal_floats_share_key(self, power_params):
        assert canonical_key({"p": (1, 2, 3)}) == canonical_key({"p": (1.0, 2.0, 3.0)})
        as_ints = dataclasses.replace(power_params, voltage=400, current=1000, distance=50)
        assert as_ints == power_params
        assert canonical_key(as_ints) == canonical_key(power_params)

    def test_booleans_are_not_numbers(self):
        assert canonical_key({"selected": True}) == '{"selected":true}'
        assert canonical_key({"selected": True}) != canonical_key({"selected": 1})

    def test_settings_defaults_serialise(self):
        assert '"history_limit":50.0' in canonical_key(Settings())

    def test_cache_counts_hits_and_misses(self):
        cache = ResultCache()
        assert cache.get("k") is None
        cache.put("k", 42)
        assert cache.get("k") == 42
        assert (cache.hits, cache.misses) == (1, 1)
        assert "k" in cache
        cache.clear()
        assert len(cache) == 0


# ---------------------------------------------------------------------------
# Manual scheduler
# ---------------------------------------------------------------------------

class TestManualScheduler:

    def test_runs_due_tasks_in_order(self):
        scheduler = ManualScheduler()
        calls = []
        scheduler.call_later(2.0, lambda: calls.append("b"))
        scheduler.call_later(1.0, lambda: calls.append("a"))
        scheduler.call_later(2.0, lambda: calls.append("c"))

        assert scheduler.advance(2.0) == 3
        assert calls == ["a", "b", "c"]
        assert scheduler.now() == 2.0

    def test_cancelled_task_never_runs(self):
        scheduler = ManualScheduler()
        calls = []
        task = scheduler.call_later(1.0, lambda: calls.append("x"))
        task.cancel()
        assert scheduler.advance(5.0) == 0
        assert scheduler.pending == 0

    def test_task_scheduled_by_callback_runs_if_due(self):
        scheduler = ManualScheduler()
        calls = []

        def first():
            calls.append("first")
            scheduler.call_later(1.0, lambda: calls.append("second"))

        scheduler.call_later(1.0, first)
        scheduler.advance(2.0)
        assert calls == ["first", "second"]

    @pytest.mark.parametrize("method,arg", [("advance", -1.0), ("call_later", -1.0)])
    def test_negative_time_rejected(self, method, arg):
        scheduler = ManualScheduler()
        with pytest.raises(ValueError):
            if method == "advance":
                scheduler.advance(arg)
            else:
                scheduler.call_later(arg, lambda: None)


# ---------------------------------------------------------------------------
# Units
# ---------------------------------------------------------------------------

class TestUnits:

    def test_temperature(self):
        assert c_to_f(100.0) == pytest.approx(212.0)
        assert f_to_c(c_to_f(22.0)) == pytest.approx(22.0)

    def test_heat(self):
        assert kw_to_btu(1.0) == pytest.approx(3412.142)
        assert btu_to_kw(kw_to_btu(250.0)) == pytest.approx(250.0)

    def test_length_and_flow(self):
        assert m_to_ft(1.0) == pytest.approx(3.28084)
        assert ft_to_m(m_to_ft(45.0)) == pytest.approx(45.0)
        assert gpm_to_lps(lps_to_gpm(12.0)) == pytest.approx(12.0)


# ---------------------------------------------------------------------------
# Settings and logging
# ---------------------------------------------------------------------------

class TestSettings:

    def test_defaults(self, monkeypatch):
        for name in ("DCDESIGN_AUTOSAVE_DELAY_S", "DCDESIGN_HISTORY_LIMIT", "DCDESIGN_LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)
        settings = load_settings()
        assert settings.autosave_delay_s == 2.0
        assert settings.history_limit == 50
        assert settings.log_level == "INFO"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("DCDESIGN_AUTOSAVE_DELAY_S", "0.5")
        monkeypatch.setenv("DCDESIGN_HISTORY_LIMIT", "10")
        settings = load_settings()
        assert settings.autosave_delay_s == 0.5
        assert settings.history_limit == 10

    def test_bad_number_rejected(self, monkeypatch):
        monkeypatch.setenv("DCDESIGN_HISTORY_LIMIT", "many")
        with pytest.raises(ValueError, match="DCDESIGN_HISTORY_LIMIT"):
            load_settings()


class TestLogging:

    @pytest.fixture(autouse=True)
    def restore_root_logger(self):
        root = logging.getLogger()
        handlers, level = list(root.handlers), root.level
        yield
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_console_and_rotating_file(self, tmp_path):
        root = setup_logging("DEBUG", log_dir=str(tmp_path))
        kinds = {type(h).__name__ for h in root.handlers}
        assert kinds == {"StreamHandler", "RotatingFileHandler"}
        assert len(list(tmp_path.glob("dcdesign_*.log"))) == 1

    def test_console_only(self):
        root = setup_logging("WARNING", log_dir=None)
        assert [type(h).__name__ for h in root.handlers] == ["StreamHandler"]
        assert root.level == logging.WARNING

    def test_unknown_level_rejected(self):
        with pytest.raises(ValueError, match="Unknown log level"):
            setup_logging("CHATTY", log_dir=None)

    def test_set_log_level(self):
        setup_logging("INFO", log_dir=None)
        set_log_level("ERROR")
        assert logging.getLogger().level == logging.ERROR
