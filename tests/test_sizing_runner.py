"""
tests/test_sizing_runner.py
===========================
Smoke test of the sample hall run, with a non-interactive matplotlib backend.
"""

import asyncio

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import pytest  # noqa: E402

import sizing_runner  # noqa: E402
from dcdesign.calculation_service import CalculationService  # noqa: E402


@pytest.fixture
def outputs():
    return asyncio.run(sizing_runner.run_calculations(CalculationService()))


def test_sample_hall_links(outputs):
    report, links = outputs
    assert len(links) == len(sizing_runner.CONNECTIONS)
    assert report.cooling.required_capacity == pytest.approx(1200.0)
    assert links[2].is_valid


def test_console_summary_lists_sections(outputs, capsys):
    sizing_runner.print_console_summary(*outputs)
    text = capsys.readouterr().out
    for heading in ("POWER DISTRIBUTION", "COOLING", "ECONOMICS", "CONNECTIONS"):
        assert heading in text


def test_plot_written(outputs, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(plt, "show", lambda: None)
    sizing_runner.plot_economics(outputs[0])
    plt.close("all")
    assert (tmp_path / sizing_runner.PLOT_OUTPUT_FILE).exists()
