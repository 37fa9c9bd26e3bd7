"""
Tests for the shared console display and logging setup.
"""

import io
import logging

import numpy as np
import pytest

import snapcore
from snapcore import SimulationDisplay, setup_logging
from snapcore.display import format_cell


class TestDisplay:

    def test_header(self):
        out = io.StringIO()
        disp = SimulationDisplay("Radiator Sweep", "Grid 80x40", stream=out)
        disp.header()
        text = out.getvalue()
        assert "SnapFlow :: Radiator Sweep" in text
        assert "Config   :: Grid 80x40" in text

    def test_rows(self):
        out = io.StringIO()
        disp = SimulationDisplay("t", "c", stream=out)
        disp.setup_stats_columns(["Step", "Iters", "MaxDiv"], widths=[6, 6, 10])

        row = disp.format_row(np.int64(12), 40, 3.2e-7)
        assert row.split() == ["12", "40", "3.20e-07"]
        assert disp.format_row(1, 2, 0.0).split()[-1] == "0.0000"
        assert disp.format_row(1, 2, 1.5).split()[-1] == "1.5000"

        disp.log_stats(1, 2, 1.5)
        assert out.getvalue().rstrip().endswith("1.5000")

    def test_row_width_mismatch(self):
        disp = SimulationDisplay("t", "c", stream=io.StringIO())
        disp.setup_stats_columns(["A", "B"])
        with pytest.raises(ValueError):
            disp.format_row(1, 2, 3)

    def test_footer_line(self):
        out = io.StringIO()
        disp = SimulationDisplay("t", "c", stream=out)
        disp.success("Done")
        assert ">> Done (" in out.getvalue()

    def test_cell_formatting(self):
        assert format_cell(np.int64(7), 4) == "   7"
        assert format_cell(2.5e6) == "2.50e+06".rjust(12)
        assert format_cell("n/a", 5) == "  n/a"


class TestLogging:

    def test_console_and_file(self, tmp_path):
        log_file = tmp_path / "run.log"
        logger = setup_logging(logging.DEBUG, log_file=str(log_file),
                               namespace="snapflow_test_logging")
        try:
            assert logger.level == logging.DEBUG
            assert len(logger.handlers) == 2
            logger.info("sweep started")
            for h in logger.handlers:
                h.flush()
            assert "sweep started" in log_file.read_text(encoding="utf-8")
        finally:
            for h in list(logger.handlers):
                h.close()
                logger.removeHandler(h)

    def test_repeat_setup_does_not_duplicate(self):
        name = "snapflow_test_repeat"
        setup_logging(namespace=name)
        logger = setup_logging(namespace=name)
        try:
            assert len(logger.handlers) == 1
        finally:
            logger.handlers.clear()


def test_version():
    assert snapcore.__version__.count(".") == 2
