"""
snapcore/display.py
-------------------
Console tables for the example scripts: a run banner, phase breaks,
and one fixed-width row per logged step or sweep point.
"""
import time
import numpy as np

COLUMN_WIDTH = 12


def format_cell(val, width=COLUMN_WIDTH):
    """
    Right-aligns one table value. Integers print as-is, floats switch to
    scientific notation outside [1e-2, 1e5).
    """
    if isinstance(val, (int, np.integer)):
        text = f"{val:d}"
    elif isinstance(val, (float, np.floating)):
        mag = abs(val)
        if mag == 0:
            text = "0.0000"
        elif mag < 1e-2 or mag >= 1e5:
            text = f"{val:.2e}"
        else:
            text = f"{val:.4f}"
    else:
        text = str(val)
    return text.rjust(width)


class SimulationDisplay:
    def __init__(self, title, context_info, stream=None):
        """
        Args:
            title (str): Run name (e.g. "Radiator Sweep")
            context_info (str): Run settings (e.g. "Grid 200x100 | dt=0.0167")
            stream (file-like, optional): Target for all output. Defaults to stdout.
        """
        self.title = title
        self.context = context_info
        self.stream = stream
        self.start_time = time.time()
        self.widths = []

    def _print(self, text=""):
        print(text, file=self.stream)

    def header(self):
        rule = "-" * 70
        self._print(rule)
        self._print(f"SnapFlow :: {self.title}")
        self._print(f"Config   :: {self.context}")
        self._print(rule + "\n")

    def section(self, name):
        self._print(f"--- {name} ---")

    def setup_stats_columns(self, headers, widths=None):
        """ Fixes the column layout and prints the table head. """
        self.widths = list(widths) if widths is not None else [COLUMN_WIDTH] * len(headers)

        head = "  ".join(h.rjust(w) for h, w in zip(headers, self.widths))
        self._print("")
        self._print(head)
        self._print("-" * len(head))

    def format_row(self, *values):
        if len(values) != len(self.widths):
            raise ValueError(f"Expected {len(self.widths)} values, got {len(values)}: {values}")
        return "  ".join(format_cell(v, w) for v, w in zip(values, self.widths))

    def log_stats(self, *values):
        self._print(self.format_row(*values))

    def success(self, message="Simulation Complete"):
        """ Footer with wall time since construction. """
        elapsed = time.time() - self.start_time
        self._print(f"\n>> {message} ({elapsed:.2f}s)\n")
