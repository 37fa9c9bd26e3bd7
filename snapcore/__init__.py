''' snapcore: Shared utilities for the Snap Suite of Tools.

Console display and logging setup used by the solver packages and
their example scripts. Versioning follows Major.Minor.Patch:
a new scene preset or obstacle shape bumps Minor, an API change bumps Major.
'''
from .display import SimulationDisplay
from .logging_config import setup_logging

__version__ = "0.7.0"
