"""Configuration objects and enums for paretosmooth."""

from .enums import SampleSource, LooMethod, ParetoKCategory, PARETO_K_THRESHOLDS
from .base import PsisConfig, make_config

__all__ = [
    "SampleSource",
    "LooMethod",
    "ParetoKCategory",
    "PARETO_K_THRESHOLDS",
    "PsisConfig",
    "make_config",
]
