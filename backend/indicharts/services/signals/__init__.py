"""
Signal Layer

CONTRACT:
    Input:  indicator values + alert rule levels
    Output: Zone / TriggerEvent

Pure functions. No state is kept between calls.
"""

from indicharts.services.signals.zones import classify, classify_series
from indicharts.services.signals.detector import detect, detect_series
from indicharts.services.signals.levels import validate_levels

__all__ = [
    "classify",
    "classify_series",
    "detect",
    "detect_series",
    "validate_levels",
]
