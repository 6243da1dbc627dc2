"""
Zone classification of indicator values against configured levels.
"""

from typing import Sequence

from indicharts.schemas.indicators import IndicatorPoint, Zone

# Upper bound assumed when only a lower level is configured
DEFAULT_UPPER_LEVEL = 100.0


def classify(value: float, levels: Sequence[float]) -> Zone:
    """
    Classify a value as below / between / above the configured levels.

    No levels -> BETWEEN. levels[0] is the lower level, levels[1] the upper
    one (100 when absent). Both bounds count as BETWEEN.
    """
    if not levels:
        return Zone.BETWEEN

    lower_level = levels[0]
    upper_level = levels[1] if len(levels) > 1 else DEFAULT_UPPER_LEVEL

    if value < lower_level:
        return Zone.BELOW
    if value > upper_level:
        return Zone.ABOVE
    return Zone.BETWEEN


def classify_series(points: Sequence[IndicatorPoint], levels: Sequence[float]) -> list[Zone]:
    return [classify(p.value, levels) for p in points]
