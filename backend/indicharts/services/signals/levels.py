"""
Alert level validation.

Mirrors the checks the create-alert screen applies before a rule is saved,
so rules arriving through the API obey the same limits.
"""

from typing import Sequence

from indicharts.schemas.alerts import AlertMode
from indicharts.schemas.indicators import IndicatorKind


def validate_levels(
    kind: IndicatorKind,
    levels: Sequence[float],
    mode: AlertMode = AlertMode.CROSS,
) -> list[str]:
    """
    Return the problems with a rule's levels; an empty list means valid.

    Each level must lie in the kind's range (1..99, or -99..-1 for
    Williams %R). With two levels the first must be below the second.
    Enter/exit rules need exactly two levels.
    """
    problems = []
    if not levels:
        problems.append("At least one level is required")
        return problems

    if len(levels) > 2:
        problems.append(f"At most two levels are supported, got {len(levels)}")

    if mode in (AlertMode.ENTER, AlertMode.EXIT) and len(levels) != 2:
        problems.append(f"{mode.value} mode requires a lower and an upper level")

    min_level, max_level = kind.level_range
    for level in levels:
        if not min_level <= level <= max_level:
            problems.append(
                f"Level {level:g} outside {kind.short_name} range "
                f"[{min_level:g}, {max_level:g}]"
            )

    if len(levels) >= 2 and levels[0] >= levels[1]:
        problems.append(f"Lower level {levels[0]:g} must be below upper level {levels[1]:g}")

    return problems
