"""
Alert Check Service

CONTRACT:
    Input:  AlertCheckRequest (rules + candles + carried AlertState)
    Output: AlertCheckResult (trigger events + new AlertState per rule)

RESPONSIBILITIES:
    - Compute each rule's indicator through the Indicator Engine
    - Detect crosses and zone transitions on the latest step
    - Apply per-rule cooldowns before handing triggers to notifications
"""

from indicharts.services.alerts.evaluator import AlertEvaluator, cooldown_elapsed
from indicharts.services.alerts.service import AlertService, get_alert_service

__all__ = [
    "AlertEvaluator",
    "AlertService",
    "cooldown_elapsed",
    "get_alert_service",
]
