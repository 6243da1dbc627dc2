"""
Alert API Endpoints

Endpoints used by the alert workers to check rules against fresh candles,
and by the create-alert screen to validate levels.
"""

import logging

from fastapi import APIRouter

from indicharts.schemas.alerts import (
    AlertCheckRequest,
    AlertCheckResult,
    AlertRuleConfig,
    LevelValidationResponse,
)
from indicharts.services.alerts import get_alert_service
from indicharts.services.signals import validate_levels

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/check", response_model=AlertCheckResult)
async def check_alerts(request: AlertCheckRequest):
    """
    Evaluate alert rules against the latest candles.

    Each item carries its rule, candle history and the state returned by the
    previous check. The response holds the fired triggers and the new state
    to store for every rule; rules that failed are listed under `errors`.
    """
    service = get_alert_service()
    return await service.execute(request)


@router.post("/validate", response_model=LevelValidationResponse)
async def validate_rule_levels(rule: AlertRuleConfig):
    """Check a rule's levels against its indicator's allowed range."""
    problems = validate_levels(rule.indicator, rule.levels, rule.mode)
    if problems:
        logger.debug(f"Rule {rule.id}: invalid levels {rule.levels}: {problems}")
    return LevelValidationResponse(valid=not problems, problems=problems)
