"""
Alert Check Service

Evaluates a batch of alert rules concurrently. Each rule owns its candle
snapshot and state, so evaluations share nothing and need no locking.
"""

import asyncio
import logging
from typing import Optional

from indicharts.services.base import BaseService
from indicharts.schemas.alerts import AlertCheckRequest, AlertCheckResult, RuleError
from indicharts.services.alerts.evaluator import AlertEvaluator, now_ms

logger = logging.getLogger(__name__)


class AlertService(BaseService[AlertCheckRequest, AlertCheckResult]):
    """
    Alert Check Service Contract.

    INPUT: AlertCheckRequest
        - items: (rule, candles, state) triples
        - now_ms: evaluation time used for cooldowns

    OUTPUT: AlertCheckResult
        - evaluations: triggers and new state per rule
        - errors: one RuleError (request index, rule id, message) per failed rule

    A failing rule is reported in `errors` and never aborts the batch.
    """

    def __init__(self, evaluator: Optional[AlertEvaluator] = None):
        self._evaluator = evaluator or AlertEvaluator()

    @property
    def name(self) -> str:
        return "AlertService"

    async def execute(self, input_data: AlertCheckRequest) -> AlertCheckResult:
        """Evaluate every rule in the request."""
        at_ms = input_data.now_ms if input_data.now_ms is not None else now_ms()

        results = await asyncio.gather(
            *(
                asyncio.to_thread(
                    self._evaluator.evaluate, item.rule, item.candles, item.state, at_ms
                )
                for item in input_data.items
            ),
            return_exceptions=True,
        )

        output = AlertCheckResult()
        for index, (item, result) in enumerate(zip(input_data.items, results)):
            if isinstance(result, Exception):
                logger.error(f"Error checking rule {item.rule.id} (item {index}): {result}")
                output.errors.append(
                    RuleError(index=index, rule_id=item.rule.id, message=str(result))
                )
            else:
                output.evaluations.append(result)

        logger.info(
            f"Checked {len(input_data.items)} rule(s): "
            f"{len(output.triggers)} trigger(s), {len(output.errors)} error(s)"
        )
        return output

    async def health_check(self) -> bool:
        """Alert service is always healthy (pure computation)."""
        return True


# Singleton instance
_service_instance: Optional[AlertService] = None


def get_alert_service() -> AlertService:
    """Get or create alert service instance."""
    global _service_instance
    if _service_instance is None:
        _service_instance = AlertService()
    return _service_instance
