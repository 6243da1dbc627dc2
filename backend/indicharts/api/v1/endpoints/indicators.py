"""
Indicator API Endpoints

Endpoints for indicator history (charts, widgets) and live single-candle
updates.
"""

import logging

from fastapi import APIRouter, HTTPException

from indicharts.schemas.indicators import (
    ComputeStatus,
    IndicatorHistoryResponse,
    IndicatorKind,
    IndicatorKindInfo,
    IndicatorRequest,
    IncrementalRequest,
    IncrementalResult,
)
from indicharts.services.base import ValidationError
from indicharts.services.indicators import get_indicator_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/kinds", response_model=list[IndicatorKindInfo])
async def list_indicator_kinds():
    """Indicator kinds with their default period, levels and level range."""
    return [
        IndicatorKindInfo(
            kind=kind,
            short_name=kind.short_name,
            display_name=kind.display_name,
            default_period=kind.default_period,
            default_levels=kind.default_levels,
            preset_params=kind.preset_params,
            level_range=kind.level_range,
            supports_incremental=kind.supports_incremental,
        )
        for kind in IndicatorKind
    ]


@router.post("/history", response_model=IndicatorHistoryResponse)
async def get_indicator_history(request: IndicatorRequest):
    """
    Full indicator history for a candle series.

    Returns:
        - series: one point per candle from the first computable index
          (status "insufficient_data" with no points for short histories)
        - zones: below / between / above for every point
        - sparkline: most recent values for the home-screen widget
    """
    service = get_indicator_service()
    try:
        return await service.execute(request)
    except ValidationError as e:
        logger.info(f"Rejected indicator request: {e}")
        raise HTTPException(status_code=400, detail=e.to_dict())


@router.post("/incremental", response_model=IncrementalResult)
async def update_indicator(request: IncrementalRequest):
    """
    Advance an indicator by one candle from carried state.

    Only RSI supports this; other kinds answer 422 and must be recomputed
    through /history.
    """
    service = get_indicator_service()
    try:
        result = service.compute_incremental(
            request.current_close,
            request.previous_close,
            request.state,
            request.kind,
            period=request.period,
            timestamp=request.timestamp,
            extra_params=request.params,
        )
    except ValidationError as e:
        logger.info(f"Rejected incremental request: {e}")
        raise HTTPException(status_code=400, detail=e.to_dict())

    if result.status == ComputeStatus.UNSUPPORTED:
        raise HTTPException(
            status_code=422,
            detail=f"{request.kind.short_name} cannot be updated incrementally; use /history",
        )
    return result
