"""
API v1 Router

All API endpoints for the mobile app and alert workers.
"""

from fastapi import APIRouter

from indicharts.api.v1.endpoints import indicators, alerts

router = APIRouter()

# Include all endpoint routers
router.include_router(indicators.router, prefix="/indicators", tags=["Indicators"])
router.include_router(alerts.router, prefix="/alerts", tags=["Alerts"])
