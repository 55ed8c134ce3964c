"""Read-only operational dashboard endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from helpdesk.dependencies import get_gateway
from helpdesk.schemas.admin import AdminOverviewResponse
from helpdesk.services.overview_service import build_overview
from helpdesk.services.persistence_service import PersistenceGateway

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/overview", response_model=AdminOverviewResponse)
async def get_overview(gateway: PersistenceGateway = Depends(get_gateway)):
    """Totals, recent conversations and usage breakdowns."""
    result = await gateway.fetch_overview_data()
    if result.is_skipped:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Database not configured")
    if not result.ok:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to read overview data")
    return build_overview(result.value)
