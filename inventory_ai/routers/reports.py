from typing import Optional

from fastapi import APIRouter, Depends, Query

from inventory_ai.dependencies import get_controller
from inventory_ai.schemas.report import ReportRead
from inventory_ai.services.controller import InventoryController
from inventory_ai.services.report_service import build_report

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/summary", response_model=ReportRead)
def report_summary(
    limit: Optional[int] = Query(None, ge=1, le=2000, description="Max recent sales to return"),
    controller: InventoryController = Depends(get_controller),
):
    return build_report(controller.state, limit=limit)


__all__ = ["router"]
