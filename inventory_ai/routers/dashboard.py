from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from inventory_ai.config import get_settings
from inventory_ai.core.constants import INVENTORY_BOX, SALE_BOX
from inventory_ai.dependencies import get_controller
from inventory_ai.services.controller import InventoryController
from inventory_ai.services.report_service import build_report

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("", response_class=HTMLResponse)
def dashboard_page(request: Request, controller: InventoryController = Depends(get_controller)):
    settings = get_settings()
    templates = request.app.state.templates
    report = build_report(controller.state, limit=settings.RECENT_SALES_LIMIT)
    return templates.TemplateResponse(
        request,
        "dashboard.html",
        {
            "app_name": settings.APP_NAME,
            "report": report,
            "ai_configured": controller.parser.configured,
            "inventory_busy": controller.is_busy(INVENTORY_BOX),
            "sale_busy": controller.is_busy(SALE_BOX),
        },
    )


__all__ = ["router"]
