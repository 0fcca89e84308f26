from inventory_ai.routers.dashboard import router as dashboard_router
from inventory_ai.routers.health import router as health_router
from inventory_ai.routers.inventory import router as inventory_router
from inventory_ai.routers.reports import router as reports_router
from inventory_ai.routers.sales import router as sales_router

__all__ = [
    "dashboard_router",
    "health_router",
    "inventory_router",
    "reports_router",
    "sales_router",
]
