import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates

from inventory_ai.config import Settings, get_settings
from inventory_ai.core.constants import DEFAULT_DASHBOARD_PATH, TEMPLATES_DIR
from inventory_ai.core.formatting import format_currency, format_promotion
from inventory_ai.core.logging import setup_logging
from inventory_ai.database import Base, engine
from inventory_ai.routers import (
    dashboard_router,
    health_router,
    inventory_router,
    reports_router,
    sales_router,
)
from inventory_ai.services.controller import create_controller

setup_logging()
settings: Settings = get_settings()
logger = logging.getLogger(__name__)


def build_templates() -> Jinja2Templates:
    templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
    templates.env.filters["currency"] = format_currency
    templates.env.filters["promotion"] = format_promotion
    return templates


@asynccontextmanager
async def lifespan(app: FastAPI):
    if not (settings.GEMINI_API_KEY or "").strip():
        logger.warning(
            "GEMINI_API_KEY is not set. AI prompt parsing will fail until a key is configured."
        )
    if settings.PERSISTENCE_BACKEND.strip().lower() == "database":
        import inventory_ai.models  # noqa: F401

        Base.metadata.create_all(bind=engine)
    app.state.controller = await create_controller(settings)
    yield


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
app.state.templates = build_templates()

app.include_router(health_router)
app.include_router(dashboard_router)
app.include_router(inventory_router)
app.include_router(sales_router)
app.include_router(reports_router)


@app.get("/")
def root():
    return RedirectResponse(url=DEFAULT_DASHBOARD_PATH, status_code=302)


__all__ = ["app", "root"]
