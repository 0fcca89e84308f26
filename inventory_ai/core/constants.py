from pathlib import Path


APP_DIR = Path(__file__).resolve().parents[1]
PROJECT_ROOT = APP_DIR.parent

TEMPLATES_DIR = APP_DIR / "templates"

DEFAULT_DASHBOARD_PATH = "/dashboard"

PRODUCT_ID_PREFIX = "prod"
SALE_ID_PREFIX = "sale"

INVENTORY_BOX = "inventory"
SALE_BOX = "sale"
PROMPT_BOXES = (INVENTORY_BOX, SALE_BOX)

PERSISTENCE_BACKENDS = ("mock", "database")
