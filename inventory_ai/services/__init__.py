from inventory_ai.services.controller import InventoryController, create_controller
from inventory_ai.services.gemini_service import GeminiPromptParser
from inventory_ai.services.reconciliation import AppState
from inventory_ai.services.report_service import build_report, compute_totals
from inventory_ai.services.store_service import DatabaseStore, MockStore, build_store

__all__ = [
    "AppState",
    "DatabaseStore",
    "GeminiPromptParser",
    "InventoryController",
    "MockStore",
    "build_report",
    "build_store",
    "compute_totals",
    "create_controller",
]
