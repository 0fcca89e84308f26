from inventory_ai.schemas.product import InventoryDelta, InventoryRow, Product, ProductList
from inventory_ai.schemas.prompt import PromptRequest, SubmissionResult
from inventory_ai.schemas.report import ReportRead, ReportTotals
from inventory_ai.schemas.sale import Sale, SaleIntent, SaleList, SaleRow

__all__ = [
    "InventoryDelta",
    "InventoryRow",
    "Product",
    "ProductList",
    "PromptRequest",
    "ReportRead",
    "ReportTotals",
    "Sale",
    "SaleIntent",
    "SaleList",
    "SaleRow",
]
