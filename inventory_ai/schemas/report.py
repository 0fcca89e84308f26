from typing import List

from pydantic import BaseModel, ConfigDict, Field

from inventory_ai.schemas.product import InventoryRow
from inventory_ai.schemas.sale import SaleRow


class ReportTotals(BaseModel):
    revenue: float = 0.0
    cost: float = 0.0
    profit: float = 0.0

    model_config = ConfigDict(frozen=True)


class ReportRead(BaseModel):
    totals: ReportTotals
    inventory: List[InventoryRow] = Field(default_factory=list)
    recent_sales: List[SaleRow] = Field(default_factory=list)
