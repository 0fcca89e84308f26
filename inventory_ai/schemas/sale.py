from datetime import datetime
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class SaleIntent(BaseModel):
    product_name: str = Field(
        min_length=1,
        validation_alias=AliasChoices("productName", "product_name"),
    )
    quantity: int = Field(gt=0)

    model_config = ConfigDict(populate_by_name=True)


class Sale(BaseModel):
    id: str
    product_id: str
    quantity: int = Field(gt=0)
    sale_date: datetime
    price_per_unit: float
    promotion_applied: float
    product_name: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @property
    def unit_price(self) -> float:
        return self.price_per_unit * (1 - self.promotion_applied)

    @property
    def total(self) -> float:
        return self.unit_price * self.quantity


class SaleRow(BaseModel):
    id: str
    product_name: str
    quantity: int
    total_sale: float
    sale_date: datetime


class SaleList(BaseModel):
    sales: List[Sale] = Field(default_factory=list)
