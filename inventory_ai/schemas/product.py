from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProductBase(BaseModel):
    name: str = Field(min_length=1)
    cost: float = Field(ge=0)
    price: float = Field(ge=0)
    promotion: float = Field(default=0.0, ge=0, lt=1)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value

    @field_validator("promotion", mode="before")
    @classmethod
    def _default_promotion(cls, value):
        if value is None:
            return 0.0
        return value


class InventoryDelta(ProductBase):
    """One parsed inventory change: units to add plus the latest cost/price/promotion."""

    stock: int = Field(ge=0)
    # Filled in once the delta is matched to a product.
    product_id: Optional[str] = None


class Product(ProductBase):
    id: str
    stock: int = Field(ge=0)

    model_config = ConfigDict(frozen=True)


class InventoryRow(BaseModel):
    id: str
    name: str
    stock: int
    cost: float
    price: float
    promotion: float


class ProductList(BaseModel):
    products: List[Product] = Field(default_factory=list)
