from typing import List, Literal

from pydantic import BaseModel, Field

from inventory_ai.schemas.product import Product
from inventory_ai.schemas.sale import Sale


class PromptRequest(BaseModel):
    prompt: str = Field(max_length=4000)


class SubmissionResult(BaseModel):
    message: str
    type: Literal["success", "error"] = "success"
    products: List[Product] = Field(default_factory=list)
    sales: List[Sale] = Field(default_factory=list)
