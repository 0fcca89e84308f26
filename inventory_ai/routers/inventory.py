from fastapi import APIRouter, Depends, HTTPException

from inventory_ai.core.errors import InventoryError
from inventory_ai.dependencies import get_controller
from inventory_ai.schemas.product import ProductList
from inventory_ai.schemas.prompt import PromptRequest, SubmissionResult
from inventory_ai.services.controller import InventoryController

router = APIRouter(prefix="/inventory", tags=["Inventory"])


@router.get("", response_model=ProductList)
def list_inventory(controller: InventoryController = Depends(get_controller)):
    return ProductList(products=list(controller.state.products))


@router.post("/prompt", response_model=SubmissionResult)
async def submit_inventory_prompt(
    payload: PromptRequest,
    controller: InventoryController = Depends(get_controller),
):
    try:
        return await controller.submit_inventory_prompt(payload.prompt)
    except InventoryError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message) from exc


__all__ = ["router"]
