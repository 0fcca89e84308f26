from fastapi import APIRouter, Depends, HTTPException

from inventory_ai.core.errors import InventoryError
from inventory_ai.dependencies import get_controller
from inventory_ai.schemas.prompt import PromptRequest, SubmissionResult
from inventory_ai.schemas.sale import SaleList
from inventory_ai.services.controller import InventoryController

router = APIRouter(prefix="/sales", tags=["Sales"])


@router.get("", response_model=SaleList)
def list_sales(controller: InventoryController = Depends(get_controller)):
    return SaleList(sales=list(controller.state.sales))


@router.post("/prompt", response_model=SubmissionResult)
async def submit_sale_prompt(
    payload: PromptRequest,
    controller: InventoryController = Depends(get_controller),
):
    try:
        return await controller.submit_sale_prompt(payload.prompt)
    except InventoryError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message) from exc


__all__ = ["router"]
