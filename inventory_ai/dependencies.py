from fastapi import HTTPException, Request

from inventory_ai.services.controller import InventoryController


def get_controller(request: Request) -> InventoryController:
    controller = getattr(request.app.state, "controller", None)
    if controller is None:
        raise HTTPException(status_code=503, detail="Application is still starting.")
    return controller


__all__ = ["get_controller"]
