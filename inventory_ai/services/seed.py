from datetime import datetime, timezone
from typing import Optional

from inventory_ai.schemas.product import Product
from inventory_ai.schemas.sale import Sale
from inventory_ai.services.reconciliation import AppState


def demo_state(now: Optional[datetime] = None) -> AppState:
    """Starter catalog shown on a fresh dashboard."""
    if now is None:
        now = datetime.now(timezone.utc)

    products = (
        Product(id="prod-1", name="Classic T-Shirt", cost=7.50, price=24.99, stock=100, promotion=0),
        Product(id="prod-2", name="Denim Jeans", cost=22.00, price=79.99, stock=50, promotion=0.1),
        Product(id="prod-3", name="Leather Belt", cost=5.00, price=19.99, stock=75, promotion=0),
    )
    sales = (
        Sale(
            id="sale-1",
            product_id="prod-2",
            quantity=2,
            sale_date=now,
            price_per_unit=79.99,
            promotion_applied=0.1,
            product_name="Denim Jeans",
        ),
        Sale(
            id="sale-2",
            product_id="prod-1",
            quantity=5,
            sale_date=now,
            price_per_unit=24.99,
            promotion_applied=0,
            product_name="Classic T-Shirt",
        ),
    )
    return AppState(products=products, sales=sales)


__all__ = ["demo_state"]
