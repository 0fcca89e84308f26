"""Pure state transitions for inventory deltas and sale intents.

Every function here takes an ``AppState`` and returns a new one; the input is
never mutated. Callers own the swap.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional, Sequence

from inventory_ai.core.constants import PRODUCT_ID_PREFIX, SALE_ID_PREFIX
from inventory_ai.core.errors import InsufficientStock, ProductNotFound
from inventory_ai.schemas.product import InventoryDelta, Product
from inventory_ai.schemas.sale import Sale, SaleIntent


@dataclass(frozen=True)
class AppState:
    products: tuple[Product, ...] = field(default_factory=tuple)
    sales: tuple[Sale, ...] = field(default_factory=tuple)

    def product_map(self) -> dict[str, Product]:
        return {product.id: product for product in self.products}


def new_id(prefix: str) -> str:
    return "{}-{}".format(prefix, uuid.uuid4().hex[:12])


def new_product_id() -> str:
    return new_id(PRODUCT_ID_PREFIX)


def new_sale_id() -> str:
    return new_id(SALE_ID_PREFIX)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _name_key(name: str) -> str:
    return name.strip().casefold()


def find_product(products: Iterable[Product], name: str) -> Optional[Product]:
    key = _name_key(name)
    for product in products:
        if _name_key(product.name) == key:
            return product
    return None


def _replace_product(products: Sequence[Product], updated: Product) -> tuple[Product, ...]:
    return tuple(updated if product.id == updated.id else product for product in products)


def merge_inventory_delta(state: AppState, delta: InventoryDelta, product_id: str) -> AppState:
    """Add stock to a matching product or insert a new one.

    A match adds ``delta.stock`` to the existing stock and overwrites cost,
    price and promotion. ``product_id`` is only used when no product matches.
    """
    existing = find_product(state.products, delta.name)
    if existing is not None:
        updated = existing.model_copy(
            update={
                "stock": existing.stock + delta.stock,
                "cost": delta.cost,
                "price": delta.price,
                "promotion": delta.promotion,
            }
        )
        return AppState(products=_replace_product(state.products, updated), sales=state.sales)

    created = Product(
        id=product_id,
        name=delta.name,
        cost=delta.cost,
        price=delta.price,
        stock=delta.stock,
        promotion=delta.promotion,
    )
    return AppState(products=state.products + (created,), sales=state.sales)


def merge_inventory(
    state: AppState,
    deltas: Iterable[InventoryDelta],
    id_factory: Callable[[], str] = new_product_id,
) -> AppState:
    for delta in deltas:
        state = merge_inventory_delta(state, delta, id_factory())
    return state


def check_sale(state: AppState, intent: SaleIntent) -> Product:
    product = find_product(state.products, intent.product_name)
    if product is None:
        raise ProductNotFound(intent.product_name)
    if product.stock < intent.quantity:
        raise InsufficientStock(product.name, product.stock, intent.quantity)
    return product


def apply_sale(
    state: AppState,
    intent: SaleIntent,
    sale_id: str,
    sold_at: datetime,
) -> AppState:
    """Draw down stock and append a sale priced from the product as it is now."""
    product = check_sale(state, intent)
    sale = Sale(
        id=sale_id,
        product_id=product.id,
        quantity=intent.quantity,
        sale_date=sold_at,
        price_per_unit=product.price,
        promotion_applied=product.promotion,
        product_name=product.name,
    )
    updated = product.model_copy(update={"stock": product.stock - intent.quantity})
    return AppState(
        products=_replace_product(state.products, updated),
        sales=state.sales + (sale,),
    )


def apply_sales(
    state: AppState,
    intents: Iterable[SaleIntent],
    id_factory: Callable[[], str] = new_sale_id,
    clock: Callable[[], datetime] = utc_now,
) -> AppState:
    for intent in intents:
        state = apply_sale(state, intent, id_factory(), clock())
    return state


def append_sales(state: AppState, sales: Iterable[Sale]) -> AppState:
    """Append already-priced sales, drawing stock down by product id."""
    products = state.product_map()
    recorded = []
    for sale in sales:
        product = products.get(sale.product_id)
        if product is None:
            raise ProductNotFound(sale.product_name or sale.product_id)
        if product.stock < sale.quantity:
            raise InsufficientStock(product.name, product.stock, sale.quantity)
        products[product.id] = product.model_copy(update={"stock": product.stock - sale.quantity})
        recorded.append(sale)
    return AppState(
        products=tuple(products[product.id] for product in state.products),
        sales=state.sales + tuple(recorded),
    )


def fold_inventory(deltas: Iterable[InventoryDelta]) -> tuple[Product, ...]:
    return merge_inventory(AppState(), deltas).products


__all__ = [
    "AppState",
    "append_sales",
    "apply_sale",
    "apply_sales",
    "check_sale",
    "find_product",
    "fold_inventory",
    "merge_inventory",
    "merge_inventory_delta",
    "new_product_id",
    "new_sale_id",
    "utc_now",
]
