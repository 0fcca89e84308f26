from typing import Iterable, Mapping, Optional, Sequence

from inventory_ai.schemas.product import InventoryRow, Product
from inventory_ai.schemas.report import ReportRead, ReportTotals
from inventory_ai.schemas.sale import Sale, SaleRow
from inventory_ai.services.reconciliation import AppState

UNKNOWN_PRODUCT = "Unknown"


def _product_map(products: Iterable[Product]) -> dict[str, Product]:
    return {product.id: product for product in products}


def compute_totals(products: Iterable[Product], sales: Iterable[Sale]) -> ReportTotals:
    # Sales whose product no longer resolves are left out of both sums.
    product_map = _product_map(products)
    revenue = 0.0
    cost = 0.0
    for sale in sales:
        product = product_map.get(sale.product_id)
        if product is None:
            continue
        revenue += sale.total
        cost += product.cost * sale.quantity
    return ReportTotals(revenue=revenue, cost=cost, profit=revenue - cost)


def inventory_rows(products: Iterable[Product]) -> list[InventoryRow]:
    return [
        InventoryRow(
            id=product.id,
            name=product.name,
            stock=product.stock,
            cost=product.cost,
            price=product.price,
            promotion=product.promotion,
        )
        for product in products
    ]


def recent_sales(
    sales: Sequence[Sale],
    product_map: Mapping[str, Product],
    limit: Optional[int] = None,
) -> list[SaleRow]:
    rows = []
    for sale in reversed(sales):
        if limit is not None and len(rows) >= limit:
            break
        product = product_map.get(sale.product_id)
        rows.append(
            SaleRow(
                id=sale.id,
                product_name=product.name if product is not None else UNKNOWN_PRODUCT,
                quantity=sale.quantity,
                total_sale=sale.total,
                sale_date=sale.sale_date,
            )
        )
    return rows


def build_report(state: AppState, limit: Optional[int] = None) -> ReportRead:
    return ReportRead(
        totals=compute_totals(state.products, state.sales),
        inventory=inventory_rows(state.products),
        recent_sales=recent_sales(state.sales, state.product_map(), limit=limit),
    )


__all__ = ["build_report", "compute_totals", "inventory_rows", "recent_sales"]
