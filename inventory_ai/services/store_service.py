"""Persistence adapters that commit parsed records before local state changes."""

import asyncio
import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import timezone
from typing import Optional, Union

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from inventory_ai.config import Settings
from inventory_ai.core.constants import PERSISTENCE_BACKENDS
from inventory_ai.models.commit_log import InventoryCommit, SaleCommit
from inventory_ai.schemas.product import InventoryDelta, Product
from inventory_ai.schemas.sale import Sale, SaleIntent
from inventory_ai.services.reconciliation import AppState, find_product, merge_inventory

logger = logging.getLogger(__name__)

CommitRecord = Union[InventoryDelta, SaleIntent, Sale]
SaleRecord = Union[SaleIntent, Sale]


@dataclass(frozen=True)
class CommitResult:
    ok: bool
    request_id: str
    detail: str = ""


def new_request_id() -> str:
    return uuid.uuid4().hex


class InventoryStore(ABC):
    """Capability interface: ``commit(record) -> CommitResult``."""

    async def commit(self, record: CommitRecord, request_id: Optional[str] = None) -> CommitResult:
        request_id = request_id or new_request_id()
        if isinstance(record, InventoryDelta):
            return await self._commit_inventory(record, request_id)
        if isinstance(record, (SaleIntent, Sale)):
            return await self._commit_sale(record, request_id)
        raise TypeError("Unsupported record type: {}".format(type(record).__name__))

    async def add_inventory_item(self, item: InventoryDelta, request_id: Optional[str] = None) -> bool:
        return (await self.commit(item, request_id)).ok

    async def record_sale(self, sale: SaleRecord, request_id: Optional[str] = None) -> bool:
        return (await self.commit(sale, request_id)).ok

    @abstractmethod
    async def get_inventory(self) -> list[Product]:
        pass

    @abstractmethod
    async def get_sales(self) -> list[Sale]:
        pass

    @abstractmethod
    async def _commit_inventory(self, item: InventoryDelta, request_id: str) -> CommitResult:
        pass

    @abstractmethod
    async def _commit_sale(self, sale: SaleRecord, request_id: str) -> CommitResult:
        pass


class MockStore(InventoryStore):
    """Simulated remote store: waits ``delay_seconds`` and always succeeds."""

    def __init__(self, delay_seconds: float = 0.3):
        self.delay_seconds = max(0.0, float(delay_seconds))

    async def _simulate_latency(self):
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)

    async def _commit_inventory(self, item: InventoryDelta, request_id: str) -> CommitResult:
        logger.info("Simulating inventory commit %s: %s", request_id, item.model_dump())
        await self._simulate_latency()
        return CommitResult(ok=True, request_id=request_id)

    async def _commit_sale(self, sale: SaleRecord, request_id: str) -> CommitResult:
        logger.info("Simulating sale commit %s: %s", request_id, sale.model_dump())
        await self._simulate_latency()
        return CommitResult(ok=True, request_id=request_id)

    async def get_inventory(self) -> list[Product]:
        logger.info("Simulating inventory fetch")
        await self._simulate_latency()
        return []

    async def get_sales(self) -> list[Sale]:
        logger.info("Simulating sales fetch")
        await self._simulate_latency()
        return []


class DatabaseStore(InventoryStore):
    """Append-only commit log in SQL, idempotent on ``request_id``."""

    def __init__(self, session_factory):
        self._session_factory = session_factory

    def _insert(self, model, row) -> CommitResult:
        request_id = row.request_id
        try:
            with self._session_factory() as db:
                existing = db.execute(
                    select(model.id).where(model.request_id == request_id)
                ).first()
                if existing:
                    logger.info(
                        "Commit %s already recorded; skipping duplicate",
                        request_id,
                        extra={"request_id": request_id},
                    )
                    return CommitResult(ok=True, request_id=request_id, detail="duplicate")
                db.add(row)
                db.commit()
        except SQLAlchemyError as exc:
            logger.exception("Commit %s failed", request_id, extra={"request_id": request_id})
            return CommitResult(ok=False, request_id=request_id, detail=str(exc))
        return CommitResult(ok=True, request_id=request_id)

    async def _commit_inventory(self, item: InventoryDelta, request_id: str) -> CommitResult:
        row = InventoryCommit(
            request_id=request_id,
            product_id=item.product_id,
            name=item.name,
            cost=item.cost,
            price=item.price,
            stock=item.stock,
            promotion=item.promotion,
        )
        return await asyncio.to_thread(self._insert, InventoryCommit, row)

    async def _commit_sale(self, sale: SaleRecord, request_id: str) -> CommitResult:
        if isinstance(sale, Sale):
            row = SaleCommit(
                request_id=request_id,
                product_name=sale.product_name or "",
                quantity=sale.quantity,
                sale_id=sale.id,
                product_id=sale.product_id,
                price_per_unit=sale.price_per_unit,
                promotion_applied=sale.promotion_applied,
                sale_date=sale.sale_date,
            )
        else:
            row = SaleCommit(
                request_id=request_id,
                product_name=sale.product_name,
                quantity=sale.quantity,
            )
        return await asyncio.to_thread(self._insert, SaleCommit, row)

    def _load_rows(self, model):
        with self._session_factory() as db:
            return db.execute(select(model).order_by(model.id)).scalars().all()

    def _load_inventory(self) -> list[Product]:
        inventory_rows = self._load_rows(InventoryCommit)
        sale_rows = self._load_rows(SaleCommit)

        deltas = [
            InventoryDelta(
                name=row.name,
                cost=row.cost,
                price=row.price,
                stock=row.stock,
                promotion=row.promotion,
            )
            for row in inventory_rows
        ]
        ids = iter(row.product_id or "prod-{}".format(row.id) for row in inventory_rows)
        products = {
            product.id: product
            for product in merge_inventory(AppState(), deltas, id_factory=lambda: next(ids)).products
        }

        for row in sale_rows:
            product = products.get(row.product_id) if row.product_id else None
            if product is None:
                product = find_product(products.values(), row.product_name)
            if product is None:
                logger.warning("Sale commit %s references unknown product %r", row.request_id, row.product_name)
                continue
            products[product.id] = product.model_copy(
                update={"stock": max(product.stock - row.quantity, 0)}
            )
        return list(products.values())

    def _load_sales(self) -> list[Sale]:
        sales = []
        for row in self._load_rows(SaleCommit):
            if row.sale_id is None:
                continue
            sale_date = row.sale_date
            if sale_date.tzinfo is None:
                sale_date = sale_date.replace(tzinfo=timezone.utc)
            sales.append(
                Sale(
                    id=row.sale_id,
                    product_id=row.product_id,
                    quantity=row.quantity,
                    sale_date=sale_date,
                    price_per_unit=row.price_per_unit,
                    promotion_applied=row.promotion_applied,
                    product_name=row.product_name or None,
                )
            )
        return sales

    async def get_inventory(self) -> list[Product]:
        return await asyncio.to_thread(self._load_inventory)

    async def get_sales(self) -> list[Sale]:
        return await asyncio.to_thread(self._load_sales)


def build_store(settings: Settings, session_factory=None) -> InventoryStore:
    backend = settings.PERSISTENCE_BACKEND.strip().lower()
    if backend not in PERSISTENCE_BACKENDS:
        raise ValueError(
            "PERSISTENCE_BACKEND must be one of: {}".format(", ".join(PERSISTENCE_BACKENDS))
        )
    if backend == "database":
        if session_factory is None:
            from inventory_ai.database.session import SessionLocal

            session_factory = SessionLocal
        return DatabaseStore(session_factory)
    return MockStore(delay_seconds=settings.COMMIT_DELAY_SECONDS)


__all__ = [
    "CommitResult",
    "DatabaseStore",
    "InventoryStore",
    "MockStore",
    "build_store",
    "new_request_id",
]
