import asyncio
import logging
from datetime import datetime
from typing import Callable, Optional

from inventory_ai.config import Settings
from inventory_ai.core.constants import INVENTORY_BOX, PROMPT_BOXES, SALE_BOX
from inventory_ai.core.errors import CommitFailure, ParseFailure, SubmissionInProgress
from inventory_ai.schemas.product import InventoryDelta
from inventory_ai.schemas.prompt import SubmissionResult
from inventory_ai.services.gemini_service import GeminiPromptParser
from inventory_ai.services.reconciliation import (
    AppState,
    append_sales,
    apply_sales,
    find_product,
    merge_inventory,
    new_product_id,
    new_sale_id,
    utc_now,
)
from inventory_ai.services.seed import demo_state
from inventory_ai.services.store_service import InventoryStore, build_store

logger = logging.getLogger(__name__)


class InventoryController:
    """Owns the application state and runs prompt submissions against it.

    A submission parses the prompt, validates against the current state,
    commits every record through the store and only then swaps in the new
    state. Nothing is applied locally unless every commit succeeded. Each
    prompt box allows one pending submission at a time.
    """

    def __init__(
        self,
        parser: GeminiPromptParser,
        store: InventoryStore,
        state: Optional[AppState] = None,
        *,
        product_id_factory: Callable[[], str] = new_product_id,
        sale_id_factory: Callable[[], str] = new_sale_id,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.parser = parser
        self.store = store
        self._state = state or AppState()
        self._product_id_factory = product_id_factory
        self._sale_id_factory = sale_id_factory
        self._clock = clock
        self._locks = {box: asyncio.Lock() for box in PROMPT_BOXES}

    @property
    def state(self) -> AppState:
        return self._state

    def is_busy(self, box: str) -> bool:
        return self._locks[box].locked()

    async def _run_exclusive(self, box, handler, prompt):
        lock = self._locks[box]
        if lock.locked():
            raise SubmissionInProgress(box)
        async with lock:
            return await handler(prompt)

    @staticmethod
    def _clean_prompt(prompt: str, box: str) -> str:
        prompt = (prompt or "").strip()
        if not prompt:
            raise ParseFailure("Please enter a {} prompt.".format(box))
        return prompt

    async def submit_inventory_prompt(self, prompt: str) -> SubmissionResult:
        return await self._run_exclusive(INVENTORY_BOX, self._handle_inventory, prompt)

    async def submit_sale_prompt(self, prompt: str) -> SubmissionResult:
        return await self._run_exclusive(SALE_BOX, self._handle_sale, prompt)

    async def _handle_inventory(self, prompt: str) -> SubmissionResult:
        prompt = self._clean_prompt(prompt, INVENTORY_BOX)
        deltas = await asyncio.to_thread(self.parser.parse_inventory_prompt, prompt)
        if not deltas:
            raise ParseFailure("No inventory items were found in the prompt.")

        # Ids are settled before committing so the store and local state agree on them.
        planned = merge_inventory(self._state, deltas, self._product_id_factory)
        resolved = [
            delta.model_copy(update={"product_id": find_product(planned.products, delta.name).id})
            for delta in deltas
        ]

        committed = []
        for delta in resolved:
            result = await self.store.commit(delta)
            if not result.ok:
                logger.error(
                    "Inventory commit failed for %s after %d committed item(s): %s",
                    delta.name,
                    len(committed),
                    result.detail,
                )
                message = "Failed to add {} to the store.".format(delta.name)
                if committed:
                    message += " Already committed remotely: {}.".format(", ".join(committed))
                raise CommitFailure(message)
            committed.append(delta.name)

        ids = iter(delta.product_id for delta in resolved)
        new_state = merge_inventory(self._state, resolved, lambda: next(ids))
        self._state = new_state
        touched = [find_product(new_state.products, delta.name) for delta in resolved]
        products = list({product.id: product for product in touched if product is not None}.values())
        logger.info(
            "Inventory updated with %d item(s)",
            len(deltas),
            extra={"box": INVENTORY_BOX, "item_count": len(deltas)},
        )
        return SubmissionResult(message="Inventory updated successfully!", products=products)

    async def _handle_sale(self, prompt: str) -> SubmissionResult:
        prompt = self._clean_prompt(prompt, SALE_BOX)
        intents = await asyncio.to_thread(
            self.parser.parse_sale_prompt, prompt, list(self._state.products)
        )

        # Validates every line against the running stock before anything is committed.
        planned = apply_sales(self._state, intents, self._sale_id_factory, self._clock)
        sales = list(planned.sales[len(self._state.sales):])

        for sale in sales:
            result = await self.store.commit(sale, request_id=sale.id)
            if not result.ok:
                logger.error("Sale commit failed for %s: %s", sale.product_name, result.detail)
                raise CommitFailure("Failed to record sale of {}.".format(sale.product_name))

        # Appended to the live state in case the inventory box changed it meanwhile.
        new_state = append_sales(self._state, sales)
        self._state = new_state
        product_ids = {sale.product_id for sale in sales}
        products = [product for product in new_state.products if product.id in product_ids]
        logger.info(
            "Recorded %d sale line(s)",
            len(sales),
            extra={"box": SALE_BOX, "item_count": len(sales)},
        )
        return SubmissionResult(message="Sale recorded successfully!", products=products, sales=sales)


async def seed_store(store: InventoryStore, state: AppState) -> None:
    """Commit a seeded state so a commit-log backend can rebuild it later."""
    sold = {}
    for sale in state.sales:
        sold[sale.product_id] = sold.get(sale.product_id, 0) + sale.quantity

    records = [
        (
            InventoryDelta(
                name=product.name,
                cost=product.cost,
                price=product.price,
                stock=product.stock + sold.get(product.id, 0),
                promotion=product.promotion,
                product_id=product.id,
            ),
            "seed-{}".format(product.id),
        )
        for product in state.products
    ]
    records.extend((sale, "seed-{}".format(sale.id)) for sale in state.sales)

    for record, request_id in records:
        result = await store.commit(record, request_id=request_id)
        if not result.ok:
            raise CommitFailure("Failed to store seed record {}: {}".format(request_id, result.detail))
    logger.info("Stored %d seed record(s)", len(records))


async def load_state(store: InventoryStore) -> AppState:
    products = await store.get_inventory()
    sales = await store.get_sales()
    if products:
        logger.info("Loaded %d product(s) and %d sale(s) from the commit log", len(products), len(sales))
    return AppState(products=tuple(products), sales=tuple(sales))


async def create_controller(settings: Settings, store: Optional[InventoryStore] = None) -> InventoryController:
    store = store or build_store(settings)
    persistent = settings.PERSISTENCE_BACKEND.strip().lower() == "database"
    state = await load_state(store) if persistent else AppState()
    if not state.products and settings.SEED_DEMO_DATA:
        state = demo_state()
        if persistent:
            await seed_store(store, state)
    return InventoryController(GeminiPromptParser(settings), store, state)


__all__ = ["InventoryController", "create_controller", "load_state", "seed_store"]
