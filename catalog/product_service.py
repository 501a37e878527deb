from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from config.settings import settings
from models.product import Product, ProductFormData
from ops.metrics import Timer
from repos.product_repo import ProductRepository
from storage.gateway import GatewayTimeout, RelationNotFound
from utils.timeutil import iso, utc_now

log = logging.getLogger("primoboost.catalog")

# A timed-out load keeps its worker until the gateway call returns; once every
# worker is held by a hung call, new loads queue and hit their own deadline.
_LOADER_WORKERS = 8
_loader = ThreadPoolExecutor(max_workers=_LOADER_WORKERS, thread_name_prefix="catalog-load")

RELATION_MISSING_MESSAGE = (
    "Database table not found. Please run the database setup for the products collection."
)


class ProductCatalogService:
    """
    Product CRUD straight through the gateway. No cache, no degraded mode:
    every gateway error reaches the caller unchanged.
    """

    def __init__(self, repo: Optional[ProductRepository] = None, clock: Callable[[], datetime] = utc_now):
        self.repo = repo or ProductRepository()
        self.clock = clock

    def _stamp(self, previous: Optional[str] = None) -> str:
        now = iso(self.clock())
        if previous and now <= previous:
            # Clock did not advance past the stored value (same tick, skew).
            now = iso(datetime.fromisoformat(previous.replace("Z", "+00:00")) + timedelta(microseconds=1))
        return now

    def list(self) -> List[Product]:
        return self.repo.list()

    def load_all(self, timeout_s: Optional[float] = None) -> List[Product]:
        """list() raced against the catalog deadline; a late gateway counts as a failure."""
        timeout_s = settings.PRODUCTS_LOAD_TIMEOUT_SEC if timeout_s is None else timeout_s
        t = Timer()
        future = _loader.submit(self.repo.list)
        try:
            products = future.result(timeout=timeout_s)
        except FutureTimeout as e:
            future.cancel()
            log.error("products_load_timeout", extra={"extra": {"timeout_s": timeout_s, "duration_ms": t.ms()}})
            raise GatewayTimeout(
                "Request timeout - please check your database connection", collection="products", op="query"
            ) from e
        log.info("products_loaded", extra={"extra": {"count": len(products), "duration_ms": t.ms()}})
        return products

    def get_by_id(self, product_id: str) -> Optional[Product]:
        return self.repo.get(product_id)

    def create(self, data: ProductFormData) -> Product:
        product = self.repo.insert(data, now=self._stamp())
        log.info("product_created", extra={"extra": {"product_id": product.id}})
        return product

    def update(self, product_id: str, data: ProductFormData) -> Product:
        current = self.repo.get(product_id)
        product = self.repo.update(product_id, data, now=self._stamp(current.updated_at if current else None))
        log.info("product_updated", extra={"extra": {"product_id": product_id}})
        return product

    def delete(self, product_id: str) -> None:
        self.repo.delete(product_id)
        log.info("product_deleted", extra={"extra": {"product_id": product_id}})

    def count(self) -> int:
        return self.repo.count()


def catalog_error_message(exc: Exception) -> str:
    if isinstance(exc, (RelationNotFound, GatewayTimeout)):
        return RELATION_MISSING_MESSAGE
    return str(exc) or "Failed to load products"
