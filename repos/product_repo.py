from __future__ import annotations

from typing import Any, Dict, List, Optional

from models.product import Product, ProductFormData
from models.schema import COL_PRODUCTS
from storage.gateway import FirestoreGateway, RowNotFound


def _row_to_product(row: Dict[str, Any]) -> Product:
    return Product.model_validate(row)


class ProductRepository:
    def __init__(self, gateway: Optional[FirestoreGateway] = None):
        self.gateway = gateway or FirestoreGateway()

    def list(self) -> List[Product]:
        rows = self.gateway.query(COL_PRODUCTS, order_by="created_at", descending=True)
        return [_row_to_product(r) for r in rows]

    def get(self, product_id: str) -> Optional[Product]:
        try:
            return _row_to_product(self.gateway.get(COL_PRODUCTS, product_id))
        except RowNotFound:
            return None

    def insert(self, data: ProductFormData, now: str) -> Product:
        payload = {**data.to_row(), "created_at": now, "updated_at": now}
        return _row_to_product(self.gateway.insert(COL_PRODUCTS, payload))

    def update(self, product_id: str, data: ProductFormData, now: str) -> Product:
        payload = {**data.to_row(), "updated_at": now}
        return _row_to_product(self.gateway.update(COL_PRODUCTS, product_id, payload))

    def delete(self, product_id: str) -> None:
        self.gateway.delete(COL_PRODUCTS, product_id)

    def count(self) -> int:
        return self.gateway.count(COL_PRODUCTS)
