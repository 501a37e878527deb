from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from app.deps import get_catalog
from catalog.product_service import ProductCatalogService
from models.product import ProductFormData
from security.admin_auth import AdminClaims

router = APIRouter()


@router.get("/products")
def list_products(catalog: ProductCatalogService = Depends(get_catalog)):
    products = catalog.load_all()
    return {"ok": True, "items": [p.to_cache() for p in products]}


@router.get("/products/count")
def count_products(catalog: ProductCatalogService = Depends(get_catalog)):
    return {"ok": True, "count": catalog.count()}


@router.get("/products/{product_id}")
def get_product(product_id: str, catalog: ProductCatalogService = Depends(get_catalog)):
    product = catalog.get_by_id(product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="product_not_found")
    return {"ok": True, "product": product.to_cache()}


@router.post("/products", status_code=201)
def create_product(body: ProductFormData, claims: dict = AdminClaims, catalog: ProductCatalogService = Depends(get_catalog)):
    return {"ok": True, "product": catalog.create(body).to_cache()}


@router.put("/products/{product_id}")
def update_product(
    product_id: str,
    body: ProductFormData,
    claims: dict = AdminClaims,
    catalog: ProductCatalogService = Depends(get_catalog),
):
    return {"ok": True, "product": catalog.update(product_id, body).to_cache()}


@router.delete("/products/{product_id}")
def delete_product(product_id: str, claims: dict = AdminClaims, catalog: ProductCatalogService = Depends(get_catalog)):
    catalog.delete(product_id)
    return {"ok": True, "deleted": product_id}
