from __future__ import annotations

from pydantic import Field

from models.registration import CamelModel


class ProductFormData(CamelModel):
    name: str = Field(..., min_length=1)
    description: str = ""
    usage_instructions: str = ""
    external_link: str = ""


class Product(ProductFormData):
    id: str
    created_at: str
    updated_at: str
