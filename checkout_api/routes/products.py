# checkout_api/routes/products.py
from __future__ import annotations
from typing import List, Optional
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from ..services.catalog import list_products, find_product

router = APIRouter(prefix="/api/products", tags=["products"])


class ProductOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    price: float
    image: Optional[str] = None


# GET /api/products
@router.get("", response_model=List[ProductOut])
def list_products_endpoint():
    return list_products()

# GET /api/products/{id}
@router.get("/{product_id}", response_model=ProductOut)
def get_product_endpoint(product_id: int):
    product = find_product(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product
