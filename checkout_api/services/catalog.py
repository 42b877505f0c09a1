# checkout_api/services/catalog.py
from __future__ import annotations
from typing import Any, Dict, List, Optional

# Fixed storefront products; prices in major currency units.
PRODUCTS: List[Dict[str, Any]] = [
    {
        "id": 1,
        "name": "Minimalist Watch",
        "description": "Clean design, timeless elegance",
        "price": 299.99,
        "image": "https://images.unsplash.com/photo-1523275335684-37898b6baf30?w=800&auto=format&fit=crop",
    },
    {
        "id": 2,
        "name": "Leather Wallet",
        "description": "Premium quality, handcrafted",
        "price": 89.99,
        "image": "https://images.unsplash.com/photo-1627123424574-724758594e93?w=800&auto=format&fit=crop",
    },
    {
        "id": 3,
        "name": "Wireless Earbuds",
        "description": "Crystal clear sound, all day comfort",
        "price": 149.99,
        "image": "https://images.unsplash.com/photo-1590658268037-6bf12165a8df?w=800&auto=format&fit=crop",
    },
    {
        "id": 4,
        "name": "Backpack",
        "description": "Perfect for daily commute",
        "price": 119.99,
        "image": "https://images.unsplash.com/photo-1553062407-98eeb64c6a62?w=800&auto=format&fit=crop",
    },
    {
        "id": 5,
        "name": "Sunglasses",
        "description": "UV protection, stylish design",
        "price": 179.99,
        "image": "https://images.unsplash.com/photo-1572635196237-14b3f281503f?w=800&auto=format&fit=crop",
    },
    {
        "id": 6,
        "name": "Notebook Set",
        "description": "Premium paper, perfect for notes",
        "price": 24.99,
        "image": "https://images.unsplash.com/photo-1517971071642-34a2d3ecc9cd?w=800&auto=format&fit=crop",
    },
]

_BY_ID = {str(p["id"]): p for p in PRODUCTS}


def list_products() -> List[Dict[str, Any]]:
    return [dict(p) for p in PRODUCTS]


def find_product(product_id: Any) -> Optional[Dict[str, Any]]:
    if product_id is None:
        return None
    p = _BY_ID.get(str(product_id))
    return dict(p) if p else None
