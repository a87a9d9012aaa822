# read-only product catalog, shipped as json next to this module
import json
import os.path
from functools import lru_cache
from typing import List, Optional, Tuple

from db.models import Product, parse_many
from utils.logger import get_logger

_logger = get_logger(__name__)

CATALOG_PATH = os.path.join(os.path.dirname(__file__), "products.json")


@lru_cache(maxsize=None)
def load_catalog(path: str = CATALOG_PATH) -> Tuple[Product, ...]:
    with open(path, "r", encoding="utf-8") as f:
        products = tuple(parse_many(json.load(f), Product.from_dict))
    _logger.debug(f"Loaded {len(products)} products from {path}.")
    return products


def get_product(product_id: str) -> Optional[Product]:
    """Fetch a product by id."""
    for product in load_catalog():
        if product.id == product_id:
            return product
    return None


def search_products(query: str) -> List[Product]:
    """
    Case-insensitive search over name and category.
    Empty query returns everything. With several words the whole phrase is
    matched first, then each word; duplicates are dropped.
    """
    phrase = (query or "").strip().lower()
    products = load_catalog()
    if not phrase:
        return list(products)

    terms = [phrase] + [w for w in phrase.split() if w != phrase]
    results: List[Product] = []
    seen: set[str] = set()
    for term in terms:
        for p in products:
            if p.id in seen:
                continue
            if term in p.name.lower() or term in p.category.lower():
                seen.add(p.id)
                results.append(p)
    return results
