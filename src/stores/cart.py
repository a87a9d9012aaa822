# src/stores/cart.py
from __future__ import annotations

import dataclasses
import math
import random
from datetime import date, timedelta
from typing import Dict, List, Optional

from db.database import LocalStorage
from db.models import CartLine, Order, Product, parse_many
from utils.logger import get_logger

_logger = get_logger(__name__)

CART_KEY = "cart_v1"
ORDERS_KEY = "orders_v1"

TAX_RATE = 0.10


def _to_int(val) -> Optional[int]:
    try:
        return int(val)
    except (TypeError, ValueError, OverflowError):
        return None


def _to_float(val) -> Optional[float]:
    try:
        num = float(val)
    except (TypeError, ValueError):
        return None
    return num if math.isfinite(num) else None


def coerce_qty(val) -> int:
    """Positive integer quantity; anything invalid becomes 1."""
    qty = _to_int(val)
    if qty is None or qty < 1:
        return 1
    return qty


def default_delivery_date(today: Optional[date] = None) -> str:
    """A week out, e.g. 'Monday, March 2'."""
    day = (today or date.today()) + timedelta(days=7)
    return f"{day:%A, %B} {day.day}"


def _override_shipping(line: CartLine, overrides: Dict[str, float]) -> float:
    """Shipping picked at checkout, or the line's own when absent or unusable."""
    cost = _to_float(overrides.get(line.id))
    return line.shipping_cost if cost is None else cost


def generate_order_id() -> str:
    """16 random hex digits in four groups. Not guaranteed unique."""
    return "-".join(
        "".join(random.choice("0123456789abcdef") for _ in range(4)) for _ in range(4)
    )


def date_label(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"{today:%B} {today.day}"


class CartStore:
    """
    The shopping cart and the order history it feeds.

    One cart per storage, not per user. Placing an order snapshots the cart
    into history and empties the cart in a single write.
    """

    def __init__(self, storage: LocalStorage) -> None:
        self._storage = storage

    # ---------------------------
    # Internal helpers
    # ---------------------------

    async def _load(self) -> List[CartLine]:
        return parse_many(await self._storage.read(CART_KEY, []), CartLine.from_dict)

    async def _save(self, lines: List[CartLine]) -> bool:
        return await self._storage.write(CART_KEY, [line.to_dict() for line in lines])

    async def _load_orders(self) -> List[Order]:
        return parse_many(await self._storage.read(ORDERS_KEY, []), Order.from_dict)

    # ---------------------------
    # Cart Management
    # ---------------------------

    async def get_items(self) -> List[CartLine]:
        return await self._load()

    async def get_total_count(self) -> int:
        """Total number of units across all lines."""
        return sum(line.qty for line in await self._load())

    async def add_item(self, product: Product, qty=1) -> None:
        """
        Add a product to the cart, or increase the quantity of its line if it
        is already there.
        """
        qty = coerce_qty(qty)
        async with self._storage.lock:
            lines = await self._load()
            for i, line in enumerate(lines):
                if line.id == product.id:
                    lines[i] = dataclasses.replace(line, qty=line.qty + qty)
                    break
            else:
                lines.append(
                    CartLine(
                        id=product.id,
                        name=product.name,
                        price=product.price,
                        image=product.image,
                        delivery_date=product.delivery_date or default_delivery_date(),
                        shipping_cost=product.shipping_cost or 0.0,
                        qty=qty,
                    )
                )
            await self._save(lines)
        _logger.debug(f"Added {qty} x {product.id} to cart.")

    async def update_qty(self, product_id: str, qty) -> None:
        """Set the quantity of a line. No-op if the product is not in the cart."""
        qty = coerce_qty(qty)
        async with self._storage.lock:
            lines = await self._load()
            if not any(line.id == product_id for line in lines):
                return
            await self._save(
                [
                    dataclasses.replace(line, qty=qty) if line.id == product_id else line
                    for line in lines
                ]
            )

    async def remove_item(self, product_id: str) -> None:
        async with self._storage.lock:
            lines = await self._load()
            kept = [line for line in lines if line.id != product_id]
            if len(kept) != len(lines):
                await self._save(kept)

    async def clear_cart(self) -> None:
        async with self._storage.lock:
            await self._save([])

    # ---------------------------
    # Checkout & Orders
    # ---------------------------

    async def place_order(
        self, delivery_overrides: Optional[Dict[str, float]] = None
    ) -> Optional[Order]:
        """
        Snapshot the cart into order history and empty it.

        delivery_overrides maps product id to the shipping cost picked at
        checkout; lines without an override keep their own. The total is
        (sum of price * qty + sum of shipping) plus 10% tax, and does not
        reflect any promo discount shown at checkout.
        Returns the new order, or None when the cart is empty.
        """
        overrides = delivery_overrides or {}
        async with self._storage.lock:
            lines = await self._load()
            if not lines:
                return None

            items = tuple(
                dataclasses.replace(line, shipping_cost=_override_shipping(line, overrides))
                for line in lines
            )
            subtotal = sum(i.price * i.qty for i in items) + sum(
                i.shipping_cost for i in items
            )
            order = Order(
                id=generate_order_id(),
                date_placed=date_label(),
                total=round(subtotal * (1 + TAX_RATE), 2),
                items=items,
            )

            orders = await self._load_orders()
            orders.insert(0, order)
            saved = await self._storage.write_many(
                {ORDERS_KEY: [o.to_dict() for o in orders], CART_KEY: []}
            )

        if saved:
            _logger.info(f"Order {order.id} placed, total ${order.total:.2f}.")
        else:
            _logger.warning(f"Order {order.id} could not be persisted.")
        return order

    async def get_orders(self) -> List[Order]:
        """Order history, newest first."""
        return await self._load_orders()

    async def get_order(self, order_id: str) -> Optional[Order]:
        for order in await self._load_orders():
            if order.id == order_id:
                return order
        return None

    async def clear_orders(self) -> None:
        """Wipe order history. The cart is left alone."""
        async with self._storage.lock:
            await self._storage.write(ORDERS_KEY, [])
        _logger.info("Order history cleared.")

    async def buy_again(self, order_id: str, product_id: str) -> bool:
        """Put one unit of a past order line back into the cart."""
        order = await self.get_order(order_id)
        if order is None:
            return False
        line = next((i for i in order.items if i.id == product_id), None)
        if line is None:
            return False
        await self.add_item(line.to_product(), 1)
        return True
