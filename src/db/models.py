# provide dataclass models, plus their persisted JSON shapes

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, TypeVar

from utils.logger import get_logger

_logger = get_logger(__name__)

T = TypeVar("T")


def parse_many(raw: Iterable[Any], parser: Callable[[Dict[str, Any]], T]) -> List[T]:
    """Parse persisted entries, dropping the ones that are malformed."""
    parsed: List[T] = []
    for entry in raw:
        try:
            parsed.append(parser(entry))
        except (KeyError, TypeError, ValueError, AttributeError):
            _logger.debug(f"Skipping malformed entry: {entry!r}")
    return parsed


@dataclass(frozen=True)
class Account:
    id: str
    username: str
    email: str
    password: str  # plain text, demo store only

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "password": self.password,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Account:
        return cls(
            id=str(data["id"]),
            username=str(data["username"]),
            email=str(data["email"]),
            password=str(data["password"]),
        )

    def to_session(self) -> Session:
        return Session(id=self.id, username=self.username, email=self.email)


@dataclass(frozen=True)
class Session:
    """Public projection of an Account, never carries the password."""

    id: str
    username: str
    email: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "username": self.username, "email": self.email}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Session:
        return cls(
            id=str(data["id"]), username=str(data["username"]), email=str(data["email"])
        )


@dataclass(frozen=True)
class Product:
    id: str
    name: str
    price: float
    image: str = ""
    rating: float = 0.0
    rating_count: int = 0
    category: str = ""
    delivery_date: Optional[str] = None
    shipping_cost: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "image": self.image,
            "rating": self.rating,
            "ratingCount": self.rating_count,
            "category": self.category,
        }
        if self.delivery_date is not None:
            data["deliveryDate"] = self.delivery_date
        if self.shipping_cost is not None:
            data["shippingCost"] = self.shipping_cost
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Product:
        shipping = data.get("shippingCost")
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            price=float(data["price"]),
            image=str(data.get("image", "")),
            rating=float(data.get("rating", 0.0)),
            rating_count=int(data.get("ratingCount", 0)),
            category=str(data.get("category", "")),
            delivery_date=data.get("deliveryDate"),
            shipping_cost=float(shipping) if shipping is not None else None,
        )


@dataclass(frozen=True)
class CartLine:
    id: str  # product id, unique within the cart
    name: str
    price: float
    image: str
    delivery_date: str
    shipping_cost: float
    qty: int

    @property
    def line_total(self) -> float:
        return self.price * self.qty

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "image": self.image,
            "deliveryDate": self.delivery_date,
            "shippingCost": self.shipping_cost,
            "qty": self.qty,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> CartLine:
        qty = int(data["qty"])
        if qty < 1:
            raise ValueError(f"Invalid quantity {qty}")
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            price=float(data["price"]),
            image=str(data.get("image", "")),
            delivery_date=str(data.get("deliveryDate", "")),
            shipping_cost=float(data.get("shippingCost") or 0),
            qty=qty,
        )

    def to_product(self) -> Product:
        return Product(
            id=self.id,
            name=self.name,
            price=self.price,
            image=self.image,
            delivery_date=self.delivery_date,
            shipping_cost=self.shipping_cost,
        )


@dataclass(frozen=True)
class Order:
    id: str
    date_placed: str
    total: float
    items: Tuple[CartLine, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "datePlaced": self.date_placed,
            "total": self.total,
            "items": [item.to_dict() for item in self.items],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Order:
        return cls(
            id=str(data["id"]),
            date_placed=str(data["datePlaced"]),
            total=float(data["total"]),
            items=tuple(parse_many(data.get("items") or [], CartLine.from_dict)),
        )


@dataclass(frozen=True)
class FavoriteEntry:
    product: Product
    favorited_at: int  # epoch milliseconds

    def to_dict(self) -> Dict[str, Any]:
        return {**self.product.to_dict(), "favoritedAt": self.favorited_at}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> FavoriteEntry:
        return cls(
            product=Product.from_dict(data), favorited_at=int(data["favoritedAt"])
        )


@dataclass(frozen=True)
class RecentlyViewedEntry:
    product: Product
    viewed_at: int  # epoch milliseconds

    def to_dict(self) -> Dict[str, Any]:
        return {**self.product.to_dict(), "viewedAt": self.viewed_at}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> RecentlyViewedEntry:
        return cls(product=Product.from_dict(data), viewed_at=int(data["viewedAt"]))
