"""Data models for storefront."""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any
import uuid


def _utc_now() -> str:
    """Return current UTC time as ISO 8601 string."""
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _generate_id() -> str:
    """Generate a new order ID."""
    return str(uuid.uuid4())


def _to_decimal(value: Any) -> Decimal:
    # str() first so floats from JSON keep their printed value (109.95, not 109.9500000001)
    return Decimal(str(value))


@dataclass(frozen=True)
class Rating:
    """Average review score and number of reviews."""

    rate: Decimal = Decimal("0")
    count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {"rate": str(self.rate), "count": self.count}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Rating":
        return cls(
            rate=_to_decimal(data.get("rate", 0)),
            count=int(data.get("count", 0)),
        )


@dataclass(frozen=True)
class Product:
    """A catalog product. Read-only to the stores."""

    id: int
    title: str
    price: Decimal
    category: str = ""
    description: str = ""
    image: str = ""
    rating: Rating = field(default_factory=Rating)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "price": str(self.price),
            "category": self.category,
            "image": self.image,
            "rating": self.rating.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Product":
        return cls(
            id=int(data["id"]),
            title=data["title"],
            price=_to_decimal(data["price"]),
            category=data.get("category", ""),
            description=data.get("description", ""),
            image=data.get("image", ""),
            rating=Rating.from_dict(data.get("rating") or {}),
        )


@dataclass(frozen=True)
class CartLine:
    """One product and its quantity in a cart. Quantity is always >= 1."""

    id: int
    title: str
    price: Decimal
    quantity: int
    category: str = ""
    description: str = ""
    image: str = ""
    rating: Rating = field(default_factory=Rating)

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity

    @property
    def product(self) -> Product:
        return Product(
            id=self.id,
            title=self.title,
            price=self.price,
            category=self.category,
            description=self.description,
            image=self.image,
            rating=self.rating,
        )

    def with_quantity(self, quantity: int) -> "CartLine":
        return replace(self, quantity=quantity)

    def to_dict(self) -> dict[str, Any]:
        result = self.product.to_dict()
        result["quantity"] = self.quantity
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CartLine":
        return cls.from_product(Product.from_dict(data), int(data["quantity"]))

    @classmethod
    def from_product(cls, product: Product, quantity: int = 1) -> "CartLine":
        return cls(
            id=product.id,
            title=product.title,
            price=product.price,
            quantity=quantity,
            category=product.category,
            description=product.description,
            image=product.image,
            rating=product.rating,
        )


@dataclass(frozen=True)
class UserIdentity:
    """The identity assigned by login. No credentials are attached."""

    id: str
    name: str
    email: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "email": self.email}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UserIdentity":
        return cls(id=data["id"], name=data.get("name", ""), email=data.get("email", ""))


@dataclass(frozen=True)
class ShippingAddress:
    """Shipping address captured at checkout and embedded in the order."""

    full_name: str
    address: str
    city: str
    postal_code: str
    country: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "full_name": self.full_name,
            "address": self.address,
            "city": self.city,
            "postal_code": self.postal_code,
            "country": self.country,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ShippingAddress":
        return cls(
            full_name=data["full_name"],
            address=data["address"],
            city=data["city"],
            postal_code=data["postal_code"],
            country=data["country"],
        )


class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


# Allowed forward moves; delivered and cancelled are terminal
STATUS_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


@dataclass
class Order:
    """A placed order.

    Everything except ``status`` is fixed once the order is in the history.
    """

    id: str
    user_id: str
    items: tuple[CartLine, ...]
    subtotal: Decimal
    shipping: Decimal
    tax: Decimal
    total: Decimal
    shipping_address: ShippingAddress
    status: OrderStatus = OrderStatus.PROCESSING
    created_at: str = field(default_factory=_utc_now)
    idempotency_key: str | None = None
    payment_reference: str | None = None

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.items)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "id": self.id,
            "user_id": self.user_id,
            "items": [line.to_dict() for line in self.items],
            "subtotal": str(self.subtotal),
            "shipping": str(self.shipping),
            "tax": str(self.tax),
            "total": str(self.total),
            "status": self.status.value,
            "created_at": self.created_at,
            "shipping_address": self.shipping_address.to_dict(),
        }
        if self.idempotency_key is not None:
            result["idempotency_key"] = self.idempotency_key
        if self.payment_reference is not None:
            result["payment_reference"] = self.payment_reference
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Order":
        return cls(
            id=data["id"],
            user_id=data["user_id"],
            items=tuple(CartLine.from_dict(line) for line in data.get("items", [])),
            subtotal=_to_decimal(data.get("subtotal", data["total"])),
            shipping=_to_decimal(data.get("shipping", 0)),
            tax=_to_decimal(data.get("tax", 0)),
            total=_to_decimal(data["total"]),
            shipping_address=ShippingAddress.from_dict(data["shipping_address"]),
            status=OrderStatus(data.get("status", OrderStatus.PROCESSING.value)),
            created_at=data.get("created_at", ""),
            idempotency_key=data.get("idempotency_key"),
            payment_reference=data.get("payment_reference"),
        )
