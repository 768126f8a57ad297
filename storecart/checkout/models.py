"""Checkout records: validated customer details and the finalized order."""
from dataclasses import dataclass
from decimal import Decimal

from storecart.cart.models import LineItem
from storecart.money import parse_price, to_json_number

NO_NOTES = "no notes"


@dataclass(frozen=True)
class CustomerInfo:
    """Customer details that passed checkout validation."""
    full_name: str
    phone: str
    address: str
    notes: str = NO_NOTES

    def to_dict(self) -> dict:
        return {
            "full_name": self.full_name,
            "phone": self.phone,
            "address": self.address,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CustomerInfo":
        return cls(
            full_name=data["full_name"],
            phone=data["phone"],
            address=data["address"],
            notes=data.get("notes") or NO_NOTES,
        )


@dataclass(frozen=True)
class OrderItem:
    """A line item as it was when the order was placed."""
    name: str
    unit_price: Decimal
    image: str
    quantity: int

    @classmethod
    def from_line_item(cls, item: LineItem) -> "OrderItem":
        return cls(name=item.name, unit_price=item.unit_price, image=item.image, quantity=item.quantity)

    @property
    def total_price(self) -> Decimal:
        return self.unit_price * self.quantity

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "price": to_json_number(self.unit_price),
            "image": self.image,
            "quantity": self.quantity,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "OrderItem":
        # Same field rules as a cart line
        return cls.from_line_item(LineItem.from_dict(data))


@dataclass(frozen=True)
class Order:
    """
    Immutable snapshot of a finalized checkout.

    Orders are replaced, never updated: the next finalization overwrites the
    stored last order.
    """
    order_id: str
    items: tuple[OrderItem, ...]
    customer: CustomerInfo
    subtotal: Decimal
    delivery_fee: Decimal
    total: Decimal
    created_at: int  # epoch milliseconds

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    def to_dict(self) -> dict:
        """Convert to the stored JSON shape."""
        return {
            "order_id": self.order_id,
            "items": [item.to_dict() for item in self.items],
            "customer": self.customer.to_dict(),
            "subtotal": to_json_number(self.subtotal),
            "delivery_fee": to_json_number(self.delivery_fee),
            "total": to_json_number(self.total),
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Order":
        """
        Create from the stored JSON shape.

        Raises:
            KeyError, TypeError, ValueError: If the data is malformed
        """
        return cls(
            order_id=str(data["order_id"]),
            items=tuple(OrderItem.from_dict(item) for item in data["items"]),
            customer=CustomerInfo.from_dict(data["customer"]),
            subtotal=parse_price(data["subtotal"]),
            delivery_fee=parse_price(data["delivery_fee"]),
            total=parse_price(data["total"]),
            created_at=int(data["created_at"]),
        )
