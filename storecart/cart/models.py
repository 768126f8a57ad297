"""Cart models with Decimal-based pricing."""
from dataclasses import dataclass, replace
from decimal import Decimal

from storecart.money import parse_price, to_json_number, round_money


@dataclass
class LineItem:
    """One distinct product in the cart. Name is the merge key."""
    name: str
    unit_price: Decimal
    image: str = ""
    quantity: int = 1

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValueError("name must be a non-empty string")
        self.unit_price = parse_price(self.unit_price)
        if self.image is None:
            self.image = ""
        if not isinstance(self.image, str):
            raise ValueError("image must be a string")
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int):
            raise ValueError("quantity must be an integer")
        if self.quantity < 1:
            raise ValueError("quantity must be at least 1")

    @property
    def total_price(self) -> Decimal:
        """Price for all units."""
        return self.unit_price * self.quantity

    def copy(self) -> "LineItem":
        return replace(self)

    def to_dict(self) -> dict:
        """Convert to the stored JSON shape."""
        return {
            "name": self.name,
            "price": to_json_number(self.unit_price),
            "image": self.image,
            "quantity": self.quantity,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LineItem":
        """
        Create from the stored JSON shape.

        Raises:
            ValueError: If a field has the wrong type or value
            KeyError: If name or price is missing
        """
        if not isinstance(data, dict):
            raise ValueError("line item must be an object")
        return cls(
            name=data["name"],
            unit_price=data["price"],
            image=data.get("image", ""),
            quantity=data.get("quantity", 1),
        )


@dataclass(frozen=True)
class Totals:
    """Derived cart totals."""
    subtotal: Decimal
    delivery: Decimal
    total: Decimal

    @classmethod
    def for_items(cls, items, delivery_fee: Decimal) -> "Totals":
        subtotal = sum((item.total_price for item in items), Decimal("0"))
        delivery = delivery_fee if subtotal > 0 else Decimal("0")
        return cls(
            subtotal=round_money(subtotal),
            delivery=round_money(delivery),
            total=round_money(subtotal + delivery),
        )
