"""Single-restaurant cart aggregation."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import Any, Callable, Mapping

ConfirmClear = Callable[[], bool]


def to_decimal(value: Any) -> Decimal:
    """Convert a price-like value to Decimal without float artefacts."""
    if isinstance(value, Decimal):
        return value
    if value is None:
        return Decimal("0")
    return Decimal(str(value))


def make_line_id(dish_id: str, variant_label: str | None) -> str:
    return f"{dish_id}-{variant_label or 'default'}"


@dataclass
class CartLineItem:
    """One dish/variant combination in the cart."""

    line_id: str
    dish_id: str
    restaurant_id: str
    unit_price: Decimal
    quantity: int
    variant_label: str | None = None
    dish_name: str | None = None
    image_url: str | None = None

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity


class Cart:
    """Cart holding lines from exactly one restaurant.

    Adding a dish from a different restaurant is destructive: the caller's
    confirmation capability decides whether the current lines are discarded.
    Without one, the switch is declined.
    """

    def __init__(self, confirm_clear_for_new_restaurant: ConfirmClear | None = None) -> None:
        self.items: list[CartLineItem] = []
        self.restaurant_id: str | None = None
        self._confirm_clear = confirm_clear_for_new_restaurant

    def __len__(self) -> int:
        return len(self.items)

    @property
    def is_empty(self) -> bool:
        return not self.items

    def get_line(self, line_id: str) -> CartLineItem | None:
        return next((line for line in self.items if line.line_id == line_id), None)

    def add_item(
        self,
        dish: Mapping[str, Any],
        variant: Mapping[str, Any] | None = None,
        quantity: int = 1,
        confirm_clear_for_new_restaurant: ConfirmClear | None = None,
    ) -> bool:
        """Add a dish (optionally a variant of it) to the cart.

        Args:
            dish: Dish row with id, restaurant_id and price.
            variant: Optional {name, price_modifier}.
            quantity: Units to add; must be positive.
            confirm_clear_for_new_restaurant: Overrides the cart's confirmation
                capability for this call.

        Returns:
            bool: False if the dish belongs to another restaurant and the
            switch was not confirmed; True otherwise.
        """
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise ValueError("Quantity must be a positive integer")

        dish_id = str(dish["id"])
        restaurant_id = str(dish["restaurant_id"])

        if self.items and self.restaurant_id != restaurant_id:
            confirm = confirm_clear_for_new_restaurant or self._confirm_clear
            if confirm is None or not confirm():
                return False
            self.clear()

        variant_label = variant.get("name") if variant else None
        line_id = make_line_id(dish_id, variant_label)
        self.restaurant_id = restaurant_id

        existing = self.get_line(line_id)
        if existing is not None:
            existing.quantity += quantity
            return True

        unit_price = to_decimal(dish.get("price")) + to_decimal(variant.get("price_modifier") if variant else None)
        self.items.append(
            CartLineItem(
                line_id=line_id,
                dish_id=dish_id,
                restaurant_id=restaurant_id,
                unit_price=unit_price,
                quantity=quantity,
                variant_label=variant_label,
                dish_name=dish.get("name"),
                image_url=dish.get("image_url"),
            )
        )
        return True

    def remove_item(self, line_id: str) -> None:
        """Remove a line; unknown ids are ignored."""
        self.items = [line for line in self.items if line.line_id != line_id]
        if not self.items:
            self.restaurant_id = None

    def update_quantity(self, line_id: str, quantity: int) -> None:
        """Set a line's quantity exactly; zero or less removes the line."""
        if quantity <= 0:
            self.remove_item(line_id)
            return
        line = self.get_line(line_id)
        if line is not None:
            line.quantity = quantity

    def get_total(self) -> Decimal:
        return sum((line.subtotal for line in self.items), Decimal("0"))

    def get_item_count(self) -> int:
        """Total units across lines, for badge display."""
        return sum(line.quantity for line in self.items)

    def clear(self) -> None:
        self.items = []
        self.restaurant_id = None

    def to_snapshot(self) -> dict[str, Any]:
        """Plain-dict form for the client-local key-value store."""
        items = []
        for line in self.items:
            data = asdict(line)
            data["unit_price"] = str(line.unit_price)
            items.append(data)
        return {"restaurant_id": self.restaurant_id, "items": items}

    @classmethod
    def from_snapshot(
        cls,
        snapshot: Mapping[str, Any],
        confirm_clear_for_new_restaurant: ConfirmClear | None = None,
    ) -> "Cart":
        cart = cls(confirm_clear_for_new_restaurant)
        cart.restaurant_id = snapshot.get("restaurant_id")
        cart.items = [
            CartLineItem(**{**item, "unit_price": to_decimal(item["unit_price"])})
            for item in snapshot.get("items", [])
        ]
        if not cart.items:
            cart.restaurant_id = None
        return cart
