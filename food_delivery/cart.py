from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Mapping


@dataclass
class CartLine:
    id: str
    name: str
    price: Decimal
    quantity: int = 1

    @property
    def subtotal(self) -> Decimal:
        return self.price * self.quantity


class Cart:
    """Shopping cart keyed by menu item id.

    Lines keep the name and price seen when the item was added. The server
    re-prices every line at checkout, so these are for display only.
    """

    def __init__(self) -> None:
        self._lines: Dict[str, CartLine] = {}

    def __len__(self) -> int:
        return len(self._lines)

    def __contains__(self, item_id: str) -> bool:
        return item_id in self._lines

    @property
    def lines(self) -> List[CartLine]:
        return list(self._lines.values())

    @property
    def is_empty(self) -> bool:
        return not self._lines

    @property
    def count(self) -> int:
        return sum(line.quantity for line in self._lines.values())

    @property
    def total(self) -> Decimal:
        total = sum((line.subtotal for line in self._lines.values()), Decimal("0"))
        return total.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

    def add(self, item: Mapping) -> CartLine:
        """Add a menu item, or bump its quantity when already in the cart."""
        item_id = str(item["id"])
        line = self._lines.get(item_id)
        if line is not None:
            line.quantity += 1
            return line
        line = CartLine(id=item_id, name=item["name"], price=Decimal(str(item["price"])))
        self._lines[item_id] = line
        return line

    def increment(self, item_id: str) -> None:
        if item_id in self._lines:
            self._lines[item_id].quantity += 1

    def decrement(self, item_id: str) -> None:
        line = self._lines.get(item_id)
        if line is None:
            return
        line.quantity -= 1
        if line.quantity <= 0:
            del self._lines[item_id]

    def remove(self, item_id: str) -> None:
        self._lines.pop(item_id, None)

    def clear(self) -> None:
        self._lines.clear()

    def as_order_items(self) -> List[dict]:
        return [
            {"id": line.id, "name": line.name, "price": float(line.price), "quantity": line.quantity}
            for line in self._lines.values()
        ]
