from decimal import Decimal
from typing import Dict, Mapping, Union

Price = Union[int, float, Decimal]


class SelectionCart:
    """Selected services and how many of each, before checkout.

    Every stored quantity is a positive integer: removing the last unit of a
    service drops its key instead of leaving a zero behind.
    """

    def __init__(self):
        self._items: Dict[str, int] = {}

    @classmethod
    def from_mapping(cls, items: Mapping[str, int]) -> "SelectionCart":
        cart = cls()
        for service_id, quantity in items.items():
            if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < 1:
                raise ValueError(f"Invalid quantity {quantity!r} for service {service_id}")
            cart._items[service_id] = quantity
        return cart

    def add(self, service_id: str) -> None:
        self._items[service_id] = self._items.get(service_id, 0) + 1

    def remove(self, service_id: str) -> None:
        quantity = self._items.get(service_id)
        if quantity is None:
            return
        if quantity <= 1:
            del self._items[service_id]
        else:
            self._items[service_id] = quantity - 1

    def quantity(self, service_id: str) -> int:
        return self._items.get(service_id, 0)

    @property
    def items(self) -> Dict[str, int]:
        return dict(self._items)

    def is_empty(self) -> bool:
        return not self._items

    def total_items(self) -> int:
        return sum(self._items.values())

    def total_price(self, catalog: Mapping[str, Price]) -> Decimal:
        # Services missing from the loaded catalog count as free
        total = Decimal("0")
        for service_id, quantity in self._items.items():
            price = catalog.get(service_id, 0)
            total += Decimal(str(price)) * quantity
        return total

    def __contains__(self, service_id: str) -> bool:
        return service_id in self._items

    def __len__(self) -> int:
        return len(self._items)
