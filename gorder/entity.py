"""Item and order records shared between the services."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping


def _field(data: Mapping[str, Any], name: str, default: Any) -> Any:
    """Look up a JSON key, matching case-insensitively when no exact key exists."""
    if name in data:
        return data[name]
    lowered = name.lower()
    for key, value in data.items():
        if key.lower() == lowered:
            return value
    return default


@dataclass
class Item:
    """An ordered item with its price identifier."""

    id: str = ""
    name: str = ""
    quantity: int = 0
    price_id: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"ID": self.id, "Name": self.name, "Quantity": self.quantity, "PriceID": self.price_id}

    @classmethod
    def from_dict(cls, data) -> Item:
        return cls(
            id=_field(data, "ID", "") or "",
            name=_field(data, "Name", "") or "",
            quantity=int(_field(data, "Quantity", 0) or 0),
            price_id=_field(data, "PriceID", "") or "",
        )


@dataclass
class ItemWithQuantity:
    """An item identifier and how many of it are wanted."""

    id: str = ""
    quantity: int = 0


@dataclass
class ProtoOrder:
    """An order as it travels between services."""

    id: str = ""
    customer_id: str = ""
    status: str = ""
    items: list[Item] = field(default_factory=list)
    payment_link: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "ID": self.id,
            "CustomerID": self.customer_id,
            "Status": self.status,
            "Items": [item.to_dict() for item in self.items],
            "PaymentLink": self.payment_link,
        }

    @classmethod
    def from_dict(cls, data) -> ProtoOrder:
        raw_items = _field(data, "Items", None) or []
        return cls(
            id=_field(data, "ID", "") or "",
            customer_id=_field(data, "CustomerID", "") or "",
            status=_field(data, "Status", "") or "",
            items=[Item.from_dict(item) for item in raw_items],
            payment_link=_field(data, "PaymentLink", "") or "",
        )


@dataclass
class ClientItem:
    """An item as exposed by the HTTP API."""

    id: str = ""
    name: str = ""
    price_id: str = ""
    quantity: int = 0


@dataclass
class ClientItemWithQuantity:
    """An item request as received by the HTTP API."""

    id: str = ""
    quantity: int = 0


@dataclass
class ClientOrder:
    """An order as exposed by the HTTP API."""

    id: str = ""
    customer_id: str = ""
    status: str = ""
    items: list[ClientItem] = field(default_factory=list)
    payment_link: str = ""


@dataclass
class PaidOrder:
    """An order as seen by the payment service."""

    id: str = ""
    customer_id: str = ""
    status: str = ""
    payment_link: str = ""
    items: list[Item] = field(default_factory=list)