"""Stock adjustments behind the raw-materials view.

`update_stock` moves quantity in or out of one stock row:

- add: quantity grows; when a unit price is given the unit cost becomes the
  weighted average of the old stock and the new lot.
- remove: quantity shrinks at the current unit cost; going below zero is
  rejected.

The first `add` for an item creates its stock row.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Union

from tireworks.bindings import DataSourceBinding
from tireworks.errors import ValidationError, WriteAmbiguousError
from tireworks.kinds import DataKind
from tireworks.models.schemas import StockItem, StockItemInput, validate_schema

from finance_dashboard.utils.logging import logger


class StockOperation(str, Enum):
    ADD = "add"
    REMOVE = "remove"


class StockService:
    def __init__(self, binding: DataSourceBinding):
        if binding.kind is not DataKind.STOCK_ITEMS:
            raise ValueError(f"Expected the stock items binding, got {binding.kind.value}")
        self.binding = binding

    def find_item(self, item_id: str, item_type: str) -> Optional[StockItem]:
        for item in self.binding.snapshot():
            if item.item_id == item_id and item.item_type == item_type:
                return item
        return None

    async def update_stock(
        self,
        item_id: str,
        item_type: str,
        quantity: float,
        operation: Union[StockOperation, str],
        unit_price: Optional[float] = None,
        item_name: Optional[str] = None,
    ) -> StockItem:
        try:
            operation = StockOperation(operation)
        except ValueError as exc:
            raise ValidationError(f"Unknown stock operation {operation!r}") from exc
        if quantity is None or quantity <= 0:
            raise ValidationError("Stock quantity must be > 0")
        if unit_price is not None and unit_price < 0:
            raise ValidationError("Unit price must be >= 0")

        existing = self.find_item(item_id, item_type)
        if existing is None:
            if operation is StockOperation.REMOVE:
                raise ValidationError(f"No stock for {item_type} {item_id!r} to remove")
            unit_cost = unit_price or 0.0
            created = await self.binding.add(
                validate_schema(
                    StockItemInput,
                    {
                        "item_id": item_id,
                        "item_type": item_type,
                        "item_name": item_name or item_id,
                        "quantity": quantity,
                        "unit_cost": unit_cost,
                        "total_value": round(quantity * unit_cost, 2),
                    },
                )
            )
            if created is None:
                raise WriteAmbiguousError(f"Stock row for {item_id!r} was not echoed back")
            logger.info("stock: created %s %s qty=%s", item_type, item_id, quantity)
            return created

        if operation is StockOperation.ADD:
            new_quantity = existing.quantity + quantity
            if unit_price is not None:
                unit_cost = (existing.quantity * existing.unit_cost + quantity * unit_price) / new_quantity
            else:
                unit_cost = existing.unit_cost
        else:
            new_quantity = existing.quantity - quantity
            if new_quantity < 0:
                raise ValidationError(
                    f"Insufficient stock for {existing.item_name}: "
                    f"{existing.quantity} available, {quantity} requested"
                )
            unit_cost = existing.unit_cost

        logger.info(
            "stock: %s %s %s qty %s -> %s",
            operation.value,
            item_type,
            item_id,
            existing.quantity,
            new_quantity,
        )
        return await self.binding.update(
            existing.id,
            {
                "quantity": new_quantity,
                "unit_cost": round(unit_cost, 4),
                "total_value": round(new_quantity * unit_cost, 2),
            },
        )
