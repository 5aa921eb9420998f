from datetime import datetime, timezone
import uuid

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    Integer,
    JSON,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    # SQLite DateTime columns are naive; store UTC wall time.
    return datetime.now(timezone.utc).replace(tzinfo=None)


class EntityMixin:
    """Columns every finance table carries. Both are assigned by the store."""

    id = Column(String, primary_key=True, default=_new_id)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    def __repr__(self) -> str:  # pragma: no cover - repr utility
        return f"{type(self).__name__}(id={self.id})"


# ───────────────────────────────────────────────────────────────
# People
# ───────────────────────────────────────────────────────────────


class Employee(EntityMixin, Base):
    __tablename__ = "employees"

    name = Column(String, nullable=False)
    position = Column(String, nullable=True)
    salary = Column(Float, default=0.0)
    archived = Column(Boolean, default=False, nullable=False)


class Customer(EntityMixin, Base):
    __tablename__ = "customers"

    name = Column(String, nullable=False)
    document = Column(String, nullable=True)  # CPF / CNPJ
    phone = Column(String, nullable=True)
    email = Column(String, nullable=True)
    archived = Column(Boolean, default=False, nullable=False)


class Supplier(EntityMixin, Base):
    __tablename__ = "suppliers"

    name = Column(String, nullable=False)
    document = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    email = Column(String, nullable=True)
    archived = Column(Boolean, default=False, nullable=False)


class Salesperson(EntityMixin, Base):
    __tablename__ = "salespeople"

    name = Column(String, nullable=False)
    commission_rate = Column(Float, default=0.0)  # percent
    archived = Column(Boolean, default=False, nullable=False)


# ───────────────────────────────────────────────────────────────
# Inventory & production
# ───────────────────────────────────────────────────────────────


class Material(EntityMixin, Base):
    __tablename__ = "materials"

    name = Column(String, nullable=False)
    unit = Column(String, default="kg")
    archived = Column(Boolean, default=False, nullable=False)


class Product(EntityMixin, Base):
    __tablename__ = "products"

    name = Column(String, nullable=False)
    measures = Column(String, nullable=True)  # e.g. 175/70 R13
    archived = Column(Boolean, default=False, nullable=False)


class StockItem(EntityMixin, Base):
    __tablename__ = "stock_items"

    item_id = Column(String, nullable=False)
    item_type = Column(String, nullable=False)  # material | product
    item_name = Column(String, nullable=False)
    quantity = Column(Float, default=0.0, nullable=False)
    unit_cost = Column(Float, default=0.0, nullable=False)
    total_value = Column(Float, default=0.0, nullable=False)
    min_level = Column(Float, nullable=True)


class ProductionEntry(EntityMixin, Base):
    __tablename__ = "production_entries"

    product_id = Column(String, nullable=True)
    product_name = Column(String, nullable=False)
    quantity_produced = Column(Integer, nullable=False)
    production_date = Column(Date, nullable=False)
    materials_consumed = Column(JSON, nullable=True)  # [{material_id, quantity}]


class Recipe(EntityMixin, Base):
    __tablename__ = "recipes"

    product_name = Column(String, nullable=False)
    direct_cost = Column(Float, default=0.0)
    ingredients = Column(JSON, nullable=True)  # [{material_id, quantity}]
    archived = Column(Boolean, default=False, nullable=False)


class ResaleProduct(EntityMixin, Base):
    __tablename__ = "resale_products"

    name = Column(String, nullable=False)
    supplier_name = Column(String, nullable=True)
    purchase_price = Column(Float, default=0.0)
    sale_price = Column(Float, default=0.0)
    archived = Column(Boolean, default=False, nullable=False)


# ───────────────────────────────────────────────────────────────
# Costs, cash flow, sales
# ───────────────────────────────────────────────────────────────


class FixedCost(EntityMixin, Base):
    __tablename__ = "fixed_costs"

    name = Column(String, nullable=False)
    amount = Column(Float, nullable=False)
    category = Column(String, default="general")
    description = Column(Text, nullable=True)
    archived = Column(Boolean, default=False, nullable=False)


class VariableCost(EntityMixin, Base):
    __tablename__ = "variable_costs"

    name = Column(String, nullable=False)
    amount = Column(Float, nullable=False)
    category = Column(String, default="general")
    description = Column(Text, nullable=True)
    archived = Column(Boolean, default=False, nullable=False)


class CashFlowEntry(EntityMixin, Base):
    __tablename__ = "cash_flow_entries"

    type = Column(String, nullable=False)  # income | expense
    category = Column(String, nullable=False)
    reference_id = Column(String, nullable=True)
    reference_name = Column(String, nullable=True)
    amount = Column(Float, nullable=False)
    transaction_date = Column(Date, nullable=False)
    description = Column(Text, nullable=True)


class DefectiveTireSale(EntityMixin, Base):
    __tablename__ = "defective_tire_sales"

    tire_name = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False)
    sale_value = Column(Float, nullable=False)
    sale_date = Column(Date, nullable=False)
    description = Column(Text, nullable=True)


class WarrantyEntry(EntityMixin, Base):
    __tablename__ = "warranty_entries"

    customer_name = Column(String, nullable=False)
    product_name = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False)
    warranty_date = Column(Date, nullable=False)
    description = Column(Text, nullable=True)
