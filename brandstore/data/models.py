"""
SQLAlchemy database models.

These define the relational schema. Rows are read and written through
parameterized SQL in RelationalStore; the models exist so the schema lives in
one place and can be created with Base.metadata.create_all.

Image columns hold public URLs of objects in the object store.
"""

from sqlalchemy import Column, String, Integer, Numeric, DateTime, ForeignKey, Text, UniqueConstraint, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from brandstore.data.database import Base


class Product(Base):
    """Top-level product line (e.g. "T-Shirts"). One image."""
    __tablename__ = "products"
    __table_args__ = (UniqueConstraint("name", name="uq_products_name"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    image_url = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class ProductCategory(Base):
    """Category within a product line. One image."""
    __tablename__ = "product_categories"
    __table_args__ = (UniqueConstraint("category", name="uq_product_categories_category"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)  # product line this category belongs to
    category = Column(String(255), nullable=False)
    image_url = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Subcategory(Base):
    """Sellable item (SKU) with four images."""
    __tablename__ = "subcategories"
    __table_args__ = (
        UniqueConstraint("sku", name="uq_subcategories_sku"),
        Index("ix_subcategories_category", "category"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    category = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    sku = Column(String(100), nullable=False)
    material = Column(String(255))
    brand = Column(String(255))
    description = Column(Text)
    gender = Column(String(50))
    image_1 = Column(Text, nullable=False)
    image_2 = Column(Text, nullable=False)
    image_3 = Column(Text, nullable=False)
    image_4 = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Banner(Base):
    __tablename__ = "banners"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    project = Column(String(100), nullable=False)
    platform = Column(String(100), nullable=False)
    image_url = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Customer(Base):
    """Storefront customer. Profile picture is optional."""
    __tablename__ = "customers"
    __table_args__ = (
        UniqueConstraint("email", name="uq_customers_email"),
        UniqueConstraint("phone", name="uq_customers_phone"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(32), nullable=False)
    password_hash = Column(String(255), nullable=False)
    profile_url = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class User(Base):
    """Back-office (admin) account."""
    __tablename__ = "users"
    __table_args__ = (UniqueConstraint("email", name="uq_users_email"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Order(Base):
    """
    Order header. Owns its OrderItem rows; the item set is fixed at placement.
    payment_status: PENDING | PAID
    order_status: Pending | Confirmed | Shipped | Delivered | Cancelled
    """
    __tablename__ = "orders"
    __table_args__ = (Index("ix_orders_phone", "phone"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=True, index=True)
    full_name = Column(String(255), nullable=False)
    phone = Column(String(32), nullable=False)
    address = Column(Text, nullable=False)
    city = Column(String(100), nullable=False)
    pincode = Column(String(20), nullable=False)
    total_amount = Column(Numeric(12, 2), nullable=False, default=0)
    payment_method = Column(String(20), nullable=False, default="COD")
    payment_status = Column(String(20), nullable=False, default="PENDING")
    order_status = Column(String(20), nullable=False, default="Pending", server_default="Pending")
    razorpay_order_id = Column(String(64), nullable=True)
    razorpay_payment_id = Column(String(64), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")


class OrderItem(Base):
    """Order line. item_status changes independently of the order status."""
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    product_id = Column(String(64), nullable=True)
    product_name = Column(String(255), nullable=False)
    price = Column(Numeric(12, 2), nullable=False, default=0)
    quantity = Column(Integer, nullable=False, default=1)
    image_url = Column(Text, nullable=True)
    item_status = Column(String(20), nullable=False, default="Pending", server_default="Pending")

    order = relationship("Order", back_populates="items")


class Stock(Base):
    """Running stock total per subcategory."""
    __tablename__ = "stock"
    __table_args__ = (UniqueConstraint("subcategory_id", name="uq_stock_subcategory_id"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    subcategory_id = Column(Integer, nullable=False)
    stock = Column(Integer, nullable=False, default=0)
