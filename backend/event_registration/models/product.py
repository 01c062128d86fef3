"""
Sellable products and their priced variants.

A Product is either an Entry ticket (consumes a seat) or a Food item.
Each ProductType is one priced variant: size (person category), diet choice,
meat preference and subtype (DINE-IN meals are matched against headcounts,
PACKET/NONE are free-quantity).
"""

from sqlalchemy import Column, Integer, String, Numeric, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship

from event_registration.db.base import Base, TimestampMixin

PRODUCT_ENTRY = "Entry"
PRODUCT_FOOD = "Food"

SIZE_ADULT = "Adult"
SIZE_CHILDREN = "Children"
SIZE_ELDER = "Elder"
PERSON_CATEGORIES = (SIZE_ADULT, SIZE_CHILDREN, SIZE_ELDER)

SUBTYPE_DINE_IN = "DINE-IN"
SUBTYPE_PACKET = "PACKET"
SUBTYPE_NONE = "NONE"

STATUS_ACTIVE = "ACTIVE"
STATUS_INACTIVE = "INACTIVE"


class Product(Base, TimestampMixin):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    product_code = Column(String(50), unique=True, nullable=False)
    product_name = Column(String(255), nullable=False)
    product_type = Column(String(20), nullable=False)
    status = Column(String(20), nullable=False, default=STATUS_ACTIVE)

    product_types = relationship("ProductType", back_populates="product", lazy="selectin")

    __table_args__ = (
        CheckConstraint("product_type IN ('Entry', 'Food')", name="check_product_type"),
        CheckConstraint("status IN ('ACTIVE', 'INACTIVE')", name="check_product_status"),
    )

    @property
    def is_entry(self) -> bool:
        return self.product_type == PRODUCT_ENTRY

    @property
    def is_food(self) -> bool:
        return self.product_type == PRODUCT_FOOD

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, code={self.product_code}, type={self.product_type})>"


class ProductType(Base, TimestampMixin):
    __tablename__ = "product_types"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    product_size = Column(String(20), nullable=False)
    product_choice = Column(String(20), nullable=False, default="NONE")
    product_pref = Column(String(20), nullable=False, default="NONE")
    product_subtype = Column(String(20), nullable=False, default=SUBTYPE_NONE)
    product_price = Column(Numeric(10, 2), nullable=False)
    status = Column(String(20), nullable=False, default=STATUS_ACTIVE)

    product = relationship("Product", back_populates="product_types", lazy="joined")

    __table_args__ = (
        CheckConstraint("product_price >= 0", name="check_product_price_non_negative"),
        CheckConstraint(
            "product_size IN ('Adult', 'Children', 'Elder')", name="check_product_size"
        ),
        CheckConstraint(
            "product_choice IN ('VEG', 'NON-VEG', 'NONE')", name="check_product_choice"
        ),
        CheckConstraint(
            "product_pref IN ('CHICKEN', 'MUTTON', 'FISH', 'NONE')", name="check_product_pref"
        ),
        CheckConstraint(
            "product_subtype IN ('PACKET', 'DINE-IN', 'NONE')", name="check_product_subtype"
        ),
    )

    @property
    def is_dine_in(self) -> bool:
        return self.product_subtype == SUBTYPE_DINE_IN

    def __repr__(self) -> str:
        return (
            f"<ProductType(id={self.id}, product={self.product_id}, size={self.product_size}, "
            f"subtype={self.product_subtype}, price={self.product_price})>"
        )
