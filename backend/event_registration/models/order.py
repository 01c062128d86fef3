"""
Orders produced by the registration engine.

Key design decisions:
- `registrant_kind` plus a check constraint makes "exactly one registrant"
  structural: a GUEST order links a guest only, a MEMBER order a member only
- `transaction_id` is unique and never changes once issued
- `unit_price` on each line is the product-type price at creation time;
  later catalog price changes do not touch existing orders
"""

from sqlalchemy import Column, Integer, String, Numeric, ForeignKey, CheckConstraint, Index
from sqlalchemy.orm import relationship

from event_registration.db.base import Base, TimestampMixin

REGISTRANT_GUEST = "GUEST"
REGISTRANT_MEMBER = "MEMBER"

ORDER_STATUSES = ("PENDING", "CONFIRMED", "CANCELLED", "COMPLETED", "REFUNDED")


class OrderMaster(Base, TimestampMixin):
    __tablename__ = "order_masters"

    id = Column(Integer, primary_key=True, index=True)
    registrant_kind = Column(String(10), nullable=False)
    guest_id = Column(Integer, ForeignKey("guests.id"), nullable=True, index=True)
    member_id = Column(Integer, ForeignKey("members.id"), nullable=True, index=True)
    total_cost = Column(Numeric(12, 2), nullable=False)
    transaction_id = Column(String(64), nullable=False, unique=True)
    status = Column(String(20), nullable=False, default="PENDING")

    guest = relationship("Guest", lazy="selectin")
    member = relationship("Member", lazy="selectin")
    order_lines = relationship(
        "OrderLine",
        back_populates="order",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="OrderLine.id",
    )

    __table_args__ = (
        CheckConstraint(
            "(registrant_kind = 'GUEST' AND guest_id IS NOT NULL AND member_id IS NULL) OR "
            "(registrant_kind = 'MEMBER' AND member_id IS NOT NULL AND guest_id IS NULL)",
            name="check_order_single_registrant",
        ),
        CheckConstraint("total_cost >= 0", name="check_order_total_non_negative"),
        CheckConstraint(
            "status IN ('PENDING', 'CONFIRMED', 'CANCELLED', 'COMPLETED', 'REFUNDED')",
            name="check_order_status",
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<OrderMaster(id={self.id}, txn={self.transaction_id}, "
            f"kind={self.registrant_kind}, total={self.total_cost})>"
        )


class OrderLine(Base, TimestampMixin):
    __tablename__ = "order_lines"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("order_masters.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    product_type_id = Column(Integer, ForeignKey("product_types.id"), nullable=False)
    session_id = Column(Integer, ForeignKey("event_sessions.id"), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)

    order = relationship("OrderMaster", back_populates="order_lines")
    product = relationship("Product", lazy="selectin")
    product_type = relationship("ProductType", lazy="selectin")

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="check_order_line_quantity_non_negative"),
        # Capacity accounting sums Entry quantities per session
        Index("ix_order_lines_session_product", "session_id", "product_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<OrderLine(id={self.id}, order={self.order_id}, session={self.session_id}, "
            f"product_type={self.product_type_id}, qty={self.quantity})>"
        )
