"""
Registrant records: sponsoring members and the guests they bring.
"""

from sqlalchemy import Column, Integer, String, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship

from event_registration.db.base import Base, TimestampMixin


class Member(Base, TimestampMixin):
    __tablename__ = "members"

    id = Column(Integer, primary_key=True, index=True)
    member_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True, index=True)
    phone = Column(String(50), nullable=True)

    # Family profile; registrations carry their own headcounts
    adults = Column(Integer, nullable=False, default=1)
    children = Column(Integer, nullable=False, default=0)
    infants = Column(Integer, nullable=False, default=0)
    elder = Column(Integer, nullable=False, default=0)

    guests = relationship("Guest", back_populates="member")

    def __repr__(self) -> str:
        return f"<Member(id={self.id}, name={self.member_name})>"


class Guest(Base, TimestampMixin):
    __tablename__ = "guests"

    id = Column(Integer, primary_key=True, index=True)
    member_id = Column(Integer, ForeignKey("members.id"), nullable=False, index=True)
    guest_name = Column(String(255), nullable=False)
    guest_email = Column(String(255), nullable=True)
    guest_phone = Column(String(50), nullable=True)
    guest_location = Column(String(255), nullable=True)
    adults = Column(Integer, nullable=False, default=0)
    children = Column(Integer, nullable=False, default=0)
    infants = Column(Integer, nullable=False, default=0)
    elder = Column(Integer, nullable=False, default=0)

    member = relationship("Member", back_populates="guests")

    __table_args__ = (
        CheckConstraint(
            "adults >= 0 AND children >= 0 AND infants >= 0 AND elder >= 0",
            name="check_guest_headcounts_non_negative",
        ),
    )

    def __repr__(self) -> str:
        return f"<Guest(id={self.id}, name={self.guest_name}, member={self.member_id})>"
