"""Promotion code model."""
import enum
from datetime import date
from sqlalchemy import Column, String, Numeric, Date, Boolean
from webshop.database import Base


class PromotionKind(str, enum.Enum):
    """How the promotion value is applied."""
    PERCENTAGE = 'percentage'
    FIXED = 'fixed'


class Promotion(Base):
    """
    Promotion code (code promo).

    `code` is matched exactly, case included. `value` is a percentage for
    PERCENTAGE promotions and an amount in euros for FIXED ones.
    """

    __tablename__ = 'promotion'

    code = Column(String(40), primary_key=True)
    kind = Column(String(20), nullable=False)
    value = Column(Numeric(10, 2), nullable=False)
    description = Column(String(200), nullable=False)
    minimum_subtotal = Column(Numeric(10, 2), nullable=True)
    expires_on = Column(Date, nullable=True)
    active = Column(Boolean, nullable=False, default=True)

    def __repr__(self):
        return f"<Promotion(code='{self.code}', kind='{self.kind}', value={self.value})>"

    def is_expired(self, today: date) -> bool:
        """A promotion stays valid through its expiry day."""
        return self.expires_on is not None and today > self.expires_on
