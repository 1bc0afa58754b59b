from sqlalchemy import Column, Integer, String, Text, Numeric, DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import relationship
from brokerage.models.base import Base

class Offer(Base):
    __tablename__ = "offers"
    __table_args__ = (UniqueConstraint("lot_id", "buyer_id", name="uq_offers_lot_buyer"),)

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    lot_id = Column(Integer, ForeignKey("lots.id", ondelete="CASCADE"), nullable=False, index=True)
    buyer_id = Column(Integer, ForeignKey("buyers.id", ondelete="CASCADE"), nullable=False)
    invite_id = Column(Integer, ForeignKey("lot_invites.id", ondelete="SET NULL"))
    round_id = Column(Integer, ForeignKey("lot_rounds.id", ondelete="SET NULL"))
    currency = Column(String)
    take_all_total = Column(Numeric(15, 2))
    total_offer = Column(Numeric(15, 2))
    notes = Column(Text)
    status = Column(String, nullable=False, default="new")
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    lines = relationship("OfferLine", back_populates="offer")


class OfferLine(Base):
    __tablename__ = "offer_lines"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    offer_id = Column(Integer, ForeignKey("offers.id", ondelete="CASCADE"), nullable=False, index=True)
    line_item_id = Column(Integer, ForeignKey("line_items.id", ondelete="CASCADE"), nullable=False, index=True)
    unit_price = Column(Numeric(15, 2))
    qty_snapshot = Column(Integer)
    currency = Column(String)

    offer = relationship("Offer", back_populates="lines")
