from sqlalchemy import Column, Integer, String, Numeric, DateTime, ForeignKey, UniqueConstraint, func
from brokerage.models.base import Base

class AwardedLine(Base):
    __tablename__ = "awarded_lines"
    __table_args__ = (UniqueConstraint("round_id", "line_item_id", name="uq_awarded_lines_round_line"),)

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    lot_id = Column(Integer, ForeignKey("lots.id", ondelete="CASCADE"), nullable=False, index=True)
    round_id = Column(Integer, ForeignKey("lot_rounds.id", ondelete="CASCADE"), nullable=False)
    line_item_id = Column(Integer, ForeignKey("line_items.id", ondelete="CASCADE"), nullable=False)
    buyer_id = Column(Integer, ForeignKey("buyers.id", ondelete="CASCADE"), nullable=False)
    offer_id = Column(Integer, ForeignKey("offers.id", ondelete="SET NULL"))
    currency = Column(String)
    unit_price = Column(Numeric(15, 2))  # пусто для take-all
    qty = Column(Integer, nullable=False, default=0)
    extended = Column(Numeric(15, 2))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
