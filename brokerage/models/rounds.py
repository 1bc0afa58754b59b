from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, UniqueConstraint, func
from brokerage.models.base import Base

ROUND_SCOPES = ("all", "unsold", "custom")
ROUND_STATUSES = ("draft", "live", "closed")

class LotRound(Base):
    __tablename__ = "lot_rounds"
    __table_args__ = (UniqueConstraint("lot_id", "round_number", name="uq_lot_rounds_lot_number"),)

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    lot_id = Column(Integer, ForeignKey("lots.id", ondelete="CASCADE"), nullable=False, index=True)
    round_number = Column(Integer, nullable=False)
    scope = Column(String, nullable=False, default="all")
    status = Column(String, nullable=False, default="live")
    notes = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    closed_at = Column(DateTime(timezone=True))

