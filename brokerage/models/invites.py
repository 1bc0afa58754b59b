from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint, func
from brokerage.models.base import Base

class LotInvite(Base):
    __tablename__ = "lot_invites"
    __table_args__ = (UniqueConstraint("round_id", "buyer_id", name="uq_lot_invites_round_buyer"),)

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    lot_id = Column(Integer, ForeignKey("lots.id", ondelete="CASCADE"), nullable=False, index=True)
    round_id = Column(Integer, ForeignKey("lot_rounds.id", ondelete="CASCADE"), nullable=False)
    buyer_id = Column(Integer, ForeignKey("buyers.id", ondelete="CASCADE"), nullable=False)
    token = Column(String, nullable=False, unique=True, index=True)
    status = Column(String, nullable=False, default="pending")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
