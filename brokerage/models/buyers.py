from sqlalchemy import Column, Integer, String, Boolean, Float, DateTime, JSON, func
from brokerage.models.base import Base

class Buyer(Base):
    __tablename__ = "buyers"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String, nullable=False)
    email = Column(String)
    company = Column(String)
    tags = Column(JSON)
    credit_ok = Column(Boolean, nullable=False, default=False)
    reliability_score = Column(Float)
    lots_won_count = Column(Integer, nullable=False, default=0)
    po_lots_count = Column(Integer, nullable=False, default=0)
    pos_received_count = Column(Integer, nullable=False, default=0)
    avg_hours_to_po = Column(Float)
    award_conversion_rate = Column(Float)
    last_win_at = Column(DateTime(timezone=True))
    last_po_at = Column(DateTime(timezone=True))
    is_active = Column(Boolean, nullable=False, default=True)
    do_not_invite = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
