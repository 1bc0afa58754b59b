from sqlalchemy import Column, Integer, String, Numeric, Text, DateTime, ForeignKey, JSON, func
from sqlalchemy.orm import relationship
from brokerage.models.base import Base

LOT_STATUSES = (
    "draft",
    "open",
    "offers_received",
    "awarded",
    "sale_in_progress",
    "order_processing",
    "sold",
    "closed",
)

class Lot(Base):
    __tablename__ = "lots"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    title = Column(String, nullable=False)
    currency = Column(String, nullable=False, default="USD")
    status = Column(String, nullable=False, default="draft")
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    line_items = relationship("LineItem", back_populates="lot")


class LineItem(Base):
    __tablename__ = "line_items"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    lot_id = Column(Integer, ForeignKey("lots.id", ondelete="CASCADE"), nullable=False, index=True)
    description = Column(Text)
    model = Column(String)
    qty = Column(Integer)
    serial_tag = Column(String)
    cpu = Column(String)
    cpu_qty = Column(Integer)
    memory_part_numbers = Column(String)
    memory_qty = Column(Integer)
    network_card = Column(String)
    expansion_card = Column(String)
    gpu = Column(String)
    specs = Column(JSON)  # drives, drives_qty, gpu_qty и т.д.
    asking_price = Column(Numeric(15, 2))

    lot = relationship("Lot", back_populates="line_items")
