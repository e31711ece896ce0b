from sqlalchemy import Column, ForeignKey, Index, Integer, Text, text

from ..db import Base, LOCAL_NOW


class Reservation(Base):
    __tablename__ = "reservations"
    id = Column(Integer, primary_key=True, autoincrement=True)
    customer_name = Column(Text)
    customer_phone = Column(Text)
    staff_id = Column(Integer, ForeignKey("staff.id"))
    service_name = Column(Text)
    notes = Column(Text)
    status = Column(Text, server_default=text("'scheduled'"))  # scheduled | confirmed | completed | cancelled
    start_time = Column(Text, nullable=False)
    end_time = Column(Text)
    created_at = Column(Text, server_default=LOCAL_NOW)
    __table_args__ = (Index("idx_reservations_start_time", "start_time"),)
