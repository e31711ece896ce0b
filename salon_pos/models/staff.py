from sqlalchemy import Column, Float, ForeignKey, Index, Integer, Text, text

from ..db import Base, LOCAL_NOW


class Staff(Base):
    __tablename__ = "staff"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    commission_rate = Column(Float, server_default=text("0"))
    active = Column(Integer, nullable=False, server_default=text("1"))
    pin = Column(Text)  # admin rows only
    role = Column(Text, server_default=text("'staff'"))  # staff | admin
    photo_path = Column(Text)
    created_at = Column(Text, server_default=LOCAL_NOW)


class StaffTimeLog(Base):
    __tablename__ = "staff_time_logs"
    id = Column(Integer, primary_key=True, autoincrement=True)
    staff_id = Column(Integer, ForeignKey("staff.id"), nullable=False)
    clock_in = Column(Text, nullable=False, server_default=LOCAL_NOW)
    clock_out = Column(Text)  # NULL while the shift is open
    created_at = Column(Text, server_default=LOCAL_NOW)
    __table_args__ = (
        Index("idx_staff_time_logs_staff", "staff_id"),
        Index("idx_staff_time_logs_clock_in", "clock_in"),
    )
