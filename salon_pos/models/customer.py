from sqlalchemy import Column, Index, Integer, Text, text

from ..db import Base, LOCAL_NOW


class Customer(Base):
    __tablename__ = "customers"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    phone = Column(Text, unique=True)
    email = Column(Text)
    loyalty_points = Column(Integer, server_default=text("0"))
    visits = Column(Integer, server_default=text("0"))
    notes = Column(Text)
    created_at = Column(Text, server_default=LOCAL_NOW)
    updated_at = Column(Text, server_default=LOCAL_NOW)
    __table_args__ = (Index("idx_customers_phone", "phone"),)
