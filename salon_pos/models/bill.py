from sqlalchemy import Column, Float, ForeignKey, Index, Integer, Text, text

from ..db import Base, LOCAL_NOW


class Bill(Base):
    __tablename__ = "bills"
    id = Column(Integer, primary_key=True, autoincrement=True)
    customer_id = Column(Integer, ForeignKey("customers.id"))
    subtotal = Column(Float, nullable=False, server_default=text("0"))
    discount_amount = Column(Float, server_default=text("0"))
    discount_type = Column(Text)  # fixed | percent
    total = Column(Float, nullable=False, server_default=text("0"))
    payment_method = Column(Text, nullable=False)
    payment_status = Column(Text, server_default=text("'completed'"))
    notes = Column(Text)
    created_at = Column(Text, server_default=LOCAL_NOW)
    __table_args__ = (
        Index("idx_bills_created", "created_at"),
        Index("idx_bills_customer", "customer_id"),
    )


class BillItem(Base):
    """One sold service. Name, price and staff name are copied at sale time."""

    __tablename__ = "bill_items"
    id = Column(Integer, primary_key=True, autoincrement=True)
    bill_id = Column(Integer, ForeignKey("bills.id", ondelete="CASCADE"), nullable=False)
    service_id = Column(Integer, ForeignKey("services.id"))
    service_name = Column(Text, nullable=False)
    price = Column(Float, nullable=False)
    quantity = Column(Integer, server_default=text("1"))
    staff_id = Column(Integer, ForeignKey("staff.id"))
    staff_name = Column(Text)
    notes = Column(Text)
    __table_args__ = (Index("idx_bill_items_bill", "bill_id"),)
