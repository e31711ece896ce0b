from sqlalchemy import Column, Float, Index, Integer, Text, text

from ..db import Base, LOCAL_NOW


class Category(Base):
    __tablename__ = "categories"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False, unique=True)
    display_order = Column(Integer, server_default=text("0"))
    active = Column(Integer, nullable=False, server_default=text("1"))


class Service(Base):
    __tablename__ = "services"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    price = Column(Float, nullable=False, server_default=text("0"))
    # soft reference to categories.name
    category = Column(Text, nullable=False, server_default=text("'General'"))
    show_on_home = Column(Integer, nullable=False, server_default=text("0"))
    active = Column(Integer, nullable=False, server_default=text("1"))
    created_at = Column(Text, server_default=LOCAL_NOW)
    updated_at = Column(Text, server_default=LOCAL_NOW)
    __table_args__ = (
        Index("idx_services_category", "category"),
        Index("idx_services_active", "active"),
    )
