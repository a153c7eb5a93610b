"""
SQLAlchemy models for the company and store catalog.
"""
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from app.pos.database import Base


class CompanyModel(Base):
    __tablename__ = "companies"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False, index=True)
    address = Column(String, nullable=False, default="")
    email = Column(String, nullable=False, default="")
    phone = Column(String, nullable=False, default="")
    country = Column(String, nullable=False)
    design_id = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)

    stores = relationship(
        "StoreModel",
        back_populates="company",
        cascade="all, delete-orphan",
        order_by="StoreModel.store_code",
    )


class StoreModel(Base):
    __tablename__ = "stores"

    id = Column(Integer, primary_key=True, autoincrement=True)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    store_code = Column(String, nullable=False)
    address = Column(String, nullable=False, default="")
    city_state = Column(String, nullable=False, default="")
    phone = Column(String, nullable=False, default="")
    items = Column(Text, default="")  # comma-separated item names
    created_at = Column(DateTime, default=datetime.utcnow)

    company = relationship("CompanyModel", back_populates="stores")
