from sqlalchemy import Column, Integer, String, Text, Boolean, Numeric
from database import Base
from models.audit_mixin import TimestampMixin


class Product(Base, TimestampMixin):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True, nullable=False)
    name = Column(String, nullable=False)
    price = Column(Numeric(14, 2), default=0, nullable=False)
    shipping_quantity_rules = Column(Text, nullable=True)
    shipping_default_quantity_charge = Column(Numeric(14, 2), nullable=True)
    use_default_shipping = Column(Boolean, default=True, nullable=False)
