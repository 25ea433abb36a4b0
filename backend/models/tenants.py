from sqlalchemy import Column, String, Text, Numeric
from database import Base
from models.audit_mixin import TimestampMixin


class Tenant(Base, TimestampMixin):
    __tablename__ = "tenants"

    id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    # JSON blobs edited by the admin UI; see crud/shipping_charges.py for the accepted shapes
    shipping_city_charges = Column(Text, nullable=True)
    shipping_quantity_rules = Column(Text, nullable=True)
    owner_withdrawals = Column(Numeric(14, 2), default=0, nullable=False)
