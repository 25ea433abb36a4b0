from sqlalchemy import Column, Integer, String, Numeric, Date, ForeignKey, Boolean
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin, SoftDeleteMixin


class PurchaseInvoice(Base, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "purchase_invoices"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, index=True, nullable=False)
    invoice_number = Column(String, nullable=False)
    invoice_date = Column(Date, nullable=False)
    supplier_id = Column(Integer, ForeignKey("suppliers.id"), nullable=False, index=True)
    total_amount = Column(Numeric(14, 2), default=0, nullable=False)
    # Initial payment captured on the invoice form before Payment rows existed
    payment_amount = Column(Numeric(14, 2), default=0, nullable=False)
    # Raised only to record goods sent back: its total is a credit, not a purchase
    is_return_only = Column(Boolean, default=False, nullable=False)

    # Relationships
    supplier = relationship("Supplier", back_populates="purchase_invoices")
