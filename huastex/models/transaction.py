"""Ledger transaction model read by the daily report."""
from sqlalchemy import Column, BigInteger, String, Numeric, Date, DateTime, ForeignKey
from sqlalchemy.sql import func
from huastex.database import Base, BigIntPK
from huastex.utils.number_format import money_float


class Transaction(Base):
    """
    Income / outcome entry of the cash ledger.
    
    Created once per sale (upserted by sale_id when the sale is edited), once
    per abono, or manually from the report screen. Field names are part of the
    API contract used by the reconciliation report.
    """
    
    __tablename__ = 'transactions'
    
    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    transaction_type = Column(String(10), nullable=False, default='income')  # income | outcome
    name = Column(String(200), nullable=False, default='')
    product = Column(String(500))
    value = Column(Numeric(12, 2), nullable=False)
    saldo = Column(Numeric(12, 2))
    por_pagar = Column(Numeric(12, 2))
    transaction_date = Column(Date, nullable=False, index=True)
    payment_type = Column(String(20), nullable=True)
    location = Column(String(30), nullable=False, default='', index=True)
    
    sale_id = Column(BigInteger, ForeignKey('sale.id', ondelete='SET NULL'), nullable=True, index=True)
    payment_id = Column(BigInteger, ForeignKey('payment.id', ondelete='SET NULL'), nullable=True)
    
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    
    def to_dict(self):
        """Convert to dictionary for JSON serialization."""
        return {
            'id': self.id,
            'transaction_type': self.transaction_type,
            'name': self.name,
            'product': self.product,
            'value': money_float(self.value),
            'saldo': money_float(self.saldo),
            'por_pagar': money_float(self.por_pagar),
            'transaction_date': self.transaction_date.isoformat() if self.transaction_date else None,
            'payment_type': self.payment_type,
            'location': self.location,
            'sale_id': self.sale_id,
            'payment_id': self.payment_id,
        }
    
    def __repr__(self):
        return f"<Transaction(id={self.id}, type={self.transaction_type}, value={self.value}, payment_type={self.payment_type})>"
