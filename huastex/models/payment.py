"""Payment (abono) model."""
from sqlalchemy import Column, BigInteger, String, Numeric, Date, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from huastex.database import Base, BigIntPK
from huastex.utils.number_format import money_float


class Payment(Base):
    """Abono applied against the balance of a financed sale."""
    
    __tablename__ = 'payment'
    
    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    sale_id = Column(BigInteger, ForeignKey('sale.id', ondelete='CASCADE'), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    fecha = Column(Date, nullable=False)
    cajero = Column(String(120), nullable=False)
    payment_type = Column(String(20), nullable=False, default='deposit')  # deposit, settled, credit_card, transfer, online, cash_deposit
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    
    # Relationships
    sale = relationship('Sale', back_populates='payments')
    
    def to_dict(self):
        return {
            'id': self.id,
            'sale_id': self.sale_id,
            'amount': money_float(self.amount),
            'fecha': self.fecha.isoformat() if self.fecha else None,
            'cajero': self.cajero,
            'payment_type': self.payment_type,
        }
    
    def __repr__(self):
        return f"<Payment(id={self.id}, sale_id={self.sale_id}, amount={self.amount}, type={self.payment_type})>"
