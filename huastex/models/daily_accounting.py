"""Daily accounting (corte de caja) model."""
from sqlalchemy import Column, String, Numeric, Date, DateTime, UniqueConstraint
from sqlalchemy.sql import func
from huastex.database import Base, BigIntPK
from huastex.utils.number_format import money_float


class DailyAccounting(Base):
    """Cash counted in a branch drawer at the end of a day."""
    
    __tablename__ = 'daily_accounting'
    __table_args__ = (
        UniqueConstraint('date', 'location', name='uq_daily_accounting_date_location'),
    )
    
    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    date = Column(Date, nullable=False)
    location = Column(String(30), nullable=False)
    counted_amount = Column(Numeric(12, 2))
    cash_in_register = Column(Numeric(12, 2))
    cashier_name = Column(String(120))
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
    
    def to_dict(self):
        return {
            'date': self.date.isoformat() if self.date else None,
            'location': self.location,
            'counted_amount': money_float(self.counted_amount),
            'cash_in_register': money_float(self.cash_in_register),
            'cashier_name': self.cashier_name,
        }
    
    def __repr__(self):
        return f"<DailyAccounting(date={self.date}, location={self.location}, counted={self.counted_amount})>"
