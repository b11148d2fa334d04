"""Sale line model."""
from sqlalchemy import Column, BigInteger, String, Numeric, Integer, ForeignKey
from sqlalchemy.orm import relationship
from huastex.database import Base, BigIntPK
from huastex.utils.number_format import money_float


class SaleLine(Base):
    """Product sold within a sale."""
    
    __tablename__ = 'sale_line'
    
    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    sale_id = Column(BigInteger, ForeignKey('sale.id', ondelete='CASCADE'), nullable=False, index=True)
    inventory_id = Column(BigInteger, ForeignKey('inventory_item.id', ondelete='SET NULL'), nullable=True)
    producto = Column(String(200), nullable=False)
    serial_number = Column(String(120))
    quantity = Column(Integer, nullable=False, default=1)
    unit_price = Column(Numeric(12, 2), nullable=False)
    total_price = Column(Numeric(12, 2), nullable=False)
    
    # Relationships
    sale = relationship('Sale', back_populates='lines')
    inventory_item = relationship('InventoryItem')
    
    def to_dict(self):
        return {
            'id': self.id,
            'inventory_id': self.inventory_id,
            'producto': self.producto,
            'serial_number': self.serial_number,
            'quantity': self.quantity,
            'unit_price': money_float(self.unit_price),
            'total_price': money_float(self.total_price),
        }
    
    def __repr__(self):
        return f"<SaleLine(id={self.id}, producto={self.producto}, qty={self.quantity}, total={self.total_price})>"
