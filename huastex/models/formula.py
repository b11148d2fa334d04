"""Pricing formula model."""
from sqlalchemy import Column, String, Numeric, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from huastex.database import Base, BigIntPK
from huastex.utils.number_format import money_float


class Formula(Base):
    """Fórmula por categoría applied to a cost price."""
    
    __tablename__ = 'formula'
    
    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    name = Column(String(120), nullable=False, unique=True)
    operators = Column(String(255), nullable=False)
    
    # Example shown in the formula editor: final_number = evaluate(initial_number)
    initial_number = Column(Numeric(12, 2), nullable=True)
    final_number = Column(Numeric(12, 2), nullable=True)
    
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    
    # Relationships
    inventory_items = relationship('InventoryItem', back_populates='formula')
    
    def to_dict(self):
        """Convert to dictionary for JSON serialization."""
        return {
            'id': self.id,
            'name': self.name,
            'operators': self.operators,
            'initial_number': money_float(self.initial_number),
            'final_number': money_float(self.final_number),
        }
    
    def __repr__(self):
        return f"<Formula(id={self.id}, name={self.name}, operators={self.operators})>"
