"""Inventory item model with per-branch price table."""
from sqlalchemy import Column, BigInteger, String, Numeric, Integer, Date, DateTime, Boolean, Text, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from huastex.database import Base, BigIntPK
from huastex.core.branch_prices import unflatten, price_column
from huastex.core.constants import Branch, PRICE_KINDS
from huastex.utils.number_format import money_float


class InventoryItem(Base):
    """
    Inventory item (producto en inventario).
    
    The 12 branch prices are derived from price_cost and the formula while
    manual_pricing is False, and authored by hand while it is True.
    """
    
    __tablename__ = 'inventory_item'
    
    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    product = Column(String(200), nullable=False)
    model = Column(String(120))
    serial_number = Column(String(120))
    category = Column(String(120))
    
    price_cost = Column(Numeric(12, 2))
    formula_id = Column(BigInteger, ForeignKey('formula.id', ondelete='SET NULL'), nullable=True)
    manual_pricing = Column(Boolean, nullable=False, default=False, server_default='0')
    
    # Branch prices: contado / MSI / crédito
    cerro_azul_price = Column(Numeric(12, 2))
    cerro_azul_msi_price = Column(Numeric(12, 2))
    cerro_azul_credit_price = Column(Numeric(12, 2))
    aquismon_price = Column(Numeric(12, 2))
    aquismon_msi_price = Column(Numeric(12, 2))
    aquismon_credit_price = Column(Numeric(12, 2))
    tepetzintla_price = Column(Numeric(12, 2))
    tepetzintla_msi_price = Column(Numeric(12, 2))
    tepetzintla_credit_price = Column(Numeric(12, 2))
    tlacolula_price = Column(Numeric(12, 2))
    tlacolula_msi_price = Column(Numeric(12, 2))
    tlacolula_credit_price = Column(Numeric(12, 2))
    
    headquarters_arrival_date = Column(Date, nullable=True)
    original_quantity = Column(Integer)
    all_branches_quantity = Column(Integer)
    internal_number = Column(String(60))
    description = Column(Text)
    supplier = Column(String(200))
    supplier_bill = Column(String(120))
    final_customer_bill = Column(String(120))
    devolution_bill = Column(String(120))
    bank_deposit = Column(String(120))
    comments = Column(Text)
    
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    
    # Relationships
    formula = relationship('Formula', back_populates='inventory_items')
    
    @property
    def price_table(self):
        """Branch price table ({branch: {cash, msi, credit}}) read from the columns."""
        return unflatten(self)
    
    def to_dict(self):
        """Convert to dictionary for JSON serialization."""
        data = {
            'id': self.id,
            'product': self.product,
            'model': self.model,
            'serial_number': self.serial_number,
            'category': self.category,
            'price_cost': money_float(self.price_cost),
            'formula_id': self.formula_id,
            'manual_pricing': bool(self.manual_pricing),
            'headquarters_arrival_date': self.headquarters_arrival_date.isoformat() if self.headquarters_arrival_date else None,
            'original_quantity': self.original_quantity,
            'all_branches_quantity': self.all_branches_quantity,
            'internal_number': self.internal_number,
            'description': self.description,
            'supplier': self.supplier,
            'supplier_bill': self.supplier_bill,
            'final_customer_bill': self.final_customer_bill,
            'devolution_bill': self.devolution_bill,
            'bank_deposit': self.bank_deposit,
            'comments': self.comments,
        }
        for branch in Branch:
            for kind in PRICE_KINDS:
                column = price_column(branch, kind)
                data[column] = money_float(getattr(self, column))
        return data
    
    def __repr__(self):
        return f"<InventoryItem(id={self.id}, product={self.product}, cost={self.price_cost})>"
