"""Sale model."""
from decimal import Decimal
from sqlalchemy import Column, String, Numeric, Integer, Date, DateTime, Boolean, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from huastex.database import Base, BigIntPK
from huastex.utils.number_format import money_float
from huastex.core.constants import PaymentModality
from huastex.core.sale_totals import is_settled


class Sale(Base):
    """Sale (venta) registered at the point of sale."""
    
    __tablename__ = 'sale'
    
    id = Column(BigIntPK, primary_key=True, autoincrement=True)
    
    # Customer
    nombre = Column(String(200), nullable=False)
    email = Column(String(200))
    phone = Column(String(40))
    calle_y_numero = Column(String(200))
    ciudad = Column(String(120))
    estado = Column(String(120))
    
    fecha = Column(Date, nullable=True)
    forma_de_pago = Column(String(20), nullable=False, default=PaymentModality.CONTADO.value)
    card_payment = Column(Boolean, nullable=False, default=False, server_default='0')
    sucursal = Column(String(30), nullable=False)
    
    # Amounts
    discount = Column(Numeric(5, 2), nullable=False, default=0, server_default='0')
    enganche = Column(Numeric(12, 2), nullable=False, default=0, server_default='0')
    precio_promocion = Column(Numeric(12, 2), nullable=False, default=0, server_default='0')
    precio_normal = Column(Numeric(12, 2), nullable=False, default=0, server_default='0')
    saldo_precio_promocion = Column(Numeric(12, 2), nullable=False, default=0, server_default='0')
    saldo_precio_normal = Column(Numeric(12, 2), nullable=False, default=0, server_default='0')
    manual_pricing = Column(Boolean, nullable=False, default=False, server_default='0')
    
    # Plazo (term) and due date
    plazo_value = Column(Integer, nullable=True)
    plazo_unit = Column(String(10), nullable=False, default='weeks', server_default='weeks')
    fecha_vencimiento = Column(Date, nullable=True)
    
    agente_de_ventas = Column(String(120))
    aclaraciones = Column(Text)
    
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    
    # Relationships
    lines = relationship('SaleLine', back_populates='sale', cascade='all, delete-orphan', order_by='SaleLine.id')
    payments = relationship('Payment', back_populates='sale', cascade='all, delete-orphan', order_by='Payment.id')
    
    @property
    def modality(self):
        return PaymentModality.parse(self.forma_de_pago)
    
    @property
    def plazo(self):
        return {'value': self.plazo_value, 'unit': self.plazo_unit}
    
    @property
    def is_settled(self):
        """Financed sale whose promo balance is paid off. Cash sales are settled at once."""
        return is_settled(self.saldo_precio_promocion or Decimal('0'))
    
    def to_dict(self, include_lines=True):
        """Convert to dictionary for JSON serialization."""
        data = {
            'id': self.id,
            'nombre': self.nombre,
            'email': self.email,
            'phone': self.phone,
            'calle_y_numero': self.calle_y_numero,
            'ciudad': self.ciudad,
            'estado': self.estado,
            'fecha': self.fecha.isoformat() if self.fecha else None,
            'forma_de_pago': self.forma_de_pago,
            'card_payment': bool(self.card_payment),
            'sucursal': self.sucursal,
            'discount': money_float(self.discount),
            'enganche': money_float(self.enganche),
            'precio_promocion': money_float(self.precio_promocion),
            'precio_normal': money_float(self.precio_normal),
            'saldo_precio_promocion': money_float(self.saldo_precio_promocion),
            'saldo_precio_normal': money_float(self.saldo_precio_normal),
            'manual_pricing': bool(self.manual_pricing),
            'plazo': self.plazo,
            'fecha_vencimiento': self.fecha_vencimiento.isoformat() if self.fecha_vencimiento else None,
            'agente_de_ventas': self.agente_de_ventas,
            'aclaraciones': self.aclaraciones,
            'is_settled': self.is_settled,
        }
        if include_lines:
            data['products'] = [line.to_dict() for line in self.lines]
        return data
    
    def __repr__(self):
        return f"<Sale(id={self.id}, nombre={self.nombre}, forma_de_pago={self.forma_de_pago})>"
