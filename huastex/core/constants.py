"""Branches, payment modalities and the fixed pricing factors."""
import enum
from decimal import Decimal


class Branch(str, enum.Enum):
    """Physical store locations. Values match the `sucursal`/`location` fields."""
    CERRO_AZUL = 'cerroazul'
    AQUISMON = 'aquismon'
    TEPETZINTLA = 'tepetzintla'
    TLACOLULA = 'tlacolula'

    @property
    def column_prefix(self) -> str:
        """Prefix used by the inventory price columns (cerro_azul_price, ...)."""
        return BRANCH_COLUMN_PREFIX[self]

    @classmethod
    def parse(cls, value):
        """Resolve a branch from its value, name or column prefix, case-insensitive."""
        if isinstance(value, cls):
            return value
        key = str(value or '').strip().lower().replace(' ', '').replace('ó', 'o')
        for branch in cls:
            if key in (branch.value, branch.name.lower(), branch.column_prefix, branch.column_prefix.replace('_', '')):
                return branch
        raise ValueError(f'Sucursal desconocida: {value}')


BRANCH_COLUMN_PREFIX = {
    Branch.CERRO_AZUL: 'cerro_azul',
    Branch.AQUISMON: 'aquismon',
    Branch.TEPETZINTLA: 'tepetzintla',
    Branch.TLACOLULA: 'tlacolula',
}

# Cash-price premium of each branch over the reference branch (Cerro Azul).
BRANCH_PREMIUMS = {
    Branch.CERRO_AZUL: Decimal('1.0'),
    Branch.AQUISMON: Decimal('1.032'),
    Branch.TEPETZINTLA: Decimal('1.03'),
    Branch.TLACOLULA: Decimal('1.045'),
}

MSI_FACTOR = Decimal('1.1')
CREDIT_FACTOR = Decimal('1.52')

# Financed sales carry a 12% normal price over the discounted promo price.
NORMAL_PRICE_MARKUP = Decimal('1.12')

PRICE_KINDS = ('cash', 'msi', 'credit')


class PaymentModality(str, enum.Enum):
    """Forma de pago of a sale."""
    CONTADO = 'Contado'
    APARTADO = 'Apartado'
    CREDITO = 'Crédito'
    MSI = 'MSI'
    TARJETA = 'c/tarjeta'

    @property
    def is_financed(self) -> bool:
        return self in (PaymentModality.APARTADO, PaymentModality.CREDITO, PaymentModality.MSI)

    @property
    def price_kind(self) -> str:
        """Which column of the branch price table a sale line uses."""
        if self is PaymentModality.MSI:
            return 'msi'
        if self is PaymentModality.CREDITO:
            return 'credit'
        return 'cash'

    @classmethod
    def parse(cls, value):
        if isinstance(value, cls):
            return value
        key = str(value or '').strip().lower()
        aliases = {
            'contado': cls.CONTADO, 'cash': cls.CONTADO,
            'apartado': cls.APARTADO, 'layaway': cls.APARTADO,
            'crédito': cls.CREDITO, 'credito': cls.CREDITO, 'credit': cls.CREDITO,
            'msi': cls.MSI, 'installments': cls.MSI,
            'c/tarjeta': cls.TARJETA, 'tarjeta': cls.TARJETA, 'card': cls.TARJETA, 'credit_card': cls.TARJETA,
        }
        if key not in aliases:
            raise ValueError(f'Forma de pago desconocida: {value}')
        return aliases[key]


class TermUnit(str, enum.Enum):
    """Unit of the plazo (term) of a financed sale."""
    DAYS = 'days'
    WEEKS = 'weeks'
    MONTHS = 'months'


class TransactionType(str, enum.Enum):
    INCOME = 'income'
    OUTCOME = 'outcome'


class PaymentType(str, enum.Enum):
    """payment_type tag of a ledger transaction."""
    SALE = 'sale'
    DOWN_PAYMENT = 'down_payment'
    DEPOSIT = 'deposit'
    SETTLED = 'settled'
    CREDIT_CARD = 'credit_card'
    TRANSFER = 'transfer'
    ONLINE = 'online'
    CASH_DEPOSIT = 'cash_deposit'


PAYMENT_TYPE_LABELS = {
    PaymentType.DEPOSIT: 'Abono',
    PaymentType.DOWN_PAYMENT: 'Enganche',
    PaymentType.SALE: 'Venta',
    PaymentType.SETTLED: 'Liquidó',
    PaymentType.CREDIT_CARD: 'C/Tarjeta',
    PaymentType.TRANSFER: 'Transferencia',
    PaymentType.ONLINE: 'Online',
    PaymentType.CASH_DEPOSIT: 'Depósito en efectivo',
}

# Payment methods an abono can be registered with.
ABONO_PAYMENT_TYPES = (
    PaymentType.DEPOSIT, PaymentType.SETTLED, PaymentType.CREDIT_CARD,
    PaymentType.TRANSFER, PaymentType.ONLINE, PaymentType.CASH_DEPOSIT,
)

# Money that never reaches the cash drawer.
NON_DRAWER_PAYMENT_TYPES = frozenset({
    PaymentType.CREDIT_CARD.value, PaymentType.TRANSFER.value, PaymentType.ONLINE.value,
})
