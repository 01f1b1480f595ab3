import hashlib
import json
import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Callable, Optional

logger = logging.getLogger(__name__)

NUMERIC_DEFAULT = Decimal('0')
# Local money columns are DecimalField(max_digits=12, decimal_places=2).
NUMERIC_PLACES = Decimal('0.01')
NUMERIC_LIMIT = Decimal('1e10')


def parse_numeric_or_default(value, default=NUMERIC_DEFAULT) -> Decimal:
    """
    Convert a Tiny numeric string to a 2-place Decimal.

    Malformed, non-finite or out-of-range values count as `default`.
    """
    if value is None or value == '':
        return default
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        logger.warning("Non-numeric value %r – treating as %s.", value, default)
        return default
    if not number.is_finite():
        logger.warning("Non-finite value %r – treating as %s.", value, default)
        return default
    if abs(number) < NUMERIC_LIMIT:
        number = number.quantize(NUMERIC_PLACES, rounding=ROUND_HALF_UP)
    if abs(number) >= NUMERIC_LIMIT:
        logger.warning("Out-of-range value %r – treating as %s.", value, default)
        return default
    return number


def compute_hash(fields: dict) -> str:
    """Compute a stable SHA-256 hash of the hashed field set for delta sync."""
    serialized = json.dumps(fields, sort_keys=True, ensure_ascii=False, default=str)
    return hashlib.sha256(serialized.encode('utf-8')).hexdigest()


def remote_id_of(record: dict) -> Optional[str]:
    """Tiny id as a string, or None when the record carries no usable id."""
    value = record.get('id')
    if value is None:
        return None
    return str(value).strip() or None


def _optional(value):
    return value if value not in (None, '') else None


@dataclass(frozen=True)
class EntityMapping:
    """How one Tiny entity lands in a local table."""

    entity: str            # request value, e.g. 'products'
    singular: str          # summary/entity label, e.g. 'product'
    endpoint: str
    list_key: str
    item_key: str
    linkage_field: str
    label_key: str
    hash_fields: Callable[[dict], dict]
    to_local: Callable[[dict], dict]
    label: Callable[[dict], object]

    def remote_id(self, record: dict) -> Optional[str]:
        return remote_id_of(record)

    def content_hash(self, record: dict) -> str:
        return compute_hash(self.hash_fields(record))

    def summary_entry(self, record: dict, action: str) -> dict:
        return {
            'action': action,
            'entity': self.singular,
            'tinyId': self.remote_id(record),
            self.label_key: self.label(record),
        }


def _contact_fields(contact: dict) -> dict:
    return {
        'tiny_customer_id': remote_id_of(contact),
        'name': contact.get('nome') or '',
        'cpf_cnpj': _optional(contact.get('cpf_cnpj')),
        'email': _optional(contact.get('email')),
        'phone': _optional(contact.get('fone')),
    }


def _product_fields(product: dict) -> dict:
    return {
        'tiny_product_id': remote_id_of(product),
        'name': product.get('nome') or '',
        'sku': _optional(product.get('codigo')),
        'description': _optional(product.get('descricao')),
        'unit_price': parse_numeric_or_default(product.get('preco')),
    }


def _order_fields(order: dict) -> dict:
    total = parse_numeric_or_default(order.get('valor'))
    return {
        'tiny_order_id': remote_id_of(order),
        'order_number': str(order.get('numero') or ''),
        'status': _optional(order.get('situacao')),
        'total': total,
        'subtotal': total,
        'items': order.get('itens') or [],
    }


CONTACTS = EntityMapping(
    entity='contacts',
    singular='contact',
    endpoint='contatos.pesquisa.php',
    list_key='contatos',
    item_key='contato',
    linkage_field='tiny_customer_id',
    label_key='name',
    hash_fields=lambda c: {
        'name': c.get('nome'),
        'cpfCnpj': c.get('cpf_cnpj'),
        'email': c.get('email'),
    },
    to_local=_contact_fields,
    label=lambda c: c.get('nome'),
)

PRODUCTS = EntityMapping(
    entity='products',
    singular='product',
    endpoint='produtos.pesquisa.php',
    list_key='produtos',
    item_key='produto',
    linkage_field='tiny_product_id',
    label_key='sku',
    hash_fields=lambda p: {
        'name': p.get('nome'),
        'sku': p.get('codigo'),
        'price': p.get('preco'),
    },
    to_local=_product_fields,
    label=lambda p: p.get('codigo'),
)

ORDERS = EntityMapping(
    entity='orders',
    singular='order',
    endpoint='pedidos.pesquisa.php',
    list_key='pedidos',
    item_key='pedido',
    linkage_field='tiny_order_id',
    label_key='number',
    hash_fields=lambda o: {
        'orderNumber': o.get('numero'),
        'total': o.get('valor'),
        'status': o.get('situacao'),
    },
    to_local=_order_fields,
    label=lambda o: o.get('numero'),
)

MAPPINGS = {m.entity: m for m in (CONTACTS, PRODUCTS, ORDERS)}
