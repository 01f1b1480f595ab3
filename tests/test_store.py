from unittest.mock import patch

import pytest
from django.db import OperationalError, ProgrammingError

from tinysync.exceptions import DataStoreError
from tinysync.models import Product
from tinysync.store import SyncStore
from tinysync.transformer import PRODUCTS


@pytest.mark.django_db
def test_find_linked_returns_pk_and_hash():
    product = Product.objects.create(name='Bolsa X', tiny_product_id='T1', tiny_hash='abc')
    assert SyncStore().find_linked(PRODUCTS, 'T1') == (product.pk, 'abc')
    assert SyncStore().find_linked(PRODUCTS, 'T404') is None


@pytest.mark.parametrize('error, kind', [
    (OperationalError('no such table: products'), DataStoreError.RELATION_MISSING),
    (ProgrammingError('relation "products" does not exist'), DataStoreError.RELATION_MISSING),
    (ProgrammingError('permission denied for table products'), DataStoreError.PERMISSION_DENIED),
    (OperationalError('database is locked'), DataStoreError.OTHER),
])
def test_database_errors_are_classified(error, kind):
    with patch.object(Product.objects, 'filter', side_effect=error):
        with pytest.raises(DataStoreError) as exc_info:
            SyncStore().find_linked(PRODUCTS, 'T1')
    assert exc_info.value.kind == kind
