"""
Pytest fixtures for Almoxarife tests.
"""

from datetime import timedelta

import pytest
from django.contrib.auth import get_user_model
from django.utils import timezone

from almoxarife import ledger
from almoxarife.adapters import reset_holder_directory
from almoxarife.holders import Holder
from almoxarife.models import Category, Product
from almoxarife.tests.directory import FakeHolderDirectory


User = get_user_model()


@pytest.fixture(autouse=True)
def _fresh_directory():
    """Drop the cached holder directory between tests."""
    reset_holder_directory()
    yield
    reset_holder_directory()
    FakeHolderDirectory.clear()


@pytest.fixture
def user(db):
    """Create a test user."""
    return User.objects.create_user(
        username='almoxarife',
        password='testpass123'
    )


@pytest.fixture
def uniform(db):
    """Individual product (goes to employees)."""
    return Product.objects.create(
        name='Camisa',
        color='Azul',
        size='M',
        category=Category.INDIVIDUAL,
    )


@pytest.fixture
def boots(db):
    """Another individual product."""
    return Product.objects.create(
        name='Bota',
        size='42',
        category=Category.INDIVIDUAL,
    )


@pytest.fixture
def radio(db):
    """Collective product (stays at posts)."""
    return Product.objects.create(
        name='Rádio HT',
        category=Category.COLLECTIVE,
    )


@pytest.fixture
def flashlight(db):
    """Another collective product."""
    return Product.objects.create(
        name='Lanterna',
        category=Category.COLLECTIVE,
    )


@pytest.fixture
def employee():
    return Holder.employee('func-1')


@pytest.fixture
def other_employee():
    return Holder.employee('func-2')


@pytest.fixture
def post():
    return Holder.post('posto-central')


@pytest.fixture
def other_post():
    return Holder.post('posto-norte')


@pytest.fixture
def stocked_uniform(uniform):
    """Uniform with 10 units purchased."""
    ledger.purchase(uniform, 10, note='Compra inicial')
    return uniform


@pytest.fixture
def stocked_radio(radio):
    """Radio with 5 units purchased."""
    ledger.purchase(radio, 5)
    return radio


@pytest.fixture
def directory(settings):
    """Switch the ledger to the in-memory holder directory."""
    settings.ALMOXARIFE = {
        **settings.ALMOXARIFE,
        'HOLDER_DIRECTORY': 'almoxarife.tests.directory.FakeHolderDirectory',
    }
    reset_holder_directory()
    return FakeHolderDirectory


@pytest.fixture
def today():
    """Return today's date."""
    return timezone.localdate()


@pytest.fixture
def yesterday():
    return timezone.localdate() - timedelta(days=1)
