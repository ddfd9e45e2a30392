"""
Data factories for test data generation.

Factories use factory-boy to create realistic test data with sensible defaults.
All factories support async creation via create_async() method.

Usage:
    from tests.factories import UserFactory, ProductFactory

    # Create user
    user = await UserFactory.create_async(db_session, email="ann@example.com")

    # Create product
    product = await ProductFactory.create_async(db_session, name="Keyboard")
"""

from tests.factories.product import ProductFactory, product_payload
from tests.factories.user import UserFactory

__all__ = [
    "UserFactory",
    "ProductFactory",
    "product_payload",
]
