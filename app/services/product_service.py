"""
Product Service

CRUD and search over the product catalog. Deletion is a soft delete: the row
stays and ``is_active`` is cleared, so it disappears from the active listing
and from search but is still reachable by id.
"""

from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.results import NotFound, Ok, Result, ValidationFailure
from app.core.time import utcnow
from app.logging import get_logger
from app.models.product import Product
from app.schemas.product import ProductCreate

logger = get_logger("products")


def _not_found(product_id: int) -> NotFound:
    return NotFound(f"Product with ID {product_id} not found.")


class ProductService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _find(self, product_id: int):
        result = await self.db.execute(select(Product).filter(Product.id == product_id))
        return result.scalar_one_or_none()

    async def get_all(self) -> Result[List[Product]]:
        result = await self.db.execute(select(Product).order_by(Product.id))
        return Ok(list(result.scalars().all()))

    async def get_active(self) -> Result[List[Product]]:
        result = await self.db.execute(
            select(Product).filter(Product.is_active == True).order_by(Product.id)
        )
        return Ok(list(result.scalars().all()))

    async def get_by_id(self, product_id: int) -> Result[Product]:
        product = await self._find(product_id)
        if product is None:
            return _not_found(product_id)
        return Ok(product)

    async def search(self, name: str) -> Result[List[Product]]:
        """Case-insensitive literal substring match; `%` and `_` are not wildcards."""
        term = (name or "").strip()
        if not term:
            return ValidationFailure.single("Search term cannot be empty.")

        result = await self.db.execute(
            select(Product)
            .filter(Product.is_active == True, Product.name.icontains(term, autoescape=True))
            .order_by(Product.id)
        )
        return Ok(list(result.scalars().all()))

    async def create(self, data: ProductCreate) -> Result[Product]:
        product = Product(
            name=data.name.strip(),
            description=data.description or "",
            price=data.price,
            stock_quantity=data.stock_quantity,
            created_date=utcnow(),
            is_active=True,
        )
        self.db.add(product)
        await self.db.commit()
        await self.db.refresh(product)

        logger.info("Product created", product_id=product.id, name=product.name)
        return Ok(product)

    async def update(self, product_id: int, data: ProductCreate) -> Result[Product]:
        product = await self._find(product_id)
        if product is None:
            return _not_found(product_id)

        product.name = data.name.strip()
        product.description = data.description or ""
        product.price = data.price
        product.stock_quantity = data.stock_quantity
        product.updated_date = utcnow()
        await self.db.commit()

        logger.info("Product updated", product_id=product_id)
        return Ok(product)

    async def delete(self, product_id: int) -> Result[bool]:
        product = await self._find(product_id)
        if product is None:
            return _not_found(product_id)

        product.is_active = False
        product.updated_date = utcnow()
        await self.db.commit()

        logger.info("Product deactivated", product_id=product_id)
        return Ok(True)
