"""
Products service - business logic for the product catalog
"""

import logging
from typing import Optional

import asyncpg
from fastapi import Depends

from market_api.database.connection import affected_rows, get_db_pool
from market_api.models.enums import ErrorType
from market_api.services.base_service import BaseService, ServiceResult, STORE_ERRORS

logger = logging.getLogger(__name__)

# Serializes id assignment between concurrent creators; plain reads are unaffected
LOCK_PRODUCTS_SQL = "LOCK TABLE productos IN SHARE ROW EXCLUSIVE MODE"
NEXT_ID_SQL = "SELECT COALESCE(MAX(id), 0) + 1 FROM productos"

INSERT_PRODUCT_SQL = """
    INSERT INTO productos (id, nombre, descripcion, precio_costo, precio_venta, cantidad, fototgrafia)
    VALUES ($1, $2, $3, $4, $5, $6, $7)
    RETURNING *
"""

UPDATE_PRODUCT_SQL = """
    UPDATE productos SET
        nombre = $1,
        descripcion = $2,
        precio_costo = $3,
        precio_venta = $4,
        cantidad = $5,
        fototgrafia = $6
    WHERE id = $7
"""


class ProductsService(BaseService):
    """Service for product catalog operations"""

    def __init__(self, db_pool: asyncpg.Pool):
        super().__init__(db_pool, "productos")

    async def list_products(self) -> ServiceResult:
        """
        List every product ordered by id.

        An empty catalog is reported as RESOURCE_NOT_FOUND rather than an
        empty success.
        """
        try:
            async with self.db_pool.acquire() as conn:
                rows = await conn.fetch("SELECT * FROM productos ORDER BY id")
        except STORE_ERRORS as e:
            return self.store_failure("list_products", e)

        if not rows:
            return ServiceResult.fail(ErrorType.RESOURCE_NOT_FOUND, "No products registered")
        return ServiceResult.ok([dict(row) for row in rows])

    async def get_product(self, product_id: int) -> ServiceResult:
        result = await self.get_by_id(product_id)
        if result.error_type == ErrorType.RESOURCE_NOT_FOUND:
            return ServiceResult.fail(ErrorType.RESOURCE_NOT_FOUND, "Product not found")
        return result

    async def create_product(
        self,
        name: str,
        description: str,
        price_cost: float,
        price_sale: float,
        quantity: int,
        image: Optional[str] = None
    ) -> ServiceResult:
        """
        Create a product whose id is one more than the current maximum

        Args:
            name: Product name
            description: Product description
            price_cost: Cost price
            price_sale: Sale price
            quantity: Quantity on hand
            image: Image reference (optional, stored as "" when omitted)

        Returns:
            ServiceResult with the inserted row
        """
        try:
            async with self.db_pool.acquire() as conn:
                async with conn.transaction():
                    await conn.execute(LOCK_PRODUCTS_SQL)
                    new_id = await conn.fetchval(NEXT_ID_SQL)
                    row = await conn.fetchrow(
                        INSERT_PRODUCT_SQL,
                        new_id, name, description, price_cost, price_sale, quantity, image or ""
                    )
        except asyncpg.UniqueViolationError:
            logger.warning("Product insert hit a duplicate id")
            return ServiceResult.fail(ErrorType.CONFLICT, "Product id already exists")
        except STORE_ERRORS as e:
            return self.store_failure("create_product", e)

        if row is None:
            return ServiceResult.fail(ErrorType.INSERT_FAILED, "Product could not be added")

        logger.info(f"Created product {new_id}")
        return ServiceResult.ok([dict(row)])

    async def update_product(
        self,
        product_id: int,
        name: str,
        description: str,
        price_cost: float,
        price_sale: float,
        quantity: int,
        image: Optional[str] = None
    ) -> ServiceResult:
        """
        Overwrite every column of an existing product and return the stored row

        Field validation happens at the request boundary, so by the time this
        runs the values are already typed.
        """
        try:
            async with self.db_pool.acquire() as conn:
                existing = await conn.fetchval("SELECT id FROM productos WHERE id = $1", product_id)
                if existing is None:
                    return ServiceResult.fail(
                        ErrorType.RESOURCE_NOT_FOUND,
                        f"Product with ID {product_id} not found"
                    )

                status = await conn.execute(
                    UPDATE_PRODUCT_SQL,
                    name, description, price_cost, price_sale, quantity, image or "", product_id
                )
                if affected_rows(status) == 0:
                    return ServiceResult.fail(ErrorType.NO_CHANGES, "No changes were made")

                row = await conn.fetchrow("SELECT * FROM productos WHERE id = $1", product_id)
        except STORE_ERRORS as e:
            return self.store_failure("update_product", e)

        if row is None:
            # Deleted between the update and the re-read
            return ServiceResult.fail(ErrorType.RESOURCE_NOT_FOUND, f"Product with ID {product_id} not found")

        logger.info(f"Updated product {product_id}")
        return ServiceResult.ok([dict(row)])

    async def delete_product(self, product_id: int) -> ServiceResult:
        try:
            async with self.db_pool.acquire() as conn:
                status = await conn.execute("DELETE FROM productos WHERE id = $1", product_id)
        except STORE_ERRORS as e:
            return self.store_failure("delete_product", e)

        deleted_count = affected_rows(status)
        if deleted_count == 0:
            return ServiceResult.fail(ErrorType.RESOURCE_NOT_FOUND, "Product not found")

        logger.info(f"Deleted product {product_id}")
        return ServiceResult(success=True, data=[], count=deleted_count)


def get_products_service(db_pool: asyncpg.Pool = Depends(get_db_pool)) -> ProductsService:
    """Per-request products service bound to the application pool"""
    return ProductsService(db_pool)
