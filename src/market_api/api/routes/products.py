"""
Product catalog API routes
All store access goes through ProductsService.
"""

import logging
from typing import List
from fastapi import APIRouter, Depends

from market_api.models.product import (
    MessageResponse,
    ProductCreatedResponse,
    ProductResponse,
    ProductUpdatedResponse,
    ProductWriteRequest,
)
from market_api.services.products_service import ProductsService, get_products_service
from market_api.utils.error_handling import http_error_for, set_endpoint_context

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=List[ProductResponse])
async def list_products(service: ProductsService = Depends(get_products_service)):
    """List all products (404 when the catalog is empty)"""
    set_endpoint_context("list_products")
    result = await service.list_products()
    if not result.success:
        raise http_error_for(result)

    return [ProductResponse.from_row(row) for row in result.data]


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: int, service: ProductsService = Depends(get_products_service)):
    """Get product details"""
    set_endpoint_context("get_product")
    result = await service.get_product(product_id)
    if not result.success:
        raise http_error_for(result)

    return ProductResponse.from_row(result.data[0])


@router.post("", status_code=201, response_model=ProductCreatedResponse)
async def create_product(
    request: ProductWriteRequest,
    service: ProductsService = Depends(get_products_service)
):
    """Create a new product"""
    set_endpoint_context("create_product")
    result = await service.create_product(
        name=request.name,
        description=request.description,
        price_cost=request.price_cost,
        price_sale=request.price_sale,
        quantity=request.quantity,
        image=request.image
    )
    if not result.success:
        raise http_error_for(result)

    product = ProductResponse.from_row(result.data[0])
    return ProductCreatedResponse(
        message="Product added successfully",
        id=product.id,
        product=product
    )


@router.put("/{product_id}", response_model=ProductUpdatedResponse)
async def update_product(
    product_id: int,
    request: ProductWriteRequest,
    service: ProductsService = Depends(get_products_service)
):
    """Overwrite every field of a product"""
    set_endpoint_context("update_product")
    result = await service.update_product(
        product_id,
        name=request.name,
        description=request.description,
        price_cost=request.price_cost,
        price_sale=request.price_sale,
        quantity=request.quantity,
        image=request.image
    )
    if not result.success:
        raise http_error_for(result)

    return ProductUpdatedResponse(
        message="Product updated successfully",
        product=ProductResponse.from_row(result.data[0])
    )


@router.delete("/{product_id}", response_model=MessageResponse)
async def delete_product(product_id: int, service: ProductsService = Depends(get_products_service)):
    """Delete a product"""
    set_endpoint_context("delete_product")
    result = await service.delete_product(product_id)
    if not result.success:
        raise http_error_for(result)

    return MessageResponse(message="Product deleted successfully")
