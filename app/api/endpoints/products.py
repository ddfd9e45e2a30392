"""
Products API Endpoints

CRUD and search over the product catalog. Deleting a product deactivates it.
"""

from typing import List

from fastapi import APIRouter, Depends, Query, status

from app.api.dependencies import get_product_service
from app.api.responses import render
from app.schemas.common import ErrorApiResponse, ValidationApiResponse
from app.schemas.product import ProductCreate, ProductOut
from app.services.product_service import ProductService

router = APIRouter()

NOT_FOUND = {404: {"model": ErrorApiResponse}}
INVALID = {400: {"model": ValidationApiResponse}}


def _one(product) -> ProductOut:
    return ProductOut.model_validate(product)


def _many(products) -> List[ProductOut]:
    return [ProductOut.model_validate(product) for product in products]


@router.get("", response_model=List[ProductOut])
async def list_products(service: ProductService = Depends(get_product_service)):
    """Todos os produtos, inclusive os desativados."""
    return render(await service.get_all(), serializer=_many)


@router.get("/active", response_model=List[ProductOut])
async def list_active_products(service: ProductService = Depends(get_product_service)):
    return render(await service.get_active(), serializer=_many)


@router.get("/search", response_model=List[ProductOut], responses=INVALID)
async def search_products(
    name: str = Query(""),
    service: ProductService = Depends(get_product_service)
):
    """
    Busca por trecho do nome (sem diferenciar maiúsculas), apenas produtos ativos.
    """
    return render(await service.search(name), serializer=_many)


@router.get("/{product_id}", response_model=ProductOut, responses=NOT_FOUND)
async def get_product(
    product_id: int,
    service: ProductService = Depends(get_product_service)
):
    return render(await service.get_by_id(product_id), serializer=_one)


@router.post("", response_model=ProductOut, status_code=status.HTTP_201_CREATED, responses=INVALID)
async def create_product(
    product_data: ProductCreate,
    service: ProductService = Depends(get_product_service)
):
    result = await service.create(product_data)
    return render(result, status_code=status.HTTP_201_CREATED, serializer=_one)


@router.put("/{product_id}", status_code=status.HTTP_204_NO_CONTENT, responses={**INVALID, **NOT_FOUND})
async def update_product(
    product_id: int,
    product_data: ProductCreate,
    service: ProductService = Depends(get_product_service)
):
    result = await service.update(product_id, product_data)
    return render(result, status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT, responses=NOT_FOUND)
async def delete_product(
    product_id: int,
    service: ProductService = Depends(get_product_service)
):
    result = await service.delete(product_id)
    return render(result, status_code=status.HTTP_204_NO_CONTENT)
