from typing import List

from fastapi import APIRouter, Depends, status

from supermarket.core.deps import get_category_service
from supermarket.core.exceptions import NotFoundError
from supermarket.schemas.category import Category, CategoryCreate, CategoryUpdate
from supermarket.services.category_service import CategoryService

router = APIRouter(
    prefix="/categories",
    tags=["Categories"],
)


@router.get("", response_model=List[Category])
async def list_categories(service: CategoryService = Depends(get_category_service)):
    """All categories, oldest first."""
    return await service.get_all()


@router.get("/{category_id}", response_model=Category)
async def get_category(category_id: str, service: CategoryService = Depends(get_category_service)):
    category = await service.get_by_id(category_id)
    if not category:
        raise NotFoundError(f"Category {category_id} not found")
    return category


@router.post("", response_model=Category, status_code=status.HTTP_201_CREATED)
async def create_category(body: CategoryCreate, service: CategoryService = Depends(get_category_service)):
    return await service.add(body)


@router.patch("/{category_id}", response_model=Category)
async def update_category(
    category_id: str,
    body: CategoryUpdate,
    service: CategoryService = Depends(get_category_service),
):
    return await service.update(category_id, body)


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(category_id: str, service: CategoryService = Depends(get_category_service)):
    """Refused with 409 while products still use the category."""
    await service.delete(category_id)
