from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ledger.core.dependencies import get_repository
from ledger.logger_config import logger
from ledger.repositories.base import LedgerRepository
from ledger.schemas.reference import DeleteResponse, ProductType, ProductTypeCreate, ProductTypeListResponse
from ledger.services.reference_service import create_product_type, delete_product_type, get_all_product_types

router = APIRouter()


@router.get("", response_model=ProductTypeListResponse)
def get_product_types(
    search: Optional[str] = Query(None),
    repository: LedgerRepository = Depends(get_repository)
):
    product_types = get_all_product_types(repository, search=search)
    return ProductTypeListResponse(total=len(product_types), product_types=product_types)


@router.post("", response_model=ProductType, status_code=status.HTTP_201_CREATED)
def create_product_type_route(
    product_data: ProductTypeCreate,
    repository: LedgerRepository = Depends(get_repository)
):
    try:
        return create_product_type(repository, product_data)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Error creating product type: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create product type"
        )


@router.delete("/{product_type_id}", response_model=DeleteResponse)
def delete_product_type_route(
    product_type_id: str,
    repository: LedgerRepository = Depends(get_repository)
):
    """Delete a product type that no transaction uses."""
    try:
        deleted = delete_product_type(repository, product_type_id)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Product type not found"
        )
    return DeleteResponse(message="Product type deleted successfully")
