from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ledger.core.dependencies import get_repository
from ledger.logger_config import logger
from ledger.repositories.base import LedgerRepository
from ledger.schemas.reference import (
    CustomerGroup,
    CustomerGroupCreate,
    CustomerGroupListResponse,
    DeleteResponse,
)
from ledger.services.reference_service import (
    create_customer_group,
    delete_customer_group,
    get_all_customer_groups,
)

router = APIRouter()


@router.get("", response_model=CustomerGroupListResponse)
def get_customer_groups(
    search: Optional[str] = Query(None),
    repository: LedgerRepository = Depends(get_repository)
):
    groups = get_all_customer_groups(repository, search=search)
    return CustomerGroupListResponse(total=len(groups), customer_groups=groups)


@router.post("", response_model=CustomerGroup, status_code=status.HTTP_201_CREATED)
def create_customer_group_route(
    group_data: CustomerGroupCreate,
    repository: LedgerRepository = Depends(get_repository)
):
    try:
        return create_customer_group(repository, group_data)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Error creating customer group: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create customer group"
        )


@router.delete("/{group_id}", response_model=DeleteResponse)
def delete_customer_group_route(
    group_id: str,
    repository: LedgerRepository = Depends(get_repository)
):
    """
    Delete a customer group.
    Protected groups and groups that still hold customers or bank accounts are refused.
    """
    try:
        deleted = delete_customer_group(repository, group_id)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Customer group not found"
        )
    return DeleteResponse(message="Customer group deleted successfully")
