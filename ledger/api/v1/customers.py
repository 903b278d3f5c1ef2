from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ledger.core.dependencies import get_repository
from ledger.logger_config import logger
from ledger.repositories.base import LedgerRepository
from ledger.schemas.reference import Customer, CustomerCreate, CustomerListResponse, DeleteResponse
from ledger.services.reference_service import create_customer, delete_customer, get_all_customers

router = APIRouter()


@router.get("", response_model=CustomerListResponse)
def get_customers(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=100),
    search: Optional[str] = Query(None),
    repository: LedgerRepository = Depends(get_repository)
):
    """Get all customers with optional search over name, phone and code."""
    customers, total = get_all_customers(repository, skip=skip, limit=limit, search=search)
    return CustomerListResponse(total=total, customers=customers)


@router.post("", response_model=Customer, status_code=status.HTTP_201_CREATED)
def create_customer_route(
    customer_data: CustomerCreate,
    repository: LedgerRepository = Depends(get_repository)
):
    try:
        return create_customer(repository, customer_data)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Error creating customer: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create customer"
        )


@router.delete("/{customer_id}", response_model=DeleteResponse)
def delete_customer_route(
    customer_id: str,
    repository: LedgerRepository = Depends(get_repository)
):
    """
    Delete a customer.
    Protected customers and customers with transactions are refused.
    """
    try:
        deleted = delete_customer(repository, customer_id)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Customer not found"
        )
    return DeleteResponse(message="Customer deleted successfully")
