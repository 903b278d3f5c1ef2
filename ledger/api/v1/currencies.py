from fastapi import APIRouter, Depends, HTTPException, status

from ledger.core.dependencies import get_repository
from ledger.logger_config import logger
from ledger.repositories.base import LedgerRepository
from ledger.schemas.reference import Currency, CurrencyCreate, CurrencyListResponse, DeleteResponse
from ledger.services.reference_service import create_currency, delete_currency, get_all_currencies

router = APIRouter()


@router.get("", response_model=CurrencyListResponse)
def get_currencies(repository: LedgerRepository = Depends(get_repository)):
    currencies = get_all_currencies(repository)
    return CurrencyListResponse(total=len(currencies), currencies=currencies)


@router.post("", response_model=Currency, status_code=status.HTTP_201_CREATED)
def create_currency_route(
    currency_data: CurrencyCreate,
    repository: LedgerRepository = Depends(get_repository)
):
    """The first currency, or one created with isBase, becomes the base currency."""
    try:
        return create_currency(repository, currency_data)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Error creating currency: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create currency"
        )


@router.delete("/{currency_id}", response_model=DeleteResponse)
def delete_currency_route(
    currency_id: str,
    repository: LedgerRepository = Depends(get_repository)
):
    try:
        deleted = delete_currency(repository, currency_id)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Currency not found"
        )
    return DeleteResponse(message="Currency deleted successfully")
