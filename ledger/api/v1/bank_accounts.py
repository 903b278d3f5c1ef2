from fastapi import APIRouter, Depends, HTTPException, status

from ledger.core.dependencies import get_repository
from ledger.logger_config import logger
from ledger.repositories.base import LedgerRepository
from ledger.schemas.reference import BankAccount, BankAccountCreate, BankAccountListResponse, DeleteResponse
from ledger.services.reference_service import create_bank_account, delete_bank_account, get_all_bank_accounts

router = APIRouter()


@router.get("", response_model=BankAccountListResponse)
def get_bank_accounts(repository: LedgerRepository = Depends(get_repository)):
    bank_accounts = get_all_bank_accounts(repository)
    return BankAccountListResponse(total=len(bank_accounts), bank_accounts=bank_accounts)


@router.post("", response_model=BankAccount, status_code=status.HTTP_201_CREATED)
def create_bank_account_route(
    account_data: BankAccountCreate,
    repository: LedgerRepository = Depends(get_repository)
):
    """Create a bank account holding a single existing currency."""
    try:
        return create_bank_account(repository, account_data)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Error creating bank account: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create bank account"
        )


@router.delete("/{account_id}", response_model=DeleteResponse)
def delete_bank_account_route(
    account_id: str,
    repository: LedgerRepository = Depends(get_repository)
):
    try:
        deleted = delete_bank_account(repository, account_id)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Bank account not found"
        )
    return DeleteResponse(message="Bank account deleted successfully")
