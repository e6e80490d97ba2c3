"""
Routes for the signed-in account.
"""
from fastapi import APIRouter, Depends

from ..models import Account
from ..schemas import AccountResponse
from ..session import verify_account

router = APIRouter(prefix="/v1/account", tags=["account"])


@router.get("", response_model=AccountResponse)
def get_account(account: Account = Depends(verify_account)):
    return account
