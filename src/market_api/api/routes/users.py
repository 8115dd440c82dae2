"""
User directory API routes
"""

import logging
from typing import List
from fastapi import APIRouter, Depends

from market_api.models.user import AuthenticateRequest, AuthenticateResponse, UserResponse
from market_api.services.users_service import UsersService, get_users_service
from market_api.utils.error_handling import http_error_for, set_endpoint_context

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=List[UserResponse])
async def list_users(service: UsersService = Depends(get_users_service)):
    """List users (credential fields are never included)"""
    set_endpoint_context("list_users")
    result = await service.list_users()
    if not result.success:
        raise http_error_for(result)

    return [UserResponse.from_row(row) for row in result.data]


@router.post("", response_model=AuthenticateResponse)
async def authenticate(
    request: AuthenticateRequest,
    service: UsersService = Depends(get_users_service)
):
    """Check a username/password pair against the stored hash"""
    set_endpoint_context("authenticate")
    result = await service.authenticate(request.username, request.password)
    if not result.success:
        raise http_error_for(result)

    return AuthenticateResponse(
        message="User authenticated",
        user=UserResponse.from_row(result.data[0])
    )
