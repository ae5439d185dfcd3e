from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from storefront.dependencies import get_account_service, get_current_user
from storefront.errors import AuthenticationError, ValidationError
from storefront.models import User
from storefront.schemas.auth import LoginRequest, RegisterRequest, TokenResponse, UserResponse
from storefront.services.accounts import AccountService, issue_access_token

router = APIRouter()


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a buyer account",
)
def register(
    body: RegisterRequest,
    accounts: Annotated[AccountService, Depends(get_account_service)],
):
    try:
        user = accounts.register(body.email, body.password, body.display_name)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return UserResponse.from_user(user)


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Exchange email and password for a bearer token",
)
def login(
    body: LoginRequest,
    accounts: Annotated[AccountService, Depends(get_account_service)],
):
    """The returned token authorizes the order endpoints."""
    try:
        user = accounts.authenticate(body.email, body.password)
    except AuthenticationError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )
    access = issue_access_token(user.id)
    return TokenResponse(accessToken=access.token, expiresIn=access.expires_in)


@router.get("/me", response_model=UserResponse, summary="Current user")
def me(current_user: Annotated[User, Depends(get_current_user)]):
    return UserResponse.from_user(current_user)
