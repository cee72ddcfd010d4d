from fastapi import APIRouter, Depends, status

from toonshelf.api.deps import get_auth_service
from toonshelf.api.errors import to_http_exception
from toonshelf.api.schemas import LoginRequest, SignUpRequest, TokenResponse, UserResponse
from toonshelf.domain.errors import DomainError
from toonshelf.services.auth import AuthService

router = APIRouter()


@router.post("/signup", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def sign_up(
    req: SignUpRequest,
    service: AuthService = Depends(get_auth_service),
) -> UserResponse:
    """Register a new reader account."""
    try:
        user = service.sign_up(req.username, req.email, req.password)
    except DomainError as e:
        raise to_http_exception(e) from e
    return UserResponse.model_validate(user)


@router.post("/login", response_model=TokenResponse)
def login(
    req: LoginRequest,
    service: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    """Authenticate by email or username and return an access token."""
    try:
        token, user = service.login(req.identifier, req.password)
    except DomainError as e:
        raise to_http_exception(e) from e
    return TokenResponse(access_token=token, user=UserResponse.model_validate(user))
