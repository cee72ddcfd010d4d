from fastapi import APIRouter, Depends

from toonshelf.api.deps import get_current_user, get_user_service
from toonshelf.api.errors import to_http_exception
from toonshelf.api.schemas import UserResponse
from toonshelf.domain.entities import User
from toonshelf.domain.errors import DomainError
from toonshelf.services.user import UserService

router = APIRouter()


@router.get("/me", response_model=UserResponse)
def read_users_me(current_user: User = Depends(get_current_user)) -> UserResponse:
    return UserResponse.model_validate(current_user)


@router.post("/me/become-creator", response_model=UserResponse)
def become_creator(
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    """Upgrade the current reader account to a creator account."""
    try:
        user = service.become_creator(current_user.id)
    except DomainError as e:
        raise to_http_exception(e) from e
    return UserResponse.model_validate(user)
