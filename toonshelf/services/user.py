from uuid import UUID

from toonshelf.domain.entities import User
from toonshelf.domain.errors import InvalidInput, NotFound
from toonshelf.ports.clock import ClockPort
from toonshelf.ports.repo import UserRepoPort


class UserService:
    def __init__(self, user_repo: UserRepoPort, clock: ClockPort):
        self.user_repo = user_repo
        self.clock = clock

    def get_profile(self, user_id: UUID) -> User:
        user = self.user_repo.get_by_id(user_id)
        if not user:
            raise NotFound("User not found")
        return user

    def become_creator(self, user_id: UUID) -> User:
        user = self.get_profile(user_id)
        if user.role in ("creator", "admin"):
            raise InvalidInput("user is already a creator or admin")

        user.role = "creator"
        user.updated_at = self.clock.now()
        self.user_repo.save(user)
        return user
