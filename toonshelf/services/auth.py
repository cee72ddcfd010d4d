import logging

from toonshelf.domain.entities import User
from toonshelf.domain.errors import InvalidCredentials, InvalidInput
from toonshelf.ports.auth import AuthPort
from toonshelf.ports.clock import ClockPort
from toonshelf.ports.repo import UserRepoPort

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(
        self,
        user_repo: UserRepoPort,
        auth_adapter: AuthPort,
        clock: ClockPort,
        min_password_length: int = 8,
    ):
        self.user_repo = user_repo
        self.auth_adapter = auth_adapter
        self.clock = clock
        self.min_password_length = min_password_length

    def sign_up(self, username: str, email: str, password: str) -> User:
        username = username.strip()
        email = email.strip().lower()
        if not username or not email:
            raise InvalidInput("Username and email are required")
        if len(password) < self.min_password_length:
            raise InvalidInput(
                f"Password must be at least {self.min_password_length} characters"
            )

        if self.user_repo.get_by_email(email):
            raise InvalidInput("email or username already exists")
        if self.user_repo.get_by_username(username):
            raise InvalidInput("username already exists")

        now = self.clock.now()
        user = User(
            username=username,
            email=email,
            password_hash=self.auth_adapter.hash_password(password),
            role="user",
            created_at=now,
            updated_at=now,
        )
        self.user_repo.save(user)
        logger.info("User %s signed up", user.id)
        return user

    def login(self, identifier: str, password: str) -> tuple[str, User]:
        """Authenticate by email or username. Returns (access_token, user)."""
        identifier = identifier.strip()
        user = self.user_repo.get_by_email(identifier.lower()) or self.user_repo.get_by_username(
            identifier
        )
        if not user:
            raise InvalidCredentials("invalid credentials")

        if not self.auth_adapter.verify_password(password, user.password_hash):
            raise InvalidCredentials("invalid credentials")

        token = self.auth_adapter.create_token(user.id, user.role)
        return token, user
