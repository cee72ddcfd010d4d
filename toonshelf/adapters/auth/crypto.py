from datetime import UTC, datetime, timedelta
from typing import Any, cast

from jose import jwt
from passlib.context import CryptContext

from toonshelf.config.models import AuthConfig

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


class JWTAuthAdapter:
    """Auth adapter that uses JWT tokens and passlib for password hashing."""

    def __init__(self, config: AuthConfig):
        self.secret_key = config.secret_key
        self.algorithm = config.algorithm
        self.expires_delta = timedelta(minutes=config.access_token_expire_minutes)

    def hash_password(self, password: str) -> str:
        result: str = pwd_context.hash(password)
        return result

    def verify_password(self, plain: str, hashed: str) -> bool:
        result: bool = pwd_context.verify(plain, hashed)
        return result

    def create_token(
        self, user_id: Any, role: str, now_utc: datetime | None = None
    ) -> str:
        """
        Create a signed access token carrying the user id and role.

        Args:
            user_id: Subject of the token
            role: User role at issue time
            now_utc: Current UTC time (for testing/determinism). Defaults to datetime.now(UTC).
        """
        current_time = now_utc if now_utc is not None else datetime.now(UTC)
        claims = {
            "sub": str(user_id),
            "role": role,
            "exp": current_time + self.expires_delta,
        }
        encoded_jwt: str = jwt.encode(claims, self.secret_key, algorithm=self.algorithm)
        return encoded_jwt

    def validate_token(self, token: str) -> dict[str, Any] | None:
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
            return cast(dict[str, Any], payload)
        except jwt.JWTError:
            return None
