from typing import Any, Protocol


class AuthPort(Protocol):
    def hash_password(self, password: str) -> str: ...

    def verify_password(self, plain: str, hashed: str) -> bool: ...

    def create_token(self, user_id: Any, role: str) -> str: ...

    def validate_token(self, token: str) -> dict[str, Any] | None:
        # Returns claims or None if invalid/expired
        ...
