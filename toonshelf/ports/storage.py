from typing import Protocol


class StorageGatewayPort(Protocol):
    """
    Object storage gateway.

    Both methods raise StorageFailure when the backend rejects the call or is
    unreachable. No retries are attempted.
    """

    def upload(self, bucket: str, path: str, data: bytes, content_type: str) -> str:
        """Store bytes at bucket/path and return the public URL."""
        ...

    def move(self, bucket: str, src_path: str, dest_path: str) -> None:
        """Relocate an object inside a bucket."""
        ...
