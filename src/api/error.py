from fastapi import status
from src.libs.result import Error


class ClientError(Exception):
    def __init__(self, base_error: Error, status_code: int = status.HTTP_400_BAD_REQUEST):
        self.base_error = base_error
        self.status_code = status_code
        super().__init__(base_error.message)


class ServerError(Exception):
    def __init__(self, base_error: Error):
        self.base_error = base_error
        super().__init__(base_error.message)


class RateLimitedError(ClientError):
    """429 carrying the Retry-After hint from the rate limiter"""

    def __init__(self, base_error: Error):
        super().__init__(base_error, status_code=status.HTTP_429_TOO_MANY_REQUESTS)
        details = base_error.details or {}
        self.retry_after = int(details.get("retry_after", 0))
        self.retry_after_minutes = int(details.get("retry_after_minutes", 0))
