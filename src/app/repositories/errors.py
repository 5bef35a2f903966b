class StorageError(Exception):
    """Durable store could not be read or written."""


class UserAlreadyExistsError(Exception):
    """A unique user field (username or email) is already taken."""

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"{field} already exists")
