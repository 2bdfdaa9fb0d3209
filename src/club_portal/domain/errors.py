"""Error types raised by the persistence and auth layers."""


class DatabaseError(RuntimeError):
    """A Supabase operation on a table failed."""

    def __init__(
        self,
        table: str,
        operation: str,
        message: str,
        code: str | None = None,
    ) -> None:
        super().__init__(f"Failed to {operation} {table}: {message}")
        self.table = table
        self.operation = operation
        self.code = code


class DatabaseTimeoutError(DatabaseError):
    """A Supabase operation did not finish before its deadline."""


class AuthenticationError(RuntimeError):
    """Login was rejected by the identity provider."""
