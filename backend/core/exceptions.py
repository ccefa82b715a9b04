class TabledocError(Exception):
    """Base exception for all tabledoc errors."""


class CorruptStoreError(TabledocError):
    """Raised when the metadata file exists but is not a well-formed document.

    Attributes:
        path: Location of the offending file.
    """

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Metadata file {path} is corrupt: {reason}")


class BackupError(TabledocError):
    """Raised when the pre-update copy of the metadata file cannot be written."""


class IntrospectionError(TabledocError):
    """Raised when the database schema cannot be reflected."""


class TableNotFoundError(TabledocError):
    """Raised when a requested table is not part of the reflected schema."""

    def __init__(self, table_name: str) -> None:
        self.table_name = table_name
        super().__init__(f"Table not found: {table_name}")
