"""Domain errors raised by the checklist services; routers map them to HTTP statuses."""


class ChecklistError(Exception):
    """Base class for checklist engine failures."""


class NotFoundError(ChecklistError, LookupError):
    def __init__(self, kind: str, key: str):
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} {key} not found")


class InvalidAnswerError(ChecklistError, ValueError):
    pass


class UnsupportedTargetTableError(ChecklistError, ValueError):
    def __init__(self, table: str):
        self.table = table
        super().__init__(f"Unsupported table: {table}")


class GroupConflictError(ChecklistError):
    """Group creation kept colliding with concurrently created groups."""
