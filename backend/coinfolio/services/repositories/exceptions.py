"""Data access errors.

Each carries a stable `code` that main.py maps to an HTTP status and puts in
the error body. The message is available through str().
"""


class RepositoryError(Exception):
    code = "RepositoryError"


class _EntityError(RepositoryError):
    """Error about one row, identified by its type and key."""

    template = "{entity_type} {identifier}"

    def __init__(self, entity_type: str, identifier: str | int):
        self.entity_type = entity_type
        self.identifier = identifier
        super().__init__(self.template.format(entity_type=entity_type, identifier=identifier))


class NotFoundError(_EntityError):
    code = "NotFound"
    template = "{entity_type} not found: {identifier}"


class ForbiddenError(_EntityError):
    """The row exists but is owned by another user. Never leaks the owner."""

    code = "Forbidden"
    template = "{entity_type} {identifier} belongs to another user"


class DuplicateError(RepositoryError):
    """A per-owner uniqueness rule would be broken (e.g. same coin watched twice)."""

    code = "Duplicate"

    def __init__(self, entity_type: str, field: str, value: str):
        self.entity_type = entity_type
        self.field = field
        self.value = value
        super().__init__(f"{entity_type} with {field}={value} already exists")
