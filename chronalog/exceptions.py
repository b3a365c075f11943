"""Chronalog exceptions."""


class ChangelogError(Exception):
    """Base exception for changelog operations."""

    code = "CHANGELOG_ERROR"

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class FormatError(ChangelogError):
    """Document does not have a ``---`` delimited frontmatter block."""

    code = "INVALID_FORMAT"

    def __init__(self, filename: str):
        super().__init__(
            f"Invalid MDX format: missing frontmatter in {filename}", status_code=422
        )
        self.filename = filename


class ValidationError(ChangelogError):
    """Frontmatter parsed but a field is missing or has the wrong type."""

    code = "VALIDATION_ERROR"

    def __init__(self, field: str, filename: str | None = None, problem: str = "Missing required field"):
        msg = f"{problem} '{field}'"
        if filename:
            msg += f" in {filename}"
        super().__init__(msg, status_code=422)
        self.field = field
        self.filename = filename


class EntryNotFoundError(ChangelogError):
    """No stored document exists for the requested slug."""

    code = "NOT_FOUND"

    def __init__(self, slug: str):
        super().__init__(f"Changelog entry not found: {slug}", status_code=404)
        self.slug = slug


class StorageError(ChangelogError):
    """The storage backend (filesystem, git, GitHub) failed."""

    code = "STORAGE_ERROR"

    def __init__(self, message: str):
        super().__init__(message, status_code=502)


class ConfigurationError(ChangelogError):
    """Required repository settings are missing or unusable."""

    code = "CONFIGURATION_ERROR"

    def __init__(self, message: str):
        super().__init__(message, status_code=500)
