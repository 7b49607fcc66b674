# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Domain exceptions raised by the service layer and mapped to HTTP by controllers.
They subclass the builtins the controllers already catch (KeyError / ValueError).
"""


class TeamMemberNotFound(KeyError):
    """No team member exists with the given id."""

    def __init__(self, member_id: str) -> None:
        super().__init__(member_id)
        self.member_id = member_id

    def __str__(self) -> str:
        return f"Team member '{self.member_id}' not found"


class FieldValidationError(ValueError):
    """One or more submitted fields failed validation. `errors` maps field → message."""

    def __init__(self, errors: dict[str, str]) -> None:
        self.errors = errors
        first = next(iter(errors.values()), "The given data was invalid.")
        extra = len(errors) - 1
        message = first if extra <= 0 else f"{first} (and {extra} more error{'s' if extra > 1 else ''})"
        super().__init__(message)


class UploadFailed(Exception):
    """An upload candidate was rejected; carries the classified UploadError value."""

    def __init__(self, error) -> None:
        super().__init__(error.message)
        self.error = error
