"""Domain layer errors."""

from collections.abc import Iterable


class DomainError(Exception):
    """Base domain error."""

    pass


class ValidationError(DomainError):
    """Domain validation error."""

    pass


class NotFoundError(DomainError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found: {identifier}")


class UnknownTagError(NotFoundError):
    """Raised when tag references do not resolve to existing tags."""

    def __init__(self, missing: Iterable[str], namespace: str | None = None):
        self.missing = sorted(missing)
        self.namespace = namespace
        identifier = ", ".join(self.missing)
        if namespace is not None:
            identifier = f"{identifier} (namespace {namespace!r})"
        super().__init__("Tag", identifier)


class InvalidDepthError(ValidationError):
    """Raised when a tag depth is below 1 or above the configured maximum."""

    def __init__(self, depth: int, max_depth: int):
        self.depth = depth
        self.max_depth = max_depth
        if depth < 1:
            message = f"Depth cannot be less than 1, got {depth}"
        else:
            message = f"Depth {depth} exceeds the maximum of {max_depth}"
        super().__init__(message)


class InvalidTagArgumentError(ValidationError):
    """Raised when a tag argument is neither a name nor a tag, or is empty."""

    pass


class DuplicateKeyError(DomainError):
    """Raised when a tag with the same name already exists in a namespace."""

    def __init__(self, names: Iterable[str], namespace: str | None = None):
        self.names = sorted(names)
        self.namespace = namespace
        super().__init__(
            f"Tag already exists in namespace {namespace!r}: {', '.join(self.names)}"
        )
