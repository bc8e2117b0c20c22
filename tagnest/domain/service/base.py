"""Base service class for domain services."""


class Service:
    """Base class for all domain services.

    Domain services hold the tagging logic that spans tags, tagged edges and
    the taggable objects themselves. They keep no state between calls.
    """

    pass
