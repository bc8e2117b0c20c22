"""Statement size limits for bulk queries.

asyncpg accepts at most 32767 bind parameters per statement, so bulk
inserts and IN lists are split into chunks that stay below it.
"""

from collections.abc import Iterable, Iterator
from itertools import islice
from typing import TypeVar

T = TypeVar("T")

# Ids per IN list (one parameter each)
MAX_IN_PARAMS = 10_000

# Bind parameters per multi-row INSERT, divided by the columns per row
MAX_INSERT_PARAMS = 30_000


def chunked(items: Iterable[T], size: int) -> Iterator[list[T]]:
    """Yield consecutive lists of at most size items."""
    iterator = iter(items)
    while chunk := list(islice(iterator, size)):
        yield chunk
