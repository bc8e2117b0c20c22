"""Unit tests for statement chunking."""

from tagnest.persistence.chunks import MAX_IN_PARAMS, MAX_INSERT_PARAMS, chunked
from tagnest.persistence.repository.tag import INSERT_BATCH as TAG_BATCH
from tagnest.persistence.repository.tagged import INSERT_BATCH as EDGE_BATCH
from tagnest.persistence.tables import tags_table

# asyncpg cannot bind more than this many parameters in one statement
ASYNCPG_PARAM_LIMIT = 32767


class TestChunked:
    def test_splits_into_sized_chunks(self):
        assert list(chunked(range(7), 3)) == [[0, 1, 2], [3, 4, 5], [6]]

    def test_consumes_generators_once(self):
        rows = (i * i for i in range(4))
        assert list(chunked(rows, 2)) == [[0, 1], [4, 9]]

    def test_empty_input_yields_nothing(self):
        assert list(chunked([], 5)) == []

    def test_batches_stay_under_driver_limit(self):
        """Full insert batches and IN lists bind fewer parameters than allowed."""
        assert MAX_IN_PARAMS < ASYNCPG_PARAM_LIMIT
        assert MAX_INSERT_PARAMS < ASYNCPG_PARAM_LIMIT
        # tags rows bind every column, edge rows bind three
        assert TAG_BATCH * len(tags_table.c) <= MAX_INSERT_PARAMS
        assert EDGE_BATCH * 3 <= MAX_INSERT_PARAMS
