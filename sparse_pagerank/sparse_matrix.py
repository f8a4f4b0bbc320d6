# sparse_matrix.py
#
# Project: Sparse PageRank - power iteration on a row-compressed matrix
#
# Description:
#   Row-compressed sparse matrix.  Row i holds the out-edges of node i as a
#   single numpy structured array of (column, value) records, so the
#   column list and the value list can never drift apart in length.
#
#   Lifecycle:
#     1. create_matrix(m, n)      - m empty rows
#     2. populate_row(M, i, cols) - once per row, every value set to 1.0
#     3. normalize (stage 3)      - rewrites values in place, columns untouched
#     4. release_matrix(M)        - drops every row then the row table
#
#   The structure is never mutated after population apart from step 3.

import numpy as np
import scipy.sparse as sp
from sparse_pagerank.errors import MalformedInput, ResourceExhausted

EDGE_DTYPE = np.dtype([("column", np.intp), ("value", np.float64)])


def _empty_edges():
    return np.empty(0, dtype=EDGE_DTYPE)


class SparseMatrixRow:
    """One row: the (column, value) records of a single source node."""
    __slots__ = ("edges", "populated")

    def __init__(self):
        self.edges = _empty_edges()
        self.populated = False

    @property
    def nonzero_count(self):
        return len(self.edges)

    @property
    def columns(self):
        return self.edges["column"]

    @property
    def values(self):
        return self.edges["value"]

    def __repr__(self):
        return f"SparseMatrixRow(nonzero_count={self.nonzero_count})"


class SparseMatrix:
    """
    Attributes:
        row_count (int)
        column_count (int)
        rows (list[SparseMatrixRow]): len(rows) == row_count

    Row i, record (j, w) means node i links to node j with weight w.
    """

    def __init__(self, row_count, column_count, rows):
        self.row_count = row_count
        self.column_count = column_count
        self.rows = rows

    def __repr__(self):
        return (f"SparseMatrix({self.row_count} by {self.column_count}, "
                f"{self.edge_count()} nonzeros)")

    def __iter__(self):
        return iter(self.rows)

    def edge_count(self):
        return sum(row.nonzero_count for row in self.rows)

    def out_degrees(self):
        """Nonzero count per row, as an int array."""
        return np.fromiter((row.nonzero_count for row in self.rows),
                           dtype=np.intp, count=self.row_count)

    def dangling_mask(self):
        """Boolean mask of rows with no out-edges."""
        return self.out_degrees() == 0

    def to_csr(self):
        """
        Build a scipy CSR matrix with the same layout.

        Duplicate columns inside a row are kept as separate entries; scipy
        sums them on multiplication, just like the scatter-add engine.
        """
        degrees = self.out_degrees()
        indptr = np.zeros(self.row_count + 1, dtype=np.intp)
        np.cumsum(degrees, out=indptr[1:])
        if self.rows:
            edges = np.concatenate([row.edges for row in self.rows])
        else:
            edges = _empty_edges()
        return sp.csr_matrix(
            (edges["value"], edges["column"], indptr),
            shape=(self.row_count, self.column_count),
        )


def create_matrix(rows, columns):
    """
    Allocate a rows x columns matrix with every row empty.

    Raises:
        ValueError: negative dimension
        ResourceExhausted: the row table could not be allocated
    """
    if rows < 0 or columns < 0:
        raise ValueError(f"matrix dimensions must be non-negative, got {rows} by {columns}")
    try:
        row_table = [SparseMatrixRow() for _ in range(rows)]
    except MemoryError as exc:
        raise ResourceExhausted(f"could not allocate {rows} matrix rows") from exc
    return SparseMatrix(rows, columns, row_table)


def populate_row(matrix, row_index, columns):
    """
    Store the out-edges of one row, each with weight 1.0.

    Args:
        matrix (SparseMatrix): target matrix
        row_index (int): row to fill, must not have been populated before
        columns (iterable[int]): column index of every edge

    Raises:
        MalformedInput: bad row index, row already populated, or a column
            index outside [0, column_count)
        ResourceExhausted: the row storage could not be allocated
    """
    if not 0 <= row_index < matrix.row_count:
        raise MalformedInput(
            f"row index {row_index} outside [0, {matrix.row_count})", row=row_index)
    row = matrix.rows[row_index]
    if row.populated:
        raise MalformedInput(f"row {row_index} is already populated", row=row_index)

    # Collect into a growable list first, then freeze into an exact-size array
    collected = [int(c) for c in columns]
    for c in collected:
        if c < 0:
            raise MalformedInput(
                f"row {row_index}: negative column {c} (negative values are row terminators)",
                row=row_index)
        if c >= matrix.column_count:
            raise MalformedInput(
                f"row {row_index}: column {c} outside [0, {matrix.column_count})",
                row=row_index)

    try:
        edges = np.empty(len(collected), dtype=EDGE_DTYPE)
    except MemoryError as exc:
        raise ResourceExhausted(f"could not allocate row {row_index}") from exc
    edges["column"] = collected
    edges["value"] = 1.0

    row.edges = edges
    row.populated = True


def release_matrix(matrix):
    """
    Drop every row's storage, then the row table.

    Returns:
        bool: False when there was nothing to release (None), True otherwise.
    """
    if matrix is None:
        return False
    for row in matrix.rows:
        if row.nonzero_count > 0:
            row.edges = _empty_edges()
    matrix.rows = []
    matrix.row_count = 0
    matrix.column_count = 0
    return True
