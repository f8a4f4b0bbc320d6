# stage1_read.py
#
# Project: Sparse PageRank - power iteration on a row-compressed matrix
#
# Description:
#   Stage 1 - Read a sparse adjacency matrix, and render matrices and
#   vectors back as text.
#
#   Input format (binary matrix, every edge weight 1.0):
#
#       SparseMatrix: 3 by 3
#       row 0: 1 2 -1
#       row 1: -1
#       row 2: 0 -1
#
#   A negative number terminates a row and never appears as a column.
#   Tokens are separated by arbitrary whitespace, so a row may wrap over
#   several lines.  The `row <k>:` label is read but rows are stored in
#   file order; a label that disagrees with the position is reported as
#   a warning.
#
#   Output formats (values printed with %1.5g, not valid as input):
#
#       SparseMatrix: 3 by 3
#       row 0: 1:0.5 2:0.5 -1
#
#       Vector: 3
#       0.33333 0.33333 0.33333
#
#   Source auto-detection (load_matrix):
#     - `gs://bucket/object`   → download from GCS (stage1_read_remote)
#     - `http(s)://...`        → download over HTTP (stage1_read_remote)
#     - anything else          → local file path

import re
import os
from sparse_pagerank.errors import MalformedInput
from sparse_pagerank.sparse_matrix import create_matrix, populate_row
from sparse_pagerank.utils import print_stage, print_step, print_success, print_warning, print_summary_box, Timer

_HEADER_RE = re.compile(r'\s*SparseMatrix:\s*(\d+)\s+by\s+(\d+)')
_ROW_RE = re.compile(r'\s*row\s+(\d+)\s*:')
_INT_RE = re.compile(r'\s*([-+]?\d+)')


def parse_matrix(text):
    """
    Parse the textual sparse matrix format into a SparseMatrix.

    Raises:
        MalformedInput: header or a row does not parse; `row` on the
            exception names the failing row (None for the header)
    """
    m = _HEADER_RE.match(text)
    if m is None:
        raise MalformedInput("error reading dimensions")
    rows, columns = int(m.group(1)), int(m.group(2))
    pos = m.end()

    matrix = create_matrix(rows, columns)

    for i in range(rows):
        label = _ROW_RE.match(text, pos)
        if label is None:
            raise MalformedInput(f"error reading row {i}", row=i)
        pos = label.end()
        if int(label.group(1)) != i:
            print_warning(f"row label {label.group(1)} at position {i}, stored as row {i}")

        # Scan column indices up to the negative terminator
        cols = []
        while True:
            tok = _INT_RE.match(text, pos)
            if tok is None:
                raise MalformedInput(f"error reading row {i}: missing column or terminator", row=i)
            pos = tok.end()
            c = int(tok.group(1))
            if c < 0:
                break
            cols.append(c)

        populate_row(matrix, i, cols)

    return matrix


def read_matrix(fp):
    """Read a SparseMatrix from an open text file."""
    return parse_matrix(fp.read())


def format_matrix(matrix):
    """Render a matrix as `row <i>: <col>:<value> ... -1` lines."""
    lines = [f"SparseMatrix: {matrix.row_count} by {matrix.column_count}"]
    for i, row in enumerate(matrix.rows):
        entries = "".join(f"{int(c)}:{v:1.5g} " for c, v in zip(row.columns, row.values))
        lines.append(f"row {i}: {entries}-1")
    return "\n".join(lines) + "\n"


def write_matrix(fp, matrix):
    fp.write(format_matrix(matrix))


def format_vector(vector):
    """Render a vector as a `Vector: <dim>` header plus one line of values."""
    values = "".join(f"{v:1.5g} " for v in vector.entries)
    return f"Vector: {vector.dimension}\n{values}\n"


def write_vector(fp, vector):
    fp.write(format_vector(vector))


def _read_local(path):
    """
    Read and parse a matrix file from disk.

    Args:
        path (str): path to the matrix file

    Returns:
        SparseMatrix: populated binary matrix
    """
    with Timer("Read + Parse"):
        with open(path, 'r') as f:
            matrix = read_matrix(f)
    return matrix


def load_matrix(source):
    """
    Load a sparse matrix from a local path, a `gs://` object or a URL.

    Returns:
        SparseMatrix: populated binary matrix (not yet normalized)
    """
    print_stage("Read", f"Load sparse matrix from {source}")

    with Timer("Total Stage 1"):
        if source.startswith("gs://") or source.startswith(("http://", "https://")):
            # Imported lazily: the cloud client is only needed for remote sources
            from sparse_pagerank.stage1_read_remote import fetch_text
            text = fetch_text(source)
            print_step("Parsing downloaded matrix...")
            matrix = parse_matrix(text)
        else:
            print_step(f"Reading local file {os.path.abspath(source)}...")
            matrix = _read_local(source)

        edges = matrix.edge_count()
        print_summary_box("Stage 1 Summary", {
            "Source": source,
            "Dimensions": f"{matrix.row_count} by {matrix.column_count}",
            "Total edges": edges,
            "Avg edges/row": f"{edges / matrix.row_count:.1f}" if matrix.row_count else "N/A",
        })
        if matrix.row_count != matrix.column_count:
            print_warning("matrix is not square; PageRank needs rows == columns")
        else:
            print_success("Matrix loaded")

    return matrix
