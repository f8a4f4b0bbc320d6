import pytest

from sparse_pagerank import utils
from sparse_pagerank.sparse_matrix import create_matrix, populate_row


@pytest.fixture(autouse=True)
def quiet_reporting():
    utils.set_quiet(True)
    yield
    utils.set_quiet(False)


def build_matrix(n, adjacency):
    """Square binary matrix from {row: [columns]}; missing rows stay dangling."""
    matrix = create_matrix(n, n)
    for i in range(n):
        populate_row(matrix, i, adjacency.get(i, []))
    return matrix


@pytest.fixture
def matrix_factory():
    return build_matrix


@pytest.fixture
def cycle3():
    # 0 -> 1 -> 2 -> 0
    return build_matrix(3, {0: [1], 1: [2], 2: [0]})


@pytest.fixture
def dangling2():
    # 0 -> 1, node 1 has no out-edges
    return build_matrix(2, {0: [1]})


@pytest.fixture
def web6():
    return build_matrix(6, {
        0: [1, 2],
        2: [0, 1, 4],
        3: [4, 5],
        4: [3, 5],
        5: [3],
    })
