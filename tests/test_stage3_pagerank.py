import numpy as np
import pytest
from numpy.testing import assert_allclose

from sparse_pagerank import utils
from sparse_pagerank.errors import DimensionMismatch
from sparse_pagerank.sparse_matrix import SparseMatrix, create_matrix
from sparse_pagerank.stage3_pagerank import (
    PageRankConfig, compute_pagerank, multiply, normalize, run_iterations, surfer,
)
from sparse_pagerank.vector import create_vector, uniform_vector


def _vector(values):
    v = create_vector(len(values))
    v.entries[:] = values
    return v


def test_normalize_rows_sum_to_one(web6):
    normalize(web6)
    for row in web6.rows:
        if row.nonzero_count:
            assert row.values.sum() == pytest.approx(1.0)
            assert_allclose(row.values, 1.0 / row.nonzero_count)
        else:
            assert len(row.columns) == 0
    # structure untouched
    assert web6.rows[2].columns.tolist() == [0, 1, 4]


def test_normalize_assigns_reciprocal_degree(web6):
    # Values are assigned from the row degree, not divided again.
    normalize(web6)
    normalize(web6)
    assert web6.rows[0].values.tolist() == [0.5, 0.5]
    assert web6.rows[2].values.sum() == pytest.approx(1.0)
    assert web6.rows[5].values.tolist() == [1.0]


def test_multiply_conserves_mass_without_dangling_nodes(matrix_factory):
    m = normalize(matrix_factory(4, {0: [1, 2], 1: [2], 2: [0, 3], 3: [0, 1, 2]}))
    rng = np.random.default_rng(7)
    x = rng.random(4)
    v = _vector(x / x.sum())
    before = v.tolist()

    result = multiply(v, m)

    assert result is not v
    assert result.sum() == pytest.approx(1.0)
    assert v.tolist() == before


def test_multiply_scatters_along_edges(cycle3):
    normalize(cycle3)
    result = multiply(_vector([0.5, 0.3, 0.2]), cycle3)
    assert_allclose(result.entries, [0.2, 0.5, 0.3])


def test_multiply_drops_dangling_mass(dangling2):
    normalize(dangling2)
    result = multiply(_vector([0.4, 0.6]), dangling2)
    assert_allclose(result.entries, [0.0, 0.4])


def test_multiply_accumulates_repeated_columns(matrix_factory):
    m = normalize(matrix_factory(2, {0: [1, 1], 1: [0]}))
    result = multiply(_vector([0.7, 0.3]), m)
    assert_allclose(result.entries, [0.3, 0.7])


def test_csr_engine_matches_scatter(web6):
    normalize(web6)
    v = uniform_vector(6)
    scatter = multiply(v, web6)
    csr = multiply(v, web6, csr=web6.to_csr())
    assert_allclose(scatter.entries, csr.entries)


def test_multiply_dimension_checks(cycle3):
    with pytest.raises(DimensionMismatch):
        multiply(uniform_vector(2), cycle3)
    with pytest.raises(DimensionMismatch):
        multiply(uniform_vector(2), create_matrix(2, 3))


def test_surfer_alpha_zero_is_uniform(web6):
    normalize(web6)
    result = surfer(_vector([1.0, 0, 0, 0, 0, 0]), web6, 0.0)
    assert_allclose(result.entries, np.full(6, 1 / 6))


def test_surfer_redistributes_dangling_mass(dangling2):
    normalize(dangling2)
    result = surfer(_vector([0.5, 0.5]), dangling2, 0.85)
    # raw = [0, 0.5], indicator = 0.85 * 0.5
    expected_uniform = (0.85 * 0.5 + 0.15) / 2
    assert_allclose(result.entries, [expected_uniform, 0.85 * 0.5 + expected_uniform])
    assert result.sum() == pytest.approx(1.0)


def test_surfer_with_precomputed_dangling_mask(web6):
    normalize(web6)
    v = _vector([0.1, 0.3, 0.1, 0.2, 0.2, 0.1])
    plain = surfer(v, web6, 0.85)
    cached = surfer(v, web6, 0.85, dangling=web6.dangling_mask())
    assert_allclose(cached.entries, plain.entries)


def test_run_iterations_builds_dangling_mask_once(web6, monkeypatch):
    normalize(web6)
    calls = []
    original = SparseMatrix.dangling_mask

    def _counting(self):
        calls.append(1)
        return original(self)

    monkeypatch.setattr(SparseMatrix, "dangling_mask", _counting)
    run_iterations(uniform_vector(6), web6, PageRankConfig(iterations=10))
    assert len(calls) == 1


def test_surfer_keeps_probability_mass(web6):
    normalize(web6)
    v = uniform_vector(6)
    for _ in range(20):
        v = surfer(v, web6, 0.85)
        assert v.sum() == pytest.approx(1.0)


def test_surfer_on_empty_matrix():
    result = surfer(create_vector(0), create_matrix(0, 0), 0.85)
    assert result.dimension == 0


def test_run_iterations_takes_ownership(cycle3):
    normalize(cycle3)
    initial = uniform_vector(3)
    final = run_iterations(initial, cycle3, PageRankConfig(alpha=0.5, iterations=3))
    assert final is not initial
    assert initial.dimension == 0
    assert final.dimension == 3


@pytest.mark.parametrize("iterations", [1, 2, 50])
def test_cycle_alpha_zero_stays_uniform(cycle3, iterations):
    normalize(cycle3)
    assert [row.values.tolist() for row in cycle3.rows] == [[1.0], [1.0], [1.0]]
    final = run_iterations(uniform_vector(3), cycle3, PageRankConfig(alpha=0.0, iterations=iterations))
    assert_allclose(final.entries, [1 / 3] * 3)


def test_dangling_alpha_zero_is_uniform_after_one_step(dangling2):
    normalize(dangling2)
    assert dangling2.rows[1].nonzero_count == 0
    final = run_iterations(_vector([0.9, 0.1]), dangling2, PageRankConfig(alpha=0.0, iterations=1))
    assert_allclose(final.entries, [0.5, 0.5])


def test_two_node_stationary_distribution(dangling2):
    # x0 = (1 - a*x0) / 2  =>  x0 = 1 / (2 + a)
    final = compute_pagerank(dangling2, PageRankConfig(alpha=0.85, iterations=200))
    assert_allclose(final.entries, [1 / 2.85, 1.85 / 2.85])


def test_engines_agree_end_to_end(matrix_factory):
    a = matrix_factory(6, {0: [1, 2], 2: [0, 1, 4], 3: [4, 5], 4: [3, 5], 5: [3]})
    b = matrix_factory(6, {0: [1, 2], 2: [0, 1, 4], 3: [4, 5], 4: [3, 5], 5: [3]})
    scatter = compute_pagerank(a, PageRankConfig(iterations=100, engine="scatter"))
    csr = compute_pagerank(b, PageRankConfig(iterations=100, engine="csr", progress=True))
    assert_allclose(scatter.entries, csr.entries)


def test_compute_pagerank_ranks_sinks_high(web6):
    final = compute_pagerank(web6, PageRankConfig(alpha=0.85, iterations=100))
    assert final.sum() == pytest.approx(1.0)
    # 3, 4 and 5 form a closed component that keeps most of the mass
    top = np.argsort(-final.entries)[:3]
    assert set(top.tolist()) == {3, 4, 5}


@pytest.mark.parametrize("kwargs", [
    {"alpha": 1.0},
    {"alpha": -0.1},
    {"iterations": 0},
    {"engine": "dense"},
])
def test_config_validation(kwargs):
    with pytest.raises(ValueError):
        PageRankConfig(**kwargs)


def test_config_defaults():
    config = PageRankConfig()
    assert config.alpha == 0.85
    assert config.iterations == 1000
    assert config.engine == "csr"


def test_progress_bar_goes_to_stderr(cycle3, capsys):
    normalize(cycle3)
    utils.set_quiet(False)
    run_iterations(uniform_vector(3), cycle3, PageRankConfig(iterations=3, progress=True))
    captured = capsys.readouterr()
    assert "Iterating" in captured.err
    assert captured.out == ""


def test_progress_bar_hidden_when_quiet(cycle3, capsys):
    normalize(cycle3)
    run_iterations(uniform_vector(3), cycle3, PageRankConfig(iterations=3, progress=True))
    assert "Iterating" not in capsys.readouterr().err
