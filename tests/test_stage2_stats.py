import pytest

from sparse_pagerank.sparse_matrix import create_matrix
from sparse_pagerank.stage2_stats import compute_link_stats, in_degrees, run_stats


def test_in_degrees(web6):
    assert in_degrees(web6).tolist() == [1, 2, 1, 2, 2, 2]


def test_run_stats(web6):
    outgoing, incoming, dangling = run_stats(web6)
    assert dangling == 1
    assert outgoing["Min"] == 0
    assert outgoing["Max"] == 3
    assert outgoing["Average"] == pytest.approx(10 / 6)
    assert incoming["Max"] == 2


def test_stats_of_empty_matrix():
    outgoing, incoming, dangling = run_stats(create_matrix(0, 0))
    assert dangling == 0
    assert outgoing["Max"] == 0


def test_compute_link_stats_percentiles():
    stats = compute_link_stats([1, 2, 3, 4, 5], "Test")
    assert stats["Median"] == 3.0
    assert stats["Q1 (20th)"] == pytest.approx(1.8)
