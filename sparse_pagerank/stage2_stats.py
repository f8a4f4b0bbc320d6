import numpy as np
from sparse_pagerank.utils import print_stage, print_step, print_summary_box, Timer


def in_degrees(matrix):
    """
    Count incoming edges per node.

    Args:
        matrix (SparseMatrix): populated matrix

    Returns:
        np.ndarray: in_degree[j] = number of stored edges pointing at column j
    """
    counts = np.zeros(matrix.column_count, dtype=np.intp)
    for row in matrix.rows:
        if row.nonzero_count:
            np.add.at(counts, row.columns, 1)
    return counts


def compute_link_stats(link_counts, label):
    """
    Compute and display statistics for a list of link counts.

    Args:
        link_counts (array-like[int]): Number of links per node
        label (str): Label for display (e.g., "Outgoing" or "Incoming")

    Returns:
        dict: Computed statistics (numbers, not display strings)
    """
    values = np.asarray(link_counts)
    if values.size == 0:
        stats = {"Min": 0, "Max": 0, "Average": 0.0, "Median": 0.0}
        print_summary_box(f"{label} Link Statistics", stats)
        return stats

    stats = {
        "Min": int(np.min(values)),
        "Max": int(np.max(values)),
        "Average": float(np.mean(values)),
        "Median": float(np.median(values)),
        "Q1 (20th)": float(np.percentile(values, 20)),
        "Q2 (40th)": float(np.percentile(values, 40)),
        "Q3 (60th)": float(np.percentile(values, 60)),
        "Q4 (80th)": float(np.percentile(values, 80)),
    }

    print_summary_box(f"{label} Link Statistics", {
        key: (f"{val:.2f}" if isinstance(val, float) else val) for key, val in stats.items()
    })
    return stats


def run_stats(matrix):
    """
    Compute out-degree / in-degree statistics and count dangling nodes.

    Args:
        matrix (SparseMatrix): populated matrix

    Returns:
        tuple: (outgoing_stats dict, incoming_stats dict, dangling count)
    """
    print_stage("Stats", "Computing link statistics")

    with Timer("Total Stage 2"):
        print_step("Computing outgoing link statistics...")
        outgoing = matrix.out_degrees()
        outgoing_stats = compute_link_stats(outgoing, "Outgoing")

        print_step("Computing incoming link statistics...")
        incoming_stats = compute_link_stats(in_degrees(matrix), "Incoming")

        dangling = int(np.count_nonzero(outgoing == 0))
        print_step(f"Dangling nodes (no outgoing links): {dangling}")

    return outgoing_stats, incoming_stats, dangling
