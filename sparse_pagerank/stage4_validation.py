# stage4_validation.py
#
# Project: Sparse PageRank - power iteration on a row-compressed matrix
#
# Description:
#   Stage 4 - Validate the PageRank vector against NetworkX using standard
#   ranking metrics (Spearman's rho, Kendall's tau, MAE, Precision@5).
#
# References:
#   [1] Spearman, C. (1904).
#       "The Proof and Measurement of Association between Two Things."
#       American Journal of Psychology, 15(1), 72-101.
#
#   [2] Kendall, M. (1938).
#       "A New Measure of Rank Correlation."
#       Biometrika, 30(1/2), 81-93.
#
# NetworkX License (3-clause BSD):
#   Copyright (c) 2004-2025, NetworkX Developers
#   All rights reserved.
#   See full license: https://github.com/networkx/networkx/blob/main/LICENSE.txt
#
#   This file invokes nx.DiGraph() and nx.pagerank() at runtime as a
#   reference implementation.
#
# NetworkX redistributes dangling mass uniformly, the same way surfer()
# does, so on a graph without repeated edges the two vectors agree up to
# the convergence tolerance.  A DiGraph collapses repeated (i, j) edges
# into one, so matrices with duplicate columns in a row will differ.
#
# Metrics used:
#   Score-level:  Mean Absolute Error (MAE) of per-node PageRank values.
#   Rank-level:   Spearman's rho and Kendall's tau over all N nodes.
#   Top-K level:  Precision@5 (set overlap) and positional rank match.

import os
import warnings

import numpy as np
from scipy.stats import spearmanr, kendalltau, rankdata
import matplotlib
matplotlib.use('Agg')  # non-interactive backend for saving to file
import matplotlib.pyplot as plt
import networkx as nx

from sparse_pagerank.utils import (
    print_stage, print_step, print_success, print_summary_box,
    print_side_by_side_boxes, Timer,
)


def matrix_to_digraph(matrix):
    """Build a DiGraph with one node per row and one edge per stored record."""
    G = nx.DiGraph()
    G.add_nodes_from(range(matrix.row_count))
    for i, row in enumerate(matrix.rows):
        G.add_edges_from((i, int(j)) for j in row.columns)
    return G


def _rank_correlations(custom_scores, nx_scores):
    # Constant vectors (e.g. alpha=0 gives a uniform result) have no
    # defined rank correlation; scipy warns and returns nan.
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        rho, rho_p = spearmanr(custom_scores, nx_scores)
        tau, tau_p = kendalltau(custom_scores, nx_scores)
    return float(rho), float(rho_p), float(tau), float(tau_p)


def plot_validation(custom_scores, nx_scores, rho, tau, out_dir):
    """
    Save rank-vs-rank and score-vs-score scatter plots to out_dir.

    Returns:
        str: path of the written PNG
    """
    custom_ranks = rankdata(-custom_scores, method='ordinal')
    nx_ranks = rankdata(-nx_scores, method='ordinal')

    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(14, 6))

    ax1.scatter(nx_ranks, custom_ranks, s=1, alpha=0.3, c='steelblue')
    rank_max = max(custom_ranks.max(), nx_ranks.max())
    ax1.plot([1, rank_max], [1, rank_max], 'r--', linewidth=1, label='Perfect agreement')
    ax1.set_xlabel('NetworkX Rank')
    ax1.set_ylabel('Sparse PageRank Rank')
    ax1.set_title(f'Rank vs Rank  (Spearman ρ = {rho:.6f})')
    ax1.legend(loc='upper left')
    ax1.set_aspect('equal')

    ax2.scatter(nx_scores, custom_scores, s=1, alpha=0.3, c='darkorange')
    score_min = min(nx_scores.min(), custom_scores.min())
    score_max = max(nx_scores.max(), custom_scores.max())
    ax2.plot([score_min, score_max], [score_min, score_max], 'r--', linewidth=1, label='y = x')
    ax2.set_xlabel('NetworkX PageRank Score')
    ax2.set_ylabel('Sparse PageRank Score')
    ax2.set_title(f'Score vs Score  (Kendall τ = {tau:.6f})')
    ax2.legend(loc='upper left')

    fig.suptitle('Sparse PageRank vs NetworkX PageRank', fontsize=14, fontweight='bold')
    fig.tight_layout()

    os.makedirs(out_dir, exist_ok=True)
    path = os.path.join(out_dir, 'validation_rank_correlation.png')
    fig.savefig(path, dpi=150, bbox_inches='tight')
    plt.close(fig)
    return path


def verify_with_networkx(matrix, vector, alpha, plot_dir=None, max_iter=1000, tol=1.0e-10):
    """
    Compare a PageRank vector with networkx.pagerank on the same graph.

    Args:
        matrix (SparseMatrix): the graph (structure only is used)
        vector (Vector): PageRank scores, one per row
        alpha (float): damping used to compute `vector`
        plot_dir (str|None): where to save scatter plots, None to skip
        max_iter, tol: forwarded to nx.pagerank

    Returns:
        dict: mae, max_error, spearman, kendall, top5_matches, precision_at_5,
              plot (path or None)
    """
    print_stage("Verify", "Comparing with NetworkX PageRank")

    with Timer("NetworkX verification"):
        print_step("Building NetworkX DiGraph...")
        G = matrix_to_digraph(matrix)
        print_success(f"Graph: {G.number_of_nodes()} nodes, {G.number_of_edges()} edges")

        print_step("Computing NetworkX PageRank...")
        nx_pr = nx.pagerank(G, alpha=alpha, max_iter=max_iter, tol=tol)

        n = matrix.row_count
        custom_scores = np.asarray(vector.entries, dtype=np.float64)
        nx_scores = np.array([nx_pr.get(i, 0.0) for i in range(n)])

        # Score-level
        abs_errors = np.abs(custom_scores - nx_scores)
        mae = float(abs_errors.mean()) if n else 0.0
        max_err = float(abs_errors.max()) if n else 0.0
        max_err_node = int(abs_errors.argmax()) if n else None

        # Rank-level
        rho, rho_p, tau, tau_p = _rank_correlations(custom_scores, nx_scores)

        print_summary_box("Validation Metrics", {
            "MAE (score)": f"{mae:.2e}",
            "Max error":   f"{max_err:.2e} (Node {max_err_node})",
            "Spearman rho [1]": f"{rho:.6f} (p={rho_p:.2e})",
            "Kendall tau  [2]": f"{tau:.6f} (p={tau_p:.2e})",
        })

        # Top-5
        custom_top5 = [int(i) for i in np.argsort(-custom_scores, kind="stable")[:5]]
        nx_top5 = [int(i) for i in np.argsort(-nx_scores, kind="stable")[:5]]

        print_side_by_side_boxes(
            "Sparse PageRank Top 5",
            {f"#{k+1} Node {i}": f"{custom_scores[i]:.8f}" for k, i in enumerate(custom_top5)},
            "NetworkX Top 5",
            {f"#{k+1} Node {i}": f"{nx_scores[i]:.8f}" for k, i in enumerate(nx_top5)},
        )

        rank_matches = sum(1 for a, b in zip(custom_top5, nx_top5) if a == b)
        overlap = set(custom_top5) & set(nx_top5)
        if rank_matches == len(nx_top5):
            print_success("Top 5 matches perfectly (same nodes, same order)")
        else:
            print_step(f"Top 5 positional match: {rank_matches}/{len(nx_top5)}")
            print_step(f"Top 5 Precision@5:      {len(overlap)}/{len(nx_top5)}")

        plot_path = None
        if plot_dir is not None and n:
            plot_path = plot_validation(custom_scores, nx_scores, rho, tau, plot_dir)
            print_success(f"Scatter plots saved to {plot_path}")

    return {
        "mae": mae,
        "max_error": max_err,
        "spearman": rho,
        "kendall": tau,
        "top5_matches": rank_matches,
        "precision_at_5": len(overlap),
        "plot": plot_path,
    }
