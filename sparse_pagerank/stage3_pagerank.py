# stage3_pagerank.py
#
# Project: Sparse PageRank - power iteration on a row-compressed matrix
#
# Description:
#   Stage 3 - PageRank via damped power iteration on a sparse stochastic
#   matrix.
#
# References:
#   [1] Page, L., Brin, S., Motwani, R., & Winograd, T. (1999).
#       "The PageRank Citation Ranking: Bringing Order to the Web."
#       http://ilpubs.stanford.edu:8090/422/1/1999-66.pdf
#
#   [2] Langville, A. & Meyer, C. (2004).
#       "A Survey of Eigenvector Methods of Web Information Retrieval."
#       http://citeseer.ist.psu.edu/713792.html
#
# Dangling-node handling follows NetworkX 3.6.1 `_pagerank_scipy`:
#   https://github.com/networkx/networkx/blob/main/networkx/algorithms/link_analysis/pagerank_alg.py
#
# NetworkX License (3-clause BSD):
#   Copyright (c) 2004-2025, NetworkX Developers
#   Aric Hagberg <hagberg@lanl.gov>
#   Dan Schult <dschult@colgate.edu>
#   Pieter Swart <swart@lanl.gov>
#   All rights reserved.
#   Redistribution and use in source and binary forms, with or without
#   modification, are permitted provided that the above copyright notice,
#   this list of conditions, and the following disclaimer are retained.
#   See full license: https://github.com/networkx/networkx/blob/main/LICENSE.txt
#
# Pieces:
#   normalize      - binary adjacency -> row-stochastic transition matrix,
#                    in place.  Dangling rows stay empty.
#   multiply       - one transition step, result = M^T . v, by scatter-add
#                    over source rows (or scipy `v @ A` for the csr engine).
#   surfer         - one damped step:
#                      x'[i] = alpha * (M^T x)[i] + (alpha * dangling + 1 - alpha) / n
#                    where dangling is the mass held by rows with no out-edges.
#   run_iterations - fixed-count power iteration, no early stopping.

import sys
from dataclasses import dataclass

import numpy as np
from tqdm import trange

from sparse_pagerank.errors import DimensionMismatch
from sparse_pagerank.vector import create_vector, release_vector, uniform_vector
from sparse_pagerank.utils import is_quiet, print_stage, print_step, print_success, print_summary_box, Timer

ENGINES = ("scatter", "csr")


@dataclass
class PageRankConfig:
    """
    Tunables for the iteration driver.

    Attributes:
        alpha: weight of the propagated mass, in [0, 1).  0 gives the
            uniform distribution after one step; 0.85 is the usual choice.
        iterations: number of damped steps to run (> 0).
        engine: "csr" (scipy product) or "scatter" (per-row scatter-add,
            the reference form of the transition step).
        progress: show a tqdm progress bar while iterating.
    """
    alpha: float = 0.85
    iterations: int = 1000
    engine: str = "csr"
    progress: bool = False

    def __post_init__(self):
        if not 0.0 <= self.alpha < 1.0:
            raise ValueError(f"alpha must be in [0, 1), got {self.alpha}")
        if self.iterations <= 0:
            raise ValueError(f"iterations must be positive, got {self.iterations}")
        if self.engine not in ENGINES:
            raise ValueError(f"engine must be one of {ENGINES}, got {self.engine!r}")


def normalize(matrix):
    """
    Rewrite every row's values as 1 / nonzero_count, in place.

    Must be called exactly once per matrix: the values are assumed to be
    the binary 1.0 weights set at population time.
    """
    for row in matrix.rows:
        count = row.nonzero_count
        if count == 0:
            continue
        row.values[:] = 1.0 / count
    return matrix


def _check_dimensions(vector, matrix):
    if matrix.row_count != matrix.column_count:
        raise DimensionMismatch(
            f"transition matrix must be square, got {matrix.row_count} by {matrix.column_count}")
    if vector.dimension != matrix.row_count:
        raise DimensionMismatch(
            f"vector dimension {vector.dimension} != matrix row count {matrix.row_count}")


def multiply(vector, matrix, csr=None):
    """
    One transition step: result[j] += w * vector[i] for every edge (i, j, w).

    Neither input is modified; exactly one new Vector is returned.  Mass at
    rows with no out-edges is dropped here and put back by surfer().

    Args:
        vector (Vector): current probabilities, dimension == matrix.row_count
        matrix (SparseMatrix): square transition matrix
        csr (scipy.sparse.csr_matrix|None): matrix.to_csr(), when the caller
            wants the scipy product instead of the per-row scatter-add
    """
    _check_dimensions(vector, matrix)
    result = create_vector(vector.dimension)
    x = vector.entries

    if csr is not None:
        result.entries[:] = x @ csr
        return result

    out = result.entries
    for i, row in enumerate(matrix.rows):
        if row.nonzero_count == 0:
            continue
        # np.add.at accumulates repeated columns instead of overwriting
        np.add.at(out, row.columns, row.values * x[i])
    return result


def surfer(vector, matrix, alpha, csr=None, dangling=None):
    """
    One damped random-surfer step.

    Combines the propagated mass (scaled by alpha), the mass trapped at
    dangling rows and the uniform teleport term:

        result[i] = alpha * raw[i] + (indicator + 1 - alpha) / n
        indicator = alpha * sum(vector[i] for dangling i)

    `dangling` is matrix.dangling_mask(), precomputed by callers that step
    the same matrix repeatedly.

    Returns a new Vector owned by the caller; the input is left as is.
    """
    raw = multiply(vector, matrix, csr=csr)
    n = matrix.row_count
    if dangling is None:
        dangling = matrix.dangling_mask()

    indicator_weights = create_vector(n)
    indicator_weights.entries[dangling] = 1.0
    indicator = alpha * float(indicator_weights.entries @ vector.entries)

    damped = create_vector(n)
    np.multiply(raw.entries, alpha, out=damped.entries)

    result = create_vector(n)
    if n > 0:
        result.entries[:] = damped.entries + (indicator + 1.0 - alpha) * (1.0 / n)

    release_vector(raw)
    release_vector(indicator_weights)
    release_vector(damped)
    return result


def run_iterations(vector, matrix, config):
    """
    Apply surfer() config.iterations times.

    Takes ownership of `vector`: every superseded iterate, the incoming one
    included, is released as soon as its successor exists.  The returned
    vector belongs to the caller.
    """
    # Structure is fixed after normalization: build these once, outside the loop
    csr = matrix.to_csr() if config.engine == "csr" else None
    dangling = matrix.dangling_mask()
    show = config.progress and not is_quiet()

    for _ in trange(
        config.iterations,
        desc="  Iterating",
        unit="it",
        bar_format="  {l_bar}{bar:30}{r_bar}",
        ncols=90,
        file=sys.stderr,
        disable=not show,
    ):
        nxt = surfer(vector, matrix, config.alpha, csr=csr, dangling=dangling)
        release_vector(vector)
        vector = nxt
    return vector


def compute_pagerank(matrix, config=None, vector=None):
    """
    Normalize `matrix` and run the damped power iteration on it.

    Implements the formula from [1], with the dangling correction of [2]:
        PR(A) = (1-d)/N + d * (PR(T1)/C(T1) + ... + PR(Tn)/C(Tn) + D/N)

    Args:
        matrix (SparseMatrix): freshly populated binary matrix, normalized
            in place by this call
        config (PageRankConfig|None): defaults to PageRankConfig()
        vector (Vector|None): starting vector, ownership passes to this
            call; defaults to the uniform 1/n vector

    Returns:
        Vector: final PageRank scores
    """
    config = config or PageRankConfig()
    print_stage("PageRank", "Computing PageRank scores")

    with Timer("Total Stage 3"):
        # ---------------------------------------------------------------
        # Step 1 - Row-normalize into a stochastic matrix
        # ---------------------------------------------------------------
        print_step("Normalizing rows into transition probabilities...")
        normalize(matrix)
        dangling = int(matrix.dangling_mask().sum())
        print_success(f"Matrix: {matrix.row_count} nodes, {matrix.edge_count()} edges, "
                      f"{dangling} dangling")

        # ---------------------------------------------------------------
        # Step 2 - Uniform start: every node begins with PR = 1/N
        # ---------------------------------------------------------------
        if vector is None:
            vector = uniform_vector(matrix.row_count)

        # ---------------------------------------------------------------
        # Step 3 - Fixed-count power iteration
        # ---------------------------------------------------------------
        print_step(f"Running {config.iterations} iterations "
                   f"[alpha={config.alpha}, engine={config.engine}]...")
        with Timer("Power iteration"):
            vector = run_iterations(vector, matrix, config)
        print_step(f"Total mass after iterating: {vector.sum():.10f}")

        # ---------------------------------------------------------------
        # Step 4 - Report top 5
        # ---------------------------------------------------------------
        order = np.argsort(-vector.entries, kind="stable")[:5]
        print_summary_box("Top 5 Nodes by PageRank", {
            f"Node {i}": f"{vector.entries[i]:.8f}" for i in order
        })

    return vector
