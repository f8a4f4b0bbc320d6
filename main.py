# main.py
#
# Project: Sparse PageRank - power iteration on a row-compressed matrix
#
# Description:
#   Entry point.  Reads a binary sparse adjacency matrix, normalizes it into
#   a transition matrix, runs a fixed number of damped power iterations from
#   the uniform vector and writes to stdout:
#
#       <initial vector>
#
#       <final vector>
#
#       <normalized matrix>
#
#   Progress reporting goes to stderr.  Exit status is 0 on success, 1 when
#   the input cannot be read or parsed.
#
# References:
#   [1] Page, L., Brin, S., Motwani, R., & Winograd, T. (1999).
#       "The PageRank Citation Ranking: Bringing Order to the Web."
#       http://ilpubs.stanford.edu:8090/422/1/1999-66.pdf

import argparse
import sys

import sparse_pagerank.stage1_read
import sparse_pagerank.stage2_stats
import sparse_pagerank.stage3_pagerank
import sparse_pagerank.stage4_validation
import sparse_pagerank.utils as utils
from sparse_pagerank.errors import PageRankError
from sparse_pagerank.sparse_matrix import release_matrix
from sparse_pagerank.vector import release_vector, uniform_vector


def build_parser():
    parser = argparse.ArgumentParser(description="PageRank of a sparse adjacency matrix")
    parser.add_argument('--input', default='exemple.dat',
                        help="Matrix file: local path, gs://bucket/object or http(s) URL")
    parser.add_argument('--alpha', type=float, default=0.85,
                        help="Weight of followed links vs teleportation, in [0, 1) (default: 0.85)")
    parser.add_argument('--iterations', type=int, default=1000,
                        help="Number of power iterations (default: 1000)")
    parser.add_argument('--engine', default='csr',
                        choices=sparse_pagerank.stage3_pagerank.ENGINES,
                        help="Transition step implementation (default: csr)")
    parser.add_argument('--stats', action='store_true', help="Report degree statistics")
    parser.add_argument('--validate', action='store_true',
                        help="Cross-check the result against networkx.pagerank")
    parser.add_argument('--plot-dir', default=None,
                        help="With --validate, save scatter plots into this directory")
    parser.add_argument('--progress', action='store_true', help="Show an iteration progress bar")
    parser.add_argument('--quiet', action='store_true', help="Only write results to stdout")
    return parser


def run(args, config, out=None):
    out = out or sys.stdout

    # Stage 1
    matrix = sparse_pagerank.stage1_read.load_matrix(args.input)

    # Stage 2
    if args.stats:
        sparse_pagerank.stage2_stats.run_stats(matrix)

    # Stage 3 - the initial vector is written before ownership moves to the driver
    initial = uniform_vector(matrix.row_count)
    sparse_pagerank.stage1_read.write_vector(out, initial)
    out.write("\n")

    pr = sparse_pagerank.stage3_pagerank.compute_pagerank(matrix, config, initial)

    sparse_pagerank.stage1_read.write_vector(out, pr)
    out.write("\n")
    sparse_pagerank.stage1_read.write_matrix(out, matrix)

    # Stage 4
    if args.validate:
        sparse_pagerank.stage4_validation.verify_with_networkx(
            matrix, pr, config.alpha, plot_dir=args.plot_dir)

    release_vector(pr)
    release_matrix(matrix)


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    utils.set_quiet(args.quiet)
    utils.print_project_banner()

    try:
        config = sparse_pagerank.stage3_pagerank.PageRankConfig(
            alpha=args.alpha,
            iterations=args.iterations,
            engine=args.engine,
            progress=args.progress,
        )
    except ValueError as exc:
        parser.error(str(exc))

    try:
        run(args, config)
    except (PageRankError, OSError) as exc:
        utils.print_error(str(exc))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
