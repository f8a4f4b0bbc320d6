# utils.py
#
# Project: Sparse PageRank - power iteration on a row-compressed matrix
#
# Description:
#   Terminal reporting layer shared by every stage - colored progress
#   lines, bordered summary boxes, side-by-side tables and a timing
#   context manager.
#
#   stdout is reserved for the data the program produces (vectors and
#   the normalized matrix), so everything here writes to stderr.  Call
#   set_quiet(True) to silence reporting entirely (tests, piping).
#
# Components:
#   Colors            - ANSI escape code constants for terminal styling.
#   set_quiet / is_quiet
#                     - Global on/off switch for all reporting.
#   print_project_banner - Project banner printed once by main.py.
#   print_stage / print_step / print_success / print_warning / print_error
#                     - Hierarchical log output with color-coded prefixes.
#   print_summary_box - Single bordered table for key-value statistics.
#   print_side_by_side_boxes
#                     - Two bordered tables rendered on the same lines
#                       (e.g., [Custom Top 5] [NetworkX Top 5]).
#   Timer             - Context manager that reports elapsed wall time.

import sys
import time


class Colors:
    HEADER = '\033[95m'
    BLUE = '\033[94m'
    CYAN = '\033[96m'
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    BOLD = '\033[1m'
    DIM = '\033[2m'
    RESET = '\033[0m'


_quiet = False


def set_quiet(quiet):
    """Enable or disable all reporting output."""
    global _quiet
    _quiet = bool(quiet)


def is_quiet():
    return _quiet


def _emit(text=""):
    if not _quiet:
        print(text, file=sys.stderr)


def print_project_banner():
    """Print project info banner at program start."""
    w = 90
    _emit(f"\n{Colors.BOLD}{Colors.BLUE}{'=' * w}")
    _emit("  Sparse PageRank - damped power iteration")
    _emit(f"{'=' * w}{Colors.RESET}")
    _emit(f"  {Colors.DIM}Ref:{Colors.RESET}     Page, Brin, Motwani & Winograd (1999)")
    _emit(f"           {Colors.DIM}\"The PageRank Citation Ranking\"")
    _emit(f"           http://ilpubs.stanford.edu:8090/422/1/1999-66.pdf{Colors.RESET}")
    _emit(f"{Colors.BOLD}{Colors.BLUE}{'=' * w}{Colors.RESET}\n")


def print_stage(name, message):
    """Print a stage header."""
    _emit(f"{Colors.BOLD}{Colors.CYAN}[{name}]{Colors.RESET} {message}")


def print_step(message):
    """Print a sub-step within a stage."""
    _emit(f"  {Colors.DIM}->{Colors.RESET} {message}")


def print_success(message):
    _emit(f"  {Colors.GREEN}[OK]{Colors.RESET} {message}")


def print_warning(message):
    _emit(f"  {Colors.YELLOW}[WARN]{Colors.RESET} {message}")


def print_error(message):
    # Errors are shown even in quiet mode.
    print(f"  {Colors.RED}[ERR]{Colors.RESET} {message}", file=sys.stderr)


def _build_box_lines(title, stats, width):
    """Build a box as a list of strings."""
    sep = f"+{'-' * width}+"
    padded = title + ' ' * (width - 1 - len(title))
    lines = [sep, f"| {Colors.BOLD}{padded}{Colors.RESET}|", sep]
    for key, val in stats.items():
        content = f" {key}: {val}"
        lines.append(f"|{content:<{width}}|")
    lines.append(sep)
    return lines


def print_summary_box(title, stats, width=50):
    """
    Print a single summary box.

    Args:
        title (str): Box title
        stats (dict): Key-value pairs to display
        width (int): Inner width of the box
    """
    _emit()
    for line in _build_box_lines(title, stats, width):
        _emit(f"  {line}")
    _emit()


def print_side_by_side_boxes(title_l, stats_l, title_r, stats_r, col_width=38, gap=3):
    """
    Print two summary boxes side by side.

    Args:
        title_l (str): Left box title
        stats_l (dict): Left box key-value pairs
        title_r (str): Right box title
        stats_r (dict): Right box key-value pairs
        col_width (int): Inner width of each box
        gap (int): Space between the two boxes
    """
    left = _build_box_lines(title_l, stats_l, col_width)
    right = _build_box_lines(title_r, stats_r, col_width)

    # Pad shorter side so both have equal line count
    empty = ' ' * (col_width + 2)
    max_len = max(len(left), len(right))
    left += [empty] * (max_len - len(left))
    right += [empty] * (max_len - len(right))

    spacer = ' ' * gap
    _emit()
    for l, r in zip(left, right):
        _emit(f"  {l}{spacer}{r}")
    _emit()


class Timer:
    """Context manager for timing code blocks."""
    def __init__(self, label="Operation"):
        self.label = label
        self.start = None
        self.elapsed = None

    def __enter__(self):
        self.start = time.perf_counter()
        return self

    def __exit__(self, *args):
        self.elapsed = time.perf_counter() - self.start
        print_success(f"{self.label} completed in {self.elapsed:.2f}s")
