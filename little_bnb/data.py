import os

from .errors import MatrixError

INPUT_FILE = "tsp.txt"

MISSING = {"-", "x", "inf", "none", "null", "∞"}

# A B C D E F, None on the diagonal
EXAMPLE_MATRIX = [
    [None, 6, 7, 3, 1, 3],
    [7, None, 8, 2, 9, 7],
    [5, 10, None, 10, 1, 7],
    [8, 6, 5, None, 5, 1],
    [7, 7, 6, 7, None, 4],
    [9, 8, 8, 5, 3, None],
]


def city_label(idx, labels=None):
    if labels:
        return str(labels[idx])
    if idx < 26:
        return chr(65 + idx)
    return str(idx)


def format_path(path, labels=None):
    return " -> ".join(city_label(c, labels) for c in path)


def _is_cost_token(token):
    try:
        float(token)
        return True
    except ValueError:
        return token.lower() in MISSING


def _parse_cost(token, row_no):
    if token.lower() in MISSING:
        return None
    try:
        return float(token)
    except ValueError:
        raise MatrixError(f"Line {row_no}: cannot read cost '{token}'.")


def parse_matrix(text):
    """
    Reads a full (asymmetric) cost matrix.

        A  B  C
    A   -  3  5
    B   4  -  1
    C   2  6  -

    The header line and the row labels are optional, '-', 'x', 'inf' mark a
    missing arc. Returns (labels or None, rows).
    """
    # cleaning strange things
    lines = [line.replace('\xa0', ' ').strip() for line in text.splitlines()]
    lines = [line for line in lines if line and not line.startswith('#')]
    if not lines:
        raise MatrixError("No matrix found.")

    labels = None
    first = lines[0].split()
    rest = lines[1:]
    numeric_header = len(rest) == len(first) and all(len(line.split()) == len(first) + 1 for line in rest)
    if numeric_header or not any(_is_cost_token(tok) for tok in first):
        labels = first
        lines = lines[1:]

    n = len(lines)
    rows = []
    row_labels = []
    for row_no, line in enumerate(lines, start=1):
        parts = line.split()
        if len(parts) == n + 1:
            row_labels.append(parts[0])
            parts = parts[1:]
        if len(parts) != n:
            raise MatrixError(f"Row {row_no} has {len(parts)} costs, expected {n}.")
        rows.append([_parse_cost(tok, row_no) for tok in parts])

    if labels is None and len(row_labels) == n:
        labels = row_labels
    if labels is not None and len(labels) != n:
        raise MatrixError(f"Header has {len(labels)} labels for {n} rows.")
    return labels, rows


def load_matrix(filename=INPUT_FILE):
    if not os.path.exists(filename):
        raise MatrixError(f"File '{filename}' not found.")
    with open(filename, 'r') as f:
        return parse_matrix(f.read())
