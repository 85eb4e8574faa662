from .bounds import subtours
from .data import city_label, format_path
from .reduction import SENTINEL

OUTPUT_FILE = "little_result.txt"
TRACE_FILE = "little_trace.json"


def log(msg, output_file=OUTPUT_FILE):
    print(msg)
    if output_file:
        with open(output_file, "a") as f:
            f.write(msg + "\n")


def format_cost(val):
    if val >= SENTINEL:
        return "inf"
    if abs(val - round(val)) < 1e-9:
        return f"{int(round(val))}"
    return f"{val:.2f}"


def format_matrix(mat, title, labels=None):
    n = mat.shape[0]
    out = f"--- {title} ---\n"
    out += "      " + "".join([f"{city_label(j, labels):^6}" for j in range(n)]) + "\n"
    out += "    " + "-" * (6 * n + 2) + "\n"
    for i in range(n):
        row_str = f"{city_label(i, labels):^3} |"
        for j in range(n):
            row_str += f"{format_cost(mat[i, j]):^6}"
        out += row_str + "\n"
    return out


def _node_line(node, status, labels):
    arcs = " ".join(f"({city_label(u, labels)},{city_label(v, labels)})" for u, v in node.arcs) or "none"
    return f"node {node.node_id}: arcs {arcs} | b = {format_cost(node.total_estimate)} -> {status.upper()}"


def render_step(step, labels=None):
    """Text block for one trace record."""
    lines = [f"[{step.kind}] {step.description}"]
    if step.kind == "matrix_reduction":
        lines.append(format_matrix(step.original, "INITIAL MATRIX", labels))
        lines.append(format_matrix(step.reduced, "FULLY REDUCED (row + column subtraction)", labels))
    elif step.kind == "regret_calculation":
        for r in step.regrets:
            lines.append(f"   rho({city_label(r.i, labels)},{city_label(r.j, labels)}) = {format_cost(r.regret)}")
    elif step.kind == "branch_development":
        lines.append("   with arc    " + _node_line(step.include, step.include_status, labels))
        lines.append("   without arc " + _node_line(step.exclude, step.exclude_status, labels))
    elif step.kind == "arc_blocking":
        lines.append(format_matrix(step.blocked_matrix, "BLOCKED", labels))
        lines.append(format_matrix(step.reduced_matrix, f"REDUCED (-{format_cost(step.amount)})", labels))
    elif step.kind == "tour_found":
        if step.improved:
            lines.append(f"   *** NEW OPTIMUM: v_S = {format_cost(step.cost)} ***")
    return "\n".join(lines)


def write_report(result, costs, start=0, labels=None, output_file=OUTPUT_FILE, bounds=None):
    """
    Logs a full run: pre-processing bounds, every step, the result.
    bounds is a dict with 'assignment' and 'nearest_neighbor' entries.
    """
    log("=== 1. PRE-PROCESSING ===", output_file)
    log(f"Reduction bound b = {format_cost(result.steps[0].amount)}", output_file)
    if bounds:
        ap_cost, succ = bounds["assignment"]
        nn_cost, nn_path = bounds["nearest_neighbor"]
        log(f"Assignment bound v_I = {format_cost(ap_cost)}", output_file)
        if succ is not None:
            log("Subtours found:", output_file)
            for no, cycle in enumerate(subtours(succ), start=1):
                log(f"   Cycle {no}: {format_path(cycle + [cycle[0]], labels)}", output_file)
        if nn_path:
            log(f"Nearest neighbor from {city_label(start, labels)}: {format_path(nn_path, labels)}  v_S = {format_cost(nn_cost)}", output_file)
        else:
            log(f"Nearest neighbor from {city_label(start, labels)}: IMPOSSIBLE", output_file)

    log("\n=== 2. BRANCH AND BOUND (Little) ===", output_file)
    for no, step in enumerate(result.steps, start=1):
        log(f"\n#{no} " + render_step(step, labels), output_file)

    log("\n=== OPTIMAL RESULT ===", output_file)
    log(f"   Tour = {format_path(result.best_path, labels)}", output_file)
    legs = [format_cost(costs[u, v]) for u, v in zip(result.best_path, result.best_path[1:])]
    log(f"   Cost = {' + '.join(legs)} = {format_cost(result.best_cost)}", output_file)
    log(f"   Nodes explored = {result.nodes_explored}", output_file)
