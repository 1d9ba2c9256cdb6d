"""
Validation rules for surfquad.

Structural checks on a quadrangulation result against its input scene.
"""

from surfquad.models import (
    QUAD_RECORD_SIZE, QUAD_VERTEX_COUNT, CheckResult, Severity, ValidationReport,
    iter_quads,
)
from surfquad.tracer import get_tracer, trace


@trace(label="run_validation")
def run_validation(result, data):
    """
    Run all validation checks on a result.

    Returns ValidationReport with all check results.
    """
    tracer = get_tracer()

    checks = [
        check_record_shape(result),
        check_vertex_range(result, data),
        check_alternation(result, data),
        check_degenerate_count(result),
        check_subdivision_points(result),
        check_bad_quads(result),
    ]

    report = ValidationReport(checks=checks)

    tracer.event(f"Validation complete: {report.error_count} errors, {report.warning_count} warnings")

    return report


def check_record_shape(result):
    """
    Check that the cell buffer is a sequence of [4, i, j, k, l] records.
    """
    cells = result.cells
    malformed = []

    if len(cells) % QUAD_RECORD_SIZE != 0:
        return CheckResult(
            rule_id="quad_record_shape",
            severity=Severity.ERROR,
            passed=False,
            message=f"Cell buffer length {len(cells)} is not a multiple of {QUAD_RECORD_SIZE}",
            evidence={"length": len(cells)},
        )

    for quad_index in range(len(cells) // QUAD_RECORD_SIZE):
        if cells[quad_index * QUAD_RECORD_SIZE] != QUAD_VERTEX_COUNT:
            malformed.append(quad_index)

    if malformed:
        return CheckResult(
            rule_id="quad_record_shape",
            severity=Severity.ERROR,
            passed=False,
            message=f"{len(malformed)} records do not start with the vertex count {QUAD_VERTEX_COUNT}",
            evidence={"quads": malformed[:5]},
        )

    return CheckResult(
        rule_id="quad_record_shape",
        severity=Severity.ERROR,
        passed=True,
        message="All cell records are well formed quads",
        evidence={},
    )


def check_vertex_range(result, data):
    """
    Check that every quad corner is a valid critical point identifier.
    """
    point_count = data.point_count
    out_of_range = [
        quad_index
        for quad_index, quad in enumerate(iter_quads(result.cells))
        if any(corner < 0 or corner >= point_count for corner in quad)
    ]

    if out_of_range:
        return CheckResult(
            rule_id="quad_vertex_range",
            severity=Severity.ERROR,
            passed=False,
            message=f"{len(out_of_range)} quads reference unknown critical points",
            evidence={"quads": out_of_range[:5], "point_count": point_count},
        )

    return CheckResult(
        rule_id="quad_vertex_range",
        severity=Severity.ERROR,
        passed=True,
        message=f"All quad corners within [0, {point_count})",
        evidence={},
    )


def check_alternation(result, data):
    """
    Check that non-degenerate quads alternate critical point types.

    The two saddle-side corners j, l share a type that differs from both i and k.
    """
    point_count = data.point_count
    irregular = []

    for quad_index, (i, j, k, l) in enumerate(iter_quads(result.cells)):
        if j == l:
            continue
        if any(corner < 0 or corner >= point_count for corner in (i, j, k, l)):
            continue
        types = [data.critical_points[c].point_type for c in (i, j, k, l)]
        if types[1] != types[3] or types[1] in (types[0], types[2]):
            irregular.append(quad_index)

    if irregular:
        return CheckResult(
            rule_id="quad_alternation",
            severity=Severity.WARN,
            passed=False,
            message=f"{len(irregular)} quads do not alternate corner types",
            evidence={"quads": irregular[:5]},
        )

    return CheckResult(
        rule_id="quad_alternation",
        severity=Severity.WARN,
        passed=True,
        message="All non-degenerate quads alternate corner types",
        evidence={},
    )


def check_degenerate_count(result):
    """
    Check that the reported degenerate count matches the j == l records.
    """
    found = sum(1 for _, j, _, l in iter_quads(result.cells) if j == l)
    reported = result.summary.degenerate_count

    # dual quads repeat a corner only when a saddle reaches one extremum twice
    if result.summary.dual:
        return CheckResult(
            rule_id="degenerate_count",
            severity=Severity.ERROR,
            passed=True,
            message=f"Dual mode, {found} quads with a repeated corner",
            evidence={"found": found},
        )

    if found != reported:
        return CheckResult(
            rule_id="degenerate_count",
            severity=Severity.ERROR,
            passed=False,
            message=f"Summary reports {reported} degenerate quads, buffer holds {found}",
            evidence={"reported": reported, "found": found},
        )

    return CheckResult(
        rule_id="degenerate_count",
        severity=Severity.ERROR,
        passed=True,
        message=f"{found} degenerate quads",
        evidence={},
    )


def check_subdivision_points(result):
    """
    Check that at most one subdivision point exists per separatrix range.
    """
    points = result.points
    cached = len(result.subdivision_cache)

    if len(points) % 3 != 0 or len(points) // 3 > cached:
        return CheckResult(
            rule_id="subdivision_points",
            severity=Severity.ERROR,
            passed=False,
            message=f"{len(points)} point coordinates for {cached} subdivided separatrices",
            evidence={"coordinates": len(points), "cached_ranges": cached},
        )

    return CheckResult(
        rule_id="subdivision_points",
        severity=Severity.ERROR,
        passed=True,
        message=f"{len(points) // 3} subdivision points, one per separatrix",
        evidence={},
    )


def check_bad_quads(result):
    """
    Report quads flagged as inconsistent by post-processing.
    """
    summary = result.summary

    return CheckResult(
        rule_id="bad_quads",
        severity=Severity.INFO,
        passed=summary.bad_quad_count == 0,
        message=f"{summary.bad_quad_count} quads around {summary.bad_point_count} under-connected critical points",
        evidence={
            "bad_quads": summary.bad_quad_count,
            "bad_points": summary.bad_point_count,
        },
    )
