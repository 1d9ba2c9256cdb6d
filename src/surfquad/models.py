"""
Pydantic data models for surfquad.

Morse-Smale complex inputs and quadrangulation outputs flow through these
validated models. Array-like data is kept as plain lists so that scenes
round-trip through JSON unchanged.
"""

from enum import Enum
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field, model_validator


# vertex count prefix of every quad record (VTK cell array layout)
QUAD_VERTEX_COUNT = 4
QUAD_RECORD_SIZE = QUAD_VERTEX_COUNT + 1


class CriticalPointType(int, Enum):
    """Index of a critical point on a 2-manifold."""
    MINIMUM = 0
    SADDLE = 1
    MAXIMUM = 2


class CriticalPoint(BaseModel):
    """A critical point of the Morse-Smale complex."""
    identifier: int = Field(..., ge=0)
    vertex_id: int = Field(..., ge=0)  # position in the triangulation
    cell_id: int  # shared with separatrix endpoints
    point_type: CriticalPointType

    model_config = ConfigDict(extra="forbid", frozen=True)


class QuadrangulationInput(BaseModel):
    """
    Everything one quadrangulation run reads.

    sep_cell_ids, sep_mask and sep_points are parallel arrays: one entry per
    separatrix sample. Entries with mask 1 are interior samples and are
    dropped before endpoints get paired.
    """
    critical_points: List[CriticalPoint] = Field(default_factory=list)
    segmentation: List[int] = Field(default_factory=list)
    sep_cell_ids: List[int] = Field(default_factory=list)
    sep_mask: List[int] = Field(default_factory=list)
    sep_points: List[List[float]] = Field(default_factory=list)
    triangles: List[List[int]] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def _check_parallel_arrays(self):
        n = len(self.sep_cell_ids)
        if len(self.sep_mask) != n:
            raise ValueError(
                f"sep_mask has {len(self.sep_mask)} entries, expected {n}"
            )
        if len(self.sep_points) != n:
            raise ValueError(
                f"sep_points has {len(self.sep_points)} entries, expected {n}"
            )
        for point in self.sep_points:
            if len(point) != 3:
                raise ValueError("sep_points entries must be 3D coordinates")
        for cp_index, cp in enumerate(self.critical_points):
            if cp.identifier != cp_index:
                raise ValueError(
                    f"critical point {cp_index} has identifier {cp.identifier}"
                )
            if cp.vertex_id >= len(self.segmentation):
                raise ValueError(
                    f"critical point {cp_index} lies on vertex {cp.vertex_id}, "
                    f"segmentation covers {len(self.segmentation)} vertices"
                )
        for triangle in self.triangles:
            if len(triangle) != 3:
                raise ValueError("triangles must have exactly 3 vertices")
            if any(v < 0 or v >= len(self.segmentation) for v in triangle):
                raise ValueError(
                    f"triangle {triangle} references vertices outside the segmentation"
                )
        return self

    @property
    def point_count(self):
        return len(self.critical_points)


class RunSummary(BaseModel):
    """Diagnostic counts reported at the end of a run."""
    quad_count: int = 0
    degenerate_count: int = 0
    manifold_count: int = 0
    bad_point_count: int = 0
    bad_quad_count: int = 0
    subdivision_point_count: int = 0
    dual: bool = False

    model_config = ConfigDict(extra="forbid")


class QuadrangulationResult(BaseModel):
    """Output buffers of one run plus its summary."""
    cells: List[int] = Field(default_factory=list)
    points: List[float] = Field(default_factory=list)
    subdivision_cache: Dict[str, int] = Field(default_factory=dict)
    summary: RunSummary = Field(default_factory=RunSummary)

    model_config = ConfigDict(extra="forbid")

    @property
    def quads(self):
        """Quads as (i, j, k, l) tuples."""
        return list(iter_quads(self.cells))


class Severity(str, Enum):
    """Severity levels for validation checks."""
    ERROR = "error"
    WARN = "warn"
    INFO = "info"


class CheckResult(BaseModel):
    """Result of a single validation check."""
    rule_id: str
    severity: Severity
    passed: bool
    message: str
    evidence: Dict = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid")


class ValidationReport(BaseModel):
    """Collection of validation check results."""
    checks: List[CheckResult] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    @property
    def has_errors(self):
        """Check if any errors exist."""
        return any(c.severity == Severity.ERROR and not c.passed for c in self.checks)

    @property
    def error_count(self):
        """Count of failed error-level checks."""
        return sum(1 for c in self.checks if c.severity == Severity.ERROR and not c.passed)

    @property
    def warning_count(self):
        """Count of failed warning-level checks."""
        return sum(1 for c in self.checks if c.severity == Severity.WARN and not c.passed)


def iter_quads(cells):
    """Yield (i, j, k, l) for every [4, i, j, k, l] record of a flat cell buffer."""
    for start in range(0, len(cells) - QUAD_RECORD_SIZE + 1, QUAD_RECORD_SIZE):
        yield tuple(cells[start + 1:start + QUAD_RECORD_SIZE])


def append_quad(cells, i, j, k, l):
    """Append one quad record to a flat cell buffer."""
    cells.extend((QUAD_VERTEX_COUNT, i, j, k, l))


def build_cell_lookup(critical_points):
    """
    Map surface cell ids to critical point identifiers.

    When several critical points share a cell id the first one wins, as a
    linear scan over the table would.
    """
    lookup = {}
    for cp in critical_points:
        lookup.setdefault(cp.cell_id, cp.identifier)
    return lookup
