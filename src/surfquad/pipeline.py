"""
Quadrangulation orchestrator for surfquad.

Runs filtering, quadrangulation, manifold counting and post-processing in
sequence and owns the output buffers.
"""

from enum import Enum

from surfquad.config import load_config
from surfquad.io.load_input import load_input
from surfquad.io.save_artifacts import ensure_dir, save_result
from surfquad.mesh.triangulation import TriangulationGraph
from surfquad.models import (
    QUAD_RECORD_SIZE, QuadrangulationResult, RunSummary, build_cell_lookup,
)
from surfquad.quads.direct import quadrangulate
from surfquad.quads.dual import dual_expected_valence, dual_quadrangulate
from surfquad.quads.postprocess import postprocess_quads
from surfquad.quads.separatrix_middle import SubdivisionCache, filter_separatrix_positions
from surfquad.tracer import get_tracer, trace
from surfquad.validate.report import generate_report
from surfquad.validate.rules import run_validation


class OddSeparatrixEndpointsError(ValueError):
    """Surviving separatrix endpoints cannot be paired into edges."""


class RunState(str, Enum):
    """Stages of a run, visited in declaration order."""
    IDLE = "idle"
    FILTERING = "filtering"
    QUADRANGULATING = "quadrangulating"
    COUNTING_MANIFOLDS = "counting_manifolds"
    POST_PROCESSING = "post_processing"
    DONE = "done"


class RunObserver:
    """
    Receives diagnostics at fixed checkpoints of a run.

    Subclass and override the hooks of interest; the defaults do nothing.
    """

    def on_filtered(self, edge_count):
        pass

    def on_quadrangulated(self, quad_count, degenerate_count):
        pass

    def on_finished(self, summary):
        pass


class TracerObserver(RunObserver):
    """Forwards checkpoints to the global tracer."""

    def on_filtered(self, edge_count):
        get_tracer().event(f"Filtered separatrices: {edge_count} edges")

    def on_quadrangulated(self, quad_count, degenerate_count):
        get_tracer().event(f"Quadrangulated: {quad_count} quads ({degenerate_count} degenerated)")

    def on_finished(self, summary):
        get_tracer().event(
            f"{summary.quad_count} quads ({summary.degenerate_count} degenerated, "
            f"{summary.manifold_count} manifolds)"
        )


def pair_separatrix_edges(flat_positions):
    """
    Pair consecutive surviving endpoints into (source, destination) cell ids.

    Raises OddSeparatrixEndpointsError when the count is odd.
    """
    if len(flat_positions) % 2 != 0:
        raise OddSeparatrixEndpointsError(
            f"Odd number of separatrix endpoints: {len(flat_positions)}"
        )

    return [
        (flat_positions[2 * n][0], flat_positions[2 * n + 1][0])
        for n in range(len(flat_positions) // 2)
    ]


def count_manifolds(segmentation):
    """Number of manifolds in a segmentation, max id + 1."""
    max_id = 0
    for seg_id in segmentation:
        if seg_id > max_id:
            max_id = seg_id
    return max_id + 1


class SurfaceQuadrangulation:
    """
    Turns the separatrices of a Morse-Smale complex into a quad mesh.

    Output buffers and the subdivision cache are rebuilt from scratch on
    every call to execute().
    """

    def __init__(self, data, triangulation=None, dual_quadrangulation=False, observer=None):
        self.data = data
        if triangulation is None:
            triangulation = TriangulationGraph.from_triangles(
                data.triangles, vertex_count=len(data.segmentation)
            )
        self.triangulation = triangulation
        self.dual_quadrangulation = dual_quadrangulation
        self.observer = observer or TracerObserver()

        self.state = RunState.IDLE
        self.output_cells = []
        self.output_points = []
        self.cache = SubdivisionCache()
        self.summary = RunSummary()

    @trace(label="execute")
    def execute(self):
        """
        Run the whole quadrangulation.

        Returns:
            QuadrangulationResult with copies of the output buffers

        Raises:
            OddSeparatrixEndpointsError if endpoints cannot be paired; the
            output buffers are left empty
        """
        tracer = get_tracer()
        data = self.data

        self.output_cells.clear()
        self.output_points.clear()
        self.cache.clear()
        self.summary = RunSummary(dual=self.dual_quadrangulation)

        self.state = RunState.FILTERING
        with tracer.span("filter_separatrices", module="pipeline", samples=len(data.sep_cell_ids)):
            flat_positions = filter_separatrix_positions(data.sep_cell_ids, data.sep_mask)
            sep_edges = pair_separatrix_edges(flat_positions)
        self.observer.on_filtered(len(sep_edges))

        cell_lookup = build_cell_lookup(data.critical_points)

        self.state = RunState.QUADRANGULATING
        degenerate_count = 0
        if self.dual_quadrangulation:
            dual_quadrangulate(sep_edges, data.critical_points, self.output_cells, cell_lookup)
            expected_valence = dual_expected_valence(sep_edges, data.point_count, cell_lookup)
        else:
            expected_valence, degenerate_count = quadrangulate(
                sep_edges, data.critical_points, data.segmentation,
                self.triangulation, self.output_cells, cell_lookup,
            )
        quad_count = len(self.output_cells) // QUAD_RECORD_SIZE
        self.observer.on_quadrangulated(quad_count, degenerate_count)

        self.state = RunState.COUNTING_MANIFOLDS
        manifold_count = count_manifolds(data.segmentation)

        self.state = RunState.POST_PROCESSING
        bad_points, bad_quads = postprocess_quads(
            self.output_cells, expected_valence, data.critical_points,
            data.sep_points, flat_positions, self.cache, self.output_points,
        )

        self.state = RunState.DONE
        self.summary = RunSummary(
            quad_count=quad_count,
            degenerate_count=degenerate_count,
            manifold_count=manifold_count,
            bad_point_count=len(bad_points),
            bad_quad_count=len(bad_quads),
            subdivision_point_count=len(self.output_points) // 3,
            dual=self.dual_quadrangulation,
        )
        self.observer.on_finished(self.summary)

        return QuadrangulationResult(
            cells=list(self.output_cells),
            points=list(self.output_points),
            subdivision_cache=self.cache.as_dict(),
            summary=self.summary,
        )


@trace(label="run_pipeline")
def run_pipeline(input_path, out_dir, config=None, config_path=None, dual=None):
    """
    Load a scene, quadrangulate it and write results.

    Args:
        input_path: JSON or NPZ scene file
        out_dir: output directory
        config: PipelineConfig object (optional)
        config_path: path to YAML config file (optional)
        dual: overrides quadrangulation.dual_quadrangulation when not None

    Returns:
        (QuadrangulationResult, ValidationReport)
    """
    tracer = get_tracer()

    if config is None:
        config = load_config(config_path)
    if dual is not None:
        config.quadrangulation.dual_quadrangulation = dual

    data = load_input(input_path)

    ensure_dir(out_dir)

    with tracer.span("quadrangulate", module="pipeline", dual=config.quadrangulation.dual_quadrangulation):
        run = SurfaceQuadrangulation(
            data, dual_quadrangulation=config.quadrangulation.dual_quadrangulation
        )
        result = run.execute()

    with tracer.span("validate", module="pipeline"):
        report = run_validation(result, data)

    save_result(result, out_dir, indent=config.output.indent)
    if config.output.write_report:
        generate_report(report, out_dir)

    tracer.event(f"Run complete: {result.summary.quad_count} quads written to {out_dir}")

    return result, report
