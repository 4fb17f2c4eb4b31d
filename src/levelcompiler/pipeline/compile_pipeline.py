"""
Compile pipeline for level sources.

Orchestrates loading a source (2D graph JSON or Quake .map), input
validation, tree construction, the leak check and writing level data.
Every stage failure stops the run before any output is written.
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from ..errors import CompilerError, InputError
from ..geometry import DEFAULT_FACET_SIZE, Point, parse_point
from ..spatial import (
    BspBuilder, BspNode, Dimension, Dimension2D, PartitionStrategy, Surface,
    construct_solid_geometry, cull_outside, default_exterior_point, find_leaks,
    get_strategy, iter_leaves, node_count, tree_depth, visible_surfaces,
)
from ..spatial.portals import DEFAULT_PORTAL_PADDING
from ..spatial.strategies import STRATEGIES
from ..conversion import (
    QuakeDimension, ObjWriter, entity_origins, load_graph, load_map,
    surfaces_from_graph, world_brushes, write_level,
)
from ..validation import (
    ValidationError, ValidationGateContext, enforce_gate, validate_export, validate_input,
    validate_partition,
)

logger = logging.getLogger(__name__)

GRAPH_SUFFIXES = (".json",)
MAP_SUFFIXES = (".map",)
LEVEL_SUFFIX = ".bsp"
TREE_DUMP_FORMATS = ("dot", "json")


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class CompileStage(Enum):
    INITIALIZE = "initialize"
    LOAD_INPUT = "load_input"
    VALIDATE_INPUT = "validate_input"
    BUILD_TREE = "build_tree"
    LEAK_CHECK = "leak_check"
    WRITE_OUTPUT = "write_output"
    COMPLETE = "complete"


class SourceKind(Enum):
    GRAPH = "graph"
    QUAKE_MAP = "quake_map"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class PipelineError(Exception):
    pass


class CompileCancelledException(PipelineError):
    pass


# ---------------------------------------------------------------------------
# Settings / Result dataclasses
# ---------------------------------------------------------------------------

@dataclass
class CompilerSettings:
    # Input / output
    input_path: Optional[str] = None
    output_dir: Optional[str] = None
    level_name: str = "level"

    # Partitioning
    strategy: str = "exhaustive"
    imbalance_weight: int = 1
    split_weight: int = 10
    max_depth: Optional[int] = None
    time_limit: Optional[float] = None
    facet_size: int = DEFAULT_FACET_SIZE

    # Leak check; points are "x,y" or "x,y,z" strings
    leak_check: bool = True
    cull_outside: bool = False
    portal_padding: int = DEFAULT_PORTAL_PADDING
    exterior_point: Optional[str] = None
    interior_points: List[str] = field(default_factory=list)

    # Extra outputs
    export_obj: bool = False
    enable_tree_dump: bool = False
    tree_dump_format: str = "dot"  # "dot" or "json"

    # Misc
    surface_limit: Optional[int] = 2000
    verbose: bool = False


@dataclass
class CompileProgress:
    stage: CompileStage
    stage_progress: float
    overall_progress: float
    message: str
    elapsed_time: float
    estimated_remaining: float

    @property
    def percentage(self) -> int:
        return int(self.overall_progress * 100)


@dataclass
class CompileResult:
    success: bool
    output_files: List[str] = field(default_factory=list)
    primary_output: Optional[str] = None
    stages_completed: List[CompileStage] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    metrics: Dict[str, Any] = field(default_factory=dict)

    @property
    def total_time(self) -> float:
        return self.metrics.get("total_time", 0.0)

    @property
    def level_file(self) -> Optional[str]:
        return self.primary_output

    def add_error(self, error: str, stage: Optional[CompileStage] = None):
        if stage:
            error = f"[{stage.value}] {error}"
        self.errors.append(error)

    def add_warning(self, warning: str, stage: Optional[CompileStage] = None):
        if stage:
            warning = f"[{stage.value}] {warning}"
        self.warnings.append(warning)


# ---------------------------------------------------------------------------
# Progress tracker
# ---------------------------------------------------------------------------

class ProgressTracker:
    STAGE_WEIGHTS = {
        CompileStage.INITIALIZE: 0.02,
        CompileStage.LOAD_INPUT: 0.13,
        CompileStage.VALIDATE_INPUT: 0.05,
        CompileStage.BUILD_TREE: 0.50,
        CompileStage.LEAK_CHECK: 0.20,
        CompileStage.WRITE_OUTPUT: 0.10,
    }

    def __init__(self):
        self.start_time = time.time()
        self.stage_start_times: Dict[CompileStage, float] = {}
        self.stage_durations: Dict[CompileStage, float] = {}

    def start_stage(self, stage: CompileStage):
        self.stage_start_times[stage] = time.time()

    def complete_stage(self, stage: CompileStage):
        started = self.stage_start_times.get(stage)
        if started is not None:
            self.stage_durations[stage] = time.time() - started

    def calculate_progress(self, current_stage: CompileStage, stage_progress: float) -> CompileProgress:
        stages = list(self.STAGE_WEIGHTS.keys())
        if current_stage not in stages:
            overall = 1.0
        else:
            idx = stages.index(current_stage)
            completed = sum(self.STAGE_WEIGHTS[s] for s in stages[:idx])
            overall = completed + self.STAGE_WEIGHTS[current_stage] * stage_progress
        elapsed = time.time() - self.start_time
        remaining = (elapsed / overall - elapsed) if overall > 0.01 else 0.0
        return CompileProgress(
            stage=current_stage,
            stage_progress=stage_progress,
            overall_progress=min(overall, 1.0),
            message="",
            elapsed_time=elapsed,
            estimated_remaining=max(0, remaining),
        )


# ---------------------------------------------------------------------------
# Main pipeline
# ---------------------------------------------------------------------------

def source_kind(path: str) -> Optional[SourceKind]:
    suffix = Path(path).suffix.lower()
    if suffix in GRAPH_SUFFIXES:
        return SourceKind.GRAPH
    if suffix in MAP_SUFFIXES:
        return SourceKind.QUAKE_MAP
    return None


class CompilePipeline:
    """Compiles one level source into binary level data."""

    def __init__(self, settings: Optional[CompilerSettings] = None):
        self.settings = settings or CompilerSettings()
        self.is_running = False
        self.is_cancelled = False
        self.current_stage = CompileStage.INITIALIZE
        self.progress_tracker = ProgressTracker()
        self.progress_callback: Optional[Callable[[CompileProgress], None]] = None

        # Components
        self.kind: Optional[SourceKind] = None
        self.dimension: Optional[Dimension] = None
        self.strategy: Optional[PartitionStrategy] = None

        # Data
        self.surfaces: List[Surface] = []
        self.default_interior_points: List[Point] = []
        self.tree: Optional[BspNode] = None

        self._validate_settings()

    # -- helpers --

    def set_progress_callback(self, callback: Callable[[CompileProgress], None]):
        self.progress_callback = callback

    def cancel(self):
        self.is_cancelled = True

    def _check_cancellation(self):
        if self.is_cancelled:
            raise CompileCancelledException("Pipeline cancelled by user")

    def _update_progress(self, stage_progress: float, message: str):
        if self.is_cancelled:
            return
        progress = self.progress_tracker.calculate_progress(self.current_stage, stage_progress)
        progress.message = message
        if self.progress_callback:
            try:
                self.progress_callback(progress)
            except Exception:
                logger.debug("Progress callback failed", exc_info=True)

    def _begin_stage(self, stage: CompileStage, message: str):
        self.current_stage = stage
        self.progress_tracker.start_stage(stage)
        self._check_cancellation()
        self._update_progress(0.0, message)

    def _end_stage(self, message: str):
        self._update_progress(1.0, message)
        self.progress_tracker.complete_stage(self.current_stage)

    def _validate_settings(self):
        s = self.settings
        errors = []
        if not s.input_path:
            errors.append("An input path is required")
        elif source_kind(s.input_path) is None:
            errors.append(f"Unsupported input type '{Path(s.input_path).suffix}' "
                          f"(expected .json or .map)")
        if not s.level_name:
            errors.append("Level name cannot be empty")
        if s.strategy.lower() not in STRATEGIES:
            errors.append(f"Unknown strategy '{s.strategy}' "
                          f"(choose from {', '.join(sorted(STRATEGIES))})")
        if s.imbalance_weight < 0 or s.split_weight < 0:
            errors.append("Scoring weights cannot be negative")
        if s.max_depth is not None and s.max_depth < 1:
            errors.append("Maximum depth must be at least 1")
        if s.time_limit is not None and s.time_limit <= 0:
            errors.append("Time limit must be positive")
        if s.facet_size <= 0:
            errors.append("Facet size must be positive")
        if s.portal_padding <= 0:
            errors.append("Portal padding must be positive")
        if s.surface_limit is not None and s.surface_limit < 1:
            errors.append("Surface limit must be at least 1")
        if s.tree_dump_format not in TREE_DUMP_FORMATS:
            errors.append(f"Tree dump format must be one of {', '.join(TREE_DUMP_FORMATS)}")
        for text in ([s.exterior_point] if s.exterior_point else []) + list(s.interior_points):
            try:
                parse_point(text)
            except InputError as e:
                errors.append(f"Bad point '{text}': {e}")
        if errors:
            raise PipelineError(f"Invalid settings: {'; '.join(errors)}")

    def _output_dir(self) -> Path:
        out_dir = Path(self.settings.output_dir) if self.settings.output_dir else Path("output") / "levels"
        out_dir.mkdir(parents=True, exist_ok=True)
        return out_dir

    # -- stages --

    def _initialize_components(self):
        self._begin_stage(CompileStage.INITIALIZE, "Initializing components...")

        if self.settings.verbose:
            logging.getLogger("levelcompiler").setLevel(logging.DEBUG)

        self.kind = source_kind(self.settings.input_path)
        if self.kind == SourceKind.GRAPH:
            self.dimension = Dimension2D(self.settings.facet_size)
        else:
            self.dimension = QuakeDimension(self.settings.facet_size)
        self.strategy = get_strategy(self.settings.strategy,
                                     imbalance_weight=self.settings.imbalance_weight,
                                     split_weight=self.settings.split_weight)
        logger.debug("Source %s, %dD, strategy %s",
                     self.kind.value, self.dimension.axes, self.strategy.name)

        self._end_stage("Initialization complete")

    def _load_input(self) -> List[Surface]:
        self._begin_stage(CompileStage.LOAD_INPUT, "Loading input...")

        path = Path(self.settings.input_path)
        if not path.is_file():
            raise InputError(f"Input file not found: {path}")

        if self.kind == SourceKind.GRAPH:
            self.surfaces = surfaces_from_graph(load_graph(path))
        else:
            entities = load_map(path)
            self._update_progress(0.3, "Building brush geometry...")
            brushes = world_brushes(entities, self.dimension)
            self._update_progress(0.6, "Clipping brushes...")
            self.surfaces = visible_surfaces(construct_solid_geometry(brushes))
            self.default_interior_points = entity_origins(entities)
            logger.info("CSG: %d brushes -> %d surfaces, %d interior points",
                        len(brushes), len(self.surfaces), len(self.default_interior_points))

        self._end_stage(f"Loaded {len(self.surfaces)} surfaces")
        return self.surfaces

    def _validate_input(self, result: CompileResult):
        self._begin_stage(CompileStage.VALIDATE_INPUT, "Validating input...")
        with ValidationGateContext() as gate:
            gate.add(validate_input(self.surfaces, self.settings.surface_limit))
            gate.add(validate_export(self.surfaces))
        validation = gate.result
        for issue in validation.warnings:
            result.add_warning(issue.message, self.current_stage)
        self._end_stage(f"Input valid ({len(validation.warnings)} warnings)")

    def _build_tree(self) -> BspNode:
        self._begin_stage(CompileStage.BUILD_TREE, "Building tree...")
        builder = BspBuilder(
            self.dimension,
            self.strategy,
            cancel_check=lambda: self.is_cancelled,
            time_limit=self.settings.time_limit,
            max_depth=self.settings.max_depth,
        )
        self.tree = builder.build(self.surfaces)
        self._end_stage(f"Tree: {node_count(self.tree)} nodes")
        return self.tree

    def _resolve_points(self):
        exterior: Optional[Point] = None
        if self.settings.exterior_point:
            exterior = parse_point(self.settings.exterior_point)
        elif self.kind == SourceKind.QUAKE_MAP:
            exterior = default_exterior_point(self.tree, self.settings.portal_padding)

        if self.settings.interior_points:
            interior = [parse_point(p) for p in self.settings.interior_points]
        else:
            interior = list(self.default_interior_points)
        return exterior, interior

    def _leak_check(self, result: CompileResult):
        self._begin_stage(CompileStage.LEAK_CHECK, "Checking for leaks...")

        if not self.settings.leak_check:
            logger.info("Leak check disabled")
            self._end_stage("Leak check skipped")
            return

        exterior, interior = self._resolve_points()
        for point in ([exterior] if exterior is not None else []) + interior:
            if len(point) != self.dimension.axes:
                raise InputError(f"Point {point} does not have {self.dimension.axes} coordinates")

        validation = enforce_gate(validate_partition(
            self.tree, interior, self.dimension, self.settings.portal_padding))
        for issue in validation.warnings:
            result.add_warning(issue.message, self.current_stage)

        if exterior is None:
            logger.info("No exterior point; leak check skipped")
            result.add_warning("No exterior point given; leak check skipped", self.current_stage)
        else:
            flood = find_leaks(self.tree, self.dimension, exterior, interior,
                               self.settings.portal_padding)
            result.metrics["void_leaves"] = flood.visited_count
        self._update_progress(0.7, "No leaks found")

        if self.settings.cull_outside and interior:
            culled = cull_outside(self.tree, self.dimension, interior,
                                  self.settings.portal_padding)
            if culled is None:
                raise PipelineError("Outside culling removed every leaf")
            self.tree = culled

        self._end_stage("Leak check complete")

    def _write_output(self) -> str:
        self._begin_stage(CompileStage.WRITE_OUTPUT, "Writing level data...")

        out_dir = self._output_dir()
        level_path = out_dir / f"{self.settings.level_name}{LEVEL_SUFFIX}"
        write_level(self.tree, level_path)
        if not level_path.exists():
            raise PipelineError("Level file was not created")

        size = level_path.stat().st_size
        logger.info("Level written: %s (%d bytes)", level_path, size)

        self._end_stage(f"Level written ({size} bytes)")
        return str(level_path)

    def _write_obj_file(self, result: CompileResult):
        """Write OBJ mesh of the leaf surfaces alongside the level file."""
        obj_path = str(self._output_dir() / f"{self.settings.level_name}.obj")
        writer = ObjWriter()
        writer.add_tree(self.tree)
        writer.write(obj_path)
        result.output_files.append(obj_path)
        logger.info("OBJ written: %s (%d verts, %d faces)",
                    obj_path, writer.vertex_count, writer.face_count)

    def _write_tree_dump(self, result: CompileResult):
        """Write debug tree dump (DOT or JSON format)."""
        from .debug.tree_export import export_tree_dot, export_tree_json

        out_dir = self._output_dir()
        try:
            if self.settings.tree_dump_format == "json":
                content = export_tree_json(self.tree, {'level': self.settings.level_name,
                                                       'strategy': self.strategy.name})
                dump_path = str(out_dir / f"{self.settings.level_name}_tree.json")
            else:
                content = export_tree_dot(self.tree)
                dump_path = str(out_dir / f"{self.settings.level_name}_tree.dot")

            with open(dump_path, 'w', encoding='utf-8') as f:
                f.write(content)

            result.output_files.append(dump_path)
            logger.info("Debug tree written: %s", dump_path)
        except OSError as e:
            result.add_warning(f"Failed to write debug tree: {e}")

    def _record_metrics(self, result: CompileResult):
        leaves = list(iter_leaves(self.tree))
        result.metrics.update({
            "input_surfaces": len(self.surfaces),
            "node_count": node_count(self.tree),
            "leaf_count": len(leaves),
            "leaf_surfaces": sum(leaf.surface_count for leaf in leaves),
            "tree_depth": tree_depth(self.tree),
        })

    # -- main entry --

    def run(self) -> CompileResult:
        if self.is_running:
            raise PipelineError("Pipeline is already running")
        self.is_running = True
        self.is_cancelled = False
        self.progress_tracker = ProgressTracker()
        result = CompileResult(success=False)
        start_time = time.time()

        try:
            logger.info("Compiling %s -> %s", self.settings.input_path, self.settings.level_name)

            stages = [
                (self._initialize_components, "Initialize"),
                (self._load_input, "Load input"),
                (lambda: self._validate_input(result), "Validate input"),
                (self._build_tree, "Build tree"),
                (lambda: self._leak_check(result), "Leak check"),
                (self._write_output, "Write output"),
            ]
            for stage_fn, desc in stages:
                try:
                    logger.info("Stage: %s", desc)
                    stage_result = stage_fn()
                    result.stages_completed.append(self.current_stage)
                    if self.current_stage == CompileStage.WRITE_OUTPUT:
                        result.primary_output = stage_result
                        result.output_files.append(stage_result)
                except CompileCancelledException:
                    result.add_error("Pipeline cancelled by user")
                    return result
                except (PipelineError, CompilerError, ValidationError) as e:
                    if self.is_cancelled:
                        result.add_error("Pipeline cancelled by user")
                    else:
                        result.add_error(str(e), self.current_stage)
                    return result

            self._record_metrics(result)
            if self.settings.export_obj:
                self._write_obj_file(result)
            if self.settings.enable_tree_dump:
                self._write_tree_dump(result)

            self.current_stage = CompileStage.COMPLETE
            result.stages_completed.append(CompileStage.COMPLETE)
            result.success = True
            result.metrics["total_time"] = time.time() - start_time
            logger.info("Pipeline complete in %.2fs", result.metrics["total_time"])
        except Exception as e:
            logger.exception("Unexpected pipeline error")
            result.add_error(f"Unexpected error: {e}")
        finally:
            self.is_running = False
        return result


def compile_level(input_path: str, **overrides) -> CompileResult:
    """Run the pipeline once with default settings plus overrides."""
    settings = CompilerSettings(input_path=input_path, **overrides)
    return CompilePipeline(settings).run()
