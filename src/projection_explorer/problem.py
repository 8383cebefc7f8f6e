"""
Loop nest description and exploration options.

A problem file is YAML:

    polyhedron:
      dimensions: 2
      parameters: 1
      parameter_names: [N]
      parameter_instantiations: [16]
      domain: [[1, 1, 0, 0, 0], ...]     # or domain_file: box.pip
      context: [[1, 1, 0]]
      dependencies: [[1, 0], [0, 1]]      # or dependencies_file
      vertices: [[0, 0], [0, 16], ...]    # or vertices_file

Matrix files use the PIP text layout: a ``rows cols`` header followed by the
rows, ``#`` starting a comment. A domain file holds the domain matrix and
then, optionally, the context matrix. File paths are relative to the YAML
file.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import numpy as np
import yaml

from projection_explorer.errors import InputError
from projection_explorer.model.schedule import DEFAULT_UTILIZATION_WEIGHT


# =========================================
# Matrix files
# =========================================

def parse_matrices(text: str, source: str = "<string>") -> list[np.ndarray]:
    """
    Parse every matrix in a PIP-format text.

    Args:
        text: File contents
        source: Name used in error messages

    Returns:
        List of int64 matrices in file order
    """
    tokens = []
    for line in text.splitlines():
        line = line.split("#", 1)[0]
        tokens.extend(line.split())

    try:
        values = [int(t) for t in tokens]
    except ValueError as e:
        raise InputError(f"{source}: non-integer entry ({e})") from e

    matrices = []
    pos = 0
    while pos < len(values):
        if pos + 2 > len(values):
            raise InputError(f"{source}: truncated matrix header")
        rows, cols = values[pos], values[pos + 1]
        pos += 2
        if rows < 0 or cols < 0:
            raise InputError(f"{source}: negative matrix size {rows} x {cols}")
        if pos + rows * cols > len(values):
            raise InputError(
                f"{source}: matrix declares {rows} x {cols} entries, "
                f"only {len(values) - pos} remain"
            )
        matrix = np.array(values[pos:pos + rows * cols], dtype=np.int64).reshape(rows, cols)
        matrices.append(matrix)
        pos += rows * cols

    return matrices


def read_matrices(path: str | Path) -> list[np.ndarray]:
    """Read every matrix from a PIP-format file."""
    path = Path(path)
    if not path.is_file():
        raise InputError(f"Matrix file not found: {path}")
    return parse_matrices(path.read_text(encoding="utf-8"), source=str(path))


def format_matrix(matrix: np.ndarray) -> str:
    """PIP-format text for one matrix."""
    matrix = np.asarray(matrix, dtype=np.int64)
    lines = [f"{matrix.shape[0]} {matrix.shape[1]}"]
    for row in matrix:
        lines.append(" ".join(f"{int(v):4d}" for v in row))
    return "\n".join(lines)


def _as_matrix(value, name: str, cols: int) -> np.ndarray:
    if value is None:
        return np.zeros((0, cols), dtype=np.int64)
    try:
        matrix = np.array(value, dtype=np.int64)
    except (TypeError, ValueError) as e:
        raise InputError(f"{name} is not an integer matrix: {e}") from e
    if matrix.size == 0:
        return np.zeros((0, cols), dtype=np.int64)
    if matrix.ndim != 2:
        raise InputError(f"{name} must be a list of rows")
    return matrix


# =========================================
# Loop nest
# =========================================

@dataclass
class LoopNest:
    """
    Polyhedral loop nest to explore.

    Attributes:
        dimensions: Number of loop dimensions D
        parameters: Number of symbolic parameters P
        domain: Domain matrix, columns flag | x (D) | params (P) | const
        context: Parameter context, columns flag | params (P) | const
        dependencies: Uniform dependency vectors, D columns
        vertices: Extreme points of the domain, D columns
        parameter_names: One name per parameter
        parameter_instantiations: One value per parameter
        path: Where the problem was loaded from
    """
    dimensions: int
    parameters: int
    domain: np.ndarray
    context: np.ndarray = None
    dependencies: np.ndarray = None
    vertices: np.ndarray = None
    parameter_names: list[str] = field(default_factory=list)
    parameter_instantiations: list[int] = field(default_factory=list)
    path: str = "problem"

    def __post_init__(self):
        if not isinstance(self.dimensions, int) or self.dimensions < 1:
            raise InputError(f"dimensions must be a positive integer, got {self.dimensions}")
        if not isinstance(self.parameters, int) or self.parameters < 0:
            raise InputError(f"parameters must be a non-negative integer, got {self.parameters}")

        D, P = self.dimensions, self.parameters
        self.domain = _as_matrix(self.domain, "domain", D + P + 2)
        self.context = _as_matrix(self.context, "context", P + 2)
        self.dependencies = _as_matrix(self.dependencies, "dependencies", D)
        self.vertices = _as_matrix(self.vertices, "vertices", D)

        if not self.parameter_names:
            self.parameter_names = [f"p{i}" for i in range(P)]
        self.parameter_names = [str(n) for n in self.parameter_names]
        self.parameter_instantiations = [int(v) for v in self.parameter_instantiations]

        self.validate()

    def validate(self):
        """
        Check matrix shapes against the declared dimensions.

        Raises:
            InputError: On the first mismatch found
        """
        D, P = self.dimensions, self.parameters

        checks = [
            ("domain", self.domain, D + P + 2),
            ("context", self.context, P + 2),
            ("dependencies", self.dependencies, D),
            ("vertices", self.vertices, D),
        ]
        for name, matrix, cols in checks:
            if matrix.shape[1] != cols:
                raise InputError(
                    f"{name} has {matrix.shape[1]} columns, expected {cols}"
                )

        if self.domain.shape[0] == 0:
            raise InputError("domain has no constraints")
        for name, matrix in (("domain", self.domain), ("context", self.context)):
            flags = set(int(f) for f in matrix[:, 0])
            if not flags <= {0, 1}:
                raise InputError(f"{name} flags must be 0 or 1, got {sorted(flags)}")
        if self.dependencies.shape[0] == 0:
            raise InputError("at least one dependency is required")

        if len(self.parameter_names) != P:
            raise InputError(
                f"{len(self.parameter_names)} parameter names given, expected {P}"
            )
        if len(set(self.parameter_names)) != P:
            raise InputError(f"parameter names must be unique: {self.parameter_names}")
        if len(self.parameter_instantiations) != P:
            raise InputError(
                f"{len(self.parameter_instantiations)} parameter instantiations "
                f"given, expected {P}"
            )

    @classmethod
    def from_dict(cls, config: dict, base_dir: str | Path = ".", path: str = "problem") -> "LoopNest":
        """
        Create a LoopNest from a dictionary.

        Args:
            config: Parsed YAML, optionally nested under ``polyhedron``
            base_dir: Directory that relative matrix file paths start from
            path: Identifier for this problem

        Returns:
            LoopNest instance
        """
        poly = config.get("polyhedron", config)
        if not isinstance(poly, dict):
            raise InputError("polyhedron section must be a mapping")
        base_dir = Path(base_dir)

        for key in ("dimensions", "parameters"):
            if key not in poly:
                raise InputError(f"missing required key: {key}")

        domain = poly.get("domain")
        context = poly.get("context")
        if "domain_file" in poly:
            matrices = read_matrices(base_dir / poly["domain_file"])
            if not matrices:
                raise InputError(f"{poly['domain_file']}: no domain matrix")
            domain = matrices[0]
            if len(matrices) > 1 and context is None:
                context = matrices[1]
        if domain is None:
            raise InputError("missing required key: domain (or domain_file)")

        def matrix_or_file(key):
            if f"{key}_file" in poly:
                matrices = read_matrices(base_dir / poly[f"{key}_file"])
                if not matrices:
                    raise InputError(f"{poly[f'{key}_file']}: no {key} matrix")
                return matrices[0]
            return poly.get(key)

        return cls(
            dimensions=poly["dimensions"],
            parameters=poly["parameters"],
            domain=domain,
            context=context,
            dependencies=matrix_or_file("dependencies"),
            vertices=matrix_or_file("vertices"),
            parameter_names=list(poly.get("parameter_names", [])),
            parameter_instantiations=list(poly.get("parameter_instantiations", [])),
            path=path,
        )

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> "LoopNest":
        """
        Create a LoopNest from a YAML file.

        Args:
            yaml_path: Path to YAML file

        Returns:
            LoopNest instance
        """
        path = Path(yaml_path)
        if not path.is_file():
            raise InputError(f"Problem file not found: {path}")
        with path.open("r", encoding="utf-8") as fh:
            try:
                config = yaml.safe_load(fh) or {}
            except yaml.YAMLError as e:
                raise InputError(f"{path}: invalid YAML ({e})") from e
        if not isinstance(config, dict):
            raise InputError(f"{path}: top level must be a mapping")
        return cls.from_dict(config, base_dir=path.parent, path=str(path))

    def to_dict(self) -> dict:
        """Convert loop nest to dictionary."""
        return {
            "polyhedron": {
                "dimensions": self.dimensions,
                "parameters": self.parameters,
                "parameter_names": list(self.parameter_names),
                "parameter_instantiations": list(self.parameter_instantiations),
                "domain": self.domain.tolist(),
                "context": self.context.tolist(),
                "dependencies": self.dependencies.tolist(),
                "vertices": self.vertices.tolist(),
            }
        }

    def summary(self) -> str:
        """Return a summary string."""
        lines = [
            f"LoopNest: {self.path}",
            f"  Dimensions: {self.dimensions}",
            f"  Parameters: {self.parameters} {self.parameter_names}",
            f"  Instantiation: {self.parameter_instantiations}",
            f"  Domain constraints: {self.domain.shape[0]}",
            f"  Context constraints: {self.context.shape[0]}",
            f"  Dependencies: {self.dependencies.shape[0]}",
            f"  Vertices: {self.vertices.shape[0]}",
        ]
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"LoopNest(dimensions={self.dimensions}, parameters={self.parameters}, "
            f"path={self.path!r})"
        )


# =========================================
# Options
# =========================================

@dataclass
class ExplorationOptions:
    """
    Exploration settings.

    Attributes:
        magnitude_bound: Bound M on candidate coordinates and norm
        pe_inefficiency: Largest utilization kept in the ranked output
        pipeline_stages: Minimum delay S on every dependency
        utilization_weight: Weight W of utilization against latency
        full_box: Visit both u and -u instead of one per pair
    """
    magnitude_bound: int = 3
    pe_inefficiency: int = 100
    pipeline_stages: int = 1
    utilization_weight: int = DEFAULT_UTILIZATION_WEIGHT
    full_box: bool = False

    def validate(self):
        """
        Raises:
            InputError: If an option is outside its accepted range
        """
        if self.magnitude_bound < 1:
            raise InputError(f"magnitude bound must be >= 1, got {self.magnitude_bound}")
        if not 1 <= self.pe_inefficiency <= 100:
            raise InputError(
                f"PE inefficiency must be between 1 and 100, got {self.pe_inefficiency}"
            )
        if not 1 <= self.pipeline_stages <= 100:
            raise InputError(
                f"pipeline stages must be between 1 and 100, got {self.pipeline_stages}"
            )
        if self.utilization_weight < 1:
            raise InputError(
                f"utilization weight must be >= 1, got {self.utilization_weight}"
            )

    @classmethod
    def from_dict(cls, config: Optional[dict]) -> "ExplorationOptions":
        config = config or {}
        options = cls(
            magnitude_bound=int(config.get("magnitude_bound", 3)),
            pe_inefficiency=int(config.get("pe_inefficiency", 100)),
            pipeline_stages=int(config.get("pipeline_stages", 1)),
            utilization_weight=int(config.get("utilization_weight", DEFAULT_UTILIZATION_WEIGHT)),
            full_box=bool(config.get("full_box", False)),
        )
        options.validate()
        return options
