"""
Configuration constants for Surface Drape.

Contains all tunable parameters for refinement, point location,
intersection and export, plus the runtime DrapeConfig dataclass.
"""

from dataclasses import dataclass


# =============================================================================
# MESH REFINEMENT
# =============================================================================

# Maximum number of subdivision rounds. Each round splits every triangle
# into four, so 8 rounds multiply the face count by 65536.
REFINE_MAX_ROUNDS = 8

# =============================================================================
# SPATIAL INDEX
# =============================================================================

# Target number of index cells along the longer side of the mesh extent.
# Cell size is derived from the mesh bbox so small and large meshes both
# get a reasonable number of triangles per cell.
INDEX_CELLS_PER_SIDE = 64

# Lower bound for the cell size (avoids zero-size cells on flat extents)
INDEX_MIN_CELL_SIZE = 1e-9

# =============================================================================
# GEOMETRIC TOLERANCES
# =============================================================================

# Triangles with (3D) area below this are treated as degenerate and skipped
DEGENERATE_AREA_EPS = 1e-12

# Triangles whose unit normal has |nz| below this are vertical in projection
# and never used for height lookup
VERTICAL_NORMAL_EPS = 1e-9

# Tolerance for inclusive point-in-triangle tests (scaled by triangle size)
POINT_IN_TRIANGLE_EPS = 1e-12

# Endpoint matching tolerance for the optional segment chaining utility
CHAIN_TOLERANCE = 1e-9

# =============================================================================
# EXPORT SETTINGS
# =============================================================================

# OBJ / CSV export precision (decimal places)
EXPORT_PRECISION = 6

# Break marker written in CSV tables
CSV_BREAK_MARKER = "NA"


# =============================================================================
# RUNTIME CONFIGURATION
# =============================================================================

@dataclass
class DrapeConfig:
    """
    Runtime configuration for the drape engine.

    This class holds all configurable parameters that can be
    adjusted per-run via CLI arguments or programmatically.
    """

    # Refinement
    max_refine_rounds: int = REFINE_MAX_ROUNDS

    # Point location
    index_cells_per_side: int = INDEX_CELLS_PER_SIDE

    # Intersection
    degenerate_area_eps: float = DEGENERATE_AREA_EPS

    # Optional chaining of intersection segments
    chain_tolerance: float = CHAIN_TOLERANCE

    # Export
    export_precision: int = EXPORT_PRECISION

    def __post_init__(self):
        """Validate configuration values."""
        if self.max_refine_rounds < 0:
            raise ValueError("max_refine_rounds must be non-negative")

        if self.index_cells_per_side < 1:
            raise ValueError("index_cells_per_side must be at least 1")

        if self.degenerate_area_eps < 0:
            raise ValueError("degenerate_area_eps must be non-negative")

        if self.chain_tolerance <= 0:
            raise ValueError("chain_tolerance must be positive")

        if self.export_precision < 1:
            raise ValueError("export_precision must be at least 1")


# Default configuration instance
DEFAULT_CONFIG = DrapeConfig()
