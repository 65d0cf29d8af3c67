# framecraft/config.py
"""
Analysis configuration and defaults.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class AnalysisConfig:
    """Numerical tolerances and design-check settings for one analysis call."""

    # Physical constants
    gravity: float = 9.80665  # m/s², used for self-weight

    # Geometry
    length_tolerance: float = 1e-9  # m, members shorter than this are degenerate
    near_vertical_cosine: float = 0.999  # |x·Z| above this switches the 3D reference axis

    # Solver
    pivot_tolerance: float = 1e-11  # relative to the largest diagonal of K_uu
    residual_tolerance: float = 1e-9  # relative to the largest load magnitude
    zero_stiffness_tolerance: float = 1e-10  # absolute, diagonal stiffness scan

    # Loads
    # Legacy contract: nodal force components (not moments) enter the load
    # vector with inverted sign relative to raw input.
    invert_nodal_forces: bool = True

    # Design checks
    n_check_points: int = 21
    ratio_limit: float = 1.0
    buckling_risk_below: float = 1.0
    buckling_caution_below: float = 2.0

    # Diagnostics
    null_space_max_dof: int = 1500  # skip the SVD mode scan above this size


# Shared default instance (immutable)
DEFAULT_CONFIG = AnalysisConfig()
