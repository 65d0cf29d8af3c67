# framecraft/kernel - Dimension-agnostic structural analysis core
"""
KERNEL: THE DIMENSION-AGNOSTIC FOUNDATION
==========================================

Assembly, solving and the member-level stability checks do not care whether
the frame is 2D or 3D. They only need:
- A way to map (node position, local_dof) → global_dof_index
- Element stiffness matrices and load vectors (any size)
- The constrained DOFs and their prescribed values

The element formulations (2D / 3D frame members) live in framecraft.elements.
"""

from .dof import DOFManager
from .assemble import assemble_global_K, assemble_global_F, add_nodal_load
from .solve import constrained_dofs, solve_linear
from .diagnostics import InstabilityReport, diagnose_instability
from .buckling import (
    BucklingResult,
    BucklingStatus,
    analyze_buckling,
    check_member_buckling,
    effective_length_factor,
    euler_buckling_load,
)

__all__ = [
    'DOFManager',
    'assemble_global_K',
    'assemble_global_F',
    'add_nodal_load',
    'constrained_dofs',
    'solve_linear',
    'InstabilityReport',
    'diagnose_instability',
    'BucklingResult',
    'BucklingStatus',
    'analyze_buckling',
    'check_member_buckling',
    'effective_length_factor',
    'euler_buckling_load',
]
