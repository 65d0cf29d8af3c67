# framecraft - Linear static analysis and member checks for 2D/3D frames
"""
FRAMECRAFT: frame analysis and member design checks
===================================================

This package provides:
- 2D plane-frame and 3D space-frame linear static analysis
- Member end releases (rigid / pinned ends)
- Uniform member loads, self-weight and prescribed support displacements
- Instability diagnostics when the stiffness system is singular
- Combined stress check and Euler buckling per member

ARCHITECTURE:
-------------
    kernel/         DOF management, assembly, solve, diagnostics, buckling
    model.py        Node, Member, loads, StructuralModel
    materials.py    Material catalog, strength models, allowable stresses
    elements.py     Member geometry, local stiffness, transforms
    loads.py        Equivalent nodal loads and fixed-end forces
    post.py         Member-force recovery and result extraction
    diagrams.py     N/V/M along members and deflected shape
    checks/         Section capacity check
    analysis.py     Entry points: analyze, check_design, run
"""

from .config import AnalysisConfig, DEFAULT_CONFIG
from .errors import (
    FramecraftError,
    GeometryError,
    MaterialDataError,
    MissingPropertyError,
    SingularSystemError,
)
from .materials import (
    LoadDuration,
    Material,
    MATERIAL_PROPERTIES,
    SteelLike,
    WoodLike,
    WoodSpecies,
    WOOD_SPECIES,
)
from .model import (
    Connectivity,
    Member,
    MemberLoad,
    NodalLoad,
    Node,
    StructuralModel,
    Support,
)
from .analysis import (
    AnalysisResult,
    DesignReport,
    analyze,
    analyze_model,
    check_design,
    run,
)

__version__ = "0.1.0"

__all__ = [
    'AnalysisConfig', 'DEFAULT_CONFIG',
    'FramecraftError', 'GeometryError', 'MaterialDataError',
    'MissingPropertyError', 'SingularSystemError',
    'LoadDuration', 'Material', 'MATERIAL_PROPERTIES', 'SteelLike', 'WoodLike',
    'WoodSpecies', 'WOOD_SPECIES',
    'Connectivity', 'Member', 'MemberLoad', 'NodalLoad', 'Node',
    'StructuralModel', 'Support',
    'AnalysisResult', 'DesignReport', 'analyze', 'analyze_model',
    'check_design', 'run',
]
