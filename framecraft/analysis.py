# framecraft/analysis.py
"""
ANALYSIS ENTRY POINTS
=====================

    analyze(...) / analyze_model(model)      → AnalysisResult
        assemble K and F, solve, recover member forces. A singular system
        does not raise: the result carries an InstabilityReport instead of
        displacements.

    check_design(result)                     → DesignReport
        section capacity check and Euler buckling per member.

    run(model)                               → (AnalysisResult, DesignReport)

The model is deep-copied on entry; K, F and the fixed-end forces are rebuilt
on every call.

USAGE:
------
    result = analyze(nodes, members, nodal_loads=[NodalLoad(2, py=10e3)])
    if result.ok:
        report = check_design(result)
        print(report.summary())
    else:
        print(result.instability.text())
"""

import copy
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Tuple

import numpy as np
import pandas as pd

from .checks.section import CheckStatus, SectionCheckResult, check_sections
from .config import AnalysisConfig, DEFAULT_CONFIG
from .diagrams import MemberDiagramData, frame_diagrams
from .elements import MemberMatrices, member_matrices
from .errors import SingularSystemError
from .kernel.assemble import assemble_global_K
from .kernel.buckling import BucklingResult, BucklingStatus, analyze_buckling
from .kernel.diagnostics import InstabilityReport, diagnose_instability
from .kernel.dof import DOFManager
from .kernel.solve import constrained_dofs, solve_linear
from .loads import MemberLoadRecord, assemble_element_loads_global
from .materials import LoadDuration
from .model import Member, MemberLoad, NodalLoad, Node, StructuralModel
from .post import (
    MemberForces,
    nodal_displacements,
    recover_member_forces,
    summary_frame,
    support_reactions,
)

logger = logging.getLogger(__name__)


@dataclass
class AnalysisResult:
    """
    Outcome of one linear analysis.

    displacements and reactions are full-length global vectors (ndof,),
    or None when the system could not be solved; instability then explains
    why.
    """
    model: StructuralModel
    duration: LoadDuration
    displacements: Optional[np.ndarray]
    reactions: Optional[np.ndarray]
    member_forces: Dict[int, MemberForces] = field(default_factory=dict)
    load_records: Dict[int, MemberLoadRecord] = field(default_factory=dict)
    instability: Optional[InstabilityReport] = None
    constraints: Dict[int, float] = field(default_factory=dict)
    matrices: Dict[int, MemberMatrices] = field(default_factory=dict, repr=False)
    K: Optional[np.ndarray] = field(default=None, repr=False)
    F: Optional[np.ndarray] = field(default=None, repr=False)

    @property
    def ok(self) -> bool:
        return self.displacements is not None

    def nodal_displacements(self) -> Dict[int, Dict[str, float]]:
        self._require_solution()
        return nodal_displacements(self.model, self.displacements)

    def support_reactions(self) -> Dict[int, Dict[str, float]]:
        self._require_solution()
        return support_reactions(self.model, self.reactions, self.constraints)

    def diagrams(self, axis: str = "z", scale: float = 50.0, n_points: int = 21) -> Dict[int, MemberDiagramData]:
        """Force diagrams and deflected shape per member id."""
        self._require_solution()
        data = frame_diagrams(
            self.model, self.matrices, self.member_forces, self.displacements,
            axis=axis, scale=scale, n_points=n_points,
        )
        return {d.member_id: d for d in data}

    def _require_solution(self):
        if not self.ok:
            raise SingularSystemError("Analysis did not produce a solution; see result.instability")


@dataclass
class DesignReport:
    """Section checks and buckling results per member id."""
    section_checks: Dict[int, SectionCheckResult] = field(default_factory=dict)
    buckling: Dict[int, BucklingResult] = field(default_factory=dict)
    duration: LoadDuration = LoadDuration.LONG

    @property
    def all_ok(self) -> bool:
        """True if every member passes both checks with complete data."""
        return (
            all(r.status is CheckStatus.OK for r in self.section_checks.values())
            and all(b.status is BucklingStatus.SAFE for b in self.buckling.values())
        )

    def summary(self) -> pd.DataFrame:
        return summary_frame(self.section_checks, self.buckling)


def analyze_model(
    model: StructuralModel,
    duration: LoadDuration = LoadDuration.LONG,
    config: Optional[AnalysisConfig] = None,
) -> AnalysisResult:
    """
    Run a linear static analysis of a model snapshot.

    Raises:
        GeometryError: Zero-length member or member with i == j.
        MissingPropertyError: Invalid or absent required input.
    """
    config = config or DEFAULT_CONFIG
    duration = LoadDuration(duration)
    model = copy.deepcopy(model)
    model.validate()

    dof = DOFManager.for_model(model)
    ndof = dof.ndof(len(model.nodes))
    logger.debug(
        "Analyzing %dD model: %d nodes, %d members, %d DOFs",
        model.dimension, len(model.nodes), len(model.members), ndof,
    )

    matrices = {m.id: member_matrices(model, m, config) for m in model.members}
    K = assemble_global_K(
        ndof, [(dof.member_dof_map(m), matrices[m.id].k_global) for m in model.members]
    )
    loads = assemble_element_loads_global(model, matrices, dof, config)
    constraints = constrained_dofs(model, dof)

    result = AnalysisResult(
        model=model,
        duration=duration,
        displacements=None,
        reactions=None,
        load_records=loads.records,
        constraints=constraints,
        matrices=matrices,
        K=K,
        F=loads.F,
    )

    try:
        d, R, _ = solve_linear(K, loads.F, constraints, dof.dof_per_node, config)
    except SingularSystemError as exc:
        logger.warning("Solve failed: %s", exc)
        report = diagnose_instability(model, K, constraints, dof, config)
        report.messages.insert(0, str(exc))
        result.instability = report
        return result

    result.displacements = d
    result.reactions = R
    result.member_forces = recover_member_forces(model, matrices, d, loads, dof)

    logger.info(
        "Analysis complete: %d DOFs (%d constrained), max |d| = %.3e",
        ndof, len(constraints), float(np.max(np.abs(d))) if d.size else 0.0,
    )
    return result


def analyze(
    nodes: Iterable[Node],
    members: Iterable[Member],
    nodal_loads: Iterable[NodalLoad] = (),
    member_loads: Iterable[MemberLoad] = (),
    duration: LoadDuration = LoadDuration.LONG,
    *,
    dimension: int = 2,
    self_weight: bool = False,
    config: Optional[AnalysisConfig] = None,
) -> AnalysisResult:
    """
    Analyze a frame given as plain record collections.

    Parameters:
    -----------
    nodes, members : iterables of Node / Member
    nodal_loads, member_loads : iterables of NodalLoad / MemberLoad
    duration : LoadDuration
        Load-duration term carried to the design check
    dimension : int
        2 (x-y plane frame) or 3 (space frame)
    self_weight : bool
        Add density × A × g along the global vertical

    Returns:
    --------
    AnalysisResult
    """
    model = StructuralModel(
        nodes=tuple(nodes),
        members=tuple(members),
        nodal_loads=tuple(nodal_loads),
        member_loads=tuple(member_loads),
        dimension=dimension,
        self_weight=self_weight,
    )
    return analyze_model(model, duration, config)


def check_design(
    result: AnalysisResult,
    duration: Optional[LoadDuration] = None,
    config: Optional[AnalysisConfig] = None,
) -> DesignReport:
    """
    Section capacity and buckling check of an analyzed model.

    duration defaults to the one the analysis was run with. A result without
    a solution gives an empty report.
    """
    config = config or DEFAULT_CONFIG
    duration = LoadDuration(duration) if duration is not None else result.duration

    if not result.ok:
        logger.warning("Design check skipped: analysis has no solution")
        return DesignReport(duration=duration)

    members = result.model.members
    sections = check_sections(members, result.member_forces, duration, config)
    buckling = analyze_buckling(
        members,
        {mid: f.N for mid, f in result.member_forces.items()},
        {mid: mm.geometry.L for mid, mm in result.matrices.items()},
        config,
    )

    n_ng = sum(1 for r in sections.values() if r.status is CheckStatus.NG)
    n_risk = sum(1 for b in buckling.values() if b.status is BucklingStatus.RISK)
    logger.info("Design check: %d members, %d NG, %d at buckling risk", len(members), n_ng, n_risk)
    return DesignReport(section_checks=sections, buckling=buckling, duration=duration)


def run(
    model: StructuralModel,
    duration: LoadDuration = LoadDuration.LONG,
    config: Optional[AnalysisConfig] = None,
) -> Tuple[AnalysisResult, DesignReport]:
    """Analyze a model and check its members in one call."""
    result = analyze_model(model, duration, config)
    return result, check_design(result, duration, config)
