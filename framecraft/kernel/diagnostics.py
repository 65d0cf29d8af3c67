# framecraft/kernel/diagnostics.py
"""
INSTABILITY DIAGNOSTICS
=======================

Runs after the solver has given up on a model. It does not try to fix the
model, it only points at the likely cause:

(a) Unconstrained nodes: nodes without any constrained DOF. The message
    says whether the node also sits in a part of the structure (connected
    through members) where no node is supported, orphan nodes included.
(b) Mechanism members: members whose two end nodes are both unconstrained,
    e.g. a hinged span between two hinged joints or a detached piece.
(c) Zero-stiffness DOFs: free DOFs whose diagonal stiffness is (near) zero,
    e.g. a translation no member resists.
(d) Null-space DOFs: free DOFs taking part in a numerical zero-energy mode of
    K_uu. This is an SVD and is skipped for large systems.

The report is advisory. diagnose_instability() never raises.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List

import numpy as np
import scipy.linalg

from ..config import AnalysisConfig, DEFAULT_CONFIG
from ..model import StructuralModel
from .dof import DOFManager

logger = logging.getLogger(__name__)


@dataclass
class InstabilityReport:
    """Advisory messages plus the flagged node ids, member ids and DOFs."""
    messages: List[str] = field(default_factory=list)
    unconstrained_nodes: List[int] = field(default_factory=list)
    mechanism_members: List[int] = field(default_factory=list)
    zero_stiffness_dofs: List[int] = field(default_factory=list)
    null_space_dofs: List[int] = field(default_factory=list)

    @property
    def has_findings(self) -> bool:
        return bool(
            self.unconstrained_nodes
            or self.mechanism_members
            or self.zero_stiffness_dofs
            or self.null_space_dofs
        )

    def text(self) -> str:
        return "\n".join(self.messages)


def _node_components(model: StructuralModel) -> List[int]:
    """Connected-component label per node position (union-find over members)."""
    parent = list(range(len(model.nodes)))

    def find(a):
        while parent[a] != a:
            parent[a] = parent[parent[a]]
            a = parent[a]
        return a

    for m in model.members:
        a = find(model.node_index(m.i))
        b = find(model.node_index(m.j))
        if a != b:
            parent[b] = a

    return [find(p) for p in range(len(model.nodes))]


def _constraint_counts(model: StructuralModel, constraints: Dict[int, float], dof: DOFManager) -> List[int]:
    counts = [0] * len(model.nodes)
    for d in constraints:
        counts[d // dof.dof_per_node] += 1
    return counts


def _constraint_scan(model, constraints, dof, report):
    """Flag nodes with no constrained DOF and members with both ends unconstrained."""
    counts = _constraint_counts(model, constraints, dof)
    labels = _node_components(model)
    anchored = {labels[p] for p, c in enumerate(counts) if c > 0}

    for p, node in enumerate(model.nodes):
        if counts[p]:
            continue
        report.unconstrained_nodes.append(node.id)
        if labels[p] in anchored:
            report.messages.append(f"Node {node.id} has no constrained DOF")
        else:
            report.messages.append(
                f"Node {node.id} has no support and is not connected to any supported node"
            )

    for m in model.members:
        if counts[model.node_index(m.i)] == 0 and counts[model.node_index(m.j)] == 0:
            report.mechanism_members.append(m.id)
            report.messages.append(
                f"Member {m.id} ({m.i}-{m.j}) has both ends unconstrained: possible mechanism"
            )

    required = 3 if model.dimension == 2 else 6
    total = sum(counts)
    if total < required:
        report.messages.append(
            f"Only {total} constrained DOFs; a {model.dimension}D structure needs at least {required}"
        )


def _stiffness_scan(K, free, dof, tol, report):
    """Heuristic (c)."""
    diag = np.abs(np.diag(K))
    for d in free:
        if diag[d] < tol:
            node_id, label = dof.describe(int(d))
            report.zero_stiffness_dofs.append(int(d))
            report.messages.append(
                f"DOF {int(d)} (node {node_id}, {label}) has no stiffness: zero-energy mode"
            )


def _null_space_scan(K, free, dof, config, report):
    """Heuristic (d)."""
    if free.size == 0 or free.size > config.null_space_max_dof:
        if free.size:
            logger.debug("Null-space scan skipped for %d free DOFs", free.size)
        return

    Kuu = K[np.ix_(free, free)]
    scale = float(np.max(np.abs(Kuu))) or 1.0
    modes = scipy.linalg.null_space(Kuu / scale, rcond=config.zero_stiffness_tolerance)
    if modes.shape[1] == 0:
        return

    participation = np.max(np.abs(modes), axis=1)
    flagged = free[participation > 1e-6]
    report.null_space_dofs.extend(int(d) for d in flagged)

    described = ", ".join(
        "{}:{}".format(*dof.describe(int(d))) for d in flagged[:12]
    )
    more = "" if flagged.size <= 12 else f" (+{flagged.size - 12} more)"
    report.messages.append(
        f"{modes.shape[1]} zero-energy mode(s) involving {described}{more}"
    )


def diagnose_instability(
    model: StructuralModel,
    K: np.ndarray,
    constraints: Dict[int, float],
    dof: DOFManager = None,
    config: AnalysisConfig = DEFAULT_CONFIG,
) -> InstabilityReport:
    """
    Report likely causes of a singular stiffness system.

    Args:
        model: The model snapshot that failed to solve
        K: Assembled global stiffness matrix
        constraints: {dof: prescribed value} used for the solve
        dof: DOF manager for the model
        config: Tolerances and the null-space size bound

    Returns:
        InstabilityReport (possibly empty if no heuristic fires)
    """
    report = InstabilityReport()
    dof = dof or DOFManager.for_model(model)

    ndof = K.shape[0]
    fixed = np.array(sorted(constraints), dtype=int)
    free = np.setdiff1d(np.arange(ndof, dtype=int), fixed)

    scans = (
        ("constraint scan", lambda: _constraint_scan(model, constraints, dof, report)),
        ("stiffness scan", lambda: _stiffness_scan(K, free, dof, config.zero_stiffness_tolerance, report)),
        ("null-space scan", lambda: _null_space_scan(K, free, dof, config, report)),
    )
    for name, scan in scans:
        try:
            scan()
        except Exception as exc:  # diagnostics are best-effort
            logger.warning("Instability %s failed: %s", name, exc)
            report.messages.append(f"{name} could not run: {exc}")

    if not report.messages:
        report.messages.append(
            "Stiffness matrix is singular but no isolated node, member or DOF was found"
        )

    logger.debug(
        "Instability report: %d nodes, %d members, %d zero-stiffness DOFs, %d null-space DOFs",
        len(report.unconstrained_nodes), len(report.mechanism_members),
        len(report.zero_stiffness_dofs), len(report.null_space_dofs),
    )
    return report
