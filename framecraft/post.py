# framecraft/post.py
"""
POST-PROCESSING: member forces, nodal results, summary tables
=============================================================

MEMBER-FORCE RECOVERY:
----------------------
The solve only gives nodal displacements. Member end forces follow from

    d_local = T · d_global[member DOFs]
    f_local = k_local · d_local + FEF

where FEF are the fixed-end forces of the member's distributed load (kept by
the load linearizer). f_local are the forces the nodes exert ON the member
ends, in local axes:

    2D:  [N_i, Q_i, M_i, N_j, Q_j, M_j]
    3D:  [N_i, Qy_i, Qz_i, Mx_i, My_i, Mz_i, N_j, Qy_j, Qz_j, Mx_j, My_j, Mz_j]

INTERNAL FORCES:
----------------
MemberForces also evaluates the internal (section) forces along the member:

- N: tension positive
- Mz(x) = Mz_i·(1−ξ) + Mz_j·ξ − qy·(Lx/2 − x²/2)
- My(x) = My_i·(1−ξ) + My_j·ξ + qz·(Lx/2 − x²/2)

with the internal end moments Mz_i = −f[M_i], Mz_j = f[M_j] (same pattern
for My) and q the local distributed load. A simply supported beam under
gravity gets a positive (sagging) midspan moment of wL²/8.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

import numpy as np
import pandas as pd

from .elements import MemberMatrices
from .kernel.dof import DOFManager
from .loads import LinearizedLoads
from .model import StructuralModel

logger = logging.getLogger(__name__)

END_COMPONENTS_2D = ("N", "Q", "M")
END_COMPONENTS_3D = ("N", "Qy", "Qz", "Mx", "My", "Mz")

REACTION_LABELS_2D = ("Rx", "Ry", "Mz")
REACTION_LABELS_3D = ("Rx", "Ry", "Rz", "Mx", "My", "Mz")


@dataclass(frozen=True)
class MemberForces:
    """
    Recovered forces of one member.

    end_forces : local end forces acting on the member (6 or 12 entries)
    w_local    : local uniform load [qx, qy, qz] (N/m)
    """
    member_id: int
    dimension: int
    L: float
    end_forces: np.ndarray
    w_local: np.ndarray

    @property
    def _half(self) -> int:
        return len(self.end_forces) // 2

    def components(self) -> Dict[str, float]:
        """
        End forces by name, e.g. {'N_i': ..., 'Q_i': ..., 'M_j': ...}.

        3D names are N, Qy, Qz, Mx, My, Mz.
        """
        names = END_COMPONENTS_2D if self.dimension == 2 else END_COMPONENTS_3D
        out = {}
        for end, offset in (("i", 0), ("j", self._half)):
            for k, name in enumerate(names):
                out[f"{name}_{end}"] = float(self.end_forces[offset + k])
        return out

    def __getitem__(self, name: str) -> float:
        return self.components()[name]

    @property
    def N_i(self) -> float:
        """Internal axial force at end i (tension positive)."""
        return float(-self.end_forces[0])

    @property
    def N_j(self) -> float:
        """Internal axial force at end j (tension positive)."""
        return float(self.end_forces[self._half])

    @property
    def N(self) -> float:
        """Member-constant axial force: mean of the two ends, tension positive."""
        return 0.5 * (self.N_i + self.N_j)

    def _moment_indices(self, axis: str):
        if self.dimension == 2:
            if axis != "z":
                raise ValueError("2D members only bend about z")
            return 2, 5, 1
        if axis == "z":
            return 5, 11, 1
        if axis == "y":
            return 4, 10, 2
        raise ValueError(f"axis must be 'y' or 'z', got {axis!r}")

    def end_moments(self, axis: str = "z"):
        """Internal bending moments (M_i, M_j) about a local axis."""
        a, b, _ = self._moment_indices(axis)
        return float(-self.end_forces[a]), float(self.end_forces[b])

    def moment_at(self, x, axis: str = "z"):
        """Internal bending moment at distance x (scalar or array) from end i."""
        x = np.asarray(x, dtype=float)
        M_i, M_j = self.end_moments(axis)
        xi = x / self.L
        bubble = self.L * x / 2.0 - x * x / 2.0
        if axis == "z":
            return M_i * (1.0 - xi) + M_j * xi - self.w_local[1] * bubble
        return M_i * (1.0 - xi) + M_j * xi + self.w_local[2] * bubble

    def shear_at(self, x, axis: str = "y"):
        """Internal shear force along local y (or z) at distance x from end i."""
        x = np.asarray(x, dtype=float)
        if axis == "y":
            return self.end_forces[1] + self.w_local[1] * x
        if self.dimension == 2:
            raise ValueError("2D members only carry shear along y")
        return self.end_forces[2] + self.w_local[2] * x

    def axial_at(self, x):
        """Internal axial force at distance x from end i (tension positive)."""
        x = np.asarray(x, dtype=float)
        return self.N_i - self.w_local[0] * x


def member_end_forces_local(
    member_matrices: MemberMatrices,
    d_global: np.ndarray,
    dof_map: List[int],
    fef: Optional[np.ndarray] = None,
) -> np.ndarray:
    """
    Element end forces in LOCAL coordinates from global displacements.

    Parameters:
    -----------
    member_matrices : MemberMatrices
        Local stiffness and transform of the member
    d_global : np.ndarray
        Global displacement vector from solve_linear
    dof_map : List[int]
        Global DOF indices of the member
    fef : np.ndarray, optional
        Local fixed-end forces of the member's distributed load

    Returns:
    --------
    np.ndarray
        f_local = k_local · T · d + FEF
    """
    d_local = member_matrices.T @ d_global[np.asarray(dof_map, dtype=int)]
    f_local = member_matrices.k_local @ d_local
    if fef is not None:
        f_local = f_local + fef
    return f_local


def recover_member_forces(
    model: StructuralModel,
    matrices: Dict[int, MemberMatrices],
    d_global: np.ndarray,
    loads: LinearizedLoads,
    dof: DOFManager = None,
) -> Dict[int, MemberForces]:
    """Member forces for every member, keyed by member id."""
    dof = dof or DOFManager.for_model(model)
    size = 2 * dof.dof_per_node
    result = {}
    for member in model.members:
        mm = matrices[member.id]
        record = loads.records.get(member.id)
        f_local = member_end_forces_local(
            mm, d_global, dof.member_dof_map(member), loads.fef(member.id, size)
        )
        w_local = record.w_local if record is not None else np.zeros(3, dtype=float)
        result[member.id] = MemberForces(
            member_id=member.id,
            dimension=model.dimension,
            L=mm.geometry.L,
            end_forces=f_local,
            w_local=w_local,
        )
    return result


def nodal_displacements(
    model: StructuralModel,
    d_global: np.ndarray,
) -> Dict[int, Dict[str, float]]:
    """
    Extract nodal displacements from global displacement vector.

    Returns:
    --------
    Dict[int, Dict[str, float]]
        Mapping of node_id to {'ux', 'uy', 'rz', 'magnitude'} in 2D or
        {'ux', 'uy', 'uz', 'rx', 'ry', 'rz', 'magnitude'} in 3D.
        magnitude is the translation norm.
    """
    dof = DOFManager.for_model(model)
    n_trans = 2 if model.dimension == 2 else 3
    result = {}
    for pos, node in enumerate(model.nodes):
        values = d_global[dof.node_dofs(pos)]
        entry = {label: float(v) for label, v in zip(dof.labels, values)}
        entry['magnitude'] = float(np.linalg.norm(values[:n_trans]))
        result[node.id] = entry
    return result


def support_reactions(
    model: StructuralModel,
    R: np.ndarray,
    constraints: Iterable[int],
) -> Dict[int, Dict[str, float]]:
    """
    Extract reaction forces at constrained nodes.

    Returns:
    --------
    Dict[int, Dict[str, float]]
        Mapping of node_id to {'Rx', 'Ry', 'Mz'} (2D) or
        {'Rx', 'Ry', 'Rz', 'Mx', 'My', 'Mz'} (3D). Unconstrained components
        are 0.0.
    """
    dof = DOFManager.for_model(model)
    labels = REACTION_LABELS_2D if model.dimension == 2 else REACTION_LABELS_3D
    constrained = set(int(c) for c in constraints)

    result = {}
    for pos, node in enumerate(model.nodes):
        node_dofs = dof.node_dofs(pos)
        if not constrained.intersection(node_dofs):
            continue
        result[node.id] = {
            label: float(R[d]) if d in constrained else 0.0
            for label, d in zip(labels, node_dofs)
        }
    return result


def summary_frame(section_checks: Dict, buckling: Dict) -> pd.DataFrame:
    """
    One row per member with the governing check values.

    Parameters:
    -----------
    section_checks : Dict[int, SectionCheckResult]
    buckling : Dict[int, BucklingResult]

    Returns:
    --------
    pd.DataFrame
        Indexed by member_id, columns: N, max_ratio, location, section_status,
        slenderness, P_cr, safety_factor, buckling_status
    """
    rows = []
    for member_id in sorted(set(section_checks) | set(buckling)):
        sc = section_checks.get(member_id)
        bk = buckling.get(member_id)
        rows.append({
            'member_id': member_id,
            'N': sc.N if sc is not None else (bk.N if bk is not None else np.nan),
            'max_ratio': sc.max_ratio if sc is not None else np.nan,
            'location': sc.location if sc is not None else np.nan,
            'section_status': sc.status.value if sc is not None else None,
            'slenderness': bk.slenderness if bk is not None else np.nan,
            'P_cr': bk.P_cr if bk is not None else np.nan,
            'safety_factor': bk.safety_factor if bk is not None else np.nan,
            'buckling_status': bk.status.value if bk is not None else None,
        })

    columns = ['member_id', 'N', 'max_ratio', 'location', 'section_status',
               'slenderness', 'P_cr', 'safety_factor', 'buckling_status']
    df = pd.DataFrame(rows, columns=columns)
    return df.set_index('member_id')
