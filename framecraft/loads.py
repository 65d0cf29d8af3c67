# framecraft/loads.py
"""
LOAD LINEARIZATION: equivalent nodal loads and fixed-end forces
===============================================================

Every load is converted into entries of the global load vector F:

- Nodal loads go straight into F (force components with inverted sign,
  see AnalysisConfig.invert_nodal_forces).
- Uniform member loads and self-weight are projected onto the member's local
  axes. The axial part becomes wx·L/2 at each end; each transverse part
  produces a fixed-end force set that depends on the end connectivity.

The fixed-end forces are kept per member (MemberLoadRecord) because the
stiffness solution only gives the homogeneous part of the member response:
force recovery adds them back, and the section checker needs the local
distributed load for the parabolic moment term.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict

import numpy as np

from .config import AnalysisConfig, DEFAULT_CONFIG
from .elements import MemberMatrices
from .kernel.assemble import add_nodal_load, assemble_global_F
from .kernel.dof import DOFManager
from .model import Connectivity, Member, NodalLoad, StructuralModel

logger = logging.getLogger(__name__)

RIGID = Connectivity.RIGID
PINNED = Connectivity.PINNED


def equiv_nodal_load_udl(
    L: float,
    w: float,
    end_i: Connectivity = RIGID,
    end_j: Connectivity = RIGID,
) -> np.ndarray:
    """
    Equivalent nodal loads for a transverse UDL in one bending plane.

    Parameters:
    -----------
    L : float
        Member length (m)
    w : float
        Load per unit length in the local +y direction (N/m)
    end_i, end_j : Connectivity
        End conditions

    Returns:
    --------
    np.ndarray
        Shape (4,) [F_i, M_i, F_j, M_j] in the x-y plane convention:

        rigid-rigid     [ wL/2,  wL²/12,  wL/2, −wL²/12 ]
        pinned-rigid    [3wL/8,  0,      5wL/8, −wL²/8  ]
        rigid-pinned    [5wL/8,  wL²/8,  3wL/8,  0      ]
        pinned-pinned   [ wL/2,  0,       wL/2,  0      ]

    The fixed-end forces (end reactions of the restrained member) are the
    negative of this vector.

    >>> equiv_nodal_load_udl(4.0, -1000.0)
    array([-2000.        , -1333.33333333, -2000.        ,  1333.33333333])
    """
    wL = w * L
    wL2 = wL * L

    if end_i is RIGID and end_j is RIGID:
        return np.array([wL / 2.0, wL2 / 12.0, wL / 2.0, -wL2 / 12.0], dtype=float)
    if end_i is PINNED and end_j is RIGID:
        return np.array([3.0 * wL / 8.0, 0.0, 5.0 * wL / 8.0, -wL2 / 8.0], dtype=float)
    if end_i is RIGID and end_j is PINNED:
        return np.array([5.0 * wL / 8.0, wL2 / 8.0, 3.0 * wL / 8.0, 0.0], dtype=float)
    return np.array([wL / 2.0, 0.0, wL / 2.0, 0.0], dtype=float)


_XZ_FLIP = np.array([1.0, -1.0, 1.0, -1.0])


def local_equiv_nodal_load(
    w_local: np.ndarray,
    L: float,
    end_i: Connectivity,
    end_j: Connectivity,
    dimension: int,
) -> np.ndarray:
    """
    Equivalent nodal load vector in local coordinates for a uniform load
    with local components w_local = [wx, wy, wz].

    wy and wz are treated independently (3D); wz is ignored in 2D.
    """
    wx, wy, wz = (float(v) for v in w_local)
    axial = wx * L / 2.0

    if dimension == 2:
        f = np.zeros(6, dtype=float)
        f[[0, 3]] = axial
        f[[1, 2, 4, 5]] = equiv_nodal_load_udl(L, wy, end_i, end_j)
        return f

    f = np.zeros(12, dtype=float)
    f[[0, 6]] = axial
    f[[1, 5, 7, 11]] = equiv_nodal_load_udl(L, wy, end_i, end_j)
    f[[2, 4, 8, 10]] = _XZ_FLIP * equiv_nodal_load_udl(L, wz, end_i, end_j)
    return f


@dataclass(frozen=True)
class MemberLoadRecord:
    """
    Linearized distributed load of one member.

    w_global : total uniform load in global axes (member loads + self-weight)
    w_local  : the same load projected onto the local axes [wx, wy, wz]
    fef      : local fixed-end forces (negated equivalent nodal loads),
               re-added to k·d during force recovery
    """
    member_id: int
    w_global: np.ndarray
    w_local: np.ndarray
    fef: np.ndarray


@dataclass
class LinearizedLoads:
    """Global load vector plus the per-member records that produced it."""
    F: np.ndarray
    records: Dict[int, MemberLoadRecord] = field(default_factory=dict)

    def fef(self, member_id: int, size: int) -> np.ndarray:
        record = self.records.get(member_id)
        if record is None:
            return np.zeros(size, dtype=float)
        return record.fef


def member_distributed_load(
    model: StructuralModel,
    member: Member,
    config: AnalysisConfig = DEFAULT_CONFIG,
) -> np.ndarray:
    """
    Total uniform load on a member in global axes (N/m), shape (3,).

    Self-weight acts along the true global vertical (−y in 2D, −z in 3D)
    whatever the member orientation.
    """
    w = np.zeros(3, dtype=float)
    for load in model.member_loads:
        if load.member == member.id:
            w += (load.wx, load.wy, load.wz)

    if model.self_weight:
        w[model.vertical_axis] -= member.unit_weight(config.gravity)

    if model.dimension == 2:
        if w[2] != 0.0:
            logger.debug("Member %s: wz ignored in 2D analysis", member.id)
        w[2] = 0.0
    return w


def nodal_load_vector(
    load: NodalLoad,
    dimension: int,
    invert_forces: bool = True,
) -> np.ndarray:
    """
    Node load components in DOF order.

    Force components are stored with inverted sign relative to the raw input
    when invert_forces is set; moments are never inverted.
    """
    sign = -1.0 if invert_forces else 1.0
    if dimension == 2:
        return np.array([sign * load.px, sign * load.py, load.mz], dtype=float)
    return np.array([
        sign * load.px, sign * load.py, sign * load.pz,
        load.mx, load.my, load.mz,
    ], dtype=float)


def assemble_element_loads_global(
    model: StructuralModel,
    matrices: Dict[int, MemberMatrices],
    dof: DOFManager,
    config: AnalysisConfig = DEFAULT_CONFIG,
) -> LinearizedLoads:
    """
    Build the global load vector F from nodal loads, member loads and
    self-weight.

    Parameters:
    -----------
    model : StructuralModel
        Model snapshot
    matrices : Dict[int, MemberMatrices]
        Per-member geometry, local stiffness and transform, keyed by member id
    dof : DOFManager
        DOF indexing for the model

    Returns:
    --------
    LinearizedLoads
        F (ndof,) and MemberLoadRecord per loaded member
    """
    ndof = dof.ndof(len(model.nodes))
    contributions = []
    records: Dict[int, MemberLoadRecord] = {}

    for member in model.members:
        w_global = member_distributed_load(model, member, config)
        if not np.any(w_global):
            continue

        mm = matrices[member.id]
        w_local = mm.geometry.axes @ w_global
        f_eq_local = local_equiv_nodal_load(
            w_local, mm.geometry.L, member.end_i, member.end_j, model.dimension
        )

        # Equivalent nodal loads rotate back with T^T
        contributions.append((dof.member_dof_map(member), mm.T.T @ f_eq_local))
        records[member.id] = MemberLoadRecord(
            member_id=member.id,
            w_global=w_global,
            w_local=w_local,
            fef=-f_eq_local,
        )

    F = assemble_global_F(ndof, contributions)

    for load in model.nodal_loads:
        vec = nodal_load_vector(load, model.dimension, config.invert_nodal_forces)
        add_nodal_load(F, model.node_index(load.node), vec, dof.dof_per_node)

    logger.debug(
        "Linearized %d nodal loads and %d loaded members",
        len(model.nodal_loads), len(records),
    )
    return LinearizedLoads(F=F, records=records)
