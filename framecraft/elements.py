# framecraft/elements.py
"""
FRAME ELEMENTS: geometry, local stiffness, coordinate transformation
====================================================================

Local DOF order:
    2D:  [u_i, v_i, θz_i, u_j, v_j, θz_j]
    3D:  [u_i, v_i, w_i, θx_i, θy_i, θz_i, u_j, v_j, w_j, θx_j, θy_j, θz_j]

LOCAL AXES:
-----------
local x runs from node i to node j. In 3D the roll of the member is fixed
by a reference axis: global Z, or global Y when the member is near-vertical.

    z_local = unit(ref − (ref·x)·x)
    y_local = z_local × x_local

so Iz (bending in the local x-y plane) of a horizontal member resists
vertical load, and Iy resists horizontal load perpendicular to the member.

END RELEASES:
-------------
Each bending plane uses one of four closed-form 4×4 blocks selected by the
(end_i, end_j) connectivity pair. Axial (EA/L) and torsion (GJ/L) terms are
never released.
"""

from dataclasses import dataclass
from typing import Tuple

import numpy as np

from .config import AnalysisConfig, DEFAULT_CONFIG
from .errors import GeometryError
from .model import Connectivity, Member, StructuralModel

RIGID = Connectivity.RIGID
PINNED = Connectivity.PINNED


@dataclass(frozen=True)
class MemberGeometry:
    """
    Length and local axis triad of a member.

    axes rows are the local x, y, z unit vectors in global coordinates.
    For 2D members axes is still 3×3 (z_local = global Z).
    """
    L: float
    axes: np.ndarray

    @property
    def c(self) -> float:
        return float(self.axes[0, 0])

    @property
    def s(self) -> float:
        return float(self.axes[0, 1])


def local_axes_3d(x_axis: np.ndarray, near_vertical_cosine: float = 0.999) -> np.ndarray:
    """Axis triad for a unit local-x vector (rows: x, y, z)."""
    ref = np.array([0.0, 0.0, 1.0])
    if abs(float(x_axis @ ref)) > near_vertical_cosine:
        ref = np.array([0.0, 1.0, 0.0])
    z_axis = ref - (ref @ x_axis) * x_axis
    z_axis = z_axis / np.linalg.norm(z_axis)
    y_axis = np.cross(z_axis, x_axis)
    return np.vstack([x_axis, y_axis, z_axis])


def member_geometry(
    model: StructuralModel,
    member: Member,
    config: AnalysisConfig = DEFAULT_CONFIG,
) -> MemberGeometry:
    """
    Compute length and local axes of a member.

    Raises:
        GeometryError: If the member has (near) zero length.
    """
    ni = model.node(member.i)
    nj = model.node(member.j)

    if model.dimension == 2:
        delta = np.array([nj.x - ni.x, nj.y - ni.y, 0.0], dtype=float)
    else:
        delta = np.array([nj.x - ni.x, nj.y - ni.y, nj.z - ni.z], dtype=float)

    L = float(np.linalg.norm(delta))
    if L <= config.length_tolerance:
        raise GeometryError(
            f"Member {member.id} has zero length (nodes {member.i} and {member.j} "
            f"at ({ni.x}, {ni.y}, {ni.z}))",
            member_id=member.id,
        )

    x_axis = delta / L
    if model.dimension == 2:
        c, s = x_axis[0], x_axis[1]
        axes = np.array([
            [c, s, 0.0],
            [-s, c, 0.0],
            [0.0, 0.0, 1.0],
        ], dtype=float)
    else:
        axes = local_axes_3d(x_axis, config.near_vertical_cosine)
    return MemberGeometry(L=L, axes=axes)


def bending_block(EI: float, L: float, end_i: Connectivity, end_j: Connectivity) -> np.ndarray:
    """
    4×4 bending stiffness in one plane, DOF order [v_i, θ_i, v_j, θ_j].

    rigid-rigid:    EI/L³ · [12, 6L, 4L², 2L² ...]   (standard Euler-Bernoulli)
    pinned-rigid:   3EI/L³ with the rotation at i released
    rigid-pinned:   3EI/L³ with the rotation at j released
    pinned-pinned:  zero (member carries no bending)
    """
    L2 = L * L
    L3 = L2 * L

    if end_i is RIGID and end_j is RIGID:
        k = EI / L3
        return k * np.array([
            [ 12.0,   6*L, -12.0,   6*L],
            [  6*L,  4*L2,  -6*L,  2*L2],
            [-12.0,  -6*L,  12.0,  -6*L],
            [  6*L,  2*L2,  -6*L,  4*L2],
        ], dtype=float)

    if end_i is PINNED and end_j is RIGID:
        k = 3.0 * EI / L3
        return k * np.array([
            [ 1.0, 0.0, -1.0,   L],
            [ 0.0, 0.0,  0.0, 0.0],
            [-1.0, 0.0,  1.0,  -L],
            [   L, 0.0,   -L,  L2],
        ], dtype=float)

    if end_i is RIGID and end_j is PINNED:
        k = 3.0 * EI / L3
        return k * np.array([
            [ 1.0,   L, -1.0, 0.0],
            [   L,  L2,   -L, 0.0],
            [-1.0,  -L,  1.0, 0.0],
            [ 0.0, 0.0,  0.0, 0.0],
        ], dtype=float)

    return np.zeros((4, 4), dtype=float)


def local_stiffness_2d(
    E: float, A: float, Iz: float, L: float,
    end_i: Connectivity = RIGID, end_j: Connectivity = RIGID,
) -> np.ndarray:
    """6×6 local stiffness of a 2D frame member."""
    k = np.zeros((6, 6), dtype=float)
    EA_L = E * A / L
    axial = [0, 3]
    k[np.ix_(axial, axial)] = EA_L * np.array([[1.0, -1.0], [-1.0, 1.0]])

    bend = [1, 2, 4, 5]
    k[np.ix_(bend, bend)] = bending_block(E * Iz, L, end_i, end_j)
    return k


# θy is positive about +y, so a positive w produces a negative slope in x-z:
# the x-z block is the x-y block with the rotation sign flipped.
_XZ_FLIP = np.diag([1.0, -1.0, 1.0, -1.0])


def local_stiffness_3d(
    E: float, G: float, A: float, Iy: float, Iz: float, J: float, L: float,
    end_i: Connectivity = RIGID, end_j: Connectivity = RIGID,
) -> np.ndarray:
    """12×12 local stiffness of a 3D frame member."""
    k = np.zeros((12, 12), dtype=float)

    axial = [0, 6]
    k[np.ix_(axial, axial)] = (E * A / L) * np.array([[1.0, -1.0], [-1.0, 1.0]])

    torsion = [3, 9]
    k[np.ix_(torsion, torsion)] = (G * J / L) * np.array([[1.0, -1.0], [-1.0, 1.0]])

    # Bending in local x-y plane (v, θz) about the z axis
    xy = [1, 5, 7, 11]
    k[np.ix_(xy, xy)] = bending_block(E * Iz, L, end_i, end_j)

    # Bending in local x-z plane (w, θy) about the y axis
    xz = [2, 4, 8, 10]
    k[np.ix_(xz, xz)] = _XZ_FLIP @ bending_block(E * Iy, L, end_i, end_j) @ _XZ_FLIP
    return k


def transform_2d(c: float, s: float) -> np.ndarray:
    """
    6x6 transform from global DOFs to local DOFs.
    """
    T = np.array([
        [ c,  s, 0,  0, 0, 0],
        [-s,  c, 0,  0, 0, 0],
        [ 0,  0, 1,  0, 0, 0],
        [ 0,  0, 0,  c, s, 0],
        [ 0,  0, 0, -s, c, 0],
        [ 0,  0, 0,  0, 0, 1],
    ], dtype=float)
    return T


def transform_3d(axes: np.ndarray) -> np.ndarray:
    """12×12 transform: the 3×3 direction-cosine block on the diagonal four times."""
    T = np.zeros((12, 12), dtype=float)
    for b in range(4):
        T[3*b:3*b+3, 3*b:3*b+3] = axes
    return T


@dataclass(frozen=True)
class MemberMatrices:
    """Per-solve derived quantities of one member."""
    geometry: MemberGeometry
    k_local: np.ndarray
    T: np.ndarray

    @property
    def k_global(self) -> np.ndarray:
        return self.T.T @ self.k_local @ self.T


def member_matrices(
    model: StructuralModel,
    member: Member,
    config: AnalysisConfig = DEFAULT_CONFIG,
) -> MemberMatrices:
    """Build geometry, local stiffness and transform for one member."""
    geom = member_geometry(model, member, config)
    if model.dimension == 2:
        k_local = local_stiffness_2d(
            member.E, member.A, member.Iz, geom.L, member.end_i, member.end_j
        )
        T = transform_2d(geom.c, geom.s)
    else:
        k_local = local_stiffness_3d(
            member.E, member.G, member.A, member.Iy, member.Iz, member.J, geom.L,
            member.end_i, member.end_j,
        )
        T = transform_3d(geom.axes)
    return MemberMatrices(geometry=geom, k_local=k_local, T=T)
