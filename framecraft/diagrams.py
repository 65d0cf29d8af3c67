# framecraft/diagrams.py
"""
FORCE DIAGRAMS AND DEFLECTED SHAPE
==================================

This module samples internal forces (N, V, M) along members and computes the
curved deflected shape for plotting by an external viewer.

KEY CONCEPTS:
-------------
- N (Axial Force): Tension (+) or compression (-) along the member axis
- V (Shear Force): Force perpendicular to the member
- M (Bending Moment): varies parabolically under a uniform load

For a member with uniform load q (local +y):
- V varies linearly: V(x) = V_i + q·x
- M varies parabolically: M(x) = linear(M_i, M_j) − q·(Lx/2 − x²/2)

DEFLECTED SHAPE:
----------------
Transverse displacement = Hermite cubic interpolation of the member-end
displacements and rotations, plus the deflection of the member's own span
under its uniform load with both ends held (the "bubble"). At a pinned end
the member rotation is not the joint rotation; it is condensed out of the
member end displacements first.
"""

from dataclasses import dataclass
from typing import Dict, List, Tuple

import numpy as np

from .elements import MemberMatrices
from .kernel.dof import DOFManager
from .model import Connectivity, Member, StructuralModel
from .post import MemberForces


@dataclass
class DiagramPoint:
    """A single point on a force diagram."""
    x_local: float      # Position along member (0 to L)
    x: float            # Global X coordinate
    y: float            # Global Y coordinate
    z: float            # Global Z coordinate
    N: float            # Axial force (N)
    V: float            # Shear force (N)
    M: float            # Bending moment (N·m)


@dataclass
class DeflectedPoint:
    """A point on the deflected shape curve (global, scaled)."""
    x: float
    y: float
    z: float = 0.0


@dataclass
class MemberDiagramData:
    """Diagram data for one member and one bending axis."""
    member_id: int
    i: int
    j: int
    length: float
    axis: str
    points: List[DiagramPoint]
    deflected_shape: List[DeflectedPoint]
    max_N: float
    max_V: float
    max_M: float


def hermite_shape_functions(xi: float) -> Tuple[float, float, float, float]:
    """
    Compute Hermite cubic shape functions for beam deflection interpolation.

    Parameters:
    -----------
    xi : float
        Normalized coordinate along member, 0 ≤ xi ≤ 1

    Returns:
    --------
    N1, N2, N3, N4 : float
        v(xi) = N1*v_i + N2*theta_i*L + N3*v_j + N4*theta_j*L
    """
    N1 = 1 - 3*xi**2 + 2*xi**3
    N2 = xi - 2*xi**2 + xi**3
    N3 = 3*xi**2 - 2*xi**3
    N4 = -xi**2 + xi**3
    return N1, N2, N3, N4


def member_end_slopes(
    v_i: float, t_i: float, v_j: float, t_j: float, L: float,
    end_i: Connectivity, end_j: Connectivity,
) -> Tuple[float, float]:
    """
    Slopes of the member ends, condensing out released rotations.

    The joint rotation at a pinned end does not act on the member; its slope
    follows from the other three end values.
    """
    chord = (v_j - v_i) / L
    if end_i is Connectivity.RIGID and end_j is Connectivity.RIGID:
        return t_i, t_j
    if end_i is Connectivity.PINNED and end_j is Connectivity.RIGID:
        return 1.5 * chord - 0.5 * t_j, t_j
    if end_i is Connectivity.RIGID and end_j is Connectivity.PINNED:
        return t_i, 1.5 * chord - 0.5 * t_i
    return chord, chord


def span_deflection(
    x: np.ndarray, L: float, q: float, EI: float,
    end_i: Connectivity, end_j: Connectivity,
) -> np.ndarray:
    """Deflection of the loaded span with both end displacements held at zero."""
    if q == 0.0 or EI <= 0.0:
        return np.zeros_like(x)
    RIGID = Connectivity.RIGID
    if end_i is RIGID and end_j is RIGID:
        return q * x**2 * (L - x)**2 / (24.0 * EI)
    if end_i is RIGID and end_j is not RIGID:
        return q * x**2 * (3*L**2 - 5*L*x + 2*x**2) / (48.0 * EI)
    if end_i is not RIGID and end_j is RIGID:
        s = L - x
        return q * s**2 * (3*L**2 - 5*L*s + 2*s**2) / (48.0 * EI)
    return q * x * (L**3 - 2*L*x**2 + x**3) / (24.0 * EI)


def member_internal_forces(
    model: StructuralModel,
    member: Member,
    forces: MemberForces,
    axis: str = "z",
    n_points: int = 21,
) -> List[DiagramPoint]:
    """
    Compute N, V, M at points along a member.

    axis selects the bending axis ('z' is the only one in 2D); the shear
    reported is the one that goes with it.
    """
    ni = model.node(member.i)
    nj = model.node(member.j)
    L = forces.L
    x_local = np.linspace(0.0, L, n_points)

    N = forces.axial_at(x_local)
    V = forces.shear_at(x_local, "y" if axis == "z" else "z")
    M = forces.moment_at(x_local, axis)

    points = []
    for k, x in enumerate(x_local):
        t = x / L
        points.append(DiagramPoint(
            x_local=float(x),
            x=ni.x + t * (nj.x - ni.x),
            y=ni.y + t * (nj.y - ni.y),
            z=ni.z + t * (nj.z - ni.z),
            N=float(N[k]),
            V=float(V[k]),
            M=float(M[k]),
        ))
    return points


def deflected_shape(
    model: StructuralModel,
    member: Member,
    member_matrices: MemberMatrices,
    forces: MemberForces,
    d_global: np.ndarray,
    dof: DOFManager = None,
    scale: float = 1.0,
    n_points: int = 21,
) -> List[DeflectedPoint]:
    """
    Curved deflected shape of a member in global coordinates.

    Parameters:
    -----------
    scale : float
        Scale factor for visualization (deflections are typically small)
    n_points : int
        Number of sample points along member
    """
    dof = dof or DOFManager.for_model(model)
    L = member_matrices.geometry.L
    axes = member_matrices.geometry.axes
    d_local = member_matrices.T @ d_global[np.asarray(dof.member_dof_map(member), dtype=int)]

    half = len(d_local) // 2
    u_i, u_j = d_local[0], d_local[half]
    v_i, v_j = d_local[1], d_local[half + 1]
    if model.dimension == 2:
        tz_i, tz_j = d_local[2], d_local[5]
        w_i = w_j = ty_i = ty_j = 0.0
    else:
        w_i, w_j = d_local[2], d_local[8]
        tz_i, tz_j = d_local[5], d_local[11]
        # dw/dx = −θy
        ty_i, ty_j = -d_local[4], -d_local[10]

    sv_i, sv_j = member_end_slopes(v_i, tz_i, v_j, tz_j, L, member.end_i, member.end_j)
    sw_i, sw_j = member_end_slopes(w_i, ty_i, w_j, ty_j, L, member.end_i, member.end_j)

    xi = np.linspace(0.0, 1.0, n_points)
    x = xi * L
    N1, N2, N3, N4 = hermite_shape_functions(xi)

    u = u_i + xi * (u_j - u_i)
    v = N1 * v_i + N2 * sv_i * L + N3 * v_j + N4 * sv_j * L
    v = v + span_deflection(x, L, float(forces.w_local[1]), member.E * member.Iz,
                            member.end_i, member.end_j)
    w = N1 * w_i + N2 * sw_i * L + N3 * w_j + N4 * sw_j * L
    if model.dimension == 3:
        w = w + span_deflection(x, L, float(forces.w_local[2]), member.E * member.Iy,
                                member.end_i, member.end_j)

    # Local deformations back to global: rows of axes are the local unit vectors
    disp_global = np.column_stack([u, v, w]) @ axes

    ni = np.array(model.node(member.i).position, dtype=float)
    nj = np.array(model.node(member.j).position, dtype=float)
    if model.dimension == 2:
        ni[2] = nj[2] = 0.0

    shape = []
    for k in range(n_points):
        p = ni + xi[k] * (nj - ni) + scale * disp_global[k]
        shape.append(DeflectedPoint(x=float(p[0]), y=float(p[1]), z=float(p[2])))
    return shape


def frame_diagrams(
    model: StructuralModel,
    matrices: Dict[int, MemberMatrices],
    member_forces: Dict[int, MemberForces],
    d_global: np.ndarray,
    axis: str = "z",
    scale: float = 50.0,
    n_points: int = 21,
) -> List[MemberDiagramData]:
    """
    Compute force diagrams and deflected shapes for all members.

    Returns:
    --------
    List[MemberDiagramData]
        One entry per member, in model order
    """
    dof = DOFManager.for_model(model)
    results = []
    for member in model.members:
        forces = member_forces[member.id]
        points = member_internal_forces(model, member, forces, axis, n_points)
        shape = deflected_shape(
            model, member, matrices[member.id], forces, d_global, dof, scale, n_points
        )
        results.append(MemberDiagramData(
            member_id=member.id,
            i=member.i,
            j=member.j,
            length=forces.L,
            axis=axis,
            points=points,
            deflected_shape=shape,
            max_N=max(abs(p.N) for p in points),
            max_V=max(abs(p.V) for p in points),
            max_M=max(abs(p.M) for p in points),
        ))
    return results
