# framecraft/kernel/solve.py
"""Constraint partitioning and linear solve with prescribed displacements."""

import logging
import warnings
from typing import Dict, Iterable, Tuple, Union

import numpy as np
import scipy.linalg

from ..config import AnalysisConfig, DEFAULT_CONFIG
from ..errors import SingularSystemError
from ..model import StructuralModel, Support
from .dof import DOFManager

logger = logging.getLogger(__name__)


# Local DOFs restrained by each support kind. Rollers restrain the
# global vertical translation (uy in 2D, uz in 3D).
SUPPORT_DOFS = {
    2: {
        Support.FREE: (),
        Support.ROLLER: (1,),
        Support.PINNED: (0, 1),
        Support.FIXED: (0, 1, 2),
    },
    3: {
        Support.FREE: (),
        Support.ROLLER: (2,),
        Support.PINNED: (0, 1, 2),
        Support.FIXED: (0, 1, 2, 3, 4, 5),
    },
}


def constrained_dofs(model: StructuralModel, dof: DOFManager = None) -> Dict[int, float]:
    """
    Collect constrained DOFs and their known displacements.

    The constrained set is the union of support restraints (value 0.0) and
    prescribed displacements (any non-None value, zero included). A
    prescribed value on a supported DOF overrides the 0.0.

    Returns:
        {global_dof: prescribed value}
    """
    dof = dof or DOFManager.for_model(model)
    constraints: Dict[int, float] = {}

    for pos, node in enumerate(model.nodes):
        for local in SUPPORT_DOFS[model.dimension][node.support]:
            constraints[dof.idx(pos, local)] = 0.0
        for local in range(dof.dof_per_node):
            value = node.prescribed_value(local)
            if value is not None:
                constraints[dof.idx(pos, local)] = float(value)

    return constraints


def rotational_mask(ndof: int, dof_per_node: int) -> np.ndarray:
    """Boolean mask of rotational DOFs (rz in 2D; rx, ry, rz in 3D)."""
    local = np.arange(ndof) % dof_per_node
    first_rotation = 2 if dof_per_node == 3 else 3
    return local >= first_rotation


def gaussian_elimination(
    A: np.ndarray,
    b: np.ndarray,
    rotational: np.ndarray,
    pivot_tol: float,
    residual_tol: float,
    dof_ids: np.ndarray = None,
) -> np.ndarray:
    """
    Solve A·x = b by Gaussian elimination with partial pivoting.

    A column without a usable pivot is an unresolved unknown. Rotational
    unknowns (e.g. the rotation of a node where every member end is pinned)
    are set to zero, provided the system stays consistent; any other
    unresolved unknown is a mechanism.

    Args:
        A: Square coefficient matrix (not modified)
        b: Right-hand side (not modified)
        rotational: Boolean mask, True where the unknown is a rotation
        pivot_tol: Absolute pivot threshold
        residual_tol: Absolute threshold for leftover right-hand side entries
        dof_ids: Global DOF index of each unknown, for error reporting

    Returns:
        x: Solution vector

    Raises:
        SingularSystemError: Zero pivot on a translation, or inconsistent
            leftover equations.
    """
    A = np.array(A, dtype=float)
    b = np.array(b, dtype=float)
    n = A.shape[0]
    if dof_ids is None:
        dof_ids = np.arange(n)

    pivot_cols = []
    row = 0
    for col in range(n):
        if row < n:
            p = row + int(np.argmax(np.abs(A[row:, col])))
            has_pivot = abs(A[p, col]) > pivot_tol
        else:
            has_pivot = False

        if not has_pivot:
            if not rotational[col]:
                raise SingularSystemError(
                    f"Zero pivot at DOF {int(dof_ids[col])}: structure is unstable",
                    dof=int(dof_ids[col]),
                )
            logger.debug("Rotation DOF %d has no stiffness, set to zero", int(dof_ids[col]))
            continue

        if p != row:
            A[[row, p]] = A[[p, row]]
            b[[row, p]] = b[[p, row]]

        factors = A[row + 1:, col] / A[row, col]
        A[row + 1:, col:] -= np.outer(factors, A[row, col:])
        b[row + 1:] -= factors * b[row]
        pivot_cols.append(col)
        row += 1

    # Equations left without a pivot must be satisfied by x alone
    if row < n:
        leftover = float(np.max(np.abs(b[row:])))
        if leftover > residual_tol:
            raise SingularSystemError(
                f"Inconsistent equations (residual {leftover:.3e}): load on a DOF without stiffness"
            )

    x = np.zeros(n, dtype=float)
    for k in reversed(range(len(pivot_cols))):
        c = pivot_cols[k]
        x[c] = (b[k] - A[k, c + 1:] @ x[c + 1:]) / A[k, c]
    return x


def _solve_reduced(
    Kuu: np.ndarray,
    rhs: np.ndarray,
    rotational: np.ndarray,
    free: np.ndarray,
    config: AnalysisConfig,
) -> np.ndarray:
    diag_scale = float(np.max(np.abs(np.diag(Kuu)))) if Kuu.size else 0.0
    if not np.isfinite(diag_scale) or not np.all(np.isfinite(rhs)):
        raise SingularSystemError("Stiffness matrix or load vector contains non-finite values")
    if diag_scale == 0.0:
        diag_scale = 1.0
    pivot_tol = config.pivot_tolerance * diag_scale

    # Fast path: LAPACK LU with partial pivoting
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", scipy.linalg.LinAlgWarning)
        lu, piv = scipy.linalg.lu_factor(Kuu)
    if np.min(np.abs(np.diag(lu))) > pivot_tol:
        return scipy.linalg.lu_solve((lu, piv), rhs)

    logger.debug("Near-zero pivot in LU, switching to rank-revealing elimination")
    load_scale = float(np.max(np.abs(rhs))) if rhs.size else 0.0
    residual_tol = config.residual_tolerance * max(load_scale, 1.0)
    return gaussian_elimination(Kuu, rhs, rotational, pivot_tol, residual_tol, dof_ids=free)


def solve_linear(
    K: np.ndarray,
    F: np.ndarray,
    constraints: Union[Dict[int, float], Iterable[int]],
    dof_per_node: int = 3,
    config: AnalysisConfig = DEFAULT_CONFIG,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Solve K·d = F with constrained DOFs enforced by partitioning.

    Partitions into free (u) and constrained (c) sets:

        K_uu·D_u = F_u − K_uc·D_c
        R_c      = K_cu·D_u + K_cc·D_c − F_c

    Args:
        K: Global stiffness matrix (ndof x ndof)
        F: Global load vector (ndof,)
        constraints: {dof: prescribed value}, or a list of DOFs fixed at zero
        dof_per_node: 3 (2D frame) or 6 (3D frame), to identify rotations
        config: Solver tolerances

    Returns:
        d: Displacement vector (ndof,)
        R: Reaction vector (ndof,), zero at free DOFs
        free: Array of free DOF indices

    Raises:
        SingularSystemError: If the reduced system cannot be resolved
    """
    if not isinstance(constraints, dict):
        constraints = {int(i): 0.0 for i in constraints}

    ndof = K.shape[0]
    fixed = np.array(sorted(constraints), dtype=int)
    D_c = np.array([constraints[i] for i in fixed], dtype=float)
    free = np.setdiff1d(np.arange(ndof, dtype=int), fixed)

    d = np.zeros(ndof, dtype=float)
    d[fixed] = D_c

    if free.size == 0:
        R = K @ d - F
        return d, R, free

    Kuu = K[np.ix_(free, free)]
    Kuc = K[np.ix_(free, fixed)]
    rhs = F[free] - Kuc @ D_c

    rotational = rotational_mask(ndof, dof_per_node)[free]
    d[free] = _solve_reduced(Kuu, rhs, rotational, free, config)

    R = np.zeros(ndof, dtype=float)
    R[fixed] = K[fixed, :] @ d - F[fixed]

    return d, R, free
