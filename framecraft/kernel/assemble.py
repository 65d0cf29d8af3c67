# framecraft/kernel/assemble.py
"""
ASSEMBLY: Global Matrix Assembly
================================

This module handles the assembly of element contributions into global matrices.
This is the scatter-add operation that builds K and F from element-level data.

Assembly doesn't care about element TYPE. It just needs:
- Total number of DOFs
- For each element: its DOF map and its stiffness matrix (or load vector)

2D members contribute 6×6 blocks, 3D members 12×12 blocks; the logic is
identical. K and F are rebuilt from zero on every call.
"""

import numpy as np
from typing import List, Tuple


def assemble_global_K(
    ndof: int,
    contributions: List[Tuple[List[int], np.ndarray]]
) -> np.ndarray:
    """
    Assemble global stiffness matrix from element contributions.

    ALGORITHM:
    ----------
    K = zeros(ndof × ndof)
    for each element:
        for each (local_i, local_j) in element ke:
            K[dof_map[local_i], dof_map[local_j]] += ke[local_i, local_j]

    Parameters:
    -----------
    ndof : int
        Total number of DOFs in the system
    contributions : List[Tuple[List[int], np.ndarray]]
        (dof_map, ke) per element, ke in GLOBAL coordinates with shape
        (len(dof_map), len(dof_map))

    Returns:
    --------
    np.ndarray
        Global stiffness matrix K, shape (ndof, ndof), symmetric
    """
    K = np.zeros((ndof, ndof), dtype=float)

    for dof_map, ke in contributions:
        n_element_dofs = len(dof_map)

        assert ke.shape == (n_element_dofs, n_element_dofs), \
            f"Element ke shape {ke.shape} doesn't match dof_map length {n_element_dofs}"

        idx = np.asarray(dof_map, dtype=int)
        K[np.ix_(idx, idx)] += ke

    return K


def assemble_global_F(
    ndof: int,
    contributions: List[Tuple[List[int], np.ndarray]]
) -> np.ndarray:
    """
    Assemble global load vector from element contributions.

    Same scatter-add logic as assemble_global_K, but for load vectors.
    Used for equivalent nodal loads from distributed loads.
    """
    F = np.zeros(ndof, dtype=float)

    for dof_map, fe in contributions:
        n_element_dofs = len(dof_map)

        assert fe.shape == (n_element_dofs,), \
            f"Element fe shape {fe.shape} doesn't match dof_map length {n_element_dofs}"

        # np.add.at accumulates correctly if a DOF appears twice in the map
        np.add.at(F, np.asarray(dof_map, dtype=int), fe)

    return F


def add_nodal_load(
    F: np.ndarray,
    node_pos: int,
    load_vector: np.ndarray,
    dof_per_node: int
) -> None:
    """
    Add a nodal load to the global load vector (in-place).

    load_vector holds the node's components in DOF order:
    - 2D frame: [Fx, Fy, Mz]
    - 3D frame: [Fx, Fy, Fz, Mx, My, Mz]

    >>> F = np.zeros(6)
    >>> add_nodal_load(F, node_pos=1, load_vector=np.array([1000.0, 0, 0]), dof_per_node=3)
    >>> F[3]
    1000.0
    """
    base_dof = dof_per_node * node_pos
    for i, val in enumerate(load_vector):
        F[base_dof + i] += val
