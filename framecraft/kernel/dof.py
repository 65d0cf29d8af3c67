# framecraft/kernel/dof.py
"""
DOF MANAGER: Degree of Freedom Indexing
=======================================

PURPOSE:
--------
This module handles the mapping from (node, local_dof) to global DOF indices.
This is the ONE thing that changes between 2D and 3D frame analysis:

    2D Frame:  3 DOF/node (ux, uy, rz)
    3D Frame:  6 DOF/node (ux, uy, uz, rx, ry, rz)

Node ids are arbitrary integers chosen by the caller, so the manager works on
node POSITIONS (0..n-1) and resolves ids through the model.

USAGE:
------
    dof = DOFManager.for_model(model)
    dof.idx(node_pos=2, local_dof=1)          # → 7 for a 2D frame
    dof.member_dof_map(member)                # 6 or 12 global indices
"""

from dataclasses import dataclass
from typing import List

from ..model import Member, StructuralModel

# Local DOF labels per node, in DOF order
DOF_LABELS_2D = ("ux", "uy", "rz")
DOF_LABELS_3D = ("ux", "uy", "uz", "rx", "ry", "rz")


@dataclass
class DOFManager:
    """
    Manages degree-of-freedom indexing for structural analysis.

    Examples:
    ---------
    >>> dof = DOFManager(dof_per_node=3)
    >>> dof.idx(1, 0)  # Node position 1, DOF 0 (ux)
    3
    >>> dof.ndof(4)    # Total DOFs for 4 nodes
    12
    """
    dof_per_node: int
    model: StructuralModel = None

    @classmethod
    def for_model(cls, model: StructuralModel) -> "DOFManager":
        return cls(dof_per_node=model.dof_per_node, model=model)

    @property
    def labels(self) -> tuple:
        return DOF_LABELS_2D if self.dof_per_node == 3 else DOF_LABELS_3D

    def idx(self, node_pos: int, local_dof: int) -> int:
        """Global DOF index for a node position and local DOF."""
        return self.dof_per_node * node_pos + local_dof

    def ndof(self, n_nodes: int) -> int:
        return self.dof_per_node * n_nodes

    def node_dofs(self, node_pos: int) -> List[int]:
        """
        All global DOF indices for a single node position.

        >>> DOFManager(dof_per_node=3).node_dofs(2)
        [6, 7, 8]
        """
        base = self.dof_per_node * node_pos
        return list(range(base, base + self.dof_per_node))

    def element_dof_map(self, node_positions: List[int]) -> List[int]:
        """
        Flattened DOF map for an element connecting the given node positions.

        >>> DOFManager(dof_per_node=3).element_dof_map([2, 5])
        [6, 7, 8, 15, 16, 17]
        """
        result = []
        for pos in node_positions:
            result.extend(self.node_dofs(pos))
        return result

    def member_dof_map(self, member: Member) -> List[int]:
        """DOF map of a member, resolving node ids through the model."""
        return self.element_dof_map([
            self.model.node_index(member.i),
            self.model.node_index(member.j),
        ])

    def describe(self, dof: int) -> tuple:
        """(node id, DOF label) for a global DOF index."""
        pos, local = divmod(dof, self.dof_per_node)
        node_id = self.model.nodes[pos].id if self.model is not None else pos
        return node_id, self.labels[local]
