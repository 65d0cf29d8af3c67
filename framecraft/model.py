# framecraft/model.py
"""
MODEL DEFINITIONS: Node, Member, loads and the model snapshot
=============================================================

All records are frozen dataclasses. The engine never mutates them; callers
build a new StructuralModel when the structure changes.

DOF LAYOUT:
-----------
    2D frame:  3 DOF/node (ux, uy, rz)           vertical axis = y
    3D frame:  6 DOF/node (ux, uy, uz, rx, ry, rz)  vertical axis = z

Global DOF indices follow the node's POSITION in StructuralModel.nodes,
not its id. Ids are only used to reference nodes from members and loads.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple

from .errors import GeometryError, MissingPropertyError
from .materials import Material, StrengthModel, material_density


class Support(Enum):
    FREE = "free"
    PINNED = "pinned"
    FIXED = "fixed"
    ROLLER = "roller"


class Connectivity(Enum):
    """Member end condition: moment-resisting or hinged."""
    RIGID = "rigid"
    PINNED = "pinned"


@dataclass(frozen=True)
class Node:
    """
    A joint in 2D or 3D space.

    Parameters:
    -----------
    id : int
        Unique identifier referenced by members and loads
    x, y, z : float
        Global coordinates (m). z is ignored by 2D analysis.
    support : Support
        Support condition
    prescribed : tuple of Optional[float]
        Forced displacement per DOF in the node's DOF order. None leaves the
        DOF unset; any number (0.0 included) constrains it to that value.
        Missing trailing entries are treated as None.

    Examples:
    ---------
    >>> Node(0, 0.0, 0.0, support=Support.FIXED)
    >>> Node(3, 6.0, 0.0, support=Support.PINNED, prescribed=(None, -0.01))  # 10 mm settlement
    """
    id: int
    x: float
    y: float
    z: float = 0.0
    support: Support = Support.FREE
    prescribed: Tuple[Optional[float], ...] = ()

    def prescribed_value(self, local_dof: int) -> Optional[float]:
        if local_dof < len(self.prescribed):
            return self.prescribed[local_dof]
        return None

    @property
    def position(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)


@dataclass(frozen=True)
class Member:
    """
    Two-node Euler-Bernoulli frame member.

    The node order (i -> j) fixes the local x-axis. Section properties follow
    the local axes: Iz/Zz/iz resist bending in the local x-y plane (the only
    bending plane in 2D), Iy/Zy/iy bending in the local x-z plane.

    Radii of gyration default to sqrt(I/A) when not given.
    """
    id: int
    i: int
    j: int
    E: float
    A: float
    Iz: float = 0.0
    Iy: float = 0.0
    J: float = 0.0
    Zz: float = 0.0
    Zy: float = 0.0
    iz: Optional[float] = None
    iy: Optional[float] = None
    nu: float = 0.3
    end_i: Connectivity = Connectivity.RIGID
    end_j: Connectivity = Connectivity.RIGID
    strength: Optional[StrengthModel] = None
    material: Optional[Material] = None
    density: Optional[float] = None  # kg/m³, overrides the material catalog

    @property
    def G(self) -> float:
        """Shear modulus derived from E and Poisson ratio."""
        return self.E / (2.0 * (1.0 + self.nu))

    @property
    def connectivity(self) -> Tuple[Connectivity, Connectivity]:
        return (self.end_i, self.end_j)

    def radius_of_gyration(self, axis: str) -> Optional[float]:
        """Radius of gyration about local 'y' or 'z' (given or derived)."""
        given = self.iz if axis == "z" else self.iy
        if given is not None and given > 0.0:
            return float(given)
        inertia = self.Iz if axis == "z" else self.Iy
        if inertia and inertia > 0.0 and self.A > 0.0:
            return math.sqrt(inertia / self.A)
        return None

    def unit_weight(self, gravity: float) -> float:
        """Self-weight per unit length (N/m), 0 when no density is known."""
        rho = self.density if self.density is not None else material_density(self.material)
        if rho is None:
            return 0.0
        return rho * self.A * gravity


@dataclass(frozen=True)
class NodalLoad:
    """Point load at a node in global axes (N, N·m)."""
    node: int
    px: float = 0.0
    py: float = 0.0
    pz: float = 0.0
    mx: float = 0.0
    my: float = 0.0
    mz: float = 0.0


@dataclass(frozen=True)
class MemberLoad:
    """Uniform distributed load along a member, global components (N/m)."""
    member: int
    wx: float = 0.0
    wy: float = 0.0
    wz: float = 0.0


def _as_tuple(values) -> tuple:
    return tuple(values) if values is not None else ()


@dataclass(frozen=True)
class StructuralModel:
    """
    Immutable snapshot of a frame model.

    dimension selects 2D (3 DOF/node) or 3D (6 DOF/node) analysis.
    self_weight adds density × A × g along the global vertical of every
    member whose density is known.
    """
    nodes: Tuple[Node, ...]
    members: Tuple[Member, ...]
    nodal_loads: Tuple[NodalLoad, ...] = ()
    member_loads: Tuple[MemberLoad, ...] = ()
    dimension: int = 2
    self_weight: bool = False
    _node_index: Dict[int, int] = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "nodes", _as_tuple(self.nodes))
        object.__setattr__(self, "members", _as_tuple(self.members))
        object.__setattr__(self, "nodal_loads", _as_tuple(self.nodal_loads))
        object.__setattr__(self, "member_loads", _as_tuple(self.member_loads))
        object.__setattr__(
            self, "_node_index", {n.id: pos for pos, n in enumerate(self.nodes)}
        )

    @property
    def dof_per_node(self) -> int:
        return 3 if self.dimension == 2 else 6

    @property
    def ndof(self) -> int:
        return self.dof_per_node * len(self.nodes)

    @property
    def vertical_axis(self) -> int:
        """Local DOF offset of the global vertical translation."""
        return 1 if self.dimension == 2 else 2

    def node_index(self, node_id: int) -> int:
        """Position of a node in the DOF layout."""
        try:
            return self._node_index[node_id]
        except KeyError:
            raise MissingPropertyError(f"Unknown node id {node_id}", node_id=node_id)

    def node(self, node_id: int) -> Node:
        return self.nodes[self.node_index(node_id)]

    def member(self, member_id: int) -> Member:
        for m in self.members:
            if m.id == member_id:
                return m
        raise MissingPropertyError(f"Unknown member id {member_id}", member_id=member_id)

    def validate(self) -> None:
        """
        Check the model for physically inconsistent input.

        Raises:
            GeometryError: Member connects a node to itself.
            MissingPropertyError: Unknown references, duplicate ids, or an
                absent/invalid required numeric field.
        """
        if self.dimension not in (2, 3):
            raise MissingPropertyError(f"dimension must be 2 or 3, got {self.dimension!r}")

        if len(self._node_index) != len(self.nodes):
            raise MissingPropertyError("Duplicate node ids in model")
        if len({m.id for m in self.members}) != len(self.members):
            raise MissingPropertyError("Duplicate member ids in model")

        for node in self.nodes:
            _validate_node(node, self.dof_per_node)

        for m in self.members:
            if m.i == m.j:
                raise GeometryError(
                    f"Member {m.id} connects node {m.i} to itself", member_id=m.id
                )
            for nid in (m.i, m.j):
                if nid not in self._node_index:
                    raise MissingPropertyError(
                        f"Member {m.id} references unknown node {nid}",
                        member_id=m.id, node_id=nid,
                    )
            _validate_member(m, self.dimension)

        member_ids = {m.id for m in self.members}
        for load in self.nodal_loads:
            if load.node not in self._node_index:
                raise MissingPropertyError(
                    f"Nodal load references unknown node {load.node}", node_id=load.node
                )
            for name in ("px", "py", "pz", "mx", "my", "mz"):
                _number(getattr(load, name), f"nodal load {name}", node_id=load.node, allow_zero=True,
                        allow_negative=True)
        for load in self.member_loads:
            if load.member not in member_ids:
                raise MissingPropertyError(
                    f"Member load references unknown member {load.member}", member_id=load.member
                )
            for name in ("wx", "wy", "wz"):
                _number(getattr(load, name), f"member load {name}", member_id=load.member,
                        allow_zero=True, allow_negative=True)


def _number(value, name, member_id=None, node_id=None, allow_zero=False, allow_negative=False) -> float:
    owner = f"member {member_id}" if member_id is not None else f"node {node_id}"
    if value is None:
        raise MissingPropertyError(f"{owner}: {name} is missing", member_id=member_id, node_id=node_id)
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise MissingPropertyError(
            f"{owner}: {name} is not numeric ({value!r})", member_id=member_id, node_id=node_id
        )
    if not math.isfinite(value):
        raise MissingPropertyError(f"{owner}: {name} is not finite", member_id=member_id, node_id=node_id)
    if value < 0.0 and not allow_negative:
        raise MissingPropertyError(f"{owner}: {name} must be positive, got {value}",
                                   member_id=member_id, node_id=node_id)
    if value == 0.0 and not allow_zero:
        raise MissingPropertyError(f"{owner}: {name} must be non-zero", member_id=member_id, node_id=node_id)
    return value


def _validate_node(node: Node, dof_per_node: int) -> None:
    for name in ("x", "y", "z"):
        _number(getattr(node, name), name, node_id=node.id, allow_zero=True, allow_negative=True)
    if not isinstance(node.support, Support):
        raise MissingPropertyError(f"node {node.id}: unknown support {node.support!r}", node_id=node.id)
    if len(node.prescribed) > dof_per_node:
        raise MissingPropertyError(
            f"node {node.id}: {len(node.prescribed)} prescribed values for {dof_per_node} DOFs",
            node_id=node.id,
        )
    for k, value in enumerate(node.prescribed):
        if value is not None:
            _number(value, f"prescribed[{k}]", node_id=node.id, allow_zero=True, allow_negative=True)


def _validate_member(m: Member, dimension: int) -> None:
    _number(m.E, "E", member_id=m.id)
    _number(m.A, "A", member_id=m.id)
    nu = _number(m.nu, "nu", member_id=m.id, allow_zero=True, allow_negative=True)
    if not -1.0 < nu <= 0.5:
        raise MissingPropertyError(f"member {m.id}: nu must be in (-1, 0.5], got {nu}", member_id=m.id)
    for end in m.connectivity:
        if not isinstance(end, Connectivity):
            raise MissingPropertyError(f"member {m.id}: unknown end connectivity {end!r}", member_id=m.id)

    has_rigid_end = Connectivity.RIGID in m.connectivity
    _number(m.Iz, "Iz", member_id=m.id, allow_zero=not has_rigid_end)
    if dimension == 3:
        _number(m.Iy, "Iy", member_id=m.id, allow_zero=not has_rigid_end)
        _number(m.J, "J", member_id=m.id, allow_zero=not has_rigid_end)
    if m.density is not None:
        _number(m.density, "density", member_id=m.id, allow_zero=True)
