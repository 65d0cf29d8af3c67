# framecraft/kernel/buckling.py
"""Elastic (Euler) buckling of individual members.

Effective-length factors come from the member end connectivity only:

    rigid-rigid     k = 0.5
    rigid-pinned    k = 0.7   (either order)
    pinned-pinned   k = 1.0

This is the braced-frame assumption. Sway of unbraced frames (k > 1) is not
accounted for, so columns of a sway portal come out unconservative.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

import numpy as np

from ..config import AnalysisConfig, DEFAULT_CONFIG
from ..errors import MaterialDataError
from ..model import Connectivity, Member

logger = logging.getLogger(__name__)


class BucklingStatus(Enum):
    SAFE = "safe"
    CAUTION = "caution"
    RISK = "risk"
    INSUFFICIENT_DATA = "insufficient data"


def effective_length_factor(end_i: Connectivity, end_j: Connectivity) -> float:
    """
    Effective length factor k from end connectivity.

    >>> effective_length_factor(Connectivity.PINNED, Connectivity.PINNED)
    1.0
    """
    rigid_ends = (end_i is Connectivity.RIGID) + (end_j is Connectivity.RIGID)
    return {2: 0.5, 1: 0.7, 0: 1.0}[rigid_ends]


def min_radius_of_gyration(member: Member) -> float:
    """
    Smallest radius of gyration over the local axes that have section data.

    A given iz/iy is used as is; otherwise i = sqrt(I/A). A 2D member
    without Iy or iy is taken about z only.

    Raises:
        MaterialDataError: If neither axis yields a radius of gyration.
    """
    if not member.A or member.A <= 0.0:
        raise MaterialDataError(f"Member {member.id}: area A is missing")
    radii = [
        r for r in (member.radius_of_gyration("z"), member.radius_of_gyration("y"))
        if r is not None
    ]
    if not radii:
        raise MaterialDataError(
            f"Member {member.id}: no radius of gyration or second moment of area "
            f"(Iz={member.Iz}, Iy={member.Iy})"
        )
    return min(radii)


def weak_axis_properties(member: Member) -> Tuple[float, float]:
    """
    Minimum second moment of area and radius of gyration of a member.

    Returns:
        (I_min, i_min)

    Raises:
        MaterialDataError: If no positive I or A is available.
    """
    i_min = min_radius_of_gyration(member)
    inertias = [I for I in (member.Iz, member.Iy) if I and I > 0.0]
    if not inertias:
        raise MaterialDataError(
            f"Member {member.id}: no second moment of area for buckling (Iz={member.Iz}, Iy={member.Iy})"
        )
    return min(inertias), i_min


def member_slenderness(L: float, i: float, k: float = 1.0) -> float:
    """
    Compute member slenderness ratio λ = kL/i.

    Args:
        L: Member length
        i: Radius of gyration
        k: Effective length factor

    Returns:
        Slenderness ratio (inf for a non-positive radius)
    """
    if i <= 0:
        return float('inf')
    return k * L / i


def euler_buckling_load(E: float, I: float, L: float, k: float = 1.0) -> float:
    """
    Euler critical buckling load for a column.

    P_cr = π²EI / (kL)²

    Args:
        E: Young's modulus
        I: Moment of inertia
        L: Member length
        k: Effective length factor (1.0 for pinned-pinned)

    Returns:
        Critical buckling load P_cr
    """
    Le = k * L  # Effective length
    return (np.pi ** 2 * E * I) / (Le ** 2)


def buckling_status(safety_factor: float, config: AnalysisConfig = DEFAULT_CONFIG) -> BucklingStatus:
    if safety_factor < config.buckling_risk_below:
        return BucklingStatus.RISK
    if safety_factor < config.buckling_caution_below:
        return BucklingStatus.CAUTION
    return BucklingStatus.SAFE


@dataclass(frozen=True)
class BucklingResult:
    """Buckling check of one member (N positive in tension)."""
    member_id: int
    status: BucklingStatus
    N: float
    k: float
    length: float
    effective_length: float = float('nan')
    I_min: float = float('nan')
    i_min: float = float('nan')
    slenderness: float = float('nan')
    P_cr: float = float('nan')
    safety_factor: float = float('nan')
    detail: str = ""

    @property
    def no_risk(self) -> bool:
        """True for tension or zero axial force."""
        return math.isinf(self.safety_factor)


def check_member_buckling(
    member: Member,
    L: float,
    N: float,
    config: AnalysisConfig = DEFAULT_CONFIG,
) -> BucklingResult:
    """
    Check one member against its Euler load.

    Args:
        member: Member with section data and end connectivity
        L: Member length (m)
        N: Axial force (positive = tension, negative = compression)

    Returns:
        BucklingResult. Members without usable section data get
        INSUFFICIENT_DATA instead of raising.
    """
    k = effective_length_factor(member.end_i, member.end_j)
    try:
        I_min, i_min = weak_axis_properties(member)
        if not member.E or member.E <= 0.0:
            raise MaterialDataError(f"Member {member.id}: E is missing")
    except MaterialDataError as exc:
        logger.warning("Buckling check skipped: %s", exc)
        return BucklingResult(
            member_id=member.id, status=BucklingStatus.INSUFFICIENT_DATA,
            N=N, k=k, length=L, detail=str(exc),
        )

    Le = k * L
    P_cr = euler_buckling_load(member.E, I_min, L, k)
    slenderness = member_slenderness(L, i_min, k)

    if N >= 0.0:
        sf = float('inf')
        detail = "no risk (tension or zero axial force)"
    else:
        sf = P_cr / abs(N)
        detail = ""

    return BucklingResult(
        member_id=member.id,
        status=buckling_status(sf, config),
        N=N,
        k=k,
        length=L,
        effective_length=Le,
        I_min=I_min,
        i_min=i_min,
        slenderness=slenderness,
        P_cr=P_cr,
        safety_factor=sf,
        detail=detail,
    )


def analyze_buckling(
    members,
    axial_forces: Dict[int, float],
    lengths: Dict[int, float],
    config: AnalysisConfig = DEFAULT_CONFIG,
) -> Dict[int, BucklingResult]:
    """
    Buckling check for every member.

    Args:
        members: Iterable of Member
        axial_forces: {member_id: N} member-constant axial force, tension positive
        lengths: {member_id: L}
    """
    results = {}
    for member in members:
        N: Optional[float] = axial_forces.get(member.id)
        results[member.id] = check_member_buckling(
            member, lengths[member.id], 0.0 if N is None else N, config
        )
    return results
