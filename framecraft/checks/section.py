# framecraft/checks/section.py
"""Combined axial + bending stress check sampled along each member."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

import numpy as np

from ..config import AnalysisConfig, DEFAULT_CONFIG
from ..errors import MaterialDataError
from ..kernel.buckling import effective_length_factor, member_slenderness, min_radius_of_gyration
from ..materials import (
    MATERIAL_PROPERTIES,
    AllowableStress,
    LoadDuration,
    StrengthModel,
    allowable_stresses,
    compression_reduction,
)
from ..model import Member
from ..post import MemberForces

logger = logging.getLogger(__name__)


class CheckStatus(Enum):
    OK = "OK"
    NG = "NG"
    INSUFFICIENT_DATA = "insufficient data"


@dataclass(frozen=True)
class SectionCheckResult:
    """
    Section check of one member.

    ratios holds the combined stress ratio at each sample point; location
    (m from end i) and xi mark the governing one. M and My are the internal
    moments about local z and y there.
    """
    member_id: int
    status: CheckStatus
    max_ratio: float = float('nan')
    location: float = float('nan')
    xi: float = float('nan')
    N: float = float('nan')
    M: float = float('nan')
    My: float = 0.0
    ratios: np.ndarray = field(default=None, repr=False)
    slenderness: float = float('nan')
    reduction: float = 1.0
    allowable: Optional[AllowableStress] = None
    detail: str = ""


def member_strength(member: Member) -> Optional[StrengthModel]:
    """Member strength model, falling back to the catalog material's default."""
    if member.strength is not None:
        return member.strength
    if member.material is not None:
        return MATERIAL_PROPERTIES[member.material].strength
    return None


def _bending_stress(M: np.ndarray, Z: float, name: str, member_id: int) -> np.ndarray:
    if not np.any(np.abs(M) > 0.0):
        return np.zeros_like(M)
    if not Z or Z <= 0.0:
        raise MaterialDataError(f"Member {member_id}: section modulus {name} is missing")
    return np.abs(M) / Z


def check_member_section(
    member: Member,
    forces: MemberForces,
    duration: LoadDuration = LoadDuration.LONG,
    config: AnalysisConfig = DEFAULT_CONFIG,
) -> SectionCheckResult:
    """
    Check one member at n_check_points equally spaced sections.

    Ratio at each section:
        tension:      σ_axial / ft        + σ_bend / fb
        compression:  |σ_axial| / (η·fc)  + σ_bend / fb

    σ_bend sums both bending axes in 3D. η is the slenderness reduction of
    the compressive allowable, with λ = kL / i_min.

    Raises:
        MaterialDataError: Strength or section data missing or invalid.
    """
    allow = allowable_stresses(member_strength(member), duration)
    if not member.A or member.A <= 0.0:
        raise MaterialDataError(f"Member {member.id}: area A is missing")

    L = forces.L
    xi = np.linspace(0.0, 1.0, config.n_check_points)
    x = xi * L

    N = forces.N
    Mz = forces.moment_at(x, "z")
    sigma_bend = _bending_stress(Mz, member.Zz, "Zz", member.id)
    if forces.dimension == 3:
        My = forces.moment_at(x, "y")
        sigma_bend = sigma_bend + _bending_stress(My, member.Zy, "Zy", member.id)
    else:
        My = np.zeros_like(x)

    sigma_axial = N / member.A
    slenderness = float('nan')
    eta = 1.0
    if sigma_axial >= 0.0:
        axial_ratio = sigma_axial / allow.ft
    else:
        i_min = min_radius_of_gyration(member)
        k = effective_length_factor(member.end_i, member.end_j)
        slenderness = member_slenderness(L, i_min, k)
        eta = compression_reduction(slenderness, member.E, allow.F_ref)
        axial_ratio = abs(sigma_axial) / (eta * allow.fc)

    ratios = axial_ratio + sigma_bend / allow.fb
    k_max = int(np.argmax(ratios))
    max_ratio = float(ratios[k_max])
    status = CheckStatus.NG if max_ratio > config.ratio_limit else CheckStatus.OK

    return SectionCheckResult(
        member_id=member.id,
        status=status,
        max_ratio=max_ratio,
        location=float(x[k_max]),
        xi=float(xi[k_max]),
        N=N,
        M=float(Mz[k_max]),
        My=float(My[k_max]),
        ratios=ratios,
        slenderness=slenderness,
        reduction=eta,
        allowable=allow,
    )


def check_sections(
    members,
    member_forces: Dict[int, MemberForces],
    duration: LoadDuration = LoadDuration.LONG,
    config: AnalysisConfig = DEFAULT_CONFIG,
) -> Dict[int, SectionCheckResult]:
    """
    Section check for every member.

    A member with missing or unrecognized strength data gets
    INSUFFICIENT_DATA; the other members are still checked.
    """
    results = {}
    for member in members:
        forces = member_forces[member.id]
        try:
            results[member.id] = check_member_section(member, forces, duration, config)
        except MaterialDataError as exc:
            logger.warning("Section check of member %s: %s", member.id, exc)
            results[member.id] = SectionCheckResult(
                member_id=member.id,
                status=CheckStatus.INSUFFICIENT_DATA,
                N=forces.N,
                detail=str(exc),
            )

    n_ng = sum(1 for r in results.values() if r.status is CheckStatus.NG)
    logger.debug("Checked %d members, %d NG", len(results), n_ng)
    return results


def governing_member(results: Dict[int, SectionCheckResult]) -> Optional[SectionCheckResult]:
    """The checked member with the highest ratio (None if nothing was checked)."""
    checked = [r for r in results.values() if r.status is not CheckStatus.INSUFFICIENT_DATA]
    if not checked:
        return None
    return max(checked, key=lambda r: r.max_ratio)
