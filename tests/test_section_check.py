# File: tests/test_section_check.py
"""
TEST: Section capacity check
============================

1. Simply supported UDL beam: sampled max moment = wL²/8 at midspan
2. Overloaded member is NG, the others stay OK
3. Missing strength data isolates to the member (INSUFFICIENT_DATA)
4. Allowable stress tables per strength model and load duration
5. Slenderness reduction of the compressive allowable
"""

import math

import numpy as np
import pytest

from framecraft import (
    Connectivity,
    LoadDuration,
    MaterialDataError,
    Material,
    Member,
    MemberLoad,
    NodalLoad,
    Node,
    SteelLike,
    Support,
    WoodLike,
    WoodSpecies,
    analyze,
    check_design,
)
from framecraft.checks import CheckStatus, check_member_section, governing_member
from framecraft.materials import (
    allowable_stresses,
    compression_reduction,
    limiting_slenderness,
)
from framecraft.post import MemberForces

STEEL = SteelLike(F=235e6)


def _simply_supported(w, Zz=1.0e-4, strength=STEEL, material=None, L=6.0):
    nodes = [
        Node(0, 0.0, 0.0, support=Support.PINNED),
        Node(1, L, 0.0, support=Support.ROLLER),
    ]
    members = [Member(0, 0, 1, E=2.05e11, A=5e-3, Iz=8e-6, Zz=Zz,
                      strength=strength, material=material)]
    return analyze(nodes, members, member_loads=[MemberLoad(0, wy=-w)])


def test_simply_supported_udl_max_moment():
    w, L, Zz = 4000.0, 6.0, 1.0e-4
    result = _simply_supported(w, Zz=Zz, L=L)
    check = check_design(result).section_checks[0]

    assert check.status is CheckStatus.OK
    assert len(check.ratios) == 21
    assert np.isclose(check.M, w * L**2 / 8, rtol=1e-9)
    assert np.isclose(check.location, L / 2)
    assert np.isclose(check.xi, 0.5)

    fb = 235e6 / 1.5
    assert np.isclose(check.max_ratio, (w * L**2 / 8) / Zz / fb, rtol=1e-6)


def test_overloaded_member_is_ng():
    result = _simply_supported(w=60000.0)
    check = check_design(result).section_checks[0]
    assert check.status is CheckStatus.NG
    assert check.max_ratio > 1.0


def test_short_term_duration_raises_allowables():
    result = _simply_supported(w=20000.0)
    long_term = check_design(result, LoadDuration.LONG).section_checks[0]
    short_term = check_design(result, LoadDuration.SHORT).section_checks[0]
    assert np.isclose(long_term.max_ratio / short_term.max_ratio, 1.5)


def test_catalog_material_supplies_strength():
    result = _simply_supported(4000.0, strength=None, material=Material.STEEL)
    check = check_design(result).section_checks[0]
    assert check.status is CheckStatus.OK
    assert np.isclose(check.allowable.fb, 235e6 / 1.5)


def test_missing_strength_is_isolated_per_member():
    nodes = [
        Node(0, 0.0, 0.0, support=Support.FIXED),
        Node(1, 3.0, 0.0),
        Node(2, 6.0, 0.0),
    ]
    members = [
        Member(0, 0, 1, E=2.05e11, A=5e-3, Iz=8e-6, Zz=1e-4, strength=STEEL),
        Member(1, 1, 2, E=2.05e11, A=5e-3, Iz=8e-6, Zz=1e-4),
    ]
    result = analyze(nodes, members, nodal_loads=[NodalLoad(2, py=1000.0)])
    report = check_design(result)

    assert report.section_checks[0].status is CheckStatus.OK
    assert report.section_checks[1].status is CheckStatus.INSUFFICIENT_DATA
    assert "strength" in report.section_checks[1].detail
    assert governing_member(report.section_checks).member_id == 0
    assert not report.all_ok


def test_missing_section_modulus_is_insufficient_data():
    result = _simply_supported(4000.0, Zz=0.0)
    check = check_design(result).section_checks[0]
    assert check.status is CheckStatus.INSUFFICIENT_DATA
    assert "Zz" in check.detail


def test_allowable_stresses_steel():
    F = 235e6
    long_term = allowable_stresses(SteelLike(F), LoadDuration.LONG)
    short_term = allowable_stresses(SteelLike(F), LoadDuration.SHORT)
    assert np.isclose(long_term.ft, F / 1.5)
    assert np.isclose(long_term.fc, F / 1.5)
    assert np.isclose(long_term.fb, F / 1.5)
    assert np.isclose(long_term.fs, F / (1.5 * math.sqrt(3)))
    assert np.isclose(short_term.fb, F)
    assert np.isclose(short_term.fs, F / math.sqrt(3))
    assert long_term.F_ref == F


def test_allowable_stresses_wood():
    wood = WoodLike.from_species(WoodSpecies.SUGI)
    long_term = allowable_stresses(wood, LoadDuration.LONG)
    short_term = allowable_stresses(wood, LoadDuration.SHORT)
    assert np.isclose(long_term.fc, 1.1 / 3 * wood.fc)
    assert np.isclose(long_term.fb, 1.1 / 3 * wood.fb)
    assert np.isclose(short_term.ft, 2 / 3 * wood.ft)
    assert np.isclose(short_term.fs, 2 / 3 * wood.fs)
    assert long_term.F_ref == wood.fc


@pytest.mark.parametrize("strength", [None, WoodLike(ft=1.0, fc=-1.0, fb=1.0, fs=1.0), "SS400"])
def test_bad_strength_data_raises(strength):
    with pytest.raises(MaterialDataError):
        allowable_stresses(strength, LoadDuration.LONG)


def test_compression_reduction_branches():
    E, F = 2.05e11, 235e6
    Lam = limiting_slenderness(E, F)
    assert np.isclose(Lam, math.pi * math.sqrt(E / (0.6 * F)))
    assert compression_reduction(0.0, E, F) == 1.0
    # Both branches meet at λ = Λ
    below = compression_reduction(Lam * (1 - 1e-9), E, F)
    above = compression_reduction(Lam * (1 + 1e-9), E, F)
    assert np.isclose(below, above, rtol=1e-3)
    assert np.isclose(compression_reduction(2 * Lam, E, F), 0.4155 / 4)
    assert compression_reduction(0.5 * Lam, E, F) < 1.0


def test_compression_column_uses_reduced_allowable():
    """Fixed-base column under axial load: ratio = |N|/A / (η·fc)."""
    E, A, I, L, P = 2.05e11, 2.34e-3, 1.84e-7, 3.0, 20e3
    nodes = [Node(0, 0.0, 0.0, support=Support.FIXED), Node(1, 0.0, L)]
    members = [Member(0, 0, 1, E=E, A=A, Iz=I, Zz=1e-5, strength=STEEL)]
    result = analyze(nodes, members, nodal_loads=[NodalLoad(1, py=P)])
    check = check_design(result).section_checks[0]

    slenderness = 0.5 * L / math.sqrt(I / A)
    eta = compression_reduction(slenderness, E, 235e6)
    assert np.isclose(check.N, -P)
    assert np.isclose(check.slenderness, slenderness)
    assert np.isclose(check.reduction, eta)
    assert eta < 1.0
    assert np.isclose(check.max_ratio, (P / A) / (eta * 235e6 / 1.5), rtol=1e-6)


def test_biaxial_bending_3d_sums_both_axes():
    E, A, L, P = 2.05e11, 5e-3, 2.0, 1000.0
    Zz, Zy = 2e-4, 5e-5
    nodes = [Node(0, 0.0, 0.0, 0.0, support=Support.FIXED), Node(1, L, 0.0, 0.0)]
    members = [Member(0, 0, 1, E=E, A=A, Iz=2e-5, Iy=4e-6, J=1e-6, Zz=Zz, Zy=Zy, strength=STEEL)]
    result = analyze(nodes, members, nodal_loads=[NodalLoad(1, py=P, pz=P)], dimension=3)
    check = check_design(result).section_checks[0]

    assert np.isclose(check.location, 0.0)
    assert np.isclose(abs(check.M), P * L, rtol=1e-9)
    assert np.isclose(abs(check.My), P * L, rtol=1e-9)
    expected = (P * L / Zz + P * L / Zy) / (235e6 / 1.5)
    assert np.isclose(check.max_ratio, expected, rtol=1e-6)


def test_compressed_strut_with_radius_of_gyration_only():
    """A pin-jointed strut given by A and iz alone still gets a compression check."""
    A, iz, L, P = 2.0e-3, 0.02, 3.0, 50e3
    member = Member(0, 0, 1, E=2.05e11, A=A, iz=iz, strength=STEEL,
                    end_i=Connectivity.PINNED, end_j=Connectivity.PINNED)
    forces = MemberForces(member_id=0, dimension=2, L=L,
                          end_forces=np.array([P, 0.0, 0.0, -P, 0.0, 0.0]),
                          w_local=np.zeros(3))
    check = check_member_section(member, forces)

    slenderness = L / iz
    eta = compression_reduction(slenderness, 2.05e11, 235e6)
    assert check.status is CheckStatus.OK
    assert np.isclose(check.N, -P)
    assert np.isclose(check.slenderness, slenderness)
    assert np.isclose(check.max_ratio, (P / A) / (eta * 235e6 / 1.5), rtol=1e-9)
