# File: tests/test_cantilever.py
"""
TEST: Cantilever under tip load (2D and 3D)
===========================================

Euler-Bernoulli cantilever, fixed at x = 0, point load P at the tip:

    δ_tip = PL³ / (3EI)
    θ_tip = PL² / (2EI)
    M_fixed = P·L

Nodal loads use the gravity-positive input convention by default: a
positive py pushes the node DOWN (see AnalysisConfig.invert_nodal_forces).
"""

import numpy as np

from framecraft import (
    AnalysisConfig,
    Member,
    NodalLoad,
    Node,
    Support,
    analyze,
)


def test_cantilever_tip_load_deflection():
    L = 3.0
    E = 210e9
    I = 8.0e-6
    A = 0.01
    P = 1000.0

    nodes = [
        Node(0, 0.0, 0.0, support=Support.FIXED),
        Node(1, L, 0.0),
    ]
    members = [Member(0, 0, 1, E=E, A=A, Iz=I)]
    result = analyze(nodes, members, nodal_loads=[NodalLoad(1, py=P)])

    assert result.ok
    d = result.displacements
    uy_tip = d[3 * 1 + 1]
    rz_tip = d[3 * 1 + 2]

    assert np.isclose(uy_tip, -P * L**3 / (3 * E * I), rtol=1e-9)
    assert np.isclose(rz_tip, -P * L**2 / (2 * E * I), rtol=1e-9)

    # Reaction sanity: fixed-end Fy should be +P, moment +PL (counterclockwise)
    R = result.reactions
    assert np.isclose(R[1], P, rtol=1e-9)
    assert np.isclose(R[2], P * L, rtol=1e-9)
    assert np.isclose(R[0], 0.0, atol=1e-9)


def test_cantilever_end_forces():
    """Fixed end: hogging moment −PL, tip moment 0, shear P along the span."""
    L, E, I, A, P = 3.0, 210e9, 8.0e-6, 0.01, 1000.0
    nodes = [Node(0, 0.0, 0.0, support=Support.FIXED), Node(1, L, 0.0)]
    members = [Member(0, 0, 1, E=E, A=A, Iz=I)]
    result = analyze(nodes, members, nodal_loads=[NodalLoad(1, py=P)])

    forces = result.member_forces[0]
    M_i, M_j = forces.end_moments()
    assert np.isclose(M_i, -P * L, rtol=1e-9)
    assert np.isclose(M_j, 0.0, atol=1e-6)
    assert np.isclose(forces["Q_i"], P, rtol=1e-9)
    assert np.isclose(forces.N, 0.0, atol=1e-6)

    # Moment varies linearly from −PL to 0
    assert np.isclose(forces.moment_at(L / 2), -P * L / 2, rtol=1e-9)


def test_end_to_end_steel_cantilever():
    """
    Node A (0,0,0) fixed, node B (4,0,0) free, E = 2.05e5 N/mm²,
    A = 2340 mm², I = 1.84e5 mm⁴, −10 kN vertical tip load.

    Loads are given in plain global axes here (no sign inversion).
    """
    E = 2.05e11        # Pa
    A = 2340e-6        # m²
    I = 1.84e5 * 1e-12  # m⁴
    L = 4.0
    P = 10e3

    config = AnalysisConfig(invert_nodal_forces=False)
    nodes = [Node(1, 0.0, 0.0, 0.0, support=Support.FIXED), Node(2, L, 0.0, 0.0)]
    members = [Member(1, 1, 2, E=E, A=A, Iz=I)]
    result = analyze(nodes, members, nodal_loads=[NodalLoad(2, py=-P)], config=config)

    tip = result.nodal_displacements()[2]
    reaction = result.support_reactions()[1]

    delta = P * L**3 / (3 * E * I)
    assert np.isclose(tip["uy"], -delta, rtol=0.01)
    assert np.isclose(reaction["Ry"], P, rtol=0.01)
    assert np.isclose(reaction["Mz"], P * L, rtol=0.01)
    assert np.isclose(result.member_forces[1].end_moments()[0], -P * L, rtol=0.01)
    print(f"✓ Tip deflection {tip['uy']:.4f} m, fixed-end moment {reaction['Mz'] / 1e3:.1f} kN·m")


def test_default_input_convention_matches_plain_axes():
    """A positive raw py with inversion equals a negative py without it."""
    L, E, I, A, P = 4.0, 2.05e11, 1.84e-7, 2.34e-3, 10e3
    nodes = [Node(0, 0.0, 0.0, support=Support.FIXED), Node(1, L, 0.0)]
    members = [Member(0, 0, 1, E=E, A=A, Iz=I)]

    inverted = analyze(nodes, members, nodal_loads=[NodalLoad(1, py=P, mz=500.0)])
    plain = analyze(
        nodes, members, nodal_loads=[NodalLoad(1, py=-P, mz=500.0)],
        config=AnalysisConfig(invert_nodal_forces=False),
    )
    np.testing.assert_allclose(inverted.displacements, plain.displacements, rtol=1e-12)


def test_cantilever_3d_biaxial_and_torsion():
    """
    Horizontal 3D cantilever along X: local y = global Y, local z = global Z.
    py bends about local z (Iz), pz about local y (Iy), mx twists (GJ).
    """
    L, E, A = 2.5, 200e9, 0.005
    Iz, Iy, J = 8.0e-6, 2.0e-6, 1.0e-6
    nu = 0.3
    G = E / (2 * (1 + nu))
    P, T = 2000.0, 300.0

    nodes = [
        Node(0, 0.0, 0.0, 0.0, support=Support.FIXED),
        Node(1, L, 0.0, 0.0),
    ]
    members = [Member(0, 0, 1, E=E, A=A, Iz=Iz, Iy=Iy, J=J, nu=nu)]
    loads = [NodalLoad(1, py=P, pz=P, mx=T)]
    result = analyze(nodes, members, nodal_loads=loads, dimension=3)

    tip = result.nodal_displacements()[1]
    assert np.isclose(tip["uy"], -P * L**3 / (3 * E * Iz), rtol=1e-9)
    assert np.isclose(tip["uz"], -P * L**3 / (3 * E * Iy), rtol=1e-9)
    # Tip moving to −Z is a positive rotation about +Y
    assert np.isclose(tip["ry"], P * L**2 / (2 * E * Iy), rtol=1e-9)
    assert np.isclose(tip["rz"], -P * L**2 / (2 * E * Iz), rtol=1e-9)
    assert np.isclose(tip["rx"], T * L / (G * J), rtol=1e-9)

    base = result.support_reactions()[0]
    assert np.isclose(base["Ry"], P, rtol=1e-9)
    assert np.isclose(base["Rz"], P, rtol=1e-9)
    assert np.isclose(base["Mx"], -T, rtol=1e-9)
    assert np.isclose(base["Mz"], P * L, rtol=1e-9)
    assert np.isclose(base["My"], -P * L, rtol=1e-9)
