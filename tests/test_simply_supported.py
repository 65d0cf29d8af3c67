# File: tests/test_simply_supported.py
"""
TEST: SIMPLY SUPPORTED BEAMS
============================

Meshed beam checks against closed-form beam theory:

- Midspan point load:    δ = PL³/(48EI),   R = P/2
- Uniform load w:        δ = 5wL⁴/(384EI), R = wL/2

The global stiffness matrix assembled from the members must be symmetric
(reciprocity) whatever the end releases.
"""

import numpy as np

from framecraft import (
    Connectivity,
    Member,
    MemberLoad,
    NodalLoad,
    Node,
    StructuralModel,
    Support,
    analyze,
)
from framecraft.elements import member_matrices
from framecraft.kernel.assemble import assemble_global_K
from framecraft.kernel.dof import DOFManager


def _meshed_beam(L, n_elem, E, I, A):
    nodes = []
    for k in range(n_elem + 1):
        support = Support.FREE
        if k == 0:
            support = Support.PINNED
        elif k == n_elem:
            support = Support.ROLLER
        nodes.append(Node(k, k * L / n_elem, 0.0, support=support))
    members = [Member(k, k, k + 1, E=E, A=A, Iz=I) for k in range(n_elem)]
    return nodes, members


def test_simply_supported_midspan_pointload():
    L, E, I, A, P = 6.0, 210e9, 8.0e-6, 0.01, 12e3
    nodes, members = _meshed_beam(L, 4, E, I, A)
    result = analyze(nodes, members, nodal_loads=[NodalLoad(2, py=P)])

    mid = result.nodal_displacements()[2]
    assert np.isclose(mid["uy"], -P * L**3 / (48 * E * I), rtol=1e-9)

    reactions = result.support_reactions()
    assert np.isclose(reactions[0]["Ry"], P / 2)
    assert np.isclose(reactions[4]["Ry"], P / 2)
    print(f"✓ Midspan deflection {mid['uy'] * 1000:.3f} mm")


def test_simply_supported_udl_deflection():
    """Equivalent nodal loads make the nodal values exact at any mesh density."""
    L, E, I, A, w = 8.0, 210e9, 2.0e-5, 0.01, 5000.0
    n_elem = 10
    nodes, members = _meshed_beam(L, n_elem, E, I, A)
    loads = [MemberLoad(k, wy=-w) for k in range(n_elem)]
    result = analyze(nodes, members, member_loads=loads)

    mid = result.nodal_displacements()[n_elem // 2]
    assert np.isclose(mid["uy"], -5 * w * L**4 / (384 * E * I), rtol=1e-9)

    reactions = result.support_reactions()
    assert np.isclose(reactions[0]["Ry"], w * L / 2)
    assert np.isclose(reactions[n_elem]["Ry"], w * L / 2)

    # Midspan moment from the member on the left of midspan
    forces = result.member_forces[n_elem // 2 - 1]
    assert np.isclose(forces.end_moments()[1], w * L**2 / 8, rtol=1e-9)


def test_global_stiffness_symmetric():
    nodes, members = _meshed_beam(6.0, 3, 210e9, 8e-6, 0.01)
    members[1] = Member(1, 1, 2, E=210e9, A=0.01, Iz=8e-6, end_i=Connectivity.PINNED)
    model = StructuralModel(nodes=nodes, members=members)

    dof = DOFManager.for_model(model)
    K = assemble_global_K(
        model.ndof,
        [(dof.member_dof_map(m), member_matrices(model, m).k_global) for m in model.members],
    )
    np.testing.assert_allclose(K, K.T, rtol=1e-10, atol=1e-6)
    print("✓ Stiffness matrix is symmetric (reciprocity holds)")
