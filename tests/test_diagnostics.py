# File: tests/test_diagnostics.py
"""
TEST: Instability diagnostics
=============================

When the stiffness system cannot be solved, analyze() returns a result
without displacements and an InstabilityReport naming the likely cause.
"""

import numpy as np

from framecraft import Connectivity, Member, NodalLoad, Node, StructuralModel, Support, analyze
from framecraft.config import AnalysisConfig
from framecraft.kernel.diagnostics import diagnose_instability
from framecraft.kernel.solve import constrained_dofs


def _beam_plus_isolated_member():
    nodes = [
        Node(0, 0.0, 0.0, support=Support.PINNED),
        Node(1, 4.0, 0.0, support=Support.ROLLER),
        Node(2, 0.0, 3.0),
        Node(3, 4.0, 3.0),
    ]
    members = [
        Member(0, 0, 1, E=210e9, A=0.01, Iz=8e-6),
        Member(1, 2, 3, E=210e9, A=0.01, Iz=8e-6),
    ]
    return nodes, members


def test_isolated_member_flagged_as_mechanism():
    nodes, members = _beam_plus_isolated_member()
    result = analyze(nodes, members, nodal_loads=[NodalLoad(1, py=1000.0)])

    assert not result.ok
    assert result.displacements is None
    report = result.instability
    assert report is not None
    assert report.mechanism_members == [1]
    assert sorted(report.unconstrained_nodes) == [2, 3]
    assert report.has_findings
    # Solver message first, then the heuristics
    assert "unstable" in report.messages[0] or "Inconsistent" in report.messages[0]
    assert any("mechanism" in m for m in report.messages)


def test_hinged_span_inside_supported_beam():
    """Pin, hinge, hinge, roller: the middle span is a mechanism."""
    PINNED = Connectivity.PINNED
    nodes = [
        Node(0, 0.0, 0.0, support=Support.PINNED),
        Node(1, 3.0, 0.0),
        Node(2, 6.0, 0.0),
        Node(3, 9.0, 0.0, support=Support.ROLLER),
    ]
    members = [
        Member(0, 0, 1, E=210e9, A=0.01, Iz=8e-6, end_j=PINNED),
        Member(1, 1, 2, E=210e9, A=0.01, Iz=8e-6, end_i=PINNED, end_j=PINNED),
        Member(2, 2, 3, E=210e9, A=0.01, Iz=8e-6, end_i=PINNED),
    ]
    result = analyze(nodes, members, nodal_loads=[NodalLoad(1, py=1000.0)])

    assert not result.ok
    report = result.instability
    assert report.unconstrained_nodes == [1, 2]
    assert report.mechanism_members == [1]
    assert any("Member 1 (1-2)" in m for m in report.messages)
    print("✓ Hinged middle span flagged")


def test_null_space_scan_finds_rigid_body_modes():
    nodes, members = _beam_plus_isolated_member()
    result = analyze(nodes, members)
    report = result.instability

    # The floating member has three rigid-body modes, all within its DOFs
    assert set(report.null_space_dofs) <= set(range(6, 12))
    assert {6, 7, 9, 10} <= set(report.null_space_dofs)


def test_orphan_node_reported():
    nodes = [
        Node(0, 0.0, 0.0, support=Support.FIXED),
        Node(1, 3.0, 0.0),
        Node(5, 9.0, 9.0),
    ]
    members = [Member(0, 0, 1, E=210e9, A=0.01, Iz=8e-6)]
    result = analyze(nodes, members)

    report = result.instability
    assert not result.ok
    # The cantilever tip is unconstrained too, but only the orphan floats
    assert report.unconstrained_nodes == [1, 5]
    assert report.mechanism_members == []
    assert any("Node 5 has no support" in m for m in report.messages)
    assert not any("Node 1 has no support" in m for m in report.messages)
    # All three DOFs of the orphan node have zero stiffness
    assert report.zero_stiffness_dofs == [6, 7, 8]


def test_too_few_constraints_message():
    nodes = [Node(0, 0.0, 0.0, support=Support.ROLLER), Node(1, 3.0, 0.0, support=Support.ROLLER)]
    members = [Member(0, 0, 1, E=210e9, A=0.01, Iz=8e-6)]
    result = analyze(nodes, members)

    assert not result.ok
    assert any("needs at least 3" in m for m in result.instability.messages)
    # Both nodes are supported, so nothing is floating
    assert result.instability.unconstrained_nodes == []


def test_null_space_scan_bounded_by_config():
    nodes, members = _beam_plus_isolated_member()
    result = analyze(nodes, members, config=AnalysisConfig(null_space_max_dof=2))
    assert result.instability.null_space_dofs == []
    assert result.instability.mechanism_members == [1]


def test_diagnostics_never_raise():
    model = StructuralModel(
        nodes=[Node(0, 0.0, 0.0), Node(1, 1.0, 0.0)],
        members=[Member(0, 0, 1, E=1.0, A=1.0, Iz=1.0)],
    )
    K = np.full((6, 6), np.nan)
    report = diagnose_instability(model, K, constrained_dofs(model))
    assert report.messages
    assert any("could not run" in m for m in report.messages)
