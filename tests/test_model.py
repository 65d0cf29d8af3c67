# File: tests/test_model.py
"""
TEST: Model records, validation, materials and the analysis entry points
"""

import math

import numpy as np
import pandas as pd
import pytest

from framecraft import (
    MATERIAL_PROPERTIES,
    Connectivity,
    GeometryError,
    LoadDuration,
    Material,
    Member,
    MemberLoad,
    MissingPropertyError,
    NodalLoad,
    Node,
    StructuralModel,
    Support,
    WoodLike,
    WoodSpecies,
    analyze,
    run,
)
from framecraft.checks import CheckStatus
from framecraft.kernel.buckling import BucklingStatus


def _frame_model(**overrides):
    kw = dict(
        nodes=[Node(0, 0.0, 0.0, support=Support.FIXED), Node(1, 4.0, 0.0)],
        members=[Member(0, 0, 1, E=2.05e11, A=5e-3, Iz=8e-6, Zz=1e-4, material=Material.STEEL)],
        nodal_loads=[NodalLoad(1, py=2000.0)],
    )
    kw.update(overrides)
    return StructuralModel(**kw)


def test_member_derived_properties():
    m = Member(0, 0, 1, E=200e9, A=0.01, Iz=8e-6, Iy=2e-6, nu=0.25, iy=0.05)
    assert np.isclose(m.G, 200e9 / 2.5)
    assert np.isclose(m.radius_of_gyration("z"), math.sqrt(8e-6 / 0.01))
    assert m.radius_of_gyration("y") == 0.05
    assert Member(1, 0, 1, E=1.0, A=1.0).radius_of_gyration("y") is None


def test_unit_weight_from_material_and_override():
    m = Member(0, 0, 1, E=1.0, A=0.02, material=Material.WOOD)
    assert np.isclose(m.unit_weight(9.81), MATERIAL_PROPERTIES[Material.WOOD].density * 0.02 * 9.81)
    assert np.isclose(Member(0, 0, 1, E=1.0, A=0.02, density=1000.0).unit_weight(10.0), 200.0)
    assert Member(0, 0, 1, E=1.0, A=0.02).unit_weight(9.81) == 0.0


def test_wood_species_table():
    wood = WoodLike.from_species(WoodSpecies.HINOKI)
    assert wood.fb > wood.fc > wood.ft > wood.fs > 0.0


def test_node_lookup_by_id():
    model = _frame_model(nodes=[Node(10, 0.0, 0.0, support=Support.FIXED), Node(20, 4.0, 0.0)],
                         members=[Member(0, 10, 20, E=1.0, A=1.0, Iz=1.0)],
                         nodal_loads=[])
    assert model.node_index(20) == 1
    assert model.node(10).support is Support.FIXED
    assert model.ndof == 6
    with pytest.raises(MissingPropertyError):
        model.node_index(30)


def test_member_connecting_node_to_itself():
    model = _frame_model(members=[Member(3, 1, 1, E=1.0, A=1.0, Iz=1.0)])
    with pytest.raises(GeometryError) as info:
        model.validate()
    assert info.value.member_id == 3


def test_zero_length_member_aborts_analysis():
    nodes = [Node(0, 0.0, 0.0, support=Support.FIXED), Node(1, 0.0, 0.0)]
    with pytest.raises(GeometryError):
        analyze(nodes, [Member(0, 0, 1, E=1.0, A=1.0, Iz=1.0)])


@pytest.mark.parametrize("member", [
    Member(0, 0, 1, E=0.0, A=5e-3, Iz=8e-6),
    Member(0, 0, 1, E=2e11, A=None, Iz=8e-6),
    Member(0, 0, 1, E=2e11, A=5e-3),                 # rigid ends need Iz
    Member(0, 0, 1, E=2e11, A=5e-3, Iz=float("nan")),
    Member(0, 0, 9, E=2e11, A=5e-3, Iz=8e-6),         # dangling node
])
def test_invalid_member_rejected(member):
    with pytest.raises(MissingPropertyError):
        _frame_model(members=[member]).validate()


def test_error_names_offending_member():
    with pytest.raises(MissingPropertyError) as info:
        _frame_model(members=[Member(42, 0, 1, E=2e11, A=-1.0, Iz=8e-6)]).validate()
    assert info.value.member_id == 42
    assert "42" in str(info.value)


def test_3d_requires_iy_and_j_for_rigid_members():
    model = _frame_model(dimension=3)
    with pytest.raises(MissingPropertyError):
        model.validate()


def test_truss_member_needs_no_inertia():
    _frame_model(members=[Member(0, 0, 1, E=2e11, A=5e-3,
                                 end_i=Connectivity.PINNED, end_j=Connectivity.PINNED)]).validate()


def test_duplicate_ids_and_bad_prescribed():
    with pytest.raises(MissingPropertyError):
        _frame_model(nodes=[Node(0, 0.0, 0.0), Node(0, 1.0, 0.0)]).validate()
    with pytest.raises(MissingPropertyError):
        _frame_model(nodes=[Node(0, 0.0, 0.0, prescribed=(0, 0, 0, 0)), Node(1, 4.0, 0.0)]).validate()


def test_analysis_works_on_a_snapshot():
    model = _frame_model()
    result, _ = run(model)
    assert result.model is not model
    assert result.model == model
    assert result.model.nodes[0] is not model.nodes[0]


def test_run_summary_frame():
    model = _frame_model(member_loads=[MemberLoad(0, wy=-500.0)])
    result, report = run(model, LoadDuration.SHORT)

    assert result.ok
    assert report.duration is LoadDuration.SHORT
    assert report.section_checks[0].status is CheckStatus.OK
    assert report.buckling[0].status is BucklingStatus.SAFE

    df = report.summary()
    assert isinstance(df, pd.DataFrame)
    assert list(df.index) == [0]
    assert df.loc[0, "section_status"] == "OK"
    assert df.loc[0, "buckling_status"] == "safe"
    assert np.isclose(df.loc[0, "max_ratio"], report.section_checks[0].max_ratio)


def test_duration_accepts_string_value():
    result = analyze(_frame_model().nodes, _frame_model().members, duration="short")
    assert result.duration is LoadDuration.SHORT
