from __future__ import annotations

import pytest

from src.leo_portal.leo_portal.attendance.factory import CheckInPolicyFactory
from src.leo_portal.leo_portal.attendance.policies.geofenced_policy import GeofencedPolicy
from src.leo_portal.leo_portal.attendance.policies.open_policy import OpenPolicy
from src.leo_portal.leo_portal.common.geo import haversine_meters

from tests.fakes import make_event

COLOMBO = (6.9271, 79.8612)
KANDY = (7.2906, 80.6337)


def test_haversine_is_zero_for_same_point():
    assert haversine_meters(*COLOMBO, *COLOMBO) == 0


def test_haversine_is_symmetric():
    assert haversine_meters(*COLOMBO, *KANDY) == pytest.approx(haversine_meters(*KANDY, *COLOMBO))


def test_haversine_colombo_to_kandy_is_about_94_km():
    assert haversine_meters(*COLOMBO, *KANDY) == pytest.approx(94_000, rel=0.03)


def test_geofence_boundary_is_inclusive():
    event = make_event(1, latitude=0.0, longitude=0.0)
    distance = haversine_meters(0.0, 0.001, 0.0, 0.0)

    assert GeofencedPolicy(distance).decide(event=event, latitude=0.0, longitude=0.001).accepted
    assert not GeofencedPolicy(distance - 0.01).decide(event=event, latitude=0.0, longitude=0.001).accepted


def test_factory_picks_policy_by_event_coordinates():
    factory = CheckInPolicyFactory(radius_meters=500)

    assert isinstance(factory.for_event(make_event(1, latitude=6.9, longitude=79.8)), GeofencedPolicy)
    assert isinstance(factory.for_event(make_event(2)), OpenPolicy)


def test_geofence_accepts_position_near_venue():
    event = make_event(1, latitude=COLOMBO[0], longitude=COLOMBO[1])

    decision = GeofencedPolicy(500).decide(event=event, latitude=6.9290, longitude=79.8612)

    assert decision.accepted
    assert decision.distance_meters < 500


def test_geofence_rejects_far_position_with_distance_note():
    event = make_event(1, latitude=COLOMBO[0], longitude=COLOMBO[1])

    decision = GeofencedPolicy(500).decide(event=event, latitude=KANDY[0], longitude=KANDY[1])

    assert not decision.accepted
    assert decision.distance_meters > 90_000
    assert "limit 500 m" in decision.note


def test_geofence_requires_a_position():
    event = make_event(1, latitude=COLOMBO[0], longitude=COLOMBO[1])

    decision = GeofencedPolicy(500).decide(event=event, latitude=None, longitude=79.86)

    assert not decision.accepted
    assert decision.distance_meters is None


def test_open_policy_accepts_missing_position():
    assert OpenPolicy().decide(event=make_event(1), latitude=None, longitude=None).accepted
