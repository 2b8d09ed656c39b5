"""
Tests for the observer and its companion
"""
import math

import pytest

from terrastream.constants import COMPANION_LEAD, EYE_HEIGHT, TURN_SPEED, WALK_SPEED
from terrastream.entities import Companion, Observer


def test_observer_defaults():
    """Test that a new observer faces north at eye height offset"""
    observer = Observer()
    assert observer.get_position() == (0.0, 0.0)
    assert observer.forward == (0.0, 1.0)
    assert observer.height_offset == EYE_HEIGHT


def test_observer_face():
    """Test pointing the observer along a direction"""
    observer = Observer()
    observer.face(1.0, 0.0)
    fx, fz = observer.forward
    assert fx == pytest.approx(1.0)
    assert fz == pytest.approx(0.0, abs=1e-12)

    observer.face(0.0, -2.0)
    assert observer.forward == pytest.approx((0.0, -1.0), abs=1e-12)


def test_observer_walks_and_turns():
    """Test movement flags"""
    observer = Observer(2.0, 3.0)
    observer.move_forward = True
    observer.update(0.5)
    assert observer.get_position() == pytest.approx((2.0, 3.0 + WALK_SPEED * 0.5))

    observer.move_forward = False
    observer.turn_right = True
    observer.update(0.25)
    assert observer.yaw == pytest.approx(TURN_SPEED * 0.25)

    # Both directions cancel out
    observer.turn_right = False
    observer.move_forward = True
    observer.move_back = True
    before = observer.get_position()
    observer.update(1.0)
    assert observer.get_position() == pytest.approx(before)


def test_companion_walks_ahead():
    """Test that the companion settles in front of the observer"""
    observer = Observer(10.0, -4.0)
    companion = Companion(observer)
    assert companion.get_position() == pytest.approx((10.0, -4.0 + COMPANION_LEAD))

    observer.face(-1.0, 0.0)
    for _ in range(300):
        companion.update(1.0 / 60.0)
    assert companion.x == pytest.approx(10.0 - COMPANION_LEAD, abs=1e-3)
    assert companion.z == pytest.approx(-4.0, abs=1e-3)
    assert math.isclose(companion.height_offset, 0.9)
