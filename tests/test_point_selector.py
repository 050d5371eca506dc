"""
Tests for Point Selection
==========================
"""

import pytest
import sys
from pathlib import Path
from types import SimpleNamespace

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from armtrack.recording.point_selector import select_elbow_point, select_hand_point
from armtrack.types import Point3D


def lm(x, y, z=0.0):
    """Landmark-like object as delivered by MediaPipe."""
    return SimpleNamespace(x=x, y=y, z=z)


def make_pose(count=33, overrides=None):
    landmarks = [lm(i / 100.0, i / 100.0) for i in range(count)]
    for index, value in (overrides or {}).items():
        landmarks[index] = value
    return landmarks


class TestSelectHandPoint:
    """Test suite for wrist selection."""

    def test_wrist_of_first_hand(self):
        """Only the first hand's landmark 0 is used."""
        first = [lm(0.1, 0.2, 0.3)] + [lm(0.9, 0.9)] * 20
        second = [lm(0.5, 0.5, 0.5)] + [lm(0.9, 0.9)] * 20

        point = select_hand_point([first, second])

        assert point == Point3D(0.1, 0.2, 0.3)

    def test_returns_point3d(self):
        point = select_hand_point([[lm(1, 0, 0)]])

        assert isinstance(point, Point3D)
        assert isinstance(point.x, float)

    @pytest.mark.parametrize("sets", [None, [], [[]], [None]])
    def test_no_hand(self, sets):
        """No hands, or an empty first hand, gives no point."""
        assert select_hand_point(sets) is None

    def test_empty_first_hand_ignores_second(self):
        """A second hand is never promoted."""
        assert select_hand_point([[], [lm(0.4, 0.4)]]) is None


class TestSelectElbowPoint:
    """Test suite for elbow selection."""

    def test_prefers_right_elbow(self):
        pose = make_pose(overrides={13: lm(0.13, 0.13), 14: lm(0.14, 0.41, -0.1)})

        assert select_elbow_point(pose) == Point3D(0.14, 0.41, -0.1)

    def test_falls_back_to_left_when_right_missing(self):
        pose = make_pose(overrides={13: lm(0.3, 0.6), 14: None})

        assert select_elbow_point(pose) == Point3D(0.3, 0.6, 0.0)

    def test_falls_back_to_left_when_list_too_short(self):
        """Index 14 out of range counts as absent."""
        pose = make_pose(count=14, overrides={13: lm(0.25, 0.75)})

        assert select_elbow_point(pose) == Point3D(0.25, 0.75, 0.0)

    def test_neither_elbow(self):
        assert select_elbow_point(make_pose(count=13)) is None
        assert select_elbow_point(make_pose(overrides={13: None, 14: None})) is None

    @pytest.mark.parametrize("pose", [None, []])
    def test_no_pose(self, pose):
        assert select_elbow_point(pose) is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
