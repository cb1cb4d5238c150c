from types import SimpleNamespace

import numpy as np

from hand_breath.landmarks import (
    HAND_CONNECTIONS,
    NUM_LANDMARKS,
    extract_first_hand,
    to_landmark_array,
)


def _mp_hand(points):
    return SimpleNamespace(landmark=[SimpleNamespace(x=x, y=y, z=0.0) for x, y in points])


def test_extract_first_hand(frame_factory):
    first = frame_factory(angle_deg=10.0)
    second = frame_factory(angle_deg=80.0)
    results = SimpleNamespace(multi_hand_landmarks=[_mp_hand(first), _mp_hand(second)])

    landmarks = extract_first_hand(results)
    assert len(landmarks) == NUM_LANDMARKS
    assert [(p.x, p.y) for p in landmarks] == first


def test_extract_first_hand_without_hands():
    assert extract_first_hand(None) is None
    assert extract_first_hand(SimpleNamespace(multi_hand_landmarks=None)) is None
    assert extract_first_hand(SimpleNamespace(multi_hand_landmarks=[])) is None


def test_to_landmark_array_accepts_tuples_and_objects(frame_factory):
    points = frame_factory()
    from_tuples = to_landmark_array(points)
    from_objects = to_landmark_array(_mp_hand(points).landmark)
    assert from_tuples.shape == (NUM_LANDMARKS, 2)
    np.testing.assert_array_equal(from_tuples, from_objects)


def test_to_landmark_array_accepts_xyz_tuples(frame_factory):
    points = [(x, y, -0.05) for x, y in frame_factory()]
    assert to_landmark_array(points).shape == (NUM_LANDMARKS, 2)


def test_to_landmark_array_rejects_bad_frames(frame_factory):
    points = frame_factory()
    assert to_landmark_array(None) is None
    assert to_landmark_array(points[:-1]) is None
    assert to_landmark_array([(0.5,)] * NUM_LANDMARKS) is None
    assert to_landmark_array([(float("nan"), 0.5)] + points[1:]) is None
    assert to_landmark_array([(1.01, 0.5)] + points[1:]) is None
    assert to_landmark_array(42) is None


def test_connections_reference_valid_points():
    for start, end in HAND_CONNECTIONS:
        assert 0 <= start < NUM_LANDMARKS
        assert 0 <= end < NUM_LANDMARKS
