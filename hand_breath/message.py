"""
Status message published to UI clients.

One ``HandUpdate`` is emitted per processed detection frame. It is for display
only and never feeds back into the control pipeline.
"""

import json
import math
import time
from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class HandUpdate:
    """
    Hand status for one detection frame.

    Attributes:
        detected: Whether a usable hand was found
        distance: Smoothed distance, 0 (close) .. 1 (far)
        rotation: Smoothed rotation in degrees, (-180, 180]
        ts_ms: Timestamp in milliseconds (monotonic)
    """
    detected: bool
    distance: float
    rotation: float
    ts_ms: int

    def to_json(self) -> str:
        """Serialize to JSON string."""
        return json.dumps(asdict(self))

    @classmethod
    def from_json(cls, data: str) -> "HandUpdate":
        """
        Deserialize from JSON string.

        Raises:
            KeyError: a field is missing
            ValueError: malformed JSON or non-finite values
        """
        d = json.loads(data)
        distance = float(d["distance"])
        rotation = float(d["rotation"])
        if not (math.isfinite(distance) and math.isfinite(rotation)):
            raise ValueError(f"non-finite hand state: distance={distance}, rotation={rotation}")
        return cls(
            detected=bool(d["detected"]),
            distance=distance,
            rotation=rotation,
            ts_ms=int(d["ts_ms"]),
        )


def create_hand_update(detected: bool, distance: float, rotation: float) -> HandUpdate:
    """Create a HandUpdate stamped with the current monotonic time."""
    return HandUpdate(
        detected=detected,
        distance=distance,
        rotation=rotation,
        ts_ms=int(time.monotonic() * 1000),
    )
