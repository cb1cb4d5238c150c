"""
Hand Breath - hand-controlled particle visualization.

A webcam hand (via MediaPipe) drives the zoom and rotation of a breathing
particle ring; without a hand the ring animates on its own. The control
pipeline is signal conditioning -> authority/target mapping -> animation.
"""

__version__ = "1.0.0"
