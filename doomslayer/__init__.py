"""
Doomslayer

Webcam-based doomscrolling detection: face landmarks and a phone detector
are fused into a debounced attention state.
"""

__version__ = "1.0.0"
__author__ = "Doomslayer Team"
__description__ = "Real-time doomscrolling detection using face landmarks and object detection"
