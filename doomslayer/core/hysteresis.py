"""
Hysteresis State Machine

Turns the noisy per-frame raw detection into a stable classification. A state
is only committed after `detection_threshold` identical raw outcomes in a row;
anything shorter reads as "monitoring".
"""

from .engine_state import EngineState
from .types import Classification


def update_hysteresis(state: EngineState, raw_detection: bool,
                      detection_threshold: int) -> Classification:
    """
    Count one raw outcome and return the resulting classification.

    Each outcome increments its own counter and zeroes the opposing one, so a
    single dissenting frame restarts the run.
    """
    if raw_detection:
        state.consecutive_detected += 1
        state.consecutive_normal = 0
    else:
        state.consecutive_normal += 1
        state.consecutive_detected = 0

    if state.consecutive_detected >= detection_threshold:
        state.classification = Classification.DOOMSCROLLING
    elif state.consecutive_normal >= detection_threshold:
        state.classification = Classification.NORMAL
    else:
        state.classification = Classification.MONITORING

    return state.classification


def apply_no_face(state: EngineState, phone_detected: bool) -> Classification:
    """
    Immediate override for ticks without a face.

    Phone evidence alone commits doomscrolling without debounce; otherwise the
    tick reports no-face. Counters are left untouched so a returning face
    resumes the run where it left off.
    """
    if phone_detected:
        state.classification = Classification.DOOMSCROLLING
    else:
        state.classification = Classification.NO_FACE
    return state.classification
