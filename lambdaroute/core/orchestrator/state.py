"""
state.py

States of one blue/green run. A run moves forward only; nothing is re-entered.
"""

from enum import Enum


class BlueGreenState(str, Enum):
    INVOKING = "INVOKING"
    POLLING = "POLLING"
    COMPARING = "COMPARING"
    PROMOTING = "PROMOTING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"


_ALLOWED_TRANSITIONS = {
    BlueGreenState.INVOKING: {BlueGreenState.POLLING, BlueGreenState.FAILED},
    BlueGreenState.POLLING: {BlueGreenState.COMPARING, BlueGreenState.FAILED},
    BlueGreenState.COMPARING: {BlueGreenState.PROMOTING, BlueGreenState.FAILED},
    BlueGreenState.PROMOTING: {BlueGreenState.SUCCEEDED, BlueGreenState.FAILED},
    BlueGreenState.SUCCEEDED: set(),
    BlueGreenState.FAILED: set(),
}


def can_transition(current: BlueGreenState, target: BlueGreenState) -> bool:
    return target in _ALLOWED_TRANSITIONS[current]
