"""
Actions Module - Debounced Gesture Commands
============================================
Maps gesture changes to session commands. A command fires only on the tick
a gesture changes and only after the previous command's cooldown expired.
"""

from enum import Enum, auto
from typing import NamedTuple, Optional

from .gestures import Gesture


# Minimum gap between two dispatched commands
ACTION_COOLDOWN_MS = 1000.0


class Command(Enum):
    """Commands the gesture stream can trigger."""
    CLEAR = auto()
    ANALYZE = auto()


_GESTURE_COMMANDS = {
    Gesture.FIST: Command.CLEAR,
    Gesture.OPEN_HAND: Command.ANALYZE,
}


class Dispatch(NamedTuple):
    command: Optional[Command]
    cooldown_end_ms: float


def dispatch_action(
    gesture: Gesture,
    now_ms: float,
    last_gesture: Gesture,
    cooldown_end_ms: float,
    cooldown_ms: float = ACTION_COOLDOWN_MS
) -> Dispatch:
    """
    Decide whether this tick fires a command.

    Only the dispatch is gated here. The caller still latches
    last_gesture = gesture every tick, so a held gesture never re-fires,
    and a different gesture can fire as soon as the cooldown is over.

    Args:
        gesture: Gesture classified this tick
        now_ms: Event clock in milliseconds
        last_gesture: Gesture of the previous tick
        cooldown_end_ms: Time before which no command may fire

    Returns:
        Dispatch with the command (or None) and the updated cooldown end
    """
    if gesture == last_gesture or now_ms <= cooldown_end_ms:
        return Dispatch(None, cooldown_end_ms)

    command = _GESTURE_COMMANDS.get(gesture)
    if command is None:
        return Dispatch(None, cooldown_end_ms)

    return Dispatch(command, now_ms + cooldown_ms)
