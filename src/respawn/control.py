"""Control channel framing.

Each control message travels as one JSON line of the form
``{"respawn": "<tag>"}``. Lines that are not shaped like that are not control
frames and are left to the caller (the supervisor forwards them as worker
output).
"""

from typing import cast

import orjson

from respawn.enums import ControlMessage
from respawn.exceptions import ProtocolError

CONTROL_KEY = "respawn"

MAX_FRAME_BYTES: int = 4096
"""Upper bound for a single frame, delimiter included."""

FRAME_DELIMITER = b"\n"


def encode_message(message: ControlMessage) -> bytes:
    """Encode a control message as a newline-terminated frame.

    Args:
        message: The message to encode.

    Returns:
        The frame bytes, including the trailing newline.
    """
    return orjson.dumps({CONTROL_KEY: message.value}) + FRAME_DELIMITER


def decode_message(frame: bytes | str) -> ControlMessage | None:
    """Decode a single frame into a control message.

    Args:
        frame: One line read from the control channel, with or without its
            trailing newline.

    Returns:
        The decoded message, or None if the frame is well formed but carries a
        tag this version does not know. Unknown tags are ignored by both ends.

    Raises:
        ProtocolError: If the frame is not a control frame at all.
    """
    raw = frame.strip()
    if not raw:
        msg = "Empty control frame"
        raise ProtocolError(msg, frame=frame)

    try:
        payload = cast("object", orjson.loads(raw))
    except orjson.JSONDecodeError as e:
        msg = f"Control frame is not valid JSON: {e}"
        raise ProtocolError(msg, frame=frame) from e

    if not isinstance(payload, dict) or CONTROL_KEY not in payload:
        msg = "Control frame is missing the control key"
        raise ProtocolError(msg, frame=frame)

    tag = cast("dict[str, object]", payload)[CONTROL_KEY]
    if not isinstance(tag, str):
        return None

    try:
        return ControlMessage(tag)
    except ValueError:
        return None
