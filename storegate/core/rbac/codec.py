"""Decoding of the encoded per-permission action list.

The server ships each permission's actions as a JSON array inside a string,
e.g. ``'["create", "read"]'``. Decoding is one explicit step with an
empty-on-failure fallback so that the query logic never sees the encoded
form and the encoding can be swapped by passing another codec.
"""

import json
from typing import Any, Optional, Protocol, Sequence, Tuple

from storegate.common.logger import get_logger

from .errors import MalformedActionListError
from .models import dedupe_actions
from .signals import MalformedActionList, SignalHandler

logger = get_logger("codec")


class ActionListCodec(Protocol):
    """Turns the wire form of an action list into action names."""

    def decode(self, raw: Any) -> Tuple[str, ...]:
        """Decode ``raw`` or raise MalformedActionListError."""
        ...


class JsonActionListCodec:
    """Codec for JSON-array strings; decoded sequences pass through."""

    def decode(self, raw: Any) -> Tuple[str, ...]:
        if raw is None:
            return ()

        if isinstance(raw, (bytes, bytearray)):
            try:
                raw = raw.decode("utf-8")
            except UnicodeDecodeError as e:
                raise MalformedActionListError(raw, "not utf-8") from e

        if isinstance(raw, str):
            if not raw.strip():
                return ()
            try:
                value = json.loads(raw)
            except ValueError as e:
                raise MalformedActionListError(raw, "invalid JSON") from e
        else:
            value = raw

        if isinstance(value, (str, dict)) or not isinstance(value, Sequence):
            raise MalformedActionListError(raw, "not a list")

        for item in value:
            if not isinstance(item, str) or not item:
                raise MalformedActionListError(raw, "non-string action")

        return dedupe_actions(value)


DEFAULT_CODEC = JsonActionListCodec()


def decode_actions(
    raw: Any,
    *,
    permission_name: str = "",
    codec: Optional[ActionListCodec] = None,
    on_signal: Optional[SignalHandler] = None,
) -> Tuple[str, ...]:
    """Decode an action list, degrading to an empty tuple when malformed.

    Args:
        raw: Encoded action list as supplied by the data source
        permission_name: Name of the owning permission, for diagnostics
        codec: Codec to use (JSON arrays by default)
        on_signal: Receives a MalformedActionList record on failure

    Returns:
        De-duplicated action names in their original order, or ``()``
    """
    codec = codec or DEFAULT_CODEC
    try:
        return codec.decode(raw)
    except MalformedActionListError as e:
        reason = e.reason
    except (TypeError, ValueError) as e:
        # Third-party codecs may fail with their own error types
        reason = str(e)

    logger.warning(
        f"Permission {permission_name!r} has a malformed action list; "
        f"treating it as empty ({reason})"
    )
    if on_signal is not None:
        on_signal(MalformedActionList(permission_name=permission_name, raw=raw))
    return ()
