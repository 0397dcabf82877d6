"""
Role list codec.

The Users.Roles column has drifted over time: rows hold a JSON array, a
comma-separated string, a single bare label, or (depending on the column type
and driver) the raw bytes of any of those. ``decode_roles`` accepts all of them
and always hands back a plain list of labels; it never raises, because a bad
Roles value must not break a page that only wants to display it.
"""
import json
import logging
from enum import Enum
from typing import Any, List, Sequence

logger = logging.getLogger(__name__)


class RolesFormat(str, Enum):
    JSON = "json"
    CSV = "csv"


def _clean(items) -> List[str]:
    out = []
    for item in items:
        if item is None:
            continue
        label = str(item).strip()
        if label:
            out.append(label)
    return out


def _split_csv(text: str) -> List[str]:
    if "," in text:
        return _clean(text.split(","))
    return [text] if text else []


def decode_roles(raw: Any) -> List[str]:
    """Decode a stored Roles value into an ordered list of role labels."""
    # Driver already deserialized a JSON column
    if isinstance(raw, (list, tuple)):
        return list(raw)
    if raw is None:
        return []

    if isinstance(raw, (bytes, bytearray, memoryview)):
        text = bytes(raw).decode("utf-8", errors="replace")
    elif isinstance(raw, dict):
        roles = raw.get("roles")
        return _clean(roles) if isinstance(roles, (list, tuple)) else []
    else:
        text = str(raw)

    text = text.strip()
    if text.startswith("[") or text.startswith("{"):
        try:
            parsed = json.loads(text)
        except ValueError:
            logger.debug("Roles value is not valid JSON, falling back to text: %r", text)
        else:
            if isinstance(parsed, list):
                return _clean(parsed)
            if isinstance(parsed, dict) and isinstance(parsed.get("roles"), list):
                return _clean(parsed["roles"])

    return _split_csv(text)


def encode_roles(roles: Sequence[str], fmt: RolesFormat = RolesFormat.JSON) -> str:
    """Encode role labels for storage, as a JSON array or comma-joined text."""
    # A bare string is a stored value, not a list of labels
    if isinstance(roles, (str, bytes)):
        roles = decode_roles(roles)
    labels = _clean(roles or [])
    if RolesFormat(fmt) is RolesFormat.CSV:
        return ",".join(labels)
    return json.dumps(labels, separators=(",", ":"))
