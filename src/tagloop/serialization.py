"""Rendering of invocations, actions and storages into tag notation.

The output of this module is prompt text, not markup meant to be parsed
back strictly: attribute values and payloads are emitted as-is, without
escaping. A value containing a double quote, or a payload containing the
closing tag, will not survive a parse round trip.
"""

from typing import Iterable, Optional

from tagloop.constants import (
    COMPLETED_LABEL,
    CURRENT_TAG,
    NOT_COMPLETED_LABEL,
    PREVIOUS_TAG,
)
from tagloop.state.models import StorageType
from tagloop.state.storage import Storage
from tagloop.types import Action, Invocation


# =============================================================================
# Invocations and actions
# =============================================================================


def _render_tag(
    name: str,
    attributes: Optional[dict[str, str]],
    payload: Optional[str],
) -> str:
    xml = f"<{name}"
    if attributes:
        for key, value in attributes.items():
            xml += f' {key}="{value}"'
    xml += f">{payload or ''}</{name}>"
    return xml


def serialize_invocation(invocation: Invocation) -> str:
    """Render an invocation as <name attr="value"...>payload</name>."""
    return _render_tag(invocation.action, invocation.attributes, invocation.payload)


def serialize_action(action: Action) -> str:
    """Render an action's example call, used to teach the model its syntax."""
    return _render_tag(action.name(), action.attributes(), action.example_payload())


def serialize_actions(actions: Iterable[Action]) -> str:
    """Render the example calls of several actions, one per line."""
    return "\n".join(serialize_action(action) for action in actions)


# =============================================================================
# Storages
# =============================================================================


def serialize_storage(storage: Storage) -> str:
    """Render a storage for inclusion in a prompt.

    Args:
        storage: The storage to render.

    Returns:
        The rendered text, or "" if the storage is empty. Formats:
            TAGGED:           <name>\\n  - key=value\\n...</name>
            UNTAGGED:         <name>\\n  - value\\n...</name>
            COMPLETION:       <name>\\n  - value : COMPLETED\\n...</name>
            CURRENT_PREVIOUS: * Current name: value[\\n* Previous name: value]
    """
    entries = storage.snapshot()
    if not entries:
        return ""

    name = storage.name

    if storage.type is StorageType.CURRENT_PREVIOUS:
        by_key = {key: data for key, data, _ in entries}
        if CURRENT_TAG not in by_key:
            return ""
        text = f"* Current {name}: {by_key[CURRENT_TAG].strip()}"
        if PREVIOUS_TAG in by_key:
            text += f"\n* Previous {name}: {by_key[PREVIOUS_TAG].strip()}"
        return text

    lines = [f"<{name}>"]
    for key, data, complete in entries:
        if storage.type is StorageType.TAGGED:
            lines.append(f"  - {key}={data}")
        elif storage.type is StorageType.COMPLETION:
            label = COMPLETED_LABEL if complete else NOT_COMPLETED_LABEL
            lines.append(f"  - {data} : {label}")
        else:
            lines.append(f"  - {data}")
    lines.append(f"</{name}>")

    return "\n".join(lines)
