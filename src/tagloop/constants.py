"""Shared constants for tagloop tag parsing and state rendering.

This module centralizes the magic strings used by the parser, the
serializers and the storage layer so they stay consistent.
"""

# Reserved keys of a CURRENT_PREVIOUS storage
CURRENT_TAG = "__current"
PREVIOUS_TAG = "__previous"

# Regex pattern for the end of a tag name
# A '<' ends the candidate without a name; the scan retries from it
NAME_TERMINATOR_PATTERN = r"[> <]"

# Regex pattern for a closing tag; names never contain '<', '>' or spaces
CLOSE_TAG_PATTERN = r"</(?P<name>[^<> ]+)>"

# Regex pattern for attributes inside an opening tag
# Matches: key="value" (value must be non-empty, no embedded quotes)
# Keys cannot contain whitespace: my key="v" reads as key="v"
ATTRIBUTE_PATTERN = r'(?P<key>[^\s="]+)="(?P<value>[^"]+)"'

# Completion storage labels
COMPLETED_LABEL = "COMPLETED"
NOT_COMPLETED_LABEL = "not completed"

# Separator between rendered storages in a full state dump
STATE_SEPARATOR = "\n\n"
