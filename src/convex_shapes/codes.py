"""Function kind constants for registered Convex functions.

These constants prevent stringly-typed kinds and match the names the
downstream code generator reads from the ``type`` field of a function record.
"""

from enum import Enum


class FunctionKind(str, Enum):
    """Registrar kinds, in their wire spelling."""

    # Public
    QUERY = "query"
    MUTATION = "mutation"
    ACTION = "action"
    HTTP_ACTION = "httpAction"

    # Internal (not callable from clients)
    INTERNAL_QUERY = "internalQuery"
    INTERNAL_MUTATION = "internalMutation"
    INTERNAL_ACTION = "internalAction"
