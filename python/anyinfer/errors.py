"""
Exceptions raised by the anyinfer client.

Every error names the call that failed (``ServerLive``, ``ModelInfer``, ...)
and the underlying cause, so a single line is enough to report it.
"""

from typing import Optional


class InferenceClientError(Exception):
    """Base class for client errors."""

    def __init__(self, call: Optional[str], cause: object):
        self.call = call
        self.cause = cause
        if call:
            super().__init__(f"{call} failed: {cause}")
        else:
            super().__init__(str(cause))


class TransportError(InferenceClientError):
    """The channel is unreachable or the RPC failed on the server side."""


class DeadlineExceeded(InferenceClientError):
    """The call did not complete within its deadline."""


class MalformedResponse(InferenceClientError):
    """Response bytes do not match the expected element count or width."""
