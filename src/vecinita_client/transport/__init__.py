"""Transport primitives used by the gateway client."""

from .sse import *  # noqa: F401, F403
