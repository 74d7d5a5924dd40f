"""Domain models for the agent gateway client.

Re-exports every public symbol so imports like
``from vecinita_client.models import CompleteEvent`` work.
"""

from .constants import *  # noqa: F401, F403
from .events import *  # noqa: F401, F403
from .query import *  # noqa: F401, F403
from .responses import *  # noqa: F401, F403
