"""Stream event type and wire parameter constants."""

# ---------------------------------------------------------------------------
# Event type constants; import these instead of duplicating strings.
# ---------------------------------------------------------------------------

EVENT_TYPE_THINKING = "thinking"
EVENT_TYPE_TOKEN = "token"
EVENT_TYPE_SOURCE = "source"
EVENT_TYPE_TOOL_EVENT = "tool_event"
EVENT_TYPE_CLARIFICATION = "clarification"
EVENT_TYPE_CLARIFICATION_REQUEST = "clarification-request"
EVENT_TYPE_COMPLETE = "complete"
EVENT_TYPE_ERROR = "error"

VALID_EVENT_TYPES = frozenset(
    {
        EVENT_TYPE_THINKING,
        EVENT_TYPE_TOKEN,
        EVENT_TYPE_SOURCE,
        EVENT_TYPE_TOOL_EVENT,
        EVENT_TYPE_CLARIFICATION,
        EVENT_TYPE_CLARIFICATION_REQUEST,
        EVENT_TYPE_COMPLETE,
        EVENT_TYPE_ERROR,
    }
)

# A stream ends on exactly one of these.
TERMINAL_EVENT_TYPES = frozenset({EVENT_TYPE_COMPLETE, EVENT_TYPE_ERROR})

# Tool event phases
TOOL_PHASE_START = "start"
TOOL_PHASE_RESULT = "result"
TOOL_PHASE_ERROR = "error"

# Supported answer languages
LANG_EN = "en"
LANG_ES = "es"

# ---------------------------------------------------------------------------
# Query-string parameter names, in wire order.
# ---------------------------------------------------------------------------

PARAM_QUESTION = "question"
PARAM_THREAD_ID = "thread_id"
PARAM_LANG = "lang"
PARAM_PROVIDER = "provider"
PARAM_MODEL = "model"
PARAM_CLARIFICATION_RESPONSE = "clarification_response"

QUERY_PARAM_ORDER = (
    PARAM_QUESTION,
    PARAM_THREAD_ID,
    PARAM_LANG,
    PARAM_PROVIDER,
    PARAM_MODEL,
    PARAM_CLARIFICATION_RESPONSE,
)
