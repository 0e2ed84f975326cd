from .state import TurnState, TurnStateMachine
from .tools import ToolExecutor, TOOL_DECLARATIONS, TOOL_NAMES
from .conversation_store import ConversationStore
from .orchestrator import ConversationOrchestrator

__all__ = [
    "TurnState",
    "TurnStateMachine",
    "ToolExecutor",
    "TOOL_DECLARATIONS",
    "TOOL_NAMES",
    "ConversationStore",
    "ConversationOrchestrator",
]
