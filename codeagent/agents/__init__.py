from .agent import Agent
from .completion import Complete, Incomplete, observe_completion, parse_completion
from .conversation_history import load_previous_messages
from .generators import extract_text, generate_response, generate_title
from .network import Continue, Network, NetworkResult, RouterContext, Stop, summary_router

__all__ = [
    "Agent",
    "Complete",
    "Continue",
    "Incomplete",
    "Network",
    "NetworkResult",
    "RouterContext",
    "Stop",
    "extract_text",
    "generate_response",
    "generate_title",
    "load_previous_messages",
    "observe_completion",
    "parse_completion",
    "summary_router",
]
