"""
AI helpers for the job tracker: a prompt-template wrapper and the flows built on it.
"""

from assistant.prompt import PromptFlow, PromptFlowError

__all__ = ["PromptFlow", "PromptFlowError"]
