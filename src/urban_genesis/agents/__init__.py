"""Agent simulation - steering agents and the hubs that spawn them."""

from .agent import Agent, AgentKind, UpdateResult
from .hub import Hub

__all__ = ["Agent", "AgentKind", "Hub", "UpdateResult"]
