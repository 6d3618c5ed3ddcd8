"""leonard - relay text between a Maker and a Critic agent."""

from .engine import RelayEngine
from .types import AgentRole, CollectedOutput, TurnState

__version__ = "0.1.0"

__all__ = ["AgentRole", "CollectedOutput", "RelayEngine", "TurnState"]
