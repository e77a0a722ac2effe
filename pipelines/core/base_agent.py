"""Abstract base class for all pipeline agents."""

from abc import ABC, abstractmethod
from typing import Any, Dict


class BaseAgent(ABC):
    """
    Abstract base class that all agents must inherit from.

    Agents are the stages of a pipeline. Each one reads the keys it needs
    from the shared context dict and returns only the keys it adds.
    """

    def __init__(self, name: str) -> None:
        """
        Initialize the agent.

        Args:
            name: Unique identifier for this agent, used in pipeline logs.
        """
        self.name = name

    @abstractmethod
    def run(self, input_data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Execute the agent's main logic.

        Args:
            input_data: Accumulated pipeline context.

        Returns:
            Dictionary of keys to merge into the context.
        """
        pass

    @staticmethod
    def require(input_data: Dict[str, Any], key: str, agent_name: str) -> Any:
        """
        Fetch a mandatory context key.

        Raises:
            ValueError: If the key is missing (pipeline contract violation).
        """
        if input_data.get(key) is None:
            raise ValueError(
                f"Pipeline contract violation: '{key}' key missing. "
                f"{agent_name} requires it in the pipeline context."
            )
        return input_data[key]

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"
