from abc import ABC, abstractmethod
from src.core.workflow_state import DeliveryWorkflowState


class BaseNode(ABC):
    """Base class for delivery workflow nodes.

    Subclasses set `name` and implement `run`. Calling a node appends its name
    to the trajectory. Once an earlier step has failed, nodes with
    `runs_after_error = False` pass the state through without running.
    """

    name: str  # Class variable, set by each subclass (e.g. name = "record_pod")
    runs_after_error: bool = False

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        if not getattr(cls, 'name', None) and 'Abstract' not in cls.__name__:
            raise TypeError(f"{cls.__name__} must define a 'name' class variable")

    def __call__(self, state: DeliveryWorkflowState) -> dict:
        trajectory = state.get("trajectory", []) + [self.name]
        if state.get("final_status") == "error" and not self.runs_after_error:
            return {"trajectory": trajectory}
        return {**self.run(state), "trajectory": trajectory}

    @abstractmethod
    def run(self, state: DeliveryWorkflowState) -> dict:
        """Execute node logic. Returns the state updates, without the trajectory."""
        ...
