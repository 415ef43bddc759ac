"""Event protocol for decoupling report generation from presentation.

The generator publishes every state snapshot and every log step through an
event handler. Presentation layers (the rich console view, tests) implement
the protocol and render or record what they receive.
"""

from typing import Any, Protocol

from omnireport.models import GenerationStep, RunState


class ReportEventHandler(Protocol):
    """Protocol for handlers observing a report run."""

    def on_state_change(self, state: RunState, **kwargs: Any) -> None:
        """Called after every state mutation with the new snapshot.

        Args:
            state: The complete run state after the mutation
            **kwargs: Additional context
        """
        ...

    def on_step(self, step: GenerationStep, **kwargs: Any) -> None:
        """Called when a progress step is appended to the log.

        Args:
            step: The new log entry
            **kwargs: Additional context
        """
        ...


class NullEventHandler:
    """Event handler that does nothing.

    Useful as a default when nobody is watching the run.
    """

    def on_state_change(self, *args: Any, **kwargs: Any) -> None:
        pass

    def on_step(self, *args: Any, **kwargs: Any) -> None:
        pass


class RecordingEventHandler:
    """Keeps every published snapshot and step in order."""

    def __init__(self) -> None:
        self.states: list[RunState] = []
        self.steps: list[GenerationStep] = []

    def on_state_change(self, state: RunState, **kwargs: Any) -> None:
        self.states.append(state)

    def on_step(self, step: GenerationStep, **kwargs: Any) -> None:
        self.steps.append(step)
