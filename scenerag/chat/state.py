"""
Explicit state machine for one chat turn.

    AWAITING_USER_MESSAGE -> RETRIEVING -> GENERATING
        -> (FUNCTION_CALL_REQUESTED -> EXECUTING -> GENERATING)*
        -> RESPONDED

Any non-terminal state may move to FAILED. Every entry into GENERATING is one
model call; at most ``max_iterations`` are allowed per turn.
"""

from enum import Enum
from typing import Dict, FrozenSet, List

from scenerag.exceptions import InvalidTurnTransition, MaxIterationsExceeded


class TurnState(str, Enum):
    AWAITING_USER_MESSAGE = "awaiting_user_message"
    RETRIEVING = "retrieving"
    GENERATING = "generating"
    FUNCTION_CALL_REQUESTED = "function_call_requested"
    EXECUTING = "executing"
    RESPONDED = "responded"
    FAILED = "failed"


TERMINAL_STATES: FrozenSet[TurnState] = frozenset({TurnState.RESPONDED, TurnState.FAILED})

TRANSITIONS: Dict[TurnState, FrozenSet[TurnState]] = {
    TurnState.AWAITING_USER_MESSAGE: frozenset({TurnState.RETRIEVING}),
    TurnState.RETRIEVING: frozenset({TurnState.GENERATING}),
    TurnState.GENERATING: frozenset({TurnState.FUNCTION_CALL_REQUESTED, TurnState.RESPONDED}),
    TurnState.FUNCTION_CALL_REQUESTED: frozenset({TurnState.EXECUTING}),
    TurnState.EXECUTING: frozenset({TurnState.GENERATING}),
    TurnState.RESPONDED: frozenset(),
    TurnState.FAILED: frozenset(),
}


class TurnStateMachine:
    def __init__(self, max_iterations: int = 5):
        self.max_iterations = max_iterations
        self.state = TurnState.AWAITING_USER_MESSAGE
        self.history: List[TurnState] = [self.state]
        self.model_calls = 0
        self.round_trips = 0

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    def transition(self, target: TurnState) -> None:
        allowed = TRANSITIONS[self.state]
        if not self.is_terminal:
            allowed = allowed | {TurnState.FAILED}
        if target not in allowed:
            raise InvalidTurnTransition(
                f"Cannot move chat turn from {self.state.value} to {target.value}",
                details={"from": self.state.value, "to": target.value},
            )
        self.state = target
        self.history.append(target)

    def start_retrieval(self) -> None:
        self.transition(TurnState.RETRIEVING)

    def begin_generation(self) -> None:
        """Enter GENERATING for the next model call, or fail once max_iterations calls were made."""
        if self.model_calls >= self.max_iterations:
            self.fail()
            raise MaxIterationsExceeded(self.max_iterations)
        self.transition(TurnState.GENERATING)
        self.model_calls += 1

    def request_functions(self) -> None:
        self.transition(TurnState.FUNCTION_CALL_REQUESTED)

    def start_execution(self) -> None:
        self.transition(TurnState.EXECUTING)

    def finish_execution(self) -> None:
        """Close one function-call round trip; the next model call starts with begin_generation."""
        if self.state is not TurnState.EXECUTING:
            raise InvalidTurnTransition(f"No function execution in progress (state {self.state.value})")
        self.round_trips += 1

    def respond(self) -> None:
        self.transition(TurnState.RESPONDED)

    def fail(self) -> None:
        if self.state is not TurnState.FAILED:
            self.transition(TurnState.FAILED)
