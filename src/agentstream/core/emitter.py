"""Token emitter: relays text deltas with round-boundary spacing fixes."""

from collections.abc import Callable

from agentstream.core.state import SessionState

TokenSink = Callable[[str], None]


class TokenEmitter:
    """Forwards corrected deltas to a sink, folding them into session state.

    On the first token of a round that resumes after tool use or
    truncation, a single space is inserted when the accumulated text ends in
    a non-whitespace character and the delta starts with one.
    """

    def __init__(self, sink: TokenSink):
        self._sink = sink

    def emit(self, state: SessionState, delta: str) -> SessionState:
        new_state, token = state.apply_delta(delta)
        self._sink(token)
        return new_state
