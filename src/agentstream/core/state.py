"""Per-session state and its transitions.

SessionState is immutable; every transition returns a new value so the loop
in SessionController can be audited step by step without any I/O.
"""

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class SessionState:
    """Ephemeral state of one session, threaded through each round."""

    full_text: str = ""
    # Set when a round resumes after tool use or truncation; consumed by
    # the first token of the resumed round.
    pending_space_correction: bool = False
    first_token_of_round: bool = True
    rounds: int = 0
    continuations: int = 0

    def begin_round(self) -> "SessionState":
        return replace(self, rounds=self.rounds + 1, first_token_of_round=True)

    def after_tool_use(self) -> "SessionState":
        return replace(self, pending_space_correction=True)

    def after_truncation(self) -> "SessionState":
        return replace(
            self,
            pending_space_correction=True,
            continuations=self.continuations + 1,
        )

    def apply_delta(self, delta: str) -> tuple["SessionState", str]:
        """Append one delta, returning the new state and the text to emit."""
        token = delta
        if self.first_token_of_round and self.pending_space_correction:
            if needs_space(self.full_text, delta):
                token = " " + delta
        new_state = replace(
            self,
            full_text=self.full_text + token,
            pending_space_correction=False,
            first_token_of_round=False,
        )
        return new_state, token


def needs_space(previous: str, delta: str) -> bool:
    """True when joining previous + delta would run two words together."""
    if not previous or not delta:
        return False
    return not previous[-1].isspace() and not delta[0].isspace()
