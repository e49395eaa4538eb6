"""Session controller: the streaming tool-use loop.

One call to SessionController.run() drives a conversation through as many
rounds as the model needs. Each round streams text to the caller, then the
terminal event decides what happens next:

- tool_use: the assistant turn and one user turn of tool results are
  appended, then a new round opens.
- truncated: the partial text and a continuation instruction are appended,
  then a new round opens.
- anything else: the session completes.

Rounds never overlap; round k+1 opens only after round k's tools have run
and history has been updated.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Iterable
from dataclasses import dataclass, field

from agentstream.config.models import SessionConfig
from agentstream.core.cancel import (
    CancelToken,
    SessionCancelled,
    iterate_cancellable,
    run_cancellable,
)
from agentstream.core.emitter import TokenEmitter
from agentstream.core.events import SessionCallbacks, SessionEvent, ToolUseStatus
from agentstream.core.history import MessageHistory
from agentstream.core.state import SessionState
from agentstream.errors import RoundLimitError, TransportError
from agentstream.llm.base import LLMBackend
from agentstream.llm.types import (
    ContentBlock,
    Message,
    RoundEnd,
    RoundRequest,
    StopReason,
    TextContent,
    TextDelta,
    ToolCallStart,
    ToolResult,
    ToolUse,
)
from agentstream.tools.dispatcher import ToolDispatcher
from agentstream.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


@dataclass
class RoundOutcome:
    """What one completed round produced."""

    stop_reason: StopReason
    accumulated_text: str = ""
    final_blocks: list[ContentBlock] = field(default_factory=list)
    # Tool calls announced to the caller while streaming, id -> name
    announced: dict[str, str] = field(default_factory=dict)

    @property
    def tool_calls(self) -> list[ToolUse]:
        return [block for block in self.final_blocks if isinstance(block, ToolUse)]

    @property
    def text(self) -> str:
        final_text = "".join(
            block.text for block in self.final_blocks if isinstance(block, TextContent)
        )
        return final_text or self.accumulated_text


class SessionController:
    """Runs streaming sessions against one backend and tool registry.

    The controller itself holds no per-session state, so a single instance
    can serve any number of concurrent sessions.
    """

    def __init__(
        self,
        backend: LLMBackend,
        registry: ToolRegistry | None = None,
        config: SessionConfig | None = None,
    ):
        self._backend = backend
        self._registry = registry or ToolRegistry()
        self._dispatcher = ToolDispatcher(self._registry)
        self._config = config or SessionConfig()

    @property
    def config(self) -> SessionConfig:
        return self._config

    async def run(
        self,
        history: Iterable[Message],
        callbacks: SessionCallbacks,
        cancel_token: CancelToken | None = None,
    ) -> None:
        """Run one session to completion, failure or cancellation.

        Results are reported only through ``callbacks``: ``on_complete`` or
        ``on_error`` fires exactly once unless the session is cancelled, in
        which case neither fires.
        """
        token = cancel_token or CancelToken()
        messages = MessageHistory(history)
        emitter = TokenEmitter(callbacks.on_token)

        try:
            state = await self._loop(messages, emitter, callbacks, token)
        except SessionCancelled:
            logger.info("session_cancelled", extra={"history.length": len(messages)})
            return
        except asyncio.CancelledError:
            logger.info("session_cancelled", extra={"history.length": len(messages)})
            raise
        except Exception as e:
            logger.error(
                "session_failed",
                extra={"error.type": type(e).__name__, "error.message": str(e)},
            )
            callbacks.on_error(e)
            return

        if token.cancelled:
            logger.info("session_cancelled", extra={"history.length": len(messages)})
            return

        logger.info(
            "session_complete",
            extra={
                "rounds": state.rounds,
                "continuations": state.continuations,
                "text_len": len(state.full_text),
            },
        )
        callbacks.on_complete(state.full_text)

    async def events(
        self,
        history: Iterable[Message],
        cancel_token: CancelToken | None = None,
    ) -> AsyncIterator[SessionEvent]:
        """Run a session, yielding its lifecycle as SessionEvents.

        Closing the iterator early cancels the session.
        """
        queue: asyncio.Queue[SessionEvent | None] = asyncio.Queue()
        callbacks = SessionCallbacks.from_sink(queue.put_nowait)

        async def _run() -> None:
            try:
                await self.run(history, callbacks, cancel_token)
            finally:
                queue.put_nowait(None)

        task = asyncio.create_task(_run())
        try:
            while (event := await queue.get()) is not None:
                yield event
            await task
        finally:
            if not task.done():
                task.cancel()
                await asyncio.gather(task, return_exceptions=True)

    async def _loop(
        self,
        history: MessageHistory,
        emitter: TokenEmitter,
        callbacks: SessionCallbacks,
        token: CancelToken,
    ) -> SessionState:
        state = SessionState()

        while True:
            token.raise_if_cancelled()
            if state.rounds >= self._config.max_rounds:
                raise RoundLimitError(self._config.max_rounds)

            state = state.begin_round()
            outcome, state = await self._stream_round(
                history, state, emitter, callbacks, token
            )
            logger.debug(
                "round_end",
                extra={
                    "round": state.rounds,
                    "stop_reason": outcome.stop_reason.value,
                    "text_len": len(outcome.accumulated_text),
                    "tool_calls": [call.name for call in outcome.tool_calls],
                },
            )

            match outcome.stop_reason:
                case StopReason.TOOL_USE if outcome.tool_calls:
                    await self._dispatch_tools(history, outcome, callbacks, token)
                    state = state.after_tool_use()
                case StopReason.TOOL_USE:
                    logger.warning(
                        "tool_use_without_calls", extra={"round": state.rounds}
                    )
                    self._release_announced(outcome, callbacks)
                    return state
                case StopReason.TRUNCATED:
                    self._release_announced(outcome, callbacks)
                    if state.continuations >= self._config.max_continuations:
                        logger.warning(
                            "continuation_limit_reached",
                            extra={"max_continuations": self._config.max_continuations},
                        )
                        return state
                    self._append_continuation(history, outcome)
                    state = state.after_truncation()
                case _:
                    self._release_announced(outcome, callbacks)
                    return state

    async def _stream_round(
        self,
        history: MessageHistory,
        state: SessionState,
        emitter: TokenEmitter,
        callbacks: SessionCallbacks,
        token: CancelToken,
    ) -> tuple[RoundOutcome, SessionState]:
        request = self._build_request(history)
        logger.debug(
            "round_start",
            extra={"round": state.rounds, "history.length": len(request.messages)},
        )

        deltas: list[str] = []
        announced: dict[str, str] = {}
        round_end: RoundEnd | None = None

        stream = self._backend.open_stream(request)
        events = iterate_cancellable(stream, token)
        try:
            async for event in events:
                token.raise_if_cancelled()
                match event:
                    case TextDelta(text=text):
                        deltas.append(text)
                        state = emitter.emit(state, text)
                    case ToolCallStart(tool_use_id=tool_use_id, name=name):
                        announced[tool_use_id] = name
                        callbacks.tool_use(name, ToolUseStatus.CALLING)
                    case RoundEnd():
                        round_end = event
                    case _:
                        logger.debug(
                            "stream_event_ignored",
                            extra={"event.type": type(event).__name__},
                        )
        except SessionCancelled:
            logger.debug("stream_aborted", extra={"round": state.rounds})
            raise
        finally:
            await events.aclose()
            if (aclose := getattr(stream, "aclose", None)) is not None:
                await aclose()

        if round_end is None:
            raise TransportError("Stream ended without a terminal event")

        outcome = RoundOutcome(
            stop_reason=round_end.stop_reason,
            accumulated_text="".join(deltas),
            final_blocks=list(round_end.final_blocks),
            announced=announced,
        )
        return outcome, state

    async def _dispatch_tools(
        self,
        history: MessageHistory,
        outcome: RoundOutcome,
        callbacks: SessionCallbacks,
        token: CancelToken,
    ) -> None:
        history.add_assistant_message(
            [
                block
                for block in outcome.final_blocks
                if not (isinstance(block, TextContent) and not block.text)
            ]
        )

        results: list[ToolResult] = []
        for call in outcome.tool_calls:
            if call.id not in outcome.announced:
                callbacks.tool_use(call.name, ToolUseStatus.CALLING)
            result = await run_cancellable(self._dispatcher.dispatch(call), token)
            results.append(result)
            callbacks.tool_use(call.name, ToolUseStatus.COMPLETE)

        history.add_tool_results(results)
        self._release_announced(outcome, callbacks, skip=outcome.tool_calls)

    def _release_announced(
        self,
        outcome: RoundOutcome,
        callbacks: SessionCallbacks,
        skip: Iterable[ToolUse] = (),
    ) -> None:
        """Close out announced calls that will never run.

        A call announced by ToolCallStart but absent from the final blocks
        (truncated mid-input, or a round that ended without tool use) still
        gets its COMPLETE so every CALLING is paired.
        """
        dispatched = {call.id for call in skip}
        for tool_use_id, name in outcome.announced.items():
            if tool_use_id not in dispatched:
                callbacks.tool_use(name, ToolUseStatus.COMPLETE)

    def _append_continuation(
        self, history: MessageHistory, outcome: RoundOutcome
    ) -> None:
        # Tool calls cut off mid-input are dropped; only the text is replayed
        if partial := outcome.text:
            history.add_assistant_message(partial)
        history.add_user_message(self._config.continuation_prompt)

    def _build_request(self, history: MessageHistory) -> RoundRequest:
        return RoundRequest(
            messages=history.snapshot(),
            tools=tuple(self._registry.get_definitions()),
            system=self._config.system_prompt,
            model=self._config.model,
            max_tokens=self._config.max_tokens,
        )
