"""Per-conversation session state with serialized turn processing.

Merge semantics are last-write-wins per turn, so turns of one session must be
applied in arrival order. `QuoteSession` holds the state for one conversation
and a lock that serializes `apply` calls. Independent sessions share nothing
and may run in parallel.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
import logging
import threading
from types import MappingProxyType
from typing import Any

from quote_pipeline.core.types import SessionState, TurnOutcome
from quote_pipeline.pipeline.runner import QuotePipeline

log = logging.getLogger(__name__)


def _message_parts(message: Any) -> tuple[str | None, str]:
    """Read ``role`` and ``content`` from a mapping or an object."""
    if isinstance(message, Mapping):
        role, content = message.get("role"), message.get("content")
    else:
        role = getattr(message, "role", None)
        content = getattr(message, "content", None)
    return role, content if isinstance(content, str) else ""


class QuoteSession:
    """One conversation's accumulated quote state.

    Attributes:
        quote_id: The `quoteId` of the last accepted payload that carried one.
        turn_count: How many turns produced an accepted payload.
    """

    def __init__(
        self,
        pipeline: QuotePipeline | None = None,
        state: Mapping[str, Any] | None = None,
    ) -> None:
        """Start a session.

        Args:
            pipeline: Pipeline to run turns through. Defaults to a new one.
            state: Initial state, e.g. restored by the caller from storage.
        """
        self.pipeline = pipeline if pipeline is not None else QuotePipeline()
        self._state: SessionState = dict(state or {})
        self._lock = threading.Lock()
        self.quote_id: str | None = None
        self.turn_count = 0

    @property
    def state(self) -> Mapping[str, Any]:
        """Read-only view of a snapshot of the current state."""
        with self._lock:
            return MappingProxyType(dict(self._state))

    @property
    def is_complete(self) -> bool:
        """Re-derived completeness of the current state."""
        return self.pipeline.completeness.is_complete(self.state)

    def apply(self, text: str) -> TurnOutcome:
        """Process one assistant turn and store the resulting state."""
        with self._lock:
            outcome = self.pipeline.process_turn(text, self._state)
            if outcome.validation.valid:
                self._state = outcome.state
                self.turn_count += 1
                payload = outcome.validation.data
                if payload is not None and payload.quote_id is not None:
                    self.quote_id = payload.quote_id
            return outcome

    def replay(
        self, messages: Iterable[Any], window: int | None = None
    ) -> list[TurnOutcome]:
        """Re-scan the tail of a chat history for quote updates.

        Of the last `window` messages, the assistant ones are applied oldest
        to newest, so a short follow-up message without a payload does not
        lose the data carried by an earlier one.

        Args:
            messages: Chat messages as mappings or objects with ``role`` and
                ``content``.
            window: How many trailing messages to consider. Defaults to the
                pipeline's ``history_window`` setting.

        Returns:
            One outcome per assistant message processed.
        """
        size = window if window is not None else self.pipeline.settings.history_window
        if size < 1:
            raise ValueError(f"window must be >= 1, got {size}")
        tail = list(messages)[-size:]
        outcomes = []
        for message in tail:
            role, content = _message_parts(message)
            if role != "assistant" or not content:
                continue
            outcomes.append(self.apply(content))
        log.debug(
            "Replayed %d assistant message(s); %d accepted",
            len(outcomes),
            sum(1 for o in outcomes if o.validation.valid),
        )
        return outcomes
