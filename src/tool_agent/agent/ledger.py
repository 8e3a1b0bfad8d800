"""Conversation history with a token budget.

Every append is followed by an enforcement pass: count the tokens of all
message contents, report the totals, and while the count is over budget drop
the oldest message after the system prompt. The system prompt at index 0 is
never removed.
"""

from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass

from tool_agent.client.base import Message, Role
from tool_agent.core.logging import get_logger, log_token_usage
from tool_agent.utils.tokens import TokenCounter

logger = get_logger(__name__)


@dataclass(frozen=True)
class TokenReport:
    """Token totals after one enforcement pass."""

    content_tokens: int
    reasoning_tokens: int
    budget: int

    @property
    def total_tokens(self) -> int:
        return self.content_tokens + self.reasoning_tokens

    @property
    def percentage(self) -> float:
        """Share of the budget used by message contents."""
        return self.content_tokens / self.budget * 100

    @property
    def over_budget(self) -> bool:
        return self.content_tokens > self.budget

    def render(self) -> str:
        return (
            f"Tokens Total[{self.total_tokens}] Reason[{self.reasoning_tokens}] "
            f"Window[{self.content_tokens}] ({self.percentage:.0f}% of {self.budget / 1024:.0f}K)"
        )


ReportHandler = Callable[[TokenReport], None]


class ConversationLedger:
    """Ordered conversation owned by one agent session.

    Only the agent's control loop mutates the ledger, so no locking is done.
    """

    def __init__(
        self,
        system_prompt: str,
        budget: int,
        counter: TokenCounter,
        on_report: ReportHandler | None = None,
    ) -> None:
        """Seed the conversation with the system prompt.

        Args:
            system_prompt: Content of the message pinned at index 0.
            budget: Maximum content tokens kept in the conversation.
            counter: Token counter used for every message.
            on_report: Called with the totals after every enforcement pass.
        """
        if budget < 1:
            raise ValueError("budget must be positive")
        self.budget = budget
        self._counter = counter
        self._on_report = on_report
        self._messages: list[Message] = [Message.system(system_prompt)]
        self.last_report: TokenReport | None = None

    @property
    def messages(self) -> list[Message]:
        """A copy of the conversation, oldest first."""
        return list(self._messages)

    @property
    def system_prompt(self) -> Message:
        return self._messages[0]

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(list(self._messages))

    def __getitem__(self, index: int) -> Message:
        return self._messages[index]

    def append(self, *messages: Message, reasoning: Sequence[str] = ()) -> None:
        """Append messages, then evict until the conversation fits the budget.

        Args:
            *messages: Messages to add, in order.
            reasoning: The current cycle's reasoning fragments. Counted and
                reported, never stored or evicted.
        """
        for message in messages:
            if message.role is Role.SYSTEM:
                raise ValueError("the system prompt is fixed at construction")
        self._messages.extend(messages)
        self._enforce_budget(reasoning)

    def _enforce_budget(self, reasoning: Sequence[str]) -> None:
        reasoning_tokens = self._counter.count(" ".join(reasoning))

        while True:
            content_tokens = sum(self._counter.count(message.content) for message in self._messages)
            report = TokenReport(content_tokens, reasoning_tokens, self.budget)
            self._report(report)

            # Stop at the system prompt plus the newest message, even if over.
            if not report.over_budget or len(self._messages) <= 2:
                return

            evicted = self._messages.pop(1)
            logger.info(
                "message_evicted",
                role=evicted.role.value,
                remaining=len(self._messages),
                content_tokens=content_tokens,
                budget=self.budget,
            )

    def _report(self, report: TokenReport) -> None:
        self.last_report = report
        log_token_usage(
            logger,
            content_tokens=report.content_tokens,
            reasoning_tokens=report.reasoning_tokens,
            budget=report.budget,
            messages=len(self._messages),
        )
        if self._on_report is not None:
            self._on_report(report)

    def snapshot(self) -> tuple[Message, ...]:
        """Capture the conversation so a failed cycle can be undone."""
        return tuple(self._messages)

    def restore(self, snapshot: tuple[Message, ...]) -> None:
        """Return the conversation to a captured state."""
        if not snapshot or snapshot[0] is not self._messages[0]:
            raise ValueError("snapshot does not belong to this conversation")
        self._messages = list(snapshot)
