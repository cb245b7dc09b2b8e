"""Pacing for exchanges and retry policy for description fetches."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ExchangePolicy:
    """Fixed pacing and buffer size for one exchange."""
    send_interval: float = 0.005
    read_retry_delay: float = 0.01
    # 2048 bytes should be sufficient for most discovery payloads.
    read_buffer_size: int = 2048


@dataclass
class RetryPolicy:
    """Configurable retry policy with exponential backoff."""
    max_retries: int = 2
    initial_delay: float = 0.5
    backoff_factor: float = 2.0
    max_delay: float = 5.0

    def get_delay(self, attempt: int) -> float:
        """Calculate delay for a given retry attempt (0-indexed).

        Args:
            attempt: Current attempt number (0 = first retry).

        Returns:
            Delay in seconds before next retry.
        """
        delay = self.initial_delay * (self.backoff_factor ** attempt)
        return min(delay, self.max_delay)


def default_exchange_policy() -> ExchangePolicy:
    """5ms between send rounds, 10ms after a temporary read error, 2048-byte reads."""
    return ExchangePolicy()


def default_retry_policy() -> RetryPolicy:
    """Create default retry policy.

    2 retries, 0.5s initial delay, 2x backoff, 5s max.
    """
    return RetryPolicy()


def no_retry_policy() -> RetryPolicy:
    """Create a no-retry policy (fail immediately)."""
    return RetryPolicy(max_retries=0)
