from dataclasses import dataclass


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded exponential backoff with jitter for external calls."""

    max_attempts: int = 3
    base_delay: float = 1.0
    max_delay: float = 30.0
    jitter: bool = True

    def __post_init__(self) -> None:
        """Validate retry policy."""
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.base_delay < 0:
            raise ValueError(f"base_delay must be >= 0, got {self.base_delay}")
        if self.max_delay < self.base_delay:
            raise ValueError(
                f"max_delay ({self.max_delay}) must be >= base_delay ({self.base_delay})"
            )

    def delay_for(self, attempt: int, rand: float = 0.5) -> float:
        """
        Delay before the retry that follows a failed ``attempt`` (0-based).

        Args:
            attempt: Index of the attempt that just failed
            rand: Uniform random number in [0, 1) used for jitter

        Returns:
            Delay in seconds: base_delay * 2^attempt capped at max_delay,
            then shifted by up to +/-25% when jitter is on
        """
        delay = min(self.base_delay * (2**attempt), self.max_delay)
        if self.jitter:
            delay = max(0.0, delay + delay * 0.25 * (2 * rand - 1))
        return delay
