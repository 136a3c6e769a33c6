from pydantic import BaseModel, ConfigDict, Field


class RetryPolicy(BaseModel):
    """
    Bounded retry configuration.

    All durations are in seconds. A policy is immutable once built; build a
    new one (e.g. with `model_copy(update=...)`) to change it.
    """

    model_config = ConfigDict(frozen=True)

    max_attempts: int = Field(default=4, ge=1)
    base_delay: float = Field(default=0.5, ge=0.0)
    max_delay: float = Field(default=8.0, ge=0.0)
    jitter_range: float = Field(default=0.25, ge=0.0)
