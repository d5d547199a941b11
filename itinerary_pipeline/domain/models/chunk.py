"""Analysis window model."""

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ChunkWindow(BaseModel):
    """Half-open time window [start_sec, end_sec) of a video, analyzed in one call."""

    model_config = ConfigDict(frozen=True)

    index: int = Field(ge=0)
    start_sec: int = Field(ge=0)
    end_sec: int = Field(gt=0)

    @model_validator(mode="after")
    def _check_bounds(self) -> "ChunkWindow":
        if self.end_sec <= self.start_sec:
            msg = f"end_sec ({self.end_sec}) must be after start_sec ({self.start_sec})"
            raise ValueError(msg)
        return self

    @property
    def duration_seconds(self) -> int:
        return self.end_sec - self.start_sec

    @property
    def label(self) -> str:
        """Window as ``"start-end"`` seconds, for logs."""
        return f"{self.start_sec}s-{self.end_sec}s"
