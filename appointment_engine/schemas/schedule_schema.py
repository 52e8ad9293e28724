"""Working-window input models."""

from pydantic import BaseModel, Field, field_validator

from appointment_engine.scheduling.timeutils import is_valid_time_format


class WorkingWindowInput(BaseModel):
    """One weekday entry of a resource's weekly schedule (0 = Sunday)."""
    weekday: int = Field(ge=0, le=6)
    start_time: str
    end_time: str
    active: bool = True

    @field_validator("start_time", "end_time")
    @classmethod
    def _valid_time(cls, value: str) -> str:
        if not is_valid_time_format(value):
            raise ValueError("time must be in format HH:MM")
        return value.strip()
