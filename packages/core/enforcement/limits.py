from __future__ import annotations

from datetime import timedelta

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from packages.core.errors import ConfigError

DEFAULT_WARNING_MARGIN = timedelta(minutes=5)


class LimitConfig(BaseModel):
    """Playtime budget. Built once at startup and never changed."""
    model_config = ConfigDict(frozen=True)

    total_budget: timedelta
    warning_margin: timedelta = DEFAULT_WARNING_MARGIN

    @field_validator("total_budget")
    @classmethod
    def _positive_budget(cls, v: timedelta) -> timedelta:
        if v <= timedelta(0):
            raise ValueError("budget must be greater than zero")
        return v

    @field_validator("warning_margin")
    @classmethod
    def _non_negative_margin(cls, v: timedelta) -> timedelta:
        if v < timedelta(0):
            raise ValueError("warning margin must not be negative")
        return v

    @property
    def warn_at(self) -> timedelta:
        return max(self.total_budget - self.warning_margin, timedelta(0))

    @classmethod
    def from_duration(cls, budget: timedelta, warning_margin: timedelta = DEFAULT_WARNING_MARGIN) -> "LimitConfig":
        try:
            return cls(total_budget=budget, warning_margin=warning_margin)
        except ValidationError as e:
            msg = "; ".join(err["msg"] for err in e.errors())
            raise ConfigError(f"invalid limit: {msg}") from e

    @classmethod
    def from_hours_minutes(
        cls, hours: int, minutes: int, warning_margin: timedelta = DEFAULT_WARNING_MARGIN
    ) -> "LimitConfig":
        if hours < 0 or minutes < 0:
            raise ConfigError("hours and minutes must not be negative")
        if hours == 0 and minutes == 0:
            raise ConfigError("no budget given: hours and minutes are both zero")
        return cls.from_duration(timedelta(hours=hours, minutes=minutes), warning_margin)
