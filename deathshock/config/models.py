from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, SecretStr, model_validator

DEFAULT_ENDPOINT_DOMAIN = "api.openshock.app"

DURATION_FLOOR_MS = 300
DURATION_CEILING_MS = 30_000
INTENSITY_FLOOR = 1
INTENSITY_CEILING = 100


class DurationWindow(BaseModel):
    """Inclusive shock duration bounds in milliseconds."""

    # strict: booleans, floats and numeric strings are not durations.
    # No populate_by_name: the loader validates the whole settings dict, so only
    # the JSON keys may bind.
    model_config = ConfigDict(frozen=True, strict=True, extra="ignore")

    min_ms: int = Field(default=DURATION_FLOOR_MS, ge=DURATION_FLOOR_MS, alias="minDuration")
    max_ms: int = Field(default=DURATION_CEILING_MS, le=DURATION_CEILING_MS, alias="maxDuration")

    @model_validator(mode="after")
    def _ordered(self) -> "DurationWindow":
        if self.min_ms > self.max_ms:
            raise ValueError(f"minDuration ({self.min_ms}) exceeds maxDuration ({self.max_ms})")
        return self


class IntensityWindow(BaseModel):
    """Inclusive shock intensity bounds (percent of device maximum)."""

    model_config = ConfigDict(frozen=True, strict=True, extra="ignore")

    minimum: int = Field(default=INTENSITY_FLOOR, ge=INTENSITY_FLOOR, alias="minIntensity")
    maximum: int = Field(default=INTENSITY_CEILING, le=INTENSITY_CEILING, alias="maxIntensity")

    @model_validator(mode="after")
    def _ordered(self) -> "IntensityWindow":
        if self.minimum > self.maximum:
            raise ValueError(f"minIntensity ({self.minimum}) exceeds maxIntensity ({self.maximum})")
        return self


class ShockConfig(BaseModel):
    """Validated contents of settings.json.

    Field aliases are the JSON keys the mod has always used, so a settings file
    written for the game mod loads unchanged.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    shocker_id: str = Field(..., min_length=1, alias="shockerID")
    # SecretStr keeps the token out of repr() and therefore out of logs.
    api_token: SecretStr = Field(..., alias="OpenShockToken")
    custom_name: str = Field(..., min_length=1, alias="customName")

    duration: DurationWindow = Field(default_factory=DurationWindow)
    intensity: IntensityWindow = Field(default_factory=IntensityWindow)

    endpoint_domain: str = Field(default=DEFAULT_ENDPOINT_DOMAIN, alias="endpointDomain")

    @model_validator(mode="after")
    def _non_empty_token(self) -> "ShockConfig":
        if not self.api_token.get_secret_value():
            raise ValueError("OpenShockToken must not be empty")
        return self

    @property
    def min_duration_ms(self) -> int:
        return self.duration.min_ms

    @property
    def max_duration_ms(self) -> int:
        return self.duration.max_ms

    @property
    def min_intensity(self) -> int:
        return self.intensity.minimum

    @property
    def max_intensity(self) -> int:
        return self.intensity.maximum
