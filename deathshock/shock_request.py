from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Literal

import httpx
from pydantic import BaseModel, ConfigDict, Field

from deathshock.config.models import ShockConfig

CONTROL_PATH = "/2/shockers/control"


class ShockCommand(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    type: Literal["Shock"] = "Shock"
    intensity: int
    duration: int
    exclusive: Literal[True] = True


class ControlRequest(BaseModel):
    """Body of `POST /2/shockers/control` on the OpenShock API."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    shocks: list[ShockCommand]
    custom_name: str = Field(..., alias="customName")


@dataclass(frozen=True, slots=True)
class ShockRequest:
    """A single outbound control request.

    `headers` carries the API token and is left out of repr() on purpose.
    """

    url: str
    body: ControlRequest
    headers: dict[str, str] = field(repr=False)
    method: str = "POST"

    @property
    def intensity(self) -> int:
        return self.body.shocks[0].intensity

    @property
    def duration_ms(self) -> int:
        return self.body.shocks[0].duration

    def body_json(self) -> str:
        return self.body.model_dump_json(by_alias=True)

    def to_httpx(self) -> httpx.Request:
        return httpx.Request(
            self.method,
            self.url,
            headers=self.headers,
            content=self.body_json().encode("utf-8"),
        )


def control_url(domain: str) -> str:
    return f"https://{domain}{CONTROL_PATH}"


def build_request(config: ShockConfig, *, rng: random.Random) -> ShockRequest:
    """Draw intensity and duration inside the configured windows and build the request.

    Both bounds are inclusive. Intensity is drawn first, then duration.
    """

    intensity = rng.randint(config.min_intensity, config.max_intensity)
    duration_ms = rng.randint(config.min_duration_ms, config.max_duration_ms)

    body = ControlRequest(
        shocks=[
            ShockCommand(
                id=config.shocker_id,
                intensity=intensity,
                duration=duration_ms,
            )
        ],
        custom_name=config.custom_name,
    )

    headers = {
        "Content-Type": "application/json",
        "accept": "application/json",
        "OpenShockToken": config.api_token.get_secret_value(),
    }

    return ShockRequest(url=control_url(config.endpoint_domain), body=body, headers=headers)
