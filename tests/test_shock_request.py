from __future__ import annotations

import json
import random

import pytest
from pydantic import ValidationError

from deathshock.config.models import DurationWindow, IntensityWindow, ShockConfig
from deathshock.shock_request import build_request


def _config(**overrides: object) -> ShockConfig:
    fields: dict[str, object] = {"shocker_id": "abc", "api_token": "tok", "custom_name": "X"}
    fields.update(overrides)
    return ShockConfig(**fields)  # type: ignore[arg-type]


def test_default_domain_url_and_headers() -> None:
    req = build_request(_config(), rng=random.Random(1))

    assert req.method == "POST"
    assert req.url == "https://api.openshock.app/2/shockers/control"
    assert req.headers == {
        "Content-Type": "application/json",
        "accept": "application/json",
        "OpenShockToken": "tok",
    }


def test_custom_domain() -> None:
    req = build_request(_config(endpoint_domain="foo.bar"), rng=random.Random(1))
    assert req.url == "https://foo.bar/2/shockers/control"


def test_body_shape_and_types() -> None:
    req = build_request(_config(), rng=random.Random(7))
    body = json.loads(req.body_json())

    assert set(body) == {"shocks", "customName"}
    assert body["customName"] == "X"
    assert len(body["shocks"]) == 1

    shock = body["shocks"][0]
    assert set(shock) == {"id", "type", "intensity", "duration", "exclusive"}
    assert shock["id"] == "abc"
    assert shock["type"] == "Shock"
    assert shock["exclusive"] is True
    assert isinstance(shock["intensity"], int) and not isinstance(shock["intensity"], bool)
    assert isinstance(shock["duration"], int)
    assert shock["intensity"] == req.intensity
    assert shock["duration"] == req.duration_ms


def test_draws_stay_inside_windows() -> None:
    cfg = _config(
        duration=DurationWindow(minDuration=500, maxDuration=10000),
        intensity=IntensityWindow(minIntensity=10, maxIntensity=90),
    )
    rng = random.Random(1234)

    seen_i: set[int] = set()
    seen_d: set[int] = set()
    for _ in range(500):
        req = build_request(cfg, rng=rng)
        assert 10 <= req.intensity <= 90
        assert 500 <= req.duration_ms <= 10000
        seen_i.add(req.intensity)
        seen_d.add(req.duration_ms)

    # Independent, spread-out draws rather than a constant.
    assert len(seen_i) > 20
    assert len(seen_d) > 20


def test_inclusive_bounds_are_reachable() -> None:
    cfg = _config(intensity=IntensityWindow(minIntensity=1, maxIntensity=2))
    rng = random.Random(99)
    values = {build_request(cfg, rng=rng).intensity for _ in range(200)}
    assert values == {1, 2}


def test_min_equals_max_is_deterministic() -> None:
    cfg = _config(
        duration=DurationWindow(minDuration=1500, maxDuration=1500),
        intensity=IntensityWindow(minIntensity=42, maxIntensity=42),
    )
    rng = random.Random()
    for _ in range(20):
        req = build_request(cfg, rng=rng)
        assert (req.intensity, req.duration_ms) == (42, 1500)


def test_same_seed_same_draws() -> None:
    cfg = _config()
    ra, rb = random.Random(5), random.Random(5)
    a = [build_request(cfg, rng=ra) for _ in range(3)]
    b = [build_request(cfg, rng=rb) for _ in range(3)]
    assert [(x.intensity, x.duration_ms) for x in a] == [(y.intensity, y.duration_ms) for y in b]


def test_token_not_in_repr() -> None:
    req = build_request(_config(api_token="super-secret-token"), rng=random.Random(1))
    assert "super-secret-token" not in repr(req)
    assert "super-secret-token" not in req.body_json()


def test_to_httpx_request() -> None:
    req = build_request(_config(endpoint_domain="foo.bar"), rng=random.Random(3))
    hx = req.to_httpx()

    assert hx.method == "POST"
    assert str(hx.url) == "https://foo.bar/2/shockers/control"
    assert hx.headers["OpenShockToken"] == "tok"
    assert hx.headers["accept"] == "application/json"
    assert hx.headers["Content-Type"] == "application/json"
    assert json.loads(hx.content) == json.loads(req.body_json())


def test_window_violations_cannot_be_built() -> None:
    with pytest.raises(ValidationError):
        DurationWindow(minDuration=200, maxDuration=1000)
    with pytest.raises(ValidationError):
        IntensityWindow(minIntensity=50, maxIntensity=10)
