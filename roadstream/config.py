"""Configuration helpers for the road and river streamer."""
from __future__ import annotations

import json
import os
from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping, Optional

DEFAULT_ENV_PREFIX = "ROADSTREAM"


# //1.- Define the immutable parameter set driving every generation stage.
@dataclass(frozen=True)
class StreamingParams:
    """Knob set shared by the control points, builders and streamer."""

    road_width: float = 5.0
    subdivisions: int = 20
    segments_ahead: int = 5
    min_segment_distance: float = 25.0
    max_segment_distance: float = 35.0
    max_turn_angle: float = 30.0
    max_height_variation: float = 2.0
    min_global_height: float = -5.0
    max_global_height: float = 10.0
    seed_spacing: float = 0.1
    river_subdivisions: int = 20
    river_hoz_subdivisions: int = 8
    river_width: float = 10.0
    river_road_distance: float = 2.0
    river_height: float = -6.0
    max_rows_per_chunk: int = 50
    wind_lerp_speed: float = 1.5
    retain_full_history: bool = False

    # //2.- Reject parameter combinations the generators cannot honour.
    def __post_init__(self) -> None:
        if self.road_width <= 0.0:
            raise ValueError("road_width must be positive")
        if self.subdivisions < 1:
            raise ValueError("subdivisions must be >= 1")
        if self.segments_ahead < 1:
            raise ValueError("segments_ahead must be >= 1")
        if self.min_segment_distance <= 0.0:
            raise ValueError("min_segment_distance must be positive")
        if self.max_segment_distance < self.min_segment_distance:
            raise ValueError("max_segment_distance must be >= min_segment_distance")
        if not 0.0 <= self.max_turn_angle < 180.0:
            raise ValueError("max_turn_angle must be in [0, 180) degrees")
        if self.max_height_variation < 0.0:
            raise ValueError("max_height_variation must not be negative")
        if self.min_global_height > self.max_global_height:
            raise ValueError("min_global_height must not exceed max_global_height")
        if self.seed_spacing <= 0.0:
            raise ValueError("seed_spacing must be positive")
        if self.river_subdivisions < 1:
            raise ValueError("river_subdivisions must be >= 1")
        if self.river_hoz_subdivisions < 1:
            raise ValueError("river_hoz_subdivisions must be >= 1")
        if self.river_width <= 0.0:
            raise ValueError("river_width must be positive")
        if self.max_rows_per_chunk < 2:
            raise ValueError("max_rows_per_chunk must be >= 2")
        if self.wind_lerp_speed < 0.0:
            raise ValueError("wind_lerp_speed must not be negative")

    @property
    def river_offset(self) -> float:
        """Lateral distance from the road centreline to the river centreline."""

        return (self.river_width + self.road_width) * 0.5 + self.river_road_distance

    @property
    def history_limit(self) -> Optional[int]:
        """Number of trailing control points kept, ``None`` when unbounded.

        A full window of ``segments_ahead + 1`` spans needs its four
        control points each, ``segments_ahead + 4`` in total.
        """

        if self.retain_full_history:
            return None
        return self.segments_ahead + 4

    # //3.- Build parameters from a mapping using either naming convention.
    @classmethod
    def from_mapping(cls, payload: Optional[Mapping[str, Any]] = None) -> "StreamingParams":
        if not payload:
            return cls()
        known = {field.name: field for field in fields(cls)}
        values: Dict[str, Any] = {}
        for key, raw in payload.items():
            name = _ALIASES.get(key, key)
            if name not in known:
                raise ValueError(f"Unknown streaming parameter '{key}'")
            values[name] = _coerce(known[name].type, raw)
        return cls(**values)

    # //4.- Allow overriding individual fields through environment variables.
    def with_environment(self, prefix: str = DEFAULT_ENV_PREFIX, env: Optional[Mapping[str, str]] = None) -> "StreamingParams":
        source = env if env is not None else os.environ
        overrides: Dict[str, Any] = {}
        for field in fields(self):
            raw = source.get(f"{prefix}_{field.name.upper()}")
            if raw is not None:
                overrides[field.name] = raw
        if not overrides:
            return self
        merged = {field.name: getattr(self, field.name) for field in fields(self)}
        merged.update(overrides)
        return StreamingParams.from_mapping(merged)


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


_ALIASES: Dict[str, str] = {_camel(field.name): field.name for field in fields(StreamingParams)}


def _coerce(annotation: Any, raw: Any) -> Any:
    kind = annotation if isinstance(annotation, str) else getattr(annotation, "__name__", "")
    if kind == "bool":
        if isinstance(raw, str):
            return raw.strip().lower() in {"1", "true", "yes", "on"}
        return bool(raw)
    if kind == "int":
        return int(raw)
    return float(raw)


# //5.- Load a JSON configuration file and coerce it into parameters.
def _read_json_config(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as handle:
        payload = json.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"Streaming configuration in {path} must be a JSON object")
    return payload


# //6.- Canonical configuration accessor used by the demo and integrations.
def load_streaming_config(
    mapping: Optional[Mapping[str, Any]] = None,
    *,
    config_path: Optional[str] = None,
    env_prefix: str = DEFAULT_ENV_PREFIX,
    env: Optional[Mapping[str, str]] = None,
) -> StreamingParams:
    source = env if env is not None else os.environ
    if mapping is not None:
        params = StreamingParams.from_mapping(mapping)
    else:
        path = config_path or source.get(f"{env_prefix}_CONFIG")
        params = StreamingParams.from_mapping(_read_json_config(path)) if path else StreamingParams()
    return params.with_environment(env_prefix, source)


# //7.- Resolve the optional world seed used to build the random generator.
def load_seed(env_prefix: str = DEFAULT_ENV_PREFIX, env: Optional[Mapping[str, str]] = None) -> Optional[int]:
    source = env if env is not None else os.environ
    raw = source.get(f"{env_prefix}_SEED")
    if raw is None or raw.strip() == "":
        return None
    return int(raw)


__all__ = ["StreamingParams", "load_streaming_config", "load_seed", "DEFAULT_ENV_PREFIX"]
