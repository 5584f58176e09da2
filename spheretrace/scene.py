"""Scene description: spheres, materials, camera and sky, loaded from JSON."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any

import numpy as np

_HEX_DIGITS = re.compile(r"[0-9a-fA-F]+")


class SceneFormatError(ValueError):
    """Raised when a scene document is malformed."""


def _vec(value: Any) -> np.ndarray:
    vec = np.array(value, dtype=np.float64)
    if vec.shape == ():
        return np.full(3, float(vec))
    if vec.shape != (3,):
        raise ValueError(f"expected a 3-component vector, got shape {vec.shape}")
    return vec


def _zeros() -> np.ndarray:
    return np.zeros(3)


def _ones() -> np.ndarray:
    return np.ones(3)


@dataclass(eq=False)
class Material:
    """Surface response of a sphere."""

    albedo: np.ndarray = field(default_factory=_ones)
    roughness: float = 1.0
    emission_color: np.ndarray = field(default_factory=_zeros)
    emission_power: float = 0.0

    def __post_init__(self) -> None:
        self.albedo = _vec(self.albedo)
        self.emission_color = _vec(self.emission_color)

    def emission(self) -> np.ndarray:
        """Return the emitted light: colour scaled by power."""
        return self.emission_color * self.emission_power


@dataclass(eq=False)
class Sphere:
    """A sphere referencing a material by index."""

    position: np.ndarray = field(default_factory=_zeros)
    radius: float = 0.5
    mat_index: int = 0

    def __post_init__(self) -> None:
        self.position = _vec(self.position)


@dataclass(eq=False)
class Scene:
    """Everything the renderer needs to draw one frame."""

    camera_pos: np.ndarray = field(default_factory=_zeros)
    camera_look_at: np.ndarray = field(default_factory=_zeros)
    camera_vfov: float = 0.0
    sky_color: np.ndarray = field(default_factory=_zeros)
    sky_intensity: float = 1.0
    spheres: list[Sphere] = field(default_factory=list)
    materials: list[Material] = field(default_factory=list)
    enable_tone_mapping: bool = True

    def __post_init__(self) -> None:
        self.camera_pos = _vec(self.camera_pos)
        self.camera_look_at = _vec(self.camera_look_at)
        self.sky_color = _vec(self.sky_color)

    def sky_light(self) -> np.ndarray:
        """Return the light contributed by rays escaping to the sky."""
        return self.sky_color * self.sky_intensity


def _number(value: Any, what: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SceneFormatError(f"{what}: expected a number, got {type(value).__name__}")
    return float(value)


def _integer(value: Any, what: str) -> int:
    return int(_number(value, what))


def _boolean(value: Any, what: str) -> bool:
    if not isinstance(value, bool):
        raise SceneFormatError(f"{what}: expected a boolean, got {type(value).__name__}")
    return value


def parse_vec3(value: Any) -> np.ndarray:
    """Read a vector from a 3-element array, a hex colour string or a scalar."""
    if isinstance(value, (list, tuple)):
        if len(value) < 3:
            raise SceneFormatError("Vector array needs three components!")
        return np.array([_number(c, "vector component") for c in value[:3]])
    if isinstance(value, str):
        text = value[1:] if value.startswith("#") else value
        if len(text) == 3:
            text += text
        elif len(text) != 6:
            raise SceneFormatError("Unsupported color format!")
        match = _HEX_DIGITS.match(text)
        if match is None:
            raise SceneFormatError(f"Invalid hex color: {value!r}")
        code = int(match.group(), 16)
        channels = [(code >> 16) & 0xFF, (code >> 8) & 0xFF, code & 0xFF]
        return np.array(channels, dtype=np.float64) / 256.0
    return np.full(3, _number(value, "vector"))


def _require_object(data: Any, what: str) -> dict:
    if not isinstance(data, dict):
        raise SceneFormatError(f"{what} must be a JSON object")
    return data


def _require_list(data: Any, what: str) -> list:
    if not isinstance(data, list):
        raise SceneFormatError(f"{what} must be a JSON array")
    return data


def _required(data: dict, key: str) -> Any:
    try:
        return data[key]
    except KeyError:
        raise SceneFormatError(f"Missing key: {key}") from None


def _sphere_from_dict(data: Any) -> Sphere:
    data = _require_object(data, "Sphere")
    sphere = Sphere()
    if "Position" in data:
        sphere.position = parse_vec3(data["Position"])
    if "Radius" in data:
        sphere.radius = _number(data["Radius"], "Radius")
    if "MatIndex" in data:
        sphere.mat_index = _integer(data["MatIndex"], "MatIndex")
    return sphere


def _material_from_dict(data: Any) -> Material:
    data = _require_object(data, "Material")
    material = Material()
    if "Albedo" in data:
        material.albedo = parse_vec3(data["Albedo"])
    if "Roughness" in data:
        material.roughness = _number(data["Roughness"], "Roughness")
    if "EmissionColor" in data:
        material.emission_color = parse_vec3(data["EmissionColor"])
    if "EmissionPower" in data:
        material.emission_power = _number(data["EmissionPower"], "EmissionPower")
    return material


def scene_from_dict(data: Any) -> Scene:
    """Build a scene from a parsed JSON document; every scene key is required."""
    data = _require_object(data, "Scene")
    return Scene(
        camera_pos=parse_vec3(_required(data, "CameraPos")),
        camera_look_at=parse_vec3(_required(data, "CameraLookAt")),
        camera_vfov=_number(_required(data, "CameraVFOV"), "CameraVFOV"),
        sky_color=parse_vec3(_required(data, "SkyColor")),
        sky_intensity=_number(_required(data, "SkyIntensity"), "SkyIntensity"),
        spheres=[
            _sphere_from_dict(item)
            for item in _require_list(_required(data, "Spheres"), "Spheres")
        ],
        materials=[
            _material_from_dict(item)
            for item in _require_list(_required(data, "Materials"), "Materials")
        ],
        enable_tone_mapping=_boolean(
            _required(data, "EnableToneMapping"), "EnableToneMapping"
        ),
    )


def scene_from_file(path: str) -> Scene:
    """Load a scene from a JSON file."""
    try:
        with open(path, encoding="utf-8") as handle:
            text = handle.read()
    except OSError as exc:
        raise OSError(f"Failed to open file: {path}!") from exc
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise SceneFormatError(f"Invalid JSON in {path}: {exc}") from exc
    return scene_from_dict(data)