"""Path-tracing renderer: camera setup, sampling across threads and post-processing."""

from __future__ import annotations

import dataclasses
import itertools
import math
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

import numpy as np

from spheretrace.image import Image
from spheretrace.ray import Ray, reflect
from spheretrace.rng import Rng
from spheretrace.scene import Scene
from spheretrace.timer import Timer

_NEAR_PLANE = 0.001
_FAR_PLANE = 1000.0
_SURFACE_OFFSET = 0.0001
_STATUS_WIDTH = 32
_VEC3_BYTES = 12
_PROGRESS_INTERVAL = 0.1


@dataclass
class AppSettings:
    """Render options; ``seed`` fixes the per-thread random streams when set."""

    width: int = 256
    height: int = 256
    output_path: str = "render.png"
    scene_path: str = ""
    samples: int = 16
    bounces: int = 5
    thread_count: int = 4
    seed: int | None = None


def _normalize(vector: np.ndarray) -> np.ndarray:
    return vector / np.linalg.norm(vector)


def perspective_fov(fov_radians, width, height, near, far) -> np.ndarray:
    """Return a right-handed perspective matrix with clip depth in [-1, 1]."""
    if width <= 0 or height <= 0:
        raise ValueError(f"invalid viewport size {width}x{height}")
    if fov_radians <= 0:
        raise ValueError(f"field of view must be positive, got {fov_radians}")
    h = math.cos(0.5 * fov_radians) / math.sin(0.5 * fov_radians)
    w = h * height / width
    matrix = np.zeros((4, 4))
    matrix[0, 0] = w
    matrix[1, 1] = h
    matrix[2, 2] = -(far + near) / (far - near)
    matrix[3, 2] = -1.0
    matrix[2, 3] = -(2.0 * far * near) / (far - near)
    return matrix


def look_at(eye, center, up) -> np.ndarray:
    """Return a right-handed view matrix looking from ``eye`` towards ``center``."""
    eye = np.asarray(eye, dtype=np.float64)
    center = np.asarray(center, dtype=np.float64)
    up = np.asarray(up, dtype=np.float64)
    forward = center - eye
    if not np.any(forward):
        raise ValueError("camera position and look-at point coincide")
    forward = _normalize(forward)
    side = np.cross(forward, up)
    if not np.any(side):
        raise ValueError("view direction is parallel to the up vector")
    side = _normalize(side)
    upward = np.cross(side, forward)
    matrix = np.eye(4)
    matrix[0, :3] = side
    matrix[1, :3] = upward
    matrix[2, :3] = -forward
    matrix[0, 3] = -float(np.dot(side, eye))
    matrix[1, 3] = -float(np.dot(upward, eye))
    matrix[2, 3] = float(np.dot(forward, eye))
    return matrix


def tonemap_aces(color) -> np.ndarray:
    """Apply the ACES filmic tone-mapping curve element-wise."""
    x = np.asarray(color, dtype=np.float64)
    a, b, c, d, e = 2.51, 0.03, 2.43, 0.59, 0.14
    return (x * (a * x + b)) / (x * (c * x + d) + e)


def progress_bar(completed, total, width) -> str:
    """Return a bar of ``width`` cells, '#' for the completed fraction."""
    progress = completed / total if total else 1.0
    return "".join("#" if cell / width <= progress else " " for cell in range(1, width + 1))


class Application:
    """Renders a scene into an image and writes it to the configured path."""

    def __init__(self, settings: AppSettings) -> None:
        self.settings = dataclasses.replace(settings)
        self.image = Image(self.settings.width, self.settings.height)
        self.scene: Scene | None = None
        self.projection: np.ndarray | None = None
        self.inverse_projection: np.ndarray | None = None
        self.camera_view: np.ndarray | None = None
        self.inverse_camera_view: np.ndarray | None = None

    def _require_scene(self) -> Scene:
        if self.scene is None:
            raise RuntimeError("Cannot render without scene set!")
        return self.scene

    def set_scene(self, scene: Scene) -> None:
        """Use ``scene`` for subsequent renders."""
        self.scene = scene

    def calculate_projection(self) -> None:
        """Compute the camera matrices from the scene and image size."""
        scene = self._require_scene()
        self.projection = perspective_fov(
            math.radians(scene.camera_vfov),
            float(self.image.width),
            float(self.image.height),
            _NEAR_PLANE,
            _FAR_PLANE,
        )
        self.camera_view = look_at(scene.camera_pos, scene.camera_look_at, [0.0, 1.0, 0.0])
        self.inverse_projection = np.linalg.inv(self.projection)
        self.inverse_camera_view = np.linalg.inv(self.camera_view)

    def calculate_ray_directions(self, rng: Rng) -> np.ndarray:
        """Return a (height, width, 3) array of world-space ray directions, jittered."""
        if self.inverse_projection is None or self.inverse_camera_view is None:
            raise RuntimeError("Camera projection has not been calculated")
        width, height = self.image.width, self.image.height
        offset_x = rng.unit_float()
        offset_y = rng.unit_float()
        xs = (np.arange(width) + offset_x) / width * 2.0 - 1.0
        ys = (height - np.arange(height) + offset_y) / height * 2.0 - 1.0
        coord_x, coord_y = np.meshgrid(xs, ys)
        ones = np.ones_like(coord_x)
        ndc = np.stack([coord_x, coord_y, ones, ones], axis=-1)
        target = ndc @ self.inverse_projection.T
        local = target[..., :3] / target[..., 3:4]
        local /= np.linalg.norm(local, axis=-1, keepdims=True)
        return local @ self.inverse_camera_view[:3, :3].T

    def ray_gen(self, x, y, ray_directions, rng: Rng) -> np.ndarray:
        """Trace one path through pixel ``(x, y)`` and return the light it gathers."""
        scene = self._require_scene()
        ray = Ray(scene.camera_pos, ray_directions[y][x])
        light = np.zeros(3)
        throughput = np.ones(3)
        for _ in range(self.settings.bounces + 1):
            payload = ray.trace(scene)
            if payload.hit_distance < 0:
                light = light + scene.sky_light() * throughput
                break
            sphere = scene.spheres[payload.obj_index]
            material = scene.materials[sphere.mat_index]
            light = light + material.emission() * throughput
            throughput = throughput * material.albedo

            ray.origin = payload.hit_position + payload.world_normal * _SURFACE_OFFSET
            diffuse = _normalize(payload.world_normal + rng.unit_sphere())
            specular = reflect(ray.direction, payload.world_normal)
            roughness = material.roughness
            ray.direction = specular * (1.0 - roughness) + diffuse * roughness
        return light

    def _sample_worker(self, index: int, sample_count: int, completed: list[int]) -> np.ndarray:
        seed = self.settings.seed
        rng = Rng(None if seed is None else seed + index)
        width, height = self.image.width, self.image.height
        accumulated = np.zeros((height, width, 3))
        for _ in range(sample_count):
            directions = self.calculate_ray_directions(rng)
            for y, x in itertools.product(range(height), range(width)):
                accumulated[y, x] += self.ray_gen(x, y, directions, rng)
            completed[index] += 1
        return accumulated

    def build_samples(self) -> None:
        """Accumulate all samples over worker threads and average them into the image."""
        settings = self.settings
        if settings.samples <= 0:
            raise ValueError("Sample count must be positive!")
        if settings.thread_count <= 0:
            raise ValueError("Thread count must be positive!")

        samples_per_thread = settings.samples // settings.thread_count
        # Do not waste threads when the sample count is lower than the thread count
        if samples_per_thread == 0:
            samples_per_thread = 1
            settings.thread_count = settings.samples
        thread_count = settings.thread_count
        remainder = settings.samples % thread_count
        counts = [samples_per_thread + (th < remainder) for th in range(thread_count)]

        mem_usage = (2 * thread_count + 1) * self.image.size() * _VEC3_BYTES // 1024 // 1024
        completed = [0] * thread_count

        with ThreadPoolExecutor(max_workers=thread_count) as pool:
            futures = [
                pool.submit(self._sample_worker, th, counts[th], completed)
                for th in range(thread_count)
            ]
            print(
                f"{settings.width}x{settings.height} {settings.samples} samples "
                f"{mem_usage}MiB required"
            )
            while True:
                done = True
                for index, (future, count) in enumerate(zip(futures, counts)):
                    finished = completed[index]
                    if finished < count and not future.done():
                        done = False
                    bar = progress_bar(finished, count, _STATUS_WIDTH)
                    print(f"Thread {index + 1:2}: [\x1b[32m{bar}\x1b[0m] {finished}/{count}")
                print(f"\x1b[{thread_count}F", end="", flush=True)
                if done:
                    break
                time.sleep(_PROGRESS_INTERVAL)
            print(f"\x1b[{thread_count}E", end="", flush=True)

            for future in futures:
                self.image.pixels += future.result() / settings.samples

    def post_process(self) -> None:
        """Tone-map (when the scene enables it) and clamp every pixel to [0, 1]."""
        scene = self._require_scene()
        print("Performing post process pass... ", end="", flush=True)
        timer = Timer()
        pixels = self.image.pixels
        if scene.enable_tone_mapping:
            pixels = tonemap_aces(pixels)
        self.image.pixels[...] = np.clip(pixels, 0.0, 1.0)
        print(f"{timer.elapsed():g}ms")

    def render(self) -> None:
        """Render the scene and save the result to the output path."""
        self._require_scene()
        self.calculate_projection()
        total = Timer()
        self.build_samples()
        self.post_process()
        print(f"Everything took {total.elapsed():g}ms!")
        print(f"Saving to {self.settings.output_path}...")
        self.image.save(self.settings.output_path)