# spheretrace

A small path tracer that renders scenes made only of spheres. A JSON file
describes the scene: camera, sky, spheres and materials. The picture is
written out as an 8-bit RGB PNG. The PNG encoder is built in, so numpy is the
only dependency. Samples are split across worker threads. While they run, each
thread shows its own progress bar in the terminal. At the end every pixel is
clamped to [0, 1]. Before that, ACES filmic tone mapping is applied, unless
the scene turns it off.

Each path is traced in plain Python, pixel by pixel. Renders are therefore
slow, so keep image sizes and sample counts modest.

## Installation

```
pip install .
```

## Usage

```
spheretrace --input scene.json --out render.png --width 640 --height 360 --samples 64 --bounces 5 --threads 4
```

| Option      | Short | Default      | Meaning                                  |
|-------------|-------|--------------|------------------------------------------|
| `--input`   | `-i`  | (required)   | Path of the JSON scene                   |
| `--out`     | `-o`  | `render.png` | Where the PNG is written                 |
| `--width`   | `-w`  | `256`        | Image width in pixels                    |
| `--height`  | `-h`  | `256`        | Image height in pixels                   |
| `--samples` | `-s`  | `16`         | Samples per pixel                        |
| `--bounces` | `-b`  | `5`          | Bounces per path (a path traces up to bounces + 1 segments) |
| `--threads` | `-t`  | `4`          | Worker threads                           |

How the options are read:

- Each option takes the value that follows it. The first occurrence wins.
- Numeric values are read as unsigned 32-bit integers. A leading number is
  enough, so `12px` reads as `12`. Negative values wrap around.
- At most 63 arguments are accepted.

Samples are shared out as evenly as possible among the threads. If more
threads are asked for than there are samples, only one thread per sample is
started. A sample or thread count of zero is an error.

On any error the command prints the message to standard error and exits with
status 1. Errors include a missing `--input`, an unreadable or malformed
scene, and invalid settings. On success it exits with status 0.

## Scene format

```json
{
  "CameraPos": [0, 1, 4],
  "CameraLookAt": [0, 0.5, 0],
  "CameraVFOV": 45,
  "SkyColor": "#87ceeb",
  "SkyIntensity": 1.0,
  "EnableToneMapping": true,
  "Spheres": [
    {"Position": [0, -100.5, 0], "Radius": 100, "MatIndex": 0},
    {"Position": [0, 0.5, 0], "Radius": 1, "MatIndex": 1}
  ],
  "Materials": [
    {"Albedo": [0.8, 0.8, 0.8], "Roughness": 1.0},
    {"Albedo": "#ff8800", "Roughness": 0.2, "EmissionColor": 1, "EmissionPower": 0.0}
  ]
}
```

The scene object must hold all eight keys shown above. `CameraVFOV` is the
vertical field of view in degrees. The up direction is always +Y.

Fields left out of a sphere or material take their defaults:

- A sphere defaults to position `0`, radius `0.5` and material `0`.
- A material defaults to albedo `1`, roughness `1` and no emission.

A material's emitted light is `EmissionColor * EmissionPower`. Roughness
blends between a mirror reflection (0) and a diffuse bounce (1).

A vector can be given in any of these forms:

- An array of numbers. The first three are used.
- A hex colour string of six digits, such as `"#ff8800"`. The `#` is optional.
  Each channel is divided by 256.
- A hex string of three digits. The whole string is repeated, so `"f80"`
  reads as `"f80f80"`.
- A single number, which is used for all three components.

A malformed scene raises `spheretrace.scene.SceneFormatError`, which is a
subclass of `ValueError`. A file that cannot be opened raises `OSError`.

## Library use

```python
from spheretrace.application import AppSettings, Application
from spheretrace.scene import scene_from_file

settings = AppSettings(width=320, height=240, samples=8, scene_path="scene.json", seed=1)
app = Application(settings)
app.set_scene(scene_from_file(settings.scene_path))
app.render()
```

`AppSettings.seed` makes a render repeatable. Thread *n* seeds its Mersenne
Twister generator with `seed + n`. Without a seed, each thread seeds from the
operating system.

`Application.render()` runs three steps, which can also be called one by one:

- `calculate_projection()`
- `build_samples()`
- `post_process()`

It then saves the image to `output_path`.

Other building blocks:

- `spheretrace.scene`: `Scene`, `Sphere`, `Material`, `parse_vec3`,
  `scene_from_dict` and `scene_from_file`.
- `spheretrace.ray`: `Ray` with `trace()`, and `reflect`.
- `spheretrace.image`: `Image`, with `get`, `set`, `fill`, `to_rgb_bytes` and
  `save`.
- `spheretrace.rng`: `Rng`, an MT19937 generator.
- `spheretrace.application`: the camera helpers `perspective_fov` and
  `look_at`, plus `tonemap_aces` and `progress_bar`.
- `spheretrace.timer`: `Timer`, a millisecond stopwatch.

## Limitations

The only shapes are spheres. There is no preview window and no interactive
mode. Images are written as PNG only.