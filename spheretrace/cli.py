"""Command-line entry point for rendering a scene file."""

from __future__ import annotations

import re
import sys

from spheretrace.application import Application, AppSettings
from spheretrace.scene import scene_from_file

_MAX_ARGUMENTS = 63
_UNSIGNED = re.compile(r"\s*([+-]?)([0-9]+)")
_ULONG_LIMIT = 1 << 64


def get_option(args, option, short_option) -> str:
    """Return the value following the first ``option``/``short_option`` flag, or ''."""
    for flag, value in zip(args, args[1:]):
        if flag in (option, short_option):
            return value
    return ""


def _parse_uint32(text: str) -> int:
    match = _UNSIGNED.match(text)
    if match is None:
        raise ValueError(f"Invalid numeric argument: {text!r}")
    value = int(match.group(2))
    if value >= _ULONG_LIMIT:
        raise ValueError(f"Numeric argument out of range: {text!r}")
    if match.group(1) == "-":
        value = -value % _ULONG_LIMIT
    return value & 0xFFFFFFFF


def parse_command_line(argv) -> AppSettings:
    """Build render settings from arguments (program name excluded)."""
    args = list(argv)
    if len(args) > _MAX_ARGUMENTS:
        raise ValueError("Too many input parameters!")

    settings = AppSettings()
    numeric = (
        ("--width", "-w", "width"),
        ("--height", "-h", "height"),
        ("--samples", "-s", "samples"),
        ("--bounces", "-b", "bounces"),
        ("--threads", "-t", "thread_count"),
    )
    for option, short_option, attribute in numeric:
        value = get_option(args, option, short_option)
        if value:
            setattr(settings, attribute, _parse_uint32(value))

    textual = (("--input", "-i", "scene_path"), ("--out", "-o", "output_path"))
    for option, short_option, attribute in textual:
        value = get_option(args, option, short_option)
        if value:
            setattr(settings, attribute, value)

    if not settings.scene_path:
        raise ValueError("Input parameter is required!")
    return settings


def main(argv=None) -> int:
    """Parse arguments, load the scene and render it; return the exit status."""
    if argv is None:
        argv = sys.argv[1:]
    try:
        settings = parse_command_line(argv)
        app = Application(settings)
        scene = scene_from_file(settings.scene_path)
        app.set_scene(scene)
        app.render()
    except Exception as exc:  # report any failure and exit non-zero
        print(exc, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())