import json

import numpy as np
import pytest

from spheretrace.scene import (
    Material,
    Scene,
    SceneFormatError,
    Sphere,
    parse_vec3,
    scene_from_dict,
    scene_from_file,
)


def _scene_dict():
    return {
        "CameraPos": [0, 0, 5],
        "CameraLookAt": [0, 0, 0],
        "CameraVFOV": 45,
        "SkyColor": "#336699",
        "SkyIntensity": 0.5,
        "Spheres": [{"Position": [1, 2, 3], "Radius": 1.5, "MatIndex": 1}, {}],
        "Materials": [{}, {"Albedo": "#ff0000", "Roughness": 0.25}],
        "EnableToneMapping": False,
    }


def test_parse_vec3_array():
    assert np.array_equal(parse_vec3([1, 2.5, -3]), [1.0, 2.5, -3.0])


def test_parse_vec3_scalar_broadcasts():
    assert np.array_equal(parse_vec3(0.5), [0.5, 0.5, 0.5])


def test_parse_vec3_hex_channels_divided_by_256():
    color = parse_vec3("#ff0000")
    assert color[0] * 256 == 255
    assert color[1] == 0 and color[2] == 0


def test_parse_vec3_hash_is_optional():
    assert np.array_equal(parse_vec3("00ff00"), parse_vec3("#00ff00"))


def test_parse_vec3_short_hex_is_repeated_whole():
    assert np.array_equal(parse_vec3("#abc"), parse_vec3("#abcabc"))


def test_parse_vec3_black():
    assert np.array_equal(parse_vec3("#000000"), [0.0, 0.0, 0.0])


@pytest.mark.parametrize("text", ["#ff00", "#1234567", ""])
def test_parse_vec3_bad_length(text):
    with pytest.raises(SceneFormatError, match="Unsupported color format!"):
        parse_vec3(text)


def test_parse_vec3_non_hex_string():
    with pytest.raises(SceneFormatError):
        parse_vec3("#zzzzzz")


def test_parse_vec3_short_array():
    with pytest.raises(SceneFormatError):
        parse_vec3([1, 2])


@pytest.mark.parametrize("value", [True, None, {"x": 1}])
def test_parse_vec3_wrong_type(value):
    with pytest.raises(SceneFormatError):
        parse_vec3(value)


def test_material_defaults_and_emission():
    material = Material()
    assert np.array_equal(material.albedo, [1.0, 1.0, 1.0])
    assert material.roughness == 1.0
    assert np.array_equal(material.emission(), [0.0, 0.0, 0.0])
    lit = Material(emission_color=[1, 1, 1], emission_power=3.0)
    assert np.array_equal(lit.emission(), [3.0, 3.0, 3.0])


def test_sphere_defaults():
    sphere = Sphere()
    assert sphere.radius == 0.5
    assert sphere.mat_index == 0
    assert np.array_equal(sphere.position, [0.0, 0.0, 0.0])


def test_sky_light_scales_color():
    scene = Scene(sky_color=[0.2, 0.4, 0.8], sky_intensity=0.5)
    assert np.allclose(scene.sky_light(), [0.1, 0.2, 0.4])


def test_scene_from_dict_reads_all_fields():
    scene = scene_from_dict(_scene_dict())
    assert np.array_equal(scene.camera_pos, [0, 0, 5])
    assert scene.camera_vfov == 45
    assert np.array_equal(scene.sky_color, parse_vec3("#336699"))
    assert scene.sky_intensity == 0.5
    assert scene.enable_tone_mapping is False
    assert len(scene.spheres) == 2
    assert np.array_equal(scene.spheres[0].position, [1, 2, 3])
    assert scene.spheres[0].radius == 1.5
    assert scene.spheres[0].mat_index == 1
    assert scene.spheres[1].radius == 0.5
    assert scene.materials[1].roughness == 0.25
    assert np.array_equal(scene.materials[1].albedo, parse_vec3("#ff0000"))
    assert np.array_equal(scene.materials[0].albedo, [1, 1, 1])


@pytest.mark.parametrize("key", list(_scene_dict().keys()))
def test_scene_from_dict_requires_every_key(key):
    data = _scene_dict()
    del data[key]
    with pytest.raises(SceneFormatError, match=key):
        scene_from_dict(data)


def test_tone_mapping_flag_must_be_boolean():
    data = _scene_dict()
    data["EnableToneMapping"] = 1
    with pytest.raises(SceneFormatError):
        scene_from_dict(data)


def test_spheres_must_be_objects():
    data = _scene_dict()
    data["Spheres"] = [[1, 2, 3]]
    with pytest.raises(SceneFormatError):
        scene_from_dict(data)


def test_scene_from_file_round_trip(tmp_path):
    path = tmp_path / "scene.json"
    path.write_text(json.dumps(_scene_dict()), encoding="utf-8")
    scene = scene_from_file(str(path))
    assert scene.camera_vfov == 45
    assert len(scene.materials) == 2


def test_scene_from_file_missing(tmp_path):
    missing = tmp_path / "nope.json"
    with pytest.raises(OSError, match="Failed to open file"):
        scene_from_file(str(missing))


def test_scene_from_file_invalid_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(SceneFormatError):
        scene_from_file(str(path))