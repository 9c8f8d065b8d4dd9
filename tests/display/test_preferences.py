import pytest

from workline.display.preferences import DisplayPreferences, QrMode, load_preferences, save_preferences


def test_default_is_off():
    prefs = DisplayPreferences()

    assert prefs.mode is QrMode.OFF
    assert prefs.generate_request() is None


def test_rotating_request_uses_minutes():
    prefs = DisplayPreferences(mode=QrMode.ROTATING, rotating_minutes=2)

    assert prefs.generate_request() == {"type": "rotating", "duration_minutes": 2}


@pytest.mark.parametrize(
    "legacy, expected",
    [
        ({"rotation": True, "static": True}, QrMode.ROTATING),
        ({"rotation": False, "static": True}, QrMode.STATIC),
        ({}, QrMode.OFF),
    ],
)
def test_legacy_booleans_collapse_to_one_mode(legacy, expected):
    assert DisplayPreferences.from_dict(legacy).mode is expected


def test_round_trip_through_file(tmp_path):
    path = tmp_path / "nested" / "prefs.json"
    prefs = DisplayPreferences(mode=QrMode.STATIC, static_hours=8, poll_interval_seconds=30)

    save_preferences(path, prefs)

    assert load_preferences(path) == prefs


def test_missing_file_gives_defaults(tmp_path):
    assert load_preferences(tmp_path / "absent.json") == DisplayPreferences()


def test_mode_string_is_coerced():
    assert DisplayPreferences().with_mode("rotating").mode is QrMode.ROTATING
