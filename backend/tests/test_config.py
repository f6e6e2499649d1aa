from classboard.core.config import Settings, get_settings


def test_defaults_match_board_conventions(monkeypatch):
    monkeypatch.delenv("CLASSBOARD_STEP_DURATION_MINUTES", raising=False)
    settings = Settings(_env_file=None)

    assert settings.step_duration_minutes == 30
    assert settings.min_duration_minutes == 30
    assert settings.required_gap_minutes == 0
    assert settings.max_start_minutes == 1380
    assert settings.submit_time == "09:00"
    assert settings.default_location == "Beach"
    assert (settings.duration_cap_one, settings.duration_cap_two, settings.duration_cap_three) == (60, 90, 120)


def test_environment_overrides_with_prefix(monkeypatch):
    monkeypatch.setenv("CLASSBOARD_STEP_DURATION_MINUTES", "15")
    monkeypatch.setenv("CLASSBOARD_DEFAULT_LOCATION", "Lake")
    settings = get_settings()

    assert settings.step_duration_minutes == 15
    assert settings.default_location == "Lake"
    assert get_settings() is settings


def test_location_options_accept_comma_or_json_lists():
    assert Settings(_env_file=None, location_options="Beach, Bay ,,Lake").location_options == ["Beach", "Bay", "Lake"]
    assert Settings(_env_file=None, location_options='["Pool", " Indoor "]').location_options == ["Pool", "Indoor"]
    assert Settings(_env_file=None, location_options=["River"]).location_options == ["River"]
