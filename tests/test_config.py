import pytest

from tracker.config import DEFAULT_SETTINGS, Settings, settings_from_dict, settings_to_dict


def test_empty_preferences_give_defaults():
    assert settings_from_dict(None) == DEFAULT_SETTINGS
    assert settings_from_dict({}) == Settings("USD", "en-US", "monday", 1)


def test_camel_case_keys_and_unknown_keys():
    s = settings_from_dict({"currency": "EUR", "startOfWeek": "sunday", "startOfMonth": "5", "theme": "dark"})
    assert s == Settings("EUR", "en-US", "sunday", 5)
    assert s.starts_on_monday is False


def test_round_trip():
    s = Settings("GBP", "en-GB", "sunday", 28)
    assert settings_from_dict(settings_to_dict(s)) == s


def test_invalid_preferences_raise():
    with pytest.raises(ValueError):
        settings_from_dict({"startOfWeek": "friday"})
    with pytest.raises(ValueError):
        settings_from_dict({"start_of_month": 31})
