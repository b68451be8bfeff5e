import pytest

from image_counter.config import CountConfig
from image_counter.errors import ConfigError


def test_defaults():
    config = CountConfig(root="https://example.com").validate()

    assert config.max_depth == 2
    assert config.diagnostics_enabled is False
    assert config.workers == 1
    assert not config.concurrent


@pytest.mark.parametrize(
    "kwargs",
    [
        {"root": ""},
        {"root": "   "},
        {"root": "https://example.com", "max_depth": 0},
        {"root": "https://example.com", "max_depth": -3},
        {"root": "https://example.com", "max_depth": 2.5},
        {"root": "https://example.com", "max_depth": True},
        {"root": "https://example.com", "timeout_s": 0},
        {"root": "https://example.com", "workers": 0},
    ],
)
def test_invalid_settings_raise(kwargs):
    with pytest.raises(ConfigError):
        CountConfig(**kwargs).validate()


def test_config_error_is_value_error():
    with pytest.raises(ValueError, match="Max depth"):
        CountConfig(root="x", max_depth=0).validate()
