"""Pytest configuration and fixtures for config package tests."""

import os

import pytest


@pytest.fixture
def sample_config_dict():
    """Sample configuration dictionary."""
    return {
        "validation": {
            "debounce_delay_ms": 250,
            "scroll_block": "start",
        },
        "forms": [
            {
                "name": "trip_request",
                "fields": [
                    {"name": "name", "constraints": [{"type": "required"}]},
                    {"name": "email", "constraints": [{"type": "email"}]},
                ],
            },
            {
                "name": "signup",
                "fields": [{"name": "password", "constraints": [{"type": "password"}]}],
            },
        ],
    }


@pytest.fixture
def env_vars(monkeypatch):
    """Helper to set environment variables."""

    def _set_env(**kwargs):
        for key, value in kwargs.items():
            monkeypatch.setenv(key, str(value))

    return _set_env


@pytest.fixture(autouse=True)
def clear_env(monkeypatch):
    """Clear all FORMKNOBS_ environment variables."""
    for key in list(os.environ.keys()):
        if key.startswith("FORMKNOBS_"):
            monkeypatch.delenv(key)
