"""Shared fixtures for the signup assistant tests."""

import copy
import json

import pytest
import yaml

from educore_assistant.config import Configuration

BASE_CONFIG = {
    "assistant": {
        "client": {
            "url": "http://testserver/functions/v1/signup-assistant",
            "connect_timeout": 5.0,
            "read_timeout": 5.0,
        },
        "gateway": {
            "upstream_url": "https://gateway.test/v1/chat/completions",
            "model": "test/model",
            "timeout": 5.0,
            "api_key_env": "AI_GATEWAY_API_KEY",
        },
        "streaming": {
            "encoding": "utf-8",
            "max_frame_retries": 3,
        },
    },
    "server": {"host": "127.0.0.1", "port": 8000, "log_level": "info"},
    "logging": {"level": "INFO"},
}


def data_line(content: str) -> bytes:
    """One event-stream data frame carrying a content delta."""
    envelope = {"choices": [{"delta": {"content": content}}]}
    return f"data: {json.dumps(envelope, ensure_ascii=False)}\n".encode()


@pytest.fixture
def write_config(tmp_path):
    def _write(config: dict) -> str:
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump(config, allow_unicode=True))
        return str(path)
    return _write


@pytest.fixture
def base_config() -> dict:
    return copy.deepcopy(BASE_CONFIG)


@pytest.fixture
def configuration(write_config, base_config) -> Configuration:
    return Configuration(write_config(base_config))
