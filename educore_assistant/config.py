"""Configuration management for the signup assistant."""

import os
from typing import Any

import yaml
from dotenv import load_dotenv

CLIENT_API_KEY_ENV = "ASSISTANT_PUBLISHABLE_KEY"


class Configuration:
    """Manages configuration and environment variables for the assistant."""

    def __init__(self, config_path: str | None = None) -> None:
        """Initialize configuration from YAML and environment variables."""
        self.load_env()  # Load .env for API keys
        self._config = self._load_yaml_config(config_path)

    @staticmethod
    def load_env() -> None:
        """Load environment variables from .env file."""
        load_dotenv()

    def _load_yaml_config(self, config_path: str | None) -> dict[str, Any]:
        """Load configuration from YAML file."""
        if config_path is None:
            config_path = os.path.join(os.path.dirname(__file__), "config.yaml")
        with open(config_path) as file:
            config = yaml.safe_load(file)
            if not isinstance(config, dict):
                raise ValueError(
                    f"Config file must be YAML dict, got {type(config)}"
                )
            return config

    def get_config_dict(self) -> dict[str, Any]:
        """Get the full configuration dictionary.

        Returns:
            The complete configuration dictionary.
        """
        return self._config

    def _get_assistant_section(self, section: str) -> dict[str, Any]:
        return self._config.get("assistant", {}).get(section, {})

    def get_client_config(self) -> dict[str, Any]:
        """Get chat client configuration from YAML.

        Returns:
            Client configuration dictionary with validated values.

        Raises:
            ValueError: If required client parameters are missing or invalid.
        """
        client_config = self._get_assistant_section("client")

        required_keys = ["url", "connect_timeout", "read_timeout"]
        for key in required_keys:
            if key not in client_config:
                raise ValueError(
                    f"assistant.client.{key} must be explicitly configured "
                    "in config.yaml"
                )

        if client_config["connect_timeout"] <= 0:
            raise ValueError("assistant.client.connect_timeout must be positive")
        if client_config["read_timeout"] <= 0:
            raise ValueError("assistant.client.read_timeout must be positive")

        return client_config

    def get_gateway_config(self) -> dict[str, Any]:
        """Get gateway proxy configuration from YAML.

        Returns:
            Gateway configuration dictionary with validated values.

        Raises:
            ValueError: If required gateway parameters are missing or invalid.
        """
        gateway_config = self._get_assistant_section("gateway")

        required_keys = ["upstream_url", "model", "timeout", "api_key_env"]
        for key in required_keys:
            if key not in gateway_config:
                raise ValueError(
                    f"assistant.gateway.{key} must be explicitly configured "
                    "in config.yaml"
                )

        if gateway_config["timeout"] <= 0:
            raise ValueError("assistant.gateway.timeout must be positive")

        return gateway_config

    def get_streaming_config(self) -> dict[str, Any]:
        """Get stream decoder configuration from YAML.

        Returns:
            Streaming configuration dictionary.

        Raises:
            ValueError: If required streaming parameters are missing or invalid.
        """
        streaming_config = self._get_assistant_section("streaming")

        required_keys = ["encoding", "max_frame_retries"]
        for key in required_keys:
            if key not in streaming_config:
                raise ValueError(
                    f"assistant.streaming.{key} must be explicitly configured "
                    "in config.yaml"
                )

        # bool is an int subclass; reject it explicitly
        max_retries = streaming_config["max_frame_retries"]
        if max_retries is not None and (
            isinstance(max_retries, bool)
            or not isinstance(max_retries, int)
            or max_retries < 0
        ):
            raise ValueError(
                "assistant.streaming.max_frame_retries must be null or a "
                "non-negative integer"
            )

        return streaming_config

    def get_server_config(self) -> dict[str, Any]:
        """Get HTTP server configuration from YAML.

        Returns:
            Server configuration dictionary.

        Raises:
            ValueError: If required server parameters are missing.
        """
        server_config = self._config.get("server", {})

        required_keys = ["host", "port", "log_level"]
        for key in required_keys:
            if key not in server_config:
                raise ValueError(
                    f"server.{key} must be explicitly configured in config.yaml"
                )

        return server_config

    def get_logging_config(self) -> dict[str, Any]:
        """Get logging configuration from YAML.

        Returns:
            Logging configuration dictionary.
        """
        return self._config.get("logging", {})

    @property
    def client_api_key(self) -> str:
        """Get the publishable key the chat client sends to the endpoint.

        Raises:
            ValueError: If the key is not found in environment variables.
        """
        api_key = os.getenv(CLIENT_API_KEY_ENV)
        if not api_key:
            raise ValueError(
                f"API key '{CLIENT_API_KEY_ENV}' not found in environment variables"
            )
        return api_key

    @property
    def gateway_api_key(self) -> str | None:
        """Get the upstream gateway key, or None when it is not set."""
        env_key = self.get_gateway_config()["api_key_env"]
        return os.getenv(env_key) or None
