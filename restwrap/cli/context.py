from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from restwrap import Client, ClientConfig
from restwrap.exceptions import ConfigurationError

from .errors import CLIError, cli_error_for_exception

OutputFormat = Literal["table", "json"]


@dataclass
class CLIContext:
    output: OutputFormat
    verbosity: int
    base_url: str | None
    timeout: float | None
    dotenv: bool
    env_file: Path

    _client: Client | None = None

    def load_config(self) -> ClientConfig:
        try:
            return ClientConfig.from_env(
                load_dotenv=self.dotenv,
                dotenv_path=self.env_file,
                base_url=self.base_url,
                timeout=self.timeout,
                log_requests=self.verbosity >= 2 or None,
            )
        except ImportError as exc:
            raise CLIError(
                "Optional .env support requires python-dotenv; install `restwrap[dotenv]`.",
                exit_code=2,
                error_type="usage_error",
            ) from exc
        except ConfigurationError as exc:
            raise cli_error_for_exception(exc) from exc

    def get_client(self) -> Client:
        if self._client is None:
            config = self.load_config()
            try:
                self._client = Client.from_config(config)
            except ConfigurationError as exc:
                raise cli_error_for_exception(exc) from exc
        return self._client

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
