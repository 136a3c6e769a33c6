from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


load_dotenv()


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be a number, got {raw!r}")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}")


class Settings:
    """
    Central configuration for gptcli.

    Values are loaded once from environment variables (with sensible defaults)
    and then exposed via typed properties. Command-line flags take precedence
    over everything here; see cli/main.py.
    """

    def __init__(self) -> None:
        # OpenAI / model configuration
        self._openai_api_key = (os.getenv("OPENAI_API_KEY") or "").strip() or None
        self._openai_base_url = os.getenv("OPENAI_BASE_URL") or None
        self._model = os.getenv("GPTCLI_MODEL", "gpt-5-mini")
        self._image_model = os.getenv("GPTCLI_IMAGE_MODEL", "gpt-image-1")
        self._image_size = os.getenv("GPTCLI_IMAGE_SIZE", "1024x1024")
        self._proxy = os.getenv("GPTCLI_PROXY") or None

        # Request defaults
        self._system = os.getenv("GPTCLI_SYSTEM", "")
        self._output_format = os.getenv("GPTCLI_FORMAT", "text").lower()
        self._temperature = _env_float("GPTCLI_TEMPERATURE", None)
        self._max_tokens = _env_int("GPTCLI_MAX_TOKENS", 0)

        # Retry / backoff
        self._retry_attempts = _env_int("GPTCLI_RETRY_ATTEMPTS", 4)
        self._retry_base_delay = _env_float("GPTCLI_RETRY_BASE_DELAY", 0.5)
        self._retry_max_delay = _env_float("GPTCLI_RETRY_MAX_DELAY", 8.0)
        self._retry_jitter = _env_float("GPTCLI_RETRY_JITTER", 0.25)

        # Transcripts, history and logging
        self._data_dir = Path(
            os.getenv("GPTCLI_DATA_DIR", str(Path.home() / ".config" / "gptcli"))
        ).expanduser()
        self._log_level = os.getenv("GPTCLI_LOG_LEVEL", "WARNING").upper()

    # ------------------------------------------------------------------
    # OpenAI / model settings
    # ------------------------------------------------------------------

    @property
    def api_key(self) -> str:
        if not self._openai_api_key:
            raise RuntimeError(
                "OPENAI_API_KEY is not set. Please export it in your environment, "
                "define it in a .env file or pass --api-key."
            )
        return self._openai_api_key

    @property
    def has_api_key(self) -> bool:
        return bool(self._openai_api_key)

    @property
    def openai_base_url(self) -> Optional[str]:
        return self._openai_base_url

    @property
    def model(self) -> str:
        return self._model

    @property
    def image_model(self) -> str:
        return self._image_model

    @property
    def image_size(self) -> str:
        return self._image_size

    @property
    def proxy(self) -> Optional[str]:
        return self._proxy

    # ------------------------------------------------------------------
    # Request defaults
    # ------------------------------------------------------------------

    @property
    def system(self) -> str:
        return self._system

    @property
    def output_format(self) -> str:
        return self._output_format

    @property
    def temperature(self) -> Optional[float]:
        return self._temperature

    @property
    def max_tokens(self) -> int:
        return self._max_tokens

    # ------------------------------------------------------------------
    # Retry
    # ------------------------------------------------------------------

    @property
    def retry_attempts(self) -> int:
        return self._retry_attempts

    @property
    def retry_base_delay(self) -> float:
        return self._retry_base_delay

    @property
    def retry_max_delay(self) -> float:
        return self._retry_max_delay

    @property
    def retry_jitter(self) -> float:
        return self._retry_jitter

    # ------------------------------------------------------------------
    # Paths / logging
    # ------------------------------------------------------------------

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    @property
    def log_level(self) -> str:
        return self._log_level


settings = Settings()
