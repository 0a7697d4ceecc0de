"""Configuration loaded from environment variables.

Environment Variables:
    LM_ACCESS_ID: API token access id
    LM_ACCESS_KEY: API token access key
    LM_ACCOUNT_NAME: Portal account name ({account}.logicmonitor.com)
    LM_DOMAIN: Portal domain (default: logicmonitor.com)
    LM_PAGE_SIZE: Page size for the applied-module listing (default: 1000)
    LM_TIMEOUT_SECONDS: Total per-request timeout (default: 60)
    LM_LOG_SINK: console, file or syslog (default: console)
    LM_LOG_FILE: Log file path when LM_LOG_SINK=file
    LM_LOG_LEVEL: Logging level name (default: INFO)

Values given explicitly to LMSettings take precedence over the environment.
"""
import os
from typing import Optional

from dotenv import load_dotenv

from .api.auth import AccessKey, Credentials
from .api.client import DEFAULT_DOMAIN
from .api.exceptions import ConfigurationError

load_dotenv()

LOG_SINKS = ("console", "file", "syslog")


class LMSettings:
    """Settings for one invocation, read from the environment."""

    def __init__(
        self,
        access_id: Optional[str] = None,
        access_key: Optional[str] = None,
        account_name: Optional[str] = None,
        domain: Optional[str] = None,
        page_size: Optional[int] = None,
        timeout_seconds: Optional[float] = None,
        log_sink: Optional[str] = None,
        log_file: Optional[str] = None,
        log_level: Optional[str] = None,
    ):
        self.access_id = access_id or os.getenv("LM_ACCESS_ID")
        raw_key = access_key or os.getenv("LM_ACCESS_KEY")
        self._access_key = AccessKey(raw_key) if raw_key else None
        self.account_name = account_name or os.getenv("LM_ACCOUNT_NAME")
        self.domain = domain or os.getenv("LM_DOMAIN", DEFAULT_DOMAIN)
        self.page_size = page_size or self._int_env("LM_PAGE_SIZE", 1000)
        self.timeout_seconds = timeout_seconds or self._float_env("LM_TIMEOUT_SECONDS", 60.0)
        self.log_sink = (log_sink or os.getenv("LM_LOG_SINK", "console")).lower()
        self.log_file = log_file or os.getenv("LM_LOG_FILE")
        self.log_level = (log_level or os.getenv("LM_LOG_LEVEL", "INFO")).upper()

        if self.log_sink not in LOG_SINKS:
            raise ConfigurationError(
                f"LM_LOG_SINK must be one of {', '.join(LOG_SINKS)}, got {self.log_sink!r}"
            )
        if self.log_sink == "file" and not self.log_file:
            raise ConfigurationError(
                "LM_LOG_FILE is required when the log sink is 'file'",
                missing_keys=["LM_LOG_FILE"],
            )

    @staticmethod
    def _int_env(name: str, default: int) -> int:
        value = os.getenv(name)
        if not value:
            return default
        try:
            return int(value)
        except ValueError:
            raise ConfigurationError(f"{name} must be an integer, got {value!r}")

    @staticmethod
    def _float_env(name: str, default: float) -> float:
        value = os.getenv(name)
        if not value:
            return default
        try:
            return float(value)
        except ValueError:
            raise ConfigurationError(f"{name} must be a number, got {value!r}")

    def credentials(self) -> Credentials:
        """Build the Credentials used to sign requests.

        Raises:
            ConfigurationError: If any of the three credential values is missing
        """
        missing = []
        if not self.access_id:
            missing.append("LM_ACCESS_ID")
        if not self._access_key:
            missing.append("LM_ACCESS_KEY")
        if not self.account_name:
            missing.append("LM_ACCOUNT_NAME")
        if missing:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing)}",
                missing_keys=missing,
            )

        return Credentials(
            access_id=self.access_id,
            access_key=self._access_key,
            account_name=self.account_name,
        )

    def __repr__(self):
        return (
            f"LMSettings("
            f"access_id={self.access_id!r}, "
            f"account={self.account_name!r}, "
            f"domain={self.domain!r}, "
            f"page_size={self.page_size}, "
            f"timeout={self.timeout_seconds}s, "
            f"log_sink={self.log_sink!r})"
        )
