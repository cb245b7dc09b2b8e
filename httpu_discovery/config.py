from dataclasses import dataclass
import os


@dataclass(frozen=True)
class Settings:
    timeout: float
    num_sends: int
    bind_addr: str
    log_level: str


def _env_number(name: str, default: str, convert):
    raw = os.getenv(name, default)
    try:
        return convert(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def get_settings() -> Settings:
    """
    Centralized defaults for the CLI.
    Values come from environment variables with safe defaults.

    Raises:
        ValueError: If HTTPU_TIMEOUT or HTTPU_NUM_SENDS is not a number.
    """
    return Settings(
        timeout=_env_number("HTTPU_TIMEOUT", "3.0", float),
        num_sends=_env_number("HTTPU_NUM_SENDS", "2", int),
        bind_addr=os.getenv("HTTPU_BIND_ADDR", "0.0.0.0"),
        log_level=os.getenv("HTTPU_LOG_LEVEL", "WARNING").upper(),
    )
