from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from storage_validator.errors import ConfigurationError

MODE_INIT = "init"
MODE_VALIDATE = "validate"
MODE_RESET = "reset"
MODES: tuple[str, ...] = (MODE_INIT, MODE_VALIDATE, MODE_RESET)

ENV_PREFIX = "STORAGE_VALIDATOR_"
ENV_MODE = f"{ENV_PREFIX}MODE"
ENV_DIRECTORY = f"{ENV_PREFIX}DIRECTORY"
ENV_COLLECT_ALL = f"{ENV_PREFIX}COLLECT_ALL"
ENV_STRICT_RESET = f"{ENV_PREFIX}STRICT_RESET"
ENV_LOG_FILE = f"{ENV_PREFIX}LOG_FILE"


def env_str(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value


def env_bool(name: str, default: bool = False) -> bool:
    raw = env_str(name)
    if raw is None:
        return default
    raw_norm = raw.strip().lower()
    if raw_norm in {"1", "true", "t", "yes", "y", "on"}:
        return True
    if raw_norm in {"0", "false", "f", "no", "n", "off"}:
        return False
    return default


@dataclass(frozen=True, slots=True)
class ValidatorConfig:
    directory: Path
    mode: str
    collect_all: bool = False
    strict_reset: bool = False
    log_file: Path | None = None
    verbose: bool = False


def build_config(
    *,
    mode: str | None,
    directory: str | Path | None,
    collect_all: bool = False,
    strict_reset: bool = False,
    log_file: str | Path | None = None,
    verbose: bool = False,
) -> ValidatorConfig:
    """Validate raw option values and freeze them into a ValidatorConfig.

    Only the shape of the options is checked here; whether the directory
    exists is decided by the engine.
    """

    if directory is None or str(directory).strip() == "":
        raise ConfigurationError("working directory is not specified")

    if mode is None or mode.strip() == "":
        raise ConfigurationError("mode is not specified")

    mode_norm = mode.strip().lower()
    if mode_norm not in MODES:
        raise ConfigurationError(f"invalid mode {mode!r} (expected one of: {', '.join(MODES)})")

    return ValidatorConfig(
        directory=Path(directory),
        mode=mode_norm,
        collect_all=collect_all,
        strict_reset=strict_reset,
        log_file=Path(log_file) if log_file else None,
        verbose=verbose,
    )


__all__ = [
    "ENV_COLLECT_ALL",
    "ENV_DIRECTORY",
    "ENV_LOG_FILE",
    "ENV_MODE",
    "ENV_STRICT_RESET",
    "MODES",
    "MODE_INIT",
    "MODE_RESET",
    "MODE_VALIDATE",
    "ValidatorConfig",
    "build_config",
    "env_bool",
    "env_str",
]
