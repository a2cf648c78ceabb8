from __future__ import annotations

import argparse
import sys

from storage_validator.config import (
    ENV_COLLECT_ALL,
    ENV_DIRECTORY,
    ENV_LOG_FILE,
    ENV_MODE,
    ENV_STRICT_RESET,
    MODE_INIT,
    MODE_RESET,
    MODE_VALIDATE,
    MODES,
    ValidatorConfig,
    build_config,
    env_bool,
    env_str,
)
from storage_validator.errors import ConfigurationError, StorageValidatorError
from storage_validator.logging_setup import setup_logging
from storage_validator.manifest.engine import ManifestEngine

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG = 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="storage-validator",
        description=(
            "Record SHA-256 checksums for every file under a directory and later "
            "validate the directory against them."
        ),
    )
    parser.add_argument(
        "-m",
        "--mode",
        default=env_str(ENV_MODE),
        help=f"operation mode ({'/'.join(MODES)}); env: {ENV_MODE}",
    )
    parser.add_argument(
        "-d",
        "--directory",
        default=env_str(ENV_DIRECTORY),
        help=f"working directory path; env: {ENV_DIRECTORY}",
    )
    parser.add_argument(
        "--collect-all",
        action="store_true",
        default=env_bool(ENV_COLLECT_ALL),
        help=f"validate: report every problem instead of stopping at the first; env: {ENV_COLLECT_ALL}",
    )
    parser.add_argument(
        "--strict-reset",
        action="store_true",
        default=env_bool(ENV_STRICT_RESET),
        help=f"reset: fail if the manifest directory cannot be removed; env: {ENV_STRICT_RESET}",
    )
    parser.add_argument(
        "--log-file",
        default=env_str(ENV_LOG_FILE),
        help=f"also write a DEBUG log to this file; env: {ENV_LOG_FILE}",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug output on the console")
    return parser


def run(config: ValidatorConfig) -> int:
    logger = setup_logging(config.log_file, config.verbose)

    try:
        engine = ManifestEngine.from_config(config)
    except StorageValidatorError as exc:
        logger.error("failed to open working directory: %s", exc)
        return EXIT_FAILURE

    try:
        if config.mode == MODE_INIT:
            written = engine.initialize()
            logger.info("initialized %s (%d files)", engine.root, written)
        elif config.mode == MODE_VALIDATE:
            if config.collect_all:
                result = engine.validate_all()
                for err in result.errors:
                    logger.error("- %s", err)
                if not result.ok:
                    logger.error(
                        "failed to validate directory: %d of %d files invalid",
                        len(result.errors),
                        result.checked,
                    )
                    return EXIT_FAILURE
                checked = result.checked
            else:
                checked = engine.validate()
            logger.info("validated %s (%d files)", engine.root, checked)
        elif config.mode == MODE_RESET:
            engine.reset(strict=config.strict_reset)
            logger.info("reset %s", engine.root)
    except StorageValidatorError as exc:
        logger.error("failed to %s directory: %s", config.mode, exc)
        return EXIT_FAILURE

    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        config = build_config(
            mode=args.mode,
            directory=args.directory,
            collect_all=args.collect_all,
            strict_reset=args.strict_reset,
            log_file=args.log_file,
            verbose=args.verbose,
        )
    except ConfigurationError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_CONFIG

    return run(config)


if __name__ == "__main__":
    raise SystemExit(main())
