"""Directory integrity snapshots.

Records a SHA-256 digest for every file under a root into a compressed
manifest and later re-checks the tree against it.
"""

from storage_validator.config import ValidatorConfig, build_config
from storage_validator.errors import StorageValidatorError
from storage_validator.manifest import ManifestEngine, ValidationResult

__version__ = "0.1.0"

__all__ = [
    "ManifestEngine",
    "StorageValidatorError",
    "ValidationResult",
    "ValidatorConfig",
    "__version__",
    "build_config",
]
