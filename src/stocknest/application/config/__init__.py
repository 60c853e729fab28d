"""Job file configuration: schemas, loading and conversion."""

from .adapter import (
    job_to_density_table,
    job_to_linear_config,
    job_to_linear_parts,
    job_to_parts,
    job_to_sheet_config,
    job_to_sheets,
    resolve_part_ids,
)
from .loader import ConfigError, load_job, load_job_from_dict
from .schema import (
    SUPPORTED_VERSIONS,
    LinearNestingJob,
    LinearPartConfig,
    LinearSettingsConfig,
    SheetConfig,
    SheetNestingJob,
    SheetPartConfig,
    SheetSettingsConfig,
)
from .validator import (
    ValidationError,
    ValidationResult,
    ValidationWarning,
    validate_job,
    validate_linear_job,
    validate_sheet_job,
)

__all__ = [
    # Validation
    "ValidationError",
    "ValidationResult",
    "ValidationWarning",
    "validate_job",
    "validate_linear_job",
    "validate_sheet_job",
    # Loading
    "ConfigError",
    "load_job",
    "load_job_from_dict",
    # Schemas
    "SUPPORTED_VERSIONS",
    "LinearNestingJob",
    "LinearPartConfig",
    "LinearSettingsConfig",
    "SheetConfig",
    "SheetNestingJob",
    "SheetPartConfig",
    "SheetSettingsConfig",
    # Adapters
    "job_to_density_table",
    "job_to_linear_config",
    "job_to_linear_parts",
    "job_to_parts",
    "job_to_sheet_config",
    "job_to_sheets",
    "resolve_part_ids",
]
