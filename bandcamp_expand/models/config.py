"""
Pydantic model for the run configuration.
Provides robust validation for all settings.
"""

from pathlib import Path
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from bandcamp_expand.exceptions import ConfigurationError
from bandcamp_expand.utils.path import DEFAULT_LABEL_PREFIXES

DEFAULT_SOURCE_DIR = Path("~/Downloads/Bandcamp")
DEFAULT_LIBRARY_DIR = Path("~/Music")
STAGING_SUBDIR = "auto"
FAILED_SUBDIR = "failed"


class ExpandConfig(BaseModel):
    """A validated configuration model for one batch run."""

    model_config = ConfigDict(validate_assignment=True)

    # Locations
    source_dir: Path
    library_dir: Path
    staging_dir: Path

    # Processing
    max_workers: int | None = None
    archive_extension: str = ".zip"
    label_prefixes: list[str] = Field(
        default_factory=lambda: list(DEFAULT_LABEL_PREFIXES)
    )
    verify: bool = False
    dry_run: bool = False

    # Output
    log_dir: Path | None = Field(default=None, repr=False)

    @field_validator("source_dir", "library_dir", "staging_dir", "log_dir")
    @classmethod
    def expand_user(cls, v: Path | None) -> Path | None:
        return v.expanduser() if v is not None else v

    @field_validator("max_workers")
    @classmethod
    def validate_workers(cls, v: int | None) -> int | None:
        """Ensures a reasonable number of workers when one is given."""
        if v is not None and (v < 1 or v > 32):
            raise ValueError("Max workers must be between 1 and 32.")
        return v

    @field_validator("archive_extension")
    @classmethod
    def validate_extension(cls, v: str) -> str:
        v = v.strip().lower()
        if not v.startswith(".") or len(v) < 2:
            raise ValueError(f"Archive extension must look like '.zip', got '{v}'.")
        return v

    @field_validator("label_prefixes")
    @classmethod
    def drop_empty_prefixes(cls, v: list[str]) -> list[str]:
        # Prefixes end in " - ", so surrounding whitespace is significant
        return [prefix for prefix in v if prefix.strip()]

    @model_validator(mode="after")
    def validate_locations(self) -> "ExpandConfig":
        """Checks that the source exists and that the two trees never overlap."""
        if not self.source_dir.is_dir():
            raise ValueError(f"Source directory does not exist: {self.source_dir}")

        staging = self.staging_dir.resolve()
        library = self.library_dir.resolve()
        if staging == library:
            raise ValueError("Staging and library directories must be different.")
        if staging.is_relative_to(library) or library.is_relative_to(staging):
            raise ValueError(
                "Staging and library directories cannot be nested inside each other."
            )
        return self


def load_config(options: dict[str, Any] | None = None) -> ExpandConfig:
    """
    Builds a validated configuration from CLI options, filling in defaults for
    anything left unset.

    Raises:
        ConfigurationError: If validation fails.
    """
    settings = {
        key: value for key, value in (options or {}).items() if value is not None
    }
    source_dir = Path(settings.get("source_dir", DEFAULT_SOURCE_DIR)).expanduser()
    settings["source_dir"] = source_dir
    settings.setdefault("library_dir", DEFAULT_LIBRARY_DIR)
    settings.setdefault("staging_dir", source_dir / STAGING_SUBDIR)

    try:
        return ExpandConfig(**settings)
    except ValidationError as e:
        raise ConfigurationError(f"Configuration validation failed:\n{e}") from e
