# Upsync Configuration Schema
# Pydantic models for YAML configuration validation

from pathlib import Path

from pydantic import BaseModel, Field, ValidationError, field_validator

from upsync.exceptions import ConfigurationError


class StoreSettings(BaseModel):
    """Connection settings for the S3 store."""

    access_key: str | None = Field(default=None, description="Access key id (falls back to environment)")
    secret_key: str | None = Field(default=None, description="Secret access key (falls back to environment)")
    region: str = Field(default="us-east-1", description="Store region")
    endpoint_url: str | None = Field(default=None, description="Custom endpoint for S3-compatible stores")


class SyncOptions(BaseModel):
    """Every option recognised by an upsync run, with its default."""

    glob: str = Field(default="**/*", description="Glob selecting files below the sync root")
    public: bool = Field(default=False, description="Upload objects with public-read visibility")
    no_prompt: bool = Field(default=False, description="Skip the confirmation prompt")
    backups_retain: bool = Field(default=False, description="Enable day/week/month retention pruning")
    days_retain: int = Field(default=30, ge=0, description="Daily snapshots to keep")
    weeks_retain: int = Field(default=5, ge=0, description="Weekly snapshots to keep")
    months_retain: int = Field(default=3, ge=0, description="Monthly snapshots to keep")
    dry_run: bool = Field(default=False, description="Report actions without changing the store")
    workers: int = Field(default=1, ge=1, description="Parallel uploads and deletions")

    @field_validator("glob")
    @classmethod
    def glob_not_empty(cls, v: str) -> str:
        """Reject blank glob patterns."""
        v = v.strip()
        if not v:
            raise ValueError("glob must not be empty")
        return v


class OutputConfig(BaseModel):
    """Output and logging configuration."""

    verbose: bool = Field(default=False, description="Enable verbose output")
    colored: bool = Field(default=True, description="Enable colored output")
    log_file: str | None = Field(default=None, description="Append plain-text output to this file")

    @field_validator("log_file")
    @classmethod
    def expand_optional_path(cls, v: str | None) -> str | None:
        """Expand ~ in optional paths."""
        if v is None:
            return None
        return str(Path(v).expanduser())


class UpsyncConfig(BaseModel):
    """Root configuration model for upsync."""

    store: StoreSettings = Field(default_factory=StoreSettings, description="Store connection")
    sync: SyncOptions = Field(default_factory=SyncOptions, description="Default sync options")
    output: OutputConfig = Field(default_factory=OutputConfig, description="Output settings")

    def sync_options(self, **overrides) -> SyncOptions:
        """
        Build run options from the configured defaults.

        Args:
            **overrides: Option values given on the command line. None means
                         "not given" and keeps the configured value.

        Returns:
            Validated SyncOptions.

        Raises:
            ConfigurationError: If an override is invalid.
        """
        given = {k: v for k, v in overrides.items() if v is not None}
        try:
            return SyncOptions.model_validate({**self.sync.model_dump(), **given})
        except ValidationError as e:
            messages = "; ".join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors())
            raise ConfigurationError(f"Invalid sync options: {messages}") from e
