"""Pydantic models for configuration schema."""

from pathlib import Path
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_URL = "https://app.testomat.io"

FALSE_VALUES = frozenset({"", "0", "false", "no", "off"})


def parse_flag(value: Any) -> bool:
    """Interpret an environment flag; any non-empty value counts as set."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() not in FALSE_VALUES


class FileLoggingConfig(BaseModel):
    """File logging configuration."""

    enabled: bool = False
    path: Path = Path("testomatio-reporter.log")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["json", "console"] = "console"
    file: FileLoggingConfig = FileLoggingConfig()


class ReporterConfig(BaseSettings):
    """Root configuration for the Testomat.io reporter.

    Values come from keyword arguments, a YAML file (see `load_config`), or
    the `TESTOMATIO_*` environment variables.
    """

    api_key: str | None = Field(None, validation_alias="TESTOMATIO")
    url: str = Field(DEFAULT_URL, validation_alias="TESTOMATIO_URL")
    title: str | None = Field(None, validation_alias="TESTOMATIO_TITLE")
    run_id: str | None = Field(None, validation_alias=AliasChoices("TESTOMATIO_RUN", "runId"))
    group_title: str | None = Field(None, validation_alias="TESTOMATIO_RUNGROUP_TITLE")
    env: str | None = Field(None, validation_alias="TESTOMATIO_ENV")
    shared_run: bool = Field(False, validation_alias="TESTOMATIO_SHARED_RUN")
    proceed: bool = Field(False, validation_alias="TESTOMATIO_PROCEED")
    create_new_tests: bool = Field(False, validation_alias="TESTOMATIO_CREATE")
    publish: bool = Field(False, validation_alias="TESTOMATIO_PUBLISH")
    parallel: bool = Field(False, validation_alias="TESTOMATIO_PARALLEL")
    timeout: float = Field(30.0, gt=0, validation_alias="TESTOMATIO_TIMEOUT")
    logging: LoggingConfig = LoggingConfig()

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        populate_by_name=True,
        extra="ignore",
    )

    @field_validator(
        "shared_run", "proceed", "create_new_tests", "publish", "parallel", mode="before"
    )
    @classmethod
    def validate_flag(cls, v: Any) -> bool:
        """Accept shell-style flag values."""
        return parse_flag(v)

    @field_validator("api_key", "title", "run_id", "group_title", "env", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        """Treat empty strings as unset."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("url")
    @classmethod
    def strip_url(cls, v: str) -> str:
        """Remove surrounding whitespace and trailing slashes."""
        return v.strip().rstrip("/")
