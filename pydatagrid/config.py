"""Configuration system for pydatagrid using pydantic-settings.

Supports layered configuration:
1. Built-in defaults (lowest priority)
2. pyproject.toml [tool.pydatagrid] section (project-level)
3. ./pydatagrid.toml (project-level, explicit)
4. ~/.config/pydatagrid/config.toml (user-level, overrides project)
5. Environment variables (override every file; keyword arguments override all)

Environment variables use PYDATAGRID_ prefix with nested delimiter __.
Example: PYDATAGRID_PAGINATION__PAGE_SIZE, PYDATAGRID_LOG__LEVEL
"""

from __future__ import annotations

import os
import sys

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomli as tomllib  # type: ignore[import-not-found]
    except ImportError:
        tomllib = None


def _find_config_files() -> list[Path]:
    """Find all configuration files in order of precedence (lowest first)."""
    files = []

    # Project-level pyproject.toml [tool.pydatagrid] (lowest file priority)
    pyproject = Path("pyproject.toml")
    if pyproject.exists():
        files.append(pyproject)

    # Explicit pydatagrid.toml (project-level)
    project_toml = Path("pydatagrid.toml")
    if project_toml.exists():
        files.append(project_toml)

    # User-level config (overrides project configs)
    if sys.platform == "win32":
        user_config = Path(os.environ.get("APPDATA", "~")) / "pydatagrid" / "config.toml"
    else:
        user_config = Path("~/.config/pydatagrid/config.toml")
    user_config = user_config.expanduser()
    if user_config.exists():
        files.append(user_config)

    # Environment variable override for config file (highest file priority)
    env_config = os.environ.get("PYDATAGRID_CONFIG_FILE")
    if env_config:
        env_path = Path(env_config)
        if env_path.exists():
            files.append(env_path)

    return files


def _load_toml_config() -> dict[str, Any]:
    """Load and merge all TOML configuration files."""
    if tomllib is None:
        return {}

    merged: dict[str, Any] = {}

    for config_file in _find_config_files():
        try:
            data = tomllib.loads(config_file.read_text(encoding="utf-8"))
        except (OSError, tomllib.TOMLDecodeError):
            continue  # Unreadable or invalid config files are skipped

        # Handle pyproject.toml [tool.pydatagrid] section
        if config_file.name == "pyproject.toml":
            data = data.get("tool", {}).get("pydatagrid", {})

        merged = _deep_merge(merged, data)

    return merged


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


class GridBehaviorSettings(BaseSettings):
    """Default grid interaction settings.

    Environment prefix: PYDATAGRID_GRID__
    Example: PYDATAGRID_GRID__EDITABLE=true
    """

    model_config = SettingsConfigDict(
        env_prefix="PYDATAGRID_GRID__",
        extra="ignore",
    )

    editable: bool = Field(default=False, description="Allow inline row editing")
    selectable: bool = Field(default=False, description="Allow click-to-select rows")
    multi_selectable: bool = Field(default=False, description="Allow checkbox multi-select")
    locale: str = Field(default="en", description="Bundled translation table to use")


class PaginationSettings(BaseSettings):
    """Pagination defaults.

    Environment prefix: PYDATAGRID_PAGINATION__
    Example: PYDATAGRID_PAGINATION__PAGE_SIZE_OPTIONS="10,20,100"
    """

    model_config = SettingsConfigDict(
        env_prefix="PYDATAGRID_PAGINATION__",
        extra="ignore",
    )

    enabled: bool = False
    page_size: int = Field(default=10, gt=0, description="Initial rows per page")
    page_size_options: Annotated[list[int], NoDecode] = Field(
        default_factory=lambda: [10, 25, 50],
        description="Choices offered by the page size selector",
    )

    @field_validator("page_size_options", mode="before")
    @classmethod
    def parse_comma_separated(cls, v: Any) -> list[int]:
        """Accept a comma-separated string (from env var) or a list."""
        if isinstance(v, str):
            v = [int(p.strip()) for p in v.split(",") if p.strip()]
        if any(int(size) <= 0 for size in v):
            msg = f"page_size_options must all be positive, got {v!r}"
            raise ValueError(msg)
        return [int(size) for size in v]


class FilterSettings(BaseSettings):
    """Input limits applied to filter values.

    Environment prefix: PYDATAGRID_FILTER__
    Example: PYDATAGRID_FILTER__MAX_TEXT_LENGTH=200
    """

    model_config = SettingsConfigDict(
        env_prefix="PYDATAGRID_FILTER__",
        extra="ignore",
    )

    max_text_length: int = Field(default=500, gt=0, description="Max text filter length")
    max_number_input_length: int = Field(
        default=50, gt=0, description="Max length of a number/date filter value"
    )
    max_list_input_length: int = Field(
        default=200, gt=0, description="Max length of a list filter search input"
    )


class LogSettings(BaseSettings):
    """Logging settings.

    Environment prefix: PYDATAGRID_LOG__
    Example: PYDATAGRID_LOG__LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_prefix="PYDATAGRID_LOG__",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    format: str = "%(name)s - %(levelname)s - %(message)s"


_SECTIONS: list[tuple[str, str, str, type[BaseSettings]]] = [
    # (display name, attribute, env prefix, section class)
    ("Grid", "grid", "GRID", GridBehaviorSettings),
    ("Pagination", "pagination", "PAGINATION", PaginationSettings),
    ("Filters", "filter", "FILTER", FilterSettings),
    ("Logging", "log", "LOG", LogSettings),
]


def _env_overrides() -> dict[str, Any]:
    """Collect the section values that were set through environment variables.

    A section built without arguments reads only its defaults and its
    ``PYDATAGRID_<SECTION>__*`` variables; the fields it marks as set came
    from the environment.
    """
    overrides: dict[str, Any] = {}
    for _, attr_name, _, section_cls in _SECTIONS:
        section = section_cls()
        if section.model_fields_set:
            overrides[attr_name] = section.model_dump(include=section.model_fields_set)
    return overrides


class DataGridSettings(BaseSettings):
    """Main settings aggregating all configuration sections.

    Environment prefix: PYDATAGRID__

    Configuration sources (in order of precedence):
    1. Built-in defaults
    2. pyproject.toml [tool.pydatagrid] section
    3. ./pydatagrid.toml (project-level)
    4. ~/.config/pydatagrid/config.toml (user-level, overrides project)
    5. PYDATAGRID_<SECTION>__<FIELD> environment variables
    6. Keyword arguments (highest priority)
    """

    model_config = SettingsConfigDict(
        env_prefix="PYDATAGRID__",
        env_nested_delimiter="__",
        extra="ignore",
    )

    grid: GridBehaviorSettings = Field(default_factory=GridBehaviorSettings)
    pagination: PaginationSettings = Field(default_factory=PaginationSettings)
    filter: FilterSettings = Field(default_factory=FilterSettings)
    log: LogSettings = Field(default_factory=LogSettings)

    def __init__(self, **data: Any) -> None:
        # TOML files < PYDATAGRID_<SECTION>__* variables < explicit arguments
        merged = _deep_merge(_load_toml_config(), _env_overrides())
        merged = _deep_merge(merged, data)

        super().__init__(**merged)

    def to_toml(self) -> str:
        """Export settings as TOML string."""
        lines = ["# pydatagrid Configuration", "# Generated by DataGridSettings.to_toml()", ""]

        all_data = self.model_dump()
        for _, attr_name, _, _ in _SECTIONS:
            lines.append(f"[{attr_name}]")
            for field_name, field_value in all_data[attr_name].items():
                if isinstance(field_value, list):
                    value_str = "[" + ", ".join(str(v) for v in field_value) + "]"
                elif isinstance(field_value, bool):
                    value_str = "true" if field_value else "false"
                elif isinstance(field_value, str):
                    value_str = f'"{field_value}"'
                else:
                    value_str = str(field_value)
                lines.append(f"{field_name} = {value_str}")
            lines.append("")

        return "\n".join(lines)

    def to_env(self) -> str:
        """Export settings as shell environment variables."""
        lines = [
            "# pydatagrid Environment Variables",
            "# Generated by DataGridSettings.to_env()",
            "",
        ]

        all_data = self.model_dump()
        for _, attr_name, env_prefix, _ in _SECTIONS:
            for field_name, field_value in all_data[attr_name].items():
                env_name = f"PYDATAGRID_{env_prefix}__{field_name.upper()}"
                if isinstance(field_value, list):
                    value_str = ",".join(str(v) for v in field_value)
                elif isinstance(field_value, bool):
                    value_str = "true" if field_value else "false"
                else:
                    value_str = str(field_value)
                lines.append(f'export {env_name}="{value_str}"')

        return "\n".join(lines)

    def show(self) -> str:
        """Format settings as a readable table."""
        lines = ["pydatagrid Configuration", "=" * 60, ""]

        all_data = self.model_dump()
        for display_name, attr_name, _, _ in _SECTIONS:
            lines.append(f"\n{display_name}")
            lines.append("-" * 40)
            for field_name, field_value in all_data[attr_name].items():
                # Truncate long values
                value_str = str(field_value)
                if len(value_str) > 50:
                    value_str = value_str[:47] + "..."
                lines.append(f"  {field_name:24} = {value_str}")

        return "\n".join(lines)


@lru_cache(maxsize=1)
def get_settings() -> DataGridSettings:
    """Get the global settings instance (cached).

    Call clear_settings() to reload configuration.
    """
    return DataGridSettings()


def clear_settings() -> None:
    """Clear the cached settings to force reload."""
    get_settings.cache_clear()


def reload_settings() -> DataGridSettings:
    """Reload settings from all sources."""
    clear_settings()
    return get_settings()
