"""Configuration management for the Media Vault CLI."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

# Conditional import for Python 3.10 compatibility
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib  # type: ignore[import-not-found]

from media_vault_cli.core.models import DEFAULT_PERMISSION, PermissionDefinition


@dataclass
class VaultConfig:
    """Media Vault plugin settings."""

    active: bool = True
    uploads_dir: str = "uploads"
    protected_dir: str = "uploads/_mediavault"


@dataclass
class LibraryConfig:
    """Attachment library settings."""

    path: str = "library.json"


@dataclass
class OutputConfig:
    """Console output settings."""

    progress: bool = True


def _default_permissions() -> dict[str, PermissionDefinition]:
    return {
        "all": PermissionDefinition("all", "Free access", logged_in=False),
        "admin": PermissionDefinition("admin", "Administrators only", logged_in=True),
        "author": PermissionDefinition("author", "The file's author", logged_in=True),
        "logged-in": PermissionDefinition("logged-in", "Logged-in users", logged_in=True),
    }


@dataclass
class Config:
    """Root configuration container."""

    vault: VaultConfig = field(default_factory=VaultConfig)
    library: LibraryConfig = field(default_factory=LibraryConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    permissions: dict[str, PermissionDefinition] = field(default_factory=_default_permissions)

    # Metadata (not from TOML)
    _source: Path | None = field(default=None, repr=False)

    @property
    def base_dir(self) -> Path:
        """Directory relative paths are resolved against."""
        return self._source.parent if self._source else Path.cwd()

    def resolve(self, value: str) -> Path:
        """Resolve a configured path against the config file location."""
        path = Path(value).expanduser()
        return path if path.is_absolute() else self.base_dir / path

    @property
    def library_path(self) -> Path:
        return self.resolve(self.library.path)

    @property
    def uploads_path(self) -> Path:
        return self.resolve(self.vault.uploads_dir)

    @property
    def protected_path(self) -> Path:
        return self.resolve(self.vault.protected_dir)


def get_xdg_config_home() -> Path:
    """Get XDG config home, respecting environment variable."""
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg)
    return Path.home() / ".config"


def get_config_paths() -> tuple[Path, Path]:
    """
    Get config file paths in priority order.

    Returns:
        (xdg_path, cwd_path) - XDG is base, CWD overrides
    """
    xdg_path = get_xdg_config_home() / "media-vault" / "config.toml"
    cwd_path = Path.cwd() / "mediavault.toml"
    return xdg_path, cwd_path


def _load_toml(path: Path) -> dict[str, Any]:
    """Load and parse a TOML file."""
    with open(path, "rb") as f:
        result: dict[str, Any] = tomllib.load(f)
        return result


def _merge_dicts(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries, override takes precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _merge_dicts(result[key], value)
        else:
            result[key] = value
    return result


def _validate_config(data: dict[str, Any]) -> list[str]:
    """Validate TOML data and return list of errors."""
    errors: list[str] = []

    active = data.get("vault", {}).get("active")
    if active is not None and not isinstance(active, bool):
        errors.append(f"Invalid vault.active: '{active}' (use: true, false)")

    for section, key in (("vault", "uploads_dir"), ("vault", "protected_dir"), ("library", "path")):
        value = data.get(section, {}).get(key)
        if value is not None and (not isinstance(value, str) or not value):
            errors.append(f"Invalid {section}.{key}: '{value}' (expected a path)")

    permissions = data.get("permissions", {})
    if not isinstance(permissions, dict):
        errors.append("Invalid permissions: expected [permissions.<name>] tables")
        return errors

    for name, definition in permissions.items():
        if name == DEFAULT_PERMISSION:
            errors.append(f"Invalid permissions.{name}: '{DEFAULT_PERMISSION}' is reserved")
        elif not isinstance(definition, dict):
            errors.append(f"Invalid permissions.{name}: expected a table")
        elif not isinstance(definition.get("logged_in", False), bool):
            errors.append(f"Invalid permissions.{name}.logged_in: expected true or false")

    return errors


def _filter_known_keys(data: dict[str, Any], dataclass_type: type) -> dict[str, Any]:
    """Filter dict to only include keys that are valid fields for the dataclass."""
    valid_fields = {f.name for f in fields(dataclass_type)}
    return {k: v for k, v in data.items() if k in valid_fields}


# Mapping of section names to their config classes
SECTION_TYPES = {
    "vault": VaultConfig,
    "library": LibraryConfig,
    "output": OutputConfig,
}


def _dict_to_permissions(data: dict[str, Any]) -> dict[str, PermissionDefinition]:
    """Convert [permissions.<name>] tables, keeping the defaults when absent."""
    if not data:
        return _default_permissions()
    return {
        name: PermissionDefinition(
            key=name,
            description=str(definition.get("description", "")),
            logged_in=definition.get("logged_in", False),
        )
        for name, definition in data.items()
    }


def _dict_to_config(data: dict[str, Any], source: Path | None = None) -> Config:
    """Convert parsed TOML dict to Config dataclass."""
    sections = {
        name: cls(**_filter_known_keys(data.get(name, {}), cls))
        for name, cls in SECTION_TYPES.items()
    }
    permissions = _dict_to_permissions(data.get("permissions", {}))
    return Config(**sections, permissions=permissions, _source=source)


def load_config() -> Config:
    """
    Load configuration with XDG + CWD override precedence.

    Priority (highest to lowest):
    1. ./mediavault.toml (CWD override)
    2. ~/.config/media-vault/config.toml (XDG base)
    3. Built-in defaults

    Returns:
        Merged Config instance

    Raises:
        ValueError: If TOML syntax is invalid in either config file
    """
    xdg_path, cwd_path = get_config_paths()

    merged_data: dict[str, Any] = {}
    active_source: Path | None = None

    # Load XDG config if exists
    if xdg_path.exists():
        try:
            merged_data = _load_toml(xdg_path)
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Invalid TOML in {xdg_path}: {e}") from e
        active_source = xdg_path

    # Merge CWD config if exists (overrides XDG)
    if cwd_path.exists():
        try:
            cwd_data = _load_toml(cwd_path)
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Invalid TOML in {cwd_path}: {e}") from e
        merged_data = _merge_dicts(merged_data, cwd_data)
        active_source = cwd_path

    # Validate merged config data
    if merged_data:
        errors = _validate_config(merged_data)
        if errors:
            raise ValueError(f"Config validation failed ({active_source}): {'; '.join(errors)}")

    return _dict_to_config(merged_data, active_source)


def load_config_from_file(path: Path) -> Config:
    """Load configuration from a specific file."""
    try:
        data = _load_toml(path)
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"Invalid TOML in {path}: {e}") from e
    errors = _validate_config(data)
    if errors:
        raise ValueError(f"Config validation failed: {'; '.join(errors)}")
    return _dict_to_config(data, path)


# Default config template for `config init`
DEFAULT_CONFIG_TEMPLATE = """\
# Media Vault CLI Configuration
# Relative paths are resolved against the directory of this file.

[vault]
active = true                         # Commands refuse to run when false
uploads_dir = "uploads"               # Public media directory
protected_dir = "uploads/_mediavault" # Protected media directory

[library]
path = "library.json"                 # Attachment index of the site

[output]
progress = true                       # Progress bar for --all runs

# Permissions selectable on an attachment. An attachment whose selector is
# "default" or not listed here falls back to the site default.
[permissions.all]
description = "Free access"
logged_in = false

[permissions.admin]
description = "Administrators only"
logged_in = true

[permissions.author]
description = "The file's author"
logged_in = true

[permissions.logged-in]
description = "Logged-in users"
logged_in = true
"""
