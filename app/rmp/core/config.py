"""Configuration for rmp.

Two models live here:

- RmpConfig: the optional user configuration file
  (~/.config/rmp/config.toml) holding defaults and tunables.
- DeletionOptions: the immutable settings bundle handed to the deletion
  pipeline for one run, built from RmpConfig plus command-line flags.

The safety policies (root and mount-root preservation) are not part of the
configuration file. They can only be turned off by explicit flags.
"""

import logging
import tomllib
from pathlib import Path
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from rmp.core.paths import get_config_path

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigNotFoundError(ConfigError):
    """Raised when an explicitly requested config file is missing."""


class ConfigParseError(ConfigError):
    """Raised when a config file is not valid TOML."""


class RmpConfig(BaseModel):
    """User configuration loaded from TOML.

    Attributes:
        interactive: Prompt before each deletion unless overridden.
        queue_capacity: Maximum number of events buffered between the
            walker and the remover.
        sort_threshold: Directories with a link count below this are
            traversed in sorted order.
        dry_run_file_delay: Seconds spent per file in dry-run mode.
        dry_run_dir_delay: Seconds spent per directory in dry-run mode.
    """

    model_config = ConfigDict(extra="forbid")

    interactive: Annotated[
        bool,
        Field(description="Prompt before each deletion"),
    ] = False
    queue_capacity: Annotated[
        int,
        Field(ge=1, description="Bounded queue size between walker and remover"),
    ] = 1_000_000
    sort_threshold: Annotated[
        int,
        Field(ge=0, description="Link-count cutoff for sorted traversal"),
    ] = 5000
    dry_run_file_delay: Annotated[
        float,
        Field(ge=0.0, description="Simulated seconds per file in dry-run"),
    ] = 0.001
    dry_run_dir_delay: Annotated[
        float,
        Field(ge=0.0, description="Simulated seconds per directory in dry-run"),
    ] = 0.00008

    def to_options(
        self,
        *,
        dry_run: bool = False,
        interactive: bool | None = None,
        preserve_root: bool = True,
        preserve_mount_roots: bool = True,
        prompt_on_descend: bool = False,
    ) -> "DeletionOptions":
        """Build run options from this configuration and explicit flags.

        Args:
            dry_run: Simulate deletions.
            interactive: Prompt per item. None keeps the configured default.
            preserve_root: Refuse to delete the filesystem root.
            preserve_mount_roots: Refuse to delete mount points.
            prompt_on_descend: Ask before entering every directory.

        Returns:
            Frozen DeletionOptions.
        """
        return DeletionOptions(
            dry_run=dry_run,
            interactive=self.interactive if interactive is None else interactive,
            preserve_root=preserve_root,
            preserve_mount_roots=preserve_mount_roots,
            prompt_on_descend=prompt_on_descend,
            queue_capacity=self.queue_capacity,
            sort_threshold=self.sort_threshold,
            dry_run_file_delay=self.dry_run_file_delay,
            dry_run_dir_delay=self.dry_run_dir_delay,
        )


class DeletionOptions(BaseModel):
    """Settings for a single deletion run.

    Attributes:
        dry_run: Walk and account as usual but leave the filesystem alone.
        interactive: Ask the operator about each item.
        preserve_root: Refuse paths resolving to "/".
        preserve_mount_roots: Refuse mount points of other filesystems.
        prompt_on_descend: Ask before entering every directory.
        queue_capacity: Bounded queue size between walker and remover.
        sort_threshold: Link-count cutoff for sorted traversal.
        dry_run_file_delay: Simulated seconds per file in dry-run.
        dry_run_dir_delay: Simulated seconds per directory in dry-run.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    dry_run: bool = False
    interactive: bool = False
    preserve_root: bool = True
    preserve_mount_roots: bool = True
    prompt_on_descend: bool = False
    queue_capacity: Annotated[int, Field(ge=1)] = 1_000_000
    sort_threshold: Annotated[int, Field(ge=0)] = 5000
    dry_run_file_delay: Annotated[float, Field(ge=0.0)] = 0.001
    dry_run_dir_delay: Annotated[float, Field(ge=0.0)] = 0.00008


def load_config(path: Path | None = None) -> RmpConfig:
    """Load configuration from a TOML file.

    Args:
        path: Explicit config file. If None, the default location is used
            and a missing file simply yields the defaults.

    Returns:
        Validated RmpConfig.

    Raises:
        ConfigNotFoundError: If an explicitly given file doesn't exist.
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the file cannot be read or doesn't match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        if path is not None:
            raise ConfigNotFoundError(f"Config file not found: {config_path}")
        logger.debug("No config file at %s, using defaults", config_path)
        return RmpConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config {config_path}: {e}") from e

    try:
        config = RmpConfig.model_validate(data)
    except (ValueError, ValidationError) as e:
        raise ConfigError(f"Invalid config content in {config_path}: {e}") from e

    logger.debug("Loaded config from %s", config_path)
    return config
