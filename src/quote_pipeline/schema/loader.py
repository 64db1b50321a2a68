"""File-based schema registry loading.

Registries are configuration data. This module reads them from TOML or JSON
files so a new schema version can ship without a code change.
"""

import json
import logging
from pathlib import Path
import tomllib

from quote_pipeline.core.exceptions import RegistryError, RegistryFileError

from .registry import SchemaRegistry

log = logging.getLogger(__name__)


def load_registry(path: str | Path) -> SchemaRegistry:
    """Load a schema registry from a ``.toml`` or ``.json`` file.

    TOML layout::

        discriminator = "anc_quote_update"

        [versions.1]
        description = "Initial version"

        [versions.1.fields.width]
        kind = "number"
        minimum = 5
        maximum = 500

    Args:
        path: Path to the registry file.

    Returns:
        The parsed `SchemaRegistry`.

    Raises:
        RegistryFileError: If the file is missing, unreadable, malformed, or
            describes an invalid registry.
    """
    file_path = Path(path)
    suffix = file_path.suffix.lower()
    if suffix not in (".toml", ".json"):
        raise RegistryFileError(
            file_path, f"Unsupported registry format '{suffix}'; use .toml or .json"
        )

    try:
        if suffix == ".toml":
            with file_path.open(mode="rb") as f:
                data = tomllib.load(f)
        else:
            data = json.loads(file_path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError, json.JSONDecodeError) as e:
        raise RegistryFileError(file_path, f"Failed to parse: {e}", cause=e) from e

    try:
        registry = SchemaRegistry.from_mapping(data)
    except RegistryError as e:
        raise RegistryFileError(file_path, e.message, cause=e) from e

    log.debug(
        "Loaded schema registry from %s: versions=%s",
        file_path,
        sorted(registry.supported_versions),
    )
    return registry
