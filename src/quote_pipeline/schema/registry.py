"""Versioned, data-driven schema registry.

The registry is an immutable value rather than a module-level singleton:
adding a version returns a new registry, and an existing version can never be
replaced. Tests can build a registry holding any set of versions in isolation.
"""

from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any

from pydantic import ValidationError

from quote_pipeline.core.exceptions import RegistryError

from .models import SchemaVersionSpec


class SchemaRegistry:
    """Maps supported schema versions to their field specifications.

    Attributes:
        discriminator: The single accepted value of a payload's ``type`` key.
    """

    __slots__ = ("_versions", "discriminator")

    def __init__(
        self, discriminator: str, versions: Iterable[SchemaVersionSpec] = ()
    ) -> None:
        """Build a registry from version specs.

        Args:
            discriminator: Required value of the payload ``type`` key.
            versions: Version specs; each version number may appear once.

        Raises:
            RegistryError: If the discriminator is empty or a version repeats.
        """
        if not isinstance(discriminator, str) or not discriminator.strip():
            raise RegistryError("discriminator must be a non-empty string")
        table: dict[int, SchemaVersionSpec] = {}
        for spec in versions:
            if spec.version in table:
                raise RegistryError(
                    f"schema version {spec.version} defined more than once"
                )
            table[spec.version] = spec
        self.discriminator = discriminator
        self._versions: Mapping[int, SchemaVersionSpec] = MappingProxyType(table)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "SchemaRegistry":
        """Build a registry from plain configuration data.

        Expected shape (as loaded from TOML or JSON)::

            {
                "discriminator": "anc_quote_update",
                "versions": {
                    "1": {"description": "...", "fields": {...}, "metadata": {...}}
                }
            }

        Raises:
            RegistryError: If the data does not describe a valid registry.
        """
        if not isinstance(data, Mapping):
            raise RegistryError("registry data must be a mapping")
        raw_versions = data.get("versions")
        if not isinstance(raw_versions, Mapping) or not raw_versions:
            raise RegistryError("registry data requires a non-empty 'versions' table")

        specs: list[SchemaVersionSpec] = []
        for key, body in raw_versions.items():
            try:
                version = int(key)
            except (TypeError, ValueError) as e:
                raise RegistryError(f"version key {key!r} is not an integer") from e
            if not isinstance(body, Mapping):
                raise RegistryError(f"version {version} must be a table")
            try:
                specs.append(SchemaVersionSpec(version=version, **body))
            except (TypeError, ValidationError) as e:
                raise RegistryError(f"version {version} is invalid: {e}") from e

        return cls(str(data.get("discriminator", "")), specs)

    # --- Lookup ---

    @property
    def supported_versions(self) -> frozenset[int]:
        """Every explicitly enumerated version."""
        return frozenset(self._versions)

    @property
    def latest(self) -> SchemaVersionSpec:
        """The highest registered version.

        Raises:
            RegistryError: If the registry is empty.
        """
        if not self._versions:
            raise RegistryError("registry has no versions")
        return self._versions[max(self._versions)]

    def get(self, version: int) -> SchemaVersionSpec | None:
        """Return the spec for `version`, or None when unsupported.

        Only exact ints match; ``True`` or ``1.0`` never select version 1.
        """
        if type(version) is not int:
            return None
        return self._versions.get(version)

    def __contains__(self, version: object) -> bool:
        return type(version) is int and version in self._versions

    def __len__(self) -> int:
        return len(self._versions)

    # --- Additive evolution ---

    def with_version(self, spec: SchemaVersionSpec) -> "SchemaRegistry":
        """Return a new registry that also supports `spec`.

        Raises:
            RegistryError: If `spec.version` is already registered.
        """
        if spec.version in self._versions:
            raise RegistryError(
                f"schema version {spec.version} already exists; versions are immutable"
            )
        return SchemaRegistry(self.discriminator, (*self._versions.values(), spec))

    def __repr__(self) -> str:
        return (
            f"SchemaRegistry(discriminator={self.discriminator!r}, "
            f"versions={sorted(self._versions)!r})"
        )
