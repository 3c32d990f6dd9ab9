"""Parsing of provisioner type descriptors.

A descriptor names what a provisioner produces, e.g.
``<Database<SQL<acme:pg:ha:14>>>``: a Type, a Kind, and the
Vendor:Product:Variant:Version of the specific implementation.
"""

from __future__ import annotations

from dataclasses import dataclass

from .constants import DESCRIPTOR_LABELS
from .errors import BuildError


@dataclass(frozen=True)
class Specific:
    vendor: str
    product: str
    variant: str
    version: str


@dataclass(frozen=True)
class TypeKindSpecific:
    type: str
    kind: str
    specific: Specific

    def labels(self) -> dict[str, str]:
        """Discovery labels for the owning provisioner."""
        s = self.specific
        return dict(zip(DESCRIPTOR_LABELS, (self.type, self.kind, s.vendor, s.product, s.variant, s.version)))


def parse_specific(src: str) -> Specific:
    """Parse ``Vendor:Product:Variant:Version``.

    Raises:
        BuildError: If there are not exactly four non-empty segments
    """
    parts = src.split(":")
    if len(parts) != 4 or not all(parts):
        raise BuildError(f"expected Vendor:Product:Variant:Version, got {src!r}")
    vendor, product, variant, version = parts
    return Specific(vendor=vendor, product=product, variant=variant, version=version)


def parse_descriptor(src: str | None) -> TypeKindSpecific:
    """Parse ``<Type<Kind<Vendor:Product:Variant:Version>>>``.

    Args:
        src: Descriptor string from the provisioner spec

    Returns:
        Parsed descriptor

    Raises:
        BuildError: If the nested brackets or colon segments are missing
    """
    if not src:
        raise BuildError("type descriptor is empty")

    text = src.strip()
    if not text.endswith(">>>"):
        raise BuildError(f"type descriptor {src!r} must end with '>>>'")

    parts = text[: -len(">>>")].split("<")
    # A well formed descriptor splits into ['', Type, Kind, Specific]
    if len(parts) != 4 or parts[0] != "":
        raise BuildError(f"type descriptor {src!r} must look like <Type<Kind<Specific>>>")

    _, type_, kind, specific = parts
    if not type_ or not kind:
        raise BuildError(f"type descriptor {src!r} has an empty Type or Kind")
    if ">" in type_ or ">" in kind or ">" in specific:
        raise BuildError(f"type descriptor {src!r} has unbalanced brackets")

    return TypeKindSpecific(type=type_, kind=kind, specific=parse_specific(specific))
