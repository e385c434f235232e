"""
resolver.py

Turns symbolic version qualifiers ($LATEST, $OLDEST, $PREVIOUS, $MOVING)
into concrete version identifiers taken from a function's revision set.
"""

import logging
from enum import Enum
from typing import List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict

from lambdaroute.core.exceptions import NotResolvableError
from lambdaroute.interfaces.types.deployment import RevisionSet

logger = logging.getLogger(__name__)

LATEST_LABEL = "$LATEST"


class QualifierKind(str, Enum):
    LITERAL = "LITERAL"
    LATEST = "$LATEST"
    OLDEST = "$OLDEST"
    PREVIOUS = "$PREVIOUS"
    MOVING = "$MOVING"


class VersionQualifier(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: QualifierKind
    literal: Optional[str] = None
    retain: Optional[int] = None

    @classmethod
    def parse(cls, text: str) -> "VersionQualifier":
        """
        Parses a qualifier string. Non-'$' strings are literal version ids.
        '$MOVING' may carry its retention count as '$MOVING:<n>'.
        """
        if not text.startswith("$"):
            return cls(kind=QualifierKind.LITERAL, literal=text)

        # Prefix match, same as the pipeline stages that produce these strings
        for kind in (QualifierKind.LATEST, QualifierKind.OLDEST, QualifierKind.PREVIOUS):
            if text.startswith(kind.value):
                return cls(kind=kind)

        if text.startswith(QualifierKind.MOVING.value):
            suffix = text[len(QualifierKind.MOVING.value):]
            if not suffix:
                return cls(kind=QualifierKind.MOVING)
            if suffix.startswith(":") and suffix[1:].isdigit():
                return cls(kind=QualifierKind.MOVING, retain=int(suffix[1:]))
            raise NotResolvableError(text, "malformed retention count")

        logger.error(f"Found invalid version string {text}")
        raise NotResolvableError(text, "unknown qualifier")

    def __str__(self) -> str:
        if self.kind is QualifierKind.LITERAL:
            return self.literal or ""
        if self.kind is QualifierKind.MOVING and self.retain is not None:
            return f"{self.kind.value}:{self.retain}"
        return self.kind.value


def _version_sort_key(version: str) -> Tuple[int, int, str]:
    # Numeric ids order numerically and rank above non-numeric ones.
    if version.isdigit():
        return (1, int(version), version)
    return (0, 0, version)


def sorted_revisions(revisions: RevisionSet) -> List[str]:
    """All version ids except $LATEST, newest first."""
    versions = [
        version for label, version in revisions.items()
        if label != LATEST_LABEL and version != LATEST_LABEL
    ]
    return sorted(versions, key=_version_sort_key, reverse=True)


def resolve(
    qualifier: VersionQualifier, revisions: RevisionSet, retain: int = 0
) -> Union[str, List[str]]:
    if qualifier.kind is QualifierKind.LITERAL:
        return qualifier.literal or ""

    ordered = sorted_revisions(revisions)

    if qualifier.kind is QualifierKind.LATEST:
        if not ordered:
            raise NotResolvableError(str(qualifier), "no published versions")
        return ordered[0]

    if qualifier.kind is QualifierKind.OLDEST:
        if not ordered:
            raise NotResolvableError(str(qualifier), "no published versions")
        return ordered[-1]

    if qualifier.kind is QualifierKind.PREVIOUS:
        if len(ordered) < 2:
            raise NotResolvableError(str(qualifier), f"needs 2 published versions, found {len(ordered)}")
        return ordered[1]

    if qualifier.kind is QualifierKind.MOVING:
        keep = qualifier.retain if qualifier.retain is not None else retain
        if keep < 0:
            raise NotResolvableError(str(qualifier), f"negative retention count {keep}")
        if len(ordered) > keep:
            return ordered[keep:]
        return []

    raise NotResolvableError(str(qualifier), "unknown qualifier")


def resolve_qualifier_string(
    text: str, revisions: RevisionSet, retain: int = 0
) -> Union[str, List[str]]:
    return resolve(VersionQualifier.parse(text), revisions, retain)


def resolve_single(text: str, revisions: RevisionSet) -> str:
    """Resolves a qualifier that must name exactly one version."""
    resolved = resolve_qualifier_string(text, revisions)
    if isinstance(resolved, list):
        raise NotResolvableError(text, "resolves to a list of versions, expected one")
    return resolved
