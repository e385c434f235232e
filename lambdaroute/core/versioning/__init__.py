from .resolver import (
    LATEST_LABEL,
    QualifierKind,
    VersionQualifier,
    resolve,
    resolve_qualifier_string,
    resolve_single,
    sorted_revisions,
)

__all__ = [
    "LATEST_LABEL",
    "QualifierKind",
    "VersionQualifier",
    "resolve",
    "resolve_qualifier_string",
    "resolve_single",
    "sorted_revisions",
]
