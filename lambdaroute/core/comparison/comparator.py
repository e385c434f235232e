"""
comparator.py

Compares the candidate's invocation output with the expected-output artifact.

Comparison is whitespace-insensitive: newlines, tabs and spaces are stripped
from both sides first, so JSON that differs only in formatting matches.
This also hides differences in whitespace inside string values.
"""

import logging
import re
from typing import Optional, Union

from lambdaroute.core.retry import RetryPolicy
from lambdaroute.interfaces.collaborators import ArtifactFetcher
from lambdaroute.interfaces.types.deployment import ArtifactReference
from lambdaroute.interfaces.types.task import ComparisonOutcome

logger = logging.getLogger(__name__)

_STRIPPED_CHARACTERS = re.compile(r"[\n\t ]")


def normalize(content: Optional[str]) -> str:
    if content is None:
        return ""
    return _STRIPPED_CHARACTERS.sub("", content)


def _as_text(content: Union[bytes, str, None]) -> Optional[str]:
    if isinstance(content, bytes):
        return content.decode("utf-8")
    return content


class ContentComparator:
    def __init__(self, artifact_fetcher: ArtifactFetcher, retry_policy: RetryPolicy):
        self.artifact_fetcher = artifact_fetcher
        self.retry_policy = retry_policy

    async def fetch_expected(self, expected_ref: ArtifactReference) -> Optional[str]:
        async def _fetch():
            return await self.artifact_fetcher.fetch_artifact(expected_ref)

        # RetriesExhaustedError propagates to the caller.
        content = await self.retry_policy.execute(_fetch)
        return _as_text(content)

    async def compare(self, expected_ref: ArtifactReference, actual: Optional[str]) -> ComparisonOutcome:
        expected_content = await self.fetch_expected(expected_ref)
        return compare_content(expected_content, actual)


def compare_content(expected: Optional[str], actual: Optional[str]) -> ComparisonOutcome:
    normalized_expected = normalize(expected)
    normalized_actual = normalize(actual)
    if normalized_expected == normalized_actual:
        return ComparisonOutcome(matched=True, expected=normalized_expected, actual=normalized_actual)

    diagnostic = f"Comparison failed. expected : [{normalized_expected}], actual : [{normalized_actual}]"
    logger.error(diagnostic)
    return ComparisonOutcome(
        matched=False,
        expected=normalized_expected,
        actual=normalized_actual,
        diagnostic=diagnostic,
    )
