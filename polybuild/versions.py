"""Max-satisfying resolution of partial version specifiers.

A specifier is either a full version (``3.11.6``) or a prefix of one
(``3`` or ``3.11``).  Components are compared numerically, never as text,
and a missing trailing component counts as zero (``3.11 == 3.11.0``).
"""

from __future__ import annotations

from collections.abc import Iterable

from packaging.version import InvalidVersion, Version


def _parse(raw: str) -> Version | None:
    try:
        return Version(raw)
    except InvalidVersion:
        return None


def _is_plain_release(version: Version) -> bool:
    return (
        version.epoch == 0
        and version.pre is None
        and version.post is None
        and version.dev is None
        and version.local is None
    )


def _matches(prefix: tuple[int, ...], candidate: Version) -> bool:
    release = candidate.release
    if len(release) < len(prefix):
        release = release + (0,) * (len(prefix) - len(release))
    return release[: len(prefix)] == prefix


def resolve_version(specifier: str | None, supported: Iterable[str]) -> str | None:
    """Return the highest entry of *supported* matching *specifier*, or ``None``.

    An exact textual match always wins.  Otherwise the specifier's numeric
    components must equal the leading components of a candidate; among the
    matches the numerically greatest is returned (the first one listed on a tie).
    Non-numeric specifiers and candidates, and specifiers carrying a pre,
    post, dev, local or epoch segment, only ever match exactly.
    """
    if not specifier or not specifier.strip():
        return None
    specifier = specifier.strip()
    versions = list(supported)
    if specifier in versions:
        return specifier

    wanted = _parse(specifier)
    if wanted is None or not _is_plain_release(wanted):
        return None
    prefix = wanted.release

    best: str | None = None
    best_key: Version | None = None
    for raw in versions:
        parsed = _parse(raw)
        if parsed is None or not _matches(prefix, parsed):
            continue
        if best_key is None or parsed > best_key:
            best, best_key = raw, parsed
    return best


def sort_versions(versions: Iterable[str]) -> list[str]:
    """Sort *versions* ascending, numerically; unparsable entries go last."""
    parsed = [(v, _parse(v)) for v in versions]
    good = sorted((p for p in parsed if p[1] is not None), key=lambda p: p[1])
    bad = [p for p in parsed if p[1] is None]
    return [v for v, _ in good + bad]
