"""Path normalization for inbound requests.

Strips the gateway's own mount point and the legacy prefix from the raw
request path. Rules are matched as leading prefixes on a segment boundary,
in order, each at most once, so a path that repeats a prefix further down
is never rewritten twice.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from services.edge_gateway_service.models import NormalizedPath


@dataclass(frozen=True)
class PrefixRule:
    prefix: str
    replacement: str = ""

    def apply(self, path: str) -> str:
        if path == self.prefix:
            return self.replacement
        if path.startswith(self.prefix + "/"):
            return self.replacement + path[len(self.prefix) :]
        return path


class PathNormalizer:
    """Derives the clean (route) path and the forward (upstream) path."""

    def __init__(self, rules: Iterable[PrefixRule | tuple[str, str]]) -> None:
        self._rules: tuple[PrefixRule, ...] = tuple(
            rule if isinstance(rule, PrefixRule) else PrefixRule(*rule) for rule in rules
        )

    @property
    def rules(self) -> tuple[PrefixRule, ...]:
        return self._rules

    def forward_path(self, path: str) -> str:
        for rule in self._rules:
            path = rule.apply(path)
        return path

    def normalize(self, path: str) -> NormalizedPath:
        forward = self.forward_path(path)
        return NormalizedPath(clean=forward.rstrip("/"), forward=forward)
