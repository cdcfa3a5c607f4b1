"""Field-search matching policies."""

from __future__ import annotations

from enum import StrEnum


class MatchPolicy(StrEnum):
    """How ``search_by_field`` matches a query against a field value.

    ``CONTAINS`` runs a regexp ``.*query.*`` against the raw keyword value:
    case-sensitive, and it matches inside tokens (``"aa"`` hits ``"aaa"``).

    ``TOKEN`` runs an analyzed ``match`` query requiring every query token:
    ``"aa"`` hits ``"aa"`` and ``"aa bb"`` but not ``"aaa"``.
    """

    CONTAINS = "contains"
    TOKEN = "token"
