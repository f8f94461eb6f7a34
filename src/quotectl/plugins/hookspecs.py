"""Pluggy hook specifications for quotectl editing and save events.

Hooks run synchronously after the quote state has settled. Their return
values are ignored and their exceptions become result warnings.
"""

from __future__ import annotations

import pluggy

hookspec = pluggy.HookspecMarker("quotectl")
hookimpl = pluggy.HookimplMarker("quotectl")


class QuotectlHookSpec:
    """Hook specifications for the quotectl plugin system."""

    @hookspec
    def post_mutation(
        self,
        quote_id: str | None,
        op: str,
        revision: int,
        item_ids: list[str],
    ) -> None:
        """Called after an accepted mutation has been recomputed."""

    @hookspec
    def post_save(self, quote_id: str, id_map: dict[str, str]) -> None:
        """Called after a quote has been persisted."""
