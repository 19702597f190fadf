"""Process-wide access to the packaged conversation graph and profile catalog.

Both are read from JSON once (paths come from ``ary.settings``) and shared
read-only afterwards.  ``reset()`` drops the cache; tests call it after
pointing ``ARY_GRAPH_PATH`` / ``ARY_PROFILES_PATH`` elsewhere.
"""

from __future__ import annotations

from ary import settings
from ary.graph.conversation_graph import ConversationGraph, load_conversation_graph
from ary.models.records import CompetenceProfile
from ary.scoring.profile_scorer import load_profile_catalog

_CACHE: dict[str, object] = {}


def reset() -> None:
    """Forget the loaded graph and catalog."""
    _CACHE.clear()


def get_conversation_graph() -> ConversationGraph:
    graph = _CACHE.get("graph")
    if graph is None:
        graph = load_conversation_graph(settings.GRAPH_PATH)
        _CACHE["graph"] = graph
    return graph  # type: ignore[return-value]


def get_profile_catalog() -> tuple[CompetenceProfile, ...]:
    catalog = _CACHE.get("catalog")
    if catalog is None:
        catalog = load_profile_catalog(
            settings.PROFILES_PATH,
            known_question_ids=get_conversation_graph().node_ids,
        )
        _CACHE["catalog"] = catalog
    return catalog  # type: ignore[return-value]


def load_all() -> tuple[ConversationGraph, tuple[CompetenceProfile, ...]]:
    """Load both data sets eagerly; entrypoints call this at startup."""
    return get_conversation_graph(), get_profile_catalog()
