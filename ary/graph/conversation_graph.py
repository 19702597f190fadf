"""The static question graph and its JSON loader.

The graph is a fixed, acyclic set of ``QuestionNode`` objects.  Each node
owns a single category → next-node map; answer options only contribute
example text and tag vocabularies.  A transition to ``COMPLETE`` ends the
conversation.

Everything that can be wrong with the data is checked once, in
``validate()``, so that a running conversation never meets a dangling id
or a category without a route.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Mapping

from ary.errors import ConfigurationError
from ary.models.records import (
    COMPLETE,
    AnswerOption,
    QuestionNode,
    ResponseCategory,
    frozen_mapping,
)
from ary.safety.boundaries import check_response, validate_question

logger = logging.getLogger(__name__)


class ConversationGraph:
    """Read-only question graph with a designated start node."""

    def __init__(self, nodes: Iterable[QuestionNode], start_id: str) -> None:
        self._nodes: dict[str, QuestionNode] = {}
        for node in nodes:
            if node.id in self._nodes:
                raise ConfigurationError(f"Duplicate question node id {node.id!r}")
            self._nodes[node.id] = node
        self.start_id = start_id
        self.validate()

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    @property
    def node_ids(self) -> tuple[str, ...]:
        return tuple(self._nodes)

    @property
    def start(self) -> QuestionNode:
        return self._nodes[self.start_id]

    def node(self, node_id: str) -> QuestionNode:
        try:
            return self._nodes[node_id]
        except KeyError:
            raise ConfigurationError(f"Unknown question node {node_id!r}") from None

    def next(self, node_id: str, category: ResponseCategory) -> str:
        """Transition function: the next node id, or ``COMPLETE``."""
        next_id = self.node(node_id).next_ids[category]
        if next_id != COMPLETE and next_id not in self._nodes:
            raise ConfigurationError(
                f"Node {node_id!r} routes {category.value!r} to unknown node {next_id!r}"
            )
        return next_id

    def keyword_vocabulary(self, node_id: str) -> tuple[str, ...]:
        """Ordered union of the keyword tags of every option on the node."""
        seen: dict[str, None] = {}
        for option in self.node(node_id).options:
            for kw in option.keywords:
                seen.setdefault(kw, None)
        return tuple(seen)

    def competencies_for(self, node_id: str, category: ResponseCategory) -> tuple[str, ...]:
        """Ordered union of competency tags of the options in ``category``."""
        seen: dict[str, None] = {}
        for option in self.node(node_id).options:
            if option.category is category:
                for comp in option.competencies:
                    seen.setdefault(comp, None)
        return tuple(seen)

    # ── Validation ───────────────────────────────────────────────────────

    def validate(self) -> None:
        """Raise ``ConfigurationError`` on any structural or wording problem."""
        if self.start_id not in self._nodes:
            raise ConfigurationError(f"Start node {self.start_id!r} is not in the graph")

        for node in self._nodes.values():
            for category in ResponseCategory:
                if category not in node.next_ids:
                    raise ConfigurationError(
                        f"Node {node.id!r} has no route for category {category.value!r}"
                    )
                if category not in node.reactions:
                    raise ConfigurationError(
                        f"Node {node.id!r} has no reaction for category {category.value!r}"
                    )
                target = node.next_ids[category]
                if target != COMPLETE and target not in self._nodes:
                    raise ConfigurationError(
                        f"Node {node.id!r} routes {category.value!r} to unknown node {target!r}"
                    )
            self._validate_wording(node)

        self._check_acyclic()

    @staticmethod
    def _validate_wording(node: QuestionNode) -> None:
        question = validate_question(node.prompt)
        if not question.valid:
            raise ConfigurationError(f"Prompt of node {node.id!r}: {question.violation}")
        texts = [("prompt", node.prompt)]
        texts += [(f"{c.value} reaction", t) for c, t in node.reactions.items()]
        for label, text in texts:
            result = check_response(text)
            if not result.ok:
                raise ConfigurationError(
                    f"{label.capitalize()} of node {node.id!r}: {result.message} "
                    f"({result.violation.value})"  # type: ignore[union-attr]
                )

    def _check_acyclic(self) -> None:
        visiting: set[str] = set()
        done: set[str] = set()

        def visit(node_id: str) -> None:
            if node_id == COMPLETE or node_id in done:
                return
            if node_id in visiting:
                raise ConfigurationError(f"Conversation graph has a cycle through {node_id!r}")
            visiting.add(node_id)
            for target in self._nodes[node_id].next_ids.values():
                visit(target)
            visiting.discard(node_id)
            done.add(node_id)

        for node_id in self._nodes:
            visit(node_id)


# ── Loading ──────────────────────────────────────────────────────────────


def _category(value: Any, where: str) -> ResponseCategory:
    try:
        return ResponseCategory(value)
    except ValueError:
        raise ConfigurationError(f"Unknown response category {value!r} in {where}") from None


def _category_map(raw: Mapping[str, Any], where: str) -> Mapping[ResponseCategory, str]:
    return frozen_mapping({_category(k, where): str(v) for k, v in raw.items()})


def _parse_node(raw: Mapping[str, Any]) -> QuestionNode:
    try:
        node_id = raw["id"]
        where = f"node {node_id!r}"
        options = tuple(
            AnswerOption(
                text=o["text"],
                category=_category(o["category"], where),
                keywords=tuple(o.get("keywords", ())),
                competencies=tuple(o.get("competencies", ())),
            )
            for o in raw.get("options", ())
        )
        return QuestionNode(
            id=node_id,
            prompt=raw["prompt"],
            options=options,
            reactions=_category_map(raw.get("reactions", {}), where),
            next_ids=_category_map(raw.get("next", {}), where),
        )
    except KeyError as e:
        raise ConfigurationError(f"Question node is missing field {e}") from None


def parse_conversation_graph(data: Mapping[str, Any]) -> ConversationGraph:
    """Build and validate a graph from its JSON structure."""
    nodes = [_parse_node(raw) for raw in data.get("nodes", ())]
    if not nodes:
        raise ConfigurationError("Conversation graph has no nodes")
    start_id = data.get("start", nodes[0].id)
    return ConversationGraph(nodes, start_id)


def load_conversation_graph(path: str | Path) -> ConversationGraph:
    """Load and validate the conversation graph stored at ``path``.

    Raises
    ------
    ConfigurationError
        If the file is unreadable or the graph is inconsistent.
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Cannot read conversation graph {path}: {e}") from e

    graph = parse_conversation_graph(data)
    logger.info("Loaded conversation graph: %d nodes, start=%s", len(graph), graph.start_id)
    return graph
