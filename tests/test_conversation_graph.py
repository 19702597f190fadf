"""Tests for the conversation graph and its load-time validation."""

from __future__ import annotations

import json

import pytest

from ary.errors import ConfigurationError
from ary.graph.conversation_graph import load_conversation_graph, parse_conversation_graph
from ary.models.records import COMPLETE, ResponseCategory
from ary.safety.boundaries import check_response, validate_question

CATEGORIES = [c.value for c in ResponseCategory]


def _node(node_id: str, next_id: str = COMPLETE, **overrides) -> dict:
    node = {
        "id": node_id,
        "prompt": f"What matters to you about {node_id}?",
        "options": [
            {"text": "Good", "category": "positive", "keywords": ["good"], "competencies": ["optimism"]},
        ],
        "reactions": {c: "Thank you." for c in CATEGORIES},
        "next": {c: next_id for c in CATEGORIES},
    }
    node.update(overrides)
    return node


def _graph(*nodes: dict, start: str = "a") -> dict:
    return {"start": start, "nodes": list(nodes)}


class TestPackagedGraph:
    """The shipped graph loads cleanly and every path terminates."""

    def test_loads(self, graph):
        assert len(graph) == 47
        assert graph.start_id == "q1"
        assert graph.start.prompt == "Hi there. How are you feeling today?"

    def test_every_route_resolves(self, graph):
        for node_id in graph.node_ids:
            for category in ResponseCategory:
                target = graph.next(node_id, category)
                assert target == COMPLETE or target in graph

    def test_every_path_reaches_complete_in_six_answers(self, graph):
        frontier = {graph.start_id}
        for _ in range(6):
            frontier = {
                graph.next(node_id, category)
                for node_id in frontier
                for category in ResponseCategory
            }
        assert frontier == {COMPLETE}

    def test_first_step_routes_by_category(self, graph):
        assert graph.next("q1", ResponseCategory.POSITIVE) == "q2-positive"
        assert graph.next("q1", ResponseCategory.NEGATIVE) == "q2-negative"
        assert graph.next("q1", ResponseCategory.DETAILED) == "q2-detailed"
        assert graph.next("q1", ResponseCategory.VAGUE) == "q2-vague"

    def test_closing_node_is_final(self, graph):
        assert graph.node("q6-closing").is_final
        for node_id in ("q5-execution", "q5-final"):
            assert graph.next(node_id, ResponseCategory.DETAILED) == "q6-closing"

    def test_keyword_vocabulary_is_ordered_union(self, graph):
        assert graph.keyword_vocabulary("q1") == (
            "good", "positive", "well",
            "not", "struggle", "difficult",
            "thoughtful", "reflection", "considering",
        )

    def test_competencies_only_from_matching_options(self, graph):
        assert graph.competencies_for("q1", ResponseCategory.NEGATIVE) == (
            "resilience",
            "self-awareness",
        )
        assert graph.competencies_for("q1", ResponseCategory.VAGUE) == ()

    def test_system_text_is_clean(self, graph):
        for node_id in graph.node_ids:
            node = graph.node(node_id)
            assert validate_question(node.prompt).valid, node_id
            assert check_response(node.prompt).ok, node_id
            for text in node.reactions.values():
                assert check_response(text).ok, (node_id, text)

    def test_unknown_node(self, graph):
        with pytest.raises(ConfigurationError):
            graph.node("q99")


class TestValidation:
    """Inconsistent data is refused at load time."""

    def test_minimal_graph(self):
        graph = parse_conversation_graph(_graph(_node("a", "b"), _node("b")))
        assert graph.next("a", ResponseCategory.VAGUE) == "b"
        assert graph.next("b", ResponseCategory.VAGUE) == COMPLETE

    def test_dangling_next_id(self):
        with pytest.raises(ConfigurationError, match="unknown node 'ghost'"):
            parse_conversation_graph(_graph(_node("a", "ghost")))

    def test_missing_route(self):
        node = _node("a", next={"positive": COMPLETE, "negative": COMPLETE, "detailed": COMPLETE})
        with pytest.raises(ConfigurationError, match="no route"):
            parse_conversation_graph(_graph(node))

    def test_missing_reaction(self):
        node = _node("a", reactions={"positive": "Thanks."})
        with pytest.raises(ConfigurationError, match="no reaction"):
            parse_conversation_graph(_graph(node))

    def test_unknown_category(self):
        node = _node("a", options=[{"text": "Meh", "category": "neutral"}])
        with pytest.raises(ConfigurationError, match="neutral"):
            parse_conversation_graph(_graph(node))

    def test_duplicate_ids(self):
        with pytest.raises(ConfigurationError, match="Duplicate"):
            parse_conversation_graph(_graph(_node("a"), _node("a")))

    def test_missing_start(self):
        with pytest.raises(ConfigurationError, match="Start node"):
            parse_conversation_graph(_graph(_node("a"), start="zz"))

    def test_empty_graph(self):
        with pytest.raises(ConfigurationError):
            parse_conversation_graph({"nodes": []})

    def test_cycle(self):
        with pytest.raises(ConfigurationError, match="cycle"):
            parse_conversation_graph(_graph(_node("a", "b"), _node("b", "a")))

    def test_evaluative_prompt(self):
        node = _node("a", prompt="What are your weaknesses?")
        with pytest.raises(ConfigurationError, match="prohibited"):
            parse_conversation_graph(_graph(node))

    def test_prescriptive_reaction(self):
        node = _node("a", reactions={c: "You should relax." for c in CATEGORIES})
        with pytest.raises(ConfigurationError, match="reaction"):
            parse_conversation_graph(_graph(node))

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "graph.json"
        path.write_text(json.dumps(_graph(_node("a"))), encoding="utf-8")
        graph = load_conversation_graph(path)
        assert graph.node_ids == ("a",)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Cannot read"):
            load_conversation_graph(tmp_path / "nope.json")
