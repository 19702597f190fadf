"""End-to-end runs of the compiled LangGraph workflow.

The real graph, checkpointer and packaged data are used; the user's
turns are supplied through ``resume_answer`` / ``resume_finish`` exactly
as the CLI and web entrypoints do.
"""

from __future__ import annotations

import json

import pytest
from langchain_core.messages import AIMessage
from langgraph.types import Command

from ary.agents.scorer import CLOSING_LINE
from ary.errors import SessionCompleteError
from ary.models.initial_state import new_reflection_state
from ary.workflow import build_graph, forget, resume_answer, resume_finish

ANSWER = "Yes, said Ignatius"


def _stored(checkpointer) -> str:
    """Everything the in-memory checkpointer holds, as one searchable string."""
    return repr(checkpointer.storage) + repr(checkpointer.writes) + repr(checkpointer.blobs)


@pytest.fixture
def run():
    graph = build_graph()
    config = {"configurable": {"thread_id": "e2e"}}
    first = graph.invoke(new_reflection_state("e2e"), config)

    def answer(text=ANSWER):
        return resume_answer(graph, config, text)

    def finish():
        return resume_finish(graph, config)

    return first, answer, finish, graph, config


class TestFullConversation:
    def test_first_message_is_start_prompt(self, run):
        first, *_ = run
        assert first["messages"][-1].content == "Hi there. How are you feeling today?"
        assert first["current_node_id"] == "q1"
        assert not first["done"]

    def test_six_answers_complete_the_conversation(self, run):
        _, answer, *_ = run
        for _ in range(5):
            result = answer()
            assert not result["done"]
        result = answer()

        assert result["done"] is True
        assert result["current_node_id"] == "complete"
        assert len(result["evidence"]) == 6
        assert result["profile"]["id"]
        assert result["messages"][-1].content.startswith(CLOSING_LINE)

    def test_no_answers_after_completion(self, run):
        _, answer, *_ = run
        for _ in range(6):
            answer()
        with pytest.raises(SessionCompleteError):
            answer()

    def test_negative_answer_routes(self, run):
        _, answer, *_ = run
        result = answer("Not great, to be honest.")
        assert result["evidence"][0]["category"] == "negative"
        assert result["current_node_id"] == "q2-negative"


class TestAnswerPrivacy:
    """Raw answers never reach the checkpointer, in values or in pending writes."""

    def test_state_values_are_answer_free(self, run):
        _, answer, _, graph, config = run
        for _ in range(6):
            answer()
        values = graph.get_state(config).values

        assert all(isinstance(m, AIMessage) for m in values["messages"])
        dumped = json.dumps(
            {k: v for k, v in values.items() if k != "messages"}, default=str
        )
        assert "Ignatius" not in dumped

    def test_checkpointer_holds_no_answer_text(self, run):
        _, answer, _, graph, _ = run
        for _ in range(3):
            answer()
        assert "Ignatius" not in _stored(graph.checkpointer)

    def test_raw_text_resume_is_refused(self, run):
        _, _, _, graph, config = run
        with pytest.raises(TypeError):
            graph.invoke(Command(resume="plain text"), config)

    def test_forget_releases_the_thread(self, run):
        _, answer, _, graph, config = run
        for _ in range(6):
            answer()
        forget(graph, config)

        saver = graph.checkpointer
        assert not any(key[0] == "e2e" for key in saver.writes)
        assert not any(key[0] == "e2e" for key in saver.blobs)
        assert not saver.storage.get("e2e")
        assert graph.get_state(config).values == {}


class TestEarlyFinish:
    def test_finish_after_minimum(self, run):
        _, answer, finish, *_ = run
        for _ in range(5):
            result = answer()
        assert result["current_node_id"] == "q6-closing"

        result = finish()
        assert result["done"] is True
        assert len(result["evidence"]) == 5
        assert result["profile"]["id"]

    def test_refused_finish_re_asks_without_repeating_the_reaction(self, run, graph):
        _, answer, finish, *_ = run
        answer()
        before = answer("I want to end it")
        assert before["escalation_message"]

        result = finish()
        assert not result["done"]
        assert result["finish_requested"] is False
        assert len(result["evidence"]) == 2
        assert result["current_node_id"] == before["current_node_id"]
        assert result["messages"][-1].content == graph.node(before["current_node_id"]).prompt
        assert result["escalation_message"] is None

        result = answer()
        assert len(result["evidence"]) == 3
