"""
Tests for agri_advisor/services/recommendation_service.py.

What we test
------------
generate_for_user():
  - Reads the user's analyses and every message of every conversation,
    stores one set plus its items, and returns the public view.
  - No stored data still produces a set with the fallback summary.
  - Messages beyond the first page of a conversation are read.
  - A failing item insert leaves the set and earlier items behind and
    re-raises the store error.
list_for_user() / get_set() / delete_set():
  - Newest first; unknown ids -> None; delete cascades to items.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import timedelta

import pytest

from agri_advisor.db.repositories.analysis_repo import AnalysisResultRepository
from agri_advisor.db.repositories.chat_repo import ChatRepository
from agri_advisor.db.repositories.recommendation_repo import RecommendationRepository
from agri_advisor.models.analysis import AnalysisResult
from agri_advisor.models.chat import ChatMessage, Conversation
from agri_advisor.services.recommendation_service import RecommendationService
from agri_advisor.taxonomy.recommendation_taxonomy import MessageRole, Season


@pytest.fixture
def seeded_db(in_memory_db, now, feasibility_payload, optimization_payload):
    analyses = AnalysisResultRepository(in_memory_db)
    for age, (atype, data) in enumerate(
        [("business_feasibility", feasibility_payload), ("optimization", optimization_payload)],
        start=1,
    ):
        ts = now - timedelta(days=age)
        analyses.insert(
            AnalysisResult(user_id="user-1", type=atype, data=data, created_at=ts, updated_at=ts)
        )

    chats = ChatRepository(in_memory_db)
    conv = chats.insert_conversation(Conversation(user_id="user-1", title="Planning"))
    chats.insert_message(
        ChatMessage(
            conversation_id=conv.id,
            role=MessageRole.ASSISTANT,
            content="Check soil moisture weekly.",
            created_at=now - timedelta(hours=1),
        )
    )
    return in_memory_db


@pytest.fixture
def service(seeded_db, fixed_clock) -> RecommendationService:
    return RecommendationService(seeded_db, clock=fixed_clock)


# ── generate_for_user ─────────────────────────────────────────────────────────

class TestGenerateForUser:
    def test_stores_set_and_items(self, service, seeded_db):
        view = service.generate_for_user("user-1", season=Season.SUMMER)
        assert len(view.items) == 10
        assert view.user_id == "user-1"
        assert view.summary.endswith("Consider adjusting your strategy for the summer season.")

        stored = RecommendationRepository(seeded_db).get_items(view.id)
        assert [i.id for i in stored] == [i.id for i in view.items]

    def test_items_in_rank_order_with_float_confidence(self, service):
        view = service.generate_for_user("user-1")
        assert view.items[0].title == "Optimal Resource Allocation"
        assert isinstance(view.items[0].confidence, float)
        assert view.items[0].confidence == 0.9

    def test_chat_history_is_read(self, service):
        view = service.generate_for_user("user-1")
        assert "Resource Optimization" in [i.title for i in view.items]

    def test_round_trip_via_get_set(self, service):
        view = service.generate_for_user("user-1")
        assert service.get_set(view.id) == view

    def test_no_data_stores_fallback_set(self, in_memory_db, fixed_clock):
        view = RecommendationService(in_memory_db, clock=fixed_clock).generate_for_user("nobody")
        assert view.items == []
        assert view.summary.startswith("Insufficient data for personalized recommendations.")
        assert RecommendationRepository(in_memory_db).get_set(view.id) is not None

    def test_season_string_accepted(self, service):
        view = service.generate_for_user("user-1", season="winter")
        assert view.summary.endswith("the winter season.")

    def test_invalid_season_rejected(self, service):
        with pytest.raises(ValueError):
            service.generate_for_user("user-1", season="dry")

    def test_reads_past_first_message_page(self, in_memory_db, now, fixed_clock):
        chats = ChatRepository(in_memory_db)
        conv = chats.insert_conversation(Conversation(user_id="user-2", title="Long chat"))
        for minute in range(60, 0, -1):
            content = "Revenue looks healthy." if minute == 1 else "Noted."
            chats.insert_message(
                ChatMessage(
                    conversation_id=conv.id,
                    role=MessageRole.ASSISTANT,
                    content=content,
                    created_at=now - timedelta(minutes=minute),
                )
            )
        view = RecommendationService(in_memory_db, clock=fixed_clock).generate_for_user("user-2")
        assert [i.title for i in view.items] == ["Profit Enhancement"]

    def test_item_failure_leaves_partial_set(self, service, seeded_db, monkeypatch, caplog):
        repo = service.recommendations
        original = repo.create_item
        calls = {"n": 0}

        def flaky_create_item(set_id, candidate, position=0):
            calls["n"] += 1
            if calls["n"] == 3:
                raise sqlite3.OperationalError("disk I/O error")
            return original(set_id, candidate, position=position)

        monkeypatch.setattr(repo, "create_item", flaky_create_item)

        with caplog.at_level(logging.ERROR):
            with pytest.raises(sqlite3.OperationalError):
                service.generate_for_user("user-1")

        sets = repo.get_sets("user-1")
        assert len(sets) == 1
        assert len(repo.get_items(sets[0].id)) == 2
        assert "Failed to store recommendation set" in caplog.text

    def test_store_error_propagates(self, in_memory_db, fixed_clock):
        service = RecommendationService(in_memory_db, clock=fixed_clock)
        in_memory_db.execute("DROP TABLE analysis_results;")
        with pytest.raises(sqlite3.OperationalError):
            service.generate_for_user("user-1")


# ── list / get / delete ───────────────────────────────────────────────────────

class TestReadAndDelete:
    def test_list_newest_first(self, seeded_db, now):
        first = RecommendationService(seeded_db, clock=lambda: now).generate_for_user("user-1")
        second = RecommendationService(
            seeded_db, clock=lambda: now + timedelta(days=1)
        ).generate_for_user("user-1")
        views = RecommendationService(seeded_db).list_for_user("user-1")
        assert [v.id for v in views] == [second.id, first.id]
        assert all(len(v.items) == 8 for v in views)

    def test_list_unknown_user_empty(self, service):
        assert service.list_for_user("ghost") == []

    def test_get_missing_returns_none(self, service):
        assert service.get_set("does-not-exist") is None

    def test_delete_cascades(self, service, seeded_db):
        view = service.generate_for_user("user-1")
        service.delete_set(view.id)
        assert service.get_set(view.id) is None
        assert RecommendationRepository(seeded_db).get_items(view.id) == []

    def test_delete_missing_is_noop(self, service):
        service.delete_set("does-not-exist")
