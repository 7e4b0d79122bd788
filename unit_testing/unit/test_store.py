"""
Unit tests for IconStore persistence (in-memory SQLite).

Tests cover:
- Session creation, listing and deletion with cascade
- Message append with title derivation
- Transactional icon attachment
- Standalone icon CRUD
"""

import uuid
from datetime import datetime

import pytest

from aiconic.db import derive_session_title
from aiconic.db.database import get_db_session
from aiconic.db.orm_models import Icon, Message


class TestDeriveSessionTitle:

    def test_collapses_whitespace(self):
        assert derive_session_title("  一个   现代\n\t图标  ") == "一个 现代 图标"

    def test_truncates_long_content(self):
        content = "设计一套用于金融理财应用的现代风格图标包括硬币钱包和增长曲线"
        title = derive_session_title(content)
        assert title == content[:20] + "..."

    def test_exactly_max_length_is_kept(self):
        content = "a" * 20
        assert derive_session_title(content) == content

    def test_blank_content(self):
        assert derive_session_title("   ") == ""


class TestSessions:
    """Session lifecycle."""

    def test_create_defaults(self, store):
        session = store.create_session()

        assert session["title"] == "新会话"
        assert session["createdAt"] == session["updatedAt"]
        uuid.UUID(session["id"])

    def test_create_with_title(self, store):
        assert store.create_session("  图标设计  ")["title"] == "图标设计"

    def test_get_unknown(self, store):
        assert store.get_session(str(uuid.uuid4())) is None
        assert store.get_session("not-a-uuid") is None
        assert store.get_session_detail(str(uuid.uuid4())) is None

    def test_list_most_recently_updated_first(self, store):
        older = store.create_session("A")
        newer = store.create_session("B")
        store.add_message(older["id"], "assistant", "hello")

        ids = [s["id"] for s in store.list_sessions()]
        assert ids == [older["id"], newer["id"]]

    def test_list_limit(self, store):
        for i in range(3):
            store.create_session(f"s{i}")
        assert len(store.list_sessions(limit=2)) == 2

    def test_delete_cascades(self, store):
        session = store.create_session()
        store.add_message(session["id"], "user", "盾牌图标")
        store.add_message(
            session["id"], "assistant", "已完成",
            generated_icons=[{"svg": "<svg>a</svg>", "style": "neon"}],
        )

        assert store.delete_session(session["id"]) is True
        assert store.get_session(session["id"]) is None
        with get_db_session() as db:
            assert db.query(Message).count() == 0
            assert db.query(Icon).count() == 0

    def test_delete_unknown(self, store):
        assert store.delete_session(str(uuid.uuid4())) is False
        assert store.delete_session("nope") is False


class TestMessages:
    """add_message semantics."""

    def test_first_user_message_sets_title(self, store):
        session = store.create_session()

        result = store.add_message(session["id"], "user", "  一个   现代   图标  ")

        assert result["newTitle"] == "一个 现代 图标"
        assert store.get_session(session["id"])["title"] == "一个 现代 图标"

    def test_later_user_messages_keep_title(self, store):
        session = store.create_session()
        store.add_message(session["id"], "user", "第一条")

        result = store.add_message(session["id"], "user", "第二条")

        assert result["newTitle"] is None
        assert store.get_session(session["id"])["title"] == "第一条"

    def test_assistant_message_does_not_set_title(self, store):
        session = store.create_session()
        result = store.add_message(session["id"], "assistant", "你好")
        assert result["newTitle"] is None
        assert store.get_session(session["id"])["title"] == "新会话"

    def test_bumps_updated_at(self, store):
        session = store.create_session()
        result = store.add_message(session["id"], "assistant", "你好")
        updated = store.get_session(session["id"])
        assert updated["updatedAt"] == result["message"]["createdAt"]
        assert datetime.fromisoformat(updated["updatedAt"]) >= datetime.fromisoformat(session["updatedAt"])

    def test_icons_attached_with_defaults(self, store):
        session = store.create_session()

        result = store.add_message(
            session["id"], "assistant", "安全图标",
            tool_calls=[{"name": "generate_icon_set", "status": "done", "logLines": []}],
            generated_icons=[
                {"svg": "<svg>a</svg>", "style": "appstore", "name": "盾牌"},
                {"svg": "<svg>b</svg>"},
            ],
        )

        assert len(result["icons"]) == 2
        assert result["icons"][0]["name"] == "盾牌"
        assert result["icons"][1]["name"] == "未命名图标"
        assert result["icons"][1]["prompt"] == "安全图标"
        assert result["icons"][1]["style"] == "modern"
        assert all(i["messageId"] == result["message"]["id"] for i in result["icons"])
        assert result["message"]["toolCalls"][0]["name"] == "generate_icon_set"

    def test_icon_failure_rolls_back_message(self, store):
        session = store.create_session()

        with pytest.raises(KeyError):
            store.add_message(
                session["id"], "user", "盾牌",
                generated_icons=[{"svg": "<svg/>"}, {"style": "neon"}],
            )

        detail = store.get_session_detail(session["id"])
        assert detail["messages"] == []
        assert detail["icons"] == []
        assert detail["session"]["title"] == "新会话"

    def test_unknown_session(self, store):
        assert store.add_message(str(uuid.uuid4()), "user", "hi") is None

    def test_detail_is_chronological(self, store):
        session = store.create_session()
        store.add_message(session["id"], "user", "one")
        store.add_message(session["id"], "assistant", "two", generated_icons=[{"svg": "<svg/>"}])
        store.add_message(session["id"], "user", "three")

        detail = store.get_session_detail(session["id"])

        assert [m["content"] for m in detail["messages"]] == ["one", "two", "three"]
        assert detail["icons"][0]["svgContent"] == "<svg/>"

    def test_icons_of_one_message_keep_posted_order(self, store):
        session = store.create_session()
        styles = ["appstore", "material", "fluent", "neon"]
        store.add_message(
            session["id"], "assistant", "盾牌",
            generated_icons=[{"svg": f"<svg>{s}</svg>", "style": s} for s in styles],
        )

        icons = store.get_session_detail(session["id"])["icons"]

        assert [i["style"] for i in icons] == styles
        created = [i["createdAt"] for i in icons]
        assert len(set(created)) == len(created), "Each icon needs its own sort key"


class TestIcons:

    def test_save_and_recent(self, store):
        first = store.save_icon("a", "<svg>a</svg>", "p", "neon")
        second = store.save_icon("b", "<svg>b</svg>", "p", "retro")

        recent = store.recent_icons(limit=5)

        assert [i["id"] for i in recent] == [second["id"], first["id"]]
        assert first["sessionId"] is None

    def test_search_limit(self, store):
        for i in range(12):
            store.save_icon(f"盾牌{i}", "<svg/>", "p", "neon")
        assert len(store.search_icons("盾牌")) == 10
        assert "svgContent" not in store.search_icons("盾牌")[0]

    def test_delete(self, store):
        icon = store.save_icon("a", "<svg/>", "p", "neon")
        assert store.delete_icon(icon["id"]) is True
        assert store.delete_icon(icon["id"]) is False
