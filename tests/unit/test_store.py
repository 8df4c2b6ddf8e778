"""Unit tests for the identity-mapped EntityStore."""

from __future__ import annotations

import logging
from unittest.mock import MagicMock

import pytest

from row_map.core.connection import Connection
from row_map.core.enums import Comparator
from row_map.core.exceptions import (
    ConnectionFailure,
    DescriptorError,
    EmptyFieldList,
    RowNotFound,
)
from row_map.mapping.builder import entity
from row_map.mapping.entity import Entity
from row_map.repository.session import Session
from row_map.repository.store import EntityStore


class Member(Entity):
    __entity__ = entity("users").key("id").field("name").readable("email").build()


class Article(Entity):
    __entity__ = (
        entity("posts")
        .key("id")
        .field("title")
        .field("score")
        .reference("author", Member)
        .reference("parent", "Article")
        .build()
    )


class Ghost(Entity):
    __entity__ = entity("no_such_table").key("id").field("name").build()


def _sql(spy: MagicMock) -> list[str]:
    return [c.args[0] for c in spy.call_args_list]


class TestByKey:
    def test_repeated_lookups_return_the_same_instance(self, session: Session) -> None:
        store = session.store(Member)
        assert store.by_key(1) is store.by_key(1)

    def test_cache_hit_issues_no_statement(self, session: Session, statements: MagicMock) -> None:
        store = session.store(Member)
        store.by_key(1)
        statements.reset_mock()
        store.by_key(1)
        assert statements.call_count == 0

    def test_miss_selects_the_row(self, session: Session, statements: MagicMock) -> None:
        session.store(Member).by_key(2)
        assert _sql(statements) == ["SELECT * FROM `users` WHERE `id` = 2 LIMIT 1"]

    def test_missing_row_returns_none(self, session: Session) -> None:
        store = session.store(Member)
        assert store.by_key(42) is None
        assert 42 not in store

    def test_backend_failure_propagates(self, session: Session) -> None:
        with pytest.raises(ConnectionFailure) as excinfo:
            session.store(Ghost).by_key(1)
        assert "no_such_table" in excinfo.value.sql

    def test_key_spellings_share_one_instance(self, session: Session) -> None:
        store = session.store(Member)
        assert store.by_key("1") is store.by_key(1)

    def test_other_key_spelling_hits_the_cache(
        self, session: Session, statements: MagicMock
    ) -> None:
        store = session.store(Member)
        alice = store.by_key("1")
        statements.reset_mock()
        assert store.by_key("1") is alice
        assert "1" in store
        assert statements.call_count == 0

    def test_store_requires_entity_class(self, session: Session) -> None:
        with pytest.raises(DescriptorError):
            EntityStore(dict, session)  # type: ignore[type-var]


class TestReferences:
    def test_reference_fields_are_resolved(self, session: Session) -> None:
        reply = session.get(Article, 2)
        assert isinstance(reply.author, Member)
        assert reply.author.name == "Bob"
        assert reply.parent is session.get(Article, 1)

    def test_null_reference_stays_none(self, session: Session) -> None:
        assert session.get(Article, 1).parent is None

    def test_shared_author_is_one_instance(self, session: Session) -> None:
        post = session.get(Article, 1)
        reply = session.get(Article, 3)
        assert post.author is reply.author

    def test_rename_through_one_root_is_seen_through_the_other(self, session: Session) -> None:
        post = session.get(Article, 1)
        reply = session.get(Article, 3)
        post.author.name = "Alicia"
        assert reply.author.name == "Alicia"
        reply.parent.author.name = "Ali"
        assert post.author.name == "Ali"

    def test_cyclic_references_terminate(self, session: Session) -> None:
        session.connection.execute("UPDATE `posts` SET `parent` = 3 WHERE `id` = 1")
        post = session.get(Article, 1)
        assert post.parent.parent is post

    def test_self_reference(self, session: Session) -> None:
        session.connection.execute("UPDATE `posts` SET `parent` = 2 WHERE `id` = 2")
        post = session.get(Article, 2)
        assert post.parent is post

    def test_dangling_reference_resolves_to_none(self, session: Session) -> None:
        session.connection.execute("UPDATE `posts` SET `author` = 99 WHERE `id` = 2")
        assert session.get(Article, 2).author is None

    def test_failed_resolution_leaves_no_half_loaded_entity(self, session: Session) -> None:
        session.connection.execute("DROP TABLE users")
        store = session.store(Article)
        with pytest.raises(ConnectionFailure):
            store.by_key(1)
        assert len(store) == 0


class TestRelease:
    def test_release_forces_a_new_select(self, session: Session, statements: MagicMock) -> None:
        store = session.store(Member)
        before = store.by_key(1)
        assert store.release(1) is True

        statements.reset_mock()
        after = store.by_key(1)
        assert statements.call_count == 1
        assert after is not before
        assert after.name == before.name

    def test_release_by_other_key_spelling(self, session: Session) -> None:
        store = session.store(Member)
        store.by_key("1")
        assert store.release("1") is True
        assert 1 not in store
        assert "1" not in store

    def test_release_unknown_key(self, session: Session) -> None:
        assert session.store(Member).release(1) is False

    def test_release_discards_pending_changes(
        self, session: Session, statements: MagicMock, caplog: pytest.LogCaptureFixture
    ) -> None:
        store = session.store(Member)
        store.by_key(1).name = "Changed"
        statements.reset_mock()
        with caplog.at_level(logging.WARNING, logger="row_map"):
            store.release(1)
        assert statements.call_count == 0
        assert "unsaved" in caplog.text
        assert store.by_key(1).name == "Alice"

    def test_release_all(self, session: Session) -> None:
        store = session.store(Member)
        store.by_key(1)
        store.by_key(2)
        assert sorted(store.cached_keys) == [1, 2]
        store.release_all()
        assert len(store) == 0


class TestSave:
    def test_save_without_changes_runs_nothing(
        self, session: Session, statements: MagicMock
    ) -> None:
        post = session.get(Article, 1)
        statements.reset_mock()
        assert post.save() is post
        assert statements.call_count == 0

    def test_save_updates_only_changed_fields(
        self, session: Session, statements: MagicMock
    ) -> None:
        post = session.get(Article, 1)
        post.title = "Hello again"
        post.author = 2
        statements.reset_mock()
        post.save()
        assert _sql(statements) == [
            "UPDATE `posts` SET `title` = 'Hello again', `author` = 2 WHERE `id` = 1"
        ]
        assert not post.is_dirty

    def test_saved_values_survive_reload(self, session: Session) -> None:
        store = session.store(Article)
        post = store.by_key(1)
        post.title = "Persisted"
        post.parent = 3
        post.save()
        store.release(1)

        reloaded = store.by_key(1)
        assert reloaded.title == "Persisted"
        assert reloaded.parent is store.by_key(3)

    def test_second_save_is_a_no_op(self, session: Session, statements: MagicMock) -> None:
        post = session.get(Article, 1)
        post.score = 10
        post.save()
        statements.reset_mock()
        post.save()
        assert statements.call_count == 0

    def test_entity_scope_saves_on_exit(
        self, session: Session, blog_connection: Connection
    ) -> None:
        with session.get(Member, 2) as bob:
            bob.name = "Robert"
        row = blog_connection.execute("SELECT name FROM users WHERE id = 2").fetch_one()
        assert row == {"name": "Robert"}

    def test_entity_scope_saves_on_error(
        self, session: Session, blog_connection: Connection
    ) -> None:
        with pytest.raises(RuntimeError):
            with session.get(Member, 2) as bob:
                bob.name = "Robert"
                raise RuntimeError("boom")
        assert blog_connection.execute("SELECT name FROM users WHERE id = 2").scalar() == "Robert"

    def test_flush_saves_every_dirty_entity(self, session: Session) -> None:
        store = session.store(Member)
        store.by_key(1).name = "A"
        store.by_key(2)
        assert store.flush() == 1
        assert store.flush() == 0


class TestCheckout:
    def test_checkout_saves(self, session: Session, blog_connection: Connection) -> None:
        with session.store(Article).checkout(2) as post:
            post.score = 99
        assert blog_connection.execute("SELECT score FROM posts WHERE id = 2").scalar() == 99

    def test_checkout_missing_row(self, session: Session) -> None:
        with pytest.raises(RowNotFound) as excinfo:
            with session.store(Article).checkout(404):
                pass
        assert excinfo.value.key == 404


class TestInsert:
    def test_insert_returns_loaded_entity(self, session: Session) -> None:
        store = session.store(Member)
        carol = store.insert({"name": "Carol", "email": "carol@example.com"})
        assert carol.pk == 3
        assert carol.email == "carol@example.com"
        assert store.by_key(3) is carol

    def test_insert_with_entity_reference(self, session: Session) -> None:
        alice = session.get(Member, 1)
        post = session.store(Article).insert({"title": "New", "author": alice})
        assert post.author is alice

    def test_insert_with_explicit_key(self, session: Session) -> None:
        member = session.store(Member).insert({"id": 50, "name": "Zed"})
        assert member.pk == 50

    def test_insert_nothing(self, session: Session) -> None:
        with pytest.raises(EmptyFieldList):
            session.store(Member).insert({})

    def test_insert_failure(self, session: Session) -> None:
        with pytest.raises(ConnectionFailure):
            session.store(Member).insert({"name": None})


class TestBulkOperations:
    def test_bulk_update_is_scoped_to_the_table(self, session: Session) -> None:
        query = session.store(Article).bulk_update({"score": 0}).where("author", Comparator.EQ, 1)
        assert query.render() == "UPDATE `posts` SET `score` = 0 WHERE `author` = 1"

    def test_bulk_update_needs_fields(self, session: Session) -> None:
        with pytest.raises(EmptyFieldList):
            session.store(Article).bulk_update({})

    def test_bulk_update_leaves_cache_stale_until_release(self, session: Session) -> None:
        store = session.store(Member)
        alice = store.by_key(1)
        result = store.bulk_update({"name": "Renamed"}).where("id", Comparator.EQ, 1).execute()
        assert result.rowcount == 1
        assert alice.name == "Alice"

        store.release(1)
        assert store.by_key(1).name == "Renamed"

    def test_bulk_delete(self, session: Session) -> None:
        store = session.store(Article)
        result = store.bulk_delete().where("author", Comparator.EQ, 2).execute()
        assert result.rowcount == 1
        assert store.by_key(2) is None
