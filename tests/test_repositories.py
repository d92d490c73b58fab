"""Integration tests for database repositories."""

import sqlite3

import pytest

from pagevault.database import connect
from pagevault.repositories.file_repository import FileRepository
from pagevault.repositories.share_repository import ShareRepository
from pagevault.repositories.tag_repository import TagRepository
from pagevault.repositories.user_repository import ROLE_ADMIN, UserRepository
from tests.fakes import make_user


def _create(owner_id, key, display_name="Doc", text="body", description=None, size=10, file_id=None, conn=None):
    return FileRepository.create_file(
        file_id=file_id or key.replace("/", "-"),
        owner_id=owner_id,
        object_key=key,
        filename=key.rsplit("/", 1)[-1],
        display_name=display_name,
        content_kind="html",
        content_type="text/html; charset=utf-8",
        size=size,
        text=text,
        description=description,
        conn=conn,
    )


class TestDatabaseHelpers:
    def test_connect_returns_open_connection(self, test_db):
        conn = connect()
        try:
            assert conn.execute("PRAGMA foreign_keys").fetchone()[0] == 1
        finally:
            conn.close()

    def test_methods_without_conn_open_their_own(self, owner):
        """
        Each call with conn=None opens, uses and closes a fresh connection.
        """
        created = _create(owner.user_id, f"{owner.user_id}/own.md", file_id="own", size=7)

        assert FileRepository.exists_by_object_key(created.object_key)
        assert FileRepository.get_usage(owner.user_id) == (7, 1)
        assert UserRepository.exists(owner.user_id)
        assert UserRepository.get_first_admin() is not None

        FileRepository.delete_file("own")

        assert not FileRepository.exists_by_object_key(created.object_key)
        assert FileRepository.get_usage(owner.user_id) == (0, 0)

    def test_shared_conn_is_left_open(self, owner):
        conn = connect()
        try:
            _create(owner.user_id, f"{owner.user_id}/tx.md", conn=conn)
            assert FileRepository.exists_by_object_key(f"{owner.user_id}/tx.md", conn=conn)
            conn.rollback()
            assert not FileRepository.exists_by_object_key(f"{owner.user_id}/tx.md", conn=conn)
        finally:
            conn.close()


class TestUserRepository:
    def test_first_admin_is_lowest_id(self, test_db):
        make_user("zed")
        first = make_user("root", role=ROLE_ADMIN)
        make_user("second-admin", role=ROLE_ADMIN)

        assert UserRepository.get_first_admin().user_id == first.user_id

    def test_no_admin(self, test_db):
        make_user("plain")
        assert UserRepository.get_first_admin() is None

    def test_lookup_by_api_key(self, test_db):
        user = make_user("carol")

        assert UserRepository.get_by_api_key("pv_carol-key").user_id == user.user_id
        assert UserRepository.exists(user.user_id)
        assert not UserRepository.exists(user.user_id + 100)
        assert UserRepository.get_by_id(user.user_id).username == "carol"

    def test_duplicate_username_rejected(self, test_db):
        make_user("dup")
        with pytest.raises(sqlite3.IntegrityError):
            make_user("dup")


class TestFileRepository:
    def test_object_key_is_unique(self, owner):
        _create(owner.user_id, f"{owner.user_id}/a.html", file_id="f1")

        with pytest.raises(sqlite3.IntegrityError):
            _create(owner.user_id, f"{owner.user_id}/a.html", file_id="f2")

    def test_text_none_leaves_file_in_backlog(self, owner):
        _create(owner.user_id, f"{owner.user_id}/pending.html", text=None)
        _create(owner.user_id, f"{owner.user_id}/done.html", text="")

        backlog = FileRepository.get_files_missing_text(10)

        assert [f.object_key for f in backlog] == [f"{owner.user_id}/pending.html"]

    def test_update_file_text_clears_backlog_and_sets_title(self, owner):
        file = _create(owner.user_id, f"{owner.user_id}/x.html", display_name="x.html", text=None)

        FileRepository.update_file_text(file.file_id, "extracted", title="Real Title")

        updated = FileRepository.get_by_id(file.file_id)
        assert updated.text == "extracted"
        assert updated.display_name == "Real Title"
        assert updated.text_extracted_at is not None
        assert FileRepository.get_files_missing_text(10) == []

    def test_list_is_newest_first(self, owner):
        for name in ("one", "two", "three"):
            _create(owner.user_id, f"{owner.user_id}/{name}.html", display_name=name)

        names = [f.display_name for f in FileRepository.list_by_owner(owner.user_id)]

        assert names == ["three", "two", "one"]

    def test_search_metadata_is_case_insensitive_and_escapes_wildcards(self, owner):
        _create(owner.user_id, f"{owner.user_id}/a.html", display_name="Quarterly REPORT")
        _create(owner.user_id, f"{owner.user_id}/b.html", display_name="Other", description="100% done")
        _create(owner.user_id, f"{owner.user_id}/c.html", display_name="1000 done")

        assert [f.display_name for f in FileRepository.search_metadata(owner.user_id, "report")] == ["Quarterly REPORT"]
        assert [f.display_name for f in FileRepository.search_metadata(owner.user_id, "100%")] == ["Other"]

    def test_search_metadata_folds_non_ascii_case(self, owner):
        _create(owner.user_id, f"{owner.user_id}/a.html", display_name="ÄRGER Notizen")
        _create(owner.user_id, f"{owner.user_id}/b.html", display_name="Plain", description="Straße und Weg")

        assert [f.display_name for f in FileRepository.search_metadata(owner.user_id, "ärger")] == ["ÄRGER Notizen"]
        assert [f.display_name for f in FileRepository.search_metadata(owner.user_id, "STRASSE")] == ["Plain"]

    def test_search_metadata_ignores_body_text(self, owner):
        _create(owner.user_id, f"{owner.user_id}/a.html", display_name="Title", text="hidden needle")

        assert FileRepository.search_metadata(owner.user_id, "needle") == []

    def test_tag_filter_matches_tag_name(self, owner):
        tagged = _create(owner.user_id, f"{owner.user_id}/t.html", display_name="Tagged")
        _create(owner.user_id, f"{owner.user_id}/u.html", display_name="Untagged")
        tag = TagRepository.create_tag(owner.user_id, "work")
        TagRepository.attach(tagged.file_id, tag.tag_id)

        assert [f.display_name for f in FileRepository.list_by_owner(owner.user_id, "work")] == ["Tagged"]
        assert FileRepository.get_by_ids([tagged.file_id], owner.user_id, "other") == {}

    def test_get_by_ids_is_owner_scoped(self, owner):
        other = make_user("mallory")
        mine = _create(owner.user_id, f"{owner.user_id}/m.html")
        theirs = _create(other.user_id, f"{other.user_id}/t.html")

        found = FileRepository.get_by_ids([mine.file_id, theirs.file_id], owner.user_id)

        assert set(found) == {mine.file_id}

    def test_usage_and_keys(self, owner):
        _create(owner.user_id, f"{owner.user_id}/a.html", size=100)
        _create(owner.user_id, f"{owner.user_id}/b.html", size=50)

        assert FileRepository.get_usage(owner.user_id) == (150, 2)
        assert FileRepository.count_files() == 2
        assert FileRepository.get_all_object_keys() == {f"{owner.user_id}/a.html", f"{owner.user_id}/b.html"}
        assert FileRepository.exists_by_object_key(f"{owner.user_id}/a.html")

    def test_delete_cascades_tags_and_share(self, owner):
        file = _create(owner.user_id, f"{owner.user_id}/gone.html")
        tag = TagRepository.create_tag(owner.user_id, "temp")
        TagRepository.attach(file.file_id, tag.tag_id)
        ShareRepository.create_share("share-1", file.file_id)

        FileRepository.delete_file(file.file_id)

        assert FileRepository.get_by_id(file.file_id) is None
        assert ShareRepository.get_by_share_id("share-1") is None
        assert TagRepository.get_tags_for_files([file.file_id]) == {file.file_id: []}


class TestTagRepository:
    def test_names_are_unique_per_owner(self, owner):
        other = make_user("dave")
        TagRepository.create_tag(owner.user_id, "work")
        TagRepository.create_tag(other.user_id, "work")

        with pytest.raises(sqlite3.IntegrityError):
            TagRepository.create_tag(owner.user_id, "work")

    def test_attach_is_idempotent(self, owner):
        file = _create(owner.user_id, f"{owner.user_id}/a.html")
        tag = TagRepository.create_tag(owner.user_id, "read-later")

        TagRepository.attach(file.file_id, tag.tag_id)
        TagRepository.attach(file.file_id, tag.tag_id)

        assert TagRepository.get_tags_for_file(file.file_id) == ["read-later"]

        TagRepository.detach(file.file_id, tag.tag_id)
        assert TagRepository.get_tags_for_file(file.file_id) == []


class TestShareRepository:
    def test_toggle_and_visits(self, owner):
        file = _create(owner.user_id, f"{owner.user_id}/s.html")
        ShareRepository.create_share("abc", file.file_id)

        ShareRepository.set_enabled(file.file_id, False)
        ShareRepository.increment_visits("abc")
        ShareRepository.increment_visits("abc")

        share = ShareRepository.get_by_file(file.file_id)
        assert share.is_enabled is False
        assert share.visit_count == 2

    def test_one_share_per_file(self, owner):
        file = _create(owner.user_id, f"{owner.user_id}/s.html")
        ShareRepository.create_share("first", file.file_id)

        with pytest.raises(sqlite3.IntegrityError):
            ShareRepository.create_share("second", file.file_id)
