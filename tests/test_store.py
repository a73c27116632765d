"""Tests for the persistence store and its exclusive section."""

import pytest

from studio.core.exceptions import NotFoundError
from studio.models.gallery import Gallery
from studio.models.message import ROLE_USER, Message


def test_exclusive_commits(store):
    with store.exclusive() as tx:
        gallery = tx.create_gallery(Gallery(origin_image="a", effect_image="a"))

    with store.exclusive() as tx:
        assert tx.get_gallery(gallery.id) is not None


def test_exclusive_rolls_back_on_error(store):
    with pytest.raises(RuntimeError):
        with store.exclusive() as tx:
            tx.create_gallery(Gallery(origin_image="a", effect_image="a"))
            raise RuntimeError("boom")

    assert store.locked is False
    with store.exclusive() as tx:
        assert tx.list_galleries() == []


def test_locked_only_inside_section(store):
    assert store.locked is False
    with store.exclusive():
        assert store.locked is True
    assert store.locked is False


def test_section_not_reentrant(store):
    store.lock_timeout = 0.05
    with store.exclusive():
        with pytest.raises(TimeoutError):
            with store.exclusive():
                pass


def test_update_missing_gallery(store):
    with store.exclusive() as tx:
        with pytest.raises(NotFoundError):
            tx.update_gallery(Gallery(id="missing", origin_image="a", effect_image="a"))


def test_delete_galleries_cascades_messages(store):
    with store.exclusive() as tx:
        gallery = tx.create_gallery(Gallery(origin_image="a", effect_image="a"))
        tx.create_message(Message(gallery_id=gallery.id, role=ROLE_USER, content="hi"))

    with store.exclusive() as tx:
        assert tx.delete_galleries([gallery.id]) == 1
        assert tx.delete_galleries([]) == 0

    with store.exclusive() as tx:
        assert tx.list_messages(gallery.id) == []


def test_default_setting_created_once(store):
    with store.exclusive() as tx:
        first = tx.get_or_create_default_setting()
    with store.exclusive() as tx:
        second = tx.get_or_create_default_setting()

    assert first.id == second.id
    assert first.api_key == ""
