"""Tests for the page store."""

from __future__ import annotations

from typing import List

from noteflow.editor.pages import Page, PageStore


def test_store_starts_with_one_blank_page() -> None:
    store = PageStore()

    assert len(store) == 1
    assert store.current == Page(id=1, content="", color="#FFFFFF", title="Note 1")
    assert store.current_number == 1


def test_add_page_assigns_sequential_ids_and_notifies() -> None:
    store = PageStore(default_color="#E3F2FD")
    seen: List[Page] = []
    store.add_listener(seen.append)

    second = store.add_page()
    third = store.add_page()

    assert (second.id, third.id) == (2, 3)
    assert third.title == "Note 3"
    assert third.color == "#E3F2FD"
    assert store.current is third
    assert seen == [second, third]


def test_deleting_the_only_page_is_rejected() -> None:
    store = PageStore()
    seen: List[Page] = []
    store.add_listener(seen.append)

    assert store.delete_page(0) is False
    assert store.page_count() == 1
    assert seen == []


def test_deleting_current_page_moves_to_neighbour() -> None:
    store = PageStore()
    store.add_page()
    store.add_page()
    seen: List[Page] = []
    store.add_listener(seen.append)

    assert store.delete_page(2) is True

    assert [page.id for page in store] == [1, 2]
    assert store.current.id == 2
    assert seen == [store.current]


def test_deleting_earlier_page_keeps_current_page() -> None:
    store = PageStore()
    store.add_page()
    store.add_page()

    assert store.delete_page(0) is True

    assert store.current.id == 3
    assert store.current_index == 1
    assert store.add_page().id == 4


def test_delete_out_of_range_is_rejected() -> None:
    store = PageStore()
    store.add_page()

    assert store.delete_page(5) is False
    assert store.delete_page(-1) is False
    assert len(store) == 2


def test_switch_to_validates_index() -> None:
    store = PageStore()
    store.add_page()
    seen: List[Page] = []
    store.add_listener(seen.append)

    assert store.switch_to(0) is True
    assert store.switch_to(2) is False
    assert store.switch_to(-1) is False
    assert store.current.id == 1
    assert [page.id for page in seen] == [1]


def test_next_and_previous_stop_at_the_ends() -> None:
    store = PageStore()
    store.add_page()

    assert store.next_page() is False
    assert store.previous_page() is True
    assert store.previous_page() is False
    assert store.current_index == 0


def test_update_current_records_content_and_color() -> None:
    store = PageStore()

    page = store.update_current(content="<b>hi</b>", color="#FFF2CC")

    assert page is store.current
    assert (page.content, page.color) == ("<b>hi</b>", "#FFF2CC")
