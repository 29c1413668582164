from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from audioshelf.errors import InvalidProgress, NotFound
from audioshelf.library import FileRecord, LibraryList, completion_fraction

pytestmark = pytest.mark.library


def _file(file_id: int, position: int, duration: float) -> FileRecord:
    return FileRecord(
        id=file_id,
        book_id=1,
        path=f"/media/{file_id}.mp3",
        name=f"{file_id}.mp3",
        position=position,
        duration=duration,
    )


def test_completion_fraction_counts_previous_files():
    files = [_file(1, 1, 100), _file(2, 2, 50)]

    assert completion_fraction(files, 2, 20) == pytest.approx(0.8)
    assert completion_fraction(files, 1, 50) == pytest.approx(50 / 150)


def test_completion_fraction_without_audio_is_zero():
    assert completion_fraction([], None, 0) == 0.0
    assert completion_fraction([_file(1, 1, 0)], 1, 30) == 0.0


def test_completion_fraction_unknown_file_uses_offset_only():
    files = [_file(1, 1, 100), _file(2, 2, 100)]

    assert completion_fraction(files, 99, 50) == pytest.approx(0.25)


def test_new_entry_defaults_to_first_file(accountant, audio_book, make_user, clock):
    user = make_user()
    book, files = audio_book

    entry = accountant.set_list_and_position(user.id, book.id, LibraryList.LISTENING)

    assert entry.current_file_id == files[0].id
    assert entry.offset_seconds == 0.0
    assert entry.list is LibraryList.LISTENING
    assert entry.created == clock()
    assert entry.modified == clock()


def test_new_entry_for_book_without_files(accountant, catalog, make_user):
    user = make_user()
    book = catalog.add_book("Empty", "Nobody", [])

    entry = accountant.set_list_and_position(user.id, book.id, LibraryList.WANT_TO_LISTEN)

    assert entry.current_file_id is None
    [item] = accountant.read_library(user.id)
    assert item.progress == 0.0


def test_identical_calls_only_advance_modified(accountant, audio_book, make_user, clock):
    user = make_user()
    book, files = audio_book

    first = accountant.set_list_and_position(
        user.id, book.id, LibraryList.LISTENING, file_id=files[1].id, offset_seconds=12
    )
    clock.advance(seconds=30)
    second = accountant.set_list_and_position(
        user.id, book.id, LibraryList.LISTENING, file_id=files[1].id, offset_seconds=12
    )

    assert second.id == first.id
    assert second.current_file_id == first.current_file_id
    assert second.offset_seconds == first.offset_seconds
    assert second.created == first.created
    assert second.modified > first.modified


def test_changing_file_resets_offset(accountant, audio_book, make_user):
    user = make_user()
    book, files = audio_book
    accountant.set_list_and_position(
        user.id, book.id, LibraryList.LISTENING, file_id=files[0].id, offset_seconds=40
    )

    entry = accountant.set_list_and_position(
        user.id, book.id, LibraryList.LISTENING, file_id=files[1].id, offset_seconds=33
    )

    assert entry.current_file_id == files[1].id
    assert entry.offset_seconds == 0.0


def test_same_file_updates_offset(accountant, audio_book, make_user):
    user = make_user()
    book, files = audio_book
    accountant.set_list_and_position(
        user.id, book.id, LibraryList.LISTENING, file_id=files[0].id, offset_seconds=40
    )

    entry = accountant.set_list_and_position(
        user.id, book.id, LibraryList.FINISHED, file_id=files[0].id, offset_seconds=70
    )

    assert entry.offset_seconds == 70.0
    assert entry.list is LibraryList.FINISHED


def test_list_change_without_position_keeps_position(accountant, audio_book, make_user):
    user = make_user()
    book, files = audio_book
    accountant.set_list_and_position(
        user.id, book.id, LibraryList.LISTENING, file_id=files[1].id
    )
    accountant.set_progress(user.id, book.id, files[1].id, 25)

    entry = accountant.set_list_and_position(user.id, book.id, LibraryList.ABANDONED)

    assert entry.list is LibraryList.ABANDONED
    assert entry.current_file_id == files[1].id
    assert entry.offset_seconds == 25.0


def test_unknown_book_or_foreign_file_is_not_found(accountant, catalog, audio_book, make_user):
    user = make_user()
    book, files = audio_book
    other = catalog.add_book("Other", "Someone", [])

    with pytest.raises(NotFound):
        accountant.set_list_and_position(user.id, 999, LibraryList.LISTENING)
    with pytest.raises(NotFound):
        accountant.set_list_and_position(
            user.id, other.id, LibraryList.LISTENING, file_id=files[0].id
        )


def test_negative_offset_is_rejected(accountant, audio_book, make_user):
    user = make_user()
    book, files = audio_book

    with pytest.raises(InvalidProgress) as excinfo:
        accountant.set_list_and_position(
            user.id, book.id, LibraryList.LISTENING, offset_seconds=-1
        )
    assert excinfo.value.status_code == 400
    assert excinfo.value.error_code == "server-library--invalid-progress"

    accountant.set_list_and_position(user.id, book.id, LibraryList.LISTENING)
    with pytest.raises(InvalidProgress):
        accountant.set_progress(user.id, book.id, files[0].id, -0.5)


def test_set_progress_overwrites_position(accountant, audio_book, make_user, clock):
    user = make_user()
    book, files = audio_book
    accountant.set_list_and_position(user.id, book.id, LibraryList.LISTENING)

    clock.advance(seconds=5)
    accountant.set_progress(user.id, book.id, files[1].id, 20)
    entry = accountant.get_entry(user.id, book.id)

    assert entry.current_file_id == files[1].id
    assert entry.offset_seconds == 20.0
    assert entry.modified == clock()
    [item] = accountant.read_library(user.id)
    assert item.progress == pytest.approx(0.8)


def test_set_progress_requires_entry(accountant, audio_book, make_user):
    user = make_user()
    book, files = audio_book

    with pytest.raises(NotFound):
        accountant.set_progress(user.id, book.id, files[0].id, 10)


def test_read_library_orders_by_most_recent(accountant, catalog, audio_book, make_user, clock):
    user = make_user()
    other_user = make_user("bob")
    book, _files = audio_book
    second = catalog.add_book("Second", "Author", [])

    accountant.set_list_and_position(user.id, book.id, LibraryList.LISTENING)
    clock.advance(minutes=1)
    accountant.set_list_and_position(user.id, second.id, LibraryList.WANT_TO_LISTEN)
    accountant.set_list_and_position(other_user.id, book.id, LibraryList.FINISHED)

    items = accountant.read_library(user.id)

    assert [item.book_id for item in items] == [second.id, book.id]
    assert items[1].title == "The Long Walk"
    assert items[1].author == "Jane Doe"
    assert items[1].list is LibraryList.LISTENING

    clock.advance(minutes=1)
    accountant.set_list_and_position(user.id, book.id, LibraryList.LISTENING)
    assert [item.book_id for item in accountant.read_library(user.id)] == [book.id, second.id]


def test_get_entry_missing(accountant, make_user):
    user = make_user()

    assert accountant.get_entry(user.id, 1) is None


def test_concurrent_first_upserts_leave_one_entry(accountant, audio_book, make_user):
    user = make_user()
    book, files = audio_book
    barrier = threading.Barrier(2)

    def upsert(list_name):
        barrier.wait(timeout=5)
        return accountant.set_list_and_position(user.id, book.id, list_name)

    with ThreadPoolExecutor(max_workers=2) as executor:
        futures = [
            executor.submit(upsert, LibraryList.LISTENING),
            executor.submit(upsert, LibraryList.WANT_TO_LISTEN),
        ]
        results = [future.result(timeout=30) for future in futures]

    assert results[0].id == results[1].id
    items = accountant.read_library(user.id)
    assert len(items) == 1
    assert items[0].list in (LibraryList.LISTENING, LibraryList.WANT_TO_LISTEN)
    entry = accountant.get_entry(user.id, book.id)
    assert entry.current_file_id == files[0].id
    assert entry.offset_seconds == 0.0
