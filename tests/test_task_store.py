# tests/test_task_store.py

from __future__ import annotations

import threading
from datetime import date, timedelta

import pytest

from todo_companion.core.errors import TaskNotFoundError, ValidationError
from todo_companion.tasks.task_models import Custom, Daily, NoRepeat, StoreSnapshot, Task, Weekly
from todo_companion.tasks.task_persistence import JsonTaskFile
from todo_companion.tasks.task_store import TaskStore

from .fakes import MemoryPersistence

DAY = date(2024, 3, 1)


def test_add_task_defaults_and_listing(store: TaskStore) -> None:
    task = store.add_task("u1", DAY, "Buy milk")
    assert task.text == "Buy milk"
    assert task.date == DAY
    assert task.recurrence == NoRepeat()

    assert [t.id for t in store.list_due("u1", DAY)] == [task.id]
    assert store.list_due("u1", DAY + timedelta(days=1)) == []
    assert store.list_all("u1") == [task]


def test_add_rejects_blank_text(store: TaskStore) -> None:
    with pytest.raises(ValidationError):
        store.add_task("u1", DAY, "   ")
    assert store.count_tasks() == 0


def test_ids_unique_and_increasing_across_users(store: TaskStore) -> None:
    ids = [store.add_task(f"u{i % 3}", DAY, f"task {i}").id for i in range(12)]
    assert len(set(ids)) == 12
    assert ids == sorted(ids)
    assert all(b > a for a, b in zip(ids, ids[1:]))


def test_ids_not_reused_after_delete(store: TaskStore) -> None:
    first = store.add_task("u1", DAY, "a")
    store.delete_task("u1", first.id)
    second = store.add_task("u1", DAY, "b")
    assert second.id > first.id


def test_unknown_user_lists_are_empty(store: TaskStore) -> None:
    assert store.list_all("nobody") == []
    assert store.list_due("nobody", DAY) == []


def test_delete_removes_one_and_keeps_order(store: TaskStore) -> None:
    ids = [store.add_task("u1", DAY, t).id for t in ("a", "b", "c", "d")]
    removed = store.delete_task("u1", ids[1])
    assert removed.text == "b"
    assert [t.id for t in store.list_all("u1")] == [ids[0], ids[2], ids[3]]


def test_delete_unknown_id_or_user_signals_not_found(store: TaskStore) -> None:
    store.add_task("u1", DAY, "a")
    before = store.list_all("u1")

    with pytest.raises(TaskNotFoundError):
        store.delete_task("u1", 999)
    with pytest.raises(TaskNotFoundError):
        store.delete_task("ghost", before[0].id)

    assert store.list_all("u1") == before


def test_lookups_are_scoped_to_the_owner(store: TaskStore) -> None:
    mine = store.add_task("alice", DAY, "mine")
    with pytest.raises(TaskNotFoundError):
        store.delete_task("bob", mine.id)
    with pytest.raises(TaskNotFoundError):
        store.set_recurrence("bob", mine.id, Daily())
    assert store.get_task("alice", mine.id).recurrence == NoRepeat()


def test_clear_tasks(store: TaskStore) -> None:
    store.add_task("u1", DAY, "a")
    store.add_task("u1", DAY, "b")
    other = store.add_task("u2", DAY, "keep")

    assert store.clear_tasks("u1") == 2
    assert store.list_all("u1") == []
    assert store.list_all("u2") == [other]
    assert store.clear_tasks("never-seen") == 0


def test_set_recurrence_any_to_any(store: TaskStore) -> None:
    task = store.add_task("u1", DAY, "water plants")

    for rule in (Daily(), Weekly(("monday",)), Custom(4), NoRepeat(), Custom(2)):
        updated = store.set_recurrence("u1", task.id, rule)
        assert updated.recurrence == rule
        assert store.get_task("u1", task.id).recurrence == rule


def test_list_due_mixes_exact_date_and_recurring(store: TaskStore) -> None:
    once = store.add_task("u1", DAY, "once")
    daily = store.add_task("u1", DAY - timedelta(days=10), "daily")
    store.set_recurrence("u1", daily.id, Daily())
    every3 = store.add_task("u1", DAY, "every 3")
    store.set_recurrence("u1", every3.id, Custom(3))
    later = store.add_task("u1", DAY + timedelta(days=1), "tomorrow")

    assert [t.id for t in store.list_due("u1", DAY)] == [once.id, daily.id, every3.id]
    assert [t.id for t in store.list_due("u1", DAY + timedelta(days=1))] == [daily.id, later.id]
    assert [t.id for t in store.list_due("u1", DAY + timedelta(days=3))] == [daily.id, every3.id]


def test_returned_tasks_do_not_alias_store_state(store: TaskStore) -> None:
    task = store.add_task("u1", DAY, "original")
    task.text = "mutated"
    store.list_all("u1")[0].text = "mutated too"
    assert store.get_task("u1", task.id).text == "original"


def test_every_mutation_persists() -> None:
    persistence = MemoryPersistence()
    store = TaskStore(persistence)

    t = store.add_task("u1", DAY, "a")
    store.set_recurrence("u1", t.id, Daily())
    store.delete_task("u1", t.id)
    store.clear_tasks("u1")
    assert persistence.save_calls == 4

    store.list_all("u1")
    store.list_due("u1", DAY)
    assert persistence.save_calls == 4


def test_failed_save_keeps_in_memory_change() -> None:
    persistence = MemoryPersistence()
    persistence.fail_save = True
    store = TaskStore(persistence)

    task = store.add_task("u1", DAY, "still here")
    assert store.list_all("u1") == [task]
    assert persistence.saved is None


def test_failed_load_starts_empty() -> None:
    persistence = MemoryPersistence(
        StoreSnapshot(users={"u1": [Task(id=1, text="x", date=DAY)]}, next_id=2)
    )
    persistence.fail_load = True
    store = TaskStore(persistence)
    assert store.count_tasks() == 0
    assert store.add_task("u1", DAY, "fresh").id == 1


def test_reload_reproduces_store(settings) -> None:
    first = TaskStore(JsonTaskFile(settings.todos_path))
    a = first.add_task("alice", DAY, "none")
    b = first.add_task("alice", DAY, "daily")
    c = first.add_task("bob", DAY - timedelta(days=2), "weekly")
    d = first.add_task("bob", DAY, "custom")
    first.set_recurrence("alice", b.id, Daily())
    first.set_recurrence("bob", c.id, Weekly(("tuesday", "saturday")))
    first.set_recurrence("bob", d.id, Custom(9))
    first.delete_task("alice", a.id)

    second = TaskStore(JsonTaskFile(settings.todos_path))
    assert second.snapshot() == first.snapshot()
    # Counter survives the restart too: deleted ids are never handed out again.
    assert second.add_task("alice", DAY, "next").id == d.id + 1


def test_concurrent_adds_get_distinct_ids() -> None:
    store = TaskStore(MemoryPersistence())

    def worker(uid: str) -> None:
        for i in range(50):
            store.add_task(uid, DAY, f"{uid}-{i}")

    threads = [threading.Thread(target=worker, args=(f"u{n}",)) for n in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    ids = [t.id for uid in store.users() for t in store.list_all(uid)]
    assert len(ids) == 200
    assert len(set(ids)) == 200
