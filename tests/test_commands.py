# tests/test_commands.py

from __future__ import annotations

from datetime import date

from todo_companion.cli.commands import CommandRegistry, registry
from todo_companion.tasks.task_models import Custom, Daily, NoRepeat, Weekly

USER = "@alice:example.org"


def _run(state, line: str, user: str = USER) -> str:
    reply = registry.handle(state, line, user)
    assert reply is not None, line
    return reply


def test_command_registry_routes_one_and_two_word_names(state) -> None:
    reg = CommandRegistry()
    seen: list[tuple[str, list[str]]] = []

    def one(state, args, user_id):
        seen.append(("one", args))
        return "one"

    def two(state, args, user_id):
        seen.append(("two", args))
        return "two"

    reg.register("show", one, "one")
    reg.register("show all", two, "two", aliases=["everything"])

    assert reg.handle(state, "show x", "u") == "one"
    assert reg.handle(state, "SHOW ALL y", "u") == "two"
    assert reg.handle(state, "/everything", "u") == "two"
    assert seen == [("one", ["x"]), ("two", ["y"]), ("two", [])]


def test_command_registry_unknown_and_non_command(state) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "hello there", "u") is None
    assert "Unknown command" in (reg.handle(state, "/nope", "u") or "")


def test_add_then_list_scenario(state, today: date) -> None:
    reply = _run(state, "add Buy milk")
    assert "Task added!" in reply
    assert "Buy milk" in reply

    task = state.task_store.list_all(USER)[0]
    assert task.date == today
    assert task.recurrence == NoRepeat()

    listed = _run(state, "list")
    assert f"ID {task.id}: Buy milk" in listed
    assert "Date: 01.03.2024" in listed
    assert "Repeat" not in listed

    state.today = lambda: date(2024, 3, 2)
    assert _run(state, "list") == "No tasks for today"


def test_add_keeps_text_case_and_explicit_date(state) -> None:
    _run(state, "ADD 25.12.2024 Buy Gifts For Mom")
    task = state.task_store.list_all(USER)[0]
    assert task.text == "Buy Gifts For Mom"
    assert task.date == date(2024, 12, 25)


def test_empty_lists(state) -> None:
    assert _run(state, "list") == "Your todo list is empty"
    assert _run(state, "full list") == "Your todo list is empty"
    assert _run(state, "полный список") == "Your todo list is empty"


def test_full_list_shows_everything_with_repeat(state) -> None:
    _run(state, "add 10.01.2024 Old thing")
    _run(state, "add New thing")
    old = state.task_store.list_all(USER)[0]
    _run(state, f"/repeat_custom {old.id} 3")

    reply = _run(state, "full list")
    assert reply.startswith("Your full todo list:")
    assert "Old thing" in reply and "New thing" in reply
    assert "Repeat: every 3 days" in reply


def test_repeat_commands_set_recurrence(state) -> None:
    _run(state, "add Water plants")
    tid = state.task_store.list_all(USER)[0].id

    assert _run(state, f"/repeat_daily {tid}") == "Task is now repeating: daily"
    assert state.task_store.get_task(USER, tid).recurrence == Daily()

    assert _run(state, f"repeat_weekly {tid} Wednesday monday") == (
        "Task is now repeating: on wednesday, monday"
    )
    assert state.task_store.get_task(USER, tid).recurrence == Weekly(("wednesday", "monday"))

    assert _run(state, f"repeat_custom {tid} 5") == "Task is now repeating: every 5 days"
    assert state.task_store.get_task(USER, tid).recurrence == Custom(5)


def test_repeat_custom_zero_is_rejected_before_store(state) -> None:
    _run(state, "add Stretch")
    tid = state.task_store.list_all(USER)[0].id

    reply = _run(state, f"repeat_custom {tid} 0")
    assert "Interval must be a positive number" in reply
    assert state.task_store.get_task(USER, tid).recurrence == NoRepeat()

    # Validation happens even for an id that does not exist.
    assert "positive" in _run(state, "repeat_custom 999 0")


def test_repeat_weekly_rejects_bad_day(state) -> None:
    _run(state, "add Gym")
    tid = state.task_store.list_all(USER)[0].id
    reply = _run(state, f"repeat_weekly {tid} monday caturday")
    assert "Invalid day of week" in reply
    assert state.task_store.get_task(USER, tid).recurrence == NoRepeat()


def test_delete_and_not_found(state) -> None:
    _run(state, "add a")
    _run(state, "add b")
    a, b = state.task_store.list_all(USER)

    assert _run(state, f"delete {a.id}") == "Task deleted"
    assert [t.id for t in state.task_store.list_all(USER)] == [b.id]

    assert _run(state, f"delete {a.id}") == "Task with specified ID not found"
    assert "Invalid task ID" in _run(state, "delete one")
    assert "Usage" in _run(state, "delete")


def test_other_users_tasks_are_not_reachable(state) -> None:
    _run(state, "add private", user="@bob:example.org")
    bob_task = state.task_store.list_all("@bob:example.org")[0]

    assert _run(state, f"delete {bob_task.id}") == "Task with specified ID not found"
    assert _run(state, f"/repeat_daily {bob_task.id}") == "Task with specified ID not found"
    assert _run(state, "full list") == "Your todo list is empty"


def test_clear(state) -> None:
    _run(state, "add a")
    _run(state, "добавить b")
    assert _run(state, "clear") == "All tasks deleted"
    assert state.task_store.list_all(USER) == []
    assert _run(state, "очистить") == "All tasks deleted"


def test_clear_with_arguments_does_nothing(state) -> None:
    _run(state, "add a")
    assert "Usage" in _run(state, "clear everything")
    assert len(state.task_store.list_all(USER)) == 1


def test_help_prefers_help_file(state, settings) -> None:
    generated = _run(state, "help")
    assert generated.startswith("Available commands:")
    assert "repeat_custom" in generated

    settings.help_path.write_text("Custom help\n", "utf-8")
    assert _run(state, "хелп") == "Custom help"


def test_repeat_custom_rejects_underscored_interval(state) -> None:
    _run(state, "add Stretch")
    tid = state.task_store.list_all(USER)[0].id

    assert "positive" in _run(state, f"repeat_custom {tid} 1_0")
    assert state.task_store.get_task(USER, tid).recurrence == NoRepeat()
