from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from quicktask.domain.entities import TaskDraft
from quicktask.domain.enums import TaskPriority, TaskStatus
from quicktask.domain.errors import NotAuthenticatedError, TaskStoreError, TaskValidationError
from quicktask.domain.filters import ALL
from quicktask.services.task_store import (
    CREATE_FAILED,
    LOAD_FAILED,
    SIGN_IN_TO_CREATE,
    SIGN_IN_TO_VIEW,
    TaskStore,
)

from .fakes import ALICE, BOB, FakeRepo, make_task

NOW = datetime(2026, 3, 10, 12, 0)


def _page_of_five() -> list:
    statuses = [
        TaskStatus.COMPLETED,
        TaskStatus.TODO,
        TaskStatus.COMPLETED,
        TaskStatus.IN_PROGRESS,
        TaskStatus.TODO,
    ]
    return [
        make_task(f"t{i}", title=f"Task {i}", status=status, created_at=NOW - timedelta(hours=i))
        for i, status in enumerate(statuses)
    ]


def _store(repo: FakeRepo, user=ALICE, **kwargs) -> TaskStore:
    return TaskStore(repo, lambda: user, clock=lambda: NOW, **kwargs)


def test_fetch_without_identity_sets_error_and_clears_tasks() -> None:
    repo = FakeRepo(_page_of_five())
    store = _store(repo, user=None)

    store.fetch_tasks()

    assert store.state.error == SIGN_IN_TO_VIEW
    assert store.state.tasks == ()
    assert store.state.total_count == 0
    assert store.state.is_loading is False
    assert repo.list_calls == []


def test_fetch_orders_newest_first_and_counts_all_pages() -> None:
    repo = FakeRepo(_page_of_five())
    store = _store(repo, limit=2)

    store.fetch_tasks()

    assert [t.id for t in store.state.tasks] == ["t0", "t1"]
    assert store.state.total_count == 5
    assert store.state.total_pages == 3
    assert store.state.filtered_tasks == store.state.tasks


def test_fetch_with_status_is_scoped_to_owner() -> None:
    tasks = _page_of_five() + [make_task("b1", status=TaskStatus.COMPLETED, user_id=BOB.id)]
    store = _store(FakeRepo(tasks))

    store.fetch_tasks(status=TaskStatus.COMPLETED)

    assert {t.id for t in store.state.tasks} == {"t0", "t2"}
    assert store.state.total_count == 2
    assert store.state.status_filter == TaskStatus.COMPLETED


def test_fetch_failure_keeps_previous_page() -> None:
    repo = FakeRepo(_page_of_five())
    store = _store(repo)
    store.fetch_tasks()
    previous = store.state.tasks

    repo.fail = True
    store.fetch_tasks(page=2)

    assert store.state.error == LOAD_FAILED
    assert store.state.tasks == previous
    assert store.state.page == 1
    assert store.state.is_loading is False


def test_status_filter_is_local_to_current_page() -> None:
    repo = FakeRepo(_page_of_five())
    store = _store(repo)
    store.fetch_tasks()
    fetches = len(repo.list_calls)

    store.set_status_filter(TaskStatus.COMPLETED)

    assert [t.id for t in store.state.filtered_tasks] == ["t0", "t2"]
    assert len(store.state.tasks) == 5
    assert len(repo.list_calls) == fetches


def test_search_matches_title_and_description_case_insensitively() -> None:
    tasks = [
        make_task("a", title="Buy milk"),
        make_task("b", title="Call mom", description="About the MILK order"),
        make_task("c", title="Write report"),
    ]
    store = _store(FakeRepo(tasks))
    store.fetch_tasks()

    store.set_search_query("milk")

    assert {t.id for t in store.state.filtered_tasks} == {"a", "b"}

    store.set_search_query("")
    assert len(store.state.filtered_tasks) == 3


def test_search_survives_refetch() -> None:
    store = _store(FakeRepo([make_task("a", title="Buy milk"), make_task("b", title="Other")]))
    store.set_search_query("milk")

    store.fetch_tasks()

    assert [t.id for t in store.state.filtered_tasks] == ["a"]


def test_set_limit_resets_page_and_fetches_once() -> None:
    repo = FakeRepo(_page_of_five())
    store = _store(repo)
    store.set_page(2)
    repo.list_calls.clear()

    store.set_limit(5)

    assert store.state.page == 1
    assert store.state.limit == 5
    assert len(repo.list_calls) == 1
    assert repo.list_calls[0].limit == 5
    assert repo.list_calls[0].page == 1


def test_set_limit_rejects_non_positive_size_and_keeps_state() -> None:
    repo = FakeRepo(_page_of_five())
    store = _store(repo, limit=2)

    with pytest.raises(TaskValidationError):
        store.set_limit(0)

    assert store.state.limit == 2
    assert repo.list_calls == []
    store.fetch_tasks()
    assert repo.list_calls[-1].limit == 2


def test_set_page_fetches_requested_page() -> None:
    repo = FakeRepo(_page_of_five())
    store = _store(repo, limit=2)

    store.set_page(3)

    assert store.state.page == 3
    assert [t.id for t in store.state.tasks] == ["t4"]
    assert repo.list_calls[-1].offset == 4


def test_create_stamps_owner_and_equal_timestamps() -> None:
    repo = FakeRepo()
    store = _store(repo)

    task = store.create_task(TaskDraft(title="  Write tests  ", priority=TaskPriority.HIGH))

    assert task.title == "Write tests"
    assert task.user_id == ALICE.id
    assert task.created_at == task.updated_at == NOW
    assert store.state.tasks[0] == task
    assert store.state.total_count == 1


def test_create_prepends_and_reapplies_filter() -> None:
    repo = FakeRepo(_page_of_five())
    store = _store(repo)
    store.fetch_tasks()
    store.set_status_filter(TaskStatus.IN_PROGRESS)

    task = store.create_task(TaskDraft(title="New", status=TaskStatus.IN_PROGRESS))

    assert store.state.tasks[0] == task
    assert store.state.total_count == 6
    assert [t.id for t in store.state.filtered_tasks] == [task.id, "t3"]


def test_create_without_identity_raises() -> None:
    repo = FakeRepo()
    store = _store(repo, user=None)

    with pytest.raises(NotAuthenticatedError):
        store.create_task(TaskDraft(title="Nope"))

    assert store.state.error == SIGN_IN_TO_CREATE
    assert repo.tasks == []


def test_create_rejects_blank_title() -> None:
    repo = FakeRepo()
    store = _store(repo)

    with pytest.raises(TaskValidationError):
        store.create_task(TaskDraft(title="   "))

    assert repo.tasks == []
    assert store.state.is_loading is False


def test_create_failure_sets_generic_error() -> None:
    repo = FakeRepo()
    repo.fail = True
    store = _store(repo)

    with pytest.raises(TaskStoreError) as excinfo:
        store.create_task(TaskDraft(title="Task"))

    assert str(excinfo.value) == CREATE_FAILED
    assert excinfo.value.__cause__ is None
    assert store.state.error == CREATE_FAILED
    assert store.state.tasks == ()


def test_update_replaces_local_row_and_selection() -> None:
    repo = FakeRepo(_page_of_five())
    store = _store(repo)
    store.fetch_tasks()
    store.select_task(store.state.tasks[1])

    task = store.update_task("t1", {"status": TaskStatus.COMPLETED, "title": "Done now"})

    assert task is not None
    assert task.updated_at == NOW
    assert store.state.tasks[1] == task
    assert store.state.selected_task == task


def test_update_rejects_immutable_fields() -> None:
    store = _store(FakeRepo(_page_of_five()))

    with pytest.raises(TaskValidationError):
        store.update_task("t1", {"user_id": BOB.id})


def test_update_of_other_owners_task_changes_nothing() -> None:
    foreign = make_task("b1", user_id=BOB.id)
    repo = FakeRepo(_page_of_five() + [foreign])
    store = _store(repo)
    store.fetch_tasks()
    before = store.state

    result = store.update_task("b1", {"title": "Hijacked"})

    assert result is None
    assert store.state.tasks == before.tasks
    assert store.state.total_count == before.total_count
    assert store.state.error is None
    assert next(t for t in repo.tasks if t.id == "b1") == foreign


def test_delete_removes_row_clears_selection_and_decrements() -> None:
    repo = FakeRepo(_page_of_five())
    store = _store(repo)
    store.fetch_tasks()
    store.select_task(store.state.tasks[0])

    assert store.delete_task("t0") is True

    assert "t0" not in {t.id for t in store.state.tasks}
    assert store.state.selected_task is None
    assert store.state.total_count == 4


def test_delete_count_never_goes_negative() -> None:
    repo = FakeRepo([make_task("a")])
    store = _store(repo)

    store.delete_task("a")

    assert store.state.total_count == 0


def test_delete_of_other_owners_task_changes_nothing() -> None:
    repo = FakeRepo(_page_of_five() + [make_task("b1", user_id=BOB.id)])
    store = _store(repo)
    store.fetch_tasks()
    before = store.state

    assert store.delete_task("b1") is False

    assert store.state.tasks == before.tasks
    assert store.state.total_count == before.total_count
    assert any(t.id == "b1" for t in repo.tasks)


def test_task_counts_cover_every_status() -> None:
    store = _store(FakeRepo([make_task("a", status=TaskStatus.COMPLETED)]))
    store.fetch_tasks()

    assert store.get_task_counts() == {
        TaskStatus.TODO: 0,
        TaskStatus.IN_PROGRESS: 0,
        TaskStatus.COMPLETED: 1,
    }
    assert [t.id for t in store.get_tasks_by_status(TaskStatus.COMPLETED)] == ["a"]


def test_listeners_see_every_change_until_unsubscribed() -> None:
    store = _store(FakeRepo(_page_of_five()))
    seen = []
    unsubscribe = store.subscribe(seen.append)

    store.fetch_tasks()
    assert seen[0].is_loading is True
    assert seen[-1].is_loading is False
    assert seen[-1] is store.state

    unsubscribe()
    count = len(seen)
    store.set_search_query("x")
    assert len(seen) == count


def test_reset_returns_to_initial_state() -> None:
    store = _store(FakeRepo(_page_of_five()), limit=20)
    store.fetch_tasks(status=TaskStatus.TODO)

    store.reset()

    assert store.state.tasks == ()
    assert store.state.limit == 20
    assert store.state.status_filter == ALL


def test_stores_are_independent() -> None:
    repo = FakeRepo(_page_of_five())
    first = _store(repo)
    second = _store(repo, user=BOB)

    first.fetch_tasks()
    second.fetch_tasks()

    assert len(first.state.tasks) == 5
    assert second.state.tasks == ()
