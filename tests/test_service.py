import logging
from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from task_priority.db import SQLiteStorage
from task_priority.schemas import TaskDraft
from task_priority.service import TaskService
from task_priority.storage import InMemoryStorage, TaskStorage


class FakeClock:
    def __init__(self, start: datetime) -> None:
        self.current = start

    def now(self) -> datetime:
        return self.current

    def advance_hours(self, hours: float) -> None:
        self.current = self.current + timedelta(hours=hours)


class ReadOnlyStorage(InMemoryStorage):
    """Loads normally, but every save fails."""

    def set_item(self, key, value):
        raise OSError("read-only")


def create_task_payload(title="Test Task", expire_at=None, estimated_minutes=None, override=None):
    payload = {"title": title, "estimatedMinutes": estimated_minutes, "priorityOverride": override}
    if expire_at is not None:
        payload["expireAt"] = expire_at
    return payload


@pytest.fixture()
def clock():
    return FakeClock(datetime(2026, 3, 10, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture()
def service(clock):
    return TaskService(storage=InMemoryStorage(), clock=clock.now)


def due_in(clock, **delta) -> str:
    return (clock.now() + timedelta(**delta)).isoformat()


class TestSave:
    def test_create_persists_with_computed_priority(self, service):
        saved = service.save_task(create_task_payload(title="Pagar boleto"))
        assert saved["priority"] == "low"
        assert service.storage.load() == [saved]

    def test_accepts_draft_instances(self, service):
        saved = service.save_task(TaskDraft(title="Estudar", estimated_minutes=120))
        assert saved["estimatedMinutes"] == 120
        assert service.get_task(saved["id"]) == saved

    def test_empty_title_rejected_and_nothing_stored(self, service):
        with pytest.raises(ValidationError):
            service.save_task(create_task_payload(title="   "))
        assert service.storage.load() == []

    def test_edit_keeps_id_and_recomputes(self, service, clock):
        saved = service.save_task(create_task_payload(title="Revisar texto"))
        edited = service.save_task(
            create_task_payload(title="Revisar texto urgente", expire_at=due_in(clock, hours=2)),
            task_id=saved["id"],
        )
        assert edited["id"] == saved["id"]
        # keyword +2, due today +3
        assert edited["priority"] == "high"
        assert len(service.storage.load()) == 1

    def test_edit_preserves_completion(self, service):
        saved = service.save_task(create_task_payload(title="Lavar carro"))
        service.toggle_completion(saved["id"])
        edited = service.save_task(create_task_payload(title="Lavar o carro"), task_id=saved["id"])
        assert edited["completed"] is True

    def test_save_failure_is_logged_not_raised(self, clock, caplog):
        service = TaskService(storage=ReadOnlyStorage(), clock=clock.now)
        with caplog.at_level(logging.WARNING):
            saved = service.save_task(create_task_payload(title="Algo"))
        assert saved["title"] == "Algo"
        assert "Task list not persisted" in caplog.text


class TestListing:
    def seed(self, service, clock):
        service.save_task(create_task_payload(title="Comprar pão"))
        service.save_task(create_task_payload(title="Pagar aluguel", expire_at=due_in(clock, days=-1)))
        service.save_task(create_task_payload(title="Estudar", expire_at=due_in(clock, hours=4)))
        service.save_task(create_task_payload(title="Ler livro", override="high"))

    def test_sorted_views(self, service, clock):
        self.seed(service, clock)
        views = service.list_tasks()
        assert [v.title for v in views] == ["Pagar aluguel", "Ler livro", "Estudar", "Comprar pão"]
        assert [v.priority for v in views] == ["high", "high", "medium", "low"]

    def test_filter(self, service, clock):
        self.seed(service, clock)
        assert [v.title for v in service.list_tasks("high")] == ["Pagar aluguel", "Ler livro"]
        assert [v.title for v in service.list_tasks("medium")] == ["Estudar"]
        assert [v.title for v in service.list_tasks("low")] == ["Comprar pão"]

    def test_invalid_filter(self, service):
        with pytest.raises(ValueError):
            service.list_tasks("urgent")

    def test_priority_refreshes_with_time_without_resaving(self, service, clock):
        saved = service.save_task(create_task_payload(title="Relatório", expire_at=due_in(clock, hours=60)))
        assert saved["priority"] == "low"
        assert service.list_tasks()[0].priority == "low"
        clock.advance_hours(40)
        # now 20 hours out, on the next calendar day
        assert service.list_tasks()[0].priority == "medium"
        # stored value is untouched until the next save
        assert service.get_task(saved["id"])["priority"] == "low"

    def test_due_date_across_dst_change_with_local_clock(self, new_york_tz):
        # 2026-03-07 12:00 EST to 2026-03-09 13:30 EDT is 48.5 real hours
        service = TaskService(storage=InMemoryStorage(), clock=lambda: datetime(2026, 3, 7, 12, 0))
        service.save_task(create_task_payload(title="Entrega", expire_at="2026-03-09T13:30:00"))
        [view] = service.list_tasks()
        # keyword +2, due within 48h +2
        assert view.priority == "medium"

    def test_empty_storage(self, service):
        assert service.list_tasks() == []


class TestToggleAndDelete:
    def test_toggle_persists(self, service):
        saved = service.save_task(create_task_payload(title="Correr"))
        tasks = service.toggle_completion(saved["id"])
        assert tasks[0]["completed"] is True
        assert service.get_task(saved["id"])["completed"] is True

    def test_delete_persists(self, service):
        a = service.save_task(create_task_payload(title="A"))
        b = service.save_task(create_task_payload(title="B"))
        remaining = service.delete_task(a["id"])
        assert [t["id"] for t in remaining] == [b["id"]]
        assert service.get_task(a["id"]) is None

    def test_unknown_ids_leave_list_unchanged(self, service):
        service.save_task(create_task_payload(title="A"))
        before = service.storage.load()
        assert service.toggle_completion("missing") == before
        assert service.delete_task("missing") == before


class TestWithSQLite:
    def test_round_trip_through_sqlite(self, tmp_path, clock):
        storage: TaskStorage = SQLiteStorage(str(tmp_path / "tasks.db"))
        service = TaskService(storage=storage, clock=clock.now)
        saved = service.save_task(create_task_payload(title="Entrega final", estimated_minutes=90))
        reopened = TaskService(storage=SQLiteStorage(str(tmp_path / "tasks.db")), clock=clock.now)
        views = reopened.list_tasks()
        assert [v.id for v in views] == [saved["id"]]
        # keyword +2, 90 minutes +1
        assert views[0].priority == "medium"
