"""View-state coordinator - composes tasks and calendar into projections."""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, TypeVar

from .bridge import CalendarBridge
from .core import views
from .core.calendar import CalendarEvent
from .core.tasks import Category, Priority, Task, sort_tasks
from .core.views import DensityLevel, ViewMode
from .errors import NebulaError
from .observers import Observable
from .ports.calendar_provider import AuthorizationStatus
from .store import TaskStore

logger = logging.getLogger(__name__)

R = TypeVar("R")


@dataclass(frozen=True)
class Snapshot:
    """Everything the presentation layer needs after a change."""

    tasks: tuple[Task, ...]
    events: tuple[CalendarEvent, ...]
    view_mode: ViewMode
    sidebar_collapsed: bool
    selected_task_id: str | None
    error_message: str | None
    calendar_status: AuthorizationStatus
    calendar_loading: bool
    calendar_error: str | None


class Coordinator(Observable[Snapshot]):
    """
    Owns application state around the task store and calendar bridge.

    Mutations never raise domain errors: a failure is recorded in
    error_message and task state is left as it was. A Snapshot is published
    after every call and whenever the calendar bridge changes.
    """

    def __init__(
        self,
        store: TaskStore,
        bridge: CalendarBridge,
        first_weekday: int = views.SUNDAY,
        clock: Callable[[], datetime] = datetime.now,
    ):
        super().__init__()
        self.store = store
        self.bridge = bridge
        self.first_weekday = first_weekday
        self._clock = clock
        self.view_mode = ViewMode.DAILY
        self.sidebar_collapsed = False
        self.selected_task_id: str | None = None
        self.error_message: str | None = None
        self.bridge.subscribe(self._on_calendar_changed)

    @property
    def tasks(self) -> list[Task]:
        return self.store.list()

    def snapshot(self) -> Snapshot:
        return Snapshot(
            tasks=tuple(self.store.list()),
            events=tuple(self.bridge.events),
            view_mode=self.view_mode,
            sidebar_collapsed=self.sidebar_collapsed,
            selected_task_id=self.selected_task_id,
            error_message=self.error_message,
            calendar_status=self.bridge.status,
            calendar_loading=self.bridge.is_loading,
            calendar_error=self.bridge.error_message,
        )

    # Task mutations

    def add_task(
        self,
        title: str,
        description: str = "",
        due_date: datetime | None = None,
        priority: Priority = Priority.LOW,
        category: Category = Category.OTHER,
    ) -> Task | None:
        return self._run(lambda: self.store.create(title, description, due_date, priority, category))

    def update_task(self, task_id: str, **fields) -> Task | None:
        return self._run(lambda: self.store.update(task_id, **fields))

    def toggle_completion(self, task_id: str) -> Task | None:
        return self._run(lambda: self.store.toggle_completion(task_id))

    def delete_task(self, task_id: str) -> bool:
        def _delete() -> bool:
            self.store.delete(task_id)
            if self.selected_task_id == task_id:
                self.selected_task_id = None
            return True

        return bool(self._run(_delete))

    # UI-orthogonal state

    def set_view_mode(self, mode: ViewMode) -> None:
        self.view_mode = mode
        self._publish(self.snapshot())

    def toggle_sidebar(self) -> None:
        self.sidebar_collapsed = not self.sidebar_collapsed
        self._publish(self.snapshot())

    def select_task(self, task_id: str | None) -> Task | None:
        if task_id is None:
            self.selected_task_id = None
            self._publish(self.snapshot())
            return None

        def _select() -> Task:
            task = self.store.get(task_id)
            self.selected_task_id = task.id
            return task

        return self._run(_select)

    def clear_error(self) -> None:
        self.error_message = None
        self._publish(self.snapshot())

    # Calendar

    async def request_calendar_access(self) -> AuthorizationStatus:
        return await self.bridge.request_access()

    async def refresh_calendar(self) -> None:
        await self.bridge.fetch_events()

    def events_for_date(self, day: date | datetime) -> list[CalendarEvent]:
        return self.bridge.events_for_date(day)

    def events_for_week(self, day: date | datetime) -> list[tuple[date, list[CalendarEvent]]]:
        return [
            (d, self.bridge.events_for_date(d))
            for d in views.week_days(day, self.first_weekday)
        ]

    # Derived projections

    def today_tasks(self) -> list[Task]:
        return views.today_tasks(self.store.list(), self._clock())

    def tasks_for_day(self, day: date | datetime) -> list[Task]:
        return views.tasks_for_day(self.store.list(), day)

    def tasks_for_week(self, day: date | datetime) -> list[tuple[date, list[Task]]]:
        return views.tasks_for_week(self.store.list(), day, self.first_weekday)

    def density(self, day: date | datetime) -> float:
        return views.density(self.store.list(), day)

    def density_level(self, day: date | datetime) -> DensityLevel:
        return views.density_level(self.density(day))

    def month_grid(self, year: int, month: int) -> list[date]:
        return views.month_grid(year, month, self.first_weekday)

    def month_density(self, year: int, month: int) -> list[tuple[date, float]]:
        return views.month_density(self.store.list(), year, month, self.first_weekday)

    def sorted_tasks(self) -> list[Task]:
        return sort_tasks(self.store.list())

    def _run(self, action: Callable[[], R]) -> R | None:
        try:
            result = action()
        except NebulaError as e:
            self.error_message = str(e)
            logger.warning(f"Task operation failed: {e}")
            result = None
        else:
            self.error_message = None
        self._publish(self.snapshot())
        return result

    def _on_calendar_changed(self, bridge: CalendarBridge) -> None:
        self._publish(self.snapshot())
