"""Cross-department notices for shared-subject scheduling.

When a department schedules a subject, staff in other departments who teach
a subject of the same name are told the date is now fixed.  Delivery is best
effort: :meth:`SharedSubjectNotifier.notify_shared_scheduling` logs and
swallows every failure so it can never affect a committed schedule.

The notifier is not called inline by the scheduling request.  The request
publishes a :class:`~src.services.schedule_committer.SharedSubjectScheduled`
event to :class:`NotificationDispatcher` after its transaction commits; the
dispatcher's worker task calls the notifier with its own database session.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from datetime import date
from typing import AsyncIterator, Callable

from src.models.notification import Notification
from src.models.staff import Staff
from src.naming import name_key
from src.services.schedule_committer import SharedSubjectScheduled
from src.services.schedule_repository import ScheduleRepository

logger = logging.getLogger(__name__)

RepositoryScope = Callable[[], AbstractAsyncContextManager[ScheduleRepository]]


@asynccontextmanager
async def default_repository_scope() -> AsyncIterator[ScheduleRepository]:
    """Open a worker-owned session and wrap it in a repository."""
    from src.database import session_scope  # local: keeps engine creation lazy for tests

    async with session_scope() as session:
        yield ScheduleRepository(session)


class LoggingSink:
    """Delivery boundary for notices.

    Email or chat delivery plugs in here; the default records the notice in
    the application log.
    """

    async def deliver(self, staff: Staff, notification: Notification) -> None:
        logger.info(
            "Notice for %s <%s>: %s", staff.name, staff.email, notification.message
        )


class SharedSubjectNotifier:
    """Create and deliver shared-subject notices.

    Args:
        repository_scope: Factory returning an async context manager that
            yields a repository bound to a fresh unit of work.
        sink: Delivery boundary; defaults to :class:`LoggingSink`.
    """

    def __init__(
        self,
        repository_scope: RepositoryScope = default_repository_scope,
        sink: LoggingSink | None = None,
    ) -> None:
        self._repository_scope = repository_scope
        self._sink = sink or LoggingSink()

    async def notify_shared_scheduling(
        self,
        subject_name: str,
        exam_date: date,
        acting_department_id: int,
        acting_department_name: str = "",
    ) -> int:
        """Notify other departments' staff teaching *subject_name*.

        Returns:
            Number of notices created.  ``0`` when nobody else teaches the
            subject or when anything failed.
        """
        try:
            async with self._repository_scope() as repository:
                recipients = await repository.staff_teaching_subject(
                    name_key(subject_name), acting_department_id
                )
                notices: list[tuple[Staff, Notification]] = []
                for staff in recipients:
                    notification = Notification(
                        staff_id=staff.id,
                        title=f"{subject_name} exam scheduled",
                        message=(
                            f'"{subject_name}" has been scheduled on '
                            f"{exam_date.isoformat()} by "
                            f"{acting_department_name or 'another department'}. "
                            "As a shared subject, your department's exam is on "
                            "the same date."
                        ),
                        subject_name=subject_name,
                        exam_date=exam_date,
                        acting_department_id=acting_department_id,
                    )
                    await repository.add_notification(notification)
                    notices.append((staff, notification))
        except Exception:
            logger.exception(
                "Shared-subject notification failed for %r on %s", subject_name, exam_date
            )
            return 0

        for staff, notification in notices:
            try:
                await self._sink.deliver(staff, notification)
            except Exception:
                logger.exception("Delivery to staff id=%s failed", staff.id)

        logger.info(
            "Shared-subject notices for %r on %s: %d sent",
            subject_name,
            exam_date,
            len(notices),
        )
        return len(notices)

    async def handle(self, event: SharedSubjectScheduled) -> int:
        return await self.notify_shared_scheduling(
            event.subject_name,
            event.exam_date,
            event.acting_department_id,
            event.acting_department_name,
        )


class NotificationDispatcher:
    """In-process queue that delivers scheduling events off the request path.

    Args:
        notifier: Consumer invoked once per event.
        maxsize: Queue bound; events beyond it are dropped with a warning.
    """

    def __init__(self, notifier: SharedSubjectNotifier, maxsize: int = 1000) -> None:
        self._notifier = notifier
        self._queue: asyncio.Queue[SharedSubjectScheduled] = asyncio.Queue(maxsize=maxsize)
        self._worker: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    def start(self) -> None:
        """Start the worker task on the running event loop."""
        if self.running:
            return
        self._worker = asyncio.create_task(self._run(), name="notification-dispatcher")
        logger.info("Notification dispatcher started")

    async def stop(self) -> None:
        """Cancel the worker.  Undelivered events are discarded."""
        if self._worker is None:
            return
        self._worker.cancel()
        try:
            await self._worker
        except asyncio.CancelledError:
            pass
        self._worker = None
        pending = self._queue.qsize()
        if pending:
            logger.warning("Notification dispatcher stopped with %d pending event(s)", pending)
        else:
            logger.info("Notification dispatcher stopped")

    def publish(self, event: SharedSubjectScheduled) -> bool:
        """Queue *event* for delivery.  Never raises.

        Returns:
            ``True`` if the event was queued.
        """
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            logger.warning(
                "Notification queue full; dropping notice for %r on %s",
                event.subject_name,
                event.exam_date,
            )
            return False
        return True

    async def join(self) -> None:
        """Wait until every queued event has been handled."""
        await self._queue.join()

    async def _run(self) -> None:
        while True:
            event = await self._queue.get()
            try:
                await self._notifier.handle(event)
            except Exception:
                logger.exception("Notification worker failed on %r", event)
            finally:
                self._queue.task_done()
