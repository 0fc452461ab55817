from __future__ import annotations

from PySide6.QtCore import QObject, QRunnable, QThreadPool, Signal

from quicktask.domain.errors import QuickTaskError


class WorkerSignals(QObject):
    finished = Signal(object)
    failed = Signal(object)


class Worker(QRunnable):
    """Runs one store or auth call off the GUI thread.

    Application errors are delivered through ``failed``; anything else is a
    bug and propagates.
    """

    def __init__(self, fn, *args, **kwargs):
        super().__init__()
        self.fn = fn
        self.args = args
        self.kwargs = kwargs
        self.signals = WorkerSignals()

    def run(self) -> None:
        try:
            result = self.fn(*self.args, **self.kwargs)
        except QuickTaskError as exc:
            self.signals.failed.emit(exc)
            return
        self.signals.finished.emit(result)


def run_in_background(fn, *args, on_done=None, on_error=None, **kwargs) -> Worker:
    worker = Worker(fn, *args, **kwargs)
    if on_done:
        worker.signals.finished.connect(on_done)
    if on_error:
        worker.signals.failed.connect(on_error)
    QThreadPool.globalInstance().start(worker)
    return worker
