from __future__ import annotations

import logging

from PySide6.QtCore import Signal
from PySide6.QtGui import QKeySequence, QShortcut
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QMessageBox,
    QPushButton,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from quicktask.bootstrap import AppContext
from quicktask.domain.entities import TaskEntity
from quicktask.domain.enums import TaskStatus
from quicktask.domain.errors import AuthError, QuickTaskError
from quicktask.services import routes
from quicktask.services.task_store import TaskStoreState

from .dialogs import TaskDialog, confirm_delete
from .views import DashboardView, LoginView, TasksView
from .worker import run_in_background

logger = logging.getLogger(__name__)


class MainWindow(QWidget):
    state_changed = Signal(object)

    def __init__(self, context: AppContext):
        super().__init__()
        self.setWindowTitle("QuickTask")
        self.resize(1100, 720)

        self.context = context
        self.store = context.store
        self.auth = context.auth
        self.current_path = routes.HOME
        self._pending_redirect: str | None = None

        self.login_view = LoginView()
        self.dashboard_view = DashboardView()
        self.tasks_view = TasksView()

        self.stack = QStackedWidget()
        self.stack.addWidget(self.login_view)
        self.stack.addWidget(self.dashboard_view)
        self.stack.addWidget(self.tasks_view)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(12, 12, 12, 12)
        layout.addWidget(self._build_header())
        layout.addWidget(self.error_label)
        layout.addWidget(self.stack, 1)

        self._connect_views()
        self.state_changed.connect(self.render)
        self._unsubscribe = self.store.subscribe(self.state_changed.emit)

        QShortcut(QKeySequence("Ctrl+N"), self, self.new_task)

        self.navigate(routes.HOME)

    def _build_header(self) -> QWidget:
        header = QWidget()
        header.setObjectName("Header")
        layout = QHBoxLayout(header)
        layout.setContentsMargins(0, 0, 0, 0)

        brand = QLabel("QuickTask")
        brand.setProperty("class", "panel-title")

        self.dashboard_button = QPushButton("Dashboard")
        self.dashboard_button.setProperty("variant", "ghost")
        self.dashboard_button.clicked.connect(lambda: self.navigate(routes.DASHBOARD))
        self.tasks_button = QPushButton("Tasks")
        self.tasks_button.setProperty("variant", "ghost")
        self.tasks_button.clicked.connect(lambda: self.navigate(routes.TASKS))

        self.user_label = QLabel("")
        self.sign_out_button = QPushButton("Sign out")
        self.sign_out_button.setProperty("variant", "secondary")
        self.sign_out_button.clicked.connect(self.sign_out)

        layout.addWidget(brand)
        layout.addWidget(self.dashboard_button)
        layout.addWidget(self.tasks_button)
        layout.addStretch()
        layout.addWidget(self.user_label)
        layout.addWidget(self.sign_out_button)

        self.error_label = QLabel("")
        self.error_label.setProperty("class", "error")
        self.error_label.setWordWrap(True)
        self.error_label.hide()
        return header

    def _connect_views(self) -> None:
        self.login_view.sign_in_requested.connect(self.sign_in)
        self.login_view.sign_up_requested.connect(self.sign_up)

        self.dashboard_view.new_task_requested.connect(self.new_task)
        self.dashboard_view.view_all_requested.connect(lambda: self.navigate(routes.TASKS))

        self.tasks_view.status_selected.connect(self.on_status_selected)
        self.tasks_view.search_changed.connect(self.store.set_search_query)
        self.tasks_view.new_task_requested.connect(self.new_task)
        self.tasks_view.edit_requested.connect(self.edit_task)
        self.tasks_view.toggle_complete_requested.connect(self.toggle_complete)
        self.tasks_view.delete_requested.connect(self.delete_task)
        self.tasks_view.pagination.page_changed.connect(self.on_page_changed)
        self.tasks_view.pagination.limit_changed.connect(self.on_limit_changed)

    # Navigation

    def navigate(self, path: str) -> None:
        decision = routes.resolve_route(path, self.auth.has_token())
        if decision.redirect_to:
            self._pending_redirect = decision.redirect_to
        self.current_path = decision.path

        signed_in = decision.path not in (routes.HOME, routes.LOGIN, routes.REGISTER)
        self.dashboard_button.setVisible(signed_in)
        self.tasks_button.setVisible(signed_in)
        self.sign_out_button.setVisible(signed_in)
        if not signed_in:
            self.user_label.clear()
            self.login_view.reset()
            self.stack.setCurrentWidget(self.login_view)
            return

        self.stack.setCurrentWidget(
            self.tasks_view if decision.path.startswith(routes.TASKS) else self.dashboard_view
        )
        self.refresh()

    def refresh(self) -> None:
        if not self.user_label.text():
            run_in_background(self.auth.current_user, on_done=self._show_user)
        run_in_background(self.store.fetch_tasks, on_done=self._after_fetch)

    def _show_user(self, user) -> None:
        if user is not None:
            self.user_label.setText(user.email)

    def _after_fetch(self, _result=None) -> None:
        if not self.auth.has_token():
            self.navigate(self.current_path)

    # Auth

    def sign_in(self, email: str, password: str) -> None:
        self.login_view.set_busy(True)
        run_in_background(self.auth.sign_in, email, password, on_done=self._on_signed_in, on_error=self._on_auth_error)

    def sign_up(self, email: str, password: str) -> None:
        self.login_view.set_busy(True)
        run_in_background(self.auth.sign_up, email, password, on_done=self._on_signed_in, on_error=self._on_auth_error)

    def _on_signed_in(self, user) -> None:
        logger.info("Signed in as %s", user.email)
        self.user_label.setText(user.email)
        target = self._pending_redirect or routes.DASHBOARD
        self._pending_redirect = None
        self.navigate(target)

    def _on_auth_error(self, exc: QuickTaskError) -> None:
        self.login_view.set_busy(False)
        if isinstance(exc, AuthError):
            self.login_view.show_message(str(exc))
        else:
            logger.error("Authentication request failed: %s", exc)
            self.login_view.show_message("Something went wrong. Please try again.")

    def sign_out(self) -> None:
        try:
            self.auth.sign_out()
        except AuthError as exc:
            QMessageBox.warning(self, "Sign out", str(exc))
            return
        self.store.reset()
        self.navigate(routes.LOGIN)

    # Task actions

    def on_status_selected(self, status: str) -> None:
        run_in_background(self.store.fetch_tasks, page=1, status=status)

    def on_page_changed(self, page: int) -> None:
        run_in_background(self.store.set_page, page)

    def on_limit_changed(self, limit: int) -> None:
        run_in_background(self.store.set_limit, limit)

    def new_task(self) -> None:
        if self.stack.currentWidget() is self.login_view:
            return
        dialog = TaskDialog(parent=self)
        if dialog.exec():
            run_in_background(self.store.create_task, dialog.draft(), on_error=self._on_task_error)

    def edit_task(self, task: TaskEntity) -> None:
        dialog = TaskDialog(task, parent=self)
        if dialog.exec():
            run_in_background(self.store.update_task, task.id, dialog.updates(), on_error=self._on_task_error)

    def toggle_complete(self, task: TaskEntity) -> None:
        status = TaskStatus.TODO if task.status == TaskStatus.COMPLETED else TaskStatus.COMPLETED
        run_in_background(self.store.update_task, task.id, {"status": status}, on_error=self._on_task_error)

    def delete_task(self, task: TaskEntity) -> None:
        if not confirm_delete(self, task):
            return
        run_in_background(self.store.delete_task, task.id, on_error=self._on_task_error)

    def _on_task_error(self, exc: QuickTaskError) -> None:
        QMessageBox.warning(self, "QuickTask", str(exc))
        if not self.auth.has_token():
            self.navigate(self.current_path)

    # Rendering

    def render(self, state: TaskStoreState) -> None:
        if state.error:
            self.error_label.setText(state.error)
            self.error_label.show()
        else:
            self.error_label.hide()

        if self.stack.currentWidget() is self.dashboard_view:
            self.dashboard_view.render(self.store.get_task_counts(), self.store.recent_tasks(), state.is_loading)
        elif self.stack.currentWidget() is self.tasks_view:
            self.tasks_view.render(state)

    def closeEvent(self, event) -> None:  # type: ignore[override]
        self._unsubscribe()
        super().closeEvent(event)
