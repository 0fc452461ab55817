from __future__ import annotations

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import (
    QComboBox,
    QFormLayout,
    QFrame,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from quicktask.domain.entities import TaskEntity
from quicktask.domain.enums import TaskStatus
from quicktask.domain.filters import ALL
from quicktask.services.task_store import TaskStoreState

from .widgets import STATUS_LABELS, PaginationBar, TaskItemWidget

STATUS_FILTERS = [("All", ALL)] + [(label, status.value) for status, label in STATUS_LABELS.items()]

STATUS_DESCRIPTIONS = {
    TaskStatus.TODO: "Tasks waiting to be processed",
    TaskStatus.IN_PROGRESS: "Tasks currently being processed",
    TaskStatus.COMPLETED: "Tasks that have been completed",
}


def _fill_task_list(list_widget: QListWidget, tasks) -> None:
    list_widget.clear()
    for task in tasks:
        item = QListWidgetItem()
        item.setData(Qt.UserRole, task.id)
        widget = TaskItemWidget(task)
        list_widget.addItem(item)
        list_widget.setItemWidget(item, widget)
        item.setSizeHint(widget.sizeHint())


class LoginView(QWidget):
    sign_in_requested = Signal(str, str)
    sign_up_requested = Signal(str, str)

    def __init__(self, parent=None):
        super().__init__(parent)

        title = QLabel("Sign in to QuickTask")
        title.setProperty("class", "panel-title")

        self.email_input = QLineEdit()
        self.email_input.setPlaceholderText("you@example.com")
        self.password_input = QLineEdit()
        self.password_input.setEchoMode(QLineEdit.Password)
        self.password_input.returnPressed.connect(self._sign_in)

        form = QFormLayout()
        form.addRow("Email", self.email_input)
        form.addRow("Password", self.password_input)

        self.sign_in_button = QPushButton("Sign in")
        self.sign_in_button.clicked.connect(self._sign_in)
        self.sign_up_button = QPushButton("Create account")
        self.sign_up_button.setProperty("variant", "secondary")
        self.sign_up_button.clicked.connect(self._sign_up)

        buttons = QHBoxLayout()
        buttons.addWidget(self.sign_in_button)
        buttons.addWidget(self.sign_up_button)

        self.message = QLabel("")
        self.message.setWordWrap(True)
        self.message.setProperty("class", "error")

        card = QFrame()
        card.setObjectName("LoginCard")
        card.setMaximumWidth(420)
        card_layout = QVBoxLayout(card)
        card_layout.addWidget(title)
        card_layout.addLayout(form)
        card_layout.addLayout(buttons)
        card_layout.addWidget(self.message)

        layout = QVBoxLayout(self)
        layout.addStretch()
        layout.addWidget(card, alignment=Qt.AlignHCenter)
        layout.addStretch()

    def set_busy(self, busy: bool) -> None:
        self.sign_in_button.setEnabled(not busy)
        self.sign_up_button.setEnabled(not busy)

    def show_message(self, text: str) -> None:
        self.message.setText(text)

    def reset(self) -> None:
        self.password_input.clear()
        self.message.clear()
        self.set_busy(False)

    def _credentials(self) -> tuple[str, str]:
        return self.email_input.text().strip(), self.password_input.text()

    def _sign_in(self) -> None:
        self.sign_in_requested.emit(*self._credentials())

    def _sign_up(self) -> None:
        self.sign_up_requested.emit(*self._credentials())


class DashboardView(QWidget):
    new_task_requested = Signal()
    view_all_requested = Signal()

    def __init__(self, parent=None):
        super().__init__(parent)

        header = QHBoxLayout()
        title = QLabel("Dashboard")
        title.setProperty("class", "panel-title")
        new_button = QPushButton("New task")
        new_button.clicked.connect(self.new_task_requested)
        header.addWidget(title)
        header.addStretch()
        header.addWidget(new_button)

        cards = QHBoxLayout()
        self.count_labels: dict[TaskStatus, QLabel] = {}
        for status, label in STATUS_LABELS.items():
            card = QFrame()
            card.setObjectName("StatsCard")
            card_layout = QVBoxLayout(card)
            name = QLabel(label)
            name.setProperty("class", "section-title")
            value = QLabel("0")
            value.setProperty("class", "stats-value")
            description = QLabel(STATUS_DESCRIPTIONS[status])
            description.setProperty("class", "task-meta")
            card_layout.addWidget(name)
            card_layout.addWidget(value)
            card_layout.addWidget(description)
            cards.addWidget(card)
            self.count_labels[status] = value

        recent_header = QHBoxLayout()
        recent_title = QLabel("Recent tasks")
        recent_title.setProperty("class", "section-title")
        view_all = QPushButton("View all tasks")
        view_all.setProperty("variant", "secondary")
        view_all.clicked.connect(self.view_all_requested)
        recent_header.addWidget(recent_title)
        recent_header.addStretch()
        recent_header.addWidget(view_all)

        self.recent_list = QListWidget()
        self.recent_list.setObjectName("TaskList")
        self.empty_label = QLabel("No tasks found. Create a new task!")
        self.empty_label.setAlignment(Qt.AlignCenter)

        layout = QVBoxLayout(self)
        layout.addLayout(header)
        layout.addLayout(cards)
        layout.addLayout(recent_header)
        layout.addWidget(self.recent_list)
        layout.addWidget(self.empty_label)

    def render(self, counts: dict[TaskStatus, int], recent: list[TaskEntity], loading: bool) -> None:
        for status, label in self.count_labels.items():
            label.setText("…" if loading else str(counts.get(status, 0)))
        _fill_task_list(self.recent_list, recent)
        self.empty_label.setVisible(not loading and not recent)


class TasksView(QWidget):
    status_selected = Signal(str)
    search_changed = Signal(str)
    new_task_requested = Signal()
    edit_requested = Signal(object)
    toggle_complete_requested = Signal(object)
    delete_requested = Signal(object)

    def __init__(self, parent=None):
        super().__init__(parent)
        self._tasks: dict[str, TaskEntity] = {}

        header = QHBoxLayout()
        title = QLabel("My tasks")
        title.setProperty("class", "panel-title")
        self.count_label = QLabel("")
        self.count_label.setProperty("class", "stats-badge")
        header.addWidget(title)
        header.addStretch()
        header.addWidget(self.count_label)

        self.status_combo = QComboBox()
        for label, key in STATUS_FILTERS:
            self.status_combo.addItem(label, key)
        self.status_combo.activated.connect(self._on_status_selected)

        self.search_input = QLineEdit()
        self.search_input.setPlaceholderText("Search this page by title or description")
        self.search_input.textChanged.connect(self.search_changed)

        new_button = QPushButton("New task")
        new_button.clicked.connect(self.new_task_requested)

        toolbar = QHBoxLayout()
        toolbar.addWidget(self.status_combo)
        toolbar.addWidget(self.search_input, 1)
        toolbar.addWidget(new_button)

        self.task_list = QListWidget()
        self.task_list.setObjectName("TaskList")
        self.task_list.setSpacing(6)
        self.task_list.itemDoubleClicked.connect(self._on_edit)
        self.empty_label = QLabel("No tasks found.")
        self.empty_label.setAlignment(Qt.AlignCenter)

        self.edit_button = QPushButton("Edit")
        self.edit_button.setProperty("variant", "secondary")
        self.edit_button.clicked.connect(self._on_edit)
        self.complete_button = QPushButton("Mark completed")
        self.complete_button.setProperty("variant", "secondary")
        self.complete_button.clicked.connect(self._on_toggle_complete)
        self.delete_button = QPushButton("Delete")
        self.delete_button.setProperty("variant", "danger")
        self.delete_button.clicked.connect(self._on_delete)
        self.task_list.currentItemChanged.connect(self._sync_actions)

        actions = QHBoxLayout()
        actions.addStretch()
        actions.addWidget(self.edit_button)
        actions.addWidget(self.complete_button)
        actions.addWidget(self.delete_button)

        self.pagination = PaginationBar()

        layout = QVBoxLayout(self)
        layout.addLayout(header)
        layout.addLayout(toolbar)
        layout.addWidget(self.task_list)
        layout.addWidget(self.empty_label)
        layout.addLayout(actions)
        layout.addWidget(self.pagination)
        self._sync_actions()

    def render(self, state: TaskStoreState) -> None:
        current = self.current_task()
        self._tasks = {task.id: task for task in state.filtered_tasks}
        _fill_task_list(self.task_list, state.filtered_tasks)
        if current and current.id in self._tasks:
            for index in range(self.task_list.count()):
                if self.task_list.item(index).data(Qt.UserRole) == current.id:
                    self.task_list.setCurrentRow(index)
                    break

        index = self.status_combo.findData(str(state.status_filter))
        if index >= 0:
            self.status_combo.setCurrentIndex(index)
        self.count_label.setText(f"Total: {state.total_count}")
        self.empty_label.setVisible(not state.is_loading and not state.filtered_tasks)
        self.pagination.render(state.page, state.total_pages, state.limit)
        self.setEnabled(not state.is_loading)
        self._sync_actions()

    def current_task(self) -> TaskEntity | None:
        item = self.task_list.currentItem()
        if not item:
            return None
        return self._tasks.get(item.data(Qt.UserRole))

    def _sync_actions(self, *_args) -> None:
        task = self.current_task()
        for button in (self.edit_button, self.complete_button, self.delete_button):
            button.setEnabled(task is not None)
        if task and task.status == TaskStatus.COMPLETED:
            self.complete_button.setText("Reopen")
        else:
            self.complete_button.setText("Mark completed")

    def _on_status_selected(self, index: int) -> None:
        self.status_selected.emit(self.status_combo.itemData(index))

    def _on_edit(self, *_args) -> None:
        task = self.current_task()
        if task:
            self.edit_requested.emit(task)

    def _on_toggle_complete(self) -> None:
        task = self.current_task()
        if task:
            self.toggle_complete_requested.emit(task)

    def _on_delete(self) -> None:
        task = self.current_task()
        if task:
            self.delete_requested.emit(task)
