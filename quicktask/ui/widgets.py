from __future__ import annotations

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import (
    QComboBox,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QSizePolicy,
    QVBoxLayout,
    QWidget,
)

from quicktask.domain.entities import TaskEntity
from quicktask.domain.enums import TaskPriority, TaskStatus
from quicktask.domain.pagination import PAGE_SIZE_OPTIONS, page_window

from .datetimes import format_local

STATUS_LABELS = {
    TaskStatus.TODO: "To Do",
    TaskStatus.IN_PROGRESS: "In Progress",
    TaskStatus.COMPLETED: "Completed",
}

STATUS_COLORS = {
    TaskStatus.TODO: "#9CA3AF",
    TaskStatus.IN_PROGRESS: "#3B82F6",
    TaskStatus.COMPLETED: "#22C55E",
}

PRIORITY_LABELS = {
    TaskPriority.LOW: "Low",
    TaskPriority.MEDIUM: "Medium",
    TaskPriority.HIGH: "High",
}

PRIORITY_COLORS = {
    TaskPriority.LOW: "#7CC4A1",
    TaskPriority.MEDIUM: "#E0B25B",
    TaskPriority.HIGH: "#E57B63",
}


class _Badge(QLabel):
    def __init__(self, text: str, color: str, parent=None):
        super().__init__(text, parent)
        self.setProperty("class", "badge")
        self.setStyleSheet(
            f"background-color: {color}; color: #FFFFFF; border-radius: 6px; padding: 2px 8px;"
        )
        self.setSizePolicy(QSizePolicy.Fixed, QSizePolicy.Fixed)


class StatusBadge(_Badge):
    def __init__(self, status: TaskStatus, parent=None):
        super().__init__(STATUS_LABELS.get(status, str(status)), STATUS_COLORS.get(status, "#9CA3AF"), parent)


class PriorityBadge(_Badge):
    def __init__(self, priority: TaskPriority, parent=None):
        super().__init__(
            PRIORITY_LABELS.get(priority, str(priority)),
            PRIORITY_COLORS.get(priority, "#9CA3AF"),
            parent,
        )


class TaskItemWidget(QWidget):
    def __init__(self, task: TaskEntity, parent=None):
        super().__init__(parent)
        self.task = task

        self.setObjectName("TaskCard")
        self.setAttribute(Qt.WA_StyledBackground, True)
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Fixed)
        self.setMinimumHeight(56)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(12, 8, 12, 8)
        layout.setSpacing(4)

        title = QLabel(task.title)
        title.setProperty("class", "task-title")
        title.setWordWrap(True)
        if task.status == TaskStatus.COMPLETED:
            font = title.font()
            font.setStrikeOut(True)
            title.setFont(font)

        header = QHBoxLayout()
        header.setSpacing(8)
        header.addWidget(title, 1)
        header.addWidget(StatusBadge(task.status), 0, Qt.AlignTop)
        header.addWidget(PriorityBadge(task.priority), 0, Qt.AlignTop)

        meta_parts = []
        if task.due_date:
            meta_parts.append(f"Due {format_local(task.due_date)}")
        meta_parts.append(f"Updated {format_local(task.updated_at)}")
        meta = QLabel(" | ".join(meta_parts))
        meta.setProperty("class", "task-meta")

        layout.addLayout(header)
        if task.description:
            description = QLabel(task.description)
            description.setWordWrap(True)
            layout.addWidget(description)
        layout.addWidget(meta)


class PaginationBar(QWidget):
    page_changed = Signal(int)
    limit_changed = Signal(int)

    def __init__(self, parent=None):
        super().__init__(parent)
        self._page = 1
        self._pages = 1

        self.limit_combo = QComboBox()
        for size in PAGE_SIZE_OPTIONS:
            self.limit_combo.addItem(str(size), size)
        self.limit_combo.activated.connect(self._on_limit_selected)

        self.first_button = QPushButton("«")
        self.prev_button = QPushButton("‹")
        self.next_button = QPushButton("›")
        self.last_button = QPushButton("»")
        self.first_button.clicked.connect(lambda: self.page_changed.emit(1))
        self.prev_button.clicked.connect(lambda: self.page_changed.emit(self._page - 1))
        self.next_button.clicked.connect(lambda: self.page_changed.emit(self._page + 1))
        self.last_button.clicked.connect(lambda: self.page_changed.emit(self._pages))

        self.pages_layout = QHBoxLayout()
        self.pages_layout.setSpacing(4)

        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(QLabel("Items per page:"))
        layout.addWidget(self.limit_combo)
        layout.addStretch()
        layout.addWidget(self.first_button)
        layout.addWidget(self.prev_button)
        layout.addLayout(self.pages_layout)
        layout.addWidget(self.next_button)
        layout.addWidget(self.last_button)

    def render(self, page: int, pages: int, limit: int) -> None:
        self._page = page
        self._pages = pages

        index = self.limit_combo.findData(limit)
        if index >= 0:
            self.limit_combo.setCurrentIndex(index)

        while self.pages_layout.count():
            widget = self.pages_layout.takeAt(0).widget()
            if widget:
                widget.deleteLater()
        for number in page_window(page, pages):
            button = QPushButton(str(number))
            button.setCheckable(True)
            button.setChecked(number == page)
            button.clicked.connect(lambda _checked=False, n=number: self.page_changed.emit(n))
            self.pages_layout.addWidget(button)

        self.first_button.setEnabled(page > 1)
        self.prev_button.setEnabled(page > 1)
        self.next_button.setEnabled(page < pages)
        self.last_button.setEnabled(page < pages)
        # A single page needs no pager, only the size selector.
        for button in (self.first_button, self.prev_button, self.next_button, self.last_button):
            button.setVisible(pages > 1)

    def _on_limit_selected(self, index: int) -> None:
        self.limit_changed.emit(self.limit_combo.itemData(index))
