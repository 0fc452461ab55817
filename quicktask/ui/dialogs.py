from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from PySide6.QtCore import QDate, QDateTime, QTime
from PySide6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QDateTimeEdit,
    QDialog,
    QDialogButtonBox,
    QFormLayout,
    QLineEdit,
    QMessageBox,
    QTextEdit,
    QVBoxLayout,
)

from quicktask.domain.entities import TaskDraft, TaskEntity
from quicktask.domain.enums import TaskPriority, TaskStatus

from .datetimes import to_local, to_utc
from .widgets import PRIORITY_LABELS, STATUS_LABELS


class TaskDialog(QDialog):
    """Create a task, or edit one when ``task`` is given."""

    def __init__(self, task: Optional[TaskEntity] = None, parent=None):
        super().__init__(parent)
        self.task = task
        self.setWindowTitle("Edit task" if task else "New task")
        self.setObjectName("TaskDialog")
        self.resize(440, 380)

        self.title_input = QLineEdit()
        self.title_input.setPlaceholderText("Task title")

        self.description_input = QTextEdit()
        self.description_input.setPlaceholderText("Description (optional)")
        self.description_input.setMaximumHeight(120)

        self.status_combo = QComboBox()
        for status, label in STATUS_LABELS.items():
            self.status_combo.addItem(label, status.value)

        self.priority_combo = QComboBox()
        for priority, label in PRIORITY_LABELS.items():
            self.priority_combo.addItem(label, priority.value)
        self.priority_combo.setCurrentIndex(self.priority_combo.findData(TaskPriority.MEDIUM.value))

        self.due_check = QCheckBox("Has due date")
        self.due_input = QDateTimeEdit()
        self.due_input.setCalendarPopup(True)
        self.due_input.setDateTime(QDateTime.currentDateTime().addDays(1))
        self.due_input.setEnabled(False)
        self.due_check.toggled.connect(self.due_input.setEnabled)

        form = QFormLayout()
        form.addRow("Title", self.title_input)
        form.addRow("Description", self.description_input)
        form.addRow("Status", self.status_combo)
        form.addRow("Priority", self.priority_combo)
        form.addRow(self.due_check, self.due_input)

        buttons = QDialogButtonBox(QDialogButtonBox.Save | QDialogButtonBox.Cancel)
        buttons.accepted.connect(self._on_accept)
        buttons.rejected.connect(self.reject)

        layout = QVBoxLayout(self)
        layout.addLayout(form)
        layout.addWidget(buttons)

        if task:
            self._populate(task)

    def _populate(self, task: TaskEntity) -> None:
        self.title_input.setText(task.title)
        self.description_input.setPlainText(task.description or "")
        self.status_combo.setCurrentIndex(self.status_combo.findData(task.status.value))
        self.priority_combo.setCurrentIndex(self.priority_combo.findData(task.priority.value))
        if task.due_date:
            self.due_check.setChecked(True)
            local = to_local(task.due_date)
            self.due_input.setDateTime(
                QDateTime(QDate(local.year, local.month, local.day), QTime(local.hour, local.minute))
            )

    def _on_accept(self) -> None:
        if not self.title_input.text().strip():
            QMessageBox.warning(self, "Title required", "Please enter a task title.")
            return
        self.accept()

    def _due_date(self) -> Optional[datetime]:
        if not self.due_check.isChecked():
            return None
        return to_utc(self.due_input.dateTime().toPython())

    def draft(self) -> TaskDraft:
        return TaskDraft(
            title=self.title_input.text().strip(),
            description=self.description_input.toPlainText().strip() or None,
            status=TaskStatus(self.status_combo.currentData()),
            priority=TaskPriority(self.priority_combo.currentData()),
            due_date=self._due_date(),
        )

    def updates(self) -> dict[str, Any]:
        draft = self.draft()
        return {
            "title": draft.title,
            "description": draft.description,
            "status": draft.status,
            "priority": draft.priority,
            "due_date": draft.due_date,
        }


def confirm_delete(parent, task: TaskEntity) -> bool:
    answer = QMessageBox.question(
        parent,
        "Delete task",
        f"Delete \"{task.title}\"? This cannot be undone.",
    )
    return answer == QMessageBox.Yes
