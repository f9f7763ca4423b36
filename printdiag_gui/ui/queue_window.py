# printdiag_gui/ui/queue_window.py
"""
Print queue window: job table, refresh/highlight controls, queue actions
and a notice log.

The window only talks to QueueManager. All spooler work happens on the
manager's worker; results come back through its signals.
"""

from __future__ import annotations

import html
from datetime import datetime
from typing import Optional

from PySide6.QtCore import Qt, Slot
from PySide6.QtGui import QBrush, QColor, QIcon, QTextCursor
from PySide6.QtWidgets import (
    QAbstractItemView,
    QFileDialog,
    QHBoxLayout,
    QHeaderView,
    QLabel,
    QMessageBox,
    QPushButton,
    QSpinBox,
    QTableWidget,
    QTableWidgetItem,
    QTextEdit,
    QVBoxLayout,
    QWidget,
)

from ..job_types import Notice, Severity, Snapshot
from ..queue_manager import QueueManager
from ..settings_store import APP_NAME, APP_VER, HIGHLIGHT_RANGE, KEYS, REFRESH_RANGE
from ..theme import SEVERITY_COLORS, STALE_ROW_BG
from ..utils import export_file_name, write_export

COLUMNS = ("Job ID", "User", "Age", "Status", "File")
COL_JOB_ID, COL_USER, COL_AGE, COL_STATUS, COL_FILE = range(len(COLUMNS))


class QueueWindow(QWidget):
    def __init__(self, manager: QueueManager, settings=None, app_icon: QIcon | None = None):
        super().__init__()
        self.manager = manager
        self.s = settings
        self._snapshot: Snapshot = manager.get_snapshot()

        self.setWindowTitle(f"{APP_NAME} • {APP_VER}")
        self.setMinimumSize(980, 600)
        if app_icon:
            self.setWindowIcon(app_icon)

        self._build_ui()
        self._connect_signals()
        self.manager.printer_description()

    # ------------------------------------------------------------------
    # UI construction
    # ------------------------------------------------------------------
    def _build_ui(self) -> None:
        self.lbl_title = QLabel(f"Printer: {self.manager.options.printer_name}")
        self.lbl_title.setStyleSheet("font-size: 16px; font-weight: 600;")

        self.lbl_status = QLabel("Queue Status: (not refreshed yet)")
        self.lbl_status.setTextInteractionFlags(Qt.TextSelectableByMouse)
        self.lbl_recovery = QLabel("")
        self.lbl_recovery.setProperty("class", "muted")
        self.lbl_recovery.setVisible(False)

        self.spin_refresh = QSpinBox()
        self.spin_refresh.setRange(*REFRESH_RANGE)
        self.spin_refresh.setSingleStep(1)
        self.spin_refresh.setValue(self.manager.options.refresh_interval_sec)
        self.spin_refresh.setToolTip("0 turns auto-refresh off.")

        self.spin_age = QSpinBox()
        self.spin_age.setRange(*HIGHLIGHT_RANGE)
        self.spin_age.setSingleStep(5)
        self.spin_age.setValue(self.manager.highlight_threshold())
        self.spin_age.setToolTip("Highlight jobs at least this many minutes old. 0 turns highlighting off.")

        self.btn_refresh = QPushButton("Refresh Now")
        self.btn_diagnose = QPushButton("Run Diagnostics")
        self.btn_test_page = QPushButton("Print Test Page")

        controls = QHBoxLayout()
        controls.addWidget(QLabel("Auto-refresh (sec):"))
        controls.addWidget(self.spin_refresh)
        controls.addSpacing(12)
        controls.addWidget(QLabel("Highlight older than (min):"))
        controls.addWidget(self.spin_age)
        controls.addStretch()
        controls.addWidget(self.btn_test_page)
        controls.addWidget(self.btn_diagnose)
        controls.addWidget(self.btn_refresh)

        self.table = QTableWidget(0, len(COLUMNS))
        self.table.setHorizontalHeaderLabels(list(COLUMNS))
        self.table.setSelectionBehavior(QAbstractItemView.SelectRows)
        self.table.setSelectionMode(QAbstractItemView.SingleSelection)
        self.table.setEditTriggers(QAbstractItemView.NoEditTriggers)
        self.table.verticalHeader().setVisible(False)
        header = self.table.horizontalHeader()
        header.setSectionResizeMode(COL_STATUS, QHeaderView.Stretch)
        header.setSectionResizeMode(COL_FILE, QHeaderView.Stretch)

        self.btn_cancel_selected = QPushButton("Cancel Selected Job")
        self.btn_cancel_user = QPushButton("Cancel All From Selected User")
        self.btn_cancel_all = QPushButton("Cancel ALL Jobs")
        self.btn_cancel_all.setProperty("class", "danger")
        self.btn_pause = QPushButton("Pause Queue")
        self.btn_resume = QPushButton("Resume Queue")

        actions = QHBoxLayout()
        actions.addWidget(self.btn_cancel_selected)
        actions.addWidget(self.btn_cancel_user)
        actions.addWidget(self.btn_cancel_all)
        actions.addStretch()
        actions.addWidget(self.btn_pause)
        actions.addWidget(self.btn_resume)

        self.log = QTextEdit()
        self.log.setReadOnly(True)
        self.log.setMaximumHeight(160)
        self.btn_export = QPushButton("Export Output")

        root = QVBoxLayout(self)
        root.addWidget(self.lbl_title)
        root.addWidget(self.lbl_status)
        root.addWidget(self.lbl_recovery)
        root.addLayout(controls)
        root.addWidget(self.table, 1)
        root.addLayout(actions)
        root.addWidget(self.log)
        export_row = QHBoxLayout()
        export_row.addStretch()
        export_row.addWidget(self.btn_export)
        root.addLayout(export_row)

    def _connect_signals(self) -> None:
        self.manager.snapshot_published.connect(self._on_snapshot)
        self.manager.notice.connect(self._on_notice)
        self.manager.highlight_changed.connect(lambda _m: self._render_rows())
        self.manager.description_changed.connect(self._on_description)

        self.spin_refresh.valueChanged.connect(self._on_refresh_interval)
        self.spin_age.valueChanged.connect(self._on_highlight_threshold)
        self.btn_refresh.clicked.connect(lambda: self.manager.request_refresh())
        self.btn_diagnose.clicked.connect(lambda: self.manager.run_diagnostics())
        self.btn_test_page.clicked.connect(lambda: self.manager.print_test_page())
        self.btn_export.clicked.connect(self.export_output)

        self.btn_cancel_selected.clicked.connect(self.cancel_selected)
        self.btn_cancel_user.clicked.connect(self.cancel_all_from_user)
        self.btn_cancel_all.clicked.connect(self.cancel_all_jobs)
        self.btn_pause.clicked.connect(self.pause_queue)
        self.btn_resume.clicked.connect(self.resume_queue)

    # ------------------------------------------------------------------
    # Manager signals
    # ------------------------------------------------------------------
    @Slot(object)
    def _on_snapshot(self, snapshot: Snapshot) -> None:
        self._snapshot = snapshot
        self.lbl_status.setText(snapshot.state.summary())
        self._render_recovery(snapshot)
        self._render_rows()

    @Slot(object)
    def _on_notice(self, notice: Notice) -> None:
        color = SEVERITY_COLORS.get(notice.severity.value, SEVERITY_COLORS["info"])
        stamp = notice.at.strftime("%H:%M:%S")
        self.log.moveCursor(QTextCursor.End)
        self.log.insertHtml(
            f'<span style="color:{color}">[{stamp}] {notice.severity.value.upper()}: '
            f"{html.escape(notice.message)}</span><br>"
        )
        self.log.moveCursor(QTextCursor.End)

    @Slot(str)
    def _on_description(self, description: str) -> None:
        queue = self.manager.options.printer_name
        if description and description != queue:
            self.lbl_title.setText(f"Printer: {description}  ({queue})")
        else:
            self.lbl_title.setText(f"Printer: {queue}")

    def _render_recovery(self, snapshot: Snapshot) -> None:
        rec = snapshot.recovery
        if not snapshot.state.disabled or rec is None:
            self.lbl_recovery.setVisible(False)
            return
        if rec.eligible:
            text = f"Auto-Recovery eligible ({rec.recoverable_reason_hint}). Resume the queue when ready."
        elif not rec.queue_empty:
            text = "Auto-Recovery skipped: jobs are still queued."
        else:
            text = "Auto-Recovery skipped: reason not recognized as safely recoverable."
        self.lbl_recovery.setText(text)
        self.lbl_recovery.setVisible(True)

    def _render_rows(self) -> None:
        selected = self._selected_job_id()
        rows = self.manager.job_rows(self._snapshot)
        self.table.setRowCount(len(rows))
        stale = QBrush(QColor(STALE_ROW_BG))
        for r, row in enumerate(rows):
            values = (row.job.job_id, row.job.owner, row.age.label, row.job.status_text, row.job.file_description)
            for c, value in enumerate(values):
                cell = QTableWidgetItem(value)
                if row.age.highlighted:
                    cell.setBackground(stale)
                self.table.setItem(r, c, cell)
            if row.job.job_id == selected:
                self.table.selectRow(r)

    # ------------------------------------------------------------------
    # Controls
    # ------------------------------------------------------------------
    def _on_refresh_interval(self, seconds: int) -> None:
        self.manager.set_refresh_interval(seconds)
        if self.s is not None:
            self.s.setValue(KEYS["refresh_interval_sec"], int(seconds))

    def _on_highlight_threshold(self, minutes: int) -> None:
        self.manager.set_highlight_threshold(minutes)
        if self.s is not None:
            self.s.setValue(KEYS["highlight_minutes"], int(minutes))

    def _selected_job_id(self) -> Optional[str]:
        item = self.table.item(self.table.currentRow(), COL_JOB_ID) if self.table.currentRow() >= 0 else None
        return item.text() if item else None

    def _selected_owner(self) -> Optional[str]:
        row = self.table.currentRow()
        item = self.table.item(row, COL_USER) if row >= 0 else None
        return item.text() if item else None

    def _standard_confirm(self, title: str, body: str) -> bool:
        return QMessageBox.question(
            self,
            title,
            body,
            QMessageBox.Ok | QMessageBox.Cancel,
            QMessageBox.Cancel,
        ) == QMessageBox.Ok

    # ------------------------------------------------------------------
    # Actions (confirmation happens here, never in the manager)
    # ------------------------------------------------------------------
    def cancel_selected(self) -> None:
        job_id = self._selected_job_id()
        if not job_id:
            QMessageBox.information(self, "No job selected", "Select a job first.")
            return
        owner = self._selected_owner() or ""
        if not self._standard_confirm("Confirm Cancel", f"Cancel selected job?\n\nJob: {job_id}\nUser: {owner}"):
            return
        self.manager.cancel_job(job_id)

    def cancel_all_from_user(self) -> None:
        owner = self._selected_owner()
        if owner is None:
            QMessageBox.information(self, "No job selected", "Select a job first to choose a user.")
            return
        if not owner:
            QMessageBox.warning(self, "No user", "Selected job has no user.")
            return
        if not self._standard_confirm("Confirm Cancel", f"Cancel ALL jobs owned by this user?\n\nUser: {owner}"):
            return
        self.manager.cancel_all_by_owner(owner)

    def cancel_all_jobs(self) -> None:
        if not self._standard_confirm(
            "Confirm Cancel", "Cancel ALL jobs in the queue?\n\nThis will cancel every pending job."
        ):
            return
        self.manager.cancel_all()

    def pause_queue(self) -> None:
        if not self._standard_confirm(
            "Confirm Pause", "Pause/disable the printer queue?\n\nThis may require sudo privileges."
        ):
            return
        self.manager.pause_queue()

    def resume_queue(self) -> None:
        if not self._standard_confirm(
            "Confirm Resume", "Resume/enable the printer queue?\n\nThis may require sudo privileges."
        ):
            return
        self.manager.resume_queue()

    def closeEvent(self, event) -> None:
        self.manager.shutdown()
        super().closeEvent(event)

    def export_output(self) -> None:
        path, _ = QFileDialog.getSaveFileName(
            self, "Export Diagnostic Output", export_file_name(datetime.now()), "Text files (*.txt)"
        )
        if not path:
            return
        try:
            target = write_export(path, self.log.toPlainText())
        except OSError as e:
            self._on_notice(Notice(Severity.ERROR, f"Failed to write export file: {e}"))
            return
        self._on_notice(Notice(Severity.SUCCESS, f"Exported output to: {target}"))
