"""Spawn and supervise Gemini CLI processes."""

import logging
import os
import time
from dataclasses import dataclass, field
from typing import Callable

from PySide6.QtCore import QCoreApplication, QObject, QProcess, Signal, Slot

from gemini_bridge.services.process_table import ProcessTable
from gemini_bridge.services.stream_translator import StreamTranslator
from gemini_bridge.types.events import EventType

logger = logging.getLogger(__name__)

DEFAULT_BINARY = "gemini"


@dataclass
class SpawnOptions:
    session_id: str | None = None
    project_path: str | None = None
    cwd: str | None = None
    resume: bool = False
    model: str | None = None
    skip_permissions: bool = False
    tools_settings: dict = field(default_factory=dict)
    # Accepted from the UI; the CLI has no image arguments.
    images: list = field(default_factory=list)


def build_args(command: str | None, options: SpawnOptions) -> list[str]:
    """Build the CLI argument list for a prompt and/or resumed session."""
    args = []
    if options.session_id:
        args += ["--resume", options.session_id]

    if command and command.strip():
        args += ["-p", command]
        if not options.session_id and options.model:
            args += ["--model", options.model]
        args += ["--output-format", "stream-json"]

    settings = options.tools_settings or {}
    if options.skip_permissions or settings.get("skipPermissions"):
        args.append("--yolo")
    return args


def resolve_working_dir(options: SpawnOptions) -> str:
    return os.path.abspath(options.cwd or options.project_path or os.getcwd())


class GeminiRun(QObject):
    """One CLI process and the pending result of running it."""

    message = Signal(object)  # normalized event dict
    session_id_captured = Signal(str)
    completed = Signal(int)  # exit code
    failed = Signal(str)  # error message

    def __init__(
        self,
        binary: str,
        command: str | None,
        options: SpawnOptions,
        key: str,
        table: ProcessTable,
        parent=None,
    ):
        super().__init__(parent)
        self.command = command
        self.options = options
        self.key = key
        self.working_dir = resolve_working_dir(options)
        self.args = build_args(command, options)
        self.done = False
        self.exit_code: int | None = None
        self.error: str | None = None
        self._binary = binary
        self._table = table

        self.translator = StreamTranslator(
            lambda event: self.message.emit(event),
            session_id=options.session_id,
            working_dir=self.working_dir,
            on_session_id=self._on_session_id,
        )

        self.process = QProcess(self)
        self.process.setProgram(binary)
        self.process.setArguments(self.args)
        self.process.setWorkingDirectory(self.working_dir)
        self.process.readyReadStandardOutput.connect(self._on_stdout)
        self.process.readyReadStandardError.connect(self._on_stderr)
        self.process.finished.connect(self._on_finished)
        self.process.errorOccurred.connect(self._on_error)

    @property
    def session_id(self) -> str | None:
        return self.translator.session_id

    @property
    def is_new_session(self) -> bool:
        return not self.options.session_id and bool(self.command)

    def start(self):
        logger.info("Spawning Gemini CLI: %s %s", self._binary, " ".join(self.args))
        logger.info("Working directory: %s", self.working_dir)
        if "--yolo" in self.args:
            logger.warning("Using --yolo flag (skip permissions)")
        self.process.start()
        self.process.closeWriteChannel()

    def terminate(self):
        if self.process.state() != QProcess.ProcessState.NotRunning:
            self.process.terminate()

    def wait(self, timeout_ms: int = 30000) -> bool:
        """Block until the run has settled. Returns False on timeout."""
        deadline = time.monotonic() + timeout_ms / 1000
        while not self.done and time.monotonic() < deadline:
            if self.process.state() != QProcess.ProcessState.NotRunning:
                self.process.waitForFinished(50)
            else:
                time.sleep(0.01)
            QCoreApplication.processEvents()
        return self.done

    # ------------------------------------------------------------------
    # Process signals
    # ------------------------------------------------------------------

    def _on_session_id(self, session_id: str):
        if self._table.rekey(self.key, session_id):
            logger.debug("Re-keyed Gemini process %s -> %s", self.key, session_id)
        self.key = session_id
        self.session_id_captured.emit(session_id)

    @Slot()
    def _on_stdout(self):
        self.translator.feed_stdout(self.process.readAllStandardOutput().data())

    @Slot()
    def _on_stderr(self):
        self.translator.feed_stderr(self.process.readAllStandardError().data())

    def _on_finished(self, exit_code: int, exit_status: QProcess.ExitStatus):
        if self.done:
            return
        self._on_stdout()
        self._on_stderr()

        if exit_status == QProcess.ExitStatus.NormalExit:
            self.translator.flush_stdout()
            logger.info("Gemini CLI process exited with code %d", exit_code)
            code = exit_code
            error = None if exit_code == 0 else f"Gemini CLI exited with code {exit_code}"
        else:
            logger.info("Gemini CLI process was terminated")
            code = None
            error = "Gemini CLI was terminated by a signal"

        self._settle(code, error)

    def _on_error(self, error: QProcess.ProcessError):
        if error != QProcess.ProcessError.FailedToStart:
            # Crashes are reported again through finished.
            logger.warning("Gemini CLI process error: %s", self.process.errorString())
            return
        if self.done:
            return

        message = self.process.errorString()
        logger.error("Gemini CLI process error: %s", message)
        self._table.discard(self.key, self)
        self.translator.send_error(message)
        self._settle(None, message)

    def _settle(self, code: int | None, error: str | None):
        self._table.discard(self.key, self)
        self.message.emit({
            "type": EventType.COMPLETE.value,
            "sessionId": self.translator.session_id or self.key,
            "exitCode": code,
            "isNewSession": self.is_new_session,
        })

        self.done = True
        self.exit_code = code
        self.error = error
        if error is None:
            self.completed.emit(code)
        else:
            self.failed.emit(error)


class GeminiProcessManager(QObject):
    """Spawns Gemini CLI runs and tracks the live ones by session."""

    def __init__(self, parent=None, binary: str = DEFAULT_BINARY):
        super().__init__(parent)
        self._binary = binary
        self._table: ProcessTable[GeminiRun] = ProcessTable()

    @property
    def table(self) -> ProcessTable:
        return self._table

    def spawn(
        self,
        command: str | None,
        options: SpawnOptions | None = None,
        writer: Callable[[dict], None] | None = None,
    ) -> GeminiRun:
        """Start the CLI for a prompt or a resumed session.

        ``writer`` receives every normalized event; it is connected before
        the process starts so no event is missed.
        """
        options = options or SpawnOptions()
        key = options.session_id or str(time.time_ns())

        run = GeminiRun(self._binary, command, options, key, self._table, parent=self)
        if writer is not None:
            run.message.connect(writer)

        self._table.insert(key, run)
        run.start()
        return run

    @Slot(str, result=bool)
    def abort(self, session_id: str) -> bool:
        """Terminate the run serving ``session_id``. False if none is live."""
        run = self._table.pop(session_id)
        if run is None:
            return False
        logger.info("Aborting Gemini session: %s", session_id)
        run.terminate()
        return True

    @Slot(str, result=bool)
    def is_active(self, session_id: str) -> bool:
        return session_id in self._table

    @Slot(result=list)
    def active_sessions(self) -> list[str]:
        return self._table.keys()

    def cleanup(self):
        """Kill every run that is still alive."""
        for run in self.findChildren(GeminiRun):
            if run.process.state() != QProcess.ProcessState.NotRunning:
                run.process.kill()
                run.process.waitForFinished(2000)
