"""Translate Gemini CLI stream-json output into UI events.

One translator serves one CLI run. stdout arrives as arbitrary byte chunks;
complete lines are parsed as JSON and mapped onto the event protocol the UI
already speaks. stderr is filtered for known informational notices.
"""

import codecs
import logging
from typing import Any, Callable

import orjson

from gemini_bridge.types.events import EventType, StreamEventKind
from gemini_bridge.types.messages import ASSISTANT_ROLES
from gemini_bridge.utils.message_text import content_text

logger = logging.getLogger(__name__)

PROVIDER = "gemini"

# Startup notices the CLI prints on stdout
STDOUT_NOISE = (
    "YOLO mode is enabled",
    "Loaded cached credentials",
)

# Lowercased informational notices the CLI prints on stderr
STDERR_NOISE = (
    "loaded cached credentials",
    "yolo mode is enabled",
)


def is_ignorable_stderr(line: str) -> bool:
    normalized = line.strip().lower() if line else ""
    if not normalized:
        return True
    return any(notice in normalized for notice in STDERR_NOISE)


class StreamTranslator:
    """Stateful stdout/stderr translator for a single CLI process."""

    def __init__(
        self,
        emit: Callable[[dict], None],
        session_id: str | None = None,
        working_dir: str = "",
        on_session_id: Callable[[str], None] | None = None,
    ):
        self._emit = emit
        self._requested_session_id = session_id
        self._working_dir = working_dir
        self._on_session_id = on_session_id

        self.captured_session_id: str | None = session_id
        self.message_buffer = ""
        self._session_created_sent = False

        self._pending = ""
        self._stdout_decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._stderr_decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

        self._handlers: dict[StreamEventKind, Callable[[dict], None]] = {
            StreamEventKind.INIT: self._on_init,
            StreamEventKind.MESSAGE: self._on_message,
            StreamEventKind.TOOL_USE: self._on_tool_use,
            StreamEventKind.TOOL_RESULT: self._on_tool_result,
            StreamEventKind.RESULT: self._on_result,
            StreamEventKind.PASSTHROUGH: self._on_passthrough,
        }

    @property
    def session_id(self) -> str | None:
        return self.captured_session_id or self._requested_session_id or None

    @property
    def is_new_session(self) -> bool:
        return not self._requested_session_id

    # ------------------------------------------------------------------
    # stdout
    # ------------------------------------------------------------------

    def feed_stdout(self, chunk: bytes):
        """Consume a raw stdout chunk; a trailing partial line is held back."""
        text = self._pending + self._stdout_decoder.decode(chunk)
        lines = text.split("\n")
        self._pending = lines.pop()
        for line in lines:
            self.process_line(line)

    def flush_stdout(self):
        """Process any final line that was not newline-terminated."""
        text = self._pending + self._stdout_decoder.decode(b"", final=True)
        self._pending = ""
        if text:
            self.process_line(text)

    def process_line(self, line: str):
        line = line.rstrip("\r")
        if not line.strip():
            return

        try:
            payload = orjson.loads(line)
        except orjson.JSONDecodeError:
            if any(notice in line for notice in STDOUT_NOISE):
                logger.debug("Skipping CLI notice: %s", line)
                return
            logger.debug("Non-JSON Gemini output: %s", line)
            self._send(EventType.OUTPUT, data=line)
            return

        kind = StreamEventKind.of(payload)
        logger.debug("Gemini %s event: %s", kind.value, line)
        self._handlers[kind](payload)

    def _on_init(self, payload: dict):
        new_id = payload.get("session_id")
        if new_id and not self.captured_session_id:
            self.captured_session_id = new_id
            logger.info("Captured Gemini session ID %s", new_id)
            if self._on_session_id is not None:
                self._on_session_id(new_id)

            if self.is_new_session and not self._session_created_sent:
                self._session_created_sent = True
                self._emit({
                    "type": EventType.SESSION_CREATED.value,
                    "sessionId": new_id,
                    "provider": PROVIDER,
                    "model": payload.get("model"),
                    "cwd": self._working_dir,
                })

        self._send(EventType.SYSTEM, data=payload)

    def _on_message(self, payload: dict):
        role = payload.get("role")
        if role == "user":
            self._send(EventType.USER, data=payload)
        elif role in ASSISTANT_ROLES:
            text = content_text(payload.get("content"))
            self.message_buffer += text
            self._send(EventType.RESPONSE, data={
                "type": "content_block_delta",
                "delta": {"type": "text_delta", "text": text},
            })
        else:
            self._on_passthrough(payload)

    def _on_tool_use(self, payload: dict):
        self._send(EventType.RESPONSE, data={
            "type": "content_block_start",
            "index": 1,
            "content_block": {
                "type": "tool_use",
                "id": payload.get("tool_id"),
                "name": payload.get("tool_name"),
                "input": payload.get("parameters"),
            },
        })

    def _on_tool_result(self, payload: dict):
        self._send(EventType.RESPONSE, data={
            "type": "message_delta",
            "delta": {"stop_reason": "tool_use"},
        })
        self._send(EventType.TOOL_RESULT, data=payload)

    def _on_result(self, payload: dict):
        if self.message_buffer:
            self._send(EventType.RESPONSE, data={"type": "content_block_stop"})
        self._send(EventType.RESULT, data=payload, success=payload.get("status") == "success")

    def _on_passthrough(self, payload: Any):
        self._send(EventType.PASSTHROUGH, data=payload)

    # ------------------------------------------------------------------
    # stderr
    # ------------------------------------------------------------------

    def feed_stderr(self, chunk: bytes):
        """Forward actionable stderr text as one error event per chunk."""
        text = self._stderr_decoder.decode(chunk)
        lines = [line.strip() for line in text.split("\n")]
        actionable = [line for line in lines if not is_ignorable_stderr(line)]
        if not actionable:
            return

        error = "\n".join(actionable)
        logger.error("Gemini CLI stderr: %s", error)
        self.send_error(error)

    # ------------------------------------------------------------------
    # Emission
    # ------------------------------------------------------------------

    def _send(self, event_type: EventType, **fields):
        event = {"type": event_type.value}
        event.update(fields)
        event["sessionId"] = self.session_id
        self._emit(event)

    def send_error(self, message: str):
        self._emit({
            "type": EventType.ERROR.value,
            "error": message,
            "sessionId": self.session_id,
        })
