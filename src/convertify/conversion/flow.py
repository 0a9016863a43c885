"""Client-side conversion flow.

A small state machine driving the interactive page::

    idle -> ready -> converting -> completed
                              \\-> failed

``completed``/``failed`` go back to ``idle`` on :meth:`ConversionFlow.reset`,
and switching the category tab resets from any state. Progress during
``converting`` is cosmetic; it is paced by ``sleep`` and abandoned as soon as
the flow is reset, so a stale step can never revive a discarded conversion.
A run interrupted from outside returns to ``ready`` with the file kept.
"""

import logging
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Mapping

from .catalog import mime_type_for, suggest_target_format, target_choices_for
from .session import ConversionSession
from .validation import DEFAULT_MAX_SIZE, validate_file

logger = logging.getLogger(__name__)

CONVERT_ERROR = "There was an error converting your file. Please try again."
MISSING_INPUT = "Please select a file and target format"
INTERRUPTED = "Conversion was interrupted"


class FlowState:
    IDLE = "idle"
    READY = "ready"
    CONVERTING = "converting"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class SelectedFile:
    name: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class ConvertedFile:
    data: bytes
    filename: str
    content_type: str
    locator: str


Converter = Callable[[SelectedFile, str, Mapping[str, Any] | None], ConvertedFile]


def build_local_result(
    file: SelectedFile, target_format: str, options: Mapping[str, Any] | None = None
) -> ConvertedFile:
    """Fabricate the result in-process, without calling the API."""
    label = target_format.upper()
    created = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    text = (
        f"This is a Convertify demo {label} file.\n\n"
        f"Created: {created}\n"
        f"Source file: {file.name or 'unknown'}\n"
        f"Target format: {label}\n\n"
        f"In a production environment, this would be a proper {label} file "
        "converted using specialized libraries."
    )
    return ConvertedFile(
        data=text.encode("utf-8"),
        filename=f"converted.{target_format}",
        content_type=mime_type_for(target_format),
        locator=f"blob:{uuid.uuid4()}",
    )


class ConversionFlow:
    STEP = 10

    def __init__(
        self,
        *,
        converter: Converter = build_local_result,
        session: ConversionSession | None = None,
        sleep: Callable[[float], None] = time.sleep,
        step_delay: float = 0.3,
        max_size_bytes: int = DEFAULT_MAX_SIZE,
        category: str = "documents",
    ) -> None:
        self._converter = converter
        self._session = session
        self._sleep = sleep
        self._step_delay = step_delay
        self._max_size_bytes = max_size_bytes
        self._generation = 0
        self.category = category
        self._clear()

    def _clear(self) -> None:
        self.state = FlowState.IDLE
        self.file: SelectedFile | None = None
        self.target_format = ""
        self.options: Mapping[str, Any] | None = None
        self.progress = 0
        self.error: str | None = None
        self.result: ConvertedFile | None = None
        self.notice: str | None = None

    # -- transitions -------------------------------------------------------

    def reset(self) -> None:
        """Back to idle; any in-flight progress loop is abandoned."""
        self._generation += 1
        self._clear()

    def select_category(self, category: str) -> None:
        self.category = category
        self.reset()

    def select_file(self, file: SelectedFile) -> bool:
        if self.state == FlowState.CONVERTING:
            return False
        check = validate_file(file, self._max_size_bytes)
        if not check.valid:
            self.error = check.error
            self.notice = check.error
            return False

        self._generation += 1
        self._clear()
        self.state = FlowState.READY
        self.file = file
        self.target_format = suggest_target_format(file.name)
        return True

    def set_target_format(self, target_format: str) -> None:
        if self.state == FlowState.READY:
            self.target_format = target_format

    def set_options(self, options: Mapping[str, Any] | None) -> None:
        if self.state == FlowState.READY:
            self.options = options

    def target_choices(self) -> tuple[tuple[str, str], ...]:
        return target_choices_for(self.file.name) if self.file else ()

    def convert(self, on_progress: Callable[[int], None] | None = None) -> bool:
        """Run the simulated conversion. Returns True when it completed."""
        if self.state != FlowState.READY or self.file is None or not self.target_format:
            self.notice = MISSING_INPUT
            return False

        generation = self._generation
        file, target_format, options = self.file, self.target_format, self.options
        self.state = FlowState.CONVERTING
        self.progress = 0
        self.error = None
        self.result = None
        self.notice = None

        entry_id = None
        if self._session is not None:
            entry_id = self._session.add_file(file.name, file.size, target_format)
            self._session.update_status(entry_id, "processing", 0)

        try:
            return self._run(generation, file, target_format, options, entry_id, on_progress)
        finally:
            # A run stopped from outside (a Streamlit rerun raises BaseException)
            # hands the selected file back instead of staying in converting.
            if generation == self._generation and self.state == FlowState.CONVERTING:
                self.state = FlowState.READY
                self.progress = 0
            entry = self._session.get(entry_id) if entry_id is not None else None
            if entry is not None and entry.status == "processing":
                self._session.set_error(entry_id, INTERRUPTED)

    def _run(
        self,
        generation: int,
        file: SelectedFile,
        target_format: str,
        options: Mapping[str, Any] | None,
        entry_id: str | None,
        on_progress: Callable[[int], None] | None,
    ) -> bool:
        try:
            for pct in range(0, 101, self.STEP):
                self._sleep(self._step_delay)
                if generation != self._generation:
                    logger.debug("conversion of %s abandoned at %d%%", file.name, self.progress)
                    return False
                self.progress = pct
                if entry_id is not None:
                    self._session.update_status(entry_id, "processing", pct)
                if on_progress is not None:
                    on_progress(pct)
            if generation != self._generation:
                return False
            result = self._converter(file, target_format, options)
        except Exception:
            if generation != self._generation:
                return False
            logger.exception("conversion of %s failed", file.name)
            self.state = FlowState.FAILED
            self.error = CONVERT_ERROR
            self.notice = "Conversion failed"
            self.progress = 100
            if entry_id is not None:
                self._session.set_error(entry_id, CONVERT_ERROR)
            return False

        if generation != self._generation:
            return False
        self.state = FlowState.COMPLETED
        self.result = result
        self.progress = 100
        self.notice = "File converted successfully!"
        if entry_id is not None:
            self._session.set_result(entry_id, result.locator)
        return True
