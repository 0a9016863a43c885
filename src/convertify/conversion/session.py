import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Literal

from .catalog import source_format_of

FileStatus = Literal["idle", "uploading", "processing", "completed", "failed"]


@dataclass(frozen=True)
class ConversionFile:
    id: str
    name: str
    size: int
    source_format: str
    target_format: str
    status: FileStatus = "idle"
    progress: int = 0
    error: str | None = None
    result_url: str | None = None
    created_at: datetime = field(default_factory=datetime.now)


class ConversionSession:
    """Conversions made during one page session, newest first.

    Owned by whoever owns the session (``st.session_state`` in the page) and
    passed explicitly to the code that needs it.
    """

    def __init__(self) -> None:
        self._files: list[ConversionFile] = []
        self._current_id: str | None = None

    @property
    def files(self) -> list[ConversionFile]:
        return list(self._files)

    @property
    def current(self) -> ConversionFile | None:
        return self.get(self._current_id) if self._current_id else None

    def get(self, file_id: str) -> ConversionFile | None:
        return next((f for f in self._files if f.id == file_id), None)

    def add_file(self, name: str, size: int, target_format: str) -> str:
        entry = ConversionFile(
            id=str(uuid.uuid4()),
            name=name,
            size=size,
            source_format=source_format_of(name),
            target_format=target_format,
        )
        self._files.insert(0, entry)
        self._current_id = entry.id
        return entry.id

    def _update(self, file_id: str, **changes) -> None:
        self._files = [replace(f, **changes) if f.id == file_id else f for f in self._files]

    def update_status(self, file_id: str, status: FileStatus, progress: int = 0) -> None:
        self._update(file_id, status=status, progress=100 if status == "completed" else progress)

    def set_error(self, file_id: str, error: str) -> None:
        self._update(file_id, status="failed", error=error)

    def set_result(self, file_id: str, result_url: str) -> None:
        self._update(file_id, status="completed", progress=100, result_url=result_url)

    def remove(self, file_id: str) -> None:
        self._files = [f for f in self._files if f.id != file_id]
        if self._current_id == file_id:
            self._current_id = self._files[0].id if self._files else None

    def clear_completed(self) -> None:
        current = self.current
        self._files = [f for f in self._files if f.status not in ("completed", "failed")]
        if current is not None and current.status in ("completed", "failed"):
            self._current_id = self._files[0].id if self._files else None

    def set_current(self, file_id: str | None) -> None:
        self._current_id = file_id if file_id and self.get(file_id) else None
