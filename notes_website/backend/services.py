import contextlib
import logging
import os
import tempfile
import threading
from typing import Dict, Iterator, List

from .domain import Note, InvalidInput, AlreadyExists, NotFound
from .utils import NOTE_SUFFIX, TEMP_PREFIX, is_valid_name, note_path, note_name

logger = logging.getLogger(__name__)


class KeyedLocks:
    """Hands out one mutex per key.

    Entries are reference counted and dropped once nobody holds or waits
    on them, so the table only grows with the number of names in use at
    the same moment.
    """
    def __init__(self):
        self.lock = threading.Lock()
        self.entries: Dict[str, List] = {}  # key -> [lock, users]

    @contextlib.contextmanager
    def hold(self, key: str):
        with self.lock:
            entry = self.entries.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1
        entry[0].acquire()
        try:
            yield
        finally:
            entry[0].release()
            with self.lock:
                entry[1] -= 1
                if entry[1] == 0:
                    del self.entries[key]

    def __len__(self):
        with self.lock:
            return len(self.entries)


class NoteStore:
    """Stores notes as ``<name>.txt`` files inside a single directory.

    Every single-name operation runs its existence check and its action
    while holding that name's lock, so concurrent requests on one name are
    serialized and requests on different names run in parallel. Writes go
    through a temporary file and ``os.replace``, which lets list_notes read
    without any lock and still only see complete contents.
    """

    def __init__(self, directory: str):
        self.directory = os.path.abspath(directory)
        self.locks = KeyedLocks()
        os.makedirs(self.directory, exist_ok=True)
        logger.info("Note store ready in %s", self.directory)

    def _path(self, name: str) -> str:
        if not is_valid_name(name):
            raise InvalidInput(f"Invalid note name: {name!r}")
        path = note_path(self.directory, name)
        if os.path.dirname(os.path.abspath(path)) != self.directory:
            raise InvalidInput(f"Invalid note name: {name!r}")
        return path

    def _write(self, path: str, text: str) -> None:
        fd, tmp_path = tempfile.mkstemp(prefix=TEMP_PREFIX, suffix=".tmp", dir=self.directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(text)
            os.replace(tmp_path, path)
        except BaseException:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(tmp_path)
            raise

    @staticmethod
    def _read(path: str) -> str:
        with open(path, "r", encoding="utf-8", errors="replace", newline="") as f:
            return f.read()

    def create(self, name: str, text: str) -> Note:
        """Persist a new note.

        Raises:
            InvalidInput: If name or text is empty, or the name is not usable
            AlreadyExists: If a note with this name is already stored
        """
        if not name or not text:
            raise InvalidInput("Note name and text are required")
        path = self._path(name)
        with self.locks.hold(name):
            if os.path.exists(path):
                raise AlreadyExists("Note with this name already exists")
            self._write(path, text)
        logger.info("Note created: %s (%d chars)", name, len(text))
        return Note(name, text)

    def fetch(self, name: str) -> str:
        """Return the stored text of a note, raising NotFound if absent."""
        path = self._path(name)
        with self.locks.hold(name):
            try:
                return self._read(path)
            except FileNotFoundError:
                raise NotFound("Note not found")

    def replace(self, name: str, text: str) -> Note:
        """Overwrite the whole content of an existing note."""
        path = self._path(name)
        with self.locks.hold(name):
            if not os.path.exists(path):
                raise NotFound("Note not found")
            self._write(path, text)
        logger.info("Note updated: %s (%d chars)", name, len(text))
        return Note(name, text)

    def delete(self, name: str) -> None:
        path = self._path(name)
        with self.locks.hold(name):
            try:
                os.unlink(path)
            except FileNotFoundError:
                raise NotFound("Note not found")
        logger.info("Note deleted: %s", name)

    def list_notes(self) -> Iterator[Note]:
        """Yield every stored note once, in directory enumeration order.

        A note removed between enumeration and read is skipped.
        """
        with os.scandir(self.directory) as entries:
            for entry in entries:
                if not entry.name.endswith(NOTE_SUFFIX) or not entry.is_file():
                    continue
                name = note_name(entry.name)
                if not is_valid_name(name):
                    continue
                try:
                    text = self._read(entry.path)
                except FileNotFoundError:
                    continue
                yield Note(name, text)
