import time
from pathlib import Path
from typing import Callable
from watchdog.observers import Observer
from watchdog.events import FileSystemEventHandler

class FileChangeHandler(FileSystemEventHandler):
    """
    Listens for changes to a specific file and triggers a callback.
    """
    def __init__(self, target_file: str, callback: Callable[[str], None], debounce_seconds: float = 0.0):
        self.target_file = str(Path(target_file).resolve())
        self.callback = callback
        self.last_triggered = 0.0
        self.debounce_seconds = debounce_seconds

    def _matches(self, event) -> bool:
        if event.is_directory:
            return False
        return str(Path(event.src_path).resolve()) == self.target_file

    def on_modified(self, event):
        if not self._matches(event):
            return
        now = time.time()
        if now - self.last_triggered >= self.debounce_seconds:
            self.callback(self.target_file)
            self.last_triggered = now

    def on_created(self, event):
        # Log rotation replaces the file instead of appending to it
        if self._matches(event):
            self.callback(self.target_file)
            self.last_triggered = time.time()

class FileWatcher:
    """
    Manages the watchdog observer thread.
    """
    def __init__(self):
        self.observer = Observer()
        self.watch = None

    def start_watching(self, file_path: str, callback: Callable[[str], None], debounce_seconds: float = 0.0):
        """
        Starts a background thread watching the directory of the file_path.
        """
        path = Path(file_path).resolve()
        if not path.exists():
            raise FileNotFoundError(f"Cannot watch non-existent file: {file_path}")

        handler = FileChangeHandler(str(path), callback, debounce_seconds)
        # Watch the parent directory
        self.watch = self.observer.schedule(handler, str(path.parent), recursive=False)
        self.observer.start()

    def stop_watching(self):
        if self.observer.is_alive():
            self.observer.stop()
            self.observer.join()
