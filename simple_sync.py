# /simple_sync.py
"""
SimpleSync (no UI)
- Mirrors a source folder into a destination folder (one way) on a fixed interval.
- Keeps an in-memory shadow tree of everything seen so far; entries missing
  from the latest source listing are deleted from the destination.
- MD5 change detection: a file is copied when it is new or when its digest
  differs from the one last synced.
- Source-side read errors skip the file/folder for one cycle; destination-side
  errors stop the process.
- Optional gitignore-style excludes (--exclude).
- Styled console output; the log file is always plain.
- Ctrl+C finishes the current sync and exits. Ctrl+C again exits immediately.

Remarks
- A destination file modified after the sync is not overwritten unless the
  source file changes or the program is restarted.
- Sync time is not counted towards the interval, so the real period is
  (sync time) + interval.

Usage
  pip install pathspec colorama
  python simple_sync.py <source> <destination> <interval-seconds> [log-file]
  python simple_sync.py "/src" "/dst" 10 sync.log --exclude "*.tmp"
"""

from __future__ import annotations

import argparse
import datetime as dt
import enum
import hashlib
import logging
import math
import shutil
import signal
import stat
import sys
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

from colorama import just_fix_windows_console
from pathspec import PathSpec

LOGGER_NAME = "simple_sync"

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_FORCED = 130


# -------------------------
# Console styling
# -------------------------

class Ansi:
    RESET = "\x1b[0m"
    RED = "\x1b[31m"
    GREEN = "\x1b[32m"
    ORANGE = "\x1b[38;5;208m"
    WHITE = "\x1b[97m"
    LIGHT_BROWN = "\x1b[33m"


ACTION_COLORS = {
    "CREATE": Ansi.GREEN,
    "OVERWRITE": Ansi.GREEN,
    "MKDIR": Ansi.LIGHT_BROWN,
    "DELETE": Ansi.ORANGE,
    "RMDIR": Ansi.ORANGE,
    "SKIP": Ansi.RED,
}


def _supports_color(stream) -> bool:
    try:
        return hasattr(stream, "isatty") and stream.isatty()
    except Exception:
        return False


class ColorizingFormatter(logging.Formatter):
    def __init__(self, use_color: bool, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        if not self.use_color:
            return base

        action = getattr(record, "action", None)
        is_dir = getattr(record, "is_dir", None)
        path_text = getattr(record, "path_text", None)

        if record.levelno >= logging.ERROR:
            return f"{Ansi.RED}{base}{Ansi.RESET}"
        if record.levelno == logging.WARNING:
            return f"{Ansi.ORANGE}{base}{Ansi.RESET}"

        if action and action in base:
            action_color = ACTION_COLORS.get(action, "")
            base = base.replace(action, f"{action_color}{action}{Ansi.RESET}", 1)

        if path_text and path_text in base:
            pcolor = Ansi.LIGHT_BROWN if is_dir else Ansi.WHITE
            base = base.replace(path_text, f"{pcolor}{path_text}{Ansi.RESET}")

        return base


# -------------------------
# Errors
# -------------------------

class SyncError(Exception):
    """Base class for errors that stop synchronization."""


class DestinationError(SyncError):
    """The destination could not be modified or read; the mirror is left in an unknown state."""


class LogWriteError(SyncError):
    """The configured log file could not be written."""


# -------------------------
# Logging
# -------------------------

class StrictFileHandler(logging.FileHandler):
    """
    FileHandler that refuses to drop records: a failed write raises
    LogWriteError instead of printing a traceback and carrying on.
    """

    def handleError(self, record: logging.LogRecord) -> None:
        exc = sys.exc_info()[1]
        raise LogWriteError(f"Failed to access the log file {self.baseFilename}, reason: {exc}") from exc


def setup_logger(log_file: Optional[Path] = None, verbose: bool = False) -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    just_fix_windows_console()

    fmt = "%(asctime)s | %(levelname)s | %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"

    ch = logging.StreamHandler(sys.stdout)
    ch.setLevel(logging.DEBUG if verbose else logging.INFO)
    ch.setFormatter(ColorizingFormatter(use_color=_supports_color(sys.stdout), fmt=fmt, datefmt=datefmt))
    logger.addHandler(ch)

    if log_file is not None:
        # mode "w" truncates whatever a previous run left behind
        fh = StrictFileHandler(log_file, mode="w", encoding="utf-8")
        fh.setFormatter(logging.Formatter(fmt=fmt, datefmt=datefmt))
        fh.setLevel(logging.INFO)
        logger.addHandler(fh)
        logger.info("Outputting logs to %s", log_file)

    return logger


def log_action(
    logger: logging.Logger,
    action: str,
    message: str,
    path: Optional[Path] = None,
    is_dir: Optional[bool] = None,
    level: int = logging.INFO,
) -> None:
    extra = {"action": action}
    if path is not None:
        extra["path_text"] = str(path)
        extra["is_dir"] = bool(is_dir) if is_dir is not None else (path.exists() and path.is_dir())
    logger.log(level, f"{action} | {message}", extra=extra)


def _describe_os_error(error: OSError) -> str:
    if isinstance(error, PermissionError):
        return "ACCESS DENIED"
    return f"UNKNOWN ERROR ({error})"


# -------------------------
# Config / CLI
# -------------------------

USAGE_REMARKS = """\
Relative directories are supported, but should be used with care.
A valid interval is any floating point value greater than 0.

Remarks:
  If a file in the destination directory is modified after the sync, it will
  not be overwritten unless the source file changes or the program is restarted.
  The synchronization time is not counted towards the interval, so in practice
  the real interval is (synchronization time) + interval.
  Access denied on the source side only skips the affected file or folder;
  if access is denied on the destination side the program exits with an error.
"""


@dataclass(frozen=True)
class AppConfig:
    source_dir: Path
    destination_dir: Path
    interval_sec: float
    log_file: Optional[Path] = None
    exclude: tuple[str, ...] = ()
    max_cycles: Optional[int] = None
    verbose: bool = False


class UsageErrorParser(argparse.ArgumentParser):
    """ArgumentParser that exits with status 1 (not argparse's 2) on bad arguments."""

    def error(self, message: str):
        self.print_usage(sys.stderr)
        self.exit(EXIT_ERROR, f"{self.prog}: error: {message}. See {self.prog} --help for usage.\n")


def positive_float(raw: str) -> float:
    try:
        value = float(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"interval is not a valid floating point value: {raw!r}")
    if not math.isfinite(value) or value <= 0.0:
        raise argparse.ArgumentTypeError(f"interval value must be greater than 0: {raw!r}")
    return value


def positive_int(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {raw!r}")
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be greater than 0: {raw!r}")
    return value


def build_parser() -> argparse.ArgumentParser:
    p = UsageErrorParser(
        prog="simple-sync",
        description="SimpleSync - Synchronize files from a source directory to a destination directory (one way).",
        epilog=USAGE_REMARKS,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument("source", type=str, help="Directory to mirror (source).")
    p.add_argument("destination", type=str, help="Directory to update (destination).")
    p.add_argument("interval", type=positive_float, help="Seconds to wait between synchronizations.")
    p.add_argument("log_file", type=str, nargs="?", default=None, help="Optional log file (truncated on start).")
    p.add_argument(
        "--exclude",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Gitignore-style pattern (relative to the source) to leave out. Repeatable.",
    )
    p.add_argument("--cycles", type=positive_int, default=None, help="Stop after this many synchronizations.")
    p.add_argument("-v", "--verbose", action="store_true", help="Show per-file details on the console.")
    return p


def parse_args(argv: list[str]) -> argparse.Namespace:
    if len(argv) == 1 and argv[0].lower() == "help":
        argv = ["--help"]
    return build_parser().parse_intermixed_args(argv)


def build_config(args: argparse.Namespace) -> AppConfig:
    if not args.source:
        raise ValueError("Source cannot be an empty string")
    if not args.destination:
        raise ValueError("Destination cannot be an empty string")
    if args.log_file == "":
        raise ValueError("Log file cannot be an empty string")

    return AppConfig(
        source_dir=Path(args.source),
        destination_dir=Path(args.destination),
        interval_sec=float(args.interval),
        log_file=Path(args.log_file) if args.log_file else None,
        exclude=tuple(args.exclude),
        max_cycles=args.cycles,
        verbose=bool(args.verbose),
    )


def _is_subpath(child: Path, parent: Path) -> bool:
    try:
        child.relative_to(parent)
        return True
    except ValueError:
        return False


def _check_directory(label: str, path: Path, logger: logging.Logger) -> None:
    try:
        st = path.stat()
    except (FileNotFoundError, NotADirectoryError):
        raise ValueError(f"Directory {path} does not exist")
    except PermissionError as e:
        logger.warning("Cannot access %s directory %s: access denied (%s)", label, path, e)
        return
    except OSError as e:
        logger.warning("Cannot access %s directory %s: unknown error (%s)", label, path, e)
        return
    if not stat.S_ISDIR(st.st_mode):
        raise ValueError(f"{label.capitalize()} {path} is not a directory")


def validate_paths(source: Path, destination: Path, logger: logging.Logger) -> tuple[Path, Path]:
    source = source.expanduser().resolve()
    destination = destination.expanduser().resolve()

    _check_directory("source", source, logger)
    _check_directory("destination", destination, logger)

    if source == destination:
        raise ValueError("Source and destination folders must be different.")
    if _is_subpath(destination, source):
        raise ValueError("Destination folder must NOT be inside source folder (would cause loops).")
    if _is_subpath(source, destination):
        raise ValueError("Source folder must NOT be inside destination folder (it would be deleted).")

    return source, destination


# -------------------------
# Exclude + filesystem helpers
# -------------------------

class ExcludeMatcher:
    def __init__(self, patterns: Iterable[str]):
        self.patterns = tuple(patterns)
        self.matcher = PathSpec.from_lines("gitwildmatch", self.patterns)

    def is_excluded(self, relative_path: Path, is_dir: bool) -> bool:
        if not self.patterns:
            return False
        rel_posix = relative_path.as_posix()
        if is_dir and not rel_posix.endswith("/"):
            rel_posix += "/"
        return self.matcher.match_file(rel_posix)


def md5_file(path: Path, chunk_size: int = 1024 * 1024) -> str:
    h = hashlib.md5()
    with path.open("rb") as f:
        while True:
            b = f.read(chunk_size)
            if not b:
                break
            h.update(b)
    return h.hexdigest()


def copy_file(logger: logging.Logger, src: Path, dst: Path, action: str) -> None:
    try:
        shutil.copy2(src, dst)
    except OSError as e:
        log_action(logger, action, f"ERROR {src} -> {dst} | {e}", path=dst, is_dir=False, level=logging.ERROR)
        raise DestinationError(f"Failed to write file {dst}: {e}") from e
    log_action(logger, action, f"{src} -> {dst}", path=dst, is_dir=False)


def delete_tree(path: Path, logger: logging.Logger) -> None:
    """Delete the files of `path`, then its subdirectories (recursively), then `path` itself."""
    log_action(logger, "RMDIR", f"Deleting directory {path}", path=path, is_dir=True)
    children = sorted(path.iterdir())
    subdirs = []
    for child in children:
        if child.is_dir() and not child.is_symlink():
            subdirs.append(child)
            continue
        log_action(logger, "DELETE", f"Deleting file: {child}", path=child, is_dir=False)
        child.unlink(missing_ok=True)
    for child in subdirs:
        delete_tree(child, logger)
    path.rmdir()


# -------------------------
# Shadow tree
# -------------------------

@dataclass
class TrackedFile:
    name: str
    source_path: Path
    destination_path: Path
    generation: int
    # empty until the file has been copied or verified once in this process
    digest: str = ""


@dataclass
class TrackedDirectory:
    relative_path: Path
    source_path: Path
    destination_path: Path
    generation: int
    files: dict[str, TrackedFile] = field(default_factory=dict)
    directories: dict[str, TrackedDirectory] = field(default_factory=dict)

    @classmethod
    def root(cls, source: Path, destination: Path) -> TrackedDirectory:
        return cls(relative_path=Path(), source_path=source, destination_path=destination, generation=0)

    def track_file(self, name: str, generation: int) -> tuple[TrackedFile, bool]:
        kfile = self.files.get(name)
        if kfile is not None:
            kfile.generation = generation
            return kfile, False
        kfile = TrackedFile(
            name=name,
            source_path=self.source_path / name,
            destination_path=self.destination_path / name,
            generation=generation,
        )
        self.files[name] = kfile
        return kfile, True

    def track_directory(self, name: str, generation: int) -> tuple[TrackedDirectory, bool]:
        kdir = self.directories.get(name)
        if kdir is not None:
            kdir.generation = generation
            return kdir, False
        kdir = TrackedDirectory(
            relative_path=self.relative_path / name,
            source_path=self.source_path / name,
            destination_path=self.destination_path / name,
            generation=generation,
        )
        self.directories[name] = kdir
        return kdir, True

    def stale_files(self, generation: int) -> list[TrackedFile]:
        return [f for f in self.files.values() if f.generation != generation]

    def stale_directories(self, generation: int) -> list[TrackedDirectory]:
        return [d for d in self.directories.values() if d.generation != generation]

    def forget_file(self, name: str) -> None:
        del self.files[name]

    def forget_directory(self, name: str) -> None:
        del self.directories[name]


# -------------------------
# Cycle state
# -------------------------

@dataclass
class Statistics:
    files_checked: int = 0
    files_changed: int = 0
    files_created: int = 0
    files_overwritten: int = 0
    directories_checked: int = 0
    # only directories actually made on disk, not ones that already existed
    directories_created: int = 0
    bytes_checked: int = 0
    bytes_written: int = 0

    def summary_lines(self) -> list[str]:
        return [
            f"Checked {self.files_checked} files for {self.bytes_checked} bytes in {self.directories_checked} directories",
            f"Created {self.files_created} files and {self.directories_created} directories, overwrote {self.files_overwritten} files",
            f"Wrote {self.bytes_written} bytes in {self.files_changed} files",
        ]


class CancelState(enum.Enum):
    RUNNING = "running"
    CANCEL_REQUESTED = "cancel_requested"


class CancelToken:
    """
    Cooperative two-stage cancellation.
    The first request() is graceful and returns True; any later call returns
    False so the caller can escalate to a forced exit.
    """

    def __init__(self) -> None:
        self.state = CancelState.RUNNING
        self._event = threading.Event()

    @property
    def requested(self) -> bool:
        return self.state is CancelState.CANCEL_REQUESTED

    def request(self) -> bool:
        if self.state is CancelState.CANCEL_REQUESTED:
            return False
        self.state = CancelState.CANCEL_REQUESTED
        self._event.set()
        return True

    def wait(self, timeout: float) -> bool:
        return self._event.wait(timeout)


@dataclass
class SyncContext:
    logger: logging.Logger
    cancel: CancelToken = field(default_factory=CancelToken)
    exclude: Optional[ExcludeMatcher] = None
    cycle: int = 0
    statistics: Statistics = field(default_factory=Statistics)
    cancel_noticed: bool = False

    def note_cancellation(self) -> None:
        if self.cancel.requested and not self.cancel_noticed:
            self.cancel_noticed = True
            self.logger.info("Cancellation requested, finishing the current sync before exiting")


# -------------------------
# Reconciliation
# -------------------------

def reconcile_file(kfile: TrackedFile, ctx: SyncContext) -> None:
    logger = ctx.logger
    stats = ctx.statistics
    stats.files_checked += 1

    try:
        size = kfile.source_path.stat().st_size
        stats.bytes_checked += size
        digest = md5_file(kfile.source_path)
    except OSError as e:
        log_action(
            logger,
            "SKIP",
            f"Cannot access file {kfile.source_path}: {_describe_os_error(e)}",
            path=kfile.source_path,
            is_dir=False,
            level=logging.ERROR,
        )
        return

    dst = kfile.destination_path
    if dst.is_dir():
        # old mirrored folder of the same name; pruned later this cycle, copied on the next
        log_action(logger, "SKIP", f"Destination {dst} is still a directory, copying next sync", path=dst, is_dir=True)
        return
    if dst.exists():
        if not kfile.digest:
            # first sighting in this process: trust an identical destination instead of copying
            kfile.digest = digest
            try:
                dst_digest = md5_file(dst)
            except OSError as e:
                raise DestinationError(f"Cannot read destination file {dst}: {_describe_os_error(e)}") from e
            if dst_digest == digest:
                logger.debug("Destination already matches source. No changes detected: %s", dst)
                return
        elif kfile.digest == digest:
            logger.debug("Hash matches last known value. No changes detected: %s", dst)
            return
        copy_file(logger, kfile.source_path, dst, "OVERWRITE")
        stats.files_overwritten += 1
    else:
        copy_file(logger, kfile.source_path, dst, "CREATE")
        stats.files_created += 1

    kfile.digest = digest
    stats.bytes_written += size
    stats.files_changed += 1


def list_source(kdir: TrackedDirectory, ctx: SyncContext) -> tuple[list[str], list[str]]:
    files: list[str] = []
    directories: list[str] = []
    for entry in sorted(kdir.source_path.iterdir()):
        if entry.is_symlink():
            ctx.logger.debug("Skipping symlink: %s", entry)
            continue
        is_dir = entry.is_dir()
        if ctx.exclude is not None and ctx.exclude.is_excluded(kdir.relative_path / entry.name, is_dir):
            ctx.logger.debug("Excluded: %s", entry)
            continue
        if is_dir:
            directories.append(entry.name)
        elif entry.is_file():
            files.append(entry.name)
    return files, directories


def create_destination_directory(kdir: TrackedDirectory, ctx: SyncContext) -> None:
    dst = kdir.destination_path
    if dst.is_dir():
        return
    if dst.is_file() or dst.is_symlink():
        log_action(ctx.logger, "DELETE", f"Replacing file with directory: {dst}", path=dst, is_dir=False)
        try:
            dst.unlink()
        except OSError as e:
            log_action(
                ctx.logger,
                "DELETE",
                f"ERROR: Unable to delete file ({dst}): {_describe_os_error(e)}. Exiting.",
                path=dst,
                is_dir=False,
                level=logging.ERROR,
            )
            raise DestinationError(f"Failed to delete file {dst}") from e
    log_action(ctx.logger, "MKDIR", f"Creating directory: {dst}", path=dst, is_dir=True)
    try:
        dst.mkdir()
    except OSError as e:
        log_action(ctx.logger, "MKDIR", f"ERROR mkdir: {dst} | {e}", path=dst, is_dir=True, level=logging.ERROR)
        raise DestinationError(f"Failed to create directory {dst}: {_describe_os_error(e)}") from e
    ctx.statistics.directories_created += 1


def reconcile_directory(kdir: TrackedDirectory, ctx: SyncContext) -> float:
    """
    Reconcile one directory level against the live source and recurse into
    its subdirectories (depth-first). Returns the elapsed seconds.

    Listing failures are soft: the directory's children stay as they are until
    the next cycle. Failing to delete on the destination raises DestinationError.
    """
    start = time.time()
    logger = ctx.logger
    cycle = ctx.cycle
    ctx.statistics.directories_checked += 1

    try:
        files, directories = list_source(kdir, ctx)
    except OSError as e:
        log_action(
            logger,
            "SKIP",
            f"Failed to access {kdir.source_path}: {_describe_os_error(e)}",
            path=kdir.source_path,
            is_dir=True,
            level=logging.ERROR,
        )
        return time.time() - start

    for name in files:
        ctx.note_cancellation()
        kfile, created = kdir.track_file(name, cycle)
        if created:
            logger.debug("New file found: %s", kfile.source_path)
        reconcile_file(kfile, ctx)

    for kfile in kdir.stale_files(cycle):
        dst = kfile.destination_path
        log_action(logger, "DELETE", f"Deleting file: {kdir.relative_path / kfile.name}", path=dst, is_dir=False)
        try:
            dst.unlink(missing_ok=True)
        except OSError as e:
            log_action(
                logger,
                "DELETE",
                f"ERROR: Unable to delete file ({dst}): {_describe_os_error(e)}. Exiting.",
                path=dst,
                is_dir=False,
                level=logging.ERROR,
            )
            raise DestinationError(f"Failed to delete file {dst}") from e
        kdir.forget_file(kfile.name)

    for name in directories:
        child, created = kdir.track_directory(name, cycle)
        if created:
            logger.debug("New directory found: %s", child.source_path)
            create_destination_directory(child, ctx)
        elapsed = reconcile_directory(child, ctx)
        logger.debug("Finished synchronizing directory %s in %.1f milliseconds", child.relative_path, elapsed * 1000)

    for child in kdir.stale_directories(cycle):
        dst = child.destination_path
        log_action(logger, "RMDIR", f"Deleting directory: {child.relative_path}", path=dst, is_dir=True)
        try:
            delete_tree(dst, logger)
        except FileNotFoundError:
            logger.debug("Destination directory already gone: %s", dst)
        except OSError as e:
            log_action(
                logger,
                "RMDIR",
                f"ERROR: Failed to delete directory ({dst}): {_describe_os_error(e)}. Exiting.",
                path=dst,
                is_dir=True,
                level=logging.ERROR,
            )
            raise DestinationError(f"Failed to delete directory {dst}") from e
        kdir.forget_directory(child.relative_path.name)

    return time.time() - start


def run_cycle(root: TrackedDirectory, ctx: SyncContext) -> tuple[Statistics, float]:
    ctx.statistics = Statistics()
    ctx.cancel_noticed = False
    start = time.time()
    reconcile_directory(root, ctx)
    return ctx.statistics, time.time() - start


# -------------------------
# Scheduler
# -------------------------

def install_signal_handlers(token: CancelToken, logger: logging.Logger) -> dict:
    """Route SIGINT/SIGTERM into `token`; a second signal raises KeyboardInterrupt. Returns the previous handlers."""

    def handler(signum, frame):
        if token.request():
            logger.info("CTRL+C pressed, closing after operations complete. Press again to force-quit.")
            return
        logger.warning("Exiting forcefully")
        raise KeyboardInterrupt

    previous = {}
    for name in ("SIGINT", "SIGTERM"):
        signum = getattr(signal, name, None)
        if signum is None:
            continue
        previous[signum] = signal.signal(signum, handler)
    return previous


def restore_signal_handlers(previous: dict) -> None:
    for signum, handler in previous.items():
        if handler is not None:
            signal.signal(signum, handler)


class Scheduler:
    """Owns the shadow tree and the cycle counter; runs one sync per interval until cancelled."""

    def __init__(
        self,
        source: Path,
        destination: Path,
        interval_sec: float,
        logger: logging.Logger,
        cancel: Optional[CancelToken] = None,
        exclude: Optional[ExcludeMatcher] = None,
        max_cycles: Optional[int] = None,
    ):
        self.source = source
        self.destination = destination
        self.interval_sec = float(interval_sec)
        self.logger = logger
        self.max_cycles = max_cycles
        self.root = TrackedDirectory.root(source, destination)
        self.ctx = SyncContext(logger=logger, cancel=cancel or CancelToken(), exclude=exclude)
        self.last_statistics: Optional[Statistics] = None

    @property
    def cancel(self) -> CancelToken:
        return self.ctx.cancel

    @property
    def cycle(self) -> int:
        return self.ctx.cycle

    def run_once(self) -> tuple[Statistics, float]:
        self.ctx.cycle += 1
        now = dt.datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        self.logger.info("Starting sync #%d %s -> %s at %s", self.ctx.cycle, self.source, self.destination, now)
        stats, elapsed = run_cycle(self.root, self.ctx)
        self.last_statistics = stats
        self.report(stats, elapsed)
        return stats, elapsed

    def report(self, stats: Statistics, elapsed: float) -> None:
        self.logger.info("Sync #%d complete in %.3f seconds!", self.ctx.cycle, elapsed)
        if elapsed > self.interval_sec:
            self.logger.warning("Total synchronization time exceeded synchronization interval!")
        elif elapsed >= self.interval_sec * 0.5:
            self.logger.warning("Total synchronization time is more than half of the synchronization interval")
        for line in stats.summary_lines():
            self.logger.info(line)

    def run(self) -> int:
        self.logger.info(
            "Synchronizing from %s into %s every %s seconds", self.source, self.destination, self.interval_sec
        )
        while True:
            if self.cancel.requested:
                self.logger.info("CTRL+C pressed, exiting gracefully")
                return EXIT_OK
            try:
                self.run_once()
            except DestinationError as e:
                self.logger.critical("IO error detected, exiting. Error message: %s", e)
                return EXIT_ERROR
            if self.max_cycles is not None and self.ctx.cycle >= self.max_cycles:
                self.logger.info("Completed %d synchronizations, exiting", self.ctx.cycle)
                return EXIT_OK
            self.cancel.wait(self.interval_sec)


# -------------------------
# Main
# -------------------------

def main(argv: Optional[list[str]] = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    try:
        args = parse_args(argv)
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else EXIT_ERROR

    try:
        cfg = build_config(args)
    except ValueError as e:
        print(f"Config error: {e}", file=sys.stderr)
        return EXIT_ERROR

    previous_handlers: dict = {}
    try:
        try:
            logger = setup_logger(cfg.log_file, verbose=cfg.verbose)
        except OSError as e:
            print(f"Unable to create log file at {cfg.log_file}: {_describe_os_error(e)}", file=sys.stderr)
            return EXIT_ERROR

        logger.info("Starting SimpleSync with arguments: %s", " ".join(argv))
        try:
            source, destination = validate_paths(cfg.source_dir, cfg.destination_dir, logger)
        except ValueError as e:
            logger.error("Config error: %s", e)
            return EXIT_ERROR

        cancel = CancelToken()
        previous_handlers = install_signal_handlers(cancel, logger)
        scheduler = Scheduler(
            source,
            destination,
            cfg.interval_sec,
            logger,
            cancel=cancel,
            exclude=ExcludeMatcher(cfg.exclude) if cfg.exclude else None,
            max_cycles=cfg.max_cycles,
        )
        return scheduler.run()
    except KeyboardInterrupt:
        return EXIT_FORCED
    except LogWriteError as e:
        print(f"CRITICAL: {e}", file=sys.stderr)
        return EXIT_ERROR
    finally:
        restore_signal_handlers(previous_handlers)


if __name__ == "__main__":
    raise SystemExit(main())
