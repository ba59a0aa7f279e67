#!/usr/bin/env python3
"""
Code Extractor - pull source files out of a ZIP archive into one text report

Pipeline:
- Open the archive and enumerate its entries in central-directory order
- Keep non-directory entries with a recognized source-code extension
- Read each candidate as text, one at a time, in a worker thread
- Concatenate formatted per-file blocks into a single report
- Write the report atomically into the output directory (or to stdout)
"""

import argparse
import asyncio
import codecs
import io
import logging
import lzma
import os
import re
import shutil
import signal
import sys
import tempfile
import time
import traceback
import types
import zipfile
import zlib
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from rich.console import Console
from rich.markup import escape
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from tqdm import tqdm


__version__ = "1.0.0"
__author__ = "Code Extractor Project"
__license__ = "MIT"


# Async helper for running blocking I/O in thread pool
async def run_in_thread(func: Callable[..., Any], *args, **kwargs) -> Any:
    """Run a blocking function in a worker thread, yielding to the event loop."""
    return await asyncio.to_thread(func, *args, **kwargs)


# Recognized source-code extensions. Only the keys matter for filtering.
CODE_EXTENSIONS = types.MappingProxyType(
    {
        ".html": "HTML",
        ".htm": "HTML",
        ".css": "CSS",
        ".js": "JavaScript",
        ".jsx": "JavaScript (JSX)",
        ".ts": "TypeScript",
        ".tsx": "TypeScript (TSX)",
        ".php": "PHP",
        ".py": "Python",
        ".java": "Java",
        ".cpp": "C++",
        ".c": "C",
        ".cs": "C#",
        ".rb": "Ruby",
        ".go": "Go",
        ".rs": "Rust",
        ".swift": "Swift",
        ".kt": "Kotlin",
        ".scala": "Scala",
        ".pl": "Perl",
        ".sh": "Shell",
        ".bash": "Bash",
        ".zsh": "Zsh",
        ".sql": "SQL",
        ".xml": "XML",
        ".json": "JSON",
        ".yaml": "YAML",
        ".yml": "YAML",
        ".md": "Markdown",
        ".txt": "Text",
        ".vue": "Vue",
        ".svelte": "Svelte",
        ".r": "R",
        ".m": "Objective-C / MATLAB",
        ".scss": "SCSS",
        ".less": "Less",
        ".styl": "Stylus",
    }
)

BLOCK_SEPARATOR = "// ============================================"
OUTPUT_SUFFIX = "_extracted_codes"
OUTPUT_EXTENSION = ".txt"


class CodeExtractorError(Exception):
    """Base exception for code extractor errors"""

    pass


class InvalidArchiveError(CodeExtractorError):
    """The input cannot be parsed as a ZIP archive at all"""

    pass


class EntryDecodeError(CodeExtractorError):
    """A single archive entry cannot be read as text"""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Cannot read {path}: {reason}")
        self.path = path
        self.reason = reason


class NoCodeFilesFoundError(CodeExtractorError):
    """The archive parsed but holds no recognized source files"""

    def __init__(self, result: "ExtractionResult"):
        super().__init__("No code files found in the archive")
        self.result = result


def extension_of(path: str) -> str:
    """Return the lowercased substring from the last dot, or "" without one."""
    lowered = path.lower()
    index = lowered.rfind(".")
    if index == -1:
        return ""
    return lowered[index:]


def is_code_file(path: str) -> bool:
    """Check whether a path ends in a registered source-code extension.

    The rule is literal: whatever follows the last dot of the whole path is
    the extension. ``.gitignore`` is therefore its own extension and is not
    registered, and ``pkg.v2/Makefile`` yields ``.v2/makefile``.
    """
    ext = extension_of(path)
    return bool(ext) and ext in CODE_EXTENSIONS


def validate_archive_name(name: str) -> None:
    """Reject selections that are not named like ZIP archives"""
    if not name or not name.lower().endswith(".zip"):
        raise CodeExtractorError(f"Please choose a ZIP archive (got: {name!r})")


def parse_size(size_str: str) -> int:
    """Parse human-readable size to bytes with validation"""
    if not isinstance(size_str, str):
        raise ValueError(f"Size must be a string, got {type(size_str)}")

    size_str = size_str.upper().strip()
    if size_str.endswith("B"):
        size_str = size_str[:-1]

    match = re.match(r"^(\d*\.?\d+)([KMGT]?)$", size_str)
    if not match:
        raise ValueError(f"Invalid size format: {size_str}")

    number, unit = match.groups()
    multipliers = {"": 1, "K": 1024, "M": 1024**2, "G": 1024**3, "T": 1024**4}
    return int(float(number) * multipliers[unit])


def format_size(size: int) -> str:
    """Format size in human-readable format"""
    if size < 0:
        return "0B"

    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if size < 1024.0:
            return f"{size:.1f}{unit}"
        size /= 1024.0
    return f"{size:.1f}PB"


@dataclass(frozen=True)
class ArchiveEntry:
    """One file or directory record inside an opened archive"""

    path: str
    is_directory: bool
    size: int
    _zip: zipfile.ZipFile = field(repr=False, compare=False)
    _info: zipfile.ZipInfo = field(repr=False, compare=False)

    def read_bytes(self) -> bytes:
        try:
            return self._zip.read(self._info)
        except zipfile.BadZipFile as e:
            raise EntryDecodeError(self.path, f"corrupt member ({e})") from e
        except NotImplementedError as e:
            raise EntryDecodeError(self.path, f"unsupported compression ({e})") from e
        except RuntimeError as e:
            # zipfile raises RuntimeError for encrypted members without a password
            raise EntryDecodeError(self.path, str(e)) from e
        except (zlib.error, lzma.LZMAError) as e:
            raise EntryDecodeError(self.path, f"corrupt member data ({e})") from e
        except (OSError, EOFError, ValueError) as e:
            raise EntryDecodeError(self.path, str(e)) from e

    def read_text(self, encoding: str = "utf-8", errors: str = "strict") -> str:
        data = self.read_bytes()
        try:
            return data.decode(encoding, errors)
        except UnicodeDecodeError as e:
            raise EntryDecodeError(self.path, f"not valid {encoding} text") from e
        except LookupError as e:
            raise EntryDecodeError(self.path, f"unknown encoding {encoding!r}") from e


class ZipArchive:
    """Opened ZIP archive handle; use as a context manager."""

    def __init__(self, zip_file: zipfile.ZipFile):
        self._zip = zip_file

    def list_entries(self) -> List[ArchiveEntry]:
        return [
            ArchiveEntry(
                path=info.filename,
                is_directory=info.is_dir(),
                size=info.file_size,
                _zip=self._zip,
                _info=info,
            )
            for info in self._zip.infolist()
        ]

    @property
    def total_entries(self) -> int:
        return len(self._zip.infolist())

    def close(self) -> None:
        self._zip.close()

    def __enter__(self) -> "ZipArchive":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def open_archive(source: Union[bytes, str, Path]) -> ZipArchive:
    """Open ZIP bytes or a ZIP file path, raising InvalidArchiveError on failure"""
    try:
        if isinstance(source, (bytes, bytearray)):
            zip_file = zipfile.ZipFile(io.BytesIO(source))
        else:
            zip_file = zipfile.ZipFile(Path(source))
    except zipfile.BadZipFile as e:
        raise InvalidArchiveError(f"Not a valid ZIP archive: {e}") from e
    except (OSError, EOFError, ValueError) as e:
        raise InvalidArchiveError(f"Cannot open archive: {e}") from e

    return ZipArchive(zip_file)


def format_block(path: str, content: str) -> str:
    """Render the report block for one successfully read file"""
    return (
        f"{BLOCK_SEPARATOR}\n"
        f"// 📁 File: {path}\n"
        f"{BLOCK_SEPARATOR}\n"
        "\n"
        f"{content}\n\n\n"
    )


def format_timestamp(moment: Optional[datetime] = None) -> str:
    """Timestamp safe for file names, e.g. 2024-05-01T13-45-00"""
    moment = moment or datetime.now()
    return moment.strftime("%Y-%m-%dT%H-%M-%S")


def build_output_filename(original_name: str, timestamp: Optional[str] = None) -> str:
    """Derive the report file name from the archive name.

    A trailing ``.zip`` (exact, case-sensitive) is stripped; any other name
    is used unmodified. The fixed suffix, the optional timestamp and the
    ``.txt`` extension are appended.
    """
    stem = original_name[: -len(".zip")] if original_name.endswith(".zip") else original_name
    name = f"{stem}{OUTPUT_SUFFIX}"
    if timestamp:
        name += f"_{timestamp}"
    return name + OUTPUT_EXTENSION


def compute_percentage(processed: int, total: int) -> int:
    """round(100 * processed / total), halves rounded up"""
    if total <= 0:
        return 0
    return (200 * processed + total) // (2 * total)


@dataclass(frozen=True)
class ProgressUpdate:
    processed: int
    total: int
    percentage: int


@dataclass(frozen=True)
class EntryResult:
    path: str
    succeeded: bool
    error: Optional[str] = None


@dataclass(frozen=True)
class ExtractionResult:
    """Outcome of one pipeline run; entries follow archive order."""

    aggregated_text: str
    entries: Tuple[EntryResult, ...]
    total_entries: int = 0

    @property
    def succeeded_count(self) -> int:
        return sum(1 for entry in self.entries if entry.succeeded)

    @property
    def failed_count(self) -> int:
        return sum(1 for entry in self.entries if not entry.succeeded)

    @property
    def has_content(self) -> bool:
        return bool(self.aggregated_text)


class ExtractionRun:
    """Accumulator owned by a single pipeline run"""

    def __init__(self, total_entries: int = 0):
        self.total_entries = total_entries
        self._buffer = io.StringIO()
        self._entries: List[EntryResult] = []
        self._finished = False

    def record_success(self, path: str, content: str) -> None:
        self._check_open()
        self._buffer.write(format_block(path, content))
        self._entries.append(EntryResult(path=path, succeeded=True))

    def record_failure(self, path: str, reason: str) -> None:
        self._check_open()
        self._entries.append(EntryResult(path=path, succeeded=False, error=reason))

    @property
    def processed(self) -> int:
        return len(self._entries)

    def finish(self) -> ExtractionResult:
        self._finished = True
        return ExtractionResult(
            aggregated_text=self._buffer.getvalue(),
            entries=tuple(self._entries),
            total_entries=self.total_entries,
        )

    def _check_open(self) -> None:
        if self._finished:
            raise CodeExtractorError("Extraction run already finished")


def select_candidates(entries: List[ArchiveEntry]) -> List[ArchiveEntry]:
    """Non-directory entries with a recognized extension, in archive order"""
    return [
        entry for entry in entries if not entry.is_directory and is_code_file(entry.path)
    ]


async def run_pipeline(
    archive: ZipArchive,
    on_progress: Optional[Callable[[ProgressUpdate], None]] = None,
    *,
    encoding: str = "utf-8",
    errors: str = "strict",
    max_entry_size: Optional[int] = None,
    logger: Optional[logging.Logger] = None,
) -> ExtractionResult:
    """Extract every candidate entry of an opened archive into one report.

    Entries are read strictly one after another; each read runs in a worker
    thread so the caller's event loop stays responsive between entries. A
    failing entry is recorded and skipped, it never aborts the run.

    Raises:
        NoCodeFilesFoundError: the archive holds no candidate entries
    """
    logger = logger or logging.getLogger("code_extractor")

    entries = archive.list_entries()
    candidates = select_candidates(entries)
    logger.info(
        f"Found {len(candidates)} code files out of {len(entries)} total entries"
    )

    run = ExtractionRun(total_entries=len(entries))
    if not candidates:
        raise NoCodeFilesFoundError(run.finish())

    total = len(candidates)
    for entry in candidates:
        if max_entry_size is not None and entry.size > max_entry_size:
            reason = f"too large ({format_size(entry.size)})"
            logger.error(f"Skipping {entry.path}: {reason}")
            run.record_failure(entry.path, reason)
        else:
            try:
                content = await run_in_thread(entry.read_text, encoding, errors)
            except EntryDecodeError as e:
                logger.error(f"Error processing file {entry.path}: {e.reason}")
                run.record_failure(entry.path, e.reason)
            else:
                run.record_success(entry.path, content)
                logger.debug(f"Extracted {entry.path} ({format_size(entry.size)})")

        if on_progress is not None:
            on_progress(
                ProgressUpdate(
                    processed=run.processed,
                    total=total,
                    percentage=compute_percentage(run.processed, total),
                )
            )

    return run.finish()


class CodeExtractor:
    """Terminal front end: drives the pipeline and renders its outcome"""

    PROGRESS_STYLES = ("rich", "tqdm", "plain")
    DECODE_ERRORS = ("strict", "replace")

    def __init__(self, config: Optional[Dict] = None):
        self.config = config or {}

        # Initialize temporary files list first (needed for cleanup in case of early errors)
        self._temp_files: List[str] = []

        # Rendering goes to stderr when the report itself is streamed to stdout
        self.console = Console(stderr=self.config.get("report_to_stdout", False))
        self.logger = self._setup_logging()

        self.output_dir = Path(self.config.get("output_dir", "."))
        self.use_timestamp = self.config.get("timestamp", True)
        self.encoding = self.config.get("encoding", "utf-8")
        try:
            codecs.lookup(self.encoding)
        except LookupError as e:
            raise CodeExtractorError(f"Unknown encoding: {self.encoding}") from e
        self.decode_errors = self.config.get("decode_errors", "strict")
        if self.decode_errors not in self.DECODE_ERRORS:
            raise CodeExtractorError(
                f"decode_errors must be one of {', '.join(self.DECODE_ERRORS)}"
            )

        max_entry_size = self.config.get("max_entry_size", "50M")
        try:
            self.max_entry_size = (
                parse_size(str(max_entry_size)) if max_entry_size else None
            )
        except ValueError as e:
            raise CodeExtractorError(f"Invalid max_entry_size: {e}") from e

        self.progress_style = self.config.get("progress_style", "rich")
        if self.progress_style not in self.PROGRESS_STYLES:
            raise CodeExtractorError(
                f"progress_style must be one of {', '.join(self.PROGRESS_STYLES)}"
            )

        self.dry_run = self.config.get("dry_run", False)
        self.verbose = self.config.get("verbose", False)

        # TTY detection for progress bars (disable in non-interactive terminals like CI/CD)
        self.is_tty = sys.stdout.isatty()

        self._setup_signal_handlers()

    def _setup_logging(self) -> logging.Logger:
        """Setup structured logging"""
        level = logging.DEBUG if self.config.get("verbose") else logging.INFO

        logger = logging.getLogger("code_extractor")
        logger.setLevel(level)

        # Avoid duplicate handlers
        if not logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                "%(asctime)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
            )
            handler.setFormatter(formatter)
            logger.addHandler(handler)

        return logger

    def _setup_signal_handlers(self):
        """Remove half-written reports when interrupted"""

        def signal_handler(signum, frame):
            self.logger.warning("Received interrupt signal, cleaning up...")
            self._cleanup_temp_files()
            sys.exit(130)  # 128 + SIGINT (2)

        try:
            signal.signal(signal.SIGINT, signal_handler)
            signal.signal(signal.SIGTERM, signal_handler)
        except (ValueError, OSError):
            # Only the main thread may install handlers
            pass

    def _open(self, archive_path: Union[str, Path]) -> ZipArchive:
        archive_path = Path(archive_path)
        validate_archive_name(archive_path.name)
        if not archive_path.exists():
            raise CodeExtractorError(f"Archive does not exist: {archive_path}")
        if not archive_path.is_file():
            raise CodeExtractorError(f"Archive is not a file: {archive_path}")
        return open_archive(archive_path)

    async def extract(
        self, archive_path: Union[str, Path], progress: bool = True
    ) -> ExtractionResult:
        """Run the pipeline over one archive file and render the file list.

        Raises:
            CodeExtractorError: bad selection or missing file
            InvalidArchiveError: the file is not a readable ZIP archive
            NoCodeFilesFoundError: nothing in the archive is a code file
        """
        start_time = time.time()
        self.logger.info(f"Processing archive: {archive_path}")

        with self._open(archive_path) as archive:
            result = await self._run_with_progress(archive, progress)

        self._render_file_list(result)

        elapsed = time.time() - start_time
        self.logger.info(
            f"Extracted {result.succeeded_count} of {len(result.entries)} code files"
        )
        if result.failed_count:
            self.logger.warning(f"Failed: {result.failed_count}")
        self.logger.info(
            f"Report size: {format_size(len(result.aggregated_text.encode('utf-8')))}"
        )
        self.logger.info(f"Processing time: {elapsed:.2f}s")
        return result

    async def _run_with_progress(
        self, archive: ZipArchive, progress: bool
    ) -> ExtractionResult:
        options = dict(
            encoding=self.encoding,
            errors=self.decode_errors,
            max_entry_size=self.max_entry_size,
            logger=self.logger,
        )
        # Disable rich/tqdm progress bars in non-TTY environments (CI/CD)
        use_rich = progress and self.progress_style == "rich" and self.is_tty
        use_tqdm = progress and self.progress_style == "tqdm" and self.is_tty

        if use_rich:
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                BarColumn(),
                MofNCompleteColumn(),
                TimeElapsedColumn(),
                console=self.console,
            ) as progress_bar:
                task = progress_bar.add_task("Extracting code files", total=None)

                def on_progress(update: ProgressUpdate) -> None:
                    progress_bar.update(
                        task, completed=update.processed, total=update.total
                    )

                return await run_pipeline(archive, on_progress, **options)

        if use_tqdm:
            pbar = None

            def on_progress(update: ProgressUpdate) -> None:
                nonlocal pbar
                if pbar is None:
                    pbar = tqdm(
                        total=update.total, desc="Extracting code files", unit="files"
                    )
                pbar.update(1)

            try:
                return await run_pipeline(archive, on_progress, **options)
            finally:
                if pbar is not None:
                    pbar.close()

        if progress:

            def on_progress(update: ProgressUpdate) -> None:
                print(f"{update.percentage}% ({update.processed} of {update.total})")

            return await run_pipeline(archive, on_progress, **options)

        return await run_pipeline(archive, **options)

    def _render_file_list(self, result: ExtractionResult) -> None:
        for entry in result.entries:
            if entry.succeeded:
                self.console.print(
                    f"  [green]✓[/green] {escape(entry.path)}", highlight=False
                )
            else:
                self.console.print(
                    f"  [red]✗[/red] {escape(entry.path)} [red](processing error)[/red]",
                    highlight=False,
                )
                if self.verbose and entry.error:
                    self.console.print(f"      {escape(entry.error)}", highlight=False)

    def dry_run_archive(self, archive_path: Union[str, Path]) -> int:
        """List what would be extracted without reading any content.

        Returns the number of candidate entries.
        """
        self.logger.info("DRY RUN - Files that would be extracted:")

        with self._open(archive_path) as archive:
            entries = archive.list_entries()

        candidates = 0
        total_size = 0
        for entry in entries:
            if entry.is_directory:
                continue
            if is_code_file(entry.path):
                candidates += 1
                total_size += entry.size
                label = CODE_EXTENSIONS[extension_of(entry.path)]
                self.console.print(
                    f"  [green]✓[/green] {escape(entry.path)} "
                    f"([blue]{format_size(entry.size)}[/blue], [yellow]{label}[/yellow])",
                    highlight=False,
                )
            elif self.verbose:
                self.console.print(
                    f"  [red]✗[/red] {escape(entry.path)} (not a code file)",
                    highlight=False,
                )

        self.console.print("\n[bold]Summary:[/bold]")
        self.console.print(
            f"  Would extract: [green]{candidates}[/green] files "
            f"([blue]{format_size(total_size)}[/blue])",
            highlight=False,
        )
        self.console.print(f"  Total entries: {len(entries)}", highlight=False)
        return candidates

    def report_filename(self, archive_path: Union[str, Path]) -> str:
        timestamp = format_timestamp() if self.use_timestamp else None
        return build_output_filename(Path(archive_path).name, timestamp)

    def write_report(
        self, text: str, output_dir: Union[str, Path], filename: str
    ) -> Path:
        """Write the report atomically and return its final path"""
        if not text:
            raise CodeExtractorError("Nothing to download: the report is empty")

        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        if not os.access(output_dir, os.W_OK):
            raise CodeExtractorError(f"Cannot write to output directory: {output_dir}")

        output_path = output_dir / filename
        try:
            # Write to a temporary file in the target directory first
            with tempfile.NamedTemporaryFile(
                mode="w",
                suffix=".tmp",
                dir=output_dir,
                delete=False,
                encoding="utf-8",
                newline="",
            ) as temp_file:
                self._temp_files.append(temp_file.name)
                temp_file.write(text)

            # Atomic move to final location
            shutil.move(temp_file.name, output_path)
            self._temp_files.remove(temp_file.name)
        except OSError as e:
            self.logger.error(f"Error writing report: {e}")
            self._cleanup_temp_files()
            raise CodeExtractorError(f"Cannot write report: {e}") from e

        self.logger.info(f"Output: {output_path}")
        return output_path

    def _cleanup_temp_files(self):
        """Clean up any temporary files"""
        for temp_item in self._temp_files[:]:
            try:
                temp_path = Path(temp_item)
                if temp_path.exists():
                    temp_path.unlink()
                self._temp_files.remove(temp_item)
            except (OSError, PermissionError):
                pass

    def __del__(self):
        """Destructor to ensure cleanup"""
        if hasattr(self, "_temp_files"):
            self._cleanup_temp_files()


def create_config_file(config_path: Path) -> bool:
    """Create a default configuration file"""
    default_config = """# Code Extractor Configuration
# Uncomment and modify values as needed

# Directory the report is written to
# output_dir = "."

# Append a timestamp to the report file name
# timestamp = true

# Text encoding used to read archive entries
# encoding = "utf-8"

# How undecodable bytes are handled: "strict" marks the file as failed,
# "replace" substitutes U+FFFD and keeps the file
# decode_errors = "strict"

# Entries larger than this are reported as failed without being read
# max_entry_size = "50M"

# Progress display in interactive terminals: rich, tqdm or plain
# progress_style = "rich"

# verbose = false
"""

    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w") as f:
            f.write(default_config)
        return True
    except (OSError, PermissionError) as e:
        print(f"Error creating config file: {e}", file=sys.stderr)
        return False


def load_config_file(config_path: Path) -> Dict:
    """Load configuration from file with error handling"""
    if not config_path.exists():
        return {}

    config = {}
    line_num = 0
    try:
        with open(config_path, "r") as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line or line.startswith("#"):
                    continue

                if "=" in line:
                    key, value = line.split("=", 1)
                    key = key.strip()
                    value = value.strip().strip("\"'")

                    if value.lower() in ("true", "false"):
                        config[key] = value.lower() == "true"
                    elif value.isdigit():
                        config[key] = int(value)
                    else:
                        config[key] = value

    except (OSError, UnicodeDecodeError) as e:
        print(
            f"Warning: Error loading config file on line {line_num}: {e}",
            file=sys.stderr,
        )

    return config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="code-extractor",
        description="Extract source files from a ZIP archive into one text report",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Write project_extracted_codes_<timestamp>.txt into the current directory
  %(prog)s project.zip

  # Choose the output directory and drop the timestamp
  %(prog)s project.zip -o reports --no-timestamp

  # Print the report instead of writing a file
  %(prog)s project.zip --stdout --no-progress

  # Preview which entries would be extracted
  %(prog)s project.zip --dry-run --verbose
        """,
    )

    parser.add_argument("archive", nargs="?", help="ZIP archive to extract code from")

    parser.add_argument("-o", "--output-dir", default=None, help="Output directory")
    parser.add_argument(
        "--stdout", action="store_true", help="Write the report to standard output"
    )
    parser.add_argument(
        "--no-timestamp",
        action="store_true",
        default=None,
        help="Do not append a timestamp to the report name",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    parser.add_argument(
        "-n", "--dry-run", action="store_true", help="Show what would be extracted"
    )
    parser.add_argument(
        "--no-progress", action="store_true", help="Disable progress display"
    )
    parser.add_argument(
        "--progress-style",
        choices=CodeExtractor.PROGRESS_STYLES,
        default=None,
        help="Progress display in interactive terminals",
    )
    parser.add_argument("--encoding", default=None, help="Text encoding of entries")
    parser.add_argument(
        "--decode-errors",
        choices=CodeExtractor.DECODE_ERRORS,
        default=None,
        help="strict marks undecodable files as failed, replace keeps them",
    )
    parser.add_argument(
        "-s", "--max-size", default=None, help="Maximum entry size (e.g. 10M)"
    )
    parser.add_argument(
        "--list-extensions",
        action="store_true",
        help="List recognized source-code extensions and exit",
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=Path.home() / ".config" / "code-extractor" / "config",
        help="Configuration file path",
    )
    parser.add_argument(
        "--create-config", action="store_true", help="Create default config"
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    return parser


async def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point with comprehensive error handling"""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        if args.create_config:
            if create_config_file(args.config):
                print(f"Created default configuration file: {args.config}")
                return 0
            print(f"Failed to create configuration file: {args.config}", file=sys.stderr)
            return 1

        if args.list_extensions:
            for ext, label in CODE_EXTENSIONS.items():
                print(f"{ext:<8} {label}")
            return 0

        if not args.archive:
            parser.error("archive is required")

        config = load_config_file(args.config)

        # Command line flags override config file values only when given
        overrides = {
            "output_dir": args.output_dir,
            "encoding": args.encoding,
            "decode_errors": args.decode_errors,
            "max_entry_size": args.max_size,
            "progress_style": args.progress_style,
            "timestamp": False if args.no_timestamp else None,
            "verbose": args.verbose or None,
            "dry_run": args.dry_run or None,
            "report_to_stdout": args.stdout or None,
        }
        config.update({k: v for k, v in overrides.items() if v is not None})

        extractor = CodeExtractor(config)

        if extractor.dry_run:
            extractor.dry_run_archive(args.archive)
            return 0

        progress = not args.no_progress and not args.stdout
        result = await extractor.extract(args.archive, progress=progress)

        if not result.has_content:
            print("Nothing to download: no file could be read", file=sys.stderr)
            return 1

        if args.stdout:
            sys.stdout.write(result.aggregated_text)
        else:
            extractor.write_report(
                result.aggregated_text,
                extractor.output_dir,
                extractor.report_filename(args.archive),
            )

        return 0

    except KeyboardInterrupt:
        print("\nOperation cancelled by user", file=sys.stderr)
        return 130
    except NoCodeFilesFoundError:
        print("No code files were found in the archive", file=sys.stderr)
        return 1
    except InvalidArchiveError as e:
        print(
            f"Error: could not process the archive, make sure it is a valid "
            f"and undamaged ZIP file ({e})",
            file=sys.stderr,
        )
        return 1
    except CodeExtractorError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        if args.verbose:
            traceback.print_exc()
        return 1


def cli_main():
    """Synchronous entry point for console scripts"""
    return asyncio.run(main())


if __name__ == "__main__":
    sys.exit(cli_main())
