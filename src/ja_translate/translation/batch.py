"""
Batch translation of a directory tree.

Files are collected recursively, filtered by include/exclude globs, and
translated in chunks of ``parallel_limit``; each chunk finishes before the
next one starts.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
import shutil
import time
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any, TypeVar

from ja_translate.config import BatchConfig
from ja_translate.errors import WriteError
from ja_translate.translation.translator import TranslationResult, Translator

logger = logging.getLogger(__name__)

REPORT_FILE_NAME = "translation-report.json"

T = TypeVar("T")

# Called with (files completed, total files) after each chunk
ProgressCallback = Callable[[int, int], None] | None


class FileStatus(str, Enum):
    """Outcome of one file in a batch."""

    SUCCESS = "success"
    FAILURE = "failure"
    SKIPPED = "skipped"


@dataclass
class FileSize:
    """Byte sizes of a source file and its translation."""

    original: int
    translated: int


@dataclass
class BatchFileResult:
    """Result for a single file in a batch run."""

    source_file: str
    output_file: str
    status: FileStatus
    error: str | None = None
    translation_result: TranslationResult | None = None
    processing_time_ms: float = 0.0
    file_size: FileSize | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "source_file": self.source_file,
            "output_file": self.output_file,
            "status": self.status.value,
            "error": self.error,
            "translation_result": (
                self.translation_result.to_dict() if self.translation_result else None
            ),
            "processing_time_ms": round(self.processing_time_ms, 2),
            "file_size": (
                {"original": self.file_size.original, "translated": self.file_size.translated}
                if self.file_size
                else None
            ),
        }


@dataclass
class BatchReport:
    """Aggregate result of a batch run."""

    total_files: int = 0
    success_count: int = 0
    failure_count: int = 0
    skipped_count: int = 0
    results: list[BatchFileResult] = field(default_factory=list)
    start_time: str = ""
    end_time: str = ""
    duration_ms: float = 0.0
    config: dict[str, Any] | None = None

    @property
    def failed(self) -> bool:
        return self.failure_count > 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_files": self.total_files,
            "success_count": self.success_count,
            "failure_count": self.failure_count,
            "skipped_count": self.skipped_count,
            "results": [result.to_dict() for result in self.results],
            "start_time": self.start_time,
            "end_time": self.end_time,
            "duration_ms": round(self.duration_ms, 2),
            "config": self.config,
        }


@lru_cache(maxsize=256)
def glob_to_regex(pattern: str) -> re.Pattern[str]:
    """
    Compile a glob to an anchored regex.

    ``**`` matches anything including ``/``; ``*`` matches a run of
    non-separator characters. Everything else is literal.
    """
    parts = []
    for segment in pattern.split("**"):
        parts.append("[^/]*".join(re.escape(piece) for piece in segment.split("*")))
    return re.compile(".*".join(parts))


def matches_any(candidate: str, patterns: Sequence[str]) -> bool:
    """True if the candidate fully matches at least one glob."""
    return any(glob_to_regex(pattern).fullmatch(candidate) for pattern in patterns)


def localized_path(path: Path, locale: str) -> Path:
    """Insert the locale before the extension: guide.md -> guide.ja.md."""
    if path.suffix:
        return path.with_name(f"{path.stem}.{locale}{path.suffix}")
    return path.with_name(f"{path.name}.{locale}")


def chunked(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    """Split items into consecutive chunks of at most ``size``."""
    for i in range(0, len(items), size):
        yield items[i : i + size]


class BatchTranslator:
    """Translates every matching file under a source directory."""

    def __init__(
        self,
        translator: Translator,
        config: BatchConfig,
        *,
        locale: str = "ja",
        progress_callback: ProgressCallback = None,
    ):
        """
        Initialize batch translator.

        Args:
            translator: Translator shared by all files.
            config: Batch configuration.
            locale: Marker inserted before the output file extension.
            progress_callback: Called after each chunk with (done, total).
        """
        self.translator = translator
        self.config = config
        self.locale = locale
        self._progress_callback = progress_callback
        self.source_dir = Path(config.source_dir).expanduser().resolve()
        self.output_dir = Path(config.output_dir).expanduser().resolve()

    def collect_files(self) -> list[Path]:
        """
        Find files to translate, in sorted order.

        A missing source directory yields no files. Errors while reading an
        existing directory propagate.
        """
        if not self.source_dir.exists():
            logger.warning("Source directory not found: %s", self.source_dir)
            return []
        if not self.source_dir.is_dir():
            raise NotADirectoryError(f"Not a directory: {self.source_dir}")

        return list(self._walk(self.source_dir))

    def _walk(self, directory: Path) -> Iterator[Path]:
        for entry in sorted(directory.iterdir(), key=lambda p: p.name):
            relative = entry.relative_to(self.source_dir).as_posix()

            if entry.is_dir():
                if entry.resolve() == self.output_dir:
                    continue
                if self._is_excluded(relative, entry.name, directory=True):
                    continue
                yield from self._walk(entry)
            elif entry.is_file():
                if self._is_excluded(relative, entry.name):
                    continue
                if matches_any(entry.name, self.config.file_patterns) or matches_any(
                    relative, self.config.file_patterns
                ):
                    yield entry

    def _is_excluded(self, relative: str, name: str, directory: bool = False) -> bool:
        patterns = self.config.exclude_patterns
        if matches_any(relative, patterns) or matches_any(name, patterns):
            return True
        # "node_modules/**" should prune the directory itself
        return directory and matches_any(f"{relative}/", patterns)

    def output_path_for(self, source_file: Path) -> Path:
        """
        Mirror the source layout under the output directory.

        The path is taken relative to the source directory as found, so a
        symlinked file keeps its own name even when its target lives
        elsewhere.

        Raises:
            ValueError: If the file is not under the source directory.
        """
        source_file = Path(source_file).absolute()
        try:
            relative = source_file.relative_to(self.source_dir)
        except ValueError:
            relative = source_file.resolve().relative_to(self.source_dir)
        return self.output_dir / localized_path(relative, self.locale)

    async def translate_one(self, source_file: Path) -> BatchFileResult:
        """Translate one file. Never raises; errors become a failure result."""
        start_time = time.perf_counter()
        result = BatchFileResult(
            source_file=str(source_file),
            output_file="",
            status=FileStatus.FAILURE,
        )

        try:
            output_file = self.output_path_for(source_file)
            result.output_file = str(output_file)

            if output_file.exists() and not self.config.overwrite_existing:
                result.status = FileStatus.SKIPPED
                result.error = "File already exists and overwrite is disabled"
                logger.info("Skipped (exists): %s", output_file)
            else:
                if self.config.create_backup and output_file.exists():
                    self._backup(output_file)

                translation = await self.translator.translate_file(
                    source_file, output_file, self.config.options
                )
                result.status = FileStatus.SUCCESS
                result.translation_result = translation
                result.file_size = FileSize(
                    original=source_file.stat().st_size,
                    translated=output_file.stat().st_size,
                )
                logger.info("Translated: %s -> %s", source_file, output_file)

        except Exception as e:
            result.status = FileStatus.FAILURE
            result.error = str(e)
            logger.error("Failed to translate %s: %s", source_file, e)

        result.processing_time_ms = (time.perf_counter() - start_time) * 1000
        return result

    def _backup(self, output_file: Path) -> Path:
        backup = output_file.with_name(f"{output_file.name}.backup.{int(time.time() * 1000)}")
        try:
            shutil.copy2(output_file, backup)
        except OSError as e:
            raise WriteError(f"Cannot back up {output_file}: {e}") from e
        logger.info("Backup created: %s", backup)
        return backup

    async def run(self) -> BatchReport:
        """
        Translate all matching files.

        Returns:
            Completed BatchReport. Per-file errors are recorded, not raised.
        """
        start_time = time.perf_counter()
        report = BatchReport(
            start_time=datetime.now(timezone.utc).isoformat(),
            config=self.config.model_dump(mode="json", by_alias=True),
        )

        files = self.collect_files()
        report.total_files = len(files)
        logger.info("Found %d files to translate in %s", len(files), self.source_dir)

        for chunk in chunked(files, self.config.parallel_limit):
            chunk_results = await asyncio.gather(*(self.translate_one(f) for f in chunk))
            report.results.extend(chunk_results)

            if self._progress_callback:
                self._progress_callback(len(report.results), len(files))

        report.success_count = sum(r.status == FileStatus.SUCCESS for r in report.results)
        report.failure_count = sum(r.status == FileStatus.FAILURE for r in report.results)
        report.skipped_count = sum(r.status == FileStatus.SKIPPED for r in report.results)
        report.end_time = datetime.now(timezone.utc).isoformat()
        report.duration_ms = (time.perf_counter() - start_time) * 1000

        return report

    def write_report(self, report: BatchReport, path: Path | str | None = None) -> Path:
        """
        Save the report as JSON.

        Defaults to ``report_path`` from the config, else
        ``translation-report.json`` in the output directory.
        """
        report_path = Path(path or self.config.report_path or self.output_dir / REPORT_FILE_NAME)
        try:
            report_path.parent.mkdir(parents=True, exist_ok=True)
            report_path.write_text(
                json.dumps(report.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8"
            )
        except OSError as e:
            raise WriteError(f"Cannot write report to {report_path}: {e}") from e
        return report_path
