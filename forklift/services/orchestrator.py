from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, TypeVar

from ..errors import ImportRejected, UnknownFieldError, ValidationError
from ..excel.reader import ExcelReader
from ..logging.error_log import ErrorLogBuffer
from ..models.batch_result import BatchResult, FileStat
from ..models.config_models import ImportConfig
from ..models.error_record import FILE_LEVEL_ROW, UNEXPECTED_ERROR, ErrorRecord
from ..models.import_data import ImportData
from ..models.import_outcome import ImportOutcome, ImportStage, ImportStatus
from ..storage.record_store import YamlRecordStore
from .collaborators import Converter, LoggingNotifier, ManualImporter, Notifier, Reader, RecordStore, Validator
from .paths import DestinationResolver, check_format, check_root, is_importable_file, normalize_source_path
from .progress import ImportProgress
from .registry import Pipeline, match_pipeline, resolve_pipeline
from .validation import ValidationRunner

"""Import orchestration.

ImportProcessor runs one source file through the import state machine:

    FORMAT_CHECK → ROOT_CHECK → READ → VALIDATE → RESOLVE_DESTINATION → CONVERT → DONE

Format, root, read and validation failures are rejections: they are reported
to the notifier and the error log and the call returns a REJECTED outcome.
Nothing reaches the converter unless every record is valid. Errors raised by
user code (UnknownFieldError included) propagate unchanged.

process_all() drives a whole directory through the configured pipelines. There
any other per-file failure (store, converter) becomes an UNEXPECTED_ERROR
rejection, and the error log and dirty records are written even if the run
stops early.
"""

__all__ = [
    "ProcessingError",
    "ImportProcessor",
    "import_asset",
    "scan_source_files",
    "process_all",
]

T = TypeVar("T")

logger = logging.getLogger(__name__)


class ProcessingError(Exception):
    """Fatal batch-level error (e.g. missing source directory)."""


class ImportProcessor:
    """Imports single source files into destination records.

    All collaborators are injected; the configuration is fixed for the lifetime
    of the processor (use ``ImportConfig.with_project_root`` for another root).
    """

    def __init__(
        self,
        config: ImportConfig,
        store: RecordStore,
        reader: Reader | None = None,
        notifier: Notifier | None = None,
        error_log: ErrorLogBuffer | None = None,
    ) -> None:
        self.config = config
        self.store = store
        self.reader = reader or ExcelReader(config.reader)
        self.notifier = notifier or LoggingNotifier()
        self.error_log = error_log
        self.validation = ValidationRunner()
        self.resolver = DestinationResolver(config, store.ensure_directory)
        self.stages: list[ImportStage] = []  # stages reached by the current or last import

    def _read_and_validate(self, path: str, validator: Validator, stages: list[ImportStage]) -> ImportData:
        stages.append(ImportStage.FORMAT_CHECK)
        check_format(path, self.config)
        stages.append(ImportStage.ROOT_CHECK)
        check_root(path, self.config)
        stages.append(ImportStage.READ)
        data = self.reader.read(path)
        stages.append(ImportStage.VALIDATE)
        self.validation.check(data, validator)
        return data

    def import_file(
        self,
        source_path: str | Path,
        record_type: type[T],
        validator: Validator,
        converter: Converter,
    ) -> ImportOutcome:
        """Import ``source_path`` into a ``record_type`` record at its resolved destination."""
        start = datetime.now(UTC)
        path = normalize_source_path(source_path)
        stages: list[ImportStage] = [ImportStage.START]
        self.stages = stages
        try:
            data = self._read_and_validate(path, validator, stages)
            stages.append(ImportStage.RESOLVE_DESTINATION)
            destination = self.resolver.resolve(path)
            record = self.store.load_or_create(destination.file_path, record_type)
        except ImportRejected as e:
            return self._reject(path, stages[-1], e, start)

        stages.append(ImportStage.CONVERT)
        converter.convert(record, data)
        self.store.mark_dirty(record)

        logger.info(f"imported {path} -> {destination.file_path} ({len(data)} records)")
        return ImportOutcome(
            source=path,
            status=ImportStatus.IMPORTED,
            stage=ImportStage.DONE,
            destination=destination.file_path,
            record_count=len(data),
            start_time=start,
            end_time=datetime.now(UTC),
        )

    def import_manual(
        self,
        source_path: str | Path,
        validator: Validator,
        importer: ManualImporter,
    ) -> ImportOutcome:
        """Check, read and validate, then hand the data to an importer that persists it itself.

        No destination is resolved and the store is not touched.
        """
        start = datetime.now(UTC)
        path = normalize_source_path(source_path)
        stages: list[ImportStage] = [ImportStage.START]
        self.stages = stages
        try:
            data = self._read_and_validate(path, validator, stages)
        except ImportRejected as e:
            return self._reject(path, stages[-1], e, start)

        importer.import_asset(path, data)
        logger.info(f"imported {path} via {type(importer).__name__} ({len(data)} records)")
        return ImportOutcome(
            source=path,
            status=ImportStatus.IMPORTED,
            stage=ImportStage.DONE,
            record_count=len(data),
            start_time=start,
            end_time=datetime.now(UTC),
        )

    def _reject(self, path: str, stage: ImportStage, error: ImportRejected, start: datetime) -> ImportOutcome:
        messages = error.messages if isinstance(error, ValidationError) else []
        self.notifier.notify(f"rejected {path} at {stage.value}: {error}")
        for message in messages:
            self.notifier.notify(f"{path}: {message}")

        if self.error_log is not None:
            if messages:
                for message in messages:
                    self.error_log.append(
                        ErrorRecord.create(path, _line_of(message), error.error_type, message)
                    )
            else:
                self.error_log.append(
                    ErrorRecord.create(path, FILE_LEVEL_ROW, error.error_type, str(error))
                )

        return ImportOutcome(
            source=path,
            status=ImportStatus.REJECTED,
            stage=stage,
            error=str(error),
            error_type=error.error_type,
            messages=list(messages),
            start_time=start,
            end_time=datetime.now(UTC),
        )


def _line_of(message: str) -> int:
    """Extract N from an ``error (line N): ...`` message, -1 if absent."""
    prefix = "error (line "
    if message.startswith(prefix):
        number = message[len(prefix):].split(")", 1)[0]
        if number.isdigit():
            return int(number)
    return FILE_LEVEL_ROW


def import_asset(
    source_path: str | Path,
    record_type: type[T],
    validator: Validator,
    converter: Converter,
    *,
    config: ImportConfig | None = None,
    store: RecordStore | None = None,
) -> ImportOutcome:
    """One-shot convenience: import a single file with default collaborators.

    The record is saved right away when the default YAML store is used.
    """
    own_store = store is None
    record_store: Any = YamlRecordStore() if own_store else store
    processor = ImportProcessor(config or ImportConfig(), record_store)
    outcome = processor.import_file(source_path, record_type, validator, converter)
    if own_store:
        record_store.save_dirty()
    return outcome


def scan_source_files(directory: Path, config: ImportConfig) -> list[str]:
    """Recursively collect importable workbooks below ``directory`` (sorted, posix).

    Raises:
        ProcessingError: If directory doesn't exist or can't be read
    """
    if not directory.exists():
        raise ProcessingError(f"Directory not found: {directory}")

    if not directory.is_dir():
        raise ProcessingError(f"Path is not a directory: {directory}")

    try:
        found = sorted(p.as_posix() for p in directory.rglob(f"*{config.importable_extension}") if p.is_file())
    except OSError as e:
        raise ProcessingError(f"Error reading directory {directory}: {e}") from e
    # ~$ ロックファイル (Excel 編集中) は対象外
    return [p for p in found if is_importable_file(p, config)]


def process_all(
    config: ImportConfig,
    store: YamlRecordStore | None = None,
    paths: list[str] | None = None,
    pipelines: list[Pipeline] | None = None,
    notifier: Notifier | None = None,
) -> BatchResult:
    """Import every source file through its matching pipeline.

    1. Resolve pipelines from the config (unless given)
    2. Scan the source directory (unless explicit paths are given)
    3. Import each file; files without a matching pipeline are skipped,
       unexpected per-file failures are rejected as UNEXPECTED_ERROR
    4. Flush the error log and save dirty records (also when the run aborts)

    Raises:
        ProcessingError: For fatal errors that prevent processing
        UnknownFieldError: A converter or validator asked for a missing column
    """
    start_time = datetime.now(UTC)
    store = store if store is not None else YamlRecordStore()
    error_log = ErrorLogBuffer(config.error_log_dir)

    if pipelines is None:
        try:
            pipelines = [resolve_pipeline(p) for p in config.pipelines]
        except Exception as e:
            raise ProcessingError(f"Invalid pipeline configuration: {e}") from e

    if paths is None:
        paths = scan_source_files(Path(config.scan_directory), config)

    processor = ImportProcessor(config, store, notifier=notifier, error_log=error_log)

    file_stats: list[FileStat] = []

    try:
        with ImportProgress(len(paths), description="Importing") as progress:
            for path in paths:
                progress.start_file(path)
                pipeline = match_pipeline(path, pipelines)
                if pipeline is None:
                    logger.warning(f"no pipeline matches {path} -> skipped")
                    outcome = ImportOutcome(
                        source=normalize_source_path(path),
                        status=ImportStatus.SKIPPED,
                        stage=ImportStage.START,
                    )
                else:
                    outcome = _import_isolated(processor, path, pipeline)

                progress.record_outcome(outcome.status.value, outcome.record_count)

                file_stats.append(
                    FileStat(
                        file_name=outcome.source,
                        status=outcome.status.value,
                        records=outcome.record_count,
                        elapsed_seconds=outcome.elapsed_seconds,
                        destination=outcome.destination,
                    )
                )
    finally:
        # 途中で止まっても、それまでの取り込み結果とエラーログは残す
        log_path = error_log.flush()
        if log_path is not None:
            logger.info(f"error log written: {log_path}")
        for written in store.save_dirty():
            logger.debug(f"saved {written}")

    end_time = datetime.now(UTC)
    return BatchResult(
        imported_files=progress.counts[ImportStatus.IMPORTED.value],
        rejected_files=progress.counts[ImportStatus.REJECTED.value],
        skipped_files=progress.counts[ImportStatus.SKIPPED.value],
        total_records=progress.records,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        file_stats=file_stats,
    )


def _import_isolated(processor: ImportProcessor, path: str, pipeline: Pipeline) -> ImportOutcome:
    """Run one batch file so that a broken file cannot take the batch down.

    Errors from user code or the store become an UNEXPECTED_ERROR rejection.
    UnknownFieldError is a programming error and still aborts the run.
    """
    start = datetime.now(UTC)
    try:
        return processor.import_file(path, pipeline.record_type, pipeline.validator, pipeline.converter)
    except UnknownFieldError:
        raise
    except Exception as e:
        source = normalize_source_path(path)
        processor.notifier.notify(f"failed {source}: {e}")
        if processor.error_log is not None:
            processor.error_log.append(
                ErrorRecord.create(source, FILE_LEVEL_ROW, UNEXPECTED_ERROR, str(e))
            )
        return ImportOutcome(
            source=source,
            status=ImportStatus.REJECTED,
            stage=processor.stages[-1] if processor.stages else ImportStage.START,
            error=str(e),
            error_type=UNEXPECTED_ERROR,
            start_time=start,
            end_time=datetime.now(UTC),
        )
