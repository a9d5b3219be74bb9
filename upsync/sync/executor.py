# Upsync Sync Executor
# Phased upload, retention pruning and tally reporting for one bucket

from collections.abc import Callable, Iterable, Iterator
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional, TypeVar

from upsync.config.schema import SyncOptions
from upsync.exceptions import LocalIOError
from upsync.store.base import MTIME_METADATA_KEY, RemoteObject, RemoteStore, format_mtime
from upsync.sync.detector import ChangeAction, ChangeDecision, decide_action
from upsync.sync.local import LocalFile, enumerate_files, validate_root
from upsync.sync.retention import RetentionPolicy, kept_keys

T = TypeVar("T")
R = TypeVar("R")


class Phase(str, Enum):
    """Run phases, in execution order."""

    ENUMERATE = "enumerate"
    FILTER = "filter"
    SYNC_EACH = "sync_each"
    FETCH_REMOTE_METADATA = "fetch_remote_metadata"
    COMPUTE_KEEP_SET = "compute_keep_set"
    DELETE_UNKEPT = "delete_unkept"
    REPORT = "report"


class SyncOutcome(str, Enum):
    """How a run ended."""

    COMPLETED = "completed"
    DECLINED = "declined"
    NOTHING_TO_DO = "nothing_to_do"


@dataclass
class SyncTally:
    """Counters reported at the end of a run."""

    created: int = 0
    updated: int = 0
    skipped: int = 0
    deleted: int = 0
    retained: int = 0

    def report_line(self) -> str:
        return (
            f"{self.created} created. {self.updated} updated. {self.skipped} local skipped. "
            f"{self.deleted} deleted remotely. {self.retained} retained remotely."
        )


@dataclass
class FileResult:
    """Outcome of SYNC_EACH for one file."""

    local: LocalFile
    decision: Optional[ChangeDecision] = None
    error: Optional[str] = None


@dataclass
class SyncResult:
    """Result of a complete sync run."""

    outcome: SyncOutcome
    dry_run: bool = False
    tally: SyncTally = field(default_factory=SyncTally)
    phases: list[Phase] = field(default_factory=list)
    candidates: int = 0
    filtered_out: list[str] = field(default_factory=list)
    file_results: list[FileResult] = field(default_factory=list)
    deleted_keys: list[str] = field(default_factory=list)
    retained_keys: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """Check if the run finished without per-file errors."""
        return not self.errors


class SyncObserver:
    """Receives progress events from a run. All methods are optional."""

    def on_phase(self, phase: Phase) -> None:
        pass

    def on_candidates(self, count: int, *, filtered: bool) -> None:
        pass

    def on_decision(self, decision: ChangeDecision, *, dry_run: bool) -> None:
        pass

    def on_file_error(self, key: str, message: str) -> None:
        pass

    def on_remote(self, key: str, *, kept: bool, dry_run: bool) -> None:
        pass


class SyncExecutor:
    """
    Mirrors a local directory into one bucket.

    Phases run in a fixed order and never re-enter an earlier one:
    ENUMERATE, FILTER, SYNC_EACH, FETCH_REMOTE_METADATA,
    COMPUTE_KEEP_SET, DELETE_UNKEPT, REPORT. The filter and the three
    retention phases only run when options.backups_retain is set.

    The keep-set computed over the post-upload remote listing is the only
    thing that decides deletions; the pre-upload filter just avoids
    uploading files that would be deleted straight away.
    """

    def __init__(
        self,
        store: RemoteStore,
        root: str | Path,
        options: SyncOptions,
        *,
        confirm: Optional[Callable[[], bool]] = None,
        observer: Optional[SyncObserver] = None,
        now: Optional[datetime] = None,
    ):
        """
        Initialize sync executor.

        Args:
            store: Target bucket.
            root: Local directory to mirror.
            options: Validated run options.
            confirm: Asked once before a live run mutates anything, unless
                     options.no_prompt is set. Returning False, or not
                     giving a callback, aborts.
            observer: Optional progress listener.
            now: Reference time for retention windows (default: current
                 local time).
        """
        self.store = store
        self.root = root
        self.options = options
        self.confirm = confirm
        self.observer = observer or SyncObserver()
        self.now = now
        self.policy = RetentionPolicy(
            days=options.days_retain,
            weeks=options.weeks_retain,
            months=options.months_retain,
        )

    @property
    def dry_run(self) -> bool:
        return self.options.dry_run

    def run(self) -> SyncResult:
        """
        Execute one sync run.

        Returns:
            SyncResult with tally and per-file details.

        Raises:
            ConfigurationError: If the root is not a directory.
            AuthenticationError: If the store rejects the credentials.
            StoreError: If any store call fails.
        """
        root = validate_root(self.root)
        now = self.now or datetime.now().astimezone()
        result = SyncResult(outcome=SyncOutcome.COMPLETED, dry_run=self.dry_run)

        files = self._enumerate(root, result)
        if not self.options.backups_retain and not files:
            result.outcome = SyncOutcome.NOTHING_TO_DO
            return result

        if not self._confirmed():
            result.outcome = SyncOutcome.DECLINED
            return result

        if self.options.backups_retain:
            files = self._filter(files, now, result)

        self._sync_each(files, result)

        if self.options.backups_retain:
            remote = self._fetch_remote_metadata(result)
            kept = self._compute_keep_set(remote, now, result)
            self._delete_unkept(remote, kept, result)

        self._enter(Phase.REPORT, result)
        return result

    def _enter(self, phase: Phase, result: SyncResult) -> None:
        result.phases.append(phase)
        self.observer.on_phase(phase)

    def _confirmed(self) -> bool:
        if self.dry_run or self.options.no_prompt:
            return True
        # No way to ask means no consent
        if self.confirm is None:
            return False
        return self.confirm()

    def _enumerate(self, root: Path, result: SyncResult) -> list[LocalFile]:
        self._enter(Phase.ENUMERATE, result)
        files = enumerate_files(root, self.options.glob)
        result.candidates = len(files)
        self.observer.on_candidates(len(files), filtered=False)
        return files

    def _filter(self, files: list[LocalFile], now: datetime, result: SyncResult) -> list[LocalFile]:
        self._enter(Phase.FILTER, result)
        keep = kept_keys(self.policy, now, files, key=lambda f: f.key, timestamp=lambda f: f.mtime)

        selected = [f for f in files if f.key in keep]
        result.filtered_out = [f.key for f in files if f.key not in keep]
        result.tally.skipped += len(result.filtered_out)
        self.observer.on_candidates(len(selected), filtered=True)
        return selected

    def _sync_each(self, files: list[LocalFile], result: SyncResult) -> None:
        self._enter(Phase.SYNC_EACH, result)

        for file_result in self._each(self._sync_file, files):
            result.file_results.append(file_result)

            if file_result.error is not None:
                result.errors.append(f"{file_result.local.key}: {file_result.error}")
                self.observer.on_file_error(file_result.local.key, file_result.error)
                continue

            decision = file_result.decision
            if decision.action == ChangeAction.CREATE:
                result.tally.created += 1
            elif decision.is_update:
                result.tally.updated += 1
            else:
                result.tally.skipped += 1
            self.observer.on_decision(decision, dry_run=self.dry_run)

    def _sync_file(self, local: LocalFile) -> FileResult:
        try:
            decision = decide_action(local, self.store.get_metadata(local.key))
            if not self.dry_run:
                self._apply(decision)
            elif decision.action in (ChangeAction.CREATE, ChangeAction.UPDATE_BODY):
                # Fail the same way a live upload would
                with local.open():
                    pass
        except LocalIOError as e:
            return FileResult(local=local, error=str(e))
        return FileResult(local=local, decision=decision)

    def _apply(self, decision: ChangeDecision) -> None:
        local = decision.local
        metadata = {MTIME_METADATA_KEY: format_mtime(local.mtime)}

        if decision.action in (ChangeAction.CREATE, ChangeAction.UPDATE_BODY):
            with local.open() as body:
                self.store.put(local.key, body, metadata, public=self.options.public)
        elif decision.action == ChangeAction.UPDATE_METADATA:
            self.store.update_metadata(local.key, metadata, public=self.options.public)

    def _fetch_remote_metadata(self, result: SyncResult) -> dict[str, datetime]:
        self._enter(Phase.FETCH_REMOTE_METADATA, result)

        listed = sorted(self.store.list(self.options.glob), key=lambda o: o.key)
        timestamps: dict[str, datetime] = {}
        for obj in self._each(self._resolve_metadata, listed):
            if obj is not None:
                timestamps[obj.key] = obj.effective_mtime

        if self.dry_run:
            # Nothing was uploaded; project the uploads a live run would have made
            for file_result in result.file_results:
                decision = file_result.decision
                if decision is not None and decision.action != ChangeAction.SKIP:
                    timestamps[decision.local.key] = decision.local.mtime

        return dict(sorted(timestamps.items()))

    def _resolve_metadata(self, listed: RemoteObject) -> Optional[RemoteObject]:
        return self.store.get_metadata(listed.key)

    def _compute_keep_set(self, remote: dict[str, datetime], now: datetime, result: SyncResult) -> set[str]:
        self._enter(Phase.COMPUTE_KEEP_SET, result)
        return kept_keys(self.policy, now, remote.items(), key=lambda kv: kv[0], timestamp=lambda kv: kv[1])

    def _delete_unkept(self, remote: dict[str, datetime], kept: set[str], result: SyncResult) -> None:
        self._enter(Phase.DELETE_UNKEPT, result)

        doomed = [key for key in remote if key not in kept]
        result.retained_keys = [key for key in remote if key in kept]
        result.tally.retained += len(result.retained_keys)

        for key in result.retained_keys:
            self.observer.on_remote(key, kept=True, dry_run=self.dry_run)

        for key in self._each(self._delete, doomed):
            result.deleted_keys.append(key)
            result.tally.deleted += 1
            self.observer.on_remote(key, kept=False, dry_run=self.dry_run)

    def _delete(self, key: str) -> str:
        if not self.dry_run:
            self.store.delete(key)
        return key

    def _each(self, fn: Callable[[T], R], items: Iterable[T]) -> Iterator[R]:
        """Apply fn to items in order, on a bounded pool when workers > 1.

        The pool is shut down once the iterator is exhausted, so callers
        that drain it see every call completed.
        """
        if self.options.workers <= 1:
            for item in items:
                yield fn(item)
            return

        with ThreadPoolExecutor(max_workers=self.options.workers) as pool:
            yield from pool.map(fn, items)
