# Upsync Sync Module
# Change detection, retention scheduling and the phased executor

from upsync.sync.detector import EPSILON, ChangeAction, ChangeDecision, decide_action, mtimes_match
from upsync.sync.executor import (
    FileResult,
    Phase,
    SyncExecutor,
    SyncObserver,
    SyncOutcome,
    SyncResult,
    SyncTally,
)
from upsync.sync.local import LocalFile, enumerate_files, validate_root
from upsync.sync.retention import Candidate, RetentionPolicy, kept_keys, select_kept, time_boundaries

__all__ = [
    # Local files
    "LocalFile",
    "enumerate_files",
    "validate_root",
    # Change detection
    "EPSILON",
    "ChangeAction",
    "ChangeDecision",
    "decide_action",
    "mtimes_match",
    # Retention
    "Candidate",
    "RetentionPolicy",
    "time_boundaries",
    "select_kept",
    "kept_keys",
    # Executor
    "Phase",
    "FileResult",
    "SyncExecutor",
    "SyncObserver",
    "SyncOutcome",
    "SyncResult",
    "SyncTally",
]
