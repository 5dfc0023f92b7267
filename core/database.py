#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ZenHabit - Habit Store
JSON file persistence with migrations and compressed backups

Version: 1.0.0
"""

import json
import shutil
import gzip
import threading
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Any, Union
from dataclasses import dataclass
import logging

from core.models import Habit, ValidationError

logger = logging.getLogger(__name__)

# ===== EXCEPTIONS =====

class DatabaseError(Exception):
    """Base class for storage errors"""
    pass

class PersistenceError(DatabaseError):
    """Reading or writing the habit file failed"""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason

class DatabaseCorruptionError(PersistenceError):
    """The habit file could not be parsed"""
    pass

# ===== HELPER CLASSES =====

@dataclass
class StoreStats:
    """Store statistics"""
    total_habits: int = 0
    load_count: int = 0
    save_count: int = 0
    error_count: int = 0
    skipped_records: int = 0
    last_save: Optional[str] = None
    last_backup: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'total_habits': self.total_habits,
            'load_count': self.load_count,
            'save_count': self.save_count,
            'error_count': self.error_count,
            'skipped_records': self.skipped_records,
            'last_save': self.last_save,
            'last_backup': self.last_backup
        }

def check_document(data: Any, source: Any) -> Union[Dict[str, Any], List[Any]]:
    """Reject JSON that parses but does not hold a habit list"""
    if isinstance(data, list):
        return data
    if isinstance(data, dict) and isinstance(data.get("habits", []), list):
        return data
    raise DatabaseCorruptionError(f"{source} does not hold a habit list")

@dataclass(frozen=True)
class BackupInfo:
    """One gzip snapshot of the habit file"""
    path: Path
    size: int

    @property
    def name(self) -> str:
        return self.path.name

class BackupManager:
    """Rotating gzip snapshots of the habit file

    Snapshot names embed a microsecond timestamp, so name order is age order.
    """

    PREFIX = "habits_"
    SUFFIX = ".json.gz"

    def __init__(self, backup_dir: Path, max_backups: int = 10):
        self.backup_dir = Path(backup_dir)
        self.max_backups = max_backups

    def create_backup(self, source_file: Path) -> Optional[Path]:
        """Snapshot ``source_file``; None when there is nothing to snapshot or the write fails"""
        if not source_file.exists():
            logger.warning(f"Nothing to back up, {source_file} does not exist")
            return None

        stamp = datetime.now().strftime('%Y%m%d_%H%M%S_%f')
        target = self.backup_dir / f"{self.PREFIX}{stamp}{self.SUFFIX}"
        try:
            self.backup_dir.mkdir(parents=True, exist_ok=True)
            target.write_bytes(gzip.compress(source_file.read_bytes()))
        except OSError as e:
            logger.error(f"Could not back up {source_file}: {e}")
            return None

        logger.info(f"Backup written: {target.name}")
        self._prune()
        return target

    def read_backup(self, backup: BackupInfo) -> Union[Dict[str, Any], List[Any]]:
        """Parsed content of a snapshot; DatabaseCorruptionError when unusable"""
        try:
            with gzip.open(backup.path, 'rt', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, EOFError, ValueError) as e:
            raise DatabaseCorruptionError(f"Backup {backup.name} is unreadable: {e}")
        return check_document(data, f"Backup {backup.name}")

    def list_backups(self) -> List[BackupInfo]:
        """Snapshots, newest first"""
        if not self.backup_dir.is_dir():
            return []

        backups = []
        for path in self.backup_dir.glob(f"{self.PREFIX}*{self.SUFFIX}"):
            try:
                backups.append(BackupInfo(path=path, size=path.stat().st_size))
            except OSError as e:
                logger.warning(f"Skipping backup {path.name}: {e}")
        return sorted(backups, key=lambda b: b.name, reverse=True)

    def _prune(self) -> None:
        for backup in self.list_backups()[self.max_backups:]:
            try:
                backup.path.unlink()
                logger.info(f"Removed old backup: {backup.name}")
            except OSError as e:
                logger.error(f"Could not remove old backup {backup.name}: {e}")

class DatabaseMigration:
    """Migrations of the stored document"""

    VERSION_KEY = "__database_version__"
    CURRENT_VERSION = "1.1.0"

    @classmethod
    def get_version(cls, data: Union[Dict[str, Any], List[Any]]) -> str:
        # A bare list is the original browser-storage layout
        if isinstance(data, list):
            return "1.0.0"
        return data.get(cls.VERSION_KEY, "1.0.0")

    @classmethod
    def needs_migration(cls, data: Union[Dict[str, Any], List[Any]]) -> bool:
        return cls.get_version(data) != cls.CURRENT_VERSION

    @classmethod
    def migrate(cls, data: Union[Dict[str, Any], List[Any]]) -> Dict[str, Any]:
        current_version = cls.get_version(data)
        logger.info(f"Migrating habit store from version {current_version} to {cls.CURRENT_VERSION}")

        if current_version == "1.0.0":
            data = cls._migrate_from_1_0_0(data)
        else:
            raise DatabaseCorruptionError(f"Unsupported store version: {current_version}")

        data[cls.VERSION_KEY] = cls.CURRENT_VERSION
        logger.info("Habit store migration completed successfully")
        return data

    @classmethod
    def _migrate_from_1_0_0(cls, data: Union[Dict[str, Any], List[Any]]) -> Dict[str, Any]:
        records = data if isinstance(data, list) else data.get("habits", [])
        if not isinstance(records, list):
            raise DatabaseCorruptionError("Habit list is not an array")

        migrated = []
        for record in records:
            if isinstance(record, dict):
                record = dict(record)
                record.setdefault('type', 'habit')
                record.setdefault('excludedDates', [])
                record.setdefault('completedDates', [])
            migrated.append(record)

        return {"habits": migrated}

# ===== MAIN STORE =====

class HabitStore:
    """JSON-file habit store

    ``load`` returns None when nothing has been stored yet. Both ``load`` and
    ``save`` raise ``PersistenceError`` on I/O or format problems; callers
    decide whether that is fatal.
    """

    def __init__(self, data_file: Path, backup_dir: Optional[Path] = None,
                 max_backups: int = 10, auto_backup: bool = True):
        self.data_file = Path(data_file)
        self.backup_manager = BackupManager(
            Path(backup_dir) if backup_dir else self.data_file.parent / "backups",
            max_backups
        )
        self.auto_backup = auto_backup
        self.stats = StoreStats()
        self.file_lock = threading.RLock()

    @classmethod
    def from_config(cls, app_config) -> "HabitStore":
        storage = app_config.storage
        return cls(
            data_file=storage.path,
            backup_dir=storage.backup_dir,
            max_backups=storage.max_backups,
            auto_backup=storage.auto_backup
        )

    def load(self) -> Optional[List[Habit]]:
        """Load the habit collection"""
        with self.file_lock:
            if not self.data_file.exists():
                logger.info("Habit file does not exist, starting with an empty collection")
                return None

            try:
                data = self._read_document()
            except DatabaseCorruptionError as e:
                logger.error(f"Habit file is corrupted: {e}")
                data = self._handle_corruption()

            if DatabaseMigration.needs_migration(data):
                logger.info("Habit store migration required")
                if self.auto_backup:
                    self.backup_manager.create_backup(self.data_file)
                data = DatabaseMigration.migrate(data)
                try:
                    self._write_document(data)
                except PersistenceError as e:
                    # The migrated data is still served; the next save rewrites the file
                    self.stats.error_count += 1
                    logger.error(f"Could not write the migrated habit file: {e}")

            habits = self._parse_habits(data.get("habits", []))
            self.stats.total_habits = len(habits)
            self.stats.load_count += 1
            logger.info(f"Loaded {len(habits)} habits from {self.data_file}")
            return habits

    def save(self, habits: List[Habit]) -> None:
        """Write the whole collection atomically"""
        data = {
            DatabaseMigration.VERSION_KEY: DatabaseMigration.CURRENT_VERSION,
            "habits": [h.to_dict() for h in habits]
        }
        with self.file_lock:
            try:
                self._write_document(data)
            except PersistenceError:
                self.stats.error_count += 1
                raise
            self.stats.total_habits = len(habits)
            self.stats.save_count += 1
            self.stats.last_save = datetime.now().isoformat()

    def create_backup(self) -> Optional[Path]:
        with self.file_lock:
            backup_path = self.backup_manager.create_backup(self.data_file)
            if backup_path:
                self.stats.last_backup = datetime.now().isoformat()
            return backup_path

    def get_stats(self) -> Dict[str, Any]:
        stats = self.stats.to_dict()
        stats['data_file'] = str(self.data_file)
        backups = self.backup_manager.list_backups()
        stats['backups'] = len(backups)
        stats['backup_size_kb'] = round(sum(b.size for b in backups) / 1024, 2)
        return stats

    # ===== INTERNALS =====

    def _read_document(self) -> Union[Dict[str, Any], List[Any]]:
        try:
            with open(self.data_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except ValueError as e:
            self.stats.error_count += 1
            raise DatabaseCorruptionError(f"Invalid JSON in {self.data_file}: {e}")
        except OSError as e:
            self.stats.error_count += 1
            raise PersistenceError(f"Could not read {self.data_file}: {e}")

        try:
            return check_document(data, self.data_file)
        except DatabaseCorruptionError:
            self.stats.error_count += 1
            raise

    def _write_document(self, data: Dict[str, Any]) -> None:
        # Atomic replace through a temporary file
        temp_file = self.data_file.with_suffix('.tmp')
        try:
            self.data_file.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_file, 'w', encoding='utf-8') as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            temp_file.replace(self.data_file)
        except (OSError, TypeError, ValueError) as e:
            if temp_file.exists():
                temp_file.unlink()
            raise PersistenceError(f"Could not write {self.data_file}: {e}")

    def _handle_corruption(self) -> Union[Dict[str, Any], List[Any]]:
        """Recover from the newest readable backup"""
        logger.warning("Attempting to recover from habit file corruption...")

        corrupted = self.data_file.with_suffix('.corrupted')
        try:
            shutil.copy2(self.data_file, corrupted)
            logger.warning(f"Corrupted file kept as {corrupted}")
        except OSError as e:
            logger.error(f"Could not keep a copy of the corrupted file: {e}")

        for backup in self.backup_manager.list_backups():
            try:
                data = self.backup_manager.read_backup(backup)
            except DatabaseCorruptionError as e:
                logger.warning(f"Skipping backup: {e}")
                continue

            logger.info(f"Restored habits from backup {backup.name}")
            try:
                self._write_document(data)
            except PersistenceError as e:
                logger.error(f"Could not write the restored habit file: {e}")
            return data

        raise DatabaseCorruptionError("Could not restore the habit file from any backup")

    def _parse_habits(self, records: List[Any]) -> List[Habit]:
        habits: List[Habit] = []
        seen_ids = set()
        for record in records:
            if not isinstance(record, dict):
                self.stats.skipped_records += 1
                continue
            try:
                habit = Habit.from_dict(record)
            except ValidationError as e:
                logger.warning(f"Skipping malformed habit record: {e}")
                self.stats.skipped_records += 1
                continue
            if habit.id in seen_ids:
                logger.warning(f"Skipping duplicate habit id {habit.id}")
                self.stats.skipped_records += 1
                continue
            seen_ids.add(habit.id)
            habits.append(habit)
        return habits
