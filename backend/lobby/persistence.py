"""Snapshot sinks.

A sink stores the complete lobby state as one document and hands it back on
startup. Writes always replace the whole document.
"""
import json
import logging
import os
import tempfile
import time

from sqlalchemy.exc import SQLAlchemyError

from lobby import db
from lobby.errors import PersistenceError
from lobby.models import Snapshot

logger = logging.getLogger(__name__)


def empty_snapshot():
    return {'users': [], 'sessions': {}, 'rooms': {}, 'history': []}


class JsonFileSink:
    """Pretty-printed JSON file, replaced atomically on every write."""

    def __init__(self, path):
        self.path = os.path.abspath(path)

    def load(self):
        if not os.path.exists(self.path):
            return None
        try:
            with open(self.path, 'r', encoding='utf-8') as fh:
                return json.load(fh)
        except (OSError, ValueError) as exc:
            logger.error(f"[snapshot-load] path={self.path} failed: {exc}")
            raise PersistenceError(f'cannot read snapshot: {exc}') from exc

    def write(self, snapshot):
        directory = os.path.dirname(self.path)
        try:
            fd, tmp_path = tempfile.mkstemp(prefix='.snapshot-', suffix='.json', dir=directory)
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as fh:
                    json.dump(snapshot, fh, indent=2)
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except (OSError, TypeError, ValueError) as exc:
            logger.error(f"[snapshot-write] path={self.path} failed: {exc}", exc_info=True)
            raise PersistenceError(f'cannot write snapshot: {exc}') from exc


class SqlSnapshotSink:
    """Keeps the snapshot in the single row of the `snapshot` table."""

    ROW_ID = 1

    def __init__(self, app):
        self.app = app

    def load(self):
        with self.app.app_context():
            try:
                row = db.session.get(Snapshot, self.ROW_ID)
            except SQLAlchemyError as exc:
                logger.error(f"[snapshot-load] sql failed: {exc}")
                raise PersistenceError(f'cannot read snapshot: {exc}') from exc
            if row is None:
                return None
            return json.loads(row.payload)

    def write(self, snapshot):
        with self.app.app_context():
            try:
                row = db.session.get(Snapshot, self.ROW_ID)
                if row is None:
                    row = Snapshot(id=self.ROW_ID)
                row.payload = json.dumps(snapshot)
                row.updated_at = time.time()
                db.session.add(row)
                db.session.commit()
            except (SQLAlchemyError, TypeError, ValueError) as exc:
                db.session.rollback()
                logger.error(f"[snapshot-write] sql failed: {exc}", exc_info=True)
                raise PersistenceError(f'cannot write snapshot: {exc}') from exc


def make_sink(app):
    backend = app.config.get('SNAPSHOT_BACKEND', 'file')
    if backend == 'sql':
        with app.app_context():
            db.create_all()
        return SqlSnapshotSink(app)
    if backend == 'file':
        return JsonFileSink(app.config['SNAPSHOT_PATH'])
    raise ValueError(f"Unknown SNAPSHOT_BACKEND: {backend}")
