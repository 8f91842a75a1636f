# backend/services/screens.py
"""
State machines behind the list and form screens of every entity.

ListScreen keeps a live view of one collection and mediates edit and delete;
FormScreen validates and inserts new records and tracks the banner shown
afterwards. Both work against any object with the DocumentStore interface.
"""

import time
import logging

from services.errors import (
    BackofficeError,
    PermissionDeniedError,
    ValidationError,
    is_missing_index_error,
    is_permission_error,
    PERMISSION_REMEDIATION_MESSAGE,
)
from services.validators import validate_required

logger = logging.getLogger(__name__)

LOADING = 'loading'
EMPTY = 'empty'
POPULATED = 'populated'
EDITING = 'editing'


class ListScreen:
    def __init__(self, store, collection, sort_field='created_at', on_change=None):
        self.store = store
        self.collection = collection
        self.sort_field = sort_field
        self.on_change = on_change
        self.state = LOADING
        self.records = []
        self.editing = None
        self.error = None
        self.using_fallback = False
        self._subscription = None

    @property
    def is_mounted(self):
        return self._subscription is not None

    def mount(self):
        self.state = LOADING
        self.error = None
        subscription = self.store.subscribe(
            self.collection,
            self._on_snapshot,
            self._on_error,
            order_by=self.sort_field,
            descending=True,
        )
        # the fallback may already have replaced it during the first delivery
        if self._subscription is None and self.error is None:
            self._subscription = subscription
        return self

    def unmount(self):
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def _on_snapshot(self, records):
        if self.using_fallback:
            records = sorted(records, key=lambda r: r.get(self.sort_field) or 0, reverse=True)
        self.records = records
        if self.state != EDITING:
            self.state = POPULATED if records else EMPTY
        if self.on_change:
            self.on_change(self)

    def _on_error(self, error):
        if is_missing_index_error(error) and not self.using_fallback:
            logger.warning(f"No index to order {self.collection} by {self.sort_field}, sorting locally")
            self.using_fallback = True
            subscription = self.store.subscribe(
                self.collection, self._on_snapshot, self._on_error, order_by=None
            )
            if self.error is None:
                self._subscription = subscription
            return

        logger.error(f"Error loading {self.collection}: {error}")
        if is_permission_error(error) and not isinstance(error, PermissionDeniedError):
            error = PermissionDeniedError(self.collection, str(error))
        self.error = error
        self._subscription = None
        self.records = []
        self.state = EMPTY
        if self.on_change:
            self.on_change(self)

    # --- actions -------------------------------------------------------

    def request_delete(self, record_id, confirm):
        """
        Delete after confirmation. ``confirm`` is a callable asked once, or a bool.

        The row is not removed locally; the next snapshot reflects the delete.
        Returns True when the delete was issued.
        """
        confirmed = confirm() if callable(confirm) else bool(confirm)
        if not confirmed:
            logger.debug(f"Delete of {self.collection}/{record_id} cancelled")
            return False
        self.store.delete(self.collection, record_id)
        return True

    def begin_edit(self, record_id):
        for record in self.records:
            if record.get('id') == record_id:
                self.editing = dict(record)
                self.state = EDITING
                return self.editing
        raise KeyError(record_id)

    def submit_edit(self, changes):
        if self.editing is None:
            raise RuntimeError('No record is being edited')
        record_id = self.editing['id']
        result = self.store.update(self.collection, record_id, dict(changes))
        self._finish_edit()
        return result

    def cancel_edit(self):
        self._finish_edit()

    def _finish_edit(self):
        self.editing = None
        self.state = POPULATED if self.records else EMPTY


class Banner:
    """Transient success or error message"""

    def __init__(self, kind, message, shown_at, seconds):
        self.kind = kind
        self.message = message
        self.shown_at = shown_at
        self.seconds = seconds

    def is_visible(self, now):
        return now - self.shown_at < self.seconds

    def to_dict(self):
        return {'kind': self.kind, 'message': self.message, 'dismiss_after': self.seconds}


class FormScreen:
    def __init__(self, store, collection, required, success_message,
                 success_seconds=3, error_seconds=5, clock=time.monotonic):
        self.store = store
        self.collection = collection
        self.required = required
        self.success_message = success_message
        self.success_seconds = success_seconds
        self.error_seconds = error_seconds
        self.clock = clock
        self.values = {}
        self.field_errors = {}
        self.banner = None

    def visible_banner(self):
        if self.banner and self.banner.is_visible(self.clock()):
            return self.banner
        return None

    def submit(self, values, prepare=None):
        """
        Validate, insert and reset the form.

        ``prepare`` turns the submitted values into the record to insert (and
        may raise ValidationError itself). On failure the error banner is set
        and the error is raised again for the caller.
        """
        self.values = dict(values)
        self.field_errors = {}
        try:
            validate_required(self.values, self.required)
            data = prepare(self.values) if prepare else self.values
            record = self.store.insert(self.collection, data)
        except ValidationError as e:
            self.field_errors = e.field_errors
            raise
        except BackofficeError as e:
            self._show_error(e.message)
            raise
        except Exception as e:
            if is_permission_error(e):
                self._show_error(PERMISSION_REMEDIATION_MESSAGE.format(collection=self.collection))
            else:
                self._show_error(str(e))
            raise

        self.banner = Banner('success', self.success_message, self.clock(), self.success_seconds)
        self.values = {}
        return record

    def _show_error(self, message):
        logger.error(f"Error adding to {self.collection}: {message}")
        self.banner = Banner('error', message, self.clock(), self.error_seconds)
