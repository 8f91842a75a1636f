# backend/services/store.py
"""
Collection-oriented access to the database.

Routes and screens never touch the models directly; they go through the
DocumentStore, which speaks in collections and plain dict records, stamps the
creation time on insert and pushes fresh snapshots to live subscribers after
every write.
"""

import logging
import threading

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from services.date_utils import now_millis
from services.errors import (
    NotFoundError,
    OrderingUnavailableError,
    PermissionDeniedError,
    StoreUnavailableError,
    is_permission_error,
)

logger = logging.getLogger(__name__)

EXTENSION_KEY = 'document_store'


class Subscription:
    """Handle returned by DocumentStore.subscribe"""

    def __init__(self, store, collection, on_snapshot, on_error, order_by, descending):
        self.store = store
        self.collection = collection
        self.on_snapshot = on_snapshot
        self.on_error = on_error
        self.order_by = order_by
        self.descending = descending
        self.active = True

    def deliver(self):
        try:
            records = self.store.list(self.collection, order_by=self.order_by, descending=self.descending)
        except Exception as e:
            # A failed listener stops receiving snapshots
            logger.warning(f"Subscription to {self.collection} failed: {e}")
            self.unsubscribe()
            if self.on_error:
                self.on_error(e)
            return
        self.on_snapshot(records)

    def unsubscribe(self):
        if self.active:
            self.active = False
            self.store._remove_subscription(self)


class DocumentStore:
    def __init__(self, db, collections):
        self.db = db
        self.collections = dict(collections)
        self._subscriptions = {}
        self._lock = threading.Lock()

    # --- helpers -------------------------------------------------------

    def model_for(self, collection):
        try:
            return self.collections[collection]
        except KeyError:
            raise ValueError(f"Unknown collection '{collection}'")

    def _order_column(self, collection, field):
        model = self.model_for(collection)
        column = model.__table__.columns.get(field)
        if column is None:
            raise ValueError(f"{collection} has no field '{field}'")
        if not (column.index or column.primary_key):
            raise OrderingUnavailableError(
                f"The query requires an index on {collection}.{field}"
            )
        return getattr(model, field)

    def _failed(self, collection, error, action):
        self.db.session.rollback()
        logger.error(f"Error {action} {collection}: {str(error)}")
        if is_permission_error(error):
            return PermissionDeniedError(collection, str(error))
        return StoreUnavailableError(details=str(error))

    def _load(self, collection, record_id):
        model = self.model_for(collection)
        record = self.db.session.get(model, record_id)
        if record is None:
            raise NotFoundError(collection, record_id)
        return record

    # --- reads ---------------------------------------------------------

    def list(self, collection, order_by='created_at', descending=True):
        """
        All records of a collection as dicts.

        ``order_by=None`` returns them unordered. Ordering on a field without an
        index raises OrderingUnavailableError, as a document store would.
        """
        model = self.model_for(collection)
        query = model.query
        if order_by:
            column = self._order_column(collection, order_by)
            query = query.order_by(column.desc() if descending else column.asc())
        try:
            return [record.to_dict() for record in query.all()]
        except SQLAlchemyError as e:
            raise self._failed(collection, e, 'listing')

    def get(self, collection, record_id):
        try:
            return self._load(collection, record_id).to_dict()
        except SQLAlchemyError as e:
            raise self._failed(collection, e, 'reading')

    # --- writes --------------------------------------------------------

    def insert(self, collection, data):
        """Create a record; the creation timestamp is assigned here"""
        model = self.model_for(collection)
        try:
            record = model()
            record.apply(data)
            record.created_at = now_millis()
            self.db.session.add(record)
            self.db.session.commit()
            result = record.to_dict()
        except SQLAlchemyError as e:
            raise self._failed(collection, e, 'inserting into')
        except Exception:
            self.db.session.rollback()
            raise

        logger.info(f"Inserted {collection}/{result['id']}")
        self._notify(collection)
        return result

    def update(self, collection, record_id, changes):
        """Partial update: only the fields present in ``changes`` are written"""
        try:
            record = self._load(collection, record_id)
            record.apply(changes)
            self.db.session.commit()
            result = record.to_dict()
        except SQLAlchemyError as e:
            raise self._failed(collection, e, 'updating')
        except Exception:
            self.db.session.rollback()
            raise

        logger.info(f"Updated {collection}/{record_id}: {sorted(changes)}")
        self._notify(collection)
        return result

    def delete(self, collection, record_id):
        try:
            record = self._load(collection, record_id)
            self.db.session.delete(record)
            self.db.session.commit()
        except SQLAlchemyError as e:
            raise self._failed(collection, e, 'deleting from')

        logger.info(f"Deleted {collection}/{record_id}")
        self._notify(collection)

    # --- live queries --------------------------------------------------

    def subscribe(self, collection, on_snapshot, on_error=None, order_by='created_at', descending=True):
        """
        Deliver the current snapshot now and a fresh one after every write.

        Errors (including a missing index for ``order_by``) go to ``on_error``
        and end the subscription.
        """
        self.model_for(collection)
        subscription = Subscription(self, collection, on_snapshot, on_error, order_by, descending)
        with self._lock:
            self._subscriptions.setdefault(collection, []).append(subscription)
        subscription.deliver()
        return subscription

    def subscriber_count(self, collection):
        with self._lock:
            return len(self._subscriptions.get(collection, []))

    def _remove_subscription(self, subscription):
        with self._lock:
            listeners = self._subscriptions.get(subscription.collection, [])
            if subscription in listeners:
                listeners.remove(subscription)

    def _notify(self, collection):
        with self._lock:
            listeners = list(self._subscriptions.get(collection, []))
        for subscription in listeners:
            if subscription.active:
                subscription.deliver()
        # Sites render company names, so they change with companies
        if collection == 'companies':
            self._notify('sites')


def init_store(app, db, collections):
    store = DocumentStore(db, collections)
    app.extensions[EXTENSION_KEY] = store
    return store


def current_store():
    return current_app.extensions[EXTENSION_KEY]
