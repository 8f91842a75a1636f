# backend/routes/common.py
"""
Request handling shared by the entity blueprints.

Every collection is served the same way: list through a mounted ListScreen,
create through a FormScreen, delete only after confirmation, and a live
server-sent-events feed of snapshots.
"""
import json
import queue
import logging
from io import BytesIO

from flask import Response, current_app, jsonify, request, send_file, stream_with_context

from services.errors import BackofficeError, ConfirmationRequiredError, ValidationError
from services.screens import FormScreen, ListScreen
from services.store import current_store
from services.validators import is_blank

logger = logging.getLogger(__name__)

TRUTHY = ('1', 'true', 'yes', 'si', 'sí')


def get_json_payload():
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError({'body': 'Se esperaba un objeto JSON'})
    return data


def request_flag(name):
    """Boolean flag from the query string or the JSON body"""
    value = request.args.get(name)
    if value is None:
        body = request.get_json(silent=True)
        if isinstance(body, dict):
            value = body.get(name)
    return str(value).strip().lower() in TRUTHY


def is_confirmed():
    return request_flag('confirm')


def error_response(error, banner=None):
    payload = error.to_dict()
    if banner is not None:
        payload['dismiss_after'] = banner.seconds
    return jsonify(payload), error.status_code


def list_records(collection):
    screen = ListScreen(current_store(), collection)
    screen.mount()
    try:
        if screen.error is not None:
            raise screen.error
        return screen.records
    finally:
        screen.unmount()


def create_record(collection, required, success_message, prepare=None, short_banner=False, values=None):
    """
    Run a FormScreen submission and answer 201 with the record and its banner.

    ``values`` replaces the JSON body when the caller has already read it.
    """
    config = current_app.config
    screen = FormScreen(
        current_store(),
        collection,
        required,
        success_message,
        success_seconds=config['SHORT_SUCCESS_BANNER_SECONDS'] if short_banner else config['SUCCESS_BANNER_SECONDS'],
        error_seconds=config['ERROR_BANNER_SECONDS'],
    )
    try:
        if values is None:
            values = get_json_payload()
        record = screen.submit(values, prepare=prepare)
    except BackofficeError as e:
        return error_response(e, screen.banner)
    return jsonify({'record': record, 'banner': screen.banner.to_dict()}), 201


def check_required_changes(changes, required):
    """A partial update may omit required fields but may not blank them"""
    errors = {field: message for field, message in required.items()
              if field in changes and is_blank(changes[field])}
    if errors:
        raise ValidationError(errors)


def update_record(collection, record_id, required, prepare):
    changes = prepare(get_json_payload())
    check_required_changes(changes, required)
    return current_store().update(collection, record_id, changes)


def delete_record(collection, record_id):
    screen = ListScreen(current_store(), collection)
    if not screen.request_delete(record_id, is_confirmed()):
        raise ConfirmationRequiredError(
            '¿Estás seguro de que quieres eliminar este registro? Repite la petición con confirm=true'
        )
    return jsonify({'message': 'Registro eliminado', 'id': record_id})


def _sse(payload, event=None):
    data = json.dumps(payload, ensure_ascii=False)
    if event:
        return f"event: {event}\ndata: {data}\n\n"
    return f"data: {data}\n\n"


def stream_records(collection):
    """Server-sent events: one ``data`` message per snapshot of the collection"""
    updates = queue.Queue()
    keepalive = current_app.config.get('LIVE_KEEPALIVE_SECONDS', 15)

    def on_change(screen):
        updates.put(screen.error if screen.error is not None else list(screen.records))

    screen = ListScreen(current_store(), collection, on_change=on_change)

    @stream_with_context
    def generate():
        screen.mount()
        try:
            while True:
                try:
                    item = updates.get(timeout=keepalive)
                except queue.Empty:
                    yield ': keepalive\n\n'
                    continue
                if isinstance(item, Exception):
                    payload = item.to_dict() if isinstance(item, BackofficeError) else {'error': str(item)}
                    yield _sse(payload, event='error')
                    break
                yield _sse(item)
        finally:
            screen.unmount()
            logger.debug(f"Live feed for {collection} closed")

    return Response(
        generate(),
        mimetype='text/event-stream',
        headers={'Cache-Control': 'no-cache', 'X-Accel-Buffering': 'no'},
    )


def send_export(export_file):
    return send_file(
        BytesIO(export_file.content),
        mimetype=export_file.mimetype,
        as_attachment=True,
        download_name=export_file.filename,
    )
