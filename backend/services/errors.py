# backend/services/errors.py
"""
Error taxonomy for the back-office API.

Every error carries a short machine code (mirroring the document-store codes the
front-end already understands) and the HTTP status the API answers with.
"""

import re
import logging

logger = logging.getLogger(__name__)

# Wording of a query rejected for lack of a sort index
MISSING_INDEX_MESSAGE = re.compile(r'requires an index|missing index', re.IGNORECASE)

PERMISSION_REMEDIATION_MESSAGE = (
    "ERROR DE PERMISOS: la base de datos ha rechazado la operación. "
    "Revisa las reglas de seguridad del almacén de datos y concede permisos "
    "de lectura y escritura a esta aplicación sobre la colección '{collection}'. "
    "Por ejemplo, en la consola del almacén: "
    "match /{collection}/{{document=**}} {{ allow read, write: if true; }}"
)


class BackofficeError(Exception):
    """Base class for errors surfaced to API clients"""

    code = 'internal'
    status_code = 500

    def __init__(self, message=None, details=None):
        super().__init__(message or self.__class__.__doc__)
        self.message = message or self.__class__.__doc__
        self.details = details

    def to_dict(self):
        payload = {'error': self.message, 'code': self.code}
        if self.details:
            payload['details'] = self.details
        return payload


class StoreUnavailableError(BackofficeError):
    """El almacén de datos no está disponible"""

    code = 'unavailable'
    status_code = 503


class PermissionDeniedError(BackofficeError):
    """Permiso denegado por el almacén de datos"""

    code = 'permission-denied'
    status_code = 403

    def __init__(self, collection, original_message=None):
        super().__init__(PERMISSION_REMEDIATION_MESSAGE.format(collection=collection))
        self.collection = collection
        self.original_message = original_message


class OrderingUnavailableError(BackofficeError):
    """The query requires an index"""

    code = 'failed-precondition'
    status_code = 500


class ValidationError(BackofficeError):
    """Faltan campos obligatorios"""

    code = 'invalid-argument'
    status_code = 400

    def __init__(self, field_errors, message=None):
        super().__init__(message or 'Revisa los campos marcados', details=dict(field_errors))
        self.field_errors = dict(field_errors)

    def to_dict(self):
        return {'error': self.message, 'code': self.code, 'errors': self.field_errors}


class NotFoundError(BackofficeError):
    """Registro no encontrado"""

    code = 'not-found'
    status_code = 404

    def __init__(self, collection, record_id):
        super().__init__(f'{collection}/{record_id} no existe')
        self.collection = collection
        self.record_id = record_id


class ConfirmationRequiredError(BackofficeError):
    """Confirma la eliminación antes de continuar"""

    code = 'confirmation-required'
    status_code = 409


class ExportUnavailableError(BackofficeError):
    """No se pudo generar el archivo de exportación"""

    code = 'export-unavailable'
    status_code = 503


def is_permission_error(error):
    """Detect a permission failure from a driver error's code or message"""
    code = str(getattr(error, 'code', '') or '').lower()
    orig = getattr(error, 'orig', None)
    pgcode = str(getattr(orig, 'pgcode', '') or '')
    message = str(error).lower()
    return (
        code == 'permission-denied'
        or pgcode == '42501'
        or 'permission' in message
    )


def is_missing_index_error(error):
    """
    Detect a query that failed because its sort order has no index.

    Only the store's ordering failure counts; other index errors such as a
    unique-constraint violation do not.
    """
    if isinstance(error, OrderingUnavailableError):
        return True
    code = str(getattr(error, 'code', '') or '').lower()
    return code == 'failed-precondition' or bool(MISSING_INDEX_MESSAGE.search(str(error)))
