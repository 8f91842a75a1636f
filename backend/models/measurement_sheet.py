# backend/models/measurement_sheet.py

from .base import db
from services.date_utils import now_millis
from services.measurements import normalize_sheet


class MeasurementSheet(db.Model):
    """
    Measurement sheet ("hoja de mediciones").

    Current documents hold their rows in ``line_items``. Sheets written before
    that existed carry one row in the flat legacy columns and the client name in
    ``company``; ``to_dict`` folds both shapes into one.
    """
    __tablename__ = 'measurement_sheets'

    EDITABLE_FIELDS = (
        'client_name', 'client_email', 'client_phone1', 'client_phone2',
        'contractor', 'sites', 'date', 'line_items',
    )
    LEGACY_FIELDS = ('company', 'description', 'length', 'height', 'quantity', 'total', 'notes')

    id = db.Column(db.Integer, primary_key=True)
    client_name = db.Column(db.String(200))
    client_email = db.Column(db.String(120))
    client_phone1 = db.Column(db.String(50))
    client_phone2 = db.Column(db.String(50))
    contractor = db.Column(db.String(200))
    sites = db.Column(db.JSON, default=list)
    date = db.Column(db.String(10))
    line_items = db.Column(db.JSON, default=list)
    created_at = db.Column(db.BigInteger, nullable=False, default=now_millis, index=True)

    # Legacy single-item shape, read only
    company = db.Column(db.String(200))
    description = db.Column(db.Text)
    length = db.Column(db.String(50))
    height = db.Column(db.String(50))
    quantity = db.Column(db.String(50))
    total = db.Column(db.String(50))
    notes = db.Column(db.Text)

    def apply(self, data):
        for field in self.EDITABLE_FIELDS:
            if field in data:
                setattr(self, field, data[field])
        if 'line_items' in data:
            # Writes always produce the current shape
            for field in self.LEGACY_FIELDS:
                setattr(self, field, None)

    def raw_document(self):
        document = {column.name: getattr(self, column.name) for column in self.__table__.columns}
        return document

    def to_dict(self):
        return normalize_sheet(self.raw_document())
