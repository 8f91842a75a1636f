# backend/models/activity.py

from .base import db
from services.date_utils import now_millis


class Activity(db.Model):
    """Catalogue entry offered in the activity selector of measurement line items"""
    __tablename__ = 'activities'

    EDITABLE_FIELDS = ('description',)

    id = db.Column(db.Integer, primary_key=True)
    description = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.BigInteger, nullable=False, default=now_millis, index=True)

    def apply(self, data):
        if 'description' in data:
            self.description = data['description']

    def to_dict(self):
        return {
            'id': self.id,
            'description': self.description,
            'created_at': self.created_at,
        }
