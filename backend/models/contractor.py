# backend/models/contractor.py

from .base import db
from services.date_utils import now_millis


class Contractor(db.Model):
    """General contractor ("constructora") that commissions the work"""
    __tablename__ = 'contractors'

    EDITABLE_FIELDS = ('name', 'address', 'phone', 'email')

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    address = db.Column(db.String(255))
    phone = db.Column(db.String(50))
    email = db.Column(db.String(120))
    created_at = db.Column(db.BigInteger, nullable=False, default=now_millis, index=True)

    def apply(self, data):
        for field in self.EDITABLE_FIELDS:
            if field in data:
                setattr(self, field, data[field])

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'address': self.address or '',
            'phone': self.phone or '',
            'email': self.email or '',
            'created_at': self.created_at,
        }
