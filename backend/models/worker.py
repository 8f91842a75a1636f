# backend/models/worker.py

from .base import db
from services.date_utils import now_millis

WORK_STATUSES = ('contratado', 'despedido')


class Worker(db.Model):
    __tablename__ = 'workers'

    EDITABLE_FIELDS = ('name', 'alias', 'address', 'phone_number', 'job', 'company', 'work_status')

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    alias = db.Column(db.String(100))
    address = db.Column(db.String(255))
    phone_number = db.Column(db.String(50))
    job = db.Column(db.String(100))
    # Company name as shown in the selector, not a foreign key
    company = db.Column(db.String(200))
    work_status = db.Column(db.String(20), default='contratado')
    created_at = db.Column(db.BigInteger, nullable=False, default=now_millis, index=True)

    def apply(self, data):
        for field in self.EDITABLE_FIELDS:
            if field in data:
                setattr(self, field, data[field])

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'alias': self.alias or '',
            'address': self.address or '',
            'phone_number': self.phone_number or '',
            'job': self.job or '',
            'company': self.company or '',
            'work_status': self.work_status,
            'created_at': self.created_at,
        }
