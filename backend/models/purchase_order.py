# backend/models/purchase_order.py

from .base import db
from services.date_utils import now_millis


class PurchaseOrder(db.Model):
    """Material order ("pedido") charged to a site"""
    __tablename__ = 'purchase_orders'

    EDITABLE_FIELDS = (
        'date', 'description', 'quantity', 'cost', 'contractor',
        'site', 'company', 'supplier', 'worker',
    )

    id = db.Column(db.Integer, primary_key=True)
    date = db.Column(db.String(10), nullable=False)
    description = db.Column(db.Text, nullable=False)
    # Kept as entered; the reports format them
    quantity = db.Column(db.String(50))
    cost = db.Column(db.String(50))
    contractor = db.Column(db.String(200))
    site = db.Column(db.String(255))
    company = db.Column(db.String(200))
    supplier = db.Column(db.String(200))
    worker = db.Column(db.String(200))
    created_at = db.Column(db.BigInteger, nullable=False, default=now_millis, index=True)

    def apply(self, data):
        for field in self.EDITABLE_FIELDS:
            if field in data:
                value = data[field]
                if field in ('quantity', 'cost') and value is not None:
                    value = str(value)
                setattr(self, field, value)

    def to_dict(self):
        return {
            'id': self.id,
            'date': self.date,
            'description': self.description,
            'quantity': self.quantity or '',
            'cost': self.cost or '',
            'contractor': self.contractor or '',
            'site': self.site or '',
            'company': self.company or '',
            'supplier': self.supplier or '',
            'worker': self.worker or '',
            'created_at': self.created_at,
        }
