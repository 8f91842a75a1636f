# backend/models/site.py

from .base import db
from .company import Company
from services.date_utils import now_millis
from services.errors import ValidationError

SITE_STATUSES = ('Contratacion', 'Contratada', 'En Ejecucion', 'Terminada')

# Association table: a site is staffed by one or more companies
site_companies = db.Table(
    'site_companies',
    db.Column('site_id', db.Integer, db.ForeignKey('sites.id', ondelete='CASCADE'), primary_key=True),
    db.Column('company_id', db.Integer, db.ForeignKey('companies.id', ondelete='CASCADE'), primary_key=True),
)


class Site(db.Model):
    """Construction site ("obra")"""
    __tablename__ = 'sites'

    EDITABLE_FIELDS = (
        'description', 'contractor', 'status', 'manager', 'manager_phone',
        'site_chief', 'site_chief_phone', 'address', 'town', 'start_date', 'request',
    )

    id = db.Column(db.Integer, primary_key=True)
    description = db.Column(db.String(255), nullable=False)
    contractor = db.Column(db.String(200))
    status = db.Column(db.String(20), default='Contratacion')
    manager = db.Column(db.String(200))
    manager_phone = db.Column(db.String(50))
    site_chief = db.Column(db.String(200))
    site_chief_phone = db.Column(db.String(50))
    address = db.Column(db.String(255))
    town = db.Column(db.String(120))
    start_date = db.Column(db.String(10))
    request = db.Column(db.Text)
    created_at = db.Column(db.BigInteger, nullable=False, default=now_millis, index=True)

    # Relationships
    companies = db.relationship(
        'Company',
        secondary=site_companies,
        lazy='selectin',
        order_by='Company.name',
        backref='sites',
    )

    def apply(self, data):
        for field in self.EDITABLE_FIELDS:
            if field in data:
                setattr(self, field, data[field])
        if 'companies' in data:
            self.companies = resolve_companies(data['companies'])

    def to_dict(self):
        return {
            'id': self.id,
            'companies': [company.name for company in self.companies],
            'description': self.description,
            'contractor': self.contractor or '',
            'status': self.status,
            'manager': self.manager or '',
            'manager_phone': self.manager_phone or '',
            'site_chief': self.site_chief or '',
            'site_chief_phone': self.site_chief_phone or '',
            'address': self.address or '',
            'town': self.town or '',
            'start_date': self.start_date or '',
            'request': self.request or '',
            'created_at': self.created_at,
        }


def resolve_companies(names):
    """
    Map company names to Company rows.

    Raises:
        ValidationError: if any name does not match an existing company
    """
    if isinstance(names, str):
        names = [names]
    wanted = []
    for name in names or []:
        name = (name or '').strip()
        if name and name not in wanted:
            wanted.append(name)
    if not wanted:
        return []

    found = Company.query.filter(Company.name.in_(wanted)).all()
    by_name = {}
    for company in found:
        by_name.setdefault(company.name, company)

    unknown = [name for name in wanted if name not in by_name]
    if unknown:
        raise ValidationError({'companies': f"Empresa desconocida: {', '.join(unknown)}"})
    return [by_name[name] for name in wanted]
