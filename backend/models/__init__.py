# backend/models/__init__.py

from .base import db

# --- Model Import Order ---
# Company must be mapped before Site, which references it through site_companies.

# 1. Catalogue models
from .company import Company
from .contractor import Contractor
from .activity import Activity
from .worker import Worker, WORK_STATUSES

# 2. Sites and their association table
from .site import Site, site_companies, SITE_STATUSES

# 3. Documents referencing the above by name
from .purchase_order import PurchaseOrder
from .measurement_sheet import MeasurementSheet

# Collection name -> model, as exposed by the document store
COLLECTIONS = {
    'companies': Company,
    'contractors': Contractor,
    'workers': Worker,
    'sites': Site,
    'activities': Activity,
    'purchaseOrders': PurchaseOrder,
    'measurementSheets': MeasurementSheet,
}

__all__ = [
    'db',
    'Company',
    'Contractor',
    'Activity',
    'Worker',
    'Site',
    'site_companies',
    'PurchaseOrder',
    'MeasurementSheet',
    'COLLECTIONS',
    'WORK_STATUSES',
    'SITE_STATUSES',
]
