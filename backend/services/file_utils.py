# backend/services/file_utils.py
"""
Shared pieces of the measurement and purchase-order reports, and their PDF rendering.

The PDF library is imported on first use so the API starts without it; a
missing library surfaces as ExportUnavailableError.
"""
import re
import logging
from io import BytesIO
from xml.sax.saxutils import escape
from collections import namedtuple

from services.date_utils import format_date_display, format_date_filename
from services.errors import ExportUnavailableError
from services.measurements import PRICE_FIELDS, normalize_sites, parse_decimal, quantize

logger = logging.getLogger(__name__)

ExportFile = namedtuple('ExportFile', ['filename', 'content', 'mimetype'])

XLSX_MIMETYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
PDF_MIMETYPE = 'application/pdf'

MEASUREMENT_TITLE = 'HOJA DE MEDICIONES'
PRICED_MEASUREMENT_TITLE = 'HOJA DE MEDICIONES PRECIO'
PURCHASE_ORDER_TITLE = 'HOJA DE PEDIDOS'

MEASUREMENT_HEADERS = ['Actividad', 'Concepto', 'L', 'H', 'N', 'Total']
PRICE_HEADERS = ['Precio Trabajador', 'Valor Trabajador', 'Precio Constructora', 'Valor Constructora']
PURCHASE_ORDER_HEADERS = [
    'Fecha', 'Descripción', 'Cantidad', 'Constructora', 'Obra',
    'Empresa', 'Proveedor', 'Trabajador', 'Costo',
]

# PDF column widths in millimetres
MEASUREMENT_PDF_WIDTHS = [25, 80, 20, 20, 20, 25]
PRICED_PDF_WIDTHS = [20, 50, 15, 15, 15, 20, 25, 25, 30, 25]
PURCHASE_ORDER_PDF_WIDTHS = [25, 40, 20, 30, 35, 30, 30, 25, 20]

HEADER_RGB = (66, 139, 202)



def format_number(value):
    """'12.5' -> '12,50'. Blank gives '', text without a number is returned as is"""
    if value is None or str(value).strip() == '':
        return ''
    number = parse_decimal(value, 'NaN')
    if number.is_nan():
        return value
    return str(quantize(number)).replace('.', ',')


def measurement_headers(priced=False):
    return MEASUREMENT_HEADERS + (PRICE_HEADERS if priced else [])


def sites_text(sheet):
    return ' '.join(normalize_sites(sheet.get('sites')))


def client_lines(sheet):
    phones = ', '.join(p for p in (sheet.get('client_phone1'), sheet.get('client_phone2')) if p)
    return [sheet.get('client_name') or '', sheet.get('client_email') or '', phones]


def project_lines(sheet):
    return [
        f"Constructora: {sheet.get('contractor') or ''}",
        f"Obra: {sites_text(sheet)}",
        f"Fecha: {format_date_display(sheet.get('date'))}",
    ]


def measurement_filename(sheet, extension, priced=False):
    sites = normalize_sites(sheet.get('sites'))
    site_part = '_'.join(sites) if sites else 'SinObra'
    prefix = 'Hoja_Mediciones_Precio' if priced else 'Hoja_Mediciones'
    return f"{prefix}_{site_part}_{format_date_filename(sheet.get('date'))}.{extension}"


def purchase_order_filename(order, extension):
    description = (order.get('description') or '')[:20]
    description_part = re.sub(r'[^a-zA-Z0-9]', '_', description) or 'SinDescripcion'
    return f"Hoja_Pedidos_{description_part}_{format_date_filename(order.get('date'))}.{extension}"


def measurement_rows(sheet, priced=False, formatted=True):
    """
    One row per line item.

    Spreadsheets get comma-formatted numbers with the count left as entered;
    PDFs print the values as entered.
    """
    rows = []
    for item in sheet.get('line_items') or []:
        if formatted:
            row = [
                item.get('activity') or '',
                item.get('description') or '',
                format_number(item.get('length')),
                format_number(item.get('height')),
                item.get('quantity') or '',
                format_number(item.get('total') or '0'),
            ]
            if priced:
                row.extend(format_number(item.get(field) or '0') for field in PRICE_FIELDS)
        else:
            row = [
                item.get('activity') or '',
                item.get('description') or '',
                item.get('length') or '',
                item.get('height') or '',
                item.get('quantity') or '',
                item.get('total') or '0.00',
            ]
            if priced:
                row.extend(item.get(field) or '0.00' for field in PRICE_FIELDS)
        rows.append(row)
    return rows


def purchase_order_row(order):
    return [
        format_date_display(order.get('date')),
        order.get('description') or '',
        order.get('quantity') or '',
        order.get('contractor') or '',
        order.get('site') or '',
        order.get('company') or '',
        order.get('supplier') or '',
        order.get('worker') or '',
        order.get('cost') or '',
    ]


def _build_pdf(title, headers, rows, widths_mm, client=None, project=None):
    try:
        from reportlab.lib import colors
        from reportlab.lib.enums import TA_CENTER, TA_LEFT, TA_RIGHT
        from reportlab.lib.pagesizes import A4, landscape
        from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
        from reportlab.lib.units import mm
        from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
    except ImportError as e:
        logger.error(f"PDF export unavailable: {e}")
        raise ExportUnavailableError(
            'Error al exportar a PDF: la librería de generación de PDF no está instalada'
        ) from e

    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=landscape(A4),
        rightMargin=20 * mm,
        leftMargin=20 * mm,
        topMargin=15 * mm,
        bottomMargin=15 * mm,
        title=title,
    )

    # Define styles
    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        'ReportTitle', parent=styles['Heading1'], fontName='Helvetica-Bold',
        fontSize=18, leading=22, alignment=TA_CENTER,
    )
    info_left = ParagraphStyle('InfoLeft', parent=styles['Normal'], fontSize=12, leading=16, alignment=TA_LEFT)
    info_right = ParagraphStyle('InfoRight', parent=info_left, alignment=TA_RIGHT)
    head_style = ParagraphStyle(
        'TableHead', parent=styles['Normal'], fontName='Helvetica-Bold',
        fontSize=10, leading=12, textColor=colors.white,
    )
    cell_style = ParagraphStyle('TableCell', parent=styles['Normal'], fontSize=9, leading=11)

    elements = [Paragraph(escape(title), title_style), Spacer(1, 6 * mm)]

    # Project block on the left, client block on the right
    if client is not None or project is not None:
        left = [Paragraph(escape(line), info_left) for line in (project or [])]
        right = [Paragraph(escape(line), info_right) for line in (client or []) if line]
        info_table = Table([[left, right]], colWidths=[doc.width / 2, doc.width / 2])
        info_table.setStyle(TableStyle([
            ('VALIGN', (0, 0), (-1, -1), 'TOP'),
            ('LEFTPADDING', (0, 0), (-1, -1), 0),
            ('RIGHTPADDING', (0, 0), (-1, -1), 0),
        ]))
        elements.append(info_table)
        elements.append(Spacer(1, 6 * mm))

    data = [[Paragraph(escape(h), head_style) for h in headers]]
    for row in rows:
        data.append([Paragraph(escape(str(value)), cell_style) for value in row])

    table = Table(data, colWidths=[w * mm for w in widths_mm], repeatRows=1)
    table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.Color(*(c / 255 for c in HEADER_RGB))),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ('TOPPADDING', (0, 0), (-1, -1), mm),
        ('BOTTOMPADDING', (0, 0), (-1, -1), mm),
    ]))
    elements.append(table)

    doc.build(elements)
    buffer.seek(0)
    return buffer.getvalue()


def generate_measurement_pdf(sheet, priced=False):
    """Render a measurement sheet (or its priced variant) as a landscape A4 PDF"""
    content = _build_pdf(
        PRICED_MEASUREMENT_TITLE if priced else MEASUREMENT_TITLE,
        measurement_headers(priced),
        measurement_rows(sheet, priced=priced, formatted=False),
        PRICED_PDF_WIDTHS if priced else MEASUREMENT_PDF_WIDTHS,
        client=client_lines(sheet),
        project=project_lines(sheet),
    )
    return ExportFile(measurement_filename(sheet, 'pdf', priced=priced), content, PDF_MIMETYPE)


def generate_purchase_order_pdf(order):
    content = _build_pdf(
        PURCHASE_ORDER_TITLE,
        PURCHASE_ORDER_HEADERS,
        [purchase_order_row(order)],
        PURCHASE_ORDER_PDF_WIDTHS,
    )
    return ExportFile(purchase_order_filename(order, 'pdf'), content, PDF_MIMETYPE)
