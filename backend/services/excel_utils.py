# backend/services/excel_utils.py
"""
Spreadsheet exports for measurement sheets and purchase orders.

openpyxl is imported on first use; a missing library surfaces as
ExportUnavailableError.
"""
import logging
from io import BytesIO

from services.errors import ExportUnavailableError
from services.file_utils import (
    ExportFile,
    XLSX_MIMETYPE,
    MEASUREMENT_TITLE,
    PRICED_MEASUREMENT_TITLE,
    PURCHASE_ORDER_TITLE,
    PURCHASE_ORDER_HEADERS,
    client_lines,
    measurement_filename,
    measurement_headers,
    measurement_rows,
    project_lines,
    purchase_order_filename,
    purchase_order_row,
)

logger = logging.getLogger(__name__)

MEASUREMENT_WIDTHS = [15, 50, 10, 10, 10, 12]
PRICED_WIDTHS = [15, 40, 8, 8, 8, 12, 15, 15, 18, 15]
PURCHASE_ORDER_WIDTHS = [12, 25, 10, 15, 20, 15, 15, 15, 12]

HEADER_ROW = 8
FIRST_DATA_ROW = 9


class SheetStyles:
    """Fonts, borders and alignments shared by every report"""

    def __init__(self):
        try:
            from openpyxl.styles import Font, Alignment, Border, Side
        except ImportError as e:
            logger.error(f"Spreadsheet export unavailable: {e}")
            raise ExportUnavailableError(
                'Error al exportar a Excel: la librería de hojas de cálculo no está instalada'
            ) from e

        thin = Side(style='thin', color='000000')
        self.border = Border(left=thin, right=thin, top=thin, bottom=thin)
        self.title_font = Font(bold=True, size=14)
        self.bold_font = Font(bold=True)
        self.center = Alignment(horizontal='center', vertical='center')
        self.right = Alignment(horizontal='right', vertical='center')


def _new_workbook(sheet_title):
    try:
        from openpyxl import Workbook
    except ImportError as e:
        logger.error(f"Spreadsheet export unavailable: {e}")
        raise ExportUnavailableError(
            'Error al exportar a Excel: la librería de hojas de cálculo no está instalada'
        ) from e

    wb = Workbook()
    ws = wb.active
    ws.title = sheet_title
    return wb, ws


def _set_widths(ws, widths):
    from openpyxl.utils import get_column_letter

    for index, width in enumerate(widths, start=1):
        ws.column_dimensions[get_column_letter(index)].width = width


def _save(wb):
    buffer = BytesIO()
    wb.save(buffer)
    buffer.seek(0)
    return buffer.getvalue()


def _merge(ws, first_col, last_col, row, value, styles, font=None, alignment=None):
    """Write into the top-left cell, style it, then merge across"""
    cell = ws.cell(row=row, column=first_col, value=value)
    cell.border = styles.border
    if font:
        cell.font = font
    if alignment:
        cell.alignment = alignment
    for col in range(first_col + 1, last_col + 1):
        ws.cell(row=row, column=col).border = styles.border
    ws.merge_cells(start_row=row, start_column=first_col, end_row=row, end_column=last_col)
    return cell


def _data_alignment(styles, column, priced):
    # columns are 1-based: C=3 .. J=10
    if column < 3:
        return None
    if priced and column >= 6:
        return styles.right
    return styles.center


def generate_measurement_xlsx(sheet, priced=False):
    """
    Build the measurement-sheet workbook.

    Layout: title on row 2, client block on rows 3-5 (right side), project
    line on row 6, headers on row 8 and one row per line item from row 9.
    """
    headers = measurement_headers(priced)
    last_col = len(headers)
    styles = SheetStyles()
    wb, ws = _new_workbook('Hoja de Mediciones Precio' if priced else 'Hoja de Mediciones')
    _set_widths(ws, PRICED_WIDTHS if priced else MEASUREMENT_WIDTHS)

    # Row 2: title across B..last
    _merge(ws, 2, last_col, 2, PRICED_MEASUREMENT_TITLE if priced else MEASUREMENT_TITLE,
           styles, font=styles.title_font, alignment=styles.center)

    # Rows 3-5: client name, email, phones across D..last
    for offset, line in enumerate(client_lines(sheet)):
        _merge(ws, 4, last_col, 3 + offset, line, styles, alignment=styles.right)

    # Row 6: contractor, sites, date
    for column, text in zip((2, 3, 5), project_lines(sheet)):
        cell = ws.cell(row=6, column=column, value=text)
        cell.border = styles.border

    for column, header in enumerate(headers, start=1):
        cell = ws.cell(row=HEADER_ROW, column=column, value=header)
        cell.font = styles.bold_font
        cell.alignment = styles.center
        cell.border = styles.border

    for row_offset, values in enumerate(measurement_rows(sheet, priced=priced)):
        row = FIRST_DATA_ROW + row_offset
        for column, value in enumerate(values, start=1):
            cell = ws.cell(row=row, column=column, value=value)
            cell.border = styles.border
            alignment = _data_alignment(styles, column, priced)
            if alignment:
                cell.alignment = alignment

    filename = measurement_filename(sheet, 'xlsx', priced=priced)
    logger.info(f"Generated spreadsheet {filename}")
    return ExportFile(filename, _save(wb), XLSX_MIMETYPE)


def generate_purchase_order_xlsx(order):
    styles = SheetStyles()
    wb, ws = _new_workbook('Hoja de Pedidos')
    _set_widths(ws, PURCHASE_ORDER_WIDTHS)

    # Row 1: title across E..H
    _merge(ws, 5, 8, 1, PURCHASE_ORDER_TITLE, styles, font=styles.title_font, alignment=styles.center)

    for column, header in enumerate(PURCHASE_ORDER_HEADERS, start=1):
        cell = ws.cell(row=2, column=column, value=header)
        cell.font = styles.bold_font
        cell.alignment = styles.center
        cell.border = styles.border

    for column, value in enumerate(purchase_order_row(order), start=1):
        cell = ws.cell(row=3, column=column, value=value)
        cell.border = styles.border
        # quantity and cost
        if column in (3, 9):
            cell.alignment = styles.center

    filename = purchase_order_filename(order, 'xlsx')
    logger.info(f"Generated spreadsheet {filename}")
    return ExportFile(filename, _save(wb), XLSX_MIMETYPE)
