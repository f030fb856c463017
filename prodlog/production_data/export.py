# prodlog/production_data/export.py
"""
Export helpers for production data
CSV and Excel through pandas, PDF list through ReportLab
"""

import logging
from io import BytesIO
from typing import Any, Dict, List, Optional
from xml.sax.saxutils import escape

import pandas as pd

# ReportLab imports
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_LEFT, TA_RIGHT
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.cidfonts import UnicodeCIDFont
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from .common import (
    ProductionDataConstants as C, format_date, format_number, get_field_label,
    get_language, get_local_now, get_message, records_to_dataframe, to_number
)

logger = logging.getLogger(__name__)

MasterData = Optional[Dict[str, List[Dict[str, Any]]]]


def export_filename(extension: str) -> str:
    """Download file name stamped with the local time"""
    return f"production_data_{get_local_now().strftime('%Y%m%d_%H%M%S')}.{extension}"


# ==================== CSV / Excel ====================

def export_to_csv(records: List[Dict[str, Any]], master_data: MasterData = None,
                  language: Optional[str] = None) -> bytes:
    """
    Export records to CSV

    UTF-8 with BOM so spreadsheet tools detect the encoding of Japanese labels.
    """
    df = records_to_dataframe(records, master_data, language, include_id=True)
    return df.to_csv(index=False).encode('utf-8-sig')


def export_to_excel(records: List[Dict[str, Any]], master_data: MasterData = None,
                    language: Optional[str] = None, sheet_name: str = "ProductionData") -> bytes:
    """Export records to a single-sheet Excel workbook"""
    output = BytesIO()
    df = records_to_dataframe(records, master_data, language, include_id=True)

    try:
        with pd.ExcelWriter(output, engine='xlsxwriter') as writer:
            df.to_excel(writer, sheet_name=sheet_name[:31], index=False)
        return output.getvalue()

    except Exception as e:
        logger.error(f"Error exporting to Excel: {e}")
        raise


# ==================== PDF ====================

class ProductionDataPDFGenerator:
    """Generate a landscape PDF list of production data"""

    JAPANESE_FONT = 'HeiseiKakuGo-W5'

    def __init__(self, language: Optional[str] = None):
        self.language = get_language(language)
        self.font_name = self._setup_fonts()

    def _setup_fonts(self) -> str:
        """Register the CID font for Japanese text, falling back to Helvetica"""
        if self.JAPANESE_FONT in pdfmetrics.getRegisteredFontNames():
            return self.JAPANESE_FONT
        try:
            pdfmetrics.registerFont(UnicodeCIDFont(self.JAPANESE_FONT))
            return self.JAPANESE_FONT
        except Exception as e:
            logger.warning(f"⚠️ Japanese font unavailable, using Helvetica: {e}")
            return 'Helvetica'

    def get_custom_styles(self) -> Dict[str, ParagraphStyle]:
        """Paragraph styles for title, meta line and table cells"""
        styles = getSampleStyleSheet()
        font = self.font_name

        return {
            'title': ParagraphStyle('PDTitle', parent=styles['Title'], fontName=font,
                                    fontSize=16, alignment=TA_CENTER, spaceAfter=6),
            'meta': ParagraphStyle('PDMeta', parent=styles['Normal'], fontName=font,
                                   fontSize=9, alignment=TA_RIGHT, textColor=colors.grey),
            'cell': ParagraphStyle('PDCell', parent=styles['Normal'], fontName=font,
                                   fontSize=8, leading=10, alignment=TA_LEFT),
            'cell_right': ParagraphStyle('PDCellRight', parent=styles['Normal'], fontName=font,
                                         fontSize=8, leading=10, alignment=TA_RIGHT),
            'header': ParagraphStyle('PDHeader', parent=styles['Normal'], fontName=font,
                                     fontSize=8, leading=10, alignment=TA_CENTER,
                                     textColor=colors.whitesmoke),
        }

    def _build_table(self, records: List[Dict[str, Any]], master_data: MasterData,
                     styles: Dict[str, ParagraphStyle]) -> Table:
        df = records_to_dataframe(records, master_data, self.language)
        numeric_labels = {get_field_label(f, self.language) for f in C.NUMERIC_FIELDS}
        date_label = get_field_label(C.FIELD_DATE, self.language)

        header = [Paragraph(escape(str(col)), styles['header']) for col in df.columns]
        rows = [header]

        for _, row in df.iterrows():
            cells = []
            for col in df.columns:
                value = row[col]
                if col in numeric_labels:
                    text = '' if pd.isna(value) else format_number(value, C.QUANTITY_DECIMALS)
                    cells.append(Paragraph(text, styles['cell_right']))
                elif col == date_label:
                    cells.append(Paragraph(escape(format_date(value)), styles['cell']))
                else:
                    text = '' if value is None or (isinstance(value, float) and pd.isna(value)) else str(value)
                    cells.append(Paragraph(escape(text), styles['cell']))
            rows.append(cells)

        total_quantity = sum(to_number(r.get(C.FIELD_QUANTITY)) for r in records)
        total_defects = sum(to_number(r.get(C.FIELD_DEFECTS)) for r in records)
        totals = [Paragraph(escape(get_message('total', self.language)), styles['cell'])]
        totals += [Paragraph('', styles['cell']) for _ in range(3)]
        totals += [
            Paragraph(format_number(total_quantity, C.QUANTITY_DECIMALS), styles['cell_right']),
            Paragraph(format_number(total_defects, C.QUANTITY_DECIMALS), styles['cell_right']),
            Paragraph('', styles['cell']),
            Paragraph('', styles['cell']),
        ]
        rows.append(totals)

        col_widths = [25*mm, 45*mm, 35*mm, 35*mm, 25*mm, 22*mm, 25*mm, 65*mm]
        table = Table(rows, colWidths=col_widths, repeatRows=1)
        table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#34495e')),
            ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
            ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
            ('ROWBACKGROUNDS', (0, 1), (-1, -2), [colors.white, colors.HexColor('#f4f6f7')]),
            ('BACKGROUND', (0, -1), (-1, -1), colors.HexColor('#eaecee')),
        ]))
        return table

    def generate_pdf(self, records: List[Dict[str, Any]], master_data: MasterData = None) -> bytes:
        """
        Render the records as a PDF document

        Returns:
            PDF bytes
        """
        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=landscape(A4),
            leftMargin=10*mm, rightMargin=10*mm,
            topMargin=12*mm, bottomMargin=12*mm,
            title=get_message('pdf_title', self.language),
        )
        styles = self.get_custom_styles()

        story = [
            Paragraph(escape(get_message("pdf_title", self.language)), styles["title"]),
            Paragraph(
                f"{escape(get_message('generated_at', self.language))}: "
                f"{get_local_now().strftime('%Y/%m/%d %H:%M')}",
                styles['meta']
            ),
            Spacer(1, 5*mm),
        ]

        if records:
            story.append(self._build_table(records, master_data, styles))
        else:
            story.append(Paragraph(escape(get_message('no_data', self.language)), styles['cell']))

        doc.build(story)
        logger.info(f"✅ Generated production data PDF ({len(records)} rows)")
        return buffer.getvalue()


def export_to_pdf(records: List[Dict[str, Any]], master_data: MasterData = None,
                  language: Optional[str] = None) -> bytes:
    """Export records to a PDF list"""
    return ProductionDataPDFGenerator(language).generate_pdf(records, master_data)
