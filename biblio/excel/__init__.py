"""Styled Excel output for catalog exports."""
from .styles import register_styles, style_name
from .formatters import put, header_row, kpi_card, fit_columns
from .writer import ExcelWriter, safe_sheet_title
