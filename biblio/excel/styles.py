"""
Named cell styles for catalog workbooks.

Styles are openpyxl NamedStyles registered per workbook; cells refer to
them by name ("catalog_header", "catalog_wrap", ...) instead of carrying
their own font/fill/border copies.
"""
from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, NamedStyle, PatternFill, Side

INK = "0D2B45"
ACCENT = "1F4E79"
MUTED = "666666"
GRID = "CCCCCC"
ERROR = "C62828"

PREFIX = "catalog_"

# Fills layered on top of a named style, by highlight name
HIGHLIGHTS = {
    "stripe": PatternFill("solid", start_color="F3F6FA", end_color="F3F6FA"),
    "failed": PatternFill("solid", start_color="FFEBEE", end_color="FFEBEE"),
}


def _font(size, **kw) -> Font:
    return Font(name="Calibri", size=size, **kw)


def _cell_border() -> Border:
    side = Side(style="thin", color=GRID)
    return Border(left=side, right=side, top=side, bottom=side)


def _style(name, font, alignment=None, fill=None, border=None, number_format=None) -> NamedStyle:
    style = NamedStyle(name=PREFIX + name, font=font)
    if alignment is not None:
        style.alignment = alignment
    if fill is not None:
        style.fill = fill
    if border is not None:
        style.border = border
    if number_format is not None:
        style.number_format = number_format
    return style


def build_styles() -> list[NamedStyle]:
    # NamedStyle binds to one workbook, so each workbook gets fresh objects
    return [
        _style("title", _font(20, bold=True, color=INK)),
        _style("subtitle", _font(11, italic=True, color=MUTED)),
        _style("section", _font(13, bold=True, color=INK)),
        _style(
            "header",
            _font(11, bold=True, color="FFFFFF"),
            Alignment(horizontal="center", vertical="center", wrap_text=True),
            PatternFill("solid", start_color=ACCENT, end_color=ACCENT),
            Border(bottom=Side(style="medium", color=INK)),
        ),
        _style("text", _font(10), Alignment(vertical="top"), border=_cell_border()),
        _style("wrap", _font(10), Alignment(vertical="top", wrap_text=True), border=_cell_border()),
        _style("number", _font(10), Alignment(horizontal="right", vertical="top"),
               border=_cell_border(), number_format="#,##0"),
        _style("kpi", _font(26, bold=True, color=ACCENT), Alignment(horizontal="center"),
               number_format="#,##0"),
        _style("kpi_failed", _font(26, bold=True, color=ERROR), Alignment(horizontal="center")),
        _style("kpi_label", _font(9, color=MUTED), Alignment(horizontal="center", wrap_text=True)),
    ]


def register_styles(wb: Workbook) -> None:
    for style in build_styles():
        if style.name not in wb.named_styles:
            wb.add_named_style(style)


def style_name(kind: str) -> str:
    return PREFIX + kind
