"""
Printable HTML Report

Renders a self-contained, styled HTML page for a diagnosis result. Output is
a pure function of (result, language, moment).
"""
from datetime import datetime
from html import escape

from poultry_report.core.analysis import AnalysisResult, Language
from poultry_report.core.reports.content import (
    ReportLine,
    ReportSection,
    build_sections,
    format_display_date,
    format_percent,
    label,
)

_STYLE = """
        body {{
            font-family: 'Tajawal', Arial, sans-serif;
            direction: {direction};
            text-align: {text_align};
            margin: 20px;
            line-height: 1.6;
        }}
        .header {{
            text-align: center;
            border-bottom: 2px solid #333;
            padding-bottom: 20px;
            margin-bottom: 30px;
        }}
        .section {{
            margin-bottom: 25px;
            padding: 15px;
            border: 1px solid #ddd;
            border-radius: 8px;
        }}
        .section-title {{
            font-weight: bold;
            color: #4361ee;
            margin-bottom: 10px;
            font-size: 1.2em;
        }}
        .confidence {{
            text-align: center;
            background: #f8f9fa;
            padding: 15px;
            border-radius: 8px;
            margin: 20px 0;
        }}
        .warning {{
            background: #fff3cd;
            border: 1px solid #ffeaa7;
            padding: 15px;
            border-radius: 8px;
            margin: 20px 0;
        }}
        @media print {{
            body {{ margin: 0; }}
            .no-print {{ display: none; }}
        }}"""


def _render_line(line: ReportLine) -> str:
    value = escape(line.value)
    if line.label is None:
        text = f"<strong>{value}</strong>" if line.emphasis else value
    elif line.label_emphasis:
        text = f"<strong>{escape(line.label)}</strong> {value}"
    else:
        text = f"{escape(line.label)} {value}"
    return f"<p>{text}</p>"


def _render_section(section: ReportSection) -> str:
    lines = "\n".join(f"        {_render_line(line)}" for line in section.lines)
    return (
        f'    <div class="section" data-section="{section.key}">\n'
        f'        <div class="section-title">{escape(section.title)}</div>\n'
        f"{lines}\n"
        f"    </div>"
    )


def render_printable_html(result: AnalysisResult, language: Language, moment: datetime) -> str:
    """
    Render the printable report page.

    Args:
        result: Diagnosis result to render
        language: Report language; drives dir/lang and text alignment
        moment: Timestamp shown in the header

    Returns:
        Complete HTML document

    Raises:
        MissingLocalizationError: a per-language body field has no text
    """
    sections = "\n".join(_render_section(s) for s in build_sections(result, language))
    title = escape(label(language, "title"))
    style = _STYLE.format(direction=language.direction, text_align=language.text_align)

    return f"""<!DOCTYPE html>
<html dir="{language.direction}" lang="{language.value}">
<head>
    <meta charset="UTF-8">
    <title>{title}</title>
    <style>{style}
    </style>
</head>
<body>
    <div class="header">
        <h1>{title}</h1>
        <p>{escape(label(language, "subtitle"))}</p>
        <p>{format_display_date(moment, language)}</p>
    </div>

    <div class="confidence">
        <h3>{escape(label(language, "confidence_heading"))}</h3>
        <h2>{escape(format_percent(result.overall_confidence))}</h2>
    </div>

    <div class="warning">
        <strong>{escape(label(language, "disclaimer_heading"))}</strong>
        {escape(label(language, "disclaimer"))}
    </div>

{sections}
</body>
</html>
"""
