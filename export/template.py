"""HTML for the EIV teacher template, one logical page at a time."""
from html import escape
from typing import NamedTuple

from schemas import CVResult, Page

BRAND_COLOR = "#F26522"
DEFAULT_LOGO_URL = "https://eiv.edu.vn/wp-content/uploads/2024/04/logo-web2.png"

ABOUT_PARAGRAPHS = (
    "EIV operates in recruiting, managing and supplying high quality Native English Teachers in Vietnam.",
    "Our mission is to bring the international standard in English training to Vietnam "
    "with modern and effective study methodology.",
)

OFFICES = (
    ("EIV – Ho Chi Minh", ("Add: 179EF Cach Mang Thang 8, W5, D3.", "Phone: 028 7309 9959")),
    ("EIV - Ha Noi", ("Add: F1, Platinum Residences, 6 Nguyen Cong Hoan, Ba Dinh.", "Phone: 028 7309 9959")),
    ("EIV - Da Nang", ("Add: F8, Cevimetal Building, 69 Quang Trung, Hai Chau.",)),
)

SIDEBAR_CSS = """
* { font-family: sans-serif; color: #FFFFFF; }
h2 { font-size: 15px; font-weight: bold; text-transform: uppercase; margin: 0 0 8px 0; }
p { font-size: 9.5px; margin: 0 0 4px 0; line-height: 1.3; }
.label { opacity: 0.8; }
.office { font-weight: bold; text-transform: uppercase; margin-top: 8px; }
"""

MAIN_CSS = f"""
* {{ font-family: sans-serif; color: #1E293B; }}
h1 {{ font-size: 20px; font-weight: bold; text-transform: uppercase; margin: 0; color: #0F172A; }}
h3 {{ font-size: 14px; font-weight: bold; text-transform: uppercase; color: {BRAND_COLOR}; margin: 0 0 8px 0; }}
p {{ font-size: 9.5px; margin: 0 0 3px 0; line-height: 1.3; }}
.edu {{ font-weight: bold; text-transform: uppercase; }}
.arrow {{ color: {BRAND_COLOR}; font-weight: bold; }}
.role {{ font-weight: bold; text-transform: uppercase; color: #0F172A; margin-top: 8px; }}
.period {{ font-style: italic; font-weight: bold; color: #64748B; font-size: 9px; }}
ul {{ margin: 2px 0 0 14px; padding: 0; }}
li {{ font-size: 9.5px; line-height: 1.4; margin-bottom: 2px; color: #334155; }}
.section {{ margin-bottom: 14px; }}
.pageno {{ font-size: 7px; color: #CBD5E1; text-transform: uppercase; text-align: right; }}
"""


class PageFragments(NamedTuple):
    sidebar: str
    name: str
    body: str
    footer: str


def render_sidebar(result: CVResult) -> str:
    info = result.sidebar_info
    parts = [
        "<h2>Teacher from EIV</h2>",
        f'<p><span class="label">Nationality:</span> {escape(info.nationality)}</p>',
        f'<p><span class="label">Gender:</span> {escape(info.gender)}</p>',
        "<br/>",
        "<h2>What is EIV ?</h2>",
    ]
    parts += [f"<p>{escape(text)}</p>" for text in ABOUT_PARAGRAPHS]
    parts.append("<br/>")
    for office, lines in OFFICES:
        parts.append(f'<p class="office">{escape(office)}</p>')
        parts += [f"<p>{escape(line)}</p>" for line in lines]
    return "\n".join(parts)


def render_body(result: CVResult, page: Page) -> str:
    parts = []
    if page.show_education:
        parts.append('<div class="section"><h3>Education</h3>')
        for edu in result.education:
            parts.append(f'<p class="edu"><span class="arrow">&raquo;</span> {escape(edu)}</p>')
        parts.append("</div>")

    parts.append('<div class="section"><h3>Professional Experience</h3>')
    for paged in page.entries:
        exp = paged.entry
        parts.append(
            f'<p class="role"><span class="arrow">&raquo;</span> '
            f"{escape(exp.title)}, {escape(exp.company)}</p>"
        )
        parts.append(f'<p class="period">({escape(exp.period)}):</p>')
        if exp.points:
            parts.append("<ul>")
            parts += [f"<li>{escape(point)}</li>" for point in exp.points]
            parts.append("</ul>")
    parts.append("</div>")
    return "\n".join(parts)


def render_page(result: CVResult, page: Page, total_pages: int) -> PageFragments:
    return PageFragments(
        sidebar=render_sidebar(result),
        name=f"<h1>{escape(result.sidebar_info.name)}</h1>",
        body=render_body(result, page),
        footer=f'<p class="pageno">Page {page.page_index + 1} of {total_pages}</p>',
    )


def render_preview_html(result: CVResult, page: Page, total_pages: int) -> str:
    """Self-contained HTML of one page for on-screen preview."""
    frag = render_page(result, page, total_pages)
    photo = (
        f'<img src="{escape(result.photo_url, quote=True)}" '
        'style="width:100%;aspect-ratio:3/4;object-fit:cover;border:3px solid #fff;"/>'
        if result.photo_url else
        '<div style="width:100%;aspect-ratio:3/4;background:#e2e8f0;border:3px solid #fff;"></div>'
    )
    logo = escape(result.company_logo_url or DEFAULT_LOGO_URL, quote=True)
    return f"""
<style>
{_scope(SIDEBAR_CSS, ".eiv-side")}
{_scope(MAIN_CSS, ".eiv-main")}
</style>
<div style="display:flex;width:595px;min-height:842px;background:#fff;margin:0 auto 24px auto;
            box-shadow:0 10px 30px rgba(0,0,0,.15);font-family:Helvetica,Arial,sans-serif;">
  <div class="eiv-side" style="width:35%;background:{BRAND_COLOR};padding:24px;box-sizing:border-box;">
    {photo}
    <div style="margin-top:20px;">{frag.sidebar}</div>
  </div>
  <div class="eiv-main" style="width:65%;padding:28px;box-sizing:border-box;position:relative;">
    <img src="{logo}" style="position:absolute;top:20px;right:20px;width:90px;"/>
    <div style="padding-right:100px;margin-bottom:24px;">{frag.name}</div>
    {frag.body}
    <div style="position:absolute;bottom:12px;right:20px;">{frag.footer}</div>
  </div>
</div>
"""


def _scope(css: str, prefix: str) -> str:
    """Prefix every one-line rule's selector with a container class."""
    rules = []
    for line in css.strip().splitlines():
        selector, _, declarations = line.partition("{")
        scoped = ", ".join(f"{prefix} {s.strip()}" for s in selector.split(","))
        rules.append(f"{scoped} {{{declarations}")
    return "\n".join(rules)
