"""Built-in website templates for generated lead sites.

Each style is a single self-contained HTML document. Lead fields are
HTML-escaped before they are placed into the markup.
"""

import html
from typing import Any
from urllib.parse import quote

from .models import Lead

NEO_GLASS = "neo-glass"
MINIMAL_LUXE = "minimal-luxe"
BOLD_EDITORIAL = "bold-editorial"
AI_PREMIUM = "ai-premium"

TEMPLATE_STYLES = [NEO_GLASS, MINIMAL_LUXE, BOLD_EDITORIAL, AI_PREMIUM]

AI_IMAGE_DEFAULTS = {
    "HERO_IMAGE": "https://picsum.photos/seed/hero/1920/1080",
    "SERVICE_IMAGE_1": "https://picsum.photos/seed/s1/800/600",
    "SERVICE_IMAGE_2": "https://picsum.photos/seed/s2/800/600",
    "SERVICE_IMAGE_3": "https://picsum.photos/seed/s3/800/600",
    "GALLERY_IMAGE_1": "https://picsum.photos/seed/g1/800/800",
    "GALLERY_IMAGE_2": "https://picsum.photos/seed/g2/800/800",
    "ABOUT_IMAGE": "https://picsum.photos/seed/about/1200/800",
    "TESTIMONIAL_BG": "https://picsum.photos/seed/tbg/1920/1080",
}


def resolve_style(style: str) -> str:
    """Return ``style`` if known, else the default ``neo-glass``."""
    return style if style in TEMPLATE_STYLES else NEO_GLASS


def _esc(value: Any) -> str:
    return html.escape(str(value), quote=True)


def lead_vars(lead: Lead) -> dict[str, str]:
    """Escaped display values for a lead, with friendly defaults."""
    industry = lead.industry or "local services"
    topic = quote(industry)
    return {
        "name": _esc(lead.name or "Local Business"),
        "city": _esc(lead.city or "Your City"),
        "phone": _esc(lead.phone or "(000) 000-0000"),
        "email": _esc(lead.email or "hello@example.com"),
        "address": _esc(lead.address or "Serving your area"),
        "rating": _esc(lead.rating or "4.9"),
        "reviews": _esc(lead.reviews or "120"),
        "industry": _esc(industry),
        "hero_image": f"https://source.unsplash.com/1600x1100/?{topic},professional",
        "support_image": f"https://source.unsplash.com/1200x900/?{topic},team",
    }


_HEAD = (
    '<!doctype html><html><head><meta charset="utf-8"/>'
    '<meta name="viewport" content="width=device-width,initial-scale=1"/>'
    "<title>{name} | {city}</title><style>{css}</style></head>"
)

_NEO_GLASS_CSS = (
    "body{{margin:0;font-family:Inter,system-ui;background:#070b16;color:#e8f0ff}}"
    ".wrap{{max-width:1140px;margin:0 auto;padding:24px}}"
    ".panel{{background:rgba(17,28,52,.58);backdrop-filter:blur(14px);"
    "border:1px solid rgba(173,198,255,.23);border-radius:22px;padding:28px;margin-top:14px}}"
    ".muted{{color:#a9bcde}}.cta{{display:inline-block;margin-top:14px;padding:12px 16px;"
    "border-radius:12px;background:#7ee0ff;color:#032626;text-decoration:none;font-weight:700}}"
    "img{{width:100%;max-height:420px;object-fit:cover;border-radius:20px}}"
)

_MINIMAL_LUXE_CSS = (
    "body{{margin:0;font-family:Inter,system-ui;color:#0f172a;background:#f7f8fb}}"
    ".wrap{{max-width:1100px;margin:0 auto;padding:20px}}"
    ".blk{{background:#fff;border:1px solid #e7eaf1;border-radius:18px;padding:24px;margin-top:14px}}"
    ".btn{{display:inline-block;background:#0f172a;color:#fff;padding:11px 14px;"
    "border-radius:10px;text-decoration:none;font-weight:700}}.muted{{color:#51607a}}"
    "img{{width:100%;max-height:420px;object-fit:cover;border-radius:18px}}"
)

_BOLD_EDITORIAL_CSS = (
    "body{{margin:0;font-family:Manrope,Inter,system-ui;background:#05070c;color:#f2f6ff}}"
    ".wrap{{max-width:1200px;margin:0 auto;padding:20px}}"
    ".card{{background:#0d162a;border:1px solid #27395c;border-radius:14px;padding:14px;margin-top:12px}}"
    ".sub{{color:#b1bfdc}}.cta{{display:inline-block;margin-top:12px;background:#7c3aed;"
    "color:white;padding:12px 16px;border-radius:12px;text-decoration:none;font-weight:700}}"
    "img{{width:100%;height:420px;object-fit:cover;border-radius:22px}}"
)


def _neo_glass(v: dict[str, str]) -> str:
    return _HEAD.format(css=_NEO_GLASS_CSS.format(), **v) + (
        '<body><div class="wrap"><section class="panel">'
        '<h1>{name}</h1><p class="muted">Premium {industry} in {city}.</p>'
        "<p><strong>{rating} &#9733;</strong> from {reviews}+ reviews</p>"
        '<a class="cta" href="tel:{phone}">Call {phone}</a></section>'
        '<img src="{hero_image}" alt="{name}"/>'
        '<section class="panel"><h2>Contact</h2><p class="muted">{address}<br/>{email}</p></section>'
        "</div></body></html>"
    ).format(**v)


def _minimal_luxe(v: dict[str, str]) -> str:
    return _HEAD.format(css=_MINIMAL_LUXE_CSS.format(), **v) + (
        '<body><div class="wrap"><section class="blk">'
        '<div class="muted">{city} &middot; {industry}</div><h1>{name}</h1>'
        '<a class="btn" href="tel:{phone}">Book a Call</a>'
        '<p class="muted">{rating}&#9733; rating, {reviews}+ reviews</p></section>'
        '<img src="{support_image}" alt="team"/>'
        '<section class="blk"><p><strong>Address:</strong> {address}<br/>'
        "<strong>Email:</strong> {email}</p></section></div></body></html>"
    ).format(**v)


def _bold_editorial(v: dict[str, str]) -> str:
    return _HEAD.format(css=_BOLD_EDITORIAL_CSS.format(), **v) + (
        '<body><div class="wrap"><img src="{hero_image}" alt="{name}"/>'
        '<div class="sub">{city} &middot; {industry}</div><h1>{name}</h1>'
        '<a class="cta" href="mailto:{email}">Get Proposal</a>'
        '<article class="card"><h3>{rating} &#9733; Trust Score</h3>'
        '<p class="sub">Based on {reviews} public reviews.</p></article>'
        '<article class="card"><h3>Direct Contact</h3><p class="sub">{phone}<br/>{address}</p></article>'
        "</div></body></html>"
    ).format(**v)


_BUILDERS = {
    NEO_GLASS: _neo_glass,
    MINIMAL_LUXE: _minimal_luxe,
    BOLD_EDITORIAL: _bold_editorial,
}


def build_site(style: str, lead: Lead) -> str:
    """Render a built-in style for ``lead``.

    Unknown styles, and ``ai-premium`` which has no built-in markup, render
    as ``neo-glass``.
    """
    builder = _BUILDERS.get(style, _neo_glass)
    return builder(lead_vars(lead))


def ai_site_prompt(lead: Lead) -> str:
    """Prompt describing a lead for the ``ai-premium`` generator."""
    return (
        "Generate a stunning, production-ready website for this local business:\n"
        f"Business: {lead.name}\n"
        f"Industry: {lead.industry}\n"
        f"City: {lead.city}\n"
        f"Address: {lead.address or 'local area'}\n"
        f"Phone: {lead.phone or 'contact us'}\n"
        f"Rating: {lead.rating or '5.0'} ({lead.reviews or 50} reviews)"
    )


def fill_ai_placeholders(document: str, lead: Lead) -> str:
    """Substitute image and business placeholders in a generated document."""
    values = dict(AI_IMAGE_DEFAULTS)
    values.update({
        "business_name": _esc(lead.name),
        "city": _esc(lead.city),
        "phone": _esc(lead.phone),
        "email": _esc(lead.email),
        "address": _esc(lead.address),
        "rating": _esc(lead.rating or "5.0"),
        "reviews": _esc(lead.reviews or 50),
        "industry": _esc(lead.industry),
        "instagram": _esc(lead.socials.get("instagram", "")),
        "facebook": _esc(lead.socials.get("facebook", "")),
        "tiktok": _esc(lead.socials.get("tiktok", "")),
        "linkedin": _esc(lead.socials.get("linkedin", "")),
    })
    for key, value in values.items():
        document = document.replace("{{" + key + "}}", value)
    return document
