"""Unit tests for built-in site styles and log formatting."""

import json
import logging

import pytest

from website_biz.logging_utils import HumanReadableFormatter, StructuredFormatter
from website_biz.sites import (
    AI_PREMIUM,
    NEO_GLASS,
    TEMPLATE_STYLES,
    build_site,
    fill_ai_placeholders,
    resolve_style,
)

from conftest import make_lead


class TestSites:
    """Tests for site rendering."""

    @pytest.mark.unit
    def test_unknown_style_resolves_to_default(self):
        assert resolve_style("vaporwave") == NEO_GLASS
        assert resolve_style(AI_PREMIUM) == AI_PREMIUM

    @pytest.mark.unit
    @pytest.mark.parametrize("style", TEMPLATE_STYLES[:3])
    def test_builtin_styles_escape_fields(self, style):
        lead = make_lead('Bob "The Builder" & Sons')
        html = build_site(style, lead)
        assert html.startswith("<!doctype html>")
        assert "Bob &quot;The Builder&quot; &amp; Sons" in html
        assert "{name}" not in html

    @pytest.mark.unit
    def test_defaults_for_missing_fields(self):
        html = build_site(NEO_GLASS, make_lead("Acme"))
        assert "(000) 000-0000" in html

    @pytest.mark.unit
    def test_fill_ai_placeholders(self):
        lead = make_lead("Acme")
        lead.socials = {"instagram": "https://instagram.com/acme"}
        html = fill_ai_placeholders(
            "<h1>{{business_name}}</h1><a href='{{instagram}}'></a><img src='{{ABOUT_IMAGE}}'>",
            lead,
        )
        assert "<h1>Acme</h1>" in html
        assert "https://instagram.com/acme" in html
        assert "{{" not in html


class TestLogFormatters:
    """Tests for the structured and human-readable formatters."""

    def make_record(self, **extra) -> logging.LogRecord:
        record = logging.LogRecord("website_biz.worker", logging.INFO, __file__, 1,
                                   "Claimed job %s", ("abc",), None)
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    @pytest.mark.unit
    def test_structured_includes_extra(self):
        line = StructuredFormatter().format(self.make_record(job_id="abc"))
        data = json.loads(line)
        assert data["message"] == "Claimed job abc"
        assert data["service"] == "website-biz"
        assert data["extra"] == {"job_id": "abc"}

    @pytest.mark.unit
    def test_human_readable_without_colors(self):
        line = HumanReadableFormatter(use_colors=False).format(self.make_record())
        assert "INFO" in line
        assert "[website_biz.worker] Claimed job abc" in line
