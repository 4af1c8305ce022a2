"""Tests for the command-line interface."""

import json

import pytest

from website_biz.main import action_params, create_parser, main


def run_cli(capsys, cfg, *argv):
    code = main(list(argv), cfg=cfg)
    captured = capsys.readouterr()
    output = json.loads(captured.out) if code == 0 else None
    return code, output, captured.err


class TestParser:
    """Tests for argument parsing."""

    @pytest.mark.unit
    def test_scrape_location_words_joined(self):
        args = create_parser().parse_args(["scrape", "plumbers", "Austin", "TX",
                                           "--max-results", "5"])
        assert action_params(args) == {"query": "plumbers", "location": "Austin TX",
                                       "maxResults": 5}

    @pytest.mark.unit
    def test_generate_site_params(self):
        args = create_parser().parse_args(["generate-site", "leads-x.json", "2",
                                           "--style", "ai-premium", "--force"])
        assert action_params(args) == {"leadsFile": "leads-x.json", "index": 2,
                                       "templateStyle": "ai-premium", "forceRegenerate": True}

    @pytest.mark.unit
    def test_command_required(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args([])


class TestCommands:
    """Tests running whole commands against a temporary data directory."""

    @pytest.mark.unit
    def test_check(self, capsys, make_config):
        code, output, _ = run_cli(capsys, make_config(), "check")
        assert code == 0
        assert output["ok"] is False
        assert "GOOGLE_MAPS_API_KEY" in output["missing"]

    @pytest.mark.unit
    def test_job_round_trip(self, capsys, make_config):
        cfg = make_config()
        code, job, _ = run_cli(capsys, cfg, "job-create", "daily-set", "--payload",
                               '{"query": "hvac", "location": "Springfield"}')
        assert code == 0
        assert job["status"] == "queued"

        code, processed, _ = run_cli(capsys, cfg, "process-next")
        assert processed["job"]["status"] == "done"

        code, fetched, _ = run_cli(capsys, cfg, "job-get", job["id"])
        assert fetched["result"]["query"] == "hvac"

        code, listed, _ = run_cli(capsys, cfg, "job-list", "--limit", "1")
        assert [j["id"] for j in listed] == [job["id"]]

    @pytest.mark.unit
    def test_invalid_payload(self, capsys, make_config):
        code, _, err = run_cli(capsys, make_config(), "job-create", "scrape", "--payload", "[1]")
        assert code == 1
        assert "ERROR: payload must be a JSON object" in err

    @pytest.mark.unit
    def test_templates(self, capsys, make_config):
        cfg = make_config()
        code, added, _ = run_cli(capsys, cfg, "template-add", "Follow up", "Hi {{business_name}}",
                                 "Body")
        assert code == 0
        run_cli(capsys, cfg, "template-default", "follow up")
        code, listed, _ = run_cli(capsys, cfg, "template-list")
        assert [(t["name"], t["is_default"]) for t in listed] == [
            ("Cold intro", False), ("Follow up", True),
        ]

    @pytest.mark.unit
    def test_scrape_with_zero_budget(self, capsys, make_config):
        code, output, _ = run_cli(capsys, make_config(), "scrape", "plumbers", "Austin",
                                  "--max-results", "0")
        assert code == 0
        assert output == {"outFile": "leads-plumbers-austin.json", "count": 0, "newCount": 0}

    @pytest.mark.unit
    def test_send_without_config_fails(self, capsys, make_config):
        code, _, err = run_cli(capsys, make_config(), "send", "leads-x.json")
        assert code == 1
        assert "ERROR: SENDGRID_API_KEY is required for email delivery" in err

    @pytest.mark.unit
    def test_daily_set_and_status(self, capsys, make_config):
        cfg = make_config()
        code, state, _ = run_cli(capsys, cfg, "daily-set", "hvac", "Springfield", "IL")
        assert state["location"] == "Springfield IL"

        code, status, _ = run_cli(capsys, cfg, "status")
        assert status["daily"]["query"] == "hvac"
        assert status["websites"] == 0
