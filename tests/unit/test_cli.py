import sitescraper.cli as cli_module
from sitescraper.settings import ScraperSettings, SettingsError

REGISTRY = {"https://example.com/about": 404, "https://example.com": 200}


def fake_scrape(calls):
    def _scrape(start_url, settings, sink=None):
        calls.append((start_url, settings))
        if sink is not None:
            sink(dict(REGISTRY))
        return dict(REGISTRY), 12.5

    return _scrape


def test_cli_flags_override_environment_settings(monkeypatch, tmp_path):
    calls = []
    monkeypatch.setattr(cli_module, "load_settings", lambda: ScraperSettings(path_depth=5, skip_words=["env"]))
    monkeypatch.setattr(cli_module, "scrape", fake_scrape(calls))

    exit_code = cli_module.main([
        "https://example.com",
        "--limit", "10",
        "--depth", "2",
        "--include-path", "/docs",
        "--skip-word", "logout",
        "--skip-word", "print",
        "--no-save",
    ])

    assert exit_code == 0
    start_url, settings = calls[0]
    assert start_url == "https://example.com"
    assert settings.requests_limit == 10
    assert settings.path_depth == 2
    assert settings.include_path == "/docs"
    assert settings.skip_words == ["logout", "print"]


def test_cli_writes_output_file(monkeypatch, tmp_path):
    monkeypatch.setattr(cli_module, "load_settings", lambda: ScraperSettings())
    monkeypatch.setattr(cli_module, "scrape", fake_scrape([]))
    out = tmp_path / "links.out"

    exit_code = cli_module.main(["https://example.com", "--out", str(out), "--output-http-code"])

    assert exit_code == 0
    assert out.read_text(encoding="utf-8") == "https://example.com|200\nhttps://example.com/about|404"


def test_cli_prints_to_stdout_in_visit_order(monkeypatch, capsys):
    monkeypatch.setattr(cli_module, "load_settings", lambda: ScraperSettings())
    monkeypatch.setattr(cli_module, "scrape", fake_scrape([]))

    exit_code = cli_module.main(["https://example.com", "--out", "-", "--no-sort"])

    assert exit_code == 0
    assert capsys.readouterr().out == "https://example.com/about\nhttps://example.com\n"


def test_cli_no_save_skips_sink(monkeypatch, tmp_path):
    monkeypatch.setattr(cli_module, "load_settings", lambda: ScraperSettings())
    monkeypatch.setattr(cli_module, "scrape", fake_scrape([]))
    monkeypatch.chdir(tmp_path)

    exit_code = cli_module.main(["https://example.com", "--no-save"])

    assert exit_code == 0
    assert list(tmp_path.iterdir()) == []


def test_cli_reports_invalid_settings(monkeypatch, capsys):
    def broken_settings():
        raise SettingsError("PATH_DEPTH must be an integer, got 'deep'")

    monkeypatch.setattr(cli_module, "load_settings", broken_settings)

    exit_code = cli_module.main(["https://example.com"])

    assert exit_code == 2
    assert "PATH_DEPTH must be an integer" in capsys.readouterr().err


def test_cli_rejects_negative_flags(monkeypatch, capsys):
    monkeypatch.setattr(cli_module, "load_settings", lambda: ScraperSettings())

    exit_code = cli_module.main(["https://example.com", "--depth", "-1"])

    assert exit_code == 2
    assert "--depth must not be negative" in capsys.readouterr().err
