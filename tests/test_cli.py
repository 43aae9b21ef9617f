from click.testing import CliRunner

from canopy import __version__
from canopy.cli import cli


def test_cli_build(monkeypatch, project):
    monkeypatch.chdir(project)
    result = CliRunner().invoke(cli, ["build"])
    assert result.exit_code == 0
    assert "Built 4 pages (4 written)" in result.output
    assert (project / "output" / "index.html").exists()

    result = CliRunner().invoke(cli, ["build", "--drafts"])
    assert result.exit_code == 0
    assert "Built 5 pages" in result.output


def test_cli_build_reports_template_errors(monkeypatch, project):
    (project / "site" / "broken.jinja").write_text("{% if %}", encoding="utf-8")
    monkeypatch.chdir(project)
    result = CliRunner().invoke(cli, ["build"])
    assert result.exit_code == 1
    assert "Build failed" in result.output
    assert "broken.jinja" in result.output


def test_cli_build_without_site_dir(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    result = CliRunner().invoke(cli, ["build"])
    assert result.exit_code != 0
    assert "Expected site directory" in result.output


def test_cli_watch_builds_then_watches(monkeypatch, project):
    started = []
    monkeypatch.setattr(
        "canopy.watcher.SiteWatcher.run_forever", lambda self: started.append(self)
    )
    monkeypatch.chdir(project)
    result = CliRunner().invoke(cli, ["watch"], catch_exceptions=False)
    assert result.exit_code == 0
    assert "Built 4 pages" in result.output
    assert len(started) == 1
    assert started[0].builder.root is not None


def test_cli_version():
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output
