"""
Integration tests for the apimap command line.
"""

from pathlib import Path

import pytest
from click.testing import CliRunner

from apimap.cli.context import AppContext
from apimap.cli.main import cli
from apimap.cli.prompts import prompt_for_backend
from apimap.index.store import IndexStore


FASTAPI_APP = '''from fastapi import APIRouter, FastAPI

app = FastAPI()
router = APIRouter(prefix="/api/items")


@router.get("/{item_id}")
def get_item(item_id: int):
    return {}


@app.get("/health")
def health():
    return "ok"
'''


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def python_repo(repo_root: Path) -> Path:
    (repo_root / "main.py").write_text(FASTAPI_APP, encoding="utf-8")
    return repo_root


def make_app(root: Path, settings, resolver=lambda registry: None) -> AppContext:
    return AppContext(root=root, settings=settings, resolver=resolver)


@pytest.fixture
def indexed_app(repo_root, test_settings, mixed_index):
    IndexStore(repo_root, test_settings).save(mixed_index)
    return make_app(repo_root, test_settings)


class TestSearchCommand:
    """Tests for search and the default-to-search shorthand."""

    def test_bare_pattern_searches(self, runner, indexed_app):
        """Test 'apimap PATTERN' behaves like 'apimap search PATTERN'."""
        result = runner.invoke(cli, ["users", "-t", "c"], obj=indexed_app)

        assert result.exit_code == 0, result.output
        assert "/api/users" in result.output
        assert "Controllers/UsersController.cs:1" in result.output
        assert "Found 1 result(s)" in result.output

    def test_explicit_search(self, runner, indexed_app):
        """Test the search command with a method filter."""
        result = runner.invoke(cli, ["search", "users", "-m", "post"], obj=indexed_app)

        assert result.exit_code == 0, result.output
        assert "POST" in result.output
        assert "GET " not in result.output

    def test_limit_footer(self, runner, indexed_app):
        """Test the footer reports hidden results."""
        result = runner.invoke(cli, ["search", "api", "--limit", "2"], obj=indexed_app)

        assert result.exit_code == 0
        assert "Showing 2 of 12 result(s) (use --limit to see more)" in result.output

    def test_no_matches(self, runner, indexed_app):
        """Test an empty result set exits cleanly."""
        result = runner.invoke(cli, ["zzzzzz"], obj=indexed_app)

        assert result.exit_code == 0
        assert "No matches found." in result.output

    def test_regex_mode(self, runner, indexed_app):
        """Test literal mode through --regex."""
        result = runner.invoke(cli, ["search", "^/api/users/\\{id\\}$", "--regex"], obj=indexed_app)

        assert result.exit_code == 0, result.output
        assert "Found 1 result(s)" in result.output

    def test_invalid_regex(self, runner, indexed_app):
        """Test a malformed regex exits with status 2."""
        result = runner.invoke(cli, ["search", "(bad", "-r"], obj=indexed_app)

        assert result.exit_code == 2
        assert "Invalid pattern" in result.output

    def test_invalid_type(self, runner, indexed_app):
        """Test an unknown --type exits with status 2."""
        result = runner.invoke(cli, ["search", "users", "-t", "x"], obj=indexed_app)

        assert result.exit_code == 2
        assert "Invalid type filter" in result.output

    def test_zero_limit_rejected(self, runner, indexed_app):
        """Test --limit below 1 is a usage error."""
        result = runner.invoke(cli, ["search", "users", "-l", "0"], obj=indexed_app)

        assert result.exit_code == 2


class TestListCommand:
    """Tests for the list command."""

    def test_list_with_method(self, runner, indexed_app):
        """Test listing GET routes."""
        result = runner.invoke(cli, ["list", "-m", "get"], obj=indexed_app)

        assert result.exit_code == 0
        assert "Total: 6 route(s)" in result.output

    def test_list_path_filter(self, runner, indexed_app):
        """Test listing by path substring."""
        result = runner.invoke(cli, ["list", "-p", "settings", "-t", "e"], obj=indexed_app)

        assert result.exit_code == 0
        assert "Total: 3 route(s)" in result.output

    def test_list_empty(self, runner, indexed_app):
        """Test a listing with no matches."""
        result = runner.invoke(cli, ["list", "-p", "nothing-here"], obj=indexed_app)

        assert result.exit_code == 0
        assert "No routes found." in result.output


class TestCacheErrors:
    """Tests for missing and corrupt caches."""

    def test_corrupt_cache(self, runner, repo_root, test_settings):
        """Test a corrupt cache exits 1 and suggests rediscover."""
        store = IndexStore(repo_root, test_settings)
        store.index_path.parent.mkdir(parents=True)
        store.index_path.write_text("{oops", encoding="utf-8")

        result = runner.invoke(cli, ["users"], obj=make_app(repo_root, test_settings))

        assert result.exit_code == 1
        assert "apimap rediscover" in result.output

    def test_missing_index_declined(self, runner, repo_root, test_settings):
        """Test a missing index with no backend chosen exits 1."""
        result = runner.invoke(cli, ["users"], obj=make_app(repo_root, test_settings))

        assert result.exit_code == 1
        assert "No route index found" in result.output


class TestInteractivePrompt:
    """Tests for project-type selection on first use."""

    def test_prompt_selects_backend(self, runner, python_repo, test_settings):
        """Test choosing a backend discovers, saves and searches."""
        app = make_app(python_repo, test_settings, resolver=prompt_for_backend)

        result = runner.invoke(cli, ["health"], obj=app, input="2\n")

        assert result.exit_code == 0, result.output
        assert "What type of project is this?" in result.output
        assert "[1] ASP.NET Web API" in result.output
        assert "/health" in result.output
        assert app.store.exists()

    def test_invalid_selection(self, runner, python_repo, test_settings):
        """Test an out-of-range choice aborts without an index."""
        app = make_app(python_repo, test_settings, resolver=prompt_for_backend)

        result = runner.invoke(cli, ["health"], obj=app, input="9\n")

        assert result.exit_code == 1
        assert "Invalid selection." in result.output
        assert not app.store.exists()


class TestDiscoverCommands:
    """Tests for discover and rediscover."""

    def test_discover_with_type(self, runner, python_repo, test_settings):
        """Test discover writes the index and reports totals."""
        app = make_app(python_repo, test_settings)

        result = runner.invoke(cli, ["discover", "-t", "python"], obj=app)

        assert result.exit_code == 0, result.output
        assert "Discovered 4 route(s)." in result.output
        assert "Total routes: 4" in result.output
        assert str(app.store.index_path) in result.output

    def test_unknown_type(self, runner, python_repo, test_settings):
        """Test an unknown project type lists available types."""
        result = runner.invoke(cli, ["discover", "-t", "rails"], obj=make_app(python_repo, test_settings))

        assert result.exit_code == 1
        assert "Unknown project type: rails" in result.output
        assert "aspnet, python" in result.output

    def test_rediscover_reuses_framework(self, runner, python_repo, test_settings):
        """Test rediscover without --type uses the cached framework."""
        app = make_app(python_repo, test_settings)
        runner.invoke(cli, ["discover", "-t", "python"], obj=app)
        (python_repo / "extra.py").write_text(
            "from flask import Flask\napp = Flask(__name__)\n\n@app.route('/ping')\ndef ping():\n    return ''\n",
            encoding="utf-8"
        )

        result = runner.invoke(cli, ["rediscover"], obj=app)

        assert result.exit_code == 0, result.output
        assert "Total routes: 6" in result.output

    def test_discover_without_type_declined(self, runner, python_repo, test_settings):
        """Test discover with no type and no selection exits 1."""
        result = runner.invoke(cli, ["discover"], obj=make_app(python_repo, test_settings))

        assert result.exit_code == 1


class TestGlobalOptions:
    """Tests for group-level options."""

    def test_root_option(self, runner, repo_root, test_settings, mixed_index, tmp_path):
        """Test --root points commands at another repository."""
        IndexStore(repo_root, test_settings).save(mixed_index)
        elsewhere = tmp_path / "elsewhere"
        elsewhere.mkdir()
        app = make_app(elsewhere, test_settings)

        result = runner.invoke(cli, ["--root", str(repo_root), "list"], obj=app)

        assert result.exit_code == 0, result.output
        assert "Total: 12 route(s)" in result.output

    def test_help_command(self, runner, indexed_app):
        """Test the help command prints usage."""
        result = runner.invoke(cli, ["help"], obj=indexed_app)

        assert result.exit_code == 0
        assert "Usage" in result.output

    def test_version(self, runner):
        """Test --version."""
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert "1.0.0" in result.output
