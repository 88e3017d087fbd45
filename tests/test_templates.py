"""Tests for template variable substitution."""

from __future__ import annotations

import subprocess
from datetime import date
from pathlib import Path
from unittest.mock import patch

from steerkit.steering.templates import TemplateEngine
from steerkit.workspace import Workspace


class TestRender:
    def test_substitutes_known_variables(self):
        engine = TemplateEngine()
        result = engine.render(
            "# {{feature-name}} by {{author}}\n{{feature-name}}",
            {"feature-name": "Checkout", "author": "Dana"},
        )
        assert result == "# Checkout by Dana\nCheckout"

    def test_unknown_and_none_are_left(self):
        engine = TemplateEngine()
        result = engine.render("{{date}} {{missing}}", {"date": None})
        assert result == "{{date}} {{missing}}"

    def test_escaped_placeholder_is_literal(self):
        engine = TemplateEngine()
        result = engine.render(r"\{{author}} wrote {{author}}", {"author": "Dana"})
        assert result == "{{author}} wrote Dana"

    def test_available_variables(self):
        assert TemplateEngine().get_available_variables() == [
            "feature-name",
            "date",
            "author",
            "project-name",
        ]


class TestDefaultVariables:
    def test_defaults(self, tmp_path: Path):
        engine = TemplateEngine()
        completed = subprocess.CompletedProcess(args=[], returncode=0, stdout="Dana Lee\n")
        with patch("steerkit.steering.templates.subprocess.run", return_value=completed):
            variables = engine.get_default_variables(Workspace(tmp_path / "shop"))
        assert variables == {
            "date": date.today().isoformat(),
            "author": "Dana Lee",
            "project-name": "shop",
        }

    def test_author_falls_back_to_login(self):
        engine = TemplateEngine()
        with patch("steerkit.steering.templates.subprocess.run", side_effect=OSError("no git")), \
                patch("steerkit.steering.templates.getpass.getuser", return_value="dlee"):
            assert engine.get_default_variables()["author"] == "dlee"

    def test_no_workspace(self):
        with patch("steerkit.steering.templates.subprocess.run", side_effect=OSError):
            assert TemplateEngine().get_default_variables()["project-name"] == "project"
