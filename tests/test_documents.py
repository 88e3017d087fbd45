"""Tests for custom steering document management."""

from __future__ import annotations

from datetime import date

import pytest

from steerkit.errors import (
    DocumentExistsError,
    InvalidDocumentNameError,
    NotCustomDocumentError,
    OperationCancelledError,
)
from steerkit.prompts import AutoPrompter
from steerkit.steering.documents import (
    CustomSteeringDocuments,
    generate_custom_steering_template,
    validate_document_name,
)
from steerkit.steering.validator import SteeringValidator
from steerkit.workspace import Workspace


@pytest.fixture
def documents(workspace: Workspace) -> CustomSteeringDocuments:
    return CustomSteeringDocuments(workspace)


class TestNames:
    @pytest.mark.parametrize("name", ["api", "api-design", "v2-rollout", "a" * 50])
    def test_valid(self, name: str):
        assert validate_document_name(name) is None

    @pytest.mark.parametrize(
        "name, message",
        [
            ("", "required"),
            ("API", "kebab-case"),
            ("api_design", "kebab-case"),
            ("-api", "kebab-case"),
            ("ab", "at least 3"),
            ("a" * 51, "50 characters or less"),
        ],
    )
    def test_invalid(self, name: str, message: str):
        assert message in validate_document_name(name)


class TestTemplate:
    def test_title_and_date(self):
        content = generate_custom_steering_template("api-design", today=date(2024, 5, 1))
        assert content.startswith("# Api Design Guide\n")
        assert "**Created:** 2024-05-01" in content

    def test_template_passes_validation(self):
        result = SteeringValidator().validate(generate_custom_steering_template("api-design"))
        assert result.is_valid


class TestCustomDocuments:
    def test_create(self, documents: CustomSteeringDocuments, workspace: Workspace):
        path = documents.create("api-design")
        assert path == workspace.steering_path / "custom-api-design.md"
        assert path.read_text().startswith("# Api Design Guide")

    def test_create_invalid_name(self, documents: CustomSteeringDocuments):
        with pytest.raises(InvalidDocumentNameError):
            documents.create("Bad Name")

    def test_create_existing(self, documents: CustomSteeringDocuments):
        documents.create("api-design")
        with pytest.raises(DocumentExistsError, match="custom-api-design.md"):
            documents.create("api-design")
        documents.create("api-design", overwrite=True)

    def test_rename(self, documents: CustomSteeringDocuments, workspace: Workspace):
        path = documents.create("api-design")
        path.write_text("team content")
        new_path = documents.rename(path, "api-style")
        assert new_path.name == "custom-api-style.md"
        assert new_path.read_text() == "team content"
        assert not path.exists()

    def test_rename_same_name(self, documents: CustomSteeringDocuments):
        path = documents.create("api-design")
        assert documents.rename(path, "api-design") == path
        assert path.exists()

    def test_rename_onto_existing(self, documents: CustomSteeringDocuments):
        first = documents.create("api-design")
        documents.create("api-style")
        with pytest.raises(DocumentExistsError, match="Choose a different name"):
            documents.rename(first, "api-style")

    def test_only_custom_documents(self, documents: CustomSteeringDocuments, workspace):
        tech = workspace.steering_path / "tech.md"
        tech.write_text("# Tech\n")
        with pytest.raises(NotCustomDocumentError):
            documents.rename(tech, "tech-stack")
        with pytest.raises(NotCustomDocumentError):
            documents.delete(workspace.steering_path / "strategy-devops.md")
        assert tech.exists()

    def test_delete(self, documents: CustomSteeringDocuments):
        path = documents.create("api-design")
        documents.delete(path)
        assert not path.exists()

    def test_delete_declined(self, workspace: Workspace):
        documents = CustomSteeringDocuments(workspace, AutoPrompter(confirm=False))
        path = documents.create("api-design")
        with pytest.raises(OperationCancelledError):
            documents.delete(path)
        assert path.exists()

    def test_outside_steering_directory(
        self, documents: CustomSteeringDocuments, workspace: Workspace, tmp_path
    ):
        outside = tmp_path / "custom-notes.md"
        outside.write_text("# Notes\n")
        with pytest.raises(NotCustomDocumentError, match="Not a steering document"):
            documents.delete(outside)
        with pytest.raises(NotCustomDocumentError):
            documents.rename(outside, "team-notes")
        with pytest.raises(NotCustomDocumentError):
            documents.delete(workspace.steering_path / ".." / "custom-notes.md")
        assert outside.exists()
        assert not (workspace.steering_path / "custom-team-notes.md").exists()
