"""
Tests for the upload bookkeeping of the Streamlit demo.

Session state is replaced by a plain dict; no Streamlit server runs.
"""

import pytest

import app
from gasdoc.pipeline import DocumentPipeline
from gasdoc.schemas import DocumentType


class FakeUpload:
    """Stands in for Streamlit's UploadedFile."""

    def __init__(self, name, content):
        self.name = name
        self.content = content

    def getvalue(self):
        return self.content


ARTHIT = b"STATEMENT OF ACCOUNT\nArthit Gas\nStatement No. 08-18/2025\n"
SUPPLY = b"OPERATOR'S STATEMENT NUMBER 41\nG1/61, G2/61 and G12/48\n"


class TestSyncUploads:

    @pytest.fixture
    def pipeline(self):
        return DocumentPipeline(use_mock_extractor=True)

    def test_upload_is_classified(self, pipeline):
        state = {}
        docs = app.sync_uploads(state, pipeline, [FakeUpload("a.pdf", ARTHIT)], use_mock=True)

        assert docs[0]["classification"].document_type == DocumentType.SINGLE_PLATFORM_STATEMENT
        assert state["uploads_key"] is not None

    def test_reupload_after_clearing(self, pipeline):
        state = {}
        app.sync_uploads(state, pipeline, [FakeUpload("a.pdf", ARTHIT)], use_mock=True)
        assert app.sync_uploads(state, pipeline, [], use_mock=True) is None

        docs = app.sync_uploads(state, pipeline, [FakeUpload("a.pdf", ARTHIT)], use_mock=True)

        assert docs is not None
        assert docs[0]["name"] == "a.pdf"

    def test_same_name_new_content_is_reclassified(self, pipeline):
        state = {}
        app.sync_uploads(state, pipeline, [FakeUpload("a.pdf", ARTHIT)], use_mock=True)
        state["extraction"] = {"idx": 0, "result": object()}

        docs = app.sync_uploads(state, pipeline, [FakeUpload("a.pdf", SUPPLY)], use_mock=True)

        assert docs[0]["classification"].document_type == DocumentType.SUPPLY_MULTI_PLATFORM
        assert state["extraction"] is None

    def test_unchanged_uploads_keep_results(self, pipeline):
        state = {}
        first = app.sync_uploads(state, pipeline, [FakeUpload("a.pdf", ARTHIT)], use_mock=True)
        second = app.sync_uploads(state, pipeline, [FakeUpload("a.pdf", ARTHIT)], use_mock=True)

        assert second is first

    def test_extractor_mode_is_part_of_the_key(self):
        uploads = [FakeUpload("a.pdf", ARTHIT)]

        assert app.uploads_key(uploads, True) != app.uploads_key(uploads, False)
