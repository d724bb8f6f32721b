"""Unit tests for contentstore.documents.artifacts — ArtifactStore."""

import json
import pytest
from unittest.mock import patch

from contentstore.documents.artifacts import ArtifactStore, permission_override
from contentstore.documents.keys import ArtifactKind
from contentstore.documents.models import AnnotationProperties, PermissionLevel
from contentstore.engine.errors import NotFoundError, ReadOnlyError, StoreUnavailableError
from contentstore.engine.logging import FileLogger
from contentstore.storage.memory import MemoryObjectStoreClient

from helpers import make_config


class TestArtifactCrud:

    def setup_method(self):
        self.client = MemoryObjectStoreClient()
        self.store = ArtifactStore(self.client, make_config(folder_name="docs/"))

    @pytest.mark.parametrize("kind,key", [
        (ArtifactKind.BOOKMARK, "docs/x.pdf.bookmarks.xml"),
        (ArtifactKind.NOTE, "docs/x.pdf.notes.xml"),
        (ArtifactKind.WATERMARK, "docs/x.pdf.watermarks.json"),
        (ArtifactKind.OCR_TEXT, "docs/x.pdf.ocr-text.json"),
    ])
    def test_save_and_get(self, kind, key):
        assert self.store.save("x.pdf", kind, b"data") == key
        assert self.store.get("x.pdf", kind) == b"data"

    def test_get_missing(self):
        with pytest.raises(NotFoundError):
            self.store.get("x.pdf", ArtifactKind.NOTE)

    def test_delete_absent_is_noop(self):
        assert self.store.delete("x.pdf", ArtifactKind.NOTE) is False
        assert self.client.calls["delete"] == 0

    def test_delete(self):
        self.store.save("x.pdf", ArtifactKind.NOTE, b"n")
        assert self.store.delete("x.pdf", ArtifactKind.NOTE) is True
        assert not self.store.exists("x.pdf", ArtifactKind.NOTE)

    def test_scoped_under_basename(self):
        self.store.save("in/x.pdf", ArtifactKind.BOOKMARK, b"b")
        assert self.client.list_by_prefix("docs/") == ["docs/x.pdf.bookmarks.xml"]


class TestAnnotations:

    def setup_method(self):
        self.client = MemoryObjectStoreClient()
        self.store = ArtifactStore(self.client, make_config(folder_name="docs"))

    def test_save_annotation(self):
        assert self.store.save_annotation("x.pdf", "sig", b"S") == "docs/x.pdf.sig.ann"

    def test_page_scoped(self):
        assert self.store.save_annotation("x.pdf", "sig", b"S", page_index=2) == "docs/x.pdf.sig-page2.ann"

    def test_properties_do_not_change_key(self):
        props = AnnotationProperties(permission_level=PermissionLevel.VIEW, redaction_flag=True)
        assert self.store.save_annotation("x.pdf", "sig", b"S", properties=props) == "docs/x.pdf.sig.ann"

    def test_list_annotation_ids(self):
        self.client.put("docs/x.pdf", b"doc")
        self.client.put("docs/x.pdfa.other.ann", b"")
        self.client.put("docs/y.pdf.foreign.ann", b"")
        self.store.save_annotation("x.pdf", "a", b"")
        self.store.save_annotation("x.pdf", "b", b"", page_index=0)
        self.store.save("x.pdf", ArtifactKind.NOTE, b"")
        assert self.store.list_annotation_ids("x.pdf") == ["a", "b-page0"]

    def test_existing_annotation_hash(self):
        for page in (0, 1):
            self.store.save_annotation("x.pdf", "sig", b"", page_index=page)
        self.store.save_annotation("x.pdf", "hl", b"")
        assert self.store.existing_annotation_hash("x.pdf") == {"sig": "sig", "hl": "hl"}

    def test_properties_only_for_existing_layer(self):
        assert self.store.get_annotation_properties("x.pdf", "sig") is None
        self.store.save_annotation("x.pdf", "sig", b"")
        props = self.store.get_annotation_properties("x.pdf", "sig")
        assert props.permission_level is PermissionLevel.DELETE
        assert props.redaction_flag is False

    def test_permission_override(self):
        self.store.save_annotation("x.pdf", "sig", b"")
        cid = json.dumps({"annotationPermissionLevel": 10})
        assert self.store.get_annotation_properties("x.pdf", "sig", cid).permission_level is PermissionLevel.VIEW

    @pytest.mark.parametrize("cid", [None, "", "not json", "{}", '{"annotationPermissionLevel": 7}', "[]"])
    def test_permission_override_ignored(self, cid):
        assert permission_override(cid) is None

    def test_get_all_annotations(self):
        self.store.save_annotation("x.pdf", "a", b"A")
        self.store.save_annotation("x.pdf", "b", b"B")
        layers = self.store.get_all_annotations("x.pdf")
        assert list(layers) == ["a", "b"]
        assert layers["b"].data == b"B"
        assert layers["a"].document_id == "x.pdf"
        assert layers["a"].properties.permission_level is PermissionLevel.DELETE

    def test_get_all_skips_vanished_layer(self):
        self.store.save_annotation("x.pdf", "a", b"A")
        self.store.save_annotation("x.pdf", "b", b"B")
        real_exists = self.client.exists

        def exists(key):
            return False if key.endswith(".b.ann") else real_exists(key)

        with patch.object(self.client, "exists", side_effect=exists):
            layers = self.store.get_all_annotations("x.pdf")
        assert list(layers) == ["a"]


class TestDeleteMany:

    def setup_method(self):
        self.client = MemoryObjectStoreClient()
        self.store = ArtifactStore(self.client, make_config())
        for layer in ("a", "b", "c"):
            self.store.save_annotation("x.pdf", layer, b"")

    def test_best_effort(self):
        result = self.store.delete_many("x.pdf", ["a", None, "", "missing", "c"])
        assert result.succeeded == ["a", "c"]
        assert result.skipped == ["missing"]
        assert result.ok
        assert self.store.list_annotation_ids("x.pdf") == ["b"]

    def test_empty_input(self):
        assert self.store.delete_many("x.pdf", None).ok
        assert self.store.delete_many("x.pdf", []).succeeded == []

    def test_failure_recorded_and_rest_attempted(self, tmp_path):
        fl = FileLogger(str(tmp_path))
        store = ArtifactStore(self.client, make_config(), fl)
        real_delete = self.client.delete

        def delete(key):
            if key == "x.pdf.a.ann":
                raise StoreUnavailableError("down", key=key)
            real_delete(key)

        with patch.object(self.client, "delete", side_effect=delete):
            result = store.delete_many("x.pdf", ["a", "b", "c"])

        assert result.succeeded == ["b", "c"]
        assert not result.ok
        assert result.last_error.key == "x.pdf.a.ann"
        assert result.last_error.error_type == "StoreUnavailableError"
        assert fl.query("artifacts", filters={"event": "partial_failure"})[0]["key"] == "x.pdf.a.ann"


class TestArtifactReadOnly:

    def setup_method(self):
        self.client = MemoryObjectStoreClient()
        self.store = ArtifactStore(self.client, make_config(read_only=True))

    def test_save_refused(self):
        with pytest.raises(ReadOnlyError):
            self.store.save("x.pdf", ArtifactKind.NOTE, b"n")
        with pytest.raises(ReadOnlyError):
            self.store.save_annotation("x.pdf", "bad/layer", b"")
        assert self.client.total_calls == 0

    def test_delete_refused(self):
        with pytest.raises(ReadOnlyError):
            self.store.delete("x.pdf", ArtifactKind.NOTE)
        with pytest.raises(ReadOnlyError):
            self.store.delete_many("x.pdf", ["a"])
        assert self.client.total_calls == 0
