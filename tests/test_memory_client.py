"""Unit tests for contentstore.storage.memory — MemoryObjectStoreClient."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from contentstore.engine.errors import NotFoundError
from contentstore.storage.memory import MemoryObjectStoreClient


class TestMemoryObjectStoreClient:

    def setup_method(self):
        self.client = MemoryObjectStoreClient({"docs/a.pdf": b"A"})

    def test_seeded(self):
        assert self.client.get("docs/a.pdf") == b"A"
        assert self.client.exists("docs/a.pdf")

    def test_get_missing(self):
        with pytest.raises(NotFoundError):
            self.client.get("docs/none.pdf")

    def test_versions(self):
        self.client.put("docs/a.pdf", b"A2")
        assert self.client.get("docs/a.pdf") == b"A2"
        assert self.client.versions("docs/a.pdf") == [b"A", b"A2"]

    def test_delete_absent_is_fine(self):
        self.client.delete("nothing")
        self.client.delete("docs/a.pdf")
        assert not self.client.exists("docs/a.pdf")

    def test_list_sorted(self):
        self.client.put("docs/c.pdf", b"")
        self.client.put("docs/b.pdf", b"")
        self.client.put("other/x.pdf", b"")
        assert self.client.list_by_prefix("docs/") == ["docs/a.pdf", "docs/b.pdf", "docs/c.pdf"]

    def test_put_versioned(self):
        self.client.put_versioned("docs/b.pdf", b"B")
        assert self.client.versioning_enabled
        assert self.client.calls["enable_versioning"] == 1

    def test_call_counter(self):
        before = self.client.total_calls
        self.client.exists("docs/a.pdf")
        self.client.get("docs/a.pdf")
        assert self.client.total_calls == before + 2

    def test_ping(self):
        assert self.client.ping() is True

    def test_call_counter_under_concurrency(self):
        def work(i):
            self.client.put(f"docs/p{i}.pdf", b"P")
            self.client.exists(f"docs/p{i}.pdf")

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(work, range(400)))

        assert self.client.calls["put"] == 400
        assert self.client.calls["exists"] == 400
        assert len(self.client.list_by_prefix("docs/p")) == 400
