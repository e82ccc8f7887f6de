"""
Tests for persistence — the publish audit ledger.
"""

import json
from pathlib import Path

from modpub.core.persistence.audit import (
    DEFAULT_AUDIT_DIR,
    DEFAULT_AUDIT_FILE,
    AuditEntry,
    AuditWriter,
    generate_operation_id,
)


class TestAuditWriter:
    def test_write_and_read(self, tmp_path: Path):
        writer = AuditWriter(tmp_path / "audit.ndjson")
        writer.write(AuditEntry(
            operation_id="pub-1",
            module="org.acme:widget:1.0.0",
            configurations=["runtime"],
            targets=["local", "shared"],
            status="partial",
            succeeded_targets=["local"],
            failed_target="shared",
            error="Publication to 'shared' failed: disk full",
        ))

        [entry] = writer.read_all()
        assert entry.operation_id == "pub-1"
        assert entry.failed_target == "shared"
        assert entry.targets == ["local", "shared"]

    def test_one_json_line_per_entry(self, tmp_path: Path):
        path = tmp_path / "audit.ndjson"
        writer = AuditWriter(path)
        writer.write(AuditEntry(operation_id="a", status="ok"))
        writer.write(AuditEntry(operation_id="b", status="failed"))

        lines = path.read_text().strip().split("\n")
        assert len(lines) == 2
        assert json.loads(lines[1])["operation_id"] == "b"
        assert writer.entry_count() == 2

    def test_append_only(self, tmp_path: Path):
        path = tmp_path / "audit.ndjson"
        AuditWriter(path).write(AuditEntry(operation_id="first"))
        AuditWriter(path).write(AuditEntry(operation_id="second"))
        assert [e.operation_id for e in AuditWriter(path).read_all()] == ["first", "second"]

    def test_read_recent(self, tmp_path: Path):
        writer = AuditWriter(tmp_path / "audit.ndjson")
        for i in range(5):
            writer.write(AuditEntry(operation_id=f"pub-{i}"))
        assert [e.operation_id for e in writer.read_recent(2)] == ["pub-3", "pub-4"]
        assert writer.read_recent(0) == []

    def test_corrupt_line_skipped(self, tmp_path: Path):
        path = tmp_path / "audit.ndjson"
        writer = AuditWriter(path)
        writer.write(AuditEntry(operation_id="good"))
        with path.open("a") as f:
            f.write("not json {{{\n")
        writer.write(AuditEntry(operation_id="also-good"))

        assert [e.operation_id for e in writer.read_all()] == ["good", "also-good"]

    def test_missing_ledger(self, tmp_path: Path):
        writer = AuditWriter(tmp_path / "none.ndjson")
        assert writer.read_all() == []
        assert writer.entry_count() == 0

    def test_default_path_under_project_root(self, tmp_path: Path):
        writer = AuditWriter(project_root=tmp_path)
        assert writer.path == tmp_path / DEFAULT_AUDIT_DIR / DEFAULT_AUDIT_FILE
        writer.write(AuditEntry(operation_id="x"))
        assert writer.path.is_file()


class TestOperationId:
    def test_format_and_uniqueness(self):
        a, b = generate_operation_id(), generate_operation_id()
        assert a.startswith("pub-")
        assert a != b
