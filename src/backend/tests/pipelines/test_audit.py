from pipelines.audit import AuditLog


def test_append_writes_one_json_line_per_entry(tmp_path):
    log = AuditLog(tmp_path / "nested" / "audit.jsonl")
    log.append({"decision": {"steps": ["finance"]}})
    log.append({"decision": {"steps": ["manager", "finance"]}})

    lines = log.path.read_text().splitlines()
    assert len(lines) == 2
    assert [entry["decision"]["steps"] for entry in log.read_all()] == [["finance"], ["manager", "finance"]]


def test_read_all_on_missing_file_is_empty(tmp_path):
    assert AuditLog(tmp_path / "audit.jsonl").read_all() == []
