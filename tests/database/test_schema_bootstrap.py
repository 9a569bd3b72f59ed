from attendance_reconciliation.database.bootstrap import SCHEMA_PATH, iter_statements


def test_shipped_schema_splits_into_create_table_statements():
    statements = list(iter_statements(SCHEMA_PATH.read_text(encoding="utf-8")))

    assert len(statements) == 4
    assert all(s.startswith("CREATE TABLE IF NOT EXISTS") for s in statements)
    assert not any(s.endswith(";") for s in statements)


def test_comments_and_blank_lines_are_dropped():
    sql = "-- header\n\nCREATE TABLE a (\n  id INT\n);\n-- trailing\nSELECT 1"

    assert list(iter_statements(sql)) == ["CREATE TABLE a ( id INT )", "SELECT 1"]
