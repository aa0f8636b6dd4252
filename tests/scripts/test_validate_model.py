"""Tests for the validate_model command-line script."""

import json
import sys

import pytest

from scripts.validate_model import _load_table, main

TABLE = {
    "Z": [[1.0, 4.0, 7.0], [2.0, 5.0, 8.0], [3.0, 6.0, 9.0]],
    "x": [100.0, 200.0, 300.0],
    "sector_codes": ["AGR", "MAN", "SRV"],
    "final_demand": [[50.0], [120.0], [200.0]],
    "value_added": [[94.0, 185.0, 276.0]],
    "employment": [10.0, 20.0, 30.0],
}


@pytest.fixture()
def table_file(tmp_path):
    path = tmp_path / "table.json"
    path.write_text(json.dumps(TABLE), encoding="utf-8")
    return path


class TestLoadTable:

    def test_missing_key(self, tmp_path) -> None:
        path = tmp_path / "broken.json"
        path.write_text(json.dumps({"Z": [[0.0]]}), encoding="utf-8")
        with pytest.raises(ValueError, match="Missing 'x'"):
            _load_table(path)

    def test_loads(self, table_file) -> None:
        assert _load_table(table_file)["sector_codes"] == ["AGR", "MAN", "SRV"]


@pytest.mark.usefixtures("fresh_pool")
class TestMain:

    def test_valid_table_passes(self, monkeypatch, table_file, capsys) -> None:
        monkeypatch.setattr(sys, "argv", ["validate_model", "--threads", "1", "--extraction", str(table_file)])
        with pytest.raises(SystemExit) as exc:
            main()
        assert exc.value.code == 0
        out = capsys.readouterr().out
        assert "RESULT: PASS" in out
        assert "Total %" in out

    def test_unstable_table_fails(self, monkeypatch, tmp_path, capsys) -> None:
        path = tmp_path / "unstable.json"
        path.write_text(json.dumps({"Z": [[950.0, 500.0], [500.0, 950.0]], "x": [1000.0, 1000.0]}))
        monkeypatch.setattr(sys, "argv", ["validate_model", "--threads", "1", str(path)])
        with pytest.raises(SystemExit) as exc:
            main()
        assert exc.value.code == 1
        assert "RESULT: FAIL" in capsys.readouterr().out
