"""Tests for the format_result dispatcher and OutputSettings."""

import json

from orgtree.output.formatters import OutputSettings, format_result
from orgtree.services.result import ServiceError, ServiceResult


def _ok(op: str = "test", **data: object) -> ServiceResult:
    return ServiceResult(ok=True, op=op, data=dict(data))


def _err(op: str = "test", msg: str = "fail") -> ServiceResult:
    return ServiceResult(ok=False, op=op, error=ServiceError(code="ERR", message=msg))


class TestOutputSettings:
    def test_defaults(self) -> None:
        s = OutputSettings()
        assert (s.json_output, s.quiet, s.verbose) == (False, False, False)


class TestFormatResult:
    def test_json_mode(self) -> None:
        output = format_result(_ok("list_trees", count=0), settings=OutputSettings(json_output=True))
        data = json.loads(output)
        assert data["ok"] is True
        assert data["data"]["count"] == 0

    def test_json_mode_error(self) -> None:
        output = format_result(_err(msg="Bad"), settings=OutputSettings(json_output=True))
        assert json.loads(output)["error"]["message"] == "Bad"

    def test_quiet_list_prints_ids(self) -> None:
        result = _ok("list_trees", items=[{"id": "a"}, {"id": "b"}])
        assert format_result(result, settings=OutputSettings(quiet=True)) == "a\nb"

    def test_quiet_error(self) -> None:
        output = format_result(_err("tree_structure", "gone"), settings=OutputSettings(quiet=True))
        assert output == "ERROR: tree_structure — gone"

    def test_default_is_rich(self) -> None:
        output = format_result(_ok("import_snapshot", fields=2, positions=1))
        assert output.startswith("OK")
        assert "fields: 2" in output
