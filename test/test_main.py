"""
Command line tests
"""

import pytest

from main import run, create_arg_parser, EXIT_OK, EXIT_REJECTED, EXIT_ERROR


class TestCheckValues:

  def test_all_values_accepted(self, capsys):
    assert run(["number[]", "[1, 2, 3]", "[]"]) == EXIT_OK
    out = capsys.readouterr().out
    assert "ok       [1, 2, 3]" in out
    assert "ok       []" in out

  def test_rejected_value(self, capsys):
    assert run(["number[]", '[1, "a"]']) == EXIT_REJECTED
    out = capsys.readouterr().out
    assert "rejected" in out
    assert "expected Array<number>" in out

  def test_missing_key_accepted_by_nullable_field(self, capsys):
    assert run(["{ message: ?string }", '{"message": null}', "{}"]) == EXIT_OK

  def test_no_values_prints_compiled_form(self, capsys):
    assert run(["?string[]"]) == EXIT_OK
    assert "Compiled: ?Array<string>" in capsys.readouterr().out

  def test_bad_json_reported_on_stderr(self, capsys):
    assert run(["string", "not json"]) == EXIT_ERROR
    captured = capsys.readouterr()
    assert "Cannot decode" in captured.err
    assert "Hint" in captured.err
    assert captured.out == ""

  def test_grammar_error(self, capsys):
    assert run(["string |"]) == EXIT_ERROR
    assert "Grammar error" in capsys.readouterr().out

  def test_definition_error(self, capsys):
    assert run(["{ a?: number }", "{}"]) == EXIT_ERROR
    assert "Definition error" in capsys.readouterr().out


class TestInspection:

  def test_parse(self, capsys):
    assert run(["--parse", "[string, ?number]"]) == EXIT_OK
    out = capsys.readouterr().out.splitlines()
    assert out[0] == "TupleType"
    assert "NullableType" in out[2]

  def test_signature(self, capsys):
    assert run(["--signature", "(name: string, count: number) => string[]"]) == EXIT_OK
    out = capsys.readouterr().out
    assert "Arity: 2" in out
    assert "  2. number" in out
    assert "Returns: Array<string>" in out

  def test_signature_rejects_plain_type(self, capsys):
    assert run(["--signature", "string"]) == EXIT_ERROR

  def test_version(self, capsys):
    with pytest.raises(SystemExit) as info:
      create_arg_parser().parse_args(["--version"])
    assert info.value.code == 0
    assert "typesig v" in capsys.readouterr().out
