import io
import json

import pytest

from sebnf_ll1.config.analysis_config import analysis_config
from sebnf_ll1.main import main, parse_terminal
from sebnf_ll1.core.errors import ParseError
from sebnf_ll1.core.grammar import Literal, Regex


@pytest.fixture
def grammar_file(tmp_path):
    def write(text):
        path = tmp_path / "grammar.sebnf"
        path.write_text(text, encoding='utf-8')
        return str(path)
    return write


def test_validate(grammar_file, capsys):
    assert main(['validate', grammar_file('S := "a" .')]) == 0
    assert '文法合法' in capsys.readouterr().out


def test_is_ll1_exit_codes(grammar_file):
    assert main(['is-ll1', grammar_file('S := "a" | "b" .')]) == 0
    assert main(['is-ll1', grammar_file('S := "a" | "a" .')]) == 1


def test_grammar_error_exit_code(grammar_file, capsys):
    assert main(['is-ll1', grammar_file('S := B .')]) == 2
    assert "未定义" in capsys.readouterr().err


def test_regex_error_exit_code(grammar_file):
    assert main(['extract-sets', grammar_file('S := /(a/ .')]) == 2


def test_missing_file(tmp_path):
    assert main(['validate', str(tmp_path / "missing.sebnf")]) == 2


def test_to_bnf_output(grammar_file, capsys):
    assert main(['to-bnf', grammar_file('S := [ "a" ] .')]) == 0
    out = capsys.readouterr().out
    assert '___opt_0' in out


def test_share_helpers_flag(grammar_file, capsys):
    assert main(['to-bnf', '--share-helpers', grammar_file('S := [ "a" ] [ "a" ] .')]) == 0
    out = capsys.readouterr().out
    assert '___opt_0' in out
    assert '___opt_1' not in out


def test_no_witness_flag(grammar_file):
    assert main(['is-ll1', '--no-witness', grammar_file('S := /a+/ | /a*b?/ .')]) == 1
    assert not analysis_config.wants_witness_examples()


def test_reads_stdin(monkeypatch):
    monkeypatch.setattr('sys.stdin', io.StringIO('S := "a" .'))
    assert main(['validate']) == 0


def test_show_dfa_prints_json(capsys):
    assert main(['show-dfa', '"ab"']) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["terminal"] == '"ab"'
    assert len(data["states"]) == 3


def test_show_dfa_rejects_non_terminal():
    assert main(['show-dfa', 'S']) == 2


def test_parse_terminal():
    assert parse_terminal('"a b"') == Literal('a b')
    assert parse_terminal('/[0-9]+/') == Regex('[0-9]+')
    with pytest.raises(ParseError):
        parse_terminal('"a" "b"')
