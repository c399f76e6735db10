import io

from rich.console import Console

from sebnf_ll1.core.errors import GrammarError
from sebnf_ll1.core.first_follow import compute_first_follow
from sebnf_ll1.core.grammar_parser import parse
from sebnf_ll1.parsers.ll1_checker import check_ll1
from sebnf_ll1.utils.grammar_transformer import to_bnf
from sebnf_ll1.utils.output_formatter import OutputFormatter


def make_formatter():
    buffer = io.StringIO()
    console = Console(file=buffer, width=200, color_system=None)
    return OutputFormatter(console), buffer


def test_print_source_is_plain_text():
    formatter, buffer = make_formatter()
    grammar = parse('S := [ "a" ] .')
    formatter.print_source(to_bnf(grammar))
    assert buffer.getvalue().strip() == str(to_bnf(grammar)).strip()


def test_print_sets():
    formatter, buffer = make_formatter()
    tables = compute_first_follow(to_bnf(parse('T := A "y" . A := "a" | .')))
    formatter.print_first_sets(tables)
    formatter.print_follow_sets(tables)
    formatter.print_nullable_set(tables)
    output = buffer.getvalue()
    assert '{ "a", ε }' in output
    assert '{ "y" }' in output
    assert '{ $ }' in output


def test_print_conflicts():
    formatter, buffer = make_formatter()
    bnf = to_bnf(parse('S := "a" "b" | "a" "c" .'))
    formatter.print_ll1_result(check_ll1(bnf, compute_first_follow(bnf)), bnf)
    output = buffer.getvalue()
    assert '不是 LL(1)' in output
    assert 'FIRST/FIRST' in output
    assert '提取左公因子' in output


def test_print_error_with_caret():
    formatter, buffer = make_formatter()
    source = 'S := "a"\n  | [x] .'
    formatter.print_error(GrammarError("出错了", offset=13, line=2, column=5), source)
    lines = buffer.getvalue().splitlines()
    assert '第 2 行，第 5 列' in lines[0]
    assert lines[1] == '    | [x] .'
    assert lines[2] == '      ^'
