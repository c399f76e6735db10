import pytest

from sebnf_ll1.core.errors import GrammarError, ParseError, SemanticError
from sebnf_ll1.core.grammar import (
    Group, Literal, NonTerminalRef, OptionalItem, Regex, Repetition,
)
from sebnf_ll1.core.grammar_parser import GrammarParser, parse


def test_parse_simple_rules():
    grammar = parse('''
        S := A "x" | /[0-9]+/ .
        A := "a" .
    ''')
    assert grammar.start_symbol == 'S'
    assert grammar.non_terminals == ['S', 'A']
    s = grammar.get_rule('S')
    assert s.alternatives == (
        (NonTerminalRef('A'), Literal('x')),
        (Regex('[0-9]+'),),
    )
    assert grammar.terminals == [Literal('x'), Regex('[0-9]+'), Literal('a')]


def test_parse_sugar():
    grammar = parse('S := [ "a" ] { "b" S } ( "c" | "d" "e" ) .')
    (alt,) = grammar.get_rule('S').alternatives
    assert alt == (
        OptionalItem((Literal('a'),)),
        Repetition((Literal('b'), NonTerminalRef('S'))),
        Group(((Literal('c'),), (Literal('d'), Literal('e')))),
    )
    assert not grammar.is_bnf()


def test_single_item_group_collapses():
    grammar = parse('S := ( "a" ) .')
    assert grammar.get_rule('S').alternatives == ((Literal('a'),),)


def test_epsilon_alternatives():
    grammar = parse('A := "a" | . B := . C := | "c" .')
    assert grammar.get_rule('A').alternatives == ((Literal('a'),), ())
    assert grammar.get_rule('B').alternatives == ((),)
    assert grammar.get_rule('C').alternatives == ((), (Literal('c'),))
    assert grammar.is_bnf()


@pytest.mark.parametrize("text, message", [
    ('S := [ "a" | "b" ] .', "'|' 只能出现在规则顶层或 (...) 内部"),
    ('S := { "a" | "b" } .', "'|' 只能出现在规则顶层或 (...) 内部"),
    ('S := ( "a" | ) .', "空候选式只能作为规则的顶层候选式出现"),
    ('S := [ ] .', "空候选式只能作为规则的顶层候选式出现"),
    ('"a" := "b" .', "规则必须以非终结符开始"),
    ('S "a" .', "期望 ':='"),
])
def test_parse_errors(text, message):
    with pytest.raises(ParseError) as info:
        parse(text)
    assert message in str(info.value)


def test_missing_dot_at_end():
    with pytest.raises(ParseError) as info:
        parse('S := "a"')
    assert "意外的输入结束" in str(info.value)
    assert info.value.offset == len('S := "a"')


def test_undefined_reference_reports_position():
    with pytest.raises(SemanticError) as info:
        parse('S := "a" B .')
    assert "'B'" in info.value.message
    assert (info.value.line, info.value.column) == (1, 10)


def test_duplicate_rule():
    with pytest.raises(SemanticError) as info:
        parse('S := "a" .\nS := "b" .')
    assert "重复定义" in info.value.message
    assert info.value.line == 2


def test_empty_grammar():
    with pytest.raises(SemanticError):
        parse('(* nothing here *)')


def test_errors_are_value_errors():
    with pytest.raises(ValueError):
        parse('S := .. ')
    assert issubclass(GrammarError, ValueError)


def test_str_roundtrip():
    text = '''
        expr   := term { ( "+" | "-" ) term } .
        term   := /[0-9]+/ | "(" expr ")" | .
    '''
    grammar = parse(text)
    assert parse(str(grammar)) == grammar


def test_str_layout():
    grammar = parse('S := "a" | "b" . Long := S .')
    assert str(grammar) == (
        'S    := "a"\n'
        '      | "b"\n'
        '      .\n'
        'Long := S .\n'
    )


def test_parse_from_file_with_bom(tmp_path):
    path = tmp_path / "g.sebnf"
    path.write_text('\ufeffS := "a" .', encoding='utf-8')
    grammar = GrammarParser.parse_from_file(str(path))
    assert grammar.start_symbol == 'S'
