from sebnf_ll1.config.analysis_config import analysis_config
from sebnf_ll1.core.grammar import Literal, NonTerminalRef
from sebnf_ll1.core.grammar_parser import parse
from sebnf_ll1.utils.grammar_transformer import GrammarTransformer, to_bnf


def test_optional_becomes_helper():
    bnf = to_bnf(parse('S := "a" [ "b" ] .'))
    assert bnf.is_bnf()
    assert bnf.non_terminals == ['S', '___opt_0']
    assert bnf.get_rule('S').alternatives == ((Literal('a'), NonTerminalRef('___opt_0')),)
    assert bnf.get_rule('___opt_0').alternatives == ((Literal('b'),), ())


def test_repetition_is_right_recursive():
    bnf = to_bnf(parse('S := { "x" } .'))
    helper = bnf.get_rule('___rep_0')
    assert helper.alternatives == ((Literal('x'), NonTerminalRef('___rep_0')), ())


def test_group_becomes_choice():
    bnf = to_bnf(parse('S := ( "a" | "b" "c" ) "d" .'))
    assert bnf.get_rule('S').alternatives == ((NonTerminalRef('___choice_0'), Literal('d')),)
    assert bnf.get_rule('___choice_0').alternatives == (
        (Literal('a'),), (Literal('b'), Literal('c')))


def test_nested_sugar_is_expanded_inside_out():
    bnf = to_bnf(parse('S := { [ "a" ] "b" } .'))
    assert bnf.is_bnf()
    # 内层先转换，因此 opt 的编号在 rep 之前
    assert bnf.non_terminals == ['S', '___opt_0', '___rep_1']
    assert bnf.get_rule('___rep_1').alternatives == (
        (NonTerminalRef('___opt_0'), Literal('b'), NonTerminalRef('___rep_1')), ())


def test_helper_names_skip_existing_rules():
    bnf = to_bnf(parse('S := [ "a" ] ___opt_0 . ___opt_0 := "z" .'))
    assert bnf.non_terminals == ['S', '___opt_0', '___opt_1']
    assert bnf.get_rule('S').alternatives == (
        (NonTerminalRef('___opt_1'), NonTerminalRef('___opt_0')),)


def test_each_occurrence_gets_its_own_helper_by_default():
    bnf = to_bnf(parse('S := [ "a" ] [ "a" ] .'))
    assert bnf.non_terminals == ['S', '___opt_0', '___opt_1']


def test_shared_helpers():
    bnf = GrammarTransformer(parse('S := [ "a" ] [ "a" ] { "b" } { "b" } .'), share_helpers=True).to_bnf()
    assert bnf.non_terminals == ['S', '___opt_0', '___rep_1']
    assert bnf.get_rule('S').alternatives == ((
        NonTerminalRef('___opt_0'), NonTerminalRef('___opt_0'),
        NonTerminalRef('___rep_1'), NonTerminalRef('___rep_1'),
    ),)


def test_sharing_follows_global_config():
    analysis_config.enable_helper_sharing()
    try:
        bnf = to_bnf(parse('S := [ "a" ] [ "a" ] .'))
    finally:
        analysis_config.reset()
    assert bnf.non_terminals == ['S', '___opt_0']


def test_custom_prefix():
    bnf = GrammarTransformer(parse('S := [ "a" ] .'), prefix='h_').to_bnf()
    assert bnf.non_terminals == ['S', 'h_opt_0']


def test_bnf_grammar_is_unchanged():
    grammar = parse('S := "a" S | .')
    assert to_bnf(grammar) == grammar


def test_idempotent():
    grammar = parse('''
        expr := term { ( "+" | "-" ) term } .
        term := [ "-" ] /[0-9]+/ | "(" expr ")" .
    ''')
    once = to_bnf(grammar)
    assert to_bnf(once) == once


def test_helper_output_reparses():
    bnf = to_bnf(parse('S := { "a" [ S ] } .'))
    assert parse(str(bnf)) == bnf
