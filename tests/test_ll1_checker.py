from sebnf_ll1.core.first_follow import compute_first_follow
from sebnf_ll1.core.grammar import Literal
from sebnf_ll1.core.grammar_parser import parse
from sebnf_ll1.parsers.ll1_checker import (
    FIRST_FIRST, FIRST_FOLLOW, NULLABLE, LL1Checker, check_ll1,
)
from sebnf_ll1.utils.grammar_transformer import to_bnf


def analyse(text):
    bnf = to_bnf(parse(text))
    return bnf, compute_first_follow(bnf)


def check(text):
    return check_ll1(*analyse(text))


def test_disjoint_literals_are_ll1():
    result = check('S := "a" | "b" .')
    assert result.is_ll1
    assert result.conflicts == ()


def test_identical_literals_conflict():
    result = check('S := "a" | "a" .')
    assert not result.is_ll1
    (conflict,) = result.conflicts
    assert conflict.rule == 'S'
    assert conflict.alternatives == (0, 1)
    assert conflict.kind == FIRST_FIRST
    assert conflict.witness == '相同的字符串终结符 "a"'


def test_overlapping_regexes_conflict():
    result = check('S := /a+/ | /a*b?/ .')
    (conflict,) = result.conflicts
    (overlap,) = conflict.overlaps
    assert overlap.example == 'a'
    assert '例如 "a"' in overlap.describe()


def test_regexes_use_full_match():
    # a*b 必须以 b 结尾，与 a+ 没有公共字符串
    assert check('S := /a+/ | /a*b/ .').is_ll1


def test_literal_against_regex():
    result = check('S := "if" | /[a-z]+/ .')
    (conflict,) = result.conflicts
    assert conflict.overlaps[0].example == 'if'


def test_follow_conflict_with_epsilon_alternative():
    assert check('T := A "y" . A := "a" | .').is_ll1

    result = check('T := A "y" . A := "a" | "y" | .')
    assert result.conflicts_for('T') == []
    (conflict,) = result.conflicts_for('A')
    assert conflict.alternatives == (1, 2)
    assert conflict.kind == FIRST_FOLLOW
    (overlap,) = conflict.overlaps
    assert overlap.via_follow
    assert overlap.left.terminal == Literal('y')


def test_two_nullable_alternatives_always_conflict():
    result = check('S := A | B . A := . B := .')
    (conflict,) = result.conflicts
    assert conflict.rule == 'S'
    assert conflict.kind == NULLABLE
    assert conflict.both_nullable
    assert conflict.witness == '两个候选式都可推导出空串'


def test_nullable_conflict_regardless_of_follow():
    result = check('S := A "z" . A := | /x*/ .')
    (conflict,) = result.conflicts
    assert conflict.rule == 'A'
    assert conflict.both_nullable


def test_repetition_followed_by_same_terminal():
    result = check('S := { "a" } "a" .')
    (conflict,) = result.conflicts
    assert conflict.rule == '___rep_0'
    assert conflict.kind == FIRST_FOLLOW


def test_common_prefix_hint():
    result = check('S := "a" "b" | "a" "c" .')
    (conflict,) = result.conflicts
    assert conflict.common_prefix == (Literal('a'),)


def test_every_pair_is_reported_in_order():
    result = check('S := "a" | "a" | "a" .')
    assert [c.alternatives for c in result.conflicts] == [(0, 1), (0, 2), (1, 2)]


def test_conflicts_follow_rule_order():
    result = check('S := A | "s" "s" | "s" . A := "a" | "a" .')
    assert [(c.rule, c.alternatives) for c in result.conflicts] == [('S', (1, 2)), ('A', (0, 1))]


def test_deterministic():
    text = '''
        S := { A } [ "b" ] | /[a-c]+/ .
        A := "a" | /a|b/ | .
    '''
    bnf, tables = analyse(text)
    first = check_ll1(bnf, tables)
    second = check_ll1(bnf, tables)
    assert first == second
    assert [(c.rule, c.alternatives, c.kind) for c in first.conflicts] == \
           [(c.rule, c.alternatives, c.kind) for c in check(text).conflicts]


def test_witness_examples_can_be_disabled():
    bnf, tables = analyse('S := /a+/ | /a*b?/ .')
    result = LL1Checker(bnf, tables, witness_examples=False).check()
    (conflict,) = result.conflicts
    assert conflict.overlaps[0].example is None
    assert '例如' not in conflict.witness


def test_expression_grammar_is_ll1():
    assert check('''
        expr   := term { ( "+" | "-" ) term } .
        term   := factor { ( "*" | "/" ) factor } .
        factor := /[0-9]+/ | "(" expr ")" .
    ''').is_ll1
