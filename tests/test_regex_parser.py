import pytest

from sebnf_ll1.automaton.regex_parser import (
    MAX_CODE_POINT, Alternation, CharSet, Concat, Repeat, negate, normalize, parse_regex,
)
from sebnf_ll1.core.errors import RegexCompileError


def test_normalize_merges_adjacent_ranges():
    assert normalize([(5, 7), (1, 2), (3, 3), (10, 12)]) == ((1, 7), (10, 12))


def test_negate():
    assert negate(((0, 9), (20, 30))) == ((10, 19), (31, MAX_CODE_POINT))
    assert negate(()) == ((0, MAX_CODE_POINT),)


def test_literal_concatenation():
    node = parse_regex('ab')
    assert node == Concat((CharSet(((97, 97),)), CharSet(((98, 98),))))


def test_alternation_and_quantifiers():
    node = parse_regex('a|b*')
    assert node == Alternation((CharSet(((97, 97),)), Repeat(CharSet(((98, 98),)), 0, None)))


def test_counted_quantifiers():
    assert parse_regex('a{2}') == Repeat(CharSet(((97, 97),)), 2, 2)
    assert parse_regex('a{2,}') == Repeat(CharSet(((97, 97),)), 2, None)
    assert parse_regex('a{1,3}') == Repeat(CharSet(((97, 97),)), 1, 3)


def test_character_classes():
    assert parse_regex('[a-cx]') == CharSet(((97, 99), (120, 120)))
    assert parse_regex('[-a]') == CharSet(((45, 45), (97, 97)))
    assert parse_regex('[]-]') == CharSet(((45, 45), (93, 93)))
    assert parse_regex('[^a]') == CharSet(((0, 96), (98, MAX_CODE_POINT)))


def test_escapes():
    assert parse_regex(r'\d') == CharSet(((48, 57),))
    assert parse_regex(r'\.') == CharSet(((46, 46),))
    assert parse_regex(r'\x41') == CharSet(((65, 65),))
    assert parse_regex(r'中') == CharSet(((0x4e2d, 0x4e2d),))
    assert parse_regex(r'\n') == CharSet(((10, 10),))


def test_anchors_at_the_ends_are_ignored():
    assert parse_regex('^a$') == parse_regex('a')


def test_non_capturing_group():
    assert parse_regex('(?:ab)+') == parse_regex('(ab)+')


def test_empty_pattern():
    assert parse_regex('') == Concat(())


@pytest.mark.parametrize("pattern", [
    'a^b',
    r'a\b',
    r'(a)\1',
    '(?=a)',
    '(ab',
    'ab)',
    '[ab',
    '*a',
    'a**',
    'a{3,1}',
    '[z-a]',
    r'\q',
    'a\\',
])
def test_invalid_patterns(pattern):
    with pytest.raises(RegexCompileError) as info:
        parse_regex(pattern)
    assert info.value.pattern == pattern
