"""
正则语言模块
终结符对应的语言统一以 DFA 表示，提供可空判断、并与交集判空
"""

from functools import lru_cache
from typing import Optional

from sebnf_ll1.automaton.dfa import DFA, dfa_from_string, determinize, product, shortest_common_string
from sebnf_ll1.automaton.nfa import build_nfa
from sebnf_ll1.automaton.regex_parser import parse_regex
from sebnf_ll1.core.grammar import Literal, Regex, Terminal


class RegularLanguage:
    """
    正则语言（不可变值）
    内部只使用一种表示：裁剪后的 DFA
    """

    def __init__(self, dfa: DFA, description: str):
        """
        :param dfa: 识别该语言的 DFA
        :param description: 用于显示的描述，如 "a" 或 /a+/
        """
        self._dfa = dfa
        self._description = description

    @property
    def dfa(self) -> DFA:
        return self._dfa

    @property
    def description(self) -> str:
        return self._description

    @property
    def nullable(self) -> bool:
        """语言是否包含空串"""
        return self._dfa.is_accepting(self._dfa.start)

    def is_empty(self) -> bool:
        """语言是否为空集（裁剪后的 DFA 开始状态不接受且无出边）"""
        return not self.nullable and not self._dfa.transitions[self._dfa.start]

    def accepts(self, text: str) -> bool:
        """整串匹配"""
        return self._dfa.accepts(text)

    def union(self, other: 'RegularLanguage') -> 'RegularLanguage':
        """
        并：乘积构造，任一侧接受即接受
        :return: 新的语言
        """
        dfa = product(self._dfa, other._dfa, lambda x, y: x or y, both=False)
        return RegularLanguage(dfa, f"{self._description} ∪ {other._description}")

    def intersection(self, other: 'RegularLanguage') -> 'RegularLanguage':
        """交：乘积构造，两侧都接受才接受"""
        dfa = product(self._dfa, other._dfa, lambda x, y: x and y, both=True)
        return RegularLanguage(dfa, f"{self._description} ∩ {other._description}")

    def intersection_is_empty(self, other: 'RegularLanguage') -> bool:
        """两个语言的交是否为空"""
        return self.find_intersection(other) is None

    def find_intersection(self, other: 'RegularLanguage') -> Optional[str]:
        """
        寻找同时属于两个语言的最短字符串
        :return: 示例字符串，交为空时返回 None
        """
        return shortest_common_string(self._dfa, other._dfa)

    def __str__(self):
        return self._description

    def __repr__(self):
        return f"RegularLanguage({self._description}, {self._dfa!r})"


@lru_cache(maxsize=None)
def compile_literal(text: str) -> RegularLanguage:
    """编译字符串终结符：恰好接受该字符串"""
    return RegularLanguage(dfa_from_string(text), str(Literal(text)))


@lru_cache(maxsize=None)
def compile_regex(pattern: str) -> RegularLanguage:
    """
    编译正则终结符（整串匹配）
    :raises RegexCompileError: 模式格式错误或使用了不支持的构造
    """
    dfa = determinize(build_nfa(parse_regex(pattern)))
    return RegularLanguage(dfa, str(Regex(pattern)))


def compile_terminal(terminal: Terminal) -> RegularLanguage:
    """编译终结符；相同文本的终结符共享同一个编译结果"""
    if isinstance(terminal, Literal):
        return compile_literal(terminal.text)
    if isinstance(terminal, Regex):
        return compile_regex(terminal.pattern)
    raise TypeError(f"不是终结符: {terminal!r}")


def nullable(language: RegularLanguage) -> bool:
    return language.nullable


def union(first: RegularLanguage, second: RegularLanguage) -> RegularLanguage:
    return first.union(second)


def intersection_is_empty(first: RegularLanguage, second: RegularLanguage) -> bool:
    return first.intersection_is_empty(second)
