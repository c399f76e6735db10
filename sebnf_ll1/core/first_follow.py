"""
FIRST集、FOLLOW集计算模块
终结符是正则语言，集合中的元素是 (来源候选式, 终结符语言) 对
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Set, Tuple

from sebnf_ll1.automaton.regular_language import RegularLanguage, compile_terminal
from sebnf_ll1.core.grammar import Grammar, Item, NonTerminalRef, Terminal, is_terminal

logger = logging.getLogger(__name__)

# 来源：终结符所在的 (规则名, 候选式编号)
Origin = Tuple[str, int]


@dataclass(frozen=True)
class SetEntry:
    """集合元素：某处出现的终结符及其语言"""
    origin: Optional[Origin]
    terminal: Terminal
    language: RegularLanguage = field(compare=False, repr=False)

    @property
    def key(self) -> Tuple[Optional[Origin], Terminal]:
        return self.origin, self.terminal

    def __str__(self):
        return str(self.terminal)


def _describe(entries: Tuple[SetEntry, ...], extra: Optional[str]) -> str:
    names = list(dict.fromkeys(str(entry) for entry in entries))
    if extra:
        names.append(extra)
    return '{ ' + ', '.join(names) + ' }' if names else '∅'


@dataclass(frozen=True)
class FirstSet:
    """FIRST 集：不合并的元素列表加可空标记"""
    entries: Tuple[SetEntry, ...]
    nullable: bool

    @property
    def terminals(self) -> List[Terminal]:
        """去重后的终结符（按加入顺序）"""
        return list(dict.fromkeys(entry.terminal for entry in self.entries))

    def describe(self) -> str:
        return _describe(self.entries, 'ε' if self.nullable else None)


@dataclass(frozen=True)
class FollowSet:
    """FOLLOW 集：元素列表加是否可能紧跟输入结束"""
    entries: Tuple[SetEntry, ...]
    at_end: bool

    @property
    def terminals(self) -> List[Terminal]:
        return list(dict.fromkeys(entry.terminal for entry in self.entries))

    def describe(self) -> str:
        return _describe(self.entries, '$' if self.at_end else None)


class SymbolTables:
    """
    FIRST/FOLLOW 计算结果（只读）
    first 以非终结符名或终结符的源文本为键，follow 以非终结符名为键
    """

    def __init__(self, grammar: Grammar, first: Dict[str, FirstSet], follow: Dict[str, FollowSet],
                 languages: Dict[Terminal, RegularLanguage]):
        self.grammar = grammar
        self.first: Mapping[str, FirstSet] = MappingProxyType(dict(first))
        self.follow: Mapping[str, FollowSet] = MappingProxyType(dict(follow))
        self.languages: Mapping[Terminal, RegularLanguage] = MappingProxyType(dict(languages))

    def first_of(self, item: Item) -> FirstSet:
        """获取符号的 FIRST 集"""
        if isinstance(item, NonTerminalRef):
            return self.first[item.name]
        return self.first[str(item)]

    def follow_of(self, non_terminal: str) -> FollowSet:
        """获取非终结符的 FOLLOW 集"""
        return self.follow[non_terminal]

    def is_nullable(self, item: Item) -> bool:
        return self.first_of(item).nullable

    def first_of_sequence(self, items: Tuple[Item, ...], origin: Optional[Origin] = None) -> FirstSet:
        """
        计算符号串的 FIRST 集
        :param items: 符号串
        :param origin: 符号串中直接出现的终结符的来源
        :return: FIRST 集，符号串中所有符号都可空时标记为可空
        """
        entries: Dict[tuple, SetEntry] = {}
        for item in items:
            if is_terminal(item):
                entry = SetEntry(origin, item, self.languages[item])
                entries.setdefault(entry.key, entry)
            else:
                for entry in self.first[item.name].entries:
                    entries.setdefault(entry.key, entry)
            if not self.is_nullable(item):
                return FirstSet(tuple(entries.values()), False)
        return FirstSet(tuple(entries.values()), True)


class FirstFollowCalculator:
    """FIRST集和FOLLOW集计算器"""

    def __init__(self, grammar: Grammar):
        """
        初始化计算器
        :param grammar: BNF 文法（不含语法糖）
        """
        if not grammar.is_bnf():
            raise ValueError("计算 FIRST/FOLLOW 集前需要先将文法转换为 BNF")
        self.grammar = grammar

        # 终结符的语言，文本相同的终结符共享编译结果
        self.languages: Dict[Terminal, RegularLanguage] = {}

        # NULLABLE集：可以推导出空串的非终结符
        self.nullable: Set[str] = set()

        # 以 (来源, 终结符) 为键去重，保持加入顺序
        self.first: Dict[str, Dict[tuple, SetEntry]] = {nt: {} for nt in grammar.non_terminals}
        self.follow: Dict[str, Dict[tuple, SetEntry]] = {nt: {} for nt in grammar.non_terminals}

        # 可能紧跟输入结束的非终结符
        self.at_end: Set[str] = set()

    def calculate_all(self) -> SymbolTables:
        """
        计算所有集合
        :return: 只读的计算结果
        """
        # 计算顺序：终结符语言 -> FIRST/NULLABLE -> FOLLOW
        self._compile_terminals()
        self._calculate_first()
        self._calculate_follow()
        return self._freeze()

    def _compile_terminals(self):
        for terminal in self.grammar.terminals:
            self.languages[terminal] = compile_terminal(terminal)

    def _item_nullable(self, item: Item) -> bool:
        if is_terminal(item):
            return self.languages[item].nullable
        return item.name in self.nullable

    def _add(self, target: Dict[tuple, SetEntry], entry: SetEntry) -> bool:
        if entry.key in target:
            return False
        target[entry.key] = entry
        return True

    def _first_of_sequence(self, items: Tuple[Item, ...], origin: Origin) -> Tuple[List[SetEntry], bool]:
        """
        计算符号串的 FIRST 元素
        :return: (元素列表, 符号串是否可空)
        """
        result = []
        for item in items:
            if is_terminal(item):
                result.append(SetEntry(origin, item, self.languages[item]))
            else:
                result.extend(self.first[item.name].values())
            if not self._item_nullable(item):
                return result, False
        return result, True

    def _calculate_first(self):
        """
        不动点迭代计算 FIRST 集与 NULLABLE 集
        FIRST(A) 包含每个候选式从第一个符号起、跨过可空符号所能看到的终结符语言
        """
        passes = 0
        changed = True
        while changed:
            changed = False
            passes += 1
            for rule in self.grammar.rules:
                for index, alt in enumerate(rule.alternatives):
                    entries, alt_nullable = self._first_of_sequence(alt, (rule.name, index))
                    for entry in entries:
                        changed |= self._add(self.first[rule.name], entry)
                    if alt_nullable and rule.name not in self.nullable:
                        self.nullable.add(rule.name)
                        changed = True
        logger.debug("FIRST sets converged after %d passes", passes)

    def _calculate_follow(self):
        """
        不动点迭代计算 FOLLOW 集
        对 B := α A β：FOLLOW(A) ∪= FIRST(β)；若 β 可空，FOLLOW(A) ∪= FOLLOW(B)
        """
        if self.grammar.start_symbol is not None:
            self.at_end.add(self.grammar.start_symbol)

        passes = 0
        changed = True
        while changed:
            changed = False
            passes += 1
            for rule in self.grammar.rules:
                for index, alt in enumerate(rule.alternatives):
                    for position, item in enumerate(alt):
                        if not isinstance(item, NonTerminalRef):
                            continue
                        entries, rest_nullable = self._first_of_sequence(alt[position + 1:], (rule.name, index))
                        target = self.follow[item.name]
                        for entry in entries:
                            changed |= self._add(target, entry)
                        if rest_nullable:
                            for entry in list(self.follow[rule.name].values()):
                                changed |= self._add(target, entry)
                            if rule.name in self.at_end and item.name not in self.at_end:
                                self.at_end.add(item.name)
                                changed = True
        logger.debug("FOLLOW sets converged after %d passes", passes)

    def _freeze(self) -> SymbolTables:
        first: Dict[str, FirstSet] = {}
        for nt in self.grammar.non_terminals:
            first[nt] = FirstSet(tuple(self.first[nt].values()), nt in self.nullable)
        for terminal, language in self.languages.items():
            first[str(terminal)] = FirstSet((SetEntry(None, terminal, language),), language.nullable)

        follow = {nt: FollowSet(tuple(self.follow[nt].values()), nt in self.at_end)
                  for nt in self.grammar.non_terminals}
        return SymbolTables(self.grammar, first, follow, self.languages)

    def get_nullable_set(self) -> Set[str]:
        """获取NULLABLE集"""
        return self.nullable.copy()


def compute_first_follow(grammar: Grammar) -> SymbolTables:
    """
    计算 BNF 文法的 FIRST/FOLLOW 集
    :param grammar: BNF 文法
    :return: 只读的计算结果
    """
    return FirstFollowCalculator(grammar).calculate_all()
