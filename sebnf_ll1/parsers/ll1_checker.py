"""
LL(1) 冲突检测模块
逐条规则两两比较候选式的前导语言集合，语言之间的重叠通过 DFA 交集判定
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from sebnf_ll1.config.analysis_config import analysis_config
from sebnf_ll1.core.first_follow import SetEntry, SymbolTables
from sebnf_ll1.core.grammar import Alternative, Grammar, Item, Literal, Regex, Rule, Terminal

logger = logging.getLogger(__name__)

FIRST_FIRST = 'FIRST/FIRST'
FIRST_FOLLOW = 'FIRST/FOLLOW'
NULLABLE = 'NULLABLE'


@dataclass(frozen=True)
class Overlap:
    """两个候选式前导集合中相交的一对语言"""
    left: SetEntry
    right: SetEntry
    example: Optional[str]
    via_follow: bool

    def describe(self) -> str:
        if (isinstance(self.left.terminal, Literal) and isinstance(self.right.terminal, Literal)
                and self.left.terminal == self.right.terminal):
            return f"相同的字符串终结符 {self.left.terminal}"
        text = f"{self.left.terminal} ∩ {self.right.terminal}"
        if self.example is not None:
            text += f"（例如 {Literal(self.example)}）"
        return text


@dataclass(frozen=True)
class Conflict:
    """一条规则中两个候选式之间的 LL(1) 冲突"""
    rule: str
    first_index: int
    second_index: int
    kind: str
    overlaps: Tuple[Overlap, ...]
    both_nullable: bool
    common_prefix: Tuple[Item, ...] = ()

    @property
    def alternatives(self) -> Tuple[int, int]:
        return self.first_index, self.second_index

    @property
    def witness(self) -> str:
        """冲突原因的文字说明"""
        parts = []
        if self.both_nullable:
            parts.append("两个候选式都可推导出空串")
        parts.extend(overlap.describe() for overlap in self.overlaps)
        return '；'.join(parts)


@dataclass(frozen=True)
class LL1Result:
    """LL(1) 检测结果"""
    conflicts: Tuple[Conflict, ...]

    @property
    def is_ll1(self) -> bool:
        return not self.conflicts

    def conflicts_for(self, rule: str) -> List[Conflict]:
        return [c for c in self.conflicts if c.rule == rule]


# 前导集合元素：(集合元素, 是否来自 FOLLOW)
Leading = List[Tuple[SetEntry, bool]]


class LL1Checker:
    """LL(1) 检测器"""

    def __init__(self, grammar: Grammar, tables: SymbolTables, witness_examples: Optional[bool] = None):
        """
        初始化检测器
        :param grammar: BNF 文法
        :param tables: 该文法的 FIRST/FOLLOW 集
        :param witness_examples: 是否为重叠计算示例字符串，默认取全局配置
        """
        self.grammar = grammar
        self.tables = tables
        self.witness_examples = (analysis_config.wants_witness_examples()
                                 if witness_examples is None else witness_examples)
        # 同一次检测内缓存终结符两两相交的结果
        self._overlap_cache: Dict[Tuple[Terminal, Terminal], Tuple[bool, Optional[str]]] = {}

    def check(self) -> LL1Result:
        """
        按声明顺序检查每条规则、每对候选式
        :return: 检测结果
        """
        conflicts: List[Conflict] = []
        for rule in self.grammar.rules:
            if len(rule.alternatives) < 2:
                continue
            conflicts.extend(self._check_rule(rule))
        logger.debug("LL(1) check: %d conflicts", len(conflicts))
        return LL1Result(tuple(conflicts))

    def _check_rule(self, rule: Rule) -> List[Conflict]:
        follow = self.tables.follow_of(rule.name)
        leading: List[Leading] = []
        nullable: List[bool] = []
        for index, alt in enumerate(rule.alternatives):
            first = self.tables.first_of_sequence(alt, (rule.name, index))
            entries: Leading = [(entry, False) for entry in first.entries]
            # 可空候选式还要看紧跟在规则之后的内容
            if first.nullable:
                entries.extend((entry, True) for entry in follow.entries)
            leading.append(entries)
            nullable.append(first.nullable)

        conflicts = []
        count = len(rule.alternatives)
        for i in range(count):
            for j in range(i + 1, count):
                both_nullable = nullable[i] and nullable[j]
                overlaps = self._find_overlaps(leading[i], leading[j], both_nullable)
                if not overlaps and not both_nullable:
                    continue
                if both_nullable:
                    kind = NULLABLE
                elif any(overlap.via_follow for overlap in overlaps):
                    kind = FIRST_FOLLOW
                else:
                    kind = FIRST_FIRST
                conflicts.append(Conflict(
                    rule=rule.name,
                    first_index=i,
                    second_index=j,
                    kind=kind,
                    overlaps=tuple(overlaps),
                    both_nullable=both_nullable,
                    common_prefix=_find_common_prefix(rule.alternatives[i], rule.alternatives[j]),
                ))
        return conflicts

    def _find_overlaps(self, left: Leading, right: Leading, both_nullable: bool) -> List[Overlap]:
        overlaps = []
        seen = set()
        for left_entry, left_follow in left:
            for right_entry, right_follow in right:
                # 两侧都可空时 FOLLOW 部分必然相同，冲突已由可空性确定
                if both_nullable and (left_follow or right_follow):
                    continue
                key = (left_entry.terminal, right_entry.terminal)
                if key in seen:
                    continue
                intersects, example = self._intersect(left_entry, right_entry)
                if intersects:
                    seen.add(key)
                    overlaps.append(Overlap(left_entry, right_entry, example, left_follow or right_follow))
        return overlaps

    def _intersect(self, left: SetEntry, right: SetEntry) -> Tuple[bool, Optional[str]]:
        """
        判断两个终结符语言是否相交
        :return: (是否相交, 示例字符串)
        """
        key = (left.terminal, right.terminal)
        if key in self._overlap_cache:
            return self._overlap_cache[key]

        a, b = left.terminal, right.terminal
        if isinstance(a, Literal) and isinstance(b, Literal):
            result = (a.text == b.text, a.text if a.text == b.text else None)
        elif isinstance(a, Literal) and isinstance(b, Regex):
            accepted = right.language.accepts(a.text)
            result = (accepted, a.text if accepted else None)
        elif isinstance(a, Regex) and isinstance(b, Literal):
            accepted = left.language.accepts(b.text)
            result = (accepted, b.text if accepted else None)
        elif self.witness_examples:
            example = left.language.find_intersection(right.language)
            result = (example is not None, example)
        else:
            result = (not left.language.intersection_is_empty(right.language), None)

        self._overlap_cache[key] = result
        return result


def _find_common_prefix(right1: Alternative, right2: Alternative) -> Tuple[Item, ...]:
    """
    找到两个候选式的公共前缀
    :return: 公共前缀，可用于提示提取左公因子
    """
    common = []
    for a, b in zip(right1, right2):
        if a != b:
            break
        common.append(a)
    return tuple(common)


def check_ll1(grammar: Grammar, tables: SymbolTables) -> LL1Result:
    """
    检查 BNF 文法是否为 LL(1)
    :param grammar: BNF 文法
    :param tables: compute_first_follow 的结果
    :return: 检测结果，冲突按规则与候选式的声明顺序排列
    """
    return LL1Checker(grammar, tables).check()
