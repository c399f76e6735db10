"""
文法转换模块
将 SEBNF 文法中的语法糖（可选、重复、分组）展开为纯 BNF 形式
"""

import logging
from typing import Dict, List, Optional, Set, Tuple

from sebnf_ll1.config.analysis_config import analysis_config
from sebnf_ll1.core.grammar import (
    Alternative, Grammar, Group, Item, NonTerminalRef, OptionalItem,
    Repetition, Rule,
)

logger = logging.getLogger(__name__)


class GrammarTransformer:
    """
    文法转换器
    每个实例对应一次转换过程，辅助非终结符的编号计数器只在本次转换内有效
    """

    def __init__(self, grammar: Grammar, prefix: Optional[str] = None,
                 share_helpers: Optional[bool] = None):
        """
        初始化转换器
        :param grammar: 原始文法
        :param prefix: 辅助非终结符前缀，默认取全局配置
        :param share_helpers: 结构相同的语法糖是否共用辅助规则，默认取全局配置
        """
        self.original_grammar = grammar
        self.prefix = analysis_config.helper_prefix if prefix is None else prefix
        self.share_helpers = (analysis_config.is_helper_sharing()
                              if share_helpers is None else share_helpers)
        self.new_non_terminal_counter = 0  # 用于生成新的非终结符
        self.helper_rules: List[Rule] = []  # 按创建顺序记录的辅助规则
        self._reserved: Set[str] = set(grammar.non_terminals)
        self._cache: Dict[Tuple[str, object], str] = {}

    def to_bnf(self) -> Grammar:
        """
        展开全部语法糖
        :return: 只含非终结符引用、终结符和空候选式的文法
        """
        rules = []
        for rule in self.original_grammar.rules:
            alternatives = tuple(self._convert_sequence(alt) for alt in rule.alternatives)
            rules.append(Rule(rule.name, alternatives))

        # 辅助规则排在原规则之后
        rules.extend(self.helper_rules)
        logger.debug("to_bnf: %d original rules, %d helper rules",
                     len(self.original_grammar), len(self.helper_rules))
        return Grammar(tuple(rules))

    def _convert_sequence(self, items: Tuple[Item, ...]) -> Alternative:
        return tuple(self._convert_item(item) for item in items)

    def _convert_item(self, item: Item) -> Item:
        """
        转换单个文法项，先转换内部的项，使生成的辅助规则本身不含语法糖
        [ A B ] -> opt := A B | ε
        { A B } -> rep := A B rep | ε   （右递归展开）
        ( A | B ) -> choice := A | B
        """
        if isinstance(item, OptionalItem):
            body = (self._convert_sequence(item.items), ())
            return NonTerminalRef(self._helper('opt', body))

        if isinstance(item, Repetition):
            sequence = self._convert_sequence(item.items)
            # 重复规则的右部引用自身，因此先确定名字再构造规则
            key = ('rep', sequence)
            if self.share_helpers and key in self._cache:
                return NonTerminalRef(self._cache[key])
            name = self._next_name('rep')
            self._cache[key] = name
            self._add_rule(name, (sequence + (NonTerminalRef(name),), ()))
            return NonTerminalRef(name)

        if isinstance(item, Group):
            body = tuple(self._convert_sequence(alt) for alt in item.alternatives)
            return NonTerminalRef(self._helper('choice', body))

        return item

    def _helper(self, kind: str, body: Tuple[Alternative, ...]) -> str:
        """
        获取（或创建）右部为 body 的辅助规则名
        :param kind: 语法糖种类，用于命名
        :param body: 辅助规则的候选式
        """
        key = (kind, body)
        if self.share_helpers and key in self._cache:
            return self._cache[key]
        name = self._next_name(kind)
        self._cache[key] = name
        self._add_rule(name, body)
        return name

    def _add_rule(self, name: str, body: Tuple[Alternative, ...]):
        self.helper_rules.append(Rule(name, body))
        logger.debug("helper rule %s with %d alternatives", name, len(body))

    def _next_name(self, kind: str) -> str:
        """生成新的非终结符名，跳过文法中已存在的名字"""
        while True:
            name = f"{self.prefix}{kind}_{self.new_non_terminal_counter}"
            self.new_non_terminal_counter += 1
            if name not in self._reserved:
                self._reserved.add(name)
                return name


def to_bnf(grammar: Grammar, share_helpers: Optional[bool] = None) -> Grammar:
    """
    将文法转换为 BNF 形式
    :param grammar: SEBNF 文法
    :param share_helpers: 是否共用结构相同的辅助规则，默认取全局配置
    :return: BNF 文法
    """
    return GrammarTransformer(grammar, share_helpers=share_helpers).to_bnf()
