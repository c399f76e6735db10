"""
文法解析模块
从文本或文件中读取 SEBNF 文法并解析为 Grammar 对象
"""

import logging
from typing import List, Optional, Tuple

from sebnf_ll1.core.errors import ParseError, SemanticError
from sebnf_ll1.core.grammar import (
    Alternative, Grammar, Group, Item, Literal, NonTerminalRef, OptionalItem,
    Regex, Repetition, Rule,
)
from sebnf_ll1.core.lexer import Token, TokenType, position_of, tokenize

logger = logging.getLogger(__name__)


class GrammarParser:
    """文法解析器类"""

    @staticmethod
    def parse_from_file(filename: str) -> Grammar:
        """
        从文件中解析文法
        :param filename: 文法文件路径
        :return: Grammar对象
        """
        # 使用 utf-8-sig 自动处理 BOM
        with open(filename, 'r', encoding='utf-8-sig') as f:
            text = f.read()
        return GrammarParser.parse_from_text(text)

    @staticmethod
    def parse_from_text(text: str) -> Grammar:
        """
        从字符串解析文法，解析成功后进行语义检查
        :param text: 文法文本
        :return: Grammar对象
        """
        if text.startswith('\ufeff'):
            text = text[1:]
        parser = _RecursiveDescentParser(text, tokenize(text))
        grammar = parser.parse_grammar()
        parser.validate(grammar)
        logger.debug("parsed %d rules, start symbol %s", len(grammar), grammar.start_symbol)
        return grammar


class _RecursiveDescentParser:
    """
    递归下降分析器
    grammar      := {rule}
    rule         := non_terminal ":=" alternatives "."
    alternatives := {item} {"|" {item}}
    item         := non_terminal | terminal | regex
                  | "[" {item} "]" | "{" {item} "}" | "(" {item} {"|" {item}} ")"
    """

    def __init__(self, text: str, tokens: List[Token]):
        self.text = text
        self.tokens = tokens
        self.pos = 0
        # 记录规则名与引用的记号，用于语义检查时报告位置
        self.rule_tokens: List[Token] = []
        self.reference_tokens: List[Token] = []

    def parse_grammar(self) -> Grammar:
        rules = []
        while self._peek() is not None:
            rules.append(self._parse_rule())
        return Grammar(tuple(rules))

    def _parse_rule(self) -> Rule:
        token = self._advance()
        if token.kind != TokenType.NON_TERMINAL:
            raise self._error_at(token, f"规则必须以非终结符开始，实际为 {token.describe()}")
        self.rule_tokens.append(token)
        self._expect(TokenType.ASSIGN)
        alternatives = self._parse_alternatives(in_group=False)
        self._expect(TokenType.DOT)
        return Rule(token.value, tuple(alternatives))

    def _parse_alternatives(self, in_group: bool) -> List[Alternative]:
        """
        解析以 '|' 分隔的候选式
        :param in_group: 是否位于 (...) 内部；组内不允许空候选式
        """
        alternatives = [self._parse_sequence(in_group)]
        while self._peek_kind() == TokenType.SEPARATOR:
            self._advance()
            alternatives.append(self._parse_sequence(in_group))
        return alternatives

    def _parse_sequence(self, non_empty: bool) -> Alternative:
        """解析一个候选式（文法项序列）"""
        start = self._peek()
        items = []
        while True:
            item = self._parse_item()
            if item is None:
                break
            items.append(item)
        if non_empty and not items:
            raise self._error_here("空候选式只能作为规则的顶层候选式出现", start)
        return tuple(items)

    def _parse_item(self) -> Optional[Item]:
        token = self._peek()
        if token is None:
            return None

        if token.kind == TokenType.NON_TERMINAL:
            self._advance()
            self.reference_tokens.append(token)
            return NonTerminalRef(token.value)
        if token.kind == TokenType.TERMINAL:
            self._advance()
            return Literal(token.value)
        if token.kind == TokenType.REGEX:
            self._advance()
            return Regex(token.value)

        if token.kind == TokenType.SQUARE_OPEN:
            self._advance()
            return OptionalItem(self._parse_bracket_body(TokenType.SQUARE_CLOSE))
        if token.kind == TokenType.CURLY_OPEN:
            self._advance()
            return Repetition(self._parse_bracket_body(TokenType.CURLY_CLOSE))
        if token.kind == TokenType.ROUND_OPEN:
            self._advance()
            alternatives = self._parse_alternatives(in_group=True)
            self._expect(TokenType.ROUND_CLOSE)
            # ( x ) 直接化简为 x
            if len(alternatives) == 1 and len(alternatives[0]) == 1:
                return alternatives[0][0]
            return Group(tuple(alternatives))

        return None

    def _parse_bracket_body(self, closing: str) -> Tuple[Item, ...]:
        """解析 [...] 或 {...} 的内容，其中不允许直接出现 '|'"""
        items = self._parse_sequence(non_empty=True)
        token = self._peek()
        if token is not None and token.kind == TokenType.SEPARATOR:
            raise self._error_at(token, "'|' 只能出现在规则顶层或 (...) 内部")
        self._expect(closing)
        return items

    def validate(self, grammar: Grammar):
        """
        语义检查：文法非空、规则名唯一、引用的非终结符均已定义
        """
        if not grammar.rules:
            raise SemanticError("文法为空，至少需要一条规则")

        defined = set()
        for token in self.rule_tokens:
            if token.value in defined:
                raise self._semantic_error(token, f"规则 '{token.value}' 重复定义")
            defined.add(token.value)

        for token in self.reference_tokens:
            if token.value not in defined:
                raise self._semantic_error(token, f"引用了未定义的非终结符 '{token.value}'")

    # ---- 记号流操作 ----

    def _peek(self) -> Optional[Token]:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return None

    def _peek_kind(self) -> Optional[str]:
        token = self._peek()
        return token.kind if token is not None else None

    def _advance(self) -> Token:
        token = self._peek()
        if token is None:
            raise self._eof_error("规则")
        self.pos += 1
        return token

    def _expect(self, kind: str) -> Token:
        token = self._peek()
        if token is None:
            raise self._eof_error(f"'{kind}'")
        if token.kind != kind:
            raise self._error_at(token, f"期望 '{kind}'，实际为 {token.describe()}")
        self.pos += 1
        return token

    def _error_at(self, token: Token, message: str) -> ParseError:
        return ParseError(message, token.offset, token.line, token.column)

    def _error_here(self, message: str, token: Optional[Token]) -> ParseError:
        if token is None:
            return self._eof_error("文法项")
        return self._error_at(token, message)

    def _eof_error(self, expected: str) -> ParseError:
        offset = len(self.text)
        line, column = position_of(self.text, offset)
        return ParseError(f"意外的输入结束，期望 {expected}", offset, line, column)

    def _semantic_error(self, token: Token, message: str) -> SemanticError:
        return SemanticError(message, token.offset, token.line, token.column)


def parse(text: str) -> Grammar:
    """
    解析 SEBNF 文法文本
    :param text: 文法文本
    :return: Grammar对象
    """
    return GrammarParser.parse_from_text(text)
