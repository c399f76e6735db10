"""
词法分析模块
将 SEBNF 文法文本切分为记号序列
"""

import re
from typing import List, Tuple

from sebnf_ll1.core.errors import LexError


class TokenType:
    """记号类型"""
    NON_TERMINAL = 'NON_TERMINAL'
    TERMINAL = 'TERMINAL'
    REGEX = 'REGEX'
    ASSIGN = ':='
    DOT = '.'
    SEPARATOR = '|'
    SQUARE_OPEN = '['
    SQUARE_CLOSE = ']'
    CURLY_OPEN = '{'
    CURLY_CLOSE = '}'
    ROUND_OPEN = '('
    ROUND_CLOSE = ')'


# 单字符结构符号
SYMBOLS = {
    '.': TokenType.DOT,
    '|': TokenType.SEPARATOR,
    '[': TokenType.SQUARE_OPEN,
    ']': TokenType.SQUARE_CLOSE,
    '{': TokenType.CURLY_OPEN,
    '}': TokenType.CURLY_CLOSE,
    '(': TokenType.ROUND_OPEN,
    ')': TokenType.ROUND_CLOSE,
}

NON_TERMINAL_PATTERN = re.compile(r'[0-9A-Za-z_]+')

# 终结符字符串中的转义序列
ESCAPES = {'n': '\n', 't': '\t', 'r': '\r'}


class Token:
    """记号类"""

    def __init__(self, kind: str, value: str, text: str, offset: int, line: int, column: int):
        """
        初始化记号
        :param kind: 记号类型（TokenType 中的常量）
        :param value: 记号的值（终结符为去掉引号并反转义后的字符串，正则为斜杠之间的模式）
        :param text: 记号在源文本中的原始内容
        :param offset: 起始偏移
        :param line: 行号（从1开始）
        :param column: 列号（从1开始）
        """
        self.kind = kind
        self.value = value
        self.text = text
        self.offset = offset
        self.line = line
        self.column = column

    def describe(self) -> str:
        """返回用于错误信息的记号描述"""
        if self.kind == TokenType.NON_TERMINAL:
            return f"非终结符 '{self.value}'"
        if self.kind == TokenType.TERMINAL:
            return f"终结符 {self.text}"
        if self.kind == TokenType.REGEX:
            return f"正则 {self.text}"
        return f"'{self.text}'"

    def __repr__(self):
        return f"Token({self.kind}, {self.text!r}, {self.line}:{self.column})"


class Lexer:
    """SEBNF 词法分析器"""

    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def tokenize(self) -> List[Token]:
        """
        切分全部文本
        :return: 记号列表
        """
        tokens = []
        while True:
            self._skip_blanks_and_comments()
            if self.pos >= len(self.text):
                return tokens
            tokens.append(self._next_token())

    def _skip_blanks_and_comments(self):
        """跳过空白与 (* ... *) 注释（注释不嵌套，遇到第一个 *) 即结束）"""
        while self.pos < len(self.text):
            if self.text[self.pos].isspace():
                self.pos += 1
            elif self.text.startswith('(*', self.pos):
                end = self.text.find('*)', self.pos + 2)
                if end < 0:
                    raise self._error("注释未终止", self.pos)
                self.pos = end + 2
            else:
                return

    def _next_token(self) -> Token:
        start = self.pos
        c = self.text[start]

        if c == '"':
            value = self._scan_delimited('"', "字符串终结符未终止")
            return self._make(TokenType.TERMINAL, _unescape(value), start)

        if c == '/':
            value = self._scan_delimited('/', "正则终结符未终止")
            return self._make(TokenType.REGEX, value, start)

        if self.text.startswith(':=', start):
            self.pos += 2
            return self._make(TokenType.ASSIGN, ':=', start)

        if c in SYMBOLS:
            self.pos += 1
            return self._make(SYMBOLS[c], c, start)

        match = NON_TERMINAL_PATTERN.match(self.text, start)
        if match:
            self.pos = match.end()
            return self._make(TokenType.NON_TERMINAL, match.group(), start)

        raise self._error(f"非法字符 {c!r}", start)

    def _scan_delimited(self, delimiter: str, message: str) -> str:
        """
        扫描由 delimiter 包围的内容，反斜杠转义下一个字符，遇到第一个未转义的分隔符结束
        :return: 分隔符之间的原始内容
        """
        start = self.pos
        i = start + 1
        while i < len(self.text):
            c = self.text[i]
            if c == '\\':
                i += 2
                continue
            if c == delimiter:
                self.pos = i + 1
                return self.text[start + 1:i]
            i += 1
        raise self._error(message, start)

    def _make(self, kind: str, value: str, start: int) -> Token:
        line, column = position_of(self.text, start)
        return Token(kind, value, self.text[start:self.pos], start, line, column)

    def _error(self, message: str, offset: int) -> LexError:
        line, column = position_of(self.text, offset)
        return LexError(message, offset, line, column)


def position_of(text: str, offset: int) -> Tuple[int, int]:
    """
    将字符偏移换算为行列号
    :return: (行号, 列号)，均从1开始
    """
    line = text.count('\n', 0, offset) + 1
    column = offset - (text.rfind('\n', 0, offset) + 1) + 1
    return line, column


def _unescape(raw: str) -> str:
    """处理终结符字符串中的反斜杠转义"""
    result = []
    i = 0
    while i < len(raw):
        c = raw[i]
        if c == '\\' and i + 1 < len(raw):
            nxt = raw[i + 1]
            result.append(ESCAPES.get(nxt, nxt))
            i += 2
        else:
            result.append(c)
            i += 1
    return ''.join(result)


def tokenize(text: str) -> List[Token]:
    """将文本切分为记号列表"""
    return Lexer(text).tokenize()
