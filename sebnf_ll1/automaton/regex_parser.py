"""
正则表达式解析模块
将正则终结符解析为语法树，字符集合统一表示为码点区间
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple, Union

from sebnf_ll1.core.errors import RegexCompileError

MAX_CODE_POINT = 0x10FFFF

# 字符集合：有序、互不相交且不相邻的闭区间 (lo, hi)
Ranges = Tuple[Tuple[int, int], ...]


def normalize(ranges: Iterable[Tuple[int, int]]) -> Ranges:
    """排序并合并重叠或相邻的区间"""
    result: List[List[int]] = []
    for lo, hi in sorted(ranges):
        if result and lo <= result[-1][1] + 1:
            result[-1][1] = max(result[-1][1], hi)
        else:
            result.append([lo, hi])
    return tuple((lo, hi) for lo, hi in result)


def negate(ranges: Ranges) -> Ranges:
    """求字符集合在全部码点上的补集"""
    result = []
    start = 0
    for lo, hi in ranges:
        if lo > start:
            result.append((start, lo - 1))
        start = hi + 1
    if start <= MAX_CODE_POINT:
        result.append((start, MAX_CODE_POINT))
    return tuple(result)


def _chars(text: str) -> Ranges:
    return normalize((ord(c), ord(c)) for c in text)


DIGIT = ((ord('0'), ord('9')),)
WORD = normalize([(ord('0'), ord('9')), (ord('A'), ord('Z')), (ord('a'), ord('z')), (ord('_'), ord('_'))])
SPACE = _chars(' \t\n\r\f\v')
ANY_BUT_NEWLINE = negate(_chars('\n'))

SHORTHAND = {
    'd': DIGIT,
    'D': negate(DIGIT),
    'w': WORD,
    'W': negate(WORD),
    's': SPACE,
    'S': negate(SPACE),
}

CONTROL_ESCAPES = {'n': '\n', 'r': '\r', 't': '\t', 'f': '\f', 'v': '\v', '0': '\0'}


# ---- 语法树 ----

@dataclass(frozen=True)
class CharSet:
    """匹配集合中任意一个字符"""
    ranges: Ranges


@dataclass(frozen=True)
class Concat:
    """连接；parts 为空时匹配空串"""
    parts: Tuple['Node', ...]


@dataclass(frozen=True)
class Alternation:
    options: Tuple['Node', ...]


@dataclass(frozen=True)
class Repeat:
    """重复 min_count 到 max_count 次，max_count 为 None 表示无上限"""
    node: 'Node'
    min_count: int
    max_count: Optional[int]


Node = Union[CharSet, Concat, Alternation, Repeat]
EMPTY = Concat(())


class RegexParser:
    # regex         := alternation
    # alternation   := concatenation ('|' concatenation)*
    # concatenation := repetition*
    # repetition    := atom quantifier? '?'?
    # quantifier    := '*' | '+' | '?' | '{m}' | '{m,}' | '{m,n}'
    # atom          := literal | '.' | escape | group | charclass

    def __init__(self, pattern: str):
        self.pattern = pattern
        self.i = 0

    def parse(self) -> Node:
        node = self._parse_alternation()
        if not self._eof():
            # 只可能停在多余的 ')'
            raise self._error(f"多余的 {self._peek()!r}")
        return node

    def _parse_alternation(self) -> Node:
        options = [self._parse_concatenation()]
        while self._peek() == '|':
            self.i += 1
            options.append(self._parse_concatenation())
        if len(options) == 1:
            return options[0]
        return Alternation(tuple(options))

    def _parse_concatenation(self) -> Node:
        parts = []
        while True:
            c = self._peek()
            if c is None or c in ')|':
                break
            part = self._parse_repetition()
            if part != EMPTY:
                parts.append(part)
        if len(parts) == 1:
            return parts[0]
        return Concat(tuple(parts))

    def _parse_repetition(self) -> Node:
        atom = self._parse_atom()
        c = self._peek()
        if c in ('*', '+', '?'):
            self.i += 1
            bounds = {'*': (0, None), '+': (1, None), '?': (0, 1)}[c]
        elif c == '{':
            bounds = self._parse_brace_quantifier()
        else:
            return atom
        # 惰性量词（如 *?）不改变整串匹配的语言
        if self._peek() == '?':
            self.i += 1
        if self._peek() is not None and self._peek() in '*+{':
            raise self._error("量词不能连续出现")
        return Repeat(atom, bounds[0], bounds[1])

    def _parse_brace_quantifier(self) -> Tuple[int, Optional[int]]:
        self.i += 1
        m = self._parse_int()
        if self._peek() == '}':
            self.i += 1
            return m, m
        self._eat(',')
        if self._peek() == '}':
            self.i += 1
            return m, None
        n = self._parse_int()
        self._eat('}')
        if n < m:
            raise self._error(f"量词范围 {{{m},{n}}} 无效")
        return m, n

    def _parse_atom(self) -> Node:
        c = self._peek()
        if c == '(':
            return self._parse_group()
        if c == '[':
            return CharSet(self._parse_charclass())
        if c == '\\':
            return CharSet(self._parse_escape(in_class=False))
        if c == '.':
            self.i += 1
            return CharSet(ANY_BUT_NEWLINE)
        # 整串匹配隐含锚定，开头的 ^ 与结尾的 $ 不起作用
        if c == '^' and self.i == 0:
            self.i += 1
            return EMPTY
        if c == '$' and self.i == len(self.pattern) - 1:
            self.i += 1
            return EMPTY
        if c in '^$':
            raise self._error(f"不支持在中间位置使用锚点 {c!r}")
        if c in '*+?{}':
            raise self._error(f"量词符号 {c!r} 不能出现在此处")

        self.i += 1
        return CharSet(((ord(c), ord(c)),))

    def _parse_group(self) -> Node:
        self.i += 1
        if self._peek() == '?':
            if self.pattern.startswith('?:', self.i):
                self.i += 2
            else:
                raise self._error("不支持 (? 形式的构造（环视、内联标志等）")
        node = self._parse_alternation()
        if self._peek() != ')':
            raise self._error("括号未闭合")
        self.i += 1
        return node

    def _parse_escape(self, in_class: bool) -> Ranges:
        self.i += 1
        c = self._peek()
        if c is None:
            raise self._error("反斜杠位于末尾")
        self.i += 1

        if c in SHORTHAND:
            return SHORTHAND[c]
        if c in CONTROL_ESCAPES:
            return _chars(CONTROL_ESCAPES[c])
        if c == 'x':
            return self._parse_hex(2)
        if c == 'u':
            return self._parse_hex(4)
        if c == 'b' and in_class:
            return _chars('\b')
        if c in 'bB':
            raise RegexCompileError("不支持单词边界 \\b / \\B", self.pattern, self.i - 2)
        if c.isdigit():
            raise RegexCompileError("不支持反向引用", self.pattern, self.i - 2)
        if c.isascii() and c.isalpha():
            raise RegexCompileError(f"未知的转义序列 \\{c}", self.pattern, self.i - 2)
        return _chars(c)

    def _parse_hex(self, width: int) -> Ranges:
        digits = self.pattern[self.i:self.i + width]
        if len(digits) != width or any(d not in '0123456789abcdefABCDEF' for d in digits):
            raise self._error("十六进制转义格式错误")
        self.i += width
        code = int(digits, 16)
        return ((code, code),)

    def _parse_charclass(self) -> Ranges:
        self.i += 1
        negated = False
        if self._peek() == '^':
            negated = True
            self.i += 1

        ranges: List[Tuple[int, int]] = []
        first = True
        while True:
            c = self._peek()
            if c is None:
                raise self._error("字符类 '[' 未闭合")
            if c == ']' and not first:
                self.i += 1
                break
            first = False
            ranges.extend(self._parse_class_item())

        result = normalize(ranges)
        return negate(result) if negated else result

    def _parse_class_item(self) -> Ranges:
        left = self._parse_class_atom()
        # '-' 紧挨 ']' 时是普通字符
        if self._peek() != '-' or self._peek_ahead(1) in (']', None):
            return left
        if len(left) != 1 or left[0][0] != left[0][1]:
            raise self._error("字符类范围的端点不能是 \\d 一类的集合")
        self.i += 1
        right = self._parse_class_atom()
        if len(right) != 1 or right[0][0] != right[0][1]:
            raise self._error("字符类范围的端点不能是 \\d 一类的集合")
        lo, hi = left[0][0], right[0][0]
        if hi < lo:
            raise self._error("字符类范围顺序颠倒")
        return ((lo, hi),)

    def _parse_class_atom(self) -> Ranges:
        c = self._peek()
        if c == '\\':
            return self._parse_escape(in_class=True)
        self.i += 1
        return ((ord(c), ord(c)),)

    def _parse_int(self) -> int:
        start = self.i
        while self._peek() is not None and self._peek().isdigit():
            self.i += 1
        if self.i == start:
            raise self._error("量词中缺少数字")
        return int(self.pattern[start:self.i])

    def _peek(self) -> Optional[str]:
        if self.i >= len(self.pattern):
            return None
        return self.pattern[self.i]

    def _peek_ahead(self, k: int) -> Optional[str]:
        j = self.i + k
        if j >= len(self.pattern):
            return None
        return self.pattern[j]

    def _eat(self, ch: str):
        if self._peek() != ch:
            raise self._error(f"期望 {ch!r}")
        self.i += 1

    def _eof(self) -> bool:
        return self.i >= len(self.pattern)

    def _error(self, message: str) -> RegexCompileError:
        return RegexCompileError(message, self.pattern, self.i)


def parse_regex(pattern: str) -> Node:
    """
    解析正则表达式
    :param pattern: 正则模式（不含两侧斜杠）
    :return: 语法树
    """
    return RegexParser(pattern).parse()
