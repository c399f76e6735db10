"""
错误类型模块
定义文法分析各阶段抛出的异常
"""

from typing import Optional


class GrammarError(ValueError):
    """文法分析错误基类，记录出错位置"""

    def __init__(self, message: str, offset: Optional[int] = None,
                 line: Optional[int] = None, column: Optional[int] = None):
        """
        初始化错误
        :param message: 错误描述
        :param offset: 出错位置在源文本中的字符偏移
        :param line: 行号（从1开始）
        :param column: 列号（从1开始）
        """
        super().__init__(message)
        self.message = message
        self.offset = offset
        self.line = line
        self.column = column

    def __str__(self):
        if self.line is not None:
            return f"{self.message}（第 {self.line} 行，第 {self.column} 列）"
        return self.message


class LexError(GrammarError):
    """词法错误：未终止的字符串/正则/注释，或非法字符"""


class ParseError(GrammarError):
    """语法错误：意外的记号、非法的 '|' 位置、缺少 '.' 等"""


class SemanticError(GrammarError):
    """语义错误：未定义的非终结符、重复的规则名、空文法"""


class RegexCompileError(GrammarError):
    """正则表达式编译错误：不支持的构造或格式错误"""

    def __init__(self, message: str, pattern: str, position: int):
        """
        :param message: 错误描述
        :param pattern: 出错的正则表达式
        :param position: 出错位置在正则表达式内部的偏移
        """
        super().__init__(message)
        self.pattern = pattern
        self.position = position

    def __str__(self):
        return f"{self.message}（正则 /{self.pattern}/，位置 {self.position}）"
