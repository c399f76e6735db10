"""
文法类定义模块
用于表示 SEBNF 文法及其展开后的 BNF 形式
"""

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple, Union


@dataclass(frozen=True)
class NonTerminalRef:
    """对非终结符的引用"""
    name: str

    def __str__(self):
        return self.name


@dataclass(frozen=True)
class Literal:
    """字符串终结符，text 为反转义后的内容"""
    text: str

    def __str__(self):
        return quote_literal(self.text)


@dataclass(frozen=True)
class Regex:
    """正则终结符，pattern 为两个斜杠之间的内容"""
    pattern: str

    def __str__(self):
        return f"/{self.pattern}/"


@dataclass(frozen=True)
class OptionalItem:
    """可选项 [ ... ]"""
    items: Tuple['Item', ...]

    def __str__(self):
        return f"[ {format_items(self.items)} ]"


@dataclass(frozen=True)
class Repetition:
    """重复项 { ... }，零次或多次"""
    items: Tuple['Item', ...]

    def __str__(self):
        return f"{{ {format_items(self.items)} }}"


@dataclass(frozen=True)
class Group:
    """分组选择 ( ... | ... )"""
    alternatives: Tuple[Tuple['Item', ...], ...]

    def __str__(self):
        return f"( {' | '.join(format_items(alt) for alt in self.alternatives)} )"


# 文法项：固定的几种变体，由 isinstance 分派
Item = Union[NonTerminalRef, Literal, Regex, OptionalItem, Repetition, Group]
Terminal = Union[Literal, Regex]

# 候选式：文法项序列，空序列表示 epsilon
Alternative = Tuple[Item, ...]

SUGAR_TYPES = (OptionalItem, Repetition, Group)


def is_terminal(item: Item) -> bool:
    """判断文法项是否为终结符（字符串或正则）"""
    return isinstance(item, (Literal, Regex))


def quote_literal(text: str) -> str:
    """将字符串终结符转为带引号、带转义的源文本形式"""
    escaped = (text.replace('\\', '\\\\').replace('"', '\\"')
               .replace('\n', '\\n').replace('\t', '\\t').replace('\r', '\\r'))
    return f'"{escaped}"'


def format_items(items: Tuple[Item, ...]) -> str:
    """格式化文法项序列"""
    return ' '.join(str(item) for item in items)


@dataclass(frozen=True)
class Rule:
    """规则类：一个非终结符及其有序的候选式"""
    name: str
    alternatives: Tuple[Alternative, ...]

    def __str__(self):
        alts = ' | '.join(format_items(alt) for alt in self.alternatives)
        return f"{self.name} := {alts} ."


class Grammar:
    """文法类：规则的有序集合，第一条规则的左部为开始符号"""

    def __init__(self, rules: Tuple[Rule, ...] = ()):
        """
        初始化文法
        :param rules: 有序规则序列
        """
        self.rules: Tuple[Rule, ...] = tuple(rules)
        # 规则之间的相互引用通过名字查找实现
        self._index: Dict[str, Rule] = {}
        for rule in self.rules:
            self._index.setdefault(rule.name, rule)

    @property
    def start_symbol(self) -> Optional[str]:
        """开始符号"""
        return self.rules[0].name if self.rules else None

    @property
    def non_terminals(self) -> List[str]:
        """按声明顺序的非终结符列表"""
        return [rule.name for rule in self.rules]

    @property
    def terminals(self) -> List[Item]:
        """按出现顺序去重后的终结符列表（含嵌套在语法糖中的终结符）"""
        seen = {}
        for item in self.iter_items():
            if is_terminal(item):
                seen.setdefault(item, None)
        return list(seen)

    def get_rule(self, name: str) -> Optional[Rule]:
        """
        按名字获取规则
        :param name: 非终结符
        :return: 规则，不存在时返回 None
        """
        return self._index.get(name)

    def has_rule(self, name: str) -> bool:
        return name in self._index

    def iter_items(self) -> Iterator[Item]:
        """深度优先遍历所有文法项（包括语法糖内部的项）"""
        for rule in self.rules:
            for alt in rule.alternatives:
                yield from _walk(alt)

    def is_bnf(self) -> bool:
        """判断文法是否已不含语法糖"""
        return not any(isinstance(item, SUGAR_TYPES) for item in self.iter_items())

    def __eq__(self, other):
        if not isinstance(other, Grammar):
            return False
        return self.rules == other.rules

    def __hash__(self):
        return hash(self.rules)

    def __len__(self):
        return len(self.rules)

    def __iter__(self):
        return iter(self.rules)

    def __repr__(self):
        return f"Grammar({len(self.rules)} rules, start={self.start_symbol!r})"

    def __str__(self):
        """
        返回文法的源文本形式（可再次被解析）
        单候选式规则写在一行，多候选式规则每个候选式一行
        """
        width = max((len(rule.name) for rule in self.rules), default=0)
        indent = ' ' * (width + 2)
        lines = []
        for rule in self.rules:
            head = f"{rule.name:<{width}} := "
            first = format_items(rule.alternatives[0]) if rule.alternatives else ''
            if len(rule.alternatives) <= 1:
                lines.append(f"{head}{first}".rstrip() + ' .')
                continue
            lines.append(f"{head}{first}".rstrip())
            for alt in rule.alternatives[1:]:
                lines.append(f"{indent}| {format_items(alt)}".rstrip())
            lines.append(f"{indent}.")
        return '\n'.join(lines) + ('\n' if lines else '')


def _walk(items: Tuple[Item, ...]) -> Iterator[Item]:
    for item in items:
        yield item
        if isinstance(item, (OptionalItem, Repetition)):
            yield from _walk(item.items)
        elif isinstance(item, Group):
            for alt in item.alternatives:
                yield from _walk(alt)
