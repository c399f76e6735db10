"""
NFA 构造模块
使用 Thompson 构造法将正则语法树转换为带 ε 边的非确定有限自动机
"""

from typing import FrozenSet, Iterable, List, Set, Tuple

from sebnf_ll1.automaton.regex_parser import (
    Alternation, CharSet, Concat, Node, Ranges, Repeat,
)


class NFA:
    """非确定有限自动机，状态用整数编号"""

    def __init__(self):
        self.epsilon: List[List[int]] = []  # 每个状态的 ε 后继
        self.edges: List[List[Tuple[Ranges, int]]] = []  # 每个状态的 (字符集合, 后继)
        self.start = 0
        self.accept = 0

    def new_state(self) -> int:
        self.epsilon.append([])
        self.edges.append([])
        return len(self.epsilon) - 1

    def add_epsilon(self, src: int, dst: int):
        self.epsilon[src].append(dst)

    def add_edge(self, src: int, ranges: Ranges, dst: int):
        if ranges:
            self.edges[src].append((ranges, dst))

    def epsilon_closure(self, states: Iterable[int]) -> FrozenSet[int]:
        """计算状态集合的 ε 闭包"""
        closure: Set[int] = set(states)
        stack = list(closure)
        while stack:
            state = stack.pop()
            for nxt in self.epsilon[state]:
                if nxt not in closure:
                    closure.add(nxt)
                    stack.append(nxt)
        return frozenset(closure)

    def __len__(self):
        return len(self.epsilon)


class ThompsonBuilder:
    """Thompson 构造：每个子表达式生成一个 (入口, 出口) 片段"""

    def __init__(self):
        self.nfa = NFA()

    def build(self, node: Node) -> NFA:
        start, accept = self._build(node)
        self.nfa.start = start
        self.nfa.accept = accept
        return self.nfa

    def _build(self, node: Node) -> Tuple[int, int]:
        if isinstance(node, CharSet):
            start, end = self.nfa.new_state(), self.nfa.new_state()
            self.nfa.add_edge(start, node.ranges, end)
            return start, end

        if isinstance(node, Concat):
            start = self.nfa.new_state()
            current = start
            for part in node.parts:
                part_start, part_end = self._build(part)
                self.nfa.add_epsilon(current, part_start)
                current = part_end
            return start, current

        if isinstance(node, Alternation):
            start, end = self.nfa.new_state(), self.nfa.new_state()
            for option in node.options:
                option_start, option_end = self._build(option)
                self.nfa.add_epsilon(start, option_start)
                self.nfa.add_epsilon(option_end, end)
            return start, end

        if isinstance(node, Repeat):
            return self._build_repeat(node)

        raise TypeError(f"未知的正则语法树节点: {node!r}")

    def _build_repeat(self, node: Repeat) -> Tuple[int, int]:
        """
        展开计数重复：先串联 min_count 个必选副本，
        上限为无穷时接一个 Kleene 环，否则接 (max - min) 个可跳过的副本
        """
        start = self.nfa.new_state()
        current = start
        for _ in range(node.min_count):
            copy_start, copy_end = self._build(node.node)
            self.nfa.add_epsilon(current, copy_start)
            current = copy_end

        if node.max_count is None:
            loop_start, loop_end = self._build(node.node)
            end = self.nfa.new_state()
            self.nfa.add_epsilon(current, loop_start)
            self.nfa.add_epsilon(current, end)
            self.nfa.add_epsilon(loop_end, loop_start)
            self.nfa.add_epsilon(loop_end, end)
            return start, end

        end = self.nfa.new_state()
        self.nfa.add_epsilon(current, end)
        for _ in range(node.max_count - node.min_count):
            copy_start, copy_end = self._build(node.node)
            self.nfa.add_epsilon(current, copy_start)
            self.nfa.add_epsilon(copy_end, end)
            current = copy_end
        return start, end


def build_nfa(node: Node) -> NFA:
    """
    由正则语法树构造 NFA
    :param node: 正则语法树
    :return: NFA
    """
    return ThompsonBuilder().build(node)
