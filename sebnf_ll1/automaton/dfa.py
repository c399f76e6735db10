"""
DFA 构造模块
子集构造、无用状态裁剪，以及两个 DFA 的乘积构造与可达性搜索
"""

from bisect import bisect_right
from collections import deque
from typing import Callable, Dict, FrozenSet, Iterator, List, Optional, Tuple

from sebnf_ll1.automaton.nfa import NFA

# 转移：(lo, hi, 目标状态)，同一状态的转移按 lo 排序且互不相交
Edge = Tuple[int, int, int]


class DFA:
    """
    确定有限自动机
    状态 0 为开始状态；没有对应转移的字符进入隐含的死状态
    """

    def __init__(self, transitions: List[List[Edge]], accepting: FrozenSet[int]):
        """
        :param transitions: 每个状态的出边列表
        :param accepting: 接受状态集合
        """
        self.transitions: Tuple[Tuple[Edge, ...], ...] = tuple(
            tuple(sorted(edges)) for edges in transitions)
        self.accepting = frozenset(accepting)
        self._starts = tuple(tuple(edge[0] for edge in edges) for edges in self.transitions)

    @property
    def start(self) -> int:
        return 0

    @property
    def state_count(self) -> int:
        return len(self.transitions)

    def is_accepting(self, state: int) -> bool:
        return state in self.accepting

    def step(self, state: int, code: int) -> Optional[int]:
        """
        单步转移
        :return: 后继状态，进入死状态时返回 None
        """
        index = bisect_right(self._starts[state], code) - 1
        if index < 0:
            return None
        lo, hi, target = self.transitions[state][index]
        return target if lo <= code <= hi else None

    def accepts(self, text: str) -> bool:
        """判断整个字符串是否被接受"""
        state = self.start
        for ch in text:
            state = self.step(state, ord(ch))
            if state is None:
                return False
        return self.is_accepting(state)

    def __repr__(self):
        return f"DFA({self.state_count} states, {len(self.accepting)} accepting)"


def empty_dfa() -> DFA:
    """不接受任何字符串的 DFA"""
    return DFA([[]], frozenset())


def dfa_from_string(text: str) -> DFA:
    """构造恰好接受 text 的 DFA"""
    transitions = [[(ord(ch), ord(ch), i + 1)] for i, ch in enumerate(text)]
    transitions.append([])
    return DFA(transitions, frozenset({len(text)}))


def determinize(nfa: NFA) -> DFA:
    """
    子集构造
    每个 DFA 状态对应一个 NFA 状态集合；字母表按所有出边区间的端点切分为互不相交的片段
    """
    start = nfa.epsilon_closure([nfa.start])
    index: Dict[FrozenSet[int], int] = {start: 0}
    order = [start]
    transitions: List[List[Edge]] = []

    i = 0
    while i < len(order):
        current = order[i]
        i += 1
        moves = [(lo, hi, target)
                 for state in sorted(current)
                 for ranges, target in nfa.edges[state]
                 for lo, hi in ranges]
        edges: List[Edge] = []
        for lo, hi, targets in _partition(moves):
            closure = nfa.epsilon_closure(targets)
            if closure not in index:
                index[closure] = len(order)
                order.append(closure)
            _append_merged(edges, lo, hi, index[closure])
        transitions.append(edges)

    accepting = frozenset(i for i, states in enumerate(order) if nfa.accept in states)
    return trim(DFA(transitions, accepting))


def _partition(moves: List[Edge]) -> Iterator[Tuple[int, int, FrozenSet[int]]]:
    """
    将可能重叠的 (lo, hi, 目标) 区间切分为互不相交的片段
    :return: 依次产生 (lo, hi, 目标集合)
    """
    if not moves:
        return
    points = sorted({lo for lo, _, _ in moves} | {hi + 1 for _, hi, _ in moves})
    for left, right in zip(points, points[1:]):
        targets = frozenset(t for lo, hi, t in moves if lo <= left and right - 1 <= hi)
        if targets:
            yield left, right - 1, targets


def _append_merged(edges: List[Edge], lo: int, hi: int, target: int):
    """追加转移，与前一条相邻且目标相同时合并"""
    if edges and edges[-1][2] == target and edges[-1][1] + 1 == lo:
        edges[-1] = (edges[-1][0], hi, target)
    else:
        edges.append((lo, hi, target))


def trim(dfa: DFA) -> DFA:
    """
    删除从开始状态不可达或无法到达接受状态的状态，并重新编号
    结果中除开始状态外的每个状态都能到达接受状态
    """
    reachable = {dfa.start}
    queue = deque([dfa.start])
    while queue:
        state = queue.popleft()
        for _, _, target in dfa.transitions[state]:
            if target not in reachable:
                reachable.add(target)
                queue.append(target)

    # 反向传播：能到达接受状态的状态
    live = set(s for s in dfa.accepting if s in reachable)
    changed = True
    while changed:
        changed = False
        for state in reachable:
            if state in live:
                continue
            if any(target in live for _, _, target in dfa.transitions[state]):
                live.add(state)
                changed = True

    if dfa.start not in live:
        return empty_dfa()

    order = [s for s in range(dfa.state_count) if s in live]
    renumber = {old: new for new, old in enumerate(order)}
    transitions = []
    for old in order:
        edges: List[Edge] = []
        for lo, hi, target in dfa.transitions[old]:
            if target in renumber:
                _append_merged(edges, lo, hi, renumber[target])
        transitions.append(edges)
    accepting = frozenset(renumber[s] for s in dfa.accepting if s in renumber)
    return DFA(transitions, accepting)


def overlay(a: Tuple[Edge, ...], b: Tuple[Edge, ...]) -> Iterator[Tuple[int, int, Optional[int], Optional[int]]]:
    """
    同时遍历两个状态的出边
    :return: 依次产生 (lo, hi, a 的目标, b 的目标)，没有转移的一侧为 None
    """
    points = sorted({lo for lo, _, _ in a} | {hi + 1 for _, hi, _ in a}
                    | {lo for lo, _, _ in b} | {hi + 1 for _, hi, _ in b})
    for left, right in zip(points, points[1:]):
        ta = _target(a, left)
        tb = _target(b, left)
        if ta is not None or tb is not None:
            yield left, right - 1, ta, tb


def _target(edges: Tuple[Edge, ...], code: int) -> Optional[int]:
    for lo, hi, target in edges:
        if lo <= code <= hi:
            return target
        if lo > code:
            break
    return None


PairState = Tuple[Optional[int], Optional[int]]


def product(a: DFA, b: DFA, accept: Callable[[bool, bool], bool], both: bool) -> DFA:
    """
    乘积构造
    :param a: 第一个 DFA
    :param b: 第二个 DFA
    :param accept: 由两侧是否接受决定乘积状态是否接受
    :param both: True 时只保留两侧都有转移的边（交），否则保留任一侧有转移的边（并）
    :return: 乘积 DFA（已裁剪）
    """
    start: PairState = (a.start, b.start)
    index: Dict[PairState, int] = {start: 0}
    order = [start]
    transitions: List[List[Edge]] = []

    i = 0
    while i < len(order):
        sa, sb = order[i]
        i += 1
        edges_a = a.transitions[sa] if sa is not None else ()
        edges_b = b.transitions[sb] if sb is not None else ()
        edges: List[Edge] = []
        for lo, hi, ta, tb in overlay(edges_a, edges_b):
            if both and (ta is None or tb is None):
                continue
            pair = (ta, tb)
            if pair not in index:
                index[pair] = len(order)
                order.append(pair)
            _append_merged(edges, lo, hi, index[pair])
        transitions.append(edges)

    accepting = frozenset(
        i for i, (sa, sb) in enumerate(order)
        if accept(sa is not None and a.is_accepting(sa), sb is not None and b.is_accepting(sb)))
    return trim(DFA(transitions, accepting))


def shortest_common_string(a: DFA, b: DFA) -> Optional[str]:
    """
    在乘积自动机上从 (开始, 开始) 做广度优先搜索，寻找两侧同时接受的状态对
    visited 记录已访问的状态对，因此即使自动机含环也必然终止
    :return: 同时被两者接受的最短字符串（每步取区间内最小字符），不存在时返回 None
    """
    start = (a.start, b.start)
    parent: Dict[Tuple[int, int], Optional[Tuple[Tuple[int, int], int]]] = {start: None}
    queue = deque([start])

    while queue:
        sa, sb = queue.popleft()
        if a.is_accepting(sa) and b.is_accepting(sb):
            chars = []
            current = (sa, sb)
            while parent[current] is not None:
                current, code = parent[current]
                chars.append(chr(code))
            return ''.join(reversed(chars))

        for lo, _, ta, tb in overlay(a.transitions[sa], b.transitions[sb]):
            if ta is None or tb is None:
                continue
            if (ta, tb) not in parent:
                parent[(ta, tb)] = ((sa, sb), lo)
                queue.append((ta, tb))

    return None
