"""
DFA导出工具
将终结符语言的DFA导出为JSON格式
"""

import json
import os
import re
from typing import Any, Dict, List, Tuple

from sebnf_ll1.automaton.regex_parser import MAX_CODE_POINT
from sebnf_ll1.automaton.regular_language import RegularLanguage


def format_char(code: int) -> str:
    """格式化单个字符，不可见字符与特殊字符用转义形式"""
    ch = chr(code)
    special = {'\n': '\\n', '\t': '\\t', '\r': '\\r', '\\': '\\\\', '-': '\\-', ']': '\\]', '^': '\\^'}
    if ch in special:
        return special[ch]
    if not ch.isprintable() or ch == ' ':
        return f"\\u{code:04x}" if code > 0xFF else f"\\x{code:02x}"
    return ch


def format_ranges(ranges: List[Tuple[int, int]]) -> str:
    """
    将区间列表格式化为字符类标签，如 "a" 或 "[a-z0-9]"
    :param ranges: 有序区间列表
    :return: 标签文本
    """
    if len(ranges) == 1 and ranges[0][0] == ranges[0][1]:
        return format_char(ranges[0][0])
    if ranges == [(0, MAX_CODE_POINT)]:
        return "[^]"
    parts = []
    for lo, hi in ranges:
        if lo == hi:
            parts.append(format_char(lo))
        elif hi == MAX_CODE_POINT:
            parts.append(f"{format_char(lo)}-…")
        else:
            parts.append(f"{format_char(lo)}-{format_char(hi)}")
    return '[' + ''.join(parts) + ']'


def grouped_transitions(language: RegularLanguage, state: int) -> Dict[str, int]:
    """
    将某状态的出边按目标状态合并为标签
    :return: {字符类标签: 目标状态}
    """
    by_target: Dict[int, List[Tuple[int, int]]] = {}
    for lo, hi, target in language.dfa.transitions[state]:
        by_target.setdefault(target, []).append((lo, hi))
    return {format_ranges(ranges): target for target, ranges in by_target.items()}


class DFAExporter:
    """DFA导出器，将终结符语言的DFA导出为JSON格式"""

    def __init__(self, language: RegularLanguage, name: str):
        """
        初始化导出器
        :param language: 终结符语言
        :param name: 终结符名称（如 "a" 或 /a+/），用于生成文件名
        """
        self.language = language
        self.name = name

    def export_to_json(self, output_dir: str = "output/dfa_data") -> str:
        """
        导出DFA为JSON格式
        :param output_dir: 输出目录
        :return: 生成的文件路径
        """
        # 确保输出目录存在
        os.makedirs(output_dir, exist_ok=True)

        dfa_data = self.build_dfa_data()

        filename = f"dfa_{clean_name(self.name)}.json"
        filepath = os.path.join(output_dir, filename)

        # 写入文件（使用indent=2使JSON更易读）
        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(dfa_data, f, indent=2, ensure_ascii=False)

        return filepath

    def build_dfa_data(self) -> Dict[str, Any]:
        """
        构建DFA的JSON数据结构
        :return: {"terminal", "nullable", "start", "states": [{"id", "accepting", "transitions"}]}
        """
        dfa = self.language.dfa
        states_data = []
        for state in range(dfa.state_count):
            states_data.append({
                "id": state,
                "accepting": dfa.is_accepting(state),
                "transitions": grouped_transitions(self.language, state),
            })

        return {
            "terminal": self.name,
            "nullable": self.language.nullable,
            "start": dfa.start,
            "states": states_data,
        }

    @staticmethod
    def load_from_json(filepath: str) -> Dict[str, Any]:
        """
        从JSON文件加载DFA数据
        :param filepath: JSON文件路径
        :return: DFA数据
        """
        with open(filepath, 'r', encoding='utf-8') as f:
            return json.load(f)

    @staticmethod
    def validate_format(data: Dict[str, Any]) -> bool:
        """
        验证JSON数据是否符合DFA格式规范
        :param data: 待验证的数据
        :return: 是否符合规范
        """
        if not isinstance(data, dict) or not isinstance(data.get("states"), list):
            return False

        ids = set()
        for state in data["states"]:
            if not isinstance(state, dict):
                return False
            if not isinstance(state.get("id"), int) or not isinstance(state.get("accepting"), bool):
                return False
            if not isinstance(state.get("transitions"), dict):
                return False
            ids.add(state["id"])

        # 转移目标必须是已存在的状态
        for state in data["states"]:
            for target in state["transitions"].values():
                if not isinstance(target, int) or target not in ids:
                    return False
        return True


def clean_name(name: str) -> str:
    """将终结符文本转为可用作文件名的字符串"""
    cleaned = re.sub(r'[^0-9A-Za-z_]+', '_', name).strip('_')
    return cleaned or 'terminal'
