"""
终结符 DFA 可视化工具
"""

import os
from typing import Optional

from graphviz import Digraph

from sebnf_ll1.automaton.regular_language import RegularLanguage
from sebnf_ll1.utils.dfa_exporter import clean_name, grouped_transitions


class DFAVisualizer:
    """终结符语言的 DFA 可视化器"""

    def __init__(self, language: RegularLanguage, name: str):
        """
        初始化可视化器
        :param language: 终结符语言
        :param name: 终结符名称（如 "a" 或 /a+/）
        """
        self.language = language
        self.name = name

    def build_graph(self) -> Digraph:
        """
        构造 Graphviz 图
        :return: Digraph 对象
        """
        dot = Digraph(comment=f'{self.name} DFA')
        dot.attr(rankdir='LR')  # 从左到右排列
        dot.attr('node', shape='circle', fontname='Microsoft YaHei')
        dot.attr('edge', fontname='Microsoft YaHei')

        # 不可见的起始节点指向开始状态
        dfa = self.language.dfa
        dot.node('start', '', shape='point')
        dot.edge('start', str(dfa.start), label='')

        for state in range(dfa.state_count):
            # 接受状态使用双圈
            shape = 'doublecircle' if dfa.is_accepting(state) else 'circle'
            dot.node(str(state), str(state), shape=shape)

        for state in range(dfa.state_count):
            for label, target in grouped_transitions(self.language, state).items():
                dot.edge(str(state), str(target), label=label, fontsize='9')

        return dot

    def visualize(self, output_dir: str = "output/DFA", filename: Optional[str] = None) -> str:
        """
        生成DFA图片（需要本机安装 Graphviz）
        :param output_dir: 输出目录
        :param filename: 输出文件名（不含扩展名），默认为 "dfa_终结符名"
        :return: 生成的图片路径
        """
        os.makedirs(output_dir, exist_ok=True)
        if filename is None:
            filename = f"dfa_{clean_name(self.name)}"

        output_path = os.path.join(output_dir, filename)
        self.build_graph().render(output_path, format='png', cleanup=True)

        return f"{output_path}.png"
