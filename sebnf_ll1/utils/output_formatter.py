"""
输出格式化模块
使用rich库美化输出
"""

from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from sebnf_ll1.core.errors import GrammarError
from sebnf_ll1.core.first_follow import SymbolTables
from sebnf_ll1.core.grammar import Grammar, format_items
from sebnf_ll1.parsers.ll1_checker import LL1Result


class OutputFormatter:
    """输出格式化器"""

    def __init__(self, console: Optional[Console] = None):
        """
        初始化格式化器
        :param console: rich 控制台，默认输出到标准输出
        """
        self.console = console or Console()

    def print_grammar(self, grammar: Grammar, title: str = "文法信息"):
        """
        打印文法信息
        :param grammar: 文法对象
        :param title: 面板标题
        """
        info_text = Text()
        info_text.append("开始符号: ", style="bold yellow")
        info_text.append(f"{grammar.start_symbol}\n", style="cyan")
        info_text.append("非终结符: ", style="bold yellow")
        info_text.append(f"{', '.join(grammar.non_terminals)}\n", style="cyan")
        info_text.append("终结符: ", style="bold yellow")
        info_text.append(', '.join(str(t) for t in grammar.terminals) or '∅', style="cyan")

        panel = Panel(info_text, title=f"[bold magenta]{escape(title)}[/bold magenta]",
                      border_style="magenta")
        self.console.print(panel)

        # 打印规则，每个候选式一行并编号
        self.console.print("\n[bold magenta]规则列表:[/bold magenta]")
        for rule in grammar.rules:
            for index, alt in enumerate(rule.alternatives):
                right_str = format_items(alt) if alt else 'ε'
                self.console.print(f"  [yellow]({index})[/yellow] [cyan]{escape(rule.name)}[/cyan] → {escape(right_str)}")

    def print_source(self, grammar: Grammar):
        """以可再次解析的文本形式打印文法"""
        self.console.print(str(grammar), end='', markup=False, highlight=False, soft_wrap=True)

    def print_nullable_set(self, tables: SymbolTables):
        """
        打印可空的非终结符
        :param tables: FIRST/FOLLOW 计算结果
        """
        table = Table(title="NULLABLE 集", show_header=True, header_style="bold magenta")
        table.add_column("非终结符", style="cyan", justify="center")
        table.add_column("是否NULLABLE", justify="center")

        for nt in tables.grammar.non_terminals:
            if tables.first[nt].nullable:
                table.add_row(escape(nt), "[green]✓[/green]")

        self.console.print("\n")
        self.console.print(table)

    def print_first_sets(self, tables: SymbolTables):
        """
        打印每个非终结符的FIRST集
        :param tables: FIRST/FOLLOW 计算结果
        """
        table = Table(title="非终结符的 FIRST 集", show_header=True, header_style="bold magenta")
        table.add_column("非终结符", style="cyan", justify="center")
        table.add_column("FIRST 集", justify="left")

        for nt in tables.grammar.non_terminals:
            table.add_row(escape(nt), escape(tables.first[nt].describe()))

        self.console.print("\n")
        self.console.print(table)

    def print_follow_sets(self, tables: SymbolTables):
        """
        打印每个非终结符的FOLLOW集（$ 表示输入结束）
        :param tables: FIRST/FOLLOW 计算结果
        """
        table = Table(title="非终结符的 FOLLOW 集", show_header=True, header_style="bold magenta")
        table.add_column("非终结符", style="cyan", justify="center")
        table.add_column("FOLLOW 集", justify="left")

        for nt in tables.grammar.non_terminals:
            table.add_row(escape(nt), escape(tables.follow[nt].describe()))

        self.console.print("\n")
        self.console.print(table)

    def print_terminal_languages(self, tables: SymbolTables):
        """打印每个终结符的语言是否包含空串以及 DFA 规模"""
        table = Table(title="终结符语言", show_header=True, header_style="bold magenta")
        table.add_column("终结符", style="cyan", justify="left")
        table.add_column("可空", justify="center")
        table.add_column("DFA 状态数", justify="right")

        for terminal, language in tables.languages.items():
            table.add_row(escape(str(terminal)),
                          "[green]✓[/green]" if language.nullable else "",
                          str(language.dfa.state_count))

        self.console.print("\n")
        self.console.print(table)

    def print_ll1_result(self, result: LL1Result, grammar: Grammar):
        """
        打印 LL(1) 检测结果
        :param result: 检测结果
        :param grammar: 被检测的 BNF 文法
        """
        if result.is_ll1:
            self.console.print("\n[bold green]✓ 文法是 LL(1) 文法[/bold green]")
            return

        self.console.print(f"\n[bold red]✗ 文法不是 LL(1) 文法，检测到 {len(result.conflicts)} 个冲突：[/bold red]")
        for number, conflict in enumerate(result.conflicts, 1):
            rule = grammar.get_rule(conflict.rule)
            self.console.print(f"\n[bold red]{number}. 非终结符 '{escape(conflict.rule)}' 的 {conflict.kind} 冲突[/bold red]")
            for index in conflict.alternatives:
                alt = rule.alternatives[index]
                self.console.print(f"  候选式 ({index}): [cyan]{escape(format_items(alt) if alt else 'ε')}[/cyan]")
            if conflict.both_nullable:
                self.console.print("  [yellow]原因: 两个候选式都可推导出空串[/yellow]")
            for overlap in conflict.overlaps:
                source = "FOLLOW" if overlap.via_follow else "FIRST"
                self.console.print(f"  [red]✗ {escape(overlap.describe())}[/red] [dim]({source})[/dim]")
            if conflict.common_prefix:
                prefix = format_items(conflict.common_prefix)
                self.console.print(f"  [green]建议: 可以提取左公因子 '{escape(prefix)}'[/green]")

    def print_error(self, error: GrammarError, source: Optional[str] = None):
        """
        打印错误消息，有位置信息时显示出错的源代码行
        :param error: 错误对象
        :param source: 文法源文本
        """
        self.console.print(f"[bold red]错误: {escape(str(error))}[/bold red]")
        if source is None or error.offset is None or error.line is None:
            return
        lines = source.splitlines() or ['']
        line_text = lines[min(error.line, len(lines)) - 1]
        self.console.print(f"  {escape(line_text)}", highlight=False)
        self.console.print("  " + " " * (error.column - 1) + "[bold red]^[/bold red]")

    def print_success(self, message: str):
        """
        打印成功消息
        :param message: 成功消息
        """
        self.console.print(f"[bold green]✓ {escape(message)}[/bold green]")

    def print_info(self, message: str):
        """
        打印信息消息
        :param message: 信息消息
        """
        self.console.print(f"[bold cyan]ℹ {escape(message)}[/bold cyan]")

    def print_separator(self):
        """打印分隔线"""
        self.console.print("\n" + "=" * 80 + "\n")
