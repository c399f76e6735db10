"""
命令行入口
读取 SEBNF 文法，完成 解析 -> BNF 展开 -> FIRST/FOLLOW -> LL(1) 检测

用法示例:
    sebnf-ll1 validate grammar.sebnf
    sebnf-ll1 to-bnf grammar.sebnf
    sebnf-ll1 extract-sets grammar.sebnf
    sebnf-ll1 is-ll1 grammar.sebnf -D
    sebnf-ll1 show-dfa '/[a-z]+/' --render output/DFA
"""

import argparse
import json
import logging
import sys
from typing import List, Optional, Tuple

from rich.console import Console
from rich.logging import RichHandler

from sebnf_ll1.automaton.regular_language import compile_terminal
from sebnf_ll1.config.analysis_config import analysis_config
from sebnf_ll1.core.errors import GrammarError, ParseError
from sebnf_ll1.core.first_follow import compute_first_follow
from sebnf_ll1.core.grammar import Grammar, Literal, Regex, Terminal
from sebnf_ll1.core.grammar_parser import GrammarParser
from sebnf_ll1.core.lexer import TokenType, tokenize
from sebnf_ll1.parsers.ll1_checker import check_ll1
from sebnf_ll1.utils.dfa_exporter import DFAExporter
from sebnf_ll1.utils.dfa_visualizer import DFAVisualizer
from sebnf_ll1.utils.grammar_transformer import to_bnf
from sebnf_ll1.utils.output_formatter import OutputFormatter

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_NOT_LL1 = 1
EXIT_ERROR = 2


def configure_logging(debug: bool):
    """-D 时输出 DEBUG 日志，否则只显示警告"""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=debug)],
        force=True,
    )


def read_source(path: Optional[str]) -> str:
    """从文件读取文法，未给出文件时读取标准输入"""
    if path is None or path == '-':
        return sys.stdin.read()
    with open(path, 'r', encoding='utf-8-sig') as f:
        return f.read()


def parse_terminal(text: str) -> Terminal:
    """
    解析命令行给出的单个终结符
    :param text: 形如 "abc" 或 /a+/ 的终结符文本
    :return: Literal 或 Regex
    """
    tokens = tokenize(text)
    if len(tokens) != 1 or tokens[0].kind not in (TokenType.TERMINAL, TokenType.REGEX):
        raise ParseError(f"需要一个字符串终结符或正则终结符，得到 {text!r}")
    token = tokens[0]
    if token.kind == TokenType.TERMINAL:
        return Literal(token.value)
    return Regex(token.value)


def analyse(source: str) -> Tuple[Grammar, Grammar]:
    """
    解析并展开文法
    :return: (原文法, BNF 文法)
    """
    grammar = GrammarParser.parse_from_text(source)
    bnf = to_bnf(grammar)
    logger.debug("BNF ready: %d rules (%d helpers)", len(bnf), len(bnf) - len(grammar))
    return grammar, bnf


def cmd_validate(args, formatter: OutputFormatter, source: str) -> int:
    grammar, _ = analyse(source)
    formatter.print_success(f"文法合法：{len(grammar)} 条规则，开始符号 {grammar.start_symbol}")
    return EXIT_OK


def cmd_to_bnf(args, formatter: OutputFormatter, source: str) -> int:
    _, bnf = analyse(source)
    formatter.print_source(bnf)
    return EXIT_OK


def cmd_extract_sets(args, formatter: OutputFormatter, source: str) -> int:
    _, bnf = analyse(source)
    tables = compute_first_follow(bnf)
    formatter.print_grammar(bnf, title="BNF 文法")
    formatter.print_terminal_languages(tables)
    formatter.print_nullable_set(tables)
    formatter.print_first_sets(tables)
    formatter.print_follow_sets(tables)
    return EXIT_OK


def cmd_is_ll1(args, formatter: OutputFormatter, source: str) -> int:
    _, bnf = analyse(source)
    tables = compute_first_follow(bnf)
    result = check_ll1(bnf, tables)
    formatter.print_ll1_result(result, bnf)
    return EXIT_OK if result.is_ll1 else EXIT_NOT_LL1


def cmd_show_dfa(args, formatter: OutputFormatter, source: str) -> int:
    terminal = parse_terminal(source)
    name = str(terminal)
    language = compile_terminal(terminal)

    data = DFAExporter(language, name).build_dfa_data()
    formatter.console.print(json.dumps(data, indent=2, ensure_ascii=False),
                            markup=False, highlight=False, soft_wrap=True)

    if args.render:
        image = DFAVisualizer(language, name).visualize(args.render)
        formatter.print_info(f"DFA 图片已生成: {image}")
    return EXIT_OK


def build_arg_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument('-D', '--debug', action='store_true', help='输出调试日志')
    common.add_argument('--share-helpers', action='store_true',
                        help='结构相同的语法糖共用同一条辅助规则')
    common.add_argument('--no-witness', action='store_true',
                        help='冲突报告中不计算示例字符串')

    parser = argparse.ArgumentParser(prog='sebnf-ll1', description='SEBNF 文法的 LL(1) 分析工具')
    sub = parser.add_subparsers(dest='command', required=True)

    for name, handler, help_text in (
            ('validate', cmd_validate, '检查文法是否合法'),
            ('to-bnf', cmd_to_bnf, '展开语法糖并输出 BNF 文法'),
            ('extract-sets', cmd_extract_sets, '输出 NULLABLE/FIRST/FOLLOW 集'),
            ('is-ll1', cmd_is_ll1, '检测文法是否为 LL(1)，不是时退出码为 1'),
    ):
        p = sub.add_parser(name, parents=[common], help=help_text)
        p.add_argument('grammar', nargs='?', default=None, help='文法文件，省略时读取标准输入')
        p.set_defaults(handler=handler)

    p = sub.add_parser('show-dfa', parents=[common], help='以 JSON 输出终结符的 DFA')
    p.add_argument('terminal', help='终结符，如 \'"abc"\' 或 \'/[a-z]+/\'')
    p.add_argument('--render', metavar='DIR', default=None, help='同时在 DIR 下生成 DFA 图片')
    p.set_defaults(handler=cmd_show_dfa)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    configure_logging(args.debug)

    if args.share_helpers:
        analysis_config.enable_helper_sharing()
    if args.no_witness:
        analysis_config.disable_witness_examples()

    formatter = OutputFormatter()
    errors = OutputFormatter(Console(stderr=True))

    if args.command == 'show-dfa':
        source = args.terminal
    else:
        try:
            source = read_source(args.grammar)
        except OSError as e:
            errors.print_error(GrammarError(f"无法读取文件: {e}"))
            return EXIT_ERROR

    try:
        return args.handler(args, formatter, source)
    except GrammarError as e:
        errors.print_error(e, source)
        return EXIT_ERROR


if __name__ == '__main__':
    sys.exit(main())
