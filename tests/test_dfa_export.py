from sebnf_ll1.automaton.regex_parser import MAX_CODE_POINT
from sebnf_ll1.automaton.regular_language import compile_literal, compile_regex
from sebnf_ll1.utils.dfa_exporter import DFAExporter, format_char, format_ranges
from sebnf_ll1.utils.dfa_visualizer import DFAVisualizer


def test_format_ranges():
    assert format_ranges([(97, 97)]) == 'a'
    assert format_ranges([(97, 99), (120, 120)]) == '[a-cx]'
    assert format_ranges([(0, MAX_CODE_POINT)]) == '[^]'
    assert format_char(ord(' ')) == '\\x20'
    assert format_char(ord('\n')) == '\\n'


def test_build_dfa_data_for_literal():
    data = DFAExporter(compile_literal("ab"), '"ab"').build_dfa_data()
    assert data["terminal"] == '"ab"'
    assert data["start"] == 0
    assert not data["nullable"]
    assert data["states"] == [
        {"id": 0, "accepting": False, "transitions": {"a": 1}},
        {"id": 1, "accepting": False, "transitions": {"b": 2}},
        {"id": 2, "accepting": True, "transitions": {}},
    ]
    assert DFAExporter.validate_format(data)


def test_transitions_grouped_by_target():
    data = DFAExporter(compile_regex("[a-c]x"), "/[a-c]x/").build_dfa_data()
    assert data["states"][0]["transitions"] == {"[a-c]": 1}


def test_export_and_load(tmp_path):
    exporter = DFAExporter(compile_regex("a+"), "/a+/")
    path = exporter.export_to_json(str(tmp_path))
    assert path.endswith("dfa_a.json")
    loaded = DFAExporter.load_from_json(path)
    assert loaded == exporter.build_dfa_data()
    assert DFAExporter.validate_format(loaded)


def test_validate_format_rejects_bad_target():
    data = {"states": [{"id": 0, "accepting": True, "transitions": {"a": 5}}]}
    assert not DFAExporter.validate_format(data)
    assert not DFAExporter.validate_format({"states": "nope"})


def test_visualizer_graph_source():
    source = DFAVisualizer(compile_literal("ab"), '"ab"').build_graph().source
    assert 'rankdir=LR' in source
    assert 'start -> 0' in source
    assert 'doublecircle' in source
    assert '1 -> 2' in source
