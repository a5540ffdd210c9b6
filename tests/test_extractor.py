import json

from level_designer.extractor import extract_first_layout_like, repair_truncated
from level_designer.parsers import parse_strict
from level_designer.scanner import find_matching_close, scan_to_end


def test_skips_leading_noise_with_stray_quote():
    text = 'Here\'s "the layout: {"gameType":"td","objects":[]} thanks'
    assert extract_first_layout_like(text) == '{"gameType":"td","objects":[]}'


def test_skips_candidates_without_layout_markers():
    text = '{"note":"hello"} then {"objects":[]}'
    assert extract_first_layout_like(text) == '{"objects":[]}'


def test_returns_first_layout_only():
    text = '{"gameType":"a"} {"gameType":"b"}'
    assert extract_first_layout_like(text) == '{"gameType":"a"}'


def test_braces_inside_strings_are_ignored():
    text = 'x {"gameType":"a}b{","objects":[]} y'
    assert extract_first_layout_like(text) == '{"gameType":"a}b{","objects":[]}'


def test_escaped_quotes_inside_strings():
    doc = '{"gameType":"say \\"}\\" ok","objects":[]}'
    assert extract_first_layout_like(doc) == doc


def test_not_found():
    assert extract_first_layout_like("no json here") is None
    assert extract_first_layout_like('{"a":1}') is None
    assert extract_first_layout_like('{"objects":[') is None
    assert extract_first_layout_like("") is None


def test_repair_truncated_appends_closers():
    text = '{"objects":[{"id":"A","position":{"x":1,"y":0,"z":2}}'
    repaired = repair_truncated(text)
    assert repaired == text + "]}"
    layout = parse_strict(repaired)
    assert len(layout.objects) == 1
    assert layout.objects[0].position == (1.0, 0.0, 2.0)


def test_repair_truncated_inside_string():
    repaired = repair_truncated('{"objects":[{"id":"A')
    assert json.loads(repaired) == {"objects": [{"id": "A"}]}


def test_repair_truncated_closes_innermost_first():
    repaired = repair_truncated('noise {"a":[{"b":1')
    assert repaired.endswith('{"a":[{"b":1}]}')
    assert json.loads(repaired[repaired.index("{"):]) == {"a": [{"b": 1}]}


def test_repair_without_brace_is_noop():
    assert repair_truncated("nothing") == "nothing"


def test_scanner_matching_close():
    assert find_matching_close('{"a":"}"}', 0) == 8
    assert find_matching_close('{"a":{', 0) is None


def test_scanner_tracks_open_containers():
    scanner = scan_to_end('{"a":[1,{"b":"[')
    assert scanner.in_string
    assert scanner.stack == ["{", "[", "{"]
    assert scanner.missing_closers() == "}]}"
