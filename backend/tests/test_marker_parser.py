import pytest

from node.services.marker_parser import parse_marker_file, parse_marker_text


def test_one_symbol_per_line():
    result = parse_marker_text("BRCA1\ntp53\n\nAPOE\n")
    assert result.valid == ["BRCA1", "TP53", "APOE"]
    assert result.invalid == []
    assert not result.exceeded_limit


def test_separators_and_comments():
    result = parse_marker_text("# my genes\nBRCA1, TP53\tAPOE  FTO\n")
    assert result.valid == ["BRCA1", "TP53", "APOE", "FTO"]


def test_duplicates_dropped_case_insensitively():
    result = parse_marker_text("brca1\nBRCA1\nBrca1,TP53")
    assert result.valid == ["BRCA1", "TP53"]
    assert result.count == 2


def test_invalid_tokens_reported_with_line():
    result = parse_marker_text("BRCA1\nBR$CA2\nHLA-A\n")
    assert result.valid == ["BRCA1", "HLA-A"]
    assert len(result.invalid) == 1
    assert result.invalid[0].line_number == 2
    assert result.invalid[0].value == "BR$CA2"


def test_limit_stops_parsing():
    text = "\n".join(f"GENE{i}" for i in range(10))
    result = parse_marker_text(text, max_markers=3)
    assert result.valid == ["GENE0", "GENE1", "GENE2"]
    assert result.exceeded_limit
    assert "max 3" in result.invalid[-1].reason


def test_duplicate_beyond_limit_is_not_an_overflow():
    result = parse_marker_text("A\nB\nA\nB", max_markers=2)
    assert result.valid == ["A", "B"]
    assert not result.exceeded_limit


def test_bad_limit_rejected():
    with pytest.raises(ValueError):
        parse_marker_text("A", max_markers=0)


def test_parse_file(tmp_path):
    path = tmp_path / "genes.txt"
    path.write_text("BRCA1\nTP53\n", encoding="utf-8")
    assert parse_marker_file(path).valid == ["BRCA1", "TP53"]
