import logging
import os
from pathlib import Path
import stat

import pytest

from graphconv.edges import Direction, as_edge_array, edge_tuples
from graphconv.errors import GraphIOError, MalformedRecordError, UsageError
from graphconv.formats import MarketFormat, SnapFormat, extension_map, format_for_path
from graphconv.io_utils import atomic_text_writer


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_market_read_shifts_to_zero_based(tmp_path) -> None:
    path = _write(
        tmp_path / "g.mtx",
        "%%MatrixMarket matrix coordinate pattern general\n"
        "% a comment\n"
        "4 4 3\n"
        "1 2\n"
        "2 3 1.5\n"
        "\n"
        "4 4\n",
    )
    raw = MarketFormat().read(path)

    assert edge_tuples(raw.edges) == [(0, 1), (1, 2), (3, 3)]
    assert raw.vertices == frozenset({0, 1, 2, 3})
    assert raw.self_edges == 1
    assert raw.declared_vertices == 4
    assert raw.declared_edges == 3


def test_market_read_warns_on_edge_count_mismatch(tmp_path, caplog) -> None:
    path = _write(tmp_path / "g.mtx", "3 3 5\n1 2\n")

    with caplog.at_level(logging.WARNING):
        raw = MarketFormat().read(path)

    assert raw.num_records == 1
    assert any("declares 5 edges" in r.getMessage() for r in caplog.records)


def test_market_read_rejects_missing_dimensions(tmp_path) -> None:
    path = _write(tmp_path / "g.mtx", "% only comments\n")

    with pytest.raises(GraphIOError) as exc:
        MarketFormat().read(path)

    assert "no dimensions line" in str(exc.value)
    assert "line 0" not in str(exc.value)


def test_market_read_rejects_bad_dimensions(tmp_path) -> None:
    path = _write(tmp_path / "g.mtx", "3 3\n1 2\n")

    with pytest.raises(MalformedRecordError) as exc:
        MarketFormat().read(path)

    assert exc.value.line_no == 1


def test_market_write(tmp_path) -> None:
    path = tmp_path / "out.mtx"
    MarketFormat().write(
        path,
        as_edge_array([(0, 1), (1, 2)]),
        num_vertices=3,
        direction=Direction.UNDIRECTED,
    )

    assert path.read_text(encoding="utf-8") == (
        "%%MatrixMarket matrix coordinate pattern symmetric\n"
        "3 3 2\n"
        "1 2\n"
        "2 3\n"
    )


def test_market_write_general_header_for_directed(tmp_path) -> None:
    path = tmp_path / "out.mtx"
    MarketFormat().write(path, as_edge_array([]), num_vertices=0)

    assert path.read_text(encoding="utf-8") == (
        "%%MatrixMarket matrix coordinate pattern general\n0 0 0\n"
    )


def test_snap_read_skips_comments(tmp_path) -> None:
    path = _write(
        tmp_path / "g.txt",
        "# Directed graph\n# FromNodeId\tToNodeId\n0\t1\n1 2\n\n-1 5\n",
    )
    raw = SnapFormat().read(path)

    assert edge_tuples(raw.edges) == [(0, 1), (1, 2), (-1, 5)]
    assert raw.vertices == frozenset({-1, 0, 1, 2, 5})
    assert raw.declared_edges is None


def test_snap_write_reads_back(tmp_path) -> None:
    path = tmp_path / "out.txt"
    edges = as_edge_array([(0, 1), (4, 2), (2, 2)])
    SnapFormat().write(path, edges, num_vertices=4)

    text = path.read_text(encoding="utf-8")
    assert text.splitlines()[1] == "# Nodes: 4 Edges: 3"
    assert edge_tuples(SnapFormat().read(path).edges) == [(0, 1), (4, 2), (2, 2)]


@pytest.mark.parametrize(
    ("text", "reason"),
    [
        ("0 1\n2\n", "expected 2 vertex ids"),
        ("0 1\n2 x\n", "destination 'x' is not an integer"),
        ("0 1\n1.5 2\n", "source '1.5' is not an integer"),
    ],
)
def test_snap_read_rejects_malformed_records(tmp_path, text, reason) -> None:
    path = _write(tmp_path / "bad.txt", text)

    with pytest.raises(MalformedRecordError) as exc:
        SnapFormat().read(path)

    message = str(exc.value)
    assert reason in message
    assert "line 2" in message
    assert str(path) in message
    assert exc.value.line_no == 2


def test_missing_input_raises_io_error(tmp_path) -> None:
    missing = tmp_path / "missing.txt"

    with pytest.raises(GraphIOError) as exc:
        SnapFormat().read(missing)

    assert "Input graph not found" in str(exc.value)
    assert str(missing) in str(exc.value)


def test_format_for_path_uses_extension(tmp_path, caplog) -> None:
    assert format_for_path(tmp_path / "a.mtx").name == "market"
    assert format_for_path(tmp_path / "a.MTX").name == "market"
    assert format_for_path(tmp_path / "a.txt").name == "snap"
    assert format_for_path(tmp_path / "a.txt", "market").name == "market"

    with caplog.at_level(logging.WARNING):
        fmt = format_for_path(tmp_path / "a.graph")
    assert fmt.name == "snap"
    assert any("Unrecognized file extension" in r.getMessage() for r in caplog.records)


def test_format_for_path_unknown_explicit_name(tmp_path) -> None:
    with pytest.raises(UsageError) as exc:
        format_for_path(tmp_path / "a.txt", "metis")

    assert "metis" in str(exc.value)
    assert "market" in str(exc.value)


def test_extension_map_lists_registered_formats() -> None:
    mapping = extension_map()

    assert mapping[".mtx"] == "market"
    assert mapping[".txt"] == "snap"


def test_atomic_writer_leaves_target_untouched_on_failure(tmp_path) -> None:
    target = _write(tmp_path / "out.txt", "previous\n")

    with pytest.raises(RuntimeError):
        with atomic_text_writer(target) as handle:
            handle.write("partial")
            raise RuntimeError("boom")

    assert target.read_text(encoding="utf-8") == "previous\n"
    assert sorted(p.name for p in tmp_path.iterdir()) == ["out.txt"]


def test_snap_read_rejects_out_of_range_id(tmp_path) -> None:
    path = _write(tmp_path / "big.txt", "0 1\n0 99999999999999999999\n")

    with pytest.raises(MalformedRecordError) as exc:
        SnapFormat().read(path)

    assert "destination '99999999999999999999' is out of range" in str(exc.value)
    assert exc.value.line_no == 2


def test_market_read_range_check_applies_after_shift(tmp_path) -> None:
    path = _write(tmp_path / "edge.mtx", "1 1 1\n1 9223372036854775808\n")

    raw = MarketFormat().read(path)

    assert edge_tuples(raw.edges) == [(0, 9223372036854775807)]

    _write(path, "1 1 1\n-9223372036854775808 1\n")
    with pytest.raises(MalformedRecordError, match="is out of range"):
        MarketFormat().read(path)


def test_snap_read_rejects_undecodable_bytes(tmp_path) -> None:
    path = tmp_path / "bad.txt"
    path.write_bytes(b"0 1\n\xff 2\n")

    with pytest.raises(MalformedRecordError) as exc:
        SnapFormat().read(path)

    assert "not valid utf-8 text" in str(exc.value)
    assert exc.value.line_no == 2


def test_atomic_writer_uses_umask_file_mode(tmp_path) -> None:
    umask = os.umask(0o022)
    try:
        target = tmp_path / "out.txt"
        with atomic_text_writer(target) as handle:
            handle.write("0 1\n")
    finally:
        os.umask(umask)

    assert stat.S_IMODE(target.stat().st_mode) == 0o644
