import gzip

import pytest

from brchpredict.trace.formats import BinaryTraceFormat, BranchRecord, SimpleTextFormat
from brchpredict.trace.parser import (
    BranchTrace,
    TraceParser,
    create_sample_trace,
    generate_branches,
)


SAMPLE_TEXT = """\
# comment line
0x400100 T 0x400200
0x400108 N

4096 1
0x400110 taken
garbage T
0x400118
"""


def test_text_format_parses_records_and_skips_noise(tmp_path):
    path = tmp_path / "sample.txt"
    path.write_text(SAMPLE_TEXT)

    records = list(TraceParser().parse_file(path))

    assert [(r.pc, r.taken) for r in records] == [
        (0x400100, True),
        (0x400108, False),
        (4096, True),
        (0x400110, True),
    ]
    assert records[0].target == 0x400200


def test_text_format_counts_malformed_lines(tmp_path):
    path = tmp_path / "sample.txt"
    path.write_text(SAMPLE_TEXT)

    text_format = SimpleTextFormat()
    with open(path) as f:
        list(text_format.parse(f))
    assert text_format.malformed_lines == 2


def test_binary_records(tmp_path):
    path = tmp_path / "trace.bin"
    binary = BinaryTraceFormat()
    with open(path, 'wb') as f:
        binary.write(f, BranchRecord(pc=0xDEADBEEF, taken=True))
        binary.write(f, BranchRecord(pc=0x10, taken=False))

    assert path.stat().st_size == 18
    records = list(TraceParser().parse_file(path))
    assert [(r.pc, r.taken) for r in records] == [(0xDEADBEEF, True), (0x10, False)]
    assert records[1].instruction_count == 2


def test_binary_ignores_truncated_tail(tmp_path):
    path = tmp_path / "trace.bin"
    path.write_bytes(BinaryTraceFormat.RECORD.pack(0x20, 1) + b"\x01\x02")
    records = list(TraceParser().parse_file(path))
    assert len(records) == 1


def test_gzip_text_trace(tmp_path):
    path = tmp_path / "trace.txt.gz"
    with gzip.open(path, 'wt') as f:
        f.write("0x1 T\n0x2 N\n")

    records = TraceParser().load_trace(path)
    assert len(records) == 2
    assert records[0].taken and not records[1].taken


def test_forced_format_overrides_suffix(tmp_path):
    path = tmp_path / "trace.dat"
    path.write_bytes(BinaryTraceFormat.RECORD.pack(0x30, 0))
    records = list(TraceParser('binary').parse_file(path))
    assert records[0].pc == 0x30


def test_skip_and_max_branches(tmp_path):
    path = create_sample_trace(tmp_path / "loop.txt", 100, 'loop')
    records = TraceParser().load_trace(path, max_branches=5, skip_branches=10)
    assert len(records) == 5
    # Eleventh branch of the loop is the first of its second iteration
    assert records[0].taken


def test_missing_trace_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        list(TraceParser().parse_file(tmp_path / "nope.txt"))


def test_unknown_format_rejected():
    with pytest.raises(ValueError):
        TraceParser('champsim')


def test_trace_info(tmp_path):
    path = create_sample_trace(tmp_path / "t.bin", 100, 'random', seed=1)
    info = TraceParser().get_trace_info(path)
    assert info.format == 'binary'
    assert info.compression is None
    assert info.estimated_branches == 100


def test_sample_trace_header_and_content(tmp_path):
    path = create_sample_trace(tmp_path / "alt.txt", 4, 'alternating')
    lines = path.read_text().splitlines()
    assert lines[0].startswith("#")
    assert [line.split()[1] for line in lines if not line.startswith("#")] == ['N', 'T', 'N', 'T']


def test_generated_patterns():
    loop = [r.taken for r in generate_branches(20, 'loop')]
    assert loop.count(False) == 2

    first = [r.taken for r in generate_branches(50, 'random', seed=7)]
    again = [r.taken for r in generate_branches(50, 'random', seed=7)]
    assert first == again

    with pytest.raises(ValueError):
        list(generate_branches(5, 'zigzag'))


def test_branch_trace_statistics():
    trace = BranchTrace(list(generate_branches(10, 'alternating')))
    stats = trace.get_statistics()
    assert stats['count'] == 10
    assert stats['taken'] == 5
    assert stats['unique_pcs'] == 1
    assert BranchTrace().get_statistics() == {'count': 0}
