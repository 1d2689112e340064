import pytest

from hufcomp import freqmap, huffman
from hufcomp.config import PSEUDO_EOF
from hufcomp.errors import MalformedArtifactError, NamingConventionError
from hufcomp.huffman import (compress, compress_file, decompress,
                             decompress_file, output_name_for)


@pytest.fixture
def report(tmp_path):
    p = tmp_path / "report.txt"
    p.write_bytes(b"aaabbc")
    return p


def test_compress_writes_huf(report):
    bits = compress(report)
    assert bits == "0001010110111"
    art = report.parent / "report.txt.huf"
    raw = art.read_bytes()
    freq, cursor = freqmap.deserialize(raw)
    assert freq == {ord('a'): 3, ord('b'): 2, ord('c'): 1, PSEUDO_EOF: 1}
    assert raw[cursor:] == bytes([0b00010101, 0b10111000])


def test_aaabbc_roundtrip(report):
    compress(report)
    data = decompress(report.parent / "report.txt.huf")
    assert data == b"aaabbc"
    assert (report.parent / "report_unc.txt").read_bytes() == b"aaabbc"


def test_empty_file_roundtrip(tmp_path):
    p = tmp_path / "empty.txt"
    p.write_bytes(b"")
    assert compress(p) == ""
    art = tmp_path / "empty.txt.huf"
    assert art.stat().st_size == freqmap.header_size({PSEUDO_EOF: 1})
    assert decompress(art) == b""
    assert (tmp_path / "empty_unc.txt").read_bytes() == b""


def test_binary_roundtrip(tmp_path):
    p = tmp_path / "blob.txt"
    data = bytes(range(256)) * 3 + b"\r\n\x00\x1a"
    p.write_bytes(data)
    compress(p)
    assert decompress(tmp_path / "blob.txt.huf") == data


def test_compress_is_idempotent(report):
    compress(report)
    first = (report.parent / "report.txt.huf").read_bytes()
    compress(report)
    assert (report.parent / "report.txt.huf").read_bytes() == first


def test_compress_stats(report):
    bits, stats = compress_file(report)
    assert stats["original_bytes"] == 6
    assert stats["payload_bits"] == len(bits) == 13
    assert stats["unique_symbols"] == 3
    assert stats["compressed_bytes"] == (report.parent / "report.txt.huf").stat().st_size
    assert stats["pad_count"] == 3


def test_compress_empty_stats(tmp_path):
    p = tmp_path / "e.txt"
    p.write_bytes(b"")
    _, stats = compress_file(p)
    assert stats["compression_ratio"] is None
    assert stats["unique_symbols"] == 0


def test_decompress_stats(report):
    compress(report)
    _, stats = decompress_file(report.parent / "report.txt.huf")
    assert stats["restored_size"] == 6
    assert stats["payload_bits"] == 13
    assert stats["output"].endswith("report_unc.txt")


def test_compress_missing_source(tmp_path):
    with pytest.raises(FileNotFoundError):
        compress(tmp_path / "missing.txt")
    assert not (tmp_path / "missing.txt.huf").exists()


# -------------------------
# Naming convention
# -------------------------
def test_output_name():
    assert output_name_for("report.txt.huf") == "report_unc.txt"
    assert output_name_for("a/b.c.txt.huf") == "a/b.c_unc.txt"


@pytest.mark.parametrize("name", ["report.huf", "report.txt", "report.txt.huf.bak", "txt.huf"])
def test_output_name_rejects(name):
    with pytest.raises(NamingConventionError):
        output_name_for(name)


def test_decompress_wrong_suffix_touches_nothing(tmp_path, report):
    compress(report)
    odd = tmp_path / "report.huf"
    (tmp_path / "report.txt.huf").rename(odd)
    before = sorted(p.name for p in tmp_path.iterdir())
    with pytest.raises(NamingConventionError):
        decompress(odd)
    assert sorted(p.name for p in tmp_path.iterdir()) == before


# -------------------------
# Malformed artifacts
# -------------------------
def test_decompress_truncated_payload(tmp_path, report):
    compress(report)
    art = tmp_path / "report.txt.huf"
    art.write_bytes(art.read_bytes()[:-1])
    with pytest.raises(MalformedArtifactError):
        decompress(art)
    assert not (tmp_path / "report_unc.txt").exists()


def test_decompress_bad_magic(tmp_path):
    art = tmp_path / "x.txt.huf"
    art.write_bytes(b"NOPE\x00\x00")
    with pytest.raises(MalformedArtifactError):
        decompress(art)
    assert not (tmp_path / "x_unc.txt").exists()


def test_decompress_truncated_header(tmp_path, report):
    compress(report)
    art = tmp_path / "report.txt.huf"
    art.write_bytes(art.read_bytes()[:9])
    with pytest.raises(MalformedArtifactError):
        decompress(art)


def test_malformed_is_value_error(tmp_path):
    art = tmp_path / "x.txt.huf"
    art.write_bytes(b"")
    with pytest.raises(ValueError):
        decompress(art)


# -------------------------
# Failed writes
# -------------------------
def _fail_replace(src, dst):
    raise OSError("disk full")


def test_failed_compress_keeps_previous_artifact(tmp_path, report, monkeypatch):
    compress(report)
    art = tmp_path / "report.txt.huf"
    first = art.read_bytes()
    report.write_bytes(b"something else entirely")
    monkeypatch.setattr(huffman.os, "replace", _fail_replace)
    with pytest.raises(OSError):
        compress(report)
    assert art.read_bytes() == first
    assert sorted(p.name for p in tmp_path.iterdir()) == ["report.txt", "report.txt.huf"]


def test_failed_decompress_leaves_no_output(tmp_path, report, monkeypatch):
    compress(report)
    monkeypatch.setattr(huffman.os, "replace", _fail_replace)
    with pytest.raises(OSError):
        decompress(tmp_path / "report.txt.huf")
    assert sorted(p.name for p in tmp_path.iterdir()) == ["report.txt", "report.txt.huf"]


def test_write_file_replace_overwrites(tmp_path):
    dst = tmp_path / "out.bin"
    dst.write_bytes(b"old")
    huffman.write_file_replace(dst, b"new")
    assert dst.read_bytes() == b"new"
    assert [p.name for p in tmp_path.iterdir()] == ["out.bin"]
