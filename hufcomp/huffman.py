import heapq
import io
import logging
import os
import tempfile
import time
from typing import BinaryIO, Dict, Iterator, List, Optional, Tuple, Union

from . import freqmap
from .bitstream import BitReader, BitWriter
from .config import (COMPRESSED_SUFFIX, NOT_A_SYMBOL, PSEUDO_EOF,
                     TEXT_ARTIFACT_SUFFIX, UNCOMPRESSED_SUFFIX)
from .errors import EncodingError, MalformedArtifactError, NamingConventionError

log = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


# ---------------------------------
# Tree node
# ---------------------------------
class Node:
    __slots__ = ("symbol", "weight", "zero", "one")

    def __init__(self, symbol: int, weight: int,
                 zero: Optional['Node'] = None, one: Optional['Node'] = None):
        # symbol: NOT_A_SYMBOL for internal nodes, 0..256 for leaves
        self.symbol = symbol
        self.weight = weight
        self.zero = zero
        self.one = one

    @property
    def is_leaf(self) -> bool:
        return self.symbol != NOT_A_SYMBOL

    def __repr__(self):
        if self.is_leaf:
            return f"Node(symbol={self.symbol}, weight={self.weight})"
        return f"Node(internal, weight={self.weight})"


def iter_nodes(root: Node) -> Iterator[Node]:
    # preorder, explicit stack
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        if not node.is_leaf:
            stack.append(node.one)
            stack.append(node.zero)


def tree_weights_ok(root: Node) -> bool:
    return all(n.is_leaf or n.weight == n.zero.weight + n.one.weight
               for n in iter_nodes(root))


def _label(symbol: int) -> str:
    if symbol == PSEUDO_EOF:
        return "EOF"
    ch = chr(symbol)
    return ch if ch.isprintable() and ch not in '"\\' else f"0x{symbol:02x}"


# --------------------------------
# Convert Tree to Graphviz format
# --------------------------------
def tree_to_dot(root: Node, max_depth: int = 3) -> str:
    lines = ["digraph G {", "node [shape=circle, style=filled, color=lightblue];"]
    ids: Dict[int, str] = {}

    def name(n: Node) -> str:
        if id(n) not in ids:
            ids[id(n)] = f"n{len(ids)}"
            text = f"{n.weight}\\n{_label(n.symbol)}" if n.is_leaf else str(n.weight)
            lines.append(f'{ids[id(n)]} [label="{text}"];')
        return ids[id(n)]

    stack = [(root, 0)]
    name(root)
    while stack:
        n, depth = stack.pop()
        if n.is_leaf or depth > max_depth:
            continue
        for bit, child in (("0", n.zero), ("1", n.one)):
            lines.append(f'{name(n)} -> {name(child)} [label="{bit}"];')
            stack.append((child, depth + 1))
    lines.append("}")
    return "\n".join(lines)


# ------------------------------------
# 1) Read source and count symbols
# ------------------------------------
def read_file_bytes(path: PathLike) -> bytes:
    with open(path, 'rb') as f:
        return f.read()


def write_file_replace(dst: PathLike, data: bytes) -> None:
    """Write `data` to a temp file beside `dst`, then rename it over `dst`.

    On failure `dst` keeps its previous contents and the temp file is removed.
    """
    tmp = tempfile.NamedTemporaryFile(
        dir=os.path.dirname(os.fspath(dst)) or ".", prefix=".huf-", delete=False)
    try:
        with tmp:
            tmp.write(data)
        os.replace(tmp.name, dst)
    except BaseException:
        os.unlink(tmp.name)
        raise


def build_frequency_map(source: Union[PathLike, str, bytes], is_file: bool,
                        freq: Dict[int, int]) -> None:
    """Count the symbols of `source` into `freq`, then add PSEUDO_EOF.

    With is_file the source is a path whose bytes are counted; otherwise it
    is in-memory text (str, taken as UTF-8) or bytes.
    """
    if is_file:
        data = read_file_bytes(source)
    elif isinstance(source, str):
        data = source.encode("utf-8")
    else:
        data = bytes(source)
    freqmap.add_counts(freq, data)
    freq[PSEUDO_EOF] = 1


# -------------------------------------
# 2) Make heap and build Huffman tree
# -------------------------------------
def heap_from_freq(freq: Dict[int, int]) -> List[Tuple[int, int, Node]]:
    # (weight, seq, node); leaves take seq in ascending symbol order
    h = [(freq[sym], seq, Node(sym, freq[sym]))
         for seq, sym in enumerate(sorted(freq))]
    heapq.heapify(h)
    return h


def build_tree(freq: Dict[int, int]) -> Node:
    if not freq:
        raise ValueError("Cannot build a tree from an empty frequency map")
    h = heap_from_freq(freq)
    seq = len(h)
    while len(h) > 1:
        _, _, a = heapq.heappop(h)
        _, _, b = heapq.heappop(h)
        p = Node(NOT_A_SYMBOL, a.weight + b.weight, zero=a, one=b)
        heapq.heappush(h, (p.weight, seq, p))
        seq += 1
    return h[0][2]


# ---------------------------
# 3) Walk tree -> code map
# ---------------------------
def build_code_table(root: Node) -> Dict[int, str]:
    codes: Dict[int, str] = {}
    stack = [(root, "")]
    while stack:
        node, path = stack.pop()
        if node.is_leaf:
            # a lone root leaf keeps the empty code
            codes[node.symbol] = path
            continue
        stack.append((node.one, path + "1"))
        stack.append((node.zero, path + "0"))
    return codes


# ----------------------------------------------
# 4) Encode bytes using codes -> big bitstring
# ----------------------------------------------
def encode(data: bytes, codes: Dict[int, str],
           output: Optional[BitWriter] = None) -> Tuple[str, int]:
    """Concatenate the code of every byte plus the PSEUDO_EOF code.

    Returns (bits, bit_count). When `output` is given the bits are also
    written to it one at a time.
    """
    pieces = []
    for b in data:
        try:
            pieces.append(codes[b])
        except KeyError:
            raise EncodingError(f"No code for symbol {b}") from None
    try:
        pieces.append(codes[PSEUDO_EOF])
    except KeyError:
        raise EncodingError("No code for the end-of-content marker") from None
    bits = "".join(pieces)
    if output is not None:
        output.write_bits(bits)
    return bits, len(bits)


# -------------------------
# 5) Decode bits via tree
# -------------------------
def decode(reader: BitReader, root: Node,
           output: Optional[BinaryIO] = None) -> bytes:
    out = bytearray()
    if root.is_leaf:
        # only PSEUDO_EOF in the table: nothing to read
        if root.symbol != PSEUDO_EOF:
            raise MalformedArtifactError("Tree has no end-of-content leaf")
    else:
        node = root
        while True:
            if reader.eof():
                raise MalformedArtifactError(
                    f"Payload ended after {reader.position} bits, "
                    "before the end-of-content marker")
            bit = reader.read_bit()
            if node.is_leaf:
                out.append(node.symbol)
                node = root
            node = node.one if bit else node.zero
            if node.symbol == PSEUDO_EOF:
                break
    if output is not None:
        output.write(out)
    return bytes(out)


def decode_bits(bits: str, root: Node) -> bytes:
    return decode(BitReader.from_bits(bits), root)


# -------------------------
# 6) Compressor
# -------------------------
def compress_file(src: PathLike) -> Tuple[str, Dict[str, object]]:
    """Compress `src` into `src + ".huf"`.

    Returns (bits, stats): the encoded bit-string and a dict of sizes and
    per-stage timings.
    """
    dst = os.fspath(src) + COMPRESSED_SUFFIX

    t0 = time.perf_counter()
    raw = read_file_bytes(src)
    t_read = time.perf_counter()

    # counts and encoding both come from this one read of the file
    freq: Dict[int, int] = {}
    build_frequency_map(raw, False, freq)
    root = build_tree(freq)
    t_tree = time.perf_counter()

    codes = build_code_table(root)
    t_codes = time.perf_counter()

    writer = BitWriter()
    bits, nbits = encode(raw, codes, writer)
    artifact = io.BytesIO()
    header_bytes = freqmap.write_freq_map(artifact, freq)
    artifact.write(writer.getvalue())
    t_pack = time.perf_counter()

    write_file_replace(dst, artifact.getvalue())
    t_write = time.perf_counter()

    original_bytes = len(raw)
    compressed_bytes = header_bytes + (nbits + 7) // 8
    if original_bytes > 0:
        compression_ratio = compressed_bytes / original_bytes
        space_saved_percent = ((original_bytes - compressed_bytes) / original_bytes) * 100.0
    else:
        compression_ratio = None
        space_saved_percent = None

    log.debug("compressed %s -> %s (%d -> %d bytes, %d symbols)",
              src, dst, original_bytes, compressed_bytes, len(freq) - 1)
    stats = {
        "input": os.fspath(src),
        "output": dst,
        "original_bytes": original_bytes,
        "compressed_bytes": compressed_bytes,
        "header_bytes": header_bytes,
        "payload_bits": nbits,
        "unique_symbols": len(freq) - 1,
        "pad_count": writer.pad_count,
        "compression_ratio": compression_ratio,
        "space_saved_percent": space_saved_percent,
        "time_read": t_read - t0,
        "time_tree_build": t_tree - t_read,
        "time_codes": t_codes - t_tree,
        "time_pack": t_pack - t_codes,
        "time_write": t_write - t_pack,
        "time_total": t_write - t0,
    }
    return bits, stats


def compress(path: PathLike) -> str:
    bits, _ = compress_file(path)
    return bits


# -------------------------
# 7) Decompressor
# -------------------------
def output_name_for(path: PathLike) -> str:
    name = os.fspath(path)
    if not name.endswith(TEXT_ARTIFACT_SUFFIX):
        raise NamingConventionError(
            f"{name!r} does not end with {TEXT_ARTIFACT_SUFFIX!r}")
    return name[:-len(TEXT_ARTIFACT_SUFFIX)] + UNCOMPRESSED_SUFFIX


def decompress_file(src: PathLike) -> Tuple[bytes, Dict[str, object]]:
    """Decompress `Z.txt.huf` into `Z_unc.txt`.

    The output file is only created once the whole payload has decoded.
    """
    dst = output_name_for(src)

    t0 = time.perf_counter()
    raw = read_file_bytes(src)
    t_read = time.perf_counter()

    freq, cursor = freqmap.deserialize(raw)
    root = build_tree(freq)
    t_tree = time.perf_counter()

    buf = io.BytesIO()
    reader = BitReader(raw[cursor:])
    decoded = decode(reader, root, buf)
    t_decode = time.perf_counter()

    write_file_replace(dst, buf.getvalue())
    t_write = time.perf_counter()

    log.debug("decompressed %s -> %s (%d bytes, %d payload bits read)",
              src, dst, len(decoded), reader.position)
    stats = {
        "input_huf": os.fspath(src),
        "output": dst,
        "compressed_size": len(raw),
        "restored_size": len(decoded),
        "header_bytes": cursor,
        "payload_bits": reader.position,
        "time_read": t_read - t0,
        "time_tree": t_tree - t_read,
        "time_decode": t_decode - t_tree,
        "time_write": t_write - t_decode,
        "time_total": t_write - t0,
    }
    return decoded, stats


def decompress(path: PathLike) -> bytes:
    data, _ = decompress_file(path)
    return data
