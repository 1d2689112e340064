# ----------------------------
# Read-only constants
# ----------------------------
MAGIC = b'HUF1'  # file signature

PSEUDO_EOF = 256      # end-of-content marker, outside the byte range
NOT_A_SYMBOL = -1     # symbol slot of internal tree nodes

COMPRESSED_SUFFIX = ".huf"
TEXT_ARTIFACT_SUFFIX = ".txt.huf"
UNCOMPRESSED_SUFFIX = "_unc.txt"
