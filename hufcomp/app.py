# ----------------
# Importations
# ----------------
import os
import tempfile

import pandas as pd
import streamlit as st

from hufcomp.config import COMPRESSED_SUFFIX, TEXT_ARTIFACT_SUFFIX
from hufcomp.freqmap import read_freq_map
from hufcomp.huffman import build_tree, compress_file, decompress_file, tree_to_dot

# ------------------------
#   Streamlit App
# ------------------------
st.set_page_config(page_title="Huffman File Compressor", layout="centered")
st.title("Huffman File Compressor 🗃")


def timings_table(timings):
    return pd.DataFrame(list(timings.items()), columns=["Step", "Time (s)"])


def show_tree(artifact_path):
    # rebuild the tree from the artifact header for display only
    with open(artifact_path, 'rb') as f:
        freq = read_freq_map(f)
    st.graphviz_chart(tree_to_dot(build_tree(freq)))


# ---------------------
#    Instructions
# ---------------------
st.subheader("1) Instructions")
st.markdown(f"""
*How to Use This File Compression Tool*

1. Upload a file using the button below.
2. **Compress** writes `<name>{COMPRESSED_SUFFIX}`.
3. **Decompress** needs a `<name>{TEXT_ARTIFACT_SUFFIX}` file and writes `<name>_unc.txt`.
4. Click *Process File* to start.
5. Download your file after processing.
""")
st.divider()

# -------------------
# file Uploading
# -------------------
st.subheader("2) File Uploader")
uploaded_file = st.file_uploader("Upload a file", type=None)
if uploaded_file:
    default = 1 if uploaded_file.name.endswith(TEXT_ARTIFACT_SUFFIX) else 0
    action = st.radio("**Choose Action**", ["Compress", "Decompress"], index=default)

    if st.button("Process File"):
        st.divider()
        # keep the upload's own name so the naming convention applies
        with tempfile.TemporaryDirectory() as workdir:
            src_path = os.path.join(workdir, os.path.basename(uploaded_file.name))
            with open(src_path, 'wb') as tmp:
                tmp.write(uploaded_file.getvalue())
            st.success(f"Uploaded file: {uploaded_file.name} ({os.path.getsize(src_path)} bytes)")

            out_path = None
            try:
                with st.spinner(f"{action}ing file..."):
                    # ------------------
                    #  File Compression
                    # ------------------
                    if action == "Compress":
                        _, stats = compress_file(src_path)
                        out_path = stats["output"]

                        st.subheader("3) Compression Summary")
                        col1, col2, col3 = st.columns(3)
                        space_saved = stats["space_saved_percent"]
                        ratio = stats["compression_ratio"]
                        col1.metric("**Original Size**", f"{stats['original_bytes']} bytes")
                        col2.metric("**Compressed Size**", f"{stats['compressed_bytes']} bytes")
                        col3.metric("Space Saved", "N/A" if space_saved is None else f"{space_saved:.2f}%")
                        if ratio is None:
                            st.markdown("*Compression ratio: N/A (empty file)*")
                        else:
                            st.markdown(f"*Compression ratio: {ratio:.4f}*")
                        st.markdown(f"*Unique symbols: {stats['unique_symbols']}*")
                        st.markdown(f"*Payload bits: {stats['payload_bits']} (padding {stats['pad_count']})*")

                        st.divider()
                        st.subheader("4) Processing Timings")
                        st.table(timings_table({
                            "Read File": stats["time_read"],
                            "Build Tree": stats["time_tree_build"],
                            "Make Codes": stats["time_codes"],
                            "Encode & Pack": stats["time_pack"],
                            "Write File": stats["time_write"],
                            "Total": stats["time_total"],
                        }))
                        st.divider()
                        st.subheader("5) Huffman Tree")
                        show_tree(out_path)

                    # ----------------------
                    # File Decompression
                    # ----------------------
                    else:
                        _, stats = decompress_file(src_path)
                        out_path = stats["output"]

                        st.subheader("3) Decompression Report")
                        col1, col2, col3 = st.columns(3)
                        col1.metric("Compressed file size", f"{stats['compressed_size']} bytes")
                        col2.metric("Restored file size", f"{stats['restored_size']} bytes")
                        col3.metric("Payload bits", f"{stats['payload_bits']}")
                        st.divider()
                        st.subheader("4) Processing Timings")
                        st.table(timings_table({
                            "Read File": stats["time_read"],
                            "Rebuild Tree": stats["time_tree"],
                            "Decode": stats["time_decode"],
                            "Write File": stats["time_write"],
                            "Total": stats["time_total"],
                        }))
            except ValueError as e:
                # bad artifact or wrong file name
                st.error(f"Error: {e}")

            # ------------------------
            #   File Downloading
            # ------------------------
            if out_path is not None and os.path.exists(out_path):
                with open(out_path, 'rb') as f:
                    st.divider()
                    st.subheader("Download Button")
                    st.info(f"Download your {action.lower()}ed file here.")
                    st.download_button(
                        label=os.path.basename(out_path),
                        data=f.read(),
                        file_name=os.path.basename(out_path),
                        mime="application/octet-stream",
                    )
            else:
                st.info("No output file was produced. Check the message above.")
