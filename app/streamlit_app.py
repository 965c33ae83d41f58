from __future__ import annotations

import logging

import streamlit as st

from cipherscope.cipher.bitblob import blob_to_text, text_to_blob
from cipherscope.cipher.builder import StreamCipher
from cipherscope.cipher.registry import CipherRegistry, build_cipher
from cipherscope.cipher.validator import hex_byte_length, parse_blob, parse_nonce
from cipherscope.config import load_settings
from cipherscope.errors import CipherError
from cipherscope.evaluation.avalanche import compute_sac
from cipherscope.evaluation.report import EvaluationReport
from cipherscope.evaluation.roundtrip import run_roundtrip_tests
from cipherscope.trace import TraceCollector
from cipherscope.utils.repro import make_run_dir, write_json, write_text


st.set_page_config(page_title="cipherscope", layout="wide")

settings = load_settings()
logging.basicConfig(level=settings.log_level, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")

st.title("cipherscope: Step-by-step Symmetric Ciphers")
st.caption("Research-only lab: run DES, IDEA, Twofish and ChaCha20 on your own text and watch every round.")

registry = CipherRegistry()
specs = dict(zip(registry.list(), registry.specs()))

# ---------- Sidebar: engine details ----------
st.sidebar.header("Engine")
algo = st.sidebar.selectbox("Algorithm", list(specs), format_func=lambda n: specs[n].name)
spec = specs[algo]
st.sidebar.write(f"**Architecture:** {spec.architecture}")
st.sidebar.write(f"**Block:** {spec.block_size_bits} bits  \n**Key:** {spec.key_size_bits} bits  \n**Rounds:** {spec.rounds:g}")
if spec.reference:
    st.sidebar.caption(spec.reference)
st.sidebar.write(f"Passphrases are hashed with `{settings.key_hash}`.")

# ---------- Main: run form ----------
st.subheader("1) Input")

with st.form("run_form"):
    process = st.radio("Process", ["encrypt", "decrypt"], horizontal=True)
    input_text = st.text_area(
        "Input",
        help="Plain text to encrypt, or the hexadecimal ciphertext to decrypt.",
    )
    col_a, col_b = st.columns(2)
    with col_a:
        key = st.text_input("Key (leave blank for a random one)", type="password")
    with col_b:
        nonce_text = st.text_input(
            "Nonce (hex, ChaCha20 only)",
            disabled=spec.kind != "stream",
            help="Generated on encrypt when blank; required to decrypt.",
        )
    length_text = st.text_input(
        "Ciphertext length in bytes (ChaCha20 decrypt, optional; defaults to the hex digit count / 2)",
        disabled=spec.kind != "stream",
    )
    submitted = st.form_submit_button("Run algorithm")

if submitted:
    cipher = build_cipher(algo, registry)
    collector = TraceCollector(width=4 if algo == "idea" else 8)
    try:
        nonce = parse_nonce(nonce_text) if isinstance(cipher, StreamCipher) else None
        kwargs = {}
        if isinstance(cipher, StreamCipher):
            if length_text.strip():
                kwargs["length"] = int(parse_blob(length_text, 10))
            elif process == "decrypt" and hex_byte_length(input_text) is not None:
                kwargs["length"] = hex_byte_length(input_text)
        if process == "encrypt":
            result = cipher.encrypt(text_to_blob(input_text), key or None, nonce, trace=collector, **kwargs)
            output = result.hex()
        else:
            result = cipher.decrypt(parse_blob(input_text), key or None, nonce, trace=collector, **kwargs)
            output = blob_to_text(result.output)
        st.session_state["run"] = {
            "process": process,
            "algorithm": spec.name,
            "input": input_text,
            "key": result.key,
            "nonce": None if result.nonce is None else format(result.nonce, "024x"),
            "length": result.length,
            "output": output,
            "process_log": collector.process_log(),
        }
    except (CipherError, ValueError) as e:
        st.session_state.pop("run", None)
        st.error(f"{spec.name} {process} failed: {e}")

run = st.session_state.get("run")
if run:
    st.subheader("2) Result")
    in_kind, out_kind = ("Plaintext", "Hexadecimal") if run["process"] == "encrypt" else ("Hexadecimal", "Plaintext")
    st.write(f"**Input** ({in_kind}):")
    st.code(run["input"] or "(empty)", language="text")
    st.write("**Key:**")
    st.code(run["key"], language="text")
    if run["nonce"] is not None:
        st.write("**Nonce** (keep it to decrypt):")
        st.code(run["nonce"], language="text")
        st.caption(f"{run['length']} byte(s) processed.")
    st.write(f"**Output** ({out_kind}):")
    st.code(run["output"] or "(empty)", language="text")
    st.download_button(
        "Download output",
        data=run["output"],
        file_name=f"{run['algorithm'].lower()}_{run['process']}ed.txt",
        mime="text/plain",
    )

    st.subheader("3) Process")
    if not run["process_log"]:
        st.info("No intermediate values (empty input).")
    for line in run["process_log"]:
        st.text(line)

# ---------- Evaluation ----------
st.subheader("4) Evaluate")

with st.expander("Roundtrip + SAC analysis", expanded=False):
    num_vectors = st.slider("Roundtrip vectors", min_value=10, max_value=1000,
                            value=min(settings.roundtrip_vectors, 1000), step=10)
    sac_trials = st.slider("SAC trials per input bit (block engines)", min_value=10, max_value=500, value=50, step=10)
    seed = st.number_input("Seed (reproducibility)", min_value=0, max_value=2**31 - 1,
                           value=int(settings.global_seed), step=1)

    if st.button("Run evaluation", key="btn_eval"):
        report = EvaluationReport()
        with st.spinner(f"Running {num_vectors} roundtrip vectors..."):
            report.roundtrip_results.append(run_roundtrip_tests(algo, num_vectors=num_vectors, seed=int(seed), registry=registry))
        if spec.kind == "block":
            progress = st.progress(0.0)
            for i, input_type in enumerate(["plaintext", "key"]):
                report.sac_results.append(compute_sac(
                    algo,
                    input_type=input_type,
                    trials=sac_trials,
                    seed=int(seed),
                    registry=registry,
                    progress_callback=lambda cur, total, i=i: progress.progress((i + cur / total) / 2),
                ))
            progress.progress(1.0)
        st.session_state["eval_report"] = report

    report = st.session_state.get("eval_report")
    if report:
        for rt in report.roundtrip_results:
            if rt.is_perfect:
                st.success(rt.summary())
            else:
                st.error(rt.summary())
                st.json([f.__dict__ for f in rt.failures])
        for sac in report.sac_results:
            st.write(sac.summary())
            st.line_chart(sac.per_input_bit_mean)

        if st.button("Save as reproducible run", key="btn_save"):
            paths = make_run_dir(settings.runs_dir, f"eval_{algo}")
            write_json(paths.report_json, report.to_dict())
            write_text(paths.summary_txt, report.to_summary())
            st.success(f"Saved to: {paths.run_dir}")
