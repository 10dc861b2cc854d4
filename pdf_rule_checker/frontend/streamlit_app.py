"""
PDF Rule Checker page - upload a PDF, enter up to three rules and review
the verdicts.

Run with: streamlit run pdf_rule_checker/frontend/streamlit_app.py
"""

import pandas as pd
import streamlit as st

from pdf_rule_checker.frontend.api_client import (
    MAX_RULES,
    RESULT_COLUMNS,
    check_pdf,
    collect_rules,
    results_to_rows,
    validate_pdf_upload,
)

# Page Configuration
st.set_page_config(page_title="PDF Rule Checker", layout="wide")

if "results" not in st.session_state:
    st.session_state.results = []


def _status_style(value: str) -> str:
    if value == "PASS":
        return "color: #047857; font-weight: 600"
    return "color: #b91c1c; font-weight: 600"


def display_results(results):
    """Render verdicts as a table."""
    st.subheader("3. Results")
    st.caption(f"{len(results)} rule{'s' if len(results) > 1 else ''} evaluated")

    df = pd.DataFrame(results_to_rows(results), columns=RESULT_COLUMNS)
    st.dataframe(
        df.style.map(_status_style, subset=["Status"]),
        use_container_width=True,
        hide_index=True,
    )


st.title("PDF Rule Checker (LLM)")
st.markdown(
    "Upload a PDF, define up to three natural-language rules, and let the LLM "
    "decide whether the document **passes** or **fails** each rule with "
    "evidence, reasoning, and a confidence score."
)

with st.form("check_form"):
    uploaded_file = st.file_uploader("1. Upload PDF", type=["pdf"])

    st.markdown("**2. Enter up to 3 rules**")
    st.caption(
        'Examples: "Document must mention a date.", "Document must list requirements."'
    )
    rule_inputs = [
        st.text_input(f"Rule {i + 1}", key=f"rule_{i}", placeholder=f"Rule {i + 1}")
        for i in range(MAX_RULES)
    ]

    submitted = st.form_submit_button("Check document")

if submitted:
    st.session_state.results = []
    rules = collect_rules(rule_inputs)
    upload_error = validate_pdf_upload(uploaded_file.type) if uploaded_file else None

    if uploaded_file is None:
        st.error("Please upload a PDF first.")
    elif upload_error:
        st.error(upload_error)
    elif not rules:
        st.error("Please enter at least one rule.")
    else:
        with st.spinner("Checking document..."):
            response = check_pdf(
                file_content=uploaded_file.getvalue(),
                filename=uploaded_file.name,
                rules=rules,
                content_type=uploaded_file.type,
            )
        if response["success"]:
            st.session_state.results = response["results"]
        else:
            st.error(response["error"] or "Something went wrong during the check.")

if st.session_state.results:
    display_results(st.session_state.results)
