"""
Streamlit UI for the PDF Rule Checker.
"""
