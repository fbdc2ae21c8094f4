"""Page 2: Settings, backend health and search-provider diagnostics."""
import requests
import streamlit as st
import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))
from api_client import API_BASE, test_search

st.set_page_config(page_title="Settings · CouncilScout", page_icon="⚙️", layout="wide")
st.title("⚙️ System Status")

col1, col2 = st.columns(2)

with col1:
    st.subheader("🩺 Health Check")
    if st.button("Check API Health", use_container_width=True):
        root = API_BASE.rsplit("/api", 1)[0]
        try:
            res = requests.get(f"{root}/ready", timeout=10).json()
        except requests.exceptions.RequestException:
            res = None
        if res and "status" in res:
            st.success(f"✅ API: {res['status']}")
            st.json(res)
        else:
            st.error("❌ API unreachable")

with col2:
    st.subheader("🔎 Search Provider")
    if st.button("Test Google Search", use_container_width=True):
        res = test_search()
        if res and res.get("success"):
            st.success(f"✅ Search working ({res.get('resultCount', 0)} result)")
        elif res:
            st.error(f"❌ {res.get('error', 'Search test failed')}")
            st.write(f"API key set: {res.get('hasApiKey')} · CX id set: {res.get('hasCxId')}")

st.subheader("ℹ️ Version")
st.write("**CouncilScout v1.0**")
st.write("LangGraph + FastAPI + Streamlit")
st.write(f"Backend: `{API_BASE}`")
