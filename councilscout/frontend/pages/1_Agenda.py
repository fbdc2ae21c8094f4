"""Page 1: Agenda, summarise a single council agenda page by URL."""
import streamlit as st
import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))
from api_client import scrape_agenda

st.set_page_config(page_title="Agenda · CouncilScout", page_icon="📄", layout="wide")
st.title("📄 Agenda Summary")
st.caption("Paste the link to a council agenda web page and get a plain-language summary.")

url = st.text_input("Agenda page URL", placeholder="https://www.example.gov/council/agenda")

if st.button("Summarise", type="primary"):
    if not url.strip():
        st.warning("Please enter a URL.")
    else:
        with st.spinner("Reading the agenda page…"):
            res = scrape_agenda(url.strip())
        if res and res.get("success"):
            agenda = res.get("agenda") or {}
            st.subheader(agenda.get("meetingTitle") or "Meeting agenda")
            c1, c2, c3 = st.columns(3)
            c1.metric("Date", agenda.get("meetingDate") or "Unknown")
            c2.metric("Time", agenda.get("meetingTime") or "Unknown")
            c3.metric("Location", agenda.get("location") or "Unknown")

            if agenda.get("summary"):
                st.write(agenda["summary"])
            if agenda.get("items"):
                st.markdown("**Agenda items**")
                for number, item in enumerate(agenda["items"], start=1):
                    st.markdown(f"{number}. {item}")
            if agenda.get("publicComment"):
                st.info(f"🗣️ Public comment: {agenda['publicComment']}")
            st.caption(f"{res.get('contentLength', 0):,} characters read from {res.get('url')}")
