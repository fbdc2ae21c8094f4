"""
CouncilScout: Home / Lookup (entry point)
Find when and where a city council meets, by city and state or by ZIP code.
"""
import html

import pandas as pd
import streamlit as st
import sys, os
sys.path.insert(0, os.path.dirname(__file__))
from api_client import lookup

US_STATES = [
    "Alabama", "Alaska", "Arizona", "Arkansas", "California", "Colorado", "Connecticut",
    "Delaware", "District of Columbia", "Florida", "Georgia", "Hawaii", "Idaho", "Illinois",
    "Indiana", "Iowa", "Kansas", "Kentucky", "Louisiana", "Maine", "Maryland", "Massachusetts",
    "Michigan", "Minnesota", "Mississippi", "Missouri", "Montana", "Nebraska", "Nevada",
    "New Hampshire", "New Jersey", "New Mexico", "New York", "North Carolina", "North Dakota",
    "Ohio", "Oklahoma", "Oregon", "Pennsylvania", "Rhode Island", "South Carolina",
    "South Dakota", "Tennessee", "Texas", "Utah", "Vermont", "Virginia", "Washington",
    "West Virginia", "Wisconsin", "Wyoming",
]

st.set_page_config(
    page_title="CouncilScout · Find council meetings",
    page_icon="🏛️",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
  [data-testid="stSidebar"] { background: #0d1117; }
  [data-testid="stSidebar"] * { color: #c9d1d9 !important; }

  .hero {
    background: linear-gradient(135deg, #0d1117 0%, #1a2332 50%, #162032 100%);
    border: 1px solid #30363d; border-radius:12px;
    padding:24px 28px; margin-bottom:20px;
    display:flex; align-items:center; gap:16px;
  }
  .hero-title { font-size:1.8rem; font-weight:700; color:#e6edf3; margin:0; }
  .hero-sub   { color:#8b949e; font-size:0.9rem; margin:4px 0 0; }

  .info-card {
    background:#161b22; border:1px solid #30363d; border-radius:10px;
    padding:0.9rem 1rem; margin-bottom:10px;
  }
  .info-lbl { font-size:0.78rem; color:#8b949e; text-transform:uppercase; letter-spacing:.04em; }
  .info-val { font-size:1rem; color:#e6edf3; margin-top:4px; }
  .next-mtg { border-left:3px solid #3fb950; }
  .caveat   { border-left:3px solid #ffa657; background:#1f1200; }
</style>
""", unsafe_allow_html=True)

# ── Header ────────────────────────────────────────────────────────────────────
st.markdown("""
<div class="hero">
  <span style="font-size:2.4rem">🏛️</span>
  <div>
    <div class="hero-title">CouncilScout</div>
    <div class="hero-sub">When and where does your city council meet? Search by city or ZIP code.</div>
  </div>
</div>
""", unsafe_allow_html=True)


def _card(label: str, value, css: str = ""):
    if not value:
        return
    st.markdown(
        f'<div class="info-card {css}"><div class="info-lbl">{html.escape(label)}</div>'
        f'<div class="info-val">{html.escape(str(value))}</div></div>',
        unsafe_allow_html=True,
    )


# ── Lookup form ───────────────────────────────────────────────────────────────
mode = st.radio("Search by", ["City and state", "ZIP code"], horizontal=True)

with st.form("lookup"):
    if mode == "City and state":
        c1, c2 = st.columns([3, 2])
        city = c1.text_input("City", placeholder="Springfield")
        state = c2.selectbox("State", US_STATES, index=US_STATES.index("Illinois"))
        zip_code = ""
    else:
        zip_code = st.text_input("ZIP code", max_chars=5, placeholder="62701")
        city, state = "", ""
    submitted = st.form_submit_button("🔎 Find council meetings", type="primary", use_container_width=True)

if submitted:
    if mode == "City and state" and not city.strip():
        st.warning("Please enter a city.")
    elif mode == "ZIP code" and not (zip_code.isdigit() and len(zip_code) == 5):
        st.warning("Please enter a 5-digit ZIP code.")
    else:
        with st.spinner("Searching, reading the city website and its documents (this can take a minute)…"):
            st.session_state["last_lookup"] = lookup(city=city.strip(), state=state, zip_code=zip_code.strip())

result = st.session_state.get("last_lookup")
if not result:
    st.info("📭 Enter a city and state or a ZIP code to get started.")
    st.stop()

info = result.get("councilInfo") or {}
st.divider()
st.subheader(f"📍 {result.get('city')}, {result.get('state')}")
if result.get("fact"):
    st.caption(result["fact"])

if result.get("fallback"):
    st.markdown(
        '<div class="info-card caveat"><div class="info-val">⚠️ No live search results were available, '
        "so this answer comes from general knowledge. Please verify with the city directly.</div></div>",
        unsafe_allow_html=True,
    )
if info.get("error"):
    st.warning(info["error"])

left, right = st.columns([3, 2])

with left:
    _card("Next meeting", info.get("nextMeeting"), "next-mtg")
    _card("Schedule", info.get("meetingSchedule"))
    _card("Location", info.get("location"))
    _card("Public participation", info.get("publicParticipation"))
    _card("Live streaming", info.get("liveStreaming"))
    _card("Contact", info.get("contactInfo"))
    if info.get("summary"):
        st.markdown("**Summary**")
        st.write(info["summary"])
    elif info.get("description"):
        st.write(info["description"])

with right:
    st.markdown("**Links**")
    if info.get("website"):
        st.markdown(f"🌐 [City website]({info['website']})")
    if info.get("meetingsPage"):
        st.markdown(f"🗓️ [Meetings page]({info['meetingsPage']})")
    for doc in info.get("documents") or []:
        st.markdown(f"📄 {doc}")
    if info.get("meetingTypes"):
        st.markdown("**Meeting types:** " + ", ".join(info["meetingTypes"]))
    if info.get("scrapedUrls"):
        with st.expander(f"Pages analysed ({info.get('totalPagesAnalyzed', 0)})"):
            for url in info["scrapedUrls"]:
                st.markdown(f"- {url}")

# ── Documents ─────────────────────────────────────────────────────────────────
comprehensive = result.get("comprehensiveInfo") or {}
doc_info = comprehensive.get("documentInfo") or {}
pdf_analysis = comprehensive.get("pdfAnalysis") or {}

if doc_info or pdf_analysis:
    st.divider()
    st.subheader("📂 Meeting documents")
    if doc_info.get("summary"):
        st.write(doc_info["summary"])
    d1, d2 = st.columns(2)
    with d1:
        for label, key in [("Agendas", "agendaLinks"), ("Calendars", "calendarLinks"), ("Streaming", "streamingLinks")]:
            links = doc_info.get(key) or []
            if links:
                st.markdown(f"**{label}**")
                for link in links[:8]:
                    st.markdown(f"- {link}")
    with d2:
        if doc_info.get("upcomingMeetings"):
            st.markdown("**Upcoming meetings mentioned**")
            for item in doc_info["upcomingMeetings"]:
                st.markdown(f"- {item}")
        if doc_info.get("accessibilityInfo"):
            st.markdown("**Public access**")
            st.write(doc_info["accessibilityInfo"])

    analysed = pdf_analysis.get("analyzedPDFs") or []
    if analysed:
        st.markdown(f"**PDF documents** ({len(analysed)} of {pdf_analysis.get('totalPDFs', len(analysed))} analysed)")
        st.dataframe(
            pd.DataFrame(analysed)[["filename", "meetingDate", "meetingType", "documentType", "priority", "url"]],
            use_container_width=True,
            hide_index=True,
        )
        if pdf_analysis.get("summary"):
            st.caption(pdf_analysis["summary"])

site_analysis = comprehensive.get("siteAnalysis") or {}
if site_analysis.get("likelyMeetingPaths"):
    with st.expander("Site structure"):
        st.write(
            f"Calendar: {'yes' if site_analysis.get('hasCalendar') else 'no'} · "
            f"PDFs: {'yes' if site_analysis.get('hasPdfs') else 'no'}"
        )
        for path in site_analysis["likelyMeetingPaths"]:
            st.markdown(f"- `{path}`")

# ── Search results ────────────────────────────────────────────────────────────
hits = result.get("searchResults") or []
if hits:
    with st.expander(f"🔎 Search results ({result.get('searchResultsCount', len(hits))})"):
        st.dataframe(pd.DataFrame(hits), use_container_width=True, hide_index=True)

st.divider()
st.caption("**Tip** → open *Agenda* in the sidebar to summarise a specific agenda page.")
