# ui/dashboard.py
import sys, os
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
import streamlit as st
import streamlit.components.v1 as components
import pandas as pd
import config
from generation.errors import CVServiceError, InputValidationError, describe_error
from generation.llm_gemini import GeminiClient
from generation.session import CVSession, COMPLETED, LocalBackend
from export.pdf import export_filename
from export.template import render_preview_html
from parsers.inputs import load_document, load_photo, resolve_text_or_file, require_photo
from parsers.pdf import pdf_to_text
from schemas import EditOp, PaginationConfig
from ui.api_client import API_URL, ApiBackend

# -------------------- CONFIG --------------------
st.set_page_config(page_title="EIV CV Template Studio", page_icon="📄", layout="wide")
st.title("📄 EIV CV Template Studio")

st.markdown(
    "Upload a teacher's CV, the job description and a headshot. The AI extracts and optimizes the CV "
    "and fills in the standard EIV template, ready to review, edit and export as PDF."
)

# -------------------- SESSION STATE --------------------
if "api_url" not in st.session_state:
    st.session_state.api_url = API_URL


def _make_session() -> CVSession:
    # no API_URL: run the AI calls and the export in this process
    if st.session_state.api_url:
        backend = ApiBackend(st.session_state.api_url)
    else:
        backend = LocalBackend(GeminiClient())
    try:
        pagination = backend.pagination_config()
    except CVServiceError as e:
        st.warning(f"Using local page weights: {describe_error(e)}")
        pagination = PaginationConfig(**config.pagination_overrides())
    return CVSession(backend, pagination)


if "cv_session" not in st.session_state:
    st.session_state.cv_session = _make_session()

# Bumped whenever the result is replaced or reshaped so edit widgets are rebuilt
if "rev" not in st.session_state:
    st.session_state.rev = 0

session: CVSession = st.session_state.cv_session


def _edit(op: str, **kwargs):
    session.edit(EditOp(op=op, **kwargs))
    st.session_state.rev += 1


def _commit(op: str, key: str, **kwargs):
    """on_change callback: push a widget's value into the result."""
    session.edit(EditOp(op=op, text=st.session_state[key], **kwargs))
    if op == "update_point" and not st.session_state[key].strip():
        # the bullet was removed, indexes shifted
        st.session_state.rev += 1


def _upload_to_payload(upload, loader):
    if upload is None:
        return None
    return loader(upload.name, upload.getvalue(), upload.type)


# -------------------- TABS --------------------
tab1, tab2, tab3 = st.tabs(["📤 Input", "✏️ Result & Edit", "🖨️ Export"])

# ==================== TAB 1: Input ====================
with tab1:
    st.subheader("Candidate & Job")
    with st.expander("❓ How to use"):
        st.markdown(
            "1. Upload the candidate's CV as a PDF or image, or paste its text. Word files are not read: "
            "copy the text and paste it instead.\n"
            "2. Add the job description the same way.\n"
            "3. Upload a headshot. The AI crops it to a passport-style portrait; if that fails the original is used.\n"
            "4. Optionally add notes the AI should take into account, then generate.\n"
            "5. In **Result & Edit**, check every field, fix text inline (clear a bullet to delete it) "
            "or ask the AI to refine the whole CV.\n"
            "6. In **Export**, build the PDF. It has exactly the pages shown in the preview."
        )

    with st.form("input_form", clear_on_submit=False):
        col_cv, col_jd = st.columns(2)
        with col_cv:
            cv_upload = st.file_uploader("CV (PDF or image)", type=["pdf", "png", "jpg", "jpeg", "webp"])
            cv_text = st.text_area("...or paste the CV text", height=200)
        with col_jd:
            jd_upload = st.file_uploader("Job description (PDF or image)", type=["pdf", "png", "jpg", "jpeg", "webp"])
            jd_text = st.text_area("...or paste the JD text", height=200)

        photo_upload = st.file_uploader("Headshot photo (required)", type=["png", "jpg", "jpeg", "webp"])
        notes = st.text_area("Additional notes for the AI (optional)", height=80,
                             placeholder="e.g. Candidate also holds a CELTA obtained in 2023")
        submitted = st.form_submit_button("🚀 Generate standardized CV", disabled=session.busy)

    if cv_upload is not None and cv_upload.type == "application/pdf":
        with st.expander("🔎 Text found in the uploaded CV"):
            try:
                preview = pdf_to_text(cv_upload.getvalue(), max_chars=3000)
            except Exception as e:
                preview = ""
                st.caption(f"Could not read the PDF text layer: {e}")
            st.text(preview or "(no text layer, the AI will read the scanned pages)")

    if submitted:
        try:
            cv = resolve_text_or_file(cv_text, _upload_to_payload(cv_upload, load_document), "CV")
            jd = resolve_text_or_file(jd_text, _upload_to_payload(jd_upload, load_document), "Job description")
            photo = require_photo(_upload_to_payload(photo_upload, load_photo))
        except InputValidationError as e:
            st.warning(describe_error(e))
            st.stop()

        with st.spinner("⏳ Cropping the headshot and optimizing the CV..."):
            session.submit(cv, jd, photo, notes)

        if session.status == COMPLETED:
            st.session_state.rev += 1
            st.success("✅ CV standardized! Review it in the next tab before exporting.")
        else:
            st.error(f"❌ Processing failed: {session.error}")

    if photo_upload is not None:
        st.image(photo_upload.getvalue(), caption="Uploaded headshot", width=140)

# ==================== TAB 2: Result & Edit ====================
with tab2:
    result = session.result
    if result is None:
        st.info("No CV yet. Fill in the input tab first.")
    else:
        rev = st.session_state.rev
        if session.error:
            st.error(f"❌ {session.error} The previous version is kept below.")

        col_score, col_lists = st.columns([1, 3])
        with col_score:
            st.metric("EIV priority score", f"{result.match_score}%")
            if st.button("🔄 Start a new candidate"):
                session.reset()
                st.session_state.rev += 1
                st.rerun()
        with col_lists:
            longest = max(len(result.key_changes), len(result.suggested_keywords),
                          len(result.missing_skills), len(result.strengths), 1)
            pad = lambda items: items + [""] * (longest - len(items))
            st.dataframe(pd.DataFrame({
                "Key changes": pad(result.key_changes),
                "Suggested keywords": pad(result.suggested_keywords),
                "Missing skills": pad(result.missing_skills),
                "Strengths": pad(result.strengths),
            }), hide_index=True, use_container_width=True)

        # --- Refine ---
        with st.form("refine_form", clear_on_submit=True):
            instruction = st.text_input("Ask the AI to revise the CV",
                                        placeholder="e.g. Shorten the oldest two positions")
            refine_clicked = st.form_submit_button("✨ Refine", disabled=session.busy)
        if refine_clicked:
            with st.spinner("Refining..."):
                session.refine(instruction)
            st.session_state.rev += 1
            st.rerun()

        edit_col, preview_col = st.columns([1, 1])

        # --- Inline editing ---
        with edit_col:
            st.markdown("### 👤 Sidebar")
            for field in ("name", "nationality", "gender"):
                key = f"side_{field}_{rev}"
                st.text_input(field.title(), value=getattr(result.sidebar_info, field), key=key,
                              on_change=_commit, args=("update_sidebar", key), kwargs={"field": field})

            st.markdown("### 🎓 Education")
            for i, edu in enumerate(result.education):
                c1, c2 = st.columns([6, 1])
                key = f"edu_{i}_{rev}"
                c1.text_input(f"Education {i + 1}", value=edu, key=key, label_visibility="collapsed",
                              on_change=_commit, args=("update_education", key), kwargs={"index": i})
                c2.button("🗑️", key=f"edu_del_{i}_{rev}", on_click=_edit,
                          args=("delete_education",), kwargs={"index": i})
            st.button("➕ Add education line", key=f"edu_add_{rev}", on_click=_edit, args=("add_education",))

            st.markdown("### 💼 Experience")
            for i, exp in enumerate(result.experience):
                with st.expander(f"{exp.title}, {exp.company}", expanded=False):
                    for field in ("title", "company", "period"):
                        key = f"exp_{i}_{field}_{rev}"
                        st.text_input(field.title(), value=getattr(exp, field), key=key,
                                      on_change=_commit, args=("update_experience", key),
                                      kwargs={"index": i, "field": field})
                    for j, point in enumerate(exp.points):
                        key = f"pt_{i}_{j}_{rev}"
                        st.text_area(f"Bullet {j + 1}", value=point, key=key, height=68,
                                     help="Clear the text to delete this bullet",
                                     on_change=_commit, args=("update_point", key),
                                     kwargs={"index": i, "point_index": j})
                    c1, c2 = st.columns(2)
                    c1.button("➕ Add bullet", key=f"pt_add_{i}_{rev}", on_click=_edit,
                              args=("add_point",), kwargs={"index": i})
                    c2.button("🗑️ Delete position", key=f"exp_del_{i}_{rev}", on_click=_edit,
                              args=("delete_experience",), kwargs={"index": i})
            st.button("➕ Add position", key=f"exp_add_{rev}", on_click=_edit, args=("add_experience",))

        # --- Paginated preview ---
        with preview_col:
            view = st.radio("View", ["Template", "Plain text"], horizontal=True)
            if view == "Template":
                pages = session.pages()
                st.caption(f"{len(pages)} page(s)")
                for page in pages:
                    components.html(render_preview_html(result, page, len(pages)), height=900, scrolling=True)
            else:
                st.text(result.optimized_cv)

# ==================== TAB 3: Export ====================
with tab3:
    st.subheader("Export PDF")
    result = session.result
    if result is None:
        st.info("Nothing to export yet.")
    else:
        st.markdown(f"**{len(session.pages())} A4 page(s)** for *{result.sidebar_info.name}*.")
        if st.button("🖨️ Build PDF"):
            with st.spinner("Rendering pages..."):
                try:
                    st.session_state.pdf_bytes = session.export()
                    st.session_state.pdf_rev = st.session_state.rev
                except Exception as e:
                    st.error(f"❌ Could not build the PDF: {describe_error(e)}")
                    st.stop()
        if st.session_state.get("pdf_bytes") and st.session_state.get("pdf_rev") == st.session_state.rev:
            st.download_button("⬇️ Download PDF", data=st.session_state.pdf_bytes,
                               file_name=export_filename(result), mime="application/pdf")

    if result is not None and result.photo_url is None:
        st.caption("No headshot attached to this CV.")
