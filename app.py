"""
GasDoc - Gas Billing Document Pipeline
Upload billing PDFs, inspect the classification and extract the output record.
"""

import hashlib
import json
import logging
import os

import pandas as pd
import streamlit as st

from gasdoc.errors import GasDocError
from gasdoc.extractor import MockExtractor
from gasdoc.pipeline import DocumentPipeline
from gasdoc.registry import list_types
from gasdoc.schemas import DocumentType

logging.basicConfig(
    level=os.getenv("GASDOC_LOG_LEVEL", "INFO"),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("gasdoc.app")

# Page config
st.set_page_config(
    page_title="GasDoc",
    page_icon="⛽",
    layout="wide",
    initial_sidebar_state="collapsed",
)

st.markdown("""
<style>
    .stApp { background: #0f1117; }
    .main .block-container { max-width: 1400px; padding: 1rem 2rem; }
    h1, h2, h3 { color: #fafafa !important; }
    p, span, label { color: #a1a1aa !important; }

    .app-header {
        padding: 0.5rem 0 1rem 0;
        border-bottom: 1px solid #27272a;
        margin-bottom: 1.5rem;
    }
    .app-title { font-size: 1.5rem; font-weight: 700; color: #fafafa; }
    .app-subtitle { font-size: 0.85rem; color: #71717a; }

    .type-badge {
        display: inline-block;
        padding: 0.25rem 0.6rem;
        border-radius: 4px;
        font-size: 0.75rem;
        font-weight: 500;
        background: #1e3a5f;
        color: #60a5fa;
    }
    .type-unknown { background: #3f1d1d; color: #f87171; }

    .confidence-bar {
        height: 4px;
        background: #27272a;
        border-radius: 2px;
        overflow: hidden;
        margin-top: 0.25rem;
    }
    .confidence-fill {
        height: 100%;
        background: linear-gradient(90deg, #3b82f6, #8b5cf6);
    }

    #MainMenu, footer, header { visibility: hidden; }
</style>
""", unsafe_allow_html=True)


TYPE_LABELS = {
    DocumentType.SUPPLY_MULTI_PLATFORM: "Multi-platform supply",
    DocumentType.SINGLE_PLATFORM_STATEMENT: "Statement of Account",
    DocumentType.MULTI_VENDOR_PLATFORM_INVOICE: "Multi-vendor invoice",
    DocumentType.FIELD_PURCHASE_INVOICE: "Field purchase",
    DocumentType.JDA_PLATFORM_SUMMARY: "JDA summary",
    DocumentType.YETAGUN_SUPPLY_SUMMARY: "Yetagun summary",
    DocumentType.ZAWTIKA_SELLER_SPLIT: "Zawtika seller split",
    DocumentType.UNKNOWN: "Unknown",
}


@st.cache_resource
def get_pipeline(use_mock: bool) -> DocumentPipeline:
    if use_mock:
        return DocumentPipeline(extractor=MockExtractor())
    return DocumentPipeline()


def classify_uploads(pipeline: DocumentPipeline, uploads) -> list[dict]:
    """Read and classify every uploaded file."""
    docs = []
    for upload in uploads:
        content = upload.getvalue()
        classification = pipeline.classify(content)
        logger.info(
            "%s classified as %s (%d)",
            upload.name, classification.document_type.value, classification.confidence,
        )
        docs.append({"name": upload.name, "content": content, "classification": classification})
    return docs


def uploads_key(uploads, use_mock: bool) -> tuple:
    """Identity of an upload set: file names plus content digests."""
    return (use_mock,) + tuple(
        (upload.name, hashlib.sha256(upload.getvalue()).hexdigest()) for upload in uploads
    )


def sync_uploads(state, pipeline: DocumentPipeline, uploads, use_mock: bool) -> list[dict] | None:
    """
    Classified documents for the current upload set.

    Reclassifies whenever the set changes (names, contents or extractor mode)
    and clears everything when the uploader is empty. `state` is
    st.session_state or any mapping.
    """
    if not uploads:
        state["docs"] = None
        state["uploads_key"] = None
        state["extraction"] = None
        return None

    key = uploads_key(uploads, use_mock)
    if state.get("uploads_key") != key:
        state["docs"] = None
        state["uploads_key"] = None
        state["extraction"] = None
        state["docs"] = classify_uploads(pipeline, uploads)
        state["uploads_key"] = key
    return state["docs"]


def rows_frame(output: dict) -> pd.DataFrame | None:
    """The first list of row objects in an output record, as a table."""
    for value in output.values():
        if isinstance(value, list) and value and isinstance(value[0], dict):
            return pd.DataFrame(value)
    return None


def render_detail(pipeline: DocumentPipeline, doc: dict, idx: int):
    clf = doc["classification"]
    badge_class = "type-badge type-unknown" if clf.document_type == DocumentType.UNKNOWN else "type-badge"

    st.markdown("#### 🔍 Classification")
    st.markdown(f"""
    <div style="display: flex; align-items: center; gap: 1rem;">
        <span class="{badge_class}">{TYPE_LABELS[clf.document_type]}</span>
        <span style="color: #71717a; font-size: 0.85rem;">
            Confidence: <strong style="color: #fafafa;">{clf.confidence}</strong>
        </span>
    </div>
    <div class="confidence-bar"><div class="confidence-fill" style="width: {clf.confidence}%;"></div></div>
    """, unsafe_allow_html=True)

    st.caption(clf.reasoning)

    with st.expander("Detected features", expanded=False):
        features = clf.detected_features
        st.write("Platforms:", ", ".join(features.platforms) or "none")
        st.write("Language:", features.language.value)
        st.dataframe(
            pd.DataFrame(
                [{"Flag": name, "Present": present} for name, present in features.structural_flags.items()]
            ),
            use_container_width=True,
            hide_index=True,
        )
        st.write("Key terms:", ", ".join(features.key_terms_found) or "none")

    st.markdown("##### 🧠 Extraction")

    types = list_types()
    default = types.index(clf.document_type) if clf.document_type in types else 0
    document_type = st.selectbox(
        "Document type",
        options=types,
        index=default,
        format_func=lambda t: TYPE_LABELS[t],
        help="Defaults to the classified type. JDA, Yetagun and Zawtika reports must be chosen here.",
    )

    if st.button("🚀 Extract", use_container_width=True):
        with st.spinner(f"Extracting {document_type.value}..."):
            try:
                result = pipeline.run(doc["content"], document_type)
                st.session_state.extraction = {"idx": idx, "result": result}
            except (GasDocError, ValueError) as e:
                logger.error("Extraction failed for %s: %s", doc["name"], e)
                st.error(f"Error: {e}")

    extraction = st.session_state.get("extraction")
    if extraction and extraction.get("idx") == idx:
        result = extraction["result"]
        record = result.extraction
        if record.rejected_rows:
            st.warning(f"⚠️ {len(record.rejected_rows)} row(s) rejected")
            for reason in record.rejected_rows:
                st.caption(reason)
        else:
            st.success(f"✅ Extraction confidence {record.overall_confidence:g}")

        frame = rows_frame(result.output)
        if frame is not None:
            st.dataframe(frame, use_container_width=True, hide_index=True)
        st.json(result.output)

        st.download_button(
            "📥 Download Output JSON",
            json.dumps(result.output, indent=2, ensure_ascii=False),
            f"{doc['name'].rsplit('.', 1)[0]}_{result.document_type.value}.json",
            "application/json",
            use_container_width=True,
        )


def main():
    st.markdown("""
    <div class="app-header">
        <div class="app-title">⛽ GasDoc</div>
        <div class="app-subtitle">Gas Billing Classification & Extraction</div>
    </div>
    """, unsafe_allow_html=True)

    col1, col2 = st.columns([3, 1])
    with col1:
        uploads = st.file_uploader(
            "Billing documents",
            type=["pdf", "txt"],
            accept_multiple_files=True,
        )
    with col2:
        has_key = bool(os.getenv("OPENAI_API_KEY"))
        use_mock = st.toggle(
            "Mock extractor",
            value=not has_key,
            disabled=not has_key,
            help="Canned extraction payloads. Set OPENAI_API_KEY in .env to use OpenAI.",
        )

    pipeline = get_pipeline(use_mock)

    try:
        docs = sync_uploads(st.session_state, pipeline, uploads, use_mock)
    except (GasDocError, ValueError) as e:
        logger.error("Classification failed: %s", e)
        st.error(f"Error: {e}")
        return

    if docs is None:
        st.markdown("""
        <div style="text-align: center; padding: 4rem 2rem; color: #71717a;">
            <div style="font-size: 3rem; margin-bottom: 1rem;">📁</div>
            <div style="font-size: 1.1rem;">No documents uploaded</div>
        </div>
        """, unsafe_allow_html=True)
        return

    left_col, right_col = st.columns([1.2, 1])

    with left_col:
        st.markdown("#### 📋 Documents")
        table = pd.DataFrame([
            {
                "File": doc["name"],
                "Type": TYPE_LABELS[doc["classification"].document_type],
                "Confidence": doc["classification"].confidence,
                "Platforms": ", ".join(doc["classification"].detected_features.platforms),
            }
            for doc in docs
        ])
        st.dataframe(table, use_container_width=True, hide_index=True)

        st.download_button(
            "📊 Classifications CSV",
            table.to_csv(index=False),
            "gasdoc_classifications.csv",
            "text/csv",
            use_container_width=True,
        )

        selected = st.selectbox("Select document →", options=range(len(docs)), format_func=lambda i: docs[i]["name"])

    with right_col:
        render_detail(pipeline, docs[selected], selected)


if __name__ == "__main__":
    main()
