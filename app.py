# app.py: STAI (Ansiedad Estado-Rasgo) scoring form
# - Perfil (edad/sexo) selects the normative partition only
# - 40 ítems 0–3, A/E 1–20 · A/R 21–40, inverse items marked (*)
# - Any answer/profile change discards the computed result
# - Results: raw score, percentile, decatype + interpretation band; CSV export

import os, sys
from datetime import datetime
import logging

import pandas as pd
import streamlit as st

# ─────────────────────────────────────────────────────────────
# Project path
# ─────────────────────────────────────────────────────────────
ROOT = os.path.dirname(os.path.abspath(__file__))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

# ─────────────────────────────────────────────────────────────
# Internal modules
# ─────────────────────────────────────────────────────────────
from scoring.errors import MissingItemsError, NoMatchingBandError, NormTableError
from scoring.norms import get_norm_table
from scoring.stai import SUBSCALES, N_ITEMS, classify
from utils import session
from utils.config import configure_logging
from utils.export import answers_frame, build_row, to_csv_bytes
from utils.registry import load_survey

configure_logging()
logger = logging.getLogger("stai.app")

st.set_page_config(
    page_title="STAI — Ansiedad Estado-Rasgo",
    layout="wide",
    initial_sidebar_state="collapsed"
)

# ─────────────────────────────────────────────────────────────
# Static data (loaded once; table validated at load)
# ─────────────────────────────────────────────────────────────
META = load_survey("stai")
try:
    TABLE = get_norm_table("stai")
except NormTableError as e:
    logger.exception("Normative table failed validation")
    st.error(f"La tabla normativa es inválida: {e}")
    st.stop()

session.init_state(st.session_state)

PROFILE_LABELS = {k: dict(v) for k, v in META.get("profiles", {}).items()}


def _item_key(i: int) -> str:
    return f"item_{i}"


# ─────────────────────────────────────────────────────────────
# Callbacks (run before the rerun renders widgets)
# ─────────────────────────────────────────────────────────────
def on_item_change(i: int):
    session.set_answer(st.session_state, i, st.session_state.get(_item_key(i)))


def on_age_change():
    session.set_profile(st.session_state, age_group=st.session_state["age_group_choice"])


def on_gender_change():
    session.set_profile(st.session_state, gender=st.session_state["gender_choice"])


def on_reset_request():
    st.session_state.confirm_reset = True


def on_reset_cancel():
    st.session_state.confirm_reset = False


def on_reset_confirm():
    for i in range(1, N_ITEMS + 1):
        st.session_state.pop(_item_key(i), None)
    session.reset(st.session_state)


# ─────────────────────────────────────────────────────────────
# Header + profile
# ─────────────────────────────────────────────────────────────
st.title("🧠 " + META.get("title", "STAI"))

filled = session.filled_count(st.session_state)
st.progress(filled / N_ITEMS)
st.caption(f"Ítems respondidos: {filled} / {N_ITEMS}")

with st.container(border=True):
    st.subheader("Perfil del evaluado")
    c1, c2 = st.columns(2)
    age_opts = list(PROFILE_LABELS.get("age_group", {}))
    gender_opts = list(PROFILE_LABELS.get("gender", {}))
    with c1:
        st.radio(
            "Grupo de edad", age_opts,
            index=age_opts.index(st.session_state.age_group.value),
            format_func=lambda k: PROFILE_LABELS["age_group"].get(k, k),
            horizontal=True, key="age_group_choice", on_change=on_age_change,
        )
    with c2:
        st.radio(
            "Sexo", gender_opts,
            index=gender_opts.index(st.session_state.gender.value),
            format_func=lambda k: PROFILE_LABELS["gender"].get(k, k),
            horizontal=True, key="gender_choice", on_change=on_gender_change,
        )

# ─────────────────────────────────────────────────────────────
# Input grids (A/E · A/R)
# ─────────────────────────────────────────────────────────────
cols = st.columns(len(SUBSCALES))
for col, sub in zip(cols, SUBSCALES):
    sub_meta = META["subscales"][sub.scale.value]
    choice_labels = {v: label for label, v in sub_meta.get("choices", [])}
    with col:
        with st.container(border=True):
            st.subheader(sub_meta.get("title", sub.scale.value))
            st.caption(sub_meta.get("description", ""))
            for i in sub.items:
                mark = "*" if i in sub.reversed_items else ""
                st.radio(
                    f"Ítem {i}{mark}",
                    options=[0, 1, 2, 3],
                    index=None,
                    format_func=lambda v, labels=choice_labels: f"{v} · {labels.get(v, v)}",
                    horizontal=True,
                    key=_item_key(i),
                    on_change=on_item_change,
                    args=(i,),
                )

# ─────────────────────────────────────────────────────────────
# Actions
# ─────────────────────────────────────────────────────────────
c1, c2, _ = st.columns([1, 1, 3])
if st.session_state.confirm_reset:
    c1.warning("¿Seguro que quieres borrar todos los datos?")
    c1.button("Sí, borrar", key="reset_confirm", on_click=on_reset_confirm)
    c2.button("Cancelar", key="reset_cancel", on_click=on_reset_cancel)
else:
    c1.button("Borrar todo", key="reset", on_click=on_reset_request)
    if c2.button("Calcular resultados", key="compute", type="primary"):
        try:
            session.compute(st.session_state, table=TABLE)
        except MissingItemsError as e:
            st.warning("Por favor, complete los ítems faltantes: " + ", ".join(str(i) for i in e.missing))
        except NoMatchingBandError as e:
            logger.exception("Normative lookup failed")
            st.error(f"Error en la tabla normativa (no es un error de respuesta): {e}")

# ─────────────────────────────────────────────────────────────
# Results
# ─────────────────────────────────────────────────────────────
result = st.session_state.result
if result is not None:
    st.divider()
    st.subheader("Resultados")
    st.caption(
        f"Perfil: {PROFILE_LABELS['age_group'].get(result.age_group.value)} · "
        f"{PROFILE_LABELS['gender'].get(result.gender.value)}"
    )

    cols = st.columns(len(SUBSCALES))
    for col, sub in zip(cols, SUBSCALES):
        sub_meta = META["subscales"][sub.scale.value]
        norms = result.norms_for(sub.scale)
        band = classify(norms.decatype, META) or {}
        with col:
            with st.container(border=True):
                st.markdown(f"**{sub_meta.get('title', sub.scale.value)}**")
                m1, m2, m3 = st.columns(3)
                m1.metric("Puntuación directa", result.raw_for(sub.scale), delta=f"/ {len(sub.items) * 3}", delta_color="off")
                m2.metric("Centil", norms.percentile)
                m3.metric("Decatipo", norms.decatype)
                if band:
                    st.markdown(
                        f"<span style='color:{band.get('color', '#333')};font-weight:700'>"
                        f"{band.get('label', '')}</span> — {band.get('description', '')}",
                        unsafe_allow_html=True,
                    )

    with st.expander("Respuestas por ítem", expanded=False):
        st.table(answers_frame(st.session_state.answers, META))

    ts = datetime.now().isoformat(timespec="seconds")
    pid = st.text_input("ID del evaluado (opcional)", value="")
    df_out = pd.DataFrame([build_row(ts, pid.strip(), result, META)])
    st.download_button(
        "📥 Descargar CSV",
        data=to_csv_bytes(df_out),
        file_name=f"{ts.replace(':', '-')}_stai.csv",
        mime="text/csv",
    )

st.divider()
st.caption(f"**Referencias:** {META.get('reference', '')}")
st.caption("Adaptación digital para uso experimental y educativo.")
