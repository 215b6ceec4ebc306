# -*- coding: utf-8 -*-
"""
EAF Carbon Calculator – Streamlit front end.

- One SessionState per browser session, advanced through session.reduce()
  from widget callbacks (no scattered per-field state).
- Delegates all arithmetic to eafcalc.api.run_calculation (no duplicate math).
- Shows formula lines, totals, itemized emissions, pies, CSV and PDF downloads.

Run:
  streamlit run src/eafcalc/apps/streamlit_app.py
"""

from __future__ import annotations

import sys
from pathlib import Path

import streamlit as st

# Ensure package resolvable in local dev
SRC_DIR = Path(__file__).resolve().parents[2]
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from eafcalc.core.factors import FactorTableError, get_preset, list_presets
from eafcalc.core.viz import make_emission_pie, make_energy_pie
from eafcalc.reporting.pdf_report import ReportExportError, render_pdf_report
from eafcalc.session import (
    ClearFactorOverride,
    Reset,
    SelectPreset,
    SessionState,
    SetEnergyInput,
    SetFactorOverride,
    SetIntensity,
    SetParameter,
    evaluate,
    reduce,
)


st.set_page_config(
    page_title="EAF Carbon Calculator",
    layout="wide",
    initial_sidebar_state="expanded",
)

STATE_KEY = "eaf_state"

PARAM_WIDGETS = [
    # (field, label, step, format)
    ("furnace_capacity_t", "电炉工程容量（吨/炉）", 1.0, "%.2f"),
    ("cycle_minutes", "电炉冶炼周期（分钟/炉）", 1.0, "%.1f"),
    ("annual_days", "年生产天数", 1.0, "%.0f"),
    ("steel_to_metal_ratio", "钢铁料消耗（默认1.087）", 0.001, "%.3f"),
    ("scrap_fraction", "废钢比例", 0.01, "%.2f"),
]


# -----------------------------
# Helpers
# -----------------------------
def _state() -> SessionState:
    if STATE_KEY not in st.session_state:
        st.session_state[STATE_KEY] = SessionState()
    return st.session_state[STATE_KEY]


def _dispatch(event) -> None:
    st.session_state[STATE_KEY] = reduce(_state(), event)


def _on_param(field: str) -> None:
    _dispatch(SetParameter(field, st.session_state[f"param::{field}"]))


def _on_text(event_cls, key: str, widget_key: str) -> None:
    _dispatch(event_cls(key, st.session_state[widget_key]))


def _on_clear_override(material: str) -> None:
    st.session_state.pop(f"factor::{material}", None)
    _dispatch(ClearFactorOverride(material))


def _on_preset() -> None:
    _dispatch(SelectPreset(st.session_state["preset_select"]))


def _on_reset() -> None:
    for k in [k for k in st.session_state.keys() if "::" in str(k)]:
        del st.session_state[k]
    _dispatch(Reset())


def _fmt_value(v) -> str:
    return "" if v is None else f"{v:g}"


# -----------------------------
# Sidebar: preset + reset
# -----------------------------
state = _state()
presets = list_presets()
try:
    factors = get_preset(state.preset)
except FactorTableError as e:
    st.error(f"Factor preset unavailable: {e}")
    st.stop()

with st.sidebar:
    st.markdown("### Factor preset")
    st.selectbox(
        "Preset",
        presets,
        index=presets.index(factors.name) if factors.name in presets else 0,
        key="preset_select",
        on_change=_on_preset,
    )
    if factors.title != factors.name:
        st.caption(factors.title)
    if factors.description:
        st.caption(factors.description)
    show_overrides = st.toggle("Edit emission factors", value=False)
    st.button("Reset inputs", on_click=_on_reset)

st.title("EAF Carbon Calculator")

# -----------------------------
# Process parameters
# -----------------------------
with st.container(border=True):
    cols = st.columns(len(PARAM_WIDGETS))
    for col, (field, label, step, fmt) in zip(cols, PARAM_WIDGETS):
        col.number_input(
            label,
            value=float(getattr(state.params, field)),
            step=step,
            format=fmt,
            min_value=0.0,
            key=f"param::{field}",
            on_change=_on_param,
            args=(field,),
        )

# -----------------------------
# Material intensities (hot metal and scrap are derived, not entered)
# -----------------------------
with st.container(border=True):
    st.markdown("#### 物料消耗强度")
    mats = factors.input_materials()
    cols = st.columns(4)
    for k, mat in enumerate(mats):
        mf = factors.materials[mat]
        wkey = f"intensity::{mat}"
        cols[k % 4].text_input(
            f"{mat}（{mf.unit}）",
            value=_fmt_value(state.intensities.get(mat)),
            key=wkey,
            on_change=_on_text,
            args=(SetIntensity, mat, wkey),
        )

with st.container(border=True):
    st.markdown("#### 能源消耗（万吨钢基准）")
    cols = st.columns(4)
    for k, (carrier, ef) in enumerate(factors.energy.items()):
        wkey = f"energy::{carrier}"
        cols[k % 4].text_input(
            f"{carrier}（{ef.quantity_unit}）",
            value=_fmt_value(state.energy_inputs.get(carrier)),
            key=wkey,
            on_change=_on_text,
            args=(SetEnergyInput, carrier, wkey),
        )

if show_overrides:
    with st.container(border=True):
        st.markdown("#### 排放因子（本次会话）")
        cols = st.columns(4)
        for k, (mat, mf) in enumerate(factors.materials.items()):
            wkey = f"factor::{mat}"
            c = cols[k % 4]
            c.text_input(
                f"{mat} factor",
                value=_fmt_value(state.factor_overrides.get(mat, mf.emission_factor)),
                key=wkey,
                on_change=_on_text,
                args=(SetFactorOverride, mat, wkey),
            )
            if mat in state.factor_overrides:
                c.button("↺ default", key=f"clear::{mat}",
                         on_click=_on_clear_override, args=(mat,))

# -----------------------------
# Results
# -----------------------------
out = evaluate(_state())
a, t, e = out.annual, out.totals, out.energy
p = _state().params

with st.container(border=True):
    st.markdown(f"📌 日生产炉数 = 1440 / 冶炼周期 = **{a.daily_furnace_count:.2f}**")
    st.markdown(
        f"📌 日产量（吨） = 电炉容量 × 日生产炉数 = {p.furnace_capacity_t:g} × "
        f"{a.daily_furnace_count:.2f} = **{a.daily_output_t:.2f}**"
    )
    st.markdown(
        f"📌 年产量（万吨） = 日产量 × 生产天数 / 10000 = {a.daily_output_t:.2f} × "
        f"{p.annual_days:g} / 10000 = **{a.annual_output_10kt:.4f}**"
    )
    m1, m2, m3, m4 = st.columns(4)
    m1.metric("总碳排放量 (t CO₂)", f"{t.total_emissions_t:,.2f}")
    m2.metric("吨钢碳排放量 (kg CO₂/t)", f"{t.per_ton_kg_co2:,.3f}")
    m3.metric("总能耗 (tce)", f"{e.total_energy_tce:,.3f}")
    m4.metric("吨钢能耗", f"{e.per_ton_energy_tce:,.4f}")
    if t.per_ton_fallback:
        st.warning("Annual output is zero; the per-ton figure is not meaningful.")

    left, right = st.columns(2)
    with left:
        st.markdown("📋 各项排放明细")
        st.dataframe(out.emissions, use_container_width=True)
        per_ton_view = st.toggle("Per-ton view (kg CO₂/t)", value=False)
        rows = out.chart_rows(per_ton=per_ton_view)
        unit = "kg CO₂/t" if per_ton_view else "t CO₂"
        st.plotly_chart(make_emission_pie(rows, title="Top 5 emitters", unit=unit), use_container_width=True)
    with right:
        st.markdown("⚡ 能耗明细")
        st.dataframe(out.energy_table, use_container_width=True)
        if e.total_energy_tce:
            st.plotly_chart(make_energy_pie(e), use_container_width=True)

    d1, d2, d3 = st.columns(3)
    d1.download_button("Emissions (CSV)", data=out.emissions.to_csv().encode("utf-8"),
                       file_name="emissions.csv", mime="text/csv")
    d2.download_button("Energy (CSV)", data=out.energy_table.to_csv().encode("utf-8"),
                       file_name="energy.csv", mime="text/csv")
    try:
        pdf_bytes = render_pdf_report(out)
    except ReportExportError as err:
        d3.error(f"PDF export failed: {err}")
    else:
        d3.download_button("导出 PDF 报告", data=pdf_bytes, file_name="carbon-report.pdf",
                           mime="application/pdf")
