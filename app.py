"""
================================================================================
Heart-Explorer: Interactive Patient Comparison Dashboard
================================================================================

Enter a hypothetical patient in the sidebar, load a heart-disease CSV, and see
where the patient falls relative to the population. Click an Age bar or a
chest-pain slice to filter the scatter plot; click the chart background (or
"Clear filters") to remove the filter.

Structure:
    SECTION 1: Imports & Page Configuration
    SECTION 2: Data Loading
    SECTION 3: Event Callbacks
    SECTION 4: Sidebar (Patient Form, Upload, Commit)
    SECTION 5: Summary Metrics
    SECTION 6: Charts

To run:
    streamlit run app.py
================================================================================
"""

# =============================================================================
# SECTION 1: IMPORTS & PAGE CONFIGURATION
# =============================================================================

from functools import partial

import streamlit as st

from heart_explorer import config
from heart_explorer.charts import render_histogram, render_pie, render_scatter
from heart_explorer.engine import Dashboard
from heart_explorer.errors import IngestionFailure
from heart_explorer.ingest import read_records
from heart_explorer.log import get_logger, setup_logging
from heart_explorer.metrics import extent
from heart_explorer.router import InteractionRouter
from heart_explorer.surfaces import PlotlySurface, make_surface
from heart_explorer.views import AGE, CHOLESTEROL, PIE, SCATTER

# Page configuration - must be first Streamlit command
st.set_page_config(
    page_title=config.PAGE_TITLE,
    page_icon=config.PAGE_ICON,
    layout="wide"
)

setup_logging(config.LOG_LEVEL, config.LOG_FILE)
logger = get_logger("heart_explorer.app")


# =============================================================================
# SECTION 2: DATA LOADING
# =============================================================================

@st.cache_data
def load_default_records(path):
    """Read the start-up CSV once per path; failures are not cached."""
    return read_records(path)


def _notify(level, message):
    st.session_state.notices.append((level, message))


# -----------------------------------------------------------------------------
# Session State Initialization
# -----------------------------------------------------------------------------
# One dashboard per browser session; it survives reruns

if 'notices' not in st.session_state:
    st.session_state.notices = []

if 'dashboard' not in st.session_state:
    st.session_state.dashboard = Dashboard()
    st.session_state.router = InteractionRouter(st.session_state.dashboard, notify=_notify)
    st.session_state.surfaces = {}

    data_path = config.resolve_data_path()
    if data_path:
        try:
            st.session_state.router.on_records(load_default_records(data_path))
        except IngestionFailure as e:
            logger.warning(f"Auto-load failed: {e.message}")
            _notify("warning", f"Auto-load failed: {e.message}")

dashboard = st.session_state.dashboard
router = st.session_state.router
surfaces = st.session_state.surfaces


# =============================================================================
# SECTION 3: EVENT CALLBACKS
# =============================================================================
# Callbacks run before the script reruns, so the page always draws the
# views refreshed by the router.

def _on_field(field_name):
    router.on_field_input(field_name, st.session_state[f"in_{field_name}"])


def _on_upload():
    uploaded = st.session_state.get("csv_upload")
    if uploaded is not None:
        router.on_upload(uploaded, name=uploaded.name)


def _on_chart_select(chart, widget_key):
    surface = surfaces.get(chart)
    if surface is None:
        return
    event = st.session_state[widget_key]
    keys = surface.selected_keys(event.selection)
    router.on_selection(chart, surface.events_for(keys))


def show_chart(surface, widget_key):
    """Display a rendered surface; interactive charts report clicks back to the router."""
    surfaces[surface.chart] = surface
    fig = surface.figure()
    if fig is None:
        st.info("No data to display")
        return

    on_select = partial(_on_chart_select, surface.chart, widget_key) if surface.interactive() else "ignore"
    if isinstance(surface, PlotlySurface):
        st.plotly_chart(fig, use_container_width=True, key=widget_key,
                        on_select=on_select, selection_mode="points")
    else:
        st.altair_chart(fig, use_container_width=True, key=widget_key, on_select=on_select,
                        selection_mode=[surface.SELECTION])


# =============================================================================
# SECTION 4: SIDEBAR
# =============================================================================

patient = dashboard.store.patient

with st.sidebar:
    st.subheader("🧑 Hypothetical Patient")

    for field_name, label in [("Age", "Age (years)"), ("RestingBP", "Resting BP (mmHg)"),
                              ("Cholesterol", "Cholesterol (mg/dL)"), ("MaxHR", "Max HR (bpm)")]:
        st.number_input(
            label,
            value=float(patient[field_name]),
            step=1.0,
            format="%.0f",
            key=f"in_{field_name}",
            on_change=_on_field,
            args=(field_name,)
        )

    st.selectbox(
        "Sex", config.ENUM_VALUES["Sex"],
        index=config.ENUM_VALUES["Sex"].index(patient["Sex"]),
        key="in_Sex", on_change=_on_field, args=("Sex",)
    )

    pain_options = list(config.CHEST_PAIN_TYPES)
    if patient["ChestPainType"] not in pain_options:
        pain_options.append(patient["ChestPainType"])
    st.selectbox(
        "Chest Pain Type", pain_options,
        index=pain_options.index(patient["ChestPainType"]),
        key="in_ChestPainType", on_change=_on_field, args=("ChestPainType",)
    )

    st.selectbox(
        "Exercise Angina", config.ENUM_VALUES["ExerciseAngina"],
        index=config.ENUM_VALUES["ExerciseAngina"].index(patient["ExerciseAngina"]),
        key="in_ExerciseAngina", on_change=_on_field, args=("ExerciseAngina",)
    )

    st.selectbox(
        "Heart Disease", (0, 1),
        index=int(patient["HeartDisease"]),
        format_func=lambda v: "Yes" if v else "No",
        key="in_HeartDisease", on_change=_on_field, args=("HeartDisease",)
    )

    st.button("➕ Add patient to dataset", type="primary", on_click=router.on_commit,
              use_container_width=True)

    st.divider()
    st.subheader("📂 Data Source")
    st.file_uploader("Upload a heart-disease CSV", type=["csv"], key="csv_upload",
                     on_change=_on_upload)


# Messages queued by the callbacks of this rerun
for level, message in st.session_state.notices:
    if level == "error":
        st.error(message)
    elif level == "warning":
        st.warning(message)
    else:
        st.toast(message, icon="✅" if level == "success" else "ℹ️")
st.session_state.notices = []


# =============================================================================
# SECTION 5: SUMMARY METRICS
# =============================================================================

st.title(f"{config.PAGE_ICON} Heart-Explorer")
st.markdown("*Where does your hypothetical patient fall relative to the population?*")

summary = dashboard.summary

if summary is None:
    st.info("No records loaded. Upload a CSV file in the sidebar to begin.")
    st.stop()

c1, c2, c3, c4 = st.columns(4)
with c1:
    st.metric("Total Records", summary.record_count)
with c2:
    st.metric("Cholesterol vs Avg", f"{summary.chol_label} mg/dL",
              delta="Elevated" if summary.chol_alert else "Within range",
              delta_color="inverse" if summary.chol_alert else "off")
with c3:
    st.metric("Max HR vs Avg", f"{summary.hr_label} bpm")
with c4:
    risk_color = config.RISK_COLORS[summary.risk]
    st.markdown("**Risk Level**")
    st.markdown(f"<h3 style='color:{risk_color};margin-top:0'>{summary.risk} Risk</h3>",
                unsafe_allow_html=True)

st.caption("Illustrative rule only: cholesterol and resting blood pressure thresholds, not a clinical model.")

st.divider()


# =============================================================================
# SECTION 6: CHARTS
# =============================================================================

backend = config.CHART_BACKEND

filters = dashboard.store.filters
scatter_view = dashboard.scatter

head_col, clear_col = st.columns([4, 1])
with head_col:
    st.subheader("📈 Age vs Max Heart Rate")
    active = []
    if filters.age_range is not None:
        active.append(f"Age {filters.age_range.min:g}–{filters.age_range.max:g}")
    if filters.chest_pain is not None:
        active.append(f"Chest pain {filters.chest_pain}")
    if active:
        st.caption(f"Filtered by {' and '.join(active)}: "
                   f"{len(scatter_view.records)} of {scatter_view.total} records")
    else:
        st.caption(f"All {scatter_view.total} records")
with clear_col:
    st.button("Clear filters", on_click=router.on_clear_filters, disabled=not filters.active)

show_chart(render_scatter(scatter_view, make_surface(SCATTER, config.SCATTER_HEIGHT, backend)),
           "scatter_chart")

col1, col2, col3 = st.columns(3)

with col1:
    st.markdown("**Cholesterol Distribution**")
    show_chart(render_histogram(dashboard.cholesterol,
                                make_surface(CHOLESTEROL, config.HISTOGRAM_HEIGHT, backend)),
               "cholesterol_chart")
    low, high = extent(dashboard.store.dataset["Cholesterol"])
    if low is not None:
        st.caption(f"Recorded range: {low:.0f} to {high:.0f} mg/dl")

with col2:
    st.markdown("**Age Distribution**")
    show_chart(render_histogram(dashboard.age,
                                make_surface(AGE, config.HISTOGRAM_HEIGHT, backend),
                                interactive=True),
               "age_chart")
    st.caption("💡 Click a bar to filter the scatter plot by age.")

with col3:
    st.markdown("**Chest Pain Types**")
    show_chart(render_pie(dashboard.pie,
                          make_surface(PIE, config.PIE_HEIGHT, backend),
                          selected=filters.chest_pain),
               "pie_chart")
    st.caption("💡 Click a slice to filter the scatter plot by chest pain type.")
