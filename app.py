import streamlit as st
import pandas as pd
import numpy as np
import altair as alt
import plotly.graph_objects as go

import putting_engine as pe
import world_scaling as ws
import spectator_layout as sl
from coach_logging import init_logging


# ------------------------------------------------------------
# Page config
# ------------------------------------------------------------
st.set_page_config(
    page_title="Putting Coach",
    page_icon="⛳",
    layout="wide",
    initial_sidebar_state="expanded",
)

# ------------------------------------------------------------
# Session state defaults
# ------------------------------------------------------------

DEFAULTS = {
    "log_level": "INFO",
    "scaling_mode": ws.SCALING_BANDED,   # banded vs averaged render scale
    "pace_length_feet": pe.DEFAULT_PACE_LENGTH_FEET,
    "challenge_level": 1,
    "attempt_number": 1,
}


def init_session_state():
    for k, v in DEFAULTS.items():
        if k not in st.session_state:
            st.session_state[k] = v


init_session_state()


# ------------------------------------------------------------
# Styling (simple dark-ish theme tweaks)
# ------------------------------------------------------------

st.markdown(
    """
    <style>
    .main, .stApp {
        background-color: #05070b;
    }
    h1, h2, h3, h4, h5, h6 {
        color: #f5f5f5;
    }
    .stMarkdown, .stText, .stCaption, label {
        color: #e6e6e6 !important;
    }
    thead tr th {
        background-color: #10151f !important;
    }
    </style>
    """,
    unsafe_allow_html=True,
)


def _dark(chart):
    return (
        chart.configure_view(stroke=None, fill="#05070b")
        .configure_axis(labelColor="#f5f5f5", titleColor="#f5f5f5")
        .configure_title(color="#f5f5f5")
    )


# ------------------------------------------------------------
# Sidebar controls
# ------------------------------------------------------------

with st.sidebar:
    st.header("Settings")

    st.markdown("**Render Scale**")
    st.session_state.scaling_mode = st.radio(
        "Scaling strategy",
        [ws.SCALING_BANDED, ws.SCALING_AVERAGED],
        index=0 if st.session_state.scaling_mode == ws.SCALING_BANDED else 1,
        help="Banded keeps short putts large and long holes compact. "
             "Averaged uses one scale for every distance.",
    )

    st.markdown("---")
    st.markdown("**Player**")
    st.session_state.pace_length_feet = st.slider(
        "Pace length (feet)",
        min_value=2.0,
        max_value=4.0,
        value=float(st.session_state.pace_length_feet),
        step=0.1,
        help="Used when you enter a putt in paces.",
    )

    st.markdown("---")
    st.session_state.log_level = st.selectbox(
        "Log level",
        ["DEBUG", "INFO", "WARNING"],
        index=["DEBUG", "INFO", "WARNING"].index(st.session_state.log_level),
    )

# after the sidebar so a new level applies on this same rerun
init_logging(st.session_state.log_level)

scaling_mode = st.session_state.scaling_mode


# ------------------------------------------------------------
# Main title
# ------------------------------------------------------------

st.title("Putting Coach")
st.caption(
    "Read a putt, see the stroke you need, and explore how course distances "
    "are scaled into the 3D view."
)

tab_putt, tab_scale, tab_course, tab_crowd, tab_info = st.tabs(
    ["Putt", "Scaling", "Course View", "Spectators", "Info"]
)


# ============================================================
# PUTT TAB
# ============================================================

def draw_strength_gauge(strength):
    lo, hi = pe.STRENGTH_RANGE
    color = "red" if strength > 100 else "blue" if strength < 100 else "gray"

    fig = go.Figure(
        go.Indicator(
            mode="gauge+number+delta",
            value=strength,
            number={"suffix": "%"},
            title={"text": "<b>Stroke Strength</b>", "font": {"size": 20}},
            delta={"reference": 100, "relative": False, "position": "top"},
            gauge={
                "axis": {"range": [lo, hi], "tickwidth": 2},
                "bar": {"color": color},
                "steps": [
                    {"range": [lo, 100], "color": "lightcyan"},
                    {"range": [100, hi], "color": "mistyrose"},
                ],
                "threshold": {
                    "line": {"color": "red", "width": 4},
                    "thickness": 0.8,
                    "value": 100,
                },
            },
        )
    )
    fig.update_layout(height=280, margin=dict(t=60, b=10, l=10, r=10))
    st.plotly_chart(fig, use_container_width=True)


def draw_trajectory(result):
    df = pd.DataFrame(result["trajectory"])
    aim = result["aim_point"]
    distance = result["distance_feet"]

    fig = go.Figure()
    fig.add_trace(
        go.Scatter(
            x=df["x"], y=df["y"], mode="lines+markers", name="Ball path",
            line={"color": "#f5f5f5", "width": 3}, marker={"size": 4},
        )
    )
    fig.add_trace(
        go.Scatter(
            x=[0.0, aim["x"]], y=[0.0, distance + aim["y"]], mode="lines",
            name="Aim line", line={"color": "#f1c40f", "dash": "dash"},
        )
    )
    fig.add_trace(
        go.Scatter(
            x=[df["x"].iloc[-1]], y=[distance], mode="markers", name="Hole",
            marker={"size": 14, "color": "#05070b", "line": {"color": "#f5f5f5", "width": 2}},
        )
    )

    half_width = max(2.0, float(np.abs(df["x"]).max()) * 1.5, abs(aim["x"]) * 1.5)
    fig.update_layout(
        height=420,
        xaxis={"title": "Lateral (ft)", "range": [-half_width, half_width]},
        yaxis={"title": "Toward hole (ft)", "scaleanchor": "x", "scaleratio": 1},
        plot_bgcolor="#1e5631",
        margin=dict(t=20, b=10, l=10, r=10),
    )
    st.plotly_chart(fig, use_container_width=True)


with tab_putt:
    st.subheader("Putt Read")

    col1, col2, col3 = st.columns(3)

    with col1:
        distance = st.number_input("Distance", min_value=0.5, max_value=300.0, value=10.0, step=0.5)
        distance_unit = st.radio("Unit", list(pe.DISTANCE_UNITS), horizontal=True)
        green_speed = st.slider(
            "Green Speed (Stimp)",
            min_value=pe.GREEN_SPEED_RANGE[0],
            max_value=pe.GREEN_SPEED_RANGE[1],
            value=pe.BASELINE_GREEN_SPEED,
            step=0.5,
        )

    with col2:
        slope = st.slider("Slope (%) + = uphill", min_value=-20.0, max_value=20.0, value=0.0, step=0.5)
        break_pct = st.slider("Break (%)", min_value=0.0, max_value=50.0, value=0.0, step=1.0)

    with col3:
        break_dir = st.slider(
            "Break Direction (°)",
            min_value=0,
            max_value=359,
            value=90,
            help="Direction the green falls: 90 = breaks right, 270 = breaks left.",
        )
        style = st.selectbox("Putting Style", list(pe.PUTTING_STYLES))

    result = pe.calculate_putt_recommendation(
        distance=distance,
        distance_unit=distance_unit,
        slope_percent=slope,
        break_percent=break_pct,
        break_direction_deg=break_dir,
        green_speed=green_speed,
        putting_style=style,
        pace_length_feet=st.session_state.pace_length_feet,
    )

    colm, colg = st.columns([1, 2])
    with colm:
        st.metric("Make probability", f"{result['success_probability'] * 100:.1f} %")
        st.metric(
            "Distance",
            f"{result['distance_feet']:.1f} ft",
            help=f"{pe.feet_to_yards(result['distance_feet']):.1f} yd",
        )
        aim_x = result["aim_point"]["x"]
        if abs(aim_x) < 0.05:
            aim_text = "Play this essentially straight."
        else:
            side = "right" if aim_x > 0 else "left"
            aim_text = f"Start it **{abs(aim_x):.1f} ft {side}** of the hole."
        st.markdown(f"- **Aim:** {aim_text}")

        precision = ws.get_hole_detection_precision(result["distance_feet"], mode=scaling_mode)
        st.caption(
            f"Capture radius {precision['detection_radius_feet']:.2f} ft • "
            f"{precision['description']}"
        )
    with colg:
        draw_strength_gauge(result["strength_percent"])

    st.markdown("### Ball Path")
    draw_trajectory(result)


# ============================================================
# SCALING TAB
# ============================================================

with tab_scale:
    st.subheader("Distance → Render Space")

    feet = np.linspace(1.0, 900.0, 400)
    df_scale = pd.DataFrame(
        {
            "Distance (ft)": feet,
            "Banded units/ft": [ws.get_world_units_per_foot(f, ws.SCALING_BANDED) for f in feet],
            "Averaged units/ft": [ws.get_world_units_per_foot(f, ws.SCALING_AVERAGED) for f in feet],
            "Banded depth": [-ws.compute_world_position(f, 0.0, ws.SCALING_BANDED)["z"] for f in feet],
            "Averaged depth": [-ws.compute_world_position(f, 0.0, ws.SCALING_AVERAGED)["z"] for f in feet],
        }
    )

    col_l, col_r = st.columns(2)
    with col_l:
        long_df = df_scale.melt(
            id_vars="Distance (ft)",
            value_vars=["Banded units/ft", "Averaged units/ft"],
            var_name="Mode",
            value_name="Units per foot",
        )
        chart = (
            alt.Chart(long_df)
            .mark_line(strokeWidth=2)
            .encode(
                x=alt.X("Distance (ft):Q", scale=alt.Scale(type="log")),
                y="Units per foot:Q",
                color="Mode:N",
            )
            .properties(height=300, title="Scale factor")
        )
        st.altair_chart(_dark(chart), use_container_width=True)

    with col_r:
        long_df = df_scale.melt(
            id_vars="Distance (ft)",
            value_vars=["Banded depth", "Averaged depth"],
            var_name="Mode",
            value_name="World units from ball",
        )
        chart = (
            alt.Chart(long_df)
            .mark_line(strokeWidth=2)
            .encode(x="Distance (ft):Q", y="World units from ball:Q", color="Mode:N")
            .properties(height=300, title="Rendered depth")
        )
        st.altair_chart(_dark(chart), use_container_width=True)

    st.markdown("### Calibration Check")
    report = ws.check_scaling_consistency()
    df_cal = pd.DataFrame(report["points"]).round(2)
    st.dataframe(df_cal, use_container_width=True)
    if report["consistent"]:
        st.success(f"Both modes agree within 10% ({report['units_per_yard']:.3f} units/yd).")
    else:
        st.warning(
            f"Averaged scale {report['units_per_yard']:.3f} units/yd does not match the "
            "band table at every reference point."
        )


# ============================================================
# COURSE VIEW TAB
# ============================================================

SAMPLE_FEATURES = [
    {"name": "Pin", "category": ws.FEATURE_PIN, "yards_from_tee": 445.0},
    {"name": "Fairway bunker", "category": ws.FEATURE_BUNKER, "yards_from_tee": 300.0, "lateral_yards": 12.0},
    {"name": "Greenside bunker", "category": ws.FEATURE_BUNKER, "yards_from_tee": 430.0, "lateral_yards": -10.0},
    {"name": "Left rough", "category": ws.FEATURE_ROUGH, "yards_from_tee": 200.0, "lateral_yards": -25.0},
    {"name": "Pond", "category": ws.FEATURE_WATER, "yards_from_tee": 150.0, "lateral_yards": 30.0},
    {"name": "Green terrain", "category": ws.FEATURE_TERRAIN, "yards_from_tee": 440.0, "elevation_feet": 6.0},
]

with tab_course:
    st.subheader("Feature Visibility")

    col1, col2 = st.columns(2)
    with col1:
        ball_yards = st.slider("Ball position (yards from tee)", 0.0, 445.0, 0.0, step=5.0)
    with col2:
        game_mode = st.radio("Game mode", [ws.GAME_MODE_SWING, ws.GAME_MODE_PUTT], horizontal=True)

    state = ws.make_game_state(
        ball_position_yards=ball_yards,
        hole_position_yards=445.0,
        game_mode=game_mode,
        total_hole_yards=445.0,
    )

    rows = []
    for res in ws.resolve_features(SAMPLE_FEATURES, state, mode=scaling_mode):
        pos = res["world_position"]
        rows.append(
            {
                "Feature": res["name"],
                "Visible": res["visible"],
                "Scale": round(res["scale"], 3),
                "x": round(pos["x"], 2),
                "z": round(pos["z"], 2),
                "Reason": res["reason"],
            }
        )
    st.dataframe(pd.DataFrame(rows), use_container_width=True)

    check = ws.validate_positioning(state, mode=scaling_mode)
    st.caption(
        f"{state['remaining_yards']:.0f} yd to go • hole at z = {check['hole_position']['z']:.2f} • "
        + ("positioning OK" if check["valid"] else "; ".join(check["issues"]))
    )


# ============================================================
# SPECTATORS TAB
# ============================================================

def draw_spectators(config, hole_distance_feet):
    df = pd.DataFrame(
        [
            {"Kind": kind, "x": pos["x"], "z": pos["z"], "Angle": round(pos["angle"], 1)}
            for kind, pos in config["positions"].items()
        ]
    )
    hole_df = pd.DataFrame({"x": [0.0], "z": [0.0]})
    lim = sl.DEFAULT_MAX_RADIUS * 1.2

    people = (
        alt.Chart(df)
        .mark_circle(size=180)
        .encode(
            x=alt.X("x:Q", scale=alt.Scale(domain=[-lim, lim])),
            y=alt.Y("z:Q", scale=alt.Scale(domain=[-lim, lim])),
            color="Kind:N",
            tooltip=["Kind", "Angle"],
        )
    )
    hole = alt.Chart(hole_df).mark_point(shape="cross", size=200, color="#f1c40f").encode(x="x:Q", y="z:Q")
    chart = alt.layer(hole, people).properties(
        height=360, width=360, title=f"Layout around the hole ({hole_distance_feet:.0f} ft putt)"
    )
    st.altair_chart(_dark(chart))


with tab_crowd:
    st.subheader("Background Spectators")

    mode_label = st.radio("Mode", ["Challenge", "Practice"], horizontal=True)
    hole_ft = st.slider("Hole distance (feet)", 3.0, 60.0, 20.0, step=1.0)

    if mode_label == "Challenge":
        c1, c2 = st.columns(2)
        st.session_state.challenge_level = c1.number_input(
            "Level", min_value=1, max_value=50, value=int(st.session_state.challenge_level)
        )
        st.session_state.attempt_number = c2.number_input(
            "Attempt", min_value=1, max_value=99, value=int(st.session_state.attempt_number)
        )
        crowd = sl.challenge_spectator_config(
            st.session_state.challenge_level, hole_ft, st.session_state.attempt_number
        )
    else:
        st.button("New practice putt 🔄")
        crowd = sl.practice_spectator_config(hole_ft)

    draw_spectators(crowd, hole_ft)
    st.caption("Showing: " + ", ".join(crowd["selected"]))


# ============================================================
# INFO TAB
# ============================================================

with tab_info:
    st.subheader("How Putting Coach Works")

    st.markdown(
        """
        ### Putt Read
        - Strength starts at 100% for a flat 10 ft putt on a stimp-10 green and
          moves with slope, green speed, and length.
        - The aim point sits inside the full break; the path bends more near
          the hole as the ball slows.

        ### Scaling
        - **Banded** scale keeps a 3 ft putt and a 400 yd hole both readable.
        - **Averaged** scale is a single constant fitted to the visual references.

        ### Disclaimer
        The ball path is a visual guide, not a physics simulation.
        """
    )
