"""
Paging Hardware Visualizer — Logical to Physical Address Translation

This application provides an interactive visualization of how a Memory
Management Unit (MMU) translates addresses with page tables:
    - Physical memory (RAM) divided into 1 KiB frames
    - Per-process page tables stored together in frame 0
    - Task control blocks holding each process's page-table base (PTBR)
    - Step-by-step logical -> physical address translation

Built with Streamlit for the web interface and Plotly for visualizations.
The simulation itself lives in paging_engine.py.

Run with:
    streamlit run app.py
"""

# =============================================================================
# IMPORTS
# =============================================================================

import streamlit as st                       # Web application framework
import plotly.graph_objects as go            # Interactive plotting library
from typing import Optional

from paging_engine import (
    PAGE_TABLE_FRAME,
    REFERENCE_CONFIG,
    Failure,
    PagingSystem,
    initialize_system,
)
from paging_utils import (
    ACCESS_COLOR,
    frame_rows,
    get_color,
    page_table_dump,
    parse_address,
    sample_address,
)


# =============================================================================
# VISUALIZATION HELPERS
# =============================================================================

def ram_figure(system: PagingSystem, accessed_frame: Optional[int]) -> go.Figure:
    """
    Build the RAM bar chart: one bar per frame, colored by owner.

    The accessed frame gets a thick red outline, mimicking the blinking
    frame of the hardware panel.
    """
    rows = frame_rows(system, accessed_frame)
    tags = list(system.ownership)

    fig = go.Figure()
    fig.add_trace(go.Bar(
        x=[f"F{r['frame']}" for r in rows],
        y=[1] * len(rows),
        text=[f"{r['owner']}<br>{r['start']}" for r in rows],
        marker_color=[get_color(t) for t in tags],
        marker_line_color=[ACCESS_COLOR if r["accessed"] else "white" for r in rows],
        marker_line_width=[5 if r["accessed"] else 1 for r in rows],
        hovertext=[f"Frame {r['frame']} @ {r['start']}: {r['owner']}" for r in rows],
        hoverinfo="text",
    ))
    fig.update_layout(
        height=220,
        showlegend=False,
        yaxis=dict(showticklabels=False),
        margin=dict(t=10, b=10),
    )
    return fig


# =============================================================================
# STREAMLIT UI - Web Application Interface
# =============================================================================

st.set_page_config(page_title="Paging Hardware Visualizer", layout="wide")

# -----------------------------------------------------------------------------
# SIDEBAR NAVIGATION
# -----------------------------------------------------------------------------

page = st.sidebar.radio("Choose View", ["Simulator", "Concepts"])

st.title("Paging Hardware Visualizer — Address Translation")

# =============================================================================
# CONCEPTS PAGE - Educational Content
# =============================================================================

if page == "Concepts":
    st.header("Concepts Behind the Simulator")
    st.markdown(
        """
        ### **1. Frames and Pages**
        - Physical memory is split into fixed-size *frames* (1 KiB here, 16 of them).
        - Each process sees a logical address space split into *pages* of the same size.

        ### **2. Page Table**
        - Maps each page number to the frame that holds it.
        - Every entry here is one byte, so frame numbers up to 255 can be stored.
        - The tables of all processes live together in **frame 0**.

        ### **3. PTBR (Page-Table Base Register)**
        - Saved in each process's TCB.
        - Byte offset of that process's table inside frame 0.

        ### **4. Translation**
        - `offset = address & (page_size - 1)`
        - `page = address >> log2(page_size)`
        - `entry = PTBR + page`, `frame = RAM[entry]`
        - `physical = frame * page_size + offset`

        ### **5. Isolation**
        - The same logical address goes through a different table for each
          process and so lands in a different frame.
        """
    )
    st.stop()

# =============================================================================
# SIMULATOR PAGE - Main Interactive Interface
# =============================================================================

# -----------------------------------------------------------------------------
# SESSION STATE - System Persistence
# -----------------------------------------------------------------------------

if "system" not in st.session_state:
    st.session_state.system = initialize_system(REFERENCE_CONFIG)
    st.session_state.last_result = None

system: PagingSystem = st.session_state.system
event_log = system.event_log
page_size = system.memory.frame_size
page_count = system.processes.page_count

# -----------------------------------------------------------------------------
# SIDEBAR - Process & Address Selection
# -----------------------------------------------------------------------------

st.sidebar.header("Active Process")
active_pid = st.sidebar.radio(
    "Process",
    options=system.processes.pids,
    format_func=lambda pid: f"P{pid}",
)
active = system.descriptor(active_pid)

st.sidebar.markdown("---")
st.sidebar.header("Access")

variable_page = st.sidebar.selectbox(
    "Variable (one per page)",
    options=list(range(page_count)),
    format_func=lambda p: f"Page {p} -> logical {sample_address(p, page_size)}",
)
if st.sidebar.button("Access Variable"):
    st.session_state.pending_address = sample_address(variable_page, page_size)

custom_address = st.sidebar.text_input("Logical address (decimal or 0x hex)", value="0x0064")
if st.sidebar.button("Translate"):
    try:
        st.session_state.pending_address = parse_address(custom_address)
    except ValueError:
        st.sidebar.error(f"Not a number: {custom_address!r}")

if st.sidebar.button("Clear Log"):
    event_log.clear()
    st.session_state.last_result = None

# -----------------------------------------------------------------------------
# TRANSLATION - Run the MMU on the requested address
# -----------------------------------------------------------------------------

pending = st.session_state.pop("pending_address", None)
if pending is not None:
    outcome = system.translate(active, pending)
    if isinstance(outcome, Failure):
        event_log.append(f"P{active.pid} {pending}: {outcome}")
        st.session_state.last_result = None
        if outcome.fatal:
            st.error(f"Internal consistency fault, simulation halted: {outcome}")
            st.stop()
        st.sidebar.error(outcome.message)
    else:
        event_log.append(
            f"P{outcome.pid}: logical {outcome.logical_address} -> physical "
            f"{outcome.physical_address} (page {outcome.page_number} -> frame {outcome.frame})"
        )
        st.session_state.last_result = outcome

result = st.session_state.last_result

# =============================================================================
# MAIN CONTENT AREA - Three Panel Layout
# =============================================================================

col1, col2, col3 = st.columns([1, 2, 2])

# -----------------------------------------------------------------------------
# LEFT PANEL - Processes and Event Log
# -----------------------------------------------------------------------------

with col1:
    st.subheader("Processes")
    st.table([
        {
            "process": f"P{p.pid}",
            "PTBR": f"0x{p.page_table_base:04X}",
            "active": p.pid == active.pid,
            "frames": ", ".join(str(f) for f in system.ownership.frames_of(p.pid)),
        }
        for p in system.processes
    ])

    st.subheader("Event Log")
    for ev in event_log[-20:][::-1]:
        st.write(ev)

# -----------------------------------------------------------------------------
# CENTER PANEL - MMU Steps
# -----------------------------------------------------------------------------

with col2:
    st.subheader("MMU")
    if result is None:
        st.write("No translation yet. Pick a variable or enter an address.")
    else:
        st.code("\n".join(result.steps()), language="text")
        st.metric("Physical address", f"0x{result.physical_address:04X}",
                  delta=f"frame {result.frame}", delta_color="off")

    st.subheader(f"Page Tables (frame {PAGE_TABLE_FRAME})")
    st.code("\n".join(page_table_dump(system)), language="text")

# -----------------------------------------------------------------------------
# RIGHT PANEL - RAM Visualization
# -----------------------------------------------------------------------------

with col3:
    st.subheader(f"RAM ({system.memory.size // 1024} KiB)")
    accessed = result.frame if result is not None else None

    if result is not None:
        st.caption("Page-table lookup")
        st.plotly_chart(ram_figure(system, PAGE_TABLE_FRAME), use_container_width=True)
        st.caption("Data access")
    st.plotly_chart(ram_figure(system, accessed), use_container_width=True)

    st.subheader("Frame Ownership")
    st.table([
        {"frame": r["frame"], "start": r["start"], "owner": r["owner"]}
        for r in frame_rows(system)
    ])

# =============================================================================
# FOOTER - Usage Tips
# =============================================================================

st.markdown("---")
st.markdown(
    "**Usage tips**:\n"
    "- Select a process in the sidebar: this is the TCB whose PTBR the MMU uses.\n"
    "- **Access Variable** translates the predefined address living in that page.\n"
    "- Enter any logical address and click **Translate** to see the steps, "
    f"valid addresses are 0..{page_count * page_size - 1}.\n"
    "- Translate the same address under two processes to see isolation."
)
