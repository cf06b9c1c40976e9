"""
SQL Viewer - Streamlit Application

Connect to a MySQL (or PostgreSQL / SQLite) database, browse its tables,
run ad-hoc queries and look at the rows in a grid.
"""

import logging
from pathlib import Path

# Load .env FIRST before any other imports
from dotenv import load_dotenv
load_dotenv(Path(__file__).parent / ".env")

import streamlit as st

# Page config must be first
st.set_page_config(
    page_title="SQL Viewer",
    page_icon="🗄️",
    layout="wide",
    initial_sidebar_state="expanded"
)

# Imports
from config import DatabaseType, config
from sql import format_sql
from viewer import create_viewer, DatabaseViewer
from viz_utils import render_results

logging.basicConfig(
    level=getattr(logging, config.viewer.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)


def init_session_state():
    """Initialize Streamlit session state."""
    if "viewer" not in st.session_state:
        st.session_state.viewer = create_viewer()

    if "query_editor" not in st.session_state:
        st.session_state.query_editor = ""


def get_viewer() -> DatabaseViewer:
    return st.session_state.viewer


def on_table_click(table_name: str):
    """Put a preview query for the clicked table into the editor."""
    st.session_state.query_editor = get_viewer().select_table(table_name)


def on_format_click():
    st.session_state.query_editor = format_sql(st.session_state.query_editor)


def on_execute_click():
    get_viewer().execute(st.session_state.query_editor)


def render_sidebar():
    """Render the table list."""
    viewer = get_viewer()

    with st.sidebar:
        st.title("📋 Tables")

        if not viewer.is_connected:
            st.caption("Connect to list tables.")
            return

        if st.button("🔄 Refresh", use_container_width=True):
            viewer.refresh_tables()

        if not viewer.tables:
            st.caption("No tables found.")

        for table_name in viewer.tables:
            st.button(
                table_name,
                key=f"table_{table_name}",
                use_container_width=True,
                on_click=on_table_click,
                args=(table_name,)
            )


def render_connection_form():
    """Render the connection credentials and Connect/Disconnect buttons."""
    viewer = get_viewer()
    current = viewer.config
    db_types = [t.value for t in DatabaseType]

    with st.expander("🔌 Connection", expanded=not viewer.is_connected):
        db_type = st.selectbox(
            "Database type",
            db_types,
            index=db_types.index(current.db_type.value)
        )
        col1, col2 = st.columns(2)
        with col1:
            host = st.text_input("Host", value=current.host)
            username = st.text_input("Username", value=current.username)
        with col2:
            database = st.text_input(
                "Database",
                value=current.database,
                help="For SQLite, the path of the database file"
            )
            password = st.text_input("Password", value=current.password, type="password")

        col_connect, col_disconnect = st.columns(2)
        with col_connect:
            if st.button("🚀 Connect", use_container_width=True, type="primary"):
                viewer.update_config(
                    host=host,
                    username=username,
                    password=password,
                    database=database,
                    db_type=DatabaseType(db_type)
                )
                with st.spinner("Connecting to database..."):
                    viewer.connect()
                st.rerun()
        with col_disconnect:
            if st.button("Disconnect", use_container_width=True, disabled=not viewer.is_connected):
                viewer.disconnect()
                st.rerun()

    if not viewer.is_connected:
        st.warning(viewer.connection_status)
    elif viewer.connection_status.startswith("Connected"):
        st.success(viewer.connection_status)
    else:
        st.error(viewer.connection_status)


def render_query_editor():
    """Render the query text area and Execute/Format buttons."""
    st.text_area("Query", key="query_editor", height=150, placeholder="SELECT ...")

    col_execute, col_format, _ = st.columns([1, 1, 4])
    with col_execute:
        st.button("▶️ Execute", type="primary", use_container_width=True, on_click=on_execute_click)
    with col_format:
        st.button("✨ Format", use_container_width=True, on_click=on_format_click)


def render_result_area():
    viewer = get_viewer()
    result = viewer.result

    if viewer.status.startswith(("Query failed", "Failed to execute")):
        st.error(viewer.status)
    elif result.error:
        st.warning(viewer.status)
    elif viewer.status.startswith("Query executed"):
        st.caption(viewer.status)

    render_results(result, key_prefix="result")


def main():
    """Main application entry point."""
    init_session_state()
    render_sidebar()

    st.title("🗄️ SQL Viewer")
    render_connection_form()
    st.divider()
    render_query_editor()
    st.divider()
    render_result_area()


if __name__ == "__main__":
    main()
