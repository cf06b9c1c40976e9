import streamlit as st
import pandas as pd

from database import QueryResult


def unique_labels(columns):
    """Suffix repeated column labels (id, id_2, ...) so Arrow accepts the frame."""
    seen = set()
    labels = []
    for name in columns:
        label = name
        suffix = 2
        while label in seen:
            label = f"{name}_{suffix}"
            suffix += 1
        seen.add(label)
        labels.append(label)
    return labels


def result_to_dataframe(result: QueryResult) -> pd.DataFrame:
    """Build a DataFrame of display strings; headers only when every row fits them."""
    if result.columns and result.is_rectangular:
        return pd.DataFrame(result.rows, columns=unique_labels(result.columns))
    return pd.DataFrame(result.rows)


def render_results(result: QueryResult, key_prefix):
    """Render the rows of a query result as a filterable grid."""
    if result.is_empty:
        if result.columns:
            st.info("Query returned no rows.")
        return

    df = result_to_dataframe(result)

    col_search, col_info = st.columns([3, 1])
    with col_search:
        search_term = st.text_input(
            "🔍 Filter Data",
            placeholder="Type to search...",
            label_visibility="collapsed",
            key=f"{key_prefix}_search"
        )

    if search_term:
        # Filter dataframe (case-insensitive) across all columns
        mask = df.astype(str).apply(
            lambda x: x.str.contains(search_term, case=False, na=False, regex=False)
        ).any(axis=1)
        filtered_df = df[mask]
        with col_info:
            st.caption(f"Showing {len(filtered_df)} / {len(df)} rows")
        st.dataframe(filtered_df, width="stretch", hide_index=True)
    else:
        with col_info:
            st.caption(f"Total rows: {len(df)}")
        st.dataframe(df, width="stretch", hide_index=True)
