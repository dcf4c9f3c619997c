from pathlib import Path

import pandas as pd
import streamlit as st

from gdguides.config import default_save_path
from gdguides.errors import GuidelineError
from gdguides.labels import create_guidelines, decode_labels
from gdguides.pipeline import apply_guidelines_to_level, list_levels


def main() -> None:
    st.title("Geometry Dash Guidelines")
    st.caption("Turn an Audacity label export into a level's guidelines.")
    st.session_state.setdefault("apply_logs", [])

    default = default_save_path()
    save_path = Path(st.text_input("Save file", str(default) if default else ""))
    if not save_path.is_file():
        st.warning("Save file not found; check the path above.")
        return

    try:
        names = list_levels(save_path)
    except GuidelineError as exc:
        st.error(f"Error reading save data ({exc.stage}): {exc}")
        return
    if not names:
        st.info("No levels found in this save.")
        return

    with st.expander("Levels in save"):
        st.dataframe(pd.DataFrame({"level": names}), height=250)

    level_index = st.selectbox(
        "Level", range(len(names)), format_func=lambda i: f"{i}: {names[i]}"
    )
    labels_file = st.file_uploader("Labels file", type=["txt"])
    labels_text = None

    if labels_file is not None:
        try:
            labels_text = decode_labels(labels_file.read())
            st.code(create_guidelines(labels_text) or "(no labels)")
        except GuidelineError as exc:
            st.error(f"Error parsing labels: {exc}")
            labels_text = None

    if st.button("Apply guidelines", disabled=labels_text is None):
        try:
            result = apply_guidelines_to_level(save_path, int(level_index), labels_text or "")
        except GuidelineError as exc:
            st.error(f"Error adding guidelines ({exc.stage}): {exc}")
        else:
            st.success("Applied guidelines")
            st.session_state["apply_logs"].append(
                {
                    "level": names[result.level_index],
                    "guidelines": len(result.guidelines),
                    "was_encoded": result.was_encoded,
                }
            )

    if st.session_state["apply_logs"]:
        st.markdown("**Recent runs**")
        st.dataframe(pd.DataFrame(st.session_state["apply_logs"]).tail(5))


if __name__ == "__main__":
    main()
