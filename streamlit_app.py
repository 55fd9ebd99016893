import streamlit as st
from chatmem.db import init_db
from chatmem.ui.validation import run_all_checks
from chatmem.ui.state import init_session

# Page configuration
st.set_page_config(
    page_title="chatmem",
    page_icon="💬",
    layout="wide",
    initial_sidebar_state="expanded",
)

init_db()

# Run pre-flight checks
errors = run_all_checks()

if errors:
    st.error("🚨 System Configuration Errors")
    for err in errors:
        st.write(f"- {err}")
    st.stop()

# Initialize State
init_session()

st.sidebar.title("chatmem")

# Multipage definition
pg = st.navigation([
    st.Page("src/chatmem/ui/pages/1_chat.py", title="Chat", icon="💬"),
    st.Page("src/chatmem/ui/pages/2_memory_chat.py", title="Memory Chat", icon="🧠"),
])

pg.run()
