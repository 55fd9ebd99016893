import streamlit as st
from typing import Optional

def init_session():
    """Initialize session state variables."""
    if "conversation_id" not in st.session_state:
        st.session_state["conversation_id"] = None
    if "simple_history" not in st.session_state:
        st.session_state["simple_history"] = []

def get_conversation_id() -> Optional[str]:
    """Get currently selected conversation ID."""
    return st.session_state.get("conversation_id")

def set_conversation_id(conversation_id: Optional[str]):
    """Select a conversation, or clear the selection with None."""
    st.session_state["conversation_id"] = conversation_id

def clear_selection():
    set_conversation_id(None)
