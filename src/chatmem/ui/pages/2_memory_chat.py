import streamlit as st
from sqlmodel import Session
from chatmem.chat.service import ConversationService
from chatmem.db import engine
from chatmem.errors import ChatMemoryError, ConversationNotFound
from chatmem.llm.openai_client import get_model_client
from chatmem.ui.state import get_conversation_id, set_conversation_id, clear_selection

st.title("Memory Chat")

with Session(engine) as session:
    service = ConversationService.from_session(session, get_model_client())

    # --- Conversation list ---
    st.sidebar.subheader("Conversations")
    if st.sidebar.button("➕ New chat", use_container_width=True):
        clear_selection()
        st.rerun()

    try:
        conversations = service.list_conversations()
    except ChatMemoryError as e:
        st.sidebar.error(f"Could not load conversations: {e}")
        conversations = []

    current_id = get_conversation_id()
    for conv in conversations:
        is_selected = conv.id == current_id
        label = f"{'▶ ' if is_selected else ''}{conv.description}"
        if st.sidebar.button(label, key=f"conv_{conv.id}", disabled=is_selected, use_container_width=True):
            set_conversation_id(conv.id)
            st.rerun()

    # --- Transcript panel ---
    if current_id:
        try:
            messages = service.get_transcript(current_id)
        except ConversationNotFound:
            st.warning("That conversation no longer exists.")
            clear_selection()
            st.stop()
        except ChatMemoryError as e:
            st.error(f"Could not load messages: {e}")
            st.stop()

        for m in messages:
            with st.chat_message(m.role.model_role):
                st.markdown(m.content)
    else:
        st.info("Start a new conversation by sending a message.")

    prompt = st.chat_input("Type a message")
    if prompt:
        with st.chat_message("user"):
            st.markdown(prompt)
        with st.spinner("Thinking..."):
            try:
                if current_id:
                    service.send_message(current_id, prompt)
                else:
                    started = service.create_conversation_with_first_message(prompt)
                    set_conversation_id(started.conversation_id)
            except ChatMemoryError as e:
                st.error(f"Message failed: {e}")
                st.stop()
        st.rerun()
