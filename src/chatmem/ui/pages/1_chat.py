import streamlit as st
from chatmem.chat.simple import SimpleChatService
from chatmem.errors import ChatMemoryError
from chatmem.llm.openai_client import get_model_client

st.title("Chat")
st.caption("One-shot chat. Nothing is remembered between messages.")

history = st.session_state.setdefault("simple_history", [])

for entry in history:
    with st.chat_message(entry["role"]):
        st.markdown(entry["content"])

prompt = st.chat_input("Ask anything")
if prompt:
    history.append({"role": "user", "content": prompt})
    with st.chat_message("user"):
        st.markdown(prompt)

    with st.chat_message("assistant"):
        with st.spinner("Thinking..."):
            try:
                reply = SimpleChatService(get_model_client()).chat(prompt)
            except ChatMemoryError as e:
                st.error(f"Chat failed: {e}")
                st.stop()
        st.markdown(reply)
    history.append({"role": "assistant", "content": reply})

if history and st.button("Clear"):
    st.session_state["simple_history"] = []
    st.rerun()
