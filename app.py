#!/usr/bin/env python3
"""
Streamlit playground for NeuroDSL scripts.

Run with: streamlit run app.py
"""

import sys
import time
from pathlib import Path

import pandas as pd
import streamlit as st

# Add packages to path
sys.path.append(str(Path(__file__).parent))

from neurodsl import __version__
from neurodsl.config import MODEL_IDS, Config
from neurodsl.dsl.engine import analyze, inject_model
from neurodsl.macro.baseline import MacroSynthesizer
from neurodsl.runtime.interpreter import Interpreter

NO_MODEL = "(none)"

EXAMPLE_SCRIPTS = {
    "Hello": 'neuro "Hello, world!"\nset name = "Ada"\nneuro name\n',
    "Arithmetic": 'set a = 4\nset b = 3\nset total = a * b + 1\nneuro total\n',
    "Branches": 'set score = 72\nif score >= 90:\n    neuro "A"\nelif score >= 70:\n    neuro "B"\nelse:\n    neuro "C"\n',
    "Macros": 'macro from AI: Show Ping 2 times\nmacro from AI: If score equals 10 say Congrats else say Nope\n',
    "Sentiment": 'AI: "models/distilbert-sst2/model.onnx"\nset mood from AI: "I love this so much"\nneuro mood\n',
}


# Page config
st.set_page_config(
    page_title="NeuroDSL Playground",
    page_icon="🧬",
    layout="wide",
    initial_sidebar_state="expanded"
)


@st.cache_resource
def get_config() -> Config:
    """Get cached runtime config."""
    return Config.from_env()


def get_interpreter() -> Interpreter:
    """One interpreter per browser session; variables persist between runs."""
    if "interpreter" not in st.session_state:
        st.session_state.interpreter = Interpreter(get_config())
    return st.session_state.interpreter


# Header
st.title("🧬 NeuroDSL Playground")
st.markdown("**Classifier-backed scripting with natural-language macros**")

with st.sidebar:
    st.header("📚 Example Scripts")
    for name, script in EXAMPLE_SCRIPTS.items():
        if st.button(f"💡 {name}", key=f"example_{name}", use_container_width=True):
            st.session_state.script_editor = script

    st.markdown("---")
    model_id = st.selectbox("🤖 Model", [NO_MODEL] + sorted(MODEL_IDS), index=0,
                            help="Injected as an AI: line when the script has none")

    if st.button("♻️ Reset variables", use_container_width=True):
        st.session_state.pop("interpreter", None)

    st.markdown("---")
    st.header("ℹ️ System Info")
    st.markdown(f"""
    **Version**: {__version__}

    **Statements**:
    - 🤖 `AI: "path"` select a classifier
    - 💬 `neuro "text"` print
    - 📦 `set x = expr` / `set x from AI: "text"`
    - 🔀 `if / elif / else`
    - ✨ `macro from AI: instruction`
    """)

if "script_editor" not in st.session_state:
    st.session_state.script_editor = EXAMPLE_SCRIPTS["Hello"]

script = st.text_area("📝 Script", height=240, key="script_editor")

run_clicked = st.button("▶️ Run", type="primary", key="run_script")

if run_clicked and script.strip():
    interpreter = get_interpreter()
    source = script if model_id == NO_MODEL else inject_model(script, model_id, get_config())

    start_time = time.time()
    with st.spinner("⚙️ Running..."):
        result = analyze(source, interpreter)
    total_time = time.time() - start_time

    if result.ok:
        st.success(f"✅ **Finished in {total_time*1000:.1f}ms**")
    else:
        st.error("❌ **Execution failed**")

    st.markdown("### 📤 Output")
    st.code(result.output, language=None)

    st.markdown("### 📦 Variables")
    variables = interpreter.variables
    if variables:
        variables_df = pd.DataFrame(sorted(variables.items()), columns=["name", "value"])
        st.dataframe(variables_df, use_container_width=True, hide_index=True)
    else:
        st.info("No variables set.")

with st.expander("🔍 Macro preview", expanded=False):
    instruction = st.text_input("Instruction", placeholder="e.g., Show Ping 2 times")
    if instruction:
        interpreter = get_interpreter()
        synthesis = MacroSynthesizer(get_config()).synthesize(instruction, interpreter.macro_model())
        col1, col2 = st.columns(2)
        with col1:
            st.metric("Model label", synthesis.label)
            st.metric("Score", f"{synthesis.score:.3f}")
            st.metric("Resolved label", synthesis.resolved_label)
        with col2:
            st.markdown("**🤖 Generated DSL**")
            st.code(synthesis.dsl, language=None)

# Footer
st.markdown("---")
st.markdown("""
<div style='text-align: center; color: #666; font-size: 0.8em;'>
💡 <strong>Tip:</strong> Finish macros with plain instructions like "Show Ping 2 times"<br/>
🧬 <strong>NeuroDSL</strong> | Built with Streamlit
</div>
""", unsafe_allow_html=True)
