# app.py - Production Data Entry Main Entry Point
import streamlit as st
import logging

from prodlog.config import APP_CONFIG
from prodlog.db import check_db_connection, reset_db_engine

# Configure logging
logging.basicConfig(
    level=getattr(logging, APP_CONFIG["LOG_LEVEL"].upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

# Page configuration
st.set_page_config(
    page_title="Production Data Entry",
    page_icon="🏭",
    layout="wide",
    initial_sidebar_state="collapsed"
)

# Custom CSS
st.markdown("""
<style>
    .stButton>button {
        width: 100%;
    }
</style>
""", unsafe_allow_html=True)


def main():
    """Main application entry point"""
    if APP_CONFIG["STORAGE_BACKEND"] == "sql":
        connected, error = check_db_connection()
        if not connected:
            st.error(f"🔌 **Storage Error**\n\n{error}")
            if st.button("🔄 Retry"):
                reset_db_engine()
                st.rerun()
            return

    try:
        from prodlog.production_data.page import render_data_entry_page
        render_data_entry_page()

    except Exception as e:
        st.error(f"An error occurred: {str(e)}")
        logger.error(f"Application error: {e}", exc_info=True)

        if st.button("🔄 Reload"):
            st.rerun()

    # Footer
    st.markdown("---")
    st.caption(f"Production Data Entry | storage: {APP_CONFIG['STORAGE_BACKEND']}")


main()
