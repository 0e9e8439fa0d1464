'''Base utilities for building Streamlit pages with common patterns.'''

import streamlit as st
import logging
from types import ModuleType
from typing import Any

from rbmigrate import common


class PageBuilder:
    '''Builder pattern for creating Streamlit pages with standardized structure.

    Handles common patterns across pages:
    - Logging initialization
    - Module header and overview display
    - Standard section separators and headers

    Example:
        page = PageBuilder(module_name='migrate', module_ref=migrate)
        page.initialize_logging()
        page.render_header_and_overview()
    '''

    def __init__(self, module_name: str, module_ref: ModuleType):
        '''Initialize the page builder.

        Args:
            module_name: Name of the module (e.g., 'migrate')
            module_ref: Reference to the module object for accessing __doc__
        '''
        self.module_name = module_name
        self.module_ref = module_ref

    def initialize_logging(self, level: int = logging.DEBUG) -> None:
        '''Configure logging for the page. Console output is left to the Streamlit server.'''
        common.configure_log(f"ui_{self.module_name}", level=level, console=False)

    def render_header_and_overview(self, expanded: bool = False) -> None:
        '''Render the module header and overview expander.'''
        st.header(f"{self.module_name} module")
        with st.expander('Overview', expanded=expanded):
            st.write(self.module_ref.__doc__)

    @staticmethod
    def render_path_input(label: str, config_value: str | None, error_msg: str) -> str:
        '''Renders a text input for a path with a default value from config.'''
        value = st.text_input(label, value=config_value or '')
        assert value is not None, error_msg
        return value

    @staticmethod
    def render_run_button() -> bool:
        return st.button('Run', type='primary', width='stretch')

    @staticmethod
    def create_center_context() -> Any:
        '''Returns the middle of three columns, for centered content.'''
        _, center, _ = st.columns([1, 2, 1])
        return center

    @staticmethod
    def render_section_separator() -> None:
        '''Render a horizontal separator line.'''
        st.write('---')

    @staticmethod
    def render_arguments_header() -> None:
        '''Render the standard 'Arguments' section header.'''
        st.write('##### Arguments')

    @staticmethod
    def render_results_header() -> None:
        st.write('##### Results')
