"""Home page of the rbmigrate UI: Rhythmbox directory status and saved settings."""
import os

import pandas as pd
import streamlit as st

from rbmigrate import config, constants, migrate
from rbmigrate.ui.utils.config import AppConfig, Key
from rbmigrate.ui.utils.page_base import PageBuilder

# Constants
SETTING_LABEL = 'Setting'
VALUE_LABEL   = 'Value'

def render_rhythmbox_status(rhythmbox_path: str) -> None:
    '''Shows which Rhythmbox files are present and warns about backups that would block a run.'''
    st.write(f"Rhythmbox directory: `{rhythmbox_path}`")
    files = [
        {'File' : name, 'Present' : os.path.exists(os.path.join(rhythmbox_path, name))}
        for name in (constants.RHYTHMDB_FILENAME, constants.PLAYLISTS_FILENAME)
    ]
    st.dataframe(pd.DataFrame(files), hide_index=True)

    backups = migrate.existing_backups(rhythmbox_path)
    if backups:
        st.warning('A migration will not start while these backups exist:\n\n'
                   + '\n'.join(f"- `{path}`" for path in backups))
    else:
        st.success('No backups found, a migration can run')

# Streamlit view setup
st.set_page_config(layout="wide")
st.title("rbmigrate")

app_config = AppConfig.load()

# Rhythmbox directory
st.write('### Rhythmbox')
render_rhythmbox_status(app_config.rhythmbox_path or str(config.default_rhythmbox_path()))

PageBuilder.render_section_separator()

# Settings, one editable row per key
st.write('### Settings')
edited_rows = st.data_editor(
    [{SETTING_LABEL : key, VALUE_LABEL : value} for key, value in app_config.to_dict().items()],
    column_config={
        SETTING_LABEL : st.column_config.TextColumn(SETTING_LABEL, disabled=True),
        VALUE_LABEL   : st.column_config.TextColumn(VALUE_LABEL),
    },
    hide_index=True,
    num_rows='fixed',
)
edited_config = AppConfig({Key(row[SETTING_LABEL]): row[VALUE_LABEL] or None for row in edited_rows})

center = PageBuilder.create_center_context()
with center:
    if st.button('Save Settings', type='primary', width='stretch'):
        errors = edited_config.validate()
        if errors:
            for error in errors:
                st.error(error)
        else:
            AppConfig.save(edited_config)
            st.rerun()

PageBuilder.render_section_separator()
st.write('#### 👈  Open the migrate page from the left sidebar.')
