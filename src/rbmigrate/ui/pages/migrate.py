import streamlit as st
import pandas as pd
import logging

from rbmigrate import config, migrate
from rbmigrate.ui.utils.config import AppConfig
from rbmigrate.ui.utils.page_base import PageBuilder

# Constants
MODULE = 'migrate'

def render_table(title: str, rows: list[dict[str, object]]) -> None:
    '''Renders `rows` as a dataframe under a subheader, or a note when there are none.'''
    st.write(f'###### {title} ({len(rows)})')
    if not rows:
        st.caption('None')
        return
    df = pd.DataFrame(rows)
    st.dataframe(df, hide_index=True, width='stretch', height=min((len(df) + 1) * 35, 400))

# Page initialization
page = PageBuilder(module_name=MODULE, module_ref=migrate)
page.initialize_logging()
page.render_header_and_overview()

# Function arguments
page.render_arguments_header()

# Load app config
app_config = AppConfig.load()

itunes_library_path = page.render_path_input('iTunes Library Path', app_config.itunes_library_path, 'Unable to load iTunes library path')
rhythmbox_path = page.render_path_input('Rhythmbox Path',
                                        app_config.rhythmbox_path or str(config.default_rhythmbox_path()),
                                        'Unable to load Rhythmbox path')
unknown_artist = st.text_input('Unknown Artist', value=app_config.unknown_artist or config.UNKNOWN_ARTIST)
dry_run = st.checkbox('Dry Run', value=True)

# Separator between Arguments and Run sections
page.render_section_separator()

# Handle Run button
run_clicked = page.render_run_button()
if run_clicked:
    if not itunes_library_path or not rhythmbox_path:
        st.error('iTunes Library Path and Rhythmbox Path are required')
    else:
        try:
            center = page.create_center_context()
            with center:
                with st.spinner('Migrating...'):
                    result = migrate.run_migration(itunes_library_path, rhythmbox_path,
                                                   unknown_artist=unknown_artist, dry_run=dry_run)

            page.render_results_header()
            if dry_run:
                st.info('Dry run: no file was written')
            st.success(f'Updated {result.sync.matched} songs and migrated {len(result.playlists.playlists)} playlists')

            render_table('Songs Not Found', [
                {'Title' : key.name, 'Artist' : key.artist or '', 'Album' : key.album or '',
                 'Disc' : key.disc_number, 'Track' : key.track_number}
                for key in result.sync.unmatched
            ])
            render_table('Unused iTunes Tracks', [
                {'Name' : track.name, 'Artist' : track.artist or '', 'Album' : track.album or '', 'Location' : track.location}
                for track in result.sync.unused
            ])
            render_table('Overridden Values', [
                {'Song' : str(overwrite.key), 'Field' : overwrite.tag, 'Old' : overwrite.old, 'New' : overwrite.new}
                for overwrite in result.sync.overwrites
            ])
            render_table('Playlists', [
                {'Name' : playlist.name, 'Items' : playlist.resolved, 'Not Found' : playlist.unfound}
                for playlist in result.playlists.playlists
            ])
            if result.playlists.skipped_smart:
                st.warning(f"Skipped smart playlists: {', '.join(result.playlists.skipped_smart)}")

            # Update config
            app_config.itunes_library_path = itunes_library_path
            app_config.rhythmbox_path = rhythmbox_path
            app_config.unknown_artist = unknown_artist
            AppConfig.save(app_config)

        except migrate.MigrationError as e:
            st.error(f'Migration failed: {migrate.format_error(e)}')
            logging.error(f'Error in {MODULE}: {e}', exc_info=True)
