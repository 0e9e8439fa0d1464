'''Shared helpers for logging and command-line handling.'''

import argparse
import logging
import os
import sys

from . import config

LOG_FORMAT     = '[%(asctime)s] %(levelname)s %(module)s: %(message)s'
CONSOLE_FORMAT = '%(levelname)s: %(message)s'

def filename_no_ext(path: str) -> str:
    '''Returns the file name of the path without its extension.'''
    return os.path.splitext(os.path.basename(path))[0]

def configure_log(path: str, level: int = logging.DEBUG, console: bool = True) -> None:
    '''Configures logging to write to '<log dir>/<name>.log', where name is derived from `path`.

    Args:
        path: Module path or plain name used for the log file name.
        level: Level for the log file.
        console: Also log INFO and above to stderr.
    '''
    logs_path = str(config.LOG_DIR)
    if not os.path.exists(logs_path):
        os.makedirs(logs_path)

    filename = f"{logs_path}{os.sep}{filename_no_ext(path)}.log"
    logging.basicConfig(filename=filename,
                        level=level,
                        format=LOG_FORMAT,
                        filemode='w',
                        encoding='utf-8',
                        force=True)

    if console:
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(logging.INFO)
        handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        logging.getLogger().addHandler(handler)

def configure_log_module(module_path: str, level: int = logging.DEBUG, console: bool = True) -> None:
    '''Configures logging for a module run as a script, named after the module file.'''
    configure_log(module_path, level=level, console=console)

def log_dry_run(operation: str, details: str) -> None:
    '''Logs an operation that was skipped because of dry-run mode.'''
    logging.info(f"[DRY-RUN] Would {operation}: {details}")

def normalize_arg_paths(args: argparse.Namespace, names: list[str]) -> None:
    '''Normalizes each named path argument in place, skipping any that are unset.'''
    for name in names:
        value = getattr(args, name, None)
        if value:
            setattr(args, name, os.path.normpath(value))
