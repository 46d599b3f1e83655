import os
import json

from constants.app_data import LOG_FILE, VERSION_FILE
from helpers.cache_utils import ensure_data_folder


def setup():
    """
    This function initializes the application by creating the version file, the
    log file and the hidden data folder if they don't exist.
    All of them are needed for the app to work.
    """
    create_version_file()
    create_log_file()
    ensure_data_folder(os.getcwd())


def create_version_file():
    """
    This function initializes the version file if it doesn't exist.
    Contains the commit sha, commit date and commit message.

    It is read by the intro message when the app does not run from a Git repository.
    """
    if not os.path.exists(VERSION_FILE):
        default_version_file = os.path.join(os.getcwd(), VERSION_FILE)
        with open(default_version_file, "w") as f:
            json.dump({"commit_sha": "", "commit_date": "", "commit_message": "Initial version"}, f)


def create_log_file():
    """
    This function initializes the log file if it doesn't exist.

    Every decision of the normalizer is logged in this file.
    Use to debug the app.
    """
    if not os.path.exists(LOG_FILE):
        default_log_file = os.path.join(os.getcwd(), LOG_FILE)
        with open(default_log_file, "w") as f:
            f.write("")
