"""
Application constants for file and directory management.

This module defines the constants used throughout the Slide Normalizer
application for managing cache files, settings and log locations.
"""


APP_NAME = "GOOGLE SLIDES DECK NORMALIZER"


# Data Storage Constants
# ---------------------
DATA_FOLDER = '.data'
"""
Hidden folder for storing application data.
This folder is automatically created by the program and hidden from users
to prevent manual modification of the cached folder trees.
"""

TEACHER_CACHE_FILE = 'teacher_cache.json'
"""
JSON snapshot of the teacher folder tree.
Stored in the DATA_FOLDER to prevent accidental manual modification.
Format: JSON with folder IDs as keys, see FolderTreeCache.to_dict().
"""

STUDENTS_CACHE_FILE = 'students_cache.json'
"""
JSON snapshot of the students folder tree, mutated by the students flow
whenever a folder or a derived presentation is created on the fly.
"""

SETTINGS_FILE = 'settings.json'
"""
Optional JSON file overriding the template defaults of constants/template_data.py.
Looked up in the current working directory unless --settings is given.
"""

LOG_FILE = 'normalizer.log'
"""
Everything worth debugging is logged in this file.
"""

VERSION_FILE = 'version.json'
"""
Version information written on first run.
"""


# Google Drive Constants
# ---------------------
FOLDER_MIME_TYPE = 'application/vnd.google-apps.folder'
PRESENTATION_MIME_TYPE = 'application/vnd.google-apps.presentation'
PPTX_MIME_TYPE = 'application/vnd.openxmlformats-officedocument.presentationml.presentation'
