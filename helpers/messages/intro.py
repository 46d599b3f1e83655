import os
import json
import subprocess
from constants.colors import BOLD_CYAN, RESET, YELLOW, RED, DARK_GRAY
from constants.app_data import APP_NAME, DATA_FOLDER, VERSION_FILE

def print_intro():

    """
    Print the intro message

    """

    print("\n\n")
    print("="*50)
    print(f"{BOLD_CYAN}{APP_NAME}{RESET}")

    last_updated = get_last_commit_time()
    print(f"{DARK_GRAY}Last updated: {last_updated}{RESET}")
    print("="*50)
    print("")
    print(f"{YELLOW}📋 PURPOSE:{RESET}")
    print("This tool brings every Google Slides presentation of a Drive folder tree in line")
    print("with the course template: headers, footers, page numbers, navigation links")
    print("and a table of contents on the last slide.")
    print("")
    print(f"{YELLOW}🔄 FIRST-TIME SETUP:{RESET}")
    print(f"• A hidden folder named {BOLD_CYAN}{DATA_FOLDER}{RESET} will be created in your current directory")
    print("  to cache the folder trees between runs")
    print("• Use --clear-cache after moving or renaming folders in Drive")
    print("")
    print(f"{RED}⚠️ IMPORTANT:{RESET}")
    print("• Presentations are edited in place")
    print("• Elements placed at the template positions are replaced when they differ")
    print("="*50)

def get_last_commit_time():
    try:
        commit_time = subprocess.check_output(
            ["git", "log", "-1", "--format=%cd", "--date=iso"],
            text=True, stderr=subprocess.DEVNULL
        ).strip()
        return commit_time
    except (subprocess.CalledProcessError, FileNotFoundError):
        if os.path.exists(VERSION_FILE):
            with open(VERSION_FILE, "r") as f:
                commit_date = json.load(f).get("commit_date")
            if commit_date:
                return commit_date
        return "Unknown (not a Git repository)"
