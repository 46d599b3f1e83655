import os
import pickle
import sys
from google.auth.transport.requests import Request
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build

from constants.colors import RED, RESET, YELLOW

SCOPES = [
    'https://www.googleapis.com/auth/drive',
    'https://www.googleapis.com/auth/presentations',
    'https://www.googleapis.com/auth/spreadsheets',
]

TOKEN_FILE = 'token.pickle'
CREDENTIALS_FILE = 'credentials.json'


def get_credentials():
    """Authenticate with the Drive, Slides and Sheets scopes and return the credentials."""
    creds = None

    print(f"\nTrying to authenticate...")

    if os.path.exists(TOKEN_FILE):
        with open(TOKEN_FILE, 'rb') as token:
            creds = pickle.load(token)

    # A token saved with fewer scopes must go through the consent screen again
    if creds and not creds.has_scopes(SCOPES):
        creds = None

    if not creds or not creds.valid:
        if creds and creds.expired and creds.refresh_token:
            try:
                print(f"Refreshing credentials...")
                creds.refresh(Request())
                print(f"Credentials refreshed")
            except Exception as e:
                print(f"{RED}Failed to refresh credentials: {e}{RESET}")
                sys.exit(1)
        else:
            if not os.path.exists(CREDENTIALS_FILE):
                print("\n")
                print(f"{RED}{CREDENTIALS_FILE} not found in the root directory{RESET}")
                print("Please follow the instructions [here](https://developers.google.com/workspace/guides/create-credentials)")
                print("Make sure to select Desktop app as the application type")
                print(f"Download the credentials file and rename it to {YELLOW}{CREDENTIALS_FILE}{RESET}")
                print("Place the file in the root directory")
                print("Run the script again")
                print(f"{RED}Exiting the script...{RESET}")
                sys.exit(1)
            else:
                print("\n")
                print(f"Authenticating using {CREDENTIALS_FILE}...")
                try:
                    flow = InstalledAppFlow.from_client_secrets_file(CREDENTIALS_FILE, SCOPES)
                    creds = flow.run_local_server(port=0)
                except Exception as e:
                    print(f"{RED}Failed to authenticate using {CREDENTIALS_FILE}: {e}{RESET}")
                    print(f"{RED}Exiting the script...{RESET}")
                    sys.exit(1)

        # Save the valid credentials
        if creds and creds.valid:
            with open(TOKEN_FILE, 'wb') as token:
                pickle.dump(creds, token)
        else:
            print(f"{RED}Invalid credentials. Exiting...{RESET}")
            sys.exit(1)

    print(f"Authentication successful!")
    return creds


def build_services(creds):
    """
    Build new Drive, Slides and Sheets clients.

    The underlying HTTP objects are not thread-safe, every worker thread calls
    this with the shared credentials to get its own clients.

    Returns:
        tuple: (drive_service, slides_service, sheets_service)
    """
    drive_service = build('drive', 'v3', credentials=creds, cache_discovery=False)
    slides_service = build('slides', 'v1', credentials=creds, cache_discovery=False)
    sheets_service = build('sheets', 'v4', credentials=creds, cache_discovery=False)
    return drive_service, slides_service, sheets_service
