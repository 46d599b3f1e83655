from constants.colors import GREEN, RED, RESET, YELLOW, DARK_GRAY, BOLD_CYAN
from constants.app_data import APP_NAME, LOG_FILE
import logging

def print_outro(summary, hours, minutes, seconds):

    """
    Print the outro message

    Args:
        summary (dict): Tallies from documents_utils.summarize (processed, skipped, errors, findings)
        hours (int): The number of hours taken to normalize the presentations
        minutes (int): The number of minutes taken to normalize the presentations
        seconds (int): The number of seconds taken to normalize the presentations
    """

    logging.info(f"Processed: {summary['processed']}, skipped: {summary['skipped']}, "
                 f"errors: {summary['errors']}, findings: {len(summary['findings'])}")

    print()
    print("="*50)
    if summary['errors']:
        print(f"{RED}⚠️ Normalization finished with {summary['errors']} errors{RESET}")
        print(f"See {BOLD_CYAN}{LOG_FILE}{RESET} for the details")
    else:
        print(f"{GREEN}✅ Normalization Completed!{RESET}")

    print(f"📋 Presentations:")
    print(f"  • Processed: {summary['processed']}")
    print(f"  • Skipped (up to date): {summary['skipped']}")
    print(f"  • Errors: {summary['errors']}")

    if summary['findings']:
        print(f"\n🔎 Findings to review by hand:")
        for finding in summary['findings']:
            print(f"  • {finding.document_id} | slide {finding.slide_index + 1} | {finding.message}")

    print(f"\n🕑 Total time taken: {hours:02d}:{minutes:02d}:{seconds:02d}")
    print("\n")
    print(f"{YELLOW}Thank you for using the {APP_NAME}!{RESET}")
    print(f"{DARK_GRAY}Run again any time: unchanged presentations are skipped.{RESET}")
    print("="*50 + "\n")
