import sys
import time
import argparse
import logging
import traceback

from helpers.init import setup
from helpers.auth_utils import get_credentials, build_services
from helpers.arbo_utils import save_folder_structure_to_excel
from helpers.batch_utils import SlidesBatchTransport
from helpers.cache_utils import JsonCacheStore
from helpers.config_utils import load_config
from helpers.documents_utils import process_folder, process_single, summarize
from helpers.drive_utils import GoogleDriveStore, parse_drive_url
from helpers.errors import DocumentProcessingError, NormalizerError, NotFoundError
from helpers.outcomes import FolderStarted
from helpers.reconcile_utils import ReconciliationEngine
from helpers.sheet_utils import GoogleSheetsStore
from helpers.students_utils import StudentsFlow
from helpers.sync_utils import StalenessGate
from helpers.thread_utils import process_documents_multithreaded
from helpers.tree_utils import FolderTreeCache
from helpers.validation_utils import AnimationValidator
from helpers.messages.intro import print_intro
from helpers.messages.outro import print_outro
from helpers.ProgressBar import ProgressBar
from constants.colors import RED, RESET, YELLOW, BOLD_CYAN, DARK_GRAY
from constants.app_data import LOG_FILE, TEACHER_CACHE_FILE, STUDENTS_CACHE_FILE


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="normalize",
        description="Normalize Google Slides presentations of a Drive folder tree to the course template.")

    parser.add_argument("-m", "--mode", choices=["teacher", "students"], type=str.lower,
                        help="'teacher' normalizes the teacher tree, 'students' derives copies from the manifest")
    parser.add_argument("-r", "--root-folder",
                        help="In teacher mode: process only this top-level folder (by name)")
    parser.add_argument("-p", "--presentation-id",
                        help="In teacher mode: work on this specific presentation only")
    parser.add_argument("-u", "--url",
                        help="Drive folder URL overriding the configured root of the selected mode")
    parser.add_argument("-s", "--sheet",
                        help="In students mode: process only this manifest tab")
    parser.add_argument("-t", "--skip-timestamp-check", action="store_true",
                        help="Process presentations even when their watermark says they are up to date")
    parser.add_argument("-c", "--clear-cache", action="store_true",
                        help="Clear the local folder tree caches and rebuild them from Drive")
    parser.add_argument("--validate-animations", action="store_true",
                        help="Export every processed presentation and flag slides missing a reveal animation")
    parser.add_argument("--export-tree", metavar="FILE.xlsx",
                        help="Write the cached folder tree to an Excel file")
    parser.add_argument("-w", "--workers", type=int, default=1,
                        help="Presentations processed in parallel in teacher mode (default: 1)")
    parser.add_argument("--stop-on-error", action="store_true",
                        help="Stop at the first presentation that fails")
    parser.add_argument("--settings", metavar="PATH",
                        help="Settings file overriding the template defaults (default: ./settings.json)")
    return parser, parser.parse_args(argv)


def validate_args(args):
    """
    Check the argument combinations.

    Returns:
        tuple: (exit_code, message) for the first violation, None when the arguments are valid
    """
    if args.mode == "teacher":
        if args.sheet is not None:
            return 1, "'--sheet' is valid only in 'students' mode"
        if args.presentation_id is not None and args.root_folder is not None:
            return 2, "Only one of '--root-folder', '--presentation-id' can be given in 'teacher' mode"
    elif args.mode == "students":
        if args.root_folder is not None:
            return 5, "'--root-folder' is valid only in 'teacher' mode"
        if args.presentation_id is not None:
            return 6, "'--presentation-id' is valid only in 'teacher' mode"
    elif not args.clear_cache:
        # Without a mode, only a cache rebuild makes sense
        return 8, "A mode is required: 'teacher' or 'students'"

    if args.workers < 1:
        return 9, "'--workers' must be at least 1"
    return None


def exit_with_usage(parser, code, message):
    print(f"\n{RED}{message}{RESET}")
    parser.print_usage()
    logging.error(f"Invalid arguments (exit code {code}): {message}")
    sys.exit(code)


def resolve_root(url, configured_root, mode):
    """Root folder id of the mode, from the --url option or the settings."""
    if url:
        target_id, target_type = parse_drive_url(url)
        if not target_id or target_type == "file":
            raise NormalizerError(f"Could not parse a Drive folder URL: {url}")
        return target_id

    if not configured_root:
        raise NormalizerError(f"No {mode} root folder configured: set '{mode}_root_id' in the settings "
                              f"or pass --url")
    return configured_root


def load_or_build_cache(cache_store, store, root_id, config, clear_cache=False):
    """
    Load the folder tree snapshot, or walk Drive and save a new one.
    """
    if clear_cache:
        cache_store.delete()

    cache = cache_store.load()
    if cache is not None:
        return cache

    print(f"Building the folder tree from Drive, this can take a while...")
    cache = FolderTreeCache.build(store, root_id, config.max_parents_per_query, config.page_size)
    cache.build_paths(config.path_start_level, config.path_separator, config.name_normalizer)
    cache_store.save(cache)
    print(f"Cached {BOLD_CYAN}{len(cache.nodes)}{RESET} folders and "
          f"{BOLD_CYAN}{cache.total_documents}{RESET} presentations")
    return cache


def rebuild_caches(args, config, store, teacher_store, students_store):
    """
    Clear and rebuild the cache of every mode that has a root folder.

    Returns:
        list: The modes whose cache was rebuilt

    Raises:
        NormalizerError: If no root folder is configured at all
    """
    rebuilt = []
    if config.teacher_root_id or args.url:
        root_id = resolve_root(args.url, config.teacher_root_id, "teacher")
        cache = load_or_build_cache(teacher_store, store, root_id, config, True)
        if args.export_tree:
            save_folder_structure_to_excel(cache, args.export_tree)
        rebuilt.append("teacher")

    if config.students_root_id:
        load_or_build_cache(students_store, store, config.students_root_id, config, True)
        rebuilt.append("students")

    if not rebuilt:
        raise NormalizerError("No cache to rebuild: set 'teacher_root_id' or 'students_root_id' in the settings "
                              "or pass --url")
    return rebuilt


def build_engine(config, store, transport, reporter=None):
    gate = StalenessGate(store, config.watermark_property, config.watermark_skew_seconds)
    validator = AnimationValidator(config) if config.validate_animations else None
    return ReconciliationEngine(config, store, transport, gate, validator=validator, reporter=reporter)


def make_engine_factory(creds, config, reporter):
    """Engine factory for worker threads, each engine gets its own API clients."""
    def factory():
        drive_service, slides_service, _ = build_services(creds)
        store = GoogleDriveStore(drive_service, slides_service)
        return build_engine(config, store, SlidesBatchTransport(slides_service), reporter)
    return factory


def run_teacher(parser, args, engine_factory, cache, reporter):
    engine = engine_factory()

    if args.presentation_id is not None:
        print(f"Processing specific teacher presentation: {BOLD_CYAN}{args.presentation_id}{RESET}")
        try:
            return [process_single(engine, cache, args.presentation_id, args.skip_timestamp_check)]
        except NotFoundError:
            exit_with_usage(parser, 3, f"Presentation {args.presentation_id} not found in cache")
        except DocumentProcessingError as e:
            return [e.outcome]

    if args.root_folder is not None:
        folder = cache.get_subfolder_by_name(args.root_folder)
        if folder is None:
            exit_with_usage(parser, 4, f"Teacher root folder {args.root_folder} not found in cache")
        folders = [folder]
    else:
        print(f"Start processing {BOLD_CYAN}{cache.total_documents}{RESET} teacher presentations...")
        folders = list(cache.folders.values())

    outcomes = []
    for folder in folders:
        if args.workers > 1:
            reporter.folder_started(FolderStarted(folder.name, folder.total_documents))
            documents = [ref for ref, _ in cache.iter_documents(folder.id)]
            outcomes.extend(process_documents_multithreaded(
                engine_factory, documents, args.workers, args.skip_timestamp_check, args.stop_on_error))
            if args.stop_on_error and summarize(outcomes)['errors']:
                break
        else:
            outcomes.extend(process_folder(engine, cache, folder, args.skip_timestamp_check,
                                           args.stop_on_error, reporter))
    return outcomes


def run_students(parser, args, config, engine, store, sheets, cache, cache_store, root_id, reporter):
    flow = StudentsFlow(config, store, sheets, cache, engine, root_id, reporter)

    try:
        if args.sheet is not None:
            if args.sheet not in sheets.list_sheets():
                exit_with_usage(parser, 7, f"Sheet {args.sheet} does not exist")
            print(f"Processing student presentations, only for sheet {BOLD_CYAN}{args.sheet}{RESET}...")
            return flow.process_sheet(args.sheet, args.skip_timestamp_check, args.stop_on_error)

        print("Processing students presentations...")
        return flow.process_all(args.skip_timestamp_check, args.stop_on_error)
    finally:
        # Folders and copies created so far must survive a failure
        cache_store.save(cache)


def main(argv=None):
    """
    Main function to run the normalizer.
    """
    setup()
    logging.basicConfig(filename=LOG_FILE, level=logging.INFO,
                        format='%(asctime)s - %(levelname)s - %(message)s')

    parser, args = parse_args(argv)
    invalid = validate_args(args)
    if invalid:
        exit_with_usage(parser, *invalid)

    print_intro()
    logging.info(f"Started with arguments: {vars(args)}")
    start_time = time.time()

    try:
        config = load_config(args.settings, validate_animations=args.validate_animations or None)

        creds = get_credentials()
        drive_service, slides_service, sheets_service = build_services(creds)
        store = GoogleDriveStore(drive_service, slides_service)

        teacher_store = JsonCacheStore(TEACHER_CACHE_FILE)
        students_store = JsonCacheStore(STUDENTS_CACHE_FILE)

        if args.mode is None:
            rebuilt = rebuild_caches(args, config, store, teacher_store, students_store)
            print(f"\n{YELLOW}Caches rebuilt: {', '.join(rebuilt)}.{RESET}")
            return

        if args.mode == "teacher":
            root_id = resolve_root(args.url, config.teacher_root_id, "teacher")
            cache = load_or_build_cache(teacher_store, store, root_id, config, args.clear_cache)
            if args.export_tree:
                save_folder_structure_to_excel(cache, args.export_tree)

            reporter = ProgressBar(cache.total_documents)
            outcomes = run_teacher(parser, args, make_engine_factory(creds, config, reporter),
                                   cache, reporter)
        else:
            root_id = resolve_root(args.url, config.students_root_id, "students")
            if not config.manifest_spreadsheet_id:
                raise NormalizerError("No manifest configured: set 'manifest_spreadsheet_id' in the settings")

            cache = load_or_build_cache(students_store, store, root_id, config, args.clear_cache)
            if args.export_tree:
                save_folder_structure_to_excel(cache, args.export_tree)

            reporter = ProgressBar()
            engine = build_engine(config, store, SlidesBatchTransport(slides_service), reporter)
            sheets = GoogleSheetsStore(sheets_service, config.manifest_spreadsheet_id)
            outcomes = run_students(parser, args, config, engine, store, sheets, cache, students_store,
                                    root_id, reporter)

        elapsed = int(time.time() - start_time)
        hours, remainder = divmod(elapsed, 3600)
        minutes, seconds = divmod(remainder, 60)
        summary = summarize(outcomes)
        print_outro(summary, hours, minutes, seconds)

        if summary['errors']:
            sys.exit(1)

    except DocumentProcessingError as e:
        logging.error(f"Stopped on error: {e}")
        print(f"\n{RED}Stopped on error: {e.outcome.document_name}: {e}{RESET}")
        print(f"{DARK_GRAY}See {LOG_FILE} for details.{RESET}")
        sys.exit(1)
    except Exception as e:
        logging.error(f"Normalization failed: {str(e)}")
        logging.error(traceback.format_exc())
        print(f"\n{RED}Normalization failed: {str(e)}{RESET}")
        print("See log for details.")
        sys.exit(1)


if __name__ == '__main__':
    main()
