import time
import logging
import threading
import traceback
from queue import Queue, Empty

from helpers.errors import DocumentProcessingError
from helpers.outcomes import DocumentError


def process_documents_multithreaded(engine_factory, documents, max_workers=4, skip_check=False,
                                    stop_on_error=False):
    """
    Normalize presentations with a bounded pool of worker threads.

    Each presentation is handled start to finish by a single worker, so the
    edits of one presentation stay strictly ordered. Google API clients are not
    thread-safe: every worker builds its own engine through `engine_factory`.

    Args:
        engine_factory: Callable returning a new ReconciliationEngine
        documents: Iterable of DocumentRef
        max_workers: Maximum number of threads to use (default: 4, capped at 15)
        skip_check: Ignore the watermarks
        stop_on_error: Stop handing out presentations after the first failure

    Returns:
        List of outcomes, in completion order. Any failure, including an engine
        that cannot be built, yields a DocumentError for the presentations involved.
    """
    document_queue = Queue()
    for ref in documents:
        document_queue.put(ref)

    total = document_queue.qsize()
    outcomes = []
    outcomes_lock = threading.Lock()
    error_counter = {'count': 0}
    error_lock = threading.Lock()
    startup_errors = []
    shutdown_flag = threading.Event()
    start_time = time.time()

    # Cap the max workers to a reasonable number
    max_workers = max(1, min(max_workers, 15, total or 1))
    logging.info(f"Starting {max_workers} worker threads for {total} presentations")

    def record_error(outcome):
        with error_lock:
            error_counter['count'] += 1
        if stop_on_error:
            shutdown_flag.set()
        return outcome

    def process_document():
        """Worker function to process presentations from the queue"""
        try:
            engine = engine_factory()
        except Exception as e:
            logging.error(f"Worker thread could not build its engine: {str(e)}")
            logging.error(traceback.format_exc())
            with error_lock:
                startup_errors.append(str(e))
            if stop_on_error:
                shutdown_flag.set()
            return

        while not shutdown_flag.is_set():
            try:
                ref = document_queue.get(timeout=0.5)
            except Empty:
                break

            try:
                outcome = engine.process_document(ref, skip_check)
            except DocumentProcessingError as e:
                outcome = record_error(e.outcome)
            except Exception as e:
                logging.error(f"Worker thread error on {ref.name} ({ref.id}): {str(e)}")
                logging.error(traceback.format_exc())
                outcome = record_error(DocumentError(ref.id, ref.name, 0, str(e)))
            finally:
                document_queue.task_done()

            with outcomes_lock:
                outcomes.append(outcome)

    worker_threads = []
    try:
        for _ in range(max_workers):
            thread = threading.Thread(target=process_document)
            thread.daemon = True
            thread.start()
            worker_threads.append(thread)

        for thread in worker_threads:
            thread.join()

    except KeyboardInterrupt:
        logging.warning("User interrupted process, waiting for running presentations to finish")
        shutdown_flag.set()
        for thread in worker_threads:
            thread.join()

    if startup_errors:
        # Presentations left in the queue by workers that never started
        while True:
            try:
                ref = document_queue.get_nowait()
            except Empty:
                break
            error_counter['count'] += 1
            outcomes.append(DocumentError(ref.id, ref.name, 0, f"Not processed: {startup_errors[0]}"))

    elapsed_time = time.time() - start_time
    logging.info(f"Processed {len(outcomes)}/{total} presentations in {elapsed_time:.1f} seconds, "
                 f"{error_counter['count']} errors")
    return outcomes
