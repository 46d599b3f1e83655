import enum
import logging
import traceback

from constants.app_data import PPTX_MIME_TYPE
from helpers.batch_utils import BatchEditBuilder, created_object_id
from helpers.errors import DocumentProcessingError
from helpers.locator_utils import ROLES, TemplateElementLocator
from helpers.outcomes import DocumentError, DocumentProcessed, DocumentSkipped, ValidationFinding
from helpers.text_utils import count_text_elements, extract_shape_text, find_speaker_notes, text_runs, visible_text


class Stage(enum.Enum):
    LOADED = "Loaded"
    EMPTY_BOARD_ENSURED = "EmptyBoardEnsured"
    SLIDES_RECONCILED = "SlidesReconciled"
    TOC_ENSURED = "TocEnsured"
    VALIDATED = "Validated"
    MARKED = "Marked"
    DONE = "Done"


class ReconciliationEngine:
    """
    Bring one presentation in line with the template, touching only what differs.

    A pass goes Loaded -> EmptyBoardEnsured -> SlidesReconciled -> TocEnsured ->
    Validated -> Marked -> Done. Every decision is taken on a single snapshot of
    the presentation, fetched again only after a slide was created. An element
    that already matches the template produces no request at all, so a
    conforming presentation costs zero edits.
    """

    def __init__(self, config, store, transport, gate, locator=None, validator=None, reporter=None):
        self.config = config
        self.store = store
        self.transport = transport
        self.gate = gate
        self.locator = locator or TemplateElementLocator(config)
        self.validator = validator
        self.reporter = reporter
        self.stage = None

    def _report(self, outcome):
        if self.reporter is not None:
            self.reporter.record(outcome)

    def _enter(self, stage, doc_ref):
        self.stage = stage
        logging.info(f"{doc_ref.name} ({doc_ref.id}): {stage.value}")

    #region Process Document
    def process_document(self, doc_ref, skip_check=False):
        """
        Normalize one presentation if it changed since its last pass.

        Args:
            doc_ref (DocumentRef): The cached presentation (footer text comes from it)
            skip_check (bool): Ignore the watermark and process anyway

        Returns:
            DocumentProcessed | DocumentSkipped: The outcome, also sent to the reporter

        Raises:
            DocumentProcessingError: Carrying the DocumentError outcome. The watermark
                is left untouched so the presentation is retried on the next run.
        """
        self.stage = None
        try:
            if not self.gate.should_process(doc_ref.id, skip_check):
                outcome = DocumentSkipped(doc_ref.id, doc_ref.name, "not modified since last normalization")
                logging.info(f"Skipping {doc_ref.name} ({doc_ref.id}): {outcome.reason}")
                self._report(outcome)
                return outcome

            findings = self.reconcile(doc_ref)

            self._enter(Stage.VALIDATED, doc_ref)
            if self.config.validate_animations and self.validator is not None:
                pptx_bytes = self.store.export_as(doc_ref.id, PPTX_MIME_TYPE)
                findings.extend(self.validator.inspect(doc_ref.id, pptx_bytes))

            self._enter(Stage.MARKED, doc_ref)
            self.gate.mark_processed(doc_ref.id)
        except Exception as e:
            stage = self.stage.value if self.stage else "StalenessCheck"
            outcome = DocumentError(doc_ref.id, doc_ref.name, 0, f"{stage}: {e}")
            logging.error(f"Error processing presentation {doc_ref.name} ({doc_ref.id}) at {stage}: {e}")
            logging.error(traceback.format_exc())
            self._report(outcome)
            raise DocumentProcessingError(outcome) from e

        self._enter(Stage.DONE, doc_ref)
        for finding in findings:
            logging.warning(f"{doc_ref.name}: slide {finding.slide_index + 1}: {finding.message}")

        outcome = DocumentProcessed(doc_ref.id, doc_ref.name, tuple(findings))
        self._report(outcome)
        return outcome

    def reconcile(self, doc_ref):
        """
        Run the edit stages on the presentation and return the validation findings.
        """
        builder = BatchEditBuilder(self.transport, doc_ref.id)

        self._enter(Stage.LOADED, doc_ref)
        presentation = self.store.get_document(doc_ref.id)

        presentation = self._ensure_blank_board(doc_ref, presentation, builder)
        self._enter(Stage.EMPTY_BOARD_ENSURED, doc_ref)

        slides = presentation.get('slides', [])
        findings = []
        for slide_index in range(len(slides) - 1):
            findings.extend(self._reconcile_slide(doc_ref, slides, slide_index, builder))
        self._enter(Stage.SLIDES_RECONCILED, doc_ref)

        self._ensure_toc(doc_ref, slides, builder)
        self._enter(Stage.TOC_ENSURED, doc_ref)

        return findings
    #endregion

    #region Blank Board
    def _ensure_blank_board(self, doc_ref, presentation, builder):
        """
        Make sure the last slide is an empty board, return the (possibly refreshed) snapshot.
        """
        slides = presentation.get('slides', [])
        last_slide = slides[-1] if slides else None

        if last_slide is None or len(last_slide.get('pageElements', [])) > self.config.blank_board_max_elements:
            builder.reset()
            builder.add_create_slide(len(slides), self.config.blank_board_layout_id)
            builder.execute()
            logging.info(f"{doc_ref.name}: blank board created at position {len(slides)}")
            return self.store.get_document(doc_ref.id)

        builder.reset()
        for element in last_slide.get('pageElements', []):
            if extract_shape_text(element):
                builder.add_delete_text(element['objectId'])
        builder.execute()
        return presentation
    #endregion

    #region Slides
    def _reconcile_slide(self, doc_ref, slides, slide_index, builder):
        slide = slides[slide_index]
        classification = self.locator.classify(slide)
        findings = self._validate_header(doc_ref, slide_index, classification.header)

        builder.reset()
        self._align_image(builder, classification)
        self._ensure_navigation(builder, slide)

        desired = {}
        created = {}
        for role in ROLES:
            if role == "header" and classification.header is not None and findings:
                # Invalid headers are reported, never corrected
                continue

            wanted = self._desired(role, doc_ref, slides, slide_index)
            if wanted is None:
                continue

            element = getattr(classification, role)
            if element is not None and self._element_matches(role, element, wanted):
                continue

            template = getattr(self.config, role)
            if element is not None:
                builder.add_delete_object(element.object_id)
            desired[role] = wanted
            created[role] = builder.add_create_shape(slide['objectId'], template.size.to_api(),
                                                     template.transform.to_api())

        for stray_id in classification.stray_ids:
            builder.add_delete_object(stray_id)

        replies = builder.execute()

        # Text cannot be attached in the request that creates the box
        for role in ROLES:
            if role not in created:
                continue
            object_id = created_object_id(replies, created[role])
            if object_id is None:
                raise ValueError(f"No object id returned for the {role} of slide {slide_index + 1}")
            self._populate(builder, role, object_id, *desired[role])

        return findings

    def _desired(self, role, doc_ref, slides, slide_index):
        """(text, link) the role must hold on this slide, None when the role is not reconciled here."""
        if role == "header":
            if self.config.header_text is None:
                return None
            return self.config.header_text.format(name=doc_ref.name), None

        if role == "footer":
            if slide_index >= len(slides) - 2 or not doc_ref.footer_text:
                return None
            return doc_ref.footer_text, None

        return str(slide_index + 1), self.config.page_id_link

    def _element_matches(self, role, element, wanted):
        text, link = wanted
        template = getattr(self.config, role)
        if element.text != text or not template.size.matches(element.size):
            return False
        return element.link == link if role == "page_id" else True

    def _populate(self, builder, role, object_id, text, link):
        template = getattr(self.config, role)

        builder.reset()
        builder.add_insert_text(object_id, text)
        builder.add_update_text_style(object_id, template.text_style, template.text_style_fields,
                                      link={'relativeLink': link} if link else None)
        if template.paragraph_style:
            builder.add_update_paragraph_style(object_id, template.paragraph_style,
                                               template.paragraph_style_fields)
        builder.execute()

    def _validate_header(self, doc_ref, slide_index, header):
        if header is None:
            if self.config.header_text is not None:
                return []
            return [ValidationFinding(doc_ref.id, slide_index, "missing header")]

        marker = self.config.header_forbidden_marker
        if not (header.text and header.text.strip()):
            return [ValidationFinding(doc_ref.id, slide_index, "missing header text")]
        if marker and marker in header.text:
            return [ValidationFinding(doc_ref.id, slide_index, f"header contains '{marker}'")]
        return []

    def _align_image(self, builder, classification):
        image = classification.image
        if image is None or classification.element_count != self.config.template_slide_element_count:
            return

        current_y = image.transform.get('translateY', 0)
        target_y = min((self.config.image_top_y, self.config.image_bottom_y),
                       key=lambda y: abs(y - current_y))
        if current_y == target_y:
            return

        transform = dict(image.transform)
        transform['translateY'] = target_y
        transform.setdefault('unit', 'EMU')
        builder.add_update_transform(image.object_id, transform)

    def _ensure_navigation(self, builder, slide):
        """
        Speaker notes must hold the linked labels First, Prev, Next, Last (each followed by a tab).
        """
        notes = find_speaker_notes(slide)
        if notes is None:
            return

        labels = [(label + "\t", link) for label, link in self.config.navigation_labels]
        observed_text = visible_text(notes) or ""
        observed_links = [(content.rstrip("\n"), link) for content, link in text_runs(notes) if link]
        if observed_text == "".join(text for text, _ in labels) and observed_links == labels:
            return

        notes_id = notes['objectId']
        if extract_shape_text(notes) is not None:
            builder.add_delete_text(notes_id)

        start_index = 0
        for text, link in labels:
            builder.add_insert_text(notes_id, text, start_index)
            builder.add_update_text_style(notes_id, self.config.link_text_style, self.config.link_text_style_fields,
                                          start_index, start_index + len(text), link={'relativeLink': link})
            start_index += len(text)

        builder.add_update_paragraph_style(notes_id, self.config.notes_paragraph_style,
                                           self.config.notes_paragraph_style_fields)
    #endregion

    #region Table Of Contents
    def _ensure_toc(self, doc_ref, slides, builder):
        """
        The blank board notes list a linked two-digit label per slide, each followed by a tab.

        Checked structurally: N labels and N tabs plus the paragraph marker give
        exactly 2N+1 text elements. Anything else is rebuilt from scratch.
        """
        slide_count = len(slides) - 1
        if slide_count < 1:
            return

        notes = find_speaker_notes(slides[-1])
        if notes is None:
            logging.warning(f"{doc_ref.name}: blank board has no speaker notes, table of contents skipped")
            return

        if count_text_elements(notes) == 2 * slide_count + 1:
            return

        notes_id = notes['objectId']
        builder.reset()
        if extract_shape_text(notes) is not None:
            builder.add_delete_text(notes_id)

        start_index = 0
        for slide_index in range(slide_count):
            label = f"{slide_index + 1:02d}"
            builder.add_insert_text(notes_id, label + "\t", start_index)
            builder.add_update_text_style(notes_id, self.config.link_text_style, self.config.link_text_style_fields,
                                          start_index, start_index + len(label),
                                          link={'pageObjectId': slides[slide_index]['objectId']})
            start_index += len(label) + 1

        builder.add_update_paragraph_style(notes_id, self.config.notes_paragraph_style,
                                           self.config.notes_paragraph_style_fields)
        builder.execute()
        logging.info(f"{doc_ref.name}: table of contents rebuilt for {slide_count} slides")
    #endregion
