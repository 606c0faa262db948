"""
Inspection submission.

A submission is one unit of work: resolve the item and its item type, derive
the overall result from the subcheck statuses and the template mandatory
flags, enforce the comment-on-failure rule, then write the inspection and its
subcheck results, creating missing templates on the way. Any error rolls the
whole thing back. The caller gets the stored record re-read from the database.
"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from maintenance_service.errors import MaintenanceError, NotFoundError, StorageError, ValidationError
from maintenance_service.models.enums import InspectionCategory
from maintenance_service.models.inspection import Inspection, InspectionDraft, PersistedInspection, SubcheckResult
from maintenance_service.models.site import Item
from maintenance_service.services import catalog, rules
from maintenance_service.services.engineers import EngineerResolver
from maintenance_service.services.repository import InspectionRepository

logger = logging.getLogger(__name__)


class InspectionSubmissionEngine:
    """Validates and stores inspection drafts."""

    def __init__(
        self,
        session_factory: sessionmaker,
        engineer_resolver: Optional[EngineerResolver] = None,
        repository: Optional[InspectionRepository] = None,
    ):
        """
        Args:
            session_factory: storage handle; each submit() opens one transaction on it
            engineer_resolver: turns the draft's engineer fields into a user id,
                defaults to a resolver that never creates users
            repository: used to reload the stored inspection
        """
        self.session_factory = session_factory
        self.engineer_resolver = engineer_resolver or EngineerResolver()
        self.repository = repository or InspectionRepository(session_factory)

    def submit(self, draft: InspectionDraft) -> PersistedInspection:
        """
        Store one inspection with its subcheck results.

        Args:
            draft: the submitted inspection

        Returns:
            The inspection as stored, re-read from the database

        Raises:
            ValidationError: malformed draft or a failed inspection without a comment
            NotFoundError: unknown item or engineer
            StorageError: the database failed; nothing was written
        """
        errors = rules.draft_errors(draft)
        for subcheck in draft.subchecks:
            errors.extend(rules.subcheck_shape_errors(subcheck))
        if errors:
            logger.warning(f"Inspection draft rejected: {'; '.join(errors)}")
            raise ValidationError.from_errors(errors)

        try:
            with self.session_factory.begin() as session:
                inspection_id = self._write(session, draft)
        except MaintenanceError as e:
            logger.warning(f"Inspection for item {draft.item_id} rejected: {e.message}")
            raise
        except SQLAlchemyError as e:
            logger.error(f"Failed to store inspection for item {draft.item_id}: {e}")
            raise StorageError() from e

        saved = self.repository.get_by_id(inspection_id)
        if saved is None:
            raise StorageError("Failed to reload inspection after insert.")
        logger.info(f"Stored inspection {saved.inspection_id} for item {saved.item_id}: {saved.overall_result.value}")
        return saved

    def _write(self, session: Session, draft: InspectionDraft) -> int:
        category = InspectionCategory.parse(draft.inspection_category)

        item = session.get(Item, draft.item_id)
        if item is None:
            raise NotFoundError("Item", draft.item_id)

        item_type = catalog.resolve_item_type(session, category, item.item_type)
        mandatory_by_label = catalog.load_mandatory_map(session, item_type.item_type_id)

        overall = rules.aggregate_overall(draft.subchecks, mandatory_by_label)
        comment_errors = rules.require_comment_on_failure(overall, draft.comment)
        if comment_errors:
            raise ValidationError.from_errors(comment_errors)

        engineer_id = self.engineer_resolver.resolve(session, draft)

        comment = (draft.comment or "").strip() or None
        inspection = Inspection(
            inspection_date=rules.normalize_inspection_date(draft.inspection_date),
            inspection_category=category.value,
            item_id=item.item_id,
            engineer_id=engineer_id,
            comment=comment,
            overall_result=overall.value,
        )
        session.add(inspection)
        session.flush()

        # Sequential: templates created for earlier subchecks are read back by later ones
        for subcheck in draft.subchecks:
            # A new template gets the mandatory flag the overall result was computed with
            effective = subcheck.model_copy(
                update={"mandatory": mandatory_by_label.get(subcheck.subcheck_name, True)}
            )
            template = catalog.resolve_or_create_template(session, item_type.item_type_id, effective)
            session.add(
                SubcheckResult(
                    inspection_id=inspection.inspection_id,
                    subcheck_template_id=template.template_id,
                    subcheck_result_label=subcheck.subcheck_name,
                    subcheck_result_description=subcheck.subcheck_description,
                    value_type=template.value_type.value,
                    subcheck_result_mandatory=template.mandatory,
                    pass_criteria=template.pass_criteria,
                    result=subcheck.status,
                )
            )
            session.flush()

        return inspection.inspection_id
