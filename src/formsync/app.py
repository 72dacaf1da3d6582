"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING, Any

from formsync.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork
from formsync.config.form_fields import get_form_fields_config
from formsync.domain.ports.unit_of_work import UnitOfWork
from formsync.domain.projection import RepeaterProjector
from formsync.domain.reconciliation import ReconciliationContext, RepeaterReconciler

if TYPE_CHECKING:
    from collections.abc import Mapping

    from formsync.config.form_fields import FormFieldsConfig
    from formsync.domain.catalog import RepeaterCatalog
    from formsync.domain.projection import ProjectedFieldSet
    from formsync.domain.reconciliation import ReconciliationResult
    from formsync.domain.types import ParentEntity

UnitOfWorkFactory = Callable[[], UnitOfWork]


log = getLogger(__name__)


def save_repeaters(
    parent: ParentEntity,
    fields: Mapping[str, Any],
    *,
    context: ReconciliationContext | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[ReconciliationResult]:
    """Reconcile every repeater of ``parent`` and commit, or roll everything back on error.

    Pass the same ``context`` to successive saves of one editing session so
    client tokens registered by earlier steps keep resolving.
    """

    effective_uow = unit_of_work_factory or SqlAlchemyUnitOfWork
    context = context or ReconciliationContext()
    with effective_uow() as uow:
        reconciler = RepeaterReconciler(uow.repositories, context)
        results = reconciler.reconcile_all(parent, fields)
        uow.commit()

    log.info(
        "Saved %s repeaters for %s #%s",
        len(results),
        parent.entity_type,
        parent.id,
    )
    return results


def load_repeater_fields(
    parent: ParentEntity,
    *,
    catalog: RepeaterCatalog,
    config: FormFieldsConfig | None = None,
    fieldset: ProjectedFieldSet | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> dict[str, dict[str, Any]]:
    """Project every repeater of ``parent`` into the flat form payload."""

    effective_uow = unit_of_work_factory or SqlAlchemyUnitOfWork
    effective_config = config or get_form_fields_config()
    with effective_uow() as uow:
        projector = RepeaterProjector(uow.repositories, catalog, effective_config)
        projected = projector.project_all(parent, fieldset)
    return projected.to_payload()
