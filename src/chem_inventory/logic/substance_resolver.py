"""
Substance resolution: reuse an existing substance or import it from the registry.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from aws_lambda_powertools.metrics import MetricUnit

from chem_inventory.dal.dynamodb_handler import ConditionalCheckFailedError, DALError
from chem_inventory.dal.inventory_store import InventoryStore
from chem_inventory.dal.registry_client import RegistryClient
from chem_inventory.handlers.utils.errors import ErrorContext, PersistenceError, SubstanceLookupError
from chem_inventory.handlers.utils.observability import logger, metrics, tracer
from chem_inventory.logic.batch import DEFAULT_MAX_WORKERS, BatchOutcome, run_batch
from chem_inventory.models.substance import AuxiliaryKind, RegistrySubstance, Substance


@dataclass
class ResolvedSubstance:
    """Outcome of resolving an identifier to a substance key."""

    substance_id: int
    is_new: bool
    auxiliary_outcomes: List[BatchOutcome] = field(default_factory=list)


def build_auxiliary_rows(payload: RegistrySubstance) -> Dict[AuxiliaryKind, List[Dict[str, Any]]]:
    """Map the registry collections to auxiliary rows, skipping empty collections."""
    rows = {
        AuxiliaryKind.SYNONYM: [{'name': synonym} for synonym in payload.synonyms],
        AuxiliaryKind.EXPERIMENTAL_PROPERTY: [
            {
                'name': prop.name,
                'property': prop.property,
                'unit': prop.unit,
                'source_number': prop.source_number,
            }
            for prop in payload.experimental_properties
        ],
        AuxiliaryKind.PREDICTED_PROPERTY: [
            {
                'name': prop.name,
                'property': prop.property,
                'unit': prop.unit,
                'source_number': prop.source_number,
            }
            for prop in payload.predicted_properties
        ],
        AuxiliaryKind.CITATION: [
            {
                'source_number': citation.source_number,
                'source': citation.source,
                'url': citation.doc_uri,
            }
            for citation in payload.property_citations
        ],
    }
    return {kind: kind_rows for kind, kind_rows in rows.items() if kind_rows}


class SubstanceResolver:
    """Resolves registry identifiers to substance keys."""

    def __init__(
        self,
        store: InventoryStore,
        registry_client: RegistryClient,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ):
        self.store = store
        self.registry_client = registry_client
        self.max_workers = max_workers

    @tracer.capture_method
    def resolve(self, cas_rn: str, context: Optional[ErrorContext] = None) -> ResolvedSubstance:
        """
        Return the key of the substance for an identifier, importing it if needed.

        Args:
            cas_rn: Registry identifier
            context: Error context for tracing

        Returns:
            Resolved substance key, whether it was created, and auxiliary insert outcomes

        Raises:
            SubstanceLookupError: If the existence check fails
            RegistryFetchError: If the registry cannot supply the record
            PersistenceError: If the substance insert fails
        """
        try:
            existing_id = self.store.find_substance_id(cas_rn)
        except DALError as e:
            raise SubstanceLookupError(message=f"Substance lookup failed: {e.message}", context=context) from e

        if existing_id is not None:
            metrics.add_metric(name="SubstanceReused", unit=MetricUnit.Count, value=1)
            logger.info("Substance already registered", extra={"cas_rn": cas_rn, "substance_id": existing_id})
            return ResolvedSubstance(substance_id=existing_id, is_new=False)

        payload = self.registry_client.fetch_substance(cas_rn)
        substance = Substance.from_registry(payload)
        # The registry may answer with a canonical number; rows stay keyed by the requested one
        substance = substance.model_copy(update={'cas_rn': cas_rn})

        try:
            substance_id = self.store.insert_substance(substance)
        except ConditionalCheckFailedError:
            # Another request created this identifier between our check and insert
            winner_id = self.store.find_substance_id(cas_rn)
            if winner_id is None:
                raise PersistenceError(
                    message=f"Substance insert for {cas_rn} conflicted but no row was found",
                    context=context,
                )
            logger.warning("Substance created concurrently, reusing existing row", extra={
                "cas_rn": cas_rn,
                "substance_id": winner_id,
            })
            metrics.add_metric(name="SubstanceInsertRace", unit=MetricUnit.Count, value=1)
            return ResolvedSubstance(substance_id=winner_id, is_new=False)
        except DALError as e:
            raise PersistenceError(message=f"Substance insert failed: {e.message}", context=context) from e

        metrics.add_metric(name="SubstanceCreated", unit=MetricUnit.Count, value=1)
        outcomes = self._insert_auxiliary(substance_id, payload)
        return ResolvedSubstance(substance_id=substance_id, is_new=True, auxiliary_outcomes=outcomes)

    def _insert_auxiliary(self, substance_id: int, payload: RegistrySubstance) -> List[BatchOutcome]:
        """Insert each auxiliary collection independently; failures are reported, not raised."""
        tasks: Dict[str, Callable[[], Any]] = {
            kind.value: self._auxiliary_task(substance_id, kind, rows)
            for kind, rows in build_auxiliary_rows(payload).items()
        }
        outcomes = run_batch(tasks, failure_metric="AuxiliaryInsertFailure", max_workers=self.max_workers)

        failed = [outcome.to_dict() for outcome in outcomes if not outcome.succeeded]
        if failed:
            logger.error("Auxiliary inserts partially failed", extra={
                "substance_id": substance_id,
                "failed": failed,
            })
        return outcomes

    def _auxiliary_task(self, substance_id: int, kind: AuxiliaryKind, rows: List[Dict[str, Any]]):
        return lambda: self.store.insert_auxiliary_rows(substance_id, kind, rows)
