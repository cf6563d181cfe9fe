"""
Registration workflow: resolve the substance, then write the bottle.

Received -> SubstanceResolved -> InventoryInserted -> ImagesUploaded (optional)
-> URLsPersisted (optional) -> Responded. Failures before InventoryInserted are
raised to the handler; later failures are reported in the log only.
"""

from typing import List, Optional

from chem_inventory.handlers.utils.errors import ErrorContext
from chem_inventory.handlers.utils.observability import logger, tracer
from chem_inventory.logic.inventory_writer import InventoryWriter
from chem_inventory.logic.substance_resolver import SubstanceResolver
from chem_inventory.models.input import RegisterInventoryRequest
from chem_inventory.models.output import RegistrationResult


@tracer.capture_method
def register_inventory(
    request: RegisterInventoryRequest,
    resolver: SubstanceResolver,
    writer: InventoryWriter,
    context: Optional[ErrorContext] = None,
) -> List[RegistrationResult]:
    """
    Register one bottle for the first identifier of the request.

    A substance created here is not removed if the inventory insert fails
    afterwards; the orphan is reported in the writer's warning log.

    Args:
        request: Validated registration request
        resolver: Substance resolver
        writer: Inventory writer
        context: Error context for tracing

    Returns:
        A single-element list with the registration result
    """
    cas_rn = request.cas_rn
    tracer.put_annotation("cas_rn", cas_rn)

    resolved = resolver.resolve(cas_rn, context=context)
    written = writer.write(resolved.substance_id, cas_rn, request.inventory_details, context=context)

    logger.info("Inventory registered", extra={
        "cas_rn": cas_rn,
        "substance_id": resolved.substance_id,
        "inventory_id": written.inventory_id,
        "is_new_substance": resolved.is_new,
        "auxiliary_failures": sum(1 for o in resolved.auxiliary_outcomes if not o.succeeded),
        "upload_failures": sum(1 for o in written.upload_outcomes if not o.succeeded),
    })

    return [
        RegistrationResult(
            identifier=cas_rn,
            inventory_key=written.inventory_id,
            is_new_substance=resolved.is_new,
        )
    ]
