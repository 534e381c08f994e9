"""
Derive operator / sub-operator identity from EVSE ids
"""

import re
import logging
from typing import List, Tuple

from schemas.feed import EvseDataRecord, OperatorEvseData
from schemas.normalized import OperatorRow
from core.exceptions import MalformedIdentifierError

logger = logging.getLogger(__name__)

# Alpha country code + optional "*" + 3 alphanumerics (DE*TBA, DETBA),
# or numeric country code + "*" + 3 digits (+49*810)
OPERATOR_ID_PATTERN = re.compile(r"([A-Za-z]{2}\*?[A-Za-z0-9]{3})|(\+?[0-9]{1,3}\*[0-9]{3})")


def candidate_operator_id(evse_id: str) -> str:
    """
    Return the operator id embedded in an EVSE id.

    Raises:
        MalformedIdentifierError: If the id carries no operator id
    """
    match = OPERATOR_ID_PATTERN.search(evse_id or "")
    if match is None:
        raise MalformedIdentifierError(
            "EVSE id does not contain an operator id",
            context={"evse_id": evse_id}
        )
    return match.group(0)


def flatten_operator_records(operator_data: List[OperatorEvseData]) -> List[EvseDataRecord]:
    """Pull the EVSE records out of their operators, stamping the nominal operator id"""
    records = []
    for operator in operator_data:
        for record in operator.evse_data_records:
            records.append(record.copy(update={"operator_id": operator.operator_id}))
    return records


class OperatorResolver:
    """
    Detect EVSEs that belong to an undeclared sub-operator.

    An EVSE is related to a sub-operator when the operator id embedded in
    its EVSE id differs from the id of the operator that delivered it. In
    that case a nameless operator is emitted with the delivering operator
    as parent, and the EVSE is re-pointed to it.

    Duplicate sub-operator rows are emitted as-is; they collapse on
    primary key when persisted.
    """

    def resolve(
        self,
        operators: List[OperatorRow],
        records: List[EvseDataRecord]
    ) -> Tuple[List[OperatorRow], List[EvseDataRecord]]:
        """
        Returns:
            (top-level operators followed by derived sub-operators,
             records with corrected operator_id)
        """
        sub_operators: List[OperatorRow] = []
        resolved: List[EvseDataRecord] = []

        for record in records:
            candidate = candidate_operator_id(record.evse_id)

            if candidate == record.operator_id:
                resolved.append(record)
                continue

            sub_operators.append(
                OperatorRow(id=candidate, name=None, parent_id=record.operator_id)
            )
            resolved.append(record.copy(update={"operator_id": candidate}))

        if sub_operators:
            logger.info(
                f"Derived {len(sub_operators)} sub-operator rows "
                f"({len({o.id for o in sub_operators})} distinct)"
            )

        return list(operators) + sub_operators, resolved
