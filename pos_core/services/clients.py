from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Optional

from pos_core.errors import PreconditionViolation
from pos_core.models import ID_NATIONAL, Client, update_values
from pos_core.schema import STORE_CLIENTS
from pos_core.services.store import EntityStore
from pos_core.utils import is_blank

logger = logging.getLogger(__name__)


class ClientStore(EntityStore[Client]):
    record_cls = Client
    store_name = STORE_CLIENTS
    search_fields = ("name", "surname", "full_name", "identification", "email", "phone")
    label = "Client"

    def _check(self, record: Client) -> None:
        if is_blank(record.name) or is_blank(record.surname):
            raise PreconditionViolation("Client name and surname are required.")
        if is_blank(record.identification):
            raise PreconditionViolation("Client identification is required.")

    def get_by_identification(self, identification: str, identification_type: Optional[str] = None) -> Optional[Client]:
        ident = str(identification).strip()
        for c in self._records:
            if c.identification != ident:
                continue
            if identification_type is None or c.identification_type == identification_type:
                return c
        return None

    def add(self, **fields: Any) -> Client:
        """
        Register a client, or refresh the existing one.

        The checkout re-submits full client data on every sale, so a client
        with the same (identification, identification_type) is updated in
        place instead of duplicated.
        """
        if "identification" in fields and fields["identification"] is not None:
            fields["identification"] = str(fields["identification"]).strip()

        existing = None
        if fields.get("identification"):
            existing = self.get_by_identification(
                fields["identification"],
                fields.get("identification_type", ID_NATIONAL),
            )

        if existing is None:
            return super().add(**fields)

        values = {k: v for k, v in fields.items() if k not in {"id", "created_at", "last_updated"}}
        merged = self._replace(existing.id, values)
        logger.info("Client %s refreshed from new submission", existing.id)
        return merged

    def update(self, record_id: int, changes) -> Client:
        current = self.get(record_id)
        values = update_values(changes)
        identification = values.get("identification", current.identification)
        identification_type = values.get("identification_type", current.identification_type)

        # (identification, identification_type) identifies one client only.
        clash = self.get_by_identification(identification, identification_type)
        if clash is not None and clash.id != current.id:
            logger.warning("Client %s update rejected: identification held by client %s", record_id, clash.id)
            raise PreconditionViolation(
                f"Another client (#{clash.id}) already has this identification.",
                details={"identification": identification, "identification_type": identification_type},
            )
        if changes.identification is not None:
            changes = replace(changes, identification=str(changes.identification).strip())
        return super().update(record_id, changes)
