# src/datafix/repositories/tickets.py
"""
Ticket Repository - Ports and Adapters

Port: TicketRepository (abstract interface)
Adapters: SupabaseTicketRepository
"""

import logging
import time
from abc import abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from ..core.errors import BackendError, NotFoundError, ValidationError
from ..core.models import (
    DEFAULT_PRIORITY,
    DEFAULT_STATUS,
    Attachment,
    AttachmentUpload,
    DetailLine,
    DetailLineDraft,
    DetailSide,
    Priority,
    Ticket,
    TicketDraft,
    TicketFilters,
    TicketStats,
    TicketStatus,
)
from ..core.ports.storage import StoragePort
from .base import BaseRepository, SupabaseRepositoryMixin

logger = logging.getLogger(__name__)

TICKET_COLUMNS = """
        id,
        reporter_user_id,
        reporter_name,
        wrong_input_date,
        issue_type,
        branch_id,
        feature_id,
        feature_other,
        inputter_name,
        description,
        fix_description,
        status,
        priority,
        assigned_to,
        created_at,
        updated_at"""

REQUIRED_FIELDS = ("wrong_input_date", "issue_type", "branch_id", "description")

UPDATABLE_FIELDS = frozenset({
    "status",
    "fix_description",
    "assigned_to",
    "priority",
    "issue_type",
    "description",
    "inputter_name",
    "branch_id",
    "feature_id",
    "feature_other",
    "wrong_input_date",
})


class TicketRepository(BaseRepository[Ticket]):
    """
    Ticket Repository Port - defines the interface for ticket data access.

    Extends BaseRepository with detail lines, attachments and statistics.
    """

    @abstractmethod
    def add_detail_lines(self, ticket_id: str, lines: List[DetailLineDraft]) -> List[DetailLine]:
        """Bulk-insert wrong/expected value pairs for a ticket."""
        pass

    @abstractmethod
    def upload_attachment(self, ticket_id: str, upload: AttachmentUpload) -> Attachment:
        """Store a screenshot and record it against a ticket."""
        pass

    @abstractmethod
    def get_stats(self) -> TicketStats:
        """Get ticket counts per status bucket."""
        pass


# =============================================================================
# SUPABASE ADAPTER
# =============================================================================

class SupabaseTicketRepository(SupabaseRepositoryMixin, TicketRepository):
    """
    Supabase adapter for ticket repository.
    """

    def __init__(self, client=None, config=None, storage: Optional[StoragePort] = None, workflow=None):
        super().__init__(client=client, config=config)
        self._storage = storage
        self._workflow = workflow

    @property
    def storage(self) -> StoragePort:
        if self._storage is None:
            from ..adapters.storage.supabase import SupabaseStorageAdapter
            self._storage = SupabaseStorageAdapter(self._client)
        return self._storage

    @property
    def workflow(self):
        if self._workflow is None:
            from ..domains.tickets.services.workflow_service import WorkflowService
            self._workflow = WorkflowService(self.config.tickets.transition_policy)
        return self._workflow

    # -------------------------------------------------------------------------
    # Select strings
    # -------------------------------------------------------------------------

    def _people_joins(self, with_role: bool = False) -> str:
        t = self.tables
        cols = "id, full_name, role" if with_role else "id, full_name"
        return (
            f"reporter:{t.profiles}!{t.tickets}_reporter_user_id_fkey({cols}),\n"
            f"        assignee:{t.profiles}!{t.tickets}_assigned_to_fkey({cols})"
        )

    def _list_select(self) -> str:
        t = self.tables
        return f"""{TICKET_COLUMNS},
        branch:{t.branches}(id, name),
        feature:{t.features}(id, name),
        {self._people_joins()}
      """

    def _detail_select(self) -> str:
        t = self.tables
        return f"""{TICKET_COLUMNS},
        branch:{t.branches}(id, name),
        feature:{t.features}(id, name),
        {self._people_joins(with_role=True)},
        attachments:{t.attachments}(id, ticket_id, file_path, file_name, mime_type, created_at),
        detail_lines:{t.detail_lines}(id, ticket_id, side, item_name, value, note, created_at),
        status_history:{t.status_history}(id, ticket_id, from_status, to_status, changed_by, created_at)
      """

    def _parse(self, row: Dict[str, Any]) -> Ticket:
        return _parse_row(Ticket, row, "ticket")

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def list(self, filters: Optional[TicketFilters] = None) -> List[Ticket]:
        """List tickets newest first, joined with branch, feature and people."""
        query = self._table(self.tables.tickets).select(self._list_select())

        for column, value in (filters or TicketFilters()).to_eq_filters().items():
            query = query.eq(column, value)

        query = query.order("created_at", desc=True)
        result = self._execute(query, "list tickets")
        return [self._parse(row) for row in result.data or []]

    def get_by_id(self, entity_id: str) -> Ticket:
        """Get one ticket with attachments, detail lines and status history."""
        query = self._table(self.tables.tickets).select(self._detail_select()).eq("id", entity_id)
        result = self._execute(query, f"get ticket {entity_id}")

        if not result.data:
            raise NotFoundError("Ticket", entity_id)
        return self._parse(result.data[0])

    def get_status(self, entity_id: str) -> TicketStatus:
        """Current status of a ticket."""
        query = self._table(self.tables.tickets).select("id, status").eq("id", entity_id)
        result = self._execute(query, f"get status of ticket {entity_id}")

        if not result.data:
            raise NotFoundError("Ticket", entity_id)
        return TicketStatus(result.data[0]["status"])

    def get_stats(self) -> TicketStats:
        """Get ticket counts from the stats RPC."""
        if not self.client:
            raise BackendError("Supabase not available")

        result = self._execute(self.client.rpc(self.tables.stats_rpc, {}), "get ticket stats")
        data = result.data
        if isinstance(data, list):
            data = data[0] if data else {}

        stats = TicketStats.from_dict(data)
        reported_total = (data or {}).get("total_tickets")
        if reported_total is not None and int(reported_total) != stats.total:
            logger.warning(
                f"Stats RPC total ({reported_total}) differs from bucket sum ({stats.total}); using bucket sum"
            )
        return stats

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def create(self, data: Union[TicketDraft, Dict[str, Any]]) -> Ticket:
        """
        Insert a new ticket.

        Args:
            data: TicketDraft or a plain row dict

        Returns:
            The created ticket, including its generated id

        Raises:
            ValidationError: required fields missing or values out of range
        """
        row = data.to_row() if isinstance(data, TicketDraft) else {k: v for k, v in data.items() if v is not None}

        field_errors = [
            {"field": name, "message": f"{name} is required", "code": "required"}
            for name in REQUIRED_FIELDS
            if not str(row.get(name) or "").strip()
        ]
        if not row.get("feature_id") and not str(row.get("feature_other") or "").strip():
            field_errors.append({"field": "feature_id", "message": "feature_id or feature_other is required", "code": "required"})
        if field_errors:
            raise ValidationError("Missing required ticket fields", field_errors=field_errors)

        row["priority"] = int(_coerce_priority(row.get("priority", DEFAULT_PRIORITY)))
        row["status"] = _coerce_status(row.get("status", DEFAULT_STATUS)).value

        result = self._execute(self._table(self.tables.tickets).insert(row), "create ticket")
        if not result.data:
            raise BackendError("Ticket insert returned no row")

        ticket = self._parse(result.data[0])
        logger.info(f"Created ticket {ticket.id}")
        return ticket

    def add_detail_lines(self, ticket_id: str, lines: List[DetailLineDraft]) -> List[DetailLine]:
        """Bulk-insert detail lines; every line must carry an item name."""
        if not lines:
            return []

        for index, line in enumerate(lines):
            if not (line.item_name or "").strip():
                raise ValidationError.for_field(f"detail_lines[{index}].item_name", "Item name is required", "required")
            if not isinstance(line.side, DetailSide):
                line.side = DetailSide(line.side)

        rows = [line.to_row(ticket_id) for line in lines]
        result = self._execute(
            self._table(self.tables.detail_lines).insert(rows),
            f"add detail lines to ticket {ticket_id}",
        )
        return [_parse_row(DetailLine, row, "detail line") for row in result.data or []]

    def upload_attachment(self, ticket_id: str, upload: AttachmentUpload) -> Attachment:
        """
        Store a screenshot under ``<ticket_id>/<epoch-millis>.<ext>`` and
        record its public URL against the ticket.
        """
        bucket = self.config.supabase.attachment_bucket
        path = f"{ticket_id}/{int(time.time() * 1000)}.{upload.extension}"

        stored = self.storage.upload_file(
            file_content=upload.content,
            path=path,
            bucket=bucket,
            content_type=upload.content_type,
        )

        row = {
            "ticket_id": ticket_id,
            "file_path": stored.get("url") or path,
            "file_name": upload.filename,
            "mime_type": upload.content_type,
        }
        try:
            result = self._execute(
                self._table(self.tables.attachments).insert(row),
                f"record attachment for ticket {ticket_id}",
            )
        except BackendError:
            # Row insert failed: do not leave an unreferenced blob behind.
            self.storage.delete_file(path, bucket)
            raise

        if not result.data:
            raise BackendError("Attachment insert returned no row")
        return _parse_row(Attachment, result.data[0], "attachment")

    def update(self, entity_id: str, data: Dict[str, Any]) -> Ticket:
        """Apply a partial update and return the updated ticket."""
        fields = dict(data)
        unknown = sorted(set(fields) - UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError(
                "Unknown ticket fields",
                field_errors=[{"field": name, "message": "not updatable", "code": "unknown"} for name in unknown],
            )
        if not fields:
            raise ValidationError("Nothing to update")

        if "priority" in fields:
            fields["priority"] = int(_coerce_priority(fields["priority"]))
        if "status" in fields:
            new_status = _coerce_status(fields["status"])
            if not self.workflow.allows_any_transition:
                self.workflow.validate_transition(self.get_status(entity_id), new_status)
            fields["status"] = new_status.value

        fields["updated_at"] = datetime.now(timezone.utc).isoformat()
        query = self._table(self.tables.tickets).update(fields).eq("id", entity_id)
        result = self._execute(query, f"update ticket {entity_id}")

        if not result.data:
            raise NotFoundError("Ticket", entity_id)
        logger.info(f"Updated ticket {entity_id}: {sorted(data)}")
        return self._parse(result.data[0])

    def delete(self, entity_id: str) -> None:
        """Permanently delete a ticket; children go by backend cascade."""
        query = self._table(self.tables.tickets).delete().eq("id", entity_id)
        result = self._execute(query, f"delete ticket {entity_id}")

        if not result.data:
            raise NotFoundError("Ticket", entity_id)
        logger.info(f"Deleted ticket {entity_id}")


def _coerce_priority(value: Any) -> Priority:
    try:
        return Priority(int(value))
    except (TypeError, ValueError):
        raise ValidationError.for_field("priority", "Priority must be 1, 2 or 3")


def _coerce_status(value: Any) -> TicketStatus:
    try:
        return TicketStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in TicketStatus)
        raise ValidationError.for_field("status", f"Invalid status. Must be one of: {allowed}")


def _parse_row(model, row: Dict[str, Any], kind: str):
    """Build a model from a backend row; malformed rows are backend errors."""
    try:
        return model.from_dict(row)
    except (KeyError, TypeError, ValueError) as e:
        logger.error(f"Invalid {kind} row {row.get('id')}: {e}")
        raise BackendError(f"Backend returned an invalid {kind} row", detail=str(e)) from e
