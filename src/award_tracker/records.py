"""
Award / Requirement operations on top of `AirtableClient`.

Writes use the primary column of each field; every record coming back from the
store (list, create echo, update echo) is mapped through the shared resolver in
`fields`.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from .airtable import AirtableClient
from .config import StoreConfig
from .fields import (
    AWARD_FIELDS,
    REQUIREMENT_FIELDS,
    map_award,
    map_requirement,
    to_columns,
    with_primary_columns,
)
from .schemas import Award, AwardCreate, AwardUpdate, Requirement, RequirementCreate, RequirementUpdate

SUCCESS: Dict[str, Any] = {"success": True}


class RecordStore:
    def __init__(self, client: AirtableClient, config: StoreConfig) -> None:
        self.client = client
        self.config = config
        self.award_fields = with_primary_columns(AWARD_FIELDS, config.award_columns)
        self.requirement_fields = with_primary_columns(REQUIREMENT_FIELDS, config.requirement_columns)

    # --- awards -------------------------------------------------------------

    async def list_awards(self, include_requirements: bool = False) -> List[Award]:
        records = await self.client.list_records(self.config.awards_table)
        if not include_requirements:
            return [map_award(r, self.award_fields) for r in records]

        by_award: Dict[str, List[Requirement]] = {}
        for req in await self.list_requirements():
            by_award.setdefault(req.award_id, []).append(req)
        out: List[Award] = []
        for r in records:
            award_id = str(r.get("id") or "")
            out.append(map_award(r, self.award_fields, requirements=by_award.get(award_id)))
        return out

    async def create_award(self, body: AwardCreate) -> Award:
        values = {
            "name": body.name,
            "url": body.url or "",
            "notes": body.notes or "",
            "deadline": body.deadline or "",
            "status": body.status or "researching",
        }
        record = await self.client.create_record(self.config.awards_table, to_columns(values, self.award_fields))
        return map_award(record, self.award_fields)

    async def update_award(self, body: AwardUpdate) -> Award:
        record = await self.client.update_record(
            self.config.awards_table, body.id, to_columns(body.changes(), self.award_fields)
        )
        return map_award(record, self.award_fields)

    async def delete_award(self, award_id: str) -> Dict[str, Any]:
        await self.client.delete_record(self.config.awards_table, award_id)
        return dict(SUCCESS)

    # --- requirements -------------------------------------------------------

    async def list_requirements(self, award_id: Optional[str] = None) -> List[Requirement]:
        records = await self.client.list_records(self.config.requirements_table)
        reqs = [map_requirement(r, self.requirement_fields) for r in records]
        if award_id:
            # Filter after resolution so the predicate sees the canonical awardId whatever the column casing.
            reqs = [r for r in reqs if r.award_id == award_id]
        return reqs

    async def create_requirement(self, body: RequirementCreate) -> Requirement:
        values = {"awardId": body.award_id, "text": body.text, "done": bool(body.done)}
        record = await self.client.create_record(
            self.config.requirements_table, to_columns(values, self.requirement_fields)
        )
        return map_requirement(record, self.requirement_fields)

    async def update_requirement(self, body: RequirementUpdate) -> Requirement:
        record = await self.client.update_record(
            self.config.requirements_table, body.id, to_columns(body.changes(), self.requirement_fields)
        )
        return map_requirement(record, self.requirement_fields)

    async def delete_requirement(self, requirement_id: str) -> Dict[str, Any]:
        await self.client.delete_record(self.config.requirements_table, requirement_id)
        return dict(SUCCESS)
