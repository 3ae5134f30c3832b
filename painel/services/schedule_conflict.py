from datetime import date, datetime, time
from typing import Dict, List, Optional, Union
import logging

from pydantic import ValidationError

from painel.exceptions import PainelError, ValidationFailed
from painel.schemas.schedule_block import BlockKind, ConflictResult, ScheduleBlock
from painel.services.providers import DataProvider

logger = logging.getLogger(__name__)

DAY_START = time(0, 0)
DAY_END = time(23, 59)


def parse_date(value: Union[str, date]) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValidationFailed(f"Invalid date: {value!r}")


def parse_time(value: Union[str, time]) -> time:
    if isinstance(value, time):
        return value
    try:
        return time.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValidationFailed(f"Invalid time: {value!r}")


def block_interval(block: ScheduleBlock):
    """Closed interval covered by a block; missing times span the whole day."""
    start = datetime.combine(block.data_inicio, block.hora_inicio or DAY_START)
    end = datetime.combine(block.data_fim, block.hora_fim or DAY_END)
    return start, end


def covers(block: ScheduleBlock, instant: datetime) -> bool:
    start, end = block_interval(block)
    return start <= instant <= end


class ScheduleConflictChecker:
    """Rejects appointment slots that fall inside a schedule block.

    Scheduling fails open: if blocks or employee names cannot be fetched the
    slot is reported as free, so a provider hiccup never stops the team from
    booking appointments. General blocks take precedence over employee
    blocks; within each kind the lowest matching id supplies the reason.
    """

    def __init__(self, data: DataProvider):
        self.data = data

    async def check_conflict(
        self,
        day: Union[str, date],
        at: Union[str, time],
        assignee_name: Optional[str] = None,
        assignee_id: Optional[int] = None,
    ) -> ConflictResult:
        candidate = datetime.combine(parse_date(day), parse_time(at))

        try:
            rows = await self.data.select("schedule_blocks", "*", order="id")
        except PainelError as e:
            logger.warning(f"Could not load schedule blocks, allowing {candidate}: {e}")
            return ConflictResult(blocked=False)

        matching = [block for block in self._parse_blocks(rows) if covers(block, candidate)]
        if not matching:
            return ConflictResult(blocked=False)

        # General blocks apply to everyone and need no employee lookup
        for block in matching:
            if block.tipo == BlockKind.GERAL:
                return ConflictResult(blocked=True, reason=f"blocked by {block.descricao}")

        if assignee_id is not None:
            for block in matching:
                if block.funcionario_id == assignee_id:
                    who = assignee_name or f"Employee {assignee_id}"
                    return ConflictResult(blocked=True, reason=f"{who} is unavailable due to {block.descricao}")
            return ConflictResult(blocked=False)

        if not assignee_name:
            return ConflictResult(blocked=False)
        names = await self._employee_names(matching)
        if names is None:
            return ConflictResult(blocked=False)
        for block in matching:
            if names.get(block.funcionario_id) == assignee_name:
                return ConflictResult(blocked=True, reason=f"{assignee_name} is unavailable due to {block.descricao}")

        return ConflictResult(blocked=False)

    def _parse_blocks(self, rows) -> List[ScheduleBlock]:
        blocks = []
        for row in rows:
            try:
                block = ScheduleBlock.model_validate(row)
            except ValidationError as e:
                logger.warning(f"Skipping malformed schedule block {row.get('id')}: {e.error_count()} errors")
                continue
            if block.tipo == BlockKind.FUNCIONARIO and block.funcionario_id is None:
                logger.warning(f"Skipping employee block {block.id} without funcionario_id")
                continue
            blocks.append(block)
        return sorted(blocks, key=lambda b: b.id)

    async def _employee_names(self, blocks: List[ScheduleBlock]) -> Optional[Dict[int, str]]:
        ids = sorted({b.funcionario_id for b in blocks if b.tipo == BlockKind.FUNCIONARIO})
        try:
            rows = await self.data.select("employees", "id, nome", in_={"id": ids})
        except PainelError as e:
            logger.warning(f"Could not resolve employee names for blocks, allowing slot: {e}")
            return None
        return {row["id"]: row.get("nome") for row in rows}
