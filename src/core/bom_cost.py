"""
BOM Cost Module
Rolls material and subassembly costs up through a bill-of-materials graph.
"""

import logging
import math
from typing import Dict, Iterable, List, Mapping, NamedTuple, Optional, Set, Tuple

from core.enums import ComponentType
from schemas.bom import BomCostSummary, BomLine, BomRecord
from schemas.material import Material
from utils.money_helper import round_half_away

logger = logging.getLogger(__name__)

CYCLE_SUMMARY = BomCostSummary(total_cost_cents=0, unit_cost_cents=None, has_cycle=True, unresolved=True)
MISSING_SUMMARY = BomCostSummary(total_cost_cents=0, unit_cost_cents=None, has_cycle=False, unresolved=True)


class LineCost(NamedTuple):
    unit_cost_cents: int
    has_cycle: bool = False
    unresolved: bool = False


def _finite_non_negative(value) -> float:
    try:
        n = float(value)
    except (TypeError, ValueError):
        return 0.0
    return max(0.0, n) if math.isfinite(n) else 0.0


def _fallback_cost(line: BomLine) -> int:
    return max(0, round_half_away(_finite_non_negative(line.unit_cost_cents)))


def _material_line_cost(line: BomLine, material_by_id: Mapping[str, Material]) -> LineCost:
    material_id = line.material_id
    if not material_id:
        return LineCost(_fallback_cost(line))
    material = material_by_id.get(material_id)
    if material is None:
        return LineCost(_fallback_cost(line), unresolved=True)
    return LineCost(material.unit_cost_cents)


def _summary_from_child(child: BomCostSummary) -> LineCost:
    return LineCost(
        child.unit_cost_cents if child.unit_cost_cents is not None else 0,
        has_cycle=child.has_cycle,
        unresolved=child.unresolved or child.unit_cost_cents is None,
    )


class _Frame:
    """Partial roll-up of one BOM on the resolution stack."""

    __slots__ = ("bom", "index", "total", "has_cycle", "unresolved")

    def __init__(self, bom: BomRecord):
        self.bom = bom
        self.index = 0
        self.total = 0
        self.has_cycle = False
        self.unresolved = False

    def add(self, qty: float, cost: LineCost):
        self.has_cycle = self.has_cycle or cost.has_cycle
        self.unresolved = self.unresolved or cost.unresolved
        self.total += round_half_away(qty * cost.unit_cost_cents)
        self.index += 1

    def summary(self) -> BomCostSummary:
        output_qty = self.bom.output_qty
        if not isinstance(output_qty, (int, float)) or not math.isfinite(output_qty):
            output_qty = 0.0
        return BomCostSummary(
            total_cost_cents=max(0, round_half_away(self.total)),
            unit_cost_cents=round_half_away(self.total / output_qty) if output_qty > 0 else None,
            has_cycle=self.has_cycle,
            unresolved=self.unresolved,
        )


class BomCostResolver:
    """
    Memoized depth-first cost roll-up.

    One instance serves one resolution pass: ``memo`` holds finished
    summaries and ``visiting`` the BOM ids on the current resolution stack.
    Reaching a visiting id again is a cycle and yields ``CYCLE_SUMMARY``.
    ``line_unit_costs`` keeps the unit cost each line was rolled up with,
    keyed by ``(bom_id, sort_order, line_id)``.
    The stack is explicit so deep subassembly chains do not hit the
    interpreter recursion limit.
    """

    def __init__(self, boms: Iterable[BomRecord], material_by_id: Mapping[str, Material]):
        self.bom_by_id: Dict[str, BomRecord] = {bom.id: bom for bom in boms}
        self.material_by_id = material_by_id
        self.memo: Dict[str, BomCostSummary] = {}
        self.visiting: Set[str] = set()
        self.line_unit_costs: Dict[Tuple[str, int, str], int] = {}

    def resolve_all(self) -> Dict[str, BomCostSummary]:
        for bom_id in self.bom_by_id:
            self.resolve(bom_id)
        return dict(self.memo)

    def resolve(self, bom_id: str) -> BomCostSummary:
        if bom_id in self.memo:
            return self.memo[bom_id]
        if bom_id in self.visiting:
            logger.debug(f"Cycle detected while resolving BOM {bom_id}")
            return CYCLE_SUMMARY
        bom = self.bom_by_id.get(bom_id)
        if bom is None:
            return MISSING_SUMMARY

        stack: List[_Frame] = [self._enter(bom)]
        while stack:
            frame = stack[-1]
            if frame.index >= len(frame.bom.lines):
                stack.pop()
                self.visiting.discard(frame.bom.id)
                self.memo[frame.bom.id] = frame.summary()
                continue

            line = frame.bom.lines[frame.index]
            child_id = self._pending_child(frame.bom.id, line)
            if child_id is not None:
                # Line is revisited once the child has been memoized.
                stack.append(self._enter(self.bom_by_id[child_id]))
                continue
            cost = self._line_cost(frame.bom.id, line)
            self.line_unit_costs[(frame.bom.id, line.sort_order, line.id)] = cost.unit_cost_cents
            frame.add(_finite_non_negative(line.quantity), cost)

        return self.memo[bom_id]

    def _enter(self, bom: BomRecord) -> _Frame:
        self.visiting.add(bom.id)
        return _Frame(bom)

    def _pending_child(self, parent_bom_id: str, line: BomLine) -> Optional[str]:
        """Child BOM id that still has to be resolved before ``line`` can be costed."""
        if line.component_type != ComponentType.BOM_ITEM:
            return None
        child_id = line.component_bom_id
        if (
            not child_id
            or child_id == parent_bom_id
            or child_id not in self.bom_by_id
            or child_id in self.memo
            or child_id in self.visiting
        ):
            return None
        return child_id

    def _line_cost(self, parent_bom_id: str, line: BomLine) -> LineCost:
        if line.component_type == ComponentType.MATERIAL:
            return _material_line_cost(line, self.material_by_id)

        child_id = line.component_bom_id
        if not child_id:
            return LineCost(_fallback_cost(line), unresolved=True)
        if child_id == parent_bom_id:
            logger.debug(f"BOM {parent_bom_id} references itself on line {line.id}")
            return LineCost(0, has_cycle=True, unresolved=True)
        if child_id not in self.bom_by_id:
            return LineCost(_fallback_cost(line), unresolved=True)
        if child_id in self.visiting:
            logger.debug(f"Cycle detected while resolving BOM {child_id} from {parent_bom_id}")
            return _summary_from_child(CYCLE_SUMMARY)
        return _summary_from_child(self.memo[child_id])


def compute_bom_cost_map(
    boms: Iterable[BomRecord],
    material_by_id: Mapping[str, Material],
) -> Dict[str, BomCostSummary]:
    """
    Compute a cost summary for every BOM in ``boms``.

    Never raises for inconsistent data: missing references, self references
    and cycles are reported through ``has_cycle``/``unresolved``.
    """
    return BomCostResolver(boms, material_by_id).resolve_all()


def resolve_line_unit_cost(
    parent_bom_id: str,
    line: BomLine,
    material_by_id: Mapping[str, Material],
    cost_map: Mapping[str, BomCostSummary],
) -> int:
    """
    Unit cost (cents) a single line contributes, read from a finished cost map.

    A line that closed a cycle during the roll-up was costed with the cycle
    placeholder, but here it reads the child's finished cost. Use
    ``BomCostResolver.line_unit_costs`` when the exact roll-up value is needed.
    """
    if line.component_type == ComponentType.MATERIAL:
        return _material_line_cost(line, material_by_id).unit_cost_cents

    child_id = line.component_bom_id
    if child_id == parent_bom_id:
        return 0
    child: Optional[BomCostSummary] = cost_map.get(child_id) if child_id else None
    if child is None:
        return _fallback_cost(line)
    return _summary_from_child(child).unit_cost_cents
