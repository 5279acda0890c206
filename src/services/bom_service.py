import logging
import math
from typing import List, Dict, Any, Iterable, Optional, Tuple

import pandas as pd
from pydantic import ValidationError

from core.bom_cost import BomCostResolver, resolve_line_unit_cost
from core.enums import ComponentType, CostWarning
from schemas.bom import BomCostSummary, BomLine, BomRecord
from schemas.material import Material
from utils.money_helper import round_half_away

logger = logging.getLogger(__name__)

REPORT_COLUMNS = [
    "bom_id", "code", "name", "item_type", "output_qty", "output_unit",
    "total_cost_cents", "unit_cost_cents", "has_cycle", "unresolved", "warning",
]


class BOMService:
    """
    BOM 业务逻辑服务层
    持有原料与 BOM 的内存快照，负责成本汇总、警告提示、成本树与报表
    """

    def __init__(self, materials: Iterable[Material] = (), boms: Iterable[BomRecord] = ()):
        self.materials: List[Material] = []
        self.boms: List[BomRecord] = []
        self._cost_map: Optional[Dict[str, BomCostSummary]] = None
        self._line_unit_costs: Dict[Tuple[str, int, str], int] = {}
        self.refresh(materials, boms)

    def refresh(self, materials: Iterable[Material], boms: Iterable[BomRecord]):
        """替换数据快照，下次查询时重新计算成本"""
        self.materials = list(materials)
        self.boms = list(boms)
        self.material_by_id: Dict[str, Material] = {m.id: m for m in self.materials}
        self.bom_by_id: Dict[str, BomRecord] = {b.id: b for b in self.boms}
        self._cost_map = None
        self._line_unit_costs = {}

    # ---------------------- Parsing ----------------------

    @staticmethod
    def parse_bom_records(raw: Any) -> List[BomRecord]:
        """解析原始 BOM 记录，非法记录记录日志后跳过"""
        if not isinstance(raw, list):
            return []
        records = []
        for index, item in enumerate(raw):
            if not isinstance(item, dict):
                continue
            try:
                records.append(BomRecord.model_validate(item))
            except ValidationError as e:
                logger.warning(f"Skipping BOM record #{index}: {e.error_count()} validation error(s)")
        return records

    @staticmethod
    def parse_material_records(raw: Any) -> List[Material]:
        """解析原始原料记录，非法记录记录日志后跳过"""
        if not isinstance(raw, list):
            return []
        records = []
        for index, item in enumerate(raw):
            if not isinstance(item, dict):
                continue
            try:
                records.append(Material.model_validate(item))
            except ValidationError as e:
                logger.warning(f"Skipping material record #{index}: {e.error_count()} validation error(s)")
        return records

    # ---------------------- Costs ----------------------

    def get_cost_map(self) -> Dict[str, BomCostSummary]:
        if self._cost_map is None:
            resolver = BomCostResolver(self.boms, self.material_by_id)
            self._cost_map = resolver.resolve_all()
            self._line_unit_costs = resolver.line_unit_costs
        return self._cost_map

    def get_cost_summary(self, bom_id: str) -> Optional[BomCostSummary]:
        return self.get_cost_map().get(bom_id)

    def get_line_unit_cost(self, bom_id: str, line: BomLine) -> int:
        """行单价，与成本汇总时实际使用的值一致 (循环中的行为 0)"""
        cost_map = self.get_cost_map()
        unit_cost = self._line_unit_costs.get((bom_id, line.sort_order, line.id))
        if unit_cost is None:
            return resolve_line_unit_cost(bom_id, line, self.material_by_id, cost_map)
        return unit_cost

    def get_cost_warnings(self, bom_id: str) -> List[str]:
        """循环引用优先于不完整链接，两者只显示其一"""
        summary = self.get_cost_summary(bom_id)
        if summary is None:
            return []
        if summary.has_cycle:
            return [CostWarning.CIRCULAR_REFERENCE.value]
        if summary.unresolved:
            return [CostWarning.INCOMPLETE_LINKS.value]
        return []

    def _tree_node(self, bom: BomRecord, level: int) -> Dict[str, Any]:
        summary = self.get_cost_summary(bom.id)
        return {
            "id": bom.id,
            "name": bom.name,
            "code": bom.code,
            "level": level,
            "total_cost_cents": summary.total_cost_cents,
            "unit_cost_cents": summary.unit_cost_cents,
            "has_cycle": summary.has_cycle,
            "unresolved": summary.unresolved,
            "children": [],
        }

    def _line_node(self, bom_id: str, line: BomLine, level: int) -> Dict[str, Any]:
        unit_cost = self.get_line_unit_cost(bom_id, line)
        qty = line.quantity if math.isfinite(line.quantity) and line.quantity > 0 else 0.0
        return {
            "line_id": line.id,
            "item_name": line.component_name,
            "component_type": line.component_type.value,
            "qty": line.quantity,
            "uom": line.unit,
            "unit_cost_cents": unit_cost,
            "line_total_cents": round_half_away(qty * unit_cost),
            "level": level,
        }

    def get_bom_tree_structure(self, bom_id: str) -> Optional[Dict[str, Any]]:
        """
        构建带成本的 BOM 树形结构数据
        Returns:
            Dict: {
                "id": bom_id,
                "name": str,
                "code": str,
                "level": int,
                "total_cost_cents": int,
                "unit_cost_cents": Optional[int],
                "has_cycle": bool,
                "unresolved": bool,
                "children": List[Dict],
            }
            每个子节点是一行: line_id, item_name, component_type, qty, uom,
            unit_cost_cents, line_total_cents, level，子装配行带 sub_bom
            循环分支的 sub_bom 为 {"id", "name", "is_loop": True, "level"}
            同一 BOM 在树中再次出现时只给出成本，children 为空并标记 is_repeat
            BOM 不存在时返回 None
        """
        bom = self.bom_by_id.get(bom_id)
        if not bom:
            return None

        root = self._tree_node(bom, 0)
        # 显式栈遍历，深层子装配链不受递归深度限制
        path = {bom_id}
        expanded = {bom_id}
        stack = [(bom, root, iter(bom.lines))]
        while stack:
            parent, node, lines = stack[-1]
            line = next(lines, None)
            if line is None:
                stack.pop()
                path.discard(parent.id)
                continue

            level = node["level"] + 1
            child_node = self._line_node(parent.id, line, level)
            node["children"].append(child_node)

            child = self.bom_by_id.get(line.component_bom_id) if line.component_type == ComponentType.BOM_ITEM else None
            if child is None:
                continue
            if child.id in path:
                child_node["sub_bom"] = {"id": child.id, "name": child.name, "is_loop": True, "level": level}
            elif child.id in expanded:
                child_node["sub_bom"] = {**self._tree_node(child, level), "is_repeat": True}
            else:
                sub_node = self._tree_node(child, level)
                child_node["sub_bom"] = sub_node
                path.add(child.id)
                expanded.add(child.id)
                stack.append((child, sub_node, iter(child.lines)))

        return root

    # ---------------------- Reports ----------------------

    def build_cost_report(self, active_only: bool = False) -> pd.DataFrame:
        """生成 BOM 成本报表，每个 BOM 一行，按名称排序"""
        cost_map = self.get_cost_map()
        rows = []
        for bom in self.boms:
            if active_only and not bom.is_active:
                continue
            summary = cost_map[bom.id]
            warnings = self.get_cost_warnings(bom.id)
            rows.append({
                "bom_id": bom.id,
                "code": bom.code,
                "name": bom.name,
                "item_type": bom.item_type.value,
                "output_qty": bom.output_qty,
                "output_unit": bom.output_unit,
                "total_cost_cents": summary.total_cost_cents,
                "unit_cost_cents": summary.unit_cost_cents,
                "has_cycle": summary.has_cycle,
                "unresolved": summary.unresolved,
                "warning": warnings[0] if warnings else "",
            })

        if not rows:
            return pd.DataFrame(columns=REPORT_COLUMNS)

        df = pd.DataFrame(rows, columns=REPORT_COLUMNS)
        # 单位成本可能为空，使用可空整数类型
        df["unit_cost_cents"] = df["unit_cost_cents"].astype("Int64")
        df = df.sort_values(by=["name", "bom_id"], key=lambda s: s.str.lower()).reset_index(drop=True)
        logger.info(f"Built cost report for {len(df)} BOM(s)")
        return df
