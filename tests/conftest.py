import pytest
import sys
from pathlib import Path

# Add src to python path so we can import modules
root_dir = Path(__file__).parent.parent
src_dir = root_dir / "src"
sys.path.append(str(src_dir))

from core.demo_data import create_demo_boms, create_demo_materials
from schemas.bom import BomRecord
from schemas.material import Material
from services.bom_service import BOMService


def make_bom(bom_id, lines, output_qty=1):
    """Build a BomRecord from flat line dicts, keeping the given line order."""
    lines = [{**line, "sortOrder": index} for index, line in enumerate(lines)]
    return BomRecord.model_validate({"id": bom_id, "name": bom_id, "outputQty": output_qty, "lines": lines})


def material_line(material_id, quantity, unit_cost_cents=0):
    return {"componentType": "material", "materialId": material_id, "quantity": quantity, "unitCostCents": unit_cost_cents}


def bom_line(component_bom_id, quantity, unit_cost_cents=0):
    return {"componentType": "bom_item", "componentBomId": component_bom_id, "quantity": quantity, "unitCostCents": unit_cost_cents}


@pytest.fixture
def m1():
    return Material(id="M1", name="Material One", unit_cost_cents=250)


@pytest.fixture
def material_by_id(m1):
    return {m1.id: m1}


@pytest.fixture
def demo_materials():
    return create_demo_materials()


@pytest.fixture
def demo_boms(demo_materials):
    return create_demo_boms(demo_materials)


@pytest.fixture
def bom_service(demo_materials, demo_boms):
    """Create a BOMService over the demo catalog."""
    return BOMService(demo_materials, demo_boms)
