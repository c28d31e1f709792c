from loguru import logger
from sqlmodel import Session, select
from textile_inventory.db.core import engine, create_db_and_tables
from textile_inventory.db.repository import RawMaterialRepository
from textile_inventory.db.schema import RawMaterial
from textile_inventory.services.raw_material import RawMaterialService
from textile_inventory.utils.file_storage import LocalAssetStorage


# One or two materials per category group
SAMPLE_MATERIALS = [
    {
        "name": "Combed Cotton Yarn 30s",
        "category": "Cotton - Regular",
        "stock": 420,
        "unit": "kg",
        "unit_price": 3.8,
        "reorder_level": 100,
        "supplier": "Faisal Spinning Mills",
        "location": "Rack A-1",
        "specifications": {"color": "Raw White", "weight": "180", "quality": "Premium"},
    },
    {
        "name": "Egyptian Cotton Terry Base",
        "category": "Cotton - Egyptian",
        "stock": 35,
        "unit": "meters",
        "unit_price": 12.5,
        "reorder_level": 50,
        "supplier": "Nile Textiles",
        "location": "Rack A-3",
        "specifications": {"color": "Ivory", "weight": "550 g/m²", "width": "160", "quality": "Grade A"},
    },
    {
        "name": "Microfiber Roll",
        "category": "Microfiber",
        "stock": 0,
        "unit": "rolls",
        "unit_price": 48,
        "reorder_level": 5,
        "supplier": "PolyTex",
        "location": "Rack B-2",
        "specifications": {"color": "Slate Grey", "weight": "300", "dimensions": "150 x 5000"},
    },
    {
        "name": "Bath Towel Blank",
        "category": "Bath Towel",
        "stock": 1200,
        "unit": "pieces",
        "unit_price": 2.1,
        "reorder_level": 300,
        "location": "Bay C",
        "specifications": {"color": "White", "dimensions": "70 x 140", "quality": "Hotel"},
    },
    {
        "name": "Zero-Twist Loop Pile",
        "category": "Zero-Twist Towel",
        "stock": 80,
        "unit": "kg",
        "unit_price": 6.4,
        "reorder_level": 100,
        "supplier": "Faisal Spinning Mills",
        "specifications": {"color": "Sky Blue", "weight": "600 g/m²"},
    },
    {
        "name": "Reactive Dye Navy",
        "category": "Dyes & Chemicals",
        "stock": 40,
        "unit": "liters",
        "unit_price": 9.75,
        "reorder_level": 20,
        "supplier": "ColorChem",
        "location": "Chemical Store",
        "specifications": {"color": "Navy"},
    },
    {
        "name": "Polyester Sewing Thread",
        "category": "Sewing Threads",
        "stock": 6,
        "unit": "boxes",
        "unit_price": 22,
        "reorder_level": 10,
        "supplier": "Coats",
        "location": "Rack D-1",
    },
]


def seed_materials():
    logger.info("--- Seeding Raw Materials ---")
    create_db_and_tables()

    with Session(engine) as session:
        if session.exec(select(RawMaterial)).first():
            logger.info("Raw materials already present, skipping seed.")
            return

        service = RawMaterialService(
            repository=RawMaterialRepository(session),
            storage=LocalAssetStorage(),
        )
        for data in SAMPLE_MATERIALS:
            material = service.create_material(data)
            logger.info(f"Created Material: {material.name} ({material.stock_status.value})")

    logger.info("Database seeding completed successfully.")


if __name__ == "__main__":
    seed_materials()
