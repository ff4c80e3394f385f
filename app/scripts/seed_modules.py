"""
Seed Module Catalog Script
Populates the modules table with the feature modules workspaces can activate.
Run with: python -m app.scripts.seed_modules
"""

import sys
from app.database.supabase_client import get_service_supabase
from supabase import Client
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

MODULE_CATALOG = [
    {
        "name": "neura-core",
        "display_name": "NeuraCore",
        "description": "Users, workspaces, notifications and presence",
        "version": "1.0.0",
        "is_core": True,
        "required_modules": [],
    },
    {
        "name": "neura-flow",
        "display_name": "NeuraFlow",
        "description": "Visual workflow builder and workflow execution",
        "version": "1.0.0",
        "is_core": False,
        "required_modules": ["neura-core"],
    },
    {
        "name": "neura-crm",
        "display_name": "NeuraCRM",
        "description": "Customer relationship management module for managing contacts, companies, and sales activities",
        "version": "1.0.0",
        "is_core": False,
        "required_modules": ["neura-core"],
    },
    {
        "name": "neura-forms",
        "display_name": "NeuraForms",
        "description": "Form builder and submissions",
        "version": "1.0.0",
        "is_core": False,
        "required_modules": ["neura-core"],
    },
    {
        "name": "neura-edu",
        "display_name": "NeuraEdu",
        "description": "Learning content and courses",
        "version": "1.0.0",
        "is_core": False,
        "required_modules": ["neura-core"],
    },
]


def seed_modules(supabase: Client, catalog=None):
    """Insert missing catalog modules and refresh the ones that exist"""
    logger.info("Seeding modules...")

    created_count = 0
    updated_count = 0

    for module in catalog or MODULE_CATALOG:
        try:
            existing = supabase.table("modules")\
                .select("id")\
                .eq("name", module["name"])\
                .execute()

            fields = {k: v for k, v in module.items() if k != "name"}
            if existing.data:
                supabase.table("modules")\
                    .update(fields)\
                    .eq("name", module["name"])\
                    .execute()
                updated_count += 1
                logger.debug(f"Updated module: {module['name']}")
            else:
                supabase.table("modules").insert(module).execute()
                created_count += 1
                logger.debug(f"Created module: {module['name']}")
        except Exception as e:
            logger.error(f"Error processing module {module['name']}: {e}")

    logger.info(f"Modules seeded: {created_count} created, {updated_count} updated")
    return created_count, updated_count


def main():
    try:
        created, updated = seed_modules(get_service_supabase())
        logger.info(f"Seeding completed: {created + updated} modules processed")
    except Exception as e:
        logger.error(f"Error during seeding: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
