import logging

from odesa.crud.storage import Storage
from odesa.models.template import TemplateCreate

logger = logging.getLogger(__name__)

UNSPLASH = "https://images.unsplash.com/{}?ixlib=rb-4.0.3&auto=format&fit=crop&w=600&h=400"

DEFAULT_TEMPLATES = [
    TemplateCreate(
        id="opera-house-classic",
        name="Opera House Classic",
        description="Elegant architectural beauty of Odesa's Opera House",
        imageUrl=UNSPLASH.format("photo-1578662996442-48f60103fc96"),
        category="landmarks",
    ),
    TemplateCreate(
        id="potemkin-steps",
        name="Potemkin Steps",
        description="Historic landmark views of the famous steps",
        imageUrl=UNSPLASH.format("photo-1555041469-a586c61ea9bc"),
        category="landmarks",
    ),
    TemplateCreate(
        id="black-sea-sunset",
        name="Black Sea Sunset",
        description="Coastal paradise views at golden hour",
        imageUrl=UNSPLASH.format("photo-1507525428034-b723cf961d3e"),
        category="coastal",
    ),
    TemplateCreate(
        id="maritime-harbor",
        name="Maritime Harbor",
        description="Port city essence with boats and sea",
        imageUrl=UNSPLASH.format("photo-1544551763-46a013bb70d5"),
        category="coastal",
    ),
    TemplateCreate(
        id="golden-domes",
        name="Golden Domes",
        description="Spiritual architecture of Orthodox churches",
        imageUrl=UNSPLASH.format("photo-1581833971358-2c8b550f87b3"),
        category="historic",
    ),
    TemplateCreate(
        id="old-town-charm",
        name="Old Town Charm",
        description="Historic streetscapes and architecture",
        imageUrl=UNSPLASH.format("photo-1523906834658-6e24ef2386f9"),
        category="historic",
    ),
    TemplateCreate(
        id="seaside-promenade",
        name="Seaside Promenade",
        description="Coastal walkways and beach views",
        imageUrl=UNSPLASH.format("photo-1506905925346-21bda4d32df4"),
        category="coastal",
    ),
    TemplateCreate(
        id="vintage-ukraine",
        name="Vintage Ukraine",
        description="Traditional aesthetic with vintage charm",
        imageUrl=UNSPLASH.format("photo-1517654443271-21d3b904eeae"),
        category="vintage",
        isPremium=True,
    ),
]


async def seed_templates(storage: Storage) -> int:
    created = 0
    for template in DEFAULT_TEMPLATES:
        if await storage.templates.ensure(template):
            created += 1
            logger.info("Created template: %s", template.name)
    logger.info("Templates seeded (%s new)", created)
    return created
