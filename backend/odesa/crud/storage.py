# odesa/crud/storage.py
from motor.motor_asyncio import AsyncIOMotorDatabase

from odesa.crud.analytics_crud import AnalyticsRepository, NewsletterRepository
from odesa.crud.event_crud import EventRepository
from odesa.crud.generated_crud import (
    RecommendationRepository,
    SocialPreviewRepository,
    StoryPreferencesRepository,
    TravelStoryRepository,
)
from odesa.crud.location_crud import LocationRepository
from odesa.crud.onboarding_crud import AchievementRepository, PreferencesRepository, StatsRepository
from odesa.crud.order_crud import OrderRepository
from odesa.crud.postcard_crud import PostcardRepository
from odesa.crud.subscription_plan_crud import SubscriptionPlanRepository
from odesa.crud.template_crud import TemplateRepository
from odesa.crud.user_crud import UserRepository


class Storage:
    """All repositories, bound to one database handle."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.users = UserRepository(db)
        self.postcards = PostcardRepository(db)
        self.templates = TemplateRepository(db)
        self.events = EventRepository(db)
        self.locations = LocationRepository(db)
        self.orders = OrderRepository(db)
        self.plans = SubscriptionPlanRepository(db)
        self.preferences = PreferencesRepository(db)
        self.stats = StatsRepository(db)
        self.achievements = AchievementRepository(db)
        self.social_previews = SocialPreviewRepository(db)
        self.stories = TravelStoryRepository(db)
        self.story_preferences = StoryPreferencesRepository(db)
        self.recommendations = RecommendationRepository(db)
        self.analytics = AnalyticsRepository(db)
        self.newsletter = NewsletterRepository(db)
