# odesa/service/ai_service.py
"""
Landmark recommendations and social media captions from the language model.

Model output is never trusted as-is: it is parsed into the response models
below, and anything that does not fit is replaced by curated content.
Provider failures (network, auth, quota) are not papered over; they surface
as UpstreamServiceError.
"""
import logging
from typing import List, Optional, Type

import openai
from openai import AsyncOpenAI
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from odesa.core.config import Settings
from odesa.core.exceptions import UpstreamServiceError
from odesa.models.onboarding import OnboardingQuestion, PreferencesIn

logger = logging.getLogger(__name__)

ODESA_LANDMARKS = [
    "Odesa Opera House",
    "Potemkin Stairs",
    "Privoz Market",
    "Deribasovskaya Street",
    "Arcadia Beach",
    "Catacombs",
    "City Garden",
    "Literary Museum",
    "Maritime Museum",
    "Vorontsov Palace",
]


class LandmarkRecommendation(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    category: str
    historicalSignificance: str = ""
    bestTimeToVisit: str = ""
    nearbyAttractions: List[str] = []
    photoTips: str = ""
    personalizedReason: str = ""


class RecommendationsPayload(BaseModel):
    recommendations: List[LandmarkRecommendation] = Field(..., min_length=1)


class CaptionsPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    instagram: str = Field(..., min_length=1)
    twitter: str = Field(..., min_length=1, max_length=280)
    facebook: str = Field(..., min_length=1)
    hashtags: List[str] = Field(..., min_length=1)


FALLBACK_RECOMMENDATIONS = [
    LandmarkRecommendation(
        name="Odesa Opera House",
        description="A baroque masterpiece and one of the most celebrated theatres in Europe. "
                    "Its gilded auditorium hosts opera and ballet most evenings.",
        category="Architecture",
        historicalSignificance="Opened in 1887, designed by Fellner and Helmer.",
        bestTimeToVisit="Evening, before a performance",
        nearbyAttractions=["Primorsky Boulevard", "City Garden"],
        photoTips="Shoot the facade from Theatre Square at blue hour.",
        personalizedReason="A must-see for anyone drawn to Odesa's cultural life.",
    ),
    LandmarkRecommendation(
        name="Potemkin Stairs",
        description="The giant stairway linking the city to the port. "
                    "An optical illusion hides the landings when seen from the top.",
        category="History",
        historicalSignificance="Built in 1841 and made famous by Eisenstein's Battleship Potemkin.",
        bestTimeToVisit="Early morning, before the crowds",
        nearbyAttractions=["Duc de Richelieu Monument", "Sea Port"],
        photoTips="Shoot from the bottom step to capture the full sweep.",
        personalizedReason="The city's most recognizable postcard view.",
    ),
    LandmarkRecommendation(
        name="Deribasovskaya Street",
        description="Odesa's lively pedestrian boulevard lined with cafes and street musicians.",
        category="Culture",
        historicalSignificance="Named after city founder José de Ribas.",
        bestTimeToVisit="Late afternoon into evening",
        nearbyAttractions=["City Garden", "Passage Arcade"],
        photoTips="Catch street performers in the golden hour light.",
        personalizedReason="Perfect for soaking in the everyday rhythm of the city.",
    ),
    LandmarkRecommendation(
        name="Arcadia Beach",
        description="The city's best-known stretch of Black Sea coast, with beach clubs and a seaside promenade.",
        category="Nature",
        historicalSignificance="A resort area since the late nineteenth century.",
        bestTimeToVisit="Summer sunsets",
        nearbyAttractions=["Arcadia Alley", "Lanzheron Beach"],
        photoTips="Frame the sunset over the water from the pier.",
        personalizedReason="Ideal for a relaxed day by the sea.",
    ),
    LandmarkRecommendation(
        name="Vorontsov Palace",
        description="A classical palace with a colonnade overlooking the port.",
        category="Architecture",
        historicalSignificance="Built in the 1820s for governor Mikhail Vorontsov.",
        bestTimeToVisit="Golden hour",
        nearbyAttractions=["Mother-in-law Bridge", "Primorsky Boulevard"],
        photoTips="Use the colonnade to frame the harbour.",
        personalizedReason="Beautiful views with a quieter atmosphere.",
    ),
]

ONBOARDING_QUESTIONS = [
    OnboardingQuestion(
        id="interests",
        question="What interests you most about Odesa?",
        type="multiple_choice",
        options=[
            "Historical Architecture",
            "Maritime Culture",
            "Literary Heritage",
            "Beach & Recreation",
            "Local Cuisine",
            "Art & Museums",
            "Nightlife & Entertainment",
            "Photography",
        ],
        category="interests",
    ),
    OnboardingQuestion(
        id="travel_style",
        question="How would you describe your travel style?",
        type="single_choice",
        options=[
            "Cultural Explorer",
            "Relaxed Tourist",
            "Adventure Seeker",
            "Photo Enthusiast",
            "History Buff",
            "Local Experience Seeker",
        ],
        category="style",
    ),
    OnboardingQuestion(
        id="time_preference",
        question="When do you prefer to visit landmarks?",
        type="single_choice",
        options=[
            "Early Morning (peaceful)",
            "Midday (vibrant)",
            "Golden Hour (photos)",
            "Evening (romantic)",
            "Night (atmospheric)",
        ],
        category="timing",
    ),
    OnboardingQuestion(
        id="group_size",
        question="Who are you traveling with?",
        type="single_choice",
        options=["Solo Travel", "Couple", "Family with Kids", "Friends Group", "Extended Family"],
        category="group",
    ),
    OnboardingQuestion(
        id="postcard_purpose",
        question="What will you use postcards for?",
        type="multiple_choice",
        options=[
            "Send to Family",
            "Share with Friends",
            "Social Media",
            "Personal Collection",
            "Business/Work",
            "Gifts & Souvenirs",
        ],
        category="purpose",
    ),
]


def onboarding_questions() -> List[OnboardingQuestion]:
    return list(ONBOARDING_QUESTIONS)


def fallback_captions(template_name: str, message: str, landmark: str) -> CaptionsPayload:
    place = landmark or "Odesa"
    return CaptionsPayload(
        instagram=f"Greetings from {place}! {message}".strip(),
        twitter=f"Sending love from {place}, Odesa 🌊"[:280],
        facebook=f"Just made a {template_name} postcard in {place}. {message}".strip(),
        hashtags=["odesa", "ukraine", "blacksea", "travel", "postcard", "wanderlust"],
    )


def _parse(content: Optional[str], schema: Type[BaseModel]) -> Optional[BaseModel]:
    if not content:
        return None
    try:
        return schema.model_validate_json(content)
    except ValidationError as e:
        logger.warning("Model output rejected by %s: %s", schema.__name__, e.error_count())
        return None


class AIService:
    def __init__(self, client: AsyncOpenAI, model: str = "gpt-4o"):
        self.client = client
        self.model = model

    @classmethod
    def from_settings(cls, settings: Settings) -> Optional["AIService"]:
        if not settings.ai_enabled:
            return None
        return cls(AsyncOpenAI(api_key=settings.OPENAI_API_KEY), settings.OPENAI_MODEL)

    async def _complete(self, system: str, prompt: str, temperature: float, max_tokens: int) -> Optional[str]:
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": prompt},
                ],
                response_format={"type": "json_object"},
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except openai.OpenAIError as e:
            logger.error("AI provider call failed: %s", e)
            raise UpstreamServiceError(f"AI provider error: {e}")
        return response.choices[0].message.content

    async def recommend_landmarks(
        self, prefs: PreferencesIn, history: Optional[List[str]] = None
    ) -> List[LandmarkRecommendation]:
        prompt = (
            "As an expert Odesa tourism guide, provide 5 personalized landmark "
            "recommendations for a visitor with these preferences:\n\n"
            f"Interests: {', '.join(prefs.interests)}\n"
            f"Travel Style: {prefs.travelStyle}\n"
            f"Preferred Activities: {', '.join(prefs.preferredActivities)}\n"
            f"Time of Year: {prefs.timeOfYear}\n"
            f"User History: {', '.join(history or [])}\n\n"
            f"Focus on Odesa's unique landmarks including: {', '.join(ODESA_LANDMARKS)}.\n\n"
            "For each recommendation provide name, description (2-3 sentences), "
            "category (Architecture, Culture, History, Nature, Entertainment), "
            "historicalSignificance, bestTimeToVisit, nearbyAttractions (2-3), "
            "photoTips and personalizedReason.\n"
            'Respond with a JSON object {"recommendations": [...]}.'
        )
        content = await self._complete(
            "You are an expert Odesa tourism guide with deep knowledge of the city's "
            "landmarks, history, and culture. Provide personalized recommendations in valid JSON format.",
            prompt,
            temperature=0.7,
            max_tokens=2000,
        )
        payload = _parse(content, RecommendationsPayload)
        if payload is None:
            logger.info("Using curated landmark recommendations")
            return list(FALLBACK_RECOMMENDATIONS)
        return payload.recommendations

    async def generate_captions(
        self, template_name: str, message: str, landmark: str, mood: str
    ) -> CaptionsPayload:
        prompt = (
            "Create engaging social media captions for a postcard from Odesa, Ukraine:\n\n"
            f"Template: {template_name}\n"
            f"Personal Message: {message}\n"
            f"Landmark: {landmark}\n"
            f"Mood: {mood}\n\n"
            "Generate: instagram (1-2 sentences), twitter (under 280 chars), "
            "facebook (2-3 sentences) and hashtags (8-12, without #).\n"
            "Respond in JSON with keys instagram, twitter, facebook, hashtags."
        )
        content = await self._complete(
            "You are a social media expert specializing in travel content and Ukrainian tourism. "
            "Create engaging, authentic captions that celebrate Odesa's unique character.",
            prompt,
            temperature=0.8,
            max_tokens=800,
        )
        payload = _parse(content, CaptionsPayload)
        if payload is None:
            return fallback_captions(template_name, message, landmark)
        payload.hashtags = [h.lstrip("#") for h in payload.hashtags]
        return payload
