"""Prompt templates for the travel assistant tasks.

Each builder embeds its own output contract. The gateway does not know
which task a prompt belongs to; callers parse the payload themselves.
"""

from typing import Iterable, Optional

APP_NAME = "Go India"

ASSISTANT_PROMPT = (
    'You are a friendly and expert travel assistant for "{app}", an app for foreigners visiting India. '
    'A user asks: "{question}". Provide a helpful, concise, and practical answer. '
    "Use emojis to make it engaging."
)

ITINERARY_PROMPT = """You are an expert travel planner for "{app}". Plan a {days}-day trip to {destination}, India, for a {companions} with a {style} travel style.{extras}
Your response MUST be a valid JSON array of objects. Each object represents a day and must follow this exact structure:
{{
  "day": number,
  "title": "A short, catchy title for the day's plan",
  "activities": [
    {{ "time": "Morning" | "Afternoon" | "Evening", "title": "Name of activity", "description": "Brief description.", "type": "spot" | "hotel" | "food", "google_maps_link": "https://www.google.com/maps/search/?api=1&query=PLACE,CITY" }}
  ]
}}
Return ONLY the JSON array."""

FOOD_ADVICE_PROMPT = """SYSTEM: You are a friendly nutrition advisor. Given a dish name and nutrition estimates, produce a user-facing explanation and tips. Return ONLY valid JSON.
USER: Dish: "{dish_label}", calories: {calories}, fat_g: {fat_g}, sodium_mg: {sodium_mg}, sugar_g: {sugar_g}, detected_method: "{detected_method}".
JSON format: {{ "explanation": "A short 1-line health summary.", "suggestions": ["A simple, actionable suggestion.", "Another suggestion."] }}"""

FOOD_PHOTO_PROMPT = """You are a food recognition assistant for Indian cuisine. Identify the dish in the photo and estimate its nutrition for one typical serving.
Return ONLY valid JSON in this format:
{ "dish_label": "Dish name", "calories": number, "fat_g": number, "sodium_mg": number, "sugar_g": number, "detected_method": "fried | pan-fried | steamed | baked | raw | curry | grilled" }"""

TRANSLATION_PROMPT = (
    "Translate the following text from {source} to {target}. "
    "Provide only the translated text, with no additional explanations or quotation marks. "
    'Text: "{text}"'
)

FARE_PROMPT = """You are a backend assistant for an Indian travel app. Your task is to calculate approximate auto/taxi fares.
User wants to travel from "{origin}" to "{destination}" in "{city}".

Your response must be a clean JSON object with the following structure:
{{
  "city": "{city}",
  "from": "{origin}",
  "to": "{destination}",
  "distance_km": number,
  "travel_time": "string",
  "fare_estimate_inr": "₹___ – ₹___",
  "fare_estimate_usd": "$__ – $__",
  "scam_alert": "A short, relevant scam alert for this route or city.",
  "tips": "A helpful, short safety tip for foreigners.",
  "alternatives": ["Ola: ₹___", "Uber: ₹___"]
}}

Use average Indian rates (₹{auto_rate}/km for auto, ₹{taxi_rate}/km for taxi) if a specific city rule isn't known.
Base your distance and time estimates on typical traffic conditions.
Keep all text foreigner-friendly. Return ONLY the JSON object."""

AUTO_RATE_PER_KM = 12
TAXI_RATE_PER_KM = 20

LANGUAGE_NAMES = {
    "en": "English",
    "hi": "Hindi",
    "bn": "Bengali",
    "ta": "Tamil",
    "te": "Telugu",
    "mr": "Marathi",
    "gu": "Gujarati",
    "kn": "Kannada",
    "ml": "Malayalam",
    "pa": "Punjabi",
    "ur": "Urdu",
}


def language_name(code: str) -> str:
    return LANGUAGE_NAMES.get(code.lower(), code)


def assistant_prompt(question: str) -> str:
    return ASSISTANT_PROMPT.format(app=APP_NAME, question=question.strip())


def itinerary_prompt(
    destination: str,
    days: int,
    companions: str,
    style: str,
    budget: Optional[str] = None,
    interests: Iterable[str] = (),
) -> str:
    extras = []
    if budget:
        extras.append(f" Keep it within a {budget} budget.")
    interests = [i.strip() for i in interests if i and i.strip()]
    if interests:
        extras.append(f" Focus on: {', '.join(interests)}.")
    return ITINERARY_PROMPT.format(
        app=APP_NAME,
        days=days,
        destination=destination,
        companions=companions,
        style=style,
        extras="".join(extras),
    )


def food_advice_prompt(dish_label: str, calories, fat_g, sodium_mg, sugar_g, detected_method: Optional[str]) -> str:
    return FOOD_ADVICE_PROMPT.format(
        dish_label=dish_label,
        calories=calories,
        fat_g=fat_g,
        sodium_mg=sodium_mg,
        sugar_g=sugar_g,
        detected_method=detected_method or "unknown",
    )


def food_photo_prompt() -> str:
    return FOOD_PHOTO_PROMPT


def translation_prompt(text: str, source: str, target: str) -> str:
    return TRANSLATION_PROMPT.format(source=language_name(source), target=language_name(target), text=text)


def fare_prompt(city: str, origin: str, destination: str) -> str:
    return FARE_PROMPT.format(
        city=city,
        origin=origin,
        destination=destination,
        auto_rate=AUTO_RATE_PER_KM,
        taxi_rate=TAXI_RATE_PER_KM,
    )
