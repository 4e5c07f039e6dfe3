"""
LinkedIn PDF profile extraction
Turns a LinkedIn "Save to PDF" export into the structured expert profile used
for expert/client matching: PDF text -> one OpenAI completion -> JSON cleanup ->
validation and coercion.
"""

import json
import logging
import math
import re
from typing import Any, Optional

from openai import OpenAI, OpenAIError

from .. import config
from .pdf_service import extract_profile_text

logger = logging.getLogger(__name__)

VALID_CATEGORIES = [
    "Marketing",
    "Legal",
    "Product",
    "Technology",
    "Finance",
    "Business Strategy",
    "Human Resources",
    "Sales",
    "Operations",
    "Design",
    "Consulting",
]
DEFAULT_CATEGORY = "Business Strategy"

VALID_CLIENT_TYPES = ["Startup", "SMB", "Enterprise", "Non-profit", "Freelancer", "Individual"]
DEFAULT_CLIENT_TYPES = ["Startup", "SMB"]

MAX_SPECIALIZATIONS = 10
MAX_KEY_SKILLS = 15
MAX_EXPERTISE_KEYWORDS = 20
MAX_YEARS_OF_EXPERIENCE = 50
DEFAULT_EXTRACTION_CONFIDENCE = 0.5

EXTRACTION_TEMPERATURE = 0.1
EXTRACTION_MAX_TOKENS = 3500

EXTRACTION_PROMPT = """You are an expert profile analyzer for a micro-consultation platform where clients get matched with experts for quick 15-30 minute advice sessions.

Your job is to extract and intelligently categorize LinkedIn profile data to enable AI-powered expert-client matching.

CONTEXT: This platform helps busy professionals find the right expert for specific challenges like:
- Startup founders needing pricing strategy validation
- Marketing managers wanting campaign feedback
- Small business owners with legal questions
- Product managers needing technical architecture advice

CRITICAL INSTRUCTIONS:
- Return ONLY a clean JSON object, no markdown formatting, no code blocks
- Do not use ```json or ``` anywhere in your response
- Ensure each field appears only once
- Focus on data that helps match experts to client needs

Extract these fields exactly:
{{
  "full_name": "person's full name",
  "current_job_title": "most recent job title",
  "current_company": "current/most recent company name",
  "primary_industry": "main industry they work in (standardized: Technology, Finance, Marketing, Healthcare, Legal, Consulting, etc.)",
  "years_of_experience": calculate total professional years (number),
  "location_city": "city only",
  "location_country": "country only",
  "primary_category": "choose ONE from: {categories}",
  "secondary_categories": ["secondary expertise areas from the same list"],
  "specializations": ["specific expertise areas within their field - what specific problems can they solve?"],
  "previous_companies": ["all companies they've worked at"],
  "education": ["school name - degree/program"],
  "certifications": ["professional certifications and licenses"],
  "languages": ["spoken languages if mentioned"],
  "linkedin_summary": "their About/Summary section (preserve original text if available)",
  "key_skills": ["top 10-15 professional skills mentioned"],
  "work_experience": {{
    "positions": [
      {{
        "title": "job title",
        "company": "company name",
        "duration": "time period",
        "description": "key responsibilities and achievements",
        "key_projects": ["notable projects or achievements"]
      }}
    ]
  }},
  "expertise_keywords": ["15-20 terms that describe their expertise - think what clients would search for"],
  "target_client_types": ["WHO would benefit from their expertise - choose from: {client_types}"],
  "extraction_confidence": how complete and legible the profile was, from 0 to 1 (number)
}}

INTELLIGENT CATEGORIZATION RULES:

For PRIMARY_CATEGORY:
- Technology: Developers, engineers, CTOs, data scientists, product managers
- Marketing: Marketing managers, growth experts, brand strategists, digital marketers
- Finance: CFOs, financial analysts, accountants, investment advisors
- Legal: Lawyers, compliance experts, regulatory specialists
- Business Strategy: Consultants, business analysts, strategy directors, executives
- Human Resources: HR directors, talent acquisition, organizational development
- Sales: Sales directors, business development, sales operations
- Operations: Operations managers, supply chain, process improvement
- Design: UX/UI designers, creative directors, brand designers
- Consulting: Management consultants, industry specialists

For SPECIALIZATIONS (be specific about what problems they solve):
- Instead of "marketing" -> "B2B SaaS marketing", "social media advertising", "conversion optimization"
- Instead of "technology" -> "cloud migration", "API architecture", "mobile app development"
- Instead of "finance" -> "startup fundraising", "financial modeling", "tax optimization"

For TARGET_CLIENT_TYPES (who would hire them):
- Startup: Early-stage experience, entrepreneurial background, growth focus
- SMB: Mid-market experience, practical solutions, cost-conscious approaches
- Enterprise: Large company experience, complex systems, compliance knowledge
- Non-profit: Mission-driven experience, resource constraints understanding
- Freelancer: Solo consultant experience, independent contractor knowledge
- Individual: Personal services, individual coaching, career advice

For EXPERTISE_KEYWORDS (what clients would search for):
Include role-based terms, industry terms, problem-solving terms, tools/technologies, methodologies

If the document appears corrupted, incomplete, or not a LinkedIn resume, return:
{{"error": "invalid_pdf", "message": "Unable to process this document"}}

LinkedIn Profile Content:
---
{profile_text}
---

Return clean JSON only:"""


class ExtractionError(ValueError):
    """The PDF or the model output could not be turned into a profile"""


def build_prompt(profile_text: str) -> str:
    return EXTRACTION_PROMPT.format(
        categories=", ".join(VALID_CATEGORIES),
        client_types=", ".join(VALID_CLIENT_TYPES),
        profile_text=profile_text,
    )


# ============================================================================
# JSON CLEANUP
# ============================================================================


def _first_balanced_object(text: str) -> str:
    """Return the first complete {...} block, ignoring braces inside strings"""
    depth = 0
    in_string = False
    escape_next = False
    result = []

    for char in text:
        result.append(char)

        if escape_next:
            escape_next = False
            continue
        if char == "\\":
            escape_next = True
            continue
        if char == '"':
            in_string = not in_string
            continue
        if in_string:
            continue

        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return "".join(result)

    return "".join(result)


def clean_json_response(response: str) -> str:
    """Strip markdown fences and chatter around the JSON object the model returned"""
    cleaned = re.sub(r"```json\s*", "", response)
    cleaned = re.sub(r"```\s*", "", cleaned)

    first_brace = cleaned.find("{")
    if first_brace > 0:
        cleaned = cleaned[first_brace:]

    last_brace = cleaned.rfind("}")
    if 0 < last_brace < len(cleaned) - 1:
        cleaned = cleaned[: last_brace + 1]

    try:
        # Round-trip drops duplicate keys (last one wins)
        return json.dumps(json.loads(cleaned))
    except json.JSONDecodeError:
        pass

    cleaned = re.sub(r",(\s*[}\]])", r"\1", cleaned)
    return _first_balanced_object(cleaned)


# ============================================================================
# VALIDATION AND COERCION
# ============================================================================


def to_string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    items = (str(item).strip() for item in value if item is not None)
    return [item for item in items if item]


def unique(items: list[str]) -> list[str]:
    return list(dict.fromkeys(items))


def validate_category(category: Any) -> str:
    return category if category in VALID_CATEGORIES else DEFAULT_CATEGORY


def validate_target_client_types(types: Any) -> list[str]:
    if not isinstance(types, list):
        return list(DEFAULT_CLIENT_TYPES)
    filtered = [str(t) for t in types if t is not None and str(t) in VALID_CLIENT_TYPES]
    return filtered or list(DEFAULT_CLIENT_TYPES)


def _clamp_years(value: Any) -> int:
    try:
        years = float(value)
    except (TypeError, ValueError):
        return 0
    if math.isnan(years):
        return 0
    return int(max(0, min(MAX_YEARS_OF_EXPERIENCE, years)))


def _clamp_confidence(value: Any) -> float:
    try:
        confidence = float(value)
    except (TypeError, ValueError):
        return DEFAULT_EXTRACTION_CONFIDENCE
    if math.isnan(confidence):
        return DEFAULT_EXTRACTION_CONFIDENCE
    return max(0.0, min(1.0, confidence))


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def normalize_work_experience(value: Any) -> Optional[dict]:
    """Keep only well-formed positions: {title, company, duration?, description?, key_projects[]}"""
    if not isinstance(value, dict):
        return None
    positions = []
    for position in value.get("positions") or []:
        if not isinstance(position, dict):
            continue
        title = _optional_text(position.get("title"))
        company = _optional_text(position.get("company"))
        if not title or not company:
            continue
        positions.append(
            {
                "title": title,
                "company": company,
                "duration": _optional_text(position.get("duration")),
                "description": _optional_text(position.get("description")),
                "key_projects": to_string_list(position.get("key_projects")),
            }
        )
    return {"positions": positions}


def validate_and_clean_expert_data(data: dict[str, Any]) -> dict[str, Any]:
    """Coerce raw model output into the expert_profiles row shape"""
    if not isinstance(data, dict):
        raise ExtractionError("AI returned invalid JSON: expected an object")

    location_city = _optional_text(data.get("location_city"))
    location_country = _optional_text(data.get("location_country"))

    # Some responses collapse location into one "City, Region, Country" string
    combined = data.get("location")
    if combined and not location_city and not location_country:
        parts = [part.strip() for part in str(combined).split(",")]
        location_city = parts[0] or None
        location_country = parts[1] if len(parts) > 1 and parts[1] else parts[-1] or None

    cleaned = {
        "full_name": str(data.get("full_name") or "").strip(),
        "current_job_title": _optional_text(data.get("current_job_title")),
        "current_company": _optional_text(data.get("current_company")),
        "primary_industry": _optional_text(data.get("primary_industry")),
        "years_of_experience": _clamp_years(data.get("years_of_experience")),
        "location_city": location_city,
        "location_country": location_country,
        "primary_category": validate_category(data.get("primary_category")),
        "secondary_categories": [
            c for c in to_string_list(data.get("secondary_categories")) if c in VALID_CATEGORIES
        ],
        "specializations": to_string_list(data.get("specializations"))[:MAX_SPECIALIZATIONS],
        "previous_companies": unique(to_string_list(data.get("previous_companies"))),
        "education": to_string_list(data.get("education")),
        "certifications": to_string_list(data.get("certifications")),
        "languages": to_string_list(data.get("languages")),
        "linkedin_summary": _optional_text(data.get("linkedin_summary")),
        "key_skills": to_string_list(data.get("key_skills"))[:MAX_KEY_SKILLS],
        "work_experience": normalize_work_experience(data.get("work_experience")),
        "expertise_keywords": unique(to_string_list(data.get("expertise_keywords")))[
            :MAX_EXPERTISE_KEYWORDS
        ],
        "target_client_types": validate_target_client_types(data.get("target_client_types")),
        "pdf_processed": True,
        "processing_status": "completed",
    }

    if not cleaned["full_name"]:
        raise ExtractionError("Full name is required but not found")

    if not cleaned["specializations"] and not cleaned["key_skills"]:
        logger.warning("⚠️ No specializations or skills found - this may impact expert matching")

    return cleaned


# ============================================================================
# CONFIDENCE
# ============================================================================


def get_confidence_level(confidence: float) -> str:
    if confidence >= 0.8:
        return "high"
    if confidence >= 0.6:
        return "medium"
    if confidence >= 0.4:
        return "low"
    return "very_low"


def is_extraction_reliable(confidence: float, success: bool) -> bool:
    return success and confidence >= 0.6


# ============================================================================
# EXTRACTOR
# ============================================================================


class LinkedInExtractor:
    """Single-attempt PDF -> OpenAI -> validated profile pipeline"""

    def __init__(self, client: Optional[OpenAI] = None, model: Optional[str] = None):
        self._client = client
        self.model = model or config.OPENAI_MODEL

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            if not config.OPENAI_API_KEY:
                raise ExtractionError("OPENAI_API_KEY is not configured")
            self._client = OpenAI(api_key=config.OPENAI_API_KEY)
        return self._client

    def complete(self, prompt: str) -> str:
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=EXTRACTION_TEMPERATURE,
                max_tokens=EXTRACTION_MAX_TOKENS,
            )
        except OpenAIError as e:
            logger.error(f"❌ OpenAI request failed for model '{self.model}': {e}")
            raise ExtractionError(f"AI extraction failed: {e}") from e

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise ExtractionError("AI returned an empty response")
        return content

    def extract(self, pdf_bytes: bytes) -> dict[str, Any]:
        profile_text = extract_profile_text(pdf_bytes)

        logger.info("🤖 Extracting expert profile data with AI...")
        raw = self.complete(build_prompt(profile_text))
        logger.info(f"🤖 Raw AI response length: {len(raw)}")

        cleaned_json = clean_json_response(raw)
        try:
            parsed = json.loads(cleaned_json)
        except json.JSONDecodeError as e:
            logger.error(f"❌ Failed to parse AI response: {cleaned_json[:500]}")
            raise ExtractionError(f"AI returned invalid JSON: {e.msg}") from e

        if isinstance(parsed, dict) and parsed.get("error"):
            logger.warning(f"⚠️ AI rejected the document: {parsed.get('error')}")
            raise ExtractionError(parsed.get("message") or "Failed to process PDF with AI")

        profile = validate_and_clean_expert_data(parsed)
        confidence = _clamp_confidence(parsed.get("extraction_confidence"))
        logger.info(
            f"✅ Extracted expert profile: {profile['full_name']} "
            f"({profile['primary_category']}, {', '.join(profile['target_client_types'])}) "
            f"confidence={get_confidence_level(confidence)}"
        )
        if not is_extraction_reliable(confidence, True):
            logger.warning(f"⚠️ Low extraction confidence ({confidence:.2f}) for {profile['full_name']}")
        return profile


_extractor: Optional[LinkedInExtractor] = None


def get_linkedin_extractor() -> LinkedInExtractor:
    global _extractor
    if _extractor is None:
        _extractor = LinkedInExtractor()
    return _extractor
